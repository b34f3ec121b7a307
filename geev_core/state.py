from __future__ import annotations

import functools
import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Concatenate, Final, ParamSpec, TypeVar

from .errors import ContractError, ErrorKind
from .host import (
    Authenticator,
    EntropySource,
    EventLog,
    EventSink,
    InMemoryTokenLedger,
    LedgerClock,
    SystemClock,
    SystemEntropy,
    TokenCustody,
)
from .models import U64_MAX, DataKey, checked_add
from .storage import InMemoryStore, Item, StagedStore, Store

log: Final = logging.getLogger("geev-core")

DEFAULT_CONTRACT_ADDRESS: Final[str] = "geev-contract"

P = ParamSpec("P")
R = TypeVar("R")


@dataclass
class ContractState:
    """Everything a contract operation may touch.

    One instance is shared by every call; the host serializes calls, so at
    most one transaction is open at a time.
    """

    auth: Authenticator
    store: Store = field(default_factory=InMemoryStore)
    tokens: TokenCustody = field(default_factory=InMemoryTokenLedger)
    clock: LedgerClock = field(default_factory=SystemClock)
    entropy: EntropySource = field(default_factory=SystemEntropy)
    events: EventSink = field(default_factory=EventLog)
    address: str = DEFAULT_CONTRACT_ADDRESS

    _staged: StagedStore | None = field(default=None, init=False, repr=False)
    _pending_events: list[tuple[tuple[object, ...], tuple[object, ...]]] = field(
        default_factory=list, init=False, repr=False
    )
    _now: int | None = field(default=None, init=False, repr=False)
    _collected: list[tuple[str, str, int]] = field(
        default_factory=list, init=False, repr=False
    )
    _payouts: list[tuple[str, str, int]] = field(
        default_factory=list, init=False, repr=False
    )

    # ----- call lifecycle -----
    @contextmanager
    def transaction(self, operation: str) -> Iterator[ContractState]:
        """Run one call as an all-or-nothing unit.

        Writes, events and payouts from custody are buffered. On a clean
        exit the payouts are checked against custody, the writes are
        committed, and only then do payouts and events go out. If anything
        fails before the payouts run, funds collected during the call are
        returned. Nested use joins the open transaction.
        """
        if self._staged is not None:
            yield self
            return

        self._staged = StagedStore(self.store)
        self._pending_events = []
        self._collected = []
        self._payouts = []
        self._now = None
        try:
            try:
                yield self
                self._require_payouts_covered()
                written = self._staged.commit()
            except ContractError as exc:
                log.info("Call %s rejected: %s", operation, exc)
                self._abort()
                raise
            except BaseException:
                self._abort()
                raise
            log.debug("Call %s committed %s writes", operation, written)
            for token, to, amount in self._payouts:
                self.tokens.transfer(token, self.address, to, amount)
            for topic, payload in self._pending_events:
                self.events.publish(topic, payload)
        finally:
            self._staged = None
            self._pending_events = []
            self._collected = []
            self._payouts = []
            self._now = None

    def _abort(self) -> None:
        self._staged.discard()
        for token, from_, amount in reversed(self._collected):
            self.tokens.transfer(token, self.address, from_, amount)
            log.info("Returned %s %s to %s", amount, token, from_)

    def _require_payouts_covered(self) -> None:
        owed: dict[str, int] = {}
        for token, _, amount in self._payouts:
            owed[token] = owed.get(token, 0) + amount
        for token, amount in owed.items():
            held = self.tokens.balance(token, self.address)
            if held < amount:
                raise ContractError(
                    ErrorKind.TRANSFER_FAILED,
                    f"custody holds {held} {token}, needs {amount}",
                )

    def _view(self) -> Store:
        return self._staged if self._staged is not None else self.store

    # ----- store access -----
    def get(self, key: DataKey) -> Item | None:
        return self._view().get(key)

    def set(self, key: DataKey, value: Item) -> None:
        if self._staged is None:
            raise RuntimeError("Contract state can only change inside a transaction")
        self._staged.set(key, value)

    def has(self, key: DataKey) -> bool:
        return self._view().has(key)

    def get_value(self, key: DataKey, default: object = None) -> object:
        item = self.get(key)
        if item is None:
            return default
        return item.get("value", default)

    def set_value(self, key: DataKey, value: object) -> None:
        self.set(key, {"value": value})

    # ----- shared bookkeeping -----
    def now(self) -> int:
        """Ledger time, read once per call."""
        if self._staged is None:
            return int(self.clock.now())
        if self._now is None:
            self._now = int(self.clock.now())
        return self._now

    def emit(self, topic: tuple[object, ...], payload: tuple[object, ...]) -> None:
        if self._staged is None:
            self.events.publish(topic, payload)
            return
        self._pending_events.append((topic, payload))

    def next_id(self, counter: DataKey) -> int:
        current = int(self.get_value(counter, 0))
        allocated = checked_add(current, 1, low=0, high=U64_MAX)
        self.set_value(counter, allocated)
        return allocated

    def current_id(self, counter: DataKey) -> int:
        return int(self.get_value(counter, 0))

    def is_paused(self) -> bool:
        return bool(self.get_value(DataKey.paused(), False))

    def require_not_paused(self) -> None:
        if self.is_paused():
            raise ContractError(ErrorKind.CONTRACT_PAUSED)

    def stored_admin(self) -> str | None:
        admin = self.get_value(DataKey.admin())
        return None if admin is None else str(admin)

    def require_admin(self) -> str:
        admin = self.stored_admin()
        if admin is None:
            raise ContractError(ErrorKind.NOT_INITIALIZED)
        self.auth.require_auth(admin)
        return admin

    def collect(self, token: str, from_: str, amount: int) -> None:
        """Move ``amount`` into custody now; it is returned if the call fails."""
        if self._staged is None:
            raise RuntimeError("Funds can only move inside a transaction")
        if amount < 0:
            raise ContractError(ErrorKind.TRANSFER_FAILED, "negative amount")
        self.tokens.transfer(token, from_, self.address, amount)
        self._collected.append((token, from_, amount))

    def pay_out(self, token: str, to: str, amount: int) -> None:
        """Queue a transfer out of custody until the call has committed."""
        if self._staged is None:
            raise RuntimeError("Funds can only move inside a transaction")
        if amount < 0:
            raise ContractError(ErrorKind.TRANSFER_FAILED, "negative amount")
        self._payouts.append((token, to, amount))


def contract_call(
    func: Callable[Concatenate[ContractState, P], R],
) -> Callable[Concatenate[ContractState, P], R]:
    """Wrap an operation so it runs inside ``state.transaction``."""

    @functools.wraps(func)
    def wrapper(state: ContractState, *args: P.args, **kwargs: P.kwargs) -> R:
        with state.transaction(func.__name__):
            return func(state, *args, **kwargs)

    return wrapper


__all__ = ["ContractState", "DEFAULT_CONTRACT_ADDRESS", "contract_call"]
