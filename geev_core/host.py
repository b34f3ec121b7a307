"""Host collaborators consumed by the contract core.

The core never authenticates callers, moves balances, reads time, draws
entropy or broadcasts events itself. It calls the small interfaces below,
which a host (or a test) supplies when building a ``ContractState``.
"""

from __future__ import annotations

import logging
import random
import time
from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Final, Protocol

from .errors import ContractError, ErrorKind

log: Final = logging.getLogger("geev-core.events")


class Authenticator(Protocol):
    def require_auth(self, account: str) -> None:
        """Raise ``NOT_AUTHORIZED`` unless ``account`` authorized the call."""


class TokenCustody(Protocol):
    def transfer(self, token: str, from_: str, to: str, amount: int) -> None:
        """Move ``amount`` of ``token``; raise ``TRANSFER_FAILED`` otherwise."""

    def balance(self, token: str, account: str) -> int: ...


class LedgerClock(Protocol):
    def now(self) -> int: ...


class EntropySource(Protocol):
    def random_u64(self) -> int: ...


class EventSink(Protocol):
    def publish(
        self, topic: tuple[object, ...], payload: tuple[object, ...]
    ) -> None: ...


# ----- authentication -----
class AllowAllAuthenticator:
    """Treats every account as having signed the call."""

    def require_auth(self, account: str) -> None:
        return None


class SignerSetAuthenticator:
    """Authorizes only the accounts currently in ``signers``."""

    def __init__(self, signers: Iterable[str] = ()) -> None:
        self.signers: set[str] = set(signers)

    def authorize(self, *accounts: str) -> None:
        self.signers.update(accounts)

    def revoke(self, *accounts: str) -> None:
        self.signers.difference_update(accounts)

    def require_auth(self, account: str) -> None:
        if account not in self.signers:
            raise ContractError(ErrorKind.NOT_AUTHORIZED, account)


# ----- token custody -----
class InMemoryTokenLedger:
    """Fungible balances keyed by ``(token, account)``."""

    def __init__(self) -> None:
        self._balances: dict[tuple[str, str], int] = defaultdict(int)

    def mint(self, token: str, account: str, amount: int) -> None:
        if amount < 0:
            raise ValueError("Mint amount must be non-negative")
        self._balances[(token, account)] += amount

    def balance(self, token: str, account: str) -> int:
        return self._balances.get((token, account), 0)

    def transfer(self, token: str, from_: str, to: str, amount: int) -> None:
        if amount < 0:
            raise ContractError(ErrorKind.TRANSFER_FAILED, "negative amount")
        available = self.balance(token, from_)
        if available < amount:
            raise ContractError(
                ErrorKind.TRANSFER_FAILED,
                f"{from_} holds {available} {token}, needs {amount}",
            )
        self._balances[(token, from_)] = available - amount
        self._balances[(token, to)] += amount

    def tokens(self) -> list[str]:
        return sorted({token for token, _ in self._balances})


# ----- clock -----
class SystemClock:
    def now(self) -> int:
        return int(time.time())


class ManualClock:
    """Clock that only moves when told to."""

    def __init__(self, timestamp: int = 0) -> None:
        self.timestamp = timestamp

    def now(self) -> int:
        return self.timestamp

    def set(self, timestamp: int) -> None:
        if timestamp < self.timestamp:
            raise ValueError("Ledger time cannot move backwards")
        self.timestamp = timestamp

    def advance(self, seconds: int) -> int:
        self.set(self.timestamp + seconds)
        return self.timestamp


# ----- entropy -----
class SystemEntropy:
    def __init__(self) -> None:
        self._rng = random.SystemRandom()

    def random_u64(self) -> int:
        return self._rng.getrandbits(64)


class SeededEntropy:
    """Reproducible entropy for tests and simulations. Not unpredictable."""

    def __init__(self, seed: int | str) -> None:
        self._rng = random.Random(seed)

    def random_u64(self) -> int:
        return self._rng.getrandbits(64)


# ----- events -----
@dataclass(frozen=True, slots=True)
class ContractEvent:
    topic: tuple[object, ...]
    payload: tuple[object, ...]

    @property
    def name(self) -> str:
        return str(self.topic[0]) if self.topic else ""


class EventLog:
    """Event sink that keeps published events in memory and logs them."""

    def __init__(self) -> None:
        self.events: list[ContractEvent] = []

    def publish(self, topic: tuple[object, ...], payload: tuple[object, ...]) -> None:
        event = ContractEvent(topic=tuple(topic), payload=tuple(payload))
        self.events.append(event)
        log.info("Event %s topic=%s payload=%s", event.name, event.topic[1:], payload)

    def named(self, name: str) -> list[ContractEvent]:
        return [event for event in self.events if event.name == name]

    def names(self) -> list[str]:
        return [event.name for event in self.events]


__all__ = [
    "AllowAllAuthenticator",
    "Authenticator",
    "ContractEvent",
    "EntropySource",
    "EventLog",
    "EventSink",
    "InMemoryTokenLedger",
    "LedgerClock",
    "ManualClock",
    "SeededEntropy",
    "SignerSetAuthenticator",
    "SystemClock",
    "SystemEntropy",
    "TokenCustody",
]
