"""Seeded random exercise of the contract with invariant checks.

Every step applies one operation (valid or not) chosen from a seeded RNG,
then verifies the bookkeeping invariants:

- the custody balance of every token equals the prizes and donations the
  contract still owes in that token;
- each giveaway's dense participant index covers exactly
  ``[0, participant_count)``;
- a giveaway has a winner if and only if it is ``Claimable`` or ``Completed``;
- a request's ``raised_amount`` equals the sum of its stored donations.
"""

from __future__ import annotations

import logging
import random
from collections import Counter
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Final

from .contract import GeevContract
from .errors import ContractError
from .host import (
    AllowAllAuthenticator,
    EventLog,
    InMemoryTokenLedger,
    ManualClock,
    SeededEntropy,
)
from .models import GiveawayStatus, HelpRequestStatus, SelectionMethod
from .state import ContractState
from .storage import InMemoryStore

log: Final = logging.getLogger("geev-core.simulator")

DEFAULT_TOKENS: Final[tuple[str, ...]] = ("XLM", "USDC")
STARTING_BALANCE: Final[int] = 10_000
ADMIN: Final[str] = "admin"
OPERATIONS: Final[tuple[str, ...]] = (
    "create_giveaway",
    "enter_giveaway",
    "enter_giveaway",
    "enter_giveaway",
    "pick_winner",
    "distribute_prize",
    "claim_prize",
    "cancel_giveaway",
    "create_help_request",
    "donate",
    "donate",
    "cancel_request",
    "claim_refund",
    "withdraw_raised",
    "advance_clock",
    "set_paused",
)


class InvariantViolation(RuntimeError):
    """Raised when the contract state breaks a bookkeeping invariant."""


@dataclass(slots=True)
class SimulationReport:
    seed: int
    steps: int
    attempted: Counter[str] = field(default_factory=Counter)
    succeeded: Counter[str] = field(default_factory=Counter)
    rejections: Counter[str] = field(default_factory=Counter)
    custody: dict[str, int] = field(default_factory=dict)
    giveaways: int = 0
    help_requests: int = 0


@dataclass(slots=True)
class SimulationWorld:
    contract: GeevContract
    ledger: InMemoryTokenLedger
    clock: ManualClock
    accounts: list[str]
    tokens: tuple[str, ...]


def build_world(
    seed: int,
    participants: int = 6,
    tokens: Sequence[str] = DEFAULT_TOKENS,
    *,
    start_time: int = 1_700_000_000,
) -> SimulationWorld:
    """Fully in-memory contract with funded accounts."""
    if participants < 2:
        raise ValueError("A simulation needs at least two participants")
    ledger = InMemoryTokenLedger()
    clock = ManualClock(start_time)
    state = ContractState(
        store=InMemoryStore(),
        auth=AllowAllAuthenticator(),
        tokens=ledger,
        clock=clock,
        entropy=SeededEntropy(seed),
        events=EventLog(),
    )
    contract = GeevContract(state)
    contract.initialize(ADMIN)

    accounts = [f"user-{idx:02d}" for idx in range(participants)]
    for account in accounts:
        for token in tokens:
            ledger.mint(token, account, STARTING_BALANCE)
    return SimulationWorld(contract, ledger, clock, accounts, tuple(tokens))


def outstanding_obligations(world: SimulationWorld) -> dict[str, int]:
    owed = {token: 0 for token in world.tokens}
    contract = world.contract
    for giveaway_id in range(1, contract.get_giveaway_count() + 1):
        giveaway = contract.get_giveaway(giveaway_id)
        if giveaway is not None and giveaway.holds_prize():
            owed[giveaway.token] = owed.get(giveaway.token, 0) + giveaway.amount
    for request_id in range(1, contract.get_help_request_count() + 1):
        request = contract.get_help_request(request_id)
        if request is not None and request.holds_funds():
            owed[request.token] = owed.get(request.token, 0) + request.raised_amount
    return owed


def check_invariants(world: SimulationWorld) -> None:
    contract = world.contract
    for token, owed in outstanding_obligations(world).items():
        held = world.ledger.balance(token, contract.address)
        if held != owed:
            raise InvariantViolation(f"custody holds {held} {token} but owes {owed}")

    for giveaway_id in range(1, contract.get_giveaway_count() + 1):
        giveaway = contract.get_giveaway(giveaway_id)
        if giveaway is None:
            raise InvariantViolation(f"giveaway {giveaway_id} missing")
        count = giveaway.participant_count
        for index in range(count):
            if contract.get_participant_at_index(giveaway_id, index) is None:
                raise InvariantViolation(f"giveaway {giveaway_id} gap at {index}")
        if contract.get_participant_at_index(giveaway_id, count) is not None:
            raise InvariantViolation(f"giveaway {giveaway_id} index beyond {count}")
        drawn = giveaway.status in (GiveawayStatus.CLAIMABLE, GiveawayStatus.COMPLETED)
        if drawn != (giveaway.winner is not None):
            raise InvariantViolation(
                f"giveaway {giveaway_id} is {giveaway.status} with winner "
                f"{giveaway.winner!r}"
            )

    for request_id in range(1, contract.get_help_request_count() + 1):
        request = contract.get_help_request(request_id)
        if request is None:
            raise InvariantViolation(f"help request {request_id} missing")
        if request.status is HelpRequestStatus.CLOSED:
            continue
        donated = sum(
            contract.get_donation(request_id, account) for account in world.accounts
        )
        if donated != request.raised_amount:
            raise InvariantViolation(
                f"help request {request_id} raised {request.raised_amount} "
                f"but donations total {donated}"
            )


def _pick_id(rng: random.Random, count: int) -> int:
    # One past the end exercises the not-found paths.
    return rng.randint(1, count + 1)


def _plan(
    world: SimulationWorld, rng: random.Random
) -> tuple[str, Callable[[], object]]:
    """Choose the next operation and its arguments."""
    contract = world.contract
    account = rng.choice(world.accounts)
    token = rng.choice(world.tokens)
    giveaway_id = _pick_id(rng, contract.get_giveaway_count())
    request_id = _pick_id(rng, contract.get_help_request_count())
    operation = rng.choice(OPERATIONS)

    match operation:
        case "create_giveaway":
            amount = rng.randint(0, 800)
            duration = rng.randint(0, 120)
            method = rng.choice([SelectionMethod.RANDOM, SelectionMethod.FIRST_COME])
            return operation, lambda: contract.create_giveaway(
                account,
                token,
                amount,
                f"Giveaway by {account}",
                duration,
                selection_method=method,
            )
        case "enter_giveaway":
            return operation, lambda: contract.enter_giveaway(account, giveaway_id)
        case "pick_winner":
            return operation, lambda: contract.pick_winner(giveaway_id)
        case "distribute_prize":
            return operation, lambda: contract.distribute_prize(giveaway_id)
        case "claim_prize":
            return operation, lambda: contract.claim_prize(giveaway_id, account)
        case "cancel_giveaway":
            return operation, lambda: contract.cancel_giveaway(account, giveaway_id)
        case "create_help_request":
            goal = rng.randint(0, 2_000)
            return operation, lambda: contract.create_help_request(account, token, goal)
        case "donate":
            amount = rng.randint(-10, 700)
            return operation, lambda: contract.donate(account, request_id, amount)
        case "cancel_request":
            return operation, lambda: contract.cancel_request(account, request_id)
        case "claim_refund":
            return operation, lambda: contract.claim_refund(account, request_id)
        case "withdraw_raised":
            return operation, lambda: contract.withdraw_raised(account, request_id)
        case "set_paused":
            # Mostly unpause so the run keeps making progress.
            paused = rng.random() < 0.2
            return operation, lambda: contract.set_paused(ADMIN, paused)
    seconds = rng.randint(1, 90)
    return "advance_clock", lambda: world.clock.advance(seconds)


def simulate(
    seed: int = 0,
    steps: int = 500,
    participants: int = 6,
    tokens: Sequence[str] = DEFAULT_TOKENS,
) -> SimulationReport:
    """Run ``steps`` seeded operations, checking invariants after each one."""
    world = build_world(seed, participants, tokens)
    rng = random.Random(seed)
    report = SimulationReport(seed=seed, steps=steps)

    for step in range(steps):
        operation, action = _plan(world, rng)
        report.attempted[operation] += 1
        try:
            action()
        except ContractError as exc:
            report.rejections[exc.kind.name] += 1
            log.debug("Step %s: %s rejected with %s", step, operation, exc.kind.name)
        else:
            report.succeeded[operation] += 1
        check_invariants(world)

    report.custody = {
        token: world.ledger.balance(token, world.contract.address)
        for token in world.tokens
    }
    report.giveaways = world.contract.get_giveaway_count()
    report.help_requests = world.contract.get_help_request_count()
    return report


def format_report(report: SimulationReport) -> str:
    lines = [
        f"Seed {report.seed}: {report.steps} steps, "
        f"{report.giveaways} giveaways, {report.help_requests} help requests",
        "",
        "Operations (succeeded/attempted):",
    ]
    for operation in sorted(report.attempted):
        lines.append(
            f"  {operation:<20} {report.succeeded[operation]:>5}/"
            f"{report.attempted[operation]:<5}"
        )
    if report.rejections:
        lines.append("")
        lines.append("Rejections by kind:")
        for kind, count in report.rejections.most_common():
            lines.append(f"  {kind:<26} {count:>5}")
    lines.append("")
    lines.append("Custody balances:")
    for token, amount in sorted(report.custody.items()):
        lines.append(f"  {token:<8} {amount:>10}")
    return "\n".join(lines)
