"""Giveaway campaigns: escrowed prize, one entry per participant, one winner.

Lifecycle::

    Active --pick_winner/select_winner--> Claimable --distribute/claim--> Completed
    Active --cancel_giveaway (no entrants)--> Cancelled

Participants are written to a dense ``ParticipantIndex(giveaway_id, i)``
mapping for ``i`` in ``[0, participant_count)`` so the draw can address any
entrant directly. The random draw is ``random_u64 % participant_count``;
the modulo bias is negligible for realistic pool sizes and accepted.
"""

from __future__ import annotations

import logging
from typing import Final

from .errors import ContractError, ErrorKind
from .models import (
    U32_MAX,
    U64_MAX,
    DataKey,
    Entry,
    Giveaway,
    GiveawayStatus,
    SelectionMethod,
    checked_add,
)
from .state import ContractState, contract_call

log: Final = logging.getLogger("geev-core")


def _load(state: ContractState, giveaway_id: int) -> Giveaway:
    item = state.get(DataKey.giveaway(giveaway_id))
    if item is None:
        raise ContractError(ErrorKind.GIVEAWAY_NOT_FOUND, f"giveaway {giveaway_id}")
    return Giveaway.from_item(item)


def _save(state: ContractState, giveaway: Giveaway) -> None:
    state.set(giveaway.key(), giveaway.to_item())


@contract_call
def create_giveaway(
    state: ContractState,
    creator: str,
    token: str,
    amount: int,
    title: str,
    duration: int,
    *,
    description: str = "",
    category: str = "",
    selection_method: SelectionMethod = SelectionMethod.RANDOM,
    winner_count: int = 1,
) -> int:
    """Escrow ``amount`` of ``token`` from ``creator`` and open a giveaway.

    The prize moves into custody before any record is written; a failed
    transfer leaves no trace. Entries close at ``now + duration``.
    """
    state.require_not_paused()
    state.auth.require_auth(creator)

    if amount <= 0:
        raise ContractError(ErrorKind.INVALID_AMOUNT, f"amount={amount}")
    if duration < 0:
        raise ContractError(ErrorKind.INVALID_ARGUMENT, f"duration={duration}")
    if winner_count < 1:
        raise ContractError(ErrorKind.INVALID_ARGUMENT, f"winner_count={winner_count}")

    now = state.now()
    end_time = checked_add(now, duration, low=0, high=U64_MAX)

    giveaway_id = state.next_id(DataKey.giveaway_counter())
    state.collect(token, creator, amount)

    giveaway = Giveaway(
        id=giveaway_id,
        creator=creator,
        token=token,
        amount=amount,
        end_time=end_time,
        created_at=now,
        title=title,
        description=description,
        category=category,
        selection_method=SelectionMethod(selection_method),
        winner_count=winner_count,
    )
    _save(state, giveaway)

    state.emit(("GiveawayCreated", giveaway_id, creator), (amount, token))
    log.info(
        "Giveaway %s created by %s: %s %s until %s",
        giveaway_id,
        creator,
        amount,
        token,
        end_time,
    )
    return giveaway_id


@contract_call
def enter_giveaway(
    state: ContractState, participant: str, giveaway_id: int, content: str = ""
) -> int:
    """Register ``participant`` once; returns the new entry id.

    Entries are accepted up to and including ``end_time``.
    """
    state.require_not_paused()
    state.auth.require_auth(participant)

    giveaway = _load(state, giveaway_id)
    now = state.now()
    if now > giveaway.end_time:
        raise ContractError(ErrorKind.GIVEAWAY_ENDED, f"giveaway {giveaway_id}")
    if giveaway.status is not GiveawayStatus.ACTIVE:
        raise ContractError(ErrorKind.INVALID_STATUS, giveaway.status.value)

    entered_key = DataKey.has_entered(giveaway_id, participant)
    if state.has(entered_key):
        raise ContractError(ErrorKind.ALREADY_ENTERED, participant)

    index = giveaway.participant_count
    giveaway.participant_count = checked_add(index, 1, low=0, high=U32_MAX)

    entry_id = state.next_id(DataKey.entry_counter())
    entry = Entry(
        id=entry_id,
        giveaway_id=giveaway_id,
        participant=participant,
        entry_time=now,
        content=content,
    )
    state.set(entry.key(), entry.to_item())
    state.set_value(DataKey.participant_index(giveaway_id, index), participant)
    state.set(entered_key, {"entry_id": entry_id})
    _save(state, giveaway)

    state.emit(("GiveawayEntered", giveaway_id, participant), (entry_id,))
    return entry_id


def _require_drawable(state: ContractState, giveaway: Giveaway) -> None:
    if giveaway.status is not GiveawayStatus.ACTIVE:
        raise ContractError(ErrorKind.INVALID_STATUS, giveaway.status.value)
    if state.now() <= giveaway.end_time:
        raise ContractError(ErrorKind.GIVEAWAY_STILL_ACTIVE, f"giveaway {giveaway.id}")
    if giveaway.participant_count == 0:
        raise ContractError(ErrorKind.NO_PARTICIPANTS, f"giveaway {giveaway.id}")


def _award(state: ContractState, giveaway: Giveaway, index: int) -> str:
    winner = state.get_value(DataKey.participant_index(giveaway.id, index))
    if winner is None:
        raise ContractError(ErrorKind.INVALID_INDEX, f"{giveaway.id}/{index}")
    winner = str(winner)

    giveaway.winner = winner
    giveaway.status = GiveawayStatus.CLAIMABLE
    _save(state, giveaway)
    _mark_entry_as_winner(state, giveaway.id, winner)

    state.emit(("WinnerSelected", giveaway.id), (winner, index))
    log.info("Giveaway %s winner %s (index %s)", giveaway.id, winner, index)
    return winner


def _mark_entry_as_winner(state: ContractState, giveaway_id: int, winner: str) -> None:
    marker = state.get(DataKey.has_entered(giveaway_id, winner))
    if marker is None or marker.get("entry_id") is None:
        raise ContractError(ErrorKind.INVALID_INDEX, f"no entry for {winner}")
    entry_key = DataKey.entry(int(marker["entry_id"]))
    item = state.get(entry_key)
    if item is None:
        raise ContractError(ErrorKind.INVALID_INDEX, f"missing entry {entry_key.parts}")
    entry = Entry.from_item(item)
    entry.is_winner = True
    state.set(entry_key, entry.to_item())


@contract_call
def pick_winner(state: ContractState, giveaway_id: int) -> str:
    """Draw the winner once entries have closed. Anyone may trigger this.

    A giveaway is drawn exactly once; later calls fail with
    ``INVALID_STATUS`` rather than re-drawing.
    """
    giveaway = _load(state, giveaway_id)
    _require_drawable(state, giveaway)

    match giveaway.selection_method:
        case SelectionMethod.RANDOM:
            index = state.entropy.random_u64() % giveaway.participant_count
        case SelectionMethod.FIRST_COME:
            index = 0
        case _:
            raise ContractError(
                ErrorKind.SELECTION_METHOD_MISMATCH, giveaway.selection_method.value
            )
    return _award(state, giveaway, index)


@contract_call
def select_winner(
    state: ContractState, creator: str, giveaway_id: int, index: int
) -> str:
    """Creator picks the winner of a ``Manual`` giveaway by dense index."""
    state.auth.require_auth(creator)
    giveaway = _load(state, giveaway_id)
    if giveaway.creator != creator:
        raise ContractError(ErrorKind.NOT_CREATOR, creator)
    if giveaway.selection_method is not SelectionMethod.MANUAL:
        raise ContractError(
            ErrorKind.SELECTION_METHOD_MISMATCH, giveaway.selection_method.value
        )
    _require_drawable(state, giveaway)
    if index < 0 or index >= giveaway.participant_count:
        raise ContractError(ErrorKind.INVALID_INDEX, f"{giveaway_id}/{index}")
    return _award(state, giveaway, index)


def _pay_out(state: ContractState, giveaway: Giveaway) -> None:
    if giveaway.status is not GiveawayStatus.CLAIMABLE:
        raise ContractError(ErrorKind.INVALID_STATUS, giveaway.status.value)
    if giveaway.winner is None:
        raise ContractError(ErrorKind.INVALID_STATUS, "no winner recorded")

    state.pay_out(giveaway.token, giveaway.winner, giveaway.amount)

    giveaway.status = GiveawayStatus.COMPLETED
    _save(state, giveaway)
    state.emit(
        ("PrizeDistributed", giveaway.id, giveaway.winner),
        (giveaway.amount, giveaway.token),
    )
    log.info(
        "Giveaway %s paid %s %s to %s",
        giveaway.id,
        giveaway.amount,
        giveaway.token,
        giveaway.winner,
    )


@contract_call
def distribute_prize(state: ContractState, giveaway_id: int) -> None:
    """Push the prize to the recorded winner. Anyone may trigger this."""
    _pay_out(state, _load(state, giveaway_id))


@contract_call
def claim_prize(state: ContractState, giveaway_id: int, claimer: str) -> bool:
    """Winner pulls the prize."""
    state.auth.require_auth(claimer)
    giveaway = _load(state, giveaway_id)
    if giveaway.status is not GiveawayStatus.CLAIMABLE:
        raise ContractError(ErrorKind.INVALID_STATUS, giveaway.status.value)
    if giveaway.winner != claimer:
        raise ContractError(ErrorKind.NOT_WINNER, claimer)
    _pay_out(state, giveaway)
    return True


@contract_call
def cancel_giveaway(state: ContractState, creator: str, giveaway_id: int) -> None:
    """Return the prize to the creator of a giveaway nobody has entered."""
    state.auth.require_auth(creator)
    giveaway = _load(state, giveaway_id)
    if giveaway.creator != creator:
        raise ContractError(ErrorKind.NOT_CREATOR, creator)
    if giveaway.status is not GiveawayStatus.ACTIVE:
        raise ContractError(ErrorKind.INVALID_STATUS, giveaway.status.value)
    if giveaway.participant_count > 0:
        raise ContractError(
            ErrorKind.INVALID_STATUS, f"{giveaway.participant_count} participants"
        )

    state.pay_out(giveaway.token, creator, giveaway.amount)

    giveaway.status = GiveawayStatus.CANCELLED
    _save(state, giveaway)
    state.emit(("GiveawayCancelled", giveaway_id), (creator,))
    log.info("Giveaway %s cancelled by %s", giveaway_id, creator)


# ----- reads -----
def get_giveaway(state: ContractState, giveaway_id: int) -> Giveaway | None:
    item = state.get(DataKey.giveaway(giveaway_id))
    if item is None:
        return None
    return Giveaway.from_item(item)


def get_participant_at_index(
    state: ContractState, giveaway_id: int, index: int
) -> str | None:
    participant = state.get_value(DataKey.participant_index(giveaway_id, index))
    return None if participant is None else str(participant)


def get_entry(state: ContractState, entry_id: int) -> Entry | None:
    item = state.get(DataKey.entry(entry_id))
    if item is None:
        return None
    return Entry.from_item(item)


def has_entered(state: ContractState, giveaway_id: int, participant: str) -> bool:
    return state.has(DataKey.has_entered(giveaway_id, participant))


def get_giveaway_count(state: ContractState) -> int:
    return state.current_id(DataKey.giveaway_counter())
