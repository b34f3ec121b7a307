"""Mutual-aid help requests funded by many donors.

A request is ``Open`` until donations reach the goal (``FullyFunded``) or
the creator cancels it (``Cancelled``). Donors reclaim their cumulative
donation from a cancelled request; the creator withdraws a fully funded
one (``Closed``).
"""

from __future__ import annotations

import logging
from typing import Final

from .errors import ContractError, ErrorKind
from .models import DataKey, HelpRequest, HelpRequestStatus, checked_add, checked_sub
from .state import ContractState, contract_call

log: Final = logging.getLogger("geev-core")


def _load(state: ContractState, request_id: int) -> HelpRequest:
    item = state.get(DataKey.help_request(request_id))
    if item is None:
        raise ContractError(ErrorKind.HELP_REQUEST_NOT_FOUND, f"request {request_id}")
    return HelpRequest.from_item(item)


def _save(state: ContractState, request: HelpRequest) -> None:
    state.set(request.key(), request.to_item())


def _donation(state: ContractState, request_id: int, donor: str) -> int:
    return int(str(state.get_value(DataKey.donation(request_id, donor), "0")))


def _set_donation(
    state: ContractState, request_id: int, donor: str, amount: int
) -> None:
    state.set_value(DataKey.donation(request_id, donor), str(amount))


@contract_call
def create_help_request(
    state: ContractState,
    creator: str,
    token: str,
    goal: int,
    *,
    title: str = "",
    description: str = "",
) -> int:
    state.require_not_paused()
    state.auth.require_auth(creator)
    if goal <= 0:
        raise ContractError(ErrorKind.INVALID_AMOUNT, f"goal={goal}")

    request_id = state.next_id(DataKey.help_request_counter())
    request = HelpRequest(
        id=request_id,
        creator=creator,
        token=token,
        goal=goal,
        created_at=state.now(),
        title=title,
        description=description,
    )
    _save(state, request)

    state.emit(("HelpRequestCreated", request_id, creator), (goal, token))
    log.info(
        "Help request %s opened by %s: goal %s %s", request_id, creator, goal, token
    )
    return request_id


@contract_call
def donate(state: ContractState, donor: str, request_id: int, amount: int) -> None:
    """Move ``amount`` into custody and credit it to ``donor``.

    Both running totals are computed with checked arithmetic before the
    transfer, so an overflow rejects the call without moving funds.
    """
    state.require_not_paused()
    state.auth.require_auth(donor)
    if amount <= 0:
        raise ContractError(ErrorKind.INVALID_AMOUNT, f"amount={amount}")

    request = _load(state, request_id)
    if request.status is not HelpRequestStatus.OPEN:
        raise ContractError(ErrorKind.INVALID_STATUS, request.status.value)

    new_donation = checked_add(_donation(state, request_id, donor), amount)
    new_raised = checked_add(request.raised_amount, amount)

    state.collect(request.token, donor, amount)

    _set_donation(state, request_id, donor, new_donation)
    request.raised_amount = new_raised
    if new_raised >= request.goal:
        request.status = HelpRequestStatus.FULLY_FUNDED
    _save(state, request)

    state.emit(("DonationReceived", request_id, donor), (amount,))
    if request.status is HelpRequestStatus.FULLY_FUNDED:
        state.emit(("RequestFullyFunded", request_id), (new_raised,))
        log.info("Help request %s fully funded with %s", request_id, new_raised)


@contract_call
def cancel_request(state: ContractState, creator: str, request_id: int) -> None:
    state.auth.require_auth(creator)
    request = _load(state, request_id)
    if request.creator != creator:
        raise ContractError(ErrorKind.NOT_CREATOR, creator)
    if request.status is not HelpRequestStatus.OPEN:
        raise ContractError(ErrorKind.INVALID_STATUS, request.status.value)

    request.status = HelpRequestStatus.CANCELLED
    _save(state, request)

    state.emit(("RequestCancelled", request_id), (creator,))
    log.info("Help request %s cancelled by %s", request_id, creator)


@contract_call
def claim_refund(state: ContractState, donor: str, request_id: int) -> int:
    """Return the donor's cumulative donation from a cancelled request.

    The stored donation drops to zero with the transfer, so a second claim
    fails with ``INVALID_AMOUNT`` instead of paying twice.
    """
    state.auth.require_auth(donor)
    request = _load(state, request_id)
    if request.status is not HelpRequestStatus.CANCELLED:
        raise ContractError(ErrorKind.INVALID_STATUS, request.status.value)

    amount = _donation(state, request_id, donor)
    if amount <= 0:
        raise ContractError(ErrorKind.INVALID_AMOUNT, f"nothing to refund for {donor}")
    remaining = checked_sub(request.raised_amount, amount, low=0)

    state.pay_out(request.token, donor, amount)

    _set_donation(state, request_id, donor, 0)
    request.raised_amount = remaining
    _save(state, request)

    state.emit(("RefundClaimed", request_id, donor), (amount,))
    return amount


@contract_call
def withdraw_raised(state: ContractState, creator: str, request_id: int) -> int:
    """Pay a fully funded request out to its creator and close it."""
    state.auth.require_auth(creator)
    request = _load(state, request_id)
    if request.creator != creator:
        raise ContractError(ErrorKind.NOT_CREATOR, creator)
    if request.status is not HelpRequestStatus.FULLY_FUNDED:
        raise ContractError(ErrorKind.INVALID_STATUS, request.status.value)

    amount = request.raised_amount
    state.pay_out(request.token, creator, amount)

    request.status = HelpRequestStatus.CLOSED
    _save(state, request)

    state.emit(("FundsWithdrawn", request_id, creator), (amount,))
    log.info(
        "Help request %s closed, %s %s paid to %s",
        request_id,
        amount,
        request.token,
        creator,
    )
    return amount


# ----- reads -----
def get_help_request(state: ContractState, request_id: int) -> HelpRequest | None:
    item = state.get(DataKey.help_request(request_id))
    if item is None:
        return None
    return HelpRequest.from_item(item)


def get_donation(state: ContractState, request_id: int, donor: str) -> int:
    return _donation(state, request_id, donor)


def get_help_request_count(state: ContractState) -> int:
    return state.current_id(DataKey.help_request_counter())
