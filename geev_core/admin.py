"""Admin controller: one-time setup, emergency pause and fund rescue."""

from __future__ import annotations

import logging
from typing import Final

from .errors import ContractError, ErrorKind
from .models import DataKey
from .state import ContractState, contract_call

log: Final = logging.getLogger("geev-core")

MAX_FEE_BPS: Final[int] = 10_000


@contract_call
def initialize(state: ContractState, admin: str, fee_bps: int = 0) -> None:
    """Store the admin and fee once and clear the pause flag."""
    if state.has(DataKey.admin()):
        raise ContractError(ErrorKind.ALREADY_INITIALIZED)
    if fee_bps < 0 or fee_bps > MAX_FEE_BPS:
        raise ContractError(ErrorKind.INVALID_ARGUMENT, f"fee_bps={fee_bps}")
    state.auth.require_auth(admin)

    state.set_value(DataKey.admin(), admin)
    state.set_value(DataKey.paused(), False)
    state.set_value(DataKey.fee(), fee_bps)

    state.emit(("Initialized", admin), (fee_bps,))
    log.info("Contract initialized with admin %s (fee %s bps)", admin, fee_bps)


@contract_call
def set_paused(state: ContractState, admin: str, paused: bool) -> None:
    state.auth.require_auth(admin)
    stored_admin = state.stored_admin()
    if stored_admin is None:
        raise ContractError(ErrorKind.NOT_INITIALIZED)
    if admin != stored_admin:
        raise ContractError(ErrorKind.NOT_ADMIN, admin)

    state.set_value(DataKey.paused(), bool(paused))
    state.emit(("PauseChanged", admin), (bool(paused),))
    log.info("Contract %s by %s", "paused" if paused else "unpaused", admin)


@contract_call
def admin_withdraw(state: ContractState, token: str, amount: int, to: str) -> None:
    """Move custodied funds out, bypassing all campaign bookkeeping.

    Campaign records are not touched, so a withdrawal can leave prizes or
    refunds uncovered. Only the stored admin can call this.
    """
    admin = state.require_admin()
    if amount <= 0:
        raise ContractError(ErrorKind.INVALID_AMOUNT, f"amount={amount}")

    state.pay_out(token, to, amount)

    state.emit(("EmergencyWithdraw", token), (amount, to))
    log.warning("Emergency withdraw of %s %s to %s by %s", amount, token, to, admin)


def get_admin(state: ContractState) -> str | None:
    return state.stored_admin()


def is_paused(state: ContractState) -> bool:
    return state.is_paused()


def get_fee_bps(state: ContractState) -> int:
    return int(state.get_value(DataKey.fee(), 0))
