from __future__ import annotations

from enum import IntEnum


class ErrorKind(IntEnum):
    """Stable error codes surfaced by every contract operation."""

    GIVEAWAY_NOT_FOUND = 1
    INVALID_STATUS = 2
    GIVEAWAY_STILL_ACTIVE = 3
    GIVEAWAY_ENDED = 4
    NO_PARTICIPANTS = 5
    INVALID_INDEX = 6
    NOT_CREATOR = 7
    ALREADY_ENTERED = 8
    HELP_REQUEST_NOT_FOUND = 9
    INVALID_AMOUNT = 10
    ALREADY_INITIALIZED = 11
    ARITHMETIC_OVERFLOW = 12
    NOT_INITIALIZED = 13
    NOT_ADMIN = 14
    NOT_WINNER = 15
    NOT_AUTHORIZED = 16
    TRANSFER_FAILED = 17
    CONTRACT_PAUSED = 18
    SELECTION_METHOD_MISMATCH = 19
    INVALID_ARGUMENT = 20


class ContractError(Exception):
    """Raised when a contract call is rejected.

    Callers should branch on ``kind``; ``detail`` is informational only.
    """

    def __init__(self, kind: ErrorKind, detail: str = "") -> None:
        self.kind = kind
        self.detail = detail
        message = kind.name if not detail else f"{kind.name}: {detail}"
        super().__init__(message)

    @property
    def code(self) -> int:
        return int(self.kind)


__all__ = ["ContractError", "ErrorKind"]
