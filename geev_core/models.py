from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import ClassVar

from .errors import ContractError, ErrorKind

U32_MAX = 2**32 - 1
U64_MAX = 2**64 - 1
I128_MIN = -(2**127)
I128_MAX = 2**127 - 1


def checked_add(a: int, b: int, *, low: int = I128_MIN, high: int = I128_MAX) -> int:
    """Add two integers, raising ``ARITHMETIC_OVERFLOW`` outside ``[low, high]``."""
    result = a + b
    if result < low or result > high:
        raise ContractError(ErrorKind.ARITHMETIC_OVERFLOW, f"{a} + {b}")
    return result


def checked_sub(a: int, b: int, *, low: int = I128_MIN, high: int = I128_MAX) -> int:
    result = a - b
    if result < low or result > high:
        raise ContractError(ErrorKind.ARITHMETIC_OVERFLOW, f"{a} - {b}")
    return result


class StorageTier(StrEnum):
    INSTANCE = "instance"
    PERSISTENT = "persistent"


class GiveawayStatus(StrEnum):
    ACTIVE = "Active"
    CLAIMABLE = "Claimable"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


class SelectionMethod(StrEnum):
    RANDOM = "Random"
    FIRST_COME = "FirstCome"
    MANUAL = "Manual"


class HelpRequestStatus(StrEnum):
    OPEN = "Open"
    FULLY_FUNDED = "FullyFunded"
    CANCELLED = "Cancelled"
    CLOSED = "Closed"


@dataclass(frozen=True, slots=True)
class DataKey:
    """Structured store key.

    Every key maps onto a DynamoDB ``pk``/``sk`` pair and a retention tier.
    Contract-wide settings and counters live in the instance tier; campaign
    records and their bookkeeping live in the persistent tier.
    """

    kind: str
    parts: tuple[object, ...] = ()

    CONTRACT_PK: ClassVar[str] = "CONTRACT"
    INSTANCE_KINDS: ClassVar[frozenset[str]] = frozenset(
        {
            "Admin",
            "Paused",
            "Fee",
            "GiveawayCounter",
            "EntryCounter",
            "HelpRequestCounter",
        }
    )

    # ----- contract-wide -----
    @classmethod
    def admin(cls) -> DataKey:
        return cls("Admin")

    @classmethod
    def paused(cls) -> DataKey:
        return cls("Paused")

    @classmethod
    def fee(cls) -> DataKey:
        return cls("Fee")

    @classmethod
    def giveaway_counter(cls) -> DataKey:
        return cls("GiveawayCounter")

    @classmethod
    def entry_counter(cls) -> DataKey:
        return cls("EntryCounter")

    @classmethod
    def help_request_counter(cls) -> DataKey:
        return cls("HelpRequestCounter")

    # ----- giveaways -----
    @classmethod
    def giveaway(cls, giveaway_id: int) -> DataKey:
        return cls("Giveaway", (giveaway_id,))

    @classmethod
    def participant_index(cls, giveaway_id: int, index: int) -> DataKey:
        return cls("ParticipantIndex", (giveaway_id, index))

    @classmethod
    def has_entered(cls, giveaway_id: int, account: str) -> DataKey:
        return cls("HasEntered", (giveaway_id, account))

    @classmethod
    def entry(cls, entry_id: int) -> DataKey:
        return cls("Entry", (entry_id,))

    # ----- mutual aid -----
    @classmethod
    def help_request(cls, request_id: int) -> DataKey:
        return cls("HelpRequest", (request_id,))

    @classmethod
    def donation(cls, request_id: int, donor: str) -> DataKey:
        return cls("Donation", (request_id, donor))

    @property
    def tier(self) -> StorageTier:
        if self.kind in self.INSTANCE_KINDS:
            return StorageTier.INSTANCE
        return StorageTier.PERSISTENT

    @property
    def pk(self) -> str:
        if self.kind in ("Giveaway", "ParticipantIndex", "HasEntered"):
            return f"GIVEAWAY#{self.parts[0]}"
        if self.kind == "Entry":
            return f"ENTRY#{self.parts[0]}"
        if self.kind in ("HelpRequest", "Donation"):
            return f"HELP_REQUEST#{self.parts[0]}"
        if self.kind in self.INSTANCE_KINDS:
            return self.CONTRACT_PK
        raise ValueError(f"Unknown key kind: {self.kind}")

    @property
    def sk(self) -> str:
        match self.kind:
            case "Admin":
                return "ADMIN"
            case "Paused":
                return "PAUSED"
            case "Fee":
                return "FEE"
            case "GiveawayCounter":
                return "COUNTER#GIVEAWAY"
            case "EntryCounter":
                return "COUNTER#ENTRY"
            case "HelpRequestCounter":
                return "COUNTER#HELP_REQUEST"
            case "Giveaway" | "Entry" | "HelpRequest":
                return "RECORD"
            case "ParticipantIndex":
                return f"PARTICIPANT#{self.parts[1]:010d}"
            case "HasEntered":
                return f"ENTERED#{self.parts[1]}"
            case "Donation":
                return f"DONATION#{self.parts[1]}"
        raise ValueError(f"Unknown key kind: {self.kind}")

    def to_key(self) -> dict[str, str]:
        return {"pk": self.pk, "sk": self.sk}


def _optional_str(value: object) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


@dataclass(slots=True)
class Giveaway:
    id: int
    creator: str
    token: str
    amount: int
    end_time: int
    created_at: int
    title: str = ""
    description: str = ""
    category: str = ""
    selection_method: SelectionMethod = SelectionMethod.RANDOM
    winner_count: int = 1
    participant_count: int = 0
    status: GiveawayStatus = GiveawayStatus.ACTIVE
    winner: str | None = None

    def key(self) -> DataKey:
        return DataKey.giveaway(self.id)

    def to_item(self) -> dict[str, object]:
        item: dict[str, object] = self.key().to_key()
        item.update(
            {
                "id": self.id,
                "creator": self.creator,
                "token": self.token,
                "amount": str(self.amount),
                "title": self.title,
                "description": self.description,
                "category": self.category,
                "selection_method": self.selection_method.value,
                "winner_count": self.winner_count,
                "participant_count": self.participant_count,
                "end_time": self.end_time,
                "created_at": self.created_at,
                "status": self.status.value,
            }
        )
        if self.winner is not None:
            item["winner"] = self.winner
        return item

    @classmethod
    def from_item(cls, item: dict[str, object]) -> Giveaway:
        return cls(
            id=int(item["id"]),
            creator=str(item["creator"]),
            token=str(item["token"]),
            amount=int(str(item["amount"])),
            end_time=int(item["end_time"]),
            created_at=int(item.get("created_at", 0)),
            title=str(item.get("title", "")),
            description=str(item.get("description", "")),
            category=str(item.get("category", "")),
            selection_method=SelectionMethod(
                item.get("selection_method", SelectionMethod.RANDOM.value)
            ),
            winner_count=int(item.get("winner_count", 1)),
            participant_count=int(item.get("participant_count", 0)),
            status=GiveawayStatus(item.get("status", GiveawayStatus.ACTIVE.value)),
            winner=_optional_str(item.get("winner")),
        )

    def holds_prize(self) -> bool:
        """True while the prize is still in custody."""
        return self.status in (GiveawayStatus.ACTIVE, GiveawayStatus.CLAIMABLE)


@dataclass(slots=True)
class Entry:
    id: int
    giveaway_id: int
    participant: str
    entry_time: int
    content: str = ""
    is_winner: bool = False

    def key(self) -> DataKey:
        return DataKey.entry(self.id)

    def to_item(self) -> dict[str, object]:
        item: dict[str, object] = self.key().to_key()
        item.update(
            {
                "id": self.id,
                "giveaway_id": self.giveaway_id,
                "participant": self.participant,
                "entry_time": self.entry_time,
                "content": self.content,
                "is_winner": self.is_winner,
            }
        )
        return item

    @classmethod
    def from_item(cls, item: dict[str, object]) -> Entry:
        return cls(
            id=int(item["id"]),
            giveaway_id=int(item["giveaway_id"]),
            participant=str(item["participant"]),
            entry_time=int(item.get("entry_time", 0)),
            content=str(item.get("content", "")),
            is_winner=bool(item.get("is_winner", False)),
        )


@dataclass(slots=True)
class HelpRequest:
    id: int
    creator: str
    token: str
    goal: int
    created_at: int
    title: str = ""
    description: str = ""
    raised_amount: int = 0
    status: HelpRequestStatus = HelpRequestStatus.OPEN

    def key(self) -> DataKey:
        return DataKey.help_request(self.id)

    def to_item(self) -> dict[str, object]:
        item: dict[str, object] = self.key().to_key()
        item.update(
            {
                "id": self.id,
                "creator": self.creator,
                "token": self.token,
                "goal": str(self.goal),
                "raised_amount": str(self.raised_amount),
                "title": self.title,
                "description": self.description,
                "created_at": self.created_at,
                "status": self.status.value,
            }
        )
        return item

    @classmethod
    def from_item(cls, item: dict[str, object]) -> HelpRequest:
        return cls(
            id=int(item["id"]),
            creator=str(item["creator"]),
            token=str(item["token"]),
            goal=int(str(item["goal"])),
            created_at=int(item.get("created_at", 0)),
            title=str(item.get("title", "")),
            description=str(item.get("description", "")),
            raised_amount=int(str(item.get("raised_amount", "0"))),
            status=HelpRequestStatus(item.get("status", HelpRequestStatus.OPEN.value)),
        )

    def holds_funds(self) -> bool:
        """True while ``raised_amount`` is still owed to donors or the creator."""
        return self.status is not HelpRequestStatus.CLOSED


__all__ = [
    "DataKey",
    "Entry",
    "Giveaway",
    "GiveawayStatus",
    "HelpRequest",
    "HelpRequestStatus",
    "I128_MAX",
    "I128_MIN",
    "SelectionMethod",
    "StorageTier",
    "U32_MAX",
    "U64_MAX",
    "checked_add",
    "checked_sub",
]
