"""Giveaway and mutual-aid contract core."""

from .config import GeevConfig, read_config
from .contract import GeevContract
from .errors import ContractError, ErrorKind
from .host import (
    AllowAllAuthenticator,
    ContractEvent,
    EventLog,
    InMemoryTokenLedger,
    ManualClock,
    SeededEntropy,
    SignerSetAuthenticator,
    SystemClock,
    SystemEntropy,
)
from .models import (
    DataKey,
    Entry,
    Giveaway,
    GiveawayStatus,
    HelpRequest,
    HelpRequestStatus,
    SelectionMethod,
)
from .state import ContractState
from .storage import DynamoStore, InMemoryStore, StagedStore

__all__ = [
    "GeevConfig",
    "read_config",
    "GeevContract",
    "ContractError",
    "ErrorKind",
    "AllowAllAuthenticator",
    "ContractEvent",
    "EventLog",
    "InMemoryTokenLedger",
    "ManualClock",
    "SeededEntropy",
    "SignerSetAuthenticator",
    "SystemClock",
    "SystemEntropy",
    "DataKey",
    "Entry",
    "Giveaway",
    "GiveawayStatus",
    "HelpRequest",
    "HelpRequestStatus",
    "SelectionMethod",
    "ContractState",
    "DynamoStore",
    "InMemoryStore",
    "StagedStore",
]
