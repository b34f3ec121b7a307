from __future__ import annotations

import pytest

from geev_core import (
    ContractState,
    EventLog,
    GeevContract,
    InMemoryStore,
    InMemoryTokenLedger,
    ManualClock,
    SeededEntropy,
    SignerSetAuthenticator,
)

START_TIME = 1_000
STARTING_BALANCE = 10_000
ACCOUNTS = ("admin", "alice", "bob", "carol", "dave")


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock(START_TIME)


@pytest.fixture
def ledger() -> InMemoryTokenLedger:
    ledger = InMemoryTokenLedger()
    for account in ACCOUNTS[1:]:
        ledger.mint("XLM", account, STARTING_BALANCE)
    return ledger


@pytest.fixture
def events() -> EventLog:
    return EventLog()


@pytest.fixture
def entropy() -> SeededEntropy:
    return SeededEntropy(42)


@pytest.fixture
def auth() -> SignerSetAuthenticator:
    return SignerSetAuthenticator(ACCOUNTS)


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def state(store, auth, ledger, clock, entropy, events) -> ContractState:
    return ContractState(
        store=store,
        auth=auth,
        tokens=ledger,
        clock=clock,
        entropy=entropy,
        events=events,
    )


@pytest.fixture
def bare_contract(state) -> GeevContract:
    """Contract that has not been initialized."""
    return GeevContract(state)


@pytest.fixture
def contract(bare_contract) -> GeevContract:
    bare_contract.initialize("admin")
    return bare_contract
