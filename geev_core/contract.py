from __future__ import annotations

from . import admin, giveaway, mutual_aid
from .clients import build_store
from .config import GeevConfig
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
from .models import Entry, Giveaway, HelpRequest, SelectionMethod
from .state import ContractState
from .storage import Store


class GeevContract:
    """Public surface of the giveaway and mutual-aid contract."""

    def __init__(self, state: ContractState) -> None:
        self.state = state

    @classmethod
    def from_config(
        cls,
        config: GeevConfig,
        *,
        auth: Authenticator,
        tokens: TokenCustody | None = None,
        clock: LedgerClock | None = None,
        entropy: EntropySource | None = None,
        events: EventSink | None = None,
        store: Store | None = None,
    ) -> GeevContract:
        state = ContractState(
            store=store if store is not None else build_store(config),
            auth=auth,
            tokens=tokens or InMemoryTokenLedger(),
            clock=clock or SystemClock(),
            entropy=entropy or SystemEntropy(),
            events=events or EventLog(),
            address=config.contract_address,
        )
        return cls(state)

    @property
    def address(self) -> str:
        return self.state.address

    # ----- admin -----
    def initialize(self, admin_account: str, fee_bps: int = 0) -> None:
        admin.initialize(self.state, admin_account, fee_bps)

    def set_paused(self, admin_account: str, paused: bool) -> None:
        admin.set_paused(self.state, admin_account, paused)

    def admin_withdraw(self, token: str, amount: int, to: str) -> None:
        admin.admin_withdraw(self.state, token, amount, to)

    def get_admin(self) -> str | None:
        return admin.get_admin(self.state)

    def is_paused(self) -> bool:
        return admin.is_paused(self.state)

    def get_fee_bps(self) -> int:
        return admin.get_fee_bps(self.state)

    # ----- giveaways -----
    def create_giveaway(
        self,
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
        return giveaway.create_giveaway(
            self.state,
            creator,
            token,
            amount,
            title,
            duration,
            description=description,
            category=category,
            selection_method=selection_method,
            winner_count=winner_count,
        )

    def enter_giveaway(
        self, participant: str, giveaway_id: int, content: str = ""
    ) -> int:
        return giveaway.enter_giveaway(self.state, participant, giveaway_id, content)

    def pick_winner(self, giveaway_id: int) -> str:
        return giveaway.pick_winner(self.state, giveaway_id)

    def select_winner(self, creator: str, giveaway_id: int, index: int) -> str:
        return giveaway.select_winner(self.state, creator, giveaway_id, index)

    def distribute_prize(self, giveaway_id: int) -> None:
        giveaway.distribute_prize(self.state, giveaway_id)

    def claim_prize(self, giveaway_id: int, claimer: str) -> bool:
        return giveaway.claim_prize(self.state, giveaway_id, claimer)

    def cancel_giveaway(self, creator: str, giveaway_id: int) -> None:
        giveaway.cancel_giveaway(self.state, creator, giveaway_id)

    def get_giveaway(self, giveaway_id: int) -> Giveaway | None:
        return giveaway.get_giveaway(self.state, giveaway_id)

    def get_participant_at_index(self, giveaway_id: int, index: int) -> str | None:
        return giveaway.get_participant_at_index(self.state, giveaway_id, index)

    def get_entry(self, entry_id: int) -> Entry | None:
        return giveaway.get_entry(self.state, entry_id)

    def has_entered(self, giveaway_id: int, participant: str) -> bool:
        return giveaway.has_entered(self.state, giveaway_id, participant)

    def get_giveaway_count(self) -> int:
        return giveaway.get_giveaway_count(self.state)

    # ----- mutual aid -----
    def create_help_request(
        self,
        creator: str,
        token: str,
        goal: int,
        *,
        title: str = "",
        description: str = "",
    ) -> int:
        return mutual_aid.create_help_request(
            self.state, creator, token, goal, title=title, description=description
        )

    def donate(self, donor: str, request_id: int, amount: int) -> None:
        mutual_aid.donate(self.state, donor, request_id, amount)

    def cancel_request(self, creator: str, request_id: int) -> None:
        mutual_aid.cancel_request(self.state, creator, request_id)

    def claim_refund(self, donor: str, request_id: int) -> int:
        return mutual_aid.claim_refund(self.state, donor, request_id)

    def withdraw_raised(self, creator: str, request_id: int) -> int:
        return mutual_aid.withdraw_raised(self.state, creator, request_id)

    def get_help_request(self, request_id: int) -> HelpRequest | None:
        return mutual_aid.get_help_request(self.state, request_id)

    def get_donation(self, request_id: int, donor: str) -> int:
        return mutual_aid.get_donation(self.state, request_id, donor)

    def get_help_request_count(self) -> int:
        return mutual_aid.get_help_request_count(self.state)
