from geev_core import (
    DataKey,
    Entry,
    Giveaway,
    GiveawayStatus,
    HelpRequest,
    HelpRequestStatus,
)
from scripts.audit_custody import load_all_items, outstanding_by_token


class FakeTable:
    """Scan-only table that pages its items two at a time."""

    def __init__(self, items) -> None:
        self.items = list(items)
        self.scans = 0

    def scan(self, *, ExclusiveStartKey=None):
        self.scans += 1
        start = 0 if ExclusiveStartKey is None else ExclusiveStartKey["offset"]
        page = self.items[start : start + 2]
        resp = {"Items": page}
        if start + 2 < len(self.items):
            resp["LastEvaluatedKey"] = {"offset": start + 2}
        return resp


def giveaway(giveaway_id, amount, status, token="XLM"):
    return Giveaway(
        id=giveaway_id,
        creator="alice",
        token=token,
        amount=amount,
        end_time=100,
        created_at=0,
        status=status,
        winner=None if status is GiveawayStatus.ACTIVE else "bob",
    ).to_item()


def request(request_id, raised, status, token="XLM"):
    return HelpRequest(
        id=request_id,
        creator="alice",
        token=token,
        goal=1_000,
        created_at=0,
        raised_amount=raised,
        status=status,
    ).to_item()


def test_load_all_items_follows_pagination():
    table = FakeTable([{"pk": f"P{i}", "sk": "RECORD"} for i in range(5)])
    items = load_all_items(table)
    assert [item["pk"] for item in items] == ["P0", "P1", "P2", "P3", "P4"]
    assert table.scans == 3


def test_outstanding_by_token_counts_open_obligations():
    items = [
        giveaway(1, 500, GiveawayStatus.ACTIVE),
        giveaway(2, 200, GiveawayStatus.CLAIMABLE, token="USDC"),
        giveaway(3, 900, GiveawayStatus.COMPLETED),
        giveaway(4, 50, GiveawayStatus.CANCELLED),
        request(1, 300, HelpRequestStatus.OPEN),
        request(2, 1_000, HelpRequestStatus.FULLY_FUNDED, token="USDC"),
        request(3, 120, HelpRequestStatus.CANCELLED),
        request(4, 1_000, HelpRequestStatus.CLOSED),
        Entry(id=1, giveaway_id=1, participant="bob", entry_time=5).to_item(),
        {**DataKey.donation(1, "bob").to_key(), "value": "300"},
        {**DataKey.giveaway_counter().to_key(), "value": 4},
    ]
    assert outstanding_by_token(items) == {"XLM": 920, "USDC": 1_200}


def test_outstanding_by_token_empty():
    assert outstanding_by_token([]) == {}
