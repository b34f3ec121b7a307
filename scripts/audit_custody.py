#!/usr/bin/env python3
"""Report what the contract owes per token according to its DynamoDB table.

Scans every ``RECORD`` item and sums, per token, the prizes of giveaways that
still hold them (``Active``/``Claimable``) and the ``raised_amount`` of help
requests that are not ``Closed``. Compare the totals with the custody
account's balances on the ledger.

    python scripts/audit_custody.py --table GeevContract
"""

from __future__ import annotations

import argparse
import logging
from collections import defaultdict
from typing import Any

import boto3

from geev_core.models import Giveaway, HelpRequest

log = logging.getLogger(__name__)


def load_all_items(table) -> list[dict[str, Any]]:
    items: list[dict[str, Any]] = []
    kwargs: dict[str, Any] = {}
    while True:
        resp = table.scan(**kwargs)
        items.extend(resp.get("Items", []))
        last_key = resp.get("LastEvaluatedKey")
        if not last_key:
            break
        kwargs = {"ExclusiveStartKey": last_key}
    return items


def outstanding_by_token(items: list[dict[str, Any]]) -> dict[str, int]:
    owed: dict[str, int] = defaultdict(int)
    for item in items:
        if item.get("sk") != "RECORD":
            continue
        pk = str(item.get("pk", ""))
        if pk.startswith("GIVEAWAY#"):
            giveaway = Giveaway.from_item(item)
            if giveaway.holds_prize():
                owed[giveaway.token] += giveaway.amount
        elif pk.startswith("HELP_REQUEST#"):
            request = HelpRequest.from_item(item)
            if request.holds_funds():
                owed[request.token] += request.raised_amount
    return dict(owed)


def audit_table(table_name: str, *, region: str | None, profile: str | None) -> None:
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    session_kwargs = {"profile_name": profile} if profile else {}
    session = boto3.Session(**session_kwargs)
    table = session.resource("dynamodb", region_name=region).Table(table_name)

    items = load_all_items(table)
    if not items:
        log.info("Table %s is empty; nothing is owed", table_name)
        return

    owed = outstanding_by_token(items)
    log.info("Scanned %s item(s) from %s", len(items), table_name)
    if not owed:
        log.info("No open giveaways or help requests hold funds")
    for token, amount in sorted(owed.items()):
        log.info("%s: %s", token, amount)


def main() -> None:
    parser = argparse.ArgumentParser(description="Sum contract obligations per token")
    parser.add_argument("--table", required=True, help="DynamoDB table name")
    parser.add_argument("--region", default=None, help="AWS region for the table")
    parser.add_argument(
        "--profile",
        default=None,
        help="Optional AWS profile name for boto3",
    )
    args = parser.parse_args()

    audit_table(args.table, region=args.region, profile=args.profile)


if __name__ == "__main__":
    main()
