from __future__ import annotations

import copy
import logging
from collections.abc import Iterable
from typing import Final, Protocol

from boto3.dynamodb.types import TypeSerializer
from botocore.exceptions import ClientError

from .models import DataKey, StorageTier

log: Final = logging.getLogger("geev-core.store")

Item = dict[str, object]

MAX_TRANSACTION_ITEMS: Final[int] = 100

_serializer = TypeSerializer()


class Store(Protocol):
    """Key/value store backing the contract state."""

    def get(self, key: DataKey) -> Item | None: ...

    def set(self, key: DataKey, value: Item) -> None: ...

    def has(self, key: DataKey) -> bool: ...

    def write_many(self, writes: Iterable[tuple[DataKey, Item]]) -> None: ...


def _with_key(key: DataKey, value: Item) -> Item:
    item = dict(value)
    item.update(key.to_key())
    return item


class InMemoryStore:
    """Dictionary-backed store, one bucket per retention tier."""

    def __init__(self) -> None:
        self._tiers: dict[StorageTier, dict[tuple[str, str], Item]] = {
            tier: {} for tier in StorageTier
        }

    def get(self, key: DataKey) -> Item | None:
        item = self._tiers[key.tier].get((key.pk, key.sk))
        if item is None:
            return None
        return copy.deepcopy(item)

    def set(self, key: DataKey, value: Item) -> None:
        self._tiers[key.tier][(key.pk, key.sk)] = copy.deepcopy(_with_key(key, value))

    def has(self, key: DataKey) -> bool:
        return (key.pk, key.sk) in self._tiers[key.tier]

    def write_many(self, writes: Iterable[tuple[DataKey, Item]]) -> None:
        for key, value in writes:
            self.set(key, value)

    def items(self, tier: StorageTier) -> list[Item]:
        bucket = self._tiers[tier]
        return [copy.deepcopy(bucket[k]) for k in sorted(bucket)]


class DynamoStore:
    """Store backed by DynamoDB tables using the ``pk``/``sk`` layout.

    The instance tier may live in a separate table; it shares the
    persistent table when none is given.
    """

    def __init__(self, table, instance_table=None) -> None:
        self._table = table
        self._instance_table = instance_table if instance_table is not None else table

    def ensure_table(self) -> None:
        if self._table is None:
            raise RuntimeError("Contract table is not configured")

    def _table_for(self, key: DataKey):
        if key.tier is StorageTier.INSTANCE:
            return self._instance_table
        return self._table

    def get(self, key: DataKey) -> Item | None:
        self.ensure_table()
        resp = self._table_for(key).get_item(Key=key.to_key(), ConsistentRead=True)
        item = resp.get("Item")
        if not item:
            return None
        return item

    def set(self, key: DataKey, value: Item) -> None:
        self.ensure_table()
        self._table_for(key).put_item(Item=_with_key(key, value))

    def has(self, key: DataKey) -> bool:
        return self.get(key) is not None

    def write_many(self, writes: Iterable[tuple[DataKey, Item]]) -> None:
        """Write every item in one DynamoDB transaction, across both tables."""
        self.ensure_table()
        actions = [
            {
                "Put": {
                    "TableName": self._table_for(key).name,
                    "Item": {
                        name: _serializer.serialize(attr)
                        for name, attr in _with_key(key, value).items()
                    },
                }
            }
            for key, value in writes
        ]
        if not actions:
            return
        if len(actions) > MAX_TRANSACTION_ITEMS:
            raise RuntimeError(
                f"{len(actions)} writes exceed the {MAX_TRANSACTION_ITEMS}-item "
                "DynamoDB transaction limit"
            )
        try:
            self._table.meta.client.transact_write_items(TransactItems=actions)
        except ClientError as exc:
            log.exception("Failed to commit %s contract items: %s", len(actions), exc)
            raise


class StagedStore:
    """Write buffer over another store.

    Reads see staged writes first. Nothing reaches the backing store until
    :meth:`commit`; :meth:`discard` drops everything staged.
    """

    def __init__(self, backing: Store) -> None:
        self._backing = backing
        self._staged: dict[DataKey, Item] = {}

    @property
    def pending(self) -> int:
        return len(self._staged)

    def get(self, key: DataKey) -> Item | None:
        if key in self._staged:
            return copy.deepcopy(self._staged[key])
        return self._backing.get(key)

    def set(self, key: DataKey, value: Item) -> None:
        self._staged[key] = copy.deepcopy(value)

    def has(self, key: DataKey) -> bool:
        return key in self._staged or self._backing.has(key)

    def write_many(self, writes: Iterable[tuple[DataKey, Item]]) -> None:
        for key, value in writes:
            self.set(key, value)

    def commit(self) -> int:
        count = len(self._staged)
        if count:
            self._backing.write_many(list(self._staged.items()))
        self._staged.clear()
        return count

    def discard(self) -> None:
        self._staged.clear()


__all__ = ["DynamoStore", "InMemoryStore", "Item", "StagedStore", "Store"]
