from __future__ import annotations

import logging
from typing import Final

import boto3

from .config import GeevConfig
from .storage import DynamoStore, InMemoryStore, Store

log: Final = logging.getLogger("geev-core.store")


def build_store(config: GeevConfig) -> Store:
    """Return the store selected by ``config.store_backend``."""
    if config.store_backend == "memory":
        return InMemoryStore()

    if not config.table_name:
        raise RuntimeError("GEEV_TABLE_NAME is required for the dynamodb backend")

    dynamodb = boto3.resource("dynamodb", region_name=config.aws_region)
    table = dynamodb.Table(config.table_name)
    instance_table = (
        dynamodb.Table(config.instance_table_name)
        if config.instance_table_name
        else None
    )
    log.info(
        "Using DynamoDB table %s (instance tier: %s) in %s",
        config.table_name,
        config.instance_table_name or config.table_name,
        config.aws_region,
    )
    return DynamoStore(table, instance_table)
