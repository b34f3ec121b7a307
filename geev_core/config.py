"""Environment configuration for hosting the contract core."""

from __future__ import annotations

import os
from dataclasses import dataclass

from .state import DEFAULT_CONTRACT_ADDRESS

_BACKENDS = {"memory", "dynamodb"}


def env_str(name: str, *, default: str | None = None) -> str | None:
    raw = os.getenv(name)
    if raw is None:
        return default
    value = raw.strip()
    return value or default


@dataclass(frozen=True)
class GeevConfig:
    store_backend: str = "memory"
    table_name: str | None = None
    instance_table_name: str | None = None
    aws_region: str = "us-east-1"
    contract_address: str = DEFAULT_CONTRACT_ADDRESS
    log_level: str = "INFO"


def read_config() -> GeevConfig:
    backend = (env_str("GEEV_STORE_BACKEND") or "memory").lower()
    if backend not in _BACKENDS:
        raise RuntimeError(
            f"GEEV_STORE_BACKEND must be one of {sorted(_BACKENDS)}, got {backend!r}"
        )
    return GeevConfig(
        store_backend=backend,
        table_name=env_str("GEEV_TABLE_NAME"),
        instance_table_name=env_str("GEEV_INSTANCE_TABLE_NAME"),
        aws_region=env_str("AWS_REGION") or "us-east-1",
        contract_address=env_str("GEEV_CONTRACT_ADDRESS") or DEFAULT_CONTRACT_ADDRESS,
        log_level=(env_str("GEEV_LOG_LEVEL") or "INFO").upper(),
    )


__all__ = ["GeevConfig", "env_str", "read_config"]
