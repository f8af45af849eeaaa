"""Closed set of SQL dialects used to select rendering rules."""

from __future__ import annotations

from enum import Enum
from typing import Any

from .exceptions import UnsupportedProviderError


class Provider(str, Enum):
    """Supported SQL dialect tags."""

    NEUTRAL = "neutral"
    SQL_SERVER = "sqlserver"
    ORACLE = "oracle"


_ALIASES = {
    "neutral": Provider.NEUTRAL,
    "sqlserver": Provider.SQL_SERVER,
    "sql_server": Provider.SQL_SERVER,
    "mssql": Provider.SQL_SERVER,
    "oracle": Provider.ORACLE,
}


def coerce_provider(value: Any) -> Provider:
    """Normalize a provider or its case-insensitive string alias.

    Raises:
        UnsupportedProviderError: If the value names no known provider.
    """

    if isinstance(value, Provider):
        return value
    if isinstance(value, str):
        provider = _ALIASES.get(value.strip().lower())
        if provider is not None:
            return provider
    raise UnsupportedProviderError(value, tuple(Provider))
