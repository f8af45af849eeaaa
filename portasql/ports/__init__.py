"""Public port exports for concrete adapter implementations."""

from .db_api import (
    AsyncDbApiCommandBuilder,
    AsyncDbApiTableFiller,
    DbApiCommandBuilder,
    DbApiTableFiller,
)

__all__ = [
    "AsyncDbApiCommandBuilder",
    "AsyncDbApiTableFiller",
    "DbApiCommandBuilder",
    "DbApiTableFiller",
]
