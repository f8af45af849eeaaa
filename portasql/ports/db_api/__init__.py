"""DB-API command, reader, and table-filler exports."""

from .async_command import (
    AsyncDbApiCommand,
    AsyncDbApiCommandBuilder,
    AsyncDbApiReader,
    AsyncDbApiTableFiller,
)
from .command import (
    DbApiCommand,
    DbApiCommandBuilder,
    DbApiReader,
    DbApiTableFiller,
    bind_parameters,
)

__all__ = [
    "AsyncDbApiCommand",
    "AsyncDbApiCommandBuilder",
    "AsyncDbApiReader",
    "AsyncDbApiTableFiller",
    "DbApiCommand",
    "DbApiCommandBuilder",
    "DbApiReader",
    "DbApiTableFiller",
    "bind_parameters",
]
