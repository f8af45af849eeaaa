"""Capability contracts the query harness is generic over."""

from __future__ import annotations

from typing import Any, Awaitable, Dict, List, Optional, Protocol, Sequence, Union

from .capture import ColumnInfo
from .types import DataTable, QueryDescriptor


class Opener(Protocol):
    """Produces a new open connection owned by one execution."""

    def __call__(self) -> Any: ...


class AsyncOpener(Protocol):
    """Produces a new connection, directly or as an awaitable."""

    def __call__(self) -> Union[Any, Awaitable[Any]]: ...


class ResultReader(Protocol):
    """Forward-only cursor over one result set."""

    columns: List[ColumnInfo]

    def read(self) -> Optional[Sequence[Any]]: ...

    def close(self) -> None: ...


class BoundCommand(Protocol):
    """Statement bound to a connection, ready to execute."""

    def execute_reader(self) -> ResultReader: ...

    def execute_non_query(self) -> int: ...

    def output_values(self) -> Dict[str, Any]: ...

    def close(self) -> None: ...


class CommandBuilder(Protocol):
    """Binds a query descriptor to a connection."""

    def build(self, connection: Any, query: QueryDescriptor) -> BoundCommand: ...


class TableFiller(Protocol):
    """Materializes a full result set from a bound command."""

    def fill(self, command: BoundCommand, name: Optional[str]) -> DataTable: ...


class AsyncResultReader(Protocol):
    """Async forward-only cursor over one result set."""

    columns: List[ColumnInfo]

    async def read(self) -> Optional[Sequence[Any]]: ...

    async def close(self) -> None: ...


class AsyncBoundCommand(Protocol):
    """Async statement bound to a connection."""

    async def execute_reader(self) -> AsyncResultReader: ...

    async def execute_non_query(self) -> int: ...

    def output_values(self) -> Dict[str, Any]: ...

    async def close(self) -> None: ...


class AsyncCommandBuilder(Protocol):
    """Binds a query descriptor to an async (or sync) connection."""

    async def build(self, connection: Any, query: QueryDescriptor) -> AsyncBoundCommand: ...


class AsyncTableFiller(Protocol):
    """Async full result set materialization."""

    async def fill(self, command: AsyncBoundCommand, name: Optional[str]) -> DataTable: ...
