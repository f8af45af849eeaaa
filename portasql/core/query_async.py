"""Async query harness mirroring `Query` output shapes.

Every output call accepts an optional `deadline` in seconds. When it
expires the call is cancelled, its resources are released, and
`TimeoutError` is raised. Cancelling the surrounding task releases
resources the same way.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Any, AsyncIterator, Awaitable, List, Optional, Sequence, TypeVar

from ._async_utils import _aclose, _maybe_await
from .capture import ColumnInfo, DbCapture
from .contracts import (
    AsyncBoundCommand,
    AsyncCommandBuilder,
    AsyncOpener,
    AsyncResultReader,
    AsyncTableFiller,
)
from .parameters import Parameter
from .query import (
    ParserInput,
    build_descriptor,
    coerce_parser,
    record_capture,
    row_payload,
    table_name,
    table_policy,
    trim_table,
)
from .row_parser import RowView
from .settings import QuerySettings, get_settings
from .text import AutoTruncate, normalize_db_value, normalize_row
from .types import CommandKind, DataTable

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def _within(deadline: Optional[float], awaitable: Awaitable[T]) -> T:
    if deadline is None:
        return await awaitable
    return await asyncio.wait_for(awaitable, timeout=deadline)


class AsyncLiveCursor:
    """Open async result handed to the caller by `AsyncQuery.as_cursor`."""

    def __init__(
        self,
        reader: AsyncResultReader,
        command: AsyncBoundCommand,
        connection: Any,
        *,
        close_connection: bool,
    ):
        self.reader = reader
        self.command = command
        self.connection = connection
        self.close_connection = close_connection
        self.closed = False

    @property
    def columns(self) -> List[ColumnInfo]:
        return self.reader.columns

    async def read(self) -> Optional[Sequence[Any]]:
        return await self.reader.read()

    def __aiter__(self):
        return self._rows()

    async def _rows(self):
        while True:
            row = await self.read()
            if row is None:
                return
            yield row

    async def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        try:
            await self.reader.close()
        finally:
            try:
                await self.command.close()
            finally:
                if self.close_connection:
                    logger.debug("Closing owned connection with live cursor")
                    await _aclose(self.connection)

    async def __aenter__(self) -> AsyncLiveCursor:
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        await self.close()


class AsyncQuery:
    """Asynchronous query harness.

    Accepts natively async drivers and plain sync DB-API connections; driver
    calls that return awaitables are awaited.
    """

    def __init__(
        self,
        statement: str,
        *,
        connection: Any = None,
        opener: Optional[AsyncOpener] = None,
        command_kind: CommandKind = CommandKind.TEXT,
        parameters: Optional[Sequence[Parameter]] = None,
        timeout: Optional[float] = None,
        transaction: Any = None,
        capture: Optional[DbCapture] = None,
        auto_truncate: Optional[AutoTruncate] = None,
        command_builder: Optional[AsyncCommandBuilder] = None,
        table_filler: Optional[AsyncTableFiller] = None,
        settings: Optional[QuerySettings] = None,
    ):
        """Create an async query harness.

        Args:
            statement: SQL text, procedure name, or table name.
            connection: Open connection borrowed from the caller.
            opener: Callable producing (or awaiting) an owned connection.
            command_kind: How `statement` is interpreted.
            parameters: Parameters bound to the command.
            timeout: Command timeout in seconds passed to the driver.
            transaction: External transaction handle (borrowed connections only).
            capture: Receives column descriptors and output parameter values.
            auto_truncate: String policy for object rows and scalars.
            command_builder: Binds the query to a connection; DB-API by default.
            table_filler: Materializes tables for `as_table`; DB-API by default.
            settings: Defaults source; the process settings when omitted.
        """

        settings = settings or get_settings()
        self.query = build_descriptor(
            statement,
            connection=connection,
            opener=opener,
            command_kind=command_kind,
            parameters=parameters,
            timeout=timeout,
            transaction=transaction,
            capture=capture,
            auto_truncate=auto_truncate,
            settings=settings,
        )
        self.connection = connection
        self.opener = opener
        if command_builder is None or table_filler is None:
            from ..ports.db_api.async_command import AsyncDbApiCommandBuilder, AsyncDbApiTableFiller

            command_builder = command_builder or AsyncDbApiCommandBuilder(settings.paramstyle)
            table_filler = table_filler or AsyncDbApiTableFiller()
        self.command_builder = command_builder
        self.table_filler = table_filler

    @property
    def owns_connection(self) -> bool:
        return self.opener is not None

    async def _acquire(self) -> Any:
        if self.opener is None:
            return self.connection
        logger.debug("Opening owned connection")
        return await _maybe_await(self.opener())

    async def _release(self, conn: Any) -> None:
        if self.opener is None:
            return
        logger.debug("Closing owned connection")
        await _aclose(conn)

    @contextlib.asynccontextmanager
    async def _command(self) -> AsyncIterator[AsyncBoundCommand]:
        conn = await self._acquire()
        try:
            command = await self.command_builder.build(conn, self.query)
            try:
                yield command
            finally:
                await command.close()
        finally:
            await self._release(conn)

    @contextlib.asynccontextmanager
    async def _reader(self) -> AsyncIterator[AsyncResultReader]:
        async with self._command() as command:
            reader = await command.execute_reader()
            try:
                record_capture(self.query, reader.columns, command)
                yield reader
            finally:
                await reader.close()

    async def as_collection(self, parser: ParserInput[T], *, deadline: Optional[float] = None) -> List[T]:
        """Execute and map every row through a row parser.

        Args:
            parser: A `RowParser`, or a dataclass type mapped automatically.
            deadline: Optional limit in seconds for the whole call.
        """

        row_parser = coerce_parser(parser)

        async def run() -> List[T]:
            func = row_parser.bind()
            policy = self.query.auto_truncate
            results: List[T] = []
            async with self._reader() as reader:
                view = RowView(reader.columns)
                while True:
                    row = await reader.read()
                    if row is None:
                        break
                    view.values = row
                    results.append(func(row_payload(row_parser, view, policy)))
            return results

        return await _within(deadline, run())

    async def as_objects(self, *, deadline: Optional[float] = None) -> List[List[Any]]:
        """Execute and return each row as a list of normalized values."""

        async def run() -> List[List[Any]]:
            policy = self.query.auto_truncate
            rows: List[List[Any]] = []
            async with self._reader() as reader:
                while True:
                    row = await reader.read()
                    if row is None:
                        break
                    rows.append(normalize_row(row, policy))
            return rows

        return await _within(deadline, run())

    async def as_table(self, *, deadline: Optional[float] = None) -> DataTable:
        """Execute and buffer the full result into a `DataTable`."""

        policy = table_policy(self.query)

        async def run() -> DataTable:
            async with self._command() as command:
                table = await self.table_filler.fill(command, table_name(self.query))
                record_capture(self.query, table.columns, command)
            return trim_table(table, policy)

        return await _within(deadline, run())

    async def as_cursor(self, *, keep_open: bool = False, deadline: Optional[float] = None) -> AsyncLiveCursor:
        """Execute and hand the open result to the caller.

        Args:
            keep_open: Leave an owned connection open after the cursor closes.
            deadline: Optional limit in seconds for opening the result.
        """

        async def run() -> AsyncLiveCursor:
            conn = await self._acquire()
            command: Optional[AsyncBoundCommand] = None
            try:
                command = await self.command_builder.build(conn, self.query)
                reader = await command.execute_reader()
            except BaseException:
                try:
                    if command is not None:
                        await command.close()
                finally:
                    await self._release(conn)
                raise
            try:
                record_capture(self.query, reader.columns, command)
            except BaseException:
                await AsyncLiveCursor(
                    reader, command, conn, close_connection=self.owns_connection
                ).close()
                raise
            return AsyncLiveCursor(
                reader,
                command,
                conn,
                close_connection=self.owns_connection and not keep_open,
            )

        return await _within(deadline, run())

    async def as_scalar(self, *, deadline: Optional[float] = None) -> Any:
        """Execute and return the first column of the first row (or `None`)."""

        async def run() -> Any:
            async with self._reader() as reader:
                row = await reader.read()
            if row is None or len(row) == 0:
                return None
            return normalize_db_value(row[0], self.query.auto_truncate)

        return await _within(deadline, run())

    async def execute(self, *, deadline: Optional[float] = None) -> int:
        """Execute a non-query and return the affected row count."""

        async def run() -> int:
            async with self._command() as command:
                count = await command.execute_non_query()
                record_capture(self.query, [], command)
                return count

        return await _within(deadline, run())
