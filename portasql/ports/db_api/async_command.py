"""Async DB-API implementation of the harness command capabilities.

Works with natively async drivers and with plain sync DB-API connections:
every driver call result goes through `_maybe_await`.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

from ...core._async_utils import _aclose, _maybe_await
from ...core.capture import ColumnInfo, columns_from_description
from ...core.exceptions import UnsupportedOperationError
from ...core.types import CommandKind, DataTable, QueryDescriptor
from .command import apply_timeout, bind_parameters, collect_outputs, command_text

logger = logging.getLogger(__name__)


class AsyncDbApiReader:
    """`AsyncResultReader` over an async (or sync) DB-API cursor."""

    def __init__(self, cursor: Any):
        self.cursor = cursor
        self.columns: List[ColumnInfo] = columns_from_description(
            getattr(cursor, "description", None)
        )
        self.closed = False

    async def read(self) -> Optional[Sequence[Any]]:
        """Return the next row, or `None` when the result is exhausted."""

        if not self.columns:
            return None
        return await _maybe_await(self.cursor.fetchone())

    def __aiter__(self):
        return self._rows()

    async def _rows(self):
        while True:
            row = await self.read()
            if row is None:
                return
            yield row

    async def close(self) -> None:
        self.closed = True


class AsyncDbApiCommand:
    """`AsyncBoundCommand` executing through one cursor."""

    def __init__(self, connection: Any, query: QueryDescriptor, paramstyle: str):
        self.connection = connection
        self.query = query
        self.paramstyle = paramstyle
        self.cursor: Any = None
        self._returned: Optional[Sequence[Any]] = None

    async def _execute(self) -> Any:
        cur = await _maybe_await(self.connection.cursor())
        self.cursor = cur
        apply_timeout(cur, self.connection, self.query.timeout)
        if self.query.command_kind is CommandKind.STORED_PROCEDURE:
            if not hasattr(cur, "callproc"):
                raise UnsupportedOperationError(
                    "Driver cursor has no callproc; stored procedures are unavailable."
                )
            args = [p.bind_value for p in self.query.parameters]
            logger.debug("Calling procedure %s with %d argument(s)", self.query.statement, len(args))
            self._returned = await _maybe_await(cur.callproc(self.query.statement, args))
            return cur
        sql = command_text(self.query)
        params = bind_parameters(self.query.parameters, self.paramstyle)
        logger.debug("Executing %s: %s", self.query.command_kind.value, sql)
        if params is None:
            await _maybe_await(cur.execute(sql))
        else:
            await _maybe_await(cur.execute(sql, params))
        return cur

    async def execute_reader(self) -> AsyncDbApiReader:
        """Execute and return a reader over the first result set."""

        return AsyncDbApiReader(await self._execute())

    async def execute_non_query(self) -> int:
        """Execute and return the driver-reported affected row count."""

        cur = await self._execute()
        return getattr(cur, "rowcount", -1)

    def output_values(self) -> Dict[str, Any]:
        return collect_outputs(self.query, self._returned)

    async def close(self) -> None:
        cur, self.cursor = self.cursor, None
        if cur is not None:
            await _aclose(cur)


class AsyncDbApiCommandBuilder:
    """`AsyncCommandBuilder` for async or sync DB-API connections."""

    def __init__(self, paramstyle: str = "named"):
        self.paramstyle = paramstyle

    async def build(self, connection: Any, query: QueryDescriptor) -> AsyncDbApiCommand:
        return AsyncDbApiCommand(connection, query, self.paramstyle)


class AsyncDbApiTableFiller:
    """`AsyncTableFiller` buffering every row of the first result set."""

    async def fill(self, command: AsyncDbApiCommand, name: Optional[str]) -> DataTable:
        reader = await command.execute_reader()
        try:
            rows = [tuple(row) async for row in reader]
        finally:
            await reader.close()
        return DataTable(name=name, columns=list(reader.columns), rows=rows)

