"""DB-API 2.0 implementation of the harness command capabilities."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

from ...core.capture import ColumnInfo, columns_from_description
from ...core.exceptions import UnsupportedOperationError
from ...core.parameters import Parameter
from ...core.types import CommandKind, DataTable, QueryDescriptor, QueryParams

logger = logging.getLogger(__name__)


def bind_parameters(parameters: Sequence[Parameter], paramstyle: str) -> QueryParams:
    """Convert parameter descriptors to DB-API execute arguments.

    Named styles produce a dict keyed by the parameter name without any
    leading `@` or `:`; positional styles produce a list in order.
    """

    if not parameters:
        return None
    if paramstyle in ("named", "pyformat"):
        return {p.name.lstrip("@:"): p.bind_value for p in parameters}
    if paramstyle in ("qmark", "format", "numeric"):
        return [p.bind_value for p in parameters]
    raise ValueError(f"Unsupported paramstyle: {paramstyle}")


def command_text(query: QueryDescriptor) -> str:
    """SQL text sent to `cursor.execute` for text and table-direct kinds."""

    if query.command_kind is CommandKind.TABLE_DIRECT:
        return f"SELECT * FROM {query.statement}"
    return query.statement


def apply_timeout(cursor: Any, connection: Any, timeout: Optional[float]) -> None:
    """Pass a command timeout to whichever driver knob is available."""

    if timeout is None:
        return
    if hasattr(cursor, "timeout"):
        cursor.timeout = timeout
    elif hasattr(connection, "call_timeout"):
        connection.call_timeout = int(timeout * 1000)
    elif hasattr(connection, "timeout"):
        connection.timeout = timeout
    else:
        logger.debug("Driver exposes no command timeout; %ss not applied", timeout)


def collect_outputs(query: QueryDescriptor, returned: Optional[Sequence[Any]]) -> Dict[str, Any]:
    """Map output parameters to their values after execution.

    `returned` is the sequence `callproc` hands back, where drivers place
    output values at the parameter's position. Bind variables exposing
    `getvalue()` are read through it.
    """

    outputs: Dict[str, Any] = {}
    for index, parameter in enumerate(query.parameters):
        if not parameter.is_output:
            continue
        if returned is not None and index < len(returned):
            value = returned[index]
        else:
            value = parameter.value
        getvalue = getattr(value, "getvalue", None)
        if callable(getvalue):
            value = getvalue()
        outputs[parameter.name] = value
    return outputs


class DbApiReader:
    """`ResultReader` over a DB-API cursor."""

    def __init__(self, cursor: Any):
        self.cursor = cursor
        self.columns: List[ColumnInfo] = columns_from_description(
            getattr(cursor, "description", None)
        )
        self.closed = False

    def read(self) -> Optional[Sequence[Any]]:
        """Return the next row, or `None` when the result is exhausted."""

        if not self.columns:
            return None
        return self.cursor.fetchone()

    def __iter__(self):
        while True:
            row = self.read()
            if row is None:
                return
            yield row

    def close(self) -> None:
        # the cursor itself belongs to the command
        self.closed = True


class DbApiCommand:
    """`BoundCommand` executing through one DB-API cursor."""

    def __init__(self, connection: Any, query: QueryDescriptor, paramstyle: str):
        self.connection = connection
        self.query = query
        self.paramstyle = paramstyle
        self.cursor: Any = None
        self._returned: Optional[Sequence[Any]] = None

    def _execute(self) -> Any:
        cur = self.connection.cursor()
        self.cursor = cur
        apply_timeout(cur, self.connection, self.query.timeout)
        if self.query.command_kind is CommandKind.STORED_PROCEDURE:
            if not hasattr(cur, "callproc"):
                raise UnsupportedOperationError(
                    "Driver cursor has no callproc; stored procedures are unavailable."
                )
            args = [p.bind_value for p in self.query.parameters]
            logger.debug("Calling procedure %s with %d argument(s)", self.query.statement, len(args))
            self._returned = cur.callproc(self.query.statement, args)
            return cur
        sql = command_text(self.query)
        params = bind_parameters(self.query.parameters, self.paramstyle)
        logger.debug("Executing %s: %s", self.query.command_kind.value, sql)
        if params is None:
            cur.execute(sql)
        else:
            cur.execute(sql, params)
        return cur

    def execute_reader(self) -> DbApiReader:
        """Execute and return a reader over the first result set."""

        return DbApiReader(self._execute())

    def execute_non_query(self) -> int:
        """Execute and return the driver-reported affected row count."""

        cur = self._execute()
        return getattr(cur, "rowcount", -1)

    def output_values(self) -> Dict[str, Any]:
        return collect_outputs(self.query, self._returned)

    def close(self) -> None:
        cur, self.cursor = self.cursor, None
        if cur is None:
            return
        close = getattr(cur, "close", None)
        if callable(close):
            close()


class DbApiCommandBuilder:
    """`CommandBuilder` for DB-API 2.0 connections.

    DB-API transactions are scoped to the connection, so an external
    transaction handle on the query needs no per-command binding here.
    """

    def __init__(self, paramstyle: str = "named"):
        self.paramstyle = paramstyle

    def build(self, connection: Any, query: QueryDescriptor) -> DbApiCommand:
        return DbApiCommand(connection, query, self.paramstyle)


class DbApiTableFiller:
    """`TableFiller` buffering every row of the first result set."""

    def fill(self, command: DbApiCommand, name: Optional[str]) -> DataTable:
        reader = command.execute_reader()
        try:
            rows = [tuple(row) for row in reader]
        finally:
            reader.close()
        return DataTable(name=name, columns=list(reader.columns), rows=rows)
