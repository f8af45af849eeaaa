"""Query harness: binds a statement to a connection and shapes its results.

A `Query` either owns its connections (built with an `opener`, opened and
closed around every output call) or borrows one (built with `connection`,
never closed here). Driver failures propagate unchanged; commands, readers,
and owned connections are released on every exit path.
"""

from __future__ import annotations

import contextlib
import logging
from dataclasses import is_dataclass
from typing import Any, Iterator, List, Optional, Sequence, Type, TypeVar, Union

from .capture import ColumnInfo, DbCapture
from .contracts import BoundCommand, CommandBuilder, Opener, ResultReader, TableFiller
from .exceptions import UnsupportedOperationError, ValidationError
from .parameters import Parameter
from .row_parser import RowParser, RowView
from .settings import QuerySettings, get_settings
from .text import AutoTruncate, normalize_db_value, normalize_row
from .types import CommandKind, DataTable, QueryDescriptor

logger = logging.getLogger(__name__)

T = TypeVar("T")

ParserInput = Union[RowParser[T], Type[T]]


def build_descriptor(
    statement: str,
    *,
    connection: Any,
    opener: Any,
    command_kind: CommandKind,
    parameters: Optional[Sequence[Parameter]],
    timeout: Optional[float],
    transaction: Any,
    capture: Optional[DbCapture],
    auto_truncate: Optional[AutoTruncate],
    settings: QuerySettings,
) -> QueryDescriptor:
    """Validate harness inputs and build the query descriptor."""

    if (connection is None) == (opener is None):
        raise ValidationError("Provide exactly one of 'connection' or 'opener'.")
    if transaction is not None and connection is None:
        raise ValidationError("A transaction requires an externally supplied connection.")
    if not isinstance(statement, str) or not statement.strip():
        raise ValidationError("Statement must be a non-blank string.")
    params = tuple(parameters or ())
    for parameter in params:
        if not isinstance(parameter, Parameter):
            raise TypeError("Query parameters must be Parameter instances.")
    return QueryDescriptor(
        statement=statement,
        command_kind=CommandKind(command_kind),
        parameters=params,
        timeout=timeout if timeout is not None else settings.command_timeout,
        transaction=transaction,
        capture=capture,
        auto_truncate=AutoTruncate(auto_truncate) if auto_truncate is not None else settings.auto_truncate,
    )


def coerce_parser(parser: ParserInput) -> RowParser[Any]:
    """Accept a `RowParser` or a dataclass type (mapped automatically)."""

    if isinstance(parser, RowParser):
        return parser
    if isinstance(parser, type) and is_dataclass(parser):
        return RowParser.auto(parser)
    raise TypeError("Expected a RowParser or a dataclass type.")


def table_name(query: QueryDescriptor) -> Optional[str]:
    """Result table name: the target for procedure and table-direct kinds."""

    if query.command_kind in (CommandKind.STORED_PROCEDURE, CommandKind.TABLE_DIRECT):
        return query.statement
    return None


def row_payload(parser: RowParser[Any], view: RowView, policy: AutoTruncate) -> Any:
    """Payload handed to the parser function for the row held by `view`."""

    if parser.is_cursor_parser:
        return view
    return normalize_row(view.values, policy)


def table_policy(query: QueryDescriptor) -> AutoTruncate:
    """String policy for `as_table`; only `NONE` and `TRIM` apply to tables."""

    policy = query.auto_truncate
    if policy in (AutoTruncate.ZAP, AutoTruncate.ZAP_EMPTY_ONLY):
        raise UnsupportedOperationError(
            f"Auto-truncate policy {policy.value!r} does not work on data tables.",
            details={"policy": policy.value},
        )
    return policy


def trim_table(table: DataTable, policy: AutoTruncate) -> DataTable:
    if policy is AutoTruncate.TRIM:
        table.rows = [
            tuple(value.strip() if isinstance(value, str) else value for value in row)
            for row in table.rows
        ]
    return table


def record_capture(query: QueryDescriptor, columns: Sequence[ColumnInfo], command: Any) -> None:
    if query.capture is not None:
        query.capture.record(columns, command.output_values())


class LiveCursor:
    """Open result handed to the caller by `Query.as_cursor`.

    Closing it releases the reader and command, and the owned connection
    unless the query was asked to keep it open. Borrowed connections are
    never closed.
    """

    def __init__(
        self,
        reader: ResultReader,
        command: BoundCommand,
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

    def read(self) -> Optional[Sequence[Any]]:
        return self.reader.read()

    def __iter__(self) -> Iterator[Sequence[Any]]:
        while True:
            row = self.read()
            if row is None:
                return
            yield row

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        try:
            self.reader.close()
        finally:
            try:
                self.command.close()
            finally:
                if self.close_connection:
                    logger.debug("Closing owned connection with live cursor")
                    self.connection.close()

    def __enter__(self) -> LiveCursor:
        return self

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        self.close()


class Query:
    """Synchronous query harness.

    Example:
        ```python
        query = Query("SELECT name FROM people", opener=lambda: sqlite3.connect(path))
        names = query.as_collection(RowParser.scalar_str())
        ```
    """

    def __init__(
        self,
        statement: str,
        *,
        connection: Any = None,
        opener: Optional[Opener] = None,
        command_kind: CommandKind = CommandKind.TEXT,
        parameters: Optional[Sequence[Parameter]] = None,
        timeout: Optional[float] = None,
        transaction: Any = None,
        capture: Optional[DbCapture] = None,
        auto_truncate: Optional[AutoTruncate] = None,
        command_builder: Optional[CommandBuilder] = None,
        table_filler: Optional[TableFiller] = None,
        settings: Optional[QuerySettings] = None,
    ):
        """Create a query harness.

        Args:
            statement: SQL text, procedure name, or table name.
            connection: Open connection borrowed from the caller.
            opener: Callable producing a connection owned by each call.
            command_kind: How `statement` is interpreted.
            parameters: Parameters bound to the command.
            timeout: Command timeout in seconds; defaults from settings.
            transaction: External transaction handle (borrowed connections only).
            capture: Receives column descriptors and output parameter values.
            auto_truncate: String policy for object rows and scalars;
                defaults from settings.
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
            from ..ports.db_api.command import DbApiCommandBuilder, DbApiTableFiller

            command_builder = command_builder or DbApiCommandBuilder(settings.paramstyle)
            table_filler = table_filler or DbApiTableFiller()
        self.command_builder = command_builder
        self.table_filler = table_filler

    @property
    def owns_connection(self) -> bool:
        return self.opener is not None

    def _acquire(self) -> Any:
        if self.opener is None:
            return self.connection
        logger.debug("Opening owned connection")
        return self.opener()

    def _release(self, conn: Any) -> None:
        if self.opener is None:
            return
        logger.debug("Closing owned connection")
        conn.close()

    @contextlib.contextmanager
    def _command(self) -> Iterator[BoundCommand]:
        conn = self._acquire()
        try:
            command = self.command_builder.build(conn, self.query)
            try:
                yield command
            finally:
                command.close()
        finally:
            self._release(conn)

    @contextlib.contextmanager
    def _reader(self) -> Iterator[ResultReader]:
        with self._command() as command:
            reader = command.execute_reader()
            try:
                record_capture(self.query, reader.columns, command)
                yield reader
            finally:
                reader.close()

    def as_collection(self, parser: ParserInput[T]) -> List[T]:
        """Execute and map every row through a row parser.

        Args:
            parser: A `RowParser`, or a dataclass type mapped automatically.

        Returns:
            Parsed rows in cursor order.
        """

        row_parser = coerce_parser(parser)
        func = row_parser.bind()
        policy = self.query.auto_truncate
        results: List[T] = []
        with self._reader() as reader:
            view = RowView(reader.columns)
            while True:
                row = reader.read()
                if row is None:
                    break
                view.values = row
                results.append(func(row_payload(row_parser, view, policy)))
        return results

    def as_objects(self) -> List[List[Any]]:
        """Execute and return each row as a list of normalized values."""

        policy = self.query.auto_truncate
        rows: List[List[Any]] = []
        with self._reader() as reader:
            while True:
                row = reader.read()
                if row is None:
                    break
                rows.append(normalize_row(row, policy))
        return rows

    def as_table(self) -> DataTable:
        """Execute and buffer the full result into a `DataTable`."""

        policy = table_policy(self.query)
        with self._command() as command:
            table = self.table_filler.fill(command, table_name(self.query))
            record_capture(self.query, table.columns, command)
        return trim_table(table, policy)

    def as_cursor(self, *, keep_open: bool = False) -> LiveCursor:
        """Execute and hand the open result to the caller.

        Args:
            keep_open: Leave an owned connection open after the cursor
                closes; the caller then closes `cursor.connection`.

        Returns:
            A `LiveCursor` the caller must close (or use as a context manager).
        """

        conn = self._acquire()
        command: Optional[BoundCommand] = None
        try:
            command = self.command_builder.build(conn, self.query)
            reader = command.execute_reader()
        except BaseException:
            try:
                if command is not None:
                    command.close()
            finally:
                self._release(conn)
            raise
        try:
            record_capture(self.query, reader.columns, command)
        except BaseException:
            LiveCursor(reader, command, conn, close_connection=self.owns_connection).close()
            raise
        return LiveCursor(
            reader,
            command,
            conn,
            close_connection=self.owns_connection and not keep_open,
        )

    def as_scalar(self) -> Any:
        """Execute and return the first column of the first row (or `None`)."""

        with self._reader() as reader:
            row = reader.read()
        if row is None or len(row) == 0:
            return None
        return normalize_db_value(row[0], self.query.auto_truncate)

    def execute(self) -> int:
        """Execute a non-query and return the affected row count."""

        with self._command() as command:
            count = command.execute_non_query()
            record_capture(self.query, [], command)
            return count
