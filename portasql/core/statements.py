"""SQL statement builders for SQL Server and Oracle.

Every builder is a pure function of its inputs: values are encoded as
literals with the dialect's rules, so the returned text needs no bound
parameters.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, List, Optional, Sequence, Tuple, Union

from .dialects import Dialect, dialect_for
from .exceptions import ValidationError
from .filters import Filter
from .parameters import Parameter
from .providers import Provider

logger = logging.getLogger(__name__)

ColumnsInput = Union[Mapping[str, Any], Sequence[Union[Parameter, Tuple[str, Any]]]]
WhereInput = Union[Filter, str, None]


def build_insert(provider: Provider, table: str, columns: ColumnsInput) -> str:
    """Build `INSERT INTO T (c1, c2) VALUES (v1, v2)`.

    Oracle statements end with `;`.

    Args:
        provider: Target dialect.
        table: Table name, rendered as given.
        columns: Column/value pairs, `Parameter` objects, or a mapping.

    Returns:
        Insert statement text.
    """

    dialect = dialect_for(provider, operation="insert")
    return _trace("insert", _insert_sql(dialect, table, columns))


def build_insert_and_get_identity(
    provider: Provider,
    table: str,
    columns: ColumnsInput,
    identity_sql: Optional[str] = None,
) -> str:
    """Build an insert followed by a query for the generated identity.

    Args:
        provider: Target dialect.
        table: Table name.
        columns: Column/value pairs, `Parameter` objects, or a mapping.
        identity_sql: Caller-supplied identity query appended instead of the
            dialect's `SELECT <identity>`.

    Returns:
        Combined statement text.
    """

    dialect = dialect_for(provider, operation="insert and get identity")
    statement = _insert_sql(dialect, table, columns)
    if identity_sql:
        statement += " " + identity_sql
    else:
        statement += " " + dialect.terminate(f"SELECT {dialect.identity_expression()}")
    return _trace("insert and get identity", statement)


def build_update(
    provider: Provider,
    table: str,
    columns: ColumnsInput,
    where: WhereInput = None,
) -> str:
    """Build `UPDATE T SET c1 = v1, c2 = v2 [WHERE ...]`."""

    dialect = dialect_for(provider, operation="update")
    target = _require_name(table, "table")
    pairs = _normalize_columns(columns)
    assignments = ", ".join(f"{dialect.q(name)} = {dialect.sqlize(value)}" for name, value in pairs)
    statement = f"UPDATE {target} SET {assignments}" + _where_sql(dialect, where)
    return _trace("update", dialect.terminate(statement))


def build_delete(
    provider: Provider,
    table: str,
    where: WhereInput = None,
    *,
    drop: bool = False,
    purge: bool = False,
) -> str:
    """Build `DELETE FROM T [WHERE ...]`, or the dialect's drop form.

    With `drop`, SQL Server truncates (`TRUNCATE TABLE T`) and Oracle drops
    the table (`DROP TABLE T [PURGE];`). `purge` only affects Oracle.

    Raises:
        ValidationError: If `drop` is combined with a filter.
    """

    dialect = dialect_for(provider, operation="delete")
    target = _require_name(table, "table")
    if drop:
        if where is not None:
            raise ValidationError("Drop/truncate cannot be combined with a filter.")
        return _trace("drop", dialect.drop_table_sql(target, purge=purge))
    statement = f"DELETE FROM {target}" + _where_sql(dialect, where)
    return _trace("delete", dialect.terminate(statement))


def build_function_call(
    provider: Provider,
    function: str,
    args: Optional[Sequence[Any]] = None,
) -> str:
    """Build a table-valued function query.

    SQL Server: `SELECT * FROM fn(v1, v2)`.
    Oracle: `SELECT * FROM TABLE(fn(v1, v2));`.
    """

    dialect = dialect_for(provider, operation="function call")
    name = _require_name(function, "function")
    values = [arg.value if isinstance(arg, Parameter) else arg for arg in (args or ())]
    return _trace(
        "function call",
        dialect.function_call_sql(name, [dialect.sqlize(value) for value in values]),
    )


def _insert_sql(dialect: Dialect, table: str, columns: ColumnsInput) -> str:
    target = _require_name(table, "table")
    pairs = _normalize_columns(columns)
    names = ", ".join(dialect.q(name) for name, _ in pairs)
    values = ", ".join(dialect.sqlize(value) for _, value in pairs)
    return dialect.terminate(f"INSERT INTO {target} ({names}) VALUES ({values})")


def _normalize_columns(columns: ColumnsInput) -> List[Tuple[str, Any]]:
    if columns is None:
        raise ValidationError("Columns are required.")
    if isinstance(columns, Mapping):
        items: Sequence[Any] = list(columns.items())
    else:
        items = list(columns)
    pairs: List[Tuple[str, Any]] = []
    for item in items:
        if isinstance(item, Parameter):
            pairs.append((item.name, item.value))
            continue
        if not isinstance(item, (tuple, list)) or len(item) != 2:
            raise ValidationError(f"Column entry must be a Parameter or (name, value) pair: {item!r}.")
        pairs.append((_require_name(item[0], "column"), item[1]))
    if not pairs:
        raise ValidationError("At least one column is required.")
    return pairs


def _where_sql(dialect: Dialect, where: WhereInput) -> str:
    if where is None:
        return ""
    if isinstance(where, Filter):
        return " WHERE " + where.render(dialect.provider)
    if isinstance(where, str):
        return " WHERE " + where if where.strip() else ""
    raise TypeError("Filter must be a Filter node or SQL text.")


def _require_name(name: Any, what: str) -> str:
    if not isinstance(name, str) or not name.strip():
        raise ValidationError(f"A non-blank {what} name is required.")
    return name


def _trace(operation: str, statement: str) -> str:
    logger.debug("Built %s statement: %s", operation, statement)
    return statement
