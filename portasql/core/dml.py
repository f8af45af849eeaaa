"""Build-and-execute helpers for common write statements and function calls.

Each helper resolves the provider (explicit argument, else the configured
default), renders the statement with `statements`, and runs it through a
`Query`. Connection options (`connection`/`opener`, `timeout`,
`transaction`, `capture`, `settings`, ...) are forwarded to `Query`.
"""

from __future__ import annotations

from typing import Any, List, Optional, Sequence

from .providers import Provider
from .query import ParserInput, Query
from .settings import QuerySettings, resolve_provider
from .statements import (
    ColumnsInput,
    WhereInput,
    build_delete,
    build_function_call,
    build_insert,
    build_insert_and_get_identity,
    build_update,
)


def insert(
    provider: Optional[Provider],
    table: str,
    columns: ColumnsInput,
    *,
    settings: Optional[QuerySettings] = None,
    **options: Any,
) -> int:
    """Insert one row and return the affected row count."""

    sql = build_insert(_provider(provider, settings), table, columns)
    return Query(sql, settings=settings, **options).execute()


def insert_and_get_identity(
    provider: Optional[Provider],
    table: str,
    columns: ColumnsInput,
    *,
    identity_sql: Optional[str] = None,
    settings: Optional[QuerySettings] = None,
    **options: Any,
) -> Any:
    """Insert one row and return the generated identity value."""

    sql = build_insert_and_get_identity(
        _provider(provider, settings), table, columns, identity_sql=identity_sql
    )
    return Query(sql, settings=settings, **options).as_scalar()


def update(
    provider: Optional[Provider],
    table: str,
    columns: ColumnsInput,
    where: WhereInput = None,
    *,
    settings: Optional[QuerySettings] = None,
    **options: Any,
) -> int:
    """Update matching rows and return the affected row count."""

    sql = build_update(_provider(provider, settings), table, columns, where)
    return Query(sql, settings=settings, **options).execute()


def delete(
    provider: Optional[Provider],
    table: str,
    where: WhereInput = None,
    *,
    drop: bool = False,
    purge: bool = False,
    settings: Optional[QuerySettings] = None,
    **options: Any,
) -> int:
    """Delete matching rows (or truncate/drop) and return the row count."""

    sql = build_delete(_provider(provider, settings), table, where, drop=drop, purge=purge)
    return Query(sql, settings=settings, **options).execute()


def call_function(
    provider: Optional[Provider],
    function: str,
    args: Optional[Sequence[Any]] = None,
    *,
    parser: Optional[ParserInput[Any]] = None,
    settings: Optional[QuerySettings] = None,
    **options: Any,
) -> List[Any]:
    """Query a table-valued function.

    Returns:
        Rows mapped through `parser`, or value lists when no parser is given.
    """

    sql = build_function_call(_provider(provider, settings), function, args)
    query = Query(sql, settings=settings, **options)
    if parser is None:
        return query.as_objects()
    return query.as_collection(parser)


def _provider(provider: Optional[Provider], settings: Optional[QuerySettings]) -> Optional[Provider]:
    return resolve_provider(provider, None, settings)
