"""Async twins of the `dml` helpers, executed through `AsyncQuery`.

Connection options are forwarded to `AsyncQuery`; `deadline` bounds the
output call.
"""

from __future__ import annotations

from typing import Any, List, Optional, Sequence

from .providers import Provider
from .query import ParserInput
from .query_async import AsyncQuery
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


async def insert_async(
    provider: Optional[Provider],
    table: str,
    columns: ColumnsInput,
    *,
    deadline: Optional[float] = None,
    settings: Optional[QuerySettings] = None,
    **options: Any,
) -> int:
    sql = build_insert(_provider(provider, settings), table, columns)
    return await AsyncQuery(sql, settings=settings, **options).execute(deadline=deadline)


async def insert_and_get_identity_async(
    provider: Optional[Provider],
    table: str,
    columns: ColumnsInput,
    *,
    identity_sql: Optional[str] = None,
    deadline: Optional[float] = None,
    settings: Optional[QuerySettings] = None,
    **options: Any,
) -> Any:
    sql = build_insert_and_get_identity(
        _provider(provider, settings), table, columns, identity_sql=identity_sql
    )
    return await AsyncQuery(sql, settings=settings, **options).as_scalar(deadline=deadline)


async def update_async(
    provider: Optional[Provider],
    table: str,
    columns: ColumnsInput,
    where: WhereInput = None,
    *,
    deadline: Optional[float] = None,
    settings: Optional[QuerySettings] = None,
    **options: Any,
) -> int:
    sql = build_update(_provider(provider, settings), table, columns, where)
    return await AsyncQuery(sql, settings=settings, **options).execute(deadline=deadline)


async def delete_async(
    provider: Optional[Provider],
    table: str,
    where: WhereInput = None,
    *,
    drop: bool = False,
    purge: bool = False,
    deadline: Optional[float] = None,
    settings: Optional[QuerySettings] = None,
    **options: Any,
) -> int:
    sql = build_delete(_provider(provider, settings), table, where, drop=drop, purge=purge)
    return await AsyncQuery(sql, settings=settings, **options).execute(deadline=deadline)


async def call_function_async(
    provider: Optional[Provider],
    function: str,
    args: Optional[Sequence[Any]] = None,
    *,
    parser: Optional[ParserInput[Any]] = None,
    deadline: Optional[float] = None,
    settings: Optional[QuerySettings] = None,
    **options: Any,
) -> List[Any]:
    """Query a table-valued function; value lists when no parser is given."""

    sql = build_function_call(_provider(provider, settings), function, args)
    query = AsyncQuery(sql, settings=settings, **options)
    if parser is None:
        return await query.as_objects(deadline=deadline)
    return await query.as_collection(parser, deadline=deadline)


def _provider(provider: Optional[Provider], settings: Optional[QuerySettings]) -> Optional[Provider]:
    return resolve_provider(provider, None, settings)
