"""Public core API for filters, statements, row parsing, and query execution."""

from .capture import ColumnInfo, DbCapture
from .dialects import (
    Dialect,
    OracleDialect,
    SqlServerDialect,
    dialect_for,
    get_dialect,
    render_column_name,
    sqlize,
)
from .dml import call_function, delete, insert, insert_and_get_identity, update
from .dml_async import (
    call_function_async,
    delete_async,
    insert_and_get_identity_async,
    insert_async,
    update_async,
)
from .exceptions import (
    MappingError,
    PortaSqlError,
    UnsupportedOperationError,
    UnsupportedProviderError,
    ValidationError,
)
from .filters import (
    AndGroup,
    ColumnExpression,
    Comparison,
    F,
    Filter,
    FilterBounds,
    LikeMode,
    LiteralFilter,
    NotFilter,
    OrGroup,
)
from .literals import SqlLiteral
from .parameters import (
    DB_NULL,
    DBNull,
    DbType,
    Parameter,
    ParameterDirection,
    infer_db_type,
    parse_additional_attributes,
)
from .providers import Provider, coerce_provider
from .query import LiveCursor, Query
from .query_async import AsyncLiveCursor, AsyncQuery
from .row_parser import ParserMode, RowParser, RowView
from .settings import QuerySettings, get_settings, resolve_provider
from .statements import (
    build_delete,
    build_function_call,
    build_insert,
    build_insert_and_get_identity,
    build_update,
)
from .text import AutoTruncate, normalize_db_value
from .types import CommandKind, DataTable, QueryDescriptor

__all__ = [
    "AndGroup",
    "AsyncLiveCursor",
    "AsyncQuery",
    "AutoTruncate",
    "ColumnExpression",
    "ColumnInfo",
    "CommandKind",
    "Comparison",
    "DB_NULL",
    "DBNull",
    "DataTable",
    "DbCapture",
    "DbType",
    "Dialect",
    "F",
    "Filter",
    "FilterBounds",
    "LikeMode",
    "LiteralFilter",
    "LiveCursor",
    "MappingError",
    "NotFilter",
    "OrGroup",
    "OracleDialect",
    "Parameter",
    "ParameterDirection",
    "ParserMode",
    "PortaSqlError",
    "Provider",
    "Query",
    "QueryDescriptor",
    "QuerySettings",
    "RowParser",
    "RowView",
    "SqlLiteral",
    "SqlServerDialect",
    "UnsupportedOperationError",
    "UnsupportedProviderError",
    "ValidationError",
    "build_delete",
    "build_function_call",
    "build_insert",
    "build_insert_and_get_identity",
    "build_update",
    "call_function",
    "call_function_async",
    "coerce_provider",
    "delete",
    "delete_async",
    "dialect_for",
    "get_dialect",
    "get_settings",
    "infer_db_type",
    "insert",
    "insert_and_get_identity",
    "insert_and_get_identity_async",
    "insert_async",
    "normalize_db_value",
    "parse_additional_attributes",
    "render_column_name",
    "resolve_provider",
    "sqlize",
    "update",
    "update_async",
]
