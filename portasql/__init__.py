"""portasql: provider-agnostic filters, statements, and query execution."""

from .core import (
    AsyncQuery,
    AutoTruncate,
    ColumnExpression,
    CommandKind,
    DB_NULL,
    DataTable,
    DbCapture,
    F,
    Filter,
    FilterBounds,
    LikeMode,
    MappingError,
    Parameter,
    ParameterDirection,
    PortaSqlError,
    Provider,
    Query,
    QuerySettings,
    RowParser,
    SqlLiteral,
    UnsupportedOperationError,
    UnsupportedProviderError,
    ValidationError,
    build_delete,
    build_function_call,
    build_insert,
    build_insert_and_get_identity,
    build_update,
    get_settings,
    render_column_name,
    sqlize,
)
from .ports import (
    AsyncDbApiCommandBuilder,
    AsyncDbApiTableFiller,
    DbApiCommandBuilder,
    DbApiTableFiller,
)

__all__ = [
    "AsyncDbApiCommandBuilder",
    "AsyncDbApiTableFiller",
    "AsyncQuery",
    "AutoTruncate",
    "ColumnExpression",
    "CommandKind",
    "DB_NULL",
    "DataTable",
    "DbApiCommandBuilder",
    "DbApiTableFiller",
    "DbCapture",
    "F",
    "Filter",
    "FilterBounds",
    "LikeMode",
    "MappingError",
    "Parameter",
    "ParameterDirection",
    "PortaSqlError",
    "Provider",
    "Query",
    "QuerySettings",
    "RowParser",
    "SqlLiteral",
    "UnsupportedOperationError",
    "UnsupportedProviderError",
    "ValidationError",
    "build_delete",
    "build_function_call",
    "build_insert",
    "build_insert_and_get_identity",
    "build_update",
    "get_settings",
    "render_column_name",
    "sqlize",
]
