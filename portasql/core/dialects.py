"""Dialect rendering rules for identifiers, literals, and statement forms."""

from __future__ import annotations

import datetime as _dt
import re
from decimal import Decimal
from enum import Enum
from typing import Any, Optional, Sequence

from .exceptions import UnsupportedProviderError, ValidationError
from .literals import SqlLiteral
from .parameters import DBNull
from .providers import Provider, coerce_provider

_SIMPLE_NAME = re.compile(r"^[A-Z0-9_]+$", re.IGNORECASE)


class Dialect:
    """Dialect-neutral rules: bare identifiers and ISO-style date literals."""

    provider: Provider = Provider.NEUTRAL
    name: str = "neutral"
    open_quote: str = ""
    close_quote: str = ""
    terminator: str = ""
    unicode_prefix: str = ""

    def q(self, ident: str) -> str:
        """Render a column or object name, quoting only when needed."""

        if not self.open_quote or _SIMPLE_NAME.match(ident):
            return ident
        return f"{self.open_quote}{ident}{self.close_quote}"

    def sqlize(self, value: Any) -> str:
        """Encode a Python value as a SQL literal."""

        if value is None or isinstance(value, DBNull):
            return "NULL"
        if isinstance(value, SqlLiteral):
            return value.expression
        if isinstance(value, (bytes, bytearray, memoryview)):
            return self.binary_literal(bytes(value))
        if isinstance(value, bool):
            return "1" if value else "0"
        if isinstance(value, (int, float, Decimal)):
            return str(value)
        if isinstance(value, _dt.datetime):
            return self.datetime_literal(value)
        if isinstance(value, _dt.date):
            return self.datetime_literal(_dt.datetime(value.year, value.month, value.day))
        if isinstance(value, Enum):
            return self.sqlize(value.value)
        return self.text_literal(str(value))

    def datetime_literal(self, value: _dt.datetime) -> str:
        return f"'{value:%Y-%m-%d %H:%M:%S}'"

    def binary_literal(self, value: bytes) -> str:
        raise ValidationError(
            "Binary values need a SQL Server or Oracle dialect.",
            details={"dialect": self.name},
        )

    def text_literal(self, text: str) -> str:
        quoted = "'" + text.replace("'", "''") + "'"
        if self.unicode_prefix and not _is_ascii_printable(quoted):
            return self.unicode_prefix + quoted
        return quoted

    def terminate(self, sql: str) -> str:
        """Append the dialect's statement terminator."""

        return sql + self.terminator

    def identity_expression(self) -> str:
        return SqlLiteral.identity(self.provider).expression

    def drop_table_sql(self, table: str, *, purge: bool = False) -> str:
        raise UnsupportedProviderError(self.provider, STATEMENT_PROVIDERS, operation="drop")

    def function_call_sql(self, function: str, args: Sequence[str]) -> str:
        raise UnsupportedProviderError(
            self.provider, STATEMENT_PROVIDERS, operation="function call"
        )


class SqlServerDialect(Dialect):
    """SQL Server (`[name]` quoting, `N'...'` for non-ASCII text, no terminator)."""

    provider = Provider.SQL_SERVER
    name = "sqlserver"
    open_quote = "["
    close_quote = "]"
    terminator = ""
    unicode_prefix = "N"

    def datetime_literal(self, value: _dt.datetime) -> str:
        return f"'{value:%Y-%m-%d %H:%M:%S}.{value.microsecond // 1000:03d}'"

    def binary_literal(self, value: bytes) -> str:
        return "0x" + value.hex().upper()

    def drop_table_sql(self, table: str, *, purge: bool = False) -> str:
        return f"TRUNCATE TABLE {table}"

    def function_call_sql(self, function: str, args: Sequence[str]) -> str:
        return f"SELECT * FROM {function}({', '.join(args)})"


class OracleDialect(Dialect):
    """Oracle (`"name"` quoting, `TO_DATE` literals, `;` terminator)."""

    provider = Provider.ORACLE
    name = "oracle"
    open_quote = '"'
    close_quote = '"'
    terminator = ";"

    def datetime_literal(self, value: _dt.datetime) -> str:
        return f"TO_DATE('{value:%m/%d/%Y %I:%M:%S %p}', 'mm/dd/yyyy hh:mi:ss am')"

    def binary_literal(self, value: bytes) -> str:
        return f"HEXTORAW('{value.hex().upper()}')"

    def drop_table_sql(self, table: str, *, purge: bool = False) -> str:
        sql = f"DROP TABLE {table}"
        if purge:
            sql += " PURGE"
        return self.terminate(sql)

    def function_call_sql(self, function: str, args: Sequence[str]) -> str:
        return self.terminate(f"SELECT * FROM TABLE({function}({', '.join(args)}))")


STATEMENT_PROVIDERS = (Provider.SQL_SERVER, Provider.ORACLE)

_DIALECTS = {
    Provider.NEUTRAL: Dialect(),
    Provider.SQL_SERVER: SqlServerDialect(),
    Provider.ORACLE: OracleDialect(),
}


def get_dialect(provider: Optional[Provider]) -> Dialect:
    """Return rendering rules for a provider; `None` means neutral."""

    if provider is None:
        return _DIALECTS[Provider.NEUTRAL]
    return _DIALECTS[coerce_provider(provider)]


def dialect_for(provider: Any, *, operation: Optional[str] = None) -> Dialect:
    """Return the statement dialect for a provider.

    Only SQL Server and Oracle build full statements.

    Raises:
        UnsupportedProviderError: For any other provider, naming the supported set.
    """

    try:
        resolved = coerce_provider(provider) if provider is not None else None
    except UnsupportedProviderError:
        resolved = None
    if resolved not in STATEMENT_PROVIDERS:
        raise UnsupportedProviderError(provider, STATEMENT_PROVIDERS, operation=operation)
    return _DIALECTS[resolved]


def render_column_name(name: str, provider: Optional[Provider] = None) -> str:
    """Render a column name for a provider (bare when it needs no quoting)."""

    return get_dialect(provider).q(name)


def sqlize(value: Any, provider: Optional[Provider] = None) -> str:
    """Encode a value as a SQL literal for a provider."""

    return get_dialect(provider).sqlize(value)


def _is_ascii_printable(text: str) -> bool:
    return all(32 <= ord(ch) <= 126 for ch in text)
