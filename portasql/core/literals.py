"""Raw SQL expressions that bypass literal quoting."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional

from .exceptions import UnsupportedProviderError, ValidationError
from .providers import Provider, coerce_provider

_CURRENT_DATE: Mapping[Provider, str] = {
    Provider.SQL_SERVER: "GETDATE()",
    Provider.ORACLE: "SYSDATE",
}

_NEW_GUID: Mapping[Provider, str] = {
    Provider.SQL_SERVER: "NEWID()",
    Provider.ORACLE: "SYS_GUID()",
}

_IDENTITY: Mapping[Provider, str] = {
    Provider.SQL_SERVER: "CONVERT(int, SCOPE_IDENTITY())",
    Provider.ORACLE: "LAST_INSERT_ID()",
}


@dataclass(frozen=True)
class SqlLiteral:
    """SQL expression rendered verbatim wherever a value literal is expected.

    Example: `SqlLiteral("GETDATE()")` renders as `GETDATE()` rather than
    the quoted string `'GETDATE()'`.
    """

    expression: str

    def __post_init__(self) -> None:
        if not isinstance(self.expression, str) or not self.expression.strip():
            raise ValidationError("SqlLiteral expression must be a non-blank string.")

    def __str__(self) -> str:
        return self.expression

    @staticmethod
    def current_date(provider: Optional[Provider]) -> SqlLiteral:
        """Current date/time function for the provider."""

        return SqlLiteral(_lookup(_CURRENT_DATE, provider, "current_date"))

    @staticmethod
    def new_guid(provider: Optional[Provider]) -> SqlLiteral:
        """New unique identifier function for the provider."""

        return SqlLiteral(_lookup(_NEW_GUID, provider, "new_guid"))

    @staticmethod
    def identity(provider: Optional[Provider]) -> SqlLiteral:
        """Last generated identity expression for the provider."""

        return SqlLiteral(_lookup(_IDENTITY, provider, "identity"))


def _lookup(table: Mapping[Provider, str], provider: Optional[Provider], operation: str) -> str:
    supported = tuple(table)
    if provider is None:
        raise UnsupportedProviderError(provider, supported, operation=operation)
    try:
        resolved = coerce_provider(provider)
    except UnsupportedProviderError:
        raise UnsupportedProviderError(provider, supported, operation=operation) from None
    text = table.get(resolved)
    if text is None:
        raise UnsupportedProviderError(resolved, supported, operation=operation)
    return text
