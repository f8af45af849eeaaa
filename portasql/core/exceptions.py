"""Error taxonomy raised by rendering, mapping, and harness validation.

Driver and connection failures are never wrapped; they reach the caller with
their original type and message.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, Optional


class PortaSqlError(Exception):
    """Base exception for errors raised by this package.

    Attributes:
        message: Error message.
        details: Additional structured error details.
        cause: Optional underlying exception.
    """

    def __init__(
        self,
        message: str,
        *,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.cause = cause

    def __str__(self) -> str:
        if self.cause is not None:
            return f"{self.message} (caused by: {type(self.cause).__name__}: {self.cause})"
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for serialization."""

        return {
            "type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(PortaSqlError, ValueError):
    """Raised when a constructor or builder receives malformed input."""


class UnsupportedProviderError(PortaSqlError, NotImplementedError):
    """Raised when a dialect-specific operation gets an unsupported provider."""

    def __init__(
        self,
        provider: Any,
        supported: Iterable[Any],
        *,
        operation: Optional[str] = None,
    ):
        self.provider = provider
        self.supported = tuple(supported)
        allowed = ", ".join(_display(p) for p in self.supported)
        subject = f"{operation}: " if operation else ""
        super().__init__(
            f"{subject}unsupported provider {_display(provider)}; supported: {allowed}.",
            details={"provider": _display(provider), "supported": [_display(p) for p in self.supported]},
        )


class UnsupportedOperationError(PortaSqlError, NotImplementedError):
    """Raised when a component cannot serve a requested mode or command kind."""


class MappingError(PortaSqlError, LookupError):
    """Raised when strict auto-mapping meets a column with no target field."""

    def __init__(self, column: str, target: type):
        self.column = column
        self.target = target
        super().__init__(
            f"Column {column!r} has no matching field on {target.__name__}.",
            details={"column": column, "target": target.__name__},
        )


def _display(provider: Any) -> str:
    if provider is None:
        return "None"
    return str(getattr(provider, "value", provider))
