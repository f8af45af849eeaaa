"""Configuration defaults for rendering and query execution.

Values load from environment variables prefixed with `PORTASQL_` (or a `.env`
file). Library calls never read these implicitly once a caller passes its own
`QuerySettings`; `get_settings()` is only consulted when none is supplied.
"""

from __future__ import annotations

import logging
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .providers import Provider, coerce_provider
from .text import AutoTruncate

logger = logging.getLogger(__name__)

_PARAMSTYLES = ("named", "qmark", "format", "pyformat", "numeric")


class QuerySettings(BaseSettings):
    """Defaults applied when a call does not specify its own values."""

    model_config = SettingsConfigDict(
        env_prefix="PORTASQL_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    default_provider: Optional[Provider] = Field(
        default=None,
        description="Dialect used when neither the call nor the filter names one",
    )

    command_timeout: Optional[int] = Field(
        default=None,
        ge=0,
        description="Command timeout in seconds passed to the driver",
    )

    auto_truncate: AutoTruncate = Field(
        default=AutoTruncate.NONE,
        description="String post-processing policy for object rows and scalars",
    )

    paramstyle: str = Field(
        default="named",
        description="DB-API paramstyle used to bind statement parameters",
    )

    @field_validator("default_provider", mode="before")
    @classmethod
    def validate_default_provider(cls, v):
        """Accept provider aliases such as `sql_server` or `mssql`."""
        if v is None or v == "":
            return None
        return coerce_provider(v)

    @field_validator("paramstyle")
    @classmethod
    def validate_paramstyle(cls, v: str) -> str:
        """Validate that the paramstyle is one DB-API defines."""
        style = v.strip().lower()
        if style not in _PARAMSTYLES:
            raise ValueError(f"Unsupported paramstyle: {v}. Use one of {', '.join(_PARAMSTYLES)}")
        return style


_settings: Optional[QuerySettings] = None


def get_settings(force_reload: bool = False) -> QuerySettings:
    """Return the process-level default settings.

    Args:
        force_reload: Build a new instance even if one is cached. Useful for
            tests or after environment variables change.

    Returns:
        The cached `QuerySettings` instance.
    """

    global _settings
    if _settings is None or force_reload:
        _settings = QuerySettings()
        logger.debug(
            "Loaded query settings: provider=%s timeout=%s auto_truncate=%s",
            _settings.default_provider,
            _settings.command_timeout,
            _settings.auto_truncate.value,
        )
    return _settings


def resolve_provider(
    explicit: Optional[Provider] = None,
    attached: Optional[Provider] = None,
    settings: Optional[QuerySettings] = None,
) -> Optional[Provider]:
    """Resolve the dialect for one render call.

    Order: explicit per-call override, then the provider attached to the
    object being rendered, then the configured default.

    Returns:
        The resolved provider, or `None` when nothing is configured.
    """

    if explicit is not None:
        return coerce_provider(explicit)
    if attached is not None:
        return coerce_provider(attached)
    if settings is None:
        settings = get_settings()
    return settings.default_provider
