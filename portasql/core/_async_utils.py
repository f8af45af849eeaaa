"""Internal helpers for driver calls that may or may not be awaitable."""

from __future__ import annotations

import inspect
from typing import Any


async def _maybe_await(value: Any) -> Any:
    """Await awaitables and return non-awaitable values unchanged."""
    if inspect.isawaitable(value):
        return await value
    return value


async def _aclose(resource: Any) -> None:
    """Call `resource.close()` when present, awaiting it if needed."""
    close = getattr(resource, "close", None)
    if callable(close):
        await _maybe_await(close())
