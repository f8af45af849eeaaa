"""String post-processing applied to values read from result rows."""

from __future__ import annotations

from enum import Enum
from typing import Any, List, Sequence

from .parameters import DBNull


class AutoTruncate(str, Enum):
    """Policy for trimming and nullifying string values.

    `ZAP` trims and turns blank strings into `None`. `ZAP_EMPTY_ONLY` turns
    only the empty string into `None` and returns every other string unchanged.
    """

    NONE = "none"
    TRIM = "trim"
    ZAP = "zap"
    ZAP_EMPTY_ONLY = "zap_empty_only"


def normalize_db_value(value: Any, policy: AutoTruncate = AutoTruncate.NONE) -> Any:
    """Map platform null to `None` and apply the string policy."""

    if value is None or isinstance(value, DBNull):
        return None
    if not isinstance(value, str) or policy is AutoTruncate.NONE:
        return value
    if policy is AutoTruncate.TRIM:
        return value.strip()
    if policy is AutoTruncate.ZAP:
        trimmed = value.strip()
        return trimmed or None
    return None if value == "" else value


def normalize_row(row: Sequence[Any], policy: AutoTruncate = AutoTruncate.NONE) -> List[Any]:
    """Return one row as a list with every field normalized."""

    return [normalize_db_value(value, policy) for value in row]
