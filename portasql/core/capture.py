"""Side-channel capture of column metadata and output parameter values."""

from __future__ import annotations

import datetime as _dt
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional, Sequence

from .parameters import DBNull

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ColumnInfo:
    """Result column descriptor taken from DB-API `cursor.description`."""

    name: str
    type_code: Any = None
    precision: Optional[int] = None
    scale: Optional[int] = None
    null_ok: Optional[bool] = None

    @classmethod
    def from_description(cls, item: Sequence[Any]) -> ColumnInfo:
        """Build from one 7-item DB-API description entry."""

        padded = list(item) + [None] * (7 - len(item))
        return cls(
            name=str(padded[0]),
            type_code=padded[1],
            precision=padded[4],
            scale=padded[5],
            null_ok=padded[6],
        )


def columns_from_description(description: Optional[Sequence[Sequence[Any]]]) -> List[ColumnInfo]:
    """Convert a DB-API description (or `None`) to column descriptors."""

    if not description:
        return []
    return [ColumnInfo.from_description(item) for item in description]


@dataclass
class DbCapture:
    """Receives column descriptors and output parameters from one execution.

    The harness overwrites both collections on every execution that carries
    this capture; callers read them after the call returns.
    """

    columns: List[ColumnInfo] = field(default_factory=list)
    output_parameters: Dict[str, Any] = field(default_factory=dict)

    def record(self, columns: Sequence[ColumnInfo], outputs: Mapping[str, Any]) -> None:
        self.columns = list(columns)
        self.output_parameters = dict(outputs)
        logger.debug(
            "Captured %d column(s) and %d output parameter(s)",
            len(self.columns),
            len(self.output_parameters),
        )

    @property
    def column_names(self) -> List[str]:
        return [column.name for column in self.columns]

    def get(self, name: str) -> Any:
        """Return an output parameter value by case-insensitive name.

        Raises:
            KeyError: If no output parameter has that name.
        """

        if name in self.output_parameters:
            return _denull(self.output_parameters[name])
        lowered = name.lower()
        for key, value in self.output_parameters.items():
            if key.lower() == lowered:
                return _denull(value)
        raise KeyError(f"Output parameter not found: {name}")

    def get_str(self, name: str) -> Optional[str]:
        value = self.get(name)
        return None if value is None else str(value)

    def get_int(self, name: str) -> Optional[int]:
        value = self.get(name)
        return None if value is None else int(value)

    def get_decimal(self, name: str) -> Optional[Decimal]:
        value = self.get(name)
        if value is None or isinstance(value, Decimal):
            return value
        return Decimal(str(value))

    def get_float(self, name: str) -> Optional[float]:
        value = self.get(name)
        return None if value is None else float(value)

    def get_bool(self, name: str) -> Optional[bool]:
        value = self.get(name)
        if value is None or isinstance(value, bool):
            return value
        if isinstance(value, str):
            return value.strip().lower() in ("1", "true", "y", "yes")
        return bool(value)

    def get_datetime(self, name: str) -> Optional[_dt.datetime]:
        value = self.get(name)
        if value is None or isinstance(value, _dt.datetime):
            return value
        if isinstance(value, _dt.date):
            return _dt.datetime(value.year, value.month, value.day)
        return _dt.datetime.fromisoformat(str(value))


def _denull(value: Any) -> Any:
    return None if isinstance(value, DBNull) else value
