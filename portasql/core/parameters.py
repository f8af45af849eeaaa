"""Parameter descriptors shared by statement rendering and execution."""

from __future__ import annotations

import datetime as _dt
import uuid
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional

from .exceptions import ValidationError

_INT32_MIN = -(2**31)
_INT32_MAX = 2**31 - 1


class DBNull:
    """Platform null sentinel carried by parameters instead of `None`."""

    _instance: Optional["DBNull"] = None

    def __new__(cls) -> "DBNull":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "DB_NULL"


DB_NULL = DBNull()


class ParameterDirection(str, Enum):
    """How a parameter flows between caller and database."""

    INPUT = "input"
    OUTPUT = "output"
    INPUT_OUTPUT = "input_output"
    RETURN_VALUE = "return_value"


class DbType(str, Enum):
    """Storage type recorded on a parameter."""

    STRING = "string"
    INT32 = "int32"
    INT64 = "int64"
    DECIMAL = "decimal"
    DOUBLE = "double"
    BOOLEAN = "boolean"
    DATETIME = "datetime"
    DATE = "date"
    GUID = "guid"
    BINARY = "binary"
    OBJECT = "object"


def infer_db_type(value: Any) -> DbType:
    """Infer the storage type of a Python value."""

    if isinstance(value, str):
        return DbType.STRING
    # bool before int: bool is an int subclass
    if isinstance(value, bool):
        return DbType.BOOLEAN
    if isinstance(value, int):
        if _INT32_MIN <= value <= _INT32_MAX:
            return DbType.INT32
        return DbType.INT64
    if isinstance(value, Decimal):
        return DbType.DECIMAL
    if isinstance(value, float):
        return DbType.DOUBLE
    if isinstance(value, _dt.datetime):
        return DbType.DATETIME
    if isinstance(value, _dt.date):
        return DbType.DATE
    if isinstance(value, uuid.UUID):
        return DbType.GUID
    if isinstance(value, (bytes, bytearray, memoryview)):
        return DbType.BINARY
    return DbType.OBJECT


def _normalize_value(value: Any) -> Any:
    if value is None:
        return DB_NULL
    if isinstance(value, Enum):
        return value.value
    return value


@dataclass
class Parameter:
    """Named value bound to a statement or stored procedure.

    Attributes:
        name: Parameter or column name.
        value: Current value. `None` is stored as `DB_NULL`.
        db_type: Explicit storage type; `None` means infer from `value`.
        direction: Input/output direction.
        nullable: Whether the database accepts null for this parameter.
        size: Optional size hint (string length, precision).
    """

    name: str
    value: Any = None
    db_type: Optional[DbType] = None
    direction: ParameterDirection = ParameterDirection.INPUT
    nullable: bool = True
    size: Optional[int] = None

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValidationError("Parameter name must not be blank.")
        self.direction = ParameterDirection(self.direction)

    def __setattr__(self, key: str, value: Any) -> None:
        if key == "value":
            value = _normalize_value(value)
        super().__setattr__(key, value)

    @property
    def effective_db_type(self) -> DbType:
        """Explicit storage type, or the one inferred from the value."""

        if self.db_type is not None:
            return self.db_type
        if self.value is DB_NULL:
            return DbType.OBJECT
        return infer_db_type(self.value)

    @property
    def bind_value(self) -> Any:
        """Value handed to the driver (`DB_NULL` becomes `None`)."""

        return None if self.value is DB_NULL else self.value

    @property
    def is_output(self) -> bool:
        return self.direction is not ParameterDirection.INPUT


def parse_additional_attributes(text: Optional[str]) -> Dict[str, str]:
    """Parse pipe-separated `key=value` connection attributes.

    Args:
        text: Input such as `"Encrypt=yes|TrustServerCertificate=no"`.

    Returns:
        Attribute mapping in input order. Empty input gives an empty mapping.

    Raises:
        ValidationError: If an entry is not exactly one `key=value` pair.
    """

    attributes: Dict[str, str] = {}
    if text is None or not text.strip():
        return attributes
    for entry in text.split("|"):
        parts = entry.split("=")
        if len(parts) != 2 or not parts[0].strip():
            raise ValidationError(
                f"Invalid additional attribute {entry!r}; expected 'key=value'.",
                details={"entry": entry},
            )
        attributes[parts[0].strip()] = parts[1].strip()
    return attributes
