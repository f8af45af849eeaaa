"""Row mapping strategies used by typed-collection queries.

A `RowParser` runs in exactly one mode:

- `ParserMode.OBJECTS`: the function receives the row as a list of values
  (platform nulls already normalized to `None`).
- `ParserMode.CURSOR`: the function receives a `RowView` over the open
  result, giving access to column descriptors alongside the values.
"""

from __future__ import annotations

import logging
import re
from dataclasses import MISSING, dataclass, field, fields, is_dataclass
from enum import Enum
from typing import Any, Callable, Dict, Generic, List, Optional, Sequence, Tuple, Type, TypeVar

from .capture import ColumnInfo
from .exceptions import MappingError
from .parameters import DBNull

logger = logging.getLogger(__name__)

T = TypeVar("T")

_WHITESPACE = re.compile(r"\s+")


class ParserMode(str, Enum):
    """Payload a row parser function expects."""

    OBJECTS = "objects"
    CURSOR = "cursor"


class RowView:
    """Current row of an open result together with its column descriptors."""

    __slots__ = ("columns", "values", "_ordinals")

    def __init__(self, columns: Sequence[ColumnInfo], values: Sequence[Any] = ()):
        self.columns = list(columns)
        self.values: Sequence[Any] = values
        self._ordinals: Optional[Dict[str, int]] = None

    @property
    def field_count(self) -> int:
        return len(self.columns)

    def get_name(self, index: int) -> str:
        return self.columns[index].name

    def get_ordinal(self, name: str) -> int:
        """Return the position of a column by case-insensitive name."""

        if self._ordinals is None:
            self._ordinals = {}
            for i, column in enumerate(self.columns):
                self._ordinals.setdefault(column.name.lower(), i)
        try:
            return self._ordinals[name.lower()]
        except KeyError:
            raise KeyError(f"Column not found: {name}") from None

    def is_null(self, key: int | str) -> bool:
        value = self[key]
        return value is None

    def as_dict(self) -> Dict[str, Any]:
        return {column.name: self[i] for i, column in enumerate(self.columns)}

    def __getitem__(self, key: int | str) -> Any:
        index = key if isinstance(key, int) else self.get_ordinal(key)
        value = self.values[index]
        return None if isinstance(value, DBNull) else value

    def __len__(self) -> int:
        return len(self.values)


@dataclass(frozen=True)
class RowParser(Generic[T]):
    """Tagged row-mapping strategy.

    Attributes:
        mode: Which payload `func` receives.
        func: Mapping function for one row.
        per_execution: Optional factory producing a fresh mapping function for
            each execution, for parsers that cache state across rows.
    """

    mode: ParserMode
    func: Callable[[Any], T]
    per_execution: Optional[Callable[[], Callable[[Any], T]]] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "mode", ParserMode(self.mode))
        if not callable(self.func):
            raise TypeError("Row parser function must be callable.")

    @classmethod
    def from_objects(cls, func: Callable[[List[Any]], T]) -> RowParser[T]:
        """Create a parser fed with each row's value list."""

        return cls(ParserMode.OBJECTS, func)

    @classmethod
    def from_cursor(cls, func: Callable[[RowView], T]) -> RowParser[T]:
        """Create a parser fed with a `RowView` over the open result."""

        return cls(ParserMode.CURSOR, func)

    @property
    def is_object_parser(self) -> bool:
        return self.mode is ParserMode.OBJECTS

    @property
    def is_cursor_parser(self) -> bool:
        return self.mode is ParserMode.CURSOR

    def bind(self) -> Callable[[Any], T]:
        """Return the mapping function to use for one execution."""

        if self.per_execution is not None:
            return self.per_execution()
        return self.func

    def parse(self, payload: Any) -> T:
        """Map one row payload with this parser's function."""

        return self.func(payload)

    @classmethod
    def auto(
        cls,
        target: Type[T],
        *,
        ignore_case: bool = False,
        strict: bool = False,
    ) -> RowParser[T]:
        """Create a parser that maps columns onto same-named dataclass fields.

        Column names are matched with all whitespace removed (`"First Name"`
        maps to `FirstName`). The column-to-field table is built on the first
        row and reused for every later row: `bind()` gives each execution its
        own table, while direct `parse()` calls share one. Null values leave a
        field at its default; fields without a default receive `None`.

        Args:
            target: Dataclass type to instantiate per row.
            ignore_case: Match column and field names case-insensitively.
            strict: Raise `MappingError` for a column with no matching field
                instead of skipping it.

        Raises:
            TypeError: If `target` is not a dataclass.
        """

        if not (isinstance(target, type) and is_dataclass(target)):
            raise TypeError(f"{getattr(target, '__name__', target)!r} must be a dataclass.")

        def fresh() -> Callable[[RowView], T]:
            return _AutoMapper(target, ignore_case=ignore_case, strict=strict)

        return cls(ParserMode.CURSOR, fresh(), per_execution=fresh)

    @staticmethod
    def scalar_str() -> RowParser[Optional[str]]:
        """First column of each row as text."""

        return RowParser.from_objects(lambda values: None if values[0] is None else str(values[0]))

    @staticmethod
    def scalar_int() -> RowParser[Optional[int]]:
        """First column of each row as an integer."""

        return RowParser.from_objects(lambda values: None if values[0] is None else int(values[0]))

    @staticmethod
    def as_dict() -> RowParser[Dict[str, Any]]:
        """Each row as a column-name keyed dictionary."""

        return RowParser.from_cursor(lambda row: row.as_dict())


class _AutoMapper(Generic[T]):
    """Execution-scoped column-to-field mapper for one dataclass."""

    def __init__(self, target: Type[T], *, ignore_case: bool, strict: bool):
        self.target = target
        self.ignore_case = ignore_case
        self.strict = strict
        self.table: Optional[Tuple[Optional[str], ...]] = None
        # init fields the constructor cannot omit
        self.required = tuple(
            f.name
            for f in fields(target)
            if f.init and f.default is MISSING and f.default_factory is MISSING
        )

    def __call__(self, row: RowView) -> T:
        if self.table is None:
            self.table = self._build_table(row.columns)
        kwargs: Dict[str, Any] = {}
        for index, field_name in enumerate(self.table):
            if field_name is None:
                continue
            value = row[index]
            if value is None:
                continue
            kwargs[field_name] = value
        for name in self.required:
            kwargs.setdefault(name, None)
        return self.target(**kwargs)

    def _build_table(self, columns: Sequence[ColumnInfo]) -> Tuple[Optional[str], ...]:
        names = [f.name for f in fields(self.target) if f.init]
        lookup = {name.lower(): name for name in names} if self.ignore_case else {n: n for n in names}
        table: List[Optional[str]] = []
        for column in columns:
            key = _WHITESPACE.sub("", column.name)
            if self.ignore_case:
                key = key.lower()
            field_name = lookup.get(key)
            if field_name is None and self.strict:
                raise MappingError(column.name, self.target)
            table.append(field_name)
        logger.debug(
            "Mapped %d of %d column(s) onto %s",
            sum(1 for item in table if item is not None),
            len(table),
            self.target.__name__,
        )
        return tuple(table)
