"""Composable filter nodes rendered into dialect-specific WHERE fragments."""

from __future__ import annotations

from collections.abc import Sequence as SequenceABC
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Optional, Sequence, Union

from .dialects import get_dialect
from .exceptions import UnsupportedProviderError, ValidationError
from .literals import SqlLiteral
from .providers import Provider, coerce_provider
from .settings import QuerySettings, resolve_provider


class LikeMode(str, Enum):
    """Where `LIKE` wildcards are placed around the search text."""

    CONTAINS = "contains"
    STARTS_WITH = "starts_with"
    ENDS_WITH = "ends_with"


class FilterBounds(str, Enum):
    """Inclusive/exclusive policy for each side of a range filter."""

    INCLUSIVE = "inclusive"
    EXCLUSIVE = "exclusive"
    EXCLUSIVE_LOWER = "exclusive_lower"
    EXCLUSIVE_UPPER = "exclusive_upper"


@dataclass(frozen=True)
class ColumnExpression:
    """Column reference with an optional wrapping format.

    Attributes:
        name: Column name, or a `SqlLiteral` rendered verbatim.
        format: Optional `str.format` template such as `"LEFT({0}, 1)"`.
    """

    name: Union[str, SqlLiteral]
    format: Optional[str] = None

    def __post_init__(self) -> None:
        if isinstance(self.name, str) and not self.name.strip():
            raise ValidationError("Column name must not be blank.")
        if not isinstance(self.name, (str, SqlLiteral)):
            raise TypeError("Column must be a name or a SqlLiteral.")

    def render(self, provider: Optional[Provider] = None) -> str:
        if isinstance(self.name, SqlLiteral):
            text = self.name.expression
        else:
            text = get_dialect(provider).q(self.name)
        if self.format:
            return self.format.format(text)
        return text


ColumnInput = Union[str, SqlLiteral, ColumnExpression]

_BINARY_OPERATORS = frozenset({"=", "<>", ">", ">=", "<", "<=", "LIKE", "NOT LIKE"})
_LIST_OPERATORS = frozenset({"IN", "NOT IN"})
_RANGE_OPERATORS = frozenset({"BETWEEN", "NOT BETWEEN"})
_UNARY_OPERATORS = frozenset({"IS NULL", "IS NOT NULL"})


class Filter:
    """Base class for renderable predicate nodes."""

    provider: Optional[Provider]

    def render(
        self,
        provider: Optional[Provider] = None,
        *,
        settings: Optional[QuerySettings] = None,
    ) -> str:
        """Render this predicate as SQL text.

        Args:
            provider: Per-call dialect override.
            settings: Settings supplying the fallback dialect; the process
                default is used when omitted.

        Returns:
            Rendered predicate text.
        """

        return self._render(provider, None, settings)

    def with_provider(self, provider: Optional[Provider]) -> Filter:
        """Return a copy carrying a provider hint."""

        hint = coerce_provider(provider) if provider is not None else None
        return replace(self, provider=hint)

    def _resolve(
        self,
        explicit: Optional[Provider],
        inherited: Optional[Provider],
        settings: Optional[QuerySettings],
    ) -> Optional[Provider]:
        return resolve_provider(explicit, self.provider or inherited, settings)

    def _render(
        self,
        explicit: Optional[Provider],
        inherited: Optional[Provider],
        settings: Optional[QuerySettings],
    ) -> str:
        raise NotImplementedError


@dataclass(frozen=True)
class LiteralFilter(Filter):
    """Pre-rendered predicate text used as-is for every provider."""

    text: str
    provider: Optional[Provider] = field(default=None, kw_only=True)

    def __post_init__(self) -> None:
        if not isinstance(self.text, str) or not self.text.strip():
            raise ValidationError("Literal filter text must be a non-blank string.")

    def _render(self, explicit, inherited, settings) -> str:
        return self.text


@dataclass(frozen=True)
class Comparison(Filter):
    """Column compared against zero, one, two, or many values.

    Attributes:
        column: Column being compared.
        operator: SQL operator (`=`, `IN`, `BETWEEN`, `IS NULL`, ...).
        values: Operand values; arity depends on the operator.
    """

    column: ColumnExpression
    operator: str
    values: tuple[Any, ...] = ()
    provider: Optional[Provider] = field(default=None, kw_only=True)

    def __post_init__(self) -> None:
        op = self.operator.strip().upper()
        object.__setattr__(self, "operator", op)
        object.__setattr__(self, "values", tuple(self.values))
        count = len(self.values)
        if op in _UNARY_OPERATORS:
            expected_ok = count == 0
        elif op in _BINARY_OPERATORS:
            expected_ok = count == 1
        elif op in _RANGE_OPERATORS:
            expected_ok = count == 2
        elif op in _LIST_OPERATORS:
            expected_ok = count >= 1
        else:
            raise ValidationError(f"Unsupported comparison operator: {self.operator!r}.")
        if not expected_ok:
            raise ValidationError(
                f"Operator {op} cannot take {count} value(s).",
                details={"operator": op, "count": count},
            )

    def _render(self, explicit, inherited, settings) -> str:
        provider = self._resolve(explicit, inherited, settings)
        if self.operator in _UNARY_OPERATORS:
            return f"{self.column.render(provider)} {self.operator}"
        if provider is None:
            raise UnsupportedProviderError(
                None, tuple(Provider), operation=f"{self.operator} filter"
            )
        dialect = get_dialect(provider)
        col = self.column.render(provider)
        if self.operator in _LIST_OPERATORS:
            rendered = ", ".join(dialect.sqlize(v) for v in self.values)
            return f"{col} {self.operator} ({rendered})"
        if self.operator in _RANGE_OPERATORS:
            lo, hi = self.values
            return f"{col} {self.operator} {dialect.sqlize(lo)} AND {dialect.sqlize(hi)}"
        return f"{col} {self.operator} {dialect.sqlize(self.values[0])}"


@dataclass(frozen=True)
class _Group(Filter):
    children: tuple[Filter, ...]
    provider: Optional[Provider] = field(default=None, kw_only=True)

    connective = ""

    def __post_init__(self) -> None:
        children = tuple(self.children)
        if not children:
            raise ValidationError(
                f"{self.connective} group must contain at least one filter."
            )
        for child in children:
            _ensure_filter(child)
        object.__setattr__(self, "children", children)

    def _render(self, explicit, inherited, settings) -> str:
        passed_down = self.provider or inherited
        parts = [child._render(explicit, passed_down, settings) for child in self.children]
        return "( " + f" {self.connective} ".join(parts) + " )"


@dataclass(frozen=True)
class AndGroup(_Group):
    """All children must hold: `( e1 AND e2 )`."""

    connective = "AND"


@dataclass(frozen=True)
class OrGroup(_Group):
    """Any child may hold: `( e1 OR e2 )`."""

    connective = "OR"


@dataclass(frozen=True)
class NotFilter(Filter):
    """Negated predicate."""

    child: Filter
    provider: Optional[Provider] = field(default=None, kw_only=True)

    def __post_init__(self) -> None:
        _ensure_filter(self.child)

    def _render(self, explicit, inherited, settings) -> str:
        inner = self.child._render(explicit, self.provider or inherited, settings)
        if isinstance(self.child, _Group):
            return f"NOT {inner}"
        return f"NOT ({inner})"


class F:
    """Filter factory methods."""

    @staticmethod
    def literal(text: str) -> LiteralFilter:
        """Wrap pre-rendered predicate text."""

        return LiteralFilter(text)

    @staticmethod
    def equals(col: ColumnInput, val: Any) -> Comparison:
        """Build `col = value` (`col IS NULL` for `None`)."""

        if val is None:
            return F.is_null(col)
        return Comparison(_column(col), "=", (val,))

    @staticmethod
    def not_equals(col: ColumnInput, val: Any) -> Comparison:
        """Build `col <> value` (`col IS NOT NULL` for `None`)."""

        if val is None:
            return F.is_not_null(col)
        return Comparison(_column(col), "<>", (val,))

    @staticmethod
    def in_(col: ColumnInput, values: Sequence[Any]) -> Comparison:
        """Build `col IN (...)`."""

        return Comparison(_column(col), "IN", _require_values(values))

    @staticmethod
    def not_in(col: ColumnInput, values: Sequence[Any]) -> Comparison:
        """Build `col NOT IN (...)`."""

        return Comparison(_column(col), "NOT IN", _require_values(values))

    @staticmethod
    def like(col: ColumnInput, text: str, mode: LikeMode = LikeMode.CONTAINS) -> Comparison:
        """Build `col LIKE pattern` with wildcards placed per `mode`."""

        mode = LikeMode(mode)
        if mode is LikeMode.STARTS_WITH:
            pattern = f"{text}%"
        elif mode is LikeMode.ENDS_WITH:
            pattern = f"%{text}"
        else:
            pattern = f"%{text}%"
        return Comparison(_column(col), "LIKE", (pattern,))

    @staticmethod
    def contains(col: ColumnInput, text: str) -> Comparison:
        return F.like(col, text, LikeMode.CONTAINS)

    @staticmethod
    def starts_with(col: ColumnInput, text: str) -> Comparison:
        return F.like(col, text, LikeMode.STARTS_WITH)

    @staticmethod
    def ends_with(col: ColumnInput, text: str) -> Comparison:
        return F.like(col, text, LikeMode.ENDS_WITH)

    @staticmethod
    def gt(col: ColumnInput, val: Any) -> Comparison:
        """Build `col > value`."""

        return Comparison(_column(col), ">", (val,))

    @staticmethod
    def ge(col: ColumnInput, val: Any) -> Comparison:
        """Build `col >= value`."""

        return Comparison(_column(col), ">=", (val,))

    @staticmethod
    def lt(col: ColumnInput, val: Any) -> Comparison:
        """Build `col < value`."""

        return Comparison(_column(col), "<", (val,))

    @staticmethod
    def le(col: ColumnInput, val: Any) -> Comparison:
        """Build `col <= value`."""

        return Comparison(_column(col), "<=", (val,))

    @staticmethod
    def between(
        col: ColumnInput,
        lo: Any,
        hi: Any,
        bounds: FilterBounds = FilterBounds.INCLUSIVE,
    ) -> Filter:
        """Build a range filter.

        `INCLUSIVE` renders `col BETWEEN lo AND hi`. The other policies are
        compositions: `EXCLUSIVE` is `col > lo AND col < hi`,
        `EXCLUSIVE_LOWER` is `col > lo AND col <= hi`, and `EXCLUSIVE_UPPER`
        is `col >= lo AND col < hi`.
        """

        bounds = FilterBounds(bounds)
        column = _column(col)
        if bounds is FilterBounds.INCLUSIVE:
            return Comparison(column, "BETWEEN", (lo, hi))
        lower = F.gt(column, lo) if bounds is not FilterBounds.EXCLUSIVE_UPPER else F.ge(column, lo)
        upper = F.lt(column, hi) if bounds is not FilterBounds.EXCLUSIVE_LOWER else F.le(column, hi)
        return AndGroup((lower, upper))

    @staticmethod
    def between_exclusive(col: ColumnInput, lo: Any, hi: Any) -> AndGroup:
        """Build `( col > lo AND col < hi )`."""

        column = _column(col)
        return AndGroup((F.gt(column, lo), F.lt(column, hi)))

    @staticmethod
    def is_null(col: ColumnInput) -> Comparison:
        """Build `col IS NULL`."""

        return Comparison(_column(col), "IS NULL")

    @staticmethod
    def is_not_null(col: ColumnInput) -> Comparison:
        """Build `col IS NOT NULL`."""

        return Comparison(_column(col), "IS NOT NULL")

    @staticmethod
    def and_(*items: Filter | Sequence[Filter]) -> AndGroup:
        """Build a grouped `AND` expression."""

        return AndGroup(_normalize_group_items(items))

    @staticmethod
    def or_(*items: Filter | Sequence[Filter]) -> OrGroup:
        """Build a grouped `OR` expression."""

        return OrGroup(_normalize_group_items(items))

    @staticmethod
    def not_(item: Filter) -> NotFilter:
        """Build a negated expression.

        Raises:
            ValidationError: If `item` is already negated; remove the double
                negation instead.
        """

        if isinstance(item, NotFilter):
            raise ValidationError("Cannot negate a NOT filter; remove the double negation instead.")
        return NotFilter(item)


def _column(col: ColumnInput) -> ColumnExpression:
    if isinstance(col, ColumnExpression):
        return col
    if col is None:
        raise ValidationError("Column is required.")
    return ColumnExpression(col)


def _require_values(values: Sequence[Any]) -> tuple[Any, ...]:
    if values is None:
        raise ValidationError("Value list is required.")
    if isinstance(values, (str, bytes)):
        return (values,)
    items = tuple(values)
    if not items:
        raise ValidationError("Value list must contain at least one value.")
    return items


def _normalize_group_items(items: Sequence[Filter | Sequence[Filter]]) -> tuple[Filter, ...]:
    if (
        len(items) == 1
        and isinstance(items[0], SequenceABC)
        and not isinstance(items[0], (str, bytes))
    ):
        return tuple(items[0])
    return tuple(items)


def _ensure_filter(item: Any) -> None:
    if item is None:
        raise ValidationError("Filter is required.")
    if not isinstance(item, Filter):
        raise TypeError("Expression must be a Filter node.")
