from __future__ import annotations

import datetime as dt
import unittest

from portasql.core.dialects import render_column_name, sqlize
from portasql.core.exceptions import UnsupportedProviderError, ValidationError
from portasql.core.filters import (
    AndGroup,
    ColumnExpression,
    Comparison,
    F,
    FilterBounds,
    LikeMode,
    NotFilter,
    OrGroup,
)
from portasql.core.literals import SqlLiteral
from portasql.core.parameters import DB_NULL
from portasql.core.providers import Provider
from portasql.core.settings import QuerySettings

NO_DEFAULT = QuerySettings(default_provider=None)


class ComparisonRenderTests(unittest.TestCase):
    def test_basic_operators(self) -> None:
        cases = [
            (F.equals("Name", "Sam"), "Name = 'Sam'"),
            (F.not_equals("Age", 3), "Age <> 3"),
            (F.gt("Age", 3), "Age > 3"),
            (F.ge("Age", 3), "Age >= 3"),
            (F.lt("Age", 3), "Age < 3"),
            (F.le("Age", 3), "Age <= 3"),
            (F.in_("Id", [1, 2, 3]), "Id IN (1, 2, 3)"),
            (F.not_in("Code", ["a", "b"]), "Code NOT IN ('a', 'b')"),
            (F.between("Age", 18, 65), "Age BETWEEN 18 AND 65"),
            (F.is_null("Name"), "Name IS NULL"),
            (F.is_not_null("Name"), "Name IS NOT NULL"),
        ]
        for flt, expected in cases:
            with self.subTest(expected=expected):
                self.assertEqual(flt.render(Provider.SQL_SERVER), expected)

    def test_like_modes(self) -> None:
        self.assertEqual(F.like("Name", "x").render(Provider.ORACLE), "Name LIKE '%x%'")
        self.assertEqual(
            F.like("Name", "x", LikeMode.STARTS_WITH).render(Provider.ORACLE), "Name LIKE 'x%'"
        )
        self.assertEqual(F.ends_with("Name", "x").render(Provider.ORACLE), "Name LIKE '%x'")
        self.assertEqual(F.contains("Name", "O'B").render(Provider.ORACLE), "Name LIKE '%O''B%'")

    def test_equals_none_becomes_null_check(self) -> None:
        self.assertEqual(F.equals("Name", None).render(Provider.ORACLE), "Name IS NULL")
        self.assertEqual(F.not_equals("Name", None).render(Provider.ORACLE), "Name IS NOT NULL")

    def test_column_quoting_per_provider(self) -> None:
        flt = F.equals("First Name", "x")
        self.assertEqual(flt.render(Provider.SQL_SERVER), "[First Name] = 'x'")
        self.assertEqual(flt.render(Provider.ORACLE), '"First Name" = \'x\'')
        self.assertEqual(flt.render(Provider.NEUTRAL), "First Name = 'x'")

    def test_column_expression_format_and_literal(self) -> None:
        flt = F.equals(ColumnExpression("Last Name", "LEFT({0}, 1)"), "S")
        self.assertEqual(flt.render(Provider.SQL_SERVER), "LEFT([Last Name], 1) = 'S'")

        dated = F.lt("Created", SqlLiteral.current_date(Provider.SQL_SERVER))
        self.assertEqual(dated.render(Provider.SQL_SERVER), "Created < GETDATE()")

        literal_column = F.equals(SqlLiteral("UPPER(Name)"), "SAM")
        self.assertEqual(literal_column.render(Provider.ORACLE), "UPPER(Name) = 'SAM'")

    def test_invalid_construction(self) -> None:
        with self.assertRaises(ValidationError):
            F.in_("Id", [])
        with self.assertRaises(ValidationError):
            F.equals("", 1)
        with self.assertRaises(ValidationError):
            Comparison(ColumnExpression("A"), "BETWEEN", (1,))
        with self.assertRaises(ValidationError):
            Comparison(ColumnExpression("A"), "~~", (1,))


class GroupAndNotTests(unittest.TestCase):
    def test_and_or_groups(self) -> None:
        both = F.and_(F.equals("A", 1), F.equals("B", 2))
        either = F.or_([F.equals("A", 1), F.equals("B", 2)])
        self.assertIsInstance(both, AndGroup)
        self.assertIsInstance(either, OrGroup)
        self.assertEqual(both.render(Provider.SQL_SERVER), "( A = 1 AND B = 2 )")
        self.assertEqual(either.render(Provider.SQL_SERVER), "( A = 1 OR B = 2 )")

    def test_nested_groups(self) -> None:
        flt = F.and_(F.equals("A", 1), F.or_(F.is_null("B"), F.gt("B", 5)))
        self.assertEqual(
            flt.render(Provider.ORACLE), "( A = 1 AND ( B IS NULL OR B > 5 ) )"
        )

    def test_empty_groups_fail(self) -> None:
        with self.assertRaises(ValidationError):
            F.and_()
        with self.assertRaises(ValidationError):
            F.or_([])
        with self.assertRaises(ValidationError):
            AndGroup(())

    def test_group_rejects_non_filters(self) -> None:
        with self.assertRaises(TypeError):
            F.and_("A = 1")
        with self.assertRaises(ValidationError):
            F.or_(F.equals("A", 1), None)

    def test_not(self) -> None:
        self.assertEqual(F.not_(F.equals("A", 1)).render(Provider.SQL_SERVER), "NOT (A = 1)")
        self.assertEqual(
            F.not_(F.and_(F.equals("A", 1), F.equals("B", 2))).render(Provider.SQL_SERVER),
            "NOT ( A = 1 AND B = 2 )",
        )

    def test_double_negation_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            F.not_(F.not_(F.equals("A", 1)))
        self.assertIsInstance(NotFilter(NotFilter(F.equals("A", 1))), NotFilter)


class RangeBoundsTests(unittest.TestCase):
    def test_between_exclusive_is_strict_on_both_sides(self) -> None:
        self.assertEqual(
            F.between_exclusive("Age", 1, 9).render(Provider.SQL_SERVER),
            "( Age > 1 AND Age < 9 )",
        )

    def test_bounds_policies(self) -> None:
        cases = {
            FilterBounds.INCLUSIVE: "Age BETWEEN 1 AND 9",
            FilterBounds.EXCLUSIVE: "( Age > 1 AND Age < 9 )",
            FilterBounds.EXCLUSIVE_LOWER: "( Age > 1 AND Age <= 9 )",
            FilterBounds.EXCLUSIVE_UPPER: "( Age >= 1 AND Age < 9 )",
        }
        for bounds, expected in cases.items():
            with self.subTest(bounds=bounds):
                self.assertEqual(
                    F.between("Age", 1, 9, bounds).render(Provider.ORACLE), expected
                )


class ProviderResolutionTests(unittest.TestCase):
    def test_explicit_then_attached_then_default(self) -> None:
        flt = F.equals("First Name", "x")
        oracle_default = QuerySettings(default_provider=Provider.ORACLE)

        self.assertEqual(flt.render(settings=oracle_default), '"First Name" = \'x\'')
        attached = flt.with_provider(Provider.SQL_SERVER)
        self.assertEqual(attached.render(settings=oracle_default), "[First Name] = 'x'")
        self.assertEqual(
            attached.render(Provider.ORACLE, settings=oracle_default), '"First Name" = \'x\''
        )

    def test_with_provider_returns_copy(self) -> None:
        flt = F.equals("A", 1)
        hinted = flt.with_provider("oracle")
        self.assertIsNone(flt.provider)
        self.assertIs(hinted.provider, Provider.ORACLE)

    def test_group_hint_passes_to_children(self) -> None:
        flt = F.and_(F.equals("First Name", 1), F.is_null("Last Name"))
        self.assertEqual(
            flt.with_provider(Provider.ORACLE).render(settings=NO_DEFAULT),
            '( "First Name" = 1 AND "Last Name" IS NULL )',
        )

    def test_unresolved_provider(self) -> None:
        with self.assertRaises(UnsupportedProviderError):
            F.equals("A", 1).render(settings=NO_DEFAULT)
        with self.assertRaises(UnsupportedProviderError):
            F.and_(F.is_null("A"), F.gt("B", 1)).render(settings=NO_DEFAULT)

    def test_neutral_renderers_need_no_provider(self) -> None:
        self.assertEqual(F.is_null("A").render(settings=NO_DEFAULT), "A IS NULL")
        self.assertEqual(F.literal("1 = 1").render(settings=NO_DEFAULT), "1 = 1")

    def test_rendering_is_repeatable(self) -> None:
        flt = F.or_(F.in_("Id", [1, 2]), F.like("Name", "é"), F.between("D", 1, 2))
        first = flt.render(Provider.SQL_SERVER)
        self.assertEqual(first, flt.render(Provider.SQL_SERVER))
        self.assertEqual(first, "( Id IN (1, 2) OR Name LIKE N'%é%' OR D BETWEEN 1 AND 2 )")


class LiteralEncodingTests(unittest.TestCase):
    def test_scalars(self) -> None:
        self.assertEqual(sqlize(None, Provider.SQL_SERVER), "NULL")
        self.assertEqual(sqlize(DB_NULL, Provider.ORACLE), "NULL")
        self.assertEqual(sqlize(True, Provider.SQL_SERVER), "1")
        self.assertEqual(sqlize(False, Provider.ORACLE), "0")
        self.assertEqual(sqlize(42, Provider.ORACLE), "42")
        self.assertEqual(sqlize(1.5, Provider.ORACLE), "1.5")

    def test_strings(self) -> None:
        self.assertEqual(sqlize("O'Brien", Provider.ORACLE), "'O''Brien'")
        self.assertEqual(sqlize("café", Provider.SQL_SERVER), "N'café'")
        self.assertEqual(sqlize("café", Provider.ORACLE), "'café'")

    def test_binary_values(self) -> None:
        self.assertEqual(sqlize(b"\x01\xab", Provider.SQL_SERVER), "0x01AB")
        self.assertEqual(sqlize(bytearray(b"\x0f"), Provider.ORACLE), "HEXTORAW('0F')")
        self.assertEqual(
            F.equals("Hash", b"\xff").render(Provider.SQL_SERVER), "Hash = 0xFF"
        )
        with self.assertRaises(ValidationError):
            sqlize(b"\x01", Provider.NEUTRAL)

    def test_datetimes(self) -> None:
        value = dt.datetime(2024, 1, 2, 13, 4, 5, 678000)
        self.assertEqual(sqlize(value, Provider.SQL_SERVER), "'2024-01-02 13:04:05.678'")
        self.assertEqual(
            sqlize(value, Provider.ORACLE),
            "TO_DATE('01/02/2024 01:04:05 PM', 'mm/dd/yyyy hh:mi:ss am')",
        )
        self.assertEqual(sqlize(value, Provider.NEUTRAL), "'2024-01-02 13:04:05'")
        self.assertEqual(sqlize(dt.date(2024, 1, 2), Provider.NEUTRAL), "'2024-01-02 00:00:00'")

    def test_column_names(self) -> None:
        self.assertEqual(render_column_name("Emp_ID", Provider.SQL_SERVER), "Emp_ID")
        self.assertEqual(render_column_name("Emp ID", Provider.SQL_SERVER), "[Emp ID]")
        self.assertEqual(render_column_name("Emp ID", Provider.ORACLE), '"Emp ID"')
        self.assertEqual(render_column_name("Emp ID"), "Emp ID")

    def test_sql_literal_helpers(self) -> None:
        self.assertEqual(SqlLiteral.current_date(Provider.ORACLE).expression, "SYSDATE")
        self.assertEqual(SqlLiteral.new_guid(Provider.SQL_SERVER).expression, "NEWID()")
        self.assertEqual(SqlLiteral.new_guid(Provider.ORACLE).expression, "SYS_GUID()")
        self.assertEqual(
            SqlLiteral.identity(Provider.SQL_SERVER).expression, "CONVERT(int, SCOPE_IDENTITY())"
        )
        for provider in (Provider.NEUTRAL, None, "db2"):
            with self.subTest(provider=provider):
                with self.assertRaises(UnsupportedProviderError):
                    SqlLiteral.identity(provider)
        with self.assertRaises(ValidationError):
            SqlLiteral("  ")


if __name__ == "__main__":
    unittest.main()
