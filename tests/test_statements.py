from __future__ import annotations

import datetime as dt
import unittest

from portasql.core.dialects import STATEMENT_PROVIDERS, dialect_for
from portasql.core.exceptions import UnsupportedProviderError, ValidationError
from portasql.core.filters import F
from portasql.core.literals import SqlLiteral
from portasql.core.parameters import Parameter
from portasql.core.providers import Provider
from portasql.core.statements import (
    build_delete,
    build_function_call,
    build_insert,
    build_insert_and_get_identity,
    build_update,
)

SS = Provider.SQL_SERVER
ORA = Provider.ORACLE


class InsertTests(unittest.TestCase):
    def test_insert_sql_server(self) -> None:
        self.assertEqual(
            build_insert(SS, "Employees", [("Name", "Sam"), ("Age", 42)]),
            "INSERT INTO Employees (Name, Age) VALUES ('Sam', 42)",
        )

    def test_insert_oracle_is_terminated(self) -> None:
        self.assertEqual(
            build_insert(ORA, "Employees", {"Name": "Sam", "Age": 42}),
            "INSERT INTO Employees (Name, Age) VALUES ('Sam', 42);",
        )

    def test_insert_from_parameters_and_literals(self) -> None:
        sql = build_insert(
            SS,
            "Audit",
            [
                Parameter("Note", None),
                Parameter("Created", SqlLiteral.current_date(SS)),
                Parameter("Emp Name", "Zoë"),
            ],
        )
        self.assertEqual(
            sql, "INSERT INTO Audit (Note, Created, [Emp Name]) VALUES (NULL, GETDATE(), N'Zoë')"
        )

    def test_insert_oracle_dates(self) -> None:
        sql = build_insert(ORA, "T", [("D", dt.datetime(2023, 12, 31, 23, 59, 0))])
        self.assertEqual(
            sql,
            "INSERT INTO T (D) VALUES (TO_DATE('12/31/2023 11:59:00 PM', 'mm/dd/yyyy hh:mi:ss am'));",
        )

    def test_insert_binary(self) -> None:
        self.assertEqual(
            build_insert(ORA, "Files", [("Data", b"\x01\x02")]),
            "INSERT INTO Files (Data) VALUES (HEXTORAW('0102'));",
        )
        self.assertEqual(
            build_insert(SS, "Files", [("Data", b"\x01\x02")]),
            "INSERT INTO Files (Data) VALUES (0x0102)",
        )

    def test_insert_and_get_identity(self) -> None:
        self.assertEqual(
            build_insert_and_get_identity(SS, "T", [("A", 1)]),
            "INSERT INTO T (A) VALUES (1) SELECT CONVERT(int, SCOPE_IDENTITY())",
        )
        self.assertEqual(
            build_insert_and_get_identity(ORA, "T", [("A", 1)]),
            "INSERT INTO T (A) VALUES (1); SELECT LAST_INSERT_ID();",
        )

    def test_insert_and_get_identity_with_custom_query(self) -> None:
        self.assertEqual(
            build_insert_and_get_identity(SS, "T", [("A", 1)], identity_sql="SELECT @@IDENTITY"),
            "INSERT INTO T (A) VALUES (1) SELECT @@IDENTITY",
        )

    def test_insert_requires_columns(self) -> None:
        for columns in ([], {}, None):
            with self.subTest(columns=columns):
                with self.assertRaises(ValidationError):
                    build_insert(SS, "T", columns)
        with self.assertRaises(ValidationError):
            build_insert(SS, "T", [("A", 1, 2)])
        with self.assertRaises(ValidationError):
            build_insert(SS, " ", [("A", 1)])


class UpdateDeleteTests(unittest.TestCase):
    def test_update(self) -> None:
        where = F.equals("Id", 5)
        self.assertEqual(
            build_update(SS, "T", {"A": 1, "B": "x"}, where),
            "UPDATE T SET A = 1, B = 'x' WHERE Id = 5",
        )
        self.assertEqual(
            build_update(ORA, "T", {"A": 1, "B": "x"}, where),
            "UPDATE T SET A = 1, B = 'x' WHERE Id = 5;",
        )

    def test_update_without_filter_and_with_text_filter(self) -> None:
        self.assertEqual(build_update(SS, "T", [("A", None)]), "UPDATE T SET A = NULL")
        self.assertEqual(
            build_update(ORA, "T", [("Emp Name", "x")], "Id > 3"),
            'UPDATE T SET "Emp Name" = \'x\' WHERE Id > 3;',
        )

    def test_filter_renders_with_statement_dialect(self) -> None:
        where = F.and_(F.equals("First Name", "a"), F.is_null("B")).with_provider(SS)
        self.assertEqual(
            build_delete(ORA, "T", where),
            'DELETE FROM T WHERE ( "First Name" = \'a\' AND B IS NULL );',
        )

    def test_delete(self) -> None:
        self.assertEqual(build_delete(SS, "T"), "DELETE FROM T")
        self.assertEqual(build_delete(SS, "T", F.equals("Id", 5)), "DELETE FROM T WHERE Id = 5")
        self.assertEqual(build_delete(ORA, "T", F.equals("Id", 5)), "DELETE FROM T WHERE Id = 5;")
        self.assertEqual(build_delete(ORA, "T"), "DELETE FROM T;")

    def test_drop(self) -> None:
        self.assertEqual(build_delete(SS, "T", drop=True), "TRUNCATE TABLE T")
        self.assertEqual(build_delete(SS, "T", drop=True, purge=True), "TRUNCATE TABLE T")
        self.assertEqual(build_delete(ORA, "T", drop=True), "DROP TABLE T;")
        self.assertEqual(build_delete(ORA, "T", drop=True, purge=True), "DROP TABLE T PURGE;")

    def test_drop_with_filter_is_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            build_delete(ORA, "T", F.equals("Id", 1), drop=True)

    def test_invalid_filter_type(self) -> None:
        with self.assertRaises(TypeError):
            build_delete(SS, "T", 42)


class FunctionCallTests(unittest.TestCase):
    def test_function_call(self) -> None:
        self.assertEqual(build_function_call(SS, "fn"), "SELECT * FROM fn()")
        self.assertEqual(build_function_call(SS, "fn", [1, "a"]), "SELECT * FROM fn(1, 'a')")
        self.assertEqual(build_function_call(ORA, "fn"), "SELECT * FROM TABLE(fn());")
        self.assertEqual(
            build_function_call(ORA, "fn", [1, Parameter("p", "a")]),
            "SELECT * FROM TABLE(fn(1, 'a'));",
        )


class UnsupportedProviderTests(unittest.TestCase):
    def test_every_builder_rejects_other_providers(self) -> None:
        builders = [
            lambda p: build_insert(p, "T", [("A", 1)]),
            lambda p: build_insert_and_get_identity(p, "T", [("A", 1)]),
            lambda p: build_update(p, "T", [("A", 1)]),
            lambda p: build_delete(p, "T"),
            lambda p: build_delete(p, "T", drop=True),
            lambda p: build_function_call(p, "fn"),
        ]
        for provider in (Provider.NEUTRAL, None, "db2"):
            for build in builders:
                with self.subTest(provider=provider):
                    with self.assertRaises(UnsupportedProviderError) as ctx:
                        build(provider)
                    self.assertEqual(ctx.exception.supported, STATEMENT_PROVIDERS)
                    self.assertIn("sqlserver", str(ctx.exception))
                    self.assertIn("oracle", str(ctx.exception))

    def test_error_is_serializable(self) -> None:
        with self.assertRaises(UnsupportedProviderError) as ctx:
            dialect_for(Provider.NEUTRAL, operation="insert")
        payload = ctx.exception.to_dict()
        self.assertEqual(payload["type"], "UnsupportedProviderError")
        self.assertEqual(payload["details"]["provider"], "neutral")
        self.assertEqual(payload["details"]["supported"], ["sqlserver", "oracle"])
        self.assertTrue(payload["message"].startswith("insert: "))

    def test_provider_aliases(self) -> None:
        self.assertIs(dialect_for("mssql").provider, SS)
        self.assertIs(dialect_for("SQL_SERVER").provider, SS)
        self.assertIs(dialect_for("Oracle").provider, ORA)


if __name__ == "__main__":
    unittest.main()
