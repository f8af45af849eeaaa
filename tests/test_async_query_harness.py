from __future__ import annotations

import asyncio
import sqlite3
import unittest

from portasql.core.capture import DbCapture
from portasql.core.dml_async import (
    call_function_async,
    delete_async,
    insert_and_get_identity_async,
    insert_async,
    update_async,
)
from portasql.core.exceptions import UnsupportedOperationError, ValidationError
from portasql.core.filters import F
from portasql.core.providers import Provider
from portasql.core.query_async import AsyncQuery
from portasql.core.row_parser import RowParser
from portasql.core.settings import QuerySettings
from portasql.core.text import AutoTruncate
from portasql.core.types import CommandKind
from tests.query_test_helpers import (
    AsyncScriptedCommandBuilder,
    FailingCapture,
    FakeAsyncConnection,
    FakeAsyncCursor,
    Person,
    TrackingConnection,
    TrackingOpener,
    seed_people,
    temp_db_path,
)

SETTINGS = QuerySettings(default_provider=None, auto_truncate=AutoTruncate.NONE)


class AsyncQuerySqliteTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self.db_path = temp_db_path(self)
        seed_people(self.db_path)
        self.opener = TrackingOpener(self.db_path)

    def owned(self, statement: str, **kwargs) -> AsyncQuery:
        kwargs.setdefault("settings", SETTINGS)
        return AsyncQuery(statement, opener=self.opener, **kwargs)

    def assert_all_closed(self) -> None:
        self.assertTrue(self.opener.opened)
        self.assertEqual([c.close_calls for c in self.opener.opened], [1] * len(self.opener.opened))

    async def test_output_shapes_with_sync_driver(self) -> None:
        people = await self.owned('SELECT name AS "First Name", age AS Age FROM people ORDER BY id').as_collection(Person)
        self.assertEqual([p.FirstName for p in people], ["Ann", "Bob", "Cy"])

        rows = await self.owned("SELECT notes FROM people ORDER BY id", auto_truncate=AutoTruncate.ZAP).as_objects()
        self.assertEqual(rows, [["note"], [None], [None]])

        table = await self.owned("people", command_kind=CommandKind.TABLE_DIRECT).as_table()
        self.assertEqual((table.name, len(table)), ("people", 3))

        scalar = await self.owned("SELECT '   '", auto_truncate=AutoTruncate.ZAP_EMPTY_ONLY).as_scalar()
        self.assertEqual(scalar, "   ")
        self.assert_all_closed()

    async def test_table_string_policies(self) -> None:
        table = await self.owned(
            "SELECT id, notes FROM people ORDER BY id", auto_truncate=AutoTruncate.TRIM
        ).as_table()
        self.assertEqual(table.rows, [(1, "note"), (2, ""), (3, "")])

        for policy in (AutoTruncate.ZAP, AutoTruncate.ZAP_EMPTY_ONLY):
            with self.subTest(policy=policy):
                with self.assertRaises(UnsupportedOperationError):
                    await self.owned("SELECT notes FROM people", auto_truncate=policy).as_table()
        self.assertEqual(len(self.opener.opened), 1)
        self.assert_all_closed()

    async def test_cursor_released_when_capture_fails(self) -> None:
        builder = AsyncScriptedCommandBuilder()
        query = self.owned("SELECT id FROM people", capture=FailingCapture(), command_builder=builder)
        with self.assertRaises(RuntimeError):
            await query.as_cursor(keep_open=True)
        command = builder.commands[0]
        self.assertTrue(command.reader.closed)
        self.assertTrue(command.closed)
        self.assert_all_closed()

    async def test_owned_connection_closed_when_driver_fails(self) -> None:
        with self.assertRaises(sqlite3.OperationalError):
            await self.owned("SELECT * FROM missing").as_objects()
        with self.assertRaises(sqlite3.OperationalError):
            await self.owned("SELECT * FROM missing").as_cursor()
        self.assert_all_closed()

    async def test_live_cursor(self) -> None:
        capture = DbCapture()
        async with await self.owned("SELECT id FROM people ORDER BY id", capture=capture).as_cursor() as cursor:
            ids = [row[0] async for row in cursor]
        self.assertEqual(ids, [1, 2, 3])
        self.assertEqual(capture.column_names, ["id"])
        self.assert_all_closed()

        kept = await self.owned("SELECT id FROM people").as_cursor(keep_open=True)
        await kept.close()
        self.assertEqual(kept.connection.close_calls, 0)
        kept.connection.close()

    async def test_external_connection_stays_open(self) -> None:
        conn = TrackingConnection(self.db_path)
        self.addCleanup(conn.close)
        query = AsyncQuery("SELECT COUNT(*) FROM people", connection=conn, settings=SETTINGS)
        self.assertEqual(await query.as_scalar(), 3)
        self.assertEqual(await query.execute(), -1)
        self.assertEqual(conn.close_calls, 0)

    async def test_construction_rules(self) -> None:
        with self.assertRaises(ValidationError):
            AsyncQuery("SELECT 1", settings=SETTINGS)
        with self.assertRaises(ValidationError):
            AsyncQuery("SELECT 1", opener=self.opener, transaction=object(), settings=SETTINGS)

    async def test_write_helpers(self) -> None:
        conn = TrackingConnection(self.db_path)
        self.addCleanup(conn.close)
        options = {"connection": conn, "settings": SETTINGS}
        self.assertEqual(await insert_async(Provider.SQL_SERVER, "people", [("id", 9), ("name", "Eve")], **options), 1)
        self.assertEqual(await update_async(Provider.SQL_SERVER, "people", [("age", 20)], F.equals("id", 9), **options), 1)
        self.assertEqual(await delete_async(Provider.SQL_SERVER, "people", F.le("age", 25), **options), 2)


class AsyncDriverTests(unittest.IsolatedAsyncioTestCase):
    async def test_native_async_driver(self) -> None:
        cursor = FakeAsyncCursor(rows=[(" a ",), (None,)], columns=["code"])
        conn = FakeAsyncConnection(cursor)

        async def opener() -> FakeAsyncConnection:
            return conn

        query = AsyncQuery("SELECT code FROM codes", opener=opener,
                           auto_truncate=AutoTruncate.TRIM, settings=SETTINGS)
        self.assertEqual(await query.as_objects(), [["a"], [None]])
        self.assertTrue(cursor.closed)
        self.assertEqual(conn.close_calls, 1)

    async def test_deadline_cancels_and_releases(self) -> None:
        cursor = FakeAsyncCursor(rows=[(1,)], columns=["x"], delay=1.0)
        conn = FakeAsyncConnection(cursor)

        async def opener() -> FakeAsyncConnection:
            return conn

        query = AsyncQuery("SELECT slow()", opener=opener, settings=SETTINGS)
        with self.assertRaises(asyncio.TimeoutError):
            await query.as_scalar(deadline=0.05)
        self.assertTrue(cursor.closed)
        self.assertEqual(conn.close_calls, 1)

    async def test_deadline_not_reached(self) -> None:
        cursor = FakeAsyncCursor(rows=[(1,)], columns=["x"])
        query = AsyncQuery("SELECT 1", connection=FakeAsyncConnection(cursor), settings=SETTINGS)
        self.assertEqual(await query.as_scalar(deadline=5), 1)

    async def test_function_and_identity_helpers(self) -> None:
        cursor = FakeAsyncCursor(rows=[(1, "a")], columns=["id", "code"])
        codes = await call_function_async(
            Provider.ORACLE, "codes", ["x"], connection=FakeAsyncConnection(cursor),
            parser=RowParser.from_objects(lambda values: values[1]), settings=SETTINGS,
        )
        self.assertEqual(codes, ["a"])
        self.assertEqual(cursor.executed, [("SELECT * FROM TABLE(codes('x'));", None)])

        cursor = FakeAsyncCursor(rows=[(12,)], columns=["id"])
        identity = await insert_and_get_identity_async(
            Provider.ORACLE, "T", [("A", "b")], connection=FakeAsyncConnection(cursor),
            deadline=5, settings=SETTINGS,
        )
        self.assertEqual(identity, 12)
        self.assertEqual(
            cursor.executed[0][0], "INSERT INTO T (A) VALUES ('b'); SELECT LAST_INSERT_ID();"
        )


if __name__ == "__main__":
    unittest.main()
