"""AsyncQuery over a plain sqlite3 connection, with a deadline."""

from __future__ import annotations

import asyncio
import sqlite3
import sys
from pathlib import Path

# Allow running this script directly from repository root.
PROJECT_ROOT = next(
    (parent for parent in Path(__file__).resolve().parents if (parent / "portasql").exists()),
    None,
)
if PROJECT_ROOT and str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from portasql import AsyncQuery, F, Provider, RowParser
from portasql.core import insert_async, update_async


async def main() -> None:
    # Sync DB-API connections work too: driver results that are not
    # awaitable are used as-is.
    conn = sqlite3.connect(":memory:")
    try:
        conn.execute("CREATE TABLE tasks (id INTEGER PRIMARY KEY, title TEXT, done INTEGER)")
        await insert_async(Provider.SQL_SERVER, "tasks", [("title", "write docs"), ("done", False)], connection=conn)
        await insert_async(Provider.SQL_SERVER, "tasks", [("title", "ship"), ("done", False)], connection=conn)
        await update_async(Provider.SQL_SERVER, "tasks", {"done": True}, F.equals("title", "ship"), connection=conn)

        query = AsyncQuery("SELECT title, done FROM tasks ORDER BY id", connection=conn)
        rows = await query.as_collection(RowParser.as_dict(), deadline=2.0)
        print("Tasks:", rows)

        async with await query.as_cursor() as cursor:
            async for row in cursor:
                print("Row:", tuple(row))
    finally:
        conn.close()


if __name__ == "__main__":
    asyncio.run(main())
