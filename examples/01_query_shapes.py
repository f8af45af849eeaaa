"""Run one table through every Query output shape on SQLite."""

from __future__ import annotations

import sqlite3
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

# Allow running this script directly from repository root.
PROJECT_ROOT = next(
    (parent for parent in Path(__file__).resolve().parents if (parent / "portasql").exists()),
    None,
)
if PROJECT_ROOT and str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from portasql import AutoTruncate, CommandKind, DbCapture, Parameter, Query, QuerySettings, RowParser


@dataclass
class Employee:
    # "First Name" maps here once whitespace is removed.
    FirstName: Optional[str] = None
    Age: int = 0


def main() -> None:
    conn = sqlite3.connect(":memory:")
    settings = QuerySettings(auto_truncate=AutoTruncate.ZAP)

    try:
        conn.execute("CREATE TABLE employees (id INTEGER PRIMARY KEY, name TEXT, age INTEGER, notes TEXT)")
        conn.executemany(
            "INSERT INTO employees (name, age, notes) VALUES (?, ?, ?)",
            [("Sam", 42, "  lead "), ("Ana", 35, "   ")],
        )

        # 1) Typed rows through the auto-mapper.
        query = Query(
            'SELECT name AS "First Name", age AS Age FROM employees WHERE age > :min_age',
            connection=conn,
            parameters=[Parameter("min_age", 30)],
            settings=settings,
        )
        print("Employees:", query.as_collection(Employee))

        # 2) Plain value lists; ZAP trims and nulls blank strings.
        print("Notes:", Query("SELECT notes FROM employees", connection=conn, settings=settings).as_objects())

        # 3) Buffered table plus captured column metadata.
        capture = DbCapture()
        table = Query(
            "employees",
            connection=conn,
            command_kind=CommandKind.TABLE_DIRECT,
            capture=capture,
            settings=settings,
        ).as_table()
        print("Table:", table.name, capture.column_names, len(table))

        # 4) Live cursor, closed by the context manager.
        with Query("SELECT name FROM employees", connection=conn, settings=settings).as_cursor() as cursor:
            print("Names:", [row[0] for row in cursor])

        # 5) Scalars and non-queries.
        print("Count:", Query("SELECT COUNT(*) FROM employees", connection=conn, settings=settings).as_scalar())
        print("Names as text:", Query("SELECT name FROM employees", connection=conn).as_collection(RowParser.scalar_str()))
        updated = Query("UPDATE employees SET age = age + 1", connection=conn, settings=settings).execute()
        print("Updated row count:", updated)
    finally:
        conn.close()


if __name__ == "__main__":
    main()
