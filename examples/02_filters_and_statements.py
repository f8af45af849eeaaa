"""Preview filter and statement rendering for each provider (no database)."""

from __future__ import annotations

import datetime as dt
import sys
from pathlib import Path

# Allow running this script directly from repository root.
PROJECT_ROOT = next(
    (parent for parent in Path(__file__).resolve().parents if (parent / "portasql").exists()),
    None,
)
if PROJECT_ROOT and str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from portasql import (
    F,
    FilterBounds,
    Provider,
    SqlLiteral,
    UnsupportedProviderError,
    build_delete,
    build_function_call,
    build_insert,
    build_insert_and_get_identity,
    build_update,
)


def main() -> None:
    where = F.and_(
        F.equals("Last Name", "O'Brien"),
        F.or_(F.between("Age", 18, 65, FilterBounds.EXCLUSIVE_UPPER), F.is_null("Age")),
        F.not_(F.in_("Dept", ["HR", "Ops"])),
    )
    columns = [("Name", "Zoë"), ("Hired", dt.datetime(2024, 3, 1, 9, 30)), ("Code", SqlLiteral("NEWID()"))]

    for provider in (Provider.SQL_SERVER, Provider.ORACLE):
        print(f"--- {provider.value} ---")
        print(where.render(provider))
        print(build_insert(provider, "Employees", columns))
        print(build_insert_and_get_identity(provider, "Employees", [("Name", "Sam")]))
        print(build_update(provider, "Employees", {"Age": 43}, F.equals("Id", 7)))
        print(build_delete(provider, "Employees", where))
        print(build_delete(provider, "Staging", drop=True, purge=True))
        print(build_function_call(provider, "fn_team", [7, "dev"]))

    # Statements need a concrete dialect.
    try:
        build_insert(Provider.NEUTRAL, "Employees", columns)
    except UnsupportedProviderError as exc:
        print("Expected error:", exc)


if __name__ == "__main__":
    main()
