# tests/conftest.py
#
# Shared fixtures: an in-memory DuckDB with the licensing schema and a small,
# deterministic category tree:
#   1 Air Conditioning
#   2 Plumbing -> 201 Gas Fitting (gas-fitter), 202 Drainage (drainer)
#   3 Electrical -> 301 Solar Installation (solar)
from __future__ import annotations

from collections.abc import Callable, Generator
from typing import Any

import duckdb
import pytest

from licensing.infrastructure.duckdb_connection import init_schema


def seed_categories(conn: duckdb.DuckDBPyConnection) -> None:
    conn.execute("""
        INSERT INTO parent_category VALUES
        (1, 'Air Conditioning'),
        (2, 'Plumbing'),
        (3, 'Electrical')
    """)
    conn.execute("""
        INSERT INTO sub_category VALUES
        (201, 2, 'Gas Fitting', 'gas-fitter'),
        (202, 2, 'Drainage', 'drainer'),
        (301, 3, 'Solar Installation', 'solar')
    """)


@pytest.fixture()
def conn() -> Generator[duckdb.DuckDBPyConnection, None, None]:
    connection = duckdb.connect(":memory:")
    init_schema(connection)
    seed_categories(connection)
    yield connection
    connection.close()


@pytest.fixture()
def table_count(conn: duckdb.DuckDBPyConnection) -> Callable[[str], int]:
    def _count(table: str) -> int:
        row = conn.execute(f"SELECT count(*) FROM {table}").fetchone()  # noqa: S608
        return int(row[0]) if row else 0

    return _count


@pytest.fixture()
def arc_payload() -> dict[str, Any]:
    """Air Conditioning needs one national ARC licence in NSW."""
    return {
        "groups": {
            "arc_requirement": {
                "name": "Refrigerant Handling Licence",
                "min_required": 1,
                "state": "National",
                "authority": {
                    "name": "Australian Refrigeration Council",
                    "abn_conditions": {
                        "company": "The company must hold a refrigerant trading authorisation",
                        "individual": "You must hold a refrigerant handling licence",
                        "partnership": "Each partner must hold a refrigerant handling licence",
                        "trust": "The trustee must hold a refrigerant trading authorisation",
                    },
                },
                "classes": [{"name": "Air Conditioning", "state": "National"}],
            }
        },
        "categories": [
            {
                "name": "Air Conditioning",
                "is_parent": True,
                "states": {
                    "NSW": {
                        "licence_required": True,
                        "licence_note": "ARC licence needed for split systems",
                        "groups": ["arc_requirement"],
                    }
                },
            }
        ],
    }


@pytest.fixture()
def plumbing_payload() -> dict[str, Any]:
    """Gas fitting in NSW and QLD with a state licence and a national one."""
    return {
        "groups": {
            "gas_requirement": {
                "name": "Gas Fitting Licence",
                "min_required": 1,
                "state": "NSW",
                "authority": {"name": "NSW Fair Trading"},
                "classes": [
                    {"name": "NSW Gasfitter Licence", "state": "NSW"},
                    {"name": "Type B Gas Authorisation", "state": "National"},
                ],
            },
            "drainage_requirement": {
                "name": "Drainage Licence",
                "min_required": 2,
                "state": "NSW",
                "authority": {"name": "NSW Fair Trading"},
                "classes": ["Drainer Licence", "Plumber Licence", "Supervisor Certificate"],
            },
        },
        "categories": [
            {
                "name": "Plumbing",
                "sub_category_name": "Gas Fitting",
                "is_parent": False,
                "states": {
                    "NSW": {
                        "licence_required": True,
                        "licence_note": "",
                        "abn_conditions": {"company": "Nominate a licensed supervisor"},
                        "groups": ["gas_requirement"],
                    },
                    "QLD": {"licence_required": True, "licence_note": "", "groups": ["gas_requirement"]},
                },
            },
            {
                "name": "Plumbing",
                "sub_category_name": "drainer",
                "is_parent": False,
                "states": {
                    "NSW": {"licence_required": True, "licence_note": "", "groups": ["drainage_requirement"]},
                },
            },
        ],
    }
