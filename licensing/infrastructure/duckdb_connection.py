# licensing/infrastructure/duckdb_connection.py
from __future__ import annotations

from pathlib import Path

import duckdb

from .config import get_settings

SCHEMA_PATH = Path(__file__).parent / "schema.sql"

_connection: duckdb.DuckDBPyConnection | None = None


def init_schema(conn: duckdb.DuckDBPyConnection) -> None:
    """Create tables, sequences and views. Safe to run on an existing database."""
    conn.execute(SCHEMA_PATH.read_text(encoding="utf-8"))


def get_connection() -> duckdb.DuckDBPyConnection:
    global _connection  # noqa: PLW0603
    if _connection is None:
        _connection = duckdb.connect(get_settings().duckdb_path)
        init_schema(_connection)
    return _connection


def set_connection(conn: duckdb.DuckDBPyConnection) -> None:
    """Used by tests to inject an in-memory DuckDB."""
    global _connection  # noqa: PLW0603
    _connection = conn
