# tests/integration/conftest.py
from __future__ import annotations

from collections.abc import Generator

import duckdb
import pytest
from fastapi.testclient import TestClient


@pytest.fixture()
def client(conn: duckdb.DuckDBPyConnection) -> Generator[TestClient, None, None]:
    """FastAPI TestClient with the seeded in-memory DuckDB injected."""
    from licensing.infrastructure import duckdb_connection
    duckdb_connection.set_connection(conn)

    from licensing.infrastructure.config import get_settings
    get_settings.cache_clear()

    from licensing.interfaces.api.main import app
    with TestClient(app) as c:
        yield c
