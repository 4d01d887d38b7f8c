# tests/application/conftest.py
#
# Engines wired to an in-memory DuckDB repository and a RecordingLogger.
from __future__ import annotations

import duckdb
import pytest

from licensing.application.services.data_import import DataImportService
from licensing.application.services.group_linking import GroupLinkingService
from licensing.application.services.requirement_service import LicenceRequirementService
from licensing.infrastructure.repositories.duckdb_licence_repo import DuckDBLicenceRequirementRepo
from licensing.log import RecordingLogger


@pytest.fixture()
def repo(conn: duckdb.DuckDBPyConnection) -> DuckDBLicenceRequirementRepo:
    return DuckDBLicenceRequirementRepo(conn)


@pytest.fixture()
def logger() -> RecordingLogger:
    return RecordingLogger()


@pytest.fixture()
def linker(repo: DuckDBLicenceRequirementRepo, logger: RecordingLogger) -> GroupLinkingService:
    return GroupLinkingService(repo, logger)


@pytest.fixture()
def importer(
    repo: DuckDBLicenceRequirementRepo, linker: GroupLinkingService, logger: RecordingLogger
) -> DataImportService:
    return DataImportService(repo, linker, logger)


@pytest.fixture()
def service(
    repo: DuckDBLicenceRequirementRepo, importer: DataImportService, logger: RecordingLogger
) -> LicenceRequirementService:
    return LicenceRequirementService(repo, importer, logger, max_workers=4)

