# licensing/interfaces/api/dependencies.py
from licensing.application.services.data_import import DataImportService
from licensing.application.services.group_linking import GroupLinkingService
from licensing.application.services.requirement_service import LicenceRequirementService
from licensing.infrastructure.config import get_settings
from licensing.infrastructure.duckdb_connection import get_connection
from licensing.infrastructure.repositories.duckdb_licence_repo import DuckDBLicenceRequirementRepo
from licensing.log import StdoutLogger


def get_licence_repo() -> DuckDBLicenceRequirementRepo:
    return DuckDBLicenceRequirementRepo(get_connection())


def get_requirement_service() -> LicenceRequirementService:
    settings = get_settings()
    repo = DuckDBLicenceRequirementRepo(get_connection())
    linker = GroupLinkingService(repo, StdoutLogger("group-linking", verbose=settings.verbose_logging))
    importer = DataImportService(
        repo, linker, StdoutLogger("data-import", verbose=settings.verbose_logging)
    )
    return LicenceRequirementService(
        repo,
        importer,
        StdoutLogger("requirements", verbose=settings.verbose_logging),
        max_workers=settings.batch_max_workers,
    )
