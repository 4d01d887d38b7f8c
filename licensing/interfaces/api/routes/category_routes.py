# licensing/interfaces/api/routes/category_routes.py
from fastapi import APIRouter, Depends

from licensing.application.dtos.requirements_dto import CategoryViewDTO
from licensing.infrastructure.repositories.duckdb_licence_repo import DuckDBLicenceRequirementRepo
from licensing.interfaces.api.dependencies import get_licence_repo

router = APIRouter()


@router.get("/categories", response_model=list[CategoryViewDTO])
def list_categories(
    repo: DuckDBLicenceRequirementRepo = Depends(get_licence_repo),  # noqa: B008
) -> list[CategoryViewDTO]:
    return [CategoryViewDTO.from_domain(v) for v in repo.list_category_view()]
