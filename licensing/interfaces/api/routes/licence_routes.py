# licensing/interfaces/api/routes/licence_routes.py
from typing import Any

from fastapi import APIRouter, Body, Depends, Query

from licensing.application.dtos.requirements_dto import (
    BatchRequirementsDTO,
    LicenceRequirementsDTO,
    UpdateResultDTO,
)
from licensing.application.services.category_request import parse_batch_filter, parse_category_request
from licensing.application.services.requirement_service import LicenceRequirementService
from licensing.infrastructure.config import get_settings
from licensing.interfaces.api.dependencies import get_requirement_service

router = APIRouter(prefix="/licences")


@router.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/requirements", response_model=LicenceRequirementsDTO)
def get_requirements(
    parent_category_id: int = Query(...),
    abn_kind: str | None = Query(default=None),
    sub_category_id: str | None = Query(default=None),
    state: str | None = Query(default=None),
    service: LicenceRequirementService = Depends(get_requirement_service),  # noqa: B008
) -> LicenceRequirementsDTO:
    request = parse_category_request(
        {
            "parent_category_id": parent_category_id,
            "sub_category_id": sub_category_id,
            "abn_kind": abn_kind,
            "state": state,
        },
        "Single request",
        default_state=get_settings().default_state,
    )
    requirements = service.get_licence_requirements(
        request.parent_category_id, request.sub_category_id, request.abn_kind, request.state
    )
    return LicenceRequirementsDTO.from_domain(requirements)


@router.get("/requirements-batch", response_model=BatchRequirementsDTO)
def get_requirements_batch(
    filter: str | None = Query(default=None),  # noqa: A002
    service: LicenceRequirementService = Depends(get_requirement_service),  # noqa: B008
) -> BatchRequirementsDTO:
    requests = parse_batch_filter(filter, default_state=get_settings().default_state)
    return BatchRequirementsDTO.from_domain(service.get_licence_requirements_multiple(requests))


@router.post("/update-licence-requirements", response_model=UpdateResultDTO)
def update_licence_requirements(
    payload: Any = Body(...),  # noqa: B008
    service: LicenceRequirementService = Depends(get_requirement_service),  # noqa: B008
) -> UpdateResultDTO:
    result = service.update_licence_requirements(payload)
    return UpdateResultDTO.from_domain(result, "Licence requirements updated successfully")


@router.post("/import", response_model=UpdateResultDTO)
def import_licence_requirements(
    payload: Any = Body(...),  # noqa: B008
    service: LicenceRequirementService = Depends(get_requirement_service),  # noqa: B008
) -> UpdateResultDTO:
    result = service.import_licence_requirements(payload)
    return UpdateResultDTO.from_domain(result, "Licence requirements imported successfully")
