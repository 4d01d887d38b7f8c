# licensing/application/dtos/requirements_dto.py
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from licensing.application.services.category_resolution import MissingCategory
from licensing.application.services.data_import import ImportResult
from licensing.domain.category.entities import CategoryView
from licensing.domain.requirement.resolution import (
    AggregatedRequirements,
    LicenceRequirements,
    NotFoundEntry,
    ResolvedGroup,
)


class AuthorityDTO(BaseModel):
    name: str
    abn_conditions: dict[str, str]


class GroupDTO(BaseModel):
    name: str
    min_required: int
    state: str
    rule: str
    authority: AuthorityDTO
    classes: list[str]

    @classmethod
    def from_domain(cls, group: ResolvedGroup) -> GroupDTO:
        return cls(
            name=group.name,
            min_required=group.min_required,
            state=group.state,
            rule=group.rule,
            authority=AuthorityDTO(name=group.authority_name, abn_conditions=dict(group.abn_conditions)),
            classes=list(group.classes),
        )


class StateDTO(BaseModel):
    licence_required: bool
    licence_note: str
    groups: list[str]


class CategoryDTO(BaseModel):
    name: str
    sub_category_name: str | None = None
    is_parent: bool
    states: dict[str, StateDTO]


class LicenceRequirementsDTO(BaseModel):
    groups: dict[str, GroupDTO]
    categories: list[CategoryDTO]

    @classmethod
    def from_domain(cls, requirements: LicenceRequirements) -> LicenceRequirementsDTO:
        return cls(
            groups={key: GroupDTO.from_domain(g) for key, g in requirements.groups.items()},
            categories=[
                CategoryDTO(
                    name=c.name,
                    sub_category_name=c.sub_category_name,
                    is_parent=c.is_parent,
                    states={
                        state: StateDTO(
                            licence_required=s.licence_required,
                            licence_note=s.licence_note,
                            groups=list(s.groups),
                        )
                        for state, s in c.states.items()
                    },
                )
                for c in requirements.categories
            ],
        )


class NotFoundDTO(BaseModel):
    parent_category_id: int
    sub_category_id: int | None
    abn_kind: str
    reason: str

    @classmethod
    def from_domain(cls, entry: NotFoundEntry) -> NotFoundDTO:
        return cls(
            parent_category_id=entry.parent_category_id,
            sub_category_id=entry.sub_category_id,
            abn_kind=entry.abn_kind.value,
            reason=entry.reason,
        )


class BatchRequirementsDTO(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    data: LicenceRequirementsDTO
    found: int
    not_found: list[NotFoundDTO] = Field(alias="notFound")

    @classmethod
    def from_domain(cls, result: AggregatedRequirements) -> BatchRequirementsDTO:
        return cls(
            data=LicenceRequirementsDTO.from_domain(result.data),
            found=result.found,
            not_found=[NotFoundDTO.from_domain(e) for e in result.not_found],
        )


class MissingCategoryDTO(BaseModel):
    name: str
    sub_category_name: str | None = None
    reason: str
    type: str

    @classmethod
    def from_domain(cls, missing: MissingCategory) -> MissingCategoryDTO:
        return cls(
            name=missing.name,
            sub_category_name=missing.sub_category_name,
            reason=missing.reason,
            type=missing.type,
        )


class UpdateResultDTO(BaseModel):
    message: str
    updated: bool
    processed: int
    missing: list[MissingCategoryDTO]

    @classmethod
    def from_domain(cls, result: ImportResult, message: str) -> UpdateResultDTO:
        return cls(
            message=message,
            updated=result.processed > 0,
            processed=result.processed,
            missing=[MissingCategoryDTO.from_domain(m) for m in result.missing],
        )


class CategoryViewDTO(BaseModel):
    parent_category_id: int
    name: str
    short_name: str | None
    sub_category_id: int | None

    @classmethod
    def from_domain(cls, view: CategoryView) -> CategoryViewDTO:
        return cls(
            parent_category_id=view.parent_category_id,
            name=view.name,
            short_name=view.short_name,
            sub_category_id=view.sub_category_id,
        )
