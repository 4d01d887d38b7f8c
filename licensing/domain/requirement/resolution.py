# licensing/domain/requirement/resolution.py
#
# Result types of requirement resolution.
#
# Design decisions:
#   - These are domain records, not DTOs. The application layer converts them
#     to pydantic models at the HTTP boundary, so the aggregator can be tested
#     without FastAPI.
#   - ResolvedCategory.states is a plain dict because consolidation merges
#     state maps. The aggregator always merges into a fresh copy and never
#     mutates an outcome it was given.
from __future__ import annotations

from dataclasses import dataclass, field

from ..category.value_objects import DEFAULT_STATE
from .enums import AbnConditionKind


@dataclass(frozen=True)
class CategoryRequest:
    """One (category, sub-category, ABN kind, jurisdiction) lookup."""
    parent_category_id: int
    sub_category_id: int | None
    abn_kind: AbnConditionKind
    state: str = DEFAULT_STATE


@dataclass(frozen=True)
class ResolvedGroup:
    key: str
    name: str
    min_required: int
    state: str
    authority_name: str
    abn_conditions: dict[str, str]
    classes: tuple[str, ...]
    rule: str


@dataclass(frozen=True)
class ResolvedState:
    licence_required: bool
    licence_note: str
    groups: tuple[str, ...]


@dataclass(frozen=True)
class ResolvedCategory:
    name: str
    sub_category_name: str | None
    is_parent: bool
    states: dict[str, ResolvedState]

    @property
    def identity(self) -> tuple[str, str | None, bool]:
        """Two entries describe the same category iff these match."""
        return (self.name, self.sub_category_name, self.is_parent)


@dataclass(frozen=True)
class LicenceRequirements:
    groups: dict[str, ResolvedGroup] = field(default_factory=dict)
    categories: list[ResolvedCategory] = field(default_factory=list)


@dataclass(frozen=True)
class CategoryOutcome:
    """Result of resolving one request inside a batch."""
    request: CategoryRequest
    requirements: LicenceRequirements | None = None
    error: str | None = None

    @property
    def found(self) -> bool:
        return self.requirements is not None and self.error is None


@dataclass(frozen=True)
class NotFoundEntry:
    parent_category_id: int
    sub_category_id: int | None
    abn_kind: AbnConditionKind
    reason: str


@dataclass(frozen=True)
class AggregatedRequirements:
    data: LicenceRequirements
    found: int
    not_found: list[NotFoundEntry]
