# licensing/application/services/requirement_service.py
#
# Resolves which licences a tradesperson needs for a category in a
# jurisdiction, singly or in batches, and fronts the import engine.
#
# Design decisions:
#   - Single resolution is a fixed read pipeline: compatibility check, parent
#     by id, sub-category by id, the unique category state, its linked groups,
#     their licence types filtered by jurisdiction, the ABN note for the
#     requested kind. Any missing step raises NotFoundError.
#   - Licence types are filtered here, at read time: a type applies when its
#     state is the requested one or National.
#   - A group with no group-level ABN notes falls back to the legacy notes
#     stored against the category state.
#   - Batch resolution submits each request to a ThreadPoolExecutor. The
#     repository opens a cursor per call, so workers share no store state.
#     A failing request becomes a not-found entry; it never cancels the rest.
#
# Invariants:
#   - A resolved category has exactly one state key: the requested one.
#   - Groups are keyed by their stored key, or by the slug of their name for
#     rows that predate keys.
from __future__ import annotations

from collections.abc import Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor
from typing import Any

from licensing.domain.category.entities import CategoryState
from licensing.domain.category.value_objects import DEFAULT_STATE, category_path, normalize_sub_category_id
from licensing.domain.errors import NotFoundError
from licensing.domain.requirement.entities import LicenceRequirementGroup
from licensing.domain.requirement.enums import AbnConditionKind
from licensing.domain.requirement.repository import LicenceRequirementRepository
from licensing.domain.requirement.resolution import (
    AggregatedRequirements,
    CategoryOutcome,
    CategoryRequest,
    LicenceRequirements,
    ResolvedCategory,
    ResolvedGroup,
    ResolvedState,
)
from licensing.domain.requirement.services import (
    UNKNOWN_ERROR,
    aggregate_results,
    licence_applies_in,
    validate_category_compatibility,
)
from licensing.domain.requirement.value_objects import group_key_from_name
from licensing.log import Logger

from .data_import import DataImportService, ImportResult


class LicenceRequirementService:
    def __init__(
        self,
        repository: LicenceRequirementRepository,
        importer: DataImportService,
        logger: Logger,
        *,
        max_workers: int = 8,
    ) -> None:
        self._repo = repository
        self._importer = importer
        self._log = logger
        self._max_workers = max(1, max_workers)

    def get_licence_requirements(
        self,
        parent_category_id: int,
        sub_category_id: int | None,
        abn_kind: AbnConditionKind,
        state: str = DEFAULT_STATE,
    ) -> LicenceRequirements:
        sub_category_id = normalize_sub_category_id(sub_category_id)
        if not validate_category_compatibility(parent_category_id, sub_category_id):
            raise NotFoundError(
                f"Invalid category combination: parent_category_id={parent_category_id}, "
                f"sub_category_id={sub_category_id}",
                details={"parent_category_id": parent_category_id, "sub_category_id": sub_category_id},
            )

        parent = self._repo.find_parent_category_by_id(parent_category_id)
        if parent is None:
            raise NotFoundError(
                f"Parent category with ID {parent_category_id} not found",
                details={"parent_category_id": parent_category_id},
            )

        sub = None
        if sub_category_id is not None:
            sub = self._repo.find_sub_category_by_id(sub_category_id)
            if sub is None:
                raise NotFoundError(
                    f"Sub-category with ID {sub_category_id} not found",
                    details={"sub_category_id": sub_category_id},
                )

        sub_name = sub.name if sub else None
        category_state = self._repo.find_category_state(parent.id, sub_category_id, state)
        if category_state is None or category_state.id is None:
            raise NotFoundError(
                f"No licence requirements found for {category_path(parent.name, sub_name)} in {state}",
                details={"parent_category_id": parent.id, "sub_category_id": sub_category_id, "state": state},
            )

        linked = self._repo.find_category_state_licence_groups(category_state.id)
        if not linked:
            self._log.warning(f"No groups linked to {category_path(parent.name, sub_name)} in {state}")

        groups: dict[str, ResolvedGroup] = {}
        for group in linked:
            resolved = self._resolve_group(group, category_state, abn_kind, state)
            groups.setdefault(resolved.key, resolved)

        category = ResolvedCategory(
            name=parent.name,
            sub_category_name=sub_name,
            is_parent=sub is None,
            states={
                state: ResolvedState(
                    licence_required=category_state.licence_required,
                    licence_note=category_state.licence_note,
                    groups=tuple(groups),
                )
            },
        )
        return LicenceRequirements(groups=groups, categories=[category])

    def _resolve_group(
        self,
        group: LicenceRequirementGroup,
        category_state: CategoryState,
        abn_kind: AbnConditionKind,
        state: str,
    ) -> ResolvedGroup:
        classes: tuple[str, ...] = ()
        if group.id is not None:
            classes = tuple(
                t.name for t in self._repo.find_licence_types_by_group(group.id) if licence_applies_in(t.state, state)
            )

        conditions = group.abn_conditions
        if conditions.is_empty() and category_state.id is not None:
            conditions = self._repo.load_abn_conditions(category_state.id)

        return ResolvedGroup(
            key=group.key or group_key_from_name(group.name),
            name=group.name,
            min_required=group.min_required,
            state=group.state,
            authority_name=group.authority_name,
            abn_conditions=conditions.for_kind(abn_kind),
            classes=classes,
            rule=group.describe_rule(len(classes)),
        )

    def _resolve_outcome(self, request: CategoryRequest) -> CategoryOutcome:
        try:
            requirements = self.get_licence_requirements(
                request.parent_category_id,
                request.sub_category_id,
                request.abn_kind,
                request.state,
            )
        except Exception as e:  # noqa: BLE001
            self._log.debug(f"Request {request} not resolved: {e}")
            return CategoryOutcome(request=request, error=str(e) or UNKNOWN_ERROR)
        return CategoryOutcome(request=request, requirements=requirements)

    def get_licence_requirements_multiple(self, requests: Sequence[CategoryRequest]) -> AggregatedRequirements:
        if not requests:
            return aggregate_results([])
        workers = min(self._max_workers, len(requests))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            outcomes = list(pool.map(self._resolve_outcome, requests))
        result = aggregate_results(outcomes)
        self._log.info(f"Batch resolved: {result.found} found, {len(result.not_found)} not found")
        return result

    def update_licence_requirements(self, raw: Mapping[str, Any]) -> ImportResult:
        """Selective, idempotent update of the sections present in raw."""
        return self._importer.update_licence_data_selectively(raw)

    def import_licence_requirements(self, raw: Mapping[str, Any]) -> ImportResult:
        """Full replace of all licence rule data."""
        return self._importer.import_licence_data(raw)
