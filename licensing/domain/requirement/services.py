# licensing/domain/requirement/services.py
#
# Pure business rules for licence requirements.
#
# Design decisions:
#   - Plain module-level functions, no IO. The import engine, the linker and
#     the resolver call them; none of them touches the repository.
#   - validate_import_data is exhaustive: it walks the whole payload and
#     returns every violation with a field path, so the caller can report all
#     problems in one response.
#   - With require_all_sections=False (selective update) either top-level
#     section may be omitted, but at least one must be present.
#   - A state entry's abn_conditions object is optional. When present it must
#     be an object.
#   - aggregate_results builds new containers and never mutates the outcomes
#     it receives.
#
# Invariants:
#   - aggregate_results(outcomes).found + len(.not_found) == len(outcomes).
#   - The first outcome that contributes a group key wins; later duplicates
#     are dropped.
from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from ..category.entities import CategoryState
from ..category.value_objects import NATIONAL, normalize_sub_category_id
from .entities import AbnCondition, LicenceRequirementGroup
from .enums import AbnConditionKind
from .resolution import (
    AggregatedRequirements,
    CategoryOutcome,
    LicenceRequirements,
    NotFoundEntry,
    ResolvedCategory,
    ResolvedGroup,
)
from .value_objects import is_valid_group_key

UNKNOWN_ERROR = "Unknown error"


@dataclass(frozen=True)
class ImportValidationResult:
    errors: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_non_blank_str(value: object) -> bool:
    return isinstance(value, str) and bool(value.strip())


def _validate_group(key: object, group: object, errors: list[str]) -> None:
    path = f"groups.{key}"
    if not is_valid_group_key(key):
        errors.append(f"{path}: invalid group key {key!r}, expected lowercase letters, digits and underscores")
    if not isinstance(group, Mapping):
        errors.append(f"{path}: must be an object")
        return
    if not _is_non_blank_str(group.get("name")):
        errors.append(f"{path}.name: is required and must be a string")
    min_required = group.get("min_required")
    if not _is_int(min_required) or min_required <= 0:  # type: ignore[operator]
        errors.append(f"{path}.min_required: must be a positive integer")
    if "state" in group and group["state"] is not None and not isinstance(group["state"], str):
        errors.append(f"{path}.state: must be a string")
    authority = group.get("authority")
    if authority is not None:
        if not isinstance(authority, Mapping):
            errors.append(f"{path}.authority: must be an object")
        else:
            if authority.get("name") is not None and not isinstance(authority["name"], str):
                errors.append(f"{path}.authority.name: must be a string")
            abn = authority.get("abn_conditions")
            if abn is not None and not isinstance(abn, Mapping):
                errors.append(f"{path}.authority.abn_conditions: must be an object")
    classes = group.get("classes")
    if classes is None:
        return
    if not isinstance(classes, list):
        errors.append(f"{path}.classes: must be an array")
        return
    for i, entry in enumerate(classes):
        name = entry.get("name") if isinstance(entry, Mapping) else entry
        if not _is_non_blank_str(name):
            errors.append(f"{path}.classes[{i}]: must be a licence name or an object with a name")


def _validate_state(path: str, state: object, errors: list[str]) -> None:
    if not isinstance(state, Mapping):
        errors.append(f"{path}: must be an object")
        return
    if not isinstance(state.get("licence_required"), bool):
        errors.append(f"{path}.licence_required: must be a boolean")
    note = state.get("licence_note")
    if note is not None and not isinstance(note, str):
        errors.append(f"{path}.licence_note: must be a string")
    # Optional in both modes: the documented feed omits it on state entries.
    abn = state.get("abn_conditions")
    if abn is not None and not isinstance(abn, Mapping):
        errors.append(f"{path}.abn_conditions: must be an object")
    if not isinstance(state.get("groups"), list):
        errors.append(f"{path}.groups: must be an array")


def _validate_category(index: int, category: object, errors: list[str]) -> None:
    path = f"categories[{index}]"
    if not isinstance(category, Mapping):
        errors.append(f"{path}: must be an object")
        return
    if not _is_non_blank_str(category.get("name")):
        errors.append(f"{path}.name: is required and must be a string")
    sub_name = category.get("sub_category_name")
    if sub_name is not None and not isinstance(sub_name, str):
        errors.append(f"{path}.sub_category_name: must be a string")
    if not isinstance(category.get("is_parent"), bool):
        errors.append(f"{path}.is_parent: must be a boolean")
    states = category.get("states")
    if not isinstance(states, Mapping):
        errors.append(f"{path}.states: object is required")
        return
    for state_key, state in states.items():
        _validate_state(f"{path}.states.{state_key}", state, errors)


def validate_import_data(payload: object, *, require_all_sections: bool = True) -> ImportValidationResult:
    """Collect every violation in an import payload."""
    errors: list[str] = []
    if not isinstance(payload, Mapping):
        errors.append('Invalid data format. Expected an object with "groups" and "categories" properties.')
        return ImportValidationResult(errors)

    has_groups = payload.get("groups") is not None
    has_categories = payload.get("categories") is not None
    if require_all_sections and not (has_groups and has_categories):
        errors.append('Invalid data format. Expected "groups" and "categories" properties.')
        return ImportValidationResult(errors)
    if not (has_groups or has_categories):
        errors.append('Invalid data format. Expected "groups" and/or "categories" properties.')
        return ImportValidationResult(errors)

    if has_groups:
        groups = payload["groups"]
        if not isinstance(groups, Mapping):
            errors.append("groups: must be an object keyed by group key")
        else:
            for key, group in groups.items():
                _validate_group(key, group, errors)

    if has_categories:
        categories = payload["categories"]
        if not isinstance(categories, list):
            errors.append("categories: must be an array")
        else:
            for index, category in enumerate(categories):
                _validate_category(index, category, errors)

    return ImportValidationResult(errors)


def validate_category_compatibility(parent_category_id: int, sub_category_id: int | None) -> bool:
    """parent must be positive; sub is None, the 0 sentinel or positive."""
    if not _is_int(parent_category_id) or parent_category_id <= 0:
        return False
    if sub_category_id is None:
        return True
    return _is_int(sub_category_id) and sub_category_id >= 0


def licence_applies_in(licence_state: str, requested_state: str) -> bool:
    return licence_state == requested_state or licence_state == NATIONAL


def create_category_state(
    parent_category_id: int,
    sub_category_id: int | None,
    state: str,
    licence_required: bool,
    licence_note: str = "",
    *,
    is_parent: bool | None = None,
) -> CategoryState:
    return CategoryState.create(
        parent_category_id,
        normalize_sub_category_id(sub_category_id),
        state,
        licence_required,
        licence_note,
        is_parent=is_parent,
    )


def create_abn_condition(category_state_id: int, kind: AbnConditionKind | str, message: str) -> AbnCondition:
    return AbnCondition.create(category_state_id, kind, message)


def create_licence_requirement_group(
    name: str,
    key: str,
    min_required: int,
    parent_category_id: int | None = None,
    sub_category_id: int | None = None,
) -> LicenceRequirementGroup:
    return LicenceRequirementGroup.create(
        name,
        key,
        min_required,
        parent_category_id=parent_category_id,
        sub_category_id=normalize_sub_category_id(sub_category_id),
    )


def aggregate_results(outcomes: Sequence[CategoryOutcome]) -> AggregatedRequirements:
    """Merge per-request outcomes into one response.

    Groups merge by key, first occurrence wins. Categories with the same
    (name, sub_category_name, is_parent) are consolidated into one entry whose
    states map is the union of theirs. Failed outcomes become not_found
    entries carrying the original request.
    """
    groups: dict[str, ResolvedGroup] = {}
    categories: list[ResolvedCategory] = []
    positions: dict[tuple[str, str | None, bool], int] = {}
    not_found: list[NotFoundEntry] = []
    found = 0

    for outcome in outcomes:
        requirements = outcome.requirements
        if requirements is None or not outcome.found:
            request = outcome.request
            not_found.append(
                NotFoundEntry(
                    parent_category_id=request.parent_category_id,
                    sub_category_id=request.sub_category_id,
                    abn_kind=request.abn_kind,
                    reason=outcome.error or UNKNOWN_ERROR,
                )
            )
            continue

        found += 1
        for key, group in requirements.groups.items():
            groups.setdefault(key, group)

        for category in requirements.categories:
            position = positions.get(category.identity)
            if position is None:
                positions[category.identity] = len(categories)
                categories.append(
                    ResolvedCategory(
                        name=category.name,
                        sub_category_name=category.sub_category_name,
                        is_parent=category.is_parent,
                        states=dict(category.states),
                    )
                )
            else:
                categories[position].states.update(category.states)

    return AggregatedRequirements(
        data=LicenceRequirements(groups=groups, categories=categories),
        found=found,
        not_found=not_found,
    )
