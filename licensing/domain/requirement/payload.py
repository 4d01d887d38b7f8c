# licensing/domain/requirement/payload.py
#
# Typed records for the import payload.
#
# Design decisions:
#   - parse_import_payload() runs only after validate_import_data() reported
#     no violations, so it dereferences fields without re-checking types.
#   - A section that is absent from the payload parses to None, not to an
#     empty tuple. The selective update uses that distinction to leave the
#     section untouched.
#   - A class entry may be a bare string or an object with name/state/
#     authority. Bare strings inherit the group's state and authority.
#   - StateRecord.abn_conditions is None when the payload omits the object
#     for that jurisdiction. An explicit {} clears the stored conditions.
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from ..category.value_objects import DEFAULT_STATE
from .entities import UNKNOWN_AUTHORITY
from .value_objects import AbnConditions


@dataclass(frozen=True)
class LicenceClassRecord:
    name: str
    state: str
    authority: str | None = None


@dataclass(frozen=True)
class AuthorityRecord:
    name: str
    abn_conditions: AbnConditions


@dataclass(frozen=True)
class GroupRecord:
    key: str
    name: str
    min_required: int
    state: str
    authority: AuthorityRecord
    classes: tuple[LicenceClassRecord, ...] = ()


@dataclass(frozen=True)
class StateRecord:
    state: str
    licence_required: bool
    licence_note: str
    groups: tuple[str, ...]
    abn_conditions: AbnConditions | None = None


@dataclass(frozen=True)
class CategoryRecord:
    name: str
    is_parent: bool
    states: tuple[StateRecord, ...]
    sub_category_name: str | None = None

    @property
    def label(self) -> str:
        if self.sub_category_name:
            return f"{self.name} -> {self.sub_category_name}"
        return self.name


@dataclass(frozen=True)
class ImportPayload:
    groups: tuple[GroupRecord, ...] | None
    categories: tuple[CategoryRecord, ...] | None


def _parse_class(raw: Any, group_state: str, group_authority: str | None) -> LicenceClassRecord:
    if isinstance(raw, str):
        return LicenceClassRecord(name=raw, state=group_state, authority=group_authority)
    return LicenceClassRecord(
        name=str(raw["name"]),
        state=raw.get("state") or group_state,
        authority=raw.get("authority") or group_authority,
    )


def _parse_group(key: str, raw: Mapping[str, Any]) -> GroupRecord:
    state = raw.get("state") or DEFAULT_STATE
    authority_raw = raw.get("authority") or {}
    authority = AuthorityRecord(
        name=authority_raw.get("name") or UNKNOWN_AUTHORITY,
        abn_conditions=AbnConditions.from_mapping(authority_raw.get("abn_conditions")).group_level(),
    )
    authority_name = authority.name if authority.name != UNKNOWN_AUTHORITY else None
    classes = tuple(_parse_class(c, state, authority_name) for c in raw.get("classes") or ())
    return GroupRecord(
        key=key,
        name=raw["name"],
        min_required=raw["min_required"],
        state=state,
        authority=authority,
        classes=classes,
    )


def _parse_state(state: str, raw: Mapping[str, Any]) -> StateRecord:
    abn_raw = raw.get("abn_conditions")
    return StateRecord(
        state=state,
        licence_required=raw["licence_required"],
        licence_note=raw.get("licence_note") or "",
        groups=tuple(raw.get("groups") or ()),
        abn_conditions=AbnConditions.from_mapping(abn_raw) if abn_raw is not None else None,
    )


def _parse_category(raw: Mapping[str, Any]) -> CategoryRecord:
    return CategoryRecord(
        name=raw["name"],
        is_parent=raw["is_parent"],
        sub_category_name=raw.get("sub_category_name") or None,
        states=tuple(_parse_state(state, data) for state, data in raw["states"].items()),
    )


def parse_import_payload(raw: Mapping[str, Any]) -> ImportPayload:
    """Build typed records from a payload that already passed validation."""
    groups_raw = raw.get("groups")
    categories_raw = raw.get("categories")
    groups = (
        tuple(_parse_group(key, data) for key, data in groups_raw.items())
        if groups_raw is not None
        else None
    )
    categories = (
        tuple(_parse_category(c) for c in categories_raw)
        if categories_raw is not None
        else None
    )
    return ImportPayload(groups=groups, categories=categories)
