# licensing/application/services/data_import.py
#
# Loads licence rule data (groups and categories) into the repository.
#
# Design decisions:
#   - Two entry points. import_licence_data() validates, clears every derived
#     table and loads from scratch. update_licence_data_selectively() never
#     clears and only touches the sections present in the payload.
#   - Validation runs before anything is read from the payload and reports
#     every violation at once via ValidationError.details["errors"].
#   - Phases run strictly in order: authorities, licence types, groups,
#     category states with their ABN conditions, category state <-> group
#     links, licence type <-> group links. Each phase reads rows the previous
#     one wrote, so nothing here runs concurrently.
#   - Every create step looks the record up first (authority by name, licence
#     type by name, group by key) and reuses it, so resubmitting a payload
#     creates no new rows. An existing group has its details refreshed.
#   - A failure inside one category is caught at the category boundary and
#     becomes a MissingCategory with a "Processing error: ..." reason. The
#     import carries on with the next category. Linking failures reported by
#     GroupLinkingService join the same missing list. No cross-phase transaction:
#     a failed phase leaves earlier phases written.
#   - When a state entry carries an abn_conditions object, the stored
#     conditions for that category state are deleted and the submitted set
#     inserted. Conditions are only written for states that require a licence.
#
# Invariants:
#   - Clearing runs children before parents: cs <-> group links, group <->
#     licence links, ABN conditions, category states, groups, licence types,
#     authorities.
#   - ImportResult.processed counts category states written, not categories.
from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from licensing.domain.category.entities import CategoryState
from licensing.domain.errors import ProcessingError, ValidationError
from licensing.domain.requirement.entities import (
    UNKNOWN_AUTHORITY,
    Authority,
    LicenceRequirementGroup,
    LicenceType,
)
from licensing.domain.requirement.payload import (
    CategoryRecord,
    GroupRecord,
    ImportPayload,
    StateRecord,
    parse_import_payload,
)
from licensing.domain.requirement.repository import LicenceRequirementRepository
from licensing.domain.requirement.services import (
    create_abn_condition,
    create_category_state,
    create_licence_requirement_group,
    validate_import_data,
)
from licensing.domain.requirement.value_objects import AbnConditions
from licensing.log import Logger

from .category_resolution import CategoryMatch, MissingCategory, resolve_category
from .group_linking import GroupLinkingService


@dataclass(frozen=True)
class ImportResult:
    processed: int = 0
    missing: list[MissingCategory] = field(default_factory=list)


def _with_record_details(group: LicenceRequirementGroup, record: GroupRecord) -> LicenceRequirementGroup:
    return group.with_details(
        name=record.name,
        min_required=record.min_required,
        state=record.state,
        authority_name=record.authority.name,
        abn_conditions=record.authority.abn_conditions,
    )


def _validated_payload(raw: Any, *, require_all_sections: bool) -> ImportPayload:
    result = validate_import_data(raw, require_all_sections=require_all_sections)
    if not result.is_valid:
        raise ValidationError(
            f"Invalid import data: {'; '.join(result.errors)}",
            details={"errors": result.errors},
        )
    return parse_import_payload(raw)


class DataImportService:
    def __init__(
        self,
        repository: LicenceRequirementRepository,
        linker: GroupLinkingService,
        logger: Logger,
    ) -> None:
        self._repo = repository
        self._linker = linker
        self._log = logger

    # -- entry points --------------------------------------------------------

    def import_licence_data(self, raw: Mapping[str, Any]) -> ImportResult:
        """Replace all licence rule data with the payload."""
        payload = _validated_payload(raw, require_all_sections=True)
        self._log.info("Starting licence data import...")
        self.clear_existing_data()
        result = self._load(payload)
        self._log.info(
            f"Licence data import completed. Processed: {result.processed}, Missing: {len(result.missing)}"
        )
        return result

    def update_licence_data_selectively(self, raw: Mapping[str, Any]) -> ImportResult:
        """Add or update the sections present in the payload, keeping everything else."""
        payload = _validated_payload(raw, require_all_sections=False)
        self._log.info("Starting selective licence data update...")
        result = self._load(payload)
        self._log.info(
            f"Selective licence data update completed. Processed: {result.processed}, "
            f"Missing: {len(result.missing)}"
        )
        return result

    def _load(self, payload: ImportPayload) -> ImportResult:
        if payload.groups is not None:
            self.load_authorities(payload.groups)
            self.load_licence_types(payload.groups)
            self.load_licence_requirement_groups(payload.groups)

        result = ImportResult()
        if payload.categories is not None:
            loaded = self.load_category_states(payload.categories)
            linking = self._linker.link_all_category_states_to_groups(payload.categories)
            result = ImportResult(processed=loaded.processed, missing=[*loaded.missing, *linking.failed])

        if payload.groups is not None:
            self.link_licence_types_to_groups(payload.groups)
        return result

    # -- phases --------------------------------------------------------------

    def load_authorities(self, groups: Sequence[GroupRecord]) -> dict[str, int]:
        """Create each authority named by a group or a class. Returns name -> id."""
        self._log.info("Loading authorities...")
        ids: dict[str, int] = {}
        for group in groups:
            names = [(group.authority.name, group.state)]
            names.extend((c.authority, c.state) for c in group.classes if c.authority)
            for name, state in names:
                if not name or name == UNKNOWN_AUTHORITY or name in ids:
                    continue
                authority = self._repo.find_authority(name)
                if authority is None:
                    authority = self._repo.save_authority(
                        Authority(authority=name, authority_name=name, state=state)
                    )
                    self._log.debug(f"Created authority {name}")
                if authority.id is not None:
                    ids[name] = authority.id
        self._log.info(f"Authorities loaded: {len(ids)}")
        return ids

    def load_licence_types(self, groups: Sequence[GroupRecord]) -> dict[str, int]:
        """Create each licence class named by a group. Returns name -> id."""
        self._log.info("Loading licence types...")
        ids: dict[str, int] = {}
        for group in groups:
            for record in group.classes:
                if record.name in ids:
                    continue
                licence_type = self._repo.find_licence_type(record.name)
                if licence_type is None:
                    authority = self._repo.find_authority(record.authority) if record.authority else None
                    licence_type = self._repo.save_licence_type(
                        LicenceType(
                            name=record.name,
                            state=record.state,
                            licence_type=record.name,
                            authority_id=authority.id if authority else None,
                        )
                    )
                    self._log.debug(f"Created licence type {record.name} ({record.state})")
                if licence_type.id is not None:
                    ids[record.name] = licence_type.id
        self._log.info(f"Licence types loaded: {len(ids)}")
        return ids

    def load_licence_requirement_groups(self, groups: Sequence[GroupRecord]) -> dict[str, int]:
        """Create or refresh each group by key. Returns key -> id."""
        self._log.info("Loading licence requirement groups...")
        ids: dict[str, int] = {}
        for record in groups:
            existing = self._repo.find_licence_requirement_group(record.key)
            if existing is None:
                group = create_licence_requirement_group(record.name, record.key, record.min_required)
                self._log.debug(f"Created group {record.key}")
            else:
                group = existing
            refreshed = _with_record_details(group, record)
            if refreshed == existing and existing.id is not None:
                ids[record.key] = existing.id
                continue
            saved = self._repo.save_licence_requirement_group(refreshed)
            if saved.id is not None:
                ids[record.key] = saved.id
        self._log.info(f"Licence requirement groups loaded: {len(ids)}")
        return ids

    def load_category_states(self, categories: Sequence[CategoryRecord]) -> ImportResult:
        self._log.info("Loading category states...")
        processed = 0
        missing: list[MissingCategory] = []

        for record in categories:
            try:
                match = resolve_category(self._repo, record)
                if isinstance(match, MissingCategory):
                    self._log.warning(f"Skipping {record.label}: {match.reason}")
                    missing.append(match)
                    continue
                processed += self._load_category(match, record)
            except Exception as e:  # noqa: BLE001
                self._log.error(f"Error processing category {record.label}: {e}")
                missing.append(
                    MissingCategory(
                        name=record.name,
                        sub_category_name=record.sub_category_name,
                        reason=f"Processing error: {e}",
                        type="parent" if record.is_parent else "sub",
                    )
                )

        self._log.info(f"Category states loaded. Processed: {processed}, Missing: {len(missing)}")
        return ImportResult(processed=processed, missing=missing)

    def _load_category(self, match: CategoryMatch, record: CategoryRecord) -> int:
        written = 0
        for state_record in record.states:
            category_state = self._save_category_state(match, state_record, is_parent=record.is_parent)
            if state_record.abn_conditions is not None:
                self._replace_abn_conditions(category_state, state_record.abn_conditions)
            written += 1
        return written

    def _save_category_state(
        self, match: CategoryMatch, state_record: StateRecord, *, is_parent: bool | None = None
    ) -> CategoryState:
        existing = self._repo.find_category_state(match.parent.id, match.sub_category_id, state_record.state)
        if existing is None:
            category_state = create_category_state(
                match.parent.id,
                match.sub_category_id,
                state_record.state,
                state_record.licence_required,
                state_record.licence_note,
                is_parent=is_parent,
            )
        else:
            category_state = existing.update_licence_requirement(
                state_record.licence_required, state_record.licence_note
            )
            if category_state == existing:
                return existing
        return self._repo.save_category_state(category_state)

    def _replace_abn_conditions(self, category_state: CategoryState, conditions: AbnConditions) -> None:
        if category_state.id is None:
            raise ProcessingError(f"Category state for {category_state.state} was not saved")
        self._repo.delete_abn_conditions(category_state.id)
        if not category_state.can_process_abn_conditions():
            return
        for kind, message in conditions.items():
            self._repo.save_abn_condition(create_abn_condition(category_state.id, kind, message))

    def link_licence_types_to_groups(self, groups: Sequence[GroupRecord]) -> int:
        """Link each group to the licence types listed in its classes."""
        self._log.info("Linking licence types to licence requirement groups...")
        added = 0
        for record in groups:
            if not record.classes:
                continue
            group = self._repo.find_licence_requirement_group(record.key)
            if group is None or group.id is None:
                continue
            licence_type_ids = []
            for cls in record.classes:
                licence_type = self._repo.find_licence_type(cls.name)
                if licence_type is not None and licence_type.id is not None:
                    licence_type_ids.append(licence_type.id)
            added += self._linker.link_licence_types_to_groups(group.id, licence_type_ids)
        self._log.info(f"Licence type links added: {added}")
        return added

    def clear_existing_data(self) -> None:
        self._log.info("Clearing existing data...")
        self._repo.clear_all_category_state_licence_groups()
        self._repo.clear_all_licence_requirement_group_licences()
        self._repo.clear_all_abn_conditions()
        self._repo.clear_all_category_states()
        self._repo.clear_all_licence_requirement_groups()
        self._repo.clear_all_licence_types()
        self._repo.clear_all_authorities()
        self._log.info("Existing data cleared")

