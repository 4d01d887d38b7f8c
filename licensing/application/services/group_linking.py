# licensing/application/services/group_linking.py
#
# Maintains the category state <-> requirement group and requirement group
# <-> licence type associations.
#
# Design decisions:
#   - Category state links are fully replaced: every existing link for the
#     category state is removed before the requested keys are linked. The
#     result is never a diff against what was stored.
#   - A group key that resolves to nothing is logged as a warning and skipped.
#     Rules may reference groups that a later import will add.
#   - Rows imported before group keys existed are linked by name: when no
#     group has the key, a group whose name equals it is used instead.
#   - A group linked to a category for the first time records that category
#     slot on itself (parent or sub-category, never both).
#   - Each category links inside its own error boundary. A failure becomes a
#     MissingCategory in LinkingResult.failed and the next category proceeds.
#   - Licence type links are additive and checked for existence first, so
#     re-running an import never produces a duplicate junction row.
from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from licensing.domain.category.entities import CategoryState
from licensing.domain.requirement.entities import LicenceRequirementGroup
from licensing.domain.requirement.payload import CategoryRecord
from licensing.domain.requirement.repository import LicenceRequirementRepository
from licensing.log import Logger

from .category_resolution import MissingCategory, resolve_category


@dataclass(frozen=True)
class LinkingResult:
    linked: int = 0
    failed: list[MissingCategory] = field(default_factory=list)


class GroupLinkingService:
    def __init__(self, repository: LicenceRequirementRepository, logger: Logger) -> None:
        self._repo = repository
        self._log = logger

    def link_all_category_states_to_groups(self, categories: Sequence[CategoryRecord]) -> LinkingResult:
        """Link every category state named in categories to its declared groups.

        A category whose linking raises is logged, reported in
        LinkingResult.failed and skipped; the remaining categories still link.
        """
        self._log.info("Linking category states to licence requirement groups...")
        linked = 0
        failed: list[MissingCategory] = []
        for record in categories:
            try:
                linked += self._link_category(record)
            except Exception as e:  # noqa: BLE001
                self._log.error(f"Error linking groups for category {record.label}: {e}")
                failed.append(
                    MissingCategory(
                        name=record.name,
                        sub_category_name=record.sub_category_name,
                        reason=f"Processing error: {e}",
                        type="parent" if record.is_parent else "sub",
                    )
                )
        self._log.info(f"Linked {linked} category states to groups. Failed: {len(failed)}")
        return LinkingResult(linked=linked, failed=failed)

    def _link_category(self, record: CategoryRecord) -> int:
        match = resolve_category(self._repo, record)
        if isinstance(match, MissingCategory):
            self._log.warning(f"Skipping links for {record.label}: {match.reason}")
            return 0
        linked = 0
        for state_record in record.states:
            category_state = self._repo.find_category_state(match.parent.id, match.sub_category_id, state_record.state)
            if category_state is None or category_state.id is None:
                self._log.warning(f"No category state for {record.label} in {state_record.state}")
                continue
            self.link_licence_requirement_groups(category_state.id, state_record.groups, category_state=category_state)
            linked += 1
        return linked

    def link_licence_requirement_groups(
        self,
        category_state_id: int,
        group_keys: Sequence[str],
        *,
        category_state: CategoryState | None = None,
    ) -> list[str]:
        """Replace the groups linked to one category state. Returns the linked keys."""
        self.unlink_groups_from_category_state(category_state_id)
        if category_state is None:
            category_state = self._repo.find_category_state_by_id(category_state_id)

        linked: list[str] = []
        for key in group_keys:
            group = self._find_group(key)
            if group is None or group.id is None:
                self._log.warning(f"Group not found: {key}")
                continue
            self._repo.save_category_state_licence_group(category_state_id, group.id)
            if category_state is not None:
                self._record_category_slot(group, category_state)
            linked.append(key)
            self._log.debug(f"Linked group {key} to category state {category_state_id}")
        return linked

    def link_licence_types_to_groups(self, group_id: int, licence_type_ids: Sequence[int]) -> int:
        """Add licence types to a group. Returns the number of new links."""
        added = 0
        for licence_type_id in licence_type_ids:
            if self._repo.exists_licence_requirement_group_licence(group_id, licence_type_id):
                continue
            self._repo.save_licence_requirement_group_licence(group_id, licence_type_id)
            added += 1
            self._log.debug(f"Linked licence type {licence_type_id} to group {group_id}")
        return added

    def unlink_groups_from_category_state(self, category_state_id: int) -> None:
        self._repo.delete_category_state_licence_groups(category_state_id)

    def clear_all_group_links(self) -> None:
        self._log.info("Clearing all group links...")
        self._repo.clear_all_category_state_licence_groups()

    def _find_group(self, key: str) -> LicenceRequirementGroup | None:
        group = self._repo.find_licence_requirement_group(key)
        if group is None:
            group = self._repo.find_licence_requirement_group_by_name(key)
            if group is not None:
                self._log.debug(f"Group {key} resolved by name")
        return group

    def _record_category_slot(self, group: LicenceRequirementGroup, category_state: CategoryState) -> None:
        if group.is_assigned_to_category():
            return
        if category_state.sub_category_id is not None:
            assigned = group.assign_to_sub_category(category_state.sub_category_id)
        else:
            assigned = group.assign_to_parent_category(category_state.parent_category_id)
        self._repo.save_licence_requirement_group(assigned)
