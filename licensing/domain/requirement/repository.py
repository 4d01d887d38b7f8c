# licensing/domain/requirement/repository.py
#
# Data-access contract the import engine, the linker and the resolver depend
# on. DuckDBLicenceRequirementRepo is the production implementation.
#
# Design decisions:
#   - save_* methods insert when the entity has no id and update otherwise,
#     returning the stored entity with its id set.
#   - find_licence_types_by_group returns every member licence type. The
#     jurisdiction filter is a domain rule applied by the resolver.
#   - Legacy ABN rows are exposed both as AbnCondition entities (write path)
#     and folded into one AbnConditions value (read path).
from __future__ import annotations

from typing import Protocol

from ..category.entities import CategoryState
from ..category.repository import CategoryRepository
from .entities import AbnCondition, Authority, LicenceRequirementGroup, LicenceType
from .enums import AbnConditionKind
from .value_objects import AbnConditions


class LicenceRequirementRepository(CategoryRepository, Protocol):
    # category states
    def find_category_state(self, parent_category_id: int, sub_category_id: int | None, state: str) -> CategoryState | None: ...
    def find_category_state_by_id(self, category_state_id: int) -> CategoryState | None: ...
    def save_category_state(self, category_state: CategoryState) -> CategoryState: ...
    def find_category_states_by_parent(self, parent_category_id: int) -> list[CategoryState]: ...
    def find_category_states_by_sub_category(self, sub_category_id: int) -> list[CategoryState]: ...
    def delete_category_state(self, category_state_id: int) -> None: ...
    def clear_all_category_states(self) -> None: ...

    # legacy per-category-state ABN conditions
    def find_abn_conditions(self, category_state_id: int) -> list[AbnCondition]: ...
    def find_abn_condition(self, category_state_id: int, kind: AbnConditionKind) -> AbnCondition | None: ...
    def load_abn_conditions(self, category_state_id: int) -> AbnConditions: ...
    def save_abn_condition(self, abn_condition: AbnCondition) -> AbnCondition: ...
    def delete_abn_conditions(self, category_state_id: int) -> None: ...
    def clear_all_abn_conditions(self) -> None: ...

    # requirement groups
    def find_licence_requirement_group(self, key: str) -> LicenceRequirementGroup | None: ...
    def find_licence_requirement_group_by_name(self, name: str) -> LicenceRequirementGroup | None: ...
    def find_licence_requirement_group_by_id(self, group_id: int) -> LicenceRequirementGroup | None: ...
    def find_licence_requirement_groups_by_category(
        self, parent_category_id: int, sub_category_id: int | None = None
    ) -> list[LicenceRequirementGroup]: ...
    def save_licence_requirement_group(self, group: LicenceRequirementGroup) -> LicenceRequirementGroup: ...
    def delete_licence_requirement_group(self, group_id: int) -> None: ...
    def clear_all_licence_requirement_groups(self) -> None: ...

    # category state <-> group junction
    def find_category_state_licence_groups(self, category_state_id: int) -> list[LicenceRequirementGroup]: ...
    def save_category_state_licence_group(self, category_state_id: int, group_id: int) -> None: ...
    def delete_category_state_licence_groups(self, category_state_id: int) -> None: ...
    def clear_all_category_state_licence_groups(self) -> None: ...

    # group <-> licence type junction
    def exists_licence_requirement_group_licence(self, group_id: int, licence_type_id: int) -> bool: ...
    def save_licence_requirement_group_licence(self, group_id: int, licence_type_id: int) -> None: ...
    def delete_licence_requirement_group_licences(self, group_id: int) -> None: ...
    def clear_all_licence_requirement_group_licences(self) -> None: ...

    # licence types
    def find_licence_type(self, name: str) -> LicenceType | None: ...
    def find_licence_types_by_group(self, group_id: int) -> list[LicenceType]: ...
    def save_licence_type(self, licence_type: LicenceType) -> LicenceType: ...
    def clear_all_licence_types(self) -> None: ...

    # authorities
    def find_authority(self, authority: str) -> Authority | None: ...
    def find_authority_by_id(self, authority_id: int) -> Authority | None: ...
    def save_authority(self, authority: Authority) -> Authority: ...
    def count_authorities(self) -> int: ...
    def clear_all_authorities(self) -> None: ...
