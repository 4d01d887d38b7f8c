# licensing/domain/requirement/entities.py
#
# Requirement groups, licence types, authorities and legacy ABN conditions.
#
# Design decisions:
#   - Entities are frozen dataclasses. Transitions return a new instance via
#     dataclasses.replace, which re-runs __post_init__, so a transition can
#     never produce an entity that the constructor would reject.
#   - A stored group may have no key (rows imported before keys existed).
#     The constructor accepts key=None; the create() factory does not.
#   - Category assignment on a group is exclusive: a group is assigned to a
#     parent category or to a sub-category, never both.
#
# Invariants:
#   - LicenceRequirementGroup.min_required >= 1 and name is non-blank.
#   - LicenceRequirementGroup.key is None or matches ^[a-z0-9_]+$.
#   - LicenceType.name and Authority.authority are non-blank.
from __future__ import annotations

from dataclasses import dataclass, field, replace

from ..category.value_objects import DEFAULT_STATE, NATIONAL, normalize_sub_category_id
from ..errors import InvalidEntityError
from .enums import AbnConditionKind
from .value_objects import AbnConditions, is_valid_group_key

UNKNOWN_AUTHORITY = "Unknown"
NONE_APPLICABLE = "NONE APPLICABLE"


@dataclass(frozen=True)
class Authority:
    """Licensing body."""
    authority: str
    authority_name: str
    state: str
    link: str | None = None
    id: int | None = None

    def __post_init__(self) -> None:
        if not self.authority.strip():
            raise InvalidEntityError("Authority name cannot be blank")


@dataclass(frozen=True)
class LicenceType:
    """A licence class a tradesperson can hold."""
    name: str
    state: str
    licence_type: str
    authority_id: int | None = None
    is_active: bool = True
    id: int | None = None

    def __post_init__(self) -> None:
        if not self.name.strip():
            raise InvalidEntityError("Licence type name cannot be blank")

    def applies_in(self, state: str) -> bool:
        """National licences apply under every jurisdiction."""
        return self.state == state or self.state == NATIONAL


@dataclass(frozen=True)
class LicenceRequirementGroup:
    """How many of its member licence types a tradesperson must hold."""
    name: str
    key: str | None
    min_required: int
    state: str = DEFAULT_STATE
    authority_name: str = UNKNOWN_AUTHORITY
    abn_conditions: AbnConditions = field(default_factory=AbnConditions)
    is_active: bool = True
    parent_category_id: int | None = None
    sub_category_id: int | None = None
    id: int | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "sub_category_id", normalize_sub_category_id(self.sub_category_id))
        object.__setattr__(self, "abn_conditions", self.abn_conditions.group_level())
        if not self.has_valid_name():
            raise InvalidEntityError("Licence requirement group name cannot be blank")
        if not self.is_valid_min_required():
            raise InvalidEntityError(
                f"Group {self.key or self.name}: min_required must be greater than 0, got {self.min_required}",
                details={"min_required": self.min_required},
            )
        if self.key is not None and not self.has_valid_key():
            raise InvalidEntityError(
                f"Invalid group key: {self.key!r}. Keys are lowercase letters, digits and underscores",
                details={"key": self.key},
            )
        if self.parent_category_id is not None and self.sub_category_id is not None:
            raise InvalidEntityError("A group is assigned to a parent category or a sub-category, not both")

    @classmethod
    def create(
        cls,
        name: str,
        key: str,
        min_required: int,
        *,
        state: str = DEFAULT_STATE,
        authority_name: str = UNKNOWN_AUTHORITY,
        abn_conditions: AbnConditions | None = None,
        parent_category_id: int | None = None,
        sub_category_id: int | None = None,
    ) -> LicenceRequirementGroup:
        if not is_valid_group_key(key):
            raise InvalidEntityError(f"Invalid group key: {key!r}", details={"key": key})
        group = cls(
            name=name,
            key=key,
            min_required=min_required,
            state=state or DEFAULT_STATE,
            authority_name=authority_name or UNKNOWN_AUTHORITY,
            abn_conditions=abn_conditions or AbnConditions(),
        )
        if sub_category_id:
            return group.assign_to_sub_category(sub_category_id)
        if parent_category_id:
            return group.assign_to_parent_category(parent_category_id)
        return group

    # -- rules ---------------------------------------------------------------

    def is_valid_min_required(self) -> bool:
        return isinstance(self.min_required, int) and not isinstance(self.min_required, bool) and self.min_required > 0

    def has_valid_key(self) -> bool:
        return is_valid_group_key(self.key)

    def has_valid_name(self) -> bool:
        return bool(self.name and self.name.strip())

    def can_be_activated(self) -> bool:
        return self.has_valid_key() and self.has_valid_name() and self.is_valid_min_required()

    def is_assigned_to_category(self) -> bool:
        return self.parent_category_id is not None or self.sub_category_id is not None

    def is_assigned_to_parent_category(self) -> bool:
        return self.parent_category_id is not None

    def is_assigned_to_sub_category(self) -> bool:
        return self.sub_category_id is not None

    def describe_rule(self, group_size: int) -> str:
        """REQUIRED, ANY 1 OF, ALL OF or "N OF" for a group of group_size licences.

        NONE APPLICABLE when no licence in the group applies.
        """
        if group_size == 0:
            return NONE_APPLICABLE
        if self.min_required == 1 and group_size == 1:
            return "REQUIRED"
        if self.min_required == 1:
            return "ANY 1 OF"
        if self.min_required == group_size:
            return "ALL OF"
        return f"{self.min_required} OF"

    @property
    def abn_company(self) -> str | None:
        return self.abn_conditions.company

    @property
    def abn_individual(self) -> str | None:
        return self.abn_conditions.individual

    @property
    def abn_partnership(self) -> str | None:
        return self.abn_conditions.partnership

    @property
    def abn_trust(self) -> str | None:
        return self.abn_conditions.trust

    # -- transitions ---------------------------------------------------------

    def activate(self) -> LicenceRequirementGroup:
        if not self.can_be_activated():
            raise InvalidEntityError(f"Cannot activate group {self.name!r}: validation failed")
        return replace(self, is_active=True)

    def deactivate(self) -> LicenceRequirementGroup:
        return replace(self, is_active=False)

    def assign_to_parent_category(self, parent_category_id: int) -> LicenceRequirementGroup:
        if parent_category_id <= 0:
            raise InvalidEntityError(f"Invalid parent category id: {parent_category_id}")
        return replace(self, parent_category_id=parent_category_id, sub_category_id=None)

    def assign_to_sub_category(self, sub_category_id: int) -> LicenceRequirementGroup:
        if sub_category_id <= 0:
            raise InvalidEntityError(f"Invalid sub-category id: {sub_category_id}")
        return replace(self, parent_category_id=None, sub_category_id=sub_category_id)

    def update_min_required(self, min_required: int) -> LicenceRequirementGroup:
        if isinstance(min_required, bool) or not isinstance(min_required, int) or min_required <= 0:
            raise InvalidEntityError("Minimum required must be greater than 0")
        return replace(self, min_required=min_required)

    def with_details(
        self,
        *,
        name: str,
        min_required: int,
        state: str,
        authority_name: str,
        abn_conditions: AbnConditions,
    ) -> LicenceRequirementGroup:
        return replace(
            self,
            name=name,
            min_required=min_required,
            state=state or DEFAULT_STATE,
            authority_name=authority_name or UNKNOWN_AUTHORITY,
            abn_conditions=abn_conditions,
        )

    def with_id(self, id: int) -> LicenceRequirementGroup:  # noqa: A002
        return replace(self, id=id)


@dataclass(frozen=True)
class AbnCondition:
    """Legacy per-category-state ABN note (category_state_abn_condition row)."""
    category_state_id: int
    kind: AbnConditionKind
    message: str
    id: int | None = None

    def __post_init__(self) -> None:
        if not self.is_valid():
            raise InvalidEntityError(
                "Invalid ABN condition parameters",
                details={"category_state_id": self.category_state_id, "kind": str(self.kind)},
            )

    @classmethod
    def create(cls, category_state_id: int, kind: AbnConditionKind | str, message: str) -> AbnCondition:
        if not AbnConditionKind.is_valid(kind):
            raise InvalidEntityError(f"Invalid ABN condition kind: {kind!r}")
        return cls(category_state_id=category_state_id, kind=AbnConditionKind(kind), message=message)

    def is_valid(self) -> bool:
        return (
            isinstance(self.kind, AbnConditionKind)
            and self.has_valid_message()
            and self.category_state_id > 0
        )

    def has_valid_message(self) -> bool:
        return isinstance(self.message, str) and bool(self.message.strip())

    def is_company_condition(self) -> bool:
        return self.kind is AbnConditionKind.COMPANY

    def is_individual_condition(self) -> bool:
        return self.kind is AbnConditionKind.INDIVIDUAL

    def is_partnership_condition(self) -> bool:
        return self.kind is AbnConditionKind.PARTNERSHIP

    def is_trust_condition(self) -> bool:
        return self.kind is AbnConditionKind.TRUST

    def is_other_condition(self) -> bool:
        return self.kind is AbnConditionKind.OTHER

    def update_message(self, message: str) -> AbnCondition:
        if not message.strip():
            raise InvalidEntityError("ABN condition message cannot be empty")
        return replace(self, message=message)

    def change_kind(self, kind: AbnConditionKind | str) -> AbnCondition:
        if not AbnConditionKind.is_valid(kind):
            raise InvalidEntityError(f"Invalid ABN condition kind: {kind!r}")
        return replace(self, kind=AbnConditionKind(kind))
