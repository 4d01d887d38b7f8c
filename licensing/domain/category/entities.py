# licensing/domain/category/entities.py
#
# Category reference data and the per-jurisdiction licensing record.
#
# Invariants:
#   - CategoryState.sub_category_id is None for a parent-category record and a
#     positive id for a sub-category record. 0 is normalised to None on
#     construction, so is_parent_category() and is_sub_category() are always
#     mutually exclusive.
#   - A sub-category record never gains a further sub-category.
#   - state is one of VALID_STATES.
from __future__ import annotations

from dataclasses import dataclass, replace

from ..errors import InvalidEntityError
from .value_objects import VALID_STATES, is_valid_state, normalize_sub_category_id


@dataclass(frozen=True)
class ParentCategory:
    """Top-level trade category. Seeded from the upstream categories feed."""
    id: int
    name: str

    def __post_init__(self) -> None:
        if self.id <= 0:
            raise InvalidEntityError(f"ParentCategory id must be positive, got {self.id}")


@dataclass(frozen=True)
class SubCategory:
    """Sub-category. short_name is a second lookup key next to name."""
    id: int
    parent_id: int
    name: str
    short_name: str | None = None

    def __post_init__(self) -> None:
        if self.id <= 0 or self.parent_id <= 0:
            raise InvalidEntityError(
                f"SubCategory ids must be positive, got id={self.id} parent_id={self.parent_id}"
            )


@dataclass(frozen=True)
class CategoryState:
    """Licensing status of one (category, sub-category-or-none, jurisdiction)."""
    parent_category_id: int
    sub_category_id: int | None
    state: str
    licence_required: bool
    licence_note: str = ""
    id: int | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "sub_category_id", normalize_sub_category_id(self.sub_category_id))
        if self.parent_category_id <= 0:
            raise InvalidEntityError(
                f"CategoryState parent_category_id must be positive, got {self.parent_category_id}"
            )
        if self.sub_category_id is not None and self.sub_category_id < 0:
            raise InvalidEntityError(
                f"CategoryState sub_category_id must be positive, got {self.sub_category_id}"
            )
        if not self.has_valid_state():
            raise InvalidEntityError(
                f"CategoryState state must be one of {sorted(VALID_STATES)}, got {self.state!r}",
                details={"state": self.state},
            )

    @classmethod
    def create(
        cls,
        parent_category_id: int,
        sub_category_id: int | None,
        state: str,
        licence_required: bool,
        licence_note: str = "",
        *,
        is_parent: bool | None = None,
    ) -> CategoryState:
        """Validating factory.

        is_parent, when given, must agree with sub_category_id: a record
        flagged parent-only cannot carry a sub-category, and a sub-category
        record needs one.
        """
        sub_id = normalize_sub_category_id(sub_category_id)
        if is_parent is True and sub_id is not None:
            raise InvalidEntityError(
                "A parent-category record cannot carry a sub_category_id",
                details={"sub_category_id": sub_id},
            )
        if is_parent is False and sub_id is None:
            raise InvalidEntityError("A sub-category record requires a sub_category_id")
        return cls(
            parent_category_id=parent_category_id,
            sub_category_id=sub_id,
            state=state,
            licence_required=licence_required,
            licence_note=licence_note or "",
        )

    def requires_licence(self) -> bool:
        return self.licence_required

    def is_sub_category(self) -> bool:
        return self.sub_category_id is not None

    def is_parent_category(self) -> bool:
        return self.sub_category_id is None

    def has_valid_state(self) -> bool:
        return is_valid_state(self.state)

    def can_process_abn_conditions(self) -> bool:
        # Only records that require a licence carry ABN notes.
        return self.licence_required

    def is_compatible_with_sub_category(self, sub_category_id: int) -> bool:
        if self.is_sub_category():
            return False
        return sub_category_id > 0

    def with_sub_category(self, sub_category_id: int) -> CategoryState:
        if not self.is_compatible_with_sub_category(sub_category_id):
            raise InvalidEntityError(
                "Sub-category records cannot have a further sub-category",
                details={"sub_category_id": self.sub_category_id},
            )
        return replace(self, sub_category_id=sub_category_id, id=None)

    def update_licence_note(self, licence_note: str) -> CategoryState:
        return replace(self, licence_note=licence_note)

    def update_licence_requirement(self, licence_required: bool, licence_note: str) -> CategoryState:
        return replace(self, licence_required=licence_required, licence_note=licence_note)

    def toggle_licence_requirement(self) -> CategoryState:
        return replace(self, licence_required=not self.licence_required)

    def with_id(self, id: int) -> CategoryState:  # noqa: A002
        return replace(self, id=id)


@dataclass(frozen=True)
class CategoryView:
    """One row of the flattened category listing."""
    parent_category_id: int
    name: str
    short_name: str | None
    sub_category_id: int | None
