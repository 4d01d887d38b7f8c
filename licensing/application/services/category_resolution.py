# licensing/application/services/category_resolution.py
#
# Reconciles a named category record from an import payload with the stored
# parent category and sub-category.
#
# Design decisions:
#   - Shared by the import engine and the group linker so both resolve names
#     the same way.
#   - Sub-categories are looked up by name first and by short name second.
#     Older feeds put the short name where the name belongs.
#   - The result is either a CategoryMatch or a MissingCategory; nothing is
#     raised for a category that simply does not exist.
from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from licensing.domain.category.entities import ParentCategory, SubCategory
from licensing.domain.category.repository import CategoryRepository
from licensing.domain.requirement.payload import CategoryRecord

PARENT_MISSING = "Parent category not found in database"
SUB_MISSING = "Sub-category not found in database"
BOTH_MISSING = "Parent category and sub-category not found in database"

MissingType = Literal["parent", "sub"]


@dataclass(frozen=True)
class CategoryMatch:
    parent: ParentCategory
    sub: SubCategory | None = None

    @property
    def sub_category_id(self) -> int | None:
        return self.sub.id if self.sub else None


@dataclass(frozen=True)
class MissingCategory:
    """A category record that could not be processed."""
    name: str
    reason: str
    type: MissingType
    sub_category_name: str | None = None


def find_sub_category(repo: CategoryRepository, name: str | None) -> SubCategory | None:
    if not name:
        return None
    return repo.find_sub_category(name) or repo.find_sub_category_by_short_name(name)


def resolve_category(repo: CategoryRepository, record: CategoryRecord) -> CategoryMatch | MissingCategory:
    parent = repo.find_parent_category(record.name)

    if record.is_parent:
        if parent is None:
            return MissingCategory(name=record.name, reason=PARENT_MISSING, type="parent")
        return CategoryMatch(parent=parent)

    sub = find_sub_category(repo, record.sub_category_name)
    if parent is None or sub is None:
        if parent is None and sub is None:
            reason = BOTH_MISSING
        elif parent is None:
            reason = PARENT_MISSING
        else:
            reason = SUB_MISSING
        return MissingCategory(
            name=record.name,
            sub_category_name=record.sub_category_name,
            reason=reason,
            type="sub",
        )
    return CategoryMatch(parent=parent, sub=sub)
