from __future__ import annotations

from typing import Protocol

from .entities import CategoryView, ParentCategory, SubCategory


class CategoryRepository(Protocol):
    def find_parent_category(self, name: str) -> ParentCategory | None: ...
    def find_parent_category_by_id(self, parent_category_id: int) -> ParentCategory | None: ...
    def find_sub_category(self, name: str) -> SubCategory | None: ...
    def find_sub_category_by_id(self, sub_category_id: int) -> SubCategory | None: ...
    def find_sub_category_by_short_name(self, short_name: str) -> SubCategory | None: ...
    def count_categories(self) -> int: ...
    def save_parent_categories(self, parents: list[ParentCategory]) -> int: ...
    def save_sub_categories(self, subs: list[SubCategory]) -> int: ...
    def list_category_view(self) -> list[CategoryView]: ...
