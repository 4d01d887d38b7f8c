from __future__ import annotations

NATIONAL = "National"
DEFAULT_STATE = "NSW"

# Australian states and territories plus the national pseudo-jurisdiction.
VALID_STATES: frozenset[str] = frozenset(
    {"NSW", "VIC", "QLD", "WA", "SA", "TAS", "ACT", "NT", NATIONAL}
)


def is_valid_state(state: str) -> bool:
    return state in VALID_STATES


def normalize_sub_category_id(sub_category_id: int | None) -> int | None:
    """0 and None both mean "no sub-category". None is the in-memory form."""
    if sub_category_id is None or sub_category_id == 0:
        return None
    return sub_category_id


def category_path(parent_name: str, sub_category_name: str | None = None) -> str:
    """Human-readable category path used in error messages."""
    if sub_category_name:
        return f'"{parent_name} -> {sub_category_name}"'
    return f'"{parent_name}"'
