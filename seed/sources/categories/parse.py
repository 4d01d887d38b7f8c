# seed/sources/categories/parse.py
#
# Parse the categories feed into parent and sub-category DataFrames.
#
# Design decisions:
#   - The feed nests sub-categories under their parent:
#       {"data": [{"practice_id", "practice_seo_name", "subcategories": [...]}]}
#     Each sub-category carries its own practice_parent_id, which is used as
#     is; it is not inferred from the nesting.
#   - Everything is read as strings. Casting ids is the validator's job, so a
#     malformed id becomes a dropped row there instead of a parse failure here.
#   - practice_seo_name is the category name; practice_name is the
#     sub-category's short name (second lookup key).
#
# Invariants:
#   - parents has columns (id, name); subs has (id, parent_id, name, short_name).
#   - All columns are Utf8.
from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import polars as pl

PARENT_SCHEMA = {"id": pl.Utf8, "name": pl.Utf8}
SUB_SCHEMA = {"id": pl.Utf8, "parent_id": pl.Utf8, "name": pl.Utf8, "short_name": pl.Utf8}


def _text(value: Any) -> str | None:
    if value is None:
        return None
    return str(value).strip()


def parse_categories(raw_path: Path) -> tuple[pl.DataFrame, pl.DataFrame]:
    """Return (parents, subs) DataFrames from a saved categories feed."""
    payload = json.loads(raw_path.read_text(encoding="utf-8"))
    return parse_categories_payload(payload)


def parse_categories_payload(payload: Any) -> tuple[pl.DataFrame, pl.DataFrame]:
    items = payload.get("data") if isinstance(payload, dict) else None
    if not isinstance(items, list):
        items = []

    parents: list[dict[str, str | None]] = []
    subs: list[dict[str, str | None]] = []
    for parent in items:
        if not isinstance(parent, dict):
            continue
        parents.append({"id": _text(parent.get("practice_id")), "name": _text(parent.get("practice_seo_name"))})
        for sub in parent.get("subcategories") or []:
            if not isinstance(sub, dict):
                continue
            subs.append(
                {
                    "id": _text(sub.get("practice_id")),
                    "parent_id": _text(sub.get("practice_parent_id")),
                    "name": _text(sub.get("practice_seo_name")),
                    "short_name": _text(sub.get("practice_name")),
                }
            )

    return pl.DataFrame(parents, schema=PARENT_SCHEMA), pl.DataFrame(subs, schema=SUB_SCHEMA)
