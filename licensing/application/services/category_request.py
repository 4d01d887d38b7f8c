# licensing/application/services/category_request.py
#
# Parses resolution requests coming from the HTTP layer.
#
# Design decisions:
#   - Shared by the single and batch endpoints so both accept the same shapes
#     and produce the same messages.
#   - Every message is prefixed with a context ("Single request",
#     "Category 3") so a caller can tell which batch item is malformed.
#   - The batch filter fails closed: the first malformed item raises
#     ValidationError and nothing is resolved.
#   - sub_category_id accepts a number, a numeric string, or nothing. 0, blank
#     and missing all mean "no sub-category" and normalise to None.
from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from licensing.domain.category.value_objects import DEFAULT_STATE, VALID_STATES, normalize_sub_category_id
from licensing.domain.errors import ValidationError
from licensing.domain.requirement.enums import AbnConditionKind
from licensing.domain.requirement.resolution import CategoryRequest

_ABN_KINDS = ", ".join(k.value for k in AbnConditionKind)


def _parse_parent_category_id(value: object, context: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(
            f"{context}: parent_category_id must be a number, got {type(value).__name__}",
            details={"field": "parent_category_id"},
        )
    return value


def parse_sub_category_id(value: object, context: str) -> int | None:
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValidationError(f"{context}: sub_category_id must be a number, got bool")
    if isinstance(value, int):
        return normalize_sub_category_id(value)
    if isinstance(value, str):
        if not value.strip():
            return None
        try:
            return normalize_sub_category_id(int(value.strip()))
        except ValueError:
            raise ValidationError(
                f'{context}: sub_category_id must be a valid number, got "{value}"',
                details={"field": "sub_category_id"},
            ) from None
    raise ValidationError(f"{context}: sub_category_id must be a number, got {type(value).__name__}")


def parse_abn_kind(value: object, context: str) -> AbnConditionKind:
    if not value:
        raise ValidationError(f"{context}: abn_kind is required", details={"field": "abn_kind"})
    if not AbnConditionKind.is_valid(value):
        raise ValidationError(
            f"{context}: abn_kind must be one of: {_ABN_KINDS}. Got: {value}",
            details={"field": "abn_kind"},
        )
    return AbnConditionKind(value)


def parse_state(value: object, context: str, default: str = DEFAULT_STATE) -> str:
    if value is None:
        return default
    if not isinstance(value, str):
        raise ValidationError(f"{context}: state must be a string if provided, got {type(value).__name__}")
    if value not in VALID_STATES:
        raise ValidationError(
            f"{context}: state must be one of: {', '.join(sorted(VALID_STATES))}. Got: {value}",
            details={"field": "state"},
        )
    return value


def parse_category_request(
    raw: Mapping[str, Any], context: str = "Category", *, default_state: str = DEFAULT_STATE
) -> CategoryRequest:
    return CategoryRequest(
        parent_category_id=_parse_parent_category_id(raw.get("parent_category_id"), context),
        sub_category_id=parse_sub_category_id(raw.get("sub_category_id"), context),
        abn_kind=parse_abn_kind(raw.get("abn_kind"), context),
        state=parse_state(raw.get("state"), context, default_state),
    )


def parse_batch_filter(filter_json: str | None, *, default_state: str = DEFAULT_STATE) -> list[CategoryRequest]:
    """Parse the batch endpoint's JSON array filter into requests."""
    if not filter_json:
        raise ValidationError("Missing required query parameter: filter")
    try:
        items = json.loads(filter_json)
    except json.JSONDecodeError:
        raise ValidationError("Invalid filter parameter. Expected valid JSON array.") from None
    if not isinstance(items, list):
        raise ValidationError("Filter parameter must be a JSON array.")

    requests = []
    for i, item in enumerate(items, start=1):
        context = f"Category {i}"
        if not isinstance(item, Mapping):
            raise ValidationError(f"{context}: Must be a valid object")
        requests.append(parse_category_request(item, context, default_state=default_state))
    return requests
