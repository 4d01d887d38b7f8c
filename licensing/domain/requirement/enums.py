from __future__ import annotations

from enum import StrEnum


class AbnConditionKind(StrEnum):
    """Business structure registered against an ABN."""
    COMPANY = "company"
    INDIVIDUAL = "individual"
    PARTNERSHIP = "partnership"
    TRUST = "trust"
    OTHER = "other"

    @classmethod
    def is_valid(cls, value: object) -> bool:
        return isinstance(value, str) and value in {k.value for k in cls}


# Kinds that have a column on the requirement group. OTHER only exists in the
# legacy per-category-state table.
GROUP_LEVEL_KINDS: tuple[AbnConditionKind, ...] = (
    AbnConditionKind.COMPANY,
    AbnConditionKind.INDIVIDUAL,
    AbnConditionKind.PARTNERSHIP,
    AbnConditionKind.TRUST,
)
