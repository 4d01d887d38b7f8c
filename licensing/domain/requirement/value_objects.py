# licensing/domain/requirement/value_objects.py
#
# AbnConditions is the single domain concept behind both storage layouts:
#   - current layout: abn_company / abn_individual / abn_partnership /
#     abn_trust columns on licence_requirement_group;
#   - legacy layout: one category_state_abn_condition row per kind.
# The repository reads and writes both layouts through this value object. Empty messages
# are dropped on construction so "not set" has a single representation (None).
from __future__ import annotations

import re
from collections.abc import Iterator, Mapping
from dataclasses import dataclass

from .enums import GROUP_LEVEL_KINDS, AbnConditionKind

GROUP_KEY_PATTERN = re.compile(r"^[a-z0-9_]+$")


def is_valid_group_key(key: object) -> bool:
    return isinstance(key, str) and bool(key.strip()) and GROUP_KEY_PATTERN.match(key) is not None


def group_key_from_name(name: str) -> str:
    """Slug used when a stored group has no key: lowercase, spaces to '_'."""
    slug = re.sub(r"\s+", "_", name.lower())
    return re.sub(r"[^a-z0-9_]", "", slug)


def _clean(message: object) -> str | None:
    if not isinstance(message, str) or not message.strip():
        return None
    return message


@dataclass(frozen=True)
class AbnConditions:
    """ABN kind -> explanatory message."""
    company: str | None = None
    individual: str | None = None
    partnership: str | None = None
    trust: str | None = None
    other: str | None = None

    def __post_init__(self) -> None:
        for kind in AbnConditionKind:
            object.__setattr__(self, kind.value, _clean(getattr(self, kind.value)))

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, object] | None) -> AbnConditions:
        """Build from a payload object. Unknown keys are ignored."""
        if not mapping:
            return cls()
        return cls(**{k.value: mapping.get(k.value) for k in AbnConditionKind})  # type: ignore[arg-type]

    def message_for(self, kind: AbnConditionKind) -> str | None:
        return getattr(self, kind.value)

    def group_level(self) -> AbnConditions:
        """Copy restricted to the kinds that have a group column."""
        return AbnConditions(**{k.value: self.message_for(k) for k in GROUP_LEVEL_KINDS})

    def for_kind(self, kind: AbnConditionKind) -> dict[str, str]:
        """Response sub-object for one requested kind.

        company/individual/partnership/trust yield exactly that key (empty
        string when no message is stored); other yields an empty dict.
        """
        if kind not in GROUP_LEVEL_KINDS:
            return {}
        return {kind.value: self.message_for(kind) or ""}

    def items(self) -> Iterator[tuple[AbnConditionKind, str]]:
        for kind in AbnConditionKind:
            message = self.message_for(kind)
            if message is not None:
                yield kind, message

    def is_empty(self) -> bool:
        return not any(True for _ in self.items())

    def to_dict(self) -> dict[str, str]:
        return {kind.value: message for kind, message in self.items()}
