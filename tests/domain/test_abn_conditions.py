# tests/domain/test_abn_conditions.py
#
# Tests for the AbnConditions value object and the legacy
# AbnCondition entity.
import pytest

from licensing.domain.errors import InvalidEntityError
from licensing.domain.requirement.entities import AbnCondition
from licensing.domain.requirement.enums import AbnConditionKind
from licensing.domain.requirement.value_objects import AbnConditions

FULL = AbnConditions(
    company="Company must hold a contractor licence",
    individual="Individual must hold a qualified supervisor certificate",
    partnership="Each partner must be licensed",
    trust="Trustee must be licensed",
    other="Contact the authority",
)


@pytest.mark.parametrize(
    "kind",
    [AbnConditionKind.COMPANY, AbnConditionKind.INDIVIDUAL, AbnConditionKind.PARTNERSHIP, AbnConditionKind.TRUST],
)
def test_for_kind_yields_exactly_the_requested_key(kind: AbnConditionKind) -> None:
    result = FULL.for_kind(kind)

    assert list(result) == [kind.value]
    assert result[kind.value]


def test_for_kind_other_yields_nothing() -> None:
    assert FULL.for_kind(AbnConditionKind.OTHER) == {}


def test_for_kind_without_stored_message_keeps_the_key() -> None:
    assert AbnConditions().for_kind(AbnConditionKind.TRUST) == {"trust": ""}


def test_from_mapping_ignores_unknown_keys_and_blank_messages() -> None:
    conditions = AbnConditions.from_mapping({"company": "note", "individual": "  ", "sole_trader": "ignored"})

    assert conditions.to_dict() == {"company": "note"}
    assert conditions.individual is None


def test_empty_conditions() -> None:
    assert AbnConditions().is_empty() is True
    assert AbnConditions.from_mapping(None).is_empty() is True
    assert FULL.is_empty() is False


def test_group_level_drops_other() -> None:
    assert "other" not in FULL.group_level().to_dict()
    assert len(FULL.group_level().to_dict()) == 4


def test_abn_condition_create_rejects_unknown_kind() -> None:
    with pytest.raises(InvalidEntityError):
        AbnCondition.create(1, "sole_trader", "note")


def test_abn_condition_requires_message_and_positive_state_id() -> None:
    with pytest.raises(InvalidEntityError):
        AbnCondition.create(1, "company", "  ")
    with pytest.raises(InvalidEntityError):
        AbnCondition.create(0, "company", "note")


def test_abn_condition_transitions() -> None:
    condition = AbnCondition.create(1, "company", "note")

    assert condition.is_company_condition() is True
    changed = condition.change_kind("trust").update_message("new note")
    assert changed.is_trust_condition() is True
    assert changed.message == "new note"
    with pytest.raises(InvalidEntityError):
        condition.update_message("")
