# tests/infrastructure/test_duckdb_repo.py
#
# DuckDBLicenceRequirementRepo against the real schema in memory.
from __future__ import annotations

from dataclasses import replace

import duckdb
import pytest

from licensing.domain.category.entities import CategoryState
from licensing.domain.errors import ConflictError, ReferenceIntegrityError
from licensing.domain.requirement.entities import AbnCondition, Authority, LicenceRequirementGroup, LicenceType
from licensing.domain.requirement.enums import AbnConditionKind
from licensing.domain.requirement.value_objects import AbnConditions
from licensing.infrastructure.duckdb_connection import init_schema
from licensing.infrastructure.repositories.duckdb_licence_repo import DuckDBLicenceRequirementRepo


@pytest.fixture()
def repo(conn: duckdb.DuckDBPyConnection) -> DuckDBLicenceRequirementRepo:
    return DuckDBLicenceRequirementRepo(conn)


def test_init_schema_is_idempotent(conn: duckdb.DuckDBPyConnection) -> None:
    init_schema(conn)

    row = conn.execute("SELECT count(*) FROM parent_category").fetchone()
    assert row is not None and row[0] == 3


def test_category_lookups(repo: DuckDBLicenceRequirementRepo) -> None:
    parent = repo.find_parent_category("Plumbing")
    by_short_name = repo.find_sub_category_by_short_name("gas-fitter")

    assert parent is not None and parent.id == 2
    assert by_short_name is not None and by_short_name.name == "Gas Fitting"
    assert repo.find_sub_category("gas-fitter") is None
    assert repo.find_sub_category_by_id(301) is not None
    assert repo.find_parent_category_by_id(42) is None
    assert repo.count_categories() == 6


def test_category_view_lists_parents_before_their_subs(repo: DuckDBLicenceRequirementRepo) -> None:
    view = repo.list_category_view()

    assert [(v.parent_category_id, v.sub_category_id) for v in view] == [
        (1, None),
        (2, None),
        (2, 201),
        (2, 202),
        (3, None),
        (3, 301),
    ]
    assert view[2].short_name == "gas-fitter"


def test_parent_record_matches_null_and_zero_sub_category(repo: DuckDBLicenceRequirementRepo) -> None:
    saved = repo.save_category_state(CategoryState(1, None, "NSW", True))

    assert saved.id is not None
    assert repo.find_category_state(1, None, "NSW") == saved
    assert repo.find_category_state(1, 0, "NSW") == saved
    assert repo.find_category_state(1, None, "VIC") is None


def test_sub_category_record_does_not_match_parent_lookup(repo: DuckDBLicenceRequirementRepo) -> None:
    repo.save_category_state(CategoryState(2, 201, "NSW", True))

    assert repo.find_category_state(2, None, "NSW") is None
    assert repo.find_category_state(2, 201, "NSW") is not None


def test_category_state_update_keeps_id(repo: DuckDBLicenceRequirementRepo) -> None:
    saved = repo.save_category_state(CategoryState(1, None, "NSW", True, "old note"))

    repo.save_category_state(saved.update_licence_requirement(False, "new note"))

    found = repo.find_category_state(1, None, "NSW")
    assert found is not None
    assert found.id == saved.id
    assert found.licence_required is False
    assert found.licence_note == "new note"


def test_group_round_trip_with_abn_columns(repo: DuckDBLicenceRequirementRepo) -> None:
    group = LicenceRequirementGroup.create(
        "Refrigerant Handling Licence",
        "arc_requirement",
        1,
        state="National",
        authority_name="Australian Refrigeration Council",
        abn_conditions=AbnConditions(company="Hold a trading authorisation", other="dropped"),
        parent_category_id=1,
    )

    saved = repo.save_licence_requirement_group(group)
    found = repo.find_licence_requirement_group("arc_requirement")

    assert found == saved
    assert found is not None
    assert found.abn_conditions.to_dict() == {"company": "Hold a trading authorisation"}
    assert repo.find_licence_requirement_groups_by_category(1) == [saved]


def test_group_update_never_changes_key(repo: DuckDBLicenceRequirementRepo) -> None:
    saved = repo.save_licence_requirement_group(
        LicenceRequirementGroup.create("Gas Fitting Licence", "gas_requirement", 1)
    )

    repo.save_licence_requirement_group(replace(saved, key="renamed_requirement", min_required=2))

    found = repo.find_licence_requirement_group("gas_requirement")
    assert found is not None
    assert found.min_required == 2
    assert repo.find_licence_requirement_group("renamed_requirement") is None


def test_duplicate_group_key_is_a_conflict(repo: DuckDBLicenceRequirementRepo) -> None:
    repo.save_licence_requirement_group(LicenceRequirementGroup.create("Gas", "gas_requirement", 1))

    with pytest.raises(ConflictError):
        repo.save_licence_requirement_group(LicenceRequirementGroup.create("Gas again", "gas_requirement", 1))


def test_duplicate_licence_type_name_is_a_conflict(repo: DuckDBLicenceRequirementRepo) -> None:
    repo.save_licence_type(LicenceType(name="Plumber Licence", state="NSW", licence_type="Plumber Licence"))

    with pytest.raises(ConflictError, match="Save licence type failed"):
        repo.save_licence_type(LicenceType(name="Plumber Licence", state="VIC", licence_type="Plumber Licence"))


def test_licence_type_with_missing_authority_is_rejected(repo: DuckDBLicenceRequirementRepo) -> None:
    with pytest.raises(ReferenceIntegrityError):
        repo.save_licence_type(
            LicenceType(name="Plumber Licence", state="NSW", licence_type="Plumber Licence", authority_id=999)
        )


def test_authority_lookup_and_count(repo: DuckDBLicenceRequirementRepo) -> None:
    saved = repo.save_authority(
        Authority(authority="NSW Fair Trading", authority_name="NSW Fair Trading", state="NSW")
    )

    assert saved.id is not None
    assert repo.find_authority("NSW Fair Trading") == saved
    assert repo.find_authority_by_id(saved.id) == saved
    assert repo.count_authorities() == 1


def test_group_licence_links(repo: DuckDBLicenceRequirementRepo) -> None:
    group = repo.save_licence_requirement_group(LicenceRequirementGroup.create("Gas", "gas_requirement", 1))
    licence = repo.save_licence_type(LicenceType(name="Gasfitter", state="NSW", licence_type="Gasfitter"))
    assert group.id is not None and licence.id is not None

    assert repo.exists_licence_requirement_group_licence(group.id, licence.id) is False
    repo.save_licence_requirement_group_licence(group.id, licence.id)

    assert repo.exists_licence_requirement_group_licence(group.id, licence.id) is True
    assert repo.find_licence_types_by_group(group.id) == [licence]


def test_abn_conditions_first_row_per_kind_wins(repo: DuckDBLicenceRequirementRepo) -> None:
    category_state = repo.save_category_state(CategoryState(2, 201, "NSW", True))
    assert category_state.id is not None
    for kind, message in [("company", "first"), ("company", "second"), ("other", "Talk to us")]:
        repo.save_abn_condition(AbnCondition.create(category_state.id, kind, message))

    conditions = repo.load_abn_conditions(category_state.id)

    assert conditions.to_dict() == {"company": "first", "other": "Talk to us"}
    found = repo.find_abn_condition(category_state.id, AbnConditionKind.OTHER)
    assert found is not None and found.message == "Talk to us"

    repo.delete_abn_conditions(category_state.id)
    assert repo.load_abn_conditions(category_state.id).is_empty()


def test_category_states_by_parent_and_sub_category(repo: DuckDBLicenceRequirementRepo) -> None:
    parent_nsw = repo.save_category_state(CategoryState(2, None, "NSW", False))
    gas_nsw = repo.save_category_state(CategoryState(2, 201, "NSW", True))
    gas_qld = repo.save_category_state(CategoryState(2, 201, "QLD", True))

    assert repo.find_category_states_by_parent(2) == [parent_nsw, gas_nsw, gas_qld]
    assert repo.find_category_states_by_sub_category(201) == [gas_nsw, gas_qld]

    assert gas_qld.id is not None
    repo.delete_category_state(gas_qld.id)
    assert repo.find_category_state_by_id(gas_qld.id) is None


def test_group_delete_and_unlink(repo: DuckDBLicenceRequirementRepo) -> None:
    group = repo.save_licence_requirement_group(LicenceRequirementGroup.create("Gas", "gas_requirement", 1))
    licence = repo.save_licence_type(LicenceType(name="Gasfitter", state="NSW", licence_type="Gasfitter"))
    assert group.id is not None and licence.id is not None
    repo.save_licence_requirement_group_licence(group.id, licence.id)

    repo.delete_licence_requirement_group_licences(group.id)
    assert repo.find_licence_types_by_group(group.id) == []

    assert repo.find_licence_requirement_group_by_id(group.id) == group
    repo.delete_licence_requirement_group(group.id)
    assert repo.find_licence_requirement_group_by_id(group.id) is None
