# tests/application/test_group_linking.py
#
# GroupLinkingService: full replacement of category state links, legacy
# name lookup, category slot assignment and duplicate-free licence links.
from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from licensing.application.services.data_import import DataImportService
from licensing.application.services.group_linking import GroupLinkingService
from licensing.domain.category.entities import CategoryState
from licensing.domain.requirement.entities import LicenceRequirementGroup
from licensing.domain.requirement.payload import parse_import_payload
from licensing.infrastructure.repositories.duckdb_licence_repo import DuckDBLicenceRequirementRepo
from licensing.log import RecordingLogger


@pytest.fixture()
def gas_nsw(
    importer: DataImportService, repo: DuckDBLicenceRequirementRepo, plumbing_payload: dict[str, Any]
) -> CategoryState:
    importer.import_licence_data(plumbing_payload)
    category_state = repo.find_category_state(2, 201, "NSW")
    assert category_state is not None and category_state.id is not None
    return category_state


def _linked_keys(repo: DuckDBLicenceRequirementRepo, category_state_id: int) -> set[str | None]:
    return {g.key for g in repo.find_category_state_licence_groups(category_state_id)}


def test_relinking_replaces_previous_links(
    linker: GroupLinkingService, repo: DuckDBLicenceRequirementRepo, gas_nsw: CategoryState
) -> None:
    assert gas_nsw.id is not None
    linker.link_licence_requirement_groups(gas_nsw.id, ["gas_requirement", "drainage_requirement"])
    assert _linked_keys(repo, gas_nsw.id) == {"gas_requirement", "drainage_requirement"}

    linker.link_licence_requirement_groups(gas_nsw.id, ["drainage_requirement"])

    assert _linked_keys(repo, gas_nsw.id) == {"drainage_requirement"}


def test_empty_key_list_unlinks_everything(
    linker: GroupLinkingService, repo: DuckDBLicenceRequirementRepo, gas_nsw: CategoryState
) -> None:
    assert gas_nsw.id is not None

    linked = linker.link_licence_requirement_groups(gas_nsw.id, [])

    assert linked == []
    assert _linked_keys(repo, gas_nsw.id) == set()


def test_unknown_group_key_is_skipped_with_warning(
    linker: GroupLinkingService,
    repo: DuckDBLicenceRequirementRepo,
    logger: RecordingLogger,
    gas_nsw: CategoryState,
) -> None:
    assert gas_nsw.id is not None

    linked = linker.link_licence_requirement_groups(gas_nsw.id, ["roofing_requirement", "gas_requirement"])

    assert linked == ["gas_requirement"]
    assert _linked_keys(repo, gas_nsw.id) == {"gas_requirement"}
    assert "Group not found: roofing_requirement" in logger.messages("warning")


def test_group_without_key_is_found_by_name(
    linker: GroupLinkingService, repo: DuckDBLicenceRequirementRepo, gas_nsw: CategoryState
) -> None:
    assert gas_nsw.id is not None
    repo.save_licence_requirement_group(LicenceRequirementGroup(name="Legacy Gas Permit", key=None, min_required=1))

    linked = linker.link_licence_requirement_groups(gas_nsw.id, ["Legacy Gas Permit"])

    assert linked == ["Legacy Gas Permit"]
    names = [g.name for g in repo.find_category_state_licence_groups(gas_nsw.id)]
    assert names == ["Legacy Gas Permit"]


def test_first_link_records_category_slot(
    importer: DataImportService,
    repo: DuckDBLicenceRequirementRepo,
    arc_payload: dict[str, Any],
    plumbing_payload: dict[str, Any],
) -> None:
    importer.update_licence_data_selectively(arc_payload)
    importer.update_licence_data_selectively(plumbing_payload)

    arc = repo.find_licence_requirement_group("arc_requirement")
    gas = repo.find_licence_requirement_group("gas_requirement")
    assert arc is not None and gas is not None
    assert arc.parent_category_id == 1
    assert arc.sub_category_id is None
    assert gas.sub_category_id == 201
    assert gas.parent_category_id is None


def test_assigned_slot_is_not_overwritten(
    linker: GroupLinkingService, repo: DuckDBLicenceRequirementRepo, gas_nsw: CategoryState
) -> None:
    drainage_nsw = repo.find_category_state(2, 202, "NSW")
    assert drainage_nsw is not None and drainage_nsw.id is not None

    linker.link_licence_requirement_groups(drainage_nsw.id, ["gas_requirement"])

    gas = repo.find_licence_requirement_group("gas_requirement")
    assert gas is not None
    assert gas.sub_category_id == 201


def test_licence_type_links_are_not_duplicated(
    linker: GroupLinkingService,
    repo: DuckDBLicenceRequirementRepo,
    gas_nsw: CategoryState,
    table_count: Callable[[str], int],
) -> None:
    gas = repo.find_licence_requirement_group("gas_requirement")
    drainer = repo.find_licence_type("Drainer Licence")
    assert gas is not None and gas.id is not None
    assert drainer is not None and drainer.id is not None
    before = table_count("licence_requirement_group_licence")

    first = linker.link_licence_types_to_groups(gas.id, [drainer.id, drainer.id])
    second = linker.link_licence_types_to_groups(gas.id, [drainer.id])

    assert first == 1
    assert second == 0
    assert table_count("licence_requirement_group_licence") == before + 1


def test_clear_all_group_links(
    linker: GroupLinkingService, gas_nsw: CategoryState, table_count: Callable[[str], int]
) -> None:
    assert table_count("category_state_licence_group") == 3

    linker.clear_all_group_links()

    assert table_count("category_state_licence_group") == 0


def test_link_all_reports_linked_states_and_skips_unknown_categories(
    importer: DataImportService,
    linker: GroupLinkingService,
    logger: RecordingLogger,
    plumbing_payload: dict[str, Any],
) -> None:
    importer.update_licence_data_selectively(plumbing_payload)
    payload = dict(plumbing_payload)
    payload["categories"] = [
        *plumbing_payload["categories"],
        {"name": "Roofing", "is_parent": True, "states": {"NSW": {"licence_required": True, "groups": []}}},
    ]

    result = linker.link_all_category_states_to_groups(parse_import_payload(payload).categories or [])

    assert result.linked == 3
    assert result.failed == []
    assert any(m.startswith("Skipping links for Roofing") for m in logger.messages("warning"))
