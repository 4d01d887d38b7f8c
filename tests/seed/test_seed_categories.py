# tests/seed/test_seed_categories.py
#
# Tests for the categories feed: parse, validate and seed.
#
# The fixture sample_categories.json follows the upstream feed shape:
#   - parents under "data", sub-categories nested under "subcategories"
#   - ids as numbers or numeric strings
#   - a non-numeric parent id, a blank sub id, an orphan sub and duplicate ids
from __future__ import annotations

from collections.abc import Generator
from pathlib import Path

import duckdb
import polars as pl
import pytest

from licensing.infrastructure.duckdb_connection import init_schema
from licensing.infrastructure.repositories.duckdb_licence_repo import DuckDBLicenceRequirementRepo
from licensing.log import RecordingLogger
from seed.config import SeedConfig
from seed.main import run_seed
from seed.sources.categories.parse import parse_categories, parse_categories_payload
from seed.sources.categories.validate import validate_parents, validate_subs

FIXTURES_DIR = Path(__file__).parent.parent / "fixtures"
SAMPLE_CATEGORIES = FIXTURES_DIR / "sample_categories.json"
SAMPLE_AUTHORITIES = FIXTURES_DIR / "sample_authorities.json"


@pytest.fixture()
def empty_repo() -> Generator[DuckDBLicenceRequirementRepo, None, None]:
    connection = duckdb.connect(":memory:")
    init_schema(connection)
    yield DuckDBLicenceRequirementRepo(connection)
    connection.close()


@pytest.fixture()
def config(tmp_path: Path) -> SeedConfig:
    return SeedConfig(
        data_dir=tmp_path,
        duckdb_path=":memory:",
        categories_url="http://localhost.invalid/categories",
        authorities_path=SAMPLE_AUTHORITIES,
    )


def test_parse_reads_every_row_as_text() -> None:
    parents, subs = parse_categories(SAMPLE_CATEGORIES)

    assert parents.columns == ["id", "name"]
    assert subs.columns == ["id", "parent_id", "name", "short_name"]
    assert all(dtype == pl.Utf8 for dtype in parents.dtypes + subs.dtypes)
    assert len(parents) == 5
    assert len(subs) == 6


def test_parse_unexpected_payload_yields_empty_frames() -> None:
    parents, subs = parse_categories_payload({"items": []})

    assert parents.is_empty()
    assert subs.is_empty()
    assert parents.columns == ["id", "name"]


def test_validate_parents_drops_bad_ids_and_duplicates() -> None:
    parents, _subs = parse_categories(SAMPLE_CATEGORIES)

    df = validate_parents(parents)

    assert df["id"].dtype == pl.Int64
    assert df["id"].to_list() == [1, 2, 3]
    # First occurrence wins; a missing name becomes "".
    assert df["name"].to_list() == ["Air Conditioning", "Plumbing", ""]


def test_validate_subs_drops_blank_orphan_and_duplicate_rows() -> None:
    _parents, subs = parse_categories(SAMPLE_CATEGORIES)

    df = validate_subs(subs)

    assert df["id"].to_list() == [101, 201, 202]
    assert df["parent_id"].to_list() == [1, 2, 2]
    assert df.filter(pl.col("id") == 201)["name"].to_list() == ["Gas Fitting"]
    assert df.filter(pl.col("id") == 202)["short_name"].to_list() == ["drainer"]


def test_run_seed_loads_reference_data(empty_repo: DuckDBLicenceRequirementRepo, config: SeedConfig) -> None:
    result = run_seed(config, empty_repo, logger=RecordingLogger(), categories_file=SAMPLE_CATEGORIES)

    assert result.parent_categories == 3
    assert result.sub_categories == 3
    assert result.authorities == 3
    assert empty_repo.count_categories() == 6
    gas = empty_repo.find_sub_category_by_short_name("gas-fitter")
    assert gas is not None and gas.parent_id == 2


def test_run_seed_twice_is_a_no_op(empty_repo: DuckDBLicenceRequirementRepo, config: SeedConfig) -> None:
    run_seed(config, empty_repo, logger=RecordingLogger(), categories_file=SAMPLE_CATEGORIES)
    logger = RecordingLogger()

    second = run_seed(config, empty_repo, logger=logger, categories_file=SAMPLE_CATEGORIES)

    assert (second.authorities, second.parent_categories, second.sub_categories) == (0, 0, 0)
    assert empty_repo.count_categories() == 6
    assert "Category seed skipped: data already present" in logger.messages("info")


def test_empty_feed_seeds_nothing(
    empty_repo: DuckDBLicenceRequirementRepo, config: SeedConfig, tmp_path: Path
) -> None:
    feed = tmp_path / "empty.json"
    feed.write_text('{"data": []}', encoding="utf-8")
    logger = RecordingLogger()

    result = run_seed(config, empty_repo, logger=logger, categories_file=feed)

    assert (result.parent_categories, result.sub_categories) == (0, 0)
    assert "No categories received from source; skipping seed" in logger.messages("warning")


def test_cached_feed_is_not_downloaded_again(config: SeedConfig) -> None:
    from seed.sources.categories.download import CATEGORIES_FILE, download_categories

    config.raw_dir.mkdir(parents=True)
    cached = config.raw_dir / CATEGORIES_FILE
    cached.write_text(SAMPLE_CATEGORIES.read_text(encoding="utf-8"), encoding="utf-8")

    path = download_categories(config.categories_url, config.raw_dir, RecordingLogger())

    assert path == cached
