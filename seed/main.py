# seed/main.py
#
# Seed job: loads reference data (licensing authorities and trade categories)
# into an empty licensing database.
#
# Design decisions:
#   - run_seed is the single entry point. It accepts a SeedConfig and a
#     repository so tests can pass an in-memory DuckDB and a local feed file.
#   - Each dataset is seeded only when its tables are empty. Re-running the
#     job against a populated database is a no-op, so it is safe to run on
#     every deploy.
#   - Order: authorities, then categories. Neither depends on the other, but
#     authorities need no network access and fail fast on a bad file.
#   - categories_file, when given, replaces the download. Used by tests and
#     for offline seeding from a saved feed.
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from licensing.domain.category.entities import ParentCategory, SubCategory
from licensing.domain.requirement.entities import Authority
from licensing.domain.requirement.repository import LicenceRequirementRepository
from licensing.log import Logger, StdoutLogger
from seed.config import SeedConfig, load_config
from seed.sources.authorities.parse import parse_authorities
from seed.sources.authorities.validate import validate_authorities
from seed.sources.categories.download import download_categories
from seed.sources.categories.parse import parse_categories
from seed.sources.categories.validate import validate_parents, validate_subs


@dataclass(frozen=True)
class SeedResult:
    authorities: int = 0
    parent_categories: int = 0
    sub_categories: int = 0


def run_seed(
    config: SeedConfig,
    repository: LicenceRequirementRepository,
    *,
    logger: Logger | None = None,
    categories_file: Path | None = None,
) -> SeedResult:
    log = logger or StdoutLogger("seed")
    authorities = seed_authorities(config.authorities_path, repository, log)
    parents, subs = seed_categories(config, repository, log, categories_file=categories_file)
    log.info(f"Done. Authorities: {authorities}, parent categories: {parents}, sub-categories: {subs}")
    return SeedResult(authorities=authorities, parent_categories=parents, sub_categories=subs)


def seed_authorities(path: Path, repository: LicenceRequirementRepository, log: Logger) -> int:
    if repository.count_authorities() > 0:
        log.info("Authorities seed skipped: data already present")
        return 0

    log.info(f"Seeding authorities from {path.name}...")
    df = validate_authorities(parse_authorities(path))
    if df.is_empty():
        log.warning("No valid authority records found; skipping")
        return 0

    for row in df.iter_rows(named=True):
        repository.save_authority(
            Authority(
                authority=row["authority"],
                authority_name=row["authority_name"],
                state=row["state"],
                link=row["link"],
            )
        )
    log.info(f"Seeded {len(df)} authorities")
    return len(df)


def seed_categories(
    config: SeedConfig,
    repository: LicenceRequirementRepository,
    log: Logger,
    *,
    categories_file: Path | None = None,
) -> tuple[int, int]:
    if repository.count_categories() > 0:
        log.info("Category seed skipped: data already present")
        return 0, 0

    raw_path = categories_file or download_categories(
        config.categories_url,
        config.raw_dir,
        log,
        timeout=config.download_timeout,
        retries=config.download_retries,
    )
    parents_raw, subs_raw = parse_categories(raw_path)
    parents_df = validate_parents(parents_raw)
    subs_df = validate_subs(subs_raw)
    log.info(
        f"Categories: {len(parents_df)}/{len(parents_raw)} parents, {len(subs_df)}/{len(subs_raw)} subs kept"
    )
    if parents_df.is_empty() and subs_df.is_empty():
        log.warning("No categories received from source; skipping seed")
        return 0, 0

    parents = [ParentCategory(id=r["id"], name=r["name"]) for r in parents_df.iter_rows(named=True)]
    subs = [
        SubCategory(id=r["id"], parent_id=r["parent_id"], name=r["name"], short_name=r["short_name"])
        for r in subs_df.iter_rows(named=True)
    ]
    saved_parents = repository.save_parent_categories(parents)
    saved_subs = repository.save_sub_categories(subs)
    log.info(f"Seeded {saved_parents} parent categories and {saved_subs} sub-categories")
    return saved_parents, saved_subs


if __name__ == "__main__":
    import duckdb

    from licensing.infrastructure.duckdb_connection import init_schema
    from licensing.infrastructure.repositories.duckdb_licence_repo import DuckDBLicenceRequirementRepo

    cfg = load_config()
    Path(cfg.duckdb_path).parent.mkdir(parents=True, exist_ok=True)
    conn = duckdb.connect(cfg.duckdb_path)
    init_schema(conn)
    run_seed(cfg, DuckDBLicenceRequirementRepo(conn))
    conn.close()
