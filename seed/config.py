# seed/config.py
#
# Seed job configuration loaded from environment variables.
#
# Design decisions:
#   - A frozen dataclass, like the API settings. The seed job runs once at
#     deploy time and needs no validation framework.
#   - The authorities list ships with the package (seed/data) so a fresh
#     checkout can seed without network access. Only the categories feed is
#     downloaded.
#   - The downloaded feed is cached under data_dir/raw; delete the file to
#     force a re-download.
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

_SEED_DIR = Path(__file__).parent

DEFAULT_CATEGORIES_URL = "https://on-demand-service.homeimprovementpages.com.au/v1/categories"


@dataclass(frozen=True)
class SeedConfig:
    """Immutable seed configuration.

    Invariants:
      - download_timeout is a positive number of seconds.
      - download_retries is the number of connection retries, 0 or more.
      - authorities_path points at a JSON array of authority objects.
    """

    data_dir: Path
    duckdb_path: str
    categories_url: str = DEFAULT_CATEGORIES_URL
    authorities_path: Path = _SEED_DIR / "data" / "licensing_authorities.json"
    download_timeout: int = 15
    download_retries: int = 3

    @property
    def raw_dir(self) -> Path:
        """Directory for downloaded raw files."""
        return self.data_dir / "raw"


def load_config() -> SeedConfig:
    data_dir = Path(os.environ.get("SEED_DATA_DIR", str(_SEED_DIR / "data")))
    return SeedConfig(
        data_dir=data_dir,
        duckdb_path=os.environ.get("DUCKDB_PATH", str(data_dir / "licensing.duckdb")),
        categories_url=os.environ.get("SEED_CATEGORIES_URL", DEFAULT_CATEGORIES_URL),
        authorities_path=Path(
            os.environ.get("SEED_AUTHORITIES_FILE", str(_SEED_DIR / "data" / "licensing_authorities.json"))
        ),
        download_timeout=int(os.environ.get("SEED_DOWNLOAD_TIMEOUT", "15")),
        download_retries=int(os.environ.get("SEED_DOWNLOAD_RETRIES", "3")),
    )
