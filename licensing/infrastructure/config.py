# licensing/infrastructure/config.py
from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class Settings:
    duckdb_path: str
    batch_max_workers: int
    default_state: str
    verbose_logging: bool
    debug: bool


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings(
        duckdb_path=os.environ.get("DUCKDB_PATH", ":memory:"),
        batch_max_workers=int(os.environ.get("LICENSING_BATCH_MAX_WORKERS", "8")),
        default_state=os.environ.get("LICENSING_DEFAULT_STATE", "NSW"),
        verbose_logging=os.environ.get("LICENSING_VERBOSE_LOGGING", "false").lower() == "true",
        debug=os.environ.get("API_DEBUG", "false").lower() == "true",
    )
