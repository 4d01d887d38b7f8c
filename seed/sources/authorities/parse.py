# seed/sources/authorities/parse.py
#
# Parse the bundled licensing authorities list.
#
# The file is a JSON array of {"authority", "state", "link"?} objects. Rows
# are read as strings; validate_authorities() drops the unusable ones.
from __future__ import annotations

import json
from pathlib import Path

import polars as pl

AUTHORITY_SCHEMA = {"authority": pl.Utf8, "state": pl.Utf8, "link": pl.Utf8}


def parse_authorities(path: Path) -> pl.DataFrame:
    payload = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(payload, list):
        return pl.DataFrame(schema=AUTHORITY_SCHEMA)
    rows = [
        {
            "authority": None if item.get("authority") is None else str(item["authority"]),
            "state": None if item.get("state") is None else str(item["state"]),
            "link": None if item.get("link") is None else str(item["link"]),
        }
        for item in payload
        if isinstance(item, dict)
    ]
    return pl.DataFrame(rows, schema=AUTHORITY_SCHEMA)
