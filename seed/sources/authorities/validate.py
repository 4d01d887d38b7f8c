# seed/sources/authorities/validate.py
#
# Invariants:
#   - authority and state are non-blank in every surviving row.
#   - authority_name equals authority (the list carries one name only).
#   - A blank link becomes null.
from __future__ import annotations

import polars as pl


def validate_authorities(df: pl.DataFrame) -> pl.DataFrame:
    cleaned = df.with_columns(
        pl.col("authority").str.strip_chars(),
        pl.col("state").str.strip_chars(),
        pl.col("link").str.strip_chars(),
    )
    cleaned = cleaned.filter(
        pl.col("authority").is_not_null()
        & (pl.col("authority") != "")
        & pl.col("state").is_not_null()
        & (pl.col("state") != "")
    )
    return cleaned.with_columns(
        pl.col("authority").alias("authority_name"),
        pl.when(pl.col("link") == "").then(None).otherwise(pl.col("link")).alias("link"),
    ).select(["authority", "authority_name", "state", "link"])
