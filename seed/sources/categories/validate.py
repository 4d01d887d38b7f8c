# seed/sources/categories/validate.py
#
# Validate and clean the parsed category DataFrames.
#
# Design decisions:
#   - Rows whose ids are not positive integers are dropped. The upstream feed
#     occasionally contains placeholder entries with blank ids.
#   - Deduplication keeps the first row per id, matching feed order.
#   - A missing name becomes an empty string; the row is still a valid
#     category id that rules may reference.
#
# Invariants:
#   - id (and parent_id for subs) are Int64 and > 0 in every surviving row.
#   - id is unique in each output frame.
from __future__ import annotations

import polars as pl


def _positive_int(col: str) -> pl.Expr:
    return pl.col(col).str.strip_chars().cast(pl.Int64, strict=False)


def validate_parents(df: pl.DataFrame) -> pl.DataFrame:
    return (
        df.with_columns(_positive_int("id").alias("id"), pl.col("name").fill_null(""))
        .filter(pl.col("id").is_not_null() & (pl.col("id") > 0))
        .unique(subset=["id"], keep="first", maintain_order=True)
    )


def validate_subs(df: pl.DataFrame) -> pl.DataFrame:
    return (
        df.with_columns(
            _positive_int("id").alias("id"),
            _positive_int("parent_id").alias("parent_id"),
            pl.col("name").fill_null(""),
        )
        .filter(
            pl.col("id").is_not_null()
            & (pl.col("id") > 0)
            & pl.col("parent_id").is_not_null()
            & (pl.col("parent_id") > 0)
        )
        .unique(subset=["id"], keep="first", maintain_order=True)
    )
