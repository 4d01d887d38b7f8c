# licensing/infrastructure/store_errors.py
#
# Turns DuckDB errors into the licensing error taxonomy.
#
# Design decisions:
#   - Matching is on message text because DuckDB reports every constraint
#     failure as duckdb.ConstraintException; the message is the only place
#     that says which kind of constraint failed.
#   - Unrecognised errors become ProcessingError carrying the store message
#     unchanged, so nothing is hidden from the caller.
from __future__ import annotations

import re

import duckdb

from licensing.domain.errors import (
    ConflictError,
    LicensingError,
    ProcessingError,
    ReferenceIntegrityError,
    ValidationError,
)

_DUPLICATE_KEY = re.compile(r'duplicate key "(?P<column>[^:"]+): (?P<value>[^"]*)"', re.IGNORECASE)
_FOREIGN_KEY = re.compile(r'key "(?P<column>[^:"]+): (?P<value>[^"]*)"', re.IGNORECASE)


def translate_store_error(error: duckdb.Error, operation: str) -> LicensingError:
    """Map a DuckDB error raised during operation to a friendlier LicensingError."""
    message = str(error)
    lowered = message.lower()

    if "too long" in lowered or "value too long" in lowered:
        return ValidationError(
            f"{operation} failed: a value is longer than its column allows. Shorten the field and retry.",
            details={"store_message": message},
        )

    if "duplicate key" in lowered or "unique constraint" in lowered or "primary key constraint" in lowered:
        match = _DUPLICATE_KEY.search(message)
        if match:
            column, value = match.group("column").strip(), match.group("value").strip()
            text = f'{operation} failed: a record with {column} "{value}" already exists.'
        else:
            text = f"{operation} failed: a record with the same unique key already exists."
        return ConflictError(text, details={"store_message": message})

    if "foreign key" in lowered:
        match = _FOREIGN_KEY.search(message)
        if match:
            column, value = match.group("column").strip(), match.group("value").strip()
            text = f'{operation} failed: {column} "{value}" refers to a record that does not exist or is still referenced.'
        else:
            text = f"{operation} failed: the record refers to a missing row or is still referenced by another row."
        return ReferenceIntegrityError(text, details={"store_message": message})

    return ProcessingError(f"{operation} failed: {message}", details={"store_message": message})
