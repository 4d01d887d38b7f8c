# licensing/domain/errors.py
#
# Error taxonomy shared by every layer.
#
# Design decisions:
#   - Every error carries a human-readable message plus an optional details
#     dict. The HTTP layer maps each class to a status code; nothing else
#     inspects the message text.
#   - ReferenceIntegrityError is the foreign-key violation case. It is not
#     called ReferenceError so it does not shadow the Python builtin.
#   - InvalidEntityError also subclasses ValueError: entity constructors raise
#     it from __post_init__, the same place value objects raise ValueError.
from __future__ import annotations


class LicensingError(Exception):
    """Base class for all licensing errors."""

    def __init__(self, message: str, details: dict[str, object] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


class ValidationError(LicensingError):
    """Malformed input. Raised before any store access."""


class NotFoundError(LicensingError):
    """A referenced category, sub-category or category state does not exist."""


class ConflictError(LicensingError):
    """Duplicate-key violation reported by the store."""


class ReferenceIntegrityError(LicensingError):
    """Foreign-key violation reported by the store."""


class ProcessingError(LicensingError):
    """Unexpected failure while processing one import item."""


class InvalidEntityError(LicensingError, ValueError):
    """Entity constructed with data that breaks its invariants."""
