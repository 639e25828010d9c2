"""Error taxonomy shared by the ledger, the store and the HTTP layer.

Every error carries a stable ``kind`` so callers can branch without parsing
messages.
"""

from __future__ import annotations


class LedgerError(Exception):
    kind = "ledger_error"

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message


class ValidationError(LedgerError, ValueError):
    kind = "validation_failed"


class NotFoundError(LedgerError):
    kind = "not_found"


class UnauthorizedError(LedgerError):
    kind = "unauthorized"


class ConflictError(LedgerError):
    kind = "conflict"


class StorageError(LedgerError):
    kind = "storage_failed"


class PartiallyAppliedError(StorageError):
    """A multi-step write failed midway and cleanup could not undo it."""

    kind = "partially_applied"
