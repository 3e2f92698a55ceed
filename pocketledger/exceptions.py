"""
Ledger exceptions.

Sub-ledgers raise these; the ledger store catches them, reports them
through the notification port and keeps the session alive.
"""

from typing import Optional

from pocketledger.models.ledger import Collection, ValidationResult


class LedgerError(Exception):
    """Base exception for ledger operations."""
    pass


class ValidationError(LedgerError):
    """Command input was rejected. No state was changed."""

    def __init__(self, result: ValidationResult):
        self.result = result
        super().__init__(result.first_error or f"Invalid {result.subject}")

    @property
    def issues(self) -> list[dict]:
        return [
            {"field": i.field, "type": i.issue_type, "message": i.message}
            for i in self.result.issues
            if i.severity == "error"
        ]


class PersistenceError(LedgerError):
    """A collection could not be written after all retry attempts."""

    def __init__(
        self,
        collection: Collection,
        attempts: int,
        cause: Optional[BaseException] = None,
    ):
        self.collection = collection
        self.attempts = attempts
        self.cause = cause
        super().__init__(
            f"Failed to save {collection.value} after {attempts} attempts: {cause}"
        )
