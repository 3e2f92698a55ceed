"""Validation package."""

from pocketledger.validation.validator import (
    AMOUNT_MUST_BE_POSITIVE,
    LedgerValidator,
    enforce,
)

__all__ = ["AMOUNT_MUST_BE_POSITIVE", "LedgerValidator", "enforce"]
