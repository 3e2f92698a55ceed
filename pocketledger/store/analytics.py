"""
Analytics Cache

Per-year monthly expense totals, kept in two tiers:

LIVE TIER (recompute_current_year):
- Rebuilt after every transaction change for the current calendar year
- Only written when one of the twelve values actually differs

ARCHIVAL TIER (archive_year):
- A frozen snapshot of a closed year
- Written once, never overwritten
"""

from datetime import datetime
from typing import Callable, Optional

import structlog

from pocketledger.models.ledger import (
    MONTHS_PER_YEAR,
    AnalyticsHistory,
    TransactionType,
)
from pocketledger.store.state import LedgerState
from pocketledger.validation import LedgerValidator, enforce


logger = structlog.get_logger(__name__)


class AnalyticsCache:

    def __init__(
        self,
        state: LedgerState,
        validator: LedgerValidator,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self._state = state
        self._validator = validator
        self._clock = clock

    def monthly_expenses(self, wallet_id: Optional[str], year: int) -> list[float]:
        """Expense totals for one wallet and year, January first."""
        months = [0.0] * MONTHS_PER_YEAR
        for tx in self._state.transactions:
            if (
                tx.type == TransactionType.EXPENSE
                and tx.wallet_id == wallet_id
                and tx.date.year == year
            ):
                months[tx.date.month - 1] += tx.amount
        return months

    def recompute_current_year(self, wallet_id: Optional[str]) -> bool:
        """
        Refresh the current year's snapshot for a wallet.

        A year with no stored snapshot counts as all zeros.

        Returns:
            True if the stored snapshot changed
        """
        if wallet_id is None:
            return False

        year = self._clock().year
        months = self.monthly_expenses(wallet_id, year)
        stored = self._state.analytics_history.get(year, [0.0] * MONTHS_PER_YEAR)
        if months == stored:
            return False

        self._state.analytics_history[year] = months
        logger.info("analytics_recomputed", year=year, wallet_id=wallet_id)
        return True

    def archive_year(self, year: int, wallet_id: str) -> bool:
        """
        Freeze the snapshot of a closed year.

        Returns:
            True if a snapshot was written, False if the year was already stored

        Raises:
            ValidationError: If the year is the current year or later
        """
        enforce(self._validator.check_archive_year(year))

        if year in self._state.analytics_history:
            logger.debug("analytics_year_already_archived", year=year)
            return False

        self._state.analytics_history[year] = self.monthly_expenses(wallet_id, year)
        logger.info("analytics_archived", year=year, wallet_id=wallet_id)
        return True

    def get_history(self, year: Optional[int] = None) -> AnalyticsHistory:
        """Copy of the stored snapshots, for one year or all of them."""
        if year is not None:
            months = self._state.analytics_history.get(year)
            return {year: list(months)} if months is not None else {}
        return {y: list(m) for y, m in self._state.analytics_history.items()}

    def years(self) -> list[int]:
        """Stored years, newest first."""
        return sorted(self._state.analytics_history, reverse=True)
