"""
Ledger Read Models

DESIGN DECISION: Views are DETERMINISTIC and read-only.
They are computed from a snapshot of the store, never from live state,
so rendering can never mutate the ledger.

Sorting by date happens here, for display only. The store itself keeps
transactions in insertion order.
"""

from datetime import datetime
from typing import Callable, Optional

from pocketledger.config import LedgerSettings, get_settings
from pocketledger.models.ledger import (
    DEFAULT_CATEGORIES,
    MONTHS_PER_YEAR,
    CategoryTotal,
    DashboardSummary,
    LedgerSnapshot,
    MonthlyTotal,
    Transaction,
    TransactionType,
)


def _newest_first(transactions: list[Transaction]) -> list[Transaction]:
    return sorted(transactions, key=lambda t: t.date, reverse=True)


def _sum(transactions: list[Transaction], *types: TransactionType) -> float:
    return sum(t.amount for t in transactions if t.type in types)


class LedgerQueries:
    """
    Derived views over one ledger snapshot.

    GUARANTEES:
    - Only reports transactions present in the snapshot
    - Never changes the snapshot it was given
    """

    def __init__(
        self,
        snapshot: LedgerSnapshot,
        settings: Optional[LedgerSettings] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self._snapshot = snapshot
        self._settings = settings or get_settings().ledger
        self._clock = clock

    @classmethod
    def from_store(cls, store, clock: Callable[[], datetime] = datetime.now) -> "LedgerQueries":
        """Build views over the store's current state."""
        return cls(store.snapshot(), store.settings, clock)

    # ── TRANSACTION LISTS ─────────────────────────────────

    def wallet_transactions(self, wallet_id: Optional[str]) -> list[Transaction]:
        return _newest_first([
            t for t in self._snapshot.transactions if t.wallet_id == wallet_id
        ])

    def transactions_for_month(
        self,
        wallet_id: Optional[str],
        year: int,
        month: int,
    ) -> list[Transaction]:
        return [
            t for t in self.wallet_transactions(wallet_id)
            if t.date.year == year and t.date.month == month
        ]

    def recent_transactions(
        self,
        wallet_id: Optional[str],
        limit: Optional[int] = None,
    ) -> list[Transaction]:
        limit = limit if limit is not None else self._settings.recent_transactions_limit
        return self.wallet_transactions(wallet_id)[:limit]

    # ── ANALYTICS ─────────────────────────────────────────

    def category_breakdown(self, wallet_id: Optional[str]) -> list[CategoryTotal]:
        """
        Expense totals per category, largest first.

        Categories with nothing spent are left out. Percentages are shares
        of the listed total.
        """
        expenses = [
            t for t in self._snapshot.transactions
            if t.wallet_id == wallet_id and t.type == TransactionType.EXPENSE
        ]

        totals = []
        for category in DEFAULT_CATEGORIES:
            total = sum(t.amount for t in expenses if t.category == category.id)
            if total > 0:
                totals.append((category, total))
        totals.sort(key=lambda item: item[1], reverse=True)

        grand_total = sum(total for _, total in totals)
        return [
            CategoryTotal(
                category=category,
                total=total,
                percentage=min(100.0, total / grand_total * 100),
            )
            for category, total in totals
        ]

    def monthly_trend(
        self,
        wallet_id: Optional[str],
        months: Optional[int] = None,
    ) -> list[MonthlyTotal]:
        """Expense totals for the last N calendar months, oldest first."""
        months = months if months is not None else self._settings.trend_months
        today = self._clock()

        # Count months from year 0 so stepping back crosses year boundaries
        anchor = today.year * MONTHS_PER_YEAR + (today.month - 1)
        trend = []
        for offset in range(months - 1, -1, -1):
            year, month_index = divmod(anchor - offset, MONTHS_PER_YEAR)
            total = sum(
                t.amount for t in self._snapshot.transactions
                if t.wallet_id == wallet_id
                and t.type == TransactionType.EXPENSE
                and t.date.year == year
                and t.date.month == month_index + 1
            )
            trend.append(MonthlyTotal(year=year, month=month_index + 1, total=total))
        return trend

    def dashboard(self, wallet_id: Optional[str]) -> DashboardSummary:
        """
        Headline figures for a wallet.

        Savings count as outflow here: money put aside is no longer
        available to spend.
        """
        transactions = self.wallet_transactions(wallet_id)
        wallet = next(
            (w for w in self._snapshot.wallets if w.id == wallet_id),
            None,
        )

        period = transactions[0].date if transactions else self._clock()
        this_month = [
            t for t in transactions
            if t.date.year == period.year and t.date.month == period.month
        ]

        return DashboardSummary(
            wallet_id=wallet_id or "",
            wallet_name=wallet.name if wallet else None,
            all_time_income=_sum(transactions, TransactionType.INCOME),
            all_time_outflow=_sum(
                transactions, TransactionType.EXPENSE, TransactionType.SAVINGS,
            ),
            period_year=period.year,
            period_month=period.month,
            monthly_income=_sum(this_month, TransactionType.INCOME),
            monthly_expenses=_sum(this_month, TransactionType.EXPENSE),
            monthly_savings=_sum(this_month, TransactionType.SAVINGS),
            total_saved=sum(g.current_amount for g in self._snapshot.savings_goals),
        )
