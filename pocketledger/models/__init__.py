"""
Data Models Package

This package contains all Pydantic models used by Pocket Ledger.
All data flowing through the ledger store must conform to these schemas.
"""

from pocketledger.models.ledger import (
    DEFAULT_CATEGORIES,
    DEFAULT_WALLET_ID,
    MONTHS_PER_YEAR,
    SAVINGS_CATEGORY_ID,
    AnalyticsHistory,
    Category,
    CategoryTotal,
    Collection,
    DashboardSummary,
    GoalDraft,
    GoalMember,
    LedgerSnapshot,
    MonthlyTotal,
    SavingsGoal,
    Theme,
    Transaction,
    TransactionDraft,
    TransactionType,
    ValidationIssue,
    ValidationResult,
    Wallet,
    WalletType,
    categories_for,
    default_wallet,
    get_category,
)
from pocketledger.models.events import (
    EventSeverity,
    LedgerEvent,
    LedgerEventBuilder,
    LedgerEventType,
)

__all__ = [
    # Ledger models
    "DEFAULT_CATEGORIES",
    "DEFAULT_WALLET_ID",
    "MONTHS_PER_YEAR",
    "SAVINGS_CATEGORY_ID",
    "AnalyticsHistory",
    "Category",
    "CategoryTotal",
    "Collection",
    "DashboardSummary",
    "GoalDraft",
    "GoalMember",
    "LedgerSnapshot",
    "MonthlyTotal",
    "SavingsGoal",
    "Theme",
    "Transaction",
    "TransactionDraft",
    "TransactionType",
    "ValidationIssue",
    "ValidationResult",
    "Wallet",
    "WalletType",
    "categories_for",
    "default_wallet",
    "get_category",
    # Event models
    "EventSeverity",
    "LedgerEvent",
    "LedgerEventBuilder",
    "LedgerEventType",
]
