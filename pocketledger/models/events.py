"""
Ledger Event Models

Every command the ledger store executes produces one event. Events are
written to the audit trail and delivered to store subscribers, so the UI
re-renders from the same record that is audited.

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

import json
from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from pocketledger.models.ledger import Collection


class LedgerEventType(str, Enum):
    """Types of events we audit."""
    # Lifecycle
    STORE_LOADED = "store_loaded"
    LOAD_FAILED = "load_failed"

    # Wallets
    WALLET_CREATED = "wallet_created"
    ACTIVE_WALLET_CHANGED = "active_wallet_changed"

    # Transactions
    TRANSACTION_ADDED = "transaction_added"
    TRANSACTION_DELETED = "transaction_deleted"

    # Savings goals
    GOAL_CREATED = "goal_created"
    GOAL_CONTRIBUTION = "goal_contribution"
    GOAL_DELETED = "goal_deleted"
    GOAL_DELETE_DECLINED = "goal_delete_declined"

    # Analytics
    ANALYTICS_UPDATED = "analytics_updated"
    ANALYTICS_ARCHIVED = "analytics_archived"

    # Failures
    VALIDATION_FAILED = "validation_failed"
    PERSISTENCE_FAILED = "persistence_failed"

    # Preferences
    THEME_CHANGED = "theme_changed"


class EventSeverity(str, Enum):
    """Severity level for ledger events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class LedgerEvent(BaseModel):
    """
    A single ledger event.

    This is the core unit of the audit trail and of change notification.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.now,
        description="When the event occurred (local time)"
    )

    # Event classification
    event_type: LedgerEventType
    severity: EventSeverity = EventSeverity.INFO

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'wallet', 'transaction', 'goal')"
    )
    entity_id: Optional[str] = None

    # Which persisted collections the command changed
    collections: list[Collection] = Field(default_factory=list)

    description: str = Field(..., max_length=500)
    details: dict[str, Any] = Field(default_factory=dict)

    error_message: Optional[str] = None
    is_user_action: bool = False

    def touches(self, collection: Collection) -> bool:
        return collection in self.collections

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "collections": [c.value for c in self.collections],
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }

    def to_sheets_row(self) -> list:
        """
        Convert to a row suitable for Google Sheets storage.

        Returns columns in order:
        [event_id, timestamp, event_type, severity, entity_type, entity_id,
         collections, description, details_json, error_message, is_user_action]
        """
        return [
            str(self.event_id),
            self.timestamp.isoformat(),
            self.event_type.value,
            self.severity.value,
            self.entity_type or "",
            self.entity_id or "",
            ",".join(c.value for c in self.collections),
            self.description,
            json.dumps(self.details) if self.details else "",
            self.error_message or "",
            str(self.is_user_action),
        ]


class LedgerEventBuilder:
    """
    Helper class to build ledger events with common patterns.

    Usage:
        event = LedgerEventBuilder.transaction_added(tx)
        event = LedgerEventBuilder.goal_deleted(goal_id, title, removed=3)
    """

    @staticmethod
    def store_loaded(
        transactions: int,
        wallets: int,
        goals: int,
        skipped: int = 0,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.STORE_LOADED,
            description=f"Ledger loaded: {transactions} transactions, {wallets} wallets, {goals} goals",
            details={
                "transactions": transactions,
                "wallets": wallets,
                "goals": goals,
                "skipped_records": skipped,
            },
        )

    @staticmethod
    def load_failed(error_message: str) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.LOAD_FAILED,
            severity=EventSeverity.ERROR,
            description="Could not load saved ledger data",
            error_message=error_message,
        )

    @staticmethod
    def wallet_created(wallet_id: str, name: str, wallet_type: str) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.WALLET_CREATED,
            entity_type="wallet",
            entity_id=wallet_id,
            collections=[Collection.WALLETS],
            description=f"Wallet created: {name}",
            details={"type": wallet_type},
            is_user_action=True,
        )

    @staticmethod
    def active_wallet_changed(wallet_id: Optional[str], known: bool) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.ACTIVE_WALLET_CHANGED,
            severity=EventSeverity.INFO if known else EventSeverity.WARNING,
            entity_type="wallet",
            entity_id=wallet_id,
            description=f"Active wallet set to {wallet_id}",
            details={"known_wallet": known},
            is_user_action=True,
        )

    @staticmethod
    def transaction_added(
        transaction_id: str,
        tx_type: str,
        amount: float,
        wallet_id: str,
        balance_delta: float,
        goal_id: Optional[str] = None,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.TRANSACTION_ADDED,
            entity_type="transaction",
            entity_id=transaction_id,
            collections=[Collection.TRANSACTIONS, Collection.WALLETS],
            description=f"{tx_type.capitalize()} of {amount:.2f} recorded",
            details={
                "type": tx_type,
                "amount": amount,
                "wallet_id": wallet_id,
                "balance_delta": balance_delta,
                "goal_id": goal_id,
            },
            is_user_action=goal_id is None,
        )

    @staticmethod
    def transaction_deleted(
        transaction_id: str,
        amount: float,
        wallet_id: str,
        balance_delta: float,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.TRANSACTION_DELETED,
            entity_type="transaction",
            entity_id=transaction_id,
            collections=[Collection.TRANSACTIONS, Collection.WALLETS],
            description=f"Transaction of {amount:.2f} deleted",
            details={
                "wallet_id": wallet_id,
                "balance_delta": balance_delta,
            },
            is_user_action=True,
        )

    @staticmethod
    def goal_created(goal_id: str, title: str, target_amount: float) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.GOAL_CREATED,
            entity_type="goal",
            entity_id=goal_id,
            collections=[Collection.SAVINGS_GOALS],
            description=f"Savings goal created: {title}",
            details={"target_amount": target_amount},
            is_user_action=True,
        )

    @staticmethod
    def goal_contribution(
        goal_id: str,
        contributor: str,
        amount: float,
        current_amount: float,
        transaction_id: Optional[str],
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.GOAL_CONTRIBUTION,
            entity_type="goal",
            entity_id=goal_id,
            collections=[
                Collection.SAVINGS_GOALS,
                Collection.TRANSACTIONS,
                Collection.WALLETS,
            ],
            description=f"{contributor} contributed {amount:.2f}",
            details={
                "contributor": contributor,
                "amount": amount,
                "current_amount": current_amount,
                "transaction_id": transaction_id,
            },
            is_user_action=True,
        )

    @staticmethod
    def goal_deleted(goal_id: str, title: str, removed_transactions: int) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.GOAL_DELETED,
            entity_type="goal",
            entity_id=goal_id,
            collections=[
                Collection.SAVINGS_GOALS,
                Collection.TRANSACTIONS,
                Collection.WALLETS,
            ],
            description=f"Savings goal deleted: {title}",
            details={"removed_transactions": removed_transactions},
            is_user_action=True,
        )

    @staticmethod
    def goal_delete_declined(goal_id: str) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.GOAL_DELETE_DECLINED,
            entity_type="goal",
            entity_id=goal_id,
            description="User declined goal deletion",
            is_user_action=True,
        )

    @staticmethod
    def analytics_updated(year: int, wallet_id: Optional[str], total: float) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.ANALYTICS_UPDATED,
            entity_type="analytics",
            entity_id=str(year),
            collections=[Collection.ANALYTICS_HISTORY],
            description=f"Analytics snapshot for {year} refreshed",
            details={"wallet_id": wallet_id, "year_total": total},
        )

    @staticmethod
    def analytics_archived(year: int, wallet_id: str, total: float) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.ANALYTICS_ARCHIVED,
            entity_type="analytics",
            entity_id=str(year),
            collections=[Collection.ANALYTICS_HISTORY],
            description=f"Analytics snapshot for {year} archived",
            details={"wallet_id": wallet_id, "year_total": total},
            is_user_action=True,
        )

    @staticmethod
    def validation_failed(subject: str, issues: list[dict]) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.VALIDATION_FAILED,
            severity=EventSeverity.WARNING,
            entity_type=subject,
            description=f"{subject.capitalize()} rejected with {len(issues)} issues",
            details={"issues": issues},
            is_user_action=True,
        )

    @staticmethod
    def persistence_failed(collection: Collection, error_message: str, attempts: int) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.PERSISTENCE_FAILED,
            severity=EventSeverity.ERROR,
            entity_type="collection",
            entity_id=collection.value,
            description=f"Could not save {collection.value} after {attempts} attempts",
            error_message=error_message,
            details={"attempts": attempts},
        )

    @staticmethod
    def theme_changed(theme: str) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.THEME_CHANGED,
            description=f"Theme switched to {theme}",
            details={"theme": theme},
            is_user_action=True,
        )
