"""
Ledger Store

The single owner of all ledger state. UI code reads its properties and
calls its commands; nothing else mutates wallets, transactions, goals or
analytics.

Every command follows the same flow:
1. Validate input (rejections are reported, never raised)
2. Apply the change to the in-memory state
3. Recompute the current-year analytics when transactions changed
4. Persist each affected collection (retry with backoff)
5. Audit the resulting event and deliver it to subscribers

DESIGN DECISION: Local state always wins. If a write still fails after
retrying, the change stays in memory, the user is told, and the collection
is kept dirty so ``flush()`` can try again later.
"""

from datetime import date, datetime
from typing import Callable, Iterable, Optional, Union

import pydantic
import structlog
from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from pocketledger.audit import AuditLogger
from pocketledger.config import LedgerSettings, get_settings
from pocketledger.exceptions import PersistenceError, ValidationError
from pocketledger.models.events import LedgerEvent, LedgerEventBuilder, LedgerEventType
from pocketledger.models.ledger import (
    DEFAULT_CATEGORIES,
    AnalyticsHistory,
    Category,
    Collection,
    GoalDraft,
    LedgerSnapshot,
    SavingsGoal,
    Theme,
    Transaction,
    TransactionDraft,
    TransactionType,
    ValidationIssue,
    ValidationResult,
    Wallet,
    WalletType,
    default_wallet,
)
from pocketledger.ports import AlwaysConfirm, Confirmer, LoggingNotifier, NotificationKind, Notifier
from pocketledger.storage.interface import LedgerStorageInterface, StorageError
from pocketledger.store.analytics import AnalyticsCache
from pocketledger.store.bus import EventBus, Listener
from pocketledger.store.ids import IdFactory
from pocketledger.store.savings import MemberInput, SavingsGoalLedger, seed_member
from pocketledger.store.state import LedgerState, parse_payload
from pocketledger.store.transactions import TransactionLedger
from pocketledger.store.wallets import WalletLedger
from pocketledger.validation import LedgerValidator


logger = structlog.get_logger(__name__)


LOAD_FAILED_MESSAGE = "Could not load saved data. Starting with an empty ledger."
GOAL_CREATED_MESSAGE = "Saving created successfully!"
GOAL_DELETED_MESSAGE = "Saving goal deleted!"
CONFIRM_DELETE_GOAL = "Are you sure you want to delete this saving goal?"


def format_amount(amount: float) -> str:
    """Render an amount without a trailing '.0' for whole numbers."""
    return str(int(amount)) if float(amount).is_integer() else str(amount)


def _schema_result(subject: str, error: pydantic.ValidationError) -> ValidationResult:
    """Express a pydantic parsing failure as ledger validation issues."""
    return ValidationResult(
        subject=subject,
        issues=[
            ValidationIssue(
                field=".".join(str(part) for part in err["loc"]) or subject,
                issue_type=err["type"],
                message=err["msg"],
                severity="error",
            )
            for err in error.errors()
        ],
    )


class LedgerStore:
    """
    Facade over the wallet, transaction, savings goal and analytics ledgers.

    Construct once per process (see ``create_ledger_store``) and share.
    """

    def __init__(
        self,
        storage: LedgerStorageInterface,
        settings: Optional[LedgerSettings] = None,
        notifier: Optional[Notifier] = None,
        confirmer: Optional[Confirmer] = None,
        audit_logger: Optional[AuditLogger] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self._storage = storage
        self._settings = settings or get_settings().ledger
        self._notifier = notifier or LoggingNotifier()
        self._confirmer = confirmer or AlwaysConfirm()
        self._audit = audit_logger or AuditLogger()
        self._clock = clock

        self._bus = EventBus()
        self._dirty: set[Collection] = set()
        self._theme = Theme.LIGHT

        self._validator = LedgerValidator(self._settings, clock)
        self._ids = IdFactory(clock)
        self._state = LedgerState()

        self._wallets = WalletLedger(self._state, self._ids, self._validator)
        self._transactions = TransactionLedger(
            self._state, self._ids, self._validator, self._wallets, self._settings, clock,
        )
        self._goals = SavingsGoalLedger(
            self._state, self._ids, self._validator, self._transactions, clock,
        )
        self._analytics = AnalyticsCache(self._state, self._validator, clock)

        self._load()

    # ── LOAD ──────────────────────────────────────────────

    def _load(self) -> None:
        """Populate the state once from storage. Never repeated."""
        try:
            raw = self._storage.load_all()
        except StorageError as e:
            logger.error("ledger_load_failed", error=str(e))
            self._notifier.notify(NotificationKind.ERROR, LOAD_FAILED_MESSAGE)
            self._record(LedgerEventBuilder.load_failed(str(e)))
            raw = {}

        snapshot, skipped = parse_payload(raw)
        if not snapshot.wallets:
            snapshot.wallets = [default_wallet(self._settings.default_wallet_name)]

        loaded = LedgerState(snapshot)
        self._state.transactions = loaded.transactions
        self._state.wallets = loaded.wallets
        self._state.savings_goals = loaded.savings_goals
        self._state.analytics_history = loaded.analytics_history
        self._state.active_wallet_id = loaded.wallets[0].id
        self._ids.observe(self._state.all_ids())

        self._record(LedgerEventBuilder.store_loaded(
            transactions=len(self._state.transactions),
            wallets=len(self._state.wallets),
            goals=len(self._state.savings_goals),
            skipped=skipped,
        ))

    # ── READ SURFACE ──────────────────────────────────────

    @property
    def settings(self) -> LedgerSettings:
        return self._settings

    @property
    def transactions(self) -> list[Transaction]:
        """Newest first by insertion."""
        return [t.model_copy() for t in self._state.transactions]

    @property
    def wallets(self) -> list[Wallet]:
        return [w.model_copy(deep=True) for w in self._wallets.list_wallets()]

    @property
    def savings_goals(self) -> list[SavingsGoal]:
        return [g.model_copy(deep=True) for g in self._goals.list_goals()]

    @property
    def analytics_history(self) -> AnalyticsHistory:
        return self._analytics.get_history()

    @property
    def categories(self) -> list[Category]:
        return list(DEFAULT_CATEGORIES)

    @property
    def active_wallet_id(self) -> Optional[str]:
        return self._state.active_wallet_id

    @property
    def active_wallet(self) -> Optional[Wallet]:
        """None when the active id does not match any wallet."""
        wallet = self._wallets.get(self._state.active_wallet_id)
        return wallet.model_copy(deep=True) if wallet else None

    @property
    def theme(self) -> Theme:
        return self._theme

    @property
    def dirty_collections(self) -> list[Collection]:
        """Collections whose last write failed."""
        return [c for c in Collection if c in self._dirty]

    def get_wallet(self, wallet_id: str) -> Optional[Wallet]:
        wallet = self._wallets.get(wallet_id)
        return wallet.model_copy(deep=True) if wallet else None

    def get_goal(self, goal_id: str) -> Optional[SavingsGoal]:
        goal = self._goals.get(goal_id)
        return goal.model_copy(deep=True) if goal else None

    def analytics_years(self) -> list[int]:
        return self._analytics.years()

    def get_analytics(self, year: Optional[int] = None) -> AnalyticsHistory:
        return self._analytics.get_history(year)

    def snapshot(self) -> LedgerSnapshot:
        """Deep copy of every collection plus the active wallet id."""
        return self._state.to_snapshot()

    def subscribe(
        self,
        listener: Listener,
        event_type: Optional[LedgerEventType] = None,
    ) -> Callable[[], None]:
        """
        Receive the event of every change (or of one event type).

        Returns:
            A callable that unsubscribes the listener
        """
        return self._bus.subscribe(listener, event_type)

    # ── WALLETS ───────────────────────────────────────────

    def create_wallet(
        self,
        name: str,
        wallet_type: Union[WalletType, str] = WalletType.PERSONAL,
        members: Optional[list[str]] = None,
    ) -> Optional[Wallet]:
        try:
            wallet_type = WalletType(wallet_type)
        except ValueError:
            self._reject(ValidationResult(
                subject="wallet",
                issues=[ValidationIssue(
                    field="type",
                    issue_type="invalid_value",
                    message=f"Unknown wallet type: {wallet_type}",
                    severity="error",
                )],
            ))
            return None

        try:
            wallet = self._wallets.create_wallet(name, wallet_type, members)
        except pydantic.ValidationError as e:
            self._reject(_schema_result("wallet", e))
            return None
        except ValidationError as e:
            self._reject(e.result)
            return None

        self._persist([Collection.WALLETS])
        self._record(LedgerEventBuilder.wallet_created(wallet.id, wallet.name, wallet.type.value))
        return wallet.model_copy(deep=True)

    def set_active_wallet(self, wallet_id: Optional[str]) -> None:
        """
        Switch the active wallet. Unknown ids are accepted.

        The current-year analytics snapshot follows the active wallet, so it
        is recomputed (and persisted only if it changed).
        """
        known = self._wallets.exists(wallet_id)
        if not known:
            logger.debug("active_wallet_unknown", wallet_id=wallet_id)
        self._state.active_wallet_id = wallet_id
        self._record(LedgerEventBuilder.active_wallet_changed(wallet_id, known))
        self._refresh_analytics()

    # ── TRANSACTIONS ──────────────────────────────────────

    def add_transaction(
        self,
        tx_type: Union[TransactionType, str],
        amount: float,
        category: str = "",
        wallet_id: Optional[str] = None,
        title: Optional[str] = None,
        note: Optional[str] = None,
        date: Optional[datetime] = None,
    ) -> Optional[Transaction]:
        """
        Record a transaction. ``wallet_id`` defaults to the active wallet.

        Returns:
            The stored transaction, or None if it was rejected
        """
        try:
            draft = TransactionDraft(
                type=tx_type,
                amount=amount,
                category=category or "",
                wallet_id=wallet_id or self._state.active_wallet_id or "",
                title=title,
                note=note,
                date=date,
            )
            tx = self._transactions.add(draft)
        except pydantic.ValidationError as e:
            self._reject(_schema_result("transaction", e))
            return None
        except ValidationError as e:
            self._reject(e.result)
            return None

        self._persist([Collection.TRANSACTIONS, Collection.WALLETS])
        self._record(LedgerEventBuilder.transaction_added(
            transaction_id=tx.id,
            tx_type=tx.type.value,
            amount=tx.amount,
            wallet_id=tx.wallet_id,
            balance_delta=self._transactions.signed_delta(tx),
        ))
        self._refresh_analytics()
        return tx.model_copy()

    def delete_transaction(self, transaction_id: str) -> bool:
        """Remove a transaction and reverse its balance effect. Unknown ids are ignored."""
        tx = self._transactions.delete(transaction_id)
        if tx is None:
            return False

        self._persist([Collection.TRANSACTIONS, Collection.WALLETS])
        self._record(LedgerEventBuilder.transaction_deleted(
            transaction_id=tx.id,
            amount=tx.amount,
            wallet_id=tx.wallet_id,
            balance_delta=-self._transactions.signed_delta(tx),
        ))
        self._refresh_analytics()
        return True

    # ── SAVINGS GOALS ─────────────────────────────────────

    def create_goal(
        self,
        title: str,
        target_amount: float,
        deadline: Optional[date] = None,
        members: Optional[list[MemberInput]] = None,
    ) -> Optional[SavingsGoal]:
        try:
            seeded = [seed_member(m) for m in (members or [])]
            draft = GoalDraft(
                title=title or "",
                target_amount=target_amount,
                deadline=deadline,
                members=[m for m in seeded if m is not None],
            )
            goal = self._goals.create_goal(draft)
        except pydantic.ValidationError as e:
            self._reject(_schema_result("goal", e))
            return None
        except ValidationError as e:
            self._reject(e.result)
            return None

        self._persist([Collection.SAVINGS_GOALS])
        self._notifier.notify(NotificationKind.SUCCESS, GOAL_CREATED_MESSAGE)
        self._record(LedgerEventBuilder.goal_created(goal.id, goal.title, goal.target_amount))
        return goal.model_copy(deep=True)

    def contribute(self, goal_id: str, amount: float, contributor: str) -> Optional[SavingsGoal]:
        """
        Add a member's contribution to a goal, recorded in the active wallet.

        Returns:
            The updated goal, or None if rejected or the goal is unknown
        """
        try:
            outcome = self._goals.contribute(
                goal_id, amount, contributor, self._state.active_wallet_id,
            )
        except pydantic.ValidationError as e:
            self._reject(_schema_result("contribution", e))
            return None
        except ValidationError as e:
            self._reject(e.result)
            return None

        if outcome is None:
            return None
        goal, tx = outcome

        self._persist([
            Collection.SAVINGS_GOALS,
            Collection.TRANSACTIONS,
            Collection.WALLETS,
        ])
        self._notifier.notify(
            NotificationKind.SUCCESS,
            f"Added ${format_amount(amount)} to {goal.title} by {contributor.strip()}!",
        )
        self._record(LedgerEventBuilder.goal_contribution(
            goal_id=goal.id,
            contributor=contributor.strip(),
            amount=amount,
            current_amount=goal.current_amount,
            transaction_id=tx.id,
        ))
        return goal.model_copy(deep=True)

    def delete_goal(self, goal_id: str) -> bool:
        """
        Delete a goal and its contribution transactions, after confirmation.

        Returns:
            True if the goal was deleted
        """
        if self._goals.get(goal_id) is None:
            logger.debug("goal_not_found", goal_id=goal_id)
            return False

        if not self._confirmer.confirm(CONFIRM_DELETE_GOAL):
            self._record(LedgerEventBuilder.goal_delete_declined(goal_id))
            return False

        goal, removed = self._goals.delete_goal(goal_id)

        changed = [Collection.SAVINGS_GOALS]
        if removed:
            changed += [Collection.TRANSACTIONS, Collection.WALLETS]
        self._persist(changed)
        self._notifier.notify(NotificationKind.SUCCESS, GOAL_DELETED_MESSAGE)
        self._record(LedgerEventBuilder.goal_deleted(goal.id, goal.title, len(removed)))
        if removed:
            self._refresh_analytics()
        return True

    # ── ANALYTICS ─────────────────────────────────────────

    def recompute_analytics(self) -> bool:
        """Refresh the current year's snapshot for the active wallet."""
        return self._refresh_analytics()

    def archive_year(self, year: int, wallet_id: Optional[str] = None) -> bool:
        """
        Freeze a closed year's snapshot. ``wallet_id`` defaults to the active wallet.

        Returns:
            True if a snapshot was written
        """
        wallet_id = wallet_id or self._state.active_wallet_id
        try:
            written = self._analytics.archive_year(year, wallet_id)
        except ValidationError as e:
            self._reject(e.result)
            return False

        if written:
            self._persist([Collection.ANALYTICS_HISTORY])
            self._record(LedgerEventBuilder.analytics_archived(
                year, wallet_id, sum(self._state.analytics_history[year]),
            ))
        return written

    def _refresh_analytics(self) -> bool:
        wallet_id = self._state.active_wallet_id
        if not self._analytics.recompute_current_year(wallet_id):
            return False

        year = self._clock().year
        self._persist([Collection.ANALYTICS_HISTORY])
        self._record(LedgerEventBuilder.analytics_updated(
            year, wallet_id, sum(self._state.analytics_history[year]),
        ))
        return True

    # ── PREFERENCES ───────────────────────────────────────

    def toggle_theme(self) -> Theme:
        self._theme = Theme.DARK if self._theme == Theme.LIGHT else Theme.LIGHT
        self._record(LedgerEventBuilder.theme_changed(self._theme.value))
        return self._theme

    # ── PERSISTENCE ───────────────────────────────────────

    def flush(self) -> bool:
        """
        Retry every collection whose last write failed.

        Returns:
            True if nothing is left dirty
        """
        if not self._dirty:
            return True
        return self._persist(self.dirty_collections)

    def _persist(self, collections: Iterable[Collection]) -> bool:
        ok = True
        for collection in collections:
            self._dirty.add(collection)
            try:
                self._write(collection)
            except PersistenceError as e:
                ok = False
                logger.error(
                    "persist_failed",
                    collection=collection.value,
                    attempts=e.attempts,
                    error=str(e.cause),
                )
                self._notifier.notify(
                    NotificationKind.ERROR,
                    f"Could not save {collection.value}. Your changes are kept on this device.",
                )
                self._record(LedgerEventBuilder.persistence_failed(
                    collection, str(e.cause), e.attempts,
                ))
            else:
                self._dirty.discard(collection)
        return ok

    def _write(self, collection: Collection) -> None:
        """
        Write one collection, retrying storage errors with exponential backoff.

        Raises:
            PersistenceError: If every attempt failed
        """
        attempts = self._settings.persist_retry_attempts
        retryer = Retrying(
            stop=stop_after_attempt(attempts),
            wait=wait_exponential(
                multiplier=self._settings.persist_retry_multiplier,
                max=self._settings.persist_retry_max_wait,
            ),
            retry=retry_if_exception_type(StorageError),
            reraise=True,
        )
        payload = self._state.dump(collection)
        try:
            retryer(self._storage.save_collection, collection, payload)
        except StorageError as e:
            raise PersistenceError(collection, attempts, cause=e) from e

    # ── EVENTS ────────────────────────────────────────────

    def _reject(self, result: ValidationResult) -> None:
        """Report a rejected command. State has not been touched."""
        message = result.first_error or f"Invalid {result.subject}"
        logger.info("command_rejected", subject=result.subject, message=message)
        self._notifier.notify(NotificationKind.ERROR, message)
        self._record(LedgerEventBuilder.validation_failed(
            result.subject,
            [
                {"field": i.field, "type": i.issue_type, "message": i.message}
                for i in result.issues
                if i.severity == "error"
            ],
        ))

    def _record(self, event: LedgerEvent) -> None:
        self._audit.log(event)
        self._bus.publish(event)
