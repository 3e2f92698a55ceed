"""
Ledger state tree.

One mutable container shared by the sub-ledgers, plus the conversions
between it and the persisted payloads.

DESIGN DECISION: Loading is lenient. A malformed entry is skipped with a
warning instead of failing the whole load, so one bad row never locks a
user out of the rest of their data.
"""

from typing import Any, Optional

import pydantic
import structlog

from pocketledger.models.ledger import (
    MONTHS_PER_YEAR,
    AnalyticsHistory,
    Collection,
    LedgerSnapshot,
    SavingsGoal,
    Transaction,
    Wallet,
)


logger = structlog.get_logger(__name__)


_ENTITY_MODELS = {
    Collection.TRANSACTIONS: Transaction,
    Collection.WALLETS: Wallet,
    Collection.SAVINGS_GOALS: SavingsGoal,
}


class LedgerState:
    """In-memory state shared by the wallet, transaction, goal and analytics ledgers."""

    def __init__(self, snapshot: Optional[LedgerSnapshot] = None):
        snapshot = snapshot or LedgerSnapshot()
        self.transactions: list[Transaction] = list(snapshot.transactions)
        self.wallets: list[Wallet] = list(snapshot.wallets)
        self.savings_goals: list[SavingsGoal] = list(snapshot.savings_goals)
        self.analytics_history: AnalyticsHistory = {
            year: list(months) for year, months in snapshot.analytics_history.items()
        }
        self.active_wallet_id: Optional[str] = snapshot.active_wallet_id

    def to_snapshot(self) -> LedgerSnapshot:
        """Deep copy of the current state."""
        return LedgerSnapshot(
            transactions=[t.model_copy(deep=True) for t in self.transactions],
            wallets=[w.model_copy(deep=True) for w in self.wallets],
            savings_goals=[g.model_copy(deep=True) for g in self.savings_goals],
            analytics_history={
                year: list(months) for year, months in self.analytics_history.items()
            },
            active_wallet_id=self.active_wallet_id,
        )

    def all_ids(self) -> list[str]:
        return (
            [t.id for t in self.transactions]
            + [w.id for w in self.wallets]
            + [g.id for g in self.savings_goals]
        )

    def dump(self, collection: Collection) -> Any:
        """JSON-ready payload for one collection, camelCase keys."""
        collection = Collection(collection)
        if collection == Collection.ANALYTICS_HISTORY:
            return {
                str(year): list(months)
                for year, months in sorted(self.analytics_history.items())
            }
        entities = {
            Collection.TRANSACTIONS: self.transactions,
            Collection.WALLETS: self.wallets,
            Collection.SAVINGS_GOALS: self.savings_goals,
        }[collection]
        return [e.model_dump(by_alias=True, mode="json") for e in entities]


def parse_payload(raw: dict[str, Any]) -> tuple[LedgerSnapshot, int]:
    """
    Turn a ``load_all`` payload into a snapshot.

    Returns:
        (snapshot, number of skipped entries)
    """
    skipped = 0
    parsed: dict[Collection, list] = {}

    for collection, model in _ENTITY_MODELS.items():
        items = raw.get(collection.value) or []
        if not isinstance(items, list):
            logger.warning(
                "collection_malformed",
                collection=collection.value,
                payload_type=type(items).__name__,
            )
            parsed[collection] = []
            continue

        entities = []
        for item in items:
            try:
                entities.append(model.model_validate(item))
            except pydantic.ValidationError as e:
                skipped += 1
                logger.warning(
                    "entry_skipped",
                    collection=collection.value,
                    entry_id=item.get("id") if isinstance(item, dict) else None,
                    errors=e.error_count(),
                )
        parsed[collection] = entities

    history, history_skipped = _parse_history(raw.get(Collection.ANALYTICS_HISTORY.value))
    skipped += history_skipped

    snapshot = LedgerSnapshot(
        transactions=parsed[Collection.TRANSACTIONS],
        wallets=parsed[Collection.WALLETS],
        savings_goals=parsed[Collection.SAVINGS_GOALS],
        analytics_history=history,
    )
    return snapshot, skipped


def _parse_history(raw: Any) -> tuple[AnalyticsHistory, int]:
    if not raw:
        return {}, 0
    if not isinstance(raw, dict):
        logger.warning("collection_malformed", collection=Collection.ANALYTICS_HISTORY.value)
        return {}, 0

    history: AnalyticsHistory = {}
    skipped = 0
    for key, months in raw.items():
        try:
            year = int(key)
            values = [float(v) for v in months]
        except (TypeError, ValueError):
            values = None
        if values is None or len(values) != MONTHS_PER_YEAR:
            skipped += 1
            logger.warning("entry_skipped", collection=Collection.ANALYTICS_HISTORY.value, entry_id=key)
            continue
        history[year] = values
    return history, skipped
