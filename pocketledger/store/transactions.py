"""
Transaction Ledger

The add/delete log. Every change applies a signed delta to the owning
wallet so that, for each wallet:

    balance == sum(signed(tx) for tx in wallet's transactions)

Deletion applies the exact inverse of the delta used on insertion rather
than recomputing the balance from scratch.
"""

from datetime import datetime
from typing import Callable, Optional

import structlog

from pocketledger.config import LedgerSettings
from pocketledger.models.ledger import (
    SAVINGS_CATEGORY_ID,
    Transaction,
    TransactionDraft,
    TransactionType,
)
from pocketledger.store.ids import IdFactory
from pocketledger.store.state import LedgerState
from pocketledger.store.wallets import WalletLedger
from pocketledger.validation import LedgerValidator, enforce


logger = structlog.get_logger(__name__)


class TransactionLedger:

    def __init__(
        self,
        state: LedgerState,
        ids: IdFactory,
        validator: LedgerValidator,
        wallets: WalletLedger,
        settings: LedgerSettings,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self._state = state
        self._ids = ids
        self._validator = validator
        self._wallets = wallets
        self._settings = settings
        self._clock = clock

    def _policy_delta(self, tx_type: TransactionType, amount: float) -> float:
        if tx_type == TransactionType.INCOME:
            return amount
        if tx_type == TransactionType.EXPENSE:
            return -amount
        return amount if self._settings.savings_affects_balance else 0.0

    def signed_delta(self, tx: Transaction) -> float:
        """
        Balance effect of one transaction.

        Uses the delta stored when the transaction was recorded; entries
        without one fall back to the configured savings policy.
        """
        if tx.balance_delta is not None:
            return tx.balance_delta
        return self._policy_delta(tx.type, tx.amount)

    def get(self, transaction_id: str) -> Optional[Transaction]:
        for tx in self._state.transactions:
            if tx.id == transaction_id:
                return tx
        return None

    def linked_to_goal(self, goal_id: str) -> list[Transaction]:
        return [
            tx for tx in self._state.transactions
            if tx.type == TransactionType.SAVINGS and tx.goal_id == goal_id
        ]

    def add(self, draft: TransactionDraft) -> Transaction:
        """
        Record a transaction and move the wallet balance.

        New transactions go to the front of the log.

        Raises:
            ValidationError: If the amount is not positive or the category
                is missing or not allowed for the type
        """
        enforce(self._validator.check_transaction(
            draft,
            wallet_known=self._wallets.exists(draft.wallet_id),
        ))

        category = (
            SAVINGS_CATEGORY_ID
            if draft.type == TransactionType.SAVINGS
            else draft.category
        )
        tx = Transaction(
            id=self._ids.next_id(),
            type=draft.type,
            amount=draft.amount,
            category=category,
            title=draft.title or None,
            note=draft.note or None,
            date=draft.date or self._clock(),
            wallet_id=draft.wallet_id,
            goal_id=draft.goal_id,
            balance_delta=self._policy_delta(draft.type, draft.amount),
        )

        self._state.transactions.insert(0, tx)
        self._wallets.adjust_balance(tx.wallet_id, self.signed_delta(tx))
        logger.info(
            "transaction_added",
            transaction_id=tx.id,
            type=tx.type.value,
            wallet_id=tx.wallet_id,
        )
        return tx

    def delete(self, transaction_id: str) -> Optional[Transaction]:
        """
        Remove a transaction and reverse its balance effect.

        Returns:
            The removed transaction, or None if the id is unknown
        """
        tx = self.get(transaction_id)
        if tx is None:
            logger.debug("transaction_not_found", transaction_id=transaction_id)
            return None

        self._state.transactions = [
            t for t in self._state.transactions if t.id != transaction_id
        ]
        self._wallets.adjust_balance(tx.wallet_id, -self.signed_delta(tx))
        logger.info("transaction_deleted", transaction_id=tx.id, wallet_id=tx.wallet_id)
        return tx
