"""
Ledger Store Package

The state and derivation engine: one store composed of the wallet,
transaction, savings goal and analytics ledgers over a shared state tree.
"""

from pocketledger.store.analytics import AnalyticsCache
from pocketledger.store.bus import EventBus
from pocketledger.store.ids import IdFactory
from pocketledger.store.ledger_store import LedgerStore, format_amount
from pocketledger.store.savings import SavingsGoalLedger
from pocketledger.store.state import LedgerState, parse_payload
from pocketledger.store.transactions import TransactionLedger
from pocketledger.store.wallets import WalletLedger

__all__ = [
    "AnalyticsCache",
    "EventBus",
    "IdFactory",
    "LedgerState",
    "LedgerStore",
    "SavingsGoalLedger",
    "TransactionLedger",
    "WalletLedger",
    "format_amount",
    "parse_payload",
]
