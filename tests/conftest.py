"""
Shared fixtures for Pocket Ledger tests.

Test strategy:
1. Unit tests for individual components (models, validators, sub-ledgers)
2. Store tests through the public command surface, with fake ports
3. No real API calls in tests (Google Sheets is mocked)
"""

from datetime import datetime, timedelta
from typing import Optional

import pytest

from pocketledger.audit import AuditLogger
from pocketledger.config import LedgerSettings
from pocketledger.models.ledger import Collection
from pocketledger.ports import Confirmer, NotificationKind, Notifier
from pocketledger.storage import InMemoryAuditStorage, InMemoryStorage, StorageError
from pocketledger.store import LedgerStore


FIXED_NOW = datetime(2025, 6, 15, 12, 0, 0)


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime = FIXED_NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class RecordingNotifier(Notifier):
    def __init__(self):
        self.messages: list[tuple[NotificationKind, str]] = []

    def notify(self, kind: NotificationKind, message: str) -> None:
        self.messages.append((NotificationKind(kind), message))

    @property
    def errors(self) -> list[str]:
        return [m for k, m in self.messages if k == NotificationKind.ERROR]

    @property
    def successes(self) -> list[str]:
        return [m for k, m in self.messages if k == NotificationKind.SUCCESS]


class StubConfirmer(Confirmer):
    def __init__(self, answer: bool = True):
        self.answer = answer
        self.prompts: list[str] = []

    def confirm(self, message: str) -> bool:
        self.prompts.append(message)
        return self.answer


class RecordingStorage(InMemoryStorage):
    """In-memory storage that counts writes and can be told to fail."""

    def __init__(self, initial: Optional[dict] = None):
        super().__init__(initial)
        self.fail = False
        self.load_error: Optional[str] = None
        self.attempts: list[Collection] = []
        self.saves: list[Collection] = []

    def load_all(self) -> dict:
        if self.load_error:
            raise StorageError(self.load_error)
        return super().load_all()

    def save_collection(self, name: Collection, value) -> None:
        self.attempts.append(Collection(name))
        if self.fail:
            raise StorageError("backend unavailable")
        super().save_collection(name, value)
        self.saves.append(Collection(name))

    def save_count(self, collection: Collection) -> int:
        return self.saves.count(collection)

    @property
    def data(self) -> dict:
        return self.load_all()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def settings() -> LedgerSettings:
    return LedgerSettings(
        _env_file=None,
        storage_backend="memory",
        persist_retry_attempts=3,
        persist_retry_multiplier=0,
        persist_retry_max_wait=0,
    )


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def confirmer() -> StubConfirmer:
    return StubConfirmer(answer=True)


@pytest.fixture
def storage() -> RecordingStorage:
    return RecordingStorage()


@pytest.fixture
def audit_storage() -> InMemoryAuditStorage:
    return InMemoryAuditStorage()


@pytest.fixture
def make_store(settings, notifier, confirmer, clock, audit_storage):
    """Build a store over the given storage (defaults to a fresh RecordingStorage)."""

    def _make(storage=None, **overrides) -> LedgerStore:
        return LedgerStore(
            storage=storage if storage is not None else RecordingStorage(),
            settings=overrides.get("settings", settings),
            notifier=overrides.get("notifier", notifier),
            confirmer=overrides.get("confirmer", confirmer),
            audit_logger=AuditLogger(audit_storage),
            clock=overrides.get("clock", clock),
        )

    return _make


@pytest.fixture
def store(make_store, storage) -> LedgerStore:
    return make_store(storage)


def signed_sum(store: LedgerStore, wallet_id: str) -> float:
    """Balance a wallet should have, recomputed from its transactions."""
    total = 0.0
    for tx in store.transactions:
        if tx.wallet_id != wallet_id:
            continue
        if tx.type.value == "income":
            total += tx.amount
        elif tx.type.value == "expense":
            total -= tx.amount
        elif store.settings.savings_affects_balance:
            total += tx.amount
    return total
