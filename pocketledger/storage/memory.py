"""
In-memory storage.

Used by tests and as the fallback when a configured backend cannot be
constructed. Payloads are deep-copied on the way in and out so callers can
never alias stored data.
"""

import copy
from typing import Any, Optional

from pocketledger.models.events import LedgerEvent
from pocketledger.models.ledger import Collection
from pocketledger.storage.interface import AuditStorageInterface, LedgerStorageInterface


class InMemoryStorage(LedgerStorageInterface):
    """Dict-backed ledger storage."""

    def __init__(self, initial: Optional[dict[str, Any]] = None):
        self._data: dict[str, Any] = copy.deepcopy(initial) if initial else {}

    def load_all(self) -> dict[str, Any]:
        return copy.deepcopy(self._data)

    def save_collection(self, name: Collection, value: Any) -> None:
        self._data[Collection(name).value] = copy.deepcopy(value)


class InMemoryAuditStorage(AuditStorageInterface):
    """List-backed audit trail."""

    def __init__(self):
        self._events: list[LedgerEvent] = []

    def append_event(self, event: LedgerEvent) -> bool:
        self._events.append(event)
        return True

    def get_recent_events(
        self,
        limit: int = 100,
        entity_id: Optional[str] = None,
    ) -> list[LedgerEvent]:
        events = [
            e for e in self._events
            if entity_id is None or e.entity_id == entity_id
        ]
        events.sort(key=lambda e: e.timestamp, reverse=True)
        return events[:limit]
