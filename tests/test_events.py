"""
Tests for the event bus and the audit logger.
"""

import pytest
from unittest.mock import MagicMock

from pocketledger.audit import AuditLogger
from pocketledger.models.events import LedgerEventBuilder, LedgerEventType
from pocketledger.storage import InMemoryAuditStorage
from pocketledger.store import EventBus


@pytest.fixture
def bus() -> EventBus:
    return EventBus()


class TestEventBus:
    """Tests for in-process change notification."""

    def test_listener_receives_every_event(self, bus):
        received = []
        bus.subscribe(received.append)

        bus.publish(LedgerEventBuilder.theme_changed("dark"))
        bus.publish(LedgerEventBuilder.goal_delete_declined("g1"))

        assert [e.event_type for e in received] == [
            LedgerEventType.THEME_CHANGED,
            LedgerEventType.GOAL_DELETE_DECLINED,
        ]

    def test_typed_listener_is_filtered(self, bus):
        received = []
        bus.subscribe(received.append, LedgerEventType.GOAL_DELETE_DECLINED)

        assert bus.publish(LedgerEventBuilder.theme_changed("dark")) == 0
        assert bus.publish(LedgerEventBuilder.goal_delete_declined("g1")) == 1
        assert len(received) == 1

    def test_unsubscribe_callable(self, bus):
        received = []
        unsubscribe = bus.subscribe(received.append)
        assert bus.listener_count() == 1

        unsubscribe()
        unsubscribe()
        bus.publish(LedgerEventBuilder.theme_changed("dark"))

        assert received == []
        assert bus.listener_count() == 0

    def test_failing_listener_is_skipped(self, bus):
        received = []

        def broken(event):
            raise RuntimeError("listener bug")

        bus.subscribe(broken)
        bus.subscribe(received.append)

        assert bus.publish(LedgerEventBuilder.theme_changed("light")) == 1
        assert len(received) == 1


class TestAuditLogger:
    """Tests for the audit trail writer."""

    def test_without_storage_only_logs(self):
        audit = AuditLogger()
        assert audit.storage is None
        assert audit.log(LedgerEventBuilder.theme_changed("dark")) is True

    def test_events_are_stored(self):
        storage = InMemoryAuditStorage()
        audit = AuditLogger(storage)
        event = LedgerEventBuilder.goal_deleted("g1", "Trip", removed_transactions=0)

        assert audit.log(event) is True
        assert storage.get_recent_events() == [event]

    def test_storage_failure_never_raises(self):
        storage = MagicMock(spec=InMemoryAuditStorage)
        storage.append_event.side_effect = RuntimeError("sheet offline")
        audit = AuditLogger(storage)

        assert audit.log(LedgerEventBuilder.theme_changed("dark")) is False

    def test_store_commands_are_audited(self, store, audit_storage):
        store.add_transaction("expense", 10, category="food")
        store.add_transaction("expense", -1, category="food")

        types = {e.event_type for e in audit_storage.get_recent_events()}
        assert LedgerEventType.STORE_LOADED in types
        assert LedgerEventType.TRANSACTION_ADDED in types
        assert LedgerEventType.VALIDATION_FAILED in types


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
