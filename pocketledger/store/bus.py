"""
In-process event bus.

Observers subscribe explicitly to the store instead of reading shared
global state. A listener may ask for one event type or for everything.
"""

from typing import Callable, Optional

import structlog

from pocketledger.models.events import LedgerEvent, LedgerEventType


logger = structlog.get_logger(__name__)

Listener = Callable[[LedgerEvent], None]


class EventBus:
    def __init__(self):
        # None key holds listeners for every event type
        self._subscribers: dict[Optional[LedgerEventType], list[Listener]] = {}

    def subscribe(
        self,
        listener: Listener,
        event_type: Optional[LedgerEventType] = None,
    ) -> Callable[[], None]:
        """
        Register a listener.

        Returns:
            A callable that removes the listener again
        """
        self._subscribers.setdefault(event_type, []).append(listener)

        def unsubscribe() -> None:
            self.unsubscribe(listener, event_type)

        return unsubscribe

    def unsubscribe(
        self,
        listener: Listener,
        event_type: Optional[LedgerEventType] = None,
    ) -> None:
        listeners = self._subscribers.get(event_type, [])
        if listener in listeners:
            listeners.remove(listener)

    def publish(self, event: LedgerEvent) -> int:
        """
        Deliver an event to matching listeners.

        A listener that raises is logged and skipped; the rest still run.

        Returns:
            Number of listeners that handled the event without error
        """
        targets = list(self._subscribers.get(event.event_type, []))
        targets += self._subscribers.get(None, [])

        delivered = 0
        for listener in targets:
            try:
                listener(event)
                delivered += 1
            except Exception:
                logger.exception(
                    "listener_failed",
                    event_type=event.event_type.value,
                    listener=getattr(listener, "__qualname__", repr(listener)),
                )
        return delivered

    def listener_count(self) -> int:
        return sum(len(v) for v in self._subscribers.values())
