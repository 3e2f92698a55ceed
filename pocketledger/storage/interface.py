"""
Abstract Storage Interface

DESIGN DECISION: The ledger store depends on this interface only, never on
a specific storage technology. Two operations are enough:

1. load_all - called once when the store is constructed
2. save_collection - called after every command that changed a collection

Payloads are plain JSON-ready values (lists of dicts, or a dict for the
analytics history) keyed by the camelCase field names of the models.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional

from pocketledger.models.events import LedgerEvent
from pocketledger.models.ledger import Collection


class LedgerStorageInterface(ABC):
    """
    Abstract interface for ledger persistence (the persistence port).

    Any storage implementation (JSON files, Google Sheets, etc.)
    must implement these methods.
    """

    @abstractmethod
    def load_all(self) -> dict[str, Any]:
        """
        Load every stored collection.

        Returns:
            Mapping of collection name (``Collection.value``) to payload.
            Collections that were never saved are simply absent.

        Raises:
            StorageError: If the backend cannot be read
        """
        pass

    @abstractmethod
    def save_collection(self, name: Collection, value: Any) -> None:
        """
        Replace one stored collection with ``value``.

        Args:
            name: Which collection to write
            value: JSON-ready payload

        Raises:
            StorageError: If the write fails
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    def append_event(self, event: LedgerEvent) -> bool:
        """
        Append an event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    def get_recent_events(
        self,
        limit: int = 100,
        entity_id: Optional[str] = None,
    ) -> list[LedgerEvent]:
        """
        Get the most recent events, newest first.

        Args:
            limit: Maximum number of events to return
            entity_id: Only return events about this entity
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """The configured document (spreadsheet, worksheet) does not exist."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
