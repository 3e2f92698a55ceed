"""
Storage Package

Provides the persistence port and its backends: in-memory, JSON files on
the local device, and Google Sheets.
"""

from pocketledger.storage.interface import (
    AuditStorageInterface,
    ConnectionError,
    LedgerStorageInterface,
    NotFoundError,
    StorageError,
)
from pocketledger.storage.memory import InMemoryAuditStorage, InMemoryStorage
from pocketledger.storage.json_file import JsonFileStorage
from pocketledger.storage.google_sheets import (
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsStorage,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "LedgerStorageInterface",
    # Exceptions
    "ConnectionError",
    "NotFoundError",
    "StorageError",
    # Local implementations
    "InMemoryAuditStorage",
    "InMemoryStorage",
    "JsonFileStorage",
    # Google Sheets implementation
    "GoogleSheetsAuditStorage",
    "GoogleSheetsClient",
    "GoogleSheetsStorage",
]
