"""
Application wiring for Pocket Ledger

This module builds the one LedgerStore a process uses, from configuration:
1. Logging (structlog)
2. Persistence backend (memory, JSON files or Google Sheets)
3. Audit trail
4. UI ports (notifier, confirmer)

DESIGN DECISION: No module-level store. The front end calls
``create_ledger_store`` once and passes the result around; tests build
their own stores with fakes.
"""

from datetime import datetime
from typing import Callable, Optional

import structlog

from pocketledger.audit import AuditLogger, configure_logging
from pocketledger.config import Settings, get_settings
from pocketledger.ports import Confirmer, Notifier
from pocketledger.storage import (
    AuditStorageInterface,
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsStorage,
    InMemoryAuditStorage,
    InMemoryStorage,
    JsonFileStorage,
    LedgerStorageInterface,
)
from pocketledger.store import LedgerStore


logger = structlog.get_logger(__name__)


def build_storage(
    settings: Settings,
) -> tuple[LedgerStorageInterface, Optional[AuditStorageInterface]]:
    """
    Create the configured persistence backend and its audit storage.

    Falls back to in-memory storage if the backend cannot be constructed.

    Returns:
        (ledger_storage, audit_storage)
    """
    backend = settings.ledger.storage_backend

    try:
        if backend == "sheets":
            client = GoogleSheetsClient(settings.google_sheets)
            return GoogleSheetsStorage(client), GoogleSheetsAuditStorage(client)
        if backend == "json":
            return JsonFileStorage(settings.ledger.data_dir), None
    except Exception as e:
        # Storage not configured - continue without it
        logger.warning(
            "storage_unavailable",
            backend=backend,
            error=str(e),
            fallback="memory",
        )

    return InMemoryStorage(), InMemoryAuditStorage()


def create_ledger_store(
    settings: Optional[Settings] = None,
    notifier: Optional[Notifier] = None,
    confirmer: Optional[Confirmer] = None,
    storage: Optional[LedgerStorageInterface] = None,
    audit_storage: Optional[AuditStorageInterface] = None,
    clock: Callable[[], datetime] = datetime.now,
) -> LedgerStore:
    """
    Factory function to create the ledger store.

    Args:
        settings: Root settings; read from the environment if omitted
        notifier: Where user notifications go (defaults to the log)
        confirmer: Who approves destructive actions
        storage: Explicit backend, skipping configuration lookup
        audit_storage: Explicit audit trail storage

    Returns:
        A loaded LedgerStore
    """
    settings = settings or get_settings()
    app = settings.app
    configure_logging(app.log_level, app.json_logs)

    if storage is None:
        storage, configured_audit = build_storage(settings)
        audit_storage = audit_storage or configured_audit

    store = LedgerStore(
        storage=storage,
        settings=settings.ledger,
        notifier=notifier,
        confirmer=confirmer,
        audit_logger=AuditLogger(audit_storage),
        clock=clock,
    )
    logger.info(
        "ledger_store_ready",
        backend=type(storage).__name__,
        environment=app.app_environment,
        wallets=len(store.wallets),
    )
    return store
