"""
Google Sheets Storage Implementation

The remote backend: each collection lives in its own worksheet, one entity
per row under a header row. List fields (wallet members, goal members) are
JSON-encoded into a single cell.

TRADEOFFS:
- Saving a collection rewrites its worksheet (fine for personal volumes)
- No transactions across worksheets
- Cells come back as strings; the pydantic models coerce them on load
"""

import json
from datetime import datetime
from typing import Any, Optional
from uuid import UUID

import gspread
import structlog
from google.oauth2.service_account import Credentials
from tenacity import retry, stop_after_attempt, wait_exponential

from pocketledger.config import GoogleSheetsSettings, get_settings
from pocketledger.models.events import EventSeverity, LedgerEvent, LedgerEventType
from pocketledger.models.ledger import MONTH_ABBREVIATIONS, Collection
from pocketledger.storage.interface import (
    AuditStorageInterface,
    ConnectionError,
    LedgerStorageInterface,
    NotFoundError,
    StorageError,
)


logger = structlog.get_logger(__name__)


# Column mappings per collection (camelCase, matching the serialized models)
COLLECTION_COLUMNS: dict[Collection, list[str]] = {
    Collection.TRANSACTIONS: [
        "id",
        "type",
        "amount",
        "category",
        "title",
        "note",
        "date",
        "walletId",
        "goalId",
        "balanceDelta",
    ],
    Collection.WALLETS: [
        "id",
        "name",
        "type",
        "members",
        "balance",
    ],
    Collection.SAVINGS_GOALS: [
        "id",
        "title",
        "targetAmount",
        "currentAmount",
        "deadline",
        "members",
    ],
    Collection.ANALYTICS_HISTORY: ["year"] + [m.lower() for m in MONTH_ABBREVIATIONS],
}

JSON_COLUMNS = {"members"}

# Column mappings for Audit sheet
AUDIT_COLUMNS = [
    "event_id",
    "timestamp",
    "event_type",
    "severity",
    "entity_type",
    "entity_id",
    "collections",
    "description",
    "details_json",
    "error_message",
    "is_user_action",
]


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for the connection.
    """

    def __init__(self, settings: Optional[GoogleSheetsSettings] = None):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = settings or get_settings().google_sheets

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.

        Uses service account credentials for authentication.
        """
        if self._client is None:
            try:
                scopes = [
                    "https://www.googleapis.com/auth/spreadsheets",
                    "https://www.googleapis.com/auth/drive",
                ]
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=scopes,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError:
                raise ConnectionError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise ConnectionError(f"Failed to connect to Google Sheets: {e}")

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(
                    self._settings.spreadsheet_id
                )
            except gspread.SpreadsheetNotFound:
                raise NotFoundError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def sheet_name_for(self, collection: Collection) -> str:
        return {
            Collection.TRANSACTIONS: self._settings.transactions_sheet_name,
            Collection.WALLETS: self._settings.wallets_sheet_name,
            Collection.SAVINGS_GOALS: self._settings.savings_goals_sheet_name,
            Collection.ANALYTICS_HISTORY: self._settings.analytics_sheet_name,
        }[collection]

    def get_worksheet(self, title: str, columns: list[str], rows: int = 1000) -> gspread.Worksheet:
        """Get or create a worksheet with the given header row."""
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(title)
        except gspread.WorksheetNotFound:
            sheet = spreadsheet.add_worksheet(
                title=title,
                rows=rows,
                cols=len(columns),
            )
            sheet.append_row(columns)
        return sheet

    def get_collection_sheet(self, collection: Collection) -> gspread.Worksheet:
        return self.get_worksheet(
            self.sheet_name_for(collection),
            COLLECTION_COLUMNS[collection],
        )

    def get_audit_sheet(self) -> gspread.Worksheet:
        return self.get_worksheet(
            self._settings.audit_sheet_name,
            AUDIT_COLUMNS,
            rows=5000,  # More rows for audit log
        )


def _record_to_row(columns: list[str], record: dict) -> list:
    """Convert a serialized entity to a spreadsheet row."""
    row = []
    for column in columns:
        value = record.get(column)
        if value is None:
            row.append("")
        elif column in JSON_COLUMNS:
            row.append(json.dumps(value))
        else:
            row.append(str(value))
    return row


def _row_to_record(columns: list[str], row: list) -> dict:
    """Convert a spreadsheet row back to a serialized entity. Empty cells are omitted."""
    record = {}
    for index, column in enumerate(columns):
        value = row[index] if index < len(row) else ""
        if value == "":
            continue
        record[column] = json.loads(value) if column in JSON_COLUMNS else value
    return record


class GoogleSheetsStorage(LedgerStorageInterface):
    """
    Google Sheets implementation of the persistence port.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def load_all(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        try:
            for collection in Collection:
                sheet = self._client.get_collection_sheet(collection)
                rows = [r for r in sheet.get_all_values()[1:] if r and r[0]]
                if collection == Collection.ANALYTICS_HISTORY:
                    data[collection.value] = self._rows_to_history(rows)
                else:
                    columns = COLLECTION_COLUMNS[collection]
                    records = []
                    for row in rows:
                        try:
                            records.append(_row_to_record(columns, row))
                        except json.JSONDecodeError:
                            logger.warning(
                                "sheets_row_malformed",
                                collection=collection.value,
                                row_id=row[0],
                            )
                    data[collection.value] = records
            return data
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to load ledger from Google Sheets: {e}")

    def save_collection(self, name: Collection, value: Any) -> None:
        collection = Collection(name)
        columns = COLLECTION_COLUMNS[collection]
        if collection == Collection.ANALYTICS_HISTORY:
            rows = self._history_to_rows(value)
        else:
            rows = [_record_to_row(columns, record) for record in value]

        try:
            sheet = self._client.get_collection_sheet(collection)
            values = [columns] + rows
            # Overwrite in place; blank out rows left over from a longer save
            stale = len(sheet.get_all_values()) - len(values)
            values += [[""] * len(columns) for _ in range(max(stale, 0))]
            if sheet.col_count < len(columns):
                sheet.add_cols(len(columns) - sheet.col_count)
            if sheet.row_count < len(values):
                sheet.add_rows(len(values) - sheet.row_count)
            sheet.update(range_name="A1", values=values, value_input_option="RAW")
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to save {collection.value}: {e}")

    @staticmethod
    def _history_to_rows(history: dict) -> list[list]:
        return [
            [str(year)] + [str(v) for v in months]
            for year, months in sorted(history.items(), key=lambda kv: int(kv[0]))
        ]

    @staticmethod
    def _rows_to_history(rows: list[list]) -> dict[str, list[str]]:
        history = {}
        for row in rows:
            months = list(row[1:13])
            months += ["0"] * (12 - len(months))
            history[row[0]] = [m or "0" for m in months]
        return history


class GoogleSheetsAuditStorage(AuditStorageInterface):
    """
    Google Sheets implementation of audit log storage.

    Audit events are append-only.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _row_to_event(self, row: list) -> LedgerEvent:
        """Convert a spreadsheet row to a LedgerEvent."""
        def safe_get(index: int, default: str = "") -> str:
            try:
                return row[index] if row[index] else default
            except IndexError:
                return default

        collections = [c for c in safe_get(6).split(",") if c]
        return LedgerEvent(
            event_id=UUID(safe_get(0)),
            timestamp=datetime.fromisoformat(safe_get(1)),
            event_type=LedgerEventType(safe_get(2)),
            severity=EventSeverity(safe_get(3)),
            entity_type=safe_get(4) or None,
            entity_id=safe_get(5) or None,
            collections=[Collection(c) for c in collections],
            description=safe_get(7),
            details=json.loads(safe_get(8)) if safe_get(8) else {},
            error_message=safe_get(9) or None,
            is_user_action=safe_get(10).lower() == "true",
        )

    def append_event(self, event: LedgerEvent) -> bool:
        """Append an audit event. Failures are logged, never raised."""
        try:
            sheet = self._client.get_audit_sheet()
            sheet.append_row(event.to_sheets_row(), value_input_option="RAW")
            return True
        except Exception as e:
            logger.warning(
                "audit_append_failed",
                event_id=str(event.event_id),
                error=str(e),
            )
            return False

    def get_recent_events(
        self,
        limit: int = 100,
        entity_id: Optional[str] = None,
    ) -> list[LedgerEvent]:
        try:
            sheet = self._client.get_audit_sheet()
            all_rows = sheet.get_all_values()[1:]
        except Exception as e:
            raise StorageError(f"Failed to get audit events: {e}")

        events = []
        for row in all_rows:
            if not row or not row[0]:
                continue
            if entity_id is not None and (len(row) <= 5 or row[5] != entity_id):
                continue
            try:
                events.append(self._row_to_event(row))
            except (ValueError, json.JSONDecodeError):
                continue  # Skip malformed rows

        # Sort newest first
        events.sort(key=lambda e: e.timestamp, reverse=True)
        return events[:limit]
