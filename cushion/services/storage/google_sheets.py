"""
Google Sheets Storage Implementation

Google Sheets is the default backend: the user can open the spreadsheet
and read their own ledger, and there is no database to run.

TRADEOFFS:
- Not suitable for high-volume data (a personal ledger is fine)
- No transactions (each record is written on its own)
- Limited query capabilities (we filter in Python)

Layout:
- Transactions sheet: one row per transaction, all users
- Profiles sheet: one row per user holding the profile as JSON
- AuditLog sheet: one row per audit event
- Plan sheet: read-only, see cushion.services.transfer.plan_sheet
"""

import json
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

import gspread
from gspread.utils import rowcol_to_a1
from google.oauth2.service_account import Credentials
from tenacity import retry, stop_after_attempt, wait_exponential

from cushion.config import get_settings
from cushion.models.audit import AuditEvent, AuditEventType, AuditSeverity
from cushion.models.profile import FinancialProfile
from cushion.models.transaction import Transaction, TransactionLog, flatten_log
from cushion.services.storage.interface import (
    AuditStorageInterface,
    ConnectionError,
    NotFoundError,
    ProfileStorageInterface,
    StorageError,
    TransactionStorageInterface,
)


# Column mappings for Transactions sheet
TRANSACTION_COLUMNS = [
    "id",
    "user_id",
    "date",
    "type",
    "amount",
    "category",
    "description",
    "created_at",
]

# Column mappings for Profiles sheet
PROFILE_COLUMNS = [
    "user_id",
    "updated_at",
    "profile_json",
]

# Column mappings for Audit sheet
AUDIT_COLUMNS = [
    "event_id",
    "timestamp",
    "event_type",
    "severity",
    "entity_type",
    "entity_id",
    "user_id",
    "correlation_id",
    "description",
    "details_json",
    "error_message",
    "is_user_action",
]


def _column_letter(count: int) -> str:
    # Sheets stay well under 26 columns
    return chr(ord("A") + count - 1)


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for API calls.
    """

    def __init__(self):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = get_settings().google_sheets

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
                raise ConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def _get_or_create(self, title: str, columns: list[str], rows: int) -> gspread.Worksheet:
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

    def get_transactions_sheet(self) -> gspread.Worksheet:
        """Get or create the Transactions worksheet."""
        return self._get_or_create(self._settings.transactions_sheet_name, TRANSACTION_COLUMNS, 2000)

    def get_profiles_sheet(self) -> gspread.Worksheet:
        """Get or create the Profiles worksheet."""
        return self._get_or_create(self._settings.profiles_sheet_name, PROFILE_COLUMNS, 100)

    def get_audit_sheet(self) -> gspread.Worksheet:
        """Get or create the Audit worksheet."""
        return self._get_or_create(self._settings.audit_sheet_name, AUDIT_COLUMNS, 5000)

    def get_plan_sheet(self) -> gspread.Worksheet:
        """Get the plan worksheet. It is never created: the user maintains it."""
        spreadsheet = self.get_spreadsheet()
        try:
            return spreadsheet.worksheet(self._settings.plan_sheet_name)
        except gspread.WorksheetNotFound:
            raise NotFoundError(f"Plan sheet not found: {self._settings.plan_sheet_name}")


def _safe_getter(row: list):
    """Cell accessor tolerating short rows"""
    def safe_get(index: int, default: str = "") -> str:
        try:
            return row[index] if row[index] else default
        except IndexError:
            return default
    return safe_get


class GoogleSheetsTransactionStorage(TransactionStorageInterface):
    """
    Google Sheets implementation of transaction storage.

    One transaction per row; rows of every user share the sheet.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _transaction_to_row(self, transaction: Transaction) -> list:
        """Convert a Transaction to a spreadsheet row."""
        return [
            transaction.id,
            transaction.user_id,
            transaction.date_key,
            transaction.type.value,
            str(transaction.amount),
            transaction.category,
            transaction.description,
            transaction.created_at.isoformat(),
        ]

    def _row_to_transaction(self, row: list) -> Transaction:
        """Convert a spreadsheet row to a Transaction."""
        safe_get = _safe_getter(row)
        fields = {
            "id": safe_get(0),
            "user_id": safe_get(1),
            "date": safe_get(2),
            "type": safe_get(3),
            "amount": safe_get(4),
            "category": safe_get(5),
            "description": safe_get(6),
        }
        if safe_get(7):
            fields["created_at"] = safe_get(7)
        return Transaction(**fields)

    async def load_transactions(self, user_id: str) -> TransactionLog:
        """Load a user's transactions grouped by date."""
        try:
            sheet = self._client.get_transactions_sheet()
            all_rows = sheet.get_all_values()[1:]  # Skip header
        except Exception as e:
            raise StorageError(f"Failed to load transactions: {e}")

        log: TransactionLog = {}
        for row in all_rows:
            if not row or not row[0] or len(row) < 2 or row[1] != user_id:
                continue
            try:
                transaction = self._row_to_transaction(row)
            except ValueError:
                continue  # Skip malformed rows
            log.setdefault(transaction.date_key, []).append(transaction)
        return log

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def save_transaction(self, transaction: Transaction) -> bool:
        """Update the row holding this id, or append a new one."""
        try:
            sheet = self._client.get_transactions_sheet()
            all_rows = sheet.get_all_values()
            row = self._transaction_to_row(transaction)

            for idx, existing in enumerate(all_rows[1:], start=2):  # Row 1 is header
                if existing and existing[0] == transaction.id:
                    sheet.update(
                        range_name=f"A{idx}:{_column_letter(len(row))}{idx}",
                        values=[row],
                        value_input_option="RAW",
                    )
                    return True

            sheet.append_row(row, value_input_option="RAW")
            return True
        except Exception as e:
            raise StorageError(f"Failed to save transaction: {e}")

    async def delete_transaction(self, transaction_id: str) -> bool:
        """Delete a transaction by ID."""
        try:
            sheet = self._client.get_transactions_sheet()
            all_rows = sheet.get_all_values()

            for idx, row in enumerate(all_rows[1:], start=2):
                if row and row[0] == transaction_id:
                    sheet.delete_rows(idx)
                    return True

            return False
        except Exception as e:
            raise StorageError(f"Failed to delete transaction: {e}")

    async def save_all_transactions(self, log: TransactionLog, user_id: str) -> bool:
        """Rewrite the sheet: other users' rows kept, this user's replaced."""
        try:
            sheet = self._client.get_transactions_sheet()
            existing = sheet.get_all_values()
            others = [
                row for row in existing[1:]
                if row and row[0] and (len(row) < 2 or row[1] != user_id)
            ]
            values = [TRANSACTION_COLUMNS] + others + [
                self._transaction_to_row(tx) for tx in flatten_log(log)
            ]

            # Overwrite in place, then blank the rows the new content no longer reaches
            sheet.update(range_name="A1", values=values, value_input_option="RAW")
            if len(existing) > len(values):
                last = rowcol_to_a1(len(existing), len(TRANSACTION_COLUMNS))
                sheet.batch_clear([f"A{len(values) + 1}:{last}"])
            return True
        except Exception as e:
            raise StorageError(f"Failed to replace transactions: {e}")


class GoogleSheetsProfileStorage(ProfileStorageInterface):
    """
    Google Sheets implementation of profile storage.

    One row per user; the profile is stored as its camelCase JSON record.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    async def load_profile(self, user_id: str) -> Optional[FinancialProfile]:
        try:
            sheet = self._client.get_profiles_sheet()
            all_rows = sheet.get_all_values()[1:]
        except Exception as e:
            raise StorageError(f"Failed to load profile: {e}")

        for row in all_rows:
            if row and row[0] == user_id and len(row) > 2 and row[2]:
                try:
                    return FinancialProfile.model_validate(json.loads(row[2]))
                except ValueError as e:
                    raise StorageError(f"Corrupt profile for {user_id}: {e}")
        return None

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def save_profile(self, profile: FinancialProfile, user_id: str) -> bool:
        try:
            sheet = self._client.get_profiles_sheet()
            all_rows = sheet.get_all_values()
            row = [
                user_id,
                datetime.now(timezone.utc).isoformat(),
                json.dumps(profile.to_record(), ensure_ascii=False),
            ]

            for idx, existing in enumerate(all_rows[1:], start=2):
                if existing and existing[0] == user_id:
                    sheet.update(
                        range_name=f"A{idx}:{_column_letter(len(row))}{idx}",
                        values=[row],
                        value_input_option="RAW",
                    )
                    return True

            sheet.append_row(row, value_input_option="RAW")
            return True
        except Exception as e:
            raise StorageError(f"Failed to save profile: {e}")


class GoogleSheetsAuditStorage(AuditStorageInterface):
    """
    Google Sheets implementation of audit log storage.

    Audit events are append-only.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _row_to_event(self, row: list) -> AuditEvent:
        """Convert a spreadsheet row to an AuditEvent."""
        safe_get = _safe_getter(row)

        return AuditEvent(
            event_id=UUID(safe_get(0)),
            timestamp=datetime.fromisoformat(safe_get(1)),
            event_type=AuditEventType(safe_get(2)),
            severity=AuditSeverity(safe_get(3)),
            entity_type=safe_get(4) or None,
            entity_id=safe_get(5) or None,
            user_id=safe_get(6) or None,
            correlation_id=UUID(safe_get(7)) if safe_get(7) else None,
            description=safe_get(8),
            details=json.loads(safe_get(9)) if safe_get(9) else {},
            error_message=safe_get(10) or None,
            is_user_action=safe_get(11).lower() == "true",
        )

    def _read_events(self) -> list[AuditEvent]:
        try:
            sheet = self._client.get_audit_sheet()
            all_rows = sheet.get_all_values()[1:]
        except Exception as e:
            raise StorageError(f"Failed to get audit events: {e}")

        events = []
        for row in all_rows:
            if not row or not row[0]:
                continue
            try:
                events.append(self._row_to_event(row))
            except ValueError:
                continue
        return events

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def append_event(self, event: AuditEvent) -> bool:
        """Append an audit event."""
        try:
            sheet = self._client.get_audit_sheet()
            sheet.append_row(event.to_sheets_row(), value_input_option="RAW")
            return True
        except Exception as e:
            raise StorageError(f"Failed to write audit event: {e}")

    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        """Get events by correlation ID."""
        events = [e for e in self._read_events() if e.correlation_id == correlation_id]
        events.sort(key=lambda e: e.timestamp)
        return events

    async def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: str,
    ) -> list[AuditEvent]:
        """Get events by entity."""
        events = [
            e for e in self._read_events()
            if e.entity_type == entity_type and e.entity_id == entity_id
        ]
        events.sort(key=lambda e: e.timestamp)
        return events

    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """Get recent events."""
        events = self._read_events()
        events.sort(key=lambda e: e.timestamp, reverse=True)
        return events[:limit]
