"""
Google Sheets Storage Implementation

DESIGN DECISION: Google Sheets is the hosted backend because:
1. Users can look at their ledger directly in Sheets
2. No database setup required
3. Built-in backup (Google's infrastructure)

TRADEOFFS:
- Not suitable for high-volume data (we're fine for personal use)
- No transactions or row versions (last write wins)
- Limited query capabilities (we filter in Python)

Transport calls are retried here with tenacity. Anything that still
fails surfaces as StoreUnavailableError; the ledger core never retries.
"""

import json
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Optional, Union
from uuid import UUID, uuid4

import gspread
from google.oauth2.service_account import Credentials
from pydantic import ValidationError
from tenacity import retry, stop_after_attempt, wait_exponential

from pocket_ledger.config import GoogleSheetsSettings, get_settings
from pocket_ledger.models.audit import AuditEvent, AuditEventType, AuditSeverity
from pocket_ledger.models.entry import (
    DataIntegrityError,
    EntryKind,
    ExpenseEntry,
    ExpenseFields,
    IncomeEntry,
    IncomeFields,
    build_entry,
)
from pocket_ledger.services.storage.interface import (
    AuditStorageInterface,
    EntryStoreInterface,
    NotFoundError,
    StoreUnavailableError,
)


# Column mappings for Entries sheet
ENTRY_COLUMNS = [
    "id",
    "owner_id",
    "kind",
    "amount",
    "description",
    "category",
    "occurred_on",
    "created_at",
    "updated_at",
    "is_split",
    "split_with",
    "split_amount",
    "split_status",
]

# Column mappings for Audit sheet
AUDIT_COLUMNS = [
    "event_id",
    "timestamp",
    "event_type",
    "severity",
    "owner_id",
    "entity_type",
    "entity_id",
    "correlation_id",
    "description",
    "details_json",
    "error_message",
    "is_user_action",
]


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for API calls.
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
                raise StoreUnavailableError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise StoreUnavailableError(f"Failed to connect to Google Sheets: {e}")

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
                raise StoreUnavailableError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def _get_or_create_sheet(
        self,
        title: str,
        columns: list[str],
        rows: int,
    ) -> gspread.Worksheet:
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(title)
        except gspread.WorksheetNotFound:
            # Create the sheet with headers
            sheet = spreadsheet.add_worksheet(
                title=title,
                rows=rows,
                cols=len(columns),
            )
            sheet.append_row(columns)
        return sheet

    def get_entries_sheet(self) -> gspread.Worksheet:
        """Get or create the Entries worksheet."""
        return self._get_or_create_sheet(
            self._settings.entries_sheet_name, ENTRY_COLUMNS, rows=1000
        )

    def get_audit_sheet(self) -> gspread.Worksheet:
        """Get or create the Audit worksheet."""
        return self._get_or_create_sheet(
            self._settings.audit_sheet_name, AUDIT_COLUMNS, rows=5000
        )


def entry_to_row(entry: Union[ExpenseEntry, IncomeEntry]) -> list:
    """Convert an entry to a spreadsheet row."""
    split = getattr(entry, "split", None)
    category = entry.category.value if entry.kind == EntryKind.EXPENSE else entry.category
    return [
        entry.id,
        entry.owner_id,
        EntryKind(entry.kind).value,
        str(entry.amount),
        entry.description,
        category,
        entry.occurred_on.isoformat(),
        entry.created_at.isoformat(),
        entry.updated_at.isoformat(),
        str(split is not None),
        split.party if split else "",
        str(split.amount) if split else "",
        split.status.value if split else "",
    ]


def row_to_entry(row: list) -> Union[ExpenseEntry, IncomeEntry]:
    """
    Convert a spreadsheet row to an entry.

    Raises:
        DataIntegrityError: If the row doesn't describe a valid entry
    """
    def safe_get(index: int, default: str = "") -> str:
        try:
            return row[index] if row[index] else default
        except IndexError:
            return default

    entry_id = safe_get(0) or None
    try:
        record = {
            "id": safe_get(0),
            "owner_id": safe_get(1),
            "kind": safe_get(2),
            "amount": Decimal(safe_get(3)),
            "description": safe_get(4),
            "category": safe_get(5),
            "occurred_on": date.fromisoformat(safe_get(6)),
            "created_at": datetime.fromisoformat(safe_get(7)),
            "updated_at": datetime.fromisoformat(safe_get(8)),
        }
        if safe_get(9).lower() == "true":
            record["split"] = {
                "party": safe_get(10),
                "amount": Decimal(safe_get(11)),
                "status": safe_get(12),
            }

        if record["kind"] == EntryKind.INCOME.value:
            if "split" in record:
                raise DataIntegrityError(
                    "Income entry carries split data", entry_id=entry_id
                )
            return IncomeEntry(**record)
        if record["kind"] == EntryKind.EXPENSE.value:
            return ExpenseEntry(**record)
        raise DataIntegrityError(
            f"Unknown entry kind: {record['kind']!r}", entry_id=entry_id
        )
    except (ValidationError, InvalidOperation, ValueError) as e:
        raise DataIntegrityError(
            f"Malformed entry row: {e}", entry_id=entry_id
        ) from e


class GoogleSheetsEntryStore(EntryStoreInterface):
    """
    Google Sheets implementation of entry storage.

    Entries are stored as rows in a worksheet with one entry per row.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def _read_rows(self) -> tuple[gspread.Worksheet, list[list]]:
        """All rows including the header, with the sheet they came from."""
        try:
            sheet = self._client.get_entries_sheet()
            return sheet, sheet.get_all_values()
        except StoreUnavailableError:
            raise
        except Exception as e:
            raise StoreUnavailableError(f"Failed to read entries: {e}")

    def _find_row(self, all_rows: list[list], entry_id: str) -> Optional[int]:
        """1-based sheet row number for an entry (row 1 is the header)."""
        for idx, row in enumerate(all_rows[1:], start=2):
            if row and row[0] == entry_id:
                return idx
        return None

    def _confirm_row(self, sheet: gspread.Worksheet, idx: int, entry_id: str) -> int:
        """
        Row number of the entry right before a positional write.

        Rows shift up when another client deletes one above ours after
        `_read_rows`, so the row is read again and, if it no longer holds
        the entry, the entry is looked up afresh.
        """
        try:
            current = sheet.row_values(idx)
        except Exception as e:
            raise StoreUnavailableError(f"Failed to read entry row: {e}")
        if current and current[0] == entry_id:
            return idx

        _, all_rows = self._read_rows()
        moved = self._find_row(all_rows, entry_id)
        if moved is None:
            raise NotFoundError(f"Entry not found: {entry_id}")
        return moved

    async def query(
        self,
        owner_id: str,
        start: date,
        end: date,
    ) -> list[Union[ExpenseEntry, IncomeEntry]]:
        """List an owner's entries in [start, end)."""
        _, all_rows = self._read_rows()

        entries = []
        for row in all_rows[1:]:
            if not row or not row[0]:  # Skip empty rows
                continue
            if len(row) < 2 or row[1] != owner_id:
                continue

            entry = row_to_entry(row)
            if start <= entry.occurred_on < end:
                entries.append(entry)

        # Newest first, like the dashboard lists them
        entries.sort(key=lambda e: e.occurred_on, reverse=True)
        return entries

    async def get_entry(
        self,
        entry_id: str,
    ) -> Optional[Union[ExpenseEntry, IncomeEntry]]:
        """Retrieve an entry by its ID."""
        _, all_rows = self._read_rows()
        idx = self._find_row(all_rows, entry_id)
        if idx is None:
            return None
        return row_to_entry(all_rows[idx - 1])

    async def create(
        self,
        owner_id: str,
        fields: Union[ExpenseFields, IncomeFields],
    ) -> str:
        """Append a new entry row."""
        now = datetime.utcnow()
        entry = build_entry(
            fields,
            entry_id=str(uuid4()),
            owner_id=owner_id,
            created_at=now,
            updated_at=now,
        )
        try:
            sheet = self._client.get_entries_sheet()
            sheet.append_row(entry_to_row(entry), value_input_option="RAW")
        except StoreUnavailableError:
            raise
        except Exception as e:
            raise StoreUnavailableError(f"Failed to save entry: {e}")
        return entry.id

    async def update(
        self,
        entry_id: str,
        fields: Union[ExpenseFields, IncomeFields],
    ) -> None:
        """Rewrite an entry's row in place."""
        sheet, all_rows = self._read_rows()
        idx = self._find_row(all_rows, entry_id)
        if idx is None:
            raise NotFoundError(f"Entry not found: {entry_id}")

        existing = row_to_entry(all_rows[idx - 1])
        updated = build_entry(
            fields,
            entry_id=entry_id,
            owner_id=existing.owner_id,
            created_at=existing.created_at,
            updated_at=datetime.utcnow(),
        )
        idx = self._confirm_row(sheet, idx, entry_id)
        try:
            sheet.update(
                range_name=f"A{idx}",
                values=[entry_to_row(updated)],
                value_input_option="RAW",
            )
        except Exception as e:
            raise StoreUnavailableError(f"Failed to update entry: {e}")

    async def delete(self, entry_id: str) -> None:
        """Delete an entry's row."""
        sheet, all_rows = self._read_rows()
        idx = self._find_row(all_rows, entry_id)
        if idx is None:
            raise NotFoundError(f"Entry not found: {entry_id}")
        idx = self._confirm_row(sheet, idx, entry_id)
        try:
            sheet.delete_rows(idx)
        except Exception as e:
            raise StoreUnavailableError(f"Failed to delete entry: {e}")


class GoogleSheetsAuditStorage(AuditStorageInterface):
    """
    Google Sheets implementation of audit log storage.

    Audit events are append-only.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _row_to_event(self, row: list) -> AuditEvent:
        """Convert a spreadsheet row to an AuditEvent."""
        def safe_get(index: int, default: str = "") -> str:
            try:
                return row[index] if row[index] else default
            except IndexError:
                return default

        return AuditEvent(
            event_id=UUID(safe_get(0)),
            timestamp=datetime.fromisoformat(safe_get(1)),
            event_type=AuditEventType(safe_get(2)),
            severity=AuditSeverity(safe_get(3)),
            owner_id=safe_get(4) or None,
            entity_type=safe_get(5) or None,
            entity_id=safe_get(6) or None,
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
            raise StoreUnavailableError(f"Failed to read audit events: {e}")

        events = []
        for row in all_rows:
            if not row or not row[0]:
                continue
            try:
                events.append(self._row_to_event(row))
            except (ValidationError, ValueError):
                continue  # A hand-edited audit row must not hide the rest
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
            raise StoreUnavailableError(f"Failed to write audit event: {e}")

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
        # Sort newest first
        events.sort(key=lambda e: e.timestamp, reverse=True)
        return events[:limit]
