"""
Main Orchestrator for Pocket Ledger

This module ties together validation, storage, reporting and audit
logging, and defines the end-to-end ledger flows:
1. Browse (month / day / year → entries, summary)
2. Write (draft → validate → store → audit)
3. Export (month → CSV artifact)

DESIGN DECISION: The orchestrator enforces the boundaries:
- Nothing reaches the store without passing validation
- Store failures reach the caller unchanged, after being audited
- The core never retries; retry belongs to the store backend
- Views are immutable snapshots; a failed write can't alter one

This is the "glue" that keeps the UI from having to know any of it.
"""

from datetime import date, timedelta
from typing import Any, Awaitable, Optional, Union
from uuid import UUID

import structlog
from pydantic import BaseModel, ConfigDict

from pocket_ledger.audit import AuditLogger, configure_log_level, create_correlation_id
from pocket_ledger.config import get_settings, validate_all_settings
from pocket_ledger.models.entry import (
    DataIntegrityError,
    Entry,
    EntryDraft,
    ExpenseEntry,
    ExpenseFields,
    IncomeEntry,
    IncomeFields,
    Summary,
    ValidationResult,
)
from pocket_ledger.reports import (
    ExportArtifact,
    active_dates,
    build_export,
    entries_on,
    month_label,
    month_range,
    period_key,
    summarize,
    summarize_by_category,
    year_range,
)
from pocket_ledger.services.storage import (
    EntryStoreInterface,
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsEntryStore,
    InMemoryAuditStorage,
    InMemoryEntryStore,
    NotFoundError,
)
from pocket_ledger.validation import EntryValidationError, EntryValidator


logger = structlog.get_logger("pocket_ledger.orchestrator")

AnyEntry = Union[ExpenseEntry, IncomeEntry]
AnyFields = Union[ExpenseFields, IncomeFields]

# Fields the user can edit; compared to report what an update changed
_EDITABLE_FIELDS = ("kind", "amount", "description", "category", "occurred_on", "split")


class MonthView(BaseModel):
    """
    Everything the dashboard shows for one month.

    An immutable snapshot: reloading the month builds a new view.
    """
    model_config = ConfigDict(frozen=True)

    owner_id: str
    year: int
    month: int
    entries: tuple[Entry, ...]
    summary: Summary

    @property
    def label(self) -> str:
        return month_label(self.year, self.month)

    @property
    def active_dates(self) -> set[date]:
        return active_dates(self.entries)

    def entries_on(self, day: date) -> list[AnyEntry]:
        return entries_on(self.entries, day)

    def category_totals(self) -> dict:
        return summarize_by_category(self.entries)


def _changed_fields(existing: AnyEntry, fields: AnyFields) -> list[str]:
    before = existing.model_dump(include=set(_EDITABLE_FIELDS))
    after = fields.model_dump(include=set(_EDITABLE_FIELDS))
    return [
        name for name in _EDITABLE_FIELDS
        if before.get(name) != after.get(name)
    ]


class LedgerService:
    """
    Orchestrates every ledger flow for the UI.

    Flow for writes:
    1. Validate the editor draft (EntryValidationError blocks the write)
    2. Call the store exactly once
    3. Audit the outcome

    The caller must reload its view after a successful write; nothing
    here updates a view optimistically.
    """

    def __init__(
        self,
        store: EntryStoreInterface,
        validator: Optional[EntryValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._store = store
        self._validator = validator or EntryValidator()
        self._audit_logger = audit_logger or AuditLogger()

    async def _call_store(
        self,
        operation: str,
        call: Awaitable[Any],
        correlation_id: UUID,
        entry_id: Optional[str] = None,
    ) -> Any:
        """Await a store call, auditing any failure before re-raising it unchanged."""
        try:
            return await call
        except DataIntegrityError as e:
            await self._audit_logger.log_data_integrity_error(
                error_message=str(e),
                entry_id=e.entry_id or entry_id,
                correlation_id=correlation_id,
            )
            raise
        except Exception as e:
            await self._audit_logger.log_store_error(
                operation=operation,
                error_message=str(e),
                entry_id=entry_id,
                correlation_id=correlation_id,
            )
            raise

    async def _owned_entry(
        self,
        owner_id: str,
        entry_id: str,
        operation: str,
        correlation_id: UUID,
    ) -> AnyEntry:
        """Fetch an entry and make sure it belongs to owner_id."""
        existing = await self._call_store(
            operation,
            self._store.get_entry(entry_id),
            correlation_id=correlation_id,
            entry_id=entry_id,
        )
        if existing is None or existing.owner_id != owner_id:
            raise NotFoundError(f"Entry not found: {entry_id}")
        return existing

    async def _validated(
        self,
        draft: EntryDraft,
        correlation_id: UUID,
        entry_id: Optional[str] = None,
    ) -> AnyFields:
        try:
            return self._validator.build_fields(draft)
        except EntryValidationError as e:
            await self._audit_logger.log_validation_failed(
                issues=[
                    {"field": i.field, "type": i.issue_type, "message": i.message}
                    for i in e.issues
                    if i.severity == "error"
                ],
                entry_id=entry_id,
                correlation_id=correlation_id,
            )
            raise

    # -------------------------------------------------------------------------
    # Browse
    # -------------------------------------------------------------------------

    async def load_month(
        self,
        owner_id: str,
        year: int,
        month: int,
        correlation_id: Optional[UUID] = None,
    ) -> MonthView:
        """
        Load one month of entries and their summary.

        Raises:
            StorageError: Passed through from the store
            DataIntegrityError: If a stored entry is malformed
        """
        correlation_id = correlation_id or create_correlation_id()
        start, end = month_range(year, month)

        entries = await self._call_store(
            "query",
            self._store.query(owner_id, start, end),
            correlation_id=correlation_id,
        )

        try:
            summary = summarize(entries)
        except DataIntegrityError as e:
            await self._audit_logger.log_data_integrity_error(
                error_message=str(e),
                entry_id=e.entry_id,
                correlation_id=correlation_id,
            )
            raise

        await self._audit_logger.log_month_loaded(
            owner_id=owner_id,
            period=period_key(year, month),
            entry_count=len(entries),
            correlation_id=correlation_id,
        )

        return MonthView(
            owner_id=owner_id,
            year=year,
            month=month,
            entries=tuple(entries),
            summary=summary,
        )

    async def entries_for_date(
        self,
        owner_id: str,
        day: date,
        correlation_id: Optional[UUID] = None,
    ) -> list[AnyEntry]:
        """One day's entries, most recently created first."""
        correlation_id = correlation_id or create_correlation_id()
        entries = await self._call_store(
            "query",
            self._store.query(owner_id, day, day + timedelta(days=1)),
            correlation_id=correlation_id,
        )
        return entries_on(entries, day)

    async def entries_for_year(
        self,
        owner_id: str,
        year: int,
        correlation_id: Optional[UUID] = None,
    ) -> list[AnyEntry]:
        """A whole year of entries, newest date first."""
        correlation_id = correlation_id or create_correlation_id()
        start, end = year_range(year)
        entries = await self._call_store(
            "query",
            self._store.query(owner_id, start, end),
            correlation_id=correlation_id,
        )
        return sorted(entries, key=lambda e: e.occurred_on, reverse=True)

    # -------------------------------------------------------------------------
    # Write
    # -------------------------------------------------------------------------

    def validate_draft(self, draft: EntryDraft) -> ValidationResult:
        """Check a draft without writing anything (live editor feedback)."""
        return self._validator.validate(draft)

    async def create_entry(
        self,
        owner_id: str,
        draft: EntryDraft,
        correlation_id: Optional[UUID] = None,
    ) -> str:
        """
        Validate and record a new entry.

        Returns:
            The store-assigned entry ID

        Raises:
            EntryValidationError: If the draft is invalid (store untouched)
            StorageError: Passed through from the store
        """
        correlation_id = correlation_id or create_correlation_id()
        fields = await self._validated(draft, correlation_id)

        entry_id = await self._call_store(
            "create",
            self._store.create(owner_id, fields),
            correlation_id=correlation_id,
        )

        await self._audit_logger.log_entry_created(
            entry_id=entry_id,
            owner_id=owner_id,
            kind=fields.kind,
            amount=str(fields.amount),
            correlation_id=correlation_id,
        )
        return entry_id

    async def update_entry(
        self,
        owner_id: str,
        entry_id: str,
        draft: EntryDraft,
        correlation_id: Optional[UUID] = None,
    ) -> list[str]:
        """
        Validate and apply an edit.

        Last write wins: there is no version check against concurrent edits.

        Returns:
            Names of the fields that changed

        Raises:
            EntryValidationError: If the draft is invalid (store untouched)
            NotFoundError: If the entry doesn't exist for this owner
            StorageError: Passed through from the store
        """
        correlation_id = correlation_id or create_correlation_id()
        fields = await self._validated(draft, correlation_id, entry_id=entry_id)

        existing = await self._owned_entry(owner_id, entry_id, "update", correlation_id)
        changed = _changed_fields(existing, fields)

        await self._call_store(
            "update",
            self._store.update(entry_id, fields),
            correlation_id=correlation_id,
            entry_id=entry_id,
        )

        await self._audit_logger.log_entry_updated(
            entry_id=entry_id,
            owner_id=owner_id,
            changed_fields=changed,
            correlation_id=correlation_id,
        )
        return changed

    async def delete_entry(
        self,
        owner_id: str,
        entry_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """
        Permanently delete an entry.

        Raises:
            NotFoundError: If the entry doesn't exist for this owner
            StorageError: Passed through from the store
        """
        correlation_id = correlation_id or create_correlation_id()
        await self._owned_entry(owner_id, entry_id, "delete", correlation_id)

        await self._call_store(
            "delete",
            self._store.delete(entry_id),
            correlation_id=correlation_id,
            entry_id=entry_id,
        )

        await self._audit_logger.log_entry_deleted(
            entry_id=entry_id,
            owner_id=owner_id,
            correlation_id=correlation_id,
        )

    # -------------------------------------------------------------------------
    # Export
    # -------------------------------------------------------------------------

    async def export_month(
        self,
        owner_id: str,
        year: int,
        month: int,
        correlation_id: Optional[UUID] = None,
    ) -> ExportArtifact:
        """
        Build the CSV download for one month.

        Delivering the file is up to the caller.
        """
        correlation_id = correlation_id or create_correlation_id()
        view = await self.load_month(owner_id, year, month, correlation_id)

        artifact = build_export(view.entries, year, month)

        await self._audit_logger.log_export_generated(
            owner_id=owner_id,
            filename=artifact.filename,
            row_count=artifact.row_count,
            correlation_id=correlation_id,
        )
        return artifact


def create_ledger_service(use_sheets: bool = True) -> LedgerService:
    """
    Factory function to wire a LedgerService.

    Args:
        use_sheets: Whether to back the ledger with Google Sheets.
                    Set to False for tests and local runs.

    Falls back to in-memory storage if Sheets isn't configured.
    Invalid app settings raise here, before anything is wired.
    """
    status = validate_all_settings()
    configure_log_level(get_settings().app.debug_mode)

    if use_sheets and status["google_sheets"]:
        sheets_client = GoogleSheetsClient()
        return LedgerService(
            store=GoogleSheetsEntryStore(sheets_client),
            audit_logger=AuditLogger(GoogleSheetsAuditStorage(sheets_client)),
        )
    if use_sheets:
        # Storage not configured - continue without it
        logger.warning("sheets_not_configured", error=status.get("google_sheets_error"))

    return LedgerService(
        store=InMemoryEntryStore(),
        audit_logger=AuditLogger(InMemoryAuditStorage()),
    )
