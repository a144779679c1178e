"""
In-memory storage.

Same contracts as the Google Sheets backend, kept in dicts and lists.
Used by the test suite and for local runs without credentials.
"""

from datetime import date, datetime
from typing import Optional, Union
from uuid import uuid4

from pocket_ledger.models.audit import AuditEvent
from pocket_ledger.models.entry import (
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
)


class InMemoryEntryStore(EntryStoreInterface):
    """Entries keyed by ID. Entries are immutable, so reads hand out the stored objects."""

    def __init__(self):
        self._entries: dict[str, Union[ExpenseEntry, IncomeEntry]] = {}

    def __len__(self) -> int:
        return len(self._entries)

    async def query(
        self,
        owner_id: str,
        start: date,
        end: date,
    ) -> list[Union[ExpenseEntry, IncomeEntry]]:
        entries = [
            entry for entry in self._entries.values()
            if entry.owner_id == owner_id and start <= entry.occurred_on < end
        ]
        entries.sort(key=lambda e: e.occurred_on, reverse=True)
        return entries

    async def get_entry(
        self,
        entry_id: str,
    ) -> Optional[Union[ExpenseEntry, IncomeEntry]]:
        return self._entries.get(entry_id)

    async def create(
        self,
        owner_id: str,
        fields: Union[ExpenseFields, IncomeFields],
    ) -> str:
        entry_id = str(uuid4())
        now = datetime.utcnow()
        self._entries[entry_id] = build_entry(
            fields,
            entry_id=entry_id,
            owner_id=owner_id,
            created_at=now,
            updated_at=now,
        )
        return entry_id

    async def update(
        self,
        entry_id: str,
        fields: Union[ExpenseFields, IncomeFields],
    ) -> None:
        existing = self._entries.get(entry_id)
        if existing is None:
            raise NotFoundError(f"Entry not found: {entry_id}")

        self._entries[entry_id] = build_entry(
            fields,
            entry_id=entry_id,
            owner_id=existing.owner_id,
            created_at=existing.created_at,
            updated_at=datetime.utcnow(),
        )

    async def delete(self, entry_id: str) -> None:
        if self._entries.pop(entry_id, None) is None:
            raise NotFoundError(f"Entry not found: {entry_id}")


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only list of audit events."""

    def __init__(self):
        self.events: list[AuditEvent] = []

    async def append_event(self, event: AuditEvent) -> bool:
        self.events.append(event)
        return True

    async def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: str,
    ) -> list[AuditEvent]:
        events = [
            e for e in self.events
            if e.entity_type == entity_type and e.entity_id == entity_id
        ]
        events.sort(key=lambda e: e.timestamp)
        return events

    async def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        events = sorted(self.events, key=lambda e: e.timestamp, reverse=True)
        return events[:limit]
