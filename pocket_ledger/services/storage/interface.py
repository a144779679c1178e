"""
Abstract Storage Interface

DESIGN DECISION: The ledger core never talks to a database directly.
It goes through this interface so that:
1. The Google Sheets backend can be swapped for a real database later
2. Tests run against in-memory storage
3. Retries stay inside the backend, never in business logic

The interface is intentionally narrow: query a period, create, update,
delete. Aggregation happens in Python over what query() returns.

Concurrent updates to the same entry are last-write-wins. There is no
version field, so two sessions editing one entry can overwrite each other.
The Sheets backend addresses rows by position; it re-checks the row just
before writing, which narrows but does not close the window in which another
client can shift rows.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import Optional, Union

from pocket_ledger.models.audit import AuditEvent
from pocket_ledger.models.entry import (
    ExpenseEntry,
    ExpenseFields,
    IncomeEntry,
    IncomeFields,
)


class EntryStoreInterface(ABC):
    """
    Abstract interface for ledger entry storage.

    Any storage implementation (Google Sheets, PostgreSQL, etc.)
    must implement these methods.
    """

    @abstractmethod
    async def query(
        self,
        owner_id: str,
        start: date,
        end: date,
    ) -> list[Union[ExpenseEntry, IncomeEntry]]:
        """
        List one owner's entries with start <= occurred_on < end.

        Args:
            owner_id: The owning user
            start: First date included
            end: First date excluded

        Returns:
            Matching entries, in no guaranteed order

        Raises:
            StoreUnavailableError: If the backend cannot be reached
            DataIntegrityError: If a stored record is malformed
        """
        pass

    @abstractmethod
    async def get_entry(
        self,
        entry_id: str,
    ) -> Optional[Union[ExpenseEntry, IncomeEntry]]:
        """
        Retrieve an entry by its ID.

        Returns:
            The entry if found, None otherwise
        """
        pass

    @abstractmethod
    async def create(
        self,
        owner_id: str,
        fields: Union[ExpenseFields, IncomeFields],
    ) -> str:
        """
        Persist a new entry.

        The store assigns the ID and both record timestamps.

        Returns:
            The new entry's ID

        Raises:
            StoreUnavailableError: If the write fails
        """
        pass

    @abstractmethod
    async def update(
        self,
        entry_id: str,
        fields: Union[ExpenseFields, IncomeFields],
    ) -> None:
        """
        Replace an entry's editable fields and refresh updated_at.

        ID, owner and created_at are kept. Switching the kind to income
        drops any split data along with the expense variant.

        Raises:
            NotFoundError: If the entry doesn't exist
            StoreUnavailableError: If the write fails
        """
        pass

    @abstractmethod
    async def delete(self, entry_id: str) -> None:
        """
        Remove an entry permanently.

        Raises:
            NotFoundError: If the entry doesn't exist
            StoreUnavailableError: If the write fails
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    async def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: str,
    ) -> list[AuditEvent]:
        """
        Get all events for a specific entity, in chronological order.
        """
        pass

    @abstractmethod
    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """
        Get the most recent audit events (newest first).
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class StoreUnavailableError(StorageError):
    """The storage backend could not complete the request."""
    pass
