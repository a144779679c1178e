"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage.
Google Sheets is the hosted backend; the in-memory backend backs tests.
"""

from pocket_ledger.services.storage.interface import (
    AuditStorageInterface,
    EntryStoreInterface,
    NotFoundError,
    StorageError,
    StoreUnavailableError,
)
from pocket_ledger.services.storage.memory import (
    InMemoryAuditStorage,
    InMemoryEntryStore,
)
from pocket_ledger.services.storage.google_sheets import (
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsEntryStore,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "EntryStoreInterface",
    # Exceptions
    "NotFoundError",
    "StorageError",
    "StoreUnavailableError",
    # In-memory implementation
    "InMemoryAuditStorage",
    "InMemoryEntryStore",
    # Google Sheets implementation
    "GoogleSheetsAuditStorage",
    "GoogleSheetsClient",
    "GoogleSheetsEntryStore",
]
