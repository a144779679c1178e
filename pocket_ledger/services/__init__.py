"""Services package."""

from pocket_ledger.services.storage import (
    AuditStorageInterface,
    EntryStoreInterface,
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsEntryStore,
    InMemoryAuditStorage,
    InMemoryEntryStore,
    NotFoundError,
    StorageError,
    StoreUnavailableError,
)

__all__ = [
    "AuditStorageInterface",
    "EntryStoreInterface",
    "GoogleSheetsAuditStorage",
    "GoogleSheetsClient",
    "GoogleSheetsEntryStore",
    "InMemoryAuditStorage",
    "InMemoryEntryStore",
    "NotFoundError",
    "StorageError",
    "StoreUnavailableError",
]
