"""
Data Models Package

This package contains all Pydantic models used in Pocket Ledger.
All data flowing through the system must conform to these schemas.
"""

from pocket_ledger.models.entry import (
    AMOUNT_DECIMAL_PLACES,
    AMOUNT_MAX_DIGITS,
    CATEGORY_LABELS,
    INCOME_CATEGORY,
    Category,
    DataIntegrityError,
    Entry,
    EntryDraft,
    EntryFields,
    EntryKind,
    ExpenseEntry,
    ExpenseFields,
    IncomeEntry,
    IncomeFields,
    SplitShare,
    SplitStatus,
    Summary,
    ValidationIssue,
    ValidationResult,
    build_entry,
)
from pocket_ledger.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Entry models
    "AMOUNT_DECIMAL_PLACES",
    "AMOUNT_MAX_DIGITS",
    "CATEGORY_LABELS",
    "INCOME_CATEGORY",
    "Category",
    "DataIntegrityError",
    "Entry",
    "EntryDraft",
    "EntryFields",
    "EntryKind",
    "ExpenseEntry",
    "ExpenseFields",
    "IncomeEntry",
    "IncomeFields",
    "SplitShare",
    "SplitStatus",
    "Summary",
    "ValidationIssue",
    "ValidationResult",
    "build_entry",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
