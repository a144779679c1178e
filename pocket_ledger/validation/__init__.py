"""Entry validation package."""

from pocket_ledger.validation.integrity import check_entries, check_entry
from pocket_ledger.validation.validator import (
    EntryValidationError,
    EntryValidator,
    parse_amount,
)

__all__ = [
    "EntryValidationError",
    "EntryValidator",
    "check_entries",
    "check_entry",
    "parse_amount",
]
