"""
Integrity checks for entries that reach the reporting layer.

Entries normally come out of a store already validated, but rows can be
edited by hand in the spreadsheet or built with model_construct(). The
aggregator and exporter call check_entry() on every entry so a broken
record fails loudly instead of skewing a total.

Split amounts larger than the expense are NOT an integrity failure here.
The write path rejects them, but older records that carry one still load.
"""

from datetime import date
from decimal import Decimal
from typing import Iterable, Union

from pocket_ledger.models.entry import (
    INCOME_CATEGORY,
    Category,
    DataIntegrityError,
    EntryKind,
    ExpenseEntry,
    IncomeEntry,
    SplitStatus,
    exceeds_amount_precision,
)


def _is_finite_decimal(value) -> bool:
    return isinstance(value, Decimal) and value.is_finite()


def check_entry(entry: Union[ExpenseEntry, IncomeEntry]) -> None:
    """
    Raise DataIntegrityError if the entry breaks a ledger invariant.
    """
    entry_id = getattr(entry, "id", None)

    if not _is_finite_decimal(entry.amount) or entry.amount <= 0:
        raise DataIntegrityError(
            f"Entry amount must be a positive number, got {entry.amount!r}",
            entry_id=entry_id,
        )
    if exceeds_amount_precision(entry.amount):
        raise DataIntegrityError(
            f"Entry amount has too many digits to total exactly: {entry.amount}",
            entry_id=entry_id,
        )

    if not isinstance(entry.description, str) or not entry.description.strip():
        raise DataIntegrityError("Entry has no description", entry_id=entry_id)

    if not isinstance(entry.occurred_on, date):
        raise DataIntegrityError(
            f"Entry date must be a calendar date, got {entry.occurred_on!r}",
            entry_id=entry_id,
        )

    if entry.kind == EntryKind.INCOME:
        if entry.category != INCOME_CATEGORY:
            raise DataIntegrityError(
                f"Income entry has category {entry.category!r}",
                entry_id=entry_id,
            )
        if getattr(entry, "split", None) is not None:
            raise DataIntegrityError(
                "Income entry carries split data",
                entry_id=entry_id,
            )
        return

    if entry.kind != EntryKind.EXPENSE:
        raise DataIntegrityError(
            f"Unknown entry kind {entry.kind!r}",
            entry_id=entry_id,
        )

    if not isinstance(entry.category, Category):
        raise DataIntegrityError(
            f"Expense entry has unknown category {entry.category!r}",
            entry_id=entry_id,
        )

    split = getattr(entry, "split", None)
    if split is None:
        return
    if not isinstance(split.party, str) or not split.party.strip():
        raise DataIntegrityError(
            "Split expense has no split party",
            entry_id=entry_id,
        )
    if not _is_finite_decimal(split.amount) or split.amount < 0:
        raise DataIntegrityError(
            f"Split amount must be a non-negative number, got {split.amount!r}",
            entry_id=entry_id,
        )
    if exceeds_amount_precision(split.amount):
        raise DataIntegrityError(
            f"Split amount has too many digits to total exactly: {split.amount}",
            entry_id=entry_id,
        )
    if not isinstance(split.status, SplitStatus):
        raise DataIntegrityError(
            f"Unknown split status {split.status!r}",
            entry_id=entry_id,
        )


def check_entries(entries: Iterable[Union[ExpenseEntry, IncomeEntry]]) -> None:
    for entry in entries:
        check_entry(entry)
