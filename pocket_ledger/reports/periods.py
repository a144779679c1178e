"""
Calendar helpers.

Periods are half-open `[start, end)` date ranges, the same shape the
store's query() takes. Months are 1-12.
"""

from datetime import date
from typing import Iterable, Union

from pocket_ledger.models.entry import ExpenseEntry, IncomeEntry

AnyEntry = Union[ExpenseEntry, IncomeEntry]

MONTH_NAMES = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]


def _check_month(month: int) -> None:
    if not 1 <= month <= 12:
        raise ValueError(f"Month must be between 1 and 12, got {month}")


def month_range(year: int, month: int) -> tuple[date, date]:
    """First day of the month and first day of the next month."""
    _check_month(month)
    start = date(year, month, 1)
    if month == 12:
        end = date(year + 1, 1, 1)
    else:
        end = date(year, month + 1, 1)
    return start, end


def year_range(year: int) -> tuple[date, date]:
    return date(year, 1, 1), date(year + 1, 1, 1)


def period_key(year: int, month: int) -> str:
    """`YYYY-MM`, used as the audit entity id for a month."""
    _check_month(month)
    return f"{year:04d}-{month:02d}"


def month_label(year: int, month: int) -> str:
    """e.g. 'January 2026'."""
    _check_month(month)
    return f"{MONTH_NAMES[month - 1]} {year}"


def entries_on(entries: Iterable[AnyEntry], day: date) -> list[AnyEntry]:
    """Entries that happened on `day`, most recently created first."""
    matching = [e for e in entries if e.occurred_on == day]
    matching.sort(key=lambda e: e.created_at, reverse=True)
    return matching


def active_dates(entries: Iterable[AnyEntry]) -> set[date]:
    """Dates that carry at least one entry (calendar markers)."""
    return {e.occurred_on for e in entries}
