"""
Summary Aggregation

DESIGN DECISION: Aggregation is a pure function over an in-memory list.
The store has already narrowed the entries to one owner and one period,
so a single pass per call is all a month of personal entries needs.

Net expense treats a RECEIVED split share like income: the user paid
less out of pocket. PENDING shares are only reported, never netted.
"""

from decimal import Decimal
from typing import Iterable, Union

from pocket_ledger.models.entry import (
    EntryKind,
    ExpenseEntry,
    IncomeEntry,
    SplitStatus,
    Summary,
)
from pocket_ledger.validation.integrity import check_entry


def summarize(entries: Iterable[Union[ExpenseEntry, IncomeEntry]]) -> Summary:
    """
    Reduce entries to their totals.

    Order does not matter and the input is not modified.

    Raises:
        DataIntegrityError: If an entry breaks a ledger invariant
    """
    total_expense = Decimal("0")
    total_income = Decimal("0")
    total_split_pending = Decimal("0")
    total_split_received = Decimal("0")

    for entry in entries:
        check_entry(entry)

        if entry.kind == EntryKind.INCOME:
            total_income += entry.amount
            continue

        total_expense += entry.amount
        split = getattr(entry, "split", None)
        if split is None:
            continue
        if split.status == SplitStatus.PENDING:
            total_split_pending += split.amount
        else:
            total_split_received += split.amount

    return Summary(
        total_expense=total_expense,
        total_income=total_income,
        total_split_pending=total_split_pending,
        total_split_received=total_split_received,
        net_expense=total_expense - total_income - total_split_received,
    )


def summarize_by_category(
    entries: Iterable[Union[ExpenseEntry, IncomeEntry]],
) -> dict[str, Decimal]:
    """
    Expense totals per category, largest first.

    Full amounts, split shares not subtracted (same as total_expense).
    """
    groups: dict[str, Decimal] = {}

    for entry in entries:
        check_entry(entry)
        if entry.kind != EntryKind.EXPENSE:
            continue
        key = entry.category.value
        groups[key] = groups.get(key, Decimal("0")) + entry.amount

    return dict(sorted(groups.items(), key=lambda item: item[1], reverse=True))
