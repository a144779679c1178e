"""
CSV Export

Serializes entries to the spreadsheet-friendly layout users download:

    Date,Type,Description,Category,Amount,Split With,Split Amount,Split Status,Net Amount

Expense amounts are written negative, income positive. The net column
takes a received split share off the expense before the sign flip.

The description is ALWAYS wrapped in quotes with embedded quotes doubled,
which keeps commas and line breaks inside it intact for any CSV reader.
The split party is also free text; it is quoted the same way, but only
when it holds a character that would otherwise break the row.
"""

from decimal import Decimal
from typing import Iterable, Union

from pydantic import BaseModel, ConfigDict

from pocket_ledger.models.entry import EntryKind, ExpenseEntry, IncomeEntry
from pocket_ledger.validation.integrity import check_entries

AnyEntry = Union[ExpenseEntry, IncomeEntry]

CSV_HEADERS = [
    "Date",
    "Type",
    "Description",
    "Category",
    "Amount",
    "Split With",
    "Split Amount",
    "Split Status",
    "Net Amount",
]

CSV_MEDIA_TYPE = "text/csv;charset=utf-8"

# Characters that need a cell quoted to survive a CSV reader
_CSV_SPECIAL = (",", '"', "\r", "\n")


class ExportArtifact(BaseModel):
    """A finished export, ready to hand to whatever delivers the file."""
    model_config = ConfigDict(frozen=True)

    filename: str
    content: str
    row_count: int
    media_type: str = CSV_MEDIA_TYPE

    @property
    def data(self) -> bytes:
        return self.content.encode("utf-8")


def quote_field(text: str) -> str:
    """Wrap in double quotes, doubling any quote inside."""
    return '"' + text.replace('"', '""') + '"'


def _party_cell(party: str) -> str:
    if any(ch in party for ch in _CSV_SPECIAL):
        return quote_field(party)
    return party


def format_amount(value: Decimal) -> str:
    """
    Plain decimal notation at the value's own precision.

    Never scientific notation, never '-0'.
    """
    if value.is_zero():
        value = value.copy_abs()
    return format(value, "f")


def _signed(entry: AnyEntry, value: Decimal) -> Decimal:
    return -value if entry.kind == EntryKind.EXPENSE else value


def entry_to_row(entry: AnyEntry) -> list[str]:
    """One entry as CSV cells (description already quoted)."""
    split = getattr(entry, "split", None)
    category = entry.category.value if entry.kind == EntryKind.EXPENSE else entry.category

    return [
        entry.occurred_on.isoformat(),
        EntryKind(entry.kind).value,
        quote_field(entry.description),
        category,
        format_amount(_signed(entry, entry.amount)),
        _party_cell(split.party) if split else "",
        format_amount(split.amount) if split else "",
        split.status.value if split else "",
        format_amount(_signed(entry, entry.net_amount)),
    ]


def export_csv(entries: Iterable[AnyEntry]) -> str:
    """
    Build the CSV document: header plus one row per entry, oldest first.

    Rows are joined with '\\n' and there is no trailing newline.

    Raises:
        DataIntegrityError: If an entry breaks a ledger invariant
    """
    ordered = list(entries)
    check_entries(ordered)

    # ISO date strings sort chronologically; sorted() is stable for ties
    ordered = sorted(ordered, key=lambda e: e.occurred_on.isoformat())

    lines = [",".join(CSV_HEADERS)]
    lines.extend(",".join(entry_to_row(entry)) for entry in ordered)
    return "\n".join(lines)


def export_filename(year: int, month: int) -> str:
    """`expenses_<year>_<MM>.csv`"""
    if not 1 <= month <= 12:
        raise ValueError(f"Month must be between 1 and 12, got {month}")
    return f"expenses_{year}_{month:02d}.csv"


def build_export(entries: Iterable[AnyEntry], year: int, month: int) -> ExportArtifact:
    """Export a month's entries as a named artifact."""
    entries = list(entries)
    return ExportArtifact(
        filename=export_filename(year, month),
        content=export_csv(entries),
        row_count=len(entries),
    )
