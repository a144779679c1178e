"""Summaries, CSV export and calendar helpers."""

from pocket_ledger.reports.export import (
    CSV_HEADERS,
    ExportArtifact,
    build_export,
    export_csv,
    export_filename,
    format_amount,
    quote_field,
)
from pocket_ledger.reports.periods import (
    active_dates,
    entries_on,
    month_label,
    month_range,
    period_key,
    year_range,
)
from pocket_ledger.reports.summary import summarize, summarize_by_category

__all__ = [
    "CSV_HEADERS",
    "ExportArtifact",
    "active_dates",
    "build_export",
    "entries_on",
    "export_csv",
    "export_filename",
    "format_amount",
    "month_label",
    "month_range",
    "period_key",
    "quote_field",
    "summarize",
    "summarize_by_category",
    "year_range",
]
