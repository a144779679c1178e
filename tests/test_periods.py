"""Tests for calendar helpers."""

from datetime import date, datetime

import pytest

from pocket_ledger.reports import (
    active_dates,
    entries_on,
    month_label,
    month_range,
    period_key,
    year_range,
)


class TestPeriods:
    """Tests for month and year ranges."""

    def test_month_range(self):
        assert month_range(2026, 1) == (date(2026, 1, 1), date(2026, 2, 1))

    def test_december_rolls_into_next_year(self):
        assert month_range(2025, 12) == (date(2025, 12, 1), date(2026, 1, 1))

    def test_month_out_of_range(self):
        """Test months are 1-12, not 0-11."""
        for bad in (0, 13):
            with pytest.raises(ValueError):
                month_range(2026, bad)

    def test_year_range(self):
        assert year_range(2026) == (date(2026, 1, 1), date(2027, 1, 1))

    def test_labels(self):
        assert period_key(2026, 3) == "2026-03"
        assert month_label(2026, 3) == "March 2026"


class TestDayHelpers:
    """Tests for per-day lookups used by the calendar view."""

    def test_entries_on_newest_first(self, make_expense):
        older = make_expense(description="older").model_copy(
            update={"created_at": datetime(2026, 1, 5, 8, 0)}
        )
        newer = make_expense(description="newer").model_copy(
            update={"created_at": datetime(2026, 1, 5, 20, 0)}
        )
        other_day = make_expense(occurred_on=date(2026, 1, 6))
        result = entries_on([older, other_day, newer], date(2026, 1, 5))
        assert [e.description for e in result] == ["newer", "older"]

    def test_active_dates(self, make_expense, make_income):
        entries = [
            make_expense(occurred_on=date(2026, 1, 5)),
            make_expense(occurred_on=date(2026, 1, 5)),
            make_income(occurred_on=date(2026, 1, 1)),
        ]
        assert active_dates(entries) == {date(2026, 1, 5), date(2026, 1, 1)}
