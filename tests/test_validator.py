"""Tests for entry draft validation."""

from datetime import date
from decimal import Decimal

import pytest

from pocket_ledger.models.entry import (
    Category,
    EntryDraft,
    ExpenseFields,
    IncomeFields,
    SplitStatus,
)
from pocket_ledger.validation import EntryValidationError, parse_amount


def _issue_keys(result):
    return {(issue.field, issue.issue_type) for issue in result.issues}


class TestParseAmount:
    """Tests for parse_amount()."""

    def test_plain_numbers(self):
        assert parse_amount("250") == Decimal("250")
        assert parse_amount(" 12.50 ") == Decimal("12.50")

    def test_empty_is_none(self):
        """Test empty input is missing, not zero."""
        assert parse_amount(None) is None
        assert parse_amount("") is None
        assert parse_amount("   ") is None

    def test_non_numbers_are_none(self):
        for raw in ("abc", "12,50", "NaN", "Infinity", "-inf"):
            assert parse_amount(raw) is None


class TestFieldValidation:
    """Tests for stage 1 (blocking) checks."""

    def test_valid_expense(self, validator, expense_draft):
        """Test a complete expense draft passes."""
        result = validator.validate(expense_draft)
        assert result.is_valid
        assert result.issues == []

    def test_valid_income(self, validator):
        """Test income needs no category."""
        draft = EntryDraft(
            kind="income",
            amount="2000",
            description="Salary",
            occurred_on="2026-01-01",
        )
        assert validator.validate(draft).is_valid

    def test_missing_amount(self, validator, expense_draft):
        """Test a blank amount is an error, not zero."""
        draft = expense_draft.model_copy(update={"amount": "  "})
        result = validator.validate(draft)
        assert not result.is_valid
        assert ("amount", "missing") in _issue_keys(result)

    def test_amount_not_a_number(self, validator, expense_draft):
        draft = expense_draft.model_copy(update={"amount": "ten"})
        assert ("amount", "invalid_format") in _issue_keys(validator.validate(draft))

    def test_amount_must_be_positive(self, validator, expense_draft):
        """Test zero and negative amounts are both refused."""
        for raw in ("0", "-10"):
            draft = expense_draft.model_copy(update={"amount": raw})
            assert ("amount", "invalid_value") in _issue_keys(validator.validate(draft))

    def test_amount_precision_capped(self, validator, expense_draft):
        """Test amounts too long to total exactly are refused."""
        for raw in ("1234567890123456789012345.67891", "0.00001"):
            draft = expense_draft.model_copy(update={"amount": raw})
            assert ("amount", "too_precise") in _issue_keys(validator.validate(draft))

    def test_longest_allowed_amount(self, validator, expense_draft):
        draft = expense_draft.model_copy(update={"amount": "99999999999999.9999"})
        result = validator.validate(draft)
        assert ("amount", "too_precise") not in _issue_keys(result)

    def test_missing_description(self, validator, expense_draft):
        draft = expense_draft.model_copy(update={"description": "   "})
        assert ("description", "missing") in _issue_keys(validator.validate(draft))

    def test_description_too_long(self, validator, expense_draft):
        draft = expense_draft.model_copy(update={"description": "x" * 501})
        assert ("description", "too_long") in _issue_keys(validator.validate(draft))

    def test_missing_date(self, validator, expense_draft):
        draft = expense_draft.model_copy(update={"occurred_on": None})
        assert ("occurred_on", "missing") in _issue_keys(validator.validate(draft))

    def test_bad_date(self, validator, expense_draft):
        """Test a date that isn't YYYY-MM-DD is rejected."""
        for raw in ("10/01/2026", "2026-02-30"):
            draft = expense_draft.model_copy(update={"occurred_on": raw})
            assert ("occurred_on", "invalid_format") in _issue_keys(validator.validate(draft))

    def test_unknown_kind(self, validator, expense_draft):
        draft = expense_draft.model_copy(update={"kind": "transfer"})
        assert ("kind", "invalid_value") in _issue_keys(validator.validate(draft))

    def test_missing_kind(self, validator, expense_draft):
        draft = expense_draft.model_copy(update={"kind": None})
        assert ("kind", "missing") in _issue_keys(validator.validate(draft))

    def test_unknown_category(self, validator, expense_draft):
        """Test expenses need one of the fixed categories."""
        draft = expense_draft.model_copy(update={"category": "groceries"})
        assert ("category", "invalid_value") in _issue_keys(validator.validate(draft))

    def test_missing_category(self, validator, expense_draft):
        draft = expense_draft.model_copy(update={"category": None})
        assert ("category", "invalid_value") in _issue_keys(validator.validate(draft))

    def test_collects_every_issue(self, validator):
        """Test all problems are reported at once."""
        result = validator.validate(EntryDraft(kind="expense"))
        assert result.error_count >= 4
        keys = _issue_keys(result)
        assert ("amount", "missing") in keys
        assert ("description", "missing") in keys
        assert ("occurred_on", "missing") in keys
        assert ("category", "invalid_value") in keys


class TestSplitValidation:
    """Tests for split sub-field checks."""

    def _split_draft(self, expense_draft, **updates):
        values = {
            "is_split": True,
            "split_with": "Ravi",
            "split_amount": "100",
            "split_status": "pending",
        }
        values.update(updates)
        return expense_draft.model_copy(update=values)

    def test_valid_split(self, validator, expense_draft):
        assert validator.validate(self._split_draft(expense_draft)).is_valid

    def test_split_needs_party(self, validator, expense_draft):
        draft = self._split_draft(expense_draft, split_with=" ")
        assert ("split_with", "missing") in _issue_keys(validator.validate(draft))

    def test_split_needs_amount(self, validator, expense_draft):
        draft = self._split_draft(expense_draft, split_amount=None)
        assert ("split_amount", "missing") in _issue_keys(validator.validate(draft))

    def test_split_amount_not_negative(self, validator, expense_draft):
        draft = self._split_draft(expense_draft, split_amount="-1")
        assert ("split_amount", "invalid_value") in _issue_keys(validator.validate(draft))

    def test_split_amount_precision_capped(self, validator, expense_draft):
        draft = self._split_draft(expense_draft, split_amount="0.00001")
        assert ("split_amount", "too_precise") in _issue_keys(validator.validate(draft))

    def test_zero_split_allowed(self, validator, expense_draft):
        """Test a zero share is a valid split."""
        draft = self._split_draft(expense_draft, split_amount="0")
        assert validator.validate(draft).is_valid

    def test_split_larger_than_expense(self, validator, expense_draft):
        """Test a share above the expense amount is refused on write."""
        draft = self._split_draft(expense_draft, split_amount="250.01")
        assert ("split_amount", "exceeds_amount") in _issue_keys(validator.validate(draft))

    def test_split_equal_to_expense(self, validator, expense_draft):
        draft = self._split_draft(expense_draft, split_amount="250")
        assert validator.validate(draft).is_valid

    def test_unknown_split_status(self, validator, expense_draft):
        draft = self._split_draft(expense_draft, split_status="maybe")
        assert ("split_status", "invalid_value") in _issue_keys(validator.validate(draft))

    def test_split_fields_ignored_when_not_split(self, validator, expense_draft):
        """Test leftover split inputs don't matter once the toggle is off."""
        draft = self._split_draft(expense_draft, is_split=False, split_amount="junk")
        assert validator.validate(draft).is_valid

    def test_income_cannot_be_split(self, validator):
        """Test split data on income is an error, not silently dropped."""
        draft = EntryDraft(
            kind="income",
            amount="100",
            description="Refund",
            occurred_on="2026-01-02",
            split_with="Ravi",
        )
        assert ("split", "not_allowed") in _issue_keys(validator.validate(draft))


class TestSanityChecks:
    """Tests for stage 2 warnings."""

    def test_large_amount_warns(self, validator, expense_draft):
        draft = expense_draft.model_copy(update={"amount": "150000"})
        result = validator.validate(draft)
        assert result.is_valid
        assert ("amount", "suspicious_value") in _issue_keys(result)
        assert len(result.warnings) == 1

    def test_far_future_date_warns(self, validator, expense_draft):
        draft = expense_draft.model_copy(update={"occurred_on": "2026-03-01"})
        result = validator.validate(draft)
        assert result.is_valid
        assert ("occurred_on", "future_date") in _issue_keys(result)

    def test_near_future_date_ok(self, validator, expense_draft):
        """Test a date inside the tolerance window is fine."""
        draft = expense_draft.model_copy(update={"occurred_on": "2026-02-10"})
        assert validator.validate(draft).issues == []

    def test_sanity_skipped_when_fields_invalid(self, validator, expense_draft):
        draft = expense_draft.model_copy(
            update={"amount": "999999", "description": ""}
        )
        result = validator.validate(draft)
        assert all(issue.severity == "error" for issue in result.issues)


class TestBuildFields:
    """Tests for converting drafts into typed fields."""

    def test_builds_expense(self, validator, expense_draft):
        fields = validator.build_fields(expense_draft)
        assert isinstance(fields, ExpenseFields)
        assert fields.amount == Decimal("250")
        assert fields.category == Category.FOOD
        assert fields.occurred_on == date(2026, 1, 10)
        assert fields.split is None

    def test_builds_split_expense(self, validator, expense_draft):
        draft = expense_draft.model_copy(update={
            "is_split": True,
            "split_with": " Ravi ",
            "split_amount": "100",
            "split_status": "RECEIVED",
        })
        fields = validator.build_fields(draft)
        assert fields.split.party == "Ravi"
        assert fields.split.amount == Decimal("100")
        assert fields.split.status == SplitStatus.RECEIVED

    def test_split_status_defaults_to_pending(self, validator, expense_draft):
        draft = expense_draft.model_copy(update={
            "is_split": True,
            "split_with": "Ravi",
            "split_amount": "10",
        })
        assert validator.build_fields(draft).split.status == SplitStatus.PENDING

    def test_builds_income(self, validator):
        draft = EntryDraft(
            kind="Income",
            amount="2000",
            description="Salary",
            category="food",
            occurred_on="2026-01-01",
        )
        fields = validator.build_fields(draft)
        assert isinstance(fields, IncomeFields)
        assert fields.category == "income"

    def test_invalid_draft_raises(self, validator, expense_draft):
        """Test build_fields refuses a draft with errors."""
        draft = expense_draft.model_copy(update={"amount": "-3"})
        with pytest.raises(EntryValidationError) as exc_info:
            validator.build_fields(draft)
        assert exc_info.value.result.is_valid is False
        assert exc_info.value.issues[0].field == "amount"
        assert "greater than zero" in str(exc_info.value)

    def test_warnings_do_not_block(self, validator, expense_draft):
        draft = expense_draft.model_copy(update={"amount": "500000"})
        assert validator.build_fields(draft).amount == Decimal("500000")


class TestUserFriendlySummary:
    """Tests for the editor feedback text."""

    def test_all_passed(self, validator, expense_draft):
        result = validator.validate(expense_draft)
        assert validator.get_user_friendly_summary(result) == "All checks passed."

    def test_lists_errors(self, validator):
        result = validator.validate(EntryDraft(kind="income"))
        text = validator.get_user_friendly_summary(result)
        assert text.startswith("Please fix the following before saving:")
        assert "Amount is required" in text

    def test_lists_warnings(self, validator, expense_draft):
        draft = expense_draft.model_copy(update={"amount": "200000"})
        text = validator.get_user_friendly_summary(validator.validate(draft))
        assert "Please double-check:" in text
        assert "unusually high" in text
