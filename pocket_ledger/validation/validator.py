"""
Entry Validation

Every create and update passes through EntryValidator before the store
is touched.

STAGE 1 - FIELD CHECKS (blocking):
- kind, amount, description, date, category
- split sub-fields when the expense is split

STAGE 2 - SANITY CHECKS (warnings only):
- unusually large amounts
- dates far in the future

IMPORTANT: Validation NEVER silently fixes issues.
A missing amount is an error, not zero. A split on an income
entry is an error, not dropped.
"""

from datetime import date, timedelta
from decimal import Decimal, InvalidOperation
from typing import Optional, Union

from pocket_ledger.config import AppSettings, get_settings
from pocket_ledger.models.entry import (
    AMOUNT_DECIMAL_PLACES,
    AMOUNT_MAX_DIGITS,
    Category,
    EntryDraft,
    EntryKind,
    ExpenseFields,
    IncomeFields,
    SplitShare,
    SplitStatus,
    ValidationIssue,
    ValidationResult,
    exceeds_amount_precision,
)


MAX_DESCRIPTION_LENGTH = 500
MAX_PARTY_LENGTH = 200


class EntryValidationError(Exception):
    """The submitted entry violates a ledger invariant. Nothing was written."""

    def __init__(self, result: ValidationResult):
        self.result = result
        messages = "; ".join(
            issue.message for issue in result.issues if issue.severity == "error"
        )
        super().__init__(f"Invalid entry: {messages}")

    @property
    def issues(self) -> list[ValidationIssue]:
        return self.result.issues


def parse_amount(raw: Optional[str]) -> Optional[Decimal]:
    """
    Parse user-entered text as a finite decimal.

    Returns None for anything that isn't one (empty, NaN, Infinity, junk).
    """
    if raw is None:
        return None
    text = raw.strip()
    if not text:
        return None
    try:
        value = Decimal(text)
    except InvalidOperation:
        return None
    if not value.is_finite():
        return None
    return value


def _error(field: str, issue_type: str, message: str) -> ValidationIssue:
    return ValidationIssue(
        field=field,
        issue_type=issue_type,
        message=message,
        severity="error",
    )


def _precision_error(field: str, label: str) -> ValidationIssue:
    return _error(
        field, "too_precise",
        f"{label} can have at most {AMOUNT_MAX_DIGITS} digits, "
        f"{AMOUNT_DECIMAL_PLACES} of them after the decimal point",
    )


class EntryValidator:
    """
    Validates entry drafts from the editor.

    Stage 1 blocks the write. Stage 2 only adds warnings.
    """

    def __init__(
        self,
        settings: Optional[AppSettings] = None,
        today: Optional[date] = None,
    ):
        """
        Args:
            settings: Thresholds for the sanity checks. Defaults to app settings.
            today: Reference date for the future-date check. Defaults to date.today().
        """
        self._settings = settings or get_settings().app
        self._today = today

    def _validate_fields(self, draft: EntryDraft) -> list[ValidationIssue]:
        """Stage 1: everything that must hold before a write."""
        issues = []

        kind = (draft.kind or "").strip().lower()
        if not kind:
            issues.append(_error("kind", "missing", "Entry type is required"))
        elif kind not in {k.value for k in EntryKind}:
            issues.append(_error(
                "kind", "invalid_value",
                f"Unknown entry type: {draft.kind}",
            ))

        amount = parse_amount(draft.amount)
        if draft.amount is None or not draft.amount.strip():
            issues.append(_error("amount", "missing", "Amount is required"))
        elif amount is None:
            issues.append(_error(
                "amount", "invalid_format",
                f"Amount is not a number: {draft.amount}",
            ))
        elif amount <= 0:
            issues.append(_error(
                "amount", "invalid_value",
                "Amount must be greater than zero",
            ))
        elif exceeds_amount_precision(amount):
            issues.append(_precision_error("amount", "Amount"))

        description = (draft.description or "").strip()
        if not description:
            issues.append(_error(
                "description", "missing", "Description is required",
            ))
        elif len(description) > MAX_DESCRIPTION_LENGTH:
            issues.append(_error(
                "description", "too_long",
                f"Description is longer than {MAX_DESCRIPTION_LENGTH} characters",
            ))

        if not draft.occurred_on or not draft.occurred_on.strip():
            issues.append(_error("occurred_on", "missing", "Date is required"))
        else:
            try:
                date.fromisoformat(draft.occurred_on.strip())
            except ValueError:
                issues.append(_error(
                    "occurred_on", "invalid_format",
                    f"Date must be YYYY-MM-DD: {draft.occurred_on}",
                ))

        if kind == EntryKind.EXPENSE.value:
            category = (draft.category or "").strip().lower()
            if category not in {c.value for c in Category}:
                issues.append(_error(
                    "category", "invalid_value",
                    f"Unknown expense category: {draft.category}",
                ))
            if draft.is_split:
                issues.extend(self._validate_split(draft, amount))

        elif kind == EntryKind.INCOME.value:
            if draft.is_split or draft.split_with or draft.split_amount or draft.split_status:
                issues.append(_error(
                    "split", "not_allowed",
                    "Income entries cannot be split",
                ))

        return issues

    def _validate_split(
        self,
        draft: EntryDraft,
        amount: Optional[Decimal],
    ) -> list[ValidationIssue]:
        issues = []

        party = (draft.split_with or "").strip()
        if not party:
            issues.append(_error(
                "split_with", "missing",
                "Split expenses need the name of who they were split with",
            ))
        elif len(party) > MAX_PARTY_LENGTH:
            issues.append(_error(
                "split_with", "too_long",
                f"Split party is longer than {MAX_PARTY_LENGTH} characters",
            ))

        split_amount = parse_amount(draft.split_amount)
        if draft.split_amount is None or not draft.split_amount.strip():
            issues.append(_error(
                "split_amount", "missing", "Split amount is required",
            ))
        elif split_amount is None:
            issues.append(_error(
                "split_amount", "invalid_format",
                f"Split amount is not a number: {draft.split_amount}",
            ))
        elif split_amount < 0:
            issues.append(_error(
                "split_amount", "invalid_value",
                "Split amount cannot be negative",
            ))
        elif exceeds_amount_precision(split_amount):
            issues.append(_precision_error("split_amount", "Split amount"))
        elif amount is not None and amount > 0 and split_amount > amount:
            issues.append(_error(
                "split_amount", "exceeds_amount",
                f"Split amount ({split_amount}) is larger than the expense ({amount})",
            ))

        status = (draft.split_status or SplitStatus.PENDING.value).strip().lower()
        if status not in {s.value for s in SplitStatus}:
            issues.append(_error(
                "split_status", "invalid_value",
                f"Unknown split status: {draft.split_status}",
            ))

        return issues

    def _validate_sanity(self, draft: EntryDraft) -> list[ValidationIssue]:
        """Stage 2: suspicious but allowed values."""
        issues = []

        amount = parse_amount(draft.amount)
        ceiling = Decimal(str(self._settings.max_entry_amount))
        if amount is not None and amount > ceiling:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="suspicious_value",
                message=f"Amount ({amount:,.2f}) seems unusually high",
                severity="warning",
            ))

        today = self._today or date.today()
        occurred_on = date.fromisoformat(draft.occurred_on.strip())
        horizon = today + timedelta(days=self._settings.future_date_tolerance_days)
        if occurred_on > horizon:
            issues.append(ValidationIssue(
                field="occurred_on",
                issue_type="future_date",
                message=f"Date ({occurred_on}) is far in the future",
                severity="warning",
            ))

        return issues

    def validate(self, draft: EntryDraft) -> ValidationResult:
        """Run both stages and collect every issue found."""
        issues = self._validate_fields(draft)

        # Stage 2 reads fields stage 1 has already proven parseable
        if not any(issue.severity == "error" for issue in issues):
            issues.extend(self._validate_sanity(draft))

        return ValidationResult(
            is_valid=not any(issue.severity == "error" for issue in issues),
            issues=issues,
        )

    def build_fields(
        self,
        draft: EntryDraft,
    ) -> Union[ExpenseFields, IncomeFields]:
        """
        Validate a draft and convert it to typed entry fields.

        Raises:
            EntryValidationError: If any error-level issue was found
        """
        result = self.validate(draft)
        if not result.is_valid:
            raise EntryValidationError(result)

        kind = draft.kind.strip().lower()
        common = {
            "amount": parse_amount(draft.amount),
            "description": draft.description.strip(),
            "occurred_on": date.fromisoformat(draft.occurred_on.strip()),
        }

        if kind == EntryKind.INCOME.value:
            return IncomeFields(**common)

        split = None
        if draft.is_split:
            split = SplitShare(
                party=draft.split_with.strip(),
                amount=parse_amount(draft.split_amount),
                status=SplitStatus(
                    (draft.split_status or SplitStatus.PENDING.value).strip().lower()
                ),
            )

        return ExpenseFields(
            category=Category(draft.category.strip().lower()),
            split=split,
            **common,
        )

    def get_user_friendly_summary(self, result: ValidationResult) -> str:
        """Short text suitable for showing under the entry editor."""
        if result.is_valid and not result.warnings:
            return "All checks passed."

        lines = []
        errors = [i for i in result.issues if i.severity == "error"]
        if errors:
            lines.append("Please fix the following before saving:")
            lines.extend(f"  - {issue.message}" for issue in errors)

        if result.warnings:
            if lines:
                lines.append("")
            lines.append("Please double-check:")
            lines.extend(f"  - {warning}" for warning in result.warnings)

        return "\n".join(lines)
