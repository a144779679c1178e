"""
Core Data Models for Pocket Ledger

These models define the strict schemas for every ledger entry flowing
through the system. They are designed to:
1. Enforce type safety at runtime
2. Keep split-expense data inside the expense variant only
3. Be serializable for storage, export and logging

DESIGN DECISION: An entry is a tagged variant on `kind`.
Expense and income entries are separate Pydantic models joined by a
discriminated union, so an income entry simply has no split field.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class EntryKind(str, Enum):
    """Whether money went out or came in."""
    EXPENSE = "expense"
    INCOME = "income"


class Category(str, Enum):
    """
    Supported expense categories.

    Income entries never carry one of these; they use INCOME_CATEGORY.
    """
    FOOD = "food"
    TRANSPORT = "transport"
    SHOPPING = "shopping"
    BILLS = "bills"
    ENTERTAINMENT = "entertainment"
    HEALTH = "health"
    EDUCATION = "education"
    OTHER = "other"


# Display names shown next to each category
CATEGORY_LABELS: dict[Category, str] = {
    Category.FOOD: "Food & Drinks",
    Category.TRANSPORT: "Transport",
    Category.SHOPPING: "Shopping",
    Category.BILLS: "Bills & Utilities",
    Category.ENTERTAINMENT: "Entertainment",
    Category.HEALTH: "Health",
    Category.EDUCATION: "Education",
    Category.OTHER: "Other",
}

# Fixed category for every income entry (not user editable)
INCOME_CATEGORY = "income"

# Amount precision. 18 significant digits leave ten digits of headroom in
# the default 28-digit decimal context, so summed totals stay exact.
AMOUNT_MAX_DIGITS = 18
AMOUNT_DECIMAL_PLACES = 4


def exceeds_amount_precision(value: Decimal) -> bool:
    """True if `value` needs more digits than an entry amount may carry."""
    _, digits, exponent = value.as_tuple()
    decimals = max(0, -exponent)
    whole = max(0, len(digits) + exponent)
    return decimals > AMOUNT_DECIMAL_PLACES or whole + decimals > AMOUNT_MAX_DIGITS


class SplitStatus(str, Enum):
    """
    State of the other party's share of a split expense.

    Only RECEIVED shares reduce the net expense.
    """
    PENDING = "pending"    # Owed, not yet paid back
    RECEIVED = "received"  # Reimbursed


# =============================================================================
# SPLIT SUB-RECORD
# =============================================================================

class SplitShare(BaseModel):
    """
    The part of an expense attributable to someone else.

    Exists only on expense entries.
    """
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    party: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Who the expense was split with"
    )
    amount: Decimal = Field(
        ...,
        ge=0,
        allow_inf_nan=False,
        max_digits=AMOUNT_MAX_DIGITS,
        decimal_places=AMOUNT_DECIMAL_PLACES,
        description="The other party's share"
    )
    status: SplitStatus = Field(
        default=SplitStatus.PENDING,
        description="Whether the share has been paid back"
    )


# =============================================================================
# WRITE-SIDE PAYLOADS (what the editor submits after validation)
# =============================================================================

class _FieldsBase(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    amount: Decimal = Field(
        ...,
        gt=0,
        allow_inf_nan=False,
        max_digits=AMOUNT_MAX_DIGITS,
        decimal_places=AMOUNT_DECIMAL_PLACES,
        description="Entry amount, always positive"
    )
    description: str = Field(
        ...,
        min_length=1,
        max_length=500,
        description="Free-text label"
    )
    occurred_on: date = Field(
        ...,
        description="Calendar date the money moved"
    )


class ExpenseFields(_FieldsBase):
    """Validated fields for an expense entry."""

    kind: Literal["expense"] = "expense"
    category: Category = Field(
        ...,
        description="Expense category"
    )
    split: Optional[SplitShare] = None


class IncomeFields(_FieldsBase):
    """Validated fields for an income entry."""
    model_config = ConfigDict(extra="forbid")

    kind: Literal["income"] = "income"
    category: Literal["income"] = INCOME_CATEGORY


EntryFields = Annotated[
    Union[ExpenseFields, IncomeFields],
    Field(discriminator="kind"),
]


# =============================================================================
# PERSISTED ENTRIES
# =============================================================================

class _EntryBase(_FieldsBase):
    """Identity and record-management fields shared by both variants."""

    id: str = Field(
        ...,
        min_length=1,
        description="Store-assigned identifier"
    )
    owner_id: str = Field(
        ...,
        min_length=1,
        description="Owning user"
    )
    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the record was created"
    )
    updated_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Last update timestamp"
    )

    @property
    def date_key(self) -> str:
        """The `YYYY-MM-DD` string entries are compared and sorted by."""
        return self.occurred_on.isoformat()


class ExpenseEntry(_EntryBase):
    """A stored expense, optionally split with another party."""

    kind: Literal["expense"] = "expense"
    category: Category
    split: Optional[SplitShare] = None

    @property
    def is_split(self) -> bool:
        return self.split is not None

    @property
    def net_amount(self) -> Decimal:
        """Out-of-pocket amount once a received split is taken off."""
        if self.split is not None and self.split.status == SplitStatus.RECEIVED:
            return self.amount - self.split.amount
        return self.amount


class IncomeEntry(_EntryBase):
    """A stored income entry."""
    model_config = ConfigDict(extra="forbid")

    kind: Literal["income"] = "income"
    category: Literal["income"] = INCOME_CATEGORY

    @property
    def is_split(self) -> bool:
        return False

    @property
    def net_amount(self) -> Decimal:
        return self.amount


Entry = Annotated[
    Union[ExpenseEntry, IncomeEntry],
    Field(discriminator="kind"),
]


def build_entry(
    fields: Union[ExpenseFields, IncomeFields],
    entry_id: str,
    owner_id: str,
    created_at: datetime,
    updated_at: datetime,
) -> Union[ExpenseEntry, IncomeEntry]:
    """Attach store-managed identity and timestamps to validated fields."""
    record = {
        **fields.model_dump(),
        "id": entry_id,
        "owner_id": owner_id,
        "created_at": created_at,
        "updated_at": updated_at,
    }
    if isinstance(fields, IncomeFields):
        return IncomeEntry(**record)
    return ExpenseEntry(**record)


# =============================================================================
# EDITOR DRAFT (unvalidated)
# =============================================================================

class EntryDraft(BaseModel):
    """
    Raw values as the entry editor submits them.

    CRITICAL: This is PROPOSED data, NOT verified.
    Every field is optional and loosely typed; only EntryValidator
    may turn a draft into EntryFields. Nothing here is coerced.
    """

    kind: Optional[str] = None
    amount: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    occurred_on: Optional[str] = None

    is_split: bool = False
    split_with: Optional[str] = None
    split_amount: Optional[str] = None
    split_status: Optional[str] = None

    @field_validator("amount", "split_amount", mode="before")
    @classmethod
    def keep_numbers_as_text(cls, v):
        """Accept numbers from programmatic callers but keep them textual."""
        if isinstance(v, (int, float, Decimal)) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("occurred_on", mode="before")
    @classmethod
    def keep_dates_as_text(cls, v):
        if isinstance(v, date):
            return v.isoformat()
        return v

    @classmethod
    def from_entry(cls, entry: Union[ExpenseEntry, IncomeEntry]) -> "EntryDraft":
        """Pre-fill the editor from a stored entry (edit flow)."""
        split = getattr(entry, "split", None)
        return cls(
            kind=entry.kind,
            amount=str(entry.amount),
            description=entry.description,
            category=entry.category.value
            if isinstance(entry.category, Category)
            else entry.category,
            occurred_on=entry.occurred_on.isoformat(),
            is_split=split is not None,
            split_with=split.party if split else None,
            split_amount=str(split.amount) if split else None,
            split_status=split.status.value if split else None,
        )


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_value', 'not_allowed')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )


class ValidationResult(BaseModel):
    """Result of validating one entry draft."""

    validated_at: datetime = Field(
        default_factory=datetime.utcnow
    )
    is_valid: bool = Field(
        ...,
        description="True when no error-level issue was found"
    )
    issues: list[ValidationIssue] = Field(
        default_factory=list,
        description="All validation issues found"
    )

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")

    @property
    def warnings(self) -> list[str]:
        return [i.message for i in self.issues if i.severity == "warning"]


# =============================================================================
# DERIVED VALUES
# =============================================================================

class Summary(BaseModel):
    """
    Aggregate totals over a set of entries.

    Derived on demand, never persisted.
    """
    model_config = ConfigDict(frozen=True)

    total_expense: Decimal = Decimal("0")
    total_income: Decimal = Decimal("0")
    total_split_pending: Decimal = Decimal("0")
    total_split_received: Decimal = Decimal("0")
    net_expense: Decimal = Decimal("0")

    @property
    def money_in(self) -> Decimal:
        """Income plus reimbursed split shares."""
        return self.total_income + self.total_split_received


class DataIntegrityError(Exception):
    """An entry that violates the ledger invariants reached the core."""

    def __init__(self, message: str, entry_id: Optional[str] = None):
        super().__init__(message)
        self.entry_id = entry_id
