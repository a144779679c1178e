"""Shared pytest fixtures for Pocket Ledger tests."""

from datetime import date
from decimal import Decimal
from itertools import count

import pytest

from pocket_ledger.audit import AuditLogger
from pocket_ledger.config import AppSettings
from pocket_ledger.models.entry import (
    Category,
    EntryDraft,
    ExpenseEntry,
    IncomeEntry,
    SplitShare,
    SplitStatus,
)
from pocket_ledger.orchestrator import LedgerService
from pocket_ledger.services.storage import InMemoryAuditStorage, InMemoryEntryStore
from pocket_ledger.validation import EntryValidator


OWNER = "user-1"
TODAY = date(2026, 1, 15)


@pytest.fixture
def make_expense():
    """Factory for stored expense entries."""
    ids = count(1)

    def _make(
        amount="500",
        category=Category.FOOD,
        occurred_on=date(2026, 1, 5),
        description="Lunch",
        split_amount=None,
        split_status=SplitStatus.PENDING,
        split_with="Asha",
        owner_id=OWNER,
    ):
        split = None
        if split_amount is not None:
            split = SplitShare(
                party=split_with,
                amount=Decimal(split_amount),
                status=split_status,
            )
        return ExpenseEntry(
            id=f"e{next(ids)}",
            owner_id=owner_id,
            amount=Decimal(amount),
            description=description,
            category=category,
            occurred_on=occurred_on,
            split=split,
        )

    return _make


@pytest.fixture
def make_income():
    """Factory for stored income entries."""
    ids = count(1)

    def _make(
        amount="2000",
        occurred_on=date(2026, 1, 1),
        description="Salary",
        owner_id=OWNER,
    ):
        return IncomeEntry(
            id=f"i{next(ids)}",
            owner_id=owner_id,
            amount=Decimal(amount),
            description=description,
            occurred_on=occurred_on,
        )

    return _make


@pytest.fixture
def expense_draft():
    """A valid, unsplit expense draft as the editor submits it."""
    return EntryDraft(
        kind="expense",
        amount="250",
        description="Groceries",
        category="food",
        occurred_on="2026-01-10",
    )


@pytest.fixture
def app_settings():
    return AppSettings(
        max_entry_amount=100000.0,
        future_date_tolerance_days=31,
    )


@pytest.fixture
def validator(app_settings):
    return EntryValidator(settings=app_settings, today=TODAY)


@pytest.fixture
def store():
    return InMemoryEntryStore()


@pytest.fixture
def audit_storage():
    return InMemoryAuditStorage()


@pytest.fixture
def service(store, validator, audit_storage):
    return LedgerService(
        store=store,
        validator=validator,
        audit_logger=AuditLogger(audit_storage),
    )
