"""Tests for the audit logger."""

import logging

import pytest

from pocket_ledger.audit import AuditLogger, create_correlation_id
from pocket_ledger.models.audit import AuditEventBuilder, AuditEventType, AuditSeverity
from pocket_ledger.services.storage import InMemoryAuditStorage, StoreUnavailableError


class FailingAuditStorage(InMemoryAuditStorage):
    async def append_event(self, event):
        raise StoreUnavailableError("audit sheet unavailable")


class TestAuditLogger:
    """Tests for AuditLogger."""

    @pytest.mark.asyncio
    async def test_persists_event(self):
        storage = InMemoryAuditStorage()
        audit = AuditLogger(storage)
        event = AuditEventBuilder.entry_deleted("e1", "u1")

        assert await audit.log(event) is True
        assert storage.events == [event]

    @pytest.mark.asyncio
    async def test_without_storage(self):
        """Test local-only logging still reports success."""
        audit = AuditLogger()
        assert await audit.log(AuditEventBuilder.entry_deleted("e1", "u1")) is True

    @pytest.mark.asyncio
    async def test_storage_failure_is_not_raised(self):
        """Test a broken audit backend never fails the ledger action."""
        audit = AuditLogger(FailingAuditStorage())
        assert await audit.log(AuditEventBuilder.entry_deleted("e1", "u1")) is False

    @pytest.mark.asyncio
    async def test_helpers_build_expected_events(self):
        storage = InMemoryAuditStorage()
        audit = AuditLogger(storage)
        correlation_id = create_correlation_id()

        await audit.log_month_loaded("u1", "2026-01", 4, correlation_id=correlation_id)
        await audit.log_store_error("query", "timeout", correlation_id=correlation_id)
        await audit.log_data_integrity_error("bad amount", entry_id="e9")

        loaded, store_error, integrity = storage.events
        assert loaded.event_type == AuditEventType.MONTH_LOADED
        assert loaded.severity == AuditSeverity.DEBUG
        assert loaded.details == {"entry_count": 4}
        assert store_error.correlation_id == correlation_id
        assert store_error.severity == AuditSeverity.ERROR
        assert integrity.severity == AuditSeverity.CRITICAL
        assert integrity.entity_id == "e9"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("severity", list(AuditSeverity))
    async def test_logged_at_event_severity(self, severity, caplog):
        caplog.set_level(logging.DEBUG, logger="pocket_ledger")
        event = AuditEventBuilder.entry_deleted("e1", "u1").model_copy(
            update={"severity": severity}
        )

        assert await AuditLogger().log(event) is True
        records = [r for r in caplog.records if r.name == "pocket_ledger.audit"]
        assert [r.levelname for r in records] == [severity.value.upper()]
