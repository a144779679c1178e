"""
Ledger audit trail.

Each ledger action (create, edit, delete, month load, export, failure)
becomes one AuditEvent. The event is always written as a JSON log line
and, when audit storage is configured, appended to it as well. A broken
audit backend is logged and otherwise ignored: the ledger action that
produced the event has already happened.

Pass one correlation ID through all events of a single user action.
"""

import logging
from typing import Optional
from uuid import UUID, uuid4

import structlog

from pocket_ledger.models.audit import AuditEvent, AuditEventBuilder
from pocket_ledger.services.storage import AuditStorageInterface


# JSON lines with ISO timestamps, routed through stdlib logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

# Level of every `pocket_ledger.*` logger, set from `debug_mode`
LOGGER_ROOT = "pocket_ledger"


def configure_log_level(debug: bool) -> None:
    """Show debug lines (month loads and such) only in debug mode."""
    logging.getLogger(LOGGER_ROOT).setLevel(logging.DEBUG if debug else logging.INFO)


class AuditLogger:
    """
    Writes ledger audit events.

    Every event goes to the `pocket_ledger.audit` structlog logger and,
    if a storage backend was given, to that backend too.
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Args:
            storage: Where events are persisted. None keeps them local.
        """
        self._storage = storage
        self._logger = structlog.get_logger("pocket_ledger.audit")

    async def log(self, event: AuditEvent) -> bool:
        """
        Record one event.

        Returns False only when the storage backend rejected the event.
        """
        getattr(self._logger, event.severity.value)("audit_event", **event.to_log_dict())

        if self._storage is None:
            return True

        try:
            return await self._storage.append_event(event)
        except Exception as e:
            self._logger.error(
                "audit_storage_failed",
                error=str(e),
                event_id=str(event.event_id),
                event_type=event.event_type.value,
            )
            return False

    async def log_entry_created(
        self,
        entry_id: str,
        owner_id: str,
        kind: str,
        amount: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        event = AuditEventBuilder.entry_created(
            entry_id=entry_id,
            owner_id=owner_id,
            kind=kind,
            amount=amount,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_entry_updated(
        self,
        entry_id: str,
        owner_id: str,
        changed_fields: list[str],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        event = AuditEventBuilder.entry_updated(
            entry_id=entry_id,
            owner_id=owner_id,
            changed_fields=changed_fields,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_entry_deleted(
        self,
        entry_id: str,
        owner_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.entry_deleted(
            entry_id=entry_id,
            owner_id=owner_id,
            correlation_id=correlation_id,
        ))

    async def log_validation_failed(
        self,
        issues: list[dict],
        entry_id: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a rejected create or update."""
        event = AuditEventBuilder.validation_failed(
            issues=issues,
            entry_id=entry_id,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_month_loaded(
        self,
        owner_id: str,
        period: str,
        entry_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        event = AuditEventBuilder.month_loaded(
            owner_id=owner_id,
            period=period,
            entry_count=entry_count,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_export_generated(
        self,
        owner_id: str,
        filename: str,
        row_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        event = AuditEventBuilder.export_generated(
            owner_id=owner_id,
            filename=filename,
            row_count=row_count,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_store_error(
        self,
        operation: str,
        error_message: str,
        entry_id: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a store failure that is about to reach the caller."""
        event = AuditEventBuilder.store_error(
            operation=operation,
            error_message=error_message,
            entry_id=entry_id,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_data_integrity_error(
        self,
        error_message: str,
        entry_id: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        event = AuditEventBuilder.data_integrity_error(
            error_message=error_message,
            entry_id=entry_id,
            correlation_id=correlation_id,
        )
        await self.log(event)


def create_correlation_id() -> UUID:
    """New ID tying together the audit events of one user action."""
    return uuid4()
