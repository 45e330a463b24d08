"""
Audit Logger

DESIGN DECISION: Every storage round-trip and bulk change is logged.
This provides:
1. Traceability of what was saved and when
2. Debugging capability when a save or import fails
3. A recent-activity feed for the management page

The audit logger:
- Is async so it can await the audit storage
- Gracefully handles failures (doesn't crash the app if logging fails)
- Supports correlation IDs to trace related events
"""

from typing import Optional
from uuid import UUID, uuid4

import structlog

from license_calculator.models.audit import AuditEvent, AuditEventBuilder
from license_calculator.services.storage import AuditStorageInterface


# Configure structlog for local logging
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


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. Audit storage, if configured (for the activity feed)
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger(__name__)

    @property
    def storage(self) -> Optional[AuditStorageInterface]:
        return self._storage

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity.value == "error":
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        elif event.severity.value == "debug":
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return await self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def log_store_loaded(self, item_count: int) -> None:
        await self.log(AuditEventBuilder.store_loaded(item_count))

    async def log_store_load_failed(self, error_message: str) -> None:
        await self.log(AuditEventBuilder.store_load_failed(error_message))

    async def log_autosave(
        self,
        status: str,
        item_count: int,
        issues: Optional[list[dict]] = None,
        error_message: Optional[str] = None,
    ) -> None:
        """Log the outcome of one autosave cycle."""
        if status == "saved":
            event = AuditEventBuilder.autosave_completed(item_count)
        elif status == "skipped":
            event = AuditEventBuilder.autosave_skipped(item_count, issues or [])
        else:
            event = AuditEventBuilder.autosave_failed(
                item_count, error_message or "unknown error"
            )
        await self.log(event)

    async def log_item_added(self, index: int) -> None:
        await self.log(AuditEventBuilder.item_added(index))

    async def log_item_removed(self, index: int, name: str) -> None:
        await self.log(AuditEventBuilder.item_removed(index, name))

    async def log_items_reordered(self, item_count: int) -> None:
        await self.log(AuditEventBuilder.items_reordered(item_count))

    async def log_import_completed(
        self,
        item_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.import_completed(item_count, correlation_id))

    async def log_import_failed(
        self,
        error_message: str,
        row_number: Optional[int] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(
            AuditEventBuilder.import_failed(error_message, row_number, correlation_id)
        )

    async def log_export_completed(self, item_count: int) -> None:
        await self.log(AuditEventBuilder.export_completed(item_count))

    async def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        event = AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        )
        await self.log(event)


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a multi-step user action (e.g., CSV import).
    """
    return uuid4()
