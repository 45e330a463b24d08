"""
Audit Models for License Calculator

Every storage round-trip and bulk change is logged as an audit event.
This provides:
1. Traceability of what was written and when
2. Debugging information when a save or import fails
3. A recent-activity feed for the management page

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Store lifecycle
    STORE_LOADED = "store_loaded"
    STORE_LOAD_FAILED = "store_load_failed"

    # Autosave
    AUTOSAVE_COMPLETED = "autosave_completed"
    AUTOSAVE_SKIPPED = "autosave_skipped"
    AUTOSAVE_FAILED = "autosave_failed"

    # Management actions
    ITEM_ADDED = "item_added"
    ITEM_REMOVED = "item_removed"
    ITEMS_REORDERED = "items_reordered"

    # Import / export
    IMPORT_COMPLETED = "import_completed"
    IMPORT_FAILED = "import_failed"
    EXPORT_COMPLETED = "export_completed"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., one import)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.store_loaded(item_count=12)
        event = AuditEventBuilder.import_failed("Row 3 is missing a name")
    """

    @staticmethod
    def store_loaded(item_count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORE_LOADED,
            description=f"Loaded {item_count} items from storage",
            details={"item_count": item_count},
        )

    @staticmethod
    def store_load_failed(error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORE_LOAD_FAILED,
            severity=AuditSeverity.ERROR,
            description="Failed to load items from storage",
            error_message=error_message,
        )

    @staticmethod
    def autosave_completed(item_count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.AUTOSAVE_COMPLETED,
            description=f"Saved {item_count} items",
            details={"item_count": item_count},
        )

    @staticmethod
    def autosave_skipped(item_count: int, issues: list[dict]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.AUTOSAVE_SKIPPED,
            severity=AuditSeverity.DEBUG,
            description=f"Autosave skipped: {len(issues)} blocking issues",
            details={
                "item_count": item_count,
                "issues": issues,
            },
        )

    @staticmethod
    def autosave_failed(item_count: int, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.AUTOSAVE_FAILED,
            severity=AuditSeverity.ERROR,
            description="Autosave failed",
            error_message=error_message,
            details={"item_count": item_count},
        )

    @staticmethod
    def item_added(index: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ITEM_ADDED,
            description=f"Blank row added at position {index + 1}",
            details={"index": index},
            is_user_action=True,
        )

    @staticmethod
    def item_removed(index: int, name: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ITEM_REMOVED,
            description=f"Removed '{name}'",
            details={"index": index, "name": name},
            is_user_action=True,
        )

    @staticmethod
    def items_reordered(item_count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ITEMS_REORDERED,
            description=f"Reordered {item_count} items",
            details={"item_count": item_count},
            is_user_action=True,
        )

    @staticmethod
    def import_completed(
        item_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.IMPORT_COMPLETED,
            correlation_id=correlation_id,
            description=f"Imported {item_count} items from CSV",
            details={"item_count": item_count},
            is_user_action=True,
        )

    @staticmethod
    def import_failed(
        error_message: str,
        row_number: Optional[int] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.IMPORT_FAILED,
            severity=AuditSeverity.WARNING,
            correlation_id=correlation_id,
            description="CSV import aborted",
            error_message=error_message,
            details={"row_number": row_number},
            is_user_action=True,
        )

    @staticmethod
    def export_completed(item_count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPORT_COMPLETED,
            description=f"Exported {item_count} items to CSV",
            details={"item_count": item_count},
            is_user_action=True,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
