"""
Data Models Package

This package contains all Pydantic models used in the License Calculator.
All data flowing through the system must conform to these schemas.
"""

from license_calculator.models.item import (
    DisplayMode,
    Item,
    MatchResult,
    MatchState,
    Quote,
    ReorderRow,
    SaveOutcome,
    SaveStatus,
    ValidationIssue,
    ValidationResult,
    coerce_price,
    format_price,
)
from license_calculator.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Item models
    "DisplayMode",
    "Item",
    "MatchResult",
    "MatchState",
    "Quote",
    "ReorderRow",
    "SaveOutcome",
    "SaveStatus",
    "ValidationIssue",
    "ValidationResult",
    "coerce_price",
    "format_price",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
