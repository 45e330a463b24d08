"""
Abstract Storage Interface

DESIGN DECISION: The Store never talks to a concrete backend directly.
This allows us to:
1. Swap the local JSON file for Google Sheets (or anything else)
2. Use in-memory storage for testing
3. Keep the reactive Store decoupled from I/O

The interface is intentionally tiny: the whole ordered list is read and
written at once. The Store is the source of truth; storage is a durable
mirror of it.
"""

from abc import ABC, abstractmethod
from typing import Sequence

from license_calculator.models.audit import AuditEvent
from license_calculator.models.item import Item


class ItemStorageInterface(ABC):
    """
    Abstract interface for item list storage.

    Any storage implementation (JSON file, Google Sheets, etc.)
    must implement these methods. Implementations may raise any exception
    on transport failure; the Store wraps it into a StorageError.
    """

    @abstractmethod
    async def read(self) -> list[Item]:
        """
        Read the full ordered item list.

        Returns:
            Stored items in persisted order ([] when nothing is stored)
        """
        pass

    @abstractmethod
    async def write(self, items: Sequence[Item]) -> None:
        """
        Replace the stored item list with `items`, preserving order.

        Args:
            items: The complete ordered item list
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """
        Get the most recent audit events.

        Returns:
            List of recent events (newest first)
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class StorageReadError(StorageError):
    """The storage backend rejected a read."""
    pass


class StorageWriteError(StorageError):
    """The storage backend rejected a write."""
    pass


class StorageConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
