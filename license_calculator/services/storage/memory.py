"""
In-Memory Storage

Used by tests and by sessions that run without any configured backend.
Items are immutable, so keeping the list as a tuple is a full snapshot.
"""

from collections import deque
from typing import Iterable, Optional, Sequence

from license_calculator.models.audit import AuditEvent
from license_calculator.models.item import Item
from license_calculator.services.storage.interface import (
    AuditStorageInterface,
    ItemStorageInterface,
)


class InMemoryItemStorage(ItemStorageInterface):
    """Keeps the item list in process memory."""

    def __init__(self, items: Optional[Iterable[Item]] = None):
        self._items: tuple[Item, ...] = tuple(items or ())
        self.read_count = 0
        self.write_count = 0

    async def read(self) -> list[Item]:
        self.read_count += 1
        return list(self._items)

    async def write(self, items: Sequence[Item]) -> None:
        self.write_count += 1
        self._items = tuple(items)

    @property
    def items(self) -> list[Item]:
        return list(self._items)


class InMemoryAuditStorage(AuditStorageInterface):
    """
    Bounded in-memory audit log.

    Backs the "recent activity" panel; the oldest events fall off once
    `max_events` is reached.
    """

    def __init__(self, max_events: int = 500):
        self._events: deque[AuditEvent] = deque(maxlen=max_events)

    async def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True

    async def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        return list(reversed(self._events))[:limit]
