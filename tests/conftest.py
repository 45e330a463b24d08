"""Shared fixtures for License Calculator tests."""

from typing import Sequence

import pytest

from license_calculator.models.item import Item
from license_calculator.services.storage import (
    InMemoryAuditStorage,
    InMemoryItemStorage,
    ItemStorageInterface,
)
from license_calculator.state import ManualScheduler


class FailingItemStorage(ItemStorageInterface):
    """Storage whose reads and/or writes always fail."""

    def __init__(self, fail_reads: bool = False, fail_writes: bool = True):
        self.fail_reads = fail_reads
        self.fail_writes = fail_writes
        self.write_count = 0

    async def read(self) -> list[Item]:
        if self.fail_reads:
            raise ConnectionError("backend unavailable")
        return []

    async def write(self, items: Sequence[Item]) -> None:
        self.write_count += 1
        if self.fail_writes:
            raise ConnectionError("backend unavailable")


@pytest.fixture
def sample_items() -> list[Item]:
    return [
        Item(name="Adobe Creative Cloud Pro", price=60, source_url="https://adobe.com/pricing"),
        Item(name="Slack Pro", price="8.75"),
        Item(name="Zoom Workplace", price=0, source_url="https://zoom.us/pricing"),
    ]


@pytest.fixture
def memory_storage(sample_items) -> InMemoryItemStorage:
    return InMemoryItemStorage(sample_items)


@pytest.fixture
def audit_storage() -> InMemoryAuditStorage:
    return InMemoryAuditStorage()


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def failing_storage():
    """Factory for storages that fail on read and/or write."""
    return FailingItemStorage
