"""
Storage Services Package

Provides the abstract storage interface and concrete backends for the
item list: in-memory, local JSON file and Google Sheets.
"""

from license_calculator.services.storage.interface import (
    AuditStorageInterface,
    ItemStorageInterface,
    StorageConnectionError,
    StorageError,
    StorageReadError,
    StorageWriteError,
)
from license_calculator.services.storage.memory import (
    InMemoryAuditStorage,
    InMemoryItemStorage,
)
from license_calculator.services.storage.json_file import JsonFileItemStorage
from license_calculator.services.storage.google_sheets import (
    GoogleSheetsClient,
    GoogleSheetsItemStorage,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "ItemStorageInterface",
    # Exceptions
    "StorageConnectionError",
    "StorageError",
    "StorageReadError",
    "StorageWriteError",
    # Implementations
    "InMemoryAuditStorage",
    "InMemoryItemStorage",
    "JsonFileItemStorage",
    "GoogleSheetsClient",
    "GoogleSheetsItemStorage",
]
