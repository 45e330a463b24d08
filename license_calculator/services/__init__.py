"""Services package."""

from license_calculator.services.storage import (
    AuditStorageInterface,
    GoogleSheetsClient,
    GoogleSheetsItemStorage,
    InMemoryAuditStorage,
    InMemoryItemStorage,
    ItemStorageInterface,
    JsonFileItemStorage,
    StorageConnectionError,
    StorageError,
    StorageReadError,
    StorageWriteError,
)
from license_calculator.services.transfer import (
    CsvFormatError,
    MissingFieldError,
    TransferError,
    decode_csv,
    encode_csv,
)

__all__ = [
    # Storage services
    "AuditStorageInterface",
    "GoogleSheetsClient",
    "GoogleSheetsItemStorage",
    "InMemoryAuditStorage",
    "InMemoryItemStorage",
    "ItemStorageInterface",
    "JsonFileItemStorage",
    "StorageConnectionError",
    "StorageError",
    "StorageReadError",
    "StorageWriteError",
    # Import / export
    "CsvFormatError",
    "MissingFieldError",
    "TransferError",
    "decode_csv",
    "encode_csv",
]
