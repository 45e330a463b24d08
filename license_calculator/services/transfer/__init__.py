"""Tabular import/export package."""

from license_calculator.services.transfer.csv_codec import (
    CSV_HEADER,
    CsvFormatError,
    MissingFieldError,
    TransferError,
    decode_csv,
    encode_csv,
)

__all__ = [
    "CSV_HEADER",
    "CsvFormatError",
    "MissingFieldError",
    "TransferError",
    "decode_csv",
    "encode_csv",
]
