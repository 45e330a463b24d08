"""
CSV Import / Export

Encodes the item list as CSV with the header `Name,Price,Source URL` and
decodes CSV back into Items.

Decoding is deliberately forgiving about headers (any case, a few common
spellings for the URL column) and strict about content: a row without a
name aborts the whole import. A half-imported price list is worse than
no import at all.
"""

import csv
import io
from typing import Iterable, Optional

from license_calculator.models.item import Item, format_price


CSV_HEADER = ["Name", "Price", "Source URL"]

# Normalized header -> Item field
_HEADER_ALIASES = {
    "name": "name",
    "price": "price",
    "source url": "source_url",
    "sourceurl": "source_url",
    "source_url": "source_url",
    "url": "source_url",
}


class TransferError(Exception):
    """Base exception for import/export."""
    pass


class CsvFormatError(TransferError):
    """The blob is not usable CSV (e.g. no name column)."""
    pass


class MissingFieldError(TransferError):
    """A data row is missing a required field."""

    def __init__(self, row_number: int, field: str = "name"):
        self.row_number = row_number
        self.field = field
        super().__init__(f"Row {row_number} is missing a {field}")


def _normalize_header(header: Optional[str]) -> str:
    return " ".join((header or "").strip().lower().split())


def encode_csv(items: Iterable[Item]) -> str:
    """
    Encode items as CSV text (with header row).

    Fields containing commas, quotes or newlines are quoted.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for item in items:
        writer.writerow([item.name, format_price(item.price), item.source_url])
    return buffer.getvalue()


def decode_csv(text: str) -> list[Item]:
    """
    Decode CSV text into Items.

    Args:
        text: CSV blob with a header row

    Returns:
        Items in file order

    Raises:
        CsvFormatError: If there is no recognizable name column
        MissingFieldError: If a data row has a blank name (1-indexed row number)
    """
    # Drop a UTF-8 BOM left behind by spreadsheet exports
    if text.startswith("\ufeff"):
        text = text[1:]

    reader = csv.reader(io.StringIO(text))
    try:
        headers = next(reader)
    except StopIteration:
        return []
    except csv.Error as e:
        raise CsvFormatError(f"Could not parse CSV: {e}") from e

    columns: dict[str, int] = {}
    for position, header in enumerate(headers):
        field = _HEADER_ALIASES.get(_normalize_header(header))
        if field and field not in columns:
            columns[field] = position

    if "name" not in columns:
        raise CsvFormatError("CSV has no 'Name' column")

    def cell(row: list[str], field: str) -> str:
        position = columns.get(field)
        if position is None or position >= len(row):
            return ""
        return row[position]

    items: list[Item] = []
    row_number = 0
    try:
        for row in reader:
            # Skip empty lines
            if not any(value.strip() for value in row):
                continue
            row_number += 1

            name = cell(row, "name").strip()
            if not name:
                raise MissingFieldError(row_number)

            items.append(Item(
                name=name,
                price=cell(row, "price"),
                source_url=cell(row, "source_url"),
            ))
    except csv.Error as e:
        raise CsvFormatError(f"Could not parse CSV near row {row_number + 1}: {e}") from e

    return items
