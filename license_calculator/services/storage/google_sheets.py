"""
Google Sheets Storage Implementation

DESIGN DECISION: Google Sheets is offered as a shared backend because:
1. Non-technical users can view and edit the price list directly in Sheets
2. No database setup required
3. Built-in backup (Google's infrastructure)

TRADEOFFS:
- Every write rewrites the whole sheet (the list is small), then clears
  rows left over from a longer list
- No transactions (the Store serializes its own writes)

Only establishing the connection is retried. Reads and writes are not:
a failed save is retried by the next user edit, never automatically.
"""

import asyncio
from typing import Optional, Sequence

import gspread
from gspread.utils import rowcol_to_a1
from google.oauth2.service_account import Credentials
from tenacity import retry, stop_after_attempt, wait_exponential

from license_calculator.config import get_settings
from license_calculator.config.settings import GoogleSheetsSettings
from license_calculator.models.item import Item, format_price
from license_calculator.services.storage.interface import (
    ItemStorageInterface,
    StorageConnectionError,
)


# Column mappings for the items sheet (same header as the CSV export)
ITEM_COLUMNS = [
    "Name",
    "Price",
    "Source URL",
]


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for connecting.
    """

    def __init__(self, settings: Optional[GoogleSheetsSettings] = None):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = settings or get_settings().google_sheets

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.

        Uses service account credentials for authentication.
        """
        if self._client is None:
            try:
                scopes = [
                    "https://www.googleapis.com/auth/spreadsheets",
                    "https://www.googleapis.com/auth/drive",
                ]
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=scopes,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError:
                raise StorageConnectionError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise StorageConnectionError(f"Failed to connect to Google Sheets: {e}")

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(
                    self._settings.spreadsheet_id
                )
            except gspread.SpreadsheetNotFound:
                raise StorageConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def get_items_sheet(self) -> gspread.Worksheet:
        """Get or create the items worksheet."""
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(self._settings.items_sheet_name)
        except gspread.WorksheetNotFound:
            # Create the sheet with headers
            sheet = spreadsheet.add_worksheet(
                title=self._settings.items_sheet_name,
                rows=500,
                cols=len(ITEM_COLUMNS),
            )
            sheet.append_row(ITEM_COLUMNS)
        return sheet


class GoogleSheetsItemStorage(ItemStorageInterface):
    """
    Google Sheets implementation of item storage.

    One item per row, below a header row. Row order is list order.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    @staticmethod
    def _item_to_row(item: Item) -> list:
        """Convert an Item to a spreadsheet row."""
        return [item.name, format_price(item.price), item.source_url]

    @staticmethod
    def _row_to_item(row: list) -> Item:
        """Convert a spreadsheet row to an Item."""
        # Handle missing columns gracefully
        def safe_get(index: int) -> str:
            try:
                return row[index]
            except IndexError:
                return ""

        return Item(name=safe_get(0), price=safe_get(1), source_url=safe_get(2))

    def _read_sync(self) -> list[Item]:
        sheet = self._client.get_items_sheet()
        # Skip the header, and rows that are entirely blank
        rows = sheet.get_all_values()[1:]
        return [self._row_to_item(row) for row in rows if any(cell.strip() for cell in row)]

    def _write_sync(self, items: Sequence[Item]) -> None:
        sheet = self._client.get_items_sheet()
        previous_row_count = len(sheet.get_all_values())
        values = [ITEM_COLUMNS] + [self._item_to_row(item) for item in items]

        # Leftover rows are cleared only after the new values are written.
        sheet.update(values=values, range_name="A1", value_input_option="RAW")

        if previous_row_count > len(values):
            first = rowcol_to_a1(len(values) + 1, 1)
            last = rowcol_to_a1(previous_row_count, len(ITEM_COLUMNS))
            sheet.batch_clear([f"{first}:{last}"])

    async def read(self) -> list[Item]:
        return await asyncio.to_thread(self._read_sync)

    async def write(self, items: Sequence[Item]) -> None:
        await asyncio.to_thread(self._write_sync, list(items))
