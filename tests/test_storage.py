"""Tests for storage backends (no real Google API calls)."""

import json
from unittest.mock import MagicMock, PropertyMock

import pytest

from license_calculator.config.settings import StorageSettings
from license_calculator.models.audit import AuditEventBuilder
from license_calculator.models.item import Item
from license_calculator.orchestrator import create_item_storage
from license_calculator.services.storage import (
    GoogleSheetsItemStorage,
    InMemoryAuditStorage,
    InMemoryItemStorage,
    JsonFileItemStorage,
)
from license_calculator.services.storage.google_sheets import ITEM_COLUMNS


class TestInMemoryStorage:
    """Tests for the in-memory backends."""

    @pytest.mark.asyncio
    async def test_round_trip(self, sample_items):
        storage = InMemoryItemStorage()
        await storage.write(sample_items)
        assert await storage.read() == sample_items
        assert storage.write_count == 1
        assert storage.read_count == 1

    @pytest.mark.asyncio
    async def test_audit_storage_is_bounded_and_newest_first(self):
        storage = InMemoryAuditStorage(max_events=2)
        for count in (1, 2, 3):
            await storage.append_event(AuditEventBuilder.store_loaded(count))

        events = await storage.get_recent_events()

        assert [event.details["item_count"] for event in events] == [3, 2]


class TestJsonFileStorage:
    """Tests for the local JSON file backend."""

    @pytest.mark.asyncio
    async def test_missing_file_reads_empty(self, tmp_path):
        storage = JsonFileItemStorage(tmp_path / "licenses.json")
        assert await storage.read() == []

    @pytest.mark.asyncio
    async def test_round_trip(self, tmp_path, sample_items):
        storage = JsonFileItemStorage(tmp_path / "data" / "licenses.json")
        await storage.write(sample_items)
        assert await storage.read() == sample_items

    @pytest.mark.asyncio
    async def test_file_format(self, tmp_path):
        path = tmp_path / "licenses.json"
        storage = JsonFileItemStorage(path)

        await storage.write([Item(name="Zoom", price="15.5", source_url="https://zoom.us")])

        data = json.loads(path.read_text(encoding="utf-8"))
        assert data == {
            "licenses": [{"name": "Zoom", "price": 15.5, "sourceUrl": "https://zoom.us"}]
        }
        assert not path.with_suffix(".json.tmp").exists()

    @pytest.mark.asyncio
    async def test_reads_browser_extension_export(self, tmp_path):
        path = tmp_path / "licenses.json"
        path.write_text(json.dumps({
            "licenses": [{"name": " Slack ", "price": "8.75", "sourceUrl": ""}]
        }), encoding="utf-8")

        items = await JsonFileItemStorage(path).read()

        assert items == [Item(name="Slack", price="8.75")]

    @pytest.mark.asyncio
    async def test_rejects_non_object_document(self, tmp_path):
        path = tmp_path / "licenses.json"
        path.write_text("[]", encoding="utf-8")
        with pytest.raises(ValueError):
            await JsonFileItemStorage(path).read()


class TestGoogleSheetsStorage:
    """Tests for the Google Sheets backend with a mocked client."""

    def _storage(self, rows):
        sheet = MagicMock()
        sheet.get_all_values.return_value = rows
        client = MagicMock()
        client.get_items_sheet.return_value = sheet
        return GoogleSheetsItemStorage(client), sheet

    @pytest.mark.asyncio
    async def test_read_skips_header_and_blank_rows(self):
        storage, _ = self._storage([
            ITEM_COLUMNS,
            ["Slack Pro", "8.75", "https://slack.com"],
            ["", "", ""],
            ["Zoom"],
        ])

        items = await storage.read()

        assert items == [
            Item(name="Slack Pro", price="8.75", source_url="https://slack.com"),
            Item(name="Zoom"),
        ]

    @pytest.mark.asyncio
    async def test_write_overwrites_in_place(self):
        storage, sheet = self._storage([ITEM_COLUMNS])

        await storage.write([Item(name="Zoom", price=15)])

        sheet.update.assert_called_once_with(
            values=[ITEM_COLUMNS, ["Zoom", "15", ""]],
            range_name="A1",
            value_input_option="RAW",
        )
        sheet.clear.assert_not_called()
        sheet.batch_clear.assert_not_called()

    @pytest.mark.asyncio
    async def test_write_clears_rows_left_from_longer_list(self):
        storage, sheet = self._storage([
            ITEM_COLUMNS,
            ["Slack Pro", "8.75", ""],
            ["Zoom", "15", ""],
            ["Figma", "12", ""],
        ])

        await storage.write([Item(name="Zoom", price=15)])

        sheet.batch_clear.assert_called_once_with(["A3:C4"])

    @pytest.mark.asyncio
    async def test_failed_write_keeps_previous_rows(self):
        """Test that a failed update never leaves the sheet emptied."""
        storage, sheet = self._storage([ITEM_COLUMNS, ["Slack Pro", "8.75", ""]])
        sheet.update.side_effect = ConnectionError("quota exceeded")

        with pytest.raises(ConnectionError):
            await storage.write([Item(name="Zoom", price=15)])

        sheet.clear.assert_not_called()
        sheet.batch_clear.assert_not_called()


class TestCreateItemStorage:
    """Tests for backend selection."""

    def _settings(self, **storage_values):
        settings = MagicMock()
        settings.storage = StorageSettings(**storage_values)
        return settings

    def test_memory_backend(self):
        assert isinstance(create_item_storage(self._settings(backend="memory")), InMemoryItemStorage)

    def test_json_backend(self, tmp_path):
        path = tmp_path / "x.json"
        storage = create_item_storage(self._settings(backend="JSON", json_path=str(path)))
        assert isinstance(storage, JsonFileItemStorage)
        assert storage.path == path

    def test_unconfigured_sheets_falls_back_to_memory(self):
        settings = self._settings(backend="google_sheets")
        type(settings).google_sheets = PropertyMock(
            side_effect=ValueError("missing spreadsheet_id")
        )
        assert isinstance(create_item_storage(settings), InMemoryItemStorage)
