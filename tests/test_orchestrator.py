"""
Integration tests for the management flow and component wiring.

All storage is in memory; timers run on a ManualScheduler.
"""

import pytest

from license_calculator.audit import AuditLogger
from license_calculator.models.audit import AuditEventType
from license_calculator.models.item import DisplayMode, Item, ReorderRow, SaveStatus
from license_calculator.orchestrator import (
    ItemManager,
    create_app_components,
    sanitize_price_input,
)
from license_calculator.services.storage import (
    StorageReadError,
    StorageWriteError,
)
from license_calculator.services.transfer import CsvFormatError, MissingFieldError
from license_calculator.state import AutosavePipeline, Store


@pytest.fixture
def manager(memory_storage, scheduler, audit_storage):
    store = Store(memory_storage)
    audit_logger = AuditLogger(audit_storage)
    autosave = AutosavePipeline(store, scheduler, delay_ms=800, audit_logger=audit_logger)
    return ItemManager(store, autosave, audit_logger=audit_logger)


async def _event_types(audit_storage):
    return [event.event_type for event in await audit_storage.get_recent_events()]


class TestSanitizePriceInput:
    """Tests for price box filtering."""

    @pytest.mark.parametrize("raw, expected", [
        ("12.50", "12.50"),
        ("$1,200", "1,200"),
        ("abc", ""),
        ("-3e5", "35"),
        ("", ""),
    ])
    def test_sanitize(self, raw, expected):
        assert sanitize_price_input(raw) == expected


class TestItemManagerEditing:
    """Tests for load, add and edit."""

    @pytest.mark.asyncio
    async def test_load_rehydrates_store(self, manager, sample_items, audit_storage):
        items = await manager.load()
        assert list(items) == sample_items
        assert await _event_types(audit_storage) == [AuditEventType.STORE_LOADED]

    @pytest.mark.asyncio
    async def test_load_failure_is_audited_and_raised(self, scheduler, audit_storage, failing_storage):
        store = Store(failing_storage(fail_reads=True))
        audit_logger = AuditLogger(audit_storage)
        manager = ItemManager(store, AutosavePipeline(store, scheduler), audit_logger=audit_logger)

        with pytest.raises(StorageReadError):
            await manager.load()

        assert await _event_types(audit_storage) == [AuditEventType.STORE_LOAD_FAILED]

    @pytest.mark.asyncio
    async def test_blank_row_is_not_saved_until_named(self, manager, memory_storage, scheduler):
        """Test the add -> (skip) -> name -> save cycle."""
        await manager.load()
        await manager.add_blank()

        scheduler.advance(800)
        outcome = await manager.autosave.drain()
        assert outcome.status == SaveStatus.SKIPPED
        assert memory_storage.write_count == 0

        manager.edit(3, name="Figma Professional", price="15")
        scheduler.advance(800)
        outcome = await manager.autosave.drain()

        assert outcome.status == SaveStatus.SAVED
        assert memory_storage.items[-1] == Item(name="Figma Professional", price=15)

    @pytest.mark.asyncio
    async def test_edit_merges_fields_and_filters_price(self, manager):
        await manager.load()

        assert manager.edit(1, price="$1,5x") is True

        item = manager.store.get_all()[1]
        assert item.name == "Slack Pro"
        assert str(item.price) == "1"
        assert manager.autosave.pending is True

    @pytest.mark.asyncio
    async def test_edit_out_of_range_is_noop(self, manager):
        await manager.load()
        assert manager.edit(10, name="Nope") is False
        assert manager.autosave.pending is False

    @pytest.mark.asyncio
    async def test_edit_rejects_unknown_fields(self, manager):
        await manager.load()
        with pytest.raises(TypeError):
            manager.edit(0, colour="red")

    @pytest.mark.asyncio
    async def test_validate_flags_blank_rows(self, manager):
        await manager.load()
        await manager.add_blank()
        result = manager.validate()
        assert result.has_errors is True
        assert result.issues[0].index == 3
        assert "Item 4 has no name" in manager.validation_summary()


class TestItemManagerRemoval:
    """Tests for two-step removal."""

    @pytest.mark.asyncio
    async def test_confirm_removes_requested_item(self, manager, audit_storage):
        await manager.load()

        assert manager.request_removal(1) == "Slack Pro"
        removed = await manager.confirm_removal()

        assert removed.name == "Slack Pro"
        assert [item.name for item in manager.store.get_all()] == [
            "Adobe Creative Cloud Pro",
            "Zoom Workplace",
        ]
        assert manager.pending_removal is None
        assert AuditEventType.ITEM_REMOVED in await _event_types(audit_storage)

    @pytest.mark.asyncio
    async def test_blank_name_uses_fallback(self, manager):
        await manager.add_blank()
        assert manager.request_removal(0) == "this license"

    @pytest.mark.asyncio
    async def test_cancel_keeps_item(self, manager):
        await manager.load()
        manager.request_removal(0)
        manager.cancel_removal()

        assert await manager.confirm_removal() is None
        assert len(manager.store) == 3

    @pytest.mark.asyncio
    async def test_pending_removal_follows_item_not_position(self, manager):
        """Test that rows shifting under the dialog do not change what is removed."""
        await manager.load()
        manager.request_removal(2)
        manager.store.remove(0)

        removed = await manager.confirm_removal()

        assert removed.name == "Zoom Workplace"
        assert [item.name for item in manager.store.get_all()] == ["Slack Pro"]

    @pytest.mark.asyncio
    async def test_request_out_of_range(self, manager):
        assert manager.request_removal(0) is None


class TestItemManagerBulk:
    """Tests for reorder and CSV import/export."""

    @pytest.mark.asyncio
    async def test_reorder(self, manager, memory_storage, audit_storage):
        await manager.load()
        entries = manager.store.entries()
        rows = [
            ReorderRow(key=key, name=item.name, price=item.price, source_url=item.source_url)
            for key, item in (entries[2], entries[0], entries[1])
        ]

        result = await manager.reorder(rows)

        assert [item.name for item in result] == [
            "Zoom Workplace",
            "Adobe Creative Cloud Pro",
            "Slack Pro",
        ]
        assert memory_storage.items == list(result)
        assert AuditEventType.ITEMS_REORDERED in await _event_types(audit_storage)

    @pytest.mark.asyncio
    async def test_import_replaces_list(self, manager, memory_storage, audit_storage):
        await manager.load()

        items = await manager.import_csv("Name,Price,Source URL\nFigma,15,https://figma.com\n")

        assert items == (Item(name="Figma", price=15, source_url="https://figma.com"),)
        assert memory_storage.items == list(items)
        assert manager.autosave.pending is True
        assert AuditEventType.IMPORT_COMPLETED in await _event_types(audit_storage)

    @pytest.mark.asyncio
    async def test_import_with_missing_name_changes_nothing(self, manager, sample_items, audit_storage):
        await manager.load()

        with pytest.raises(MissingFieldError) as exc_info:
            await manager.import_csv("Name,Price\nFigma,15\n,20\n")

        assert exc_info.value.row_number == 2
        assert list(manager.store.get_all()) == sample_items
        assert manager.autosave.pending is False
        events = await audit_storage.get_recent_events()
        assert events[0].event_type == AuditEventType.IMPORT_FAILED
        assert events[0].details["row_number"] == 2

    @pytest.mark.asyncio
    async def test_import_without_name_column(self, manager):
        with pytest.raises(CsvFormatError):
            await manager.import_csv("Title\nFigma\n")

    @pytest.mark.asyncio
    async def test_import_write_failure_keeps_new_list(self, scheduler, failing_storage):
        store = Store(failing_storage(), [Item(name="Old")])
        autosave = AutosavePipeline(store, scheduler)
        manager = ItemManager(store, autosave)

        with pytest.raises(StorageWriteError):
            await manager.import_csv("Name\nNew\n")

        assert [item.name for item in store.get_all()] == ["New"]
        assert autosave.pending is True

    @pytest.mark.asyncio
    async def test_export_then_import_round_trip(self, manager, sample_items):
        await manager.load()
        text = await manager.export_csv()

        items = await manager.import_csv(text)

        assert list(items) == sample_items


class TestCreateAppComponents:
    """Tests for the component factory."""

    @pytest.mark.asyncio
    async def test_components_share_one_store(self, memory_storage, scheduler):
        store, manager, console, audit_logger = create_app_components(
            storage=memory_storage,
            scheduler=scheduler,
        )

        assert manager.store is store
        assert audit_logger.storage is not None

        await manager.load()
        console.search_now("slack")
        console.select(0)
        assert console.set_quantity("2").mode == DisplayMode.PRICED

        manager.edit(1, price="10")
        assert console.quote().total == 240

    @pytest.mark.asyncio
    async def test_console_selection_cleared_by_management_removal(self, memory_storage, scheduler):
        _, manager, console, _ = create_app_components(
            storage=memory_storage,
            scheduler=scheduler,
        )
        await manager.load()
        console.search_now("zoom")
        console.select(0)

        manager.request_removal(2)
        await manager.confirm_removal()

        assert console.selected_item is None

    def test_uses_configured_debounce(self, memory_storage, scheduler, monkeypatch, tmp_path):
        from license_calculator.config import get_settings

        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("AUTOSAVE_DEBOUNCE_MS", "100")
        get_settings.cache_clear()
        try:
            store, manager, _, _ = create_app_components(
                storage=memory_storage,
                scheduler=scheduler,
            )
            store.add(Item())
            manager.autosave.trigger()
            assert scheduler.pending_count == 1
            scheduler.advance(99)
            assert manager.autosave.pending is True
        finally:
            get_settings.cache_clear()
