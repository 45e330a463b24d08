"""
Main Orchestrator for License Calculator

This module ties together all the components and defines the flows of the
two UI surfaces:
1. Search console (query -> select -> quote), see search.console
2. Item management (edit, add, remove, reorder, import/export)

DESIGN DECISION: Both surfaces share one Store instance, created here and
passed by reference. Edits made on the management page reach the console
through the Store's subscriptions, never through the UI layer.

Every write path ends in the AutosavePipeline or Store.set_all, so the
validity gate (no nameless rows in storage) is enforced in one place.
"""

from typing import Optional

import structlog

from license_calculator.audit import AuditLogger, create_correlation_id
from license_calculator.config import get_settings
from license_calculator.config.settings import Settings
from license_calculator.models.item import (
    Item,
    ReorderRow,
    ValidationResult,
)
from license_calculator.search import SearchConsole
from license_calculator.services.storage import (
    GoogleSheetsClient,
    GoogleSheetsItemStorage,
    InMemoryAuditStorage,
    InMemoryItemStorage,
    ItemStorageInterface,
    JsonFileItemStorage,
    StorageReadError,
)
from license_calculator.services.transfer import (
    MissingFieldError,
    TransferError,
    decode_csv,
    encode_csv,
)
from license_calculator.state import (
    AsyncioScheduler,
    AutosavePipeline,
    ReorderReconciler,
    Scheduler,
    Store,
)
from license_calculator.validation import ItemValidator


logger = structlog.get_logger(__name__)

REMOVAL_FALLBACK_NAME = "this license"


def sanitize_price_input(text: str) -> str:
    """
    Keep only the characters a price box accepts: digits, ',' and '.'.
    """
    return "".join(ch for ch in (text or "") if ch.isdigit() or ch in ",.")


class ItemManager:
    """
    Orchestrates the item management surface.

    Flow per edit:
    1. Field edit → Store.update (subscribers re-render)
    2. → AutosavePipeline.trigger (debounced)
    3. → validate → persist, or skip while a row has no name

    Removal is two-step: request (show the name in a confirmation), then
    confirm or cancel. The pending removal is held by key, so rows shifting
    underneath the dialog cannot make it delete the wrong item.
    """

    def __init__(
        self,
        store: Store,
        autosave: AutosavePipeline,
        reconciler: Optional[ReorderReconciler] = None,
        validator: Optional[ItemValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._store = store
        self._autosave = autosave
        self._audit_logger = audit_logger
        self._reconciler = reconciler or ReorderReconciler(store, autosave, audit_logger)
        self._validator = validator or ItemValidator()
        self._pending_removal: Optional[str] = None

    @property
    def store(self) -> Store:
        return self._store

    @property
    def autosave(self) -> AutosavePipeline:
        return self._autosave

    @property
    def pending_removal(self) -> Optional[str]:
        return self._pending_removal

    async def load(self) -> tuple[Item, ...]:
        """
        Rehydrate the Store from storage.

        Raises:
            StorageReadError: The Store keeps its current contents
        """
        try:
            items = await self._store.load()
        except StorageReadError as e:
            if self._audit_logger:
                await self._audit_logger.log_store_load_failed(str(e))
            raise

        if self._audit_logger:
            await self._audit_logger.log_store_loaded(len(items))
        return items

    async def add_blank(self) -> str:
        """Append an empty row. Nothing is written until it has a name."""
        key = self._store.add(Item())
        self._autosave.trigger()
        if self._audit_logger:
            await self._audit_logger.log_item_added(len(self._store) - 1)
        return key

    def edit(self, index: int, **fields) -> bool:
        """
        Field-level edit of the row at `index`.

        Accepts any of name, price, source_url. Price text is filtered to the
        characters a price box accepts before it is parsed.

        Returns:
            False if the index no longer exists (no-op)
        """
        key = self._store.key_at(index)
        if key is None:
            return False
        return self.edit_by_key(key, **fields)

    def edit_by_key(self, key: str, **fields) -> bool:
        current = self._store.get(key)
        if current is None:
            return False

        unknown = set(fields) - {"name", "price", "source_url"}
        if unknown:
            raise TypeError(f"Unknown item fields: {', '.join(sorted(unknown))}")

        price = fields.get("price", current.price)
        if isinstance(price, str):
            price = sanitize_price_input(price)

        updated = Item(
            name=fields.get("name", current.name),
            price=price,
            source_url=fields.get("source_url", current.source_url),
        )
        self._store.update_by_key(key, updated)
        self._autosave.trigger()
        return True

    def request_removal(self, index: int) -> Optional[str]:
        """
        Start removing the row at `index`.

        Returns:
            The name to show in the confirmation, or None if the row is gone
        """
        key = self._store.key_at(index)
        if key is None:
            return None
        self._pending_removal = key
        item = self._store.get(key)
        return item.name if item and item.name else REMOVAL_FALLBACK_NAME

    def cancel_removal(self) -> None:
        self._pending_removal = None

    async def confirm_removal(self) -> Optional[Item]:
        """Remove the row chosen by request_removal(), if it still exists."""
        key = self._pending_removal
        self._pending_removal = None
        if key is None:
            return None

        index = self._store.index_of(key)
        removed = self._store.remove_by_key(key)
        if removed is None:
            return None

        self._autosave.trigger()
        if self._audit_logger:
            await self._audit_logger.log_item_removed(index, removed.name)
        return removed

    async def reorder(self, rows: list[ReorderRow]) -> tuple[Item, ...]:
        """
        Apply a drag-reorder result.

        Raises:
            StorageWriteError: The new order is kept in memory
        """
        return await self._reconciler.reconcile(rows)

    async def import_csv(self, text: str) -> tuple[Item, ...]:
        """
        Replace the whole list with the contents of a CSV blob.

        The batch is all-or-nothing: a bad row leaves the Store untouched.

        Raises:
            TransferError: (MissingFieldError, CsvFormatError) nothing imported
            StorageWriteError: The imported list is kept in memory
        """
        correlation_id = create_correlation_id()

        try:
            items = decode_csv(text)
        except TransferError as e:
            logger.warning("import_failed", error=str(e))
            if self._audit_logger:
                row_number = e.row_number if isinstance(e, MissingFieldError) else None
                await self._audit_logger.log_import_failed(
                    str(e), row_number=row_number, correlation_id=correlation_id,
                )
            raise

        try:
            await self._store.set_all(items)
        finally:
            self._autosave.trigger()

        if self._audit_logger:
            await self._audit_logger.log_import_completed(len(items), correlation_id)
        return self._store.get_all()

    async def export_csv(self) -> str:
        items = self._store.get_all()
        text = encode_csv(items)
        if self._audit_logger:
            await self._audit_logger.log_export_completed(len(items))
        return text

    def validate(self) -> ValidationResult:
        """Advisory validation of the current list (for inline field hints)."""
        return self._validator.validate(self._store.get_all())

    def validation_summary(self) -> str:
        return self._validator.get_user_friendly_summary(self.validate())


def create_item_storage(settings: Optional[Settings] = None) -> ItemStorageInterface:
    """
    Build the configured item storage backend.

    Falls back to in-memory storage if Google Sheets is selected but not
    configured, so the app still starts.
    """
    settings = settings or get_settings()
    storage_settings = settings.storage

    if storage_settings.backend == "memory":
        return InMemoryItemStorage()

    if storage_settings.backend == "google_sheets":
        try:
            return GoogleSheetsItemStorage(GoogleSheetsClient(settings.google_sheets))
        except Exception as e:
            logger.warning("google_sheets_unavailable", error=str(e))
            return InMemoryItemStorage()

    return JsonFileItemStorage(storage_settings.json_path)


def create_app_components(
    storage: Optional[ItemStorageInterface] = None,
    scheduler: Optional[Scheduler] = None,
    settings: Optional[Settings] = None,
) -> tuple[Store, ItemManager, SearchConsole, AuditLogger]:
    """
    Factory function to create all application components.

    Args:
        storage: Item storage; built from settings if None
        scheduler: Timer source; the running asyncio loop if None

    Returns:
        (store, item_manager, search_console, audit_logger)
    """
    settings = settings or get_settings()
    app_settings = settings.app

    storage = storage or create_item_storage(settings)
    scheduler = scheduler or AsyncioScheduler()
    audit_logger = AuditLogger(InMemoryAuditStorage())

    store = Store(storage)
    autosave = AutosavePipeline(
        store,
        scheduler,
        delay_ms=app_settings.autosave_debounce_ms,
        audit_logger=audit_logger,
    )
    manager = ItemManager(store, autosave, audit_logger=audit_logger)
    console = SearchConsole(
        store,
        scheduler,
        debounce_ms=app_settings.search_debounce_ms,
        currency_symbol=app_settings.currency_symbol,
    )

    return store, manager, console, audit_logger
