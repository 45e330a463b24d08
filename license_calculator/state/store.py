"""
Reactive Item Store

The Store is the authoritative, in-memory, ordered list of Items that every
UI surface (search console, management list) reads from and subscribes to.

DESIGN DECISIONS:
1. The Store is a plain object passed to whoever needs it. There is no
   module-level singleton, so tests can build as many as they like.
2. Identity is a stable key per slot, not the position. The positional API
   (update/remove by index) still exists and resolves through the key order,
   but surfaces that hold on to a row across edits use keys.
3. Notifications are synchronous, in subscription order, after the mutation
   is fully applied. Two mutations notify twice. Nothing is batched.
4. Storage is a durable mirror, written asynchronously. All storage I/O the
   Store starts runs through one lock, so reads and writes reach the backend
   in the order they were issued.
5. A load() whose read finishes after a newer mutation is discarded: the
   most recently issued change always wins.

Out-of-bounds indexes and unknown keys are silent no-ops. A pending update
racing a removal must not corrupt state or throw.
"""

import asyncio
from typing import Any, Callable, Iterable, Mapping, Optional, Sequence, Union
from uuid import uuid4

import structlog

from license_calculator.models.item import Item
from license_calculator.services.storage import (
    ItemStorageInterface,
    StorageReadError,
    StorageWriteError,
)


logger = structlog.get_logger(__name__)

Listener = Callable[[tuple[Item, ...]], Any]
ItemLike = Union[Item, Mapping[str, Any]]


def _new_key() -> str:
    return uuid4().hex


def _normalize(item: ItemLike) -> Item:
    if isinstance(item, Item):
        return item
    if isinstance(item, Mapping):
        return Item.from_record(dict(item))
    raise TypeError(f"Expected an Item or a mapping, got {type(item).__name__}")


class Store:
    """
    Ordered, observable collection of Items.

    Usage:
        store = Store(JsonFileItemStorage("data/licenses.json"))
        unsubscribe = store.subscribe(render)
        await store.load()
        key = store.add(Item(name="Adobe Creative Cloud Pro", price=60))
    """

    def __init__(
        self,
        storage: ItemStorageInterface,
        items: Optional[Iterable[ItemLike]] = None,
    ):
        self._storage = storage
        self._items: dict[str, Item] = {}
        self._order: list[str] = []
        self._listeners: list[Listener] = []
        self._io_lock = asyncio.Lock()
        # Bumped by every applied mutation; lets load() detect that it is stale
        self._generation = 0

        for item in items or ():
            key = _new_key()
            self._items[key] = _normalize(item)
            self._order.append(key)

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    @property
    def storage(self) -> ItemStorageInterface:
        return self._storage

    @property
    def generation(self) -> int:
        return self._generation

    def __len__(self) -> int:
        return len(self._order)

    def get_all(self) -> tuple[Item, ...]:
        """Current sequence. Items are immutable, so this is a safe read view."""
        return tuple(self._items[key] for key in self._order)

    def entries(self) -> tuple[tuple[str, Item], ...]:
        """(key, item) pairs in order."""
        return tuple((key, self._items[key]) for key in self._order)

    def keys(self) -> tuple[str, ...]:
        return tuple(self._order)

    def get(self, key: str) -> Optional[Item]:
        return self._items.get(key)

    def key_at(self, index: int) -> Optional[str]:
        if 0 <= index < len(self._order):
            return self._order[index]
        return None

    def index_of(self, key: str) -> int:
        """Position of `key`, or -1 if it is not in the store."""
        try:
            return self._order.index(key)
        except ValueError:
            return -1

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a listener called with the full sequence after each mutation.

        Returns:
            An unsubscribe function (safe to call more than once)
        """
        if not callable(listener):
            raise TypeError("listener must be callable")

        self._listeners.append(listener)

        def unsubscribe() -> None:
            try:
                self._listeners.remove(listener)
            except ValueError:
                pass

        return unsubscribe

    def _notify(self) -> None:
        snapshot = self.get_all()
        # Iterate over a copy: a listener may unsubscribe itself
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                # Listeners are isolated from each other's failures
                logger.exception("store_listener_failed", listener=repr(listener))

    def _changed(self) -> None:
        self._generation += 1
        self._notify()

    # ------------------------------------------------------------------
    # Synchronous mutations
    # ------------------------------------------------------------------

    def add(self, item: ItemLike) -> str:
        """
        Append a normalized item and notify.

        Does not persist: a freshly added blank row is not a valid record.
        Persistence is the autosave pipeline's job.

        Returns:
            The new item's key
        """
        key = _new_key()
        self._items[key] = _normalize(item)
        self._order.append(key)
        self._changed()
        return key

    def update(self, index: int, item: ItemLike) -> bool:
        """Replace the item at `index`, keeping its key. No-op if out of bounds."""
        key = self.key_at(index)
        if key is None:
            logger.debug("store_update_ignored", index=index, size=len(self._order))
            return False
        self._items[key] = _normalize(item)
        self._changed()
        return True

    def update_by_key(self, key: str, item: ItemLike) -> bool:
        """Replace the item stored under `key`. No-op if the key is unknown."""
        if key not in self._items:
            logger.debug("store_update_ignored", key=key)
            return False
        self._items[key] = _normalize(item)
        self._changed()
        return True

    def remove(self, index: int) -> Optional[Item]:
        """Delete the item at `index`; later items shift down. No-op if out of bounds."""
        key = self.key_at(index)
        if key is None:
            logger.debug("store_remove_ignored", index=index, size=len(self._order))
            return None
        return self._remove_key(key)

    def remove_by_key(self, key: str) -> Optional[Item]:
        if key not in self._items:
            logger.debug("store_remove_ignored", key=key)
            return None
        return self._remove_key(key)

    def _remove_key(self, key: str) -> Item:
        self._order.remove(key)
        item = self._items.pop(key)
        self._changed()
        return item

    def _replace(
        self,
        items: Sequence[ItemLike],
        keys: Optional[Sequence[Optional[str]]] = None,
    ) -> None:
        """
        Swap in a whole new sequence, reusing known keys where given.

        Unknown, missing or duplicate keys get fresh ones.
        """
        normalized = [_normalize(item) for item in items]
        new_items: dict[str, Item] = {}
        new_order: list[str] = []

        for position, item in enumerate(normalized):
            key = keys[position] if keys is not None and position < len(keys) else None
            if key is None or key not in self._items or key in new_items:
                key = _new_key()
            new_items[key] = item
            new_order.append(key)

        self._items = new_items
        self._order = new_order
        self._changed()

    # ------------------------------------------------------------------
    # Storage round-trips
    # ------------------------------------------------------------------

    async def load(self) -> tuple[Item, ...]:
        """
        Replace the sequence with the storage contents and notify.

        Raises:
            StorageReadError: If the backend fails; the sequence is unchanged
        """
        issued_at = self._generation

        async with self._io_lock:
            try:
                items = await self._storage.read()
            except Exception as e:
                logger.error("store_load_failed", error=str(e))
                raise StorageReadError(f"Failed to read items: {e}") from e

        if self._generation != issued_at:
            # Something changed while the read was in flight; it is newer
            logger.warning(
                "store_load_discarded",
                read_count=len(items),
                current_count=len(self._order),
            )
            return self.get_all()

        self._replace(list(items))
        logger.info("store_loaded", item_count=len(self._order))
        return self.get_all()

    async def set_all(
        self,
        items: Sequence[ItemLike],
        keys: Optional[Sequence[Optional[str]]] = None,
    ) -> None:
        """
        Atomically replace the sequence, notify, then persist.

        The in-memory replacement is never rolled back. If the write fails
        the UI keeps working on the new state and the error is raised to
        the caller.

        Raises:
            StorageWriteError: If persisting fails
        """
        self._replace(items, keys)
        await self.save()

    async def save(self, items: Optional[Sequence[Item]] = None) -> None:
        """
        Write a snapshot to storage.

        Args:
            items: Snapshot to write; defaults to the current sequence
                   (taken now, not when the lock is acquired)

        Raises:
            StorageWriteError: If the backend fails
        """
        snapshot = tuple(items) if items is not None else self.get_all()

        async with self._io_lock:
            try:
                await self._storage.write(list(snapshot))
            except Exception as e:
                logger.error("store_save_failed", error=str(e), item_count=len(snapshot))
                raise StorageWriteError(f"Failed to save items: {e}") from e

        logger.debug("store_saved", item_count=len(snapshot))
