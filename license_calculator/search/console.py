"""
Search Console

The search/select/compute surface:

    typed text -> debounce -> SearchIndex -> SelectionNavigator
               -> commit -> Calculator -> Quote

The console subscribes to the Store, so edits made on the management page
show up here without a reload:
- the match list is recomputed for the current query
- the highlight survives if its position still exists
- a selected item that was edited is refreshed, one that was removed is
  dropped (the console holds its key, not its position)
"""

from typing import Any, Optional

import structlog

from license_calculator.models.item import Item, MatchResult, MatchState, Quote
from license_calculator.pricing import compute_total
from license_calculator.search.index import SearchIndex
from license_calculator.search.navigator import NavKey, SelectionNavigator
from license_calculator.state.debounce import Debouncer
from license_calculator.state.scheduler import Scheduler
from license_calculator.state.store import Store


logger = structlog.get_logger(__name__)

DEFAULT_SEARCH_DELAY_MS = 150


class SearchConsole:
    """Incremental search over a Store, with keyboard selection and a quote."""

    def __init__(
        self,
        store: Store,
        scheduler: Scheduler,
        debounce_ms: float = DEFAULT_SEARCH_DELAY_MS,
        currency_symbol: str = "$",
    ):
        self._store = store
        self._currency_symbol = currency_symbol
        self._index = SearchIndex(store.entries())
        self._navigator = SelectionNavigator()
        self._debouncer = Debouncer(self.search_now, debounce_ms, scheduler)

        self._query = ""
        self._result = MatchResult()
        self._selected_key: Optional[str] = None
        self._selected_item: Optional[Item] = None
        self._quantity = ""
        # Mirrors the disabled search box until the first store load lands
        self.loaded = False

        self._unsubscribe = store.subscribe(self._on_store_changed)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def query(self) -> str:
        return self._query

    @property
    def result(self) -> MatchResult:
        return self._result

    @property
    def active_index(self) -> int:
        return self._navigator.active_index

    @property
    def selected_item(self) -> Optional[Item]:
        return self._selected_item

    @property
    def selected_key(self) -> Optional[str]:
        return self._selected_key

    @property
    def quantity(self) -> str:
        return self._quantity

    @property
    def search_pending(self) -> bool:
        return self._debouncer.pending

    def quote(self) -> Quote:
        return compute_total(self._selected_item, self._quantity, self._currency_symbol)

    # ------------------------------------------------------------------
    # Input events
    # ------------------------------------------------------------------

    def set_query(self, text: str) -> None:
        """Typed text; applied after the search quiet period."""
        self._debouncer.trigger(text)

    def search_now(self, text: str) -> MatchResult:
        """Apply a query immediately. Any query change clears the highlight."""
        self._debouncer.cancel()
        self._query = text or ""
        self._result = self._index.search(self._query)
        self._navigator.reset(self._result.selectable_count)
        return self._result

    def handle_key(self, key: str) -> Optional[Item]:
        """
        Apply a key press from the search box.

        Returns:
            The newly selected item when Enter commits a row, else None
        """
        if key == NavKey.ESCAPE.value:
            self._navigator.reset()
            self._hide_results()
            return None

        index = self._navigator.handle_key(key)
        if index is None:
            return None
        return self._commit(index)

    def select(self, index: int) -> Optional[Item]:
        """Mouse selection of a result row. Placeholder and bad indexes are ignored."""
        if not 0 <= index < self._result.selectable_count:
            return None
        self._navigator.reset()
        return self._commit(index)

    def set_quantity(self, text: Any) -> Quote:
        self._quantity = "" if text is None else str(text)
        return self.quote()

    def clear_selection(self) -> None:
        self._selected_key = None
        self._selected_item = None

    def close(self) -> None:
        """Detach from the Store and stop any pending search."""
        self._debouncer.cancel()
        self._unsubscribe()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _commit(self, index: int) -> Optional[Item]:
        key, item = self._result.entries[index]
        self._selected_key = key
        self._selected_item = item
        # The search box now shows the chosen name; the dropdown closes
        self._query = item.name
        self._hide_results()
        logger.debug("console_item_selected", key=key, name=item.name)
        return item

    def _hide_results(self) -> None:
        self._result = MatchResult(query=self._query, state=MatchState.HIDDEN)
        self._navigator.reset(0)

    def _on_store_changed(self, items: tuple[Item, ...]) -> None:
        self.loaded = True
        self._index.rebuild(self._store.entries())

        if self._result.state != MatchState.HIDDEN:
            self._result = self._index.search(self._query)
            self._navigator.resize(self._result.selectable_count)

        if self._selected_key is not None:
            current = self._store.get(self._selected_key)
            if current is None:
                logger.debug("console_selection_removed", key=self._selected_key)
                self.clear_selection()
            else:
                self._selected_item = current
