"""
Reorder Reconciliation

The drag-reorder widget reports the new top-to-bottom order of the rows it
rendered, each row still carrying its (possibly edited) field values. This
is the only path by which item order changes.
"""

from typing import Any, Mapping, Optional, Sequence, Union

import structlog

from license_calculator.audit import AuditLogger
from license_calculator.models.item import Item, ReorderRow
from license_calculator.state.autosave import AutosavePipeline
from license_calculator.state.store import Store


logger = structlog.get_logger(__name__)

RowLike = Union[ReorderRow, Mapping[str, Any]]


class ReorderReconciler:
    """Applies a UI permutation to the Store, then triggers an autosave."""

    def __init__(
        self,
        store: Store,
        autosave: AutosavePipeline,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._store = store
        self._autosave = autosave
        self._audit_logger = audit_logger

    async def reconcile(self, rows: Sequence[RowLike]) -> tuple[Item, ...]:
        """
        Replace the Store order with `rows`.

        Raises:
            StorageWriteError: If the bulk write fails. The new order is
                kept in memory and the autosave is still triggered.
        """
        parsed = [row if isinstance(row, ReorderRow) else ReorderRow(**row) for row in rows]
        items = [row.to_item() for row in parsed]
        keys = [row.key for row in parsed]

        try:
            await self._store.set_all(items, keys=keys)
        finally:
            self._autosave.trigger()

        logger.info("items_reordered", item_count=len(items))
        if self._audit_logger:
            await self._audit_logger.log_items_reordered(len(items))

        return self._store.get_all()
