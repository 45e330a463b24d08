"""
Autosave Pipeline

Any field-level edit triggers the pipeline. After a quiet period it:
1. Reads the Store's current sequence
2. Validates it (every item needs a name)
3. Persists it if valid, otherwise skips silently

A skipped save is not an error. A blank row that was just added must not
be written, but once it is filled in (or removed) the next edit saves
normally.

Storage errors are caught here and reported through `on_error` and the
returned SaveOutcome. Nothing escapes into the event loop, and nothing is
retried: the next edit is the retry.
"""

import asyncio
from typing import Callable, Optional

import structlog

from license_calculator.audit import AuditLogger
from license_calculator.models.item import SaveOutcome, SaveStatus
from license_calculator.services.storage import StorageError
from license_calculator.state.debounce import Debouncer
from license_calculator.state.scheduler import Scheduler
from license_calculator.state.store import Store
from license_calculator.validation import ItemValidator


logger = structlog.get_logger(__name__)

DEFAULT_AUTOSAVE_DELAY_MS = 800


class AutosavePipeline:
    """Debounced validate-then-persist for the Store."""

    def __init__(
        self,
        store: Store,
        scheduler: Scheduler,
        delay_ms: float = DEFAULT_AUTOSAVE_DELAY_MS,
        validator: Optional[ItemValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
        on_saved: Optional[Callable[[SaveOutcome], None]] = None,
        on_error: Optional[Callable[[StorageError], None]] = None,
    ):
        self._store = store
        self._validator = validator or ItemValidator()
        self._audit_logger = audit_logger
        self._on_saved = on_saved
        self._on_error = on_error
        self._debouncer = Debouncer(self._fire, delay_ms, scheduler)
        self._inflight: set[asyncio.Task] = set()
        self._last_outcome: Optional[SaveOutcome] = None
        self.cycle_count = 0

    @property
    def pending(self) -> bool:
        """A trigger is waiting for its quiet period."""
        return self._debouncer.pending

    @property
    def busy(self) -> bool:
        """A save cycle is running."""
        return any(not task.done() for task in self._inflight)

    @property
    def last_outcome(self) -> Optional[SaveOutcome]:
        return self._last_outcome

    def trigger(self) -> None:
        """Schedule a save cycle, restarting the quiet period."""
        self._debouncer.trigger()

    def cancel(self) -> None:
        """Drop a pending trigger. An in-flight cycle is not affected."""
        self._debouncer.cancel()

    def _fire(self) -> None:
        task = asyncio.get_running_loop().create_task(self.flush())
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)

    async def drain(self) -> Optional[SaveOutcome]:
        """Wait for every in-flight cycle to finish."""
        while self._inflight:
            await asyncio.gather(*list(self._inflight))
        return self._last_outcome

    async def flush(self) -> SaveOutcome:
        """
        Run one save cycle now, cancelling any pending trigger.

        Returns:
            SaveOutcome describing what happened (never raises StorageError)
        """
        self._debouncer.cancel()
        self.cycle_count += 1

        items = self._store.get_all()
        validation = self._validator.validate(items)

        if validation.has_errors:
            outcome = SaveOutcome(
                status=SaveStatus.SKIPPED,
                item_count=len(items),
                validation=validation,
            )
            logger.debug("autosave_skipped", errors=validation.error_count)
        else:
            try:
                await self._store.save(items)
            except StorageError as e:
                outcome = SaveOutcome(
                    status=SaveStatus.FAILED,
                    item_count=len(items),
                    validation=validation,
                    error_message=str(e),
                )
                logger.error("autosave_failed", error=str(e))
                if self._on_error:
                    self._on_error(e)
            else:
                outcome = SaveOutcome(
                    status=SaveStatus.SAVED,
                    item_count=len(items),
                    validation=validation,
                )
                logger.info("autosave_completed", item_count=len(items))
                if self._on_saved:
                    self._on_saved(outcome)

        self._last_outcome = outcome

        if self._audit_logger:
            await self._audit_logger.log_autosave(
                status=outcome.status.value,
                item_count=outcome.item_count,
                issues=[
                    {"index": i.index, "field": i.field, "message": i.message}
                    for i in validation.issues
                    if i.severity == "error"
                ],
                error_message=outcome.error_message,
            )

        return outcome
