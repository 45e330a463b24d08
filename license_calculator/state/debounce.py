"""
Trailing-edge debounce.

Each trigger cancels the pending timer and starts a new one; the callback
runs once, with the arguments of the last trigger, after a quiet period.
A timer is restarted, never queued.
"""

from typing import Any, Callable, Optional

from license_calculator.state.scheduler import ScheduledCall, Scheduler


class Debouncer:
    """Coalesces rapid triggers into a single delayed call."""

    def __init__(
        self,
        callback: Callable[..., Any],
        delay_ms: float,
        scheduler: Scheduler,
    ):
        self._callback = callback
        self._delay_ms = delay_ms
        self._scheduler = scheduler
        self._pending: Optional[ScheduledCall] = None
        self._args: tuple = ()
        self._kwargs: dict = {}

    @property
    def delay_ms(self) -> float:
        return self._delay_ms

    @property
    def pending(self) -> bool:
        return self._pending is not None and not self._pending.cancelled

    def trigger(self, *args: Any, **kwargs: Any) -> None:
        self.cancel()
        self._args = args
        self._kwargs = kwargs
        self._pending = self._scheduler.schedule(self._delay_ms, self._fire)

    __call__ = trigger

    def cancel(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def flush(self) -> bool:
        """Run a pending call now. Returns False if nothing was pending."""
        if not self.pending:
            return False
        self.cancel()
        self._run()
        return True

    def _fire(self) -> None:
        self._pending = None
        self._run()

    def _run(self) -> None:
        args, kwargs = self._args, self._kwargs
        self._args, self._kwargs = (), {}
        self._callback(*args, **kwargs)
