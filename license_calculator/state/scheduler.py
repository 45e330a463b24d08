"""
Timer Scheduling

DESIGN DECISION: Nothing in the core touches wall-clock timers directly.
Every delayed call goes through a Scheduler:

    handle = scheduler.schedule(delay_ms, callback)
    handle.cancel()

Production code uses the asyncio event loop. Tests use ManualScheduler,
which only moves time when told to, so debounce behavior can be asserted
deterministically.
"""

import asyncio
import heapq
import itertools
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional


class ScheduledCall:
    """Handle for a pending delayed call."""

    def __init__(self, on_cancel: Optional[Callable[[], None]] = None):
        self._on_cancel = on_cancel
        self._cancelled = False
        self._done = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def done(self) -> bool:
        return self._done

    def cancel(self) -> None:
        if self._cancelled or self._done:
            return
        self._cancelled = True
        if self._on_cancel:
            self._on_cancel()

    def _mark_done(self) -> None:
        self._done = True


class Scheduler(ABC):
    """Schedules callbacks after a delay in milliseconds."""

    @abstractmethod
    def schedule(self, delay_ms: float, callback: Callable[[], Any]) -> ScheduledCall:
        pass


class AsyncioScheduler(Scheduler):
    """
    Scheduler backed by the running asyncio event loop.

    Must be used from within a running loop (or given one explicitly).
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    def schedule(self, delay_ms: float, callback: Callable[[], Any]) -> ScheduledCall:
        loop = self._loop or asyncio.get_running_loop()
        call: ScheduledCall

        def run() -> None:
            call._mark_done()
            callback()

        handle = loop.call_later(max(0.0, delay_ms) / 1000.0, run)
        call = ScheduledCall(on_cancel=handle.cancel)
        return call


class ManualScheduler(Scheduler):
    """
    Scheduler driven by a logical clock.

    Time only moves on advance(). Due callbacks run in due-time order,
    ties broken by scheduling order.
    """

    def __init__(self):
        self._now = 0.0
        self._queue: list[tuple[float, int, ScheduledCall, Callable[[], Any]]] = []
        self._sequence = itertools.count()

    @property
    def now(self) -> float:
        return self._now

    @property
    def pending_count(self) -> int:
        return sum(1 for _, _, call, _ in self._queue if not call.cancelled)

    def schedule(self, delay_ms: float, callback: Callable[[], Any]) -> ScheduledCall:
        call = ScheduledCall()
        due = self._now + max(0.0, delay_ms)
        heapq.heappush(self._queue, (due, next(self._sequence), call, callback))
        return call

    def advance(self, delay_ms: float) -> int:
        """
        Move the clock forward and run everything that came due.

        Callbacks scheduled by a running callback also run if they fall
        inside the window.

        Returns:
            Number of callbacks run
        """
        target = self._now + delay_ms
        ran = 0
        while self._queue and self._queue[0][0] <= target:
            due, _, call, callback = heapq.heappop(self._queue)
            if call.cancelled:
                continue
            self._now = due
            call._mark_done()
            callback()
            ran += 1
        self._now = target
        return ran

    def run_all(self) -> int:
        """Advance until nothing is pending."""
        ran = 0
        while self.pending_count:
            live = [entry[0] for entry in self._queue if not entry[2].cancelled]
            ran += self.advance(max(live) - self._now)
        return ran
