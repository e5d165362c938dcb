"""Cooperative, single-threaded timer queue.

`TickScheduler` has the same `call_later(delay, callback, *args)` → handle
shape as an asyncio event loop, so the animation driver runs on either. The
host decides when timers fire by calling `run_due()`; the Streamlit app does so
from a periodically re-run fragment.
"""

import heapq
import itertools
import logging
import time
from collections.abc import Callable
from typing import Any, Protocol

logger = logging.getLogger(__name__)


class Cancellable(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> Cancellable: ...


class TimerHandle:
    """A scheduled callback. cancel() is idempotent and safe after it ran."""

    __slots__ = ("when", "callback", "args", "cancelled")

    def __init__(self, when: float, callback: Callable[..., Any], args: tuple[Any, ...]) -> None:
        self.when = when
        self.callback = callback
        self.args = args
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True

    def __repr__(self) -> str:
        state = " cancelled" if self.cancelled else ""
        return f"<TimerHandle when={self.when:.3f} {self.callback!r}{state}>"


class TickScheduler:
    """Deadline-ordered timers dispatched on the caller's thread."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._queue: list[tuple[float, int, TimerHandle]] = []
        self._seq = itertools.count()

    def time(self) -> float:
        return self._clock()

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> TimerHandle:
        handle = TimerHandle(self._clock() + max(0.0, delay), callback, args)
        heapq.heappush(self._queue, (handle.when, next(self._seq), handle))
        return handle

    def next_deadline(self) -> float | None:
        """Deadline of the earliest live timer, or None when idle."""
        self._drop_cancelled()
        return self._queue[0][0] if self._queue else None

    @property
    def pending(self) -> int:
        return sum(1 for _, _, handle in self._queue if not handle.cancelled)

    def run_due(self) -> int:
        """Run every timer whose deadline has passed, including ones they schedule.

        A callback that raises is logged and dispatch continues.

        Returns:
            Number of callbacks run.
        """
        ran = 0
        while True:
            self._drop_cancelled()
            if not self._queue or self._queue[0][0] > self._clock():
                return ran
            _, _, handle = heapq.heappop(self._queue)
            ran += 1
            try:
                handle.callback(*handle.args)
            except Exception:
                logger.exception("Scheduled callback %r failed", handle.callback)

    def cancel_all(self) -> None:
        for _, _, handle in self._queue:
            handle.cancel()
        self._queue.clear()

    def _drop_cancelled(self) -> None:
        while self._queue and self._queue[0][2].cancelled:
            heapq.heappop(self._queue)
