from __future__ import annotations

import heapq
import itertools
from typing import Callable

# Tolerance for float drift when repeating calls accumulate their due times.
_EPSILON = 1e-9


class ScheduledCall:
    """Handle returned by the scheduler; doubles as a cancellation token."""

    def __init__(self, due: float, callback: Callable[[], None], interval: float | None = None) -> None:
        self.due = due
        self.callback = callback
        self.interval = interval
        self.cancelled = False
        self.fired = False

    @property
    def active(self) -> bool:
        if self.cancelled:
            return False
        return self.interval is not None or not self.fired

    def cancel(self) -> None:
        self.cancelled = True


class Scheduler:
    """Single-threaded engine clock.

    The shell advances it once per frame with the elapsed seconds; due calls
    run synchronously inside `advance`, in due-time order. While a call runs,
    `now` equals its due time, so engine timestamps do not depend on frame
    pacing.
    """

    def __init__(self, start: float = 0.0) -> None:
        self.now = start
        self._queue: list[tuple[float, int, ScheduledCall]] = []
        self._seq = itertools.count()

    def _push(self, call: ScheduledCall) -> None:
        heapq.heappush(self._queue, (call.due, next(self._seq), call))

    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledCall:
        if delay < 0:
            raise ValueError("delay must be >= 0")
        call = ScheduledCall(self.now + delay, callback)
        self._push(call)
        return call

    def call_every(self, interval: float, callback: Callable[[], None]) -> ScheduledCall:
        if interval <= 0:
            raise ValueError("interval must be > 0")
        call = ScheduledCall(self.now + interval, callback, interval=interval)
        self._push(call)
        return call

    def pending(self) -> int:
        return sum(1 for _, _, c in self._queue if c.active)

    def advance(self, dt: float) -> int:
        """Move the clock forward by `dt` seconds and run everything due.

        Returns the number of callbacks fired.
        """
        if dt < 0:
            raise ValueError("dt must be >= 0")
        target = self.now + dt
        fired = 0
        while self._queue and self._queue[0][0] <= target + _EPSILON:
            due, _, call = heapq.heappop(self._queue)
            if call.cancelled:
                continue
            self.now = max(self.now, due)
            if call.interval is not None:
                call.due = due + call.interval
                self._push(call)
            else:
                call.fired = True
            call.callback()
            fired += 1
        self.now = max(self.now, target)
        return fired
