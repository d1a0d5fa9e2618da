"""
Cooperative interval timers.

Every periodic job in the installation (audio sampling, preset
rotation, level logging) is registered on one TimerLoop and fired
from the frame loop, so all jobs share a single execution context
and never overlap.
"""

import math
from typing import Callable


class TimerHandle:
    """A cancellable periodic timer registered on a TimerLoop."""

    def __init__(self, loop: "TimerLoop", period_ms: float, callback: Callable[[float], None], next_due_ms: float):
        self._loop = loop
        self.period_ms = period_ms
        self.callback = callback
        self.next_due_ms = next_due_ms
        self.fire_count = 0
        self.cancelled = False

    def cancel(self):
        """Stop the timer. Safe to call more than once."""
        if not self.cancelled:
            self.cancelled = True
            self._loop._discard(self)

    def _fire(self, now_ms: float):
        # Coalesce missed periods: next deadline is the first boundary after now
        behind = max(0.0, now_ms - self.next_due_ms)
        self.next_due_ms += self.period_ms * (math.floor(behind / self.period_ms) + 1)
        self.fire_count += 1
        self.callback(now_ms)


class TimerLoop:
    """
    Registry of periodic timers, driven by explicit timestamps.

    The owner calls run_due(now) once per frame; each timer whose
    deadline has passed fires exactly once per call.
    """

    def __init__(self):
        self._timers: list[TimerHandle] = []

    def __len__(self) -> int:
        return len(self._timers)

    def call_every(self, period_ms: float, callback: Callable[[float], None], now_ms: float) -> TimerHandle:
        """
        Register callback(now_ms) to fire every period_ms, first at now_ms + period_ms.

        Args:
            period_ms: Interval in milliseconds; must be positive.
            callback: Invoked with the timestamp passed to run_due().
            now_ms: Registration time.

        Returns:
            Handle used to cancel the timer.
        """
        if period_ms <= 0:
            raise ValueError(f"period_ms must be positive, got {period_ms}")
        handle = TimerHandle(self, period_ms, callback, now_ms + period_ms)
        self._timers.append(handle)
        return handle

    def _discard(self, handle: TimerHandle):
        if handle in self._timers:
            self._timers.remove(handle)

    def run_due(self, now_ms: float) -> int:
        """Fire every due timer once. Returns the number of callbacks run."""
        fired = 0
        for handle in list(self._timers):
            if handle.cancelled or handle.next_due_ms > now_ms:
                continue
            handle._fire(now_ms)
            fired += 1
        return fired

    def cancel_all(self):
        for handle in list(self._timers):
            handle.cancel()
