"""
Timer queue for the combat core.

Every delayed action of a session (effect ticks, respawns, deferred deaths,
the hardcore return to character select) is a callback on one TimerQueue.
Callbacks run one at a time, in due-time order, and insertion order breaks
ties, so all mutation of combat state is serialized through this queue.

Time is virtual: the host moves it forward with `advance_to` or `advance`,
which makes timer-driven behaviour deterministic under test.
"""

from __future__ import annotations

import heapq
import itertools
from collections.abc import Callable
from dataclasses import dataclass, field

from skirmish.core.errors import ContractViolationError, require_finite
from skirmish.core.logging import log_debug


@dataclass(order=True)
class TimerHandle:
    """A scheduled callback. Ordered by due time, then by insertion."""

    due: float
    seq: int
    callback: Callable[[], None] = field(compare=False)
    label: str = field(default="", compare=False)
    interval: float | None = field(default=None, compare=False)
    cancelled: bool = field(default=False, compare=False)

    def cancel(self) -> None:
        """Marks the timer so it is skipped when it comes due."""
        self.cancelled = True


class TimerQueue:
    """Single-threaded scheduler driven by an explicit clock."""

    def __init__(self, start: float = 0.0) -> None:
        self._now: float = require_finite(start, "start")
        self._heap: list[TimerHandle] = []
        self._seq = itertools.count()
        self._running = False

    @property
    def now(self) -> float:
        """Current virtual time in seconds."""
        return self._now

    def __len__(self) -> int:
        return sum(1 for handle in self._heap if not handle.cancelled)

    def call_later(
        self, delay: float, callback: Callable[[], None], label: str = ""
    ) -> TimerHandle:
        """
        Schedules `callback` to run `delay` seconds from now.

        Args:
            delay (float):
                Seconds to wait. Must be finite and non-negative.
            callback (Callable[[], None]):
                The function to call.
            label (str):
                Free-form name used in debug logs.

        Returns:
            TimerHandle:
                Handle that can be cancelled.

        """
        require_finite(delay, "delay")
        if delay < 0:
            raise ContractViolationError("delay must be non-negative", {"delay": delay})
        if not callable(callback):
            raise ContractViolationError("callback must be callable", {"label": label})
        handle = TimerHandle(self._now + delay, next(self._seq), callback, label)
        heapq.heappush(self._heap, handle)
        return handle

    def call_soon(self, callback: Callable[[], None], label: str = "") -> TimerHandle:
        """Schedules `callback` for the next run of the queue."""
        return self.call_later(0.0, callback, label)

    def call_every(
        self, interval: float, callback: Callable[[], None], label: str = ""
    ) -> TimerHandle:
        """
        Schedules `callback` every `interval` seconds, first after one interval.

        The same handle is re-armed after each run, so cancelling it stops the
        repetition.
        """
        require_finite(interval, "interval")
        if interval <= 0:
            raise ContractViolationError(
                "interval must be positive", {"interval": interval}
            )
        handle = self.call_later(interval, callback, label)
        handle.interval = interval
        return handle

    def cancel(self, handle: TimerHandle | None) -> None:
        """Cancels `handle` if it is not None."""
        if handle is not None:
            handle.cancel()

    def run_pending(self) -> int:
        """Runs every callback that is due at the current time."""
        return self.advance_to(self._now)

    def advance(self, seconds: float) -> int:
        """Moves the clock forward by `seconds`, running due callbacks."""
        require_finite(seconds, "seconds")
        return self.advance_to(self._now + seconds)

    def advance_to(self, when: float) -> int:
        """
        Moves the clock to `when`, running every callback due on the way.

        Each callback sees `now` equal to its own due time. Callbacks that
        schedule further callbacks inside the window are run in the same call.
        An exception raised by a callback propagates and leaves the clock at
        that callback's due time; a repeating timer is re-armed regardless.

        Args:
            when (float):
                The target time. Moving backwards is a contract violation.

        Returns:
            int:
                Number of callbacks that were run.

        """
        require_finite(when, "when")
        if when < self._now:
            raise ContractViolationError(
                "the clock cannot move backwards", {"now": self._now, "when": when}
            )
        if self._running:
            raise ContractViolationError("advance_to is not re-entrant")
        ran = 0
        self._running = True
        try:
            while self._heap and self._heap[0].due <= when:
                handle = heapq.heappop(self._heap)
                if handle.cancelled:
                    continue
                self._now = max(self._now, handle.due)
                if handle.label:
                    log_debug(f"Timer '{handle.label}' fired at {self._now:.2f}s")
                ran += 1
                try:
                    handle.callback()
                finally:
                    if handle.interval is not None and not handle.cancelled:
                        handle.due = self._now + handle.interval
                        handle.seq = next(self._seq)
                        heapq.heappush(self._heap, handle)
            self._now = when
        finally:
            self._running = False
        return ran
