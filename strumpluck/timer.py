"""Single-threaded timer queue with individually cancelable handles.

Timers fire in due-time order (insertion order for equal due times) on the
thread that drives the queue, so callbacks never run concurrently with each
other or with gesture handling on that thread. Time comes from a Clock: the
system monotonic clock for live use, or a manually advanced clock for tests
and offline rendering.
"""

from __future__ import annotations

import heapq
import logging
import math
import time
from abc import ABCMeta, abstractmethod
from dataclasses import dataclass, field
from threading import Event
from typing import Callable, Iterable, List, Optional, Tuple, override

from strumpluck.base import Closeable

_MAX_SLEEP_SECONDS = 0.05
"""Longest single sleep while waiting, so a halt request is noticed promptly."""


class Clock(metaclass=ABCMeta):
    """Source of time in seconds."""

    @abstractmethod
    def now(self) -> float:
        """Current time in seconds."""
        raise NotImplementedError()

    @abstractmethod
    def sleep(self, seconds: float) -> None:
        """Let the given amount of time pass."""
        raise NotImplementedError()

    def wait_until(self, deadline: float) -> None:
        """Sleep towards a deadline, at most _MAX_SLEEP_SECONDS at a time."""
        self.sleep(min(deadline - self.now(), _MAX_SLEEP_SECONDS))


class SystemClock(Clock):
    """Wall-clock time from the monotonic system clock."""

    @override
    def now(self) -> float:
        return time.monotonic()

    @override
    def sleep(self, seconds: float) -> None:
        if seconds > 0:
            time.sleep(seconds)


class ManualClock(Clock):
    """A clock that only moves when told to; sleeping advances it instantly."""

    def __init__(self, start: float = 0.0) -> None:
        self._now = start

    @override
    def now(self) -> float:
        return self._now

    @override
    def sleep(self, seconds: float) -> None:
        self.advance(seconds)

    @override
    def wait_until(self, deadline: float) -> None:
        self._now = max(self._now, deadline)

    def advance(self, seconds: float) -> None:
        """Move time forward; negative amounts are ignored."""
        if seconds > 0:
            self._now += seconds


@dataclass(eq=False)
class TimerHandle:
    """A scheduled callback that can be canceled until it fires."""

    due: float
    """Clock time (seconds) at which the callback becomes due."""
    callback: Callable[[], None] = field(repr=False)
    canceled: bool = False
    fired: bool = False

    @property
    def pending(self) -> bool:
        """Whether the callback may still run."""
        return not (self.canceled or self.fired)

    def cancel(self) -> None:
        """Prevent the callback from running. Has no effect once fired."""
        if not self.fired:
            self.canceled = True


def _delay_seconds(delay_ms: float) -> float:
    if math.isnan(delay_ms) or delay_ms < 0:
        return 0.0
    return delay_ms / 1000.0


class TimerQueue(Closeable):
    """Queue of delayed callbacks driven by run_due or run_until_idle."""

    def __init__(self, clock: Optional[Clock] = None) -> None:
        """Initialize the queue.

        Args:
            clock: Time source; defaults to the system clock.
        """
        self._clock = clock if clock is not None else SystemClock()
        self._heap: List[Tuple[float, int, TimerHandle]] = []
        self._seq = 0
        self._logger = logging.getLogger("strumpluck.timer")

    @property
    def clock(self) -> Clock:
        return self._clock

    def schedule(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle:
        """Schedule a callback.

        Args:
            delay_ms: Delay from now in milliseconds; negative or NaN delays
                are treated as zero.
            callback: Function to call once the delay has elapsed.

        Returns:
            A handle that cancels the callback.
        """
        handle = TimerHandle(self._clock.now() + _delay_seconds(delay_ms), callback)
        heapq.heappush(self._heap, (handle.due, self._seq, handle))
        self._seq += 1
        return handle

    def cancel_all(self, handles: Iterable[TimerHandle]) -> int:
        """Cancel several handles together.

        Returns:
            How many of them were still pending.
        """
        count = 0
        for handle in handles:
            if handle.pending:
                count += 1
            handle.cancel()
        self._drop_inactive()
        return count

    def _drop_inactive(self) -> None:
        while self._heap and not self._heap[0][2].pending:
            heapq.heappop(self._heap)

    @property
    def pending_count(self) -> int:
        """Number of timers that may still fire."""
        return sum(1 for _, _, handle in self._heap if handle.pending)

    def next_due(self) -> Optional[float]:
        """Due time of the earliest pending timer, if any."""
        self._drop_inactive()
        return self._heap[0][0] if self._heap else None

    def run_due(self) -> int:
        """Fire every pending timer whose due time has arrived.

        Timers scheduled by callbacks also fire in this call when they are
        already due.

        Returns:
            The number of callbacks run.
        """
        count = 0
        while True:
            self._drop_inactive()
            if not self._heap or self._heap[0][0] > self._clock.now():
                return count
            _, _, handle = heapq.heappop(self._heap)
            handle.fired = True
            handle.callback()
            count += 1

    def run_until_idle(self, halt: Optional[Event] = None) -> None:
        """Run timers as they come due until none remain or halt is set."""
        self._logger.debug("timer loop starting")
        while halt is None or not halt.is_set():
            self.run_due()
            due = self.next_due()
            if due is None:
                break
            if due > self._clock.now():
                self._clock.wait_until(due)
        self._logger.debug("timer loop stopping")

    def run_until(self, deadline: float) -> None:
        """Fire timers in order as they come due, then wait out the deadline."""
        while True:
            self.run_due()
            due = self.next_due()
            if due is None or due > deadline:
                break
            self._clock.wait_until(due)
        while self._clock.now() < deadline:
            self._clock.wait_until(deadline)
        self.run_due()

    @override
    def close(self) -> None:
        """Cancel every pending timer."""
        dropped = self.cancel_all([handle for _, _, handle in self._heap])
        if dropped:
            self._logger.info("timer queue closed with %d pending timers", dropped)
