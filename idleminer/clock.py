"""Time sources and timer scheduling for the engine.

Every timed component (accrual ticks, manual mining countdown, autosave)
schedules work through a :class:`Clock` instead of sleeping. Callbacks run to
completion one at a time, so engine state never needs locking.
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
import time
from abc import ABC, abstractmethod
from typing import Callable


class TimerHandle(ABC):
    """Cancellation handle for a scheduled callback."""

    @abstractmethod
    def cancel(self) -> None: ...

    @property
    @abstractmethod
    def cancelled(self) -> bool: ...


class Clock(ABC):
    """A source of the current time plus one-shot timers."""

    @abstractmethod
    def now_ms(self) -> int:
        """Milliseconds since the Unix epoch."""

    @abstractmethod
    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        """Run *callback* once after *delay* seconds."""


class _VirtualTimer(TimerHandle):
    def __init__(self, due_ms: int, seq: int, callback: Callable[[], None]) -> None:
        self.due_ms = due_ms
        self.seq = seq
        self.callback = callback
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def __lt__(self, other: _VirtualTimer) -> bool:
        return (self.due_ms, self.seq) < (other.due_ms, other.seq)


class VirtualClock(Clock):
    """Deterministic clock whose time only moves when :meth:`advance` is called.

    Timers fire in due-time order; timers due at the same instant fire in the
    order they were scheduled. Callbacks may schedule further timers, which
    fire within the same advance if they fall due before its end.
    """

    def __init__(self, start_ms: int = 0) -> None:
        self._now_ms = start_ms
        self._queue: list[_VirtualTimer] = []
        self._seq = itertools.count()

    def now_ms(self) -> int:
        return self._now_ms

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        if delay < 0:
            raise ValueError(f"Delay cannot be negative: {delay}")
        timer = _VirtualTimer(
            self._now_ms + round(delay * 1000), next(self._seq), callback
        )
        heapq.heappush(self._queue, timer)
        return timer

    def advance(self, seconds: float) -> int:
        """Move time forward, firing due timers. Returns the number fired."""
        if seconds < 0:
            raise ValueError(f"Cannot move time backwards: {seconds}")
        target = self._now_ms + round(seconds * 1000)
        fired = 0
        while self._queue and self._queue[0].due_ms <= target:
            timer = heapq.heappop(self._queue)
            if timer.cancelled:
                continue
            self._now_ms = timer.due_ms
            timer.callback()
            fired += 1
        self._now_ms = target
        return fired

    @property
    def pending(self) -> int:
        return sum(1 for t in self._queue if not t.cancelled)


class _AsyncioTimer(TimerHandle):
    def __init__(self, handle: asyncio.TimerHandle) -> None:
        self._handle = handle

    def cancel(self) -> None:
        self._handle.cancel()

    @property
    def cancelled(self) -> bool:
        return self._handle.cancelled()


class AsyncioClock(Clock):
    """Wall-clock time with timers on an asyncio event loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop if loop is not None else asyncio.get_running_loop()

    def now_ms(self) -> int:
        return int(time.time() * 1000)

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        return _AsyncioTimer(self._loop.call_later(delay, callback))
