"""
Scheduling capability shared by every game instance.

Games never sleep or spawn threads. Anything that happens "later" (the
countdown tick, the lesson feedback delay, hiding a mismatched memory pair)
goes through a Scheduler, so the same engine runs under asyncio in a live
session and under a virtual clock in tests and offline review.
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
from dataclasses import dataclass, field
from typing import Callable, Protocol


class TimerHandle(Protocol):
    """Handle returned by call_later()."""

    def cancel(self) -> None:
        ...


class Scheduler(Protocol):
    """Protocol for the single-threaded event source driving a game."""

    def now(self) -> float:
        """Monotonic time in seconds."""
        ...

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        """Run callback once after delay seconds."""
        ...


@dataclass(order=True)
class _ScheduledCall:
    due: float
    seq: int
    callback: Callable[[], None] = field(compare=False)
    cancelled: bool = field(default=False, compare=False)

    def cancel(self) -> None:
        self.cancelled = True


class VirtualScheduler:
    """
    Deterministic scheduler with a manually advanced clock.

    Callbacks run in due-time order (FIFO for equal times) when advance()
    moves the clock past them. Callbacks may schedule further calls; those
    fire within the same advance() if they fall due before its end.
    """

    def __init__(self, start: float = 0.0):
        self._now = start
        self._queue: list[_ScheduledCall] = []
        self._seq = itertools.count()

    def now(self) -> float:
        return self._now

    def call_later(self, delay: float, callback: Callable[[], None]) -> _ScheduledCall:
        call = _ScheduledCall(self._now + max(0.0, delay), next(self._seq), callback)
        heapq.heappush(self._queue, call)
        return call

    @property
    def pending(self) -> int:
        """Number of live (not cancelled) scheduled calls."""
        return sum(1 for c in self._queue if not c.cancelled)

    def advance(self, seconds: float) -> None:
        """Move the clock forward, firing every callback that falls due."""
        target = self._now + seconds
        while self._queue and self._queue[0].due <= target + 1e-9:
            call = heapq.heappop(self._queue)
            if call.cancelled:
                continue
            self._now = max(self._now, call.due)
            call.callback()
        self._now = target

    def run_until_idle(self, limit: float = 3600.0) -> None:
        """Fire everything queued, up to `limit` seconds of virtual time."""
        deadline = self._now + limit
        while self._queue and self._now <= deadline:
            nxt = self._queue[0]
            if nxt.cancelled:
                heapq.heappop(self._queue)
                continue
            self.advance(max(0.0, nxt.due - self._now))


class AsyncioScheduler:
    """Scheduler backed by a running asyncio event loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None):
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def now(self) -> float:
        return self.loop.time()

    def call_later(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        return self.loop.call_later(max(0.0, delay), callback)
