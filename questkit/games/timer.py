"""
Countdown timer utilities for time-attack games.

- calculate_timer_phase(): remaining seconds -> urgency phase (pure)
- format_time(): seconds -> "M:SS" (pure)
- Ticker: the single countdown capability injected into time-bounded games
- FloatingTimer: the shared display state the dispatcher owns
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from loguru import logger

from .clock import Scheduler, TimerHandle


class TimerPhase(str, Enum):
    """Escalating urgency levels of a countdown."""

    CALM = "calm"          # >20s
    WARNING = "warning"    # 11-20s
    CRITICAL = "critical"  # 6-10s
    FINAL = "final"        # 0-5s


def calculate_timer_phase(time_remaining: float) -> TimerPhase:
    """Phase for the given number of remaining seconds."""
    if time_remaining > 20:
        return TimerPhase.CALM
    if time_remaining > 10:
        return TimerPhase.WARNING
    if time_remaining > 5:
        return TimerPhase.CRITICAL
    return TimerPhase.FINAL


def format_time(seconds: float) -> str:
    """Format seconds as M:SS (e.g. 83 -> "1:23")."""
    total = max(0, int(seconds))
    mins, secs = divmod(total, 60)
    return f"{mins}:{secs:02d}"


@dataclass(frozen=True)
class TimerState:
    """Snapshot a time-bounded game publishes on every tick."""

    time_remaining: int
    time_limit: int
    phase: TimerPhase

    @property
    def display(self) -> str:
        return format_time(self.time_remaining)

    @property
    def fraction_remaining(self) -> float:
        if self.time_limit <= 0:
            return 0.0
        return self.time_remaining / self.time_limit


class Ticker:
    """
    Repeating countdown on a Scheduler.

    On every tick it recomputes (time_remaining, phase) from the scheduler
    clock and passes a TimerState to on_tick. When the remaining time
    reaches zero it stops itself and calls on_expire exactly once.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        time_limit: float,
        on_tick: Callable[[TimerState], None] | None = None,
        on_expire: Callable[[], None] | None = None,
        interval: float = 0.1,
    ):
        self.scheduler = scheduler
        self.time_limit = max(0, int(time_limit))
        self.on_tick = on_tick
        self.on_expire = on_expire
        self.interval = interval
        self._started_at: float | None = None
        self._handle: TimerHandle | None = None
        self._expired = False

    @property
    def running(self) -> bool:
        return self._handle is not None

    @property
    def expired(self) -> bool:
        return self._expired

    @property
    def time_remaining(self) -> int:
        if self._started_at is None:
            return self.time_limit
        elapsed = math.floor(self.scheduler.now() - self._started_at + 1e-9)
        return max(0, self.time_limit - elapsed)

    def state(self) -> TimerState:
        remaining = self.time_remaining
        return TimerState(remaining, self.time_limit, calculate_timer_phase(remaining))

    def start(self) -> None:
        """(Re)start the countdown from the full time limit."""
        self.stop()
        self._started_at = self.scheduler.now()
        self._expired = False
        logger.debug(f"Ticker started: {self.time_limit}s")
        self._publish()
        self._schedule()

    def stop(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _schedule(self) -> None:
        self._handle = self.scheduler.call_later(self.interval, self._tick)

    def _tick(self) -> None:
        self._handle = None
        state = self._publish()
        if state.time_remaining <= 0:
            if not self._expired:
                self._expired = True
                logger.debug("Ticker expired")
                if self.on_expire:
                    self.on_expire()
            return
        self._schedule()

    def _publish(self) -> TimerState:
        state = self.state()
        if self.on_tick:
            self.on_tick(state)
        return state


class FloatingTimer:
    """
    Shared floating timer display.

    Owned by the dispatcher; time-bounded games publish into it through
    update(), and clear() hides it when a game stops counting down.
    """

    def __init__(self):
        self._state: TimerState | None = None
        self._listeners: list[Callable[[TimerState | None], None]] = []

    @property
    def state(self) -> TimerState | None:
        return self._state

    @property
    def visible(self) -> bool:
        return self._state is not None

    def subscribe(self, listener: Callable[[TimerState | None], None]) -> Callable[[], None]:
        """Register a listener; returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def update(self, state: TimerState | None) -> None:
        if state == self._state:
            return
        self._state = state
        for listener in list(self._listeners):
            listener(state)

    def clear(self) -> None:
        self.update(None)
