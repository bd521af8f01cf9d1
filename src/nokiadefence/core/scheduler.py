from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Protocol


class TimerHandle(Protocol):
    fired: bool

    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Runs a callback once after a real-time delay in seconds."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle: ...


@dataclass
class _ManualTimer:
    due: float
    callback: Callable[[], None]
    cancelled: bool = False
    fired: bool = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """
    Scheduler driven by an explicit clock.

    The headless runner advances it by one frame per tick; tests advance it
    by hand.
    """

    def __init__(self) -> None:
        self.now = 0.0
        self._timers: list[_ManualTimer] = []

    def call_later(self, delay: float, callback: Callable[[], None]) -> _ManualTimer:
        timer = _ManualTimer(due=self.now + max(0.0, float(delay)), callback=callback)
        self._timers.append(timer)
        return timer

    @property
    def pending(self) -> int:
        return sum(1 for t in self._timers if not (t.cancelled or t.fired))

    def advance(self, seconds: float) -> int:
        self.now += max(0.0, float(seconds))
        fired = 0
        while True:
            due = [t for t in self._timers if not (t.cancelled or t.fired) and t.due <= self.now]
            if not due:
                break
            timer = min(due, key=lambda t: t.due)
            timer.fired = True
            timer.callback()
            fired += 1
        self._timers = [t for t in self._timers if not (t.cancelled or t.fired)]
        return fired
