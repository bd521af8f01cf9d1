from __future__ import annotations

from typing import Callable

import pyglet


class PygletTimer:
    def __init__(self, callback: Callable[[], None]) -> None:
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def _fire(self, dt: float) -> None:
        if self.cancelled:
            return
        self.fired = True
        self.callback()

    def cancel(self) -> None:
        self.cancelled = True
        pyglet.clock.unschedule(self._fire)


class PygletScheduler:
    """Real-time timers on the pyglet clock; callbacks run on the main thread."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> PygletTimer:
        timer = PygletTimer(callback)
        pyglet.clock.schedule_once(timer._fire, max(0.0, float(delay)))
        return timer
