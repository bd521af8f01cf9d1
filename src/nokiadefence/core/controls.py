from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Control(str, Enum):
    FULLSCREEN = "fullscreen"
    CONFIRM = "confirm"
    SELL = "sell"
    PAUSE = "pause"
    QUIT = "quit"
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"


# One tile per step; applied in this order when several are held
MOVEMENT: dict[Control, tuple[int, int]] = {
    Control.DOWN: (0, 1),
    Control.UP: (0, -1),
    Control.LEFT: (-1, 0),
    Control.RIGHT: (1, 0),
}


@dataclass(frozen=True, slots=True)
class TickInput:
    """Controls for one tick: discrete presses and continuously held keys."""

    pressed: frozenset[Control] = frozenset()
    held: frozenset[Control] = frozenset()

    @classmethod
    def press(cls, *controls: Control) -> "TickInput":
        return cls(pressed=frozenset(controls))

    @classmethod
    def hold(cls, *controls: Control) -> "TickInput":
        return cls(held=frozenset(controls))

    def just_pressed(self, control: Control) -> bool:
        return control in self.pressed

    def is_held(self, control: Control) -> bool:
        return control in self.held


NO_INPUT = TickInput()
