from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .sprites import SpriteSheet


class Direction(str, Enum):
    RIGHT = "right"
    LEFT = "left"
    UP = "up"
    DOWN = "down"


class RemovalReason(str, Enum):
    DIED = "died"
    BREACHED = "breached"


@dataclass(frozen=True, slots=True)
class Outcome:
    removed: bool = False
    reason: RemovalReason | None = None


CONTINUE = Outcome()
DIED = Outcome(removed=True, reason=RemovalReason.DIED)
BREACHED = Outcome(removed=True, reason=RemovalReason.BREACHED)


@dataclass(slots=True, eq=False)
class Creep:
    kind: str
    health: int              # hit points
    damage: int              # damage dealt to the base on breach
    loot: int                # money paid out when it dies
    sprite: SpriteSheet

    # set when the spawner releases the creep
    creep_id: int = 0
    x: int = 0
    y: int = 0
    next_waypoint: int = 1

    frame: int = 0
    last_moved: int = 0
    direction: Direction = Direction.RIGHT
    flip: bool = False

    @property
    def alive(self) -> bool:
        return self.health > 0

    def attack(self, amount: int) -> bool:
        """Apply damage and report whether the creep is now dead."""
        if amount < 0:
            raise ValueError("damage must be non-negative")
        self.health -= amount
        return self.health <= 0


@dataclass(slots=True, eq=False)
class Tower:
    kind: str
    x: int
    y: int
    cost: int
    damage: int
    sprite: SpriteSheet
    frame: int = 0
    target_id: int | None = None


@dataclass(slots=True)
class Cursor:
    x: int
    y: int
    cooldown: int = 0       # hides the crosshair while a construction animation plays
    held_ticks: int = 0

    @property
    def visible(self) -> bool:
        return self.cooldown == 0
