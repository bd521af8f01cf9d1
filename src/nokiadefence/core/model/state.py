from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum

from .entities import Creep, Cursor, Tower


class Mode(str, Enum):
    LOADING = "loading"
    TITLE = "title"
    BUILD = "build"
    WAVE = "wave"
    PAUSED = "paused"
    WIN = "win"
    LOSE = "lose"
    WAITING = "waiting"


ACTIVE_MODES = frozenset({Mode.BUILD, Mode.WAVE})


@dataclass(slots=True)
class GameState:
    mode: Mode = Mode.LOADING
    money: int = 1000
    map_index: int = 0
    wave_index: int = 0

    # Current wave: pre-built roster and how much of it has been released
    roster: list[Creep] = field(default_factory=list)
    spawned: int = 0
    spawn_countdown: int = 0
    build_countdown: int = 0

    # Active creeps keyed by handle; insertion order is roster order
    creeps: dict[int, Creep] = field(default_factory=dict)
    towers: list[Tower] = field(default_factory=list)
    cursor: Cursor = field(default_factory=lambda: Cursor(x=0, y=0))

    next_creep_id: int = 1
    tick: int = 0
    resume_mode: Mode | None = None
    round_won: bool = False

    @property
    def active(self) -> bool:
        return self.mode in ACTIVE_MODES

    def creep(self, creep_id: int | None) -> Creep | None:
        if creep_id is None:
            return None
        return self.creeps.get(creep_id)
