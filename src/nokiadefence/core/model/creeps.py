from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping

from .entities import Creep
from .sprites import SpriteSheet


HORIZONTAL_TAG = "horizontal"
VERTICAL_TAG = "vertical"


@dataclass(frozen=True)
class CreepDef:
    kind: str
    health: int
    damage: int
    loot: int
    sprite: str


CREEP_DEFS: dict[str, CreepDef] = {
    "tiny": CreepDef(kind="tiny", health=100, damage=1, loot=50, sprite="tiny-monster"),
    "small": CreepDef(kind="small", health=1000, damage=1, loot=50, sprite="small-monster"),
    "big": CreepDef(kind="big", health=4500, damage=1, loot=200, sprite="big-monster"),
}


def get_creep_def(kind: str) -> CreepDef:
    try:
        return CREEP_DEFS[kind]
    except KeyError as exc:
        raise KeyError(f"Unknown creep kind: {kind!r}") from exc


def new_creep(kind: str, sprites: Mapping[str, SpriteSheet]) -> Creep:
    creep_def = get_creep_def(kind)
    return Creep(
        kind=creep_def.kind,
        health=creep_def.health,
        damage=creep_def.damage,
        loot=creep_def.loot,
        sprite=sprites[creep_def.sprite],
    )


def build_roster(kinds: Iterable[str], sprites: Mapping[str, SpriteSheet]) -> list[Creep]:
    return [new_creep(kind, sprites) for kind in kinds]
