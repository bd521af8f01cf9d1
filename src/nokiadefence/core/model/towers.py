from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

from .entities import Tower
from .sprites import SpriteSheet


BASIC_TOWER = "basic"
SELL_REFUND = 100


@dataclass(frozen=True)
class TowerDef:
    kind: str
    title: str
    cost: int
    damage: int          # applied every tick while a target is held
    sprite: str
    upgrade: str | None = None


TOWER_DEFS: dict[str, TowerDef] = {
    "basic": TowerDef(
        kind="basic",
        title="BASIC TOWER",
        cost=200,
        damage=5,
        sprite="basic-tower",
        upgrade="strong",
    ),
    "strong": TowerDef(
        kind="strong",
        title="STRONG TOWER",
        cost=500,
        damage=20,
        sprite="strong-tower",
    ),
}


def get_tower_def(kind: str) -> TowerDef:
    try:
        return TOWER_DEFS[kind]
    except KeyError as exc:
        raise KeyError(f"Unknown tower kind: {kind!r}") from exc


def new_tower(kind: str, x: int, y: int, sprites: Mapping[str, SpriteSheet]) -> Tower:
    tower_def = get_tower_def(kind)
    return Tower(
        kind=tower_def.kind,
        x=int(x),
        y=int(y),
        cost=tower_def.cost,
        damage=tower_def.damage,
        sprite=sprites[tower_def.sprite],
    )
