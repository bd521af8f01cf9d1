# src/nokiadefence/core/rules/tower_attack.py
from __future__ import annotations

import logging
from typing import Iterable

from ..geometry import Rect
from ..model.entities import CONTINUE, Creep, Outcome, Tower


logger = logging.getLogger(__name__)

TOWER_RANGE = 10
CREEP_HITBOX = 3


def step_towers(state, *, tower_range: int = TOWER_RANGE, hitbox: int = CREEP_HITBOX) -> None:
    """
    Tick tower -> target -> damage, for every tower in placement order.
    """
    for tower in state.towers:
        update_tower(tower, state, tower_range=tower_range, hitbox=hitbox)


def update_tower(
    tower: Tower,
    state,
    *,
    tower_range: int = TOWER_RANGE,
    hitbox: int = CREEP_HITBOX,
) -> Outcome:
    if tower.frame < tower.sprite.last_frame:
        tower.frame += 1

    if tower.target_id is not None:
        target = state.creep(tower.target_id)
        if target is None or not target.alive or not in_range(tower, target, tower_range, hitbox):
            tower.target_id = None
            return CONTINUE
    else:
        target = select_target(tower, state.creeps.values(), tower_range, hitbox)
        if target is None:
            return CONTINUE
        tower.target_id = target.creep_id

    if target.attack(tower.damage):
        logger.debug("tower at (%d,%d) killed creep %d", tower.x, tower.y, target.creep_id)
        tower.target_id = None
    return CONTINUE


def select_target(
    tower: Tower,
    creeps: Iterable[Creep],
    tower_range: int = TOWER_RANGE,
    hitbox: int = CREEP_HITBOX,
) -> Creep | None:
    """First living creep in roster order whose hitbox overlaps the range box."""
    box = range_box(tower, tower_range)
    for creep in creeps:
        if not creep.alive:
            continue
        if box.overlaps(creep_hitbox(creep, hitbox)):
            return creep
    return None


def in_range(tower: Tower, creep: Creep, tower_range: int = TOWER_RANGE, hitbox: int = CREEP_HITBOX) -> bool:
    return range_box(tower, tower_range).overlaps(creep_hitbox(creep, hitbox))


def range_box(tower: Tower, tower_range: int = TOWER_RANGE) -> Rect:
    return Rect.centered(tower.x, tower.y, tower_range)


def creep_hitbox(creep: Creep, hitbox: int = CREEP_HITBOX) -> Rect:
    return Rect.centered(creep.x, creep.y, hitbox)


def forget_creeps(state, creep_ids: set[int]) -> None:
    for tower in state.towers:
        if tower.target_id in creep_ids:
            tower.target_id = None


def target_lines(state) -> list[tuple[int, int, int, int]]:
    lines: list[tuple[int, int, int, int]] = []
    for tower in state.towers:
        target = state.creep(tower.target_id)
        if target is None:
            continue
        lines.append((tower.x, tower.y, target.x, target.y))
    return lines
