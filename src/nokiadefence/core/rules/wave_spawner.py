# src/nokiadefence/core/rules/wave_spawner.py
from __future__ import annotations

import logging
from typing import Mapping

from ..model.creeps import build_roster
from ..model.entities import Creep
from ..model.sprites import SpriteSheet


logger = logging.getLogger(__name__)

SPAWN_INTERVAL = 180


def start_wave(
    state,
    map_data,
    sprites: Mapping[str, SpriteSheet],
    *,
    spawn_interval: int = SPAWN_INTERVAL,
) -> None:
    """Build the roster for ``state.wave_index`` and arm the spawn countdown."""
    kinds = map_data.waves[state.wave_index]
    state.roster = build_roster(kinds, sprites)
    state.spawned = 0
    state.spawn_countdown = spawn_interval
    logger.info(
        "wave %d/%d on %s: %d creeps",
        state.wave_index + 1,
        map_data.wave_count,
        map_data.name,
        len(state.roster),
    )


def step_spawner(state, map_data, *, spawn_interval: int = SPAWN_INTERVAL) -> Creep | None:
    """
    Count down once; on zero release the next roster creep at the spawn waypoint.
    """
    if state.spawned >= len(state.roster):
        return None

    state.spawn_countdown -= 1
    if state.spawn_countdown > 0:
        return None
    state.spawn_countdown = spawn_interval

    creep = state.roster[state.spawned]
    state.spawned += 1
    spawn_creep(state, map_data, creep)
    return creep


def spawn_creep(state, map_data, creep: Creep) -> None:
    creep.x, creep.y = map_data.spawn_px
    creep.next_waypoint = 1
    creep.creep_id = state.next_creep_id
    state.next_creep_id += 1
    state.creeps[creep.creep_id] = creep
    logger.debug("spawned creep %d (%s)", creep.creep_id, creep.kind)


def remaining_to_spawn(state) -> int:
    return max(0, len(state.roster) - state.spawned)


def wave_cleared(state) -> bool:
    return bool(state.roster) and remaining_to_spawn(state) == 0 and not state.creeps


def has_more_waves(state, map_data) -> bool:
    return state.wave_index + 1 < map_data.wave_count
