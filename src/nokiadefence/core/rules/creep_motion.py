# src/nokiadefence/core/rules/creep_motion.py
from __future__ import annotations

from dataclasses import dataclass, field
import logging

from ..model.creeps import HORIZONTAL_TAG, VERTICAL_TAG
from ..model.entities import BREACHED, CONTINUE, DIED, Creep, Direction, Outcome, RemovalReason
from .tower_attack import forget_creeps


logger = logging.getLogger(__name__)

CREEP_MOVE_INTERVAL = 10


@dataclass(slots=True)
class CreepStepReport:
    died: list[Creep] = field(default_factory=list)
    breached: list[Creep] = field(default_factory=list)

    @property
    def removed(self) -> list[Creep]:
        return self.died + self.breached


def step_creeps(state, map_data, *, move_interval: int = CREEP_MOVE_INTERVAL) -> CreepStepReport:
    """
    Update every active creep once, in roster order.

    Dead creeps pay out their loot and leave the roster; a creep standing on
    the last waypoint leaves the roster as a breach. Towers forget removed
    creeps before this returns.
    """
    report = CreepStepReport()
    for creep_id, creep in list(state.creeps.items()):
        outcome = update_creep(creep, state, map_data, move_interval=move_interval)
        if not outcome.removed:
            continue
        del state.creeps[creep_id]
        if outcome.reason is RemovalReason.DIED:
            report.died.append(creep)
            logger.debug("creep %d (%s) died, loot %d", creep_id, creep.kind, creep.loot)
        else:
            report.breached.append(creep)
            logger.info("creep %d (%s) breached the base", creep_id, creep.kind)

    if report.died or report.breached:
        forget_creeps(state, {c.creep_id for c in report.removed})
    return report


def update_creep(creep: Creep, state, map_data, *, move_interval: int = CREEP_MOVE_INTERVAL) -> Outcome:
    if creep.health <= 0:
        state.money += creep.loot
        return DIED

    creep.last_moved = (creep.last_moved + 1) % move_interval
    if creep.last_moved != 0:
        return CONTINUE

    breached = navigate_waypoints(creep, map_data)
    animate(creep)
    return BREACHED if breached else CONTINUE


def navigate_waypoints(creep: Creep, map_data) -> bool:
    """
    Step one pixel per unaligned axis toward the next waypoint.

    Horizontal is resolved before vertical, so a diagonal step leaves the
    creep facing up or down. Returns True once the last waypoint is reached.
    """
    target_x, target_y = map_data.waypoint_px(creep.next_waypoint)
    if target_x > creep.x:
        creep.x += 1
        creep.direction = Direction.RIGHT
    elif target_x < creep.x:
        creep.x -= 1
        creep.direction = Direction.LEFT
    if target_y > creep.y:
        creep.y += 1
        creep.direction = Direction.DOWN
    elif target_y < creep.y:
        creep.y -= 1
        creep.direction = Direction.UP

    if creep.x == target_x and creep.y == target_y:
        if creep.next_waypoint < map_data.last_waypoint:
            creep.next_waypoint += 1
        else:
            return True
    return False


def animate(creep: Creep) -> None:
    if creep.direction is Direction.RIGHT:
        creep.flip = False
        tag_name = HORIZONTAL_TAG
    elif creep.direction is Direction.LEFT:
        creep.flip = True
        tag_name = HORIZONTAL_TAG
    else:
        creep.flip = False
        tag_name = VERTICAL_TAG

    tag = creep.sprite.tag(tag_name)
    if not tag.contains(creep.frame):
        creep.frame = tag.start
        return
    creep.frame += 1
    if creep.frame >= tag.stop:
        creep.frame = tag.start
