from __future__ import annotations

from enum import Enum
import logging
from typing import Mapping

from ..geometry import pixel_to_tile, tile_in_map, tile_rect
from ..model.entities import Tower
from ..model.sprites import SpriteSheet
from ..model.towers import BASIC_TOWER, SELL_REFUND, get_tower_def, new_tower


logger = logging.getLogger(__name__)


class BuildResult(str, Enum):
    BUILT = "built"
    UPGRADED = "upgraded"
    SOLD = "sold"
    NO_FUNDS = "no_funds"
    NO_BUILD_TILE = "no_build_tile"
    MAX_TIER = "max_tier"
    NO_TOWER = "no_tower"

    @property
    def ok(self) -> bool:
        return self in (BuildResult.BUILT, BuildResult.UPGRADED, BuildResult.SOLD)


def tower_at(state, x: int, y: int) -> Tower | None:
    for tower in state.towers:
        if tower.x == x and tower.y == y:
            return tower
    return None


def tower_in_tile(state, tile: tuple[int, int]) -> Tower | None:
    for tower in state.towers:
        if pixel_to_tile(tower.x, tower.y) == tile:
            return tower
    return None


def is_no_build(map_data, x: int, y: int) -> bool:
    tile = pixel_to_tile(x, y)
    if not tile_in_map(*tile):
        return True
    rect = tile_rect(*tile)
    return any(rect.overlaps(tile_rect(*blocked)) for blocked in map_data.no_build)


def place_tower(
    state,
    map_data,
    sprites: Mapping[str, SpriteSheet],
    x: int,
    y: int,
    tower_kind: str = BASIC_TOWER,
) -> BuildResult:
    """
    Buy a tower at (x, y), or upgrade the one already standing there.
    """
    if is_no_build(map_data, x, y):
        logger.info("rejected tower at (%d,%d): no-build tile", x, y)
        return BuildResult.NO_BUILD_TILE

    existing = tower_at(state, x, y)
    if existing is not None:
        return upgrade_tower(state, existing, sprites)

    tower_def = get_tower_def(tower_kind)
    moneydiff = state.money - tower_def.cost
    logger.info("buying tower %d - %d = %d", state.money, tower_def.cost, moneydiff)
    if moneydiff < 0:
        logger.info("rejected tower at (%d,%d): insufficient funds", x, y)
        return BuildResult.NO_FUNDS

    state.towers.append(new_tower(tower_def.kind, x, y, sprites))
    state.money = moneydiff
    return BuildResult.BUILT


def upgrade_tower(state, tower: Tower, sprites: Mapping[str, SpriteSheet]) -> BuildResult:
    """Replace a tower with its next tier, charging the full price of that tier."""
    tower_def = get_tower_def(tower.kind)
    if tower_def.upgrade is None:
        logger.info("rejected upgrade at (%d,%d): %s is the top tier", tower.x, tower.y, tower.kind)
        return BuildResult.MAX_TIER

    upgrade_def = get_tower_def(tower_def.upgrade)
    moneydiff = state.money - upgrade_def.cost
    logger.info("upgrading tower %d - %d = %d", state.money, upgrade_def.cost, moneydiff)
    if moneydiff < 0:
        logger.info("rejected upgrade at (%d,%d): insufficient funds", tower.x, tower.y)
        return BuildResult.NO_FUNDS

    index = state.towers.index(tower)
    state.towers[index] = new_tower(upgrade_def.kind, tower.x, tower.y, sprites)
    state.money = moneydiff
    return BuildResult.UPGRADED


def sell_tower(state, x: int, y: int, *, refund: int = SELL_REFUND) -> BuildResult:
    if refund < 0:
        raise ValueError("refund must be non-negative")
    tower = tower_in_tile(state, pixel_to_tile(x, y))
    if tower is None:
        logger.info("rejected sell at (%d,%d): no tower", x, y)
        return BuildResult.NO_TOWER
    state.towers.remove(tower)
    state.money += refund
    logger.info("sold %s tower for %d, money %d", tower.kind, refund, state.money)
    return BuildResult.SOLD


def build_at_cursor(
    state,
    map_data,
    sprites: Mapping[str, SpriteSheet],
    tower_kind: str = BASIC_TOWER,
) -> BuildResult:
    return place_tower(state, map_data, sprites, state.cursor.x, state.cursor.y, tower_kind)


def sell_at_cursor(state, *, refund: int = SELL_REFUND) -> BuildResult:
    return sell_tower(state, state.cursor.x, state.cursor.y, refund=refund)
