from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import json
import logging
from typing import Any, Iterable

from ..errors import AssetError
from ..geometry import step_toward, tile_to_pixel


logger = logging.getLogger(__name__)

Tile = tuple[int, int]

DEFAULT_CURSOR_START: Tile = (2, 5)


@dataclass(slots=True)
class MapData:
    """
    Immutable route and build rules for one map.

    waypoints: tile coordinates in walking order; waypoints[0] is the spawn.
    no_build: tiles where towers may not be placed (includes every route tile).
    waves: creep kinds per wave, in release order.
    """
    name: str
    waypoints: tuple[Tile, ...]
    no_build: frozenset[Tile]
    waves: tuple[tuple[str, ...], ...]
    cursor_start: Tile = DEFAULT_CURSOR_START

    def waypoint_px(self, index: int) -> tuple[int, int]:
        try:
            tile_x, tile_y = self.waypoints[index]
        except IndexError as e:
            raise IndexError(f"Map '{self.name}' has no waypoint {index}") from e
        return tile_to_pixel(tile_x, tile_y)

    @property
    def spawn_px(self) -> tuple[int, int]:
        return self.waypoint_px(0)

    @property
    def last_waypoint(self) -> int:
        return len(self.waypoints) - 1

    @property
    def wave_count(self) -> int:
        return len(self.waves)


def route_tiles(waypoints: Iterable[Tile]) -> set[Tile]:
    """Tiles crossed when walking the route one tile per axis at a time."""
    points = list(waypoints)
    tiles: set[Tile] = set()
    if not points:
        return tiles
    x, y = points[0]
    tiles.add((x, y))
    for target_x, target_y in points[1:]:
        while (x, y) != (target_x, target_y):
            x = step_toward(x, target_x)
            y = step_toward(y, target_y)
            tiles.add((x, y))
    return tiles


def load_map_json(path: str | Path) -> MapData:
    p = Path(path)
    logger.info("loading %s", p)
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise AssetError(f"Missing map: {p}") from exc
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise AssetError(f"Map {p} is not valid JSON: {exc}") from exc
    return parse_map(data, source=str(p))


def _as_list(value: Any, *, source: str, what: str) -> list:
    if not isinstance(value, list):
        raise AssetError(f"Map {source}: {what} must be a list")
    return value


def _parse_tile(value: Any, *, source: str, what: str) -> Tile:
    if not isinstance(value, (list, tuple)) or len(value) != 2:
        raise AssetError(f"Map {source}: invalid {what} {value!r}")
    try:
        return int(value[0]), int(value[1])
    except (TypeError, ValueError) as exc:
        raise AssetError(f"Map {source}: invalid {what} {value!r}") from exc


def parse_map(data: Any, *, source: str = "<memory>") -> MapData:
    if not isinstance(data, dict):
        raise AssetError(f"Map {source} must be a JSON object")
    missing = {"name", "waypoints", "waves"} - set(data)
    if missing:
        raise AssetError(f"Map {source}: missing keys {sorted(missing)}")

    waypoints = tuple(
        _parse_tile(w, source=source, what="waypoint")
        for w in _as_list(data["waypoints"], source=source, what="waypoints")
    )
    if len(waypoints) < 2:
        raise AssetError(f"Map {source}: waypoints must include at least 2 tiles")

    no_build = {
        _parse_tile(t, source=source, what="no_build tile")
        for t in _as_list(data.get("no_build", []), source=source, what="no_build")
    }
    no_build |= route_tiles(waypoints)

    waves_raw = _as_list(data["waves"], source=source, what="waves")
    if not waves_raw:
        raise AssetError(f"Map {source}: at least one wave is required")
    waves: list[tuple[str, ...]] = []
    for idx, wave in enumerate(waves_raw):
        if not isinstance(wave, list) or not wave:
            raise AssetError(f"Map {source}: wave {idx} must be a non-empty list of creep kinds")
        waves.append(tuple(str(kind) for kind in wave))

    cursor_start = DEFAULT_CURSOR_START
    if data.get("cursor_start") is not None:
        cursor_start = _parse_tile(data["cursor_start"], source=source, what="cursor_start")

    return MapData(
        name=str(data["name"]),
        waypoints=waypoints,
        no_build=frozenset(no_build),
        waves=tuple(waves),
        cursor_start=cursor_start,
    )
