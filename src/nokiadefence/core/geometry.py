from __future__ import annotations

from dataclasses import dataclass


# Nokia 3310 screen: 84x48, with a HUD strip above a 12x6 grid of 7px tiles.
GAME_WIDTH = 84
GAME_HEIGHT = 48
TILE_SIZE = 7
TILE_CENTER = 3
HUD_OFFSET = 6
MAP_COLUMNS = GAME_WIDTH // TILE_SIZE
MAP_ROWS = (GAME_HEIGHT - HUD_OFFSET) // TILE_SIZE


@dataclass(frozen=True, slots=True)
class Rect:
    """Half-open pixel rectangle: min edges inclusive, max edges exclusive."""

    min_x: int
    min_y: int
    max_x: int
    max_y: int

    @classmethod
    def centered(cls, x: int, y: int, radius: int) -> "Rect":
        return cls(x - radius, y - radius, x + radius + 1, y + radius + 1)

    @property
    def width(self) -> int:
        return self.max_x - self.min_x

    @property
    def height(self) -> int:
        return self.max_y - self.min_y

    def is_empty(self) -> bool:
        return self.min_x >= self.max_x or self.min_y >= self.max_y

    def contains(self, x: int, y: int) -> bool:
        return self.min_x <= x < self.max_x and self.min_y <= y < self.max_y

    def overlaps(self, other: "Rect") -> bool:
        if self.is_empty() or other.is_empty():
            return False
        return (
            self.min_x < other.max_x
            and other.min_x < self.max_x
            and self.min_y < other.max_y
            and other.min_y < self.max_y
        )


def tile_to_pixel(tile_x: int, tile_y: int) -> tuple[int, int]:
    return (
        tile_x * TILE_SIZE + TILE_CENTER,
        tile_y * TILE_SIZE + TILE_CENTER + HUD_OFFSET,
    )


def pixel_to_tile(x: int, y: int) -> tuple[int, int]:
    return x // TILE_SIZE, (y - HUD_OFFSET) // TILE_SIZE


def tile_rect(tile_x: int, tile_y: int) -> Rect:
    left = tile_x * TILE_SIZE
    top = tile_y * TILE_SIZE + HUD_OFFSET
    return Rect(left, top, left + TILE_SIZE, top + TILE_SIZE)


def tile_in_map(tile_x: int, tile_y: int) -> bool:
    return 0 <= tile_x < MAP_COLUMNS and 0 <= tile_y < MAP_ROWS


def step_toward(value: int, target: int) -> int:
    if target > value:
        return value + 1
    if target < value:
        return value - 1
    return value
