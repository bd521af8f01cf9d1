from __future__ import annotations

from ..controls import MOVEMENT, TickInput
from ..geometry import TILE_SIZE, pixel_to_tile, tile_in_map, tile_to_pixel
from ..model.entities import CONTINUE, Cursor, Outcome


CURSOR_REPEAT_TICKS = 8
CURSOR_COOLDOWN = 20


def new_cursor(map_data) -> Cursor:
    x, y = tile_to_pixel(*map_data.cursor_start)
    return Cursor(x=x, y=y)


def update_cursor(cursor: Cursor, inputs: TickInput, *, repeat_ticks: int = CURSOR_REPEAT_TICKS) -> Outcome:
    if cursor.cooldown > 0:
        cursor.cooldown -= 1

    moves = [delta for control, delta in MOVEMENT.items() if inputs.is_held(control)]
    if not moves:
        cursor.held_ticks = 0
        return CONTINUE

    # Move on the first held tick, then once per repeat interval
    due = cursor.held_ticks % max(1, repeat_ticks) == 0
    cursor.held_ticks += 1
    if not due:
        return CONTINUE

    old_pos = (cursor.x, cursor.y)
    for dx, dy in moves:
        move_cursor(cursor, dx * TILE_SIZE, dy * TILE_SIZE)

    # Keep the cursor inside the map
    if not tile_in_map(*pixel_to_tile(cursor.x, cursor.y)):
        cursor.x, cursor.y = old_pos
    return CONTINUE


def move_cursor(cursor: Cursor, dx: int, dy: int) -> None:
    cursor.x += dx
    cursor.y += dy
    cursor.cooldown = 0


def start_cooldown(cursor: Cursor, ticks: int = CURSOR_COOLDOWN) -> None:
    cursor.cooldown = max(0, ticks)
