"""Read-only views of the simulation for a renderer to draw."""

from __future__ import annotations

from dataclasses import dataclass

from .model.entities import Creep, Cursor, Tower
from .model.sprites import FrameRect, SpriteSheet
from .model.state import GameState, Mode
from .rules.tower_attack import target_lines


@dataclass(frozen=True, slots=True)
class Drawable:
    sheet: str
    x: int                  # pixel centre
    y: int
    frame: int
    rect: FrameRect
    flip: bool = False


@dataclass(frozen=True, slots=True)
class Hud:
    mode: Mode
    money: int
    map_number: int
    map_count: int
    wave_number: int
    wave_count: int
    build_countdown: int


@dataclass(frozen=True, slots=True)
class RenderState:
    hud: Hud
    towers: tuple[Drawable, ...] = ()
    creeps: tuple[Drawable, ...] = ()
    cursor: Drawable | None = None
    target_lines: tuple[tuple[int, int, int, int], ...] = ()


def _drawable(sheet: SpriteSheet, x: int, y: int, frame: int, flip: bool = False) -> Drawable:
    frame = max(0, min(frame, sheet.last_frame))
    return Drawable(sheet=sheet.name, x=x, y=y, frame=frame, rect=sheet.frame_rect(frame), flip=flip)


def render_creep(creep: Creep) -> Drawable:
    return _drawable(creep.sprite, creep.x, creep.y, creep.frame, creep.flip)


def render_tower(tower: Tower) -> Drawable:
    return _drawable(tower.sprite, tower.x, tower.y, tower.frame)


def render_cursor(cursor: Cursor, sheet: SpriteSheet) -> Drawable | None:
    if not cursor.visible:
        return None
    return _drawable(sheet, cursor.x, cursor.y, 0)


def render_state(
    state: GameState,
    *,
    map_count: int,
    wave_count: int,
    cursor_sheet: SpriteSheet | None,
) -> RenderState:
    hud = Hud(
        mode=state.mode,
        money=state.money,
        map_number=state.map_index + 1,
        map_count=map_count,
        wave_number=state.wave_index + 1,
        wave_count=wave_count,
        build_countdown=state.build_countdown,
    )
    in_play = state.mode not in (Mode.LOADING, Mode.TITLE)
    if not in_play:
        return RenderState(hud=hud)
    cursor = None
    if cursor_sheet is not None and state.mode in (Mode.BUILD, Mode.WAVE, Mode.PAUSED):
        cursor = render_cursor(state.cursor, cursor_sheet)
    return RenderState(
        hud=hud,
        towers=tuple(render_tower(t) for t in state.towers),
        creeps=tuple(render_creep(c) for c in state.creeps.values()),
        cursor=cursor,
        target_lines=tuple(target_lines(state)),
    )
