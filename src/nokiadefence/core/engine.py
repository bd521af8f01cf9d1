# src/nokiadefence/core/engine.py
from __future__ import annotations

from dataclasses import dataclass, field
import logging
import queue
from typing import Any, Literal, Union

from ..config_loader import GameConfig
from .controls import NO_INPUT, Control, TickInput
from .geometry import pixel_to_tile, tile_to_pixel
from .model.content import CURSOR_SPRITE, GameContent
from .model.entities import Creep
from .model.map import MapData
from .model.state import ACTIVE_MODES, GameState, Mode
from .render import RenderState, render_state
from .rules.creep_motion import step_creeps
from .rules.cursor import new_cursor, start_cooldown, update_cursor
from .rules.placement import BuildResult, build_at_cursor, place_tower, sell_at_cursor, sell_tower
from .rules.tower_attack import step_towers
from .rules.wave_spawner import has_more_waves, remaining_to_spawn, start_wave, step_spawner, wave_cleared
from .scheduler import ManualScheduler, Scheduler, TimerHandle


logger = logging.getLogger(__name__)


ActionType = Literal[
    "START_ROUND",
    "PAUSE_TOGGLE",
    "BUILD_TOWER",
    "SELL_TOWER",
]


@dataclass(frozen=True, slots=True)
class ContentLoaded:
    content: GameContent


@dataclass(frozen=True, slots=True)
class EnterWaiting:
    pass


@dataclass(frozen=True, slots=True)
class ResetRound:
    pass


EngineEvent = Union[ContentLoaded, EnterWaiting, ResetRound]


@dataclass(slots=True)
class StepReport:
    mode: Mode
    died: list[Creep] = field(default_factory=list)
    breached: list[Creep] = field(default_factory=list)
    build: BuildResult | None = None
    sell: BuildResult | None = None


class Engine:
    """
    Deterministic game loop with no GUI dependency.

    One call to ``step`` is one simulation tick. Content arrives through
    ``finish_loading`` (possibly from another thread) and timed transitions
    arrive through the scheduler; both are queued as events and applied at
    the start of the next tick.
    """

    def __init__(self, config: GameConfig | None = None, scheduler: Scheduler | None = None):
        self.config = config or GameConfig()
        self.scheduler = scheduler if scheduler is not None else ManualScheduler()
        self.state = GameState(mode=Mode.LOADING, money=self.config.starting_money)
        self.content: GameContent | None = None
        self.quit_requested = False

        self._events: queue.SimpleQueue[EngineEvent] = queue.SimpleQueue()
        self._timers: list[TimerHandle] = []

    # -- content -----------------------------------------------------------

    @property
    def map(self) -> MapData:
        if self.content is None:
            raise RuntimeError("content has not finished loading")
        return self.content.maps[self.state.map_index]

    @property
    def sprites(self):
        if self.content is None:
            raise RuntimeError("content has not finished loading")
        return self.content.sprites

    def finish_loading(self, content: GameContent) -> None:
        self.post(ContentLoaded(content))

    def post(self, event: EngineEvent) -> None:
        self._events.put(event)

    # -- tick --------------------------------------------------------------

    def step(self, inputs: TickInput = NO_INPUT) -> StepReport:
        self._drain_events()
        s = self.state
        report = StepReport(mode=s.mode)

        if inputs.just_pressed(Control.QUIT):
            logger.info("quit requested")
            self.quit_requested = True
            return report

        if s.mode is Mode.LOADING:
            return report

        if s.mode is Mode.TITLE:
            if inputs.just_pressed(Control.CONFIRM):
                self.start_round()
            report.mode = s.mode
            return report

        if inputs.just_pressed(Control.PAUSE) and s.mode in (Mode.PAUSED, *ACTIVE_MODES):
            self.toggle_pause()
            report.mode = s.mode
            return report

        if not s.active:
            return report

        cfg = self.config
        s.tick += 1

        update_cursor(s.cursor, inputs, repeat_ticks=cfg.cursor_repeat_ticks)
        step_towers(s, tower_range=cfg.tower_range, hitbox=cfg.creep_hitbox)

        creeps = step_creeps(s, self.map, move_interval=cfg.creep_move_interval)
        report.died = creeps.died
        report.breached = creeps.breached
        if creeps.breached:
            self._finish_round(won=False)
            report.mode = s.mode
            return report

        if inputs.just_pressed(Control.CONFIRM):
            report.build = build_at_cursor(s, self.map, self.sprites)
            if report.build.ok:
                start_cooldown(s.cursor, cfg.cursor_cooldown)
        if inputs.just_pressed(Control.SELL):
            report.sell = sell_at_cursor(s, refund=cfg.sell_refund)

        if s.mode is Mode.BUILD:
            s.build_countdown -= 1
            if s.build_countdown <= 0:
                start_wave(s, self.map, self.sprites, spawn_interval=cfg.spawn_interval)
                self._set_mode(Mode.WAVE)
        else:
            step_spawner(s, self.map, spawn_interval=cfg.spawn_interval)
            if wave_cleared(s):
                self._clear_wave()

        report.mode = s.mode
        return report

    # -- actions -----------------------------------------------------------

    def act(self, action_type: ActionType, payload: dict[str, Any] | None = None) -> BuildResult | None:
        """
        Apply a command outside the input stream (headless runs, scenarios).

        Tower actions take ``tile_x``/``tile_y`` in the payload.
        """
        if action_type == "START_ROUND":
            self._drain_events()
            self.start_round()
            return None

        if action_type == "PAUSE_TOGGLE":
            self.toggle_pause()
            return None

        if action_type in ("BUILD_TOWER", "SELL_TOWER"):
            if not self.state.active:
                logger.info("rejected %s: mode is %s", action_type, self.state.mode.value)
                return None
            if not payload or payload.get("tile_x") is None or payload.get("tile_y") is None:
                raise ValueError(f"{action_type} needs tile_x and tile_y")
            x, y = tile_to_pixel(int(payload["tile_x"]), int(payload["tile_y"]))
            if action_type == "BUILD_TOWER":
                return place_tower(self.state, self.map, self.sprites, x, y)
            return sell_tower(self.state, x, y, refund=self.config.sell_refund)

        raise ValueError(f"Unknown action_type={action_type!r}")

    def start_round(self) -> None:
        if self.content is None:
            raise RuntimeError("content has not finished loading")
        self._reset_round()
        self._set_mode(Mode.BUILD)

    def toggle_pause(self) -> None:
        s = self.state
        if s.mode is Mode.PAUSED:
            self._set_mode(s.resume_mode or Mode.BUILD)
            s.resume_mode = None
        elif s.active:
            s.resume_mode = s.mode
            self._set_mode(Mode.PAUSED)

    def reset(self) -> None:
        """Cancel pending transitions and go back to the title on map 0."""
        for timer in self._timers:
            timer.cancel()
        self._timers.clear()

        pending: list[EngineEvent] = []
        while True:
            try:
                pending.append(self._events.get_nowait())
            except queue.Empty:
                break
        for event in pending:
            if isinstance(event, ContentLoaded):
                self.content = event.content

        self.quit_requested = False
        self.state.map_index = 0
        if self.content is None:
            self.state = GameState(mode=Mode.LOADING, money=self.config.starting_money)
            return
        self._reset_round()
        self._set_mode(Mode.TITLE)

    # -- views -------------------------------------------------------------

    def render_state(self) -> RenderState:
        if self.content is None:
            return render_state(self.state, map_count=0, wave_count=0, cursor_sheet=None)
        return render_state(
            self.state,
            map_count=self.content.map_count,
            wave_count=self.map.wave_count,
            cursor_sheet=self.sprites.get(CURSOR_SPRITE),
        )

    def observe(self) -> dict[str, Any]:
        s = self.state
        loaded = self.content is not None
        return {
            "mode": s.mode.value,
            "tick": s.tick,
            "money": s.money,
            "map": self.map.name if loaded else None,
            "map_index": s.map_index,
            "map_count": self.content.map_count if loaded else 0,
            "wave": s.wave_index,
            "wave_count": self.map.wave_count if loaded else 0,
            "build_countdown": s.build_countdown,
            "to_spawn": remaining_to_spawn(s),
            "cursor": {
                "x": s.cursor.x,
                "y": s.cursor.y,
                "tile": pixel_to_tile(s.cursor.x, s.cursor.y),
                "cooldown": s.cursor.cooldown,
            },
            "creeps": [
                {
                    "id": c.creep_id,
                    "kind": c.kind,
                    "x": c.x,
                    "y": c.y,
                    "health": c.health,
                    "next_waypoint": c.next_waypoint,
                    "direction": c.direction.value,
                    "frame": c.frame,
                    "flip": c.flip,
                }
                for c in s.creeps.values()
            ],
            "towers": [
                {
                    "kind": t.kind,
                    "x": t.x,
                    "y": t.y,
                    "tile": pixel_to_tile(t.x, t.y),
                    "cost": t.cost,
                    "damage": t.damage,
                    "frame": t.frame,
                    "target": t.target_id,
                }
                for t in s.towers
            ],
        }

    # -- transitions -------------------------------------------------------

    def _drain_events(self) -> None:
        while True:
            try:
                event = self._events.get_nowait()
            except queue.Empty:
                return
            self._handle_event(event)

    def _handle_event(self, event: EngineEvent) -> None:
        s = self.state
        if isinstance(event, ContentLoaded):
            self.content = event.content
            logger.info("content loaded: %d maps", event.content.map_count)
            if s.mode is Mode.LOADING:
                s.map_index = 0
                self._reset_round()
                self._set_mode(Mode.TITLE)
        elif isinstance(event, EnterWaiting):
            if s.mode in (Mode.WIN, Mode.LOSE):
                self._set_mode(Mode.WAITING)
                self._schedule(self.config.reset_delay, ResetRound())
        elif isinstance(event, ResetRound):
            if s.mode is not Mode.WAITING:
                return
            if s.round_won and s.map_index + 1 < self.content.map_count:
                s.map_index += 1
                self._reset_round()
                self._set_mode(Mode.BUILD)
            else:
                s.map_index = 0
                self._reset_round()
                self._set_mode(Mode.TITLE)

    def _clear_wave(self) -> None:
        s = self.state
        logger.info("wave %d/%d cleared on %s", s.wave_index + 1, self.map.wave_count, self.map.name)
        if has_more_waves(s, self.map):
            s.wave_index += 1
            s.roster = []
            s.spawned = 0
            s.build_countdown = self.config.build_phase_ticks
            self._set_mode(Mode.BUILD)
        else:
            self._finish_round(won=True)

    def _finish_round(self, *, won: bool) -> None:
        s = self.state
        s.round_won = won
        self._set_mode(Mode.WIN if won else Mode.LOSE)
        self._schedule(self.config.result_delay, EnterWaiting())

    def _schedule(self, delay: float, event: EngineEvent) -> None:
        self._timers = [t for t in self._timers if not t.fired]
        self._timers.append(self.scheduler.call_later(delay, lambda: self.post(event)))

    def _reset_round(self) -> None:
        s = self.state
        s.money = self.config.starting_money
        s.towers.clear()
        s.creeps.clear()
        s.roster = []
        s.spawned = 0
        s.spawn_countdown = 0
        s.wave_index = 0
        s.build_countdown = self.config.build_phase_ticks
        s.cursor = new_cursor(self.map)
        s.resume_mode = None
        s.round_won = False

    def _set_mode(self, mode: Mode) -> None:
        if self.state.mode is mode:
            return
        logger.info("mode %s -> %s", self.state.mode.value, mode.value)
        self.state.mode = mode
