from __future__ import annotations

import logging
import math
from pathlib import Path
import threading
from typing import Sequence

import pyglet
from pyglet import gl
from pyglet.math import Mat4
from pyglet.window import key

from .assets import DARK, LIGHT, SpriteImages, load_sprite_images
from .audio import Jukebox, MusicTrack, load_music
from .clock import PygletScheduler
from .ui_layout import HudStrip, OverlayLayout
from ..config_loader import GameConfig
from ..core.controls import Control, TickInput
from ..core.engine import Engine
from ..core.errors import AssetError
from ..core.geometry import GAME_HEIGHT, GAME_WIDTH, HUD_OFFSET
from ..core.model.content import DEFAULT_DATA_DIR, load_content
from ..core.model.state import Mode
from ..core.render import Drawable


logger = logging.getLogger(__name__)

WINDOW_SCALE = 10
TICK_RATE = 60.0
MAX_STEPS_PER_FRAME = 5

PRESS_KEYS: dict[int, Control] = {
    key.F: Control.FULLSCREEN,
    key.E: Control.CONFIRM,
    key.ENTER: Control.CONFIRM,
    key.SPACE: Control.CONFIRM,
    key.X: Control.SELL,
    key.BACKSPACE: Control.SELL,
    key.P: Control.PAUSE,
    key.Q: Control.QUIT,
    key.ESCAPE: Control.QUIT,
}

HOLD_KEYS: dict[int, Control] = {
    key.W: Control.UP,
    key.UP: Control.UP,
    key.S: Control.DOWN,
    key.DOWN: Control.DOWN,
    key.A: Control.LEFT,
    key.LEFT: Control.LEFT,
    key.D: Control.RIGHT,
    key.RIGHT: Control.RIGHT,
}


def _to_gl(x: float, y: float) -> tuple[float, float]:
    # Logical rows grow downward; GL rows grow upward.
    return x, GAME_HEIGHT - 1 - y


class NokiaGui:
    def __init__(
        self,
        config: GameConfig,
        *,
        data_dir: Path | None = None,
        fullscreen: bool = False,
        music: bool = True,
    ) -> None:
        self.config = config
        self.data_dir = data_dir or DEFAULT_DATA_DIR
        self.engine = Engine(config, PygletScheduler())
        self.exit_code = 0

        self._logical_width = GAME_WIDTH
        self._logical_height = GAME_HEIGHT
        self._window_width = GAME_WIDTH * WINDOW_SCALE
        self._window_height = GAME_HEIGHT * WINDOW_SCALE
        self._view_scale = float(WINDOW_SCALE)
        self._view_offset_x = 0.0
        self._view_offset_y = 0.0

        self.window = pyglet.window.Window(
            width=self._window_width,
            height=self._window_height,
            caption="Nokia Defence",
            resizable=True,
        )
        self.keys = key.KeyStateHandler()
        self.window.push_handlers(self.keys)

        self.batch = pyglet.graphics.Batch()
        self.overlay_batch = pyglet.graphics.Batch()
        self.ui_batch = pyglet.graphics.Batch()
        self._background_group = pyglet.graphics.Group(order=0)
        self._tower_group = pyglet.graphics.Group(order=1)
        self._creep_group = pyglet.graphics.Group(order=2)
        self._line_group = pyglet.graphics.Group(order=3)
        self._cursor_group = pyglet.graphics.Group(order=4)

        self._background = pyglet.shapes.Rectangle(
            0, 0, GAME_WIDTH, GAME_HEIGHT, color=LIGHT, batch=self.batch, group=self._background_group
        )
        self._hud_rule = pyglet.shapes.Rectangle(
            0, GAME_HEIGHT - HUD_OFFSET, GAME_WIDTH, 1, color=DARK, batch=self.batch, group=self._background_group
        )

        self.images: dict[str, SpriteImages] = {}
        self.tower_sprites: list[pyglet.sprite.Sprite] = []
        self.creep_sprites: list[pyglet.sprite.Sprite] = []
        self.cursor_sprite: pyglet.sprite.Sprite | None = None
        self._target_lines: list[pyglet.shapes.Line] = []

        self._build_hud()
        self._build_overlay()

        self._music_enabled = music
        self._tracks: dict[str, MusicTrack] = {}
        self.jukebox: Jukebox | None = None

        self._pressed: set[Control] = set()
        self._accum = 0.0
        self._last_mode: Mode | None = None
        self._load_error: Exception | None = None
        self._loader = threading.Thread(target=self._load_content, name="content-loader", daemon=True)

        self.window.push_handlers(
            on_draw=self.on_draw,
            on_resize=self.on_resize,
            on_key_press=self.on_key_press,
            on_close=self.on_close,
        )
        if fullscreen:
            self.window.set_fullscreen(True)
        self._apply_viewport()
        self._apply_projection()

        self._loader.start()
        pyglet.clock.schedule_interval(self.update, 1 / TICK_RATE)

    # -- loading -----------------------------------------------------------

    def _load_content(self) -> None:
        # Runs on the loader thread: parse files only, no GL calls.
        try:
            content = load_content(self.data_dir, self.config.campaign)
            tracks = load_music(self.data_dir / "music") if self._music_enabled else {}
        except Exception as exc:
            # reported on the main thread by update()
            self._load_error = exc
            return
        self._tracks = tracks
        self.engine.finish_loading(content)

    def _on_content_ready(self) -> None:
        self.images = load_sprite_images(self.engine.sprites)
        if self._tracks:
            self.jukebox = Jukebox(self._tracks)

    # -- frame loop --------------------------------------------------------

    def update(self, dt: float) -> None:
        if self._load_error is not None:
            exc = self._load_error
            if isinstance(exc, (AssetError, OSError)):
                logger.error("failed to load content: %s", exc)
            else:
                logger.error("content loader crashed", exc_info=exc)
            self.exit_code = 1
            self._quit()
            return

        pressed = frozenset(self._pressed)
        self._pressed.clear()
        if Control.FULLSCREEN in pressed:
            self.window.set_fullscreen(not self.window.fullscreen)

        held = frozenset(control for symbol, control in HOLD_KEYS.items() if self.keys[symbol])
        self._accum = min(self._accum + max(0.0, dt), MAX_STEPS_PER_FRAME / TICK_RATE)
        steps = max(1, int(self._accum * TICK_RATE))
        self._accum = max(0.0, self._accum - steps / TICK_RATE)

        for i in range(steps):
            inputs = TickInput(pressed=pressed if i == 0 else frozenset(), held=held)
            self.engine.step(inputs)
            if self.engine.quit_requested:
                self._quit()
                return
            self._check_mode()

        self._sync_world()
        self._refresh_hud()

    def _check_mode(self) -> None:
        mode = self.engine.state.mode
        if mode is self._last_mode:
            return
        previous, self._last_mode = self._last_mode, mode
        if previous is Mode.LOADING or (previous is None and mode is not Mode.LOADING):
            self._on_content_ready()
        self._swap_music(previous, mode)
        self._refresh_overlay(mode)

    def _swap_music(self, previous: Mode | None, mode: Mode) -> None:
        if self.jukebox is None:
            return
        if mode in (Mode.BUILD, Mode.WAVE):
            if previous is Mode.PAUSED:
                self.jukebox.resume()
            elif self.jukebox.current != "construction":
                self.jukebox.play("construction", loop=True)
        elif mode is Mode.PAUSED:
            self.jukebox.pause()
        elif mode is Mode.WIN:
            self.jukebox.play("win")
        elif mode is Mode.LOSE:
            self.jukebox.play("lose")
        elif mode is Mode.TITLE:
            self.jukebox.stop()

    def on_draw(self) -> None:
        self.window.clear()
        self.batch.draw()
        self.overlay_batch.draw()
        self.ui_batch.draw()

    def on_key_press(self, symbol: int, modifiers: int):
        control = PRESS_KEYS.get(symbol)
        if control is None:
            return None
        self._pressed.add(control)
        # keep Escape from closing the window
        return pyglet.event.EVENT_HANDLED

    def on_close(self):
        self._quit()
        return pyglet.event.EVENT_HANDLED

    def _quit(self) -> None:
        pyglet.clock.unschedule(self.update)
        if self.jukebox is not None:
            self.jukebox.stop()
        self.window.close()
        pyglet.app.exit()

    # -- world -------------------------------------------------------------

    def _sync_world(self) -> None:
        if not self.images:
            return
        view = self.engine.render_state()
        self._sync_sprites(self.tower_sprites, view.towers, self._tower_group)
        self._sync_sprites(self.creep_sprites, view.creeps, self._creep_group)
        self._sync_cursor(view.cursor)
        self._sync_target_lines(view.target_lines)

    def _sync_sprites(
        self,
        pool: list[pyglet.sprite.Sprite],
        drawables: Sequence[Drawable],
        group: pyglet.graphics.Group,
    ) -> None:
        while len(pool) > len(drawables):
            pool.pop().delete()
        for idx, drawable in enumerate(drawables):
            img = self.images[drawable.sheet].frame(drawable.frame, flip=drawable.flip)
            draw_x, draw_y = _to_gl(drawable.x, drawable.y)
            if idx < len(pool):
                sprite = pool[idx]
                if sprite.image is not img:
                    sprite.image = img
                sprite.x = draw_x
                sprite.y = draw_y
            else:
                pool.append(pyglet.sprite.Sprite(img, x=draw_x, y=draw_y, batch=self.batch, group=group))

    def _sync_cursor(self, drawable: Drawable | None) -> None:
        if drawable is None:
            if self.cursor_sprite is not None:
                self.cursor_sprite.visible = False
            return
        img = self.images[drawable.sheet].frame(drawable.frame)
        draw_x, draw_y = _to_gl(drawable.x, drawable.y)
        if self.cursor_sprite is None:
            self.cursor_sprite = pyglet.sprite.Sprite(
                img, x=draw_x, y=draw_y, batch=self.batch, group=self._cursor_group
            )
        self.cursor_sprite.x = draw_x
        self.cursor_sprite.y = draw_y
        self.cursor_sprite.visible = True

    def _sync_target_lines(self, lines: Sequence[tuple[int, int, int, int]]) -> None:
        for shape in self._target_lines:
            shape.delete()
        self._target_lines.clear()
        for x1, y1, x2, y2 in lines:
            gx1, gy1 = _to_gl(x1 + 0.5, y1 - 0.5)
            gx2, gy2 = _to_gl(x2 + 0.5, y2 - 0.5)
            self._target_lines.append(
                pyglet.shapes.Line(gx1, gy1, gx2, gy2, 1, color=DARK, batch=self.batch, group=self._line_group)
            )

    # -- HUD & overlays ----------------------------------------------------

    def _build_hud(self) -> None:
        strip = HudStrip(width=GAME_WIDTH, y_top=GAME_HEIGHT, height=HUD_OFFSET - 1)
        color = (*DARK, 255)
        self._money_label = strip.add_label("", font_size=5, color=color, batch=self.ui_batch)
        self._wave_label = strip.add_label("", font_size=5, color=color, batch=self.ui_batch, anchor_x="center")
        self._map_label = strip.add_label("", font_size=5, color=color, batch=self.ui_batch, anchor_x="right")

    def _refresh_hud(self) -> None:
        hud = self.engine.render_state().hud
        if hud.mode in (Mode.LOADING, Mode.TITLE):
            money = wave = level = ""
        else:
            money = f"${hud.money}"
            if hud.mode is Mode.BUILD:
                wave = f"W{hud.wave_number} {math.ceil(hud.build_countdown / TICK_RATE)}s"
            else:
                wave = f"W{hud.wave_number}/{hud.wave_count}"
            level = f"M{hud.map_number}/{hud.map_count}"
        if self._money_label.text != money:
            self._money_label.text = money
        if self._wave_label.text != wave:
            self._wave_label.text = wave
        if self._map_label.text != level:
            self._map_label.text = level

    def _build_overlay(self) -> None:
        self._overlay = pyglet.shapes.Rectangle(
            0, 0, GAME_WIDTH, GAME_HEIGHT - HUD_OFFSET, color=LIGHT, batch=self.overlay_batch
        )
        self._overlay_label_color = DARK
        layout = OverlayLayout(width=GAME_WIDTH, y_top=GAME_HEIGHT - HUD_OFFSET - 10)
        self._title_label = layout.add_label(
            "", font_size=8, color=(*DARK, 255), batch=self.ui_batch
        )
        layout.add_spacer(4)
        self._subtitle_label = layout.add_label(
            "", font_size=5, color=(*DARK, 255), batch=self.ui_batch
        )
        self._refresh_overlay(Mode.LOADING)

    def _refresh_overlay(self, mode: Mode) -> None:
        title, subtitle = self._overlay_text(mode)
        active = bool(title)
        self._overlay.opacity = 255 if active else 0
        alpha = 255 if active else 0
        self._title_label.text = title
        self._subtitle_label.text = subtitle
        self._title_label.color = (*self._overlay_label_color, alpha)
        self._subtitle_label.color = (*self._overlay_label_color, alpha)

    def _overlay_text(self, mode: Mode) -> tuple[str, str]:
        if mode is Mode.LOADING:
            return "LOADING", ""
        if mode is Mode.TITLE:
            return "NOKIA DEFENCE", "PRESS E"
        if mode is Mode.PAUSED:
            return "PAUSED", "P TO RESUME"
        if mode is Mode.WIN:
            return "YOU WIN", ""
        if mode is Mode.LOSE:
            return "GAME OVER", ""
        if mode is Mode.WAITING:
            return ("YOU WIN" if self.engine.state.round_won else "GAME OVER"), "GET READY"
        return "", ""

    # -- view transform ----------------------------------------------------

    def _apply_viewport(self) -> None:
        fb_w, fb_h = self.window.get_framebuffer_size()
        gl.glViewport(0, 0, fb_w, fb_h)

    def _apply_projection(self) -> None:
        self.window.projection = Mat4.orthogonal_projection(
            0,
            self._window_width,
            0,
            self._window_height,
            -1,
            1,
        )
        self.window.view = Mat4().translate(
            (self._view_offset_x, self._view_offset_y, 0.0),
        ).scale(
            (self._view_scale, self._view_scale, 1.0),
        )

    def on_resize(self, width: int, height: int):
        self._window_width = width
        self._window_height = height
        self._update_view_transform()
        self._apply_viewport()
        self._apply_projection()
        return pyglet.event.EVENT_HANDLED

    def _update_view_transform(self) -> None:
        if self._window_width <= 0 or self._window_height <= 0:
            self._view_scale = 1.0
            self._view_offset_x = 0.0
            self._view_offset_y = 0.0
            return
        scale_x = self._window_width / self._logical_width
        scale_y = self._window_height / self._logical_height
        # integer scale only
        self._view_scale = max(1.0, float(math.floor(min(scale_x, scale_y))))
        self._view_offset_x = (self._window_width - self._logical_width * self._view_scale) / 2.0
        self._view_offset_y = (self._window_height - self._logical_height * self._view_scale) / 2.0


def run(
    config: GameConfig,
    *,
    data_dir: Path | None = None,
    fullscreen: bool = False,
    music: bool = True,
) -> int:
    gui = NokiaGui(config, data_dir=data_dir, fullscreen=fullscreen, music=music)
    pyglet.app.run()
    return gui.exit_code
