from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest


# pyglet needs a display unless it runs headless; the GUI tests never open a window.
os.environ.setdefault("PYGLET_HEADLESS", "1")

SRC_PATH = Path(__file__).resolve().parent / "src"
if SRC_PATH.is_dir():
    sys.path.insert(0, str(SRC_PATH))

from nokiadefence.core.model.content import GameContent  # noqa: E402
from nokiadefence.core.model.map import parse_map  # noqa: E402
from nokiadefence.core.model.sprites import Frame, FrameRect, FrameTag, SpriteSheet  # noqa: E402


def make_sheet(name: str, frames: int = 4, tags: tuple[FrameTag, ...] = (), size: int = 7) -> SpriteSheet:
    return SpriteSheet(
        name=name,
        width=size * frames,
        height=size,
        frames=tuple(Frame(rect=FrameRect(x=size * i, y=0, w=size, h=size)) for i in range(frames)),
        tags=tags,
    )


def make_sprites() -> dict[str, SpriteSheet]:
    creep_tags = (FrameTag("horizontal", 0, 2), FrameTag("vertical", 2, 4))
    sheets = [
        make_sheet("tiny-monster", tags=creep_tags),
        make_sheet("small-monster", tags=creep_tags),
        make_sheet("big-monster", tags=creep_tags),
        make_sheet("basic-tower"),
        make_sheet("strong-tower"),
        make_sheet("cursor", frames=1, size=3),
    ]
    return {sheet.name: sheet for sheet in sheets}


def make_map(
    waypoints=((0, 1), (3, 1)),
    waves=(("small", "small", "small"),),
    name: str = "line",
    no_build=(),
):
    return parse_map(
        {
            "name": name,
            "waypoints": [list(w) for w in waypoints],
            "no_build": [list(t) for t in no_build],
            "waves": [list(w) for w in waves],
        }
    )


@pytest.fixture
def sprites() -> dict[str, SpriteSheet]:
    return make_sprites()


@pytest.fixture
def line_map():
    return make_map()


@pytest.fixture
def content(sprites) -> GameContent:
    return GameContent(
        maps=[make_map(name="first"), make_map(name="second")],
        sprites=sprites,
    )
