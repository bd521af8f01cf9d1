from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import json
import logging
from typing import Any

from ..errors import AssetError


logger = logging.getLogger(__name__)

PALETTE_CHARS = frozenset(".#o")


@dataclass(frozen=True, slots=True)
class FrameRect:
    x: int
    y: int
    w: int
    h: int


@dataclass(frozen=True, slots=True)
class Frame:
    rect: FrameRect
    duration: int = 100


@dataclass(frozen=True, slots=True)
class FrameTag:
    """Named frame range; ``stop`` is exclusive."""

    name: str
    start: int
    stop: int

    def contains(self, index: int) -> bool:
        return self.start <= index < self.stop


@dataclass(frozen=True, slots=True)
class SpriteSheet:
    name: str
    width: int
    height: int
    frames: tuple[Frame, ...]
    tags: tuple[FrameTag, ...] = ()
    pixels: tuple[str, ...] = ()

    @property
    def last_frame(self) -> int:
        return len(self.frames) - 1

    def tag(self, name: str) -> FrameTag:
        for tag in self.tags:
            if tag.name == name:
                return tag
        raise KeyError(f"Sprite sheet {self.name!r} has no frame tag {name!r}")

    def has_tag(self, name: str) -> bool:
        return any(tag.name == name for tag in self.tags)

    def frame_rect(self, index: int) -> FrameRect:
        return self.frames[index].rect


def load_sprite_json(path: str | Path) -> SpriteSheet:
    p = Path(path)
    logger.info("loading %s", p)
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise AssetError(f"Missing sprite sheet: {p}") from exc
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise AssetError(f"Sprite sheet {p} is not valid JSON: {exc}") from exc
    return parse_sprite_sheet(p.stem, data, source=str(p))


def parse_sprite_sheet(name: str, data: Any, *, source: str = "<memory>") -> SpriteSheet:
    if not isinstance(data, dict):
        raise AssetError(f"Sprite sheet {source} must be a JSON object")
    meta = data.get("meta") or {}
    if not isinstance(meta, dict):
        raise AssetError(f"Sprite sheet {source}: meta must be a JSON object")
    size = meta.get("size") or {}
    try:
        width = int(size["w"])
        height = int(size["h"])
    except (KeyError, TypeError, ValueError) as exc:
        raise AssetError(f"Sprite sheet {source} has no valid meta.size") from exc

    frames_raw = data.get("frames")
    if not isinstance(frames_raw, list) or not frames_raw:
        raise AssetError(f"Sprite sheet {source} has no frames")
    frames: list[Frame] = []
    for idx, raw in enumerate(frames_raw):
        try:
            box = raw["frame"]
            rect = FrameRect(x=int(box["x"]), y=int(box["y"]), w=int(box["w"]), h=int(box["h"]))
            duration = int(raw.get("duration", 100))
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            raise AssetError(f"Sprite sheet {source}: frame {idx} is malformed") from exc
        if rect.x < 0 or rect.y < 0 or rect.x + rect.w > width or rect.y + rect.h > height:
            raise AssetError(f"Sprite sheet {source}: frame {idx} lies outside the sheet")
        frames.append(Frame(rect=rect, duration=duration))

    tags_raw = meta.get("frameTags") or []
    if not isinstance(tags_raw, list):
        raise AssetError(f"Sprite sheet {source}: meta.frameTags must be a list")
    tags: list[FrameTag] = []
    for raw in tags_raw:
        try:
            tag = FrameTag(name=str(raw["name"]), start=int(raw["from"]), stop=int(raw["to"]) + 1)
        except (KeyError, TypeError, ValueError) as exc:
            raise AssetError(f"Sprite sheet {source}: malformed frame tag {raw!r}") from exc
        if tag.start < 0 or tag.stop > len(frames) or tag.start >= tag.stop:
            raise AssetError(f"Sprite sheet {source}: frame tag {tag.name!r} is out of range")
        tags.append(tag)

    pixels_raw = meta.get("pixels") or []
    if not isinstance(pixels_raw, list):
        raise AssetError(f"Sprite sheet {source}: meta.pixels must be a list of rows")
    pixels = tuple(str(row) for row in pixels_raw)
    if pixels:
        if len(pixels) != height or any(len(row) != width for row in pixels):
            raise AssetError(f"Sprite sheet {source}: pixel rows do not match size {width}x{height}")
        bad = {ch for row in pixels for ch in row} - PALETTE_CHARS
        if bad:
            raise AssetError(f"Sprite sheet {source}: unknown palette characters {sorted(bad)}")

    return SpriteSheet(
        name=name,
        width=width,
        height=height,
        frames=tuple(frames),
        tags=tuple(tags),
        pixels=pixels,
    )
