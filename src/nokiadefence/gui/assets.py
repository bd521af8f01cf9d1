from __future__ import annotations

from typing import Dict, Mapping

import pyglet
from pyglet import gl

from ..core.model.sprites import FrameRect, SpriteSheet


DARK = (67, 82, 61)
LIGHT = (199, 240, 216)

PALETTE: dict[str, tuple[int, int, int, int]] = {
    ".": (0, 0, 0, 0),
    "#": (*DARK, 255),
    "o": (*LIGHT, 255),
}


def decode_pixels(rows: tuple[str, ...] | list[str], *, mirror: bool = False) -> bytes:
    """RGBA bytes for palette rows, top row first."""
    out = bytearray()
    for row in rows:
        if mirror:
            row = row[::-1]
        for ch in row:
            out.extend(PALETTE[ch])
    return bytes(out)


def sheet_image(sheet: SpriteSheet, *, mirror: bool = False) -> pyglet.image.ImageData:
    data = decode_pixels(sheet.pixels, mirror=mirror)
    # Negative pitch: rows are stored top to bottom
    return pyglet.image.ImageData(sheet.width, sheet.height, "RGBA", data, pitch=-sheet.width * 4)


class SpriteImages:
    """
    Textures for one sprite sheet, cut into frames anchored at their centre.

    Mirrored frames are cut from a horizontally flipped copy of the sheet so
    that a flipped creep still covers the same pixels as an unflipped one.
    """

    def __init__(self, sheet: SpriteSheet) -> None:
        if not sheet.pixels:
            raise ValueError(f"Sprite sheet {sheet.name!r} has no pixel data")
        self.sheet = sheet
        texture = sheet_image(sheet).get_texture()
        mirrored = sheet_image(sheet, mirror=True).get_texture()
        self.frames = [self._region(texture, f.rect, mirror=False) for f in sheet.frames]
        self.mirrored = [self._region(mirrored, f.rect, mirror=True) for f in sheet.frames]

    def _region(self, texture, rect: FrameRect, *, mirror: bool):
        x = self.sheet.width - rect.x - rect.w if mirror else rect.x
        # Texture rows count from the bottom
        y = self.sheet.height - rect.y - rect.h
        region = texture.get_region(x, y, rect.w, rect.h)
        region.anchor_x = rect.w // 2
        region.anchor_y = rect.h // 2
        return region

    def frame(self, index: int, *, flip: bool = False):
        frames = self.mirrored if flip else self.frames
        index = max(0, min(index, len(frames) - 1))
        return frames[index]


def use_nearest_filter() -> None:
    pyglet.image.Texture.default_min_filter = gl.GL_NEAREST
    pyglet.image.Texture.default_mag_filter = gl.GL_NEAREST


def load_sprite_images(sheets: Mapping[str, SpriteSheet]) -> Dict[str, SpriteImages]:
    use_nearest_filter()
    return {name: SpriteImages(sheet) for name, sheet in sheets.items()}
