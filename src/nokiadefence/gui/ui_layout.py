from __future__ import annotations

import pyglet


# Labels are laid out in logical screen pixels; at 72 dpi a point is a pixel.
LABEL_DPI = 72


def _label(
    text: str,
    *,
    x: float,
    y: float,
    anchor_x: str,
    anchor_y: str,
    font_size: int,
    color: tuple[int, int, int, int],
    batch: pyglet.graphics.Batch,
) -> pyglet.text.Label:
    return pyglet.text.Label(
        text,
        x=x,
        y=y,
        anchor_x=anchor_x,
        anchor_y=anchor_y,
        font_size=font_size,
        dpi=LABEL_DPI,
        color=color,
        batch=batch,
    )


class HudStrip:
    """One row of labels along the top edge: left, centre and right slots."""

    def __init__(self, *, width: float, y_top: float, height: float, padding: float = 1) -> None:
        self.width = width
        self.y_top = y_top
        self.height = height
        self.padding = padding

    def add_label(
        self,
        text: str,
        *,
        font_size: int,
        color: tuple[int, int, int, int],
        batch: pyglet.graphics.Batch,
        anchor_x: str = "left",
    ) -> pyglet.text.Label:
        if anchor_x == "left":
            x = self.padding
        elif anchor_x == "right":
            x = self.width - self.padding
        else:
            x = self.width / 2
        return _label(
            text,
            x=x,
            y=self.y_top - self.height / 2,
            anchor_x=anchor_x,
            anchor_y="center",
            font_size=font_size,
            color=color,
            batch=batch,
        )


class OverlayLayout:
    """Centred column of labels stacked downward from ``y_top``."""

    def __init__(self, *, width: float, y_top: float, spacing: float = 2) -> None:
        self.center_x = width / 2
        self.spacing = spacing
        self._cursor = y_top

    def add_label(
        self,
        text: str,
        *,
        font_size: int,
        color: tuple[int, int, int, int],
        batch: pyglet.graphics.Batch,
    ) -> pyglet.text.Label:
        label = _label(
            text,
            x=self.center_x,
            y=self._cursor,
            anchor_x="center",
            anchor_y="top",
            font_size=font_size,
            color=color,
            batch=batch,
        )
        height = max(label.content_height, float(font_size))
        self._cursor -= height + self.spacing
        return label

    def add_spacer(self, height: float) -> None:
        self._cursor -= max(0.0, height)
