"""Game content: the campaign's maps plus the sprite-sheet metadata the core reads."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

from ..errors import AssetError
from .creeps import CREEP_DEFS, HORIZONTAL_TAG, VERTICAL_TAG
from .map import MapData, load_map_json
from .sprites import SpriteSheet, load_sprite_json
from .towers import TOWER_DEFS


DEFAULT_DATA_DIR = Path(__file__).resolve().parents[4] / "data"
DEFAULT_CAMPAIGN: tuple[str, ...] = ("meadow", "switchback")
CURSOR_SPRITE = "cursor"


@dataclass(slots=True)
class GameContent:
    maps: list[MapData]
    sprites: dict[str, SpriteSheet] = field(default_factory=dict)

    @property
    def map_count(self) -> int:
        return len(self.maps)


def required_sprites() -> list[str]:
    names = [d.sprite for d in CREEP_DEFS.values()]
    names += [d.sprite for d in TOWER_DEFS.values()]
    names.append(CURSOR_SPRITE)
    return sorted(set(names))


def resolve_map_path(map_arg: str, data_dir: Path | None = None) -> Path:
    base = data_dir or DEFAULT_DATA_DIR
    p = Path(map_arg)
    if p.suffix:
        return p
    return base / "maps" / f"{p.name}.json"


def validate_content(content: GameContent) -> None:
    if not content.maps:
        raise AssetError("The campaign needs at least one map")
    for name in required_sprites():
        if name not in content.sprites:
            raise AssetError(f"Missing sprite sheet {name!r}")
    for creep_def in CREEP_DEFS.values():
        sheet = content.sprites[creep_def.sprite]
        for tag in (HORIZONTAL_TAG, VERTICAL_TAG):
            if not sheet.has_tag(tag):
                raise AssetError(f"Sprite sheet {sheet.name!r} needs a {tag!r} frame tag")
    for map_data in content.maps:
        for idx, wave in enumerate(map_data.waves):
            for kind in wave:
                if kind not in CREEP_DEFS:
                    raise AssetError(
                        f"Map {map_data.name!r} wave {idx} references unknown creep kind {kind!r}"
                    )


def load_content(
    data_dir: Path | None = None,
    campaign: Iterable[str] = DEFAULT_CAMPAIGN,
) -> GameContent:
    base = data_dir or DEFAULT_DATA_DIR
    maps = [load_map_json(resolve_map_path(name, base)) for name in campaign]
    sprites = {
        name: load_sprite_json(base / "sprites" / f"{name}.json")
        for name in required_sprites()
    }
    content = GameContent(maps=maps, sprites=sprites)
    validate_content(content)
    return content
