from __future__ import annotations

from dataclasses import dataclass
import json
import logging
from pathlib import Path
from typing import Any, Mapping

import pyglet
from pyglet.media.synthesis import Silence, Square

from ..core.errors import AssetError


logger = logging.getLogger(__name__)

MUSIC_TRACKS = ("construction", "win", "lose")


@dataclass(frozen=True, slots=True)
class MusicTrack:
    name: str
    notes: tuple[tuple[float, float], ...]   # (frequency_hz, seconds); 0 Hz is a rest
    volume: float = 0.3

    @property
    def duration(self) -> float:
        return sum(seconds for _, seconds in self.notes)


def parse_music(name: str, data: Any, *, source: str = "<memory>") -> MusicTrack:
    if not isinstance(data, dict) or not isinstance(data.get("notes"), list) or not data["notes"]:
        raise AssetError(f"Music {source} needs a non-empty 'notes' list")
    notes: list[tuple[float, float]] = []
    for idx, note in enumerate(data["notes"]):
        try:
            freq, seconds = float(note[0]), float(note[1])
        except (KeyError, TypeError, ValueError, IndexError) as exc:
            raise AssetError(f"Music {source}: note {idx} is malformed") from exc
        if freq < 0 or seconds <= 0:
            raise AssetError(f"Music {source}: note {idx} is out of range")
        notes.append((freq, seconds))
    try:
        volume = float(data.get("volume", 0.3))
    except (TypeError, ValueError) as exc:
        raise AssetError(f"Music {source}: volume must be a number") from exc
    return MusicTrack(name=name, notes=tuple(notes), volume=volume)


def load_music_json(path: str | Path) -> MusicTrack:
    p = Path(path)
    logger.info("loading %s", p)
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise AssetError(f"Missing music: {p}") from exc
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise AssetError(f"Music {p} is not valid JSON: {exc}") from exc
    return parse_music(p.stem, data, source=str(p))


def load_music(music_dir: Path) -> dict[str, MusicTrack]:
    return {name: load_music_json(music_dir / f"{name}.json") for name in MUSIC_TRACKS}


def synthesize(track: MusicTrack) -> list:
    sources = []
    for freq, seconds in track.notes:
        if freq > 0:
            sources.append(Square(duration=seconds, frequency=freq))
        else:
            sources.append(Silence(duration=seconds))
    return sources


class Jukebox:
    """Plays one synthesised track at a time, optionally looping it."""

    def __init__(self, tracks: Mapping[str, MusicTrack]) -> None:
        self.tracks = dict(tracks)
        self.current: str | None = None
        self._loop = False
        self._player: pyglet.media.Player | None = None

    def play(self, name: str, *, loop: bool = False) -> None:
        track = self.tracks[name]
        self.stop()
        self.current = name
        self._loop = loop
        self._player = pyglet.media.Player()
        self._player.volume = track.volume
        self._player.push_handlers(on_player_eos=self._on_player_eos)
        self._queue(track)
        self._player.play()
        logger.debug("playing %s (loop=%s)", name, loop)

    def pause(self) -> None:
        if self._player is not None:
            self._player.pause()

    def resume(self) -> None:
        if self._player is not None:
            self._player.play()

    def stop(self) -> None:
        if self._player is not None:
            self._player.pause()
            self._player.delete()
            self._player = None
        self.current = None

    def _queue(self, track: MusicTrack) -> None:
        for source in synthesize(track):
            self._player.queue(source)

    def _on_player_eos(self) -> None:
        if self._loop and self._player is not None and self.current is not None:
            self._queue(self.tracks[self.current])
            self._player.play()
