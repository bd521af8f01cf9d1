from __future__ import annotations

from dataclasses import dataclass
import json
import logging
from pathlib import Path
from typing import Any

from .core.errors import ConfigError
from .core.model.content import DEFAULT_CAMPAIGN, DEFAULT_DATA_DIR


logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = DEFAULT_DATA_DIR / "config" / "default.json"

_SUPPORTED_SCHEMA_VERSIONS = {1}
_ALLOWED_KEYS: dict[str, Any] = {
    "schema_version": None,
    "economy": {
        "starting_money": None,
        "sell_refund": None,
    },
    "timing": {
        "creep_move_interval": None,
        "spawn_interval": None,
        "build_phase_ticks": None,
        "cursor_cooldown": None,
        "cursor_repeat_ticks": None,
        "result_delay_sec": None,
        "reset_delay_sec": None,
    },
    "combat": {
        "tower_range": None,
        "creep_hitbox": None,
    },
    "campaign": None,
}


@dataclass(frozen=True, slots=True)
class GameConfig:
    starting_money: int = 1000
    sell_refund: int = 100
    creep_move_interval: int = 10
    spawn_interval: int = 180
    build_phase_ticks: int = 300
    cursor_cooldown: int = 20
    cursor_repeat_ticks: int = 8
    tower_range: int = 10
    creep_hitbox: int = 3
    result_delay: float = 2.0   # seconds on the win/lose screen
    reset_delay: float = 1.5    # seconds in waiting before the reset
    campaign: tuple[str, ...] = DEFAULT_CAMPAIGN


def load_json_config(path: str | Path) -> dict[str, Any]:
    p = Path(path)
    logger.info("loading %s", p)
    try:
        with p.open("r", encoding="utf-8") as f:
            payload = json.load(f)
    except FileNotFoundError as e:
        raise ConfigError(f"config file not found: {p}") from e
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ConfigError(f"invalid JSON in {p}: {e}") from e
    if not isinstance(payload, dict):
        raise ConfigError(f"config root must be a JSON object: {p}")
    unknown = _find_unknown_keys(payload, _ALLOWED_KEYS, path="")
    if unknown:
        raise ConfigError(f"unknown config keys in {p}: {', '.join(sorted(unknown))}")
    return payload


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    out: dict[str, Any] = dict(base)
    for key, value in override.items():
        if key in out and isinstance(out[key], dict) and isinstance(value, dict):
            out[key] = deep_merge(out[key], value)
        else:
            out[key] = value
    return out


def apply_overrides(cfg: dict[str, Any], overrides_list: list[str] | None) -> dict[str, Any]:
    if not overrides_list:
        return cfg

    out = cfg
    for item in overrides_list:
        if "=" not in item:
            raise ConfigError(f"override must contain '=': {item}")
        path_str, value_str = item.split("=", 1)
        if not path_str:
            raise ConfigError(f"override path empty: {item}")
        keys = path_str.split(".")
        if any(not key for key in keys):
            raise ConfigError(f"override path has empty segment: {item}")
        value = _cast_scalar(value_str)

        cursor = out
        for key in keys[:-1]:
            if key not in cursor or not isinstance(cursor[key], dict):
                cursor[key] = {}
            cursor = cursor[key]
        cursor[keys[-1]] = value
    return out


def load_game_config(
    config_path: str | Path | None = None,
    overrides: list[str] | None = None,
    *,
    defaults_path: str | Path = DEFAULT_CONFIG_PATH,
) -> GameConfig:
    """
    Defaults file, then an optional user file deep-merged over it, then
    ``section.key=value`` overrides. The merged result is validated once.
    """
    cfg = load_json_config(defaults_path)
    if config_path is not None:
        cfg = deep_merge(cfg, load_json_config(config_path))
    cfg = apply_overrides(cfg, overrides)
    return build_game_config(cfg)


def build_game_config(cfg: dict[str, Any]) -> GameConfig:
    _validate_config(cfg)
    economy = cfg.get("economy", {})
    timing = cfg.get("timing", {})
    combat = cfg.get("combat", {})
    defaults = GameConfig()

    campaign = cfg.get("campaign", list(defaults.campaign))
    if isinstance(campaign, str):
        campaign = [name.strip() for name in campaign.split(",") if name.strip()]

    return GameConfig(
        starting_money=int(economy.get("starting_money", defaults.starting_money)),
        sell_refund=int(economy.get("sell_refund", defaults.sell_refund)),
        creep_move_interval=int(timing.get("creep_move_interval", defaults.creep_move_interval)),
        spawn_interval=int(timing.get("spawn_interval", defaults.spawn_interval)),
        build_phase_ticks=int(timing.get("build_phase_ticks", defaults.build_phase_ticks)),
        cursor_cooldown=int(timing.get("cursor_cooldown", defaults.cursor_cooldown)),
        cursor_repeat_ticks=int(timing.get("cursor_repeat_ticks", defaults.cursor_repeat_ticks)),
        tower_range=int(combat.get("tower_range", defaults.tower_range)),
        creep_hitbox=int(combat.get("creep_hitbox", defaults.creep_hitbox)),
        result_delay=float(timing.get("result_delay_sec", defaults.result_delay)),
        reset_delay=float(timing.get("reset_delay_sec", defaults.reset_delay)),
        campaign=tuple(campaign),
    )


def _cast_scalar(value: str) -> Any:
    lowered = value.strip().lower()
    if lowered in ("true", "false"):
        return lowered == "true"
    try:
        return int(value)
    except ValueError:
        pass
    try:
        return float(value)
    except ValueError:
        pass
    return value


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _optional_dict(parent: dict[str, Any], key: str) -> dict[str, Any]:
    value = parent.get(key, {})
    if not isinstance(value, dict):
        raise ConfigError(f"config '{key}' must be a JSON object")
    return value


def _check_int(section: dict[str, Any], name: str, key: str, minimum: int) -> None:
    if key not in section:
        return
    value = section[key]
    if not _is_int(value):
        raise ConfigError(f"{name}.{key} must be an integer")
    if value < minimum:
        raise ConfigError(f"{name}.{key} must be >= {minimum}")


def _check_seconds(section: dict[str, Any], name: str, key: str) -> None:
    if key not in section:
        return
    value = section[key]
    if not _is_number(value):
        raise ConfigError(f"{name}.{key} must be a number")
    if value < 0:
        raise ConfigError(f"{name}.{key} must be >= 0")


def _validate_config(cfg: dict[str, Any]) -> None:
    unknown = _find_unknown_keys(cfg, _ALLOWED_KEYS, path="")
    if unknown:
        unknown_str = ", ".join(sorted(unknown))
        raise ConfigError(f"unknown config keys: {unknown_str}")

    schema_version = cfg.get("schema_version")
    if schema_version not in _SUPPORTED_SCHEMA_VERSIONS:
        raise ConfigError(f"unsupported schema_version: {schema_version}")

    economy = _optional_dict(cfg, "economy")
    _check_int(economy, "economy", "starting_money", 0)
    _check_int(economy, "economy", "sell_refund", 0)

    timing = _optional_dict(cfg, "timing")
    _check_int(timing, "timing", "creep_move_interval", 1)
    _check_int(timing, "timing", "spawn_interval", 1)
    _check_int(timing, "timing", "build_phase_ticks", 0)
    _check_int(timing, "timing", "cursor_cooldown", 0)
    _check_int(timing, "timing", "cursor_repeat_ticks", 1)
    _check_seconds(timing, "timing", "result_delay_sec")
    _check_seconds(timing, "timing", "reset_delay_sec")

    combat = _optional_dict(cfg, "combat")
    _check_int(combat, "combat", "tower_range", 0)
    _check_int(combat, "combat", "creep_hitbox", 0)

    campaign = cfg.get("campaign")
    if campaign is not None:
        if isinstance(campaign, str):
            campaign = [name for name in campaign.split(",") if name.strip()]
        if not isinstance(campaign, list) or not all(isinstance(n, str) and n for n in campaign):
            raise ConfigError("campaign must be a list of map names")
        if not campaign:
            raise ConfigError("campaign must name at least one map")


def _find_unknown_keys(value: Any, allowed: Any, *, path: str) -> list[str]:
    if not isinstance(value, dict) or not isinstance(allowed, dict):
        return []
    unknown: list[str] = []
    for key, sub_value in value.items():
        if key not in allowed:
            unknown.append(f"{path}{key}" if path else key)
            continue
        sub_allowed = allowed[key]
        if isinstance(sub_value, dict) and isinstance(sub_allowed, dict):
            child_path = f"{path}{key}."
            unknown.extend(_find_unknown_keys(sub_value, sub_allowed, path=child_path))
    return unknown
