from __future__ import annotations

import argparse
import logging
from pathlib import Path

from nokiadefence.config_loader import GameConfig, load_game_config


LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def add_common_args(ap: argparse.ArgumentParser) -> None:
    ap.add_argument("--config", type=Path, default=None, help="JSON file merged over the default config")
    ap.add_argument(
        "--set",
        dest="overrides",
        action="append",
        default=[],
        metavar="SECTION.KEY=VALUE",
        help="Override one config value (repeatable)",
    )
    ap.add_argument("--data-dir", type=Path, default=None, help="Directory holding maps/, sprites/ and music/")
    ap.add_argument(
        "--log-level",
        default="INFO",
        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
        help="Logging verbosity",
    )


def configure_logging(level: str) -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)


def load_config(args: argparse.Namespace) -> GameConfig:
    return load_game_config(args.config, list(args.overrides))
