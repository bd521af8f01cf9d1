from __future__ import annotations

import argparse
import logging

from nokiadefence.app.cli import add_common_args, configure_logging, load_config
from nokiadefence.core.errors import ConfigError


logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Play Nokia Defence.")
    add_common_args(ap)
    ap.add_argument("--fullscreen", action="store_true", help="Start in fullscreen")
    ap.add_argument("--no-music", action="store_true", help="Do not load or play music")
    args = ap.parse_args(argv)
    configure_logging(args.log_level)

    try:
        config = load_config(args)
    except ConfigError as exc:
        logger.error("invalid configuration: %s", exc)
        return 1

    from nokiadefence.gui.pyglet_app import run

    return run(config, data_dir=args.data_dir, fullscreen=args.fullscreen, music=not args.no_music)


if __name__ == "__main__":
    raise SystemExit(main())
