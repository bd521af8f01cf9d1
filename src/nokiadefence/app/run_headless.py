from __future__ import annotations

import argparse
from dataclasses import replace
import logging

from nokiadefence.app.cli import add_common_args, configure_logging, load_config
from nokiadefence.core.engine import Engine
from nokiadefence.core.errors import AssetError, ConfigError
from nokiadefence.core.model.content import load_content
from nokiadefence.core.model.state import Mode
from nokiadefence.core.scheduler import ManualScheduler
from nokiadefence.testing.definitions import build_scenario, load_scenario_definition, resolve_scenarios_dir


logger = logging.getLogger(__name__)


def _parse_tower(text: str) -> tuple[int, int, int]:
    parts = text.split(",")
    if len(parts) not in (2, 3):
        raise argparse.ArgumentTypeError(f"expected TX,TY[,UPGRADES], got {text!r}")
    try:
        values = [int(p) for p in parts]
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"tower coordinates must be integers: {text!r}") from exc
    if len(values) == 2:
        values.append(0)
    return values[0], values[1], values[2]


def _summary(engine: Engine, died: int, breached: int) -> str:
    s = engine.state
    return (
        f"mode={s.mode.value} tick={s.tick} money={s.money} "
        f"map={engine.map.name} wave={s.wave_index + 1}/{engine.map.wave_count} "
        f"creeps={len(s.creeps)} towers={len(s.towers)} died={died} breached={breached}"
    )


def run_scenario(args: argparse.Namespace) -> int:
    path = resolve_scenarios_dir(args.data_dir) / f"{args.scenario}.json"
    definition = load_scenario_definition(path)
    runner = build_scenario(definition, data_dir=args.data_dir, config=load_config(args))
    status = runner.run()
    print(f"scenario={definition.name} status={status} ticks={runner.ticks}")
    print(_summary(runner.engine, runner.died, runner.breached))
    return 0 if status == "passed" else 2


def run_simulation(args: argparse.Namespace) -> int:
    config = load_config(args)
    if args.map:
        config = replace(config, campaign=(args.map,))
    content = load_content(args.data_dir, config.campaign)

    scheduler = ManualScheduler()
    engine = Engine(config, scheduler)
    engine.finish_loading(content)
    engine.act("START_ROUND")

    for tile_x, tile_y, upgrades in args.towers:
        payload = {"tile_x": tile_x, "tile_y": tile_y}
        for _ in range(1 + upgrades):
            result = engine.act("BUILD_TOWER", payload)
            logger.info("tower at (%d,%d): %s", tile_x, tile_y, result.value if result else None)

    dt = 1.0 / max(1, args.fps)
    ticks = int(args.seconds * args.fps)
    died = breached = 0
    for _ in range(ticks):
        report = engine.step()
        scheduler.advance(dt)
        died += len(report.died)
        breached += len(report.breached)
        if engine.state.mode in (Mode.WIN, Mode.LOSE):
            break

    print(_summary(engine, died, breached))
    return 0


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Run Nokia Defence without a window.")
    add_common_args(ap)
    ap.add_argument("--map", default=None, help="Map name (e.g. meadow) or path to json")
    ap.add_argument("--seconds", type=float, default=60.0)
    ap.add_argument("--fps", type=int, default=60)
    ap.add_argument(
        "--tower",
        dest="towers",
        action="append",
        type=_parse_tower,
        default=[],
        metavar="TX,TY[,UPGRADES]",
        help="Build a tower on a tile before the first wave (repeatable)",
    )
    ap.add_argument("--scenario", default=None, help="Run a scenario from data/scenarios instead")
    args = ap.parse_args(argv)
    configure_logging(args.log_level)

    try:
        if args.scenario:
            return run_scenario(args)
        return run_simulation(args)
    except (AssetError, ConfigError) as exc:
        logger.error("%s", exc)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
