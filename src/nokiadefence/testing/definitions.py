from __future__ import annotations

from dataclasses import dataclass, replace
import json
import logging
from pathlib import Path

from nokiadefence.config_loader import GameConfig
from nokiadefence.core.engine import Engine
from nokiadefence.core.errors import AssetError
from nokiadefence.core.model.content import DEFAULT_DATA_DIR, load_content
from nokiadefence.core.model.state import Mode
from nokiadefence.core.scheduler import ManualScheduler


logger = logging.getLogger(__name__)

SCENARIOS_DIRNAME = Path("scenarios")
DEFAULT_MAX_TICKS = 20000
GOAL_TYPES = ("clear_map", "breach")
FRAME_DT = 1.0 / 60.0


@dataclass(frozen=True, slots=True)
class TowerSpec:
    tile_x: int
    tile_y: int
    upgrades: int = 0


@dataclass(frozen=True, slots=True)
class ScenarioGoal:
    type: str
    max_ticks: int


@dataclass(frozen=True, slots=True)
class ScenarioDefinition:
    name: str
    map: str
    starting_money: int
    towers: tuple[TowerSpec, ...]
    goal: ScenarioGoal


class ScenarioRunner:
    def __init__(self, definition: ScenarioDefinition, engine: Engine, scheduler: ManualScheduler) -> None:
        self.definition = definition
        self.engine = engine
        self.scheduler = scheduler
        self.ticks = 0
        self.died = 0
        self.breached = 0
        self.status = "running"

    def advance(self, steps: int = 1) -> None:
        for _ in range(max(0, int(steps))):
            if self.status != "running":
                return
            report = self.engine.step()
            self.died += len(report.died)
            self.breached += len(report.breached)
            self.scheduler.advance(FRAME_DT)
            self.ticks += 1
            self._evaluate()

    def run(self) -> str:
        while self.status == "running":
            self.advance(1)
        logger.info("scenario %s %s after %d ticks", self.definition.name, self.status, self.ticks)
        return self.status

    def _evaluate(self) -> None:
        goal = self.definition.goal
        mode = self.engine.state.mode
        if goal.type == "clear_map":
            won, lost = mode is Mode.WIN, mode is Mode.LOSE
        elif goal.type == "breach":
            won, lost = mode is Mode.LOSE, mode is Mode.WIN
        else:
            raise ValueError(f"Unsupported scenario goal type {goal.type!r}")
        if won:
            self.status = "passed"
        elif lost or self.ticks >= goal.max_ticks:
            self.status = "failed"


def resolve_scenarios_dir(data_dir: Path | None = None) -> Path:
    return (data_dir or DEFAULT_DATA_DIR) / SCENARIOS_DIRNAME


def load_scenario_definitions(scenario_dir: Path) -> dict[str, ScenarioDefinition]:
    if not scenario_dir.exists():
        return {}
    scenarios: dict[str, ScenarioDefinition] = {}
    for path in sorted(scenario_dir.glob("*.json")):
        scenarios[path.stem] = load_scenario_definition(path)
    return scenarios


def load_scenario_definition(path: Path) -> ScenarioDefinition:
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
    except (OSError, json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise AssetError(f"Cannot read scenario {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise AssetError(f"Scenario {path} must be a JSON object")
    name = str(data.get("name") or path.stem)
    map_name = data.get("map")
    if not map_name:
        raise AssetError(f"Missing 'map' in scenario {path}")
    starting_money = data.get("starting_money")
    if starting_money is None:
        raise AssetError(f"Missing 'starting_money' in scenario {path}")

    towers: list[TowerSpec] = []
    towers_raw = data.get("towers", [])
    if not isinstance(towers_raw, list):
        raise AssetError(f"'towers' must be a list in scenario {path}")
    for tower in towers_raw:
        tile = tower.get("tile") if isinstance(tower, dict) else None
        if not isinstance(tile, (list, tuple)) or len(tile) != 2:
            raise AssetError(f"Invalid tower 'tile' in scenario {path}: {tile!r}")
        try:
            towers.append(
                TowerSpec(
                    tile_x=int(tile[0]),
                    tile_y=int(tile[1]),
                    upgrades=int(tower.get("upgrades", 0)),
                )
            )
        except (TypeError, ValueError) as exc:
            raise AssetError(f"Invalid tower {tower!r} in scenario {path}") from exc

    goal = data.get("goal") or {}
    if not isinstance(goal, dict):
        raise AssetError(f"'goal' must be an object in scenario {path}")
    goal_type = str(goal.get("type", "clear_map"))
    if goal_type not in GOAL_TYPES:
        raise AssetError(f"Unknown goal type {goal_type!r} in scenario {path}")
    try:
        max_ticks = int(goal.get("max_ticks", DEFAULT_MAX_TICKS))
        starting_money = int(starting_money)
    except (TypeError, ValueError) as exc:
        raise AssetError(f"Invalid number in scenario {path}: {exc}") from exc

    return ScenarioDefinition(
        name=name,
        map=str(map_name),
        starting_money=starting_money,
        towers=tuple(towers),
        goal=ScenarioGoal(type=goal_type, max_ticks=max_ticks),
    )


def build_scenario(
    definition: ScenarioDefinition,
    *,
    data_dir: Path | None = None,
    config: GameConfig | None = None,
) -> ScenarioRunner:
    """Start a round on the scenario's map with its money and towers in place."""
    config = replace(
        config or GameConfig(),
        starting_money=definition.starting_money,
        campaign=(definition.map,),
    )
    content = load_content(data_dir, config.campaign)
    scheduler = ManualScheduler()
    engine = Engine(config, scheduler)
    engine.finish_loading(content)
    engine.act("START_ROUND")

    for spec in definition.towers:
        payload = {"tile_x": spec.tile_x, "tile_y": spec.tile_y}
        for attempt in range(1 + max(0, spec.upgrades)):
            result = engine.act("BUILD_TOWER", payload)
            if result is None or not result.ok:
                raise ValueError(
                    "Scenario tower placement failed "
                    f"tile=({spec.tile_x},{spec.tile_y}) attempt={attempt} result={result}"
                )
    return ScenarioRunner(definition, engine, scheduler)
