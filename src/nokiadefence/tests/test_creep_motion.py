import pytest

from conftest import make_map

from nokiadefence.core.model.creeps import new_creep
from nokiadefence.core.model.entities import Direction
from nokiadefence.core.model.state import GameState
from nokiadefence.core.model.towers import new_tower
from nokiadefence.core.rules.creep_motion import step_creeps, update_creep
from nokiadefence.core.rules.wave_spawner import spawn_creep


def _spawned(state, map_data, sprites, kind="small"):
    creep = new_creep(kind, sprites)
    spawn_creep(state, map_data, creep)
    return creep


def test_creep_moves_one_pixel_every_move_interval(line_map, sprites):
    state = GameState()
    creep = _spawned(state, line_map, sprites)
    assert (creep.x, creep.y) == (3, 16)

    for _ in range(9):
        step_creeps(state, line_map, move_interval=10)
    assert creep.x == 3

    step_creeps(state, line_map, move_interval=10)
    assert (creep.x, creep.y) == (4, 16)
    assert creep.direction is Direction.RIGHT
    assert creep.flip is False


def test_horizontal_animation_cycles_inside_tag(line_map, sprites):
    state = GameState()
    creep = _spawned(state, line_map, sprites)
    frames = []
    for _ in range(4):
        step_creeps(state, line_map, move_interval=1)
        frames.append(creep.frame)
    assert frames == [1, 0, 1, 0]


def test_diagonal_step_faces_vertical_axis(sprites):
    m = make_map(waypoints=((0, 1), (2, 3)))
    state = GameState()
    creep = _spawned(state, m, sprites)

    step_creeps(state, m, move_interval=1)

    assert (creep.x, creep.y) == (4, 17)
    assert creep.direction is Direction.DOWN
    assert creep.flip is False
    # Leaving the horizontal frames snaps to the vertical tag start
    assert creep.frame == 2


def test_moving_left_mirrors_horizontal_frames(sprites):
    m = make_map(waypoints=((3, 1), (0, 1)))
    state = GameState()
    creep = _spawned(state, m, sprites)

    step_creeps(state, m, move_interval=1)

    assert creep.x == 23
    assert creep.direction is Direction.LEFT
    assert creep.flip is True
    assert creep.frame == 1


def test_moving_up_uses_vertical_frames(sprites):
    m = make_map(waypoints=((1, 3), (1, 0)))
    state = GameState()
    creep = _spawned(state, m, sprites)

    step_creeps(state, m, move_interval=1)

    assert creep.direction is Direction.UP
    assert creep.frame == 2


def test_waypoint_advances_then_breaches_at_last(sprites):
    m = make_map(waypoints=((0, 1), (1, 1), (1, 2)))
    state = GameState()
    creep = _spawned(state, m, sprites)

    for _ in range(7):
        report = step_creeps(state, m, move_interval=1)
        assert not report.removed
    assert (creep.x, creep.y) == (10, 16)
    assert creep.next_waypoint == 2

    for _ in range(6):
        report = step_creeps(state, m, move_interval=1)
        assert not report.removed
    assert creep.creep_id in state.creeps

    report = step_creeps(state, m, move_interval=1)
    assert report.breached == [creep]
    assert not report.died
    assert creep.creep_id not in state.creeps
    assert (creep.x, creep.y) == (10, 23)


def test_dead_creep_pays_loot_and_leaves_roster(line_map, sprites):
    state = GameState(money=0)
    creep = _spawned(state, line_map, sprites, kind="big")
    creep.health = 0

    report = step_creeps(state, line_map, move_interval=1)

    assert report.died == [creep]
    assert creep.creep_id not in state.creeps
    assert state.money == 200
    # Dead creeps do not move
    assert (creep.x, creep.y) == (3, 16)


def test_update_creep_reports_death_before_moving(line_map, sprites):
    state = GameState(money=10)
    creep = _spawned(state, line_map, sprites, kind="tiny")
    creep.health = -5

    outcome = update_creep(creep, state, line_map, move_interval=1)

    assert outcome.removed
    assert outcome.reason.value == "died"
    assert state.money == 60
    assert creep.x == 3


def test_towers_forget_removed_creeps(line_map, sprites):
    state = GameState()
    creep = _spawned(state, line_map, sprites)
    tower = new_tower("basic", 10, 23, sprites)
    tower.target_id = creep.creep_id
    state.towers.append(tower)
    creep.health = 0

    step_creeps(state, line_map, move_interval=10)

    assert tower.target_id is None


def test_attack_rejects_negative_damage(sprites):
    creep = new_creep("tiny", sprites)
    with pytest.raises(ValueError):
        creep.attack(-1)
    assert creep.health == 100
    assert creep.attack(100) is True
    assert not creep.alive
