import pytest

from conftest import make_map

from nokiadefence.core.model.state import GameState
from nokiadefence.core.rules.creep_motion import step_creeps
from nokiadefence.core.rules.wave_spawner import (
    has_more_waves,
    remaining_to_spawn,
    start_wave,
    step_spawner,
    wave_cleared,
)


def test_start_wave_builds_roster_without_releasing(line_map, sprites):
    state = GameState()
    start_wave(state, line_map, sprites, spawn_interval=180)

    assert [c.kind for c in state.roster] == ["small", "small", "small"]
    assert state.creeps == {}
    assert state.spawn_countdown == 180
    assert remaining_to_spawn(state) == 3


def test_three_creeps_released_every_180_ticks(line_map, sprites):
    state = GameState()
    start_wave(state, line_map, sprites, spawn_interval=180)

    released_at = []
    for tick in range(1, 541):
        if step_spawner(state, line_map, spawn_interval=180) is not None:
            released_at.append(tick)

    assert released_at == [180, 360, 540]
    assert len(state.creeps) == 3
    assert remaining_to_spawn(state) == 0
    # Nothing more to release
    for _ in range(200):
        assert step_spawner(state, line_map, spawn_interval=180) is None


def test_released_creeps_start_at_spawn_with_fresh_ids(line_map, sprites):
    state = GameState()
    start_wave(state, line_map, sprites, spawn_interval=1)

    first = step_spawner(state, line_map, spawn_interval=1)
    second = step_spawner(state, line_map, spawn_interval=1)

    assert (first.x, first.y) == line_map.spawn_px
    assert (second.x, second.y) == line_map.spawn_px
    assert first.next_waypoint == 1
    assert second.creep_id == first.creep_id + 1
    assert list(state.creeps) == [first.creep_id, second.creep_id]


def test_wave_cleared_only_once_every_released_creep_is_gone(line_map, sprites):
    state = GameState()
    assert not wave_cleared(state)

    start_wave(state, line_map, sprites, spawn_interval=180)
    for _ in range(540):
        step_spawner(state, line_map, spawn_interval=180)
    assert remaining_to_spawn(state) == 0
    assert not wave_cleared(state)

    creeps = list(state.creeps.values())
    creeps[0].health = 0
    creeps[1].health = 0
    step_creeps(state, line_map, move_interval=10)
    assert not wave_cleared(state)

    creeps[2].health = 0
    step_creeps(state, line_map, move_interval=10)
    assert wave_cleared(state)


def test_wave_not_cleared_while_roster_remains(line_map, sprites):
    state = GameState()
    start_wave(state, line_map, sprites, spawn_interval=2)
    step_spawner(state, line_map, spawn_interval=2)
    step_spawner(state, line_map, spawn_interval=2)
    for creep in list(state.creeps.values()):
        creep.health = 0
    step_creeps(state, line_map, move_interval=10)

    assert state.creeps == {}
    assert remaining_to_spawn(state) == 2
    assert not wave_cleared(state)


@pytest.mark.parametrize(("wave_index", "expected"), [(0, True), (1, False)])
def test_has_more_waves(sprites, wave_index, expected):
    m = make_map(waves=(("tiny",), ("big",)))
    state = GameState(wave_index=wave_index)
    assert has_more_waves(state, m) is expected


def test_start_wave_uses_current_wave_index(sprites):
    m = make_map(waves=(("tiny",), ("big", "tiny")))
    state = GameState(wave_index=1)
    start_wave(state, m, sprites)
    assert [c.kind for c in state.roster] == ["big", "tiny"]
    assert state.spawned == 0
