from nokiadefence.core.geometry import (
    MAP_COLUMNS,
    MAP_ROWS,
    Rect,
    pixel_to_tile,
    step_toward,
    tile_in_map,
    tile_rect,
    tile_to_pixel,
)


def test_map_grid_fits_under_hud():
    assert MAP_COLUMNS == 12
    assert MAP_ROWS == 6


def test_tile_centres_include_hud_offset():
    assert tile_to_pixel(0, 0) == (3, 9)
    assert tile_to_pixel(11, 5) == (80, 44)
    assert tile_to_pixel(-1, 1) == (-4, 16)


def test_pixel_to_tile_round_trips_every_pixel_of_a_tile():
    rect = tile_rect(1, 1)
    assert rect == Rect(7, 13, 14, 20)
    for x in range(rect.min_x, rect.max_x):
        for y in range(rect.min_y, rect.max_y):
            assert pixel_to_tile(x, y) == (1, 1)
    assert pixel_to_tile(14, 13) == (2, 1)
    assert pixel_to_tile(7, 20) == (1, 2)


def test_centered_rect_is_symmetric_around_pixel():
    r = Rect.centered(10, 10, 3)
    assert r == Rect(7, 7, 14, 14)
    assert r.width == 7 and r.height == 7
    assert r.contains(7, 7)
    assert r.contains(13, 13)
    assert not r.contains(14, 10)


def test_touching_rects_do_not_overlap():
    a = Rect(0, 0, 7, 7)
    assert not a.overlaps(Rect(7, 0, 14, 7))
    assert not a.overlaps(Rect(0, 7, 7, 14))
    assert a.overlaps(Rect(6, 6, 10, 10))
    assert Rect(6, 6, 10, 10).overlaps(a)


def test_empty_rect_overlaps_nothing():
    assert Rect(3, 3, 3, 10).is_empty()
    assert not Rect(3, 3, 3, 10).overlaps(Rect(0, 0, 20, 20))


def test_tile_in_map_bounds():
    assert tile_in_map(0, 0)
    assert tile_in_map(11, 5)
    assert not tile_in_map(12, 0)
    assert not tile_in_map(0, 6)
    assert not tile_in_map(-1, 3)


def test_step_toward():
    assert step_toward(3, 5) == 4
    assert step_toward(5, 3) == 4
    assert step_toward(4, 4) == 4
