import pytest

from oakhaven.config import GenerationSettings
from oakhaven.generation.factory import LevelFactory
from oakhaven.generation.spawn import apply_spawn, find_valid_spawn, is_valid_spawn
from oakhaven.map.grid import tiles_from_ascii
from oakhaven.map.model import MapData, Prop, Room


def hand_map(rows, **kwargs):
    tiles = tiles_from_ascii(rows)
    return MapData(width=len(rows[0]), height=len(rows), tiles=tiles, **kwargs)


OPEN = [
    "#########",
    "#.......#",
    "#.......#",
    "#.......#",
    "#.......#",
    "#.......#",
    "#########",
]


def test_valid_start_is_kept():
    m = hand_map(OPEN, start_x=2, start_y=2)
    assert find_valid_spawn(m) == (2, 2)


def test_start_under_a_prop_moves_to_room_center():
    m = hand_map(OPEN, start_x=2, start_y=2, rooms=[Room(1, 1, 7, 5)], props=[Prop.make(2, 2, "crate")])
    assert find_valid_spawn(m) == (4, 3)


def test_ring_scan_finds_nearest_floor_to_center():
    rows = [
        "#########",
        "#########",
        "#########",
        "####.####",
        "#########",
        "#.#######",
        "#########",
    ]
    m = hand_map(rows)
    # center (4, 3) itself is floor
    assert find_valid_spawn(m) == (4, 3)

    rows[3] = "#########"
    rows[2] = "#####.###"
    m = hand_map(rows)
    assert find_valid_spawn(m) == (5, 2)


def test_ring_scan_skips_occupied_tiles():
    rows = ["#####", "#...#", "#...#", "#...#", "#####"]
    m = hand_map(rows, props=[Prop.make(2, 2, "barrel")])
    # first tile of the radius-1 ring in row-major order
    assert find_valid_spawn(m) == (1, 1)


def test_all_wall_map_falls_back_to_center():
    m = hand_map(["#####", "#####", "#####"])
    assert find_valid_spawn(m) == (2, 1)


def test_border_and_non_floor_tiles_are_never_valid():
    m = hand_map(["#####", "#.~>#", "#####"])
    assert is_valid_spawn(m, 1, 1)
    assert not is_valid_spawn(m, 0, 1)
    assert not is_valid_spawn(m, 2, 1)
    assert not is_valid_spawn(m, 3, 1)
    assert not is_valid_spawn(m, 10, 10)


def test_apply_spawn_stores_result():
    m = hand_map(OPEN)
    assert apply_spawn(m) == (4, 3)
    assert m.start == (4, 3)


@pytest.mark.parametrize("level", [0, 1, 4, 8, 12, 18])
def test_generated_start_is_interior_and_walkable(level):
    m = LevelFactory(GenerationSettings(seed=11)).generate(level)
    x, y = m.start
    assert 1 <= x <= m.width - 2
    assert 1 <= y <= m.height - 2
    assert m.tile_at(x, y).walkable_floor
    assert (x, y) not in m.occupied_tiles()
