import pytest

from oakhaven import generate
from oakhaven.config import GenerationSettings
from oakhaven.data.loader import BiomeSchedule
from oakhaven.errors import InvalidDimensions
from oakhaven.generation.factory import LevelFactory
from oakhaven.generation.rooms import RoomPlacementGenerator
from oakhaven.generation.village import VillageComposer
from oakhaven.map.grid import flood_fill
from oakhaven.map.model import BiomeKind
from oakhaven.map.themes import ThemeId
from oakhaven.map.tiles import TileKind


def test_scripted_draw_picks_room_placement(scripted_rng):
    # 0.0 lands in the first weight band of levels 1-5, which is rooms
    m = generate(3, rng=scripted_rng([0.0], seed=5), settings=GenerationSettings(seed=1))
    assert m.biome == BiomeKind.ROOMS
    assert m.theme in (ThemeId.DUNGEON, ThemeId.CRYPT)
    assert m.level == 3
    assert m.rooms
    assert m.tiles[0][0] == TileKind.WALL
    assert len(m.find_tiles(TileKind.STAIRS)) == 1
    reachable = flood_fill(m.tiles, m.rooms[0].center())
    for room in m.rooms:
        assert room.center() in reachable


def test_level_zero_is_the_village():
    m = LevelFactory(GenerationSettings(seed=9)).generate(0)
    assert m.biome == BiomeKind.VILLAGE
    assert m.theme == ThemeId.VILLAGE
    assert (m.width, m.height) == (50, 40)
    assert m.npcs


def test_village_is_undecorated_unless_asked():
    plain = LevelFactory(GenerationSettings(seed=9)).generate(0)
    assert not any(p.type in ("rubble", "bones", "web") for p in plain.props)
    assert not plain.find_tiles(TileKind.WALL_CRACKED)


def test_same_seed_same_level():
    a = LevelFactory(GenerationSettings(seed=42)).generate(7)
    b = LevelFactory(GenerationSettings(seed=42)).generate(7)
    assert a.signature() == b.signature()
    assert a.start == b.start


def test_levels_are_derived_independently():
    factory = LevelFactory(GenerationSettings(seed=42))
    first = factory.generate(4).signature()
    factory.generate(5)
    assert LevelFactory(GenerationSettings(seed=42)).generate(4).signature() == first


@pytest.mark.parametrize("biome", [BiomeKind.CAVES, BiomeKind.DRUNKARD, BiomeKind.DEEP_CAVERNS])
def test_forced_biome(biome):
    m = LevelFactory(GenerationSettings(seed=2, biome=biome)).generate(3)
    assert m.biome == biome
    assert len(m.find_tiles(TileKind.STAIRS)) == 1


def test_forced_biome_does_not_touch_the_village():
    m = LevelFactory(GenerationSettings(seed=2, biome=BiomeKind.CAVES)).generate(0)
    assert m.biome == BiomeKind.VILLAGE


def test_custom_schedule():
    schedule = BiomeSchedule.model_validate({"bands": [{"min_level": 1, "weights": {"deep_caverns": 1}}]})
    factory = LevelFactory(GenerationSettings(seed=3), schedule=schedule)
    m = factory.generate(2)
    assert m.biome == BiomeKind.DEEP_CAVERNS
    assert m.theme == ThemeId.DUNGEON


def test_rooms_that_do_not_fit_fall_back_to_caves():
    m = LevelFactory(GenerationSettings(width=12, height=12, seed=3, biome="rooms")).generate(2)
    assert m.biome == BiomeKind.CAVES
    assert (m.width, m.height) == (12, 12)


def test_negative_level_rejected():
    with pytest.raises(ValueError):
        LevelFactory(GenerationSettings(seed=1)).generate(-1)


@pytest.mark.parametrize("width,height", [(0, 40), (60, 2), (-1, -1)])
def test_bad_dimensions_rejected_up_front(width, height):
    with pytest.raises(InvalidDimensions):
        LevelFactory(GenerationSettings(width=width, height=height))


@pytest.mark.parametrize("level", range(0, 20, 3))
def test_start_is_always_interior(level):
    m = LevelFactory(GenerationSettings(seed=123)).generate(level)
    x, y = m.start
    assert 1 <= x <= m.width - 2 and 1 <= y <= m.height - 2


def test_build_generator_covers_every_biome():
    assert isinstance(LevelFactory.build_generator(BiomeKind.ROOMS), RoomPlacementGenerator)
    assert isinstance(LevelFactory.build_generator(BiomeKind.VILLAGE), VillageComposer)
    for biome in BiomeKind:
        assert LevelFactory.build_generator(biome).biome == biome
