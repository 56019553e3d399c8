import logging
import textwrap

import pytest

import oakhaven.data.loader as loader
from oakhaven.config import GenerationSettings, build_settings, parse_args
from oakhaven.data.loader import load_roster, load_schedule
from oakhaven.errors import ScheduleError
from oakhaven.map.model import BiomeKind
from oakhaven.map.themes import ThemeId


@pytest.fixture
def no_user_override(monkeypatch, tmp_path):
    monkeypatch.setattr(loader, "user_schedule_path", lambda: tmp_path / "missing.yaml")


def test_from_env_reads_prefixed_values():
    env = {
        "OAKHAVEN_WIDTH": "80",
        "OAKHAVEN_HEIGHT": "50",
        "OAKHAVEN_SEED": "1234",
        "OAKHAVEN_BIOME": "Caves",
        "OAKHAVEN_FOV_RADIUS": "6",
        "OAKHAVEN_DECORATE_VILLAGE": "yes",
        "OAKHAVEN_SCHEDULE": "/tmp/biomes.yaml",
    }
    s = GenerationSettings.from_env(env)
    assert (s.width, s.height, s.seed) == (80, 50, 1234)
    assert s.biome == BiomeKind.CAVES
    assert s.fov_radius == 6
    assert s.decorate_village is True
    assert s.schedule_path == "/tmp/biomes.yaml"


def test_from_env_defaults_and_bad_values(caplog):
    with caplog.at_level(logging.WARNING, logger="oakhaven.config"):
        s = GenerationSettings.from_env({"OAKHAVEN_WIDTH": "wide", "OAKHAVEN_BIOME": "swamp"})
    assert s.width == 60
    assert s.biome is None
    assert s.seed is None
    assert "wide" in caplog.text
    assert "swamp" in caplog.text


def test_village_cannot_be_forced():
    assert GenerationSettings(biome="village").biome is None
    assert GenerationSettings(biome="drunkard").biome == BiomeKind.DRUNKARD


def test_negative_fov_radius_rejected():
    with pytest.raises(ValueError):
        GenerationSettings(fov_radius=-1)


def test_cli_arguments_override_environment():
    args = parse_args(["--seed", "7", "--width", "30", "--biome", "rooms"])
    s = build_settings(args, env={"OAKHAVEN_SEED": "1", "OAKHAVEN_HEIGHT": "25"})
    assert s.seed == 7
    assert (s.width, s.height) == (30, 25)
    assert s.biome == BiomeKind.ROOMS


def test_embedded_schedule(no_user_override):
    schedule = load_schedule()
    assert set(schedule.band_for(1).weights) == {BiomeKind.ROOMS, BiomeKind.CAVES}
    assert BiomeKind.DRUNKARD in schedule.band_for(8).weights
    assert BiomeKind.DEEP_CAVERNS in schedule.band_for(12).weights
    assert schedule.band_for(500).min_level == 16
    assert schedule.themes_for(BiomeKind.DEEP_CAVERNS) == [ThemeId.MAGMA]


def test_user_override_is_used(monkeypatch, tmp_path):
    override = tmp_path / "biomes.yaml"
    override.write_text(
        textwrap.dedent(
            """
            bands:
              - min_level: 1
                weights:
                  drunkard: 1
            """
        ),
        encoding="utf-8",
    )
    monkeypatch.setattr(loader, "user_schedule_path", lambda: override)
    schedule = load_schedule()
    assert list(schedule.band_for(3).weights) == [BiomeKind.DRUNKARD]


@pytest.mark.parametrize(
    "body",
    [
        "bands:\n  - min_level: 1\n    weights: {village: 1}\n",
        "bands:\n  - min_level: 1\n    weights: {rooms: 0}\n",
        "bands:\n  - min_level: 5\n    max_level: 2\n    weights: {rooms: 1}\n",
        "bands: []\n",
        "- just a list\n",
        "bands: [unclosed\n",
    ],
)
def test_invalid_schedules_raise(tmp_path, body):
    path = tmp_path / "bad.yaml"
    path.write_text(body, encoding="utf-8")
    with pytest.raises(ScheduleError):
        load_schedule(path)


def test_missing_schedule_file(tmp_path):
    with pytest.raises(ScheduleError):
        load_schedule(tmp_path / "nope.yaml")


def test_embedded_roster():
    roster = load_roster()
    assert roster.guide.name == "Elder Aethel"
    assert roster.guide.portrait == "assets/elder_portrait.png"
    assert roster.guide.dialogue
    assert len(roster.villagers) == 5
    assert roster.merchant.name == "Merchant Tobin"
