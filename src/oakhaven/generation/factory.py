from __future__ import annotations

import logging
from typing import Optional

from ..config import GenerationSettings
from ..data.loader import BiomeSchedule, load_schedule
from ..map.model import BiomeKind, MapData
from ..map.themes import ThemeId
from ..rng import RandomSource, RNGManager
from .base import BiomeGenerator
from .caves import CellularCaveGenerator, DeepCavernsGenerator
from .decoration import DecorationPass
from .drunkard import DrunkardsWalkGenerator
from .rooms import RoomPlacementGenerator
from .spawn import apply_spawn
from .village import VillageComposer

logger = logging.getLogger(__name__)

VILLAGE_LEVEL = 0


class LevelFactory:
    """Produces complete levels: biome selection, generation, decoration and spawn.

    Usage:
      factory = LevelFactory(GenerationSettings.from_env())
      level = factory.generate(3)
    """

    def __init__(
        self,
        settings: Optional[GenerationSettings] = None,
        schedule: Optional[BiomeSchedule] = None,
        decoration: Optional[DecorationPass] = None,
    ) -> None:
        self.settings = settings or GenerationSettings()
        self.settings.validate()
        self._schedule = schedule
        self.decoration = decoration or DecorationPass()
        self._rngm = RNGManager(self.settings.seed)

    @property
    def schedule(self) -> BiomeSchedule:
        if self._schedule is None:
            self._schedule = load_schedule(self.settings.schedule_path)
        return self._schedule

    @staticmethod
    def build_generator(biome: BiomeKind) -> BiomeGenerator:
        if biome == BiomeKind.ROOMS:
            return RoomPlacementGenerator()
        if biome == BiomeKind.CAVES:
            return CellularCaveGenerator()
        if biome == BiomeKind.DRUNKARD:
            return DrunkardsWalkGenerator()
        if biome == BiomeKind.DEEP_CAVERNS:
            return DeepCavernsGenerator()
        if biome == BiomeKind.VILLAGE:
            return VillageComposer()
        raise ValueError(f"Unknown biome {biome!r}")

    def choose_biome(self, level: int, rng: RandomSource) -> BiomeKind:
        if level == VILLAGE_LEVEL:
            return BiomeKind.VILLAGE
        if self.settings.biome is not None:
            return self.settings.biome
        return rng.weighted_choice(self.schedule.band_for(level).weights)

    def choose_theme(self, biome: BiomeKind, rng: RandomSource) -> ThemeId:
        if biome == BiomeKind.VILLAGE:
            return ThemeId.VILLAGE
        return rng.choice(self.schedule.themes_for(biome))

    def generate(self, level: int, rng: Optional[RandomSource] = None) -> MapData:
        if level < 0:
            raise ValueError("level must be >= 0")
        rng = rng if rng is not None else self._rngm.level_rng(level)

        biome = self.choose_biome(level, rng)
        theme = self.choose_theme(biome, rng)
        if biome == BiomeKind.VILLAGE:
            width, height = self.settings.village_width, self.settings.village_height
        else:
            width, height = self.settings.width, self.settings.height
        logger.info("LevelFactory: level %d using %s (theme=%s, %dx%d)", level, biome.value, theme.value, width, height)

        map_data = self.build_generator(biome).generate(width, height, rng, level=level, theme=theme)
        if biome == BiomeKind.ROOMS and not map_data.rooms:
            logger.warning("LevelFactory: no rooms fit on level %d, falling back to caves", level)
            map_data = self.build_generator(BiomeKind.CAVES).generate(width, height, rng, level=level, theme=theme)

        if map_data.biome != BiomeKind.VILLAGE or self.settings.decorate_village:
            self.decoration.apply(map_data, rng)
        apply_spawn(map_data)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("LevelFactory: level %d ready, start=%s signature=%s", level, map_data.start, map_data.signature())
        return map_data


def generate(
    level_index: int,
    *,
    rng: Optional[RandomSource] = None,
    settings: Optional[GenerationSettings] = None,
) -> MapData:
    """Generate one level with default collaborators."""
    return LevelFactory(settings).generate(level_index, rng)
