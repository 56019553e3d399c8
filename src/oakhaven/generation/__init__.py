from .base import BiomeGenerator, BuildContext
from .caves import CellularCaveGenerator, DeepCavernsGenerator
from .decoration import DecorationPass, decorate
from .drunkard import DrunkardsWalkGenerator
from .factory import LevelFactory, generate
from .rooms import RoomPlacementGenerator
from .spawn import apply_spawn, find_valid_spawn, is_valid_spawn
from .village import VillageComposer

__all__ = [
    "BiomeGenerator",
    "BuildContext",
    "CellularCaveGenerator",
    "DecorationPass",
    "DeepCavernsGenerator",
    "DrunkardsWalkGenerator",
    "LevelFactory",
    "RoomPlacementGenerator",
    "VillageComposer",
    "apply_spawn",
    "decorate",
    "find_valid_spawn",
    "generate",
    "is_valid_spawn",
]
