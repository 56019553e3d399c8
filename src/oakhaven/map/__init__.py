from .grid import Coord, Grid, find_path_bfs, flood_fill, new_grid, tiles_from_ascii
from .model import BiomeKind, MapData, NpcSpawn, Prop, Room
from .themes import Theme, ThemeId, get_theme
from .tiles import TileKind

__all__ = [
    "BiomeKind",
    "Coord",
    "Grid",
    "MapData",
    "NpcSpawn",
    "Prop",
    "Room",
    "Theme",
    "ThemeId",
    "TileKind",
    "find_path_bfs",
    "flood_fill",
    "get_theme",
    "new_grid",
    "tiles_from_ascii",
]
