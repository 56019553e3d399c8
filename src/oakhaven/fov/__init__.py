from .fog_of_war import FogOfWar, FogSettings, FogTileState, extend_explored
from .shadowcast import VisibilityEngine, compute_fov

__all__ = [
    "FogOfWar",
    "FogSettings",
    "FogTileState",
    "VisibilityEngine",
    "compute_fov",
    "extend_explored",
]
