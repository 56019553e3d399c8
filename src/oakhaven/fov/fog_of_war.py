from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Set
import logging

from ..map.grid import Coord
from ..map.model import MapData
from .shadowcast import compute_fov

logger = logging.getLogger(__name__)


class FogTileState(str, Enum):
    UNSEEN = "unseen"         # never seen; fully dark
    SEEN = "seen"             # explored earlier but not currently visible; dim
    VISIBLE = "visible"       # currently visible; full brightness


@dataclass
class FogSettings:
    vision_radius: int = 8
    dim_factor: float = 0.35  # brightness for seen-not-visible tiles

    def __post_init__(self) -> None:
        if self.vision_radius < 0:
            raise ValueError("vision_radius must be >= 0")
        if not (0.0 <= self.dim_factor <= 1.0):
            raise ValueError("dim_factor must be between 0.0 and 1.0")


def extend_explored(explored: Set[Coord], visible: Iterable[Coord]) -> int:
    """Union ``visible`` into ``explored`` in place; returns how many tiles were new."""
    before = len(explored)
    explored.update(visible)
    return len(explored) - before


class FogOfWar:
    """
    Per-turn visibility plus explored-tile memory over one MapData.

    The visible set is recomputed from scratch on every ``update``; the
    explored set only ever grows until the map changes. Renderers and the
    minimap read ``get_state``/``light_map``/``explored_tiles``:
      - UNSEEN: brightness 0.0
      - SEEN: brightness = dim_factor
      - VISIBLE: brightness 1.0
    """

    def __init__(self, map_data: MapData, settings: Optional[FogSettings] = None) -> None:
        self.map_data = map_data
        self.settings = settings or FogSettings()
        self._explored: Set[Coord] = set()
        self._visible: Set[Coord] = set()
        logger.debug(
            "FogOfWar initialized: %dx%d radius=%d dim=%.2f",
            map_data.width,
            map_data.height,
            self.settings.vision_radius,
            self.settings.dim_factor,
        )

    def update(self, viewer: Coord, *, radius: Optional[int] = None) -> Set[Coord]:
        """Recompute visibility around ``viewer`` and fold it into the explored set."""
        if not self.map_data.in_bounds(*viewer):
            raise ValueError("viewer position out of bounds")
        use_radius = self.settings.vision_radius if radius is None else radius
        self._visible = compute_fov(self.map_data.tiles, viewer, use_radius)
        added = extend_explored(self._explored, self._visible)
        logger.debug("FogOfWar updated at %s radius %d: %d visible, %d newly explored", viewer, use_radius, len(self._visible), added)
        return set(self._visible)

    def get_state(self, x: int, y: int) -> FogTileState:
        if not self.map_data.in_bounds(x, y):
            raise IndexError("Tile out of bounds")
        if (x, y) in self._visible:
            return FogTileState.VISIBLE
        if (x, y) in self._explored:
            return FogTileState.SEEN
        return FogTileState.UNSEEN

    def light_map(self) -> List[List[float]]:
        """Matrix [height][width] of brightness multipliers for rendering."""
        dim = self.settings.dim_factor
        result: List[List[float]] = []
        for y in range(self.map_data.height):
            row = []
            for x in range(self.map_data.width):
                if (x, y) in self._visible:
                    row.append(1.0)
                elif (x, y) in self._explored:
                    row.append(dim)
                else:
                    row.append(0.0)
            result.append(row)
        return result

    def visible_tiles(self) -> Set[Coord]:
        return set(self._visible)

    def explored_tiles(self) -> Set[Coord]:
        return set(self._explored)

    def mark_all_explored(self) -> None:
        """Debug/cheat: reveal the whole map."""
        self._explored = {(x, y) for y in range(self.map_data.height) for x in range(self.map_data.width)}

    def on_map_changed(self, new_map: MapData) -> None:
        """Switch to a new level; memory of the old one is dropped."""
        self.map_data = new_map
        self._explored = set()
        self._visible = set()
        logger.debug("FogOfWar map changed to %dx%d; memory cleared", new_map.width, new_map.height)
