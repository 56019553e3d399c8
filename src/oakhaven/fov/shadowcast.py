from __future__ import annotations

import logging
from typing import Sequence, Set, Tuple

from ..map.grid import Coord, grid_size
from ..map.model import MapData
from ..map.tiles import TileKind

logger = logging.getLogger(__name__)

# (xx, xy, yx, yy) per octant: world = origin + (dx*xx + dy*xy, dx*yx + dy*yy)
OCTANTS: Tuple[Tuple[int, int, int, int], ...] = (
    (1, 0, 0, 1),
    (0, 1, 1, 0),
    (0, -1, 1, 0),
    (-1, 0, 0, 1),
    (-1, 0, 0, -1),
    (0, -1, -1, 0),
    (0, 1, -1, 0),
    (1, 0, 0, -1),
)


def compute_fov(tiles: Sequence[Sequence[TileKind]], origin: Coord, radius: int) -> Set[Coord]:
    """
    Recursive shadowcasting field of view.

    Returns the set of (x, y) tiles visible from ``origin`` within Euclidean
    ``radius`` (squared distance strictly below radius squared). Opaque tiles
    are visible themselves but hide what lies behind them; tiles outside the
    grid count as opaque and are never returned. The origin is always
    included. Pure: the same inputs always give the same set.
    """
    if radius < 0:
        raise ValueError("radius must be >= 0")
    width, height = grid_size(tiles)
    ox, oy = origin
    visible: Set[Coord] = {(ox, oy)}

    def blocked(x: int, y: int) -> bool:
        if not (0 <= x < width and 0 <= y < height):
            return True
        return tiles[y][x].opaque

    def cast_light(row: int, start: float, end: float, xx: int, xy: int, yx: int, yy: int) -> None:
        if start < end:
            return
        radius_sq = radius * radius
        for j in range(row, radius + 1):
            dy = -j
            is_blocked = False
            new_start = 0.0
            for dx in range(-j, 2):
                x = ox + dx * xx + dy * xy
                y = oy + dx * yx + dy * yy
                left_slope = (dx - 0.5) / (dy + 0.5)
                right_slope = (dx + 0.5) / (dy - 0.5)
                if start < right_slope:
                    continue
                if end > left_slope:
                    break

                if dx * dx + dy * dy < radius_sq and 0 <= x < width and 0 <= y < height:
                    visible.add((x, y))

                if is_blocked:
                    if blocked(x, y):
                        new_start = right_slope
                        continue
                    is_blocked = False
                    start = new_start
                elif blocked(x, y) and j < radius:
                    is_blocked = True
                    cast_light(j + 1, start, left_slope, xx, xy, yx, yy)
                    new_start = right_slope
            if is_blocked:
                break

    for xx, xy, yx, yy in OCTANTS:
        cast_light(1, 1.0, 0.0, xx, xy, yx, yy)

    logger.debug("FOV from (%d,%d) radius %d -> %d visible tiles", ox, oy, radius, len(visible))
    return visible


class VisibilityEngine:
    """Binds compute_fov to one map so callers only pass the origin each turn."""

    def __init__(self, map_data: MapData) -> None:
        self.map_data = map_data

    def compute(self, origin_x: int, origin_y: int, radius: int) -> Set[Coord]:
        return compute_fov(self.map_data.tiles, (origin_x, origin_y), radius)
