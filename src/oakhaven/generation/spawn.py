from __future__ import annotations

import logging
from typing import Iterator, Optional, Set

from ..map.grid import Coord
from ..map.model import MapData

logger = logging.getLogger(__name__)

ROOM_CANDIDATES = 5


def is_valid_spawn(map_data: MapData, x: int, y: int, occupied: Optional[Set[Coord]] = None) -> bool:
    """True when (x, y) is an interior, walkable floor tile with no prop or NPC on it."""
    if not map_data.is_interior(x, y):
        return False
    if not map_data.tile_at(x, y).walkable_floor:
        return False
    taken = occupied if occupied is not None else map_data.occupied_tiles()
    return (x, y) not in taken


def _rings(cx: int, cy: int, max_radius: int) -> Iterator[Coord]:
    """Square rings around (cx, cy), radius 1 outward, each ring in row-major order."""
    for r in range(1, max_radius + 1):
        for dy in range(-r, r + 1):
            for dx in range(-r, r + 1):
                if max(abs(dx), abs(dy)) == r:
                    yield cx + dx, cy + dy


def find_valid_spawn(map_data: MapData) -> Coord:
    """Pick the player's start tile.

    Order of preference: the map's own start, the centers of the first rooms,
    the nearest valid tile around the map center, and finally the center
    itself without validation.
    """
    occupied = map_data.occupied_tiles()

    if map_data.start is not None and is_valid_spawn(map_data, *map_data.start, occupied=occupied):
        return map_data.start

    for room in map_data.rooms[:ROOM_CANDIDATES]:
        cx, cy = room.center()
        if is_valid_spawn(map_data, cx, cy, occupied=occupied):
            return (cx, cy)

    cx, cy = map_data.width // 2, map_data.height // 2
    for x, y in _rings(cx, cy, max(map_data.width, map_data.height)):
        if is_valid_spawn(map_data, x, y, occupied=occupied):
            return (x, y)

    logger.warning("No valid spawn on level %d; falling back to center (%d,%d)", map_data.level, cx, cy)
    return (cx, cy)


def apply_spawn(map_data: MapData) -> Coord:
    """Resolve the start tile and store it on the map."""
    x, y = find_valid_spawn(map_data)
    if map_data.start != (x, y):
        logger.debug("Spawn for level %d moved from %s to (%d,%d)", map_data.level, map_data.start, x, y)
    map_data.start_x, map_data.start_y = x, y
    return (x, y)
