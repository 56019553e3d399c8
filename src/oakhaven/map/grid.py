from __future__ import annotations

import logging
from collections import deque
from typing import Callable, Iterable, Iterator, List, Optional, Sequence, Set, Tuple

from ..errors import InvalidDimensions
from .tiles import GLYPH_TO_KIND, TileKind

logger = logging.getLogger(__name__)

Coord = Tuple[int, int]
Grid = List[List[TileKind]]  # tiles[y][x]

MIN_DIMENSION = 3

DIRECTIONS4: Tuple[Coord, ...] = ((1, 0), (-1, 0), (0, 1), (0, -1))
DIRECTIONS8: Tuple[Coord, ...] = (
    (-1, -1), (0, -1), (1, -1),
    (-1, 0), (1, 0),
    (-1, 1), (0, 1), (1, 1),
)


def check_dimensions(width: int, height: int) -> None:
    """Raise InvalidDimensions unless the grid can hold a wall ring around at least one tile."""
    if width < MIN_DIMENSION or height < MIN_DIMENSION:
        raise InvalidDimensions(width, height, MIN_DIMENSION)


def new_grid(width: int, height: int, fill: TileKind = TileKind.WALL) -> Grid:
    check_dimensions(width, height)
    return [[fill for _ in range(width)] for _ in range(height)]


def grid_size(tiles: Sequence[Sequence[TileKind]]) -> Tuple[int, int]:
    height = len(tiles)
    width = len(tiles[0]) if height else 0
    return width, height


def in_bounds(tiles: Sequence[Sequence[TileKind]], x: int, y: int) -> bool:
    width, height = grid_size(tiles)
    return 0 <= x < width and 0 <= y < height


def is_interior(width: int, height: int, x: int, y: int) -> bool:
    """True inside the 1-tile margin, i.e. x in [1, width-2] and y in [1, height-2]."""
    return 1 <= x <= width - 2 and 1 <= y <= height - 2


def neighbors4(tiles: Sequence[Sequence[TileKind]], x: int, y: int) -> Iterator[Coord]:
    for dx, dy in DIRECTIONS4:
        nx, ny = x + dx, y + dy
        if in_bounds(tiles, nx, ny):
            yield nx, ny


def frame_walls(tiles: Grid, kind: TileKind = TileKind.WALL) -> None:
    width, height = grid_size(tiles)
    for x in range(width):
        tiles[0][x] = kind
        tiles[height - 1][x] = kind
    for y in range(height):
        tiles[y][0] = kind
        tiles[y][width - 1] = kind


def iter_coords(tiles: Sequence[Sequence[TileKind]]) -> Iterator[Coord]:
    width, height = grid_size(tiles)
    for y in range(height):
        for x in range(width):
            yield x, y


def find_tiles(tiles: Sequence[Sequence[TileKind]], kind: TileKind) -> List[Coord]:
    return [(x, y) for x, y in iter_coords(tiles) if tiles[y][x] == kind]


def flood_fill(
    tiles: Sequence[Sequence[TileKind]],
    start: Coord,
    passable: Optional[Callable[[TileKind], bool]] = None,
) -> Set[Coord]:
    """Return every tile 4-connected to ``start`` over passable tiles (start included when passable)."""
    is_open = passable or (lambda kind: kind.passable)
    sx, sy = start
    if not in_bounds(tiles, sx, sy) or not is_open(tiles[sy][sx]):
        return set()
    seen: Set[Coord] = {start}
    q = deque([start])
    while q:
        x, y = q.popleft()
        for nx, ny in neighbors4(tiles, x, y):
            if (nx, ny) not in seen and is_open(tiles[ny][nx]):
                seen.add((nx, ny))
                q.append((nx, ny))
    return seen


def find_path_bfs(tiles: Sequence[Sequence[TileKind]], start: Coord, goal: Coord) -> Optional[int]:
    """Breadth-first shortest path length over passable tiles; returns number of steps or None.

    Uses 4-directional movement.
    """
    sx, sy = start
    gx, gy = goal
    if not in_bounds(tiles, sx, sy) or not in_bounds(tiles, gx, gy):
        return None
    if not tiles[sy][sx].passable or not tiles[gy][gx].passable:
        return None

    q = deque([(sx, sy, 0)])
    seen = {start}
    while q:
        x, y, d = q.popleft()
        if (x, y) == goal:
            return d
        for nx, ny in neighbors4(tiles, x, y):
            if (nx, ny) not in seen and tiles[ny][nx].passable:
                seen.add((nx, ny))
                q.append((nx, ny, d + 1))
    return None


def tiles_from_ascii(rows: Iterable[str]) -> Grid:
    """Build a grid from ASCII art using the tile glyphs ('#' wall, '.' floor, '+' closed door, ...)."""
    grid = [[GLYPH_TO_KIND[ch] for ch in row] for row in rows]
    width, height = grid_size(grid)
    if height == 0 or any(len(row) != width for row in grid):
        raise ValueError("ASCII rows must be non-empty and of equal length")
    logger.debug("Grid loaded from ASCII: %dx%d", width, height)
    return grid


def tiles_to_ascii(tiles: Sequence[Sequence[TileKind]]) -> List[str]:
    return ["".join(kind.glyph for kind in row) for row in tiles]
