from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Set

from ..map.grid import Coord, Grid, frame_walls, grid_size, is_interior, new_grid
from ..map.model import BiomeKind, MapData, NpcSpawn, Prop, Room
from ..map.themes import ThemeId
from ..map.tiles import TileKind
from ..rng import RandomSource

logger = logging.getLogger(__name__)


@dataclass
class BuildContext:
    """Mutable state threaded through the steps of a single generation run.

    A fresh context is created for every ``generate()`` call so that nothing
    leaks between runs of the same generator instance.
    """

    tiles: Grid
    rng: RandomSource
    rooms: List[Room] = field(default_factory=list)
    props: List[Prop] = field(default_factory=list)
    npcs: List[NpcSpawn] = field(default_factory=list)
    start: Optional[Coord] = None
    _occupied: Set[Coord] = field(default_factory=set, repr=False)

    @classmethod
    def blank(cls, width: int, height: int, rng: RandomSource, fill: TileKind = TileKind.WALL) -> "BuildContext":
        return cls(tiles=new_grid(width, height, fill), rng=rng)

    @property
    def width(self) -> int:
        return grid_size(self.tiles)[0]

    @property
    def height(self) -> int:
        return grid_size(self.tiles)[1]

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def is_interior(self, x: int, y: int) -> bool:
        return is_interior(self.width, self.height, x, y)

    def tile(self, x: int, y: int) -> TileKind:
        return self.tiles[y][x]

    def set_tile(self, x: int, y: int, kind: TileKind) -> None:
        self.tiles[y][x] = kind

    def is_occupied(self, x: int, y: int) -> bool:
        return (x, y) in self._occupied

    def is_free_floor(self, x: int, y: int) -> bool:
        """Walkable floor with no prop or NPC on it."""
        return self.in_bounds(x, y) and self.tiles[y][x].walkable_floor and (x, y) not in self._occupied

    def add_prop(self, x: int, y: int, prop_type: str) -> Optional[Prop]:
        if not self.in_bounds(x, y) or (x, y) in self._occupied:
            return None
        prop = Prop.make(x, y, prop_type)
        self.props.append(prop)
        self._occupied.add((x, y))
        return prop

    def add_npc(
        self,
        x: int,
        y: int,
        name: str,
        dialogue_lines: Sequence[str] = (),
        portrait_ref: Optional[str] = None,
    ) -> Optional[NpcSpawn]:
        if not self.in_bounds(x, y) or (x, y) in self._occupied:
            return None
        npc = NpcSpawn(x, y, name, list(dialogue_lines), portrait_ref)
        self.npcs.append(npc)
        self._occupied.add((x, y))
        return npc

    def drop_props(self, predicate: Callable[[Prop], bool]) -> int:
        """Remove props matching ``predicate``; returns how many were removed."""
        kept = [p for p in self.props if not predicate(p)]
        removed = len(self.props) - len(kept)
        if removed:
            self.props = kept
            self._occupied = {(p.x, p.y) for p in self.props} | {(n.x, n.y) for n in self.npcs}
        return removed

    def to_map(self, *, level: int, theme: ThemeId, biome: BiomeKind) -> MapData:
        start_x, start_y = self.start if self.start is not None else (None, None)
        return MapData(
            width=self.width,
            height=self.height,
            tiles=self.tiles,
            rooms=list(self.rooms),
            props=list(self.props),
            npcs=list(self.npcs),
            level=level,
            theme=theme,
            start_x=start_x,
            start_y=start_y,
            biome=biome,
        )


def place_stairs_randomly(ctx: BuildContext, max_attempts: Optional[int] = None) -> Coord:
    """Turn one random floor tile into stairs.

    Rejection-samples interior tiles until a floor is hit. If the attempt
    budget runs out, picks uniformly among all floor tiles, and as a last
    resort carves the center.
    """
    budget = max_attempts if max_attempts is not None else 4 * ctx.width * ctx.height
    for _ in range(budget):
        x = ctx.rng.randint(1, ctx.width - 2)
        y = ctx.rng.randint(1, ctx.height - 2)
        if ctx.tile(x, y) == TileKind.FLOOR:
            ctx.set_tile(x, y, TileKind.STAIRS)
            return (x, y)

    floors = [
        (x, y)
        for y in range(1, ctx.height - 1)
        for x in range(1, ctx.width - 1)
        if ctx.tile(x, y) == TileKind.FLOOR
    ]
    if floors:
        x, y = ctx.rng.choice(floors)
        logger.debug("Stairs rejection sampling exhausted; picked (%d,%d) from %d floors", x, y, len(floors))
    else:
        x, y = ctx.width // 2, ctx.height // 2
        logger.warning("No floor available for stairs; carving center (%d,%d)", x, y)
    ctx.set_tile(x, y, TileKind.STAIRS)
    return (x, y)


class BiomeGenerator(ABC):
    """Abstract base for biome generators.

    Subclasses implement ``carve``; ``generate`` handles dimension checks, the
    border ring and packaging the result as a MapData.
    """

    biome: BiomeKind = BiomeKind.ROOMS
    fill: TileKind = TileKind.WALL
    border: TileKind = TileKind.WALL

    def generate(
        self,
        width: int,
        height: int,
        rng: RandomSource,
        *,
        level: int = 0,
        theme: ThemeId = ThemeId.DUNGEON,
    ) -> MapData:
        ctx = BuildContext.blank(width, height, rng, self.fill)
        self.carve(ctx)
        frame_walls(ctx.tiles, self.border)
        logger.debug(
            "%s: %dx%d level=%d rooms=%d props=%d npcs=%d",
            type(self).__name__,
            width,
            height,
            level,
            len(ctx.rooms),
            len(ctx.props),
            len(ctx.npcs),
        )
        return ctx.to_map(level=level, theme=theme, biome=self.biome)

    @abstractmethod
    def carve(self, ctx: BuildContext) -> None:
        """Fill in the context's grid, rooms, props and NPCs."""
        raise NotImplementedError
