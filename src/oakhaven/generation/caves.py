from __future__ import annotations

import logging

from ..map.grid import DIRECTIONS8
from ..map.model import BiomeKind
from ..map.tiles import TileKind
from .base import BiomeGenerator, BuildContext, place_stairs_randomly

logger = logging.getLogger(__name__)


class CellularCaveGenerator(BiomeGenerator):
    """Cellular automata caverns generator.

    Algorithm:
    - Seed interior tiles as walls with ``initial_wall_prob``.
    - Apply ``smooth_steps`` passes of the 8-neighbour majority rule:
      more than ``wall_threshold`` wall neighbours => wall, fewer => floor,
      exactly ``wall_threshold`` => unchanged.
    - Force the border to walls and drop the stairs on a random floor tile.

    Disconnected pockets are left in place; caves carry no room list.
    """

    biome = BiomeKind.CAVES

    def __init__(
        self,
        initial_wall_prob: float = 0.45,
        smooth_steps: int = 5,
        wall_threshold: int = 4,
    ) -> None:
        self.initial_wall_prob = float(initial_wall_prob)
        self.smooth_steps = int(smooth_steps)
        self.wall_threshold = int(wall_threshold)

    def carve(self, ctx: BuildContext) -> None:
        self._randomize(ctx)
        for _ in range(self.smooth_steps):
            self._smooth(ctx)
        for x in range(ctx.width):
            ctx.set_tile(x, 0, TileKind.WALL)
            ctx.set_tile(x, ctx.height - 1, TileKind.WALL)
        for y in range(ctx.height):
            ctx.set_tile(0, y, TileKind.WALL)
            ctx.set_tile(ctx.width - 1, y, TileKind.WALL)
        sx, sy = place_stairs_randomly(ctx)
        logger.debug("%s: stairs at (%d,%d)", type(self).__name__, sx, sy)

    def _randomize(self, ctx: BuildContext) -> None:
        for y in range(1, ctx.height - 1):
            for x in range(1, ctx.width - 1):
                ctx.set_tile(x, y, TileKind.WALL if ctx.rng.random() < self.initial_wall_prob else TileKind.FLOOR)

    def _smooth(self, ctx: BuildContext) -> None:
        # Rules read from the previous pass only
        snapshot = [row[:] for row in ctx.tiles]
        for y in range(1, ctx.height - 1):
            for x in range(1, ctx.width - 1):
                walls = sum(1 for dx, dy in DIRECTIONS8 if snapshot[y + dy][x + dx] == TileKind.WALL)
                if walls > self.wall_threshold:
                    ctx.set_tile(x, y, TileKind.WALL)
                elif walls < self.wall_threshold:
                    ctx.set_tile(x, y, TileKind.FLOOR)


class DeepCavernsGenerator(CellularCaveGenerator):
    """Caves with pools of lava sprinkled over the open floor."""

    biome = BiomeKind.DEEP_CAVERNS

    def __init__(self, lava_chance: float = 0.05, **cave_options) -> None:
        super().__init__(**cave_options)
        self.lava_chance = float(lava_chance)

    def carve(self, ctx: BuildContext) -> None:
        super().carve(ctx)
        lava = 0
        for y in range(1, ctx.height - 1):
            for x in range(1, ctx.width - 1):
                if ctx.tile(x, y) == TileKind.FLOOR and ctx.rng.chance(self.lava_chance):
                    ctx.set_tile(x, y, TileKind.LAVA)
                    lava += 1
        logger.debug("DeepCavernsGenerator: %d lava tiles", lava)
