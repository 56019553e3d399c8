from __future__ import annotations

import logging

from ..map.grid import DIRECTIONS4
from ..map.model import BiomeKind
from ..map.tiles import TileKind
from .base import BiomeGenerator, BuildContext, place_stairs_randomly

logger = logging.getLogger(__name__)


class DrunkardsWalkGenerator(BiomeGenerator):
    """Winding tunnels dug by a random walker starting at the map center.

    The walker is clamped to the interior and stops once ``floor_fraction`` of
    the total area is floor. A walk that has not reached the target after
    ``max_steps_per_tile * width * height`` steps is abandoned with a warning;
    whatever was carved so far is kept.
    """

    biome = BiomeKind.DRUNKARD

    def __init__(self, floor_fraction: float = 0.4, max_steps_per_tile: int = 50) -> None:
        self.floor_fraction = float(floor_fraction)
        self.max_steps_per_tile = int(max_steps_per_tile)

    def carve(self, ctx: BuildContext) -> None:
        target = int(ctx.width * ctx.height * self.floor_fraction)
        max_steps = self.max_steps_per_tile * ctx.width * ctx.height
        x, y = ctx.width // 2, ctx.height // 2
        carved = 0
        steps = 0
        while carved < target and steps < max_steps:
            if ctx.tile(x, y) != TileKind.FLOOR:
                ctx.set_tile(x, y, TileKind.FLOOR)
                carved += 1
            dx, dy = ctx.rng.choice(DIRECTIONS4)
            x = min(max(x + dx, 1), ctx.width - 2)
            y = min(max(y + dy, 1), ctx.height - 2)
            steps += 1

        if carved < target:
            logger.warning(
                "DrunkardsWalkGenerator: step cap %d hit with %d/%d floor tiles carved",
                max_steps,
                carved,
                target,
            )
        sx, sy = place_stairs_randomly(ctx)
        logger.debug("DrunkardsWalkGenerator: %d floor tiles in %d steps, stairs at (%d,%d)", carved, steps, sx, sy)
