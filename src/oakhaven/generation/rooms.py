from __future__ import annotations

import logging
from typing import List, Optional

from ..map.grid import DIRECTIONS4
from ..map.model import BiomeKind, Room
from ..map.tiles import TileKind
from .base import BiomeGenerator, BuildContext

logger = logging.getLogger(__name__)


class RoomPlacementGenerator(BiomeGenerator):
    """Rooms + corridors generator.

    Rooms are placed by rejection sampling (one try per slot, touching rooms
    rejected) and each accepted room is linked to the previously accepted one
    with an L-shaped corridor, so every room is reachable from every other.
    A door pass then closes some corridor mouths and the last room gets the
    stairs.
    """

    biome = BiomeKind.ROOMS

    def __init__(
        self,
        room_min_size: int = 6,
        room_max_size: int = 15,
        area_per_room: int = 150,
        door_chance: float = 0.3,
        torch_chance: float = 0.15,
    ) -> None:
        self.room_min_size = room_min_size
        self.room_max_size = room_max_size
        self.area_per_room = area_per_room
        self.door_chance = door_chance
        self.torch_chance = torch_chance

    def carve(self, ctx: BuildContext) -> None:
        max_rooms = (ctx.width * ctx.height) // self.area_per_room
        for _ in range(max_rooms):
            room = self._propose_room(ctx)
            if room is None:
                continue
            if any(room.intersects(other) for other in ctx.rooms):
                continue
            self._carve_room(ctx, room)
            if ctx.rooms:
                self._connect(ctx, ctx.rooms[-1], room)
            ctx.rooms.append(room)

        if not ctx.rooms:
            logger.debug("RoomPlacementGenerator: no room fits %dx%d", ctx.width, ctx.height)
            return

        doors = self._place_doors(ctx)
        sx, sy = ctx.rooms[-1].center()
        ctx.set_tile(sx, sy, TileKind.STAIRS)

        # Torches hung on walls that a later corridor carved away
        dropped = ctx.drop_props(lambda p: p.type == "torch" and ctx.tile(p.x, p.y) != TileKind.WALL)
        logger.debug(
            "RoomPlacementGenerator: %d rooms, %d doors, stairs at (%d,%d), %d stray torches dropped",
            len(ctx.rooms),
            doors,
            sx,
            sy,
            dropped,
        )

    def _propose_room(self, ctx: BuildContext) -> Optional[Room]:
        w = ctx.rng.randint(self.room_min_size, self.room_max_size)
        h = ctx.rng.randint(self.room_min_size, self.room_max_size)
        if w > ctx.width - 2 or h > ctx.height - 2:
            return None
        x = ctx.rng.randint(1, ctx.width - w - 1)
        y = ctx.rng.randint(1, ctx.height - h - 1)
        return Room(x, y, w, h)

    @staticmethod
    def _carve_room(ctx: BuildContext, room: Room) -> None:
        for x, y in room.tiles():
            ctx.set_tile(x, y, TileKind.FLOOR)

    def _connect(self, ctx: BuildContext, prev: Room, new: Room) -> None:
        x1, y1 = prev.center()
        x2, y2 = new.center()
        if ctx.rng.random() < 0.5:
            self._carve_h_corridor(ctx, x1, x2, y1)
            self._carve_v_corridor(ctx, y1, y2, x2)
        else:
            self._carve_v_corridor(ctx, y1, y2, x1)
            self._carve_h_corridor(ctx, x1, x2, y2)

    def _carve_h_corridor(self, ctx: BuildContext, x1: int, x2: int, y: int) -> None:
        for x in range(min(x1, x2), max(x1, x2) + 1):
            self._carve_corridor_tile(ctx, x, y)

    def _carve_v_corridor(self, ctx: BuildContext, y1: int, y2: int, x: int) -> None:
        for y in range(min(y1, y2), max(y1, y2) + 1):
            self._carve_corridor_tile(ctx, x, y)

    def _carve_corridor_tile(self, ctx: BuildContext, x: int, y: int) -> None:
        ctx.set_tile(x, y, TileKind.FLOOR)
        if not ctx.rng.chance(self.torch_chance):
            return
        walls = [
            (x + dx, y + dy)
            for dx, dy in DIRECTIONS4
            if ctx.in_bounds(x + dx, y + dy) and ctx.tile(x + dx, y + dy) == TileKind.WALL
        ]
        if walls:
            wx, wy = ctx.rng.choice(walls)
            ctx.add_prop(wx, wy, "torch")

    def _place_doors(self, ctx: BuildContext) -> int:
        placed = 0
        for room in ctx.rooms:
            for x, y in self._outside_ring(room):
                if not ctx.in_bounds(x, y) or ctx.tile(x, y) != TileKind.FLOOR:
                    continue
                if ctx.rng.chance(self.door_chance):
                    ctx.set_tile(x, y, TileKind.DOOR_CLOSED)
                    placed += 1
        return placed

    @staticmethod
    def _outside_ring(room: Room) -> List[tuple]:
        """Tiles directly beyond each of the room's four edges (corners excluded)."""
        ring = []
        for x in range(room.x, room.x + room.w):
            ring.append((x, room.y - 1))
            ring.append((x, room.y + room.h))
        for y in range(room.y, room.y + room.h):
            ring.append((room.x - 1, y))
            ring.append((room.x + room.w, y))
        return ring
