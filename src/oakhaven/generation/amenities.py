from __future__ import annotations

import logging
from typing import Callable, List, Optional, Tuple

from ..data.loader import NpcProfile, VillageRoster
from ..map.model import Room
from ..map.tiles import TileKind
from .base import BuildContext

logger = logging.getLogger(__name__)

FREE_SPACE_ATTEMPTS = 50


def find_free_space(ctx: BuildContext, w: int, h: int, attempts: int = FREE_SPACE_ATTEMPTS) -> Optional[Room]:
    """Sample placements for a ``w`` x ``h`` footprint and return the first fully clear one.

    Clear means every footprint tile is plain grass, every tile of the 1-tile
    halo around it is walkable floor, and nothing (prop, NPC or the start
    tile) sits on the footprint or the halo. Walls, doors, water and the
    entrance therefore never touch a new amenity, so no door gets sealed.
    Returns None when the attempt budget runs out.
    """
    if ctx.width - w - 2 < 2 or ctx.height - h - 2 < 2:
        return None
    for _ in range(attempts):
        x = ctx.rng.randint(2, ctx.width - w - 2)
        y = ctx.rng.randint(2, ctx.height - h - 2)
        if _is_clear(ctx, x, y, w, h):
            return Room(x, y, w, h)
    return None


def _is_clear(ctx: BuildContext, x: int, y: int, w: int, h: int) -> bool:
    for ty in range(y, y + h):
        for tx in range(x, x + w):
            if ctx.tile(tx, ty) != TileKind.FLOOR_GRASS:
                return False
    for ty in range(y - 1, y + h + 1):
        for tx in range(x - 1, x + w + 1):
            if not ctx.tile(tx, ty).walkable_floor:
                return False
            if ctx.is_occupied(tx, ty) or ctx.start == (tx, ty):
                return False
    return True


def _spawn(ctx: BuildContext, x: int, y: int, profile: NpcProfile) -> None:
    ctx.add_npc(x, y, profile.name, profile.dialogue, profile.portrait)


def _fill(ctx: BuildContext, area: Room, kind: TileKind) -> None:
    for x, y in area.tiles():
        ctx.set_tile(x, y, kind)


def build_marketplace(ctx: BuildContext, roster: VillageRoster) -> Optional[Room]:
    """Dirt plaza with a stall in each corner and the merchant in the middle."""
    area = find_free_space(ctx, 9, 7)
    if area is None:
        return None
    _fill(ctx, area, TileKind.FLOOR_DIRT)
    for sx, sy in (
        (area.x + 1, area.y + 1),
        (area.x + area.w - 2, area.y + 1),
        (area.x + 1, area.y + area.h - 2),
        (area.x + area.w - 2, area.y + area.h - 2),
    ):
        ctx.add_prop(sx, sy, "stall")
    cx, cy = area.center()
    _spawn(ctx, cx, cy, roster.merchant)
    return area


def build_graveyard(ctx: BuildContext, roster: VillageRoster, tombstone_chance: float = 0.2) -> Optional[Room]:
    """Fenced dirt yard, gate in the middle of the bottom fence, tombstones inside."""
    area = find_free_space(ctx, 8, 7)
    if area is None:
        return None
    _fill(ctx, area, TileKind.FLOOR_DIRT)
    gate = (area.x + area.w // 2, area.y + area.h - 1)
    for x, y in area.edge_tiles():
        if (x, y) != gate:
            ctx.add_prop(x, y, "fence")
    for y in range(area.y + 1, area.y + area.h - 1):
        for x in range(area.x + 1, area.x + area.w - 1):
            if ctx.rng.chance(tombstone_chance):
                ctx.add_prop(x, y, "tombstone")
    return area


def build_tavern(ctx: BuildContext, roster: VillageRoster) -> Optional[Room]:
    """Wooden hall with a door at the bottom, a counter, two tables and the innkeeper."""
    area = find_free_space(ctx, 9, 7)
    if area is None:
        return None
    for x, y in area.tiles():
        on_edge = x in (area.x, area.x + area.w - 1) or y in (area.y, area.y + area.h - 1)
        ctx.set_tile(x, y, TileKind.WALL_WOOD if on_edge else TileKind.FLOOR)
    ctx.set_tile(area.x + area.w // 2, area.y + area.h - 1, TileKind.DOOR_CLOSED)

    for x in range(area.x + 1, area.x + 4):
        ctx.add_prop(x, area.y + 2, "counter")
    _spawn(ctx, area.x + 2, area.y + 1, roster.innkeeper)
    for ty in (area.y + 2, area.y + area.h - 3):
        tx = area.x + area.w - 3
        ctx.add_prop(tx, ty, "table")
        ctx.add_prop(tx - 1, ty, "chair")
        ctx.add_prop(tx + 1, ty, "chair")
    return area


def build_blacksmith(ctx: BuildContext, roster: VillageRoster) -> Optional[Room]:
    """Open dirt yard with forge, anvil, a chest and the smith."""
    area = find_free_space(ctx, 7, 5)
    if area is None:
        return None
    _fill(ctx, area, TileKind.FLOOR_DIRT)
    ctx.add_prop(area.x + 1, area.y + 1, "forge")
    ctx.add_prop(area.x + 3, area.y + 2, "anvil")
    ctx.add_prop(area.x + area.w - 2, area.y + 1, "chest")
    _spawn(ctx, area.x + 2, area.y + 2, roster.smith)
    return area


def build_pond(ctx: BuildContext, roster: VillageRoster, exponent: float = 2.5) -> Optional[Room]:
    """Superellipse of water inside the footprint, a short pier from the south shore and a fisher."""
    area = find_free_space(ctx, 11, 8)
    if area is None:
        return None
    cx = area.x + (area.w - 1) / 2.0
    cy = area.y + (area.h - 1) / 2.0
    a = (area.w - 1) / 2.0 - 0.5
    b = (area.h - 1) / 2.0 - 0.5
    for x, y in area.tiles():
        if abs((x - cx) / a) ** exponent + abs((y - cy) / b) ** exponent <= 1.0:
            ctx.set_tile(x, y, TileKind.WATER)

    px = area.x + area.w // 2
    water_rows = [y for y in range(area.y, area.y + area.h) if ctx.tile(px, y) == TileKind.WATER]
    if not water_rows:
        return area
    shore = max(water_rows)
    for y in range(shore, max(shore - 3, min(water_rows) - 1), -1):
        ctx.add_prop(px, y, "pier")
    if ctx.tile(px, shore + 1) == TileKind.FLOOR_GRASS:
        _spawn(ctx, px, shore + 1, roster.fisher)
    return area


AmenityBuilder = Callable[[BuildContext, VillageRoster], Optional[Room]]

AMENITY_BUILDERS: List[Tuple[str, AmenityBuilder]] = [
    ("marketplace", build_marketplace),
    ("graveyard", build_graveyard),
    ("tavern", build_tavern),
    ("blacksmith", build_blacksmith),
    ("pond", build_pond),
]


def build_amenities(ctx: BuildContext, roster: VillageRoster) -> List[Tuple[str, Room]]:
    placed: List[Tuple[str, Room]] = []
    for name, builder in AMENITY_BUILDERS:
        area = builder(ctx, roster)
        if area is None:
            logger.debug("Village: no free space for %s, skipped", name)
            continue
        placed.append((name, area))
    logger.debug("Village: amenities placed: %s", ", ".join(n for n, _ in placed) or "none")
    return placed
