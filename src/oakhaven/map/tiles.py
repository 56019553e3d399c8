from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet


class TileKind(str, Enum):
    WALL = "wall"
    WALL_WOOD = "wall_wood"
    WALL_CRACKED = "wall_cracked"
    FLOOR = "floor"
    FLOOR_MOSS = "floor_moss"
    FLOOR_GRASS = "floor_grass"
    FLOOR_DIRT = "floor_dirt"
    WATER = "water"
    LAVA = "lava"
    DOOR_CLOSED = "door_closed"
    DOOR_OPEN = "door_open"
    STAIRS = "stairs"

    @property
    def passable(self) -> bool:
        return TILE_TRAITS[self].passable

    @property
    def opaque(self) -> bool:
        return TILE_TRAITS[self].opaque

    @property
    def walkable_floor(self) -> bool:
        """True for the plain floor kinds a player may be spawned on."""
        return TILE_TRAITS[self].walkable_floor

    @property
    def glyph(self) -> str:
        return TILE_TRAITS[self].glyph


@dataclass(frozen=True)
class TileTraits:
    passable: bool
    opaque: bool
    walkable_floor: bool
    glyph: str


# Every kind must have an entry; lookups never fall back to a default.
TILE_TRAITS: Dict[TileKind, TileTraits] = {
    TileKind.WALL: TileTraits(passable=False, opaque=True, walkable_floor=False, glyph="#"),
    TileKind.WALL_WOOD: TileTraits(passable=False, opaque=True, walkable_floor=False, glyph="="),
    TileKind.WALL_CRACKED: TileTraits(passable=False, opaque=True, walkable_floor=False, glyph="%"),
    TileKind.FLOOR: TileTraits(passable=True, opaque=False, walkable_floor=True, glyph="."),
    TileKind.FLOOR_MOSS: TileTraits(passable=True, opaque=False, walkable_floor=True, glyph=","),
    TileKind.FLOOR_GRASS: TileTraits(passable=True, opaque=False, walkable_floor=True, glyph='"'),
    TileKind.FLOOR_DIRT: TileTraits(passable=True, opaque=False, walkable_floor=True, glyph=":"),
    TileKind.WATER: TileTraits(passable=False, opaque=False, walkable_floor=False, glyph="~"),
    TileKind.LAVA: TileTraits(passable=True, opaque=False, walkable_floor=False, glyph="^"),
    TileKind.DOOR_CLOSED: TileTraits(passable=True, opaque=True, walkable_floor=False, glyph="+"),
    TileKind.DOOR_OPEN: TileTraits(passable=True, opaque=False, walkable_floor=False, glyph="'"),
    TileKind.STAIRS: TileTraits(passable=True, opaque=False, walkable_floor=False, glyph=">"),
}

DOOR_KINDS: FrozenSet[TileKind] = frozenset({TileKind.DOOR_CLOSED, TileKind.DOOR_OPEN})

GLYPH_TO_KIND: Dict[str, TileKind] = {t.glyph: k for k, t in TILE_TRAITS.items()}
