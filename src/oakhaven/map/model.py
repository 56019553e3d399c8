from __future__ import annotations

import hashlib
import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Set, Tuple

from ..errors import NotADoor
from .grid import Coord, Grid, find_tiles, grid_size, is_interior, tiles_to_ascii
from .themes import ThemeId
from .tiles import DOOR_KINDS, TileKind

logger = logging.getLogger(__name__)


class BiomeKind(str, Enum):
    ROOMS = "rooms"
    CAVES = "caves"
    DRUNKARD = "drunkard"
    DEEP_CAVERNS = "deep_caverns"
    VILLAGE = "village"


PROP_GLYPHS: Dict[str, str] = {
    # dungeon furniture and clutter
    "torch": "!",
    "banner": "P",
    "web": "*",
    "rubble": "&",
    "bones": "b",
    "grass": "v",
    "table": "T",
    "chair": "h",
    "crate": "c",
    "barrel": "o",
    "bookshelf": "B",
    "chest": "$",
    # village
    "bed": "H",
    "fireplace": "F",
    "wardrobe": "W",
    "dresser": "D",
    "well": "O",
    "tree": "Y",
    "stall": "S",
    "fence": "|",
    "tombstone": "t",
    "counter": "_",
    "anvil": "A",
    "forge": "f",
    "pier": "-",
    "hidden_chest": "G",
    "trapdoor": "d",
    "cave_entrance": "C",
}

# Props that read as obstacles when judging how secluded a tile is.
SOLID_PROPS = frozenset({"tree", "fence", "tombstone", "stall", "well", "anvil", "forge", "counter"})


@dataclass
class Room:
    x: int
    y: int
    w: int
    h: int

    def center(self) -> Coord:
        return (self.x + self.w // 2, self.y + self.h // 2)

    def intersects(self, other: "Room", padding: int = 0) -> bool:
        """Rectangles that merely touch (or come within ``padding`` tiles) count as intersecting."""
        return (
            self.x <= other.x + other.w + padding
            and self.x + self.w + padding >= other.x
            and self.y <= other.y + other.h + padding
            and self.y + self.h + padding >= other.y
        )

    def contains(self, x: int, y: int) -> bool:
        return self.x <= x < self.x + self.w and self.y <= y < self.y + self.h

    def tiles(self) -> List[Coord]:
        return [(x, y) for y in range(self.y, self.y + self.h) for x in range(self.x, self.x + self.w)]

    def edge_tiles(self) -> List[Coord]:
        """Tiles on the rectangle's own perimeter."""
        return [
            (x, y)
            for x, y in self.tiles()
            if x in (self.x, self.x + self.w - 1) or y in (self.y, self.y + self.h - 1)
        ]

    def to_dict(self) -> Dict[str, int]:
        return {"x": self.x, "y": self.y, "w": self.w, "h": self.h}


@dataclass
class Prop:
    x: int
    y: int
    type: str
    glyph: str

    @classmethod
    def make(cls, x: int, y: int, prop_type: str) -> "Prop":
        return cls(x, y, prop_type, PROP_GLYPHS.get(prop_type, "?"))

    def to_dict(self) -> Dict[str, Any]:
        return {"x": self.x, "y": self.y, "type": self.type, "glyph": self.glyph}


@dataclass
class NpcSpawn:
    x: int
    y: int
    name: str
    dialogue_lines: List[str] = field(default_factory=list)
    portrait_ref: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "x": self.x,
            "y": self.y,
            "name": self.name,
            "dialogue_lines": list(self.dialogue_lines),
            "portrait_ref": self.portrait_ref,
        }


@dataclass
class MapData:
    """A generated level.

    The caller that requested generation owns it and replaces it wholesale on
    level transitions. After generation the only supported mutation is opening
    and closing doors.
    """

    width: int
    height: int
    tiles: Grid  # tiles[y][x]
    rooms: List[Room] = field(default_factory=list)
    props: List[Prop] = field(default_factory=list)
    npcs: List[NpcSpawn] = field(default_factory=list)
    level: int = 0
    theme: ThemeId = ThemeId.DUNGEON
    start_x: Optional[int] = None
    start_y: Optional[int] = None
    biome: BiomeKind = BiomeKind.ROOMS

    def __post_init__(self) -> None:
        w, h = grid_size(self.tiles)
        if (w, h) != (self.width, self.height):
            raise ValueError(f"tiles are {w}x{h} but map declares {self.width}x{self.height}")

    @property
    def start(self) -> Optional[Coord]:
        if self.start_x is None or self.start_y is None:
            return None
        return (self.start_x, self.start_y)

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def is_interior(self, x: int, y: int) -> bool:
        return is_interior(self.width, self.height, x, y)

    def tile_at(self, x: int, y: int) -> TileKind:
        return self.tiles[y][x]

    def is_passable(self, x: int, y: int) -> bool:
        return self.in_bounds(x, y) and self.tiles[y][x].passable

    def occupied_tiles(self) -> Set[Coord]:
        """Tiles hosting at least one prop or NPC."""
        taken = {(p.x, p.y) for p in self.props}
        taken.update((n.x, n.y) for n in self.npcs)
        return taken

    def find_tiles(self, kind: TileKind) -> List[Coord]:
        return find_tiles(self.tiles, kind)

    def iter_tiles(self) -> Iterator[Tuple[int, int, TileKind]]:
        for y, row in enumerate(self.tiles):
            for x, kind in enumerate(row):
                yield x, y, kind

    # Door transitions

    def open_door(self, x: int, y: int) -> None:
        self._set_door(x, y, TileKind.DOOR_OPEN)

    def close_door(self, x: int, y: int) -> None:
        self._set_door(x, y, TileKind.DOOR_CLOSED)

    def toggle_door(self, x: int, y: int) -> TileKind:
        current = self.tiles[y][x] if self.in_bounds(x, y) else None
        target = TileKind.DOOR_CLOSED if current == TileKind.DOOR_OPEN else TileKind.DOOR_OPEN
        self._set_door(x, y, target)
        return target

    def _set_door(self, x: int, y: int, kind: TileKind) -> None:
        if not self.in_bounds(x, y):
            raise NotADoor(f"({x},{y}) is outside the map")
        current = self.tiles[y][x]
        if current not in DOOR_KINDS:
            raise NotADoor(f"({x},{y}) is {current.value}, not a door")
        self.tiles[y][x] = kind
        logger.debug("Door at (%d,%d) set to %s", x, y, kind.value)

    # Serialization

    def to_dict(self) -> Dict[str, Any]:
        return {
            "width": self.width,
            "height": self.height,
            "tiles": [[kind.value for kind in row] for row in self.tiles],
            "rooms": [r.to_dict() for r in self.rooms],
            "props": [p.to_dict() for p in self.props],
            "npcs": [n.to_dict() for n in self.npcs],
            "level": self.level,
            "theme": self.theme.value,
            "biome": self.biome.value,
            "start_x": self.start_x,
            "start_y": self.start_y,
        }

    def signature(self) -> str:
        """Deterministic signature of the whole map content."""
        raw = json.dumps(self.to_dict(), sort_keys=True, separators=(",", ":")).encode("utf-8")
        return hashlib.blake2b(raw, digest_size=16).hexdigest()

    def to_ascii(self, *, with_props: bool = True) -> List[str]:
        """Debug rendering: tile glyphs overlaid with prop glyphs, NPCs as '@' and the start as 'X'."""
        rows = [list(line) for line in tiles_to_ascii(self.tiles)]
        if with_props:
            for p in self.props:
                rows[p.y][p.x] = p.glyph
            for n in self.npcs:
                rows[n.y][n.x] = "@"
        if self.start is not None:
            sx, sy = self.start
            rows[sy][sx] = "X"
        return ["".join(r) for r in rows]
