from __future__ import annotations

import logging
from typing import Dict, Optional, Set, Tuple

from ..map.grid import DIRECTIONS4, Coord
from ..map.model import MapData, Prop, Room
from ..map.tiles import TileKind
from ..rng import RandomSource

logger = logging.getLogger(__name__)

# Upper bounds of the cumulative probability bands; anything above the last is an empty room.
ARCHETYPE_BANDS: Tuple[Tuple[float, str], ...] = (
    (0.30, "dining"),
    (0.50, "storage"),
    (0.70, "library"),
    (0.85, "bedroom"),
)

CLUTTER_WEIGHTS: Dict[str, float] = {"rubble": 0.5, "bones": 0.2, "grass": 0.2, "web": 0.1}


class DecorationPass:
    """Dresses up an already generated map in place.

    Furnishes rooms according to a randomly picked archetype, scatters clutter
    on corridor floors, hangs ornaments on exposed walls and finally rerolls
    some floors and walls into their cosmetic variants. None of this changes
    which tiles are passable or opaque, and the outer wall ring is left alone.
    """

    def __init__(
        self,
        clutter_chance: float = 0.05,
        torch_chance: float = 0.10,
        banner_chance: float = 0.05,
        web_chance: float = 0.02,
        side_face_factor: float = 0.5,
        storage_chance: float = 0.4,
        moss_chance: float = 0.15,
        crack_chance: float = 0.15,
    ) -> None:
        self.clutter_chance = clutter_chance
        self.torch_chance = torch_chance
        self.banner_chance = banner_chance
        self.web_chance = web_chance
        self.side_face_factor = side_face_factor
        self.storage_chance = storage_chance
        self.moss_chance = moss_chance
        self.crack_chance = crack_chance

    def apply(self, map_data: MapData, rng: RandomSource) -> MapData:
        occupied = map_data.occupied_tiles()
        before = len(map_data.props)
        for room in map_data.rooms:
            self._furnish(map_data, room, rng, occupied)
        self._scatter_clutter(map_data, rng, occupied)
        self._ornament_walls(map_data, rng, occupied)
        rerolled = self._reroll_variants(map_data, rng)
        logger.debug(
            "DecorationPass: level %d got %d props, %d cosmetic tile rerolls",
            map_data.level,
            len(map_data.props) - before,
            rerolled,
        )
        return map_data

    # Rooms

    @staticmethod
    def pick_archetype(rng: RandomSource) -> Optional[str]:
        roll = rng.next()
        for upper, name in ARCHETYPE_BANDS:
            if roll < upper:
                return name
        return None

    def _furnish(self, m: MapData, room: Room, rng: RandomSource, occupied: Set[Coord]) -> None:
        cx, cy = room.center()
        if m.tile_at(cx, cy) == TileKind.STAIRS:
            return
        archetype = self.pick_archetype(rng)
        if archetype == "dining":
            if _place(m, occupied, cx, cy, "table"):
                for dx, dy in DIRECTIONS4:
                    if room.contains(cx + dx, cy + dy):
                        _place(m, occupied, cx + dx, cy + dy, "chair")
        elif archetype == "storage":
            for x, y in room.edge_tiles():
                if rng.chance(self.storage_chance):
                    _place(m, occupied, x, y, "crate" if rng.chance(0.6) else "barrel")
        elif archetype == "library":
            for y in range(room.y + 1, room.y + room.h - 1):
                _place(m, occupied, room.x, y, "bookshelf")
                _place(m, occupied, room.x + room.w - 1, y, "bookshelf")
            _place(m, occupied, cx, cy, "table")
        elif archetype == "bedroom":
            _place(m, occupied, room.x + 1, room.y + 1, "chest")

    # Corridors and walls

    def _scatter_clutter(self, m: MapData, rng: RandomSource, occupied: Set[Coord]) -> None:
        for x, y, kind in m.iter_tiles():
            if kind != TileKind.FLOOR or (x, y) in occupied:
                continue
            if any(room.contains(x, y) for room in m.rooms):
                continue
            if rng.chance(self.clutter_chance):
                _place(m, occupied, x, y, rng.weighted_choice(CLUTTER_WEIGHTS))

    def _ornament_walls(self, m: MapData, rng: RandomSource, occupied: Set[Coord]) -> None:
        for x, y, kind in m.iter_tiles():
            if kind != TileKind.WALL or (x, y) in occupied:
                continue
            faces = [
                (dx, dy)
                for dx, dy in DIRECTIONS4
                if m.in_bounds(x + dx, y + dy) and m.tile_at(x + dx, y + dy).walkable_floor
            ]
            if not faces:
                continue
            # Full rates on the face the player looks at (floor below), reduced elsewhere
            factor = 1.0 if (0, 1) in faces else self.side_face_factor
            roll = rng.next()
            if roll < self.torch_chance * factor:
                _place(m, occupied, x, y, "torch")
            elif roll < (self.torch_chance + self.banner_chance) * factor:
                _place(m, occupied, x, y, "banner")
            elif rng.chance(self.web_chance):
                _place(m, occupied, x, y, "web")

    # Cosmetic variants

    def _reroll_variants(self, m: MapData, rng: RandomSource) -> int:
        changed = 0
        for y in range(1, m.height - 1):
            for x in range(1, m.width - 1):
                kind = m.tiles[y][x]
                if kind == TileKind.FLOOR and rng.chance(self.moss_chance):
                    m.tiles[y][x] = TileKind.FLOOR_MOSS
                    changed += 1
                elif kind == TileKind.WALL and rng.chance(self.crack_chance):
                    m.tiles[y][x] = TileKind.WALL_CRACKED
                    changed += 1
        return changed


def _place(m: MapData, occupied: Set[Coord], x: int, y: int, prop_type: str) -> bool:
    """Add a prop on a free in-bounds tile; returns False when the tile is taken."""
    if not m.in_bounds(x, y) or (x, y) in occupied:
        return False
    kind = m.tile_at(x, y)
    if prop_type not in ("torch", "banner", "web") and not kind.walkable_floor:
        return False
    m.props.append(Prop.make(x, y, prop_type))
    occupied.add((x, y))
    return True


def decorate(map_data: MapData, rng: RandomSource) -> MapData:
    return DecorationPass().apply(map_data, rng)
