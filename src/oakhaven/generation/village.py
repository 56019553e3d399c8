from __future__ import annotations

import logging
from collections import deque
from typing import Dict, List, Optional, Set, Tuple

from ..data.loader import VillageRoster, load_roster
from ..map.grid import DIRECTIONS4, DIRECTIONS8, Coord, flood_fill, frame_walls, neighbors4
from ..map.model import SOLID_PROPS, BiomeKind, Room
from ..map.tiles import TileKind
from .amenities import build_amenities
from .base import BiomeGenerator, BuildContext

logger = logging.getLogger(__name__)


def _sign(v: int) -> int:
    return (v > 0) - (v < 0)


class VillageComposer(BiomeGenerator):
    """Hand-composed surface village (level 0).

    Layout steps, in order: houses, dungeon entrance, well and start tile,
    dirt paths, NPCs, amenities, trees, hidden content. Every placement is a
    bounded attempt that is skipped when no room is left; the map itself is
    always produced. Houses are reported as the map's rooms.
    """

    biome = BiomeKind.VILLAGE
    fill = TileKind.FLOOR_GRASS

    def __init__(
        self,
        roster: Optional[VillageRoster] = None,
        max_houses: int = 6,
        house_min_size: int = 6,
        house_max_size: int = 11,
        house_padding: int = 2,
        max_villagers: int = 5,
        tree_chance: float = 0.05,
        hidden_chest_chance: float = 0.15,
        placement_attempts: int = 50,
    ) -> None:
        self.roster = roster
        self.max_houses = max_houses
        self.house_min_size = house_min_size
        self.house_max_size = house_max_size
        self.house_padding = house_padding
        self.max_villagers = max_villagers
        self.tree_chance = tree_chance
        self.hidden_chest_chance = hidden_chest_chance
        self.placement_attempts = placement_attempts

    def carve(self, ctx: BuildContext) -> None:
        roster = self.roster or load_roster()
        frame_walls(ctx.tiles)

        self._place_houses(ctx)
        entrance = self._place_entrance(ctx)
        ex, ey = entrance
        if ctx.is_interior(ex - 2, ey + 2) and ctx.tile(ex - 2, ey + 2) == TileKind.FLOOR_GRASS:
            ctx.add_prop(ex - 2, ey + 2, "well")
        ctx.start = self._pick_start(ctx, entrance)

        for house in ctx.rooms:
            self._lay_path(ctx, house.center(), entrance)

        self._place_guide(ctx, roster)
        self._place_villagers(ctx, roster)
        build_amenities(ctx, roster)
        self._plant_trees(ctx)
        self._hide_chest(ctx)
        self._place_trapdoor(ctx)
        self._place_cave_entrance(ctx)
        self._ensure_reachable(ctx, ctx.start, entrance)

        logger.debug(
            "VillageComposer: %d houses, entrance=%s start=%s, %d npcs, %d props",
            len(ctx.rooms),
            entrance,
            ctx.start,
            len(ctx.npcs),
            len(ctx.props),
        )

    # Houses

    def _place_houses(self, ctx: BuildContext) -> None:
        for _ in range(self.max_houses):
            w = ctx.rng.randint(self.house_min_size, self.house_max_size)
            h = ctx.rng.randint(self.house_min_size, self.house_max_size)
            if ctx.width - 6 - w < 5 or ctx.height - 6 - h < 5:
                continue
            house = Room(ctx.rng.randint(5, ctx.width - 6 - w), ctx.rng.randint(5, ctx.height - 6 - h), w, h)
            if any(house.intersects(other, padding=self.house_padding) for other in ctx.rooms):
                continue
            self._build_house(ctx, house)
            ctx.rooms.append(house)

    def _build_house(self, ctx: BuildContext, house: Room) -> None:
        x, y, w, h = house.x, house.y, house.w, house.h
        for tx, ty in house.tiles():
            on_edge = tx in (x, x + w - 1) or ty in (y, y + h - 1)
            ctx.set_tile(tx, ty, TileKind.WALL_WOOD if on_edge else TileKind.FLOOR)

        doors = [
            (x + w // 2, y + h - 1),  # south
            (x + w // 2, y),  # north
            (x, y + h // 2),  # west
            (x + w - 1, y + h // 2),  # east
        ]
        dx, dy = ctx.rng.choice(doors)
        ctx.set_tile(dx, dy, TileKind.DOOR_CLOSED)

        furniture: List[Tuple[float, Coord, str]] = [
            (1.0, (x + 1, y + 1), "bed"),
            (0.7, (x + w // 2, y + 1), "fireplace"),
            (0.6, (x + 1, y + h // 2), "wardrobe"),
        ]
        for chance, (fx, fy), prop_type in furniture:
            if ctx.rng.chance(chance) and ctx.is_free_floor(fx, fy):
                ctx.add_prop(fx, fy, prop_type)
        if ctx.rng.chance(0.6):
            prop_type = "dresser" if ctx.rng.chance(0.5) else "chest"
            fx, fy = x + w - 2, y + h // 2
            if ctx.is_free_floor(fx, fy):
                ctx.add_prop(fx, fy, prop_type)

    # Entrance, start and paths

    def _place_entrance(self, ctx: BuildContext) -> Coord:
        cx, cy = ctx.width // 2, ctx.height // 2
        rows = [cy]
        for offset in range(1, ctx.height):
            rows.extend((cy + offset, cy - offset))
        for y in rows:
            if not ctx.is_interior(cx, y):
                continue
            for x in range(cx, ctx.width - 1):
                if ctx.tile(x, y) == TileKind.FLOOR_GRASS:
                    ctx.set_tile(x, y, TileKind.STAIRS)
                    return (x, y)
        logger.warning("VillageComposer: no grass found for the entrance, forcing center (%d,%d)", cx, cy)
        ctx.set_tile(cx, cy, TileKind.STAIRS)
        return (cx, cy)

    @staticmethod
    def _pick_start(ctx: BuildContext, entrance: Coord) -> Coord:
        ex, ey = entrance
        sx, sy = ex - 4, ey + 4
        if ctx.is_interior(sx, sy) and ctx.tile(sx, sy) == TileKind.FLOOR_GRASS and not ctx.is_occupied(sx, sy):
            return (sx, sy)
        return entrance

    @staticmethod
    def _lay_path(ctx: BuildContext, origin: Coord, goal: Coord) -> None:
        x, y = origin
        gx, gy = goal
        while (x, y) != (gx, gy):
            x += _sign(gx - x)
            y += _sign(gy - y)
            if ctx.tile(x, y) == TileKind.FLOOR_GRASS:
                ctx.set_tile(x, y, TileKind.FLOOR_DIRT)

    # NPCs

    def _place_guide(self, ctx: BuildContext, roster: VillageRoster) -> None:
        sx, sy = ctx.start
        guide = roster.guide
        for dx, dy in DIRECTIONS4:
            if ctx.is_interior(sx + dx, sy + dy) and ctx.is_free_floor(sx + dx, sy + dy):
                ctx.add_npc(sx + dx, sy + dy, guide.name, guide.dialogue, guide.portrait)
                return
        logger.debug("VillageComposer: no free tile next to the start for %s", guide.name)

    def _place_villagers(self, ctx: BuildContext, roster: VillageRoster) -> None:
        sx, sy = ctx.start
        for profile in roster.villagers[: self.max_villagers]:
            for _ in range(self.placement_attempts):
                x = ctx.rng.randint(1, ctx.width - 2)
                y = ctx.rng.randint(1, ctx.height - 2)
                if abs(x - sx) + abs(y - sy) < 4 or not ctx.is_free_floor(x, y):
                    continue
                ctx.add_npc(x, y, profile.name, profile.dialogue, profile.portrait)
                break
            else:
                logger.debug("VillageComposer: no spot found for %s", profile.name)

    # Scatter and hidden content

    @staticmethod
    def _solid_props(ctx: BuildContext) -> Set[Coord]:
        return {(p.x, p.y) for p in ctx.props if p.type in SOLID_PROPS}

    @staticmethod
    def _is_obstacle(ctx: BuildContext, solid: Set[Coord], x: int, y: int) -> bool:
        if not ctx.in_bounds(x, y) or not ctx.tile(x, y).passable:
            return True
        return (x, y) in solid

    def _is_placeable(self, ctx: BuildContext, x: int, y: int) -> bool:
        return ctx.is_interior(x, y) and ctx.is_free_floor(x, y) and ctx.start != (x, y)

    def _plant_trees(self, ctx: BuildContext) -> None:
        for y in range(1, ctx.height - 1):
            for x in range(1, ctx.width - 1):
                if ctx.tile(x, y) != TileKind.FLOOR_GRASS or not self._is_placeable(ctx, x, y):
                    continue
                if ctx.rng.chance(self.tree_chance):
                    ctx.add_prop(x, y, "tree")

    def _hide_chest(self, ctx: BuildContext) -> None:
        if not ctx.rng.chance(self.hidden_chest_chance):
            return
        solid = self._solid_props(ctx)
        secluded = [
            (x, y)
            for y in range(1, ctx.height - 1)
            for x in range(1, ctx.width - 1)
            if self._is_placeable(ctx, x, y)
            and sum(1 for dx, dy in DIRECTIONS4 if self._is_obstacle(ctx, solid, x + dx, y + dy)) >= 3
        ]
        if not secluded:
            logger.debug("VillageComposer: no secluded tile for the hidden chest")
            return
        x, y = ctx.rng.choice(secluded)
        ctx.add_prop(x, y, "hidden_chest")

    def _place_trapdoor(self, ctx: BuildContext) -> None:
        if not ctx.rooms:
            return
        house = ctx.rng.choice(ctx.rooms)
        corners = [
            (house.x + 1, house.y + 1),
            (house.x + house.w - 2, house.y + 1),
            (house.x + 1, house.y + house.h - 2),
            (house.x + house.w - 2, house.y + house.h - 2),
        ]
        ctx.rng.shuffle(corners)
        for x, y in corners:
            if self._is_placeable(ctx, x, y):
                ctx.add_prop(x, y, "trapdoor")
                return
        logger.debug("VillageComposer: every corner of house at (%d,%d) is taken", house.x, house.y)

    def _place_cave_entrance(self, ctx: BuildContext) -> None:
        solid = self._solid_props(ctx)
        for _ in range(self.placement_attempts):
            x = ctx.rng.randint(1, ctx.width - 2)
            y = ctx.rng.randint(1, ctx.height - 2)
            if ctx.tile(x, y) != TileKind.FLOOR_GRASS or not self._is_placeable(ctx, x, y):
                continue
            if sum(1 for dx, dy in DIRECTIONS8 if self._is_obstacle(ctx, solid, x + dx, y + dy)) >= 2:
                ctx.add_prop(x, y, "cave_entrance")
                return
        logger.debug("VillageComposer: no secluded outdoor tile for the cave entrance")

    # Safety net

    @staticmethod
    def _ensure_reachable(ctx: BuildContext, start: Coord, entrance: Coord) -> None:
        """Pave a dirt track if buildings or water cut the start off from the entrance.

        The track is the route that converts the fewest impassable tiles. It never
        enters a house, so wooden walls keep their single door.
        """
        if entrance in flood_fill(ctx.tiles, start):
            return
        logger.warning("VillageComposer: entrance %s unreachable from start %s, carving a track", entrance, start)

        def cost(x: int, y: int) -> Optional[int]:
            if not ctx.is_interior(x, y) or any(h.contains(x, y) for h in ctx.rooms):
                return None
            return 0 if ctx.tile(x, y).passable else 1

        # 0-1 BFS: free steps go to the front of the queue, carved steps to the back
        best: Dict[Coord, int] = {start: 0}
        parent: Dict[Coord, Coord] = {}
        queue = deque([start])
        while queue:
            cur = queue.popleft()
            if cur == entrance:
                break
            for nxt in neighbors4(ctx.tiles, *cur):
                step = cost(*nxt)
                if step is None:
                    continue
                total = best[cur] + step
                if total < best.get(nxt, total + 1):
                    best[nxt] = total
                    parent[nxt] = cur
                    if step:
                        queue.append(nxt)
                    else:
                        queue.appendleft(nxt)

        if entrance not in best:
            logger.warning("VillageComposer: no track from %s to %s avoids the houses", start, entrance)
            return
        node = entrance
        while node != start:
            if not ctx.tile(*node).passable:
                ctx.set_tile(node[0], node[1], TileKind.FLOOR_DIRT)
            node = parent[node]
