from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict


class ThemeId(str, Enum):
    DUNGEON = "dungeon"
    CAVE = "cave"
    CRYPT = "crypt"
    MAGMA = "magma"
    VILLAGE = "village"


@dataclass(frozen=True)
class Theme:
    """Palette handed to the renderer alongside a generated map."""

    id: ThemeId
    name: str
    floor_color: str
    wall_color: str
    wall_text_color: str
    floor_text_color: str
    chars: Dict[str, str] = field(default_factory=dict)


THEMES: Dict[ThemeId, Theme] = {
    ThemeId.DUNGEON: Theme(
        ThemeId.DUNGEON, "Dungeon", "#222", "#444", "#666", "#333",
        {"wall": "🧱", "floor": "·", "door_closed": "🚪"},
    ),
    ThemeId.CAVE: Theme(
        ThemeId.CAVE, "Cave", "#2e2722", "#4e342e", "#795548", "#3e2723",
        {"wall": "🪨", "floor": "·", "door_closed": "🚪"},
    ),
    ThemeId.CRYPT: Theme(
        ThemeId.CRYPT, "Crypt", "#1a231a", "#2f4f4f", "#556b2f", "#2f4f4f",
        {"wall": "⚰️", "floor": "░", "door_closed": "⛓️"},
    ),
    ThemeId.MAGMA: Theme(
        ThemeId.MAGMA, "Magma Caverns", "#220000", "#440000", "#ff4500", "#800000",
        {"wall": "🌋", "floor": "≈", "door_closed": "🔥"},
    ),
    ThemeId.VILLAGE: Theme(
        ThemeId.VILLAGE, "Oakhaven", "#2e4d23", "#5d4037", "#8d6e63", "#3b5e2b",
        {"wall": "🪵", "floor": "·", "door_closed": "🚪"},
    ),
}


def get_theme(theme_id: ThemeId) -> Theme:
    return THEMES[ThemeId(theme_id)]
