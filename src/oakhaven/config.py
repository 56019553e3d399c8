from __future__ import annotations

import argparse
import logging
import os
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence

from .map.grid import check_dimensions
from .map.model import BiomeKind

logger = logging.getLogger(__name__)

ENV_PREFIX = "OAKHAVEN_"


def _as_bool(value: Any) -> bool:
    """Interpret common truthy/falsey values ("1", "yes", "off", ...) into a bool."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        v = value.strip().lower()
        if v in {"1", "true", "yes", "y", "on"}:
            return True
        if v in {"0", "false", "no", "n", "off", ""}:
            return False
        return True
    return bool(value)


def _parse_biome(value: Optional[str]) -> Optional[BiomeKind]:
    if value is None or not str(value).strip():
        return None
    try:
        biome = BiomeKind(str(value).strip().lower())
    except ValueError:
        logger.warning("Unknown biome '%s' ignored", value)
        return None
    if biome == BiomeKind.VILLAGE:
        logger.warning("The village is reserved for level 0; forced biome ignored")
        return None
    return biome


@dataclass
class GenerationSettings:
    """Knobs for level generation.

    Construct directly, from environment variables (``from_env``, prefix
    OAKHAVEN_) or from CLI arguments (``build_settings``).
    """

    width: int = 60
    height: int = 40
    village_width: int = 50
    village_height: int = 40
    seed: Optional[int] = None
    biome: Optional[BiomeKind] = None  # force this biome on every dungeon level
    fov_radius: int = 8
    decorate_village: bool = False
    schedule_path: Optional[str] = None

    def __post_init__(self) -> None:
        if isinstance(self.biome, str) and not isinstance(self.biome, BiomeKind):
            self.biome = _parse_biome(self.biome)
        if self.fov_radius < 0:
            raise ValueError("fov_radius must be >= 0")

    def validate(self) -> None:
        """Raise InvalidDimensions for dimensions that cannot hold a walled map."""
        check_dimensions(self.width, self.height)
        check_dimensions(self.village_width, self.village_height)

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "GenerationSettings":
        env = os.environ if env is None else env
        defaults = cls()

        def get_int(name: str, default: Optional[int]) -> Optional[int]:
            raw = env.get(ENV_PREFIX + name)
            if raw is None or raw.strip() == "":
                return default
            try:
                return int(raw)
            except ValueError:
                logger.warning("Ignoring non-integer %s%s=%r", ENV_PREFIX, name, raw)
                return default

        decorate = env.get(ENV_PREFIX + "DECORATE_VILLAGE")
        settings = cls(
            width=get_int("WIDTH", defaults.width),
            height=get_int("HEIGHT", defaults.height),
            village_width=get_int("VILLAGE_WIDTH", defaults.village_width),
            village_height=get_int("VILLAGE_HEIGHT", defaults.village_height),
            seed=get_int("SEED", None),
            biome=_parse_biome(env.get(ENV_PREFIX + "BIOME")),
            fov_radius=get_int("FOV_RADIUS", defaults.fov_radius),
            decorate_village=_as_bool(decorate) if decorate is not None else defaults.decorate_village,
            schedule_path=env.get(ENV_PREFIX + "SCHEDULE") or None,
        )
        logger.debug("GenerationSettings from env: %s", settings)
        return settings


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="oakhaven", description="Generate an Oakhaven level and print it")
    p.add_argument("--level", type=int, default=1, help="Level index (0 is the village)")
    p.add_argument("--seed", type=int, default=None, help="Master seed (overrides OAKHAVEN_SEED)")
    p.add_argument("--width", type=int, default=None, help="Dungeon width")
    p.add_argument("--height", type=int, default=None, help="Dungeon height")
    p.add_argument(
        "--biome",
        choices=[b.value for b in BiomeKind if b != BiomeKind.VILLAGE],
        default=None,
        help="Force a biome for dungeon levels",
    )
    p.add_argument("--schedule", default=None, help="Path to a biome schedule YAML file")
    p.add_argument("--ascii", action="store_true", help="Print the map as ASCII instead of JSON")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    return p.parse_args(argv)


def build_settings(args: argparse.Namespace, env: Optional[Mapping[str, str]] = None) -> GenerationSettings:
    """Environment settings overridden by whatever was given on the command line."""
    settings = GenerationSettings.from_env(env)
    if args.seed is not None:
        settings.seed = args.seed
    if args.width is not None:
        settings.width = args.width
    if args.height is not None:
        settings.height = args.height
    if args.biome is not None:
        settings.biome = _parse_biome(args.biome)
    if args.schedule is not None:
        settings.schedule_path = args.schedule
    return settings
