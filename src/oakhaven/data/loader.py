from __future__ import annotations

import logging
from functools import lru_cache
from importlib.resources import files as resource_files
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from platformdirs import user_config_dir
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from ..errors import ScheduleError
from ..map.model import BiomeKind
from ..map.themes import ThemeId

logger = logging.getLogger(__name__)

APP_NAME = "oakhaven"
SCHEDULE_FILE = "biomes.yaml"
ROSTER_FILE = "villagers.yaml"


class NpcProfile(BaseModel):
    """A named NPC with its dialogue lines."""

    name: str = Field(..., min_length=1, description="Display name")
    dialogue: List[str] = Field(default_factory=list, description="Lines spoken in order")
    portrait: Optional[str] = Field(default=None, description="Optional portrait asset reference")

    @field_validator("dialogue")
    @classmethod
    def drop_blank_lines(cls, v: List[str]) -> List[str]:
        return [line for line in (v or []) if line and line.strip()]


class VillageRoster(BaseModel):
    """Everyone the village composer can place."""

    guide: NpcProfile
    villagers: List[NpcProfile] = Field(default_factory=list)
    merchant: NpcProfile
    innkeeper: NpcProfile
    smith: NpcProfile
    fisher: NpcProfile


class BiomeBand(BaseModel):
    """Biome weights for an inclusive range of dungeon levels."""

    min_level: int = Field(..., ge=1)
    max_level: Optional[int] = Field(default=None, ge=1, description="None means unbounded")
    weights: Dict[BiomeKind, float]

    @field_validator("weights")
    @classmethod
    def check_weights(cls, v: Dict[BiomeKind, float]) -> Dict[BiomeKind, float]:
        if BiomeKind.VILLAGE in v:
            raise ValueError("the village is reserved for level 0 and cannot be scheduled")
        if any(w < 0 for w in v.values()):
            raise ValueError("biome weights must be non-negative")
        if sum(v.values()) <= 0:
            raise ValueError("at least one biome weight must be positive")
        return v

    @model_validator(mode="after")
    def check_range(self) -> "BiomeBand":
        if self.max_level is not None and self.max_level < self.min_level:
            raise ValueError(f"max_level {self.max_level} is below min_level {self.min_level}")
        return self

    def contains(self, level: int) -> bool:
        return level >= self.min_level and (self.max_level is None or level <= self.max_level)


class BiomeSchedule(BaseModel):
    """Which biome (and theme) a dungeon level is generated with."""

    bands: List[BiomeBand] = Field(..., min_length=1)
    themes: Dict[BiomeKind, List[ThemeId]] = Field(default_factory=dict)

    def band_for(self, level: int) -> BiomeBand:
        for band in self.bands:
            if band.contains(level):
                return band
        # Past the last configured band: keep using the deepest one
        return max(self.bands, key=lambda b: b.min_level)

    def themes_for(self, biome: BiomeKind) -> List[ThemeId]:
        return list(self.themes.get(biome) or [ThemeId.DUNGEON])


def user_schedule_path() -> Path:
    """Location of an optional per-user biome schedule override."""
    return Path(user_config_dir(APP_NAME)) / SCHEDULE_FILE


@lru_cache(maxsize=None)
def _embedded_text(name: str) -> str:
    return resource_files("oakhaven.data").joinpath(name).read_text(encoding="utf-8")


def _load_yaml(name: str, path: Optional[Union[str, Path]]) -> Dict[str, Any]:
    if path is None:
        text = _embedded_text(name)
        logger.debug("Loaded embedded resource %s", name)
    else:
        try:
            text = Path(path).read_text(encoding="utf-8")
        except OSError as e:
            raise ScheduleError(f"Cannot read {path}: {e}") from e
        logger.debug("Loaded %s from path: %s", name, path)
    try:
        raw = yaml.safe_load(text) or {}
    except yaml.YAMLError as e:
        raise ScheduleError(f"Invalid YAML in {path or name}: {e}") from e
    if not isinstance(raw, dict):
        raise ScheduleError(f"{path or name} must contain a mapping at the top level")
    return raw


def _human(e: ValidationError) -> str:
    parts = []
    for err in e.errors():
        loc = "/".join(str(p) for p in err["loc"]) or "<root>"
        parts.append(f" - at {loc}: {err['msg']}")
    return "\n".join(parts)


def load_schedule(path: Optional[Union[str, Path]] = None) -> BiomeSchedule:
    """Load the biome schedule.

    An explicit path wins; otherwise a ``biomes.yaml`` in the user config
    directory is used if present; otherwise the embedded default.
    """
    if path is None:
        override = user_schedule_path()
        if override.is_file():
            path = override
    raw = _load_yaml(SCHEDULE_FILE, path)
    try:
        schedule = BiomeSchedule.model_validate(raw)
    except ValidationError as e:
        raise ScheduleError(f"Invalid biome schedule in {path or SCHEDULE_FILE}:\n{_human(e)}") from e
    logger.info("Biome schedule: %d bands (source=%s)", len(schedule.bands), path or "embedded")
    return schedule


def load_roster(path: Optional[Union[str, Path]] = None) -> VillageRoster:
    """Load the village NPC roster from YAML (embedded default when path is None)."""
    raw = _load_yaml(ROSTER_FILE, path)
    try:
        return VillageRoster.model_validate(raw)
    except ValidationError as e:
        raise ScheduleError(f"Invalid villager roster in {path or ROSTER_FILE}:\n{_human(e)}") from e
