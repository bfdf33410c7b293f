from __future__ import annotations

import dataclasses
import logging
import math
from dataclasses import dataclass, field
from importlib import resources
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import yaml

logger = logging.getLogger(__name__)

TIERS = ("shallow", "middle", "deep", "boss")


@dataclass
class GenerationSettings:
    max_attempts: int = 8
    min_skipped_sections: int = 1
    max_skipped_sections: int = 2
    room_min_size: int = 4
    room_max_size: int = 7

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if not (0 <= self.min_skipped_sections <= self.max_skipped_sections <= 7):
            # At least two rooms remain: the entrance room and one for the stairs
            raise ValueError("skipped sections must satisfy 0 <= min <= max <= 7")
        if not (1 <= self.room_min_size <= self.room_max_size):
            raise ValueError("room sizes must satisfy 1 <= min <= max")


@dataclass
class VisibilitySettings:
    corridor_radius: int = 2
    dim_factor: float = 0.35  # brightness for revealed-not-visible tiles

    def __post_init__(self) -> None:
        if self.corridor_radius < 0:
            raise ValueError("corridor_radius must be >= 0")
        if not (0.0 <= self.dim_factor <= 1.0):
            raise ValueError("dim_factor must be between 0.0 and 1.0")


@dataclass
class EventDensity:
    """Fraction of free room tiles that receive each event kind.

    Field order is the placement order used by the generator.
    """

    enemy: float = 0.0
    treasure: float = 0.0
    trap: float = 0.0
    spring: float = 0.0
    lore: float = 0.0
    npc: float = 0.0

    def __post_init__(self) -> None:
        for f in dataclasses.fields(self):
            value = getattr(self, f.name)
            if value < 0.0:
                raise ValueError(f"Density for {f.name!r} must be non-negative, got {value}")
        if sum(getattr(self, f.name) for f in dataclasses.fields(self)) > 1.0:
            raise ValueError("Event densities must not sum above 1.0")

    def counts(self, total: int) -> List[Tuple[str, int]]:
        """Number of tiles per event kind for `total` candidates, rounded half up."""
        return [
            (f.name, int(math.floor(total * getattr(self, f.name) + 0.5)))
            for f in dataclasses.fields(self)
        ]


def _default_event_tiers() -> Dict[str, EventDensity]:
    return {
        "shallow": EventDensity(0.12, 0.06, 0.02, 0.05, 0.04, 0.03),
        "middle": EventDensity(0.15, 0.05, 0.04, 0.04, 0.03, 0.02),
        "deep": EventDensity(0.18, 0.05, 0.05, 0.03, 0.02, 0.02),
        "boss": EventDensity(0.20, 0.04, 0.06, 0.03, 0.02, 0.01),
    }


@dataclass
class Settings:
    generation: GenerationSettings = field(default_factory=GenerationSettings)
    visibility: VisibilitySettings = field(default_factory=VisibilitySettings)
    events: Dict[str, EventDensity] = field(default_factory=_default_event_tiers)

    def __post_init__(self) -> None:
        missing = [t for t in TIERS if t not in self.events]
        if missing:
            raise ValueError(f"Event densities missing for tiers: {missing}")

    def density_for(self, tier: str) -> EventDensity:
        return self.events[tier]

    @staticmethod
    def _load_yaml(path: Path) -> dict:
        with path.open("r", encoding="utf-8") as f:
            return yaml.safe_load(f) or {}

    @classmethod
    def _deep_merge(cls, base: dict, overlay: dict) -> dict:
        merged = dict(base)
        for k, v in (overlay or {}).items():
            if isinstance(v, dict) and isinstance(base.get(k), dict):
                merged[k] = cls._deep_merge(base[k], v)
            else:
                merged[k] = v
        return merged

    @classmethod
    def from_dict(cls, data: dict) -> "Settings":
        """Build Settings from plain data. Malformed sections raise ValueError.

        A null section falls back to the defaults.
        """
        if not isinstance(data, dict):
            raise ValueError(f"Settings must be a mapping, got {type(data).__name__}")
        try:
            generation = GenerationSettings(**(data.get("generation") or {}))
            visibility = VisibilitySettings(**(data.get("visibility") or {}))
            events = _default_event_tiers()
            for tier, values in (data.get("events") or {}).items():
                events[str(tier)] = EventDensity(**(values or {}))
        except (TypeError, AttributeError) as e:
            raise ValueError(f"Invalid settings: {e}") from e
        return cls(generation=generation, visibility=visibility, events=events)

    @classmethod
    def load(cls, user_path: Optional[Path] = None) -> "Settings":
        """Load settings from packaged defaults and an optional user override file.

        If user_path is provided and exists, its values are overlaid onto the defaults.
        """
        try:
            with resources.files("delve.data").joinpath("default_settings.yaml").open("r", encoding="utf-8") as f:
                default_data = yaml.safe_load(f) or {}
        except FileNotFoundError:
            logger.warning("Default settings not found; falling back to dataclass defaults.")
            default_data = dataclasses.asdict(Settings())

        user_data = {}
        if user_path is not None:
            if user_path.exists():
                user_data = cls._load_yaml(user_path)
                if not isinstance(user_data, dict):
                    raise ValueError(f"User settings in {user_path} must be a mapping")
                logger.info("Loaded user settings from %s", user_path)
            else:
                logger.warning("User settings file %s does not exist; using defaults", user_path)

        return cls.from_dict(cls._deep_merge(default_data, user_data))
