from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field
from importlib import resources
from pathlib import Path
from typing import Dict, Optional

import yaml

from .errors import SettingsError

logger = logging.getLogger(__name__)


@dataclass
class EconomySettings:
    starting_coins: int = 6000
    starting_food: Dict[str, int] = field(default_factory=lambda: {"Orange": 5})
    starting_toys: Dict[str, int] = field(default_factory=lambda: {"Wand": 1})
    feed_refund_rate: float = 0.25
    play_reward: int = 100
    play_happiness: int = 25
    gift_reward: int = 100
    vet_reward: int = 500
    vet_health: int = 30
    exercise_reward: int = 200
    exercise_health: int = 15
    exercise_cost: int = 10


@dataclass
class SimulationSettings:
    tick_interval: float = 0.25  # seconds between apply_decline() calls
    max_stat: int = 100


@dataclass
class CooldownSettings:
    vet: int = 30
    play: int = 20


@dataclass
class SaveSettings:
    max_slots: int = 3


@dataclass
class Settings:
    economy: EconomySettings = field(default_factory=EconomySettings)
    simulation: SimulationSettings = field(default_factory=SimulationSettings)
    cooldowns: CooldownSettings = field(default_factory=CooldownSettings)
    saves: SaveSettings = field(default_factory=SaveSettings)

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
    def _from_dict(cls, data: dict) -> "Settings":
        try:
            return Settings(
                economy=EconomySettings(**data.get("economy", {})),
                simulation=SimulationSettings(**data.get("simulation", {})),
                cooldowns=CooldownSettings(**data.get("cooldowns", {})),
                saves=SaveSettings(**data.get("saves", {})),
            )
        except TypeError as exc:
            raise SettingsError(f"Unknown settings key: {exc}") from exc

    @classmethod
    def load(cls, user_path: Optional[Path] = None) -> "Settings":
        """Load packaged defaults, then overlay an optional user YAML file."""
        try:
            with resources.files("virtualpet.data").joinpath("default_settings.yaml").open("r", encoding="utf-8") as f:
                default_data = yaml.safe_load(f) or {}
        except FileNotFoundError:
            logger.warning("Default settings not found; falling back to dataclass defaults.")
            default_data = dataclasses.asdict(Settings())

        user_data = {}
        if user_path is not None:
            if user_path.exists():
                try:
                    user_data = cls._load_yaml(user_path)
                except yaml.YAMLError as exc:
                    raise SettingsError(f"Invalid settings file {user_path}: {exc}") from exc
                logger.info("Loaded user settings from %s", user_path)
            else:
                logger.warning("User settings file %s not found; using defaults.", user_path)

        merged = cls._deep_merge(default_data, user_data)
        return cls._from_dict(merged)
