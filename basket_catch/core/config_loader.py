"""
Configuration Loader
====================

Loads and validates game_config.yaml, providing typed access to all parameters.
"""

from __future__ import annotations

import math
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

import yaml

from basket_catch.core.entities import ItemCategory


CONTROL_SCHEMES = ("direct", "inertial")

DEFAULT_CONFIG_PATH = os.path.join(
    os.path.dirname(os.path.dirname(os.path.abspath(__file__))),
    "game_config.yaml"
)


@dataclass(frozen=True)
class FieldConfig:
    """Play-field geometry in logical pixels."""
    width: int
    height: int


@dataclass(frozen=True)
class ClockConfig:
    """Frame clock settings."""
    fps: int

    @property
    def frame_dt(self) -> float:
        """Seconds per frame."""
        return 1.0 / self.fps


@dataclass(frozen=True)
class BasketConfig:
    """Basket geometry and control tuning."""
    control: str
    width_min: int
    width_fraction: float
    height: int
    bottom_offset: int
    speed: float
    acceleration: float
    friction: float
    max_speed: float


@dataclass(frozen=True)
class SpawnConfig:
    """Spawner parameters."""
    max_items: int
    interval_ms: int
    min_interval_ms: int
    grace_period: float
    margin: float
    radius_min: float
    radius_max: float
    velocity_min: float
    velocity_max: float
    start_offset: float
    healing_chance: float
    weights: Dict[ItemCategory, float]
    velocity_offsets: Dict[ItemCategory, float]


@dataclass(frozen=True)
class DifficultyConfig:
    """Level progression parameters."""
    tick_seconds: float
    level_time: int
    initial_fall_speed: float
    fall_speed_step: float
    spawn_interval_factor: float


@dataclass(frozen=True)
class RulesConfig:
    """Strikes, immunity and integration constants."""
    max_strikes: int
    immunity_seconds: float
    fall_speed_scale: float
    highscore_prompt_delay: float


@dataclass(frozen=True)
class EffectConfig:
    """A single outcome (catch or miss) for one category."""
    score: int = 0
    strikes: int = 0
    immunity: bool = False

    @property
    def is_noop(self) -> bool:
        return self.score == 0 and self.strikes == 0 and not self.immunity


@dataclass(frozen=True)
class CategoryEffects:
    """Catch and miss outcomes for one category."""
    catch: EffectConfig
    miss: EffectConfig


@dataclass(frozen=True)
class CapsConfig:
    """Episode limits for headless play."""
    max_frames: int


@dataclass(frozen=True)
class LeaderboardConfig:
    """Highscore client parameters."""
    size: int
    name_max_length: int
    placeholder_name: str
    service_url: str
    timeout: float
    cache_path: str
    cache_key: str


@dataclass(frozen=True)
class GameConfig:
    """
    Complete game configuration loaded from YAML.

    All values are immutable to prevent accidental modification during runtime.
    """
    field: FieldConfig
    clock: ClockConfig
    basket: BasketConfig
    spawn: SpawnConfig
    difficulty: DifficultyConfig
    rules: RulesConfig
    effects: Dict[ItemCategory, CategoryEffects]
    caps: CapsConfig
    leaderboard: LeaderboardConfig

    @property
    def basket_width(self) -> int:
        """Basket width derived from the field width."""
        return max(
            self.basket.width_min,
            int(math.floor(self.field.width * self.basket.width_fraction))
        )

    @property
    def basket_y(self) -> float:
        """Resting Y of the basket top edge (the catch line)."""
        return float(self.field.height - self.basket.height - self.basket.bottom_offset)

    def get_effects(self, category: ItemCategory) -> CategoryEffects:
        """Get the effect table row for a category."""
        return self.effects[category]


def _parse_category_map(data: dict, section: str) -> Dict[ItemCategory, float]:
    """Parse a {category_name: number} mapping."""
    result = {}
    for name, value in data.items():
        try:
            category = ItemCategory(name)
        except ValueError:
            raise ValueError(f"Unknown item category '{name}' in {section}")
        result[category] = float(value)
    return result


def _parse_effect(data: Optional[dict]) -> EffectConfig:
    """Parse a single catch/miss effect."""
    data = data or {}
    return EffectConfig(
        score=int(data.get("score", 0)),
        strikes=int(data.get("strikes", 0)),
        immunity=bool(data.get("immunity", False))
    )


def _parse_effects(data: dict) -> Dict[ItemCategory, CategoryEffects]:
    """Parse the category effect table."""
    effects = {}
    for name, row in data.items():
        try:
            category = ItemCategory(name)
        except ValueError:
            raise ValueError(f"Unknown item category '{name}' in effects")
        row = row or {}
        effects[category] = CategoryEffects(
            catch=_parse_effect(row.get("catch")),
            miss=_parse_effect(row.get("miss"))
        )
    return effects


def _validate_config(config: GameConfig) -> None:
    """Validate configuration consistency."""
    if config.field.width <= 0 or config.field.height <= 0:
        raise ValueError(f"Field size must be positive, got {config.field.width}x{config.field.height}")

    if config.clock.fps <= 0:
        raise ValueError(f"clock.fps must be positive, got {config.clock.fps}")

    if config.basket.control not in CONTROL_SCHEMES:
        raise ValueError(
            f"basket.control must be one of {CONTROL_SCHEMES}, got '{config.basket.control}'"
        )

    if config.basket_width > config.field.width:
        raise ValueError(
            f"Basket width ({config.basket_width}) exceeds field width ({config.field.width})"
        )

    # Every category needs an effect row
    missing = [c.value for c in ItemCategory if c not in config.effects]
    if missing:
        raise ValueError(f"effects table is missing categories: {missing}")

    # Weighted draw covers the non-healing categories and sums to 1
    weights = config.spawn.weights
    if ItemCategory.HEALING in weights:
        raise ValueError("healing is drawn by its own roll and must not appear in spawn.weights")
    total = sum(weights.values())
    if abs(total - 1.0) > 1e-6:
        raise ValueError(f"spawn.weights must sum to 1.0, got {total}")

    if config.spawn.max_items <= 0:
        raise ValueError(f"spawn.max_items must be positive, got {config.spawn.max_items}")

    if config.spawn.min_interval_ms <= 0 or config.spawn.interval_ms < config.spawn.min_interval_ms:
        raise ValueError(
            f"spawn.interval_ms ({config.spawn.interval_ms}) must be >= "
            f"spawn.min_interval_ms ({config.spawn.min_interval_ms}) > 0"
        )

    if 2 * config.spawn.margin >= config.field.width:
        raise ValueError(f"spawn.margin ({config.spawn.margin}) leaves no room to spawn")

    if not 0.0 < config.difficulty.spawn_interval_factor <= 1.0:
        raise ValueError(
            f"difficulty.spawn_interval_factor must be in (0, 1], "
            f"got {config.difficulty.spawn_interval_factor}"
        )

    if config.rules.max_strikes <= 0:
        raise ValueError(f"rules.max_strikes must be positive, got {config.rules.max_strikes}")

    if config.leaderboard.size <= 0 or config.leaderboard.name_max_length <= 0:
        raise ValueError("leaderboard.size and leaderboard.name_max_length must be positive")


def load_config(config_path: Optional[str] = None) -> GameConfig:
    """
    Load and validate game configuration from YAML.

    Args:
        config_path: Path to game_config.yaml. If None, uses default location.

    Returns:
        Validated GameConfig instance.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ValueError: If config validation fails.
    """
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r") as f:
        raw = yaml.safe_load(f)

    field_data = raw["field"]
    field = FieldConfig(
        width=int(field_data["width"]),
        height=int(field_data["height"])
    )

    clock = ClockConfig(fps=int(raw.get("clock", {}).get("fps", 60)))

    basket_data = raw["basket"]
    basket = BasketConfig(
        control=str(basket_data.get("control", "direct")),
        width_min=int(basket_data["width_min"]),
        width_fraction=float(basket_data["width_fraction"]),
        height=int(basket_data["height"]),
        bottom_offset=int(basket_data.get("bottom_offset", 30)),
        speed=float(basket_data["speed"]),
        acceleration=float(basket_data.get("acceleration", 1.2)),
        friction=float(basket_data.get("friction", 0.85)),
        max_speed=float(basket_data.get("max_speed", 12.0))
    )

    spawn_data = raw["spawn"]
    spawn = SpawnConfig(
        max_items=int(spawn_data["max_items"]),
        interval_ms=int(spawn_data["interval_ms"]),
        min_interval_ms=int(spawn_data["min_interval_ms"]),
        grace_period=float(spawn_data["grace_period"]),
        margin=float(spawn_data.get("margin", 30)),
        radius_min=float(spawn_data["radius_min"]),
        radius_max=float(spawn_data["radius_max"]),
        velocity_min=float(spawn_data["velocity_min"]),
        velocity_max=float(spawn_data["velocity_max"]),
        start_offset=float(spawn_data.get("start_offset", 10)),
        healing_chance=float(spawn_data.get("healing_chance", 0.015)),
        weights=_parse_category_map(spawn_data["weights"], "spawn.weights"),
        velocity_offsets=_parse_category_map(
            spawn_data.get("velocity_offsets", {}), "spawn.velocity_offsets"
        )
    )

    difficulty_data = raw["difficulty"]
    difficulty = DifficultyConfig(
        tick_seconds=float(difficulty_data.get("tick_seconds", 1.0)),
        level_time=int(difficulty_data["level_time"]),
        initial_fall_speed=float(difficulty_data["initial_fall_speed"]),
        fall_speed_step=float(difficulty_data["fall_speed_step"]),
        spawn_interval_factor=float(difficulty_data["spawn_interval_factor"])
    )

    rules_data = raw["rules"]
    rules = RulesConfig(
        max_strikes=int(rules_data["max_strikes"]),
        immunity_seconds=float(rules_data["immunity_seconds"]),
        fall_speed_scale=float(rules_data.get("fall_speed_scale", 0.16)),
        highscore_prompt_delay=float(rules_data.get("highscore_prompt_delay", 0.6))
    )

    effects = _parse_effects(raw["effects"])

    caps = CapsConfig(max_frames=int(raw.get("caps", {}).get("max_frames", 108000)))

    lb_data = raw.get("leaderboard", {})
    leaderboard = LeaderboardConfig(
        size=int(lb_data.get("size", 10)),
        name_max_length=int(lb_data.get("name_max_length", 8)),
        placeholder_name=str(lb_data.get("placeholder_name", "???")),
        service_url=str(lb_data.get("service_url", "http://localhost:3000")),
        timeout=float(lb_data.get("timeout", 2.0)),
        cache_path=str(lb_data.get("cache_path", "~/.basket_catch/local_storage.json")),
        cache_key=str(lb_data.get("cache_key", "highscores"))
    )

    config = GameConfig(
        field=field,
        clock=clock,
        basket=basket,
        spawn=spawn,
        difficulty=difficulty,
        rules=rules,
        effects=effects,
        caps=caps,
        leaderboard=leaderboard
    )

    _validate_config(config)
    return config


# Module-level singleton for convenience
_cached_config: Optional[GameConfig] = None


def get_config() -> GameConfig:
    """Get the cached game configuration, loading if necessary."""
    global _cached_config
    if _cached_config is None:
        _cached_config = load_config()
    return _cached_config


def reload_config(config_path: Optional[str] = None) -> GameConfig:
    """Reload the configuration (useful for testing)."""
    global _cached_config
    _cached_config = load_config(config_path)
    return _cached_config
