"""
Configuration Loader
====================

Loads and validates game_config.yaml, providing typed access to all parameters.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml


ITEM_KINDS = ("fruit", "random_box", "hazard")


@dataclass(frozen=True)
class FieldConfig:
    """Field geometry in logical units (y grows downward)."""
    spawn_y: float               # Where new items appear
    catch_band_top: float        # Catch band lower bound (exclusive)
    catch_band_bottom: float     # Catch band upper bound (exclusive)
    removal_y: float             # Items past this line are dropped


@dataclass(frozen=True)
class TimingConfig:
    """Tick cadence and spawn pacing (milliseconds)."""
    tick_rate: float
    spawn_interval_ms: float
    min_spawn_interval_ms: float
    spawn_interval_per_speed_ms: float

    @property
    def tick_ms(self) -> float:
        """Milliseconds between two scheduler ticks."""
        return 1000.0 / self.tick_rate


@dataclass(frozen=True)
class DifficultyConfig:
    """Fall speed and level progression."""
    base_move_speed: float
    move_speed_per_level: float
    speed_offset_min: float
    speed_offset_max: float
    level_up_speed_bonus: float
    level_score_step: int


@dataclass(frozen=True)
class SpawnConfig:
    """Item kind probabilities."""
    hazard_chance: float
    hazard_chance_floor: float
    luck_hazard_reduction: float
    random_box_chance: float


@dataclass(frozen=True)
class RandomBoxConfig:
    """Random box payout range, widened by the Greed perk."""
    min_value: int
    max_value: int
    greed_bonus_per_level: int


@dataclass(frozen=True)
class ItemConfig:
    """Configuration for a single item type."""
    id: int
    name: str
    kind: str                    # "fruit", "random_box" or "hazard"
    value: int                   # Fixed points; unused for random boxes
    icon: str = ""


@dataclass(frozen=True)
class CapsConfig:
    """Episode limits for headless runs."""
    max_ticks: int


@dataclass(frozen=True)
class ObservationConfig:
    """Observation packing parameters."""
    max_items: int


@dataclass(frozen=True)
class GameConfig:
    """
    Complete game configuration loaded from YAML.

    All values are immutable to prevent accidental modification during runtime.
    """
    field: FieldConfig
    timing: TimingConfig
    difficulty: DifficultyConfig
    spawn: SpawnConfig
    random_box: RandomBoxConfig
    items: Tuple[ItemConfig, ...]
    caps: CapsConfig
    observation: ObservationConfig


def _parse_item(index: int, item_data: dict) -> ItemConfig:
    """Parse a single item entry from YAML."""
    return ItemConfig(
        id=index,
        name=str(item_data["name"]),
        kind=str(item_data["kind"]).lower(),
        value=int(item_data.get("value", 0)),
        icon=str(item_data.get("icon", ""))
    )


def _validate_config(config: GameConfig) -> None:
    """Validate configuration consistency."""
    kinds: List[str] = [item.kind for item in config.items]
    for kind in kinds:
        if kind not in ITEM_KINDS:
            raise ValueError(f"Unknown item kind '{kind}', expected one of {ITEM_KINDS}")

    if kinds.count("hazard") != 1:
        raise ValueError(f"Exactly one hazard item is required, got {kinds.count('hazard')}")
    if kinds.count("random_box") != 1:
        raise ValueError(f"Exactly one random_box item is required, got {kinds.count('random_box')}")
    if kinds.count("fruit") < 1:
        raise ValueError("At least one fruit item is required")

    names = [item.name.lower() for item in config.items]
    if len(set(names)) != len(names):
        raise ValueError(f"Item names must be unique, got {names}")

    for item in config.items:
        if item.kind == "fruit" and item.value <= 0:
            raise ValueError(f"Fruit '{item.name}' must have a positive value, got {item.value}")
        if item.kind == "hazard" and item.value >= 0:
            raise ValueError(f"Hazard '{item.name}' must have a negative value, got {item.value}")

    field = config.field
    if not (field.spawn_y < field.catch_band_top < field.catch_band_bottom <= field.removal_y):
        raise ValueError(
            f"Field lines out of order: spawn_y={field.spawn_y}, "
            f"catch band=({field.catch_band_top}, {field.catch_band_bottom}), "
            f"removal_y={field.removal_y}"
        )

    difficulty = config.difficulty
    if difficulty.speed_offset_min > difficulty.speed_offset_max:
        raise ValueError(
            f"speed_offset_min ({difficulty.speed_offset_min}) exceeds "
            f"speed_offset_max ({difficulty.speed_offset_max})"
        )
    if difficulty.level_score_step <= 0:
        raise ValueError(f"level_score_step must be positive, got {difficulty.level_score_step}")

    spawn = config.spawn
    for name in ("hazard_chance", "hazard_chance_floor", "random_box_chance"):
        value = getattr(spawn, name)
        if not 0.0 <= value <= 1.0:
            raise ValueError(f"spawn.{name} must be in [0, 1], got {value}")
    if spawn.hazard_chance + spawn.random_box_chance > 1.0:
        raise ValueError("hazard_chance + random_box_chance must not exceed 1")

    if config.random_box.min_value > config.random_box.max_value:
        raise ValueError(
            f"random_box.min_value ({config.random_box.min_value}) exceeds "
            f"max_value ({config.random_box.max_value})"
        )

    if config.timing.tick_rate <= 0:
        raise ValueError(f"tick_rate must be positive, got {config.timing.tick_rate}")


def parse_config(raw: Dict[str, Any]) -> GameConfig:
    """
    Build and validate a GameConfig from an already-loaded mapping.

    Args:
        raw: Mapping with the same layout as game_config.yaml.

    Returns:
        Validated GameConfig instance.

    Raises:
        ValueError: If config validation fails.
    """
    field_data = raw["field"]
    field = FieldConfig(
        spawn_y=float(field_data.get("spawn_y", 0.0)),
        catch_band_top=float(field_data["catch_band_top"]),
        catch_band_bottom=float(field_data["catch_band_bottom"]),
        removal_y=float(field_data["removal_y"])
    )

    timing_data = raw["timing"]
    timing = TimingConfig(
        tick_rate=float(timing_data.get("tick_rate", 60)),
        spawn_interval_ms=float(timing_data["spawn_interval_ms"]),
        min_spawn_interval_ms=float(timing_data["min_spawn_interval_ms"]),
        spawn_interval_per_speed_ms=float(timing_data["spawn_interval_per_speed_ms"])
    )

    difficulty_data = raw["difficulty"]
    difficulty = DifficultyConfig(
        base_move_speed=float(difficulty_data["base_move_speed"]),
        move_speed_per_level=float(difficulty_data["move_speed_per_level"]),
        speed_offset_min=float(difficulty_data["speed_offset_min"]),
        speed_offset_max=float(difficulty_data["speed_offset_max"]),
        level_up_speed_bonus=float(difficulty_data.get("level_up_speed_bonus", 0.5)),
        level_score_step=int(difficulty_data["level_score_step"])
    )

    spawn_data = raw["spawn"]
    spawn = SpawnConfig(
        hazard_chance=float(spawn_data["hazard_chance"]),
        hazard_chance_floor=float(spawn_data.get("hazard_chance_floor", 0.0)),
        luck_hazard_reduction=float(spawn_data.get("luck_hazard_reduction", 0.0)),
        random_box_chance=float(spawn_data["random_box_chance"])
    )

    box_data = raw["random_box"]
    random_box = RandomBoxConfig(
        min_value=int(box_data["min_value"]),
        max_value=int(box_data["max_value"]),
        greed_bonus_per_level=int(box_data.get("greed_bonus_per_level", 0))
    )

    items = tuple(_parse_item(i, item) for i, item in enumerate(raw["items"]))

    caps_data = raw.get("caps", {})
    caps = CapsConfig(
        max_ticks=int(caps_data.get("max_ticks", 36000))
    )

    obs_data = raw.get("observation", {})
    observation = ObservationConfig(
        max_items=int(obs_data.get("max_items", 32))
    )

    config = GameConfig(
        field=field,
        timing=timing,
        difficulty=difficulty,
        spawn=spawn,
        random_box=random_box,
        items=items,
        caps=caps,
        observation=observation
    )

    _validate_config(config)
    return config


def default_config_path() -> str:
    """Location of the bundled game_config.yaml."""
    return os.path.join(
        os.path.dirname(os.path.dirname(__file__)),
        "game_config.yaml"
    )


def load_raw_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """Read the YAML file without validating it."""
    if config_path is None:
        config_path = default_config_path()

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f)


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
    return parse_config(load_raw_config(config_path))


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
