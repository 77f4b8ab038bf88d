"""
Game Rules
==========

Handles lanes, spawn pacing, fall speed, catch detection and level thresholds.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional, Tuple, Union

from fruit_catcher.catch_core.config_loader import GameConfig, get_config


class Lane(str, Enum):
    """One of the three discrete columns shared by items and the basket."""
    LEFT = "Left"
    CENTER = "Center"
    RIGHT = "Right"

    @property
    def index(self) -> int:
        """Position of the lane from left (0) to right (2)."""
        return LANES.index(self)

    @classmethod
    def parse(cls, value: Union["Lane", str, int, None]) -> Optional["Lane"]:
        """
        Interpret a lane request from a front end.

        Accepts a Lane, a lane name (case-insensitive) or a lane index.
        Returns None for anything else.
        """
        if isinstance(value, Lane):
            return value
        if isinstance(value, str):
            for lane in LANES:
                if lane.value.lower() == value.strip().lower():
                    return lane
            return None
        if isinstance(value, int) and not isinstance(value, bool):
            if 0 <= value < len(LANES):
                return LANES[value]
        return None


LANES: Tuple[Lane, ...] = (Lane.LEFT, Lane.CENTER, Lane.RIGHT)


class SpawnRules:
    """
    Spawn pacing.

    The interval shrinks as the speed offset grows, down to a fixed floor.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        if config is None:
            config = get_config()

        self._base_interval = config.timing.spawn_interval_ms
        self._min_interval = config.timing.min_spawn_interval_ms
        self._per_speed = config.timing.spawn_interval_per_speed_ms
        self._spawn_y = config.field.spawn_y

    @property
    def base_interval(self) -> float:
        """Spawn interval at speed offset 0 (ms)."""
        return self._base_interval

    @property
    def spawn_y(self) -> float:
        """Y coordinate for spawning."""
        return self._spawn_y

    def effective_interval(self, interval_base: float, speed_offset: float) -> float:
        """
        Milliseconds that must elapse between two spawns.

        Args:
            interval_base: Session spawn interval base (ms).
            speed_offset: Current speed offset.

        Returns:
            max(min_interval, interval_base - speed_offset * per_speed).
        """
        return max(self._min_interval, interval_base - speed_offset * self._per_speed)

    def is_spawn_due(
        self,
        now: float,
        last_spawn_time: float,
        interval_base: float,
        speed_offset: float
    ) -> bool:
        """True once strictly more than the effective interval has elapsed."""
        return now - last_spawn_time > self.effective_interval(interval_base, speed_offset)


class FieldRules:
    """Catch band and removal line."""

    def __init__(self, config: Optional[GameConfig] = None):
        if config is None:
            config = get_config()

        self._band_top = config.field.catch_band_top
        self._band_bottom = config.field.catch_band_bottom
        self._removal_y = config.field.removal_y

    def in_catch_band(self, y: float) -> bool:
        return self._band_top < y < self._band_bottom

    def is_past_field(self, y: float) -> bool:
        return y > self._removal_y


class DifficultyRules:
    """
    Fall speed, speed offset bounds and level-up thresholds.

    - Fall speed per tick: base + level * per_level + speed_offset
    - Leaving level N requires a score of N * level_score_step
    """

    def __init__(self, config: Optional[GameConfig] = None):
        if config is None:
            config = get_config()

        difficulty = config.difficulty
        self._base_speed = difficulty.base_move_speed
        self._per_level = difficulty.move_speed_per_level
        self._offset_min = difficulty.speed_offset_min
        self._offset_max = difficulty.speed_offset_max
        self._level_up_bonus = difficulty.level_up_speed_bonus
        self._level_step = difficulty.level_score_step

    @property
    def level_up_speed_bonus(self) -> float:
        """Speed offset added each time a perk is chosen."""
        return self._level_up_bonus

    def move_speed(self, level: int, speed_offset: float) -> float:
        """Units an item falls per tick."""
        return self._base_speed + level * self._per_level + speed_offset

    def clamp_speed_offset(self, speed_offset: float) -> float:
        """Clamp a speed offset to the closed configured interval."""
        return max(self._offset_min, min(self._offset_max, speed_offset))

    def level_threshold(self, level: int) -> int:
        """Score needed to leave the given level."""
        return level * self._level_step

    def reached_level_up(self, score: int, level: int) -> bool:
        return score >= self.level_threshold(level)


class GameRules:
    """
    Combined interface for all game rules.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize game rules.

        Args:
            config: Game configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self.spawn = SpawnRules(config)
        self.field = FieldRules(config)
        self.difficulty = DifficultyRules(config)
