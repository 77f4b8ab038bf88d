"""
Gymnasium Environment Wrapper
=============================

Provides a standard Gymnasium interface to the catch session.
Each step runs `frame_skip` ticks on a simulated 60 Hz clock.
"""

from __future__ import annotations

import logging
import random
from typing import Any, Dict, Optional, Tuple, Union
import numpy as np

import gymnasium as gym
from gymnasium import spaces

from fruit_catcher.catch_core.clock import SimulatedClock
from fruit_catcher.catch_core.config_loader import GameConfig, load_config
from fruit_catcher.catch_core.game import CatchSession
from fruit_catcher.catch_core.perks import PERK_MENU
from fruit_catcher.catch_core.rules import LANES
from fruit_catcher.catch_core.state_snapshot import SessionSnapshot

logger = logging.getLogger(__name__)


class CatchEnv(gym.Env):
    """
    Fruit catching game as a Gymnasium environment.

    Action Space:
        Discrete(3). While playing: target lane (0 Left, 1 Center, 2 Right).
        While paused for a level-up: perk (0 Shield, 1 Luck, 2 Greed).

    Observation Space:
        Dict of fixed-size numpy arrays (see SessionSnapshot.to_obs_dict).

    Reward:
        Sum of score changes over the step's ticks.

    Episodes never terminate on their own; they truncate after
    `caps.max_ticks` ticks.
    """

    metadata = {
        "render_modes": [],
        "render_fps": 60,
    }

    def __init__(
        self,
        config_path: Optional[str] = None,
        config: Optional[GameConfig] = None,
        frame_skip: int = 4,
        max_ticks: Optional[int] = None,
        debug: bool = False,
    ):
        """
        Initialize catch environment.

        Args:
            config_path: Path to game_config.yaml. Uses default if None.
            config: Pre-loaded config; takes precedence over config_path.
            frame_skip: Ticks simulated per step.
            max_ticks: Override caps.max_ticks.
            debug: If True, log every step at INFO level.
        """
        super().__init__()

        if frame_skip < 1:
            raise ValueError(f"frame_skip must be >= 1, got {frame_skip}")

        self._config = config if config is not None else load_config(config_path)
        self._frame_skip = frame_skip
        self._max_ticks = max_ticks if max_ticks is not None else self._config.caps.max_ticks
        self._debug = debug

        self._clock = SimulatedClock(step_ms=self._config.timing.tick_ms)
        self._rng = random.Random()
        self._session = CatchSession(config=self._config, rng=self._rng, clock=self._clock)

        self.action_space = spaces.Discrete(len(LANES))
        self.observation_space = self._build_observation_space()

        if self._debug:
            logger.info(
                "CatchEnv initialized: frame_skip=%d max_ticks=%d max_items=%d",
                self._frame_skip, self._max_ticks, self._config.observation.max_items
            )

    def _build_observation_space(self) -> spaces.Dict:
        """Build the observation space definition."""
        max_items = self._config.observation.max_items
        difficulty = self._config.difficulty

        return spaces.Dict({
            "basket_lane": spaces.Discrete(len(LANES)),
            "score": spaces.Box(low=0, high=np.iinfo(np.int64).max, shape=(), dtype=np.int64),
            "level": spaces.Box(low=1, high=np.iinfo(np.int32).max, shape=(), dtype=np.int32),
            "paused_for_upgrade": spaces.Discrete(2),
            "perks": spaces.Box(low=0, high=np.iinfo(np.int32).max, shape=(len(PERK_MENU),), dtype=np.int32),
            "speed_offset": spaces.Box(
                low=difficulty.speed_offset_min,
                high=difficulty.speed_offset_max,
                shape=(),
                dtype=np.float32
            ),
            "items_count": spaces.Box(low=0, high=np.iinfo(np.int32).max, shape=(), dtype=np.int32),
            "item_lane": spaces.Box(low=-1, high=len(LANES) - 1, shape=(max_items,), dtype=np.int8),
            "item_y": spaces.Box(low=-np.inf, high=np.inf, shape=(max_items,), dtype=np.float32),
            "item_kind": spaces.Box(low=-1, high=2, shape=(max_items,), dtype=np.int8),
            "item_value": spaces.Box(
                low=np.iinfo(np.int32).min,
                high=np.iinfo(np.int32).max,
                shape=(max_items,),
                dtype=np.int32
            ),
            "item_mask": spaces.MultiBinary(max_items),
        })

    def reset(
        self,
        *,
        seed: Optional[int] = None,
        options: Optional[Dict[str, Any]] = None
    ) -> Tuple[Dict[str, np.ndarray], Dict[str, Any]]:
        """
        Reset the environment.

        Args:
            seed: Random seed for reproducibility.
            options: Additional options (unused).

        Returns:
            (observation, info) tuple.
        """
        super().reset(seed=seed)

        if self._session.active:
            self._session.stop()

        self._clock.reset()
        snapshot = self._session.start(seed=seed)

        obs = self._snapshot_to_obs(snapshot)
        info = self._session.get_info()
        info["delta_score"] = 0

        return obs, info

    def step(
        self,
        action: Union[int, np.integer, np.ndarray]
    ) -> Tuple[Dict[str, np.ndarray], float, bool, bool, Dict[str, Any]]:
        """
        Execute one step.

        Args:
            action: Lane index, or perk index while paused.

        Returns:
            (observation, reward, terminated, truncated, info) tuple.
        """
        if isinstance(action, np.ndarray):
            action = int(action.item() if action.ndim == 0 else action[0])
        action = int(action)

        if self._session.paused_for_upgrade:
            self._session.select_perk(PERK_MENU[action])
        else:
            self._session.set_basket_lane(LANES[action])

        delta_score = 0
        catches = 0
        snapshot = self._session.get_snapshot()
        for _ in range(self._frame_skip):
            self._clock.advance()
            result = self._session.advance()
            delta_score += result.delta_score
            catches += len(result.catches)
            snapshot = result.snapshot
            if self._session.paused_for_upgrade:
                break

        truncated = self._session.tick_count >= self._max_ticks
        if truncated and self._session.active:
            self._session.stop()

        obs = self._snapshot_to_obs(snapshot)
        reward = float(delta_score)

        info = self._session.get_info()
        info["delta_score"] = delta_score
        info["catches_this_step"] = catches

        if self._debug:
            logger.info(
                "Step: action=%d delta_score=%d level=%d items=%d paused=%s",
                action, delta_score, info["level"], info["items_count"],
                info["paused_for_upgrade"]
            )

        return obs, reward, False, truncated, info

    def _snapshot_to_obs(self, snapshot: SessionSnapshot) -> Dict[str, np.ndarray]:
        """Convert snapshot to observation dict."""
        return snapshot.to_obs_dict(self._config.observation.max_items)

    def close(self) -> None:
        """Stop the session if it is still running."""
        if self._session.active:
            self._session.stop()

    @property
    def session(self) -> CatchSession:
        """Access to underlying session (for debugging/tools)."""
        return self._session

    @property
    def config(self) -> GameConfig:
        """Game configuration."""
        return self._config
