"""
Team Template Agent
===================

Your agent must provide one of:
1. A `CatchAgent` class with an `act(obs) -> action` method
2. A standalone `act(obs) -> action` function

Actions are ints in [0, 2]: the target lane (Left, Center, Right) while
playing, or the perk (Shield, Luck, Greed) while `paused_for_upgrade` is set.
"""

from __future__ import annotations

from typing import Dict
import numpy as np


class CatchAgent:
    """
    Your catch agent implementation.

    Replace the strategy in `act()` with your own logic.
    """

    def __init__(self):
        """Initialize your agent. Load models, set up state, etc."""
        self.rng = np.random.default_rng()

    def act(self, obs: Dict[str, np.ndarray]) -> int:
        """
        Choose an action based on the observation.

        Args:
            obs: Dictionary containing game state.

        Returns:
            action: Lane index, or perk index while paused.
        """
        return int(self.rng.integers(0, 3))

    def reset(self) -> None:
        """Called when a new episode starts (optional)."""
        pass


def act(obs: Dict[str, np.ndarray]) -> int:
    """Standalone act function (alternative to class-based agent)."""
    return int(np.random.randint(0, 3))
