"""
Baseline Tracker Agent - Catches the nearest worthwhile item.

A simple heuristic agent for CatchEnv. It only reads the padded item
arrays of the observation, so it doubles as an example of the API.

Strategy:
- For each lane, find the lowest item that has not yet passed the basket
- Value it: fruit at face value, random box at its expected payout,
  bomb as a loss (free while a shield is up)
- Move to the lane with the best value, nearest item first on ties
- Stay put when nothing is falling

Perk choice at level-up: one shield first, then luck up to 3, then greed.
"""

import numpy as np
from typing import Any, Dict, Optional


NUM_LANES = 3
CATCH_LINE_Y = 200.0
KIND_FRUIT, KIND_BOX, KIND_HAZARD = 0, 1, 2
BOX_EXPECTED_VALUE = 200.0
PERK_SHIELD, PERK_LUCK, PERK_GREED = 0, 1, 2
LUCK_TARGET = 3


class CatchAgent:
    """
    Baseline agent that tracks the lowest valuable item.
    """

    def __init__(self, debug: bool = False):
        """
        Initialize the agent.

        Args:
            debug: If True, print decisions to stdout.
        """
        self.debug = debug

    def reset(self, seed: Optional[int] = None) -> None:
        """Stateless agent; nothing to reset."""

    def choose_perk(self, perks: np.ndarray) -> int:
        shield, luck = int(perks[0]), int(perks[1])
        if shield == 0:
            return PERK_SHIELD
        if luck < LUCK_TARGET:
            return PERK_LUCK
        return PERK_GREED

    def lane_values(self, observation: Dict[str, Any]) -> np.ndarray:
        """
        Value of the next item reaching the basket in each lane.

        Lanes with nothing incoming are NaN.
        """
        mask = observation["item_mask"].astype(bool)
        lanes = observation["item_lane"][mask]
        ys = observation["item_y"][mask]
        kinds = observation["item_kind"][mask]
        values = observation["item_value"][mask].astype(np.float64)
        has_shield = int(observation["perks"][0]) > 0

        result = np.full(NUM_LANES, np.nan)
        lowest_y = np.full(NUM_LANES, -np.inf)
        for lane, y, kind, value in zip(lanes, ys, kinds, values):
            if y >= CATCH_LINE_Y or y <= lowest_y[lane]:
                continue
            lowest_y[lane] = y
            if kind == KIND_BOX:
                result[lane] = BOX_EXPECTED_VALUE
            elif kind == KIND_HAZARD:
                result[lane] = 0.0 if has_shield else value
            else:
                result[lane] = value
        return result

    def act(self, observation: Dict[str, Any], debug: bool = False) -> int:
        """
        Choose a lane (or a perk while paused).

        Args:
            observation: Dict of numpy arrays from the environment.
            debug: If True, print debug info for this step.

        Returns:
            Action index in [0, 2].
        """
        if int(observation["paused_for_upgrade"]):
            return self.choose_perk(observation["perks"])

        current = int(observation["basket_lane"])
        values = self.lane_values(observation)

        if np.all(np.isnan(values)):
            action = current
        else:
            # Empty lanes count as neutral so the basket can dodge into them
            scored = np.where(np.isnan(values), 0.0, values)
            best = float(scored.max())
            candidates = np.flatnonzero(scored == best)
            action = current if current in candidates else int(candidates[0])

        if debug or self.debug:
            print(f"[Tracker Agent] lane values={values}, current={current}, action={action}")

        return int(action)


# Convenience function to create agent (used by evaluation harness)
def create_agent(**kwargs) -> CatchAgent:
    """Factory function to create an agent instance."""
    return CatchAgent(**kwargs)
