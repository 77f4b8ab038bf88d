"""
RNG - Spawn Picker
==================

Single source of randomness for a session: item kind, lane, and random box
payouts all draw from one `random.Random`, so a seed (or an injected
generator) fully determines a run.
"""

from __future__ import annotations

import random
from typing import Optional, Tuple

from fruit_catcher.catch_core.config_loader import GameConfig, get_config
from fruit_catcher.catch_core.item_catalog import ItemCatalog, ItemType
from fruit_catcher.catch_core.rules import LANES, Lane


class SpawnPicker:
    """
    Draws what to spawn, where, and what a random box pays out.

    Kind selection uses a single uniform draw in [0, 1):
    - below hazard_chance -> hazard
    - below hazard_chance + random_box_chance -> random box
    - otherwise a fruit chosen uniformly
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        seed: Optional[int] = None,
        rng: Optional[random.Random] = None
    ):
        """
        Initialize spawn picker.

        Args:
            config: Game configuration. Uses default if None.
            seed: Random seed for reproducibility. Random if None.
            rng: Pre-built generator (e.g. a scripted one in tests).
                Takes precedence over seed.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._catalog = ItemCatalog(config)
        self._rng = rng if rng is not None else random.Random(seed)

    @property
    def rng(self) -> random.Random:
        return self._rng

    @property
    def catalog(self) -> ItemCatalog:
        return self._catalog

    def hazard_chance(self, luck_level: int) -> float:
        """Hazard spawn probability, lowered per luck level down to a floor."""
        spawn = self._config.spawn
        return max(
            spawn.hazard_chance_floor,
            spawn.hazard_chance - luck_level * spawn.luck_hazard_reduction
        )

    def pick_type(self, luck_level: int = 0) -> ItemType:
        """Choose the kind of the next item."""
        draw = self._rng.random()
        hazard_chance = self.hazard_chance(luck_level)

        if draw < hazard_chance:
            return self._catalog.hazard
        if draw < hazard_chance + self._config.spawn.random_box_chance:
            return self._catalog.random_box
        return self._rng.choice(self._catalog.fruits)

    def pick_lane(self) -> Lane:
        """Choose a lane uniformly, independent of the kind."""
        return self._rng.choice(LANES)

    def random_box_range(self, greed_level: int) -> Tuple[int, int]:
        """Inclusive payout range for a random box at the given greed level."""
        box = self._config.random_box
        bonus = greed_level * box.greed_bonus_per_level
        return (box.min_value + bonus, box.max_value + 2 * bonus)

    def roll_random_box(self, greed_level: int = 0) -> int:
        """Draw a random box payout."""
        low, high = self.random_box_range(greed_level)
        return self._rng.randint(low, high)

    def reset(self, seed: Optional[int] = None) -> None:
        """
        Re-seed the generator.

        Args:
            seed: New random seed. Keeps current generator state if None.
        """
        if seed is not None:
            self._rng.seed(seed)
