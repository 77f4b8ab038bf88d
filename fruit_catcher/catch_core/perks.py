"""
Perks
=====

Upgrades chosen at each level-up pause:

- Shield: absorbs one hazard catch per stack
- Luck: lowers the hazard spawn chance
- Greed: widens the random box payout range
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Union


class Perk(str, Enum):
    SHIELD = "shield"
    LUCK = "luck"
    GREED = "greed"

    @classmethod
    def parse(cls, value: Union["Perk", str, int, None]) -> Optional["Perk"]:
        """
        Interpret a perk request from a front end.

        Accepts a Perk, its name (case-insensitive) or the 1-based menu
        number shown on the level-up overlay (1 = Shield, 2 = Luck, 3 = Greed).
        Returns None for anything else.
        """
        if isinstance(value, Perk):
            return value
        if isinstance(value, str):
            try:
                return Perk(value.strip().lower())
            except ValueError:
                return None
        if isinstance(value, int) and not isinstance(value, bool):
            if 1 <= value <= len(PERK_MENU):
                return PERK_MENU[value - 1]
        return None


PERK_MENU = (Perk.SHIELD, Perk.LUCK, Perk.GREED)


@dataclass
class PerkState:
    """Cumulative perk counts for one session."""
    shield: int = 0
    luck: int = 0
    greed: int = 0

    def grant(self, perk: Perk) -> None:
        """Add one stack of the given perk."""
        if perk is Perk.SHIELD:
            self.shield += 1
        elif perk is Perk.LUCK:
            self.luck += 1
        elif perk is Perk.GREED:
            self.greed += 1

    def consume_shield(self) -> bool:
        """Use up one shield if any is left."""
        if self.shield > 0:
            self.shield -= 1
            return True
        return False

    def reset(self) -> None:
        self.shield = 0
        self.luck = 0
        self.greed = 0

    def as_dict(self) -> Dict[str, int]:
        return {"shield": self.shield, "luck": self.luck, "greed": self.greed}
