"""
Scoring System
==============

Applies catch results to the score. The score never drops below zero.
"""

from __future__ import annotations

from dataclasses import dataclass

from fruit_catcher.catch_core.item_catalog import ItemKind, ItemType
from fruit_catcher.catch_core.perks import PerkState
from fruit_catcher.catch_core.rng import SpawnPicker


@dataclass(frozen=True)
class CatchEvent:
    """Record of one item landing in the basket."""
    item_name: str
    kind: ItemKind
    delta: int                 # Signed contribution before clamping
    score: int                 # Score after applying (and clamping) delta
    absorbed: bool = False     # Hazard blocked by a shield
    clamped: bool = False      # Score hit the zero floor

    def __repr__(self) -> str:
        if self.absorbed:
            return f"CatchEvent({self.item_name}: absorbed by shield)"
        return f"CatchEvent({self.item_name}: {self.delta:+d} -> {self.score})"


class ScoreTracker:
    """
    Tracks session score and resolves catches.

    - Fruit: fixed positive value
    - Random box: payout rolled at catch time, widened by Greed
    - Hazard: fixed negative value unless a Shield absorbs it
    """

    def __init__(self, picker: SpawnPicker):
        """
        Initialize score tracker.

        Args:
            picker: Randomness source used for random box payouts.
        """
        self._picker = picker
        self._score: int = 0
        self._catches: int = 0

    @property
    def score(self) -> int:
        """Current total score."""
        return self._score

    @property
    def catches(self) -> int:
        """Total number of resolved catches."""
        return self._catches

    def apply_catch(self, item_type: ItemType, perks: PerkState) -> CatchEvent:
        """
        Apply the score effect of catching an item and return the event.

        Args:
            item_type: Type of the caught item.
            perks: Session perks (a shield may be consumed).

        Returns:
            CatchEvent describing the change.
        """
        self._catches += 1

        if item_type.is_hazard and perks.consume_shield():
            return CatchEvent(
                item_name=item_type.name,
                kind=item_type.kind,
                delta=0,
                score=self._score,
                absorbed=True
            )

        if item_type.is_random_box:
            delta = self._picker.roll_random_box(perks.greed)
        else:
            delta = item_type.value

        clamped = self._add(delta)
        return CatchEvent(
            item_name=item_type.name,
            kind=item_type.kind,
            delta=delta,
            score=self._score,
            clamped=clamped
        )

    def _add(self, points: int) -> bool:
        """Add points with a zero floor. Returns True if the floor applied."""
        self._score += points
        if self._score < 0:
            self._score = 0
            return True
        return False

    def reset(self) -> None:
        """Reset score to zero."""
        self._score = 0
        self._catches = 0
