"""
State Snapshot
==============

Read-only views of a session for renderers, plus fixed-size numpy packing
for Gymnasium observations.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Tuple, TYPE_CHECKING
import numpy as np

from fruit_catcher.catch_core.item_catalog import ItemKind
from fruit_catcher.catch_core.rules import Lane

if TYPE_CHECKING:
    from fruit_catcher.catch_core.game import FallingItem
    from fruit_catcher.catch_core.perks import PerkState


KIND_CODES: Dict[ItemKind, int] = {
    ItemKind.FRUIT: 0,
    ItemKind.RANDOM_BOX: 1,
    ItemKind.HAZARD: 2,
}


@dataclass(frozen=True)
class ItemView:
    """Immutable copy of one falling item."""
    uid: int
    type_id: int
    name: str
    kind: ItemKind
    value: int
    icon: str
    lane: Lane
    y: float


@dataclass(frozen=True)
class PerkCounts:
    shield: int
    luck: int
    greed: int


@dataclass(frozen=True)
class SessionSnapshot:
    """
    Complete renderable state of a session at the end of a tick.

    Items are listed in spawn order.
    """
    items: Tuple[ItemView, ...]
    basket_lane: Lane
    score: int
    level: int
    paused_for_upgrade: bool
    perks: PerkCounts
    speed_offset: float
    active: bool
    tick: int

    def to_obs_dict(self, max_items: int) -> Dict[str, np.ndarray]:
        """
        Convert to a Gymnasium observation dictionary.

        Item arrays are sorted lowest-on-field first and padded to
        `max_items`; overflow items are left out.
        """
        item_lane = np.full(max_items, -1, dtype=np.int8)
        item_y = np.zeros(max_items, dtype=np.float32)
        item_kind = np.full(max_items, -1, dtype=np.int8)
        item_value = np.zeros(max_items, dtype=np.int32)
        item_mask = np.zeros(max_items, dtype=np.int8)

        ordered = sorted(self.items, key=lambda item: item.y, reverse=True)
        for i, item in enumerate(ordered[:max_items]):
            item_lane[i] = item.lane.index
            item_y[i] = item.y
            item_kind[i] = KIND_CODES[item.kind]
            item_value[i] = item.value
            item_mask[i] = 1

        return {
            "basket_lane": np.array(self.basket_lane.index, dtype=np.int64),
            "score": np.array(self.score, dtype=np.int64),
            "level": np.array(self.level, dtype=np.int32),
            "paused_for_upgrade": np.array(int(self.paused_for_upgrade), dtype=np.int64),
            "perks": np.array(
                [self.perks.shield, self.perks.luck, self.perks.greed],
                dtype=np.int32
            ),
            "speed_offset": np.array(self.speed_offset, dtype=np.float32),
            "items_count": np.array(len(self.items), dtype=np.int32),
            "item_lane": item_lane,
            "item_y": item_y,
            "item_kind": item_kind,
            "item_value": item_value,
            "item_mask": item_mask,
        }


class SnapshotBuilder:
    """Builds snapshots from live session state."""

    @staticmethod
    def build_item(item: "FallingItem") -> ItemView:
        item_type = item.item_type
        return ItemView(
            uid=item.uid,
            type_id=item_type.id,
            name=item_type.name,
            kind=item_type.kind,
            value=item_type.value,
            icon=item_type.icon,
            lane=item.lane,
            y=item.y
        )

    def build(
        self,
        items: Iterable["FallingItem"],
        basket_lane: Lane,
        score: int,
        level: int,
        paused_for_upgrade: bool,
        perks: "PerkState",
        speed_offset: float,
        active: bool,
        tick: int
    ) -> SessionSnapshot:
        """Build a snapshot from current session state."""
        return SessionSnapshot(
            items=tuple(self.build_item(item) for item in items),
            basket_lane=basket_lane,
            score=score,
            level=level,
            paused_for_upgrade=paused_for_upgrade,
            perks=PerkCounts(perks.shield, perks.luck, perks.greed),
            speed_offset=speed_offset,
            active=active,
            tick=tick
        )
