"""
Item Catalog
============

Provides convenient access to the spawn table loaded from config.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from fruit_catcher.catch_core.config_loader import GameConfig, ItemConfig, get_config


class ItemKind(str, Enum):
    """How an item resolves when it lands in the basket."""
    FRUIT = "fruit"
    RANDOM_BOX = "random_box"
    HAZARD = "hazard"


@dataclass(frozen=True)
class ItemType:
    """
    Runtime representation of an item type.

    Wraps ItemConfig with the parsed kind and convenience predicates.
    """
    config: ItemConfig

    @property
    def id(self) -> int:
        return self.config.id

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def kind(self) -> ItemKind:
        return ItemKind(self.config.kind)

    @property
    def value(self) -> int:
        return self.config.value

    @property
    def icon(self) -> str:
        return self.config.icon

    @property
    def is_fruit(self) -> bool:
        return self.kind is ItemKind.FRUIT

    @property
    def is_random_box(self) -> bool:
        return self.kind is ItemKind.RANDOM_BOX

    @property
    def is_hazard(self) -> bool:
        return self.kind is ItemKind.HAZARD

    def __repr__(self) -> str:
        return f"ItemType({self.id}: {self.name}, {self.kind.value})"


class ItemCatalog:
    """
    Collection of all item types in the spawn table.

    Fruits are picked uniformly; the random box and the hazard are unique.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize catalog from game config.

        Args:
            config: GameConfig instance. If None, loads from default location.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._types: Tuple[ItemType, ...] = tuple(
            ItemType(item_config) for item_config in config.items
        )
        self._fruits = tuple(t for t in self._types if t.is_fruit)
        self._random_box = next(t for t in self._types if t.is_random_box)
        self._hazard = next(t for t in self._types if t.is_hazard)

    def __iter__(self):
        """Iterate over all item types."""
        return iter(self._types)

    @property
    def fruits(self) -> Tuple[ItemType, ...]:
        """Good fruit types, in config order."""
        return self._fruits

    @property
    def random_box(self) -> ItemType:
        """The random box type."""
        return self._random_box

    @property
    def hazard(self) -> ItemType:
        """The hazard (bomb) type."""
        return self._hazard

    def get_by_name(self, name: str) -> Optional[ItemType]:
        """Get item type by name (case-insensitive)."""
        name_lower = name.lower()
        for item_type in self._types:
            if item_type.name.lower() == name_lower:
                return item_type
        return None
