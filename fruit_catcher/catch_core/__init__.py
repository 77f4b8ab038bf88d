"""
Catch Core - The game-state engine.

This module provides the tick-driven session engine, its Gymnasium wrapper,
and all supporting systems (config, spawn table, RNG, rules, scoring).

Main exports:
- CatchSession: Session engine (start/stop, advance, input, observers)
- CatchEnv: Gymnasium environment for agents
- GameConfig: Configuration loaded from game_config.yaml
- Lane, Perk: Input vocabularies
"""

from fruit_catcher.catch_core.config_loader import GameConfig, load_config, parse_config
from fruit_catcher.catch_core.item_catalog import ItemCatalog, ItemKind, ItemType
from fruit_catcher.catch_core.rules import LANES, Lane
from fruit_catcher.catch_core.perks import Perk, PerkState
from fruit_catcher.catch_core.clock import SimulatedClock
from fruit_catcher.catch_core.state_snapshot import ItemView, SessionSnapshot
from fruit_catcher.catch_core.game import CatchSession, TickResult
from fruit_catcher.catch_core.env_gym import CatchEnv

__all__ = [
    "GameConfig",
    "load_config",
    "parse_config",
    "ItemCatalog",
    "ItemKind",
    "ItemType",
    "LANES",
    "Lane",
    "Perk",
    "PerkState",
    "SimulatedClock",
    "ItemView",
    "SessionSnapshot",
    "CatchSession",
    "TickResult",
    "CatchEnv",
]
