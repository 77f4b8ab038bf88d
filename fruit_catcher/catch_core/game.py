"""
Catch Session
=============

Main game engine: one fixed-rate tick spawns, moves and resolves items,
applies scoring, and pauses for a perk choice at each level-up.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from fruit_catcher.catch_core.clock import wall_clock_ms
from fruit_catcher.catch_core.config_loader import GameConfig, get_config
from fruit_catcher.catch_core.item_catalog import ItemCatalog, ItemType
from fruit_catcher.catch_core.perks import Perk, PerkState
from fruit_catcher.catch_core.rng import SpawnPicker
from fruit_catcher.catch_core.rules import GameRules, LANES, Lane
from fruit_catcher.catch_core.scoring import CatchEvent, ScoreTracker
from fruit_catcher.catch_core.state_snapshot import ItemView, SessionSnapshot, SnapshotBuilder

logger = logging.getLogger(__name__)

ScoreChangeCallback = Callable[[int, int, int], None]
SnapshotCallback = Callable[[SessionSnapshot], None]
GameEndCallback = Callable[[int, int], None]


@dataclass
class FallingItem:
    """A live item owned by the session. Never handed out; see ItemView."""
    uid: int
    item_type: ItemType
    lane: Lane
    y: float


@dataclass
class TickResult:
    """Result of a single advance() call."""
    snapshot: SessionSnapshot
    spawned: Optional[ItemView]
    catches: List[CatchEvent]
    missed: int
    delta_score: int


class CatchSession:
    """
    Session engine for the three-lane catching game.

    Owns:
    - Falling items (spawn order)
    - Basket lane and speed offset
    - Score, level and perks
    - The level-up pause

    An external scheduler calls `advance()` at a fixed cadence (60 Hz
    nominal); front ends call the input methods between ticks. Input that is
    invalid for the current state is ignored, never raised.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        seed: Optional[int] = None,
        rng: Optional[random.Random] = None,
        clock: Optional[Callable[[], float]] = None
    ):
        """
        Initialize session.

        Args:
            config: Game configuration. Uses default if None.
            seed: Random seed for reproducibility.
            rng: Injected randomness source; overrides seed.
            clock: Millisecond time source. Wall clock if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._clock = clock if clock is not None else wall_clock_ms

        self._picker = SpawnPicker(config, seed=seed, rng=rng)
        self._catalog = self._picker.catalog
        self._rules = GameRules(config)
        self._scorer = ScoreTracker(self._picker)
        self._perks = PerkState()
        self._snapshot_builder = SnapshotBuilder()

        self._on_score_change: Optional[ScoreChangeCallback] = None
        self._on_state_snapshot: Optional[SnapshotCallback] = None
        self._on_game_end: Optional[GameEndCallback] = None

        # Session state
        self._level: int = 1
        self._active: bool = False
        self._paused_for_upgrade: bool = False
        self._basket_lane: Lane = Lane.CENTER
        self._speed_offset: float = 0.0
        self._spawn_interval_base: float = self._rules.spawn.base_interval
        self._last_spawn_time: float = 0.0
        self._items: List[FallingItem] = []
        self._next_uid: int = 0
        self._tick: int = 0
        self._ending: bool = False

    # --- Read access ---------------------------------------------------

    @property
    def config(self) -> GameConfig:
        return self._config

    @property
    def catalog(self) -> ItemCatalog:
        return self._catalog

    @property
    def rules(self) -> GameRules:
        return self._rules

    @property
    def picker(self) -> SpawnPicker:
        """The randomness source (for tools and tests)."""
        return self._picker

    @property
    def score(self) -> int:
        return self._scorer.score

    @property
    def level(self) -> int:
        return self._level

    @property
    def active(self) -> bool:
        return self._active

    @property
    def paused_for_upgrade(self) -> bool:
        return self._paused_for_upgrade

    @property
    def basket_lane(self) -> Lane:
        return self._basket_lane

    @property
    def speed_offset(self) -> float:
        return self._speed_offset

    @property
    def spawn_interval_base(self) -> float:
        return self._spawn_interval_base

    @property
    def last_spawn_time(self) -> float:
        return self._last_spawn_time

    @property
    def perks(self) -> PerkState:
        """Live perk counters (for debugging/tools)."""
        return self._perks

    @property
    def items(self) -> Tuple[ItemView, ...]:
        """Read-only copies of the live items, in spawn order."""
        return tuple(SnapshotBuilder.build_item(item) for item in self._items)

    @property
    def tick_count(self) -> int:
        """Number of advance() calls processed since start()."""
        return self._tick

    @property
    def move_speed(self) -> float:
        """Units an item falls per tick at the current level and offset."""
        return self._rules.difficulty.move_speed(self._level, self._speed_offset)

    # --- Observers -----------------------------------------------------

    def set_score_change_callback(self, callback: Optional[ScoreChangeCallback]) -> None:
        """Register fn(score, level, delta), fired after every catch."""
        self._on_score_change = callback

    def set_state_snapshot_callback(self, callback: Optional[SnapshotCallback]) -> None:
        """Register fn(snapshot), fired once per tick while active."""
        self._on_state_snapshot = callback

    def set_game_end_callback(self, callback: Optional[GameEndCallback]) -> None:
        """Register fn(final_score, final_level), fired once per stop()."""
        self._on_game_end = callback

    # --- Lifecycle -----------------------------------------------------

    def start(self, seed: Optional[int] = None) -> SessionSnapshot:
        """
        Reset all state and begin a new run.

        Args:
            seed: New random seed. Keeps the current generator if None.

        Returns:
            Initial session snapshot.
        """
        if self._ending:
            logger.warning("start() called from the game-end handler; ignored")
            return self.get_snapshot()

        self._picker.reset(seed)
        self._scorer.reset()
        self._perks.reset()
        self._items.clear()

        self._level = 1
        self._basket_lane = Lane.CENTER
        self._speed_offset = 0.0
        self._spawn_interval_base = self._rules.spawn.base_interval
        self._last_spawn_time = self._clock()
        self._next_uid = 0
        self._tick = 0
        self._paused_for_upgrade = False
        self._active = True

        logger.info("Session started (seed=%s)", seed)
        return self.get_snapshot()

    def stop(self) -> None:
        """
        End the run and notify the game-end observer.

        No-op when the session is not active.
        """
        if self._ending:
            logger.warning("stop() called from the game-end handler; ignored")
            return
        if not self._active:
            logger.debug("stop() called while inactive; ignored")
            return

        self._active = False
        logger.info(
            "Session stopped: score=%d level=%d ticks=%d",
            self.score, self._level, self._tick
        )

        if self._on_game_end is not None:
            self._ending = True
            try:
                self._on_game_end(self.score, self._level)
            finally:
                self._ending = False

    # --- Tick ----------------------------------------------------------

    def advance(self) -> TickResult:
        """
        Run one update step.

        Does nothing while inactive. While paused for an upgrade nothing
        spawns, moves or collides, but the snapshot is still published.

        Returns:
            TickResult with the new snapshot and what happened this tick.
        """
        if not self._active:
            return TickResult(
                snapshot=self.get_snapshot(),
                spawned=None,
                catches=[],
                missed=0,
                delta_score=0
            )

        self._tick += 1
        score_before = self.score
        spawned: Optional[ItemView] = None
        catches: List[CatchEvent] = []
        missed = 0

        if not self._paused_for_upgrade:
            spawned = self._spawn_if_due(self._clock())
            missed = self._move_and_resolve(catches)

        snapshot = self.get_snapshot()
        if self._on_state_snapshot is not None:
            self._on_state_snapshot(snapshot)

        return TickResult(
            snapshot=snapshot,
            spawned=spawned,
            catches=catches,
            missed=missed,
            delta_score=self.score - score_before
        )

    def _spawn_if_due(self, now: float) -> Optional[ItemView]:
        """Spawn one random item if the effective interval has elapsed."""
        if not self._rules.spawn.is_spawn_due(
            now,
            self._last_spawn_time,
            self._spawn_interval_base,
            self._speed_offset
        ):
            return None

        item_type = self._picker.pick_type(self._perks.luck)
        lane = self._picker.pick_lane()
        self._last_spawn_time = now
        return SnapshotBuilder.build_item(self._add_item(item_type, lane, self._rules.spawn.spawn_y))

    def _add_item(self, item_type: ItemType, lane: Lane, y: float) -> FallingItem:
        item = FallingItem(uid=self._next_uid, item_type=item_type, lane=lane, y=y)
        self._next_uid += 1
        self._items.append(item)
        return item

    def _move_and_resolve(self, catches: List[CatchEvent]) -> int:
        """
        Move every item and resolve catches, newest first.

        Args:
            catches: List to append catch events to.

        Returns:
            Number of items that fell past the field uncaught.
        """
        field = self._rules.field
        speed = self.move_speed
        missed = 0

        for i in range(len(self._items) - 1, -1, -1):
            item = self._items[i]
            item.y += speed

            if item.lane is self._basket_lane and field.in_catch_band(item.y):
                del self._items[i]
                catches.append(self._resolve_catch(item))
                continue

            if field.is_past_field(item.y):
                del self._items[i]
                missed += 1

        return missed

    def _resolve_catch(self, item: FallingItem) -> CatchEvent:
        """Apply a catch to the score and check for a level-up."""
        event = self._scorer.apply_catch(item.item_type, self._perks)
        logger.debug("Caught %r in %s", event, item.lane.value)

        if (
            not self._paused_for_upgrade
            and self._rules.difficulty.reached_level_up(self.score, self._level)
        ):
            self._paused_for_upgrade = True
            logger.info(
                "Level %d cleared at score %d; waiting for perk choice",
                self._level, self.score
            )

        if self._on_score_change is not None:
            self._on_score_change(self.score, self._level, event.delta)

        return event

    # --- Input ---------------------------------------------------------

    def set_basket_lane(self, lane: Union[Lane, str, int]) -> bool:
        """
        Move the basket straight to a lane.

        Returns:
            True if the request was applied.
        """
        if not self._active or self._paused_for_upgrade:
            logger.debug("set_basket_lane(%r) ignored: not accepting movement", lane)
            return False

        parsed = Lane.parse(lane)
        if parsed is None:
            logger.debug("set_basket_lane(%r) ignored: unknown lane", lane)
            return False

        self._basket_lane = parsed
        return True

    def shift_basket(self, step: int) -> bool:
        """Move the basket one lane left (negative step) or right (positive)."""
        if step == 0:
            return False
        index = self._basket_lane.index + (1 if step > 0 else -1)
        index = max(0, min(len(LANES) - 1, index))
        return self.set_basket_lane(LANES[index])

    def adjust_speed(self, delta: float) -> float:
        """
        Add to the speed offset, clamped to the configured bounds.

        Accepted in every state, including the level-up pause.

        Returns:
            The new speed offset.
        """
        self._speed_offset = self._rules.difficulty.clamp_speed_offset(
            self._speed_offset + delta
        )
        return self._speed_offset

    def select_perk(self, choice: Union[Perk, str, int]) -> bool:
        """
        Take a perk and leave the level-up pause.

        Only valid while the session is active and paused for an upgrade.

        Returns:
            True if the perk was applied.
        """
        if not self._active or not self._paused_for_upgrade:
            logger.debug("select_perk(%r) ignored: no pending level-up", choice)
            return False

        perk = Perk.parse(choice)
        if perk is None:
            logger.debug("select_perk(%r) ignored: unknown perk", choice)
            return False

        self._perks.grant(perk)
        self._level += 1
        self.adjust_speed(self._rules.difficulty.level_up_speed_bonus)
        self._paused_for_upgrade = False

        logger.info(
            "Perk %s chosen; now level %d (speed offset %.1f)",
            perk.value, self._level, self._speed_offset
        )
        return True

    # --- Tools ---------------------------------------------------------

    def force_spawn(
        self,
        name: str,
        lane: Union[Lane, str, int],
        y: Optional[float] = None
    ) -> ItemView:
        """
        Insert a catalog item directly, bypassing the spawn timer.

        Args:
            name: Item type name from the catalog.
            lane: Lane for the item.
            y: Starting position. Spawn line if None.

        Raises:
            KeyError: Unknown item name.
            ValueError: Unknown lane.
        """
        item_type = self._catalog.get_by_name(name)
        if item_type is None:
            raise KeyError(f"Unknown item type: {name}")
        parsed = Lane.parse(lane)
        if parsed is None:
            raise ValueError(f"Unknown lane: {lane!r}")

        start_y = self._rules.spawn.spawn_y if y is None else float(y)
        return SnapshotBuilder.build_item(self._add_item(item_type, parsed, start_y))

    def get_snapshot(self) -> SessionSnapshot:
        """Build a read-only snapshot of the current state."""
        return self._snapshot_builder.build(
            items=self._items,
            basket_lane=self._basket_lane,
            score=self.score,
            level=self._level,
            paused_for_upgrade=self._paused_for_upgrade,
            perks=self._perks,
            speed_offset=self._speed_offset,
            active=self._active,
            tick=self._tick
        )

    def get_info(self) -> Dict[str, Any]:
        """Get additional info dict for Gymnasium."""
        return {
            "score": self.score,
            "level": self._level,
            "ticks": self._tick,
            "catches": self._scorer.catches,
            "items_count": len(self._items),
            "paused_for_upgrade": self._paused_for_upgrade,
            "perks": self._perks.as_dict(),
            "speed_offset": self._speed_offset,
        }
