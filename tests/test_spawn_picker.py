"""
Tests for the spawn picker RNG.
"""

from collections import Counter

import pytest

from fruit_catcher.catch_core.config_loader import load_config
from fruit_catcher.catch_core.item_catalog import ItemKind
from fruit_catcher.catch_core.rng import SpawnPicker
from fruit_catcher.catch_core.rules import LANES


@pytest.fixture
def config():
    return load_config()


class TestHazardChance:
    """Luck lowers the hazard probability down to a floor."""

    def test_base_chance(self, config):
        """No luck means the configured 15%."""
        picker = SpawnPicker(config, seed=1)
        assert picker.hazard_chance(0) == pytest.approx(0.15)

    def test_luck_steps(self, config):
        """Each luck level removes 3 points."""
        picker = SpawnPicker(config, seed=1)
        assert picker.hazard_chance(1) == pytest.approx(0.12)
        assert picker.hazard_chance(2) == pytest.approx(0.09)
        assert picker.hazard_chance(3) == pytest.approx(0.06)

    def test_monotonic_with_floor(self, config):
        """Chance never increases with luck and never drops below 0.05."""
        picker = SpawnPicker(config, seed=1)
        chances = [picker.hazard_chance(luck) for luck in range(20)]

        for prev, cur in zip(chances, chances[1:]):
            assert cur <= prev
        assert min(chances) == pytest.approx(0.05)
        assert all(c >= 0.05 for c in chances)


class TestKindSelection:
    """One uniform draw decides the kind."""

    def test_low_draw_is_hazard(self, config, scripted_rng):
        """A draw under the hazard chance spawns the hazard."""
        picker = SpawnPicker(config, rng=scripted_rng(draws=[0.10]))
        assert picker.pick_type(luck_level=0).kind is ItemKind.HAZARD

    def test_middle_draw_is_random_box(self, config, scripted_rng):
        """A draw in [hazard, hazard + 0.15) spawns the random box."""
        picker = SpawnPicker(config, rng=scripted_rng(draws=[0.20]))
        assert picker.pick_type(luck_level=0).kind is ItemKind.RANDOM_BOX

    def test_high_draw_is_fruit(self, config, scripted_rng):
        """Anything above spawns a fruit."""
        picker = SpawnPicker(config, rng=scripted_rng(draws=[0.50]))
        assert picker.pick_type(luck_level=0).kind is ItemKind.FRUIT

    def test_luck_shifts_boundaries(self, config, scripted_rng):
        """With luck 2 the hazard band ends at 0.09 and the box band at 0.24."""
        picker = SpawnPicker(config, rng=scripted_rng(draws=[0.10, 0.25]))
        assert picker.pick_type(luck_level=2).kind is ItemKind.RANDOM_BOX
        assert picker.pick_type(luck_level=2).kind is ItemKind.FRUIT

    def test_hazard_fraction(self, config):
        """Over 1000 trials about 15% are hazards."""
        picker = SpawnPicker(config, seed=42)
        kinds = Counter(picker.pick_type(0).kind for _ in range(1000))

        assert kinds[ItemKind.HAZARD] / 1000 == pytest.approx(0.15, abs=0.04)
        assert kinds[ItemKind.RANDOM_BOX] / 1000 == pytest.approx(0.15, abs=0.04)
        assert kinds[ItemKind.FRUIT] / 1000 == pytest.approx(0.70, abs=0.05)

    def test_all_fruits_appear(self, config):
        """Fruit choice covers the whole table."""
        picker = SpawnPicker(config, seed=7)
        names = {picker.pick_type(0).name for _ in range(500)}
        assert {"apple", "banana", "melon", "orange"} <= names


class TestLaneSelection:
    """Lanes are uniform and independent of kind."""

    def test_only_valid_lanes(self, config):
        """Every pick is one of the three lanes, and all appear."""
        picker = SpawnPicker(config, seed=3)
        lanes = Counter(picker.pick_lane() for _ in range(600))

        assert set(lanes) == set(LANES)
        for lane in LANES:
            assert lanes[lane] > 120


class TestRandomBox:
    """Payout range widens with Greed."""

    def test_base_range(self, config):
        picker = SpawnPicker(config, seed=1)
        assert picker.random_box_range(0) == (-200, 600)

    def test_greed_range(self, config):
        """bonus = greed * 100; range [-200 + bonus, 600 + 2 * bonus]."""
        picker = SpawnPicker(config, seed=1)
        assert picker.random_box_range(1) == (-100, 800)
        assert picker.random_box_range(2) == (0, 1000)

    def test_rolls_inside_range(self, config):
        """Rolls are inclusive of both ends and never leave the range."""
        picker = SpawnPicker(config, seed=5)
        rolls = [picker.roll_random_box(1) for _ in range(2000)]
        assert min(rolls) >= -100
        assert max(rolls) <= 800


class TestDeterminism:
    """Same seed, same run."""

    def test_same_seed_same_sequence(self, config):
        p1 = SpawnPicker(config, seed=42)
        p2 = SpawnPicker(config, seed=42)

        seq1 = [(p1.pick_type(0).name, p1.pick_lane()) for _ in range(50)]
        seq2 = [(p2.pick_type(0).name, p2.pick_lane()) for _ in range(50)]

        assert seq1 == seq2

    def test_reset_restores_sequence(self, config):
        """Re-seeding replays the sequence."""
        picker = SpawnPicker(config, seed=42)
        first = [picker.pick_type(0).name for _ in range(20)]

        picker.reset(seed=42)
        again = [picker.pick_type(0).name for _ in range(20)]

        assert first == again
