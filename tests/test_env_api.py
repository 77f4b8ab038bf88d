"""
Tests for Gymnasium environment API.
"""

import copy

import numpy as np
import pytest

from fruit_catcher.catch_core.config_loader import load_raw_config, parse_config
from fruit_catcher.catch_core.env_gym import CatchEnv
from fruit_catcher.catch_core.rules import Lane


@pytest.fixture
def env():
    env = CatchEnv()
    yield env
    env.close()


@pytest.fixture
def level_env():
    """Env with a 2999-point fruit so one catch nearly levels up."""
    raw = copy.deepcopy(load_raw_config())
    extras = [i for i in raw["items"] if i["kind"] != "fruit"]
    raw["items"] = [
        {"name": "pip", "kind": "fruit", "value": 1, "icon": "."},
        {"name": "big", "kind": "fruit", "value": 2999, "icon": "*"},
    ] + extras
    env = CatchEnv(config=parse_config(raw))
    yield env
    env.close()


class TestCatchEnv:
    """Test single environment API."""

    def test_reset_returns_obs_and_info(self, env):
        """Reset should return (observation, info) tuple."""
        result = env.reset(seed=42)

        assert isinstance(result, tuple)
        assert len(result) == 2

        obs, info = result
        assert isinstance(obs, dict)
        assert isinstance(info, dict)
        assert info["score"] == 0
        assert info["delta_score"] == 0

    def test_observation_in_space(self, env):
        """Observations should be members of observation_space."""
        obs, _ = env.reset(seed=42)
        assert env.observation_space.contains(obs)

        for _ in range(100):
            obs, *_ = env.step(env.action_space.sample())
            assert env.observation_space.contains(obs)

    def test_step_returns_five_tuple(self, env):
        """Step should return (obs, reward, terminated, truncated, info)."""
        env.reset(seed=42)
        result = env.step(1)

        assert len(result) == 5
        obs, reward, terminated, truncated, info = result
        assert isinstance(reward, float)
        assert terminated is False
        assert isinstance(truncated, bool)
        assert "catches_this_step" in info

    def test_frame_skip(self, env):
        """Each step advances frame_skip ticks."""
        env.reset(seed=42)
        env.step(1)
        env.step(1)
        assert env.session.tick_count == 8

    def test_action_moves_basket(self, env):
        env.reset(seed=42)
        obs, *_ = env.step(0)
        assert int(obs["basket_lane"]) == 0
        obs, *_ = env.step(np.array(2))
        assert int(obs["basket_lane"]) == 2

    def test_reward_is_score_delta(self, env):
        """Catching a banana yields 200 reward."""
        env.reset(seed=42)
        env.session.force_spawn("banana", Lane.CENTER, y=169)

        _, reward, _, _, info = env.step(1)

        assert reward == 200.0
        assert info["delta_score"] == 200
        assert info["catches_this_step"] == 1

    def test_truncation(self):
        """Episode truncates at max_ticks and the session stops."""
        env = CatchEnv(max_ticks=40, frame_skip=4)
        env.reset(seed=1)

        for _ in range(9):
            _, _, _, truncated, _ = env.step(1)
            assert not truncated

        _, _, _, truncated, _ = env.step(1)
        assert truncated
        assert not env.session.active
        env.close()

    def test_reset_after_truncation(self):
        env = CatchEnv(max_ticks=8, frame_skip=4)
        env.reset(seed=1)
        env.step(1)
        env.step(1)

        obs, info = env.reset(seed=2)

        assert env.session.active
        assert info["ticks"] == 0
        env.close()

    def test_invalid_frame_skip(self):
        with pytest.raises(ValueError):
            CatchEnv(frame_skip=0)

    def test_determinism(self):
        """Same seed and actions produce identical observations."""
        def rollout():
            env = CatchEnv()
            obs, _ = env.reset(seed=123)
            history = []
            for i in range(300):
                obs, reward, *_ = env.step(i % 3)
                history.append((obs["item_y"].copy(), obs["item_kind"].copy(), reward))
            env.close()
            return history

        first, second = rollout(), rollout()
        for (y1, k1, r1), (y2, k2, r2) in zip(first, second):
            np.testing.assert_array_equal(y1, y2)
            np.testing.assert_array_equal(k1, k2)
            assert r1 == r2


class TestLevelUpActions:
    """While paused, actions pick perks."""

    def test_pause_breaks_step(self, level_env):
        """The step stops on the level-up tick."""
        level_env.reset(seed=1)
        level_env.session.force_spawn("big", Lane.CENTER, y=169)
        level_env.session.force_spawn("pip", Lane.CENTER, y=169)

        obs, reward, _, _, info = level_env.step(1)

        assert reward == 3000.0
        assert info["paused_for_upgrade"]
        assert int(obs["paused_for_upgrade"]) == 1
        assert level_env.session.tick_count == 1

    def test_action_selects_perk(self, level_env):
        level_env.reset(seed=1)
        level_env.session.force_spawn("big", Lane.CENTER, y=169)
        level_env.session.force_spawn("pip", Lane.CENTER, y=169)
        level_env.step(1)

        obs, _, _, _, info = level_env.step(2)

        assert info["level"] == 2
        assert info["perks"] == {"shield": 0, "luck": 0, "greed": 1}
        assert not info["paused_for_upgrade"]
        assert int(obs["basket_lane"]) == 1
