"""
Tests for the evaluation harness and the bundled agents.
"""

import copy
import json
from pathlib import Path

import numpy as np
import pytest

from fruit_catcher.catch_core.clock import SimulatedClock
from fruit_catcher.catch_core.config_loader import load_config, load_raw_config, parse_config
from fruit_catcher.catch_core.env_gym import CatchEnv
from fruit_catcher.catch_core.game import CatchSession
from fruit_catcher.catch_core.rules import Lane
from fruit_catcher.evaluation.run_eval import (
    EpisodeResult,
    evaluate_agent,
    format_report,
    load_agent,
    load_seed_bank,
    play_episode,
    save_results,
    summarize,
)

AGENTS_DIR = Path(__file__).resolve().parent.parent / "agents"


@pytest.fixture
def baseline():
    return load_agent(str(AGENTS_DIR / "baseline_tracker"))


@pytest.fixture
def session():
    s = CatchSession(config=load_config(), seed=0, clock=SimulatedClock())
    s.start()
    return s


def observe(session):
    return session.get_snapshot().to_obs_dict(32)


class TestHarness:
    """Seed bank, agent loading and scoring runs."""

    def test_seed_bank(self):
        seeds = load_seed_bank()
        assert len(seeds) == 10
        assert all(isinstance(s, int) for s in seeds)

    def test_load_class_agent(self, baseline):
        """A CatchAgent class is instantiated and its act returned."""
        assert callable(baseline)

    def test_load_function_agent(self, tmp_path):
        """A module with only act() works too."""
        agent_file = tmp_path / "agent.py"
        agent_file.write_text("def act(obs):\n    return 1\n", encoding="utf-8")

        agent_fn = load_agent(str(tmp_path))

        assert agent_fn({}) == 1

    def test_load_missing_agent(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_agent(str(tmp_path / "nowhere"))

    def test_load_agent_without_entry_point(self, tmp_path):
        agent_file = tmp_path / "agent.py"
        agent_file.write_text("VALUE = 3\n", encoding="utf-8")
        with pytest.raises(AttributeError):
            load_agent(str(agent_file))

    def test_single_seed(self, baseline):
        env = CatchEnv(max_ticks=400)
        result = play_episode(env, baseline, seed=11)
        env.close()

        assert result.seed == 11
        assert result.final_score >= 0
        assert result.final_level >= 1
        assert 400 <= result.ticks < 404
        assert result.level_ups == 0
        assert result.catches >= 0

    def test_evaluate_agent(self, baseline):
        summary = evaluate_agent(baseline, seeds=[1, 2], max_ticks=600, verbose=False)

        assert len(summary.results) == 2
        assert summary.min_score <= summary.mean_score <= summary.max_score
        for r in summary.results:
            assert 600 <= r.ticks < 604

    def test_empty_seeds_rejected(self, baseline):
        with pytest.raises(ValueError):
            evaluate_agent(baseline, seeds=[], verbose=False)

    def test_save_results(self, baseline, tmp_path):
        summary = evaluate_agent(baseline, seeds=[5], max_ticks=200, verbose=False)
        out = tmp_path / "results.json"

        save_results(summary, "baseline_tracker", str(out))

        data = json.loads(out.read_text(encoding="utf-8"))
        assert data["agent"] == "baseline_tracker"
        assert data["results"][0]["seed"] == 5
        assert "catches" in data["results"][0]
        assert "level_ups" in data["results"][0]
        assert set(data["perk_totals"]) == {"shield", "luck", "greed"}

    def test_baseline_beats_nothing(self, baseline):
        """Tracking items should score something over a minute of play."""
        summary = evaluate_agent(baseline, seeds=[42], max_ticks=3600, verbose=False)
        assert summary.max_score > 0


class TestBaselineAgent:
    """Heuristic decisions on hand-built fields."""

    def test_prefers_fruit_over_bomb(self, baseline, session):
        session.force_spawn("apple", Lane.LEFT, y=100)
        session.force_spawn("bomb", Lane.CENTER, y=150)

        assert baseline(observe(session)) == 0

    def test_stays_when_field_empty(self, baseline, session):
        session.set_basket_lane(Lane.RIGHT)
        assert baseline(observe(session)) == 2

    def test_dodges_bomb_into_empty_lane(self, baseline, session):
        session.force_spawn("bomb", Lane.CENTER, y=150)
        assert baseline(observe(session)) in (0, 2)

    def test_ignores_items_below_basket(self, baseline, session):
        """An item already past the catch line is not chased."""
        session.force_spawn("melon", Lane.LEFT, y=210)
        assert baseline(observe(session)) == 1

    def test_perk_order(self):
        from agents.baseline_tracker import CatchAgent

        agent = CatchAgent()
        assert agent.choose_perk(np.array([0, 0, 0])) == 0
        assert agent.choose_perk(np.array([1, 0, 0])) == 1
        assert agent.choose_perk(np.array([1, 3, 0])) == 2

    def test_shield_makes_bomb_harmless(self):
        from agents.baseline_tracker import CatchAgent

        session = CatchSession(config=load_config(), seed=0, clock=SimulatedClock())
        session.start()
        session.perks.shield = 1
        session.force_spawn("bomb", Lane.LEFT, y=150)

        values = CatchAgent().lane_values(observe(session))

        assert values[0] == 0.0
        assert np.isnan(values[1]) and np.isnan(values[2])


class TestBenchmarkTool:
    """Smoke runs of the throughput benchmark."""

    def test_session_benchmark(self):
        from tools.benchmark_speed import benchmark_session

        result = benchmark_session(num_ticks=500, seed=3)

        assert result["num_steps"] == 500
        assert result["steps_per_second"] > 0
        assert result["final_level"] >= 1

    def test_env_benchmark(self):
        from tools.benchmark_speed import benchmark_env

        result = benchmark_env(num_steps=50, frame_skip=2, seed=3)
        assert result["mode"] == "env (skip=2)"


class TestReporting:
    """Level-up counting, aggregation and the report table."""

    def test_level_up_counted_and_perk_recorded(self):
        raw = copy.deepcopy(load_raw_config())
        extras = [i for i in raw["items"] if i["kind"] != "fruit"]
        raw["items"] = [
            {"name": "pip", "kind": "fruit", "value": 1, "icon": "."},
            {"name": "big", "kind": "fruit", "value": 2999, "icon": "*"},
        ] + extras
        env = CatchEnv(config=parse_config(raw), max_ticks=40)
        seeded = []

        def agent(obs):
            if not seeded:
                seeded.append(True)
                env.session.force_spawn("big", Lane.CENTER, y=169)
                env.session.force_spawn("pip", Lane.CENTER, y=169)
            if int(obs["paused_for_upgrade"]):
                return 0
            return 1

        result = play_episode(env, agent, seed=3)
        env.close()

        assert result.level_ups == 1
        assert result.final_level == 2
        assert result.catches == 2
        assert result.final_score == 3000
        assert result.perks == {"shield": 1, "luck": 0, "greed": 0}
        assert result.points_per_catch == pytest.approx(1500)

    def test_summarize(self):
        results = [
            EpisodeResult(1, 100, 1, 600, 2, 0, {"shield": 0, "luck": 0, "greed": 0}, 0.1),
            EpisodeResult(2, 300, 3, 600, 6, 2, {"shield": 1, "luck": 1, "greed": 0}, 0.1),
        ]

        summary = summarize(results, total_time=0.2)

        assert summary.mean_score == 200
        assert summary.min_score == 100
        assert summary.max_score == 300
        assert summary.mean_level == 2
        assert summary.mean_catches == 4
        assert summary.perk_totals == {"shield": 1, "luck": 1, "greed": 0}

    def test_report_lists_every_seed(self):
        results = [
            EpisodeResult(11, 0, 1, 600, 0, 0, {"shield": 0, "luck": 0, "greed": 0}, 0.1),
            EpisodeResult(23, 450, 1, 600, 3, 0, {"shield": 0, "luck": 0, "greed": 0}, 0.1),
        ]

        report = format_report(summarize(results, total_time=0.2))

        assert "    11" in report
        assert "    23" in report
        assert "150.0" in report
        assert "Perks taken: shield 0, luck 0, greed 0" in report
