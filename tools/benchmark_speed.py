"""
Performance Benchmark
=====================

Measures session tick throughput and environment step throughput.

Usage:
    python -m tools.benchmark_speed [--ticks N] [--steps S] [--frame-skip K]
"""

from __future__ import annotations

import argparse
import sys
import time
import numpy as np

from fruit_catcher.catch_core.clock import SimulatedClock
from fruit_catcher.catch_core.config_loader import load_config
from fruit_catcher.catch_core.env_gym import CatchEnv
from fruit_catcher.catch_core.game import CatchSession
from fruit_catcher.catch_core.perks import PERK_MENU
from fruit_catcher.catch_core.rules import LANES


def benchmark_session(
    num_ticks: int = 10000,
    seed: int = 42
) -> dict:
    """
    Benchmark raw CatchSession without Gym overhead.

    A random lane is chosen every 10 ticks; level-up pauses are resolved
    immediately with a random perk.

    Args:
        num_ticks: Number of ticks.
        seed: Random seed.

    Returns:
        Dict with timing results.
    """
    config = load_config()
    clock = SimulatedClock(step_ms=config.timing.tick_ms)
    session = CatchSession(config=config, seed=seed, clock=clock)
    rng = np.random.default_rng(seed)

    session.start(seed=seed)
    start = time.perf_counter()

    for tick in range(num_ticks):
        if session.paused_for_upgrade:
            session.select_perk(PERK_MENU[int(rng.integers(0, len(PERK_MENU)))])
        elif tick % 10 == 0:
            session.set_basket_lane(LANES[int(rng.integers(0, len(LANES)))])
        clock.advance()
        session.advance()

    elapsed = time.perf_counter() - start
    final_score, final_level = session.score, session.level
    session.stop()

    return {
        "mode": "session",
        "num_steps": num_ticks,
        "elapsed_seconds": elapsed,
        "steps_per_second": num_ticks / elapsed,
        "ms_per_step": (elapsed * 1000) / num_ticks,
        "final_score": final_score,
        "final_level": final_level,
    }


def benchmark_env(
    num_steps: int = 2000,
    frame_skip: int = 4,
    seed: int = 42
) -> dict:
    """
    Benchmark CatchEnv with random actions.

    Args:
        num_steps: Number of env steps.
        frame_skip: Ticks per step.
        seed: Random seed.

    Returns:
        Dict with timing results.
    """
    env = CatchEnv(frame_skip=frame_skip)
    rng = np.random.default_rng(seed)

    obs, _ = env.reset(seed=seed)
    start = time.perf_counter()

    for _ in range(num_steps):
        action = int(rng.integers(0, env.action_space.n))
        obs, _, terminated, truncated, _ = env.step(action)
        if terminated or truncated:
            obs, _ = env.reset()

    elapsed = time.perf_counter() - start
    env.close()

    return {
        "mode": f"env (skip={frame_skip})",
        "num_steps": num_steps,
        "elapsed_seconds": elapsed,
        "steps_per_second": num_steps / elapsed,
        "ms_per_step": (elapsed * 1000) / num_steps,
    }


def run_all_benchmarks(
    ticks: int = 10000,
    steps: int = 2000,
    frame_skip: int = 4
) -> list:
    """Run comprehensive benchmarks."""
    results = []

    print("=" * 60)
    print("FRUIT CATCHER PERFORMANCE BENCHMARK")
    print("=" * 60)
    print()

    print("Benchmarking CatchSession (raw)...")
    result = benchmark_session(num_ticks=ticks)
    results.append(result)
    print(f"  Ticks/sec: {result['steps_per_second']:.1f}")
    print(f"  ms/tick:   {result['ms_per_step']:.4f}")
    print(f"  Final score {result['final_score']} at level {result['final_level']}")
    print()

    print("Benchmarking CatchEnv...")
    result = benchmark_env(num_steps=steps, frame_skip=frame_skip)
    results.append(result)
    print(f"  Steps/sec: {result['steps_per_second']:.1f}")
    print(f"  ms/step:   {result['ms_per_step']:.4f}")
    print()

    print("=" * 60)
    print("SUMMARY")
    print("=" * 60)
    print()
    print(f"{'Mode':<20} {'Steps/s':>12} {'ms/step':>10}")
    print("-" * 44)

    for r in results:
        print(f"{r['mode']:<20} {r['steps_per_second']:>12.1f} {r['ms_per_step']:>10.4f}")

    return results


def main():
    parser = argparse.ArgumentParser(description="Benchmark fruit catcher performance")
    parser.add_argument("--ticks", type=int, default=10000, help="Ticks for the raw session benchmark")
    parser.add_argument("--steps", type=int, default=2000, help="Steps for the env benchmark")
    parser.add_argument("--frame-skip", type=int, default=4, help="Ticks per env step")
    parser.add_argument("--quick", action="store_true", help="Quick benchmark (fewer steps)")

    args = parser.parse_args()

    run_all_benchmarks(
        ticks=1000 if args.quick else args.ticks,
        steps=200 if args.quick else args.steps,
        frame_skip=args.frame_skip
    )

    return 0


if __name__ == "__main__":
    sys.exit(main())
