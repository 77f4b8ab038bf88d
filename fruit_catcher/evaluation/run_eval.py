"""
Evaluation Harness
==================

Plays an agent through the seed bank and reports how it scored, how often
it caught something, how far it levelled and which perks it picked.

Usage:
    python -m fruit_catcher.evaluation.run_eval --agent agents/baseline_tracker
"""

from __future__ import annotations

import argparse
import importlib.util
import json
import logging
import os
import sys
import time
from collections import Counter
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional
import numpy as np

from fruit_catcher.catch_core.env_gym import CatchEnv
from fruit_catcher.catch_core.perks import PERK_MENU

logger = logging.getLogger(__name__)

AgentFn = Callable[[Dict[str, np.ndarray]], int]


@dataclass
class EpisodeResult:
    """Outcome of one seeded run."""
    seed: int
    final_score: int
    final_level: int
    ticks: int
    catches: int
    level_ups: int
    perks: Dict[str, int]
    elapsed_time: float

    @property
    def points_per_catch(self) -> float:
        return self.final_score / self.catches if self.catches else 0.0


@dataclass
class EvalSummary:
    """Aggregate over all seeds."""
    mean_score: float
    std_score: float
    min_score: int
    max_score: int
    median_score: float
    mean_level: float
    mean_catches: float
    perk_totals: Dict[str, int]
    total_time: float
    results: List[EpisodeResult] = field(default_factory=list)


def load_seed_bank(path: Optional[str] = None) -> List[int]:
    """
    Load the evaluation seed bank.

    Args:
        path: Path to seed_bank.json. Uses default if None.

    Returns:
        List of seeds.
    """
    if path is None:
        path = os.path.join(os.path.dirname(__file__), "seed_bank.json")

    with open(path, "r", encoding="utf-8") as f:
        return [int(seed) for seed in json.load(f)["seeds"]]


def load_agent(agent_path: str) -> AgentFn:
    """
    Import an agent from a directory holding agent.py, or from the file itself.

    The module must expose a `CatchAgent` class with an `act` method, or a
    module-level `act` function.

    Raises:
        FileNotFoundError: No agent file at the path.
        ImportError: The file could not be imported.
        AttributeError: Neither entry point exists.
    """
    path = Path(agent_path)
    agent_file = path / "agent.py" if path.is_dir() else path

    if not agent_file.exists():
        raise FileNotFoundError(f"Agent file not found: {agent_file}")

    module_spec = importlib.util.spec_from_file_location("catch_agent", agent_file)
    if module_spec is None or module_spec.loader is None:
        raise ImportError(f"Failed to load agent module from {agent_file}")

    module = importlib.util.module_from_spec(module_spec)
    sys.modules["catch_agent"] = module
    module_spec.loader.exec_module(module)

    agent_cls = getattr(module, "CatchAgent", None)
    if agent_cls is not None:
        agent = agent_cls()
        if not callable(getattr(agent, "act", None)):
            raise AttributeError("CatchAgent class must have an 'act' method")
        return agent.act

    act = getattr(module, "act", None)
    if callable(act):
        return act

    raise AttributeError(
        "Agent module must have either 'CatchAgent' class with 'act' method "
        "or standalone 'act' function"
    )


def play_episode(env: CatchEnv, agent_fn: AgentFn, seed: int) -> EpisodeResult:
    """
    Run one episode to truncation.

    Level-ups are counted when the session enters the perk pause; the
    agent's next action is its perk choice.
    """
    obs, info = env.reset(seed=seed)
    level_ups = 0
    was_paused = False
    start_time = time.time()

    truncated = False
    while not truncated:
        obs, _, _, truncated, info = env.step(int(agent_fn(obs)))
        paused = bool(info["paused_for_upgrade"])
        if paused and not was_paused:
            level_ups += 1
        was_paused = paused

    result = EpisodeResult(
        seed=seed,
        final_score=int(info["score"]),
        final_level=int(info["level"]),
        ticks=int(info["ticks"]),
        catches=int(info["catches"]),
        level_ups=level_ups,
        perks=dict(info["perks"]),
        elapsed_time=time.time() - start_time
    )

    logger.info(
        "Seed %d: score=%d level=%d catches=%d level_ups=%d (%.2fs)",
        seed, result.final_score, result.final_level, result.catches,
        result.level_ups, result.elapsed_time
    )
    return result


def summarize(results: List[EpisodeResult], total_time: float) -> EvalSummary:
    """Aggregate per-seed results with numpy statistics."""
    scores = np.array([r.final_score for r in results], dtype=np.float64)

    perk_totals: Counter = Counter({perk.value: 0 for perk in PERK_MENU})
    for r in results:
        perk_totals.update(r.perks)

    return EvalSummary(
        mean_score=float(scores.mean()),
        std_score=float(scores.std()),
        min_score=int(scores.min()),
        max_score=int(scores.max()),
        median_score=float(np.median(scores)),
        mean_level=float(np.mean([r.final_level for r in results])),
        mean_catches=float(np.mean([r.catches for r in results])),
        perk_totals=dict(perk_totals),
        total_time=total_time,
        results=list(results)
    )


def evaluate_agent(
    agent_fn: AgentFn,
    seeds: Optional[List[int]] = None,
    max_ticks: Optional[int] = None,
    frame_skip: int = 4,
    verbose: bool = True
) -> EvalSummary:
    """
    Evaluate an agent on every seed.

    Args:
        agent_fn: Agent's act function (obs) -> action.
        seeds: Seeds to play. Uses seed_bank.json if None.
        max_ticks: Episode length override.
        frame_skip: Ticks per agent decision.
        verbose: If True, print the report table.

    Returns:
        EvalSummary with aggregate statistics.

    Raises:
        ValueError: Empty seed list.
    """
    if seeds is None:
        seeds = load_seed_bank()
    if not seeds:
        raise ValueError("Seed list is empty")

    logger.info("Evaluating on %d seeds...", len(seeds))

    env = CatchEnv(frame_skip=frame_skip, max_ticks=max_ticks)
    total_start = time.time()
    try:
        results = [play_episode(env, agent_fn, seed) for seed in seeds]
    finally:
        env.close()

    summary = summarize(results, time.time() - total_start)
    if verbose:
        print(format_report(summary))
    return summary


def format_report(summary: EvalSummary) -> str:
    """Per-seed table followed by the aggregate line."""
    lines = [
        f"{'Seed':>6} {'Score':>8} {'Level':>6} {'Catches':>8} {'Pts/catch':>10}",
        "-" * 42,
    ]
    for r in summary.results:
        lines.append(
            f"{r.seed:>6} {r.final_score:>8} {r.final_level:>6} "
            f"{r.catches:>8} {r.points_per_catch:>10.1f}"
        )
    lines.append("-" * 42)
    lines.append(
        f"Score {summary.mean_score:.1f} +/- {summary.std_score:.1f} "
        f"(median {summary.median_score:.1f}, range {summary.min_score}..{summary.max_score})"
    )
    lines.append(
        f"Mean level {summary.mean_level:.2f}, mean catches {summary.mean_catches:.1f}"
    )
    perks = ", ".join(f"{name} {count}" for name, count in summary.perk_totals.items())
    lines.append(f"Perks taken: {perks}")
    lines.append(f"Total time {summary.total_time:.2f}s")
    return "\n".join(lines)


def save_results(summary: EvalSummary, agent_name: str, output_path: str) -> None:
    """Write the summary and per-seed results as JSON."""
    data = asdict(summary)
    data["agent"] = agent_name
    data["timestamp"] = time.strftime("%Y-%m-%d %H:%M:%S")

    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)

    logger.info("Results saved to %s", output_path)


def main():
    parser = argparse.ArgumentParser(description="Evaluate a catch agent")
    parser.add_argument("--agent", type=str, required=True,
                        help="Path to agent directory or agent.py file")
    parser.add_argument("--seeds", type=str, default=None,
                        help="Path to seed bank JSON (uses default if not specified)")
    parser.add_argument("--max-ticks", type=int, default=None,
                        help="Episode length in ticks (uses config caps if not specified)")
    parser.add_argument("--frame-skip", type=int, default=4,
                        help="Ticks per agent decision")
    parser.add_argument("--output", type=str, default=None,
                        help="Path to save results JSON")
    parser.add_argument("--quiet", action="store_true",
                        help="Only log warnings and skip the report table")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.WARNING if args.quiet else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    try:
        agent_fn = load_agent(args.agent)
    except (FileNotFoundError, ImportError, AttributeError) as e:
        logger.error("Error loading agent: %s", e)
        return 1

    seeds = load_seed_bank(args.seeds) if args.seeds else None

    summary = evaluate_agent(
        agent_fn,
        seeds=seeds,
        max_ticks=args.max_ticks,
        frame_skip=args.frame_skip,
        verbose=not args.quiet
    )

    if args.output:
        save_results(summary, Path(args.agent).name, args.output)

    return 0


if __name__ == "__main__":
    sys.exit(main())
