"""
Evaluation Harness
==================

Plays an agent through every seed in the seed bank and reports score,
clears and how each round ended.

Usage:
    python -m arcade.evaluation.run_eval --agent contestants/baseline_greedy
    python -m arcade.evaluation.run_eval --agent my_agent.py --replays out/
"""

from __future__ import annotations

import argparse
import importlib.util
import json
import os
import sys
import time
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import numpy as np

from arcade.drop_core.env_gym import DropMatchEnv
from arcade.drop_core.replay_recorder import ReplayRecorder

ActFn = Callable[[Dict[str, np.ndarray]], int]


@dataclass
class EvalResult:
    """Outcome of one seed."""
    seed: int
    final_score: int
    clears: int
    pieces_locked: int
    termination_reason: str
    steps: int
    elapsed_time: float


@dataclass
class EvalSummary:
    """Aggregate over all seeds."""
    mean_score: float
    std_score: float
    min_score: int
    max_score: int
    median_score: float
    mean_clears: float
    topped_out: int
    timed_out: int
    total_time: float
    results: List[EvalResult]

    @classmethod
    def from_results(cls, results: List[EvalResult], total_time: float) -> "EvalSummary":
        scores = np.array([r.final_score for r in results], dtype=np.int64)
        reasons = [r.termination_reason for r in results]
        return cls(
            mean_score=float(scores.mean()),
            std_score=float(scores.std()),
            min_score=int(scores.min()),
            max_score=int(scores.max()),
            median_score=float(np.median(scores)),
            mean_clears=float(np.mean([r.clears for r in results])),
            topped_out=reasons.count("topped_out"),
            timed_out=reasons.count("time_up"),
            total_time=total_time,
            results=results
        )


def load_seed_bank(path: Optional[str] = None) -> List[int]:
    """Seeds from seed_bank.json (the bundled one if path is None)."""
    if path is None:
        path = os.path.join(os.path.dirname(__file__), "seed_bank.json")
    with open(path, "r") as f:
        return [int(s) for s in json.load(f)["seeds"]]


def load_agent(agent_path: str) -> ActFn:
    """
    Import an agent module and return its act callable.

    The module (a directory containing agent.py, or the file itself) must
    define either a `DropMatchAgent` class with an `act(obs)` method or a
    module-level `act(obs)` function.

    Raises:
        FileNotFoundError: No agent.py at the path.
        AttributeError: Module has neither entry point.
    """
    agent_path = Path(agent_path)
    agent_file = agent_path / "agent.py" if agent_path.is_dir() else agent_path
    if not agent_file.exists():
        raise FileNotFoundError(f"Agent file not found: {agent_file}")

    spec = importlib.util.spec_from_file_location("agent_module", agent_file)
    if spec is None or spec.loader is None:
        raise ImportError(f"Failed to load agent module from {agent_file}")
    module = importlib.util.module_from_spec(spec)
    sys.modules["agent_module"] = module
    spec.loader.exec_module(module)

    agent_cls = getattr(module, "DropMatchAgent", None)
    if agent_cls is not None:
        agent = agent_cls()
        if not hasattr(agent, "act"):
            raise AttributeError("DropMatchAgent class must have an 'act' method")
        return agent.act

    if hasattr(module, "act"):
        return module.act

    raise AttributeError(
        f"{agent_file} defines neither a DropMatchAgent class nor an act() function"
    )


def run_seed(
    agent_fn: ActFn,
    seed: int,
    config_path: Optional[str] = None,
    replay_dir: Optional[str] = None,
    agent_name: str = "agent"
) -> EvalResult:
    """
    Play one full round on `seed`.

    Args:
        agent_fn: Callable mapping an observation to a discrete action.
        seed: Round seed.
        config_path: Alternative game_config.yaml.
        replay_dir: If set, save the round's replay there.
        agent_name: Name stored in the replay.
    """
    env = DropMatchEnv(config_path=config_path)
    if replay_dir:
        env = ReplayRecorder(env, agent_name=agent_name)

    obs, info = env.reset(seed=seed)
    start = time.time()
    steps = 0
    while True:
        obs, _, terminated, truncated, info = env.step(agent_fn(obs))
        steps += 1
        if terminated or truncated:
            break
    elapsed = time.time() - start

    if replay_dir:
        env.save(directory=replay_dir)
    env.close()

    return EvalResult(
        seed=seed,
        final_score=int(info["score"]),
        clears=int(info["clears"]),
        pieces_locked=int(info["pieces_locked"]),
        termination_reason=info["terminated_reason"],
        steps=steps,
        elapsed_time=elapsed
    )


def evaluate_agent(
    agent_fn: ActFn,
    seeds: Optional[List[int]] = None,
    verbose: bool = True,
    config_path: Optional[str] = None,
    replay_dir: Optional[str] = None,
    agent_name: str = "agent"
) -> EvalSummary:
    """Run every seed and aggregate the results."""
    if seeds is None:
        seeds = load_seed_bank()

    results: List[EvalResult] = []
    total_start = time.time()
    for i, seed in enumerate(seeds, start=1):
        result = run_seed(agent_fn, seed, config_path, replay_dir, agent_name)
        results.append(result)
        if verbose:
            print(f"[{i:>2}/{len(seeds)}] seed {seed:>6}: score {result.final_score:>7}  "
                  f"clears {result.clears:>4}  {result.termination_reason:<10} "
                  f"{result.elapsed_time:6.2f}s")

    summary = EvalSummary.from_results(results, time.time() - total_start)
    if verbose:
        print_summary(summary)
    return summary


def print_summary(summary: EvalSummary) -> None:
    print()
    print("=" * 50)
    print(f"Seeds:         {len(summary.results)}")
    print(f"Score:         {summary.mean_score:.1f} +/- {summary.std_score:.1f} "
          f"(median {summary.median_score:.1f}, "
          f"range {summary.min_score}..{summary.max_score})")
    print(f"Clears/round:  {summary.mean_clears:.1f}")
    print(f"Ended by:      {summary.topped_out} top-out, {summary.timed_out} time-up")
    print(f"Wall time:     {summary.total_time:.2f}s")
    print("=" * 50)


def save_results(summary: EvalSummary, agent_name: str, output_path: str) -> None:
    """Write the summary and per-seed results as JSON."""
    data: Dict[str, Any] = {
        "agent": agent_name,
        "timestamp": time.strftime("%Y-%m-%d %H:%M:%S"),
    }
    data.update(asdict(summary))

    with open(output_path, "w") as f:
        json.dump(data, f, indent=2)
    print(f"Results saved to {output_path}")


def main() -> int:
    parser = argparse.ArgumentParser(description="Evaluate a Drop Match agent")
    parser.add_argument("--agent", required=True, help="Agent directory or agent.py file")
    parser.add_argument("--seeds", default=None, help="Seed bank JSON (default: bundled)")
    parser.add_argument("--config", default=None, help="game_config.yaml (default: bundled)")
    parser.add_argument("--output", default=None, help="Write results JSON here")
    parser.add_argument("--replays", default=None, help="Save one replay per seed in this directory")
    parser.add_argument("--quiet", action="store_true", help="Only print errors")
    args = parser.parse_args()

    agent_name = Path(args.agent).stem if Path(args.agent).is_file() else Path(args.agent).name
    try:
        agent_fn = load_agent(args.agent)
    except (FileNotFoundError, ImportError, AttributeError) as e:
        print(f"Error loading agent: {e}")
        return 1

    seeds = load_seed_bank(args.seeds) if args.seeds else None
    summary = evaluate_agent(
        agent_fn,
        seeds=seeds,
        verbose=not args.quiet,
        config_path=args.config,
        replay_dir=args.replays,
        agent_name=agent_name
    )

    if args.output:
        save_results(summary, agent_name, args.output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
