"""
Replay Recorder
===============

Episodes are fully determined by the seed, the config and the action list,
so a replay stores just those plus per-step scores for verification.

Usage:
    env = ReplayRecorder(DropMatchEnv(), agent_name="greedy")
    obs, info = env.reset(seed=42)
    while True:
        obs, _, terminated, truncated, info = env.step(agent(obs))
        if terminated or truncated:
            break
    env.save("greedy_s42.json")

    replay = load_replay("greedy_s42.json")
    assert replay_actions(DropMatchEnv(), replay.seed, replay.actions,
                          replay.config_hash) == replay.scores
"""

from __future__ import annotations

import json
import hashlib
from dataclasses import asdict, dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

import numpy as np
import gymnasium as gym

from arcade.drop_core.config_loader import GameConfig, load_config

PathLike = Union[str, Path]


def generate_replay_filename(
    agent_name: str = "replay",
    seed: Optional[int] = None,
    directory: Optional[PathLike] = None
) -> Path:
    """
    Timestamped replay path: {agent_name}_{YYYYMMDD_HHMMSS}[_s{seed}].json
    """
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    suffix = f"_s{seed}" if seed is not None else ""
    path = Path(f"{agent_name}_{stamp}{suffix}.json")
    return Path(directory) / path if directory else path


def compute_config_hash(config: Optional[GameConfig] = None) -> str:
    """Short digest of every parameter that changes how an action list plays out."""
    if config is None:
        config = load_config()

    grid, timing, diff = config.grid, config.timing, config.difficulty
    relevant = {
        "grid": [grid.rows, grid.cols, grid.spawn_row, grid.spawn_col],
        "timing": [timing.round_ticks, timing.input_guard_ticks, timing.clear_ticks],
        "drop": [diff.initial_drop_interval, diff.min_drop_interval],
        "pool": [[step.max_score, step.kinds] for step in diff.kind_pool],
        "scoring": [
            config.scoring.base_points,
            config.scoring.time_bonus,
            config.scoring.time_bonus_divisor,
        ],
        "input": [config.input.repeat_after_ticks, config.input.soft_drop_zone_ticks],
        "frame_skip": config.observation.frame_skip,
        "kinds": config.num_kinds,
    }
    digest = hashlib.md5(json.dumps(relevant, sort_keys=True).encode())
    return digest.hexdigest()[:8]


@dataclass
class Replay:
    """One recorded episode."""
    seed: Optional[int]
    agent: str
    config_hash: str
    actions: List[int] = field(default_factory=list)
    scores: List[int] = field(default_factory=list)
    clears: int = 0
    termination_reason: str = ""

    @property
    def final_score(self) -> int:
        return self.scores[-1] if self.scores else 0

    @property
    def total_steps(self) -> int:
        return len(self.actions)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["final_score"] = self.final_score
        data["total_steps"] = self.total_steps
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Replay":
        return cls(
            seed=data.get("seed"),
            agent=data.get("agent", "unknown"),
            config_hash=data.get("config_hash", ""),
            actions=[int(a) for a in data.get("actions", [])],
            scores=[int(s) for s in data.get("scores", [])],
            clears=int(data.get("clears", 0)),
            termination_reason=data.get("termination_reason", ""),
        )


class ReplayRecorder(gym.Wrapper):
    """
    Gymnasium wrapper that records every action taken through it.

    Each reset() starts a new Replay; step() appends the action and the
    score after it. If auto_save_path is set the replay is written when the
    episode ends.
    """

    def __init__(
        self,
        env: gym.Env,
        agent_name: str = "unknown",
        auto_save_path: Optional[PathLike] = None
    ):
        super().__init__(env)
        self.agent_name = agent_name
        self.auto_save_path = auto_save_path
        self._config_hash = compute_config_hash(getattr(env, "config", None))
        self._replay = Replay(seed=None, agent=agent_name, config_hash=self._config_hash)

    @property
    def replay(self) -> Replay:
        """Episode recorded so far."""
        return self._replay

    def reset(self, *, seed: Optional[int] = None, options: Optional[Dict] = None):
        self._replay = Replay(seed=seed, agent=self.agent_name, config_hash=self._config_hash)
        return self.env.reset(seed=seed, options=options)

    def step(self, action: Union[int, np.ndarray]):
        action = int(np.asarray(action).reshape(-1)[0])
        obs, reward, terminated, truncated, info = self.env.step(action)

        self._replay.actions.append(action)
        self._replay.scores.append(int(info.get("score", 0)))
        self._replay.clears += int(info.get("delta_clears", 0))

        if terminated or truncated:
            self._replay.termination_reason = info.get("terminated_reason", "")
            if self.auto_save_path:
                self.save(self.auto_save_path)

        return obs, reward, terminated, truncated, info

    def get_replay_data(self) -> Dict[str, Any]:
        """Recorded episode as a JSON-ready dict."""
        return self._replay.to_dict()

    def save(
        self,
        path: Optional[PathLike] = None,
        overwrite: bool = True,
        directory: Optional[PathLike] = None
    ) -> Path:
        """
        Write the replay as JSON.

        Args:
            path: Target file. Auto-generated from agent name and seed if None.
            overwrite: Refuse to replace an existing file when False.
            directory: Where to put an auto-generated file.

        Returns:
            The path written.
        """
        if path is None:
            path = generate_replay_filename(self.agent_name, self._replay.seed, directory)
        path = Path(path)

        if path.exists() and not overwrite:
            raise FileExistsError(f"Replay file already exists: {path}")
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w") as f:
            json.dump(self._replay.to_dict(), f, indent=2)

        print(f"Replay saved: {path} (seed={self._replay.seed}, "
              f"steps={self._replay.total_steps}, score={self._replay.final_score})")
        return path


def record_episode(
    env: gym.Env,
    agent_fn: Callable,
    seed: int,
    save_path: Optional[PathLike] = None,
    agent_name: str = "unknown",
    max_steps: Optional[int] = None
) -> Dict[str, Any]:
    """
    Play one episode with `agent_fn` and return its replay dict.

    Stops at termination, truncation or after max_steps steps.
    """
    recorder = ReplayRecorder(env, agent_name=agent_name)
    obs, _ = recorder.reset(seed=seed)

    steps = 0
    while max_steps is None or steps < max_steps:
        obs, _, terminated, truncated, _ = recorder.step(agent_fn(obs))
        steps += 1
        if terminated or truncated:
            break

    if save_path:
        recorder.save(save_path)
    return recorder.get_replay_data()


def load_replay(path: PathLike) -> Replay:
    """Read a replay file written by ReplayRecorder.save()."""
    with open(path, "r") as f:
        return Replay.from_dict(json.load(f))


def replay_actions(
    env: gym.Env,
    seed: Optional[int],
    actions: Sequence[int],
    config_hash: Optional[str] = None
) -> List[int]:
    """
    Re-run a recorded action list and return the score after every step.

    Args:
        env: Fresh environment built with the same config.
        seed: Seed the episode was recorded with.
        actions: Recorded actions.
        config_hash: If given, must match the environment's config.

    Raises:
        ValueError: If config_hash does not match.
    """
    if config_hash is not None:
        current = compute_config_hash(getattr(env, "config", None))
        if current != config_hash:
            raise ValueError(f"Replay config hash {config_hash} != current {current}")

    env.reset(seed=seed)
    scores = []
    for action in actions:
        _, _, terminated, truncated, info = env.step(int(action))
        scores.append(int(info["score"]))
        if terminated or truncated:
            break
    return scores
