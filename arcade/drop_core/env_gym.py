"""
Gymnasium Environment Wrapper
=============================

Provides a standard Gymnasium interface to the Drop Match puzzle.
Reward is always 0.0 - agents compute their own from info.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Tuple, Union
import numpy as np

import gymnasium as gym
from gymnasium import spaces

from arcade.drop_core.config_loader import GameConfig, load_config
from arcade.drop_core.game import CoreGame, Phase
from arcade.drop_core.input_state import InputTracker, Key

# Discrete action -> key held for the step
ACTION_NOOP = 0
ACTION_LEFT = 1
ACTION_RIGHT = 2
ACTION_ROTATE = 3
ACTION_DROP = 4

ACTION_KEYS = {
    ACTION_NOOP: (),
    ACTION_LEFT: (Key.LEFT,),
    ACTION_RIGHT: (Key.RIGHT,),
    ACTION_ROTATE: (Key.ROTATE,),
    ACTION_DROP: (Key.DOWN,),
}


class DropMatchEnv(gym.Env):
    """
    Drop Match puzzle as a Gymnasium environment.

    Action Space:
        Discrete(5): noop, left, right, rotate, soft drop.
        The action's key is held for the whole step; holding the same key on
        consecutive steps counts as one long press (edge, then auto-repeat).

    Observation Space:
        Dict mirroring GameSnapshot.to_obs_dict().

    Reward:
        Always 0.0. Agents must compute their own reward from the info dict.

    Info:
        Contains score, delta_score, countdown, phase, terminated_reason, etc.
    """

    metadata = {
        "render_modes": ["human", "rgb_array"],
        "render_fps": 30,
    }

    def __init__(
        self,
        config_path: Optional[str] = None,
        render_mode: Optional[str] = None,
        frame_skip: Optional[int] = None,
        image_width: Optional[int] = None,
        image_height: Optional[int] = None,
        debug: bool = False,
    ):
        """
        Initialize environment.

        Args:
            config_path: Path to game_config.yaml. Uses default if None.
            render_mode: "human" for window, "rgb_array" for numpy, None for headless.
            frame_skip: Ticks per step. Uses config value if None.
            image_width: Override render image width.
            image_height: Override render image height.
            debug: Print every step to stdout.
        """
        super().__init__()

        self._config = load_config(config_path)

        self.render_mode = render_mode
        self._debug = debug
        self._frame_skip = frame_skip or self._config.observation.frame_skip
        self._img_width = image_width or self._config.observation.image_width
        self._img_height = image_height or self._config.observation.image_height

        self._game = CoreGame(config=self._config)
        self._tracker = InputTracker(self._config)

        # Lazily created
        self._renderer = None
        self._window = None
        self._clock = None

        self.action_space = spaces.Discrete(len(ACTION_KEYS))
        self.observation_space = self._build_observation_space()

        if self._debug:
            print(f"[DEBUG] DropMatchEnv initialized")
            print(f"[DEBUG]   Grid: {self._config.grid.rows}x{self._config.grid.cols}")
            print(f"[DEBUG]   Round ticks: {self._config.timing.round_ticks}")
            print(f"[DEBUG]   Frame skip: {self._frame_skip}")

    def _build_observation_space(self) -> spaces.Dict:
        """Box per snapshot field; bounds follow the grid size and difficulty range."""
        rows, cols = self._config.grid.rows, self._config.grid.cols
        num_kinds = self._config.num_kinds
        max_int = np.iinfo(np.int64).max

        return spaces.Dict({
            "grid": spaces.Box(low=-1, high=num_kinds, shape=(rows, cols), dtype=np.int8),
            "clear_mask": spaces.Box(low=0, high=1, shape=(rows, cols), dtype=np.int8),
            "current_piece": spaces.Box(low=1, high=num_kinds, shape=(3,), dtype=np.int8),
            "next_piece": spaces.Box(low=1, high=num_kinds, shape=(3,), dtype=np.int8),
            "anchor_row": spaces.Box(low=0, high=rows - 1, shape=(), dtype=np.int32),
            "anchor_col": spaces.Box(low=0, high=cols - 1, shape=(), dtype=np.int32),
            "phase": spaces.Box(low=0, high=len(Phase) - 1, shape=(), dtype=np.int32),
            "score": spaces.Box(low=0, high=max_int, shape=(), dtype=np.int64),
            "high_score": spaces.Box(low=0, high=max_int, shape=(), dtype=np.int64),
            "countdown": spaces.Box(low=0, high=np.iinfo(np.int32).max, shape=(), dtype=np.int32),
            "drop_interval": spaces.Box(
                low=self._config.difficulty.min_drop_interval,
                high=self._config.difficulty.initial_drop_interval,
                shape=(), dtype=np.int32
            ),
            "chain_counter": spaces.Box(low=1, high=max_int, shape=(), dtype=np.int64),
            "kind_pool": spaces.Box(low=1, high=num_kinds, shape=(), dtype=np.int32),
            "column_heights": spaces.Box(low=0, high=rows - 2, shape=(cols - 2,), dtype=np.int32),
            "max_height": spaces.Box(low=0, high=rows - 2, shape=(), dtype=np.int32),
        })

    def reset(
        self,
        *,
        seed: Optional[int] = None,
        options: Optional[Dict[str, Any]] = None
    ) -> Tuple[Dict[str, np.ndarray], Dict[str, Any]]:
        """
        Reset the environment.

        Args:
            seed: Seeds the triplet generator. Keeps the current stream if None.
            options: Ignored.

        Returns:
            (observation, info) tuple.
        """
        super().reset(seed=seed)

        snapshot = self._game.reset(seed=seed)
        self._tracker.reset()

        obs = snapshot.to_obs_dict()
        info = self._game.get_info()
        info["delta_score"] = 0

        return obs, info

    def step(
        self,
        action: Union[int, np.ndarray]
    ) -> Tuple[Dict[str, np.ndarray], float, bool, bool, Dict[str, Any]]:
        """
        Execute one step of `frame_skip` ticks.

        Args:
            action: Discrete action index.

        Returns:
            (observation, reward, terminated, truncated, info) tuple.
            Reward is always 0.0.
        """
        if isinstance(action, np.ndarray):
            action = int(action.item() if action.ndim == 0 else action[0])
        action = int(action)
        if action not in ACTION_KEYS:
            raise ValueError(f"Invalid action {action}, expected 0..{len(ACTION_KEYS) - 1}")

        score_before = self._game.score
        clears_before = self._game.round.clears

        for _ in range(self._frame_skip):
            snapshot_in = self._tracker.update(ACTION_KEYS[action])
            self._game.tick(snapshot_in)
            if self._game.is_over:
                break

        obs = self._game.snapshot().to_obs_dict()

        reward = 0.0

        reason = self._game.termination_reason
        terminated = reason == "topped_out"
        truncated = reason == "time_up"

        info = self._game.get_info()
        info["delta_score"] = self._game.score - score_before
        info["delta_clears"] = self._game.round.clears - clears_before

        if self._debug:
            print(f"[DEBUG] Step: action={action}, delta_score={info['delta_score']}, "
                  f"phase={info['phase']}, countdown={info['countdown']}")
            if terminated or truncated:
                print(f"[DEBUG] ROUND OVER: {reason}")

        if self.render_mode == "human":
            self.render()

        return obs, reward, terminated, truncated, info

    def _render_to_array(self) -> np.ndarray:
        """Frame from the solid renderer at the configured image size."""
        if self._renderer is None:
            from arcade.drop_core.render_solid import SolidRenderer
            self._renderer = SolidRenderer(self._config)

        render_data = self._game.get_render_data()
        return self._renderer.render(render_data, self._img_width, self._img_height)

    def render(self) -> Optional[np.ndarray]:
        """Frame for "rgb_array"; draws to the window and returns None for "human"."""
        if self.render_mode == "rgb_array":
            return self._render_to_array()

        if self.render_mode == "human":
            self._render_to_window(self._render_to_array())

        return None

    def _render_to_window(self, frame: np.ndarray) -> None:
        import pygame

        if self._window is None:
            pygame.init()
            self._window = pygame.display.set_mode((self._img_width, self._img_height))
            pygame.display.set_caption("Drop Match")
            self._clock = pygame.time.Clock()

        pygame.event.pump()
        surface = pygame.surfarray.make_surface(np.transpose(frame, (1, 0, 2)))
        self._window.blit(surface, (0, 0))
        pygame.display.flip()
        self._clock.tick(self.metadata["render_fps"])

    def close(self) -> None:
        """Clean up resources."""
        if self._renderer is not None:
            self._renderer.close()
            self._renderer = None
        if self._window is not None:
            import pygame
            pygame.display.quit()
            self._window = None

    @property
    def game(self) -> CoreGame:
        """The wrapped CoreGame."""
        return self._game

    @property
    def config(self) -> GameConfig:
        """Game configuration."""
        return self._config
