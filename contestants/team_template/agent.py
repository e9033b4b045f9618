"""
Team Template Agent
===================

Your agent must provide one of:
1. A `DropMatchAgent` class with an `act(obs) -> action` method
2. A standalone `act(obs) -> action` function

Actions are integers:
    0 = no-op, 1 = left, 2 = right, 3 = rotate, 4 = soft drop

The chosen key is held for the whole step. Holding the same key on
consecutive steps is one long press: it fires on the first step and then
auto-repeats, so alternate with 0 if you want separate taps.
"""

from __future__ import annotations

from typing import Dict
import numpy as np


class DropMatchAgent:
    """
    Your Drop Match agent implementation.

    Replace the strategy in `act()` with your own logic.
    """

    def __init__(self):
        """Initialize your agent. Load models, set up state, etc."""
        self.rng = np.random.default_rng()

    def act(self, obs: Dict[str, np.ndarray]) -> int:
        """
        Choose an action based on the observation.

        Args:
            obs: Dictionary containing game state (grid, current_piece,
                 next_piece, anchor_row, anchor_col, phase, score, ...).

        Returns:
            action: Integer in [0, 4].
        """
        return int(self.rng.integers(0, 5))

    def reset(self) -> None:
        """Called when a new episode starts (optional)."""
        pass


def act(obs: Dict[str, np.ndarray]) -> int:
    """Standalone act function (alternative to class-based agent)."""
    return int(np.random.randint(0, 5))
