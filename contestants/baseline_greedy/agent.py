"""
Baseline Greedy Agent - Plays the placement that clears the most right now.

This is a simple heuristic agent that, whenever a new piece appears, tries
every rotation and every anchor column on a copy of the grid: drop, settle,
resolve the whole cascade, and score the result. It then steers the piece
there (rotate, move, hold soft drop).

This serves as:
1. A working example of how to read observations and return actions
2. A baseline benchmark to compare against
3. A verification that the environment API works correctly

Strategy:
- Plan once per piece, when the Falling phase is first observed
- Value = points the cascade would award, minus a penalty on stack height
- Taps (rotate/left/right) alternate with a release so every press is a
  fresh edge for the engine's input counters
"""

from typing import Any, Dict, List, Optional, Tuple
import numpy as np

from arcade.drop_core.config_loader import GameConfig, load_config
from arcade.drop_core.env_gym import (
    ACTION_DROP,
    ACTION_LEFT,
    ACTION_NOOP,
    ACTION_RIGHT,
    ACTION_ROTATE,
)
from arcade.drop_core.game import Phase
from arcade.drop_core.grid import GridStore
from arcade.drop_core.scoring import score_clear
from arcade.drop_core.state_snapshot import column_heights

Triplet = Tuple[int, int, int]

# Penalty per row of the tallest column after placement
HEIGHT_PENALTY = 40.0


def rotations(triplet: Triplet) -> List[Triplet]:
    """Distinct cyclic rotations, in the order the engine's rotate produces them."""
    a, b, c = triplet
    result = []
    for candidate in ((a, b, c), (c, a, b), (b, c, a)):
        if candidate not in result:
            result.append(candidate)
    return result


class DropMatchAgent:
    """
    Greedy one-piece lookahead agent.
    """

    def __init__(self, config: Optional[GameConfig] = None, debug: bool = False):
        """
        Initialize the agent.

        Args:
            config: Game configuration. Loads the default if None.
            debug: If True, print decisions to stdout.
        """
        self._config = config if config is not None else load_config()
        self._grid = GridStore(self._config)
        self.debug = debug
        self._target: Optional[Tuple[Triplet, int]] = None
        self._last_action = ACTION_NOOP

    def reset(self, seed: Optional[int] = None) -> None:
        """Reset agent state for a new episode."""
        self._target = None
        self._last_action = ACTION_NOOP

    def act(self, observation: Dict[str, Any]) -> int:
        """
        Choose the next discrete action.

        Args:
            observation: Dict of numpy arrays from the environment.

        Returns:
            Action index (see arcade.drop_core.env_gym).
        """
        if int(observation["phase"]) != Phase.FALLING:
            self._target = None
            return self._send(ACTION_NOOP)

        current = tuple(int(k) for k in observation["current_piece"])
        if self._target is None or current not in rotations(self._target[0]):
            self._target = self._plan(observation)

        triplet, col = self._target
        anchor_col = int(observation["anchor_col"])

        if current != triplet:
            return self._tap(ACTION_ROTATE)
        if anchor_col < col:
            return self._tap(ACTION_RIGHT)
        if anchor_col > col:
            return self._tap(ACTION_LEFT)
        return self._send(ACTION_DROP)

    def _tap(self, action: int) -> int:
        if self._last_action == action:
            action = ACTION_NOOP
        return self._send(action)

    def _send(self, action: int) -> int:
        self._last_action = action
        return action

    def _plan(self, observation: Dict[str, Any]) -> Tuple[Triplet, int]:
        cells = np.asarray(observation["grid"])
        current = tuple(int(k) for k in observation["current_piece"])
        row = int(observation["anchor_row"])
        anchor_col = int(observation["anchor_col"])
        drop_interval = int(observation["drop_interval"])

        best: Optional[Tuple[float, Triplet, int]] = None
        for triplet in rotations(current):
            for col in range(2, self._grid.cols - 2):
                value = self._evaluate(cells, triplet, row, anchor_col, col, drop_interval)
                if value is None:
                    continue
                if best is None or value > best[0]:
                    best = (value, triplet, col)

        if best is None:
            return current, anchor_col

        if self.debug:
            print(f"[Greedy Agent] piece={current} -> {best[1]} at col {best[2]}, "
                  f"value={best[0]:.1f}")
        return best[1], best[2]

    def _evaluate(
        self,
        cells: np.ndarray,
        triplet: Triplet,
        row: int,
        from_col: int,
        to_col: int,
        drop_interval: int
    ) -> Optional[float]:
        """Value of placing `triplet` at `to_col`, or None if unreachable."""
        grid = self._grid
        grid.load(cells)

        # Path along the current row must be clear
        lo, hi = min(from_col, to_col) - 1, max(from_col, to_col) + 1
        if any(grid.get(row, c) != 0 for c in range(lo, hi + 1)):
            return None

        cols = (to_col - 1, to_col, to_col + 1)
        while grid.cells_empty(row + 1, cols):
            row += 1
        for col, kind in zip(cols, triplet):
            grid.set(row, col, kind)

        points = 0
        chain = 1
        while True:
            while grid.settle_step():
                pass
            cleared = grid.detect_matches()
            if cleared == 0:
                break
            award = score_clear(cleared, chain, 0, 0, drop_interval, self._config)
            points += award.award
            chain = award.chain_counter
            grid.clear_marked()

        heights = column_heights(grid.to_array())
        return points - HEIGHT_PENALTY * float(heights.max()) - float(heights.sum())


# Convenience function to create agent (used by evaluation harness)
def create_agent(**kwargs) -> DropMatchAgent:
    """Factory function to create an agent instance."""
    return DropMatchAgent(**kwargs)
