"""
State Snapshot
==============

Packs game state into fixed-size numpy arrays for Gymnasium observations.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, TYPE_CHECKING
import numpy as np

from arcade.drop_core.config_loader import GameConfig, get_config
from arcade.drop_core.block_catalog import EMPTY

if TYPE_CHECKING:
    from arcade.drop_core.grid import GridStore
    from arcade.drop_core.piece import ActivePiece


@dataclass
class GameSnapshot:
    """
    Complete observable game state.

    Grid-shaped arrays include the border rows and columns.
    """
    # Playfield
    grid: np.ndarray                  # (rows, cols) int8
    clear_mask: np.ndarray            # (rows, cols) bool

    # Piece
    current_piece: np.ndarray         # (3,) int8
    next_piece: np.ndarray            # (3,) int8
    anchor_row: int
    anchor_col: int

    # Round
    phase: int
    score: int
    high_score: int
    countdown: int
    drop_interval: int
    chain_counter: int
    kind_pool: int
    ticks: int

    # Derived
    column_heights: np.ndarray        # (cols - 2,) int32, stack height per interior column
    max_height: int
    filled_cells: int

    def to_obs_dict(self) -> Dict[str, np.ndarray]:
        """Convert to Gymnasium observation dictionary."""
        return {
            "grid": self.grid,
            "clear_mask": self.clear_mask.astype(np.int8),
            "current_piece": self.current_piece,
            "next_piece": self.next_piece,
            "anchor_row": np.array(self.anchor_row, dtype=np.int32),
            "anchor_col": np.array(self.anchor_col, dtype=np.int32),
            "phase": np.array(self.phase, dtype=np.int32),
            "score": np.array(self.score, dtype=np.int64),
            "high_score": np.array(self.high_score, dtype=np.int64),
            "countdown": np.array(self.countdown, dtype=np.int32),
            "drop_interval": np.array(self.drop_interval, dtype=np.int32),
            "chain_counter": np.array(self.chain_counter, dtype=np.int64),
            "kind_pool": np.array(self.kind_pool, dtype=np.int32),
            "column_heights": self.column_heights,
            "max_height": np.array(self.max_height, dtype=np.int32),
        }


def column_heights(cells: np.ndarray) -> np.ndarray:
    """
    Stack height of each interior column, counted from the floor.

    Height is measured to the topmost block, so holes below it still count.
    """
    interior = cells[1:-1, 1:-1]
    rows = interior.shape[0]
    occupied = interior > EMPTY
    any_block = occupied.any(axis=0)
    top = np.argmax(occupied, axis=0)
    return np.where(any_block, rows - top, 0).astype(np.int32)


class SnapshotBuilder:
    """Builds GameSnapshot objects from engine components."""

    def __init__(self, config: Optional[GameConfig] = None):
        if config is None:
            config = get_config()
        self._config = config

    def build(
        self,
        grid: "GridStore",
        piece: "ActivePiece",
        phase: int,
        score: int,
        high_score: int,
        countdown: int,
        drop_interval: int,
        chain_counter: int,
        kind_pool: int,
        ticks: int
    ) -> GameSnapshot:
        cells = grid.to_array()
        heights = column_heights(cells)
        return GameSnapshot(
            grid=cells,
            clear_mask=grid.mask_array(),
            current_piece=np.array(piece.current, dtype=np.int8),
            next_piece=np.array(piece.next, dtype=np.int8),
            anchor_row=piece.anchor_row,
            anchor_col=piece.anchor_col,
            phase=int(phase),
            score=score,
            high_score=high_score,
            countdown=countdown,
            drop_interval=drop_interval,
            chain_counter=chain_counter,
            kind_pool=kind_pool,
            ticks=ticks,
            column_heights=heights,
            max_height=int(heights.max()) if heights.size else 0,
            filled_cells=int((cells[1:-1, 1:-1] > EMPTY).sum()),
        )
