"""
Grid Store
==========

Owns the playfield matrix and the parallel clear mask.

The playfield is surrounded by a permanent border of -1 cells, so every
neighbour lookup from an interior cell stays in bounds and "is this neighbour
empty" is a plain comparison against 0.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Tuple
import numpy as np

from arcade.drop_core.config_loader import GameConfig, get_config
from arcade.drop_core.block_catalog import BORDER, EMPTY

# Alignment patterns as pairs of neighbour offsets around a centre cell.
MATCH_PATTERNS: Tuple[Tuple[Tuple[int, int], Tuple[int, int]], ...] = (
    ((-1, 0), (1, 0)),    # vertical
    ((0, -1), (0, 1)),    # horizontal
    ((1, -1), (-1, 1)),   # diagonal "/"
    ((-1, -1), (1, 1)),   # diagonal "\"
)


class GridStore:
    """
    Fixed-size playfield with border sentinels and a clear mask.

    Cell values: -1 border, 0 empty, 1..max_kind block kind.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize an empty bordered grid.

        Args:
            config: Game configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._rows = config.grid.rows
        self._cols = config.grid.cols
        self._max_kind = config.num_kinds

        self._cells = np.zeros((self._rows, self._cols), dtype=np.int8)
        self._mask = np.zeros((self._rows, self._cols), dtype=np.bool_)
        self.reset()

    @property
    def rows(self) -> int:
        return self._rows

    @property
    def cols(self) -> int:
        return self._cols

    @property
    def shape(self) -> Tuple[int, int]:
        return (self._rows, self._cols)

    def reset(self) -> None:
        """Write the border, zero the interior and clear the mask."""
        self._cells[:] = EMPTY
        self._cells[0, :] = BORDER
        self._cells[-1, :] = BORDER
        self._cells[:, 0] = BORDER
        self._cells[:, -1] = BORDER
        self._mask[:] = False

    def _check_bounds(self, row: int, col: int) -> None:
        if not (0 <= row < self._rows and 0 <= col < self._cols):
            raise IndexError(
                f"Cell ({row}, {col}) outside grid {self._rows}x{self._cols}"
            )

    def is_border(self, row: int, col: int) -> bool:
        return row in (0, self._rows - 1) or col in (0, self._cols - 1)

    def get(self, row: int, col: int) -> int:
        """Cell value at (row, col)."""
        self._check_bounds(row, col)
        return int(self._cells[row, col])

    def set(self, row: int, col: int, value: int) -> None:
        """
        Write an interior cell.

        Raises:
            IndexError: Coordinates outside the grid.
            ValueError: Border cell, or value outside 0..max_kind.
        """
        self._check_bounds(row, col)
        if self.is_border(row, col):
            raise ValueError(f"Border cell ({row}, {col}) is immutable")
        if not 0 <= value <= self._max_kind:
            raise ValueError(f"Invalid cell value {value} (expected 0..{self._max_kind})")
        self._cells[row, col] = value

    def is_empty(self, row: int, col: int) -> bool:
        return self.get(row, col) == EMPTY

    def cells_empty(self, row: int, cols: Iterable[int]) -> bool:
        """True if every listed cell on the row is empty."""
        return all(self.get(row, col) == EMPTY for col in cols)

    def is_marked(self, row: int, col: int) -> bool:
        self._check_bounds(row, col)
        return bool(self._mask[row, col])

    def to_array(self) -> np.ndarray:
        """Copy of the playfield."""
        return self._cells.copy()

    def mask_array(self) -> np.ndarray:
        """Copy of the clear mask."""
        return self._mask.copy()

    def load(self, cells: np.ndarray) -> None:
        """
        Replace the interior from a full-size array (border must match).

        Used by agents and tests to set up positions.
        """
        cells = np.asarray(cells)
        if cells.shape != self.shape:
            raise ValueError(f"Expected shape {self.shape}, got {cells.shape}")
        interior = cells[1:-1, 1:-1]
        if interior.min() < EMPTY or interior.max() > self._max_kind:
            raise ValueError("Interior values must be in 0..max_kind")
        self._cells[1:-1, 1:-1] = interior
        self._mask[:] = False

    def copy(self) -> "GridStore":
        clone = GridStore(self._config)
        clone._cells[:] = self._cells
        clone._mask[:] = self._mask
        return clone

    # ------------------------------------------------------------------
    # Gravity
    # ------------------------------------------------------------------

    def settle_step(self) -> bool:
        """
        One bottom-up gravity pass.

        Each positive cell with an empty cell directly below moves down one
        row. Rows are visited from the bottom up, so a floating column drops
        by exactly one row per pass.

        Returns:
            True if any cell moved.
        """
        cells = self._cells
        moved = False
        # Last interior row rests on the border; start one above it.
        for row in range(self._rows - 3, 0, -1):
            falling = (cells[row] > EMPTY) & (cells[row + 1] == EMPTY)
            if falling.any():
                cells[row + 1, falling] = cells[row, falling]
                cells[row, falling] = EMPTY
                moved = True
        return moved

    def is_settled(self) -> bool:
        """True if no block sits directly above an empty cell."""
        upper = self._cells[1:-2]
        lower = self._cells[2:-1]
        return not bool(((upper > EMPTY) & (lower == EMPTY)).any())

    # ------------------------------------------------------------------
    # Match detection
    # ------------------------------------------------------------------

    def _interior(self, array: np.ndarray, dr: int = 0, dc: int = 0) -> np.ndarray:
        """View of the interior shifted by (dr, dc)."""
        return array[1 + dr:self._rows - 1 + dr, 1 + dc:self._cols - 1 + dc]

    def detect_matches(self) -> int:
        """
        Mark every aligned triple into the clear mask.

        A positive interior cell matches when both neighbours of any pattern
        (vertical, horizontal, "/" or "\\") hold the same kind; the centre and
        both neighbours are marked. Marking is an OR, so rerunning on an
        unchanged grid leaves the mask unchanged.

        Returns:
            Number of marked cells.
        """
        centre = self._interior(self._cells)
        positive = centre > EMPTY

        for (ra, ca), (rb, cb) in MATCH_PATTERNS:
            hit = (
                positive
                & (self._interior(self._cells, ra, ca) == centre)
                & (self._interior(self._cells, rb, cb) == centre)
            )
            if not hit.any():
                continue
            self._interior(self._mask)[hit] = True
            self._interior(self._mask, ra, ca)[hit] = True
            self._interior(self._mask, rb, cb)[hit] = True

        return self.marked_count

    @property
    def marked_count(self) -> int:
        return int(self._mask.sum())

    def marked_cells(self) -> List[Tuple[int, int]]:
        """Marked coordinates in row-major order."""
        rows, cols = np.nonzero(self._mask)
        return [(int(r), int(c)) for r, c in zip(rows, cols)]

    def clear_marked(self) -> int:
        """
        Empty every marked cell and reset its mask entry.

        Returns:
            Number of cells cleared.
        """
        count = self.marked_count
        self._cells[self._mask] = EMPTY
        self._mask[:] = False
        return count

    def __repr__(self) -> str:
        glyphs = {BORDER: "#", EMPTY: "."}
        lines = [
            "".join(glyphs.get(int(v), str(int(v))) for v in row)
            for row in self._cells
        ]
        return "GridStore(\n  " + "\n  ".join(lines) + "\n)"
