"""
Active Piece
============

The falling 3-cell horizontal piece and its next-piece preview.
"""

from __future__ import annotations

from enum import IntEnum
from typing import List, Optional, Tuple

from arcade.drop_core.config_loader import GameConfig, get_config
from arcade.drop_core.block_catalog import EMPTY
from arcade.drop_core.grid import GridStore

Triplet = Tuple[int, int, int]


class Direction(IntEnum):
    LEFT = -1
    RIGHT = 1


class ActivePiece:
    """
    Current and next triplets plus the anchor of the current one.

    The current triplet covers (anchor_row, anchor_col - 1 .. anchor_col + 1).
    Its cells are not part of the grid until lock() writes them.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        if config is None:
            config = get_config()

        self._config = config
        self._spawn_row = config.grid.spawn_row
        self._spawn_col = config.grid.spawn_col
        self.current: Triplet = (1, 1, 1)
        self.next: Triplet = (1, 1, 1)
        self.anchor_row = self._spawn_row
        self.anchor_col = self._spawn_col

    def reset(self, current: Triplet, next_triplet: Triplet) -> None:
        """Seed both triplets and move the anchor to spawn."""
        self.current = tuple(current)
        self.next = tuple(next_triplet)
        self.reset_anchor()

    def reset_anchor(self) -> None:
        self.anchor_row = self._spawn_row
        self.anchor_col = self._spawn_col

    def promote(self, fresh_next: Triplet) -> None:
        """Next becomes current; `fresh_next` becomes the preview."""
        self.current = self.next
        self.next = tuple(fresh_next)

    @property
    def columns(self) -> Tuple[int, int, int]:
        return (self.anchor_col - 1, self.anchor_col, self.anchor_col + 1)

    def cells(self) -> List[Tuple[int, int, int]]:
        """(row, col, kind) for each slot of the current triplet."""
        return [(self.anchor_row, col, kind) for col, kind in zip(self.columns, self.current)]

    def can_move_to(self, direction: Direction, grid: GridStore) -> bool:
        """
        True if shifting one column in `direction` keeps the piece clear.

        Moving a 3-wide piece by one column only uncovers the slot two
        columns from the anchor on that side, so that cell must be empty.
        """
        return grid.get(self.anchor_row, self.anchor_col + 2 * int(direction)) == EMPTY

    def move(self, direction: Direction, grid: GridStore) -> bool:
        if not self.can_move_to(direction, grid):
            return False
        self.anchor_col += int(direction)
        return True

    def rotate(self) -> None:
        """Cyclic shift: the last slot wraps round to the first."""
        a, b, c = self.current
        self.current = (c, a, b)

    def can_drop(self, grid: GridStore) -> bool:
        return grid.cells_empty(self.anchor_row + 1, self.columns)

    def drop(self, grid: GridStore) -> bool:
        """Move down one row if the three cells below are empty."""
        if not self.can_drop(grid):
            return False
        self.anchor_row += 1
        return True

    def lock(self, grid: GridStore) -> None:
        """Write the current triplet into the grid at the anchor row."""
        for row, col, kind in self.cells():
            grid.set(row, col, kind)

    def __repr__(self) -> str:
        return (f"ActivePiece(current={self.current}, next={self.next}, "
                f"anchor=({self.anchor_row}, {self.anchor_col}))")
