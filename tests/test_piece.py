"""
Tests for the active piece: movement, rotation, dropping and locking.
"""

import pytest

from arcade.drop_core.config_loader import load_config
from arcade.drop_core.grid import GridStore
from arcade.drop_core.piece import ActivePiece, Direction


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def grid(config):
    return GridStore(config)


@pytest.fixture
def piece(config):
    p = ActivePiece(config)
    p.reset((1, 2, 3), (4, 4, 4))
    return p


class TestActivePiece:
    """Test piece geometry and motion."""

    def test_spawns_at_configured_anchor(self, piece, config):
        assert piece.anchor_row == config.grid.spawn_row
        assert piece.anchor_col == config.grid.spawn_col
        assert piece.cells() == [(1, 3, 1), (1, 4, 2), (1, 5, 3)]

    def test_rotate_is_cyclic(self, piece):
        """Last slot wraps to the first; three rotations restore the order."""
        piece.rotate()
        assert piece.current == (3, 1, 2)
        piece.rotate()
        piece.rotate()
        assert piece.current == (1, 2, 3)

    def test_move_stops_at_walls(self, piece, grid):
        """The piece slides until its outer cell meets the border."""
        while piece.move(Direction.LEFT, grid):
            pass
        assert piece.anchor_col == 2

        while piece.move(Direction.RIGHT, grid):
            pass
        assert piece.anchor_col == grid.cols - 3

    def test_move_blocked_by_block(self, piece, grid):
        grid.set(1, 6, 1)
        assert not piece.move(Direction.RIGHT, grid)
        assert piece.anchor_col == 4
        assert piece.move(Direction.LEFT, grid)

    def test_drop_until_floor(self, piece, grid):
        drops = 0
        while piece.drop(grid):
            drops += 1
        assert drops == grid.rows - 3
        assert piece.anchor_row == grid.rows - 2

    def test_drop_blocked_by_any_cell_below(self, piece, grid):
        """A single occupied cell under any slot stops the fall."""
        grid.set(2, 5, 1)
        assert not piece.drop(grid)
        assert piece.anchor_row == 1

    def test_lock_writes_triplet(self, piece, grid):
        piece.anchor_row = 11
        piece.lock(grid)
        assert [grid.get(11, c) for c in (3, 4, 5)] == [1, 2, 3]

    def test_promote_and_reset_anchor(self, piece):
        piece.anchor_row, piece.anchor_col = 8, 2
        piece.promote((5, 5, 5))
        piece.reset_anchor()
        assert piece.current == (4, 4, 4)
        assert piece.next == (5, 5, 5)
        assert (piece.anchor_row, piece.anchor_col) == (1, 4)
