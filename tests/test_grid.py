"""
Tests for the grid store: border, gravity and match detection.
"""

import pytest
import numpy as np

from arcade.drop_core.config_loader import load_config
from arcade.drop_core.grid import GridStore


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def grid(config):
    return GridStore(config)


class TestBorder:
    """Test border sentinels and bounds checks."""

    def test_border_surrounds_empty_interior(self, grid):
        """Fresh grid: -1 on every edge, 0 inside."""
        cells = grid.to_array()
        assert (cells[0, :] == -1).all()
        assert (cells[-1, :] == -1).all()
        assert (cells[:, 0] == -1).all()
        assert (cells[:, -1] == -1).all()
        assert (cells[1:-1, 1:-1] == 0).all()

    def test_border_is_immutable(self, grid):
        """Writing to a border cell is rejected."""
        with pytest.raises(ValueError):
            grid.set(0, 3, 1)
        with pytest.raises(ValueError):
            grid.set(5, grid.cols - 1, 1)

    def test_out_of_range_coordinates(self, grid):
        """Coordinates outside the matrix raise IndexError."""
        with pytest.raises(IndexError):
            grid.get(grid.rows, 0)
        with pytest.raises(IndexError):
            grid.set(-1, 3, 1)

    def test_invalid_kind_rejected(self, grid, config):
        """Only 0..num_kinds may be written."""
        with pytest.raises(ValueError):
            grid.set(5, 3, config.num_kinds + 1)
        with pytest.raises(ValueError):
            grid.set(5, 3, -1)

    def test_reset_clears_interior(self, grid):
        grid.set(11, 3, 2)
        grid.reset()
        assert grid.is_empty(11, 3)

    def test_load_requires_matching_shape(self, grid):
        with pytest.raises(ValueError):
            grid.load(np.zeros((3, 3), dtype=np.int8))


class TestGravity:
    """Test the one-row-per-pass settle step."""

    def test_single_block_falls_to_floor(self, grid):
        """A block at the top reaches the bottom interior row."""
        grid.set(1, 3, 4)
        passes = 0
        while grid.settle_step():
            passes += 1
        assert passes == grid.rows - 3
        assert grid.get(grid.rows - 2, 3) == 4
        assert grid.is_settled()

    def test_floating_column_drops_one_row_per_pass(self, grid):
        """A stack over a gap moves down together, one row per pass."""
        grid.set(5, 3, 1)
        grid.set(6, 3, 2)

        assert grid.settle_step()
        assert grid.get(6, 3) == 1
        assert grid.get(7, 3) == 2
        assert grid.is_empty(5, 3)

    def test_settle_reaches_fixed_point(self, grid):
        """Scattered blocks settle within rows-2 passes and stay put."""
        rng = np.random.default_rng(3)
        for _ in range(25):
            row = int(rng.integers(1, grid.rows - 1))
            col = int(rng.integers(1, grid.cols - 1))
            grid.set(row, col, int(rng.integers(1, 5)))
        filled = int((grid.to_array() > 0).sum())

        for _ in range(grid.rows - 2):
            grid.settle_step()

        assert grid.is_settled()
        assert not grid.settle_step()
        assert int((grid.to_array() > 0).sum()) == filled

    def test_settled_grid_unchanged(self, grid):
        grid.set(11, 2, 1)
        grid.set(10, 2, 2)
        before = grid.to_array()
        assert not grid.settle_step()
        np.testing.assert_array_equal(grid.to_array(), before)


class TestMatchDetection:
    """Test triple detection in all four directions."""

    def test_horizontal_triple(self, grid):
        for col in (3, 4, 5):
            grid.set(5, col, 2)
        assert grid.detect_matches() == 3
        assert grid.marked_cells() == [(5, 3), (5, 4), (5, 5)]

    def test_vertical_triple(self, grid):
        for row in (9, 10, 11):
            grid.set(row, 2, 1)
        assert grid.detect_matches() == 3

    def test_diagonal_slash(self, grid):
        """Bottom-left to top-right."""
        grid.set(11, 1, 3)
        grid.set(10, 2, 3)
        grid.set(9, 3, 3)
        assert grid.detect_matches() == 3

    def test_diagonal_backslash(self, grid):
        """Top-left to bottom-right."""
        grid.set(9, 1, 3)
        grid.set(10, 2, 3)
        grid.set(11, 3, 3)
        assert grid.detect_matches() == 3

    def test_run_of_four_marks_all(self, grid):
        for col in (1, 2, 3, 4):
            grid.set(11, col, 1)
        assert grid.detect_matches() == 4

    def test_crossing_runs_share_cells(self, grid):
        """A horizontal and a vertical triple sharing a corner cell mark 5 cells."""
        for col in (2, 3, 4):
            grid.set(11, col, 5)
        grid.set(10, 3, 5)
        grid.set(9, 3, 5)
        assert grid.detect_matches() == 5

    def test_mixed_kinds_do_not_match(self, grid):
        grid.set(11, 1, 1)
        grid.set(11, 2, 2)
        grid.set(11, 3, 1)
        assert grid.detect_matches() == 0

    def test_detection_is_idempotent(self, grid):
        """Rerunning on an unchanged grid leaves the mask unchanged."""
        for col in (3, 4, 5):
            grid.set(11, col, 2)
        first = grid.detect_matches()
        mask = grid.mask_array()
        assert grid.detect_matches() == first
        np.testing.assert_array_equal(grid.mask_array(), mask)

    def test_border_never_marked(self, grid):
        for col in range(1, grid.cols - 1):
            grid.set(11, col, 1)
        grid.detect_matches()
        mask = grid.mask_array()
        assert not mask[0, :].any()
        assert not mask[-1, :].any()
        assert not mask[:, 0].any()
        assert not mask[:, -1].any()

    def test_clear_marked_empties_cells(self, grid):
        for col in (3, 4, 5):
            grid.set(11, col, 2)
        grid.set(11, 6, 1)
        grid.detect_matches()

        assert grid.clear_marked() == 3
        assert grid.marked_count == 0
        assert all(grid.is_empty(11, col) for col in (3, 4, 5))
        assert grid.get(11, 6) == 1
