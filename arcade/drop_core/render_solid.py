"""
Solid Renderer
==============

Fast numpy-based renderer that draws the playfield as solid-colour cells.
Shows the border, settled blocks, the falling piece, blocks flashing before
they clear, a next-piece preview and a countdown bar.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Tuple
import numpy as np

from arcade.drop_core.config_loader import GameConfig, get_config
from arcade.drop_core.block_catalog import BORDER, get_catalog


class SolidRenderer:
    """
    Renders game state to an RGB array without pygame.

    Layout: the grid on the left, a side panel of `panel_cells` cells on the
    right, and a one-cell strip on top for the countdown bar.
    """

    def __init__(self, config: Optional[GameConfig] = None, panel_cells: int = 4):
        """
        Initialize renderer.

        Args:
            config: Game configuration. Uses default if None.
            panel_cells: Width of the side panel, in cells.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._catalog = get_catalog(config)
        self._panel_cells = panel_cells
        self._round_ticks = config.timing.round_ticks

        self._bg_color = np.array([20, 20, 30], dtype=np.uint8)
        self._border_color = np.array([90, 90, 105], dtype=np.uint8)
        self._empty_color = np.array([35, 35, 48], dtype=np.uint8)
        self._timer_color = np.array([80, 200, 220], dtype=np.uint8)
        self._timer_low_color = np.array([230, 80, 60], dtype=np.uint8)

        # Index = grid value + 1 (so BORDER maps to row 0)
        palette = [self._border_color, self._empty_color]
        palette.extend(np.array(kind.color, dtype=np.uint8) for kind in self._catalog)
        self._palette = np.stack(palette)

    def _cell_size(self, rows: int, cols: int, width: int, height: int) -> int:
        return max(1, min(width // (cols + self._panel_cells), height // (rows + 1)))

    def render(
        self,
        render_data: Dict[str, Any],
        width: int,
        height: int
    ) -> np.ndarray:
        """
        Render the game state to an RGB array.

        Args:
            render_data: Data from CoreGame.get_render_data().
            width: Output image width.
            height: Output image height.

        Returns:
            (height, width, 3) uint8 array.
        """
        img = np.empty((height, width, 3), dtype=np.uint8)
        img[:] = self._bg_color

        rows, cols = render_data["rows"], render_data["cols"]
        cell = self._cell_size(rows, cols, width, height)
        top = cell

        # Playfield colours per cell
        grid = render_data["grid"].astype(np.int16)
        colors = self._palette[np.clip(grid + 1, 0, len(self._palette) - 1)]

        # Blocks about to clear fade towards white
        mask = render_data["clear_mask"]
        if mask.any():
            t = 0.35 + 0.65 * float(render_data.get("clear_progress", 0.0))
            flashed = colors[mask].astype(np.float32) * (1 - t) + 255.0 * t
            colors[mask] = flashed.astype(np.uint8)

        for row, col, kind in render_data["piece_cells"]:
            colors[row, col] = self._palette[kind + 1]

        # Upscale cells to pixels, leaving a 1px gap between cells
        block = np.repeat(np.repeat(colors, cell, axis=0), cell, axis=1)
        if cell > 3:
            block[cell - 1::cell, :] = self._bg_color
            block[:, cell - 1::cell] = self._bg_color
        h = min(block.shape[0], height - top)
        w = min(block.shape[1], width)
        img[top:top + h, :w] = block[:h, :w]

        self._draw_timer_bar(img, render_data, cols * cell, cell)
        self._draw_next_preview(img, render_data, cols * cell, top, cell)
        return img

    def _draw_timer_bar(
        self,
        img: np.ndarray,
        render_data: Dict[str, Any],
        board_width: int,
        cell: int
    ) -> None:
        fraction = min(1.0, render_data["countdown"] / self._round_ticks)
        bar = int(board_width * fraction)
        color = self._timer_low_color if fraction < 0.15 else self._timer_color
        pad = max(1, cell // 4)
        img[pad:cell - pad, :bar] = color

    def _draw_next_preview(
        self,
        img: np.ndarray,
        render_data: Dict[str, Any],
        panel_x: int,
        top: int,
        cell: int
    ) -> None:
        x0 = panel_x + cell // 2
        y0 = top + cell
        for i, kind in enumerate(render_data["next_piece"]):
            x = x0 + i * cell
            if x + cell > img.shape[1] or y0 + cell > img.shape[0]:
                break
            img[y0:y0 + cell - 1, x:x + cell - 1] = self._palette[kind + 1]

    def color_of(self, value: int) -> Tuple[int, int, int]:
        """RGB for a grid value (border, empty or kind)."""
        if value == BORDER:
            return tuple(int(c) for c in self._border_color)
        return tuple(int(c) for c in self._palette[value + 1])

    def close(self) -> None:
        """Nothing to release; present for API symmetry with window renderers."""
