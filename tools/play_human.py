"""
Human Play Mode
================

Play Drop Match interactively with keyboard or the on-screen tap strip.

Controls:
    - Left/Right arrows: Move piece
    - Up/Space: Rotate piece
    - Down: Soft drop
    - Mouse: Hold a tap zone along the bottom strip (left, drop, right, rotate)
    - R: Restart round (high score is kept)
    - ESC: Quit

Usage:
    python -m tools.play_human [--seed SEED] [--width WIDTH] [--height HEIGHT]
"""

from __future__ import annotations

import argparse
import sys
from typing import Dict, List, Optional, Tuple

import numpy as np

try:
    import pygame
    PYGAME_AVAILABLE = True
except ImportError:
    PYGAME_AVAILABLE = False

from arcade.drop_core.block_catalog import BORDER, get_catalog
from arcade.drop_core.config_loader import GameConfig, load_config
from arcade.drop_core.events import EffectRequest, SoundRequest
from arcade.drop_core.game import CoreGame
from arcade.drop_core.input_state import InputTracker, Key, TapZone

ZONE_LABELS = {
    TapZone.LEFT: "LEFT",
    TapZone.DROP: "DROP",
    TapZone.RIGHT: "RIGHT",
    TapZone.ROTATE: "ROTATE",
}

# Ticks an effect flash stays on screen
FLASH_TICKS = 12


class DropMatchRenderer:
    """
    Pygame renderer for human play mode.
    Draws the board, HUD, next-piece preview and the tap strip.
    """

    def __init__(self, config: GameConfig, window_width: int, window_height: int):
        self._config = config
        self._catalog = get_catalog(config)
        self._window_width = window_width
        self._window_height = window_height

        self._bg = (22, 22, 34)
        self._border = (90, 90, 105)
        self._empty = (36, 36, 50)
        self._text = (230, 230, 240)
        self._text_dim = (150, 150, 170)
        self._strip_fill = (45, 45, 62)
        self._strip_active = (80, 80, 115)

        pygame.font.init()
        self._font_large = pygame.font.Font(None, 48)
        self._font_medium = pygame.font.Font(None, 32)
        self._font_small = pygame.font.Font(None, 22)

        self._calculate_layout()

    def _calculate_layout(self) -> None:
        """Fit the board above the control strip."""
        rows, cols = self._config.grid.rows, self._config.grid.cols
        strip = self._config.input.control_strip
        available_height = int(strip.y) - 40
        self._cell = max(8, min(available_height // rows, (self._window_width // 2) // cols))
        self._board_x = (self._window_width - cols * self._cell) // 2
        self._board_y = 20

    def _cell_rect(self, row: int, col: int) -> "pygame.Rect":
        return pygame.Rect(
            self._board_x + col * self._cell,
            self._board_y + row * self._cell,
            self._cell - 1,
            self._cell - 1
        )

    def _color(self, value: int) -> Tuple[int, int, int]:
        if value == BORDER:
            return self._border
        if value == 0:
            return self._empty
        return self._catalog[value].color

    def render(
        self,
        screen: "pygame.Surface",
        render_data: dict,
        flashes: Dict[Tuple[int, int], int],
        active_zone: Optional[int] = None
    ) -> None:
        """Render the complete scene."""
        screen.fill(self._bg)
        self._draw_board(screen, render_data, flashes)
        self._draw_hud(screen, render_data)
        self._draw_next(screen, render_data)
        self._draw_strip(screen, active_zone)
        if render_data["is_over"]:
            self._draw_round_over(screen, render_data)

    def _draw_board(
        self,
        screen: "pygame.Surface",
        render_data: dict,
        flashes: Dict[Tuple[int, int], int]
    ) -> None:
        grid = render_data["grid"]
        mask = render_data["clear_mask"]
        rows, cols = grid.shape

        for row in range(rows):
            for col in range(cols):
                color = self._color(int(grid[row, col]))
                if mask[row, col]:
                    t = 0.35 + 0.65 * render_data["clear_progress"]
                    color = tuple(int(c * (1 - t) + 255 * t) for c in color)
                pygame.draw.rect(screen, color, self._cell_rect(row, col))

        for row, col, kind in render_data["piece_cells"]:
            rect = self._cell_rect(row, col)
            pygame.draw.rect(screen, self._catalog[kind].color, rect)
            pygame.draw.rect(screen, self._catalog[kind].highlight, rect, 2)

        for (row, col), left in flashes.items():
            radius = int(self._cell * (1.0 - left / FLASH_TICKS)) + 2
            center = self._cell_rect(row, col).center
            pygame.draw.circle(screen, (255, 255, 255), center, radius, 2)

    def _draw_hud(self, screen: "pygame.Surface", render_data: dict) -> None:
        x = self._board_x + self._config.grid.cols * self._cell + 30
        y = self._board_y

        lines = [
            (self._font_small, "SCORE", self._text_dim),
            (self._font_large, str(render_data["score"]), self._text),
            (self._font_small, "HIGH SCORE", self._text_dim),
            (self._font_medium, str(render_data["high_score"]), self._text),
            (self._font_small, "TIME", self._text_dim),
            (self._font_medium, render_data["time_text"], self._text),
        ]
        if render_data["pending_award"]:
            lines.append((self._font_medium, f"+{render_data['pending_award']}", (255, 220, 120)))
        if render_data["pending_time_bonus"]:
            lines.append((self._font_small, "TIME BONUS", (120, 220, 255)))

        for font, text, color in lines:
            surface = font.render(text, True, color)
            screen.blit(surface, (x, y))
            y += surface.get_height() + 6

    def _draw_next(self, screen: "pygame.Surface", render_data: dict) -> None:
        x = self._board_x - 3 * self._cell - 30
        y = self._board_y
        label = self._font_small.render("NEXT", True, self._text_dim)
        screen.blit(label, (x, y))
        y += label.get_height() + 6
        for i, kind in enumerate(render_data["next_piece"]):
            rect = pygame.Rect(x + i * self._cell, y, self._cell - 1, self._cell - 1)
            pygame.draw.rect(screen, self._catalog[kind].color, rect)

    def _draw_strip(self, screen: "pygame.Surface", active_zone: Optional[int]) -> None:
        strip = self._config.input.control_strip
        zones = self._config.input.tap_zones
        width = strip.width / zones
        for zone in range(zones):
            rect = pygame.Rect(int(strip.x + zone * width), int(strip.y), int(width) - 4, int(strip.height))
            fill = self._strip_active if zone == active_zone else self._strip_fill
            pygame.draw.rect(screen, fill, rect, border_radius=8)
            text = self._font_medium.render(ZONE_LABELS.get(zone, str(zone)), True, self._text)
            screen.blit(text, text.get_rect(center=rect.center))

    def _draw_round_over(self, screen: "pygame.Surface", render_data: dict) -> None:
        overlay = pygame.Surface((self._window_width, self._window_height), pygame.SRCALPHA)
        overlay.fill((0, 0, 0, 160))
        screen.blit(overlay, (0, 0))

        title = self._font_large.render("ROUND OVER", True, self._text)
        score = self._font_medium.render(f"Score: {render_data['score']}", True, self._text)
        hint = self._font_small.render("R to play again, ESC to quit", True, self._text_dim)
        cx, cy = self._window_width // 2, self._window_height // 2
        screen.blit(title, title.get_rect(center=(cx, cy - 40)))
        screen.blit(score, score.get_rect(center=(cx, cy)))
        screen.blit(hint, hint.get_rect(center=(cx, cy + 36)))


class HumanPlayer:
    """
    Human-playable Drop Match round at the engine's tick rate.
    """

    KEY_MAP = {
        pygame.K_LEFT: Key.LEFT,
        pygame.K_RIGHT: Key.RIGHT,
        pygame.K_DOWN: Key.DOWN,
        pygame.K_UP: Key.ROTATE,
        pygame.K_SPACE: Key.ROTATE,
    } if PYGAME_AVAILABLE else {}

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        seed: Optional[int] = None,
        window_width: int = 1200,
        window_height: int = 800
    ):
        if not PYGAME_AVAILABLE:
            raise ImportError("pygame required. Install: pip install pygame")

        if config is None:
            config = load_config()

        self._config = config
        self._seed = seed
        self._window_width = window_width
        self._window_height = window_height
        self._tps = config.timing.ticks_per_second

        self._game = CoreGame(config=config, seed=seed)
        self._tracker = InputTracker(config)

        pygame.init()
        self._screen = pygame.display.set_mode((window_width, window_height))
        pygame.display.set_caption("Drop Match")
        self._clock = pygame.time.Clock()

        self._renderer = DropMatchRenderer(config, window_width, window_height)
        self._sounds = self._build_sounds()

        self._running = True
        self._flashes: Dict[Tuple[int, int], int] = {}
        self._active_zone: Optional[int] = None

    def _build_sounds(self) -> Dict[int, "pygame.mixer.Sound"]:
        """Synthesize a short beep per sound id. Empty if audio is unavailable."""
        try:
            pygame.mixer.init(frequency=22050, size=-16, channels=1)
        except pygame.error as e:
            print(f"Audio disabled: {e}")
            return {}

        rate = 22050
        t = np.linspace(0.0, 0.12, int(rate * 0.12), endpoint=False)
        envelope = np.linspace(1.0, 0.0, t.size)
        wave = (np.sin(2 * np.pi * 880.0 * t) * envelope * 12000).astype(np.int16)
        # Mixer may have opened in stereo despite the request
        _, _, channels = pygame.mixer.get_init()
        if channels > 1:
            wave = np.repeat(wave[:, None], channels, axis=1)
        return {self._config.sounds.match: pygame.sndarray.make_sound(wave)}

    def run(self) -> int:
        """Run the game loop. Returns final score."""
        print("=== Drop Match ===")
        print("Arrows to move, Up/Space to rotate, Down to drop")
        print("R to restart, ESC to quit")
        print()

        while self._running:
            self._handle_events()
            if not self._game.is_over:
                self._step()
            self._render()
            self._clock.tick(self._tps)

        pygame.quit()
        return self._game.score

    def _handle_events(self) -> None:
        """Process pygame events."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self._running = False

            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    self._running = False
                elif event.key == pygame.K_r:
                    self._restart()

    def _step(self) -> None:
        """Advance the engine one tick with the current held input."""
        pressed = pygame.key.get_pressed()
        held = [key for code, key in self.KEY_MAP.items() if pressed[code]]

        pointer_down = pygame.mouse.get_pressed()[0]
        pointer_pos = pygame.mouse.get_pos()
        self._active_zone = (
            self._tracker.zone_at(*pointer_pos) if pointer_down else None
        )

        score_before = self._game.score
        self._game.tick(self._tracker.update(held, pointer_down, pointer_pos))

        delta = self._game.score - score_before
        if delta > 0:
            print(f"  +{delta} (Total: {self._game.score})")
        if self._game.is_over:
            print(f"\nROUND OVER ({self._game.termination_reason}) - Score: {self._game.score}")

        self._handle_outbound(self._game.drain_events())

    def _handle_outbound(self, events: List) -> None:
        self._flashes = {cell: left - 1 for cell, left in self._flashes.items() if left > 1}
        for event in events:
            if isinstance(event, SoundRequest):
                sound = self._sounds.get(event.sound_id)
                if sound is not None:
                    sound.play()
            elif isinstance(event, EffectRequest):
                self._flashes[(event.row, event.col)] = FLASH_TICKS

    def _restart(self) -> None:
        """Restart the round."""
        self._game.reset(seed=self._seed)
        self._tracker.reset()
        self._flashes = {}
        print("\n=== Round Restarted ===\n")

    def _render(self) -> None:
        """Render the game."""
        self._renderer.render(
            self._screen,
            self._game.get_render_data(),
            self._flashes,
            active_zone=self._active_zone
        )
        pygame.display.flip()


def main():
    parser = argparse.ArgumentParser(description="Play Drop Match interactively")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--width", type=int, default=1200, help="Window width (default: 1200)")
    parser.add_argument("--height", type=int, default=800, help="Window height (default: 800)")
    parser.add_argument("--config", type=str, default=None, help="Path to game_config.yaml")

    args = parser.parse_args()

    try:
        config = load_config(args.config)
        player = HumanPlayer(
            config=config,
            seed=args.seed,
            window_width=args.width,
            window_height=args.height
        )
        score = player.run()
        print(f"\nFinal Score: {score}")
        return 0
    except ImportError as e:
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
