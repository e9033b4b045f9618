"""
Round Timer
===========

Per-tick countdown that ends the round at zero.
"""

from __future__ import annotations

from typing import Optional

from arcade.drop_core.config_loader import GameConfig, get_config


class RoundTimer:
    """
    Counts ticks remaining in the round.

    Decrements by exactly one per tick; only time bonuses add to it.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        if config is None:
            config = get_config()

        self._round_ticks = config.timing.round_ticks
        self._ticks_per_second = config.timing.ticks_per_second
        self._countdown = self._round_ticks

    @property
    def countdown(self) -> int:
        """Ticks remaining."""
        return self._countdown

    @property
    def expired(self) -> bool:
        return self._countdown <= 0

    @property
    def seconds_left(self) -> float:
        return self._countdown / self._ticks_per_second

    def tick(self) -> int:
        """Advance one tick and return the remaining count."""
        if self._countdown > 0:
            self._countdown -= 1
        return self._countdown

    def extend(self, ticks: int) -> None:
        """Add a time bonus."""
        if ticks < 0:
            raise ValueError(f"Time bonus must be non-negative, got {ticks}")
        self._countdown += ticks

    def reset(self) -> None:
        self._countdown = self._round_ticks

    def format(self) -> str:
        """mm:ss display string."""
        total = int(self.seconds_left + 0.999)
        return f"{total // 60}:{total % 60:02d}"
