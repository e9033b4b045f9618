"""
RNG - Triplet Generator
=======================

Deterministic, seedable source of block kinds for new pieces.
"""

from __future__ import annotations

import random
from typing import Optional, Tuple

from arcade.drop_core.config_loader import GameConfig, get_config


class KindGenerator:
    """
    Draws piece triplets uniformly from the active kind pool.

    Each slot is drawn independently from kinds 1..pool, where pool is
    decided by the caller at generation time.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        seed: Optional[int] = None
    ):
        """
        Initialize generator.

        Args:
            config: Game configuration. Uses default if None.
            seed: Random seed for reproducibility. Random if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._rng = random.Random(seed)

    def draw(self, pool: int) -> int:
        """Single kind id in 1..pool."""
        if not 1 <= pool <= self._config.num_kinds:
            raise ValueError(f"Kind pool {pool} outside [1, {self._config.num_kinds}]")
        return self._rng.randint(1, pool)

    def triplet(self, pool: int) -> Tuple[int, int, int]:
        """Three independent draws from 1..pool."""
        return (self.draw(pool), self.draw(pool), self.draw(pool))

    def reset(self, seed: Optional[int] = None) -> None:
        """
        Reset the generator with optional new seed.

        Args:
            seed: New random seed. Keeps the current stream if None.
        """
        if seed is not None:
            self._rng = random.Random(seed)

    def get_state(self) -> tuple:
        """Serializable RNG state for checkpointing."""
        return self._rng.getstate()

    def set_state(self, state: tuple) -> None:
        self._rng.setstate(state)
