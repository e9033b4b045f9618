"""
Block Catalog
=============

Provides convenient access to block kind definitions loaded from config.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple, Optional

from arcade.drop_core.config_loader import GameConfig, BlockConfig, get_config

# Grid cell sentinels
BORDER = -1
EMPTY = 0


@dataclass
class BlockKind:
    """
    Runtime representation of a block kind.

    Wraps BlockConfig with convenience accessors.
    """
    config: BlockConfig

    @property
    def id(self) -> int:
        return self.config.id

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def color(self) -> Tuple[int, int, int]:
        return self.config.color

    @property
    def highlight(self) -> Tuple[int, int, int]:
        """Lighter tint used while the block flashes before clearing."""
        return tuple(min(255, c + 80) for c in self.color)

    def __repr__(self) -> str:
        return f"BlockKind({self.id}: {self.name})"


class BlockCatalog:
    """
    Collection of all block kinds, indexed by kind id (1-based).
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize catalog from game config.

        Args:
            config: GameConfig instance. If None, loads from default location.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._kinds: Tuple[BlockKind, ...] = tuple(
            BlockKind(block_config) for block_config in config.blocks
        )

    def __len__(self) -> int:
        """Total number of block kinds."""
        return len(self._kinds)

    def __getitem__(self, kind_id: int) -> BlockKind:
        """Get block kind by id."""
        if 1 <= kind_id <= len(self._kinds):
            return self._kinds[kind_id - 1]
        raise IndexError(f"Block kind {kind_id} out of range [1, {len(self._kinds)}]")

    def __iter__(self):
        return iter(self._kinds)

    @property
    def max_kind(self) -> int:
        """Largest valid kind id."""
        return len(self._kinds)

    def is_kind(self, value: int) -> bool:
        """True if a grid value denotes a block (not border, not empty)."""
        return 1 <= value <= len(self._kinds)

    def color_of(self, value: int) -> Optional[Tuple[int, int, int]]:
        """Colour for a grid value, or None for empty/border cells."""
        if self.is_kind(value):
            return self._kinds[value - 1].color
        return None

    def get_by_name(self, name: str) -> Optional[BlockKind]:
        """Get block kind by name (case-insensitive)."""
        name_lower = name.lower()
        for kind in self._kinds:
            if kind.name.lower() == name_lower:
                return kind
        return None


def get_catalog(config: Optional[GameConfig] = None) -> BlockCatalog:
    """
    Build a block catalog for the given (or cached default) config.

    Args:
        config: Optional config to use.

    Returns:
        BlockCatalog instance.
    """
    return BlockCatalog(config)
