"""
Scoring & Difficulty
====================

Pure computation of clear awards, chain multiplier, time bonus, drop speed
ramp and kind pool growth. Holds no state of its own.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from arcade.drop_core.config_loader import GameConfig, get_config


@dataclass(frozen=True)
class ClearAward:
    """Outcome of a single clear event."""
    cleared: int
    award: int
    time_bonus: int
    score: int
    high_score: int
    high_score_updated: bool
    drop_interval: int
    chain_counter: int      # multiplier for the next cascade

    def __repr__(self) -> str:
        extra = f", +{self.time_bonus}t" if self.time_bonus else ""
        return f"ClearAward(n={self.cleared}, +{self.award}{extra})"


def kind_pool_size(score: int, config: Optional[GameConfig] = None) -> int:
    """
    Number of block kinds new pieces draw from at the given score.

    With the default config: 4 up to 10000, 5 up to 20000, 6 beyond.
    """
    if config is None:
        config = get_config()

    for step in config.difficulty.kind_pool:
        if step.max_score is None or score <= step.max_score:
            return step.kinds
    return config.difficulty.kind_pool[-1].kinds


def time_bonus_for(cleared: int, config: Optional[GameConfig] = None) -> int:
    """Ticks added to the countdown for clearing `cleared` cells."""
    if config is None:
        config = get_config()

    if cleared > 0 and cleared % config.scoring.time_bonus_divisor == 0:
        return config.scoring.time_bonus
    return 0


def next_drop_interval(
    drop_interval: int,
    chain_counter: int,
    config: Optional[GameConfig] = None
) -> int:
    """
    Drop interval after a clear.

    Speeds up by one tick on the first clear after a placement (chain
    counter still 1), never below the configured floor.
    """
    if config is None:
        config = get_config()

    if chain_counter == 1 and drop_interval > config.difficulty.min_drop_interval:
        return drop_interval - 1
    return drop_interval


def score_clear(
    cleared: int,
    chain_counter: int,
    score: int,
    high_score: int,
    drop_interval: int,
    config: Optional[GameConfig] = None
) -> ClearAward:
    """
    Compute everything a clear of `cleared` cells changes.

    Args:
        cleared: Number of marked cells (n > 0).
        chain_counter: Current chain multiplier.
        score: Score before the clear.
        high_score: High score before the clear.
        drop_interval: Drop interval before the clear.
        config: Game configuration. Uses default if None.

    Returns:
        ClearAward with the updated values.
    """
    if config is None:
        config = get_config()
    if cleared <= 0:
        raise ValueError(f"score_clear needs a positive cell count, got {cleared}")

    award = config.scoring.base_points * cleared * chain_counter
    new_score = score + award
    updated = new_score > high_score

    return ClearAward(
        cleared=cleared,
        award=award,
        time_bonus=time_bonus_for(cleared, config),
        score=new_score,
        high_score=new_score if updated else high_score,
        high_score_updated=updated,
        drop_interval=next_drop_interval(drop_interval, chain_counter, config),
        chain_counter=chain_counter * 2
    )
