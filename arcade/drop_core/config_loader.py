"""
Configuration Loader
====================

Loads and validates game_config.yaml, providing typed access to all parameters.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Tuple, Optional

import yaml


@dataclass(frozen=True)
class GridConfig:
    """Playfield geometry, border included."""
    rows: int
    cols: int
    spawn_row: int
    spawn_col: int

    @property
    def spawn_cols(self) -> Tuple[int, int, int]:
        """Columns covered by a freshly spawned piece."""
        return (self.spawn_col - 1, self.spawn_col, self.spawn_col + 1)


@dataclass(frozen=True)
class TimingConfig:
    """Tick-based timing."""
    ticks_per_second: int
    round_ticks: int
    input_guard_ticks: int
    clear_ticks: int


@dataclass(frozen=True)
class KindPoolStep:
    """Kind pool size in effect up to (and including) max_score."""
    kinds: int
    max_score: Optional[int] = None  # None = no upper bound


@dataclass(frozen=True)
class DifficultyConfig:
    """Drop speed ramp and kind pool growth."""
    initial_drop_interval: int
    min_drop_interval: int
    kind_pool: Tuple[KindPoolStep, ...]


@dataclass(frozen=True)
class ScoringConfig:
    """Scoring parameters."""
    base_points: int
    time_bonus: int
    time_bonus_divisor: int


@dataclass(frozen=True)
class ControlStrip:
    """Pointer control region, in screen pixels."""
    x: float
    y: float
    width: float
    height: float

    def contains(self, px: float, py: float) -> bool:
        return (self.x <= px < self.x + self.width
                and self.y <= py < self.y + self.height)


@dataclass(frozen=True)
class InputConfig:
    """Key repeat and tap zone parameters."""
    repeat_after_ticks: int
    soft_drop_zone_ticks: int
    tap_zones: int
    control_strip: ControlStrip


@dataclass(frozen=True)
class SoundConfig:
    """Sound ids handed to the audio shim."""
    match: int


@dataclass(frozen=True)
class BlockConfig:
    """Configuration for a single block kind."""
    id: int
    name: str
    color: Tuple[int, int, int]


@dataclass(frozen=True)
class ObservationConfig:
    """Environment observation parameters."""
    frame_skip: int
    image_width: int
    image_height: int


@dataclass(frozen=True)
class GameConfig:
    """
    Complete game configuration loaded from YAML.

    All values are immutable to prevent accidental modification during runtime.
    """
    grid: GridConfig
    timing: TimingConfig
    difficulty: DifficultyConfig
    scoring: ScoringConfig
    input: InputConfig
    sounds: SoundConfig
    blocks: Tuple[BlockConfig, ...]
    observation: ObservationConfig

    @property
    def num_kinds(self) -> int:
        """Total number of block kinds."""
        return len(self.blocks)

    def get_block(self, kind_id: int) -> BlockConfig:
        """Get block config by kind id (1-based)."""
        if 1 <= kind_id <= len(self.blocks):
            return self.blocks[kind_id - 1]
        raise ValueError(f"Invalid block kind: {kind_id}")


def _parse_color(color_data: List) -> Tuple[int, int, int]:
    """Parse RGB color from YAML."""
    if len(color_data) != 3:
        raise ValueError(f"Color must have 3 values [R, G, B], got {color_data}")
    return (int(color_data[0]), int(color_data[1]), int(color_data[2]))


def _parse_block(block_data: dict) -> BlockConfig:
    return BlockConfig(
        id=int(block_data["id"]),
        name=str(block_data["name"]),
        color=_parse_color(block_data["color"])
    )


def _parse_kind_pool(pool_data: List) -> Tuple[KindPoolStep, ...]:
    steps = []
    for step in pool_data:
        max_score = step.get("max_score")
        steps.append(KindPoolStep(
            kinds=int(step["kinds"]),
            max_score=int(max_score) if max_score is not None else None
        ))
    return tuple(steps)


def _validate_config(config: GameConfig) -> None:
    """Validate configuration consistency."""
    grid = config.grid
    if grid.rows < 5 or grid.cols < 5:
        raise ValueError(f"Grid too small: {grid.rows}x{grid.cols}")

    # Spawn triplet must sit inside the border
    if not 1 <= grid.spawn_row <= grid.rows - 2:
        raise ValueError(f"spawn_row {grid.spawn_row} outside interior rows")
    if not 2 <= grid.spawn_col <= grid.cols - 3:
        raise ValueError(f"spawn_col {grid.spawn_col} leaves no room for a 3-wide piece")

    # Block ids are 1..N, sequential
    for i, block in enumerate(config.blocks, start=1):
        if block.id != i:
            raise ValueError(f"Block id mismatch: expected {i}, got {block.id}")
    if len(config.blocks) > 127:
        raise ValueError("At most 127 block kinds fit in the grid dtype")

    # Kind pool: ascending thresholds, last step unbounded, sizes within catalog
    pool = config.difficulty.kind_pool
    if not pool:
        raise ValueError("difficulty.kind_pool must not be empty")
    if pool[-1].max_score is not None:
        raise ValueError("Last kind_pool entry must have no max_score")
    thresholds = [step.max_score for step in pool[:-1]]
    if any(t is None for t in thresholds) or thresholds != sorted(thresholds):
        raise ValueError(f"kind_pool thresholds must be ascending, got {thresholds}")
    for step in pool:
        if not 1 <= step.kinds <= len(config.blocks):
            raise ValueError(
                f"kind_pool size {step.kinds} outside [1, {len(config.blocks)}]"
            )

    diff = config.difficulty
    if diff.min_drop_interval < 1 or diff.initial_drop_interval < diff.min_drop_interval:
        raise ValueError(
            f"Invalid drop interval range: {diff.initial_drop_interval} "
            f"(min {diff.min_drop_interval})"
        )

    if config.scoring.time_bonus_divisor < 1:
        raise ValueError("scoring.time_bonus_divisor must be >= 1")

    if config.input.tap_zones < 1:
        raise ValueError("input.tap_zones must be >= 1")

    if config.observation.frame_skip < 1:
        raise ValueError("observation.frame_skip must be >= 1")


def load_config(config_path: Optional[str] = None) -> GameConfig:
    """
    Load and validate game configuration from YAML.

    Args:
        config_path: Path to game_config.yaml. If None, uses default location.

    Returns:
        Validated GameConfig instance.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ValueError: If config validation fails.
    """
    if config_path is None:
        config_path = os.path.join(
            os.path.dirname(os.path.dirname(__file__)),
            "game_config.yaml"
        )

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r") as f:
        raw = yaml.safe_load(f)

    grid_data = raw["grid"]
    grid = GridConfig(
        rows=int(grid_data.get("rows", 13)),
        cols=int(grid_data.get("cols", 9)),
        spawn_row=int(grid_data.get("spawn_row", 1)),
        spawn_col=int(grid_data.get("spawn_col", 4))
    )

    timing_data = raw["timing"]
    timing = TimingConfig(
        ticks_per_second=int(timing_data.get("ticks_per_second", 30)),
        round_ticks=int(timing_data["round_ticks"]),
        input_guard_ticks=int(timing_data.get("input_guard_ticks", 10)),
        clear_ticks=int(timing_data.get("clear_ticks", 20))
    )

    diff_data = raw["difficulty"]
    difficulty = DifficultyConfig(
        initial_drop_interval=int(diff_data["initial_drop_interval"]),
        min_drop_interval=int(diff_data["min_drop_interval"]),
        kind_pool=_parse_kind_pool(diff_data["kind_pool"])
    )

    scoring_data = raw["scoring"]
    scoring = ScoringConfig(
        base_points=int(scoring_data["base_points"]),
        time_bonus=int(scoring_data["time_bonus"]),
        time_bonus_divisor=int(scoring_data["time_bonus_divisor"])
    )

    input_data = raw["input"]
    strip_data = input_data["control_strip"]
    input_config = InputConfig(
        repeat_after_ticks=int(input_data.get("repeat_after_ticks", 4)),
        soft_drop_zone_ticks=int(input_data.get("soft_drop_zone_ticks", 1)),
        tap_zones=int(input_data.get("tap_zones", 4)),
        control_strip=ControlStrip(
            x=float(strip_data["x"]),
            y=float(strip_data["y"]),
            width=float(strip_data["width"]),
            height=float(strip_data["height"])
        )
    )

    sounds = SoundConfig(match=int(raw.get("sounds", {}).get("match", 0)))

    blocks = tuple(_parse_block(b) for b in raw["blocks"])

    obs_data = raw.get("observation", {})
    observation = ObservationConfig(
        frame_skip=int(obs_data.get("frame_skip", 1)),
        image_width=int(obs_data.get("image_width", 270)),
        image_height=int(obs_data.get("image_height", 390))
    )

    config = GameConfig(
        grid=grid,
        timing=timing,
        difficulty=difficulty,
        scoring=scoring,
        input=input_config,
        sounds=sounds,
        blocks=blocks,
        observation=observation
    )

    _validate_config(config)
    return config


# Module-level singleton for convenience
_cached_config: Optional[GameConfig] = None


def get_config() -> GameConfig:
    """Get the cached game configuration, loading if necessary."""
    global _cached_config
    if _cached_config is None:
        _cached_config = load_config()
    return _cached_config


def reload_config(config_path: Optional[str] = None) -> GameConfig:
    """Reload the configuration (useful for testing)."""
    global _cached_config
    _cached_config = load_config(config_path)
    return _cached_config
