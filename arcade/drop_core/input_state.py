"""
Input State
===========

Hold-tick counters for logical keys and pointer tap zones.

A counter is 0 while released, 1 on the first tick held, and keeps counting
while held. The engine only ever sees an immutable InputSnapshot taken once
at the start of a tick.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Iterable, Optional, Tuple

from arcade.drop_core.config_loader import GameConfig, get_config


class Key(IntEnum):
    LEFT = 0
    RIGHT = 1
    DOWN = 2
    ROTATE = 3


class TapZone(IntEnum):
    """Equal-width bands of the control strip, left to right."""
    LEFT = 0
    DROP = 1
    RIGHT = 2
    ROTATE = 3


@dataclass(frozen=True)
class InputSnapshot:
    """Input counters sampled for a single tick."""
    keys: Tuple[int, ...] = (0, 0, 0, 0)
    zones: Tuple[int, ...] = (0, 0, 0, 0)
    pointer_ticks: int = 0
    pointer_x: float = 0.0
    pointer_y: float = 0.0

    def key(self, key: Key) -> int:
        return self.keys[key]

    def zone(self, zone: TapZone) -> int:
        if zone < len(self.zones):
            return self.zones[zone]
        return 0

    @staticmethod
    def idle() -> "InputSnapshot":
        return InputSnapshot()

    @staticmethod
    def holding(*keys: Key, ticks: int = 1) -> "InputSnapshot":
        """Snapshot with the given keys held for `ticks` ticks."""
        counters = [0] * len(Key)
        for key in keys:
            counters[key] = ticks
        return InputSnapshot(keys=tuple(counters))


def is_triggered(ticks: int, repeat_after: int = 4) -> bool:
    """
    Edge or auto-repeat test for a hold-tick counter.

    Fires on the first tick held and on every tick once held longer than
    `repeat_after` ticks.
    """
    return ticks == 1 or ticks > repeat_after


class InputTracker:
    """
    Turns raw per-frame pressed state into successive InputSnapshots.

    Example:
        tracker = InputTracker(config)
        snapshot = tracker.update({Key.LEFT}, pointer_down=False)
        game.tick(snapshot)
    """

    def __init__(self, config: Optional[GameConfig] = None):
        if config is None:
            config = get_config()

        self._config = config
        self._strip = config.input.control_strip
        self._num_zones = config.input.tap_zones
        self._keys = [0] * len(Key)
        self._zones = [0] * self._num_zones
        self._pointer_ticks = 0
        self._pointer_x = 0.0
        self._pointer_y = 0.0

    def reset(self) -> None:
        self._keys = [0] * len(Key)
        self._zones = [0] * self._num_zones
        self._pointer_ticks = 0

    def zone_at(self, x: float, y: float) -> Optional[int]:
        """Tap zone index under a pointer position, or None outside the strip."""
        if not self._strip.contains(x, y):
            return None
        relative = (x - self._strip.x) / self._strip.width
        return min(self._num_zones - 1, max(0, int(relative * self._num_zones)))

    def update(
        self,
        pressed: Iterable[Key] = (),
        pointer_down: bool = False,
        pointer_pos: Optional[Tuple[float, float]] = None
    ) -> InputSnapshot:
        """
        Advance all counters by one tick.

        Args:
            pressed: Keys currently held.
            pointer_down: True while the pointer/touch is held.
            pointer_pos: Current pointer position in screen pixels.

        Returns:
            Snapshot for this tick.
        """
        held = set(pressed)
        for key in Key:
            self._keys[key] = self._keys[key] + 1 if key in held else 0

        if pointer_pos is not None:
            self._pointer_x, self._pointer_y = float(pointer_pos[0]), float(pointer_pos[1])
        self._pointer_ticks = self._pointer_ticks + 1 if pointer_down else 0

        active_zone = None
        if pointer_down:
            active_zone = self.zone_at(self._pointer_x, self._pointer_y)
        for zone in range(self._num_zones):
            self._zones[zone] = self._zones[zone] + 1 if zone == active_zone else 0

        return InputSnapshot(
            keys=tuple(self._keys),
            zones=tuple(self._zones),
            pointer_ticks=self._pointer_ticks,
            pointer_x=self._pointer_x,
            pointer_y=self._pointer_y
        )
