"""
Outbound Events
===============

Requests the engine makes of the presentation layer. The engine appends,
the renderer drains once per frame.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Union


@dataclass(frozen=True)
class SoundRequest:
    """Fire-and-forget audio trigger."""
    sound_id: int


@dataclass(frozen=True)
class EffectRequest:
    """Visual effect at a grid cell that is about to clear."""
    row: int
    col: int


Event = Union[SoundRequest, EffectRequest]


class EventQueue:
    """FIFO of pending presentation requests."""

    def __init__(self):
        self._events: List[Event] = []

    def push(self, event: Event) -> None:
        self._events.append(event)

    def drain(self) -> List[Event]:
        """Return all pending events and empty the queue."""
        events, self._events = self._events, []
        return events

    def clear(self) -> None:
        self._events.clear()

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self):
        return iter(list(self._events))
