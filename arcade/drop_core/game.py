"""
Core Game
=========

Puzzle state machine: owns the grid, the active piece, the round counters and
the timer, and advances them one tick at a time.

Phases cycle Falling -> Settling -> Matching -> (Clearing -> Settling ->
Matching)* -> Falling. A Matching pass that finds nothing to clear and cannot
spawn a new piece ends the round.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Dict, List, Optional

from arcade.drop_core.config_loader import GameConfig, get_config
from arcade.drop_core.block_catalog import BlockCatalog, get_catalog
from arcade.drop_core.events import EffectRequest, Event, EventQueue, SoundRequest
from arcade.drop_core.grid import GridStore
from arcade.drop_core.input_state import InputSnapshot, Key, TapZone, is_triggered
from arcade.drop_core.piece import ActivePiece, Direction
from arcade.drop_core.rng import KindGenerator
from arcade.drop_core.scoring import ClearAward, kind_pool_size, score_clear
from arcade.drop_core.state_snapshot import GameSnapshot, SnapshotBuilder
from arcade.drop_core.timer import RoundTimer

logger = logging.getLogger(__name__)


class Phase(IntEnum):
    FALLING = 0
    SETTLING = 1
    MATCHING = 2
    CLEARING = 3
    ROUND_OVER = 4


@dataclass
class PuzzleRound:
    """Per-round counters. high_score survives start()."""
    score: int = 0
    high_score: int = 0
    chain_counter: int = 1
    drop_interval: int = 90
    pending_award: int = 0
    pending_time_bonus: int = 0
    clear_elapsed: int = 0
    clears: int = 0
    pieces_locked: int = 0

    def start(self, initial_drop_interval: int) -> None:
        self.score = 0
        self.chain_counter = 1
        self.drop_interval = initial_drop_interval
        self.pending_award = 0
        self.pending_time_bonus = 0
        self.clear_elapsed = 0
        self.clears = 0
        self.pieces_locked = 0


class CoreGame:
    """
    Main game simulation class.

    Orchestrates:
    - Grid store (gravity, match detection)
    - Active piece and next-piece queue
    - Scoring and difficulty policy
    - Round timer
    - Outbound sound/effect requests

    One call to tick() = one frame at the logical tick rate.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        seed: Optional[int] = None
    ):
        """
        Initialize game and start the first round.

        Args:
            config: Game configuration. Uses default if None.
            seed: Random seed for reproducibility.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._seed = seed

        # Subsystems
        self._catalog = get_catalog(config)
        self._grid = GridStore(config)
        self._piece = ActivePiece(config)
        self._generator = KindGenerator(config, seed)
        self._timer = RoundTimer(config)
        self._events = EventQueue()
        self._snapshot_builder = SnapshotBuilder(config)

        # Round state
        self._round = PuzzleRound(drop_interval=config.difficulty.initial_drop_interval)
        self._phase = Phase.FALLING
        self._phase_ticks = 0
        self._ticks = 0
        self._termination_reason = ""
        self._last_award: Optional[ClearAward] = None

        self._handlers = {
            Phase.FALLING: self._tick_falling,
            Phase.SETTLING: self._tick_settling,
            Phase.MATCHING: self._tick_matching,
            Phase.CLEARING: self._tick_clearing,
        }

        self._start_round()

    @property
    def config(self) -> GameConfig:
        return self._config

    @property
    def catalog(self) -> BlockCatalog:
        return self._catalog

    @property
    def grid(self) -> GridStore:
        return self._grid

    @property
    def piece(self) -> ActivePiece:
        return self._piece

    @property
    def timer(self) -> RoundTimer:
        return self._timer

    @property
    def round(self) -> PuzzleRound:
        return self._round

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def phase_ticks(self) -> int:
        """Ticks spent in the current phase."""
        return self._phase_ticks

    @property
    def score(self) -> int:
        return self._round.score

    @property
    def high_score(self) -> int:
        return self._round.high_score

    @property
    def countdown(self) -> int:
        return self._timer.countdown

    @property
    def ticks(self) -> int:
        """Ticks played this round."""
        return self._ticks

    @property
    def kind_pool(self) -> int:
        """Kinds the next generated triplet would draw from."""
        return kind_pool_size(self._round.score, self._config)

    @property
    def is_over(self) -> bool:
        return self._phase is Phase.ROUND_OVER

    @property
    def termination_reason(self) -> str:
        """Why the round ended: topped_out, time_up, or empty while playing."""
        return self._termination_reason

    @property
    def last_award(self) -> Optional[ClearAward]:
        return self._last_award

    def reset(self, seed: Optional[int] = None) -> GameSnapshot:
        """
        Start a new round. The high score is kept.

        Args:
            seed: New random seed. Continues the current stream if None.

        Returns:
            Initial game snapshot.
        """
        if seed is not None:
            self._seed = seed
        self._generator.reset(seed)
        self._start_round()
        return self.snapshot()

    def _start_round(self) -> None:
        self._grid.reset()
        self._round.start(self._config.difficulty.initial_drop_interval)
        self._timer.reset()
        self._events.clear()

        pool = kind_pool_size(0, self._config)
        current = self._generator.triplet(pool)
        self._piece.reset(current, self._generator.triplet(pool))

        self._phase = Phase.FALLING
        self._phase_ticks = 0
        self._ticks = 0
        self._termination_reason = ""
        self._last_award = None
        logger.debug("Round started (seed=%s)", self._seed)

    # ------------------------------------------------------------------
    # Tick
    # ------------------------------------------------------------------

    def tick(self, inp: Optional[InputSnapshot] = None) -> int:
        """
        Advance the game by one tick.

        Args:
            inp: Input sampled for this tick. Idle if None.

        Returns:
            Ticks left in the round, or 0 once the round is over.
        """
        if self._phase is Phase.ROUND_OVER:
            return 0
        if inp is None:
            inp = InputSnapshot.idle()

        self._ticks += 1
        next_phase = self._handlers[self._phase](inp)
        if next_phase is Phase.ROUND_OVER:
            self._end_round("topped_out")
            return 0
        if next_phase is self._phase:
            self._phase_ticks += 1
        else:
            self._transition(next_phase)

        countdown = self._timer.tick()
        if countdown == 0:
            self._end_round("time_up")
        return countdown

    def _transition(self, phase: Phase) -> None:
        logger.debug("tick %d: %s -> %s", self._ticks, self._phase.name, phase.name)
        self._phase = phase
        self._phase_ticks = 0

    def _end_round(self, reason: str) -> None:
        self._phase = Phase.ROUND_OVER
        self._termination_reason = reason
        logger.info(
            "Round over (%s): score=%d high=%d ticks=%d",
            reason, self._round.score, self._round.high_score, self._ticks
        )

    def _tick_falling(self, inp: InputSnapshot) -> Phase:
        # Input carried over from the previous phase is ignored for a while.
        accepts_input = self._phase_ticks >= self._config.timing.input_guard_ticks

        if accepts_input:
            repeat = self._config.input.repeat_after_ticks
            if is_triggered(inp.key(Key.LEFT), repeat) or is_triggered(inp.zone(TapZone.LEFT), repeat):
                self._piece.move(Direction.LEFT, self._grid)
            if is_triggered(inp.key(Key.RIGHT), repeat) or is_triggered(inp.zone(TapZone.RIGHT), repeat):
                self._piece.move(Direction.RIGHT, self._grid)
            if is_triggered(inp.key(Key.ROTATE), repeat) or is_triggered(inp.zone(TapZone.ROTATE), repeat):
                self._piece.rotate()

        forced = self._timer.countdown % self._round.drop_interval == 0
        soft = accepts_input and (
            inp.key(Key.DOWN) > 0
            or inp.zone(TapZone.DROP) > self._config.input.soft_drop_zone_ticks
        )
        if (forced or soft) and not self._piece.drop(self._grid):
            self._piece.lock(self._grid)
            self._round.chain_counter = 1
            self._round.pieces_locked += 1
            return Phase.SETTLING
        return Phase.FALLING

    def _tick_settling(self, inp: InputSnapshot) -> Phase:
        if self._grid.settle_step():
            return Phase.SETTLING
        return Phase.MATCHING

    def _tick_matching(self, inp: InputSnapshot) -> Phase:
        cleared = self._grid.detect_matches()
        if cleared > 0:
            self._apply_clear(cleared)
            return Phase.CLEARING

        self._piece.reset_anchor()
        if not self._grid.cells_empty(self._piece.anchor_row, self._piece.columns):
            return Phase.ROUND_OVER

        self._piece.promote(self._generator.triplet(self.kind_pool))
        return Phase.FALLING

    def _tick_clearing(self, inp: InputSnapshot) -> Phase:
        self._round.clear_elapsed += 1
        if self._round.clear_elapsed >= self._config.timing.clear_ticks:
            self._grid.clear_marked()
            return Phase.SETTLING
        return Phase.CLEARING

    def _apply_clear(self, cleared: int) -> None:
        self._events.push(SoundRequest(self._config.sounds.match))
        for row, col in self._grid.marked_cells():
            self._events.push(EffectRequest(row, col))

        r = self._round
        award = score_clear(
            cleared,
            chain_counter=r.chain_counter,
            score=r.score,
            high_score=r.high_score,
            drop_interval=r.drop_interval,
            config=self._config
        )
        r.score = award.score
        r.high_score = award.high_score
        r.drop_interval = award.drop_interval
        r.chain_counter = award.chain_counter
        r.pending_award = award.award
        r.pending_time_bonus = award.time_bonus
        r.clear_elapsed = 0
        r.clears += 1
        self._timer.extend(award.time_bonus)
        self._last_award = award
        logger.debug("tick %d: %r", self._ticks, award)

    # ------------------------------------------------------------------
    # Outbound
    # ------------------------------------------------------------------

    def drain_events(self) -> List[Event]:
        """Sound and effect requests raised since the last drain."""
        return self._events.drain()

    @property
    def pending_events(self) -> int:
        return len(self._events)

    def snapshot(self) -> GameSnapshot:
        """Current game state snapshot."""
        r = self._round
        return self._snapshot_builder.build(
            grid=self._grid,
            piece=self._piece,
            phase=self._phase,
            score=r.score,
            high_score=r.high_score,
            countdown=self._timer.countdown,
            drop_interval=r.drop_interval,
            chain_counter=r.chain_counter,
            kind_pool=self.kind_pool,
            ticks=self._ticks
        )

    def get_info(self) -> Dict[str, Any]:
        """Get additional info dict for Gymnasium."""
        r = self._round
        return {
            "score": r.score,
            "high_score": r.high_score,
            "countdown": self._timer.countdown,
            "phase": self._phase.name,
            "chain_counter": r.chain_counter,
            "drop_interval": r.drop_interval,
            "clears": r.clears,
            "pieces_locked": r.pieces_locked,
            "ticks": self._ticks,
            "terminated_reason": self._termination_reason,
        }

    def get_render_data(self) -> Dict[str, Any]:
        """
        Get data needed for rendering.

        Returns:
            Dict with grid arrays, piece cells and HUD values.
        """
        show_piece = self._phase is Phase.FALLING
        return {
            "rows": self._grid.rows,
            "cols": self._grid.cols,
            "grid": self._grid.to_array(),
            "clear_mask": self._grid.mask_array(),
            "piece_cells": self._piece.cells() if show_piece else [],
            "next_piece": self._piece.next,
            "phase": self._phase.name,
            "clear_progress": (
                self._round.clear_elapsed / self._config.timing.clear_ticks
                if self._phase is Phase.CLEARING else 0.0
            ),
            "score": self._round.score,
            "high_score": self._round.high_score,
            "countdown": self._timer.countdown,
            "time_text": self._timer.format(),
            "chain_counter": self._round.chain_counter,
            "pending_award": self._round.pending_award,
            "pending_time_bonus": self._round.pending_time_bonus,
            "is_over": self.is_over,
        }
