"""
Tests for the game state machine: locking, cascades, clearing and round end.
"""

import pytest
import numpy as np

from arcade.drop_core.config_loader import load_config
from arcade.drop_core.events import EffectRequest, SoundRequest
from arcade.drop_core.game import CoreGame, Phase
from arcade.drop_core.input_state import InputSnapshot, Key, TapZone


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def game(config):
    return CoreGame(config=config, seed=42)


def lock_at_floor(game, current):
    """Put `current` on the bottom row at the spawn column and lock it with a soft drop."""
    game.piece.current = current
    game.piece.anchor_row = game.grid.rows - 2
    game._phase_ticks = game.config.timing.input_guard_ticks
    game.tick(InputSnapshot.holding(Key.DOWN))


def run_until(game, phase, limit=500):
    for _ in range(limit):
        if game.phase is phase:
            return
        game.tick()
    raise AssertionError(f"phase {phase.name} not reached, stuck in {game.phase.name}")


def build_cascade(game):
    """
    Row 11 gets 1 1 [1 2 3] once the piece locks; clearing the 1s drops two 2s
    from row 10 into a second horizontal triple with the piece's 2.
    """
    game.grid.set(11, 1, 1)
    game.grid.set(11, 2, 1)
    game.grid.set(10, 2, 2)
    game.grid.set(10, 3, 2)
    lock_at_floor(game, (1, 2, 3))


class TestLocking:
    """Falling -> Settling on a failed drop."""

    def test_lock_moves_to_settling(self, game):
        game.round.chain_counter = 8
        lock_at_floor(game, (1, 2, 3))

        assert game.phase is Phase.SETTLING
        assert game.round.chain_counter == 1
        assert game.round.pieces_locked == 1
        assert [game.grid.get(11, c) for c in (3, 4, 5)] == [1, 2, 3]

    def test_forced_drop_on_interval(self, game):
        """First tick: countdown is a multiple of the interval, so the piece drops."""
        game.tick()
        assert game.piece.anchor_row == 2
        for _ in range(5):
            game.tick()
        assert game.piece.anchor_row == 2

    def test_falling_piece_not_in_grid(self, game):
        game.tick()
        assert (game.grid.to_array()[1:-1, 1:-1] == 0).all()


class TestInput:
    """Input guard, movement and soft drop."""

    def test_input_guard(self, game, config):
        """Input is ignored until Falling has run for the guard period."""
        left = InputSnapshot.holding(Key.LEFT)
        game.tick(left)
        assert game.piece.anchor_col == config.grid.spawn_col

        while game.phase_ticks < config.timing.input_guard_ticks:
            game.tick()
        game.tick(left)
        assert game.piece.anchor_col == config.grid.spawn_col - 1

    def test_rotate_and_repeat(self, game, config):
        while game.phase_ticks < config.timing.input_guard_ticks:
            game.tick()
        start = game.piece.current
        a, b, c = start

        game.tick(InputSnapshot.holding(Key.ROTATE, ticks=1))
        assert game.piece.current == (c, a, b)
        game.tick(InputSnapshot.holding(Key.ROTATE, ticks=2))
        assert game.piece.current == (c, a, b)

    def test_drop_zone_needs_hold(self, game, config):
        while game.phase_ticks < config.timing.input_guard_ticks:
            game.tick()
        row = game.piece.anchor_row

        game.tick(InputSnapshot(zones=(0, 1, 0, 0)))
        assert game.piece.anchor_row == row
        game.tick(InputSnapshot(zones=(0, 2, 0, 0)))
        assert game.piece.anchor_row == row + 1

    def test_tap_zone_moves_piece(self, game, config):
        while game.phase_ticks < config.timing.input_guard_ticks:
            game.tick()
        zones = [0, 0, 0, 0]
        zones[TapZone.RIGHT] = 1
        game.tick(InputSnapshot(zones=tuple(zones)))
        assert game.piece.anchor_col == config.grid.spawn_col + 1


class TestCascade:
    """Chains, scoring and difficulty during a cascade."""

    def test_cascade_doubles_chain(self, game, config):
        build_cascade(game)
        run_until(game, Phase.FALLING)

        assert game.round.clears == 2
        # 50*3*1 + 50*3*2
        assert game.score == 450
        assert game.high_score == 450
        assert game.round.chain_counter == 4
        assert game.round.drop_interval == config.difficulty.initial_drop_interval - 1

    def test_chain_resets_on_next_lock(self, game):
        build_cascade(game)
        run_until(game, Phase.FALLING)
        lock_at_floor(game, (4, 4, 3))
        assert game.round.chain_counter == 1

    def test_clear_emits_sound_then_effects(self, game, config):
        build_cascade(game)
        run_until(game, Phase.CLEARING)

        events = game.drain_events()
        assert events[0] == SoundRequest(config.sounds.match)
        assert events[1:] == [EffectRequest(11, 1), EffectRequest(11, 2), EffectRequest(11, 3)]
        assert game.drain_events() == []

    def test_clearing_lasts_clear_ticks(self, game, config):
        build_cascade(game)
        run_until(game, Phase.CLEARING)

        for _ in range(config.timing.clear_ticks - 1):
            game.tick()
            assert game.phase is Phase.CLEARING
        assert game.grid.marked_count == 3

        game.tick()
        assert game.phase is Phase.SETTLING
        assert game.grid.marked_count == 0
        assert game.grid.is_empty(11, 1)

    def test_floating_run_scores_at_chain_one(self, game):
        """A horizontal run of 2s at row 5 clears 3 cells for 150 points."""
        for col in (3, 4, 5):
            game.grid.set(5, col, 2)
        game._phase = Phase.MATCHING
        game.tick()

        assert game.grid.marked_cells() == [(5, 3), (5, 4), (5, 5)]
        assert game.round.pending_award == 150
        assert game.score == 150

    def test_time_bonus_extends_countdown(self, game):
        for col in (2, 3, 4):
            game.grid.set(11, col, 5)
        game.grid.set(10, 3, 5)
        game.grid.set(9, 3, 5)
        game._phase = Phase.MATCHING
        before = game.countdown

        game.tick()

        assert game.phase is Phase.CLEARING
        assert game.round.pending_time_bonus == 300
        assert game.countdown == before + 300 - 1


class TestSpawn:
    """Matching with nothing to clear spawns the next piece or ends the round."""

    def test_promotes_next_piece(self, game):
        upcoming = game.piece.next
        game._phase = Phase.MATCHING
        game.tick()

        assert game.phase is Phase.FALLING
        assert game.piece.current == upcoming
        assert game.piece.anchor_row == game.config.grid.spawn_row

    @pytest.mark.parametrize("col", [3, 4, 5])
    def test_blocked_spawn_ends_round(self, game, col):
        game.grid.set(1, col, 1)
        game._phase = Phase.MATCHING
        before = game.grid.to_array()
        current = game.piece.current

        assert game.tick() == 0

        assert game.phase is Phase.ROUND_OVER
        assert game.termination_reason == "topped_out"
        np.testing.assert_array_equal(game.grid.to_array(), before)
        assert game.piece.current == current

        ticks = game.ticks
        assert game.tick() == 0
        assert game.ticks == ticks


class TestRoundLifecycle:
    """Reset keeps the high score; kind pool follows score."""

    def test_reset_keeps_high_score(self, game):
        build_cascade(game)
        run_until(game, Phase.FALLING)
        game.reset(seed=1)

        assert game.score == 0
        assert game.high_score == 450
        assert game.phase is Phase.FALLING
        assert game.countdown == game.config.timing.round_ticks

    def test_kind_pool_follows_score(self, game):
        assert game.kind_pool == 4
        game.round.score = 15000
        assert game.kind_pool == 5
        game.round.score = 25000
        assert game.kind_pool == 6

    def test_fresh_next_uses_current_pool(self, game, monkeypatch):
        """The preview drawn at spawn time uses the pool for the score at that moment."""
        pools = []
        monkeypatch.setattr(game._generator, "triplet", lambda pool: pools.append(pool) or (1, 1, 1))
        game.round.score = 20001
        game._phase = Phase.MATCHING
        game.tick()

        assert pools == [6]
        assert game.piece.next == (1, 1, 1)

    def test_same_seed_same_pieces(self, config):
        a = CoreGame(config=config, seed=99)
        b = CoreGame(config=config, seed=99)
        assert (a.piece.current, a.piece.next) == (b.piece.current, b.piece.next)
