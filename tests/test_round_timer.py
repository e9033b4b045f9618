"""
Tests for the round countdown.
"""

import pytest
from dataclasses import replace

from arcade.drop_core.config_loader import load_config
from arcade.drop_core.game import CoreGame, Phase
from arcade.drop_core.timer import RoundTimer


@pytest.fixture
def config():
    return load_config()


class TestRoundTimer:
    """Test countdown arithmetic."""

    def test_counts_down_to_zero(self, config):
        timer = RoundTimer(config)
        for _ in range(config.timing.round_ticks - 1):
            assert timer.tick() > 0
        assert timer.tick() == 0
        assert timer.expired

    def test_never_goes_negative(self, config):
        timer = RoundTimer(config)
        for _ in range(config.timing.round_ticks + 10):
            timer.tick()
        assert timer.countdown == 0

    def test_extend_adds_ticks(self, config):
        timer = RoundTimer(config)
        timer.extend(300)
        assert timer.countdown == config.timing.round_ticks + 300
        with pytest.raises(ValueError):
            timer.extend(-1)

    def test_format(self, config):
        timer = RoundTimer(config)
        assert timer.format() == "3:00"
        timer.tick()
        assert timer.format() == "3:00"
        for _ in range(30):
            timer.tick()
        assert timer.format() == "2:59"


class TestRoundTimeout:
    """The round ends once the countdown runs out."""

    def test_idle_round_times_out(self, config):
        """With no forced drops the round lasts exactly round_ticks ticks."""
        slow = replace(
            config,
            difficulty=replace(config.difficulty, initial_drop_interval=10 ** 6)
        )
        game = CoreGame(config=slow, seed=1)

        for _ in range(slow.timing.round_ticks - 1):
            assert game.tick() > 0
        assert game.tick() == 0

        assert game.phase is Phase.ROUND_OVER
        assert game.termination_reason == "time_up"
        assert game.tick() == 0
