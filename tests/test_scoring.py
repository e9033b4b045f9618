"""
Tests for clear awards, chain multiplier and difficulty policy.
"""

import pytest

from arcade.drop_core.config_loader import load_config
from arcade.drop_core.scoring import (
    kind_pool_size,
    next_drop_interval,
    score_clear,
    time_bonus_for,
)


@pytest.fixture
def config():
    return load_config()


class TestScoreClear:
    """Test award arithmetic."""

    def test_first_clear_award(self, config):
        """50 points per cell at chain 1."""
        award = score_clear(3, 1, 0, 0, 90, config)
        assert award.award == 150
        assert award.score == 150
        assert award.time_bonus == 0
        assert award.chain_counter == 2

    def test_chain_multiplies_award(self, config):
        award = score_clear(3, 4, 1000, 5000, 60, config)
        assert award.award == 600
        assert award.score == 1600
        assert award.chain_counter == 8

    def test_high_score_tracks_score(self, config):
        below = score_clear(3, 1, 0, 5000, 90, config)
        assert below.high_score == 5000
        assert not below.high_score_updated

        above = score_clear(4, 1, 4950, 5000, 90, config)
        assert above.high_score == 5150
        assert above.high_score_updated

    def test_non_positive_count_rejected(self, config):
        with pytest.raises(ValueError):
            score_clear(0, 1, 0, 0, 90, config)


class TestTimeBonus:
    """Time bonus on multiples of five cleared cells."""

    @pytest.mark.parametrize("cleared,bonus", [(3, 0), (4, 0), (5, 300), (7, 0), (10, 300)])
    def test_bonus_on_multiples_of_five(self, config, cleared, bonus):
        assert time_bonus_for(cleared, config) == bonus
        assert score_clear(cleared, 1, 0, 0, 90, config).time_bonus == bonus


class TestDifficulty:
    """Drop speed ramp and kind pool growth."""

    def test_interval_decrements_on_first_clear(self, config):
        assert next_drop_interval(90, 1, config) == 89

    def test_interval_unchanged_mid_cascade(self, config):
        assert next_drop_interval(90, 2, config) == 90
        assert next_drop_interval(90, 8, config) == 90

    def test_interval_floor(self, config):
        floor = config.difficulty.min_drop_interval
        assert next_drop_interval(floor, 1, config) == floor
        assert next_drop_interval(floor + 1, 1, config) == floor

    @pytest.mark.parametrize("score,pool", [
        (0, 4), (10000, 4), (10001, 5), (20000, 5), (20001, 6), (10 ** 7, 6),
    ])
    def test_kind_pool_thresholds(self, config, score, pool):
        assert kind_pool_size(score, config) == pool
