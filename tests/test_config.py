"""
Tests for configuration loading and validation.
"""

import pytest
import yaml
from pathlib import Path

import arcade
from arcade.drop_core.config_loader import load_config
from arcade.drop_core.block_catalog import BlockCatalog


@pytest.fixture
def config():
    return load_config()


DEFAULT_CONFIG = Path(arcade.__file__).parent / "game_config.yaml"


@pytest.fixture
def raw_config():
    with open(DEFAULT_CONFIG) as f:
        return yaml.safe_load(f)


class TestConfig:
    """Default config values and validation."""

    def test_default_values(self, config):
        assert (config.grid.rows, config.grid.cols) == (13, 9)
        assert config.timing.round_ticks == 5400
        assert config.difficulty.initial_drop_interval == 90
        assert config.num_kinds == 6

    def test_get_block_is_one_based(self, config):
        assert config.get_block(1).id == 1
        with pytest.raises(ValueError):
            config.get_block(0)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(str(tmp_path / "nope.yaml"))

    def test_spawn_must_fit(self, raw_config, tmp_path):
        raw_config["grid"]["spawn_col"] = 1
        path = tmp_path / "bad.yaml"
        path.write_text(yaml.safe_dump(raw_config))
        with pytest.raises(ValueError):
            load_config(str(path))

    def test_pool_larger_than_catalog(self, raw_config, tmp_path):
        raw_config["difficulty"]["kind_pool"][-1]["kinds"] = 9
        path = tmp_path / "bad.yaml"
        path.write_text(yaml.safe_dump(raw_config))
        with pytest.raises(ValueError):
            load_config(str(path))


class TestBlockCatalog:
    """Kind lookup."""

    def test_lookup(self, config):
        catalog = BlockCatalog(config)
        assert len(catalog) == config.num_kinds
        assert catalog[1].name == "ruby"
        assert catalog.get_by_name("pearl").id == 6
        with pytest.raises(IndexError):
            catalog[0]
