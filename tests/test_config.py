"""
Tests for configuration loading and validation.
"""

import os

import pytest
import yaml

from isotopic.isotope_core import config_loader
from isotopic.isotope_core.config_loader import load_config, get_config, reload_config

DEFAULT_CONFIG_PATH = os.path.join(
    os.path.dirname(os.path.dirname(config_loader.__file__)),
    "game_config.yaml"
)


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def raw_config():
    with open(DEFAULT_CONFIG_PATH, "r", encoding="utf-8") as f:
        return yaml.safe_load(f)


def _write(tmp_path, raw):
    path = tmp_path / "game_config.yaml"
    path.write_text(yaml.safe_dump(raw), encoding="utf-8")
    return str(path)


class TestDefaultConfig:
    """The shipped configuration."""

    def test_board_dimensions(self, config):
        assert config.board.width == 10
        assert config.board.height == 20

    def test_ninety_two_elements(self, config):
        assert len(config.elements) == 92
        assert config.max_atomic_number == 92
        assert config.get_element(1).symbol == "H"
        assert config.get_element(92).symbol == "U"

    def test_unstable_half_lives(self, config):
        assert config.get_element(43).half_life == 24.0
        assert config.get_element(61).half_life == 19.0
        assert config.get_element(26).is_stable

    def test_stages(self, config):
        assert [s.unlock_at for s in config.stages] == [0, 2, 6, 26]
        assert config.first_stage.spawn_pool == (1,)
        assert config.stages[-1].spawn_pool == (2, 4, 6, 12, 26)

    def test_level_interval_clamps(self, config):
        assert config.timing.level_interval(1) == 1.0
        assert config.timing.level_interval(20) == pytest.approx(0.03)
        assert config.timing.level_interval(99) == pytest.approx(0.03)
        assert config.timing.level_interval(0) == 1.0

    def test_get_element_out_of_range(self, config):
        with pytest.raises(ValueError):
            config.get_element(93)

    def test_cached_config(self):
        first = reload_config()
        assert get_config() is first


class TestValidation:
    """Malformed configurations are rejected."""

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(str(tmp_path / "missing.yaml"))

    def test_custom_file_loads(self, tmp_path, raw_config):
        raw_config["board"]["width"] = 12
        config = load_config(_write(tmp_path, raw_config))
        assert config.board.width == 12

    def test_element_order(self, tmp_path, raw_config):
        raw_config["elements"][0], raw_config["elements"][1] = (
            raw_config["elements"][1], raw_config["elements"][0]
        )
        with pytest.raises(ValueError):
            load_config(_write(tmp_path, raw_config))

    def test_stage_thresholds_increase(self, tmp_path, raw_config):
        raw_config["stages"][2]["unlock_at"] = 1
        with pytest.raises(ValueError):
            load_config(_write(tmp_path, raw_config))

    def test_spawn_pool_known_elements(self, tmp_path, raw_config):
        raw_config["stages"][0]["spawn_pool"] = [93]
        with pytest.raises(ValueError):
            load_config(_write(tmp_path, raw_config))

    def test_decay_steps(self, tmp_path, raw_config):
        raw_config["decay"]["min_step"] = 4
        with pytest.raises(ValueError):
            load_config(_write(tmp_path, raw_config))
