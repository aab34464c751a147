"""
Tests for configuration loading and validation.
"""

import pytest
import yaml

from basket_catch.core.config_loader import DEFAULT_CONFIG_PATH, get_config, load_config, reload_config
from basket_catch.core.entities import ItemCategory


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def raw_config():
    with open(DEFAULT_CONFIG_PATH) as f:
        return yaml.safe_load(f)


def write_config(tmp_path, raw):
    path = tmp_path / "game_config.yaml"
    path.write_text(yaml.safe_dump(raw))
    return str(path)


class TestDefaults:
    """Shipped tunables."""

    def test_field_and_basket(self, config):
        assert config.field.width == 480
        assert config.field.height == 800
        assert config.basket_width == 80
        assert config.basket_y == 742

    def test_spawn(self, config):
        assert config.spawn.max_items == 5
        assert config.spawn.interval_ms == 1000
        assert config.spawn.min_interval_ms == 250
        assert config.spawn.grace_period == 9.5
        assert config.spawn.weights == {
            ItemCategory.BENEFICIAL: 0.6,
            ItemCategory.HARMFUL: 0.3,
            ItemCategory.EXPLOSIVE: 0.1,
        }

    def test_difficulty_and_rules(self, config):
        assert config.difficulty.level_time == 10
        assert config.difficulty.fall_speed_step == 1.6
        assert config.difficulty.spawn_interval_factor == 0.9
        assert config.rules.max_strikes == 3
        assert config.rules.immunity_seconds == 2.0
        assert config.rules.fall_speed_scale == 0.16

    def test_effect_table(self, config):
        beneficial = config.get_effects(ItemCategory.BENEFICIAL)
        assert (beneficial.catch.score, beneficial.catch.strikes) == (5, 0)
        assert (beneficial.miss.score, beneficial.miss.strikes) == (-20, 1)

        assert config.get_effects(ItemCategory.HARMFUL).catch.score == -8
        assert config.get_effects(ItemCategory.HARMFUL).miss.is_noop

        explosive = config.get_effects(ItemCategory.EXPLOSIVE)
        assert explosive.catch.immunity
        assert explosive.catch.strikes == 1
        assert explosive.catch.score == 0

        healing = config.get_effects(ItemCategory.HEALING)
        assert (healing.catch.score, healing.catch.strikes) == (10, -1)

    def test_leaderboard(self, config):
        assert config.leaderboard.size == 10
        assert config.leaderboard.name_max_length == 8
        assert config.leaderboard.placeholder_name == "???"


class TestValidation:
    """Invalid configurations are rejected."""

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(str(tmp_path / "nope.yaml"))

    def test_weights_must_sum_to_one(self, tmp_path, raw_config):
        raw_config["spawn"]["weights"]["beneficial"] = 0.7

        with pytest.raises(ValueError, match="sum to 1.0"):
            load_config(write_config(tmp_path, raw_config))

    def test_healing_not_in_weights(self, tmp_path, raw_config):
        raw_config["spawn"]["weights"] = {"beneficial": 0.5, "harmful": 0.3, "explosive": 0.1, "healing": 0.1}

        with pytest.raises(ValueError, match="healing"):
            load_config(write_config(tmp_path, raw_config))

    def test_unknown_category(self, tmp_path, raw_config):
        raw_config["effects"]["golden"] = {"catch": {"score": 100}}

        with pytest.raises(ValueError, match="golden"):
            load_config(write_config(tmp_path, raw_config))

    def test_missing_effect_row(self, tmp_path, raw_config):
        del raw_config["effects"]["healing"]

        with pytest.raises(ValueError, match="missing"):
            load_config(write_config(tmp_path, raw_config))

    def test_bad_control_scheme(self, tmp_path, raw_config):
        raw_config["basket"]["control"] = "joystick"

        with pytest.raises(ValueError, match="control"):
            load_config(write_config(tmp_path, raw_config))

    def test_custom_config_round_trip(self, tmp_path, raw_config):
        raw_config["rules"]["max_strikes"] = 5

        config = load_config(write_config(tmp_path, raw_config))

        assert config.rules.max_strikes == 5


class TestCaching:
    def test_get_config_is_cached(self):
        assert get_config() is get_config()

    def test_reload_replaces_cache(self):
        first = get_config()
        second = reload_config()

        assert second is not first
        assert get_config() is second
