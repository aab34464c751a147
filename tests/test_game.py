"""
Tests for the CoreGame frame loop, basket control and views.
"""

from dataclasses import replace

import numpy as np
import pytest

from basket_catch.core.config_loader import _validate_config, load_config
from basket_catch.core.entities import BasketInput, ItemCategory
from basket_catch.core.events import EventKind, EventLog
from basket_catch.core.game import CoreGame
from basket_catch.core.render_solid import SolidRenderer
from basket_catch.core.session import SessionState


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def game(config):
    return CoreGame(config=config, seed=5)


def with_control(config, control):
    return replace(config, basket=replace(config.basket, control=control))


class TestOnboarding:
    """The onboarding item arrives at the catch line after the grace period."""

    @pytest.mark.parametrize("seed", [1, 2, 3, 42])
    def test_onboarding_caught_at_grace(self, config, seed):
        game = CoreGame(config=config, seed=seed)
        log = EventLog(game.events)
        item = game.items[0]
        assert item.category == ItemCategory.BENEFICIAL

        game.move_basket_to(item.x)

        caught_at = None
        for frame in range(1, 700):
            game.tick()
            if any(e.data["uid"] == item.uid for e in log.of_kind(EventKind.CATCH)):
                caught_at = frame
                break

        expected = round(config.spawn.grace_period * config.clock.fps)
        assert caught_at is not None
        assert abs(caught_at - expected) <= 1
        assert game.score == 5
        assert game.strikes == 0

    def test_single_item_during_grace(self, game, config):
        game.run_frames(int(config.spawn.grace_period * config.clock.fps) - 1)

        spawns = [it for it in game.items if it.uid != 0]
        assert spawns == []


class TestBasketControl:
    """Basket movement schemes."""

    def test_direct_bounds(self, game, config):
        game.run_frames(100, BasketInput(left=True))
        assert game.basket.x == 0

        game.run_frames(100, BasketInput(right=True))
        assert game.basket.x == config.field.width - game.basket.width

    def test_basket_width(self, game, config):
        assert game.basket.width == max(
            config.basket.width_min, int(config.field.width * config.basket.width_fraction)
        )

    def test_pointer_centres_and_clamps(self, game, config):
        game.move_basket_to(240.0)
        assert game.basket.center_x == pytest.approx(240.0)

        game.move_basket_to(-500.0)
        assert game.basket.x == 0

        game.move_basket_to(10_000.0)
        assert game.basket.x == config.field.width - game.basket.width

    def test_inertial_accelerates_and_caps(self, config):
        game = CoreGame(config=with_control(config, "inertial"), seed=5)

        game.tick(BasketInput(right=True))
        assert game.basket.vx == pytest.approx(config.basket.acceleration)

        game.move_basket_to(0.0)
        for _ in range(15):
            game.tick(BasketInput(right=True))
            assert abs(game.basket.vx) <= config.basket.max_speed

    def test_inertial_friction(self, config):
        game = CoreGame(config=with_control(config, "inertial"), seed=5)
        game.move_basket_to(100.0)
        game.run_frames(5, BasketInput(right=True))
        vx = game.basket.vx

        game.tick()

        assert game.basket.vx == pytest.approx(vx * config.basket.friction)

    def test_inertial_wall_stops_velocity(self, config):
        game = CoreGame(config=with_control(config, "inertial"), seed=5)

        game.run_frames(120, BasketInput(left=True))

        assert game.basket.x == 0
        assert game.basket.vx == 0.0

    def test_unknown_control_rejected(self, config):
        with pytest.raises(ValueError):
            _validate_config(with_control(config, "joystick"))


class TestFrameLoop:
    """Clock and determinism."""

    def test_clock_advances_per_frame(self, game, config):
        game.run_frames(90)

        assert game.frames_elapsed == 90
        assert game.now == pytest.approx(90 / config.clock.fps)

    def test_clock_runs_while_paused(self, game, config):
        game.pause()
        game.run_frames(60)

        assert game.now == pytest.approx(1.0)

    def test_same_seed_same_session(self, config):
        a = CoreGame(config=config, seed=99)
        b = CoreGame(config=config, seed=99)

        for frame in range(1500):
            direction = BasketInput(left=(frame // 90) % 2 == 0, right=(frame // 90) % 2 == 1)
            a.tick(direction)
            b.tick(direction)

        assert [(i.category, i.x, i.y) for i in a.items] == [(i.category, i.x, i.y) for i in b.items]
        assert a.score == b.score
        assert a.strikes == b.strikes

    def test_spawn_cadence_after_grace(self, game, config):
        log = EventLog(game.events)

        game.run_frames(int(12.5 * config.clock.fps))

        spawn_times = [e.time for e in log.of_kind(EventKind.SPAWN)]
        assert spawn_times[:3] == pytest.approx([10.0, 10.9, 11.8])

    def test_reset_with_new_seed(self, game):
        game.reset(seed=1234)
        again = CoreGame(config=game.config, seed=1234)

        assert game.items[0].x == again.items[0].x
        assert game.frames_elapsed == 0
        assert game.now == 0.0


class TestViews:
    """Snapshots, info and render data."""

    def test_render_data(self, game, config):
        data = game.get_render_data()

        assert data["field_width"] == config.field.width
        assert data["hearts"] == [True, True, True]
        assert data["state"] == SessionState.ACTIVE.value
        assert data["items"][0]["shape"] == "circle"
        assert set(data["basket"]) == {"x", "y", "width", "height"}

    def test_info(self, game):
        game.run_frames(10)
        info = game.get_info()

        assert info["score"] == 0
        assert info["level"] == 1
        assert info["state"] == "active"
        assert info["items"] == 1

    def test_snapshot_arrays(self, game, config):
        snap = game.snapshot()

        assert snap.obj_mask.shape == (config.spawn.max_items,)
        assert snap.items_count == 1
        assert snap.obj_mask[0]
        assert snap.obj_category[1] == -1
        assert list(snap.hearts) == [1, 1, 1]

    def test_solid_renderer(self, game):
        renderer = SolidRenderer(game.config)

        img = renderer.render(game.get_render_data(), 120, 200)

        assert img.shape == (200, 120, 3)
        assert img.dtype == np.uint8

    def test_paused_render_is_dimmed(self, game):
        renderer = SolidRenderer(game.config)
        active = renderer.render(game.get_render_data(), 60, 100)

        game.pause()
        paused = renderer.render(game.get_render_data(), 60, 100)

        assert paused.mean() < active.mean()
