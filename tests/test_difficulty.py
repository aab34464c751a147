"""
Tests for level progression.
"""

import pytest

from basket_catch.core.config_loader import load_config
from basket_catch.core.difficulty import DifficultyController
from basket_catch.core.events import EventKind, EventLog
from basket_catch.core.game import SPAWN_TIMER, CoreGame
from basket_catch.core.session import SessionContext


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def ctx(config):
    return SessionContext.from_config(config)


@pytest.fixture
def controller(config):
    return DifficultyController(config)


class TestDifficultyController:
    """Level timer ticks."""

    def test_level_up_after_level_time(self, controller, ctx):
        for _ in range(9):
            assert controller.tick(ctx) is None
        assert ctx.level == 1

        level_up = controller.tick(ctx)

        assert level_up is not None
        assert level_up.level == 2
        assert ctx.level == 2
        assert ctx.fall_speed == pytest.approx(3.6)
        assert ctx.spawn_interval_ms == 900
        assert ctx.level_elapsed == 0.0

    def test_successive_levels(self, controller, ctx):
        for _ in range(30):
            controller.tick(ctx)

        assert ctx.level == 4
        assert ctx.fall_speed == pytest.approx(2.0 + 3 * 1.6)
        assert ctx.spawn_interval_ms == 729

    def test_interval_shrink(self, controller):
        assert controller.next_interval(1000) == 900
        assert controller.next_interval(900) == 810
        assert controller.next_interval(810) == 729

    def test_interval_floor(self, controller):
        assert controller.next_interval(270) == 250
        assert controller.next_interval(250) == 250

    def test_interval_reaches_floor(self, controller, ctx):
        for _ in range(10 * 30):
            controller.tick(ctx)

        assert ctx.spawn_interval_ms == 250

    def test_inactive_tick_does_not_accumulate(self, controller, ctx):
        for _ in range(20):
            assert controller.tick(ctx, active=False) is None

        assert ctx.level == 1
        assert ctx.level_elapsed == 0.0


class TestDifficultyInGame:
    """Level timer wired into the frame loop."""

    def test_level_two_after_ten_seconds(self, config):
        game = CoreGame(config=config, seed=11)
        log = EventLog(game.events)

        game.run_frames(10 * config.clock.fps - 1)
        assert game.level == 1

        game.tick()

        assert game.level == 2
        assert game.fall_speed == pytest.approx(3.6)
        assert game.spawn_interval_ms == 900
        assert len(log.of_kind(EventKind.LEVEL_UP)) == 1

    def test_spawn_timer_replaced_on_level_up(self, config):
        game = CoreGame(config=config, seed=11)

        game.run_frames(10 * config.clock.fps)

        timer = game.scheduler.get(SPAWN_TIMER)
        assert timer is not None
        assert timer.interval == pytest.approx(0.9)
        assert timer.due == pytest.approx(10.9)

    def test_level_frozen_while_paused(self, config):
        game = CoreGame(config=config, seed=11)
        game.run_frames(5 * config.clock.fps)
        game.pause()

        game.run_frames(20 * config.clock.fps)

        assert game.level == 1
        assert game.context.level_elapsed == pytest.approx(5.0)
