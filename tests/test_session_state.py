"""
Tests for pause / resume / game-over transitions.
"""

import pytest

from basket_catch.core.config_loader import load_config
from basket_catch.core.entities import BasketInput, Item, ItemCategory
from basket_catch.core.events import EventKind, EventLog
from basket_catch.core.game import LEVEL_TIMER, PROMPT_TIMER, SPAWN_TIMER, CoreGame
from basket_catch.core.session import SessionState, SessionStateMachine


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def machine():
    return SessionStateMachine()


@pytest.fixture
def game(config):
    return CoreGame(config=config, seed=21)


@pytest.fixture
def log(game):
    return EventLog(game.events)


def force_game_over(game):
    """Break all but one heart and drop a beneficial item past the bottom."""
    while game.strikes < game.config.rules.max_strikes - 1:
        game.context.hearts.break_one()
    game.items.append(Item(
        uid=game.context.allocate_uid(), x=40.0, y=900.0, radius=15.0,
        category=ItemCategory.BENEFICIAL, vy=1.0
    ))
    game.tick()


class TestStateMachine:
    """Transitions in isolation."""

    def test_starts_active(self, machine):
        assert machine.state == SessionState.ACTIVE
        assert machine.is_active

    def test_user_pause_and_resume(self, machine):
        assert machine.pause_user()
        assert machine.state == SessionState.PAUSED_USER
        assert not machine.pause_user()

        assert machine.resume_user()
        assert machine.state == SessionState.ACTIVE
        assert not machine.resume_user()

    def test_focus_pause_and_resume(self, machine):
        assert machine.focus_lost()
        assert machine.state == SessionState.PAUSED_AUTO
        assert not machine.focus_lost()

        assert machine.focus_gained()
        assert machine.state == SessionState.ACTIVE

    def test_focus_gain_does_not_resume_user_pause(self, machine):
        machine.pause_user()

        assert not machine.focus_lost()
        assert not machine.focus_gained()
        assert machine.state == SessionState.PAUSED_USER

    def test_user_pause_takes_over_auto_pause(self, machine):
        machine.focus_lost()

        assert machine.pause_user()
        assert machine.state == SessionState.PAUSED_USER

        assert not machine.focus_gained()
        assert machine.state == SessionState.PAUSED_USER

        assert machine.resume_user()
        assert machine.state == SessionState.ACTIVE

    def test_user_resume_does_not_clear_auto_pause(self, machine):
        machine.focus_lost()

        assert not machine.resume_user()
        assert machine.state == SessionState.PAUSED_AUTO

        assert machine.focus_gained()
        assert machine.state == SessionState.ACTIVE

    def test_user_resume_while_unfocused_waits_for_focus(self, machine):
        machine.focus_lost()
        machine.pause_user()

        assert not machine.resume_user()
        assert machine.state == SessionState.PAUSED_AUTO

        assert machine.focus_gained()
        assert machine.state == SessionState.ACTIVE

    def test_toggle(self, machine):
        assert machine.toggle_pause()
        assert machine.is_paused
        assert machine.toggle_pause()
        assert machine.is_active

    def test_game_over_is_terminal(self, machine):
        assert machine.end()
        assert not machine.end()

        assert not machine.pause_user()
        assert not machine.resume_user()
        assert not machine.focus_lost()
        assert not machine.focus_gained()
        assert machine.state == SessionState.GAME_OVER

    def test_game_over_while_paused(self, machine):
        machine.pause_user()
        machine.end()

        assert machine.state == SessionState.GAME_OVER
        assert not machine.is_paused


class TestPauseInGame:
    """Pause effects on timers and the frame loop."""

    def test_pause_cancels_spawn_timer(self, game, log):
        assert game.scheduler.is_active(SPAWN_TIMER)

        assert game.pause()

        assert not game.scheduler.is_active(SPAWN_TIMER)
        assert game.scheduler.is_active(LEVEL_TIMER)
        assert log.of_kind(EventKind.PAUSED)[0].data["reason"] == "user"

    def test_resume_rearms_spawn_timer(self, game, log):
        game.run_frames(30)
        game.pause()

        assert game.resume()

        timer = game.scheduler.get(SPAWN_TIMER)
        assert timer is not None
        assert timer.due == pytest.approx(game.now + 1.0)
        assert len(log.of_kind(EventKind.RESUMED)) == 1

    def test_double_pause_and_resume_are_noops(self, game, log):
        assert game.pause()
        assert not game.pause()
        assert game.resume()
        assert not game.resume()

        assert len(log.of_kind(EventKind.PAUSED)) == 1
        assert len(log.of_kind(EventKind.RESUMED)) == 1

    def test_frames_frozen_while_paused(self, game):
        item = game.items[0]
        y0 = item.y
        x0 = game.basket.x
        game.pause()

        results = game.run_frames(120, BasketInput(right=True))

        assert all(not r.ran for r in results)
        assert item.y == y0
        assert game.basket.x == x0

    def test_pointer_ignored_while_paused(self, game):
        x0 = game.basket.x
        game.pause()

        game.move_basket_to(0.0)

        assert game.basket.x == x0

    def test_no_spawns_while_paused(self, game):
        game.run_frames(11 * game.config.clock.fps)
        game.pause()
        count = len(game.items)

        game.run_frames(10 * game.config.clock.fps)

        assert len(game.items) == count

    def test_focus_cycle(self, game, log):
        assert game.focus_lost()
        assert game.state == SessionState.PAUSED_AUTO
        assert not game.scheduler.is_active(SPAWN_TIMER)

        assert game.focus_gained()
        assert game.state == SessionState.ACTIVE
        assert game.scheduler.is_active(SPAWN_TIMER)
        assert [e.data["reason"] for e in log.of_kind(EventKind.PAUSED)] == ["auto"]

    def test_focus_gain_keeps_user_pause(self, game):
        game.pause()
        game.focus_lost()

        assert not game.focus_gained()
        assert game.state == SessionState.PAUSED_USER
        assert not game.scheduler.is_active(SPAWN_TIMER)

    def test_user_pause_over_auto_pause(self, game, log):
        game.focus_lost()

        game.pause()
        assert game.state == SessionState.PAUSED_USER

        assert not game.focus_gained()
        assert game.resume()
        assert game.state == SessionState.ACTIVE
        assert len(log.of_kind(EventKind.RESUMED)) == 1

    def test_resume_without_focus_keeps_spawner_stopped(self, game, log):
        game.focus_lost()

        assert not game.resume()
        assert game.state == SessionState.PAUSED_AUTO
        assert not game.scheduler.is_active(SPAWN_TIMER)
        assert log.of_kind(EventKind.RESUMED) == []


class TestGameOver:
    """Terminal state."""

    def test_game_over_halts_everything(self, game, log):
        force_game_over(game)

        assert game.is_over
        assert game.state == SessionState.GAME_OVER
        assert not game.scheduler.is_active(SPAWN_TIMER)
        assert not game.scheduler.is_active(LEVEL_TIMER)
        assert len(log.of_kind(EventKind.GAME_OVER)) == 1

    def test_final_frame_reports_game_over_with_later_heal(self, game, log):
        ctx = game.context
        ctx.hearts.break_one()
        ctx.hearts.break_one()
        delta = 1.0 + ctx.fall_speed * game.config.rules.fall_speed_scale
        game.items.insert(0, Item(
            uid=ctx.allocate_uid(), x=game.basket.center_x, y=game.basket.y + 3 - 15.0 - delta,
            radius=15.0, category=ItemCategory.HEALING, vy=1.0
        ))
        game.items.append(Item(
            uid=ctx.allocate_uid(), x=40.0, y=900.0, radius=15.0,
            category=ItemCategory.BENEFICIAL, vy=1.0
        ))

        result = game.tick()

        assert game.is_over
        assert result.game_over
        assert game.strikes == game.config.rules.max_strikes
        assert log.of_kind(EventKind.HEAL) == []
        assert len(log.of_kind(EventKind.GAME_OVER)) == 1

    def test_no_progress_after_game_over(self, game):
        force_game_over(game)
        positions = [(it.uid, it.y) for it in game.items]
        score = game.score

        game.run_frames(20 * game.config.clock.fps)

        assert [(it.uid, it.y) for it in game.items] == positions
        assert game.score == score
        assert game.level == 1

    def test_pause_rejected_after_game_over(self, game):
        force_game_over(game)

        assert not game.pause()
        assert not game.focus_lost()
        assert game.state == SessionState.GAME_OVER

    def test_prompt_after_delay_for_qualifying_score(self, config):
        game = CoreGame(config=config, seed=21, highscore_check=lambda score: True)
        log = EventLog(game.events)

        force_game_over(game)
        assert game.highscore_pending
        assert game.scheduler.is_active(PROMPT_TIMER)
        assert log.of_kind(EventKind.GAME_OVER)[0].data["highscore"] is True

        game.run_frames(30)
        assert log.of_kind(EventKind.HIGHSCORE_PROMPT) == []

        game.run_frames(10)
        prompts = log.of_kind(EventKind.HIGHSCORE_PROMPT)
        assert len(prompts) == 1
        game_over_time = log.of_kind(EventKind.GAME_OVER)[0].time
        assert prompts[0].time - game_over_time == pytest.approx(0.6, abs=1.0 / 60)
        assert not game.highscore_pending

    def test_no_prompt_for_non_qualifying_score(self, config):
        game = CoreGame(config=config, seed=21, highscore_check=lambda score: False)
        log = EventLog(game.events)

        force_game_over(game)
        game.run_frames(120)

        assert log.of_kind(EventKind.HIGHSCORE_PROMPT) == []
        assert log.of_kind(EventKind.GAME_OVER)[0].data["highscore"] is False

    def test_reset_starts_fresh_session(self, game):
        force_game_over(game)

        game.reset()

        assert game.state == SessionState.ACTIVE
        assert game.score == 0
        assert game.strikes == 0
        assert game.level == 1
        assert len(game.items) == 1
        assert game.items[0].category == ItemCategory.BENEFICIAL
        assert game.scheduler.is_active(SPAWN_TIMER)
        assert game.scheduler.is_active(LEVEL_TIMER)
