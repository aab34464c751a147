"""
Core Game
=========

Main game orchestrator combining the clock, spawner, difficulty controller,
simulation step and session state machine.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, Tuple

from basket_catch.core.config_loader import GameConfig, get_config
from basket_catch.core.difficulty import DifficultyController
from basket_catch.core.entities import Basket, BasketInput, Item
from basket_catch.core.events import EventBus, EventKind, GameEvent
from basket_catch.core.item_catalog import ItemCatalog, get_catalog
from basket_catch.core.scheduler import Scheduler
from basket_catch.core.session import SessionContext, SessionState, SessionStateMachine
from basket_catch.core.simulation import FrameResult, SimulationStep
from basket_catch.core.spawner import Spawner
from basket_catch.core.state_snapshot import GameSnapshot, SnapshotBuilder


SPAWN_TIMER = "spawn"
LEVEL_TIMER = "level"
PROMPT_TIMER = "name_prompt"


class CoreGame:
    """
    One play session, driven frame by frame.

    Orchestrates:
    - Simulated clock and named timers (spawn, level, name prompt)
    - Spawner
    - Difficulty controller
    - Simulation step
    - Session state machine
    - Event bus for cosmetic subscribers

    One `tick()` = one rendered frame: the clock advances by 1/fps, due
    timers fire, then the simulation step runs. `reset()` starts a brand
    new session; game over is never left any other way.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        seed: Optional[int] = None,
        highscore_check: Optional[Callable[[int], bool]] = None
    ):
        """
        Initialize game.

        Args:
            config: Game configuration. Uses default if None.
            seed: Random seed for reproducibility.
            highscore_check: Predicate on the final score; when it returns
                True a name prompt is scheduled after game over.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._seed = seed
        self._highscore_check = highscore_check

        self._catalog: ItemCatalog = get_catalog(config)
        self._bus = EventBus()
        self._spawner = Spawner(config, seed)
        self._difficulty = DifficultyController(config)
        self._simulation = SimulationStep(
            config,
            emit=self._bus.emit,
            on_max_strikes=self._end_game
        )
        self._snapshot_builder = SnapshotBuilder(config)

        # Per-session state (rebuilt by reset)
        self._scheduler = Scheduler()
        self._session = SessionStateMachine()
        self._ctx = SessionContext.from_config(config)
        self._frames_elapsed = 0
        self._highscore_pending = False

        self._start_session()

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def config(self) -> GameConfig:
        """Game configuration."""
        return self._config

    @property
    def catalog(self) -> ItemCatalog:
        return self._catalog

    @property
    def events(self) -> EventBus:
        """Event bus for cosmetic subscribers."""
        return self._bus

    @property
    def scheduler(self) -> Scheduler:
        return self._scheduler

    @property
    def context(self) -> SessionContext:
        """Session context (read-only outside the core)."""
        return self._ctx

    @property
    def basket(self) -> Basket:
        return self._ctx.basket

    @property
    def items(self) -> List[Item]:
        return self._ctx.items

    @property
    def score(self) -> int:
        """Current score."""
        return self._ctx.score

    @property
    def strikes(self) -> int:
        return self._ctx.strikes

    @property
    def hearts(self) -> Tuple[bool, ...]:
        return self._ctx.hearts.slots

    @property
    def level(self) -> int:
        return self._ctx.level

    @property
    def fall_speed(self) -> float:
        return self._ctx.fall_speed

    @property
    def spawn_interval_ms(self) -> int:
        return self._ctx.spawn_interval_ms

    @property
    def immune(self) -> bool:
        return self._ctx.immunity.active

    @property
    def state(self) -> SessionState:
        return self._session.state

    @property
    def is_over(self) -> bool:
        """True if the session has ended."""
        return self._session.is_over

    @property
    def is_paused(self) -> bool:
        return self._session.is_paused

    @property
    def now(self) -> float:
        """Simulated seconds since session start."""
        return self._scheduler.now

    @property
    def frames_elapsed(self) -> int:
        return self._frames_elapsed

    @property
    def highscore_pending(self) -> bool:
        """True between game over and the name prompt for a qualifying score."""
        return self._highscore_pending

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------

    def reset(self, seed: Optional[int] = None) -> GameSnapshot:
        """
        Start a new session.

        Args:
            seed: New random seed. Uses previous if None.

        Returns:
            Initial game snapshot.
        """
        if seed is not None:
            self._seed = seed

        self._scheduler.cancel_all()
        self._scheduler = Scheduler()
        self._session = SessionStateMachine()
        self._ctx = SessionContext.from_config(self._config)
        self._spawner.reset(self._seed)
        self._frames_elapsed = 0
        self._highscore_pending = False

        self._start_session()
        return self._build_snapshot()

    def _start_session(self) -> None:
        item = self._spawner.spawn_onboarding(self._ctx, self._scheduler.now)
        self._publish(EventKind.SPAWN, uid=item.uid, category=item.category.value, x=item.x)
        self._arm_spawn_timer()
        self._scheduler.set_interval(
            LEVEL_TIMER, self._difficulty.tick_seconds, self._on_level_tick
        )

    def _arm_spawn_timer(self) -> None:
        """(Re)arm the spawn timer; replaces any live handle."""
        self._scheduler.set_interval(
            SPAWN_TIMER, self._ctx.spawn_interval_ms / 1000.0, self._on_spawn_tick
        )

    # ------------------------------------------------------------------
    # Frame loop
    # ------------------------------------------------------------------

    def tick(self, basket_input: Optional[BasketInput] = None) -> FrameResult:
        """
        Advance one frame.

        Timers due within this frame fire first, then the simulation step
        runs if the session is active.

        Args:
            basket_input: Held directions for this frame.

        Returns:
            FrameResult (skipped while paused or over).
        """
        self._frames_elapsed += 1
        now = self._frames_elapsed / self._config.clock.fps
        self._scheduler.advance_to(now)
        return self._simulation.step(
            self._ctx,
            basket_input,
            now=now,
            active=self._session.is_active
        )

    def run_frames(self, count: int, basket_input: Optional[BasketInput] = None) -> List[FrameResult]:
        """Advance `count` frames with the same input."""
        return [self.tick(basket_input) for _ in range(count)]

    def move_basket_to(self, center_x: float) -> None:
        """Pointer control: centre the basket on `center_x` (clamped)."""
        if not self._session.is_active:
            return
        self._ctx.basket.move_to(center_x)

    # ------------------------------------------------------------------
    # Timer callbacks
    # ------------------------------------------------------------------

    def _on_spawn_tick(self) -> None:
        item = self._spawner.try_spawn(
            self._ctx, self._scheduler.now, active=self._session.is_active
        )
        if item is not None:
            self._publish(EventKind.SPAWN, uid=item.uid, category=item.category.value, x=item.x)

    def _on_level_tick(self) -> None:
        level_up = self._difficulty.tick(self._ctx, active=self._session.is_active)
        if level_up is None:
            return
        self._arm_spawn_timer()
        self._publish(
            EventKind.LEVEL_UP,
            level=level_up.level,
            fall_speed=level_up.fall_speed,
            spawn_interval_ms=level_up.spawn_interval_ms
        )

    def _on_prompt_due(self) -> None:
        self._highscore_pending = False
        self._publish(EventKind.HIGHSCORE_PROMPT, score=self._ctx.score)

    # ------------------------------------------------------------------
    # State transitions
    # ------------------------------------------------------------------

    def pause(self) -> bool:
        """User pause (pause control or cancel key)."""
        if not self._session.pause_user():
            return False
        self._on_paused("user")
        return True

    def resume(self) -> bool:
        """User resume."""
        if not self._session.resume_user():
            return False
        self._on_resumed("user")
        return True

    def toggle_pause(self) -> bool:
        if self._session.is_paused:
            return self.resume()
        return self.pause()

    def focus_lost(self) -> bool:
        """Window lost focus or visibility: automatic pause."""
        if not self._session.focus_lost():
            return False
        self._on_paused("auto")
        return True

    def focus_gained(self) -> bool:
        """Window regained focus: resume only an automatic pause."""
        if not self._session.focus_gained():
            return False
        self._on_resumed("auto")
        return True

    def _on_paused(self, reason: str) -> None:
        self._scheduler.cancel(SPAWN_TIMER)
        self._publish(EventKind.PAUSED, reason=reason)

    def _on_resumed(self, reason: str) -> None:
        self._arm_spawn_timer()
        self._publish(EventKind.RESUMED, reason=reason)

    def _end_game(self) -> None:
        """Strikes reached the maximum: halt spawning and leveling for good."""
        if not self._session.end():
            return
        self._scheduler.cancel(SPAWN_TIMER)
        self._scheduler.cancel(LEVEL_TIMER)

        qualifies = bool(self._highscore_check and self._highscore_check(self._ctx.score))
        self._publish(EventKind.GAME_OVER, score=self._ctx.score, level=self._ctx.level,
                      highscore=qualifies)
        if qualifies:
            self._highscore_pending = True
            self._scheduler.set_timeout(
                PROMPT_TIMER,
                self._config.rules.highscore_prompt_delay,
                self._on_prompt_due
            )

    def _publish(self, kind: EventKind, **data: Any) -> None:
        self._bus.emit(GameEvent(kind=kind, time=self._scheduler.now, data=data))

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def _build_snapshot(self) -> GameSnapshot:
        return self._snapshot_builder.build(
            self._ctx, self._session.state, self._scheduler.now
        )

    def snapshot(self) -> GameSnapshot:
        """Current game state snapshot."""
        return self._build_snapshot()

    def get_info(self) -> Dict[str, Any]:
        """Get additional info dict for Gymnasium."""
        return {
            "score": self._ctx.score,
            "strikes": self._ctx.strikes,
            "level": self._ctx.level,
            "fall_speed": self._ctx.fall_speed,
            "spawn_interval_ms": self._ctx.spawn_interval_ms,
            "items": len(self._ctx.items),
            "catches": self._ctx.scorer.catches,
            "state": self._session.state.value,
            "time": self._scheduler.now,
        }

    def get_render_data(self) -> Dict[str, Any]:
        """
        Get data needed for rendering.

        Returns:
            Dict with basket, items, hearts and HUD values.
        """
        items_data = []
        for item in self._ctx.items:
            kind = self._catalog[item.category]
            items_data.append({
                "uid": item.uid,
                "category": item.category.value,
                "x": item.x,
                "y": item.y,
                "radius": item.radius,
                "shape": kind.shape,
                "color": kind.color,
            })

        basket = self._ctx.basket
        return {
            "field_width": self._config.field.width,
            "field_height": self._config.field.height,
            "basket": {
                "x": basket.x,
                "y": basket.y,
                "width": basket.width,
                "height": basket.height,
            },
            "items": items_data,
            "hearts": list(self._ctx.hearts.slots),
            "score": self._ctx.score,
            "strikes": self._ctx.strikes,
            "max_strikes": self._config.rules.max_strikes,
            "level": self._ctx.level,
            "fall_speed": self._ctx.fall_speed,
            "immune": self._ctx.immunity.active,
            "state": self._session.state.value,
            "game_over": self._session.is_over,
        }
