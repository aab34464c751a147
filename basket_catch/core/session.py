"""
Session State
=============

The session context (every mutable counter of one play session) and the
state machine that gates spawning, leveling and simulation.

States:
    ACTIVE        simulation, spawner and level timer all run
    PAUSED_USER   explicit pause (pause control / cancel key)
    PAUSED_AUTO   focus or visibility lost
    GAME_OVER     strikes reached the maximum; terminal for this instance

A user pause takes precedence over an automatic one: regaining focus only
resumes a pause that focus loss started.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List

from basket_catch.core.config_loader import GameConfig
from basket_catch.core.entities import Basket, Item, ItemCategory
from basket_catch.core.scoring import HeartLedger, ImmunityWindow, ScoreTracker


class SessionState(str, Enum):
    ACTIVE = "active"
    PAUSED_USER = "paused_user"
    PAUSED_AUTO = "paused_auto"
    GAME_OVER = "game_over"


@dataclass
class SessionContext:
    """
    Authoritative state of one session.

    Owned by CoreGame and handed to the spawner, difficulty controller and
    simulation step; everything else reads it.
    """
    basket: Basket
    hearts: HeartLedger
    immunity: ImmunityWindow
    scorer: ScoreTracker = field(default_factory=ScoreTracker)
    items: List[Item] = field(default_factory=list)
    level: int = 1
    fall_speed: float = 2.0
    spawn_interval_ms: int = 1000
    level_elapsed: float = 0.0
    frame: int = 0
    next_uid: int = 0

    @classmethod
    def from_config(cls, config: GameConfig) -> "SessionContext":
        """Fresh context: centred basket, all hearts healthy, level 1."""
        width = config.basket_width
        basket = Basket(
            x=(config.field.width - width) / 2,
            y=config.basket_y,
            width=float(width),
            height=float(config.basket.height),
            field_width=float(config.field.width),
            control=config.basket.control,
            speed=config.basket.speed,
            acceleration=config.basket.acceleration,
            friction=config.basket.friction,
            max_speed=config.basket.max_speed
        )
        return cls(
            basket=basket,
            hearts=HeartLedger(config.rules.max_strikes),
            immunity=ImmunityWindow(config.rules.immunity_seconds),
            fall_speed=config.difficulty.initial_fall_speed,
            spawn_interval_ms=config.spawn.interval_ms
        )

    @property
    def score(self) -> int:
        return self.scorer.score

    @property
    def strikes(self) -> int:
        return self.hearts.strikes

    def allocate_uid(self) -> int:
        uid = self.next_uid
        self.next_uid += 1
        return uid

    def has_live(self, category: ItemCategory) -> bool:
        return any(item.category == category for item in self.items)


class SessionStateMachine:
    """
    Pause / resume / game-over transitions.

    Each transition returns True if the derived state changed; callers
    (CoreGame) use that to stop or re-arm timers exactly once.
    """

    def __init__(self):
        self._user_paused = False
        self._auto_paused = False
        self._over = False

    @property
    def state(self) -> SessionState:
        if self._over:
            return SessionState.GAME_OVER
        if self._user_paused:
            return SessionState.PAUSED_USER
        if self._auto_paused:
            return SessionState.PAUSED_AUTO
        return SessionState.ACTIVE

    @property
    def is_active(self) -> bool:
        return self.state == SessionState.ACTIVE

    @property
    def is_paused(self) -> bool:
        return self.state in (SessionState.PAUSED_USER, SessionState.PAUSED_AUTO)

    @property
    def is_over(self) -> bool:
        return self._over

    def pause_user(self) -> bool:
        """Explicit pause. Also takes over an automatic pause."""
        if self._over or self._user_paused:
            return False
        before = self.state
        self._user_paused = True
        return self.state != before

    def resume_user(self) -> bool:
        """Explicit resume. Stays PAUSED_AUTO while focus is still lost."""
        if self._over or not self._user_paused:
            return False
        self._user_paused = False
        return self.state == SessionState.ACTIVE

    def toggle_pause(self) -> bool:
        if self.is_paused:
            return self.resume_user()
        return self.pause_user()

    def focus_lost(self) -> bool:
        """Automatic pause, only from ACTIVE."""
        if not self.is_active:
            return False
        self._auto_paused = True
        return True

    def focus_gained(self) -> bool:
        """Resume an automatic pause unless a user pause is in effect."""
        if self._over or not self._auto_paused:
            return False
        self._auto_paused = False
        return self.state == SessionState.ACTIVE

    def end(self) -> bool:
        """Enter GAME_OVER. Returns False if already over."""
        if self._over:
            return False
        self._over = True
        return True
