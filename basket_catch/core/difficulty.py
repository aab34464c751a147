"""
Difficulty Controller
=====================

Escalates fall speed and spawn cadence on a fixed wall-clock cadence,
independent of frame rate.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from basket_catch.core.config_loader import GameConfig, get_config
from basket_catch.core.session import SessionContext


@dataclass
class LevelUp:
    """Result of a level increase."""
    level: int
    fall_speed: float
    spawn_interval_ms: int


class DifficultyController:
    """
    Level timer logic.

    Each tick (1 s by default) adds its length in seconds to `level_elapsed`. Reaching
    `level_time` increments the level, resets the accumulator, adds
    `fall_speed_step` to the global fall speed and shrinks the spawn
    interval by `spawn_interval_factor`, floored at `min_interval_ms`.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        if config is None:
            config = get_config()
        self._config = config

    @property
    def tick_seconds(self) -> float:
        return self._config.difficulty.tick_seconds

    def next_interval(self, interval_ms: int) -> int:
        """Spawn interval after one level-up."""
        shrunk = int(math.floor(interval_ms * self._config.difficulty.spawn_interval_factor))
        return max(self._config.spawn.min_interval_ms, shrunk)

    def tick(self, ctx: SessionContext, active: bool = True) -> Optional[LevelUp]:
        """
        Handle one level-timer tick.

        Args:
            ctx: Session context to escalate.
            active: False while paused or over; the tick is then a no-op.

        Returns:
            LevelUp if the level increased, else None. The caller re-arms the
            spawn timer with the new interval.
        """
        if not active:
            return None

        ctx.level_elapsed += self.tick_seconds
        if ctx.level_elapsed + 1e-9 < self._config.difficulty.level_time:
            return None

        ctx.level += 1
        ctx.level_elapsed = 0.0
        ctx.fall_speed += self._config.difficulty.fall_speed_step
        ctx.spawn_interval_ms = self.next_interval(ctx.spawn_interval_ms)

        return LevelUp(
            level=ctx.level,
            fall_speed=ctx.fall_speed,
            spawn_interval_ms=ctx.spawn_interval_ms
        )
