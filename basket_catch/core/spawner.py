"""
Spawner
=======

Decides when and what to introduce into the field.

- The first item of a session is always beneficial and is placed so that it
  reaches the catch line exactly `grace_period` seconds after session start.
- Until that time has passed no other item spawns.
- After it, each spawn tick draws a category (0.6 / 0.3 / 0.1 by default),
  unless a healing item preempts the draw.
- A tick that finds the session inactive or the field full does nothing;
  it is not queued or retried.
"""

from __future__ import annotations

import random
from typing import Optional

from basket_catch.core.config_loader import GameConfig, get_config
from basket_catch.core.entities import Item, ItemCategory
from basket_catch.core.item_catalog import ItemCatalog, get_catalog
from basket_catch.core.session import SessionContext


# Tolerance when comparing the clock against the grace period
_EPSILON = 1e-9


class Spawner:
    """Seeded item factory with grace period and healing preemption."""

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        seed: Optional[int] = None
    ):
        """
        Initialize spawner.

        Args:
            config: Game configuration. Uses default if None.
            seed: Random seed for reproducibility. Random if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._catalog: ItemCatalog = get_catalog(config)
        self._rng = random.Random(seed)
        self._onboarded = False

    @property
    def onboarded(self) -> bool:
        """True once the onboarding item has been introduced."""
        return self._onboarded

    def reset(self, seed: Optional[int] = None) -> None:
        """
        Reset for a new session.

        Args:
            seed: New random seed. Keeps current stream if None.
        """
        if seed is not None:
            self._rng = random.Random(seed)
        self._onboarded = False

    def spawn_onboarding(self, ctx: SessionContext, now: float) -> Item:
        """
        Introduce the onboarding item.

        Its start height is back-computed from the current velocity model:
        after `frames` frames of `vy + fall_speed * scale` per frame its
        bottom edge touches the basket top.
        """
        spawn = self._config.spawn
        kind = self._catalog[ItemCategory.BENEFICIAL]

        x = self._random_x()
        radius = self._rng.uniform(spawn.radius_min, spawn.radius_max)
        vy = self._rng.uniform(spawn.velocity_min, spawn.velocity_max) + kind.velocity_offset

        remaining = max(0.0, spawn.grace_period - now)
        frames = round(remaining * self._config.clock.fps)
        per_frame = vy + ctx.fall_speed * self._config.rules.fall_speed_scale
        y = ctx.basket.y - radius - frames * per_frame

        item = Item(
            uid=ctx.allocate_uid(),
            x=x,
            y=y,
            radius=radius,
            category=ItemCategory.BENEFICIAL,
            vy=vy
        )
        ctx.items.append(item)
        self._onboarded = True
        return item

    def try_spawn(self, ctx: SessionContext, now: float, active: bool = True) -> Optional[Item]:
        """
        Handle one spawn tick.

        Args:
            ctx: Session context (items are appended to ctx.items).
            now: Simulated seconds since session start.
            active: False while paused or over; the tick is then a no-op.

        Returns:
            The new item, or None if nothing spawned.
        """
        if not active:
            return None
        if len(ctx.items) >= self._config.spawn.max_items:
            return None
        if not self._onboarded or now + _EPSILON < self._config.spawn.grace_period:
            return None

        spawn = self._config.spawn
        x = self._random_x()
        radius = self._rng.uniform(spawn.radius_min, spawn.radius_max)
        category = self._choose_category(ctx)
        vy = (
            self._rng.uniform(spawn.velocity_min, spawn.velocity_max)
            + self._catalog[category].velocity_offset
        )

        item = Item(
            uid=ctx.allocate_uid(),
            x=x,
            y=-radius - spawn.start_offset,
            radius=radius,
            category=category,
            vy=vy
        )
        ctx.items.append(item)
        return item

    def _random_x(self) -> float:
        margin = self._config.spawn.margin
        return margin + self._rng.random() * (self._config.field.width - 2 * margin)

    def _choose_category(self, ctx: SessionContext) -> ItemCategory:
        """Healing preempts the weighted draw when eligible and its roll succeeds."""
        if self.healing_eligible(ctx):
            if self._rng.random() < self._config.spawn.healing_chance:
                return ItemCategory.HEALING
        return self._catalog.category_for_roll(self._rng.random())

    @staticmethod
    def healing_eligible(ctx: SessionContext) -> bool:
        """At least one strike and no healing item already live."""
        return ctx.strikes >= 1 and not ctx.has_live(ItemCategory.HEALING)
