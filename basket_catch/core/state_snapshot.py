"""
State Snapshot
==============

Packs game state into fixed-size numpy arrays for Gymnasium observations.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional
import numpy as np

from basket_catch.core.config_loader import GameConfig, get_config
from basket_catch.core.entities import ItemCategory
from basket_catch.core.session import SessionContext, SessionState


# Stable integer codes for observation arrays
CATEGORY_CODES: Dict[ItemCategory, int] = {c: i for i, c in enumerate(ItemCategory)}
STATE_CODES: Dict[SessionState, int] = {s: i for i, s in enumerate(SessionState)}


@dataclass
class GameSnapshot:
    """
    Complete game state snapshot.

    Item arrays are fixed-size (spawn.max_items) with masking for the live count.
    """
    # Session counters
    score: int
    strikes: int
    level: int
    fall_speed: float
    spawn_interval_ms: int
    level_elapsed: float
    state: int
    time: float

    # Immunity
    immune: bool
    immunity_remaining: float

    # Basket
    basket_x: float
    basket_vx: float
    basket_width: float

    # Hearts (1 healthy, 0 broken)
    hearts: np.ndarray                # (max_strikes,) int8

    # Item arrays (fixed size, padded)
    items_count: int
    obj_category: np.ndarray          # (MAX_ITEMS,) int8, -1 for empty
    obj_x: np.ndarray                 # (MAX_ITEMS,) float32
    obj_y: np.ndarray                 # (MAX_ITEMS,) float32
    obj_vy: np.ndarray                # (MAX_ITEMS,) float32, per-item velocity only
    obj_radius: np.ndarray            # (MAX_ITEMS,) float32
    obj_mask: np.ndarray              # (MAX_ITEMS,) bool

    def to_obs_dict(self) -> Dict[str, np.ndarray]:
        """Convert to Gymnasium observation dictionary."""
        return {
            "score": np.array(self.score, dtype=np.int64),
            "strikes": np.array(self.strikes, dtype=np.int32),
            "level": np.array(self.level, dtype=np.int32),
            "fall_speed": np.array(self.fall_speed, dtype=np.float32),
            "immune": np.array(int(self.immune), dtype=np.int8),
            "immunity_remaining": np.array(self.immunity_remaining, dtype=np.float32),
            "basket_x": np.array(self.basket_x, dtype=np.float32),
            "basket_vx": np.array(self.basket_vx, dtype=np.float32),
            "hearts": self.hearts.copy(),
            "items_count": np.array(self.items_count, dtype=np.int32),
            "obj_category": self.obj_category.copy(),
            "obj_x": self.obj_x.copy(),
            "obj_y": self.obj_y.copy(),
            "obj_vy": self.obj_vy.copy(),
            "obj_radius": self.obj_radius.copy(),
            "obj_mask": self.obj_mask.copy(),
        }


class SnapshotBuilder:
    """Builds game state snapshots with pre-allocated arrays."""

    def __init__(self, config: Optional[GameConfig] = None):
        if config is None:
            config = get_config()

        self._config = config
        self._max_items = config.spawn.max_items

        self._obj_category = np.full(self._max_items, -1, dtype=np.int8)
        self._obj_x = np.zeros(self._max_items, dtype=np.float32)
        self._obj_y = np.zeros(self._max_items, dtype=np.float32)
        self._obj_vy = np.zeros(self._max_items, dtype=np.float32)
        self._obj_radius = np.zeros(self._max_items, dtype=np.float32)
        self._obj_mask = np.zeros(self._max_items, dtype=bool)

    @property
    def max_items(self) -> int:
        return self._max_items

    def build(self, ctx: SessionContext, state: SessionState, now: float) -> GameSnapshot:
        """Build a snapshot from current session state."""
        self._obj_category.fill(-1)
        self._obj_x.fill(0)
        self._obj_y.fill(0)
        self._obj_vy.fill(0)
        self._obj_radius.fill(0)
        self._obj_mask.fill(False)

        # Nearest-to-basket first, so truncation (never expected) drops the farthest
        items = sorted(ctx.items, key=lambda it: -it.y)
        count = min(len(items), self._max_items)
        for i in range(count):
            item = items[i]
            self._obj_category[i] = CATEGORY_CODES[item.category]
            self._obj_x[i] = item.x
            self._obj_y[i] = item.y
            self._obj_vy[i] = item.vy
            self._obj_radius[i] = item.radius
            self._obj_mask[i] = True

        return GameSnapshot(
            score=ctx.score,
            strikes=ctx.strikes,
            level=ctx.level,
            fall_speed=ctx.fall_speed,
            spawn_interval_ms=ctx.spawn_interval_ms,
            level_elapsed=ctx.level_elapsed,
            state=STATE_CODES[state],
            time=now,
            immune=ctx.immunity.active,
            immunity_remaining=ctx.immunity.remaining(now),
            basket_x=ctx.basket.x,
            basket_vx=ctx.basket.vx,
            basket_width=ctx.basket.width,
            hearts=np.array([1 if s else 0 for s in ctx.hearts.slots], dtype=np.int8),
            items_count=count,
            obj_category=self._obj_category.copy(),
            obj_x=self._obj_x.copy(),
            obj_y=self._obj_y.copy(),
            obj_vy=self._obj_vy.copy(),
            obj_radius=self._obj_radius.copy(),
            obj_mask=self._obj_mask.copy(),
        )
