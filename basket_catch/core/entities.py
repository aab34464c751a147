"""
Game Entities
=============

Falling items, the basket, and the per-frame input that drives it.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ItemCategory(str, Enum):
    """What a falling item does when caught or missed."""
    BENEFICIAL = "beneficial"
    HARMFUL = "harmful"
    EXPLOSIVE = "explosive"
    HEALING = "healing"


@dataclass
class Item:
    """
    A falling item.

    Position is mutated only by the simulation step; `vy` is fixed at spawn.
    """
    uid: int
    x: float
    y: float
    radius: float
    category: ItemCategory
    vy: float

    @property
    def top(self) -> float:
        return self.y - self.radius

    @property
    def bottom(self) -> float:
        return self.y + self.radius


@dataclass
class BasketInput:
    """Held directions for one frame."""
    left: bool = False
    right: bool = False

    @property
    def direction(self) -> int:
        """-1, 0 or +1."""
        return int(self.right) - int(self.left)


@dataclass
class Basket:
    """
    Player basket.

    Two control schemes are supported:
    - direct: x moves by `speed` per frame while a direction is held
    - inertial: `vx` accelerates while held, decays by `friction` otherwise

    Horizontal position is confined to [0, field_width - width] after every move.
    """
    x: float
    y: float
    width: float
    height: float
    field_width: float
    control: str = "direct"
    speed: float = 8.0
    acceleration: float = 1.2
    friction: float = 0.85
    max_speed: float = 12.0
    vx: float = 0.0

    @property
    def max_x(self) -> float:
        return self.field_width - self.width

    @property
    def center_x(self) -> float:
        return self.x + self.width / 2

    def move(self, basket_input: BasketInput) -> None:
        """Apply one frame of input, then clamp to the field."""
        direction = basket_input.direction
        if self.control == "inertial":
            if direction != 0:
                self.vx += direction * self.acceleration
            else:
                self.vx *= self.friction
                if abs(self.vx) < 0.01:
                    self.vx = 0.0
            self.vx = max(-self.max_speed, min(self.max_speed, self.vx))
            self.x += self.vx
        else:
            self.x += direction * self.speed
        self.clamp()

    def move_to(self, center_x: float) -> None:
        """Pointer control: center the basket on `center_x` and clamp."""
        self.x = center_x - self.width / 2
        self.vx = 0.0
        self.clamp()

    def clamp(self) -> None:
        """Confine to the field; hitting a wall zeroes velocity toward it."""
        if self.x < 0:
            self.x = 0.0
            if self.vx < 0:
                self.vx = 0.0
        elif self.x > self.max_x:
            self.x = self.max_x
            if self.vx > 0:
                self.vx = 0.0

    def spans(self, x: float) -> bool:
        """True if `x` lies within the basket's horizontal span."""
        return self.x <= x <= self.x + self.width

    def overlaps_band(self, top: float, bottom: float) -> bool:
        """True if [top, bottom] overlaps the basket's vertical band."""
        return bottom >= self.y and top <= self.y + self.height
