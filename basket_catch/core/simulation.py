"""
Simulation Step
===============

Per-frame integration and collision resolution.

One frame, while the session is active:
1. Expire the immunity window if its time has passed.
2. Move the basket from input, then clamp it to the field.
3. Walk items from last to first (so removal in place is safe):
   a. y += vy + fall_speed * fall_speed_scale
   b. caught if the item's vertical extent overlaps the basket band and its
      centre x lies within the basket span
   c. on catch apply the category's catch effect and remove the item
   d. else if its top edge is below the field bottom apply the miss effect
      and remove it
   e. otherwise it stays

The catch test uses the item's centre, not its full width, so a wide item
hanging over the basket edge is not caught.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, List, Optional

from basket_catch.core.config_loader import EffectConfig, GameConfig, get_config
from basket_catch.core.entities import Basket, BasketInput, Item
from basket_catch.core.events import EventKind, GameEvent
from basket_catch.core.item_catalog import ItemCatalog, get_catalog
from basket_catch.core.scoring import ScoreEvent
from basket_catch.core.session import SessionContext


@dataclass
class ItemOutcome:
    """What happened to one item this frame."""
    item: Item
    caught: bool
    score_event: Optional[ScoreEvent] = None
    strikes_delta: int = 0
    immunity_granted: bool = False
    blocked_by_immunity: bool = False
    ended_game: bool = False

    @property
    def missed(self) -> bool:
        return not self.caught


@dataclass
class FrameResult:
    """Result of a single simulation frame."""
    outcomes: List[ItemOutcome] = field(default_factory=list)
    delta_score: int = 0
    immunity_expired: bool = False
    game_over: bool = False
    ran: bool = True

    @property
    def caught(self) -> List[ItemOutcome]:
        return [o for o in self.outcomes if o.caught]

    @property
    def missed(self) -> List[ItemOutcome]:
        return [o for o in self.outcomes if not o.caught]

    @staticmethod
    def skipped() -> "FrameResult":
        return FrameResult(ran=False)


def is_caught(item: Item, basket: Basket) -> bool:
    """Vertical extent overlaps the basket band and centre x is within its span."""
    return basket.overlaps_band(item.top, item.bottom) and basket.spans(item.x)


def has_fallen_out(item: Item, field_height: float) -> bool:
    """Top edge has passed below the field bottom."""
    return item.top > field_height


class SimulationStep:
    """
    Applies one frame to a SessionContext.

    Game over is signalled through `on_max_strikes` at the moment the strike
    is taken; the remaining items of the frame still resolve.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        emit: Optional[Callable[[GameEvent], None]] = None,
        on_max_strikes: Optional[Callable[[], None]] = None
    ):
        """
        Initialize the simulation step.

        Args:
            config: Game configuration. Uses default if None.
            emit: Event sink for cosmetic subscribers.
            on_max_strikes: Called once when strikes first reach the maximum.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._catalog: ItemCatalog = get_catalog(config)
        self._emit = emit
        self._on_max_strikes = on_max_strikes
        self._scale = config.rules.fall_speed_scale
        self._field_height = float(config.field.height)

    def fall_delta(self, item: Item, fall_speed: float) -> float:
        """Per-frame vertical displacement of an item."""
        return item.vy + fall_speed * self._scale

    def step(
        self,
        ctx: SessionContext,
        basket_input: Optional[BasketInput] = None,
        now: float = 0.0,
        active: bool = True
    ) -> FrameResult:
        """
        Advance one frame.

        Args:
            ctx: Session context to mutate.
            basket_input: Held directions this frame.
            now: Simulated time in seconds (for immunity expiry).
            active: False while paused or over; the frame is then a no-op.

        Returns:
            FrameResult describing catches, misses and score change.
        """
        if not active:
            return FrameResult.skipped()

        result = FrameResult()
        score_before = ctx.score

        # 1. Immunity expiry
        if ctx.immunity.expire_if_due(now):
            result.immunity_expired = True
            self._publish(EventKind.IMMUNITY_END, now)

        # 2. Basket motion
        ctx.basket.move(basket_input or BasketInput())

        # 3. Items, last to first
        for i in range(len(ctx.items) - 1, -1, -1):
            item = ctx.items[i]
            item.y += self.fall_delta(item, ctx.fall_speed)

            if is_caught(item, ctx.basket):
                caught = True
            elif has_fallen_out(item, self._field_height):
                caught = False
            else:
                continue

            outcome = self._apply(ctx, item, caught, now, result.game_over)
            del ctx.items[i]
            result.outcomes.append(outcome)
            if outcome.ended_game:
                result.game_over = True

        ctx.frame += 1
        result.delta_score = ctx.score - score_before
        return result

    def _apply(
        self,
        ctx: SessionContext,
        item: Item,
        caught: bool,
        now: float,
        game_over: bool = False
    ) -> ItemOutcome:
        """
        Apply the effect table row for this item and outcome.

        Once the frame has ended the game, strike-reducing effects are
        skipped so the final state keeps every heart broken.
        """
        kind = self._catalog[item.category]
        effect: EffectConfig = kind.on_catch if caught else kind.on_miss
        outcome = ItemOutcome(item=item, caught=caught)

        if caught:
            ctx.scorer.record_catch()

        if effect.immunity and ctx.immunity.active:
            outcome.blocked_by_immunity = True
            self._publish(EventKind.CATCH if caught else EventKind.MISS, now, outcome)
            self._publish(EventKind.IMMUNE_BLOCK, now, outcome)
            return outcome

        if effect.score != 0:
            outcome.score_event = ctx.scorer.apply(effect.score)

        self._publish(EventKind.CATCH if caught else EventKind.MISS, now, outcome)

        if effect.strikes > 0:
            self._take_strikes(ctx, effect.strikes, now, outcome)
        elif effect.strikes < 0 and not game_over:
            self._heal(ctx, -effect.strikes, now, outcome)

        if effect.immunity:
            ctx.immunity.activate(now)
            outcome.immunity_granted = True
            self._publish(EventKind.IMMUNITY_START, now, outcome,
                          expires_at=ctx.immunity.expires_at)

        return outcome

    def _take_strikes(self, ctx: SessionContext, count: int, now: float, outcome: ItemOutcome) -> None:
        for _ in range(count):
            was_full = ctx.hearts.is_full
            slot = ctx.hearts.break_one()
            if slot is None:
                break
            outcome.strikes_delta += 1
            self._publish(EventKind.STRIKE, now, outcome, slot=slot, strikes=ctx.strikes)
            if not was_full and ctx.hearts.is_full:
                outcome.ended_game = True
                if self._on_max_strikes is not None:
                    self._on_max_strikes()

    def _heal(self, ctx: SessionContext, count: int, now: float, outcome: ItemOutcome) -> None:
        for _ in range(count):
            slot = ctx.hearts.heal_one()
            if slot is None:
                break
            outcome.strikes_delta -= 1
            self._publish(EventKind.HEAL, now, outcome, slot=slot, strikes=ctx.strikes)

    def _publish(self, kind: EventKind, now: float, outcome: Optional[ItemOutcome] = None, **extra) -> None:
        if self._emit is None:
            return
        data = dict(extra)
        if outcome is not None:
            item = outcome.item
            data.update(
                uid=item.uid,
                category=item.category.value,
                x=item.x,
                y=item.y,
                score_delta=outcome.score_event.applied if outcome.score_event else 0,
            )
        self._emit(GameEvent(kind=kind, time=now, data=data))
