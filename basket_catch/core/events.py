"""
Game Events
===========

Observer interface for things that react to simulation outcomes without
feeding back into them: floating score text, flashes, overlays, audio,
and the highscore name prompt.

Subscribers receive immutable `GameEvent` records. They must not mutate
game state; the bus delivers events synchronously in emission order.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional


class EventKind(str, Enum):
    SPAWN = "spawn"
    CATCH = "catch"
    MISS = "miss"
    STRIKE = "strike"
    HEAL = "heal"
    IMMUNITY_START = "immunity_start"
    IMMUNITY_END = "immunity_end"
    IMMUNE_BLOCK = "immune_block"       # Explosive caught while immune
    LEVEL_UP = "level_up"
    PAUSED = "paused"
    RESUMED = "resumed"
    GAME_OVER = "game_over"
    HIGHSCORE_PROMPT = "highscore_prompt"


@dataclass(frozen=True)
class GameEvent:
    """Something that happened during a frame or timer callback."""
    kind: EventKind
    time: float
    data: Mapping[str, Any] = field(default_factory=dict)

    def __repr__(self) -> str:
        return f"GameEvent({self.kind.value} @ {self.time:.3f}s, {dict(self.data)})"


Subscriber = Callable[[GameEvent], None]


class EventBus:
    """Synchronous publish/subscribe for GameEvents."""

    def __init__(self):
        self._subscribers: Dict[Optional[EventKind], List[Subscriber]] = {}

    def subscribe(self, callback: Subscriber, kind: Optional[EventKind] = None) -> None:
        """
        Register a subscriber.

        Args:
            callback: Called with each matching GameEvent.
            kind: Only deliver this kind. None delivers every event.
        """
        self._subscribers.setdefault(kind, []).append(callback)

    def unsubscribe(self, callback: Subscriber, kind: Optional[EventKind] = None) -> None:
        callbacks = self._subscribers.get(kind, [])
        if callback in callbacks:
            callbacks.remove(callback)

    def emit(self, event: GameEvent) -> None:
        for callback in list(self._subscribers.get(event.kind, ())):
            callback(event)
        for callback in list(self._subscribers.get(None, ())):
            callback(event)


class EventLog:
    """Subscriber that records every event (used by tools and tests)."""

    def __init__(self, bus: Optional[EventBus] = None):
        self.events: List[GameEvent] = []
        if bus is not None:
            bus.subscribe(self)

    def __call__(self, event: GameEvent) -> None:
        self.events.append(event)

    def of_kind(self, kind: EventKind) -> List[GameEvent]:
        return [e for e in self.events if e.kind == kind]

    def clear(self) -> None:
        self.events.clear()
