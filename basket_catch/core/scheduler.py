"""
Scheduler
=========

Deterministic simulated clock with named timers.

Timers are keyed by name, so arming a timer under a name that is already
live replaces it instead of layering a second one. This is what makes
pause/resume and spawn-interval changes safe: the spawn timer can be
re-armed any number of times and there is never more than one.

All callbacks run to completion inside `advance_to()`; nothing here is
threaded.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional


# Tolerance when comparing float due times against the clock
_EPSILON = 1e-9


@dataclass
class Timer:
    """A pending one-shot or repeating callback."""
    name: str
    callback: Callable[[], None]
    due: float
    interval: Optional[float] = None  # None for one-shot
    seq: int = 0                      # Tie-break so equal due times fire in arm order

    @property
    def repeating(self) -> bool:
        return self.interval is not None


class Scheduler:
    """
    Simulated clock plus named timers.

    `now` only moves forward through `advance_to()`. A repeating timer with
    interval `i` armed at time `t` fires at `t + i`, `t + 2i`, ... like a
    browser interval timer.
    """

    def __init__(self, start: float = 0.0):
        self._now = start
        self._timers: Dict[str, Timer] = {}
        self._seq = 0

    @property
    def now(self) -> float:
        """Current simulated time in seconds."""
        return self._now

    def set_interval(self, name: str, interval: float, callback: Callable[[], None]) -> Timer:
        """
        Arm a repeating timer, replacing any live timer with the same name.

        Args:
            name: Timer key.
            interval: Seconds between firings (> 0).
            callback: Called with no arguments on each firing.

        Returns:
            The new Timer.
        """
        if interval <= 0:
            raise ValueError(f"Timer interval must be positive, got {interval}")
        return self._arm(Timer(name, callback, self._now + interval, interval))

    def set_timeout(self, name: str, delay: float, callback: Callable[[], None]) -> Timer:
        """Arm a one-shot timer, replacing any live timer with the same name."""
        return self._arm(Timer(name, callback, self._now + max(0.0, delay)))

    def _arm(self, timer: Timer) -> Timer:
        self._seq += 1
        timer.seq = self._seq
        self._timers[timer.name] = timer
        return timer

    def cancel(self, name: str) -> bool:
        """Cancel a timer by name. Returns True if one was live."""
        return self._timers.pop(name, None) is not None

    def cancel_all(self) -> None:
        self._timers.clear()

    def is_active(self, name: str) -> bool:
        return name in self._timers

    def get(self, name: str) -> Optional[Timer]:
        return self._timers.get(name)

    def advance_to(self, now: float) -> List[str]:
        """
        Move the clock to `now`, firing every due timer in due order.

        A callback may cancel or re-arm timers (including itself); those
        changes take effect immediately for the rest of this advance.

        Returns:
            Names of the timers that fired, in firing order.
        """
        if now < self._now:
            raise ValueError(f"Clock cannot move backwards ({self._now} -> {now})")

        fired = []
        while True:
            timer = self._next_due(now)
            if timer is None:
                break

            self._now = max(self._now, timer.due)
            if timer.repeating:
                timer.due += timer.interval
            else:
                del self._timers[timer.name]

            fired.append(timer.name)
            timer.callback()

        self._now = now
        return fired

    def _next_due(self, now: float) -> Optional[Timer]:
        due = [t for t in self._timers.values() if t.due <= now + _EPSILON]
        if not due:
            return None
        return min(due, key=lambda t: (t.due, t.seq))
