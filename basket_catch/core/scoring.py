"""
Scoring System
==============

Score, strike ledger and the explosive immunity window.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple


@dataclass
class ScoreEvent:
    """Record of a score change."""
    requested: int   # Signed delta asked for
    applied: int     # Delta actually applied after the floor at 0

    def __repr__(self) -> str:
        if self.requested != self.applied:
            return f"ScoreEvent({self.requested:+d}, floored to {self.applied:+d})"
        return f"ScoreEvent({self.applied:+d})"


class ScoreTracker:
    """
    Tracks the session score.

    Score is a non-negative integer: any penalty larger than the current
    score floors it at 0.
    """

    def __init__(self):
        self._score: int = 0
        self._catches: int = 0

    @property
    def score(self) -> int:
        """Current total score."""
        return self._score

    @property
    def catches(self) -> int:
        """Number of items caught this session."""
        return self._catches

    def apply(self, delta: int) -> ScoreEvent:
        """Apply a signed delta, flooring the result at 0."""
        before = self._score
        self._score = max(0, self._score + int(delta))
        return ScoreEvent(requested=int(delta), applied=self._score - before)

    def record_catch(self) -> None:
        self._catches += 1

    def reset(self) -> None:
        """Reset score to zero."""
        self._score = 0
        self._catches = 0


class HeartLedger:
    """
    Fixed row of heart slots, healthy (True) or broken (False).

    A strike breaks the rightmost healthy slot; a heal restores the leftmost
    broken slot. The number of broken slots is the strike count.
    """

    def __init__(self, size: int):
        if size <= 0:
            raise ValueError(f"Ledger size must be positive, got {size}")
        self._slots: List[bool] = [True] * size

    @property
    def size(self) -> int:
        return len(self._slots)

    @property
    def slots(self) -> Tuple[bool, ...]:
        return tuple(self._slots)

    @property
    def strikes(self) -> int:
        return self._slots.count(False)

    @property
    def is_full(self) -> bool:
        """True when every slot is broken."""
        return self.strikes >= self.size

    def break_one(self) -> Optional[int]:
        """Break the rightmost healthy slot. Returns its index, or None if all are broken."""
        for i in range(len(self._slots) - 1, -1, -1):
            if self._slots[i]:
                self._slots[i] = False
                return i
        return None

    def heal_one(self) -> Optional[int]:
        """Heal the leftmost broken slot. Returns its index, or None if none are broken."""
        for i, healthy in enumerate(self._slots):
            if not healthy:
                self._slots[i] = True
                return i
        return None

    def reset(self) -> None:
        self._slots = [True] * len(self._slots)

    def __repr__(self) -> str:
        return "HeartLedger(" + "".join("♥" if s else "x" for s in self._slots) + ")"


class ImmunityWindow:
    """Timed suppression of explosive penalties."""

    def __init__(self, duration: float):
        self._duration = duration
        self._active = False
        self._expires_at = 0.0

    @property
    def active(self) -> bool:
        return self._active

    @property
    def expires_at(self) -> float:
        return self._expires_at

    @property
    def duration(self) -> float:
        return self._duration

    def activate(self, now: float) -> None:
        self._active = True
        self._expires_at = now + self._duration

    def expire_if_due(self, now: float) -> bool:
        """Clear the window if `now` has passed its expiry. Returns True if it expired."""
        if self._active and now >= self._expires_at:
            self._active = False
            return True
        return False

    def remaining(self, now: float) -> float:
        if not self._active:
            return 0.0
        return max(0.0, self._expires_at - now)

    def reset(self) -> None:
        self._active = False
        self._expires_at = 0.0
