"""
Leaderboard Rules
=================

Entry model and the rules shared by the highscore service and its client:
name sanitization, qualification, and merge / sort / truncate.
"""

from __future__ import annotations

import math
import re
from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterable, List, Optional


LEADERBOARD_SIZE = 10
NAME_MAX_LENGTH = 8
PLACEHOLDER_NAME = "???"

_DISALLOWED_NAME_CHARS = re.compile(r"[^A-Za-z0-9 _-]")


class InvalidScoreError(ValueError):
    """Score is not a finite, non-negative number."""


@dataclass(frozen=True)
class LeaderboardEntry:
    """One row of the leaderboard."""
    name: str
    score: int
    date: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Optional["LeaderboardEntry"]:
        """Parse a stored entry; returns None for anything malformed."""
        if not isinstance(data, dict):
            return None
        score = data.get("score")
        if isinstance(score, bool) or not isinstance(score, (int, float)):
            return None
        if not math.isfinite(score):
            return None
        return cls(
            name=str(data.get("name", PLACEHOLDER_NAME)),
            score=int(score),
            date=str(data.get("date", ""))
        )


def sanitize_name(
    raw: Any,
    max_length: int = NAME_MAX_LENGTH,
    placeholder: str = PLACEHOLDER_NAME
) -> str:
    """
    Clean a player name.

    Trim, truncate to `max_length`, drop characters outside
    [A-Za-z0-9 _-], and fall back to `placeholder` if nothing is left.
    """
    name = str(raw or "").strip()[:max_length]
    name = _DISALLOWED_NAME_CHARS.sub("", name).strip()
    return name or placeholder


def validate_score(score: Any) -> int:
    """
    Validate a submitted score and floor it to an integer.

    Raises:
        InvalidScoreError: For non-numbers, booleans, non-finite or negative values.
    """
    if isinstance(score, bool) or not isinstance(score, (int, float)):
        raise InvalidScoreError(f"Score must be a number, got {type(score).__name__}")
    if not math.isfinite(score) or score < 0:
        raise InvalidScoreError(f"Score must be finite and non-negative, got {score}")
    return int(math.floor(score))


def parse_entries(raw: Any) -> List[LeaderboardEntry]:
    """Parse a decoded JSON value; anything but a list yields an empty board."""
    if not isinstance(raw, list):
        return []
    entries = []
    for item in raw:
        entry = LeaderboardEntry.from_dict(item)
        if entry is not None:
            entries.append(entry)
    return entries


def to_payload(entries: Iterable[LeaderboardEntry]) -> List[Dict[str, Any]]:
    return [e.to_dict() for e in entries]


def rank(entries: Iterable[LeaderboardEntry], size: int = LEADERBOARD_SIZE) -> List[LeaderboardEntry]:
    """Sort descending by score (stable, so earlier entries win ties) and truncate."""
    return sorted(entries, key=lambda e: e.score, reverse=True)[:size]


def merge_entry(
    entries: Iterable[LeaderboardEntry],
    entry: LeaderboardEntry,
    size: int = LEADERBOARD_SIZE
) -> List[LeaderboardEntry]:
    """Append `entry`, re-sort descending and truncate to `size`."""
    return rank(list(entries) + [entry], size)


def is_highscore(
    entries: List[LeaderboardEntry],
    score: int,
    size: int = LEADERBOARD_SIZE
) -> bool:
    """
    True if `score` earns a place.

    The board qualifies anything while it has fewer than `size` entries;
    once full, the score must strictly beat at least one entry.
    """
    if len(entries) < size:
        return True
    return any(score > e.score for e in entries)
