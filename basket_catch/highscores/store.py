"""
Highscore Store
===============

JSON-file persistence for the highscore service: a single JSON array,
created empty if absent, rewritten pretty-printed on every change.
"""

from __future__ import annotations

import json
import logging
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, List, Union

from basket_catch.highscores.leaderboard import (
    LEADERBOARD_SIZE,
    NAME_MAX_LENGTH,
    PLACEHOLDER_NAME,
    LeaderboardEntry,
    merge_entry,
    parse_entries,
    rank,
    sanitize_name,
    to_payload,
    validate_score,
)

logger = logging.getLogger(__name__)


class HighscoreStore:
    """
    Top-N leaderboard persisted to one JSON file.

    Safe to share between request threads; every read-modify-write runs
    under a lock.
    """

    def __init__(
        self,
        path: Union[str, Path],
        size: int = LEADERBOARD_SIZE,
        name_max_length: int = NAME_MAX_LENGTH,
        placeholder: str = PLACEHOLDER_NAME
    ):
        self._path = Path(path)
        self._size = size
        self._name_max_length = name_max_length
        self._placeholder = placeholder
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def _ensure_file(self) -> None:
        """Create the data directory and an empty array file if missing."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        if not self._path.exists():
            self._path.write_text("[]", encoding="utf-8")
            logger.info("Created empty highscore file at %s", self._path)

    def _read(self) -> List[LeaderboardEntry]:
        self._ensure_file()
        raw = self._path.read_text(encoding="utf-8")
        try:
            data: Any = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Highscore file %s is not valid JSON; treating as empty", self._path)
            return []
        if not isinstance(data, list):
            logger.warning("Highscore file %s does not hold an array; treating as empty", self._path)
        return parse_entries(data)

    def _write(self, entries: List[LeaderboardEntry]) -> None:
        self._ensure_file()
        self._path.write_text(json.dumps(to_payload(entries), indent=2), encoding="utf-8")

    def top(self) -> List[LeaderboardEntry]:
        """Current leaderboard, best first, at most `size` entries."""
        with self._lock:
            return rank(self._read(), self._size)

    def add(self, name: Any, score: Any) -> List[LeaderboardEntry]:
        """
        Record a score.

        Args:
            name: Raw player name (sanitized here).
            score: Raw score (validated and floored here).

        Returns:
            The resulting leaderboard.

        Raises:
            InvalidScoreError: If the score is not a finite non-negative number.
            OSError: If the data file cannot be read or written.
        """
        value = validate_score(score)
        entry = LeaderboardEntry(
            name=sanitize_name(name, self._name_max_length, self._placeholder),
            score=value,
            date=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
        )
        with self._lock:
            entries = merge_entry(self._read(), entry, self._size)
            self._write(entries)
        logger.info("Recorded highscore %s=%d", entry.name, entry.score)
        return entries
