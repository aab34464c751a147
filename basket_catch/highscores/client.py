"""
Leaderboard Client
==================

Reads and submits highscores through the service, degrading to a local
cache when the service is unreachable.

Fallback order for reads: service -> local cache -> empty list.
Submissions that fail for network or server reasons are merged into the
local cache instead. Nothing here raises into the game; the `*_async`
variants run on a daemon thread so the frame loop never waits on I/O.
"""

from __future__ import annotations

import json
import logging
import math
import threading
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, List, Optional, Union

import requests

from basket_catch.core.config_loader import LeaderboardConfig
from basket_catch.highscores.leaderboard import (
    LEADERBOARD_SIZE,
    NAME_MAX_LENGTH,
    PLACEHOLDER_NAME,
    LeaderboardEntry,
    is_highscore,
    merge_entry,
    parse_entries,
    rank,
    sanitize_name,
    to_payload,
)

logger = logging.getLogger(__name__)


class LocalCache:
    """
    Best-effort string-keyed local storage.

    The file holds a JSON object; the leaderboard lives under one key as a
    JSON-serialized array string. Read and write failures are logged and
    otherwise ignored.
    """

    def __init__(self, path: Union[str, Path], key: str = "highscores"):
        self._path = Path(path).expanduser()
        self._key = key

    @property
    def path(self) -> Path:
        return self._path

    def _read_storage(self) -> dict:
        try:
            storage = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.debug("Local leaderboard cache unavailable: %s", e)
            return {}
        return storage if isinstance(storage, dict) else {}

    def load(self) -> Optional[List[LeaderboardEntry]]:
        """Cached entries, or None if nothing usable is stored."""
        value = self._read_storage().get(self._key)
        if not isinstance(value, str):
            return None
        try:
            return parse_entries(json.loads(value))
        except ValueError as e:
            logger.debug("Local leaderboard cache entry is corrupt: %s", e)
            return None

    def save(self, entries: List[LeaderboardEntry]) -> None:
        storage = self._read_storage()
        storage[self._key] = json.dumps(to_payload(entries))
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(json.dumps(storage), encoding="utf-8")
        except OSError as e:
            logger.debug("Could not write local leaderboard cache: %s", e)


class LeaderboardClient:
    """
    Read-through cache of the service's top-N leaderboard.

    `entries` always holds the most recent known board (possibly stale or
    empty); `is_highscore()` answers from it without any I/O.
    """

    def __init__(
        self,
        base_url: str,
        cache: Optional[LocalCache] = None,
        size: int = LEADERBOARD_SIZE,
        name_max_length: int = NAME_MAX_LENGTH,
        placeholder: str = PLACEHOLDER_NAME,
        timeout: float = 2.0,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize client.

        Args:
            base_url: Service root, e.g. http://localhost:3000
            cache: Local fallback storage. No local persistence if None.
            size: Leaderboard length.
            name_max_length: Maximum stored name length.
            placeholder: Name used when sanitization leaves nothing.
            timeout: Seconds per HTTP request.
            session: requests session to reuse (tests inject one).
        """
        self._url = base_url.rstrip("/") + "/api/highscores"
        self._cache = cache
        self._size = size
        self._name_max_length = name_max_length
        self._placeholder = placeholder
        self._timeout = timeout
        self._session = session or requests.Session()
        self._lock = threading.Lock()
        self._entries: List[LeaderboardEntry] = []

    @classmethod
    def from_config(cls, config: LeaderboardConfig, base_url: Optional[str] = None) -> "LeaderboardClient":
        return cls(
            base_url or config.service_url,
            cache=LocalCache(config.cache_path, config.cache_key),
            size=config.size,
            name_max_length=config.name_max_length,
            placeholder=config.placeholder_name,
            timeout=config.timeout
        )

    @property
    def entries(self) -> List[LeaderboardEntry]:
        with self._lock:
            return list(self._entries)

    def is_highscore(self, score: int) -> bool:
        """True if `score` would enter the currently known board."""
        with self._lock:
            return is_highscore(self._entries, score, self._size)

    def load(self) -> List[LeaderboardEntry]:
        """
        Fetch the board from the service, falling back to the local cache,
        then to an empty board.
        """
        try:
            response = self._session.get(self._url, timeout=self._timeout)
            response.raise_for_status()
            entries = rank(parse_entries(response.json()), self._size)
        except (requests.RequestException, ValueError) as e:
            logger.warning("Highscore service unavailable (%s); using local cache", e)
            cached = self._cache.load() if self._cache is not None else None
            entries = rank(cached or [], self._size)
        else:
            if self._cache is not None:
                self._cache.save(entries)

        with self._lock:
            self._entries = entries
        return list(entries)

    def submit(self, name: str, score: Any) -> List[LeaderboardEntry]:
        """
        Submit a score.

        On network or server failure the entry is merged into the local
        board instead. A 4xx rejection is logged and not retried.

        Returns:
            The board after the submission.
        """
        if isinstance(score, bool) or not isinstance(score, (int, float)) \
                or not math.isfinite(score) or score < 0:
            logger.warning("Refusing to submit invalid score %r", score)
            return self.entries

        clean_name = sanitize_name(name, self._name_max_length, self._placeholder)
        try:
            response = self._session.post(
                self._url,
                json={"name": clean_name, "score": score},
                timeout=self._timeout
            )
        except requests.RequestException as e:
            logger.warning("Highscore service unavailable (%s); saving locally", e)
            return self._merge_locally(clean_name, score)

        if 400 <= response.status_code < 500:
            logger.warning("Highscore rejected by service (%d): %s",
                           response.status_code, response.text[:200])
            return self.entries

        try:
            response.raise_for_status()
            entries = rank(parse_entries(response.json()), self._size)
        except (requests.RequestException, ValueError) as e:
            logger.warning("Highscore service error (%s); saving locally", e)
            return self._merge_locally(clean_name, score)

        with self._lock:
            self._entries = entries
        if self._cache is not None:
            self._cache.save(entries)
        return list(entries)

    def _merge_locally(self, name: str, score: Any) -> List[LeaderboardEntry]:
        now = datetime.now()
        entry = LeaderboardEntry(
            name=name,
            score=int(math.floor(score)),
            date=now.strftime("%Y-%m-%d %H:%M")
        )
        with self._lock:
            self._entries = merge_entry(self._entries, entry, self._size)
            entries = list(self._entries)
        if self._cache is not None:
            self._cache.save(entries)
        return entries

    def load_async(
        self,
        callback: Optional[Callable[[List[LeaderboardEntry]], None]] = None
    ) -> threading.Thread:
        """Run `load()` on a daemon thread; `callback` receives the board."""
        return self._run_async(self.load, (), callback)

    def submit_async(
        self,
        name: str,
        score: Any,
        callback: Optional[Callable[[List[LeaderboardEntry]], None]] = None
    ) -> threading.Thread:
        """Run `submit()` on a daemon thread; `callback` receives the board."""
        return self._run_async(self.submit, (name, score), callback)

    def _run_async(self, fn, args, callback) -> threading.Thread:
        def run():
            entries = fn(*args)
            if callback is not None:
                callback(entries)

        thread = threading.Thread(target=run, daemon=True)
        thread.start()
        return thread
