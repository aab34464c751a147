"""
Basket Catch Highscores - leaderboard service and client.

Main exports:
- HighscoreStore: JSON-file backed top-10 board
- make_server: threaded HTTP service over a store
- LeaderboardClient: service client with local-cache fallback
"""

from basket_catch.highscores.leaderboard import (
    InvalidScoreError,
    LeaderboardEntry,
    is_highscore,
    merge_entry,
    sanitize_name,
)
from basket_catch.highscores.store import HighscoreStore
from basket_catch.highscores.server import HighscoreServer, make_server
from basket_catch.highscores.client import LeaderboardClient, LocalCache

__all__ = [
    "InvalidScoreError",
    "LeaderboardEntry",
    "is_highscore",
    "merge_entry",
    "sanitize_name",
    "HighscoreStore",
    "HighscoreServer",
    "make_server",
    "LeaderboardClient",
    "LocalCache",
]
