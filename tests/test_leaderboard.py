"""
Tests for leaderboard rules and the JSON-file store.
"""

import json

import pytest

from basket_catch.highscores.leaderboard import (
    InvalidScoreError,
    LeaderboardEntry,
    is_highscore,
    merge_entry,
    parse_entries,
    rank,
    sanitize_name,
    validate_score,
)
from basket_catch.highscores.store import HighscoreStore


def board(*scores):
    return [LeaderboardEntry(name=f"p{i}", score=s, date="2024-01-01") for i, s in enumerate(scores)]


@pytest.fixture
def store(tmp_path):
    return HighscoreStore(tmp_path / "data" / "highscores.json")


class TestSanitizeName:
    """Player name cleaning."""

    @pytest.mark.parametrize("raw, expected", [
        ("  toolongname  ", "toolongn"),
        ("bob", "bob"),
        ("  bob  ", "bob"),
        ("a!b@c", "abc"),
        ("x_y-z 1", "x_y-z 1"),
        ("", "???"),
        ("   ", "???"),
        ("@@@", "???"),
        (None, "???"),
    ])
    def test_sanitize(self, raw, expected):
        assert sanitize_name(raw) == expected

    def test_truncates_before_filtering(self):
        """Length is cut first, so stripped characters shorten the name."""
        assert sanitize_name("ab<script>") == "abscrip"

    def test_custom_placeholder(self):
        assert sanitize_name("!!!", placeholder="anon") == "anon"


class TestScoreValidation:
    """Submitted score checks."""

    @pytest.mark.parametrize("score", [-1, -0.5, "12", None, True, float("nan"), float("inf"), [1]])
    def test_invalid(self, score):
        with pytest.raises(InvalidScoreError):
            validate_score(score)

    def test_floors_fractional_scores(self):
        assert validate_score(12.7) == 12
        assert validate_score(0) == 0


class TestRanking:
    """Sort, merge and qualification."""

    def test_rank_sorts_descending_and_truncates(self):
        entries = rank(board(*range(15)))

        assert len(entries) == 10
        assert [e.score for e in entries] == list(range(14, 4, -1))

    def test_merge_keeps_existing_first_on_ties(self):
        merged = merge_entry(board(50), LeaderboardEntry("new", 50, "2024-02-02"))

        assert [e.name for e in merged] == ["p0", "new"]

    def test_merge_drops_lowest_when_full(self):
        merged = merge_entry(board(*range(100, 200, 10)), LeaderboardEntry("top", 500, ""))

        assert merged[0].name == "top"
        assert len(merged) == 10
        assert min(e.score for e in merged) == 110

    def test_qualification_on_full_board(self):
        entries = board(*range(100, 200, 10))

        assert not is_highscore(entries, 100)
        assert is_highscore(entries, 101)

    def test_anything_qualifies_on_short_board(self):
        assert is_highscore(board(500, 400), 0)
        assert is_highscore([], 0)

    def test_parse_skips_malformed(self):
        raw = [
            {"name": "ok", "score": 10, "date": "d"},
            {"name": "bad", "score": "ten"},
            "junk",
            {"name": "flag", "score": True},
        ]

        entries = parse_entries(raw)

        assert [e.name for e in entries] == ["ok"]

    def test_parse_non_array(self):
        assert parse_entries({"name": "x"}) == []
        assert parse_entries(None) == []


class TestHighscoreStore:
    """JSON-file persistence."""

    def test_creates_empty_file(self, store):
        assert store.top() == []
        assert json.loads(store.path.read_text()) == []

    def test_add_persists(self, store):
        entries = store.add("  toolongname  ", 42)

        assert [(e.name, e.score) for e in entries] == [("toolongn", 42)]
        stored = json.loads(store.path.read_text())
        assert stored[0]["name"] == "toolongn"
        assert stored[0]["score"] == 42
        assert stored[0]["date"].endswith("Z")

    def test_keeps_top_ten(self, store):
        for score in range(12):
            store.add(f"p{score}", score)

        entries = store.top()
        assert len(entries) == 10
        assert entries[0].score == 11
        assert entries[-1].score == 2

    def test_invalid_score_leaves_file_untouched(self, store):
        store.add("bob", 10)
        before = store.path.read_text()

        with pytest.raises(InvalidScoreError):
            store.add("eve", -5)

        assert store.path.read_text() == before

    def test_corrupt_file_treated_as_empty(self, store):
        store.path.parent.mkdir(parents=True, exist_ok=True)
        store.path.write_text("{not json")

        assert store.top() == []

        store.add("bob", 3)
        assert [e.name for e in store.top()] == ["bob"]

    def test_non_array_file_treated_as_empty(self, store):
        store.path.parent.mkdir(parents=True, exist_ok=True)
        store.path.write_text('{"name": "x", "score": 1}')

        assert store.top() == []
