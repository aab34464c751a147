"""
Tests for the simulated clock and named timers.
"""

import pytest

from basket_catch.core.scheduler import Scheduler


@pytest.fixture
def scheduler():
    return Scheduler()


class TestScheduler:
    """Test timer firing and replacement."""

    def test_interval_fires_each_period(self, scheduler):
        """A 1 s interval fires once per second of simulated time."""
        fired = []
        scheduler.set_interval("tick", 1.0, lambda: fired.append(scheduler.now))

        scheduler.advance_to(3.5)

        assert fired == pytest.approx([1.0, 2.0, 3.0])
        assert scheduler.now == 3.5

    def test_timeout_fires_once(self, scheduler):
        """One-shot timers fire once and disappear."""
        fired = []
        scheduler.set_timeout("once", 0.6, lambda: fired.append(scheduler.now))

        scheduler.advance_to(0.5)
        assert fired == []
        assert scheduler.is_active("once")

        scheduler.advance_to(2.0)
        assert fired == pytest.approx([0.6])
        assert not scheduler.is_active("once")

    def test_rearm_replaces_existing_timer(self, scheduler):
        """Arming under a live name never layers a second timer."""
        fired = []
        scheduler.set_interval("spawn", 1.0, lambda: fired.append("old"))
        scheduler.set_interval("spawn", 1.0, lambda: fired.append("new"))

        scheduler.advance_to(2.0)

        assert fired == ["new", "new"]

    def test_cancel(self, scheduler):
        """Cancelled timers never fire."""
        fired = []
        scheduler.set_interval("spawn", 0.5, lambda: fired.append(1))

        assert scheduler.cancel("spawn")
        assert not scheduler.cancel("spawn")

        scheduler.advance_to(5.0)
        assert fired == []

    def test_due_order_and_tie_break(self, scheduler):
        """Timers fire in due order; equal due times fire in arm order."""
        fired = []
        scheduler.set_timeout("b", 1.0, lambda: fired.append("b"))
        scheduler.set_timeout("a", 1.0, lambda: fired.append("a"))
        scheduler.set_timeout("c", 0.5, lambda: fired.append("c"))

        names = scheduler.advance_to(1.0)

        assert fired == ["c", "b", "a"]
        assert names == ["c", "b", "a"]

    def test_callback_can_rearm_other_timer(self, scheduler):
        """A callback re-arming another timer takes effect in the same advance."""
        fired = []

        def on_level():
            fired.append(("level", scheduler.now))
            scheduler.set_interval("spawn", 0.25, lambda: fired.append(("spawn", scheduler.now)))

        scheduler.set_interval("spawn", 10.0, lambda: fired.append(("old_spawn", scheduler.now)))
        scheduler.set_timeout("level", 1.0, on_level)

        scheduler.advance_to(1.5)

        assert [name for name, _ in fired] == ["level", "spawn", "spawn"]
        assert fired[1][1] == pytest.approx(1.25)

    def test_callback_sees_due_time(self, scheduler):
        """`now` inside a callback is the timer's due time, not the advance target."""
        seen = []
        scheduler.set_timeout("t", 0.3, lambda: seen.append(scheduler.now))

        scheduler.advance_to(10.0)

        assert seen == pytest.approx([0.3])

    def test_clock_cannot_move_backwards(self, scheduler):
        scheduler.advance_to(2.0)
        with pytest.raises(ValueError):
            scheduler.advance_to(1.0)

    def test_non_positive_interval_rejected(self, scheduler):
        with pytest.raises(ValueError):
            scheduler.set_interval("bad", 0.0, lambda: None)

    def test_cancel_all(self, scheduler):
        scheduler.set_interval("a", 1.0, lambda: None)
        scheduler.set_timeout("b", 1.0, lambda: None)

        scheduler.cancel_all()

        assert not scheduler.is_active("a")
        assert not scheduler.is_active("b")
        assert scheduler.advance_to(5.0) == []
