"""Unit tests for incremental reign tracking."""

from datetime import datetime, timedelta, timezone

import pytest

from ladderkeeper.errors import NotFoundError
from ladderkeeper.reigns.tracker import ReignTracker
from ladderkeeper.store.memory import MemoryLadderStore

pytestmark = pytest.mark.unit

T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)


def day(n: float) -> datetime:
    return T0 + timedelta(days=n)


class RecordingHandler:
    """Event handler that remembers what it saw."""

    def __init__(self):
        self.started = []
        self.closed = []

    def on_progress(self, *args, **kwargs):
        pass

    def on_reign_started(self, reign, **kwargs):
        self.started.append(reign)

    def on_reign_closed(self, reign, successor_id, **kwargs):
        self.closed.append((reign, successor_id))

    def on_reigns_replaced(self, *args, **kwargs):
        pass


@pytest.fixture
def store():
    store = MemoryLadderStore()
    for name in ("Ada", "Bo", "Cy"):
        store.add_competitor(name, 1000.0)
    return store


class TestOnRatingsChanged:
    """Tests for ReignTracker.on_ratings_changed."""

    def test_same_leader_is_noop(self, store):
        tracker = ReignTracker(store)
        tracker.on_ratings_changed(1, None, day(0))

        assert tracker.on_ratings_changed(1, 1, day(1)) is None
        assert len(store.list_reigns()) == 1

    def test_both_absent_is_noop(self, store):
        tracker = ReignTracker(store)
        assert tracker.on_ratings_changed(None, None, day(0)) is None
        assert store.list_reigns() == []

    def test_first_leader_opens_reign(self, store):
        tracker = ReignTracker(store)

        reign = tracker.on_ratings_changed(1, None, day(0))

        assert reign.competitor_id == 1
        assert reign.started_at == day(0)
        assert store.get_open_reign().id == reign.id

    def test_handover_closes_and_opens_at_same_instant(self, store):
        handler = RecordingHandler()
        tracker = ReignTracker(store, handler)
        tracker.on_ratings_changed(1, None, day(0))

        tracker.on_ratings_changed(2, 1, day(3))

        first, second = store.list_reigns()
        assert (first.competitor_id, first.ended_at) == (1, day(3))
        assert (second.competitor_id, second.started_at, second.ended_at) == (2, day(3), None)
        assert [r.competitor_id for r in handler.started] == [1, 2]
        assert handler.closed[0][1] == 2

    def test_at_most_one_open_reign(self, store):
        tracker = ReignTracker(store)
        leaders = [1, 2, 1, 3, 2]
        previous = None
        for n, leader in enumerate(leaders):
            tracker.on_ratings_changed(leader, previous, day(n))
            previous = leader

        reigns = store.list_reigns()
        assert len(reigns) == len(leaders)
        assert sum(1 for r in reigns if r.is_open) == 1

    def test_leader_removed_closes_without_successor(self, store):
        tracker = ReignTracker(store)
        tracker.on_ratings_changed(1, None, day(0))

        assert tracker.on_ratings_changed(None, 1, day(2)) is None

        assert store.get_open_reign() is None
        assert store.list_reigns()[0].ended_at == day(2)

    def test_drifted_owner_still_closed(self, store):
        """An open reign held by a third competitor is closed so only one stays open."""
        tracker = ReignTracker(store)
        tracker.on_ratings_changed(3, None, day(0))

        tracker.on_ratings_changed(2, 1, day(1))

        open_reign = store.get_open_reign()
        assert open_reign.competitor_id == 2
        assert sum(1 for r in store.list_reigns() if r.is_open) == 1

    def test_already_champion_not_reopened(self, store):
        tracker = ReignTracker(store)
        tracker.on_ratings_changed(1, None, day(0))

        assert tracker.on_ratings_changed(1, None, day(1)) is None
        assert len(store.list_reigns()) == 1


class TestReads:
    """Tests for the reign read model."""

    def test_current_champion_none_yet(self, store):
        with pytest.raises(NotFoundError):
            ReignTracker(store).current_champion()

    def test_current_champion(self, store):
        tracker = ReignTracker(store)
        tracker.on_ratings_changed(2, None, day(0))

        champion = tracker.current_champion(now=day(4.5))

        assert champion.competitor_id == 2
        assert champion.competitor_name == "Bo"
        assert champion.days == 4

    def test_history_newest_first_with_limit(self, store):
        tracker = ReignTracker(store)
        tracker.on_ratings_changed(1, None, day(0))
        tracker.on_ratings_changed(2, 1, day(2))
        tracker.on_ratings_changed(3, 2, day(7))

        history = tracker.history(now=day(10))
        assert [r.competitor_id for r in history] == [3, 2, 1]
        assert [r.days for r in history] == [3, 5, 2]

        assert [r.competitor_id for r in tracker.history(limit=2, now=day(10))] == [3, 2]
        assert len(tracker.history(limit=0)) == 3

    def test_competitor_history(self, store):
        tracker = ReignTracker(store)
        tracker.on_ratings_changed(1, None, day(0))
        tracker.on_ratings_changed(2, 1, day(1))
        tracker.on_ratings_changed(1, 2, day(3))

        history = tracker.competitor_history(1, now=day(5))

        assert [r.started_at for r in history] == [day(3), day(0)]
        assert all(r.competitor_id == 1 for r in history)

    def test_stats_by_competitor(self, store):
        tracker = ReignTracker(store)
        tracker.on_ratings_changed(1, None, day(0))
        tracker.on_ratings_changed(2, 1, day(4))

        stats = tracker.stats_by_competitor(now=day(5))

        assert [(s.competitor_name, s.total_days, s.current_champion) for s in stats] == [
            ("Ada", 4, False),
            ("Bo", 1, True),
        ]
