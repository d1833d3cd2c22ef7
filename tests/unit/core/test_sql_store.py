"""Unit tests for the SQLAlchemy store against a SQLite file."""

from datetime import datetime, timedelta, timezone

import pytest

from ladderkeeper.errors import NotFoundError, PersistenceError
from ladderkeeper.models import Reign
from ladderkeeper.reigns.reconstruct import rebuild_reigns
from ladderkeeper.service import LadderService
from ladderkeeper.sql import SqlLadderStore

pytestmark = pytest.mark.unit

T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)


def day(n: float) -> datetime:
    return T0 + timedelta(days=n)


@pytest.fixture
def store(tmp_path):
    return SqlLadderStore.from_url(f"sqlite:///{tmp_path / 'ladder.db'}", create_schema=True)


@pytest.fixture
def service(store):
    service = LadderService(store)
    for name in ("Ada", "Bo", "Cy"):
        service.register_competitor(name)
    return service


class TestFromUrl:
    """Tests for building a store from a URL."""

    def test_malformed_url_is_persistence_error(self):
        with pytest.raises(PersistenceError):
            SqlLadderStore.from_url("not a database url")

    def test_unopenable_database_is_persistence_error(self, tmp_path):
        url = f"sqlite:///{tmp_path / 'missing' / 'ladder.db'}"
        with pytest.raises(PersistenceError):
            SqlLadderStore.from_url(url, create_schema=True)


class TestCompetitorsAndMatches:
    """Tests for competitor and match persistence."""

    def test_round_trip_competitor(self, store):
        created = store.add_competitor("Ada", 1000.0)

        fetched = store.get_competitor(created.id)

        assert fetched == created
        assert fetched.total_matches == 0

    def test_unknown_competitor(self, store):
        with pytest.raises(NotFoundError):
            store.get_competitor(7)

    def test_duplicate_name_is_persistence_error(self, store):
        store.add_competitor("Ada", 1000.0)
        with pytest.raises(PersistenceError):
            store.add_competitor("Ada", 1000.0)

    def test_submit_and_read_back(self, service):
        match = service.submit_match(1, 2, 11, 5, at=day(0))

        stored = service.store.get_match(match.id)

        assert stored == match
        assert stored.created_at == day(0)
        assert service.store.get_competitor(1).rating == 1023.0

    def test_matches_ordered_by_time(self, service):
        later = service.submit_match(1, 2, 11, 5, at=day(2))
        service.store.add_match(later.model_copy(update={"created_at": day(0)}))

        assert [m.created_at for m in service.store.list_matches()] == [day(0), day(2)]

    def test_latest_match(self, service):
        assert service.store.latest_match() is None

        service.submit_match(1, 2, 11, 5, at=day(0))
        last = service.submit_match(2, 3, 11, 5, at=day(0))

        assert service.store.latest_match() == last

    def test_delete_match(self, service):
        match = service.submit_match(1, 2, 11, 5, at=day(0))

        service.delete_match(match.id)

        assert service.store.list_matches() == []
        assert service.store.get_competitor(1).rating == 1000.0


class TestReigns:
    """Tests for reign persistence and the open-reign state row."""

    def test_open_and_close(self, store):
        ada = store.add_competitor("Ada", 1000.0)

        reign = store.open_reign(ada.id, day(0))
        assert store.get_open_reign() == reign

        closed = store.close_reign(reign.id, day(3))
        assert closed.ended_at == day(3)
        assert store.get_open_reign() is None

    def test_second_open_reign_refused(self, store):
        ada = store.add_competitor("Ada", 1000.0)
        bo = store.add_competitor("Bo", 1000.0)
        store.open_reign(ada.id, day(0))

        with pytest.raises(PersistenceError):
            store.open_reign(bo.id, day(1))

        assert len(store.list_reigns()) == 1

    def test_tracked_handover(self, service):
        service.submit_match(1, 2, 11, 5, at=day(0))
        service.submit_match(3, 2, 11, 0, at=day(2))

        reigns = service.store.list_reigns()

        assert [(r.competitor_id, r.started_at, r.ended_at) for r in reigns] == [
            (1, day(0), day(2)),
            (3, day(2), None),
        ]
        assert service.tracker.current_champion(now=day(5)).days == 3

    def test_list_reigns_for_competitor(self, service):
        service.submit_match(1, 2, 11, 5, at=day(0))
        service.submit_match(3, 2, 11, 0, at=day(2))

        assert [r.competitor_id for r in service.store.list_reigns(3)] == [3]


class TestReplaceReigns:
    """Tests for atomic replacement and reconstruction on SQL."""

    def test_rebuild_is_idempotent(self, service):
        """Ids are assigned by the database; the reign records themselves repeat."""
        service.submit_match(1, 2, 11, 5, at=day(0))
        service.submit_match(3, 2, 11, 0, at=day(2))
        service.submit_match(1, 3, 11, 1, at=day(4))

        rebuild_reigns(service.store)
        first = [r.model_dump(exclude={"id"}) for r in service.store.list_reigns()]
        rebuild_reigns(service.store)
        second = [r.model_dump(exclude={"id"}) for r in service.store.list_reigns()]

        assert first == second
        assert [reign["competitor_id"] for reign in first] == [1, 3, 1]
        assert service.store.get_open_reign().competitor_id == 1

    def test_failed_insert_rolls_back(self, service):
        """A constraint failure during insert keeps the previous reigns."""
        service.submit_match(1, 2, 11, 5, at=day(0))
        before = service.store.list_reigns()

        # Bypass model validation so the database CHECK constraint trips
        bad = Reign.model_construct(
            id=None, competitor_id=2, started_at=day(5), ended_at=day(1)
        )
        with pytest.raises(PersistenceError):
            service.store.replace_reigns([Reign(competitor_id=1, started_at=day(0), ended_at=day(5)), bad])

        assert service.store.list_reigns() == before
        assert service.store.get_open_reign() == before[0]

    def test_two_open_reigns_refused(self, service):
        service.submit_match(1, 2, 11, 5, at=day(0))
        before = service.store.list_reigns()

        with pytest.raises(PersistenceError):
            service.store.replace_reigns([
                Reign(competitor_id=1, started_at=day(0)),
                Reign(competitor_id=2, started_at=day(1)),
            ])

        assert service.store.list_reigns() == before
