"""Incremental championship tracking and the reign read model."""

from datetime import datetime

from ladderkeeper.config import HISTORY_LIMIT
from ladderkeeper.errors import NotFoundError
from ladderkeeper.events import EventHandler, NullEventHandler
from ladderkeeper.logging import get_logger
from ladderkeeper.models import ChampionStats, Reign, ReignView, as_utc
from ladderkeeper.reigns.stats import aggregate_stats, to_view
from ladderkeeper.store.base import LadderStore

log = get_logger(__name__)


class ReignTracker:
    """Keeps the reign timeline in step with leadership changes.

    The tracker never decides who leads; the caller tells it the leader
    before and after each rating change. It owns the rule that a change of
    leader closes the outgoing reign and opens the incoming one at the same
    instant, inside a single store transaction.
    """

    def __init__(self, store: LadderStore, event_handler: EventHandler | None = None):
        """Initialize the tracker.

        Args:
            store: Where reigns are read and written
            event_handler: Optional receiver for reign events (NullEventHandler if None)
        """
        self.store = store
        self.event_handler = event_handler or NullEventHandler()

    def on_ratings_changed(
        self,
        current_leader_id: int | None,
        previous_leader_id: int | None,
        at: datetime,
    ) -> Reign | None:
        """Record a change of leadership.

        Args:
            current_leader_id: Leader after the rating change
            previous_leader_id: Leader before the rating change
            at: When the change happened

        Returns:
            The newly opened reign, or None if nothing was opened
        """
        if current_leader_id == previous_leader_id:
            return None

        at = as_utc(at)
        with self.store.transaction():
            open_reign = self.store.get_open_reign()

            if open_reign is not None and open_reign.competitor_id == current_leader_id:
                # Already recorded as champion; nothing to hand over
                log.warning(
                    "reign_already_open",
                    competitor_id=current_leader_id,
                    previous_leader_id=previous_leader_id,
                )
                return None

            if open_reign is not None:
                if open_reign.competitor_id != previous_leader_id:
                    log.warning(
                        "open_reign_owner_mismatch",
                        owner_id=open_reign.competitor_id,
                        previous_leader_id=previous_leader_id,
                    )
                closed = self.store.close_reign(open_reign.id, at)
                log.info(
                    "reign_closed",
                    competitor_id=closed.competitor_id,
                    successor_id=current_leader_id,
                    ended_at=at.isoformat(),
                )
                self.event_handler.on_reign_closed(reign=closed, successor_id=current_leader_id)

            if current_leader_id is None:
                return None

            reign = self.store.open_reign(current_leader_id, at)
            log.info("reign_started", competitor_id=current_leader_id, started_at=at.isoformat())
            self.event_handler.on_reign_started(reign=reign)
            return reign

    def _names(self) -> dict[int, str]:
        return {c.id: c.name for c in self.store.list_competitors()}

    def current_champion(self, now: datetime | None = None) -> ReignView:
        """The ongoing reign.

        Raises:
            NotFoundError: if no reign is open (e.g. no matches played yet)
        """
        reign = self.store.get_open_reign()
        if reign is None:
            raise NotFoundError("No current champion found")
        return to_view(reign, now, self._names())

    def history(self, limit: int = HISTORY_LIMIT, now: datetime | None = None) -> list[ReignView]:
        """All reigns, newest first; ``limit <= 0`` returns every reign."""
        reigns = sorted(
            self.store.list_reigns(),
            key=lambda r: (r.started_at, r.id or 0),
            reverse=True,
        )
        if limit > 0:
            reigns = reigns[:limit]
        names = self._names()
        return [to_view(r, now, names) for r in reigns]

    def competitor_history(self, competitor_id: int, now: datetime | None = None) -> list[ReignView]:
        """Every reign held by one competitor, newest first."""
        reigns = sorted(
            self.store.list_reigns(competitor_id),
            key=lambda r: (r.started_at, r.id or 0),
            reverse=True,
        )
        names = self._names()
        return [to_view(r, now, names) for r in reigns]

    def stats_by_competitor(self, now: datetime | None = None) -> list[ChampionStats]:
        """Aggregated championship statistics for every competitor who reigned."""
        return aggregate_stats(self.store.list_reigns(), now, self._names())
