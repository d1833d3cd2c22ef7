"""Ladder service: the write paths that tie ratings, matches and reigns together."""

from collections.abc import Callable
from datetime import datetime

from ladderkeeper.config import LEADERBOARD_LIMIT
from ladderkeeper.errors import InvalidInputError
from ladderkeeper.events import EventHandler
from ladderkeeper.ledger import record_match, reverse_match, validate_match
from ladderkeeper.logging import get_logger
from ladderkeeper.models import Competitor, LeaderboardEntry, MatchRecord, Reign, as_utc
from ladderkeeper.rating.elo import win_probability
from ladderkeeper.rating.models import RatingConfig
from ladderkeeper.reigns.leader import leader_of
from ladderkeeper.reigns.stats import utcnow
from ladderkeeper.reigns.tracker import ReignTracker
from ladderkeeper.store.base import LadderStore

log = get_logger(__name__)


class LadderService:
    """Records and deletes matches while keeping the reign timeline current.

    Each write runs in one store transaction: the competitors, the match and
    any change of champion commit together or not at all. The host must not
    run two writes against the same store concurrently.
    """

    def __init__(
        self,
        store: LadderStore,
        config: RatingConfig | None = None,
        clock: Callable[[], datetime] | None = None,
        event_handler: EventHandler | None = None,
    ):
        self.store = store
        self.config = config or RatingConfig()
        self.clock = clock or utcnow
        self.tracker = ReignTracker(store, event_handler)

    def register_competitor(self, name: str) -> Competitor:
        name = name.strip()
        if not name:
            raise InvalidInputError("Competitor name is required")
        competitor = self.store.add_competitor(name, self.config.initial_rating)
        log.info("competitor_registered", competitor_id=competitor.id, name=name)
        return competitor

    def submit_match(
        self,
        competitor_a_id: int,
        competitor_b_id: int,
        score_a: int,
        score_b: int,
        at: datetime | None = None,
    ) -> MatchRecord:
        """Rate a match, store it and hand over the championship if the leader changed.

        Raises:
            InvalidInputError: self-match, negative score, or a time earlier than
                the latest recorded match or the current reign's start
            NotFoundError: unknown competitor
        """
        validate_match(competitor_a_id, competitor_b_id, score_a, score_b)
        at = as_utc(at or self.clock())

        with self.store.transaction():
            open_reign = self.store.get_open_reign()
            self._check_not_backdated(at, open_reign)

            a = self.store.get_competitor(competitor_a_id)
            b = self.store.get_competitor(competitor_b_id)
            match, a, b = record_match(a, b, score_a, score_b, at, self.config)

            self.store.save_competitor(a)
            self.store.save_competitor(b)
            match = self.store.add_match(match)

            # Previous leader is the champion on record; with no open reign
            # the first match opens one.
            previous_leader = open_reign.competitor_id if open_reign else None
            current_leader = leader_of(self.store.list_competitors())

            self.tracker.on_ratings_changed(current_leader, previous_leader, at)

        log.info(
            "match_recorded",
            match_id=match.id,
            winner_id=match.winner_id,
            delta_a=match.delta_a,
            delta_b=match.delta_b,
        )
        return match

    def _check_not_backdated(self, at: datetime, open_reign: Reign | None) -> None:
        # Matches are appended in time order so live tracking and replay agree
        latest = self.store.latest_match()
        times = [open_reign.started_at] if open_reign else []
        if latest is not None:
            times.append(latest.created_at)
        floor = max(times, default=None)
        if floor is not None and at < floor:
            raise InvalidInputError(
                f"Match time {at.isoformat()} is earlier than the ladder's latest event "
                f"({floor.isoformat()})"
            )

    def delete_match(self, match_id: int) -> None:
        """Delete a match and restore both competitors to their state before it.

        The reign timeline is left as it is; run a reconstruction to realign it.
        """
        with self.store.transaction():
            match = self.store.get_match(match_id)
            a = self.store.get_competitor(match.competitor_a_id)
            b = self.store.get_competitor(match.competitor_b_id)
            a, b = reverse_match(match, a, b)
            self.store.save_competitor(a)
            self.store.save_competitor(b)
            self.store.delete_match(match_id)

        log.info("match_deleted", match_id=match_id)

    def leaderboard(self, limit: int = LEADERBOARD_LIMIT, offset: int = 0) -> list[LeaderboardEntry]:
        """Competitors ordered by rating (ties by id), with 1-based rank."""
        ranked = sorted(self.store.list_competitors(), key=lambda c: (-c.rating, c.id))
        page = ranked[offset:offset + limit] if limit > 0 else ranked[offset:]
        return [
            LeaderboardEntry(rank=offset + i + 1, competitor=c, win_rate=c.win_rate)
            for i, c in enumerate(page)
        ]

    def predict(self, competitor_a_id: int, competitor_b_id: int) -> float:
        """Percentage chance that A beats B at current ratings."""
        a = self.store.get_competitor(competitor_a_id)
        b = self.store.get_competitor(competitor_b_id)
        return win_probability(a.rating, b.rating)
