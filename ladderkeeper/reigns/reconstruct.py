"""Rebuild the reign timeline by replaying the stored match history.

The replay trusts the after-ratings already stored on each match instead of
re-running the rating engine, so it reproduces exactly the leadership the
ladder showed at the time.
"""

from collections.abc import Iterable, Sequence

from pydantic import BaseModel, Field

from ladderkeeper.events import EventHandler, NullEventHandler
from ladderkeeper.logging import get_logger
from ladderkeeper.models import DEFAULT_RATING, MatchRecord, Reign
from ladderkeeper.reigns.leader import select_leader
from ladderkeeper.reigns.stats import days_held, utcnow
from ladderkeeper.store.base import LadderStore

log = get_logger(__name__)


class ReconstructionResult(BaseModel):
    """Outcome of a reconstruction run."""
    matches_processed: int
    reigns: list[Reign] = Field(default_factory=list)
    persisted: bool = False


def replay_reigns(
    matches: Sequence[MatchRecord],
    competitor_ids: Iterable[int],
    initial_rating: float = DEFAULT_RATING,
    event_handler: EventHandler | None = None,
) -> list[Reign]:
    """Derive the reign timeline from chronologically ordered matches.

    Args:
        matches: Match records, oldest first
        competitor_ids: Every known competitor; each starts at ``initial_rating``
        initial_rating: Starting rating before any match
        event_handler: Optional receiver for progress events

    Returns:
        Reigns in chronological order; all closed except the last, which is
        left open. Empty if there are no matches.
    """
    event_handler = event_handler or NullEventHandler()
    if not matches:
        return []

    ratings = {competitor_id: initial_rating for competitor_id in competitor_ids}
    reigns: list[Reign] = []
    champion_id: int | None = None
    reign_start = matches[0].created_at

    for i, match in enumerate(matches):
        ratings[match.competitor_a_id] = match.rating_a_after
        ratings[match.competitor_b_id] = match.rating_b_after

        leader_id = select_leader(ratings)

        if i == 0:
            champion_id = leader_id
            reign_start = match.created_at
            log.debug("initial_champion", competitor_id=champion_id, at=reign_start.isoformat())
        elif leader_id != champion_id:
            closed = Reign(
                competitor_id=champion_id,
                started_at=reign_start,
                ended_at=match.created_at,
            )
            reigns.append(closed)
            log.debug(
                "champion_changed",
                previous_id=champion_id,
                competitor_id=leader_id,
                at=match.created_at.isoformat(),
                reign_days=days_held(closed),
            )
            champion_id = leader_id
            reign_start = match.created_at

        event_handler.on_progress(
            current=i + 1,
            total=len(matches),
            message="Replaying matches...",
        )

    reigns.append(Reign(competitor_id=champion_id, started_at=reign_start))
    return reigns


def rebuild_reigns(
    store: LadderStore,
    *,
    dry_run: bool = False,
    initial_rating: float = DEFAULT_RATING,
    event_handler: EventHandler | None = None,
) -> ReconstructionResult:
    """Recompute every reign from the match history and replace the stored set.

    The stored reigns are deleted and the new set inserted in one
    transaction; any store failure rolls both back and propagates, so a
    partial timeline is never committed. With no matches the stored reigns
    are left untouched.

    Args:
        store: Source of competitors and matches, and destination for reigns
        dry_run: Compute the timeline without writing it
        initial_rating: Starting rating before any match
        event_handler: Optional receiver for progress and replacement events

    Returns:
        ReconstructionResult with the computed reigns
    """
    event_handler = event_handler or NullEventHandler()

    with store.transaction():
        matches = store.list_matches()
        if not matches:
            log.info("reconstruction_skipped", reason="no matches")
            return ReconstructionResult(matches_processed=0)

        competitor_ids = [c.id for c in store.list_competitors()]
        log.info("reconstruction_started", matches=len(matches), competitors=len(competitor_ids))

        reigns = replay_reigns(matches, competitor_ids, initial_rating, event_handler)

        if dry_run:
            log.info("reconstruction_dry_run", reigns=len(reigns))
            return ReconstructionResult(matches_processed=len(matches), reigns=reigns)

        stored = store.replace_reigns(reigns)

    event_handler.on_reigns_replaced(count=len(stored), at=utcnow())
    log.info(
        "reconstruction_complete",
        matches=len(matches),
        reigns=len(stored),
        champion_id=stored[-1].competitor_id,
    )
    return ReconstructionResult(matches_processed=len(matches), reigns=stored, persisted=True)
