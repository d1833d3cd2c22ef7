"""Derived reign values: day counts and per-competitor aggregates.

Nothing here is persisted; every value is recomputed from the stored
start/end timestamps at read time.
"""

from collections import defaultdict
from collections.abc import Iterable, Mapping
from datetime import datetime, timedelta, timezone

from ladderkeeper.models import ChampionStats, Reign, ReignView, as_utc

ONE_DAY = timedelta(days=1)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def days_held(reign: Reign, now: datetime | None = None) -> int:
    """Whole days between the reign start and its end (or ``now`` if ongoing)."""
    end = reign.ended_at if reign.ended_at is not None else as_utc(now or utcnow())
    return (end - reign.started_at) // ONE_DAY


def to_view(
    reign: Reign,
    now: datetime | None = None,
    names: Mapping[int, str] | None = None,
) -> ReignView:
    """Annotate a reign with its day count and, when known, the holder's name."""
    return ReignView(
        **reign.model_dump(),
        days=days_held(reign, now),
        competitor_name=(names or {}).get(reign.competitor_id),
    )


def aggregate_stats(
    reigns: Iterable[Reign],
    now: datetime | None = None,
    names: Mapping[int, str] | None = None,
) -> list[ChampionStats]:
    """Fold reigns into one ``ChampionStats`` per competitor.

    Groups by competitor id and combines count, sum and max over the day
    counts. Ordered by total days held (descending), then competitor id.
    """
    now = as_utc(now or utcnow())
    names = names or {}

    grouped: dict[int, list[Reign]] = defaultdict(list)
    for reign in reigns:
        grouped[reign.competitor_id].append(reign)

    stats = []
    for competitor_id, held in grouped.items():
        days = [days_held(r, now) for r in held]
        completed = [r.started_at for r in held if r.ended_at is not None]
        stats.append(ChampionStats(
            competitor_id=competitor_id,
            competitor_name=names.get(competitor_id),
            total_reigns=len(held),
            total_days=sum(days),
            longest_reign_days=max(days),
            current_champion=any(r.is_open for r in held),
            first_crowned=min(r.started_at for r in held),
            last_crowned=max(completed) if completed else None,
        ))

    stats.sort(key=lambda s: (-s.total_days, s.competitor_id))
    return stats
