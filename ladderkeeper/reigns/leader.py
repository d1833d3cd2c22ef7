"""Leader selection over a population of ratings."""

from collections.abc import Iterable, Mapping

from ladderkeeper.models import Competitor


def select_leader(ratings: Mapping[int, float]) -> int | None:
    """Return the competitor id holding the highest rating.

    Ties go to the lowest competitor id so the result does not depend on
    mapping order. Returns None for an empty population.
    """
    if not ratings:
        return None
    leader_id, _ = min(ratings.items(), key=lambda item: (-item[1], item[0]))
    return leader_id


def leader_of(competitors: Iterable[Competitor]) -> int | None:
    """Leader among competitor records; see ``select_leader``."""
    return select_leader({c.id: c.rating for c in competitors})
