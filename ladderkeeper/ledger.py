"""Apply and reverse finalized matches against competitor state.

Both functions are pure: they return new model instances and never touch a
store. ``reverse_match`` is the exact inverse of ``record_match`` and restores
the stored before-ratings instead of re-running the rating formula.
"""

from datetime import datetime

from pydantic import ValidationError

from ladderkeeper.errors import InvalidInputError
from ladderkeeper.logging import get_logger
from ladderkeeper.models import Competitor, MatchRecord
from ladderkeeper.rating.elo import compute_rating
from ladderkeeper.rating.models import RatingConfig

log = get_logger(__name__)


def validate_match(competitor_a_id: int, competitor_b_id: int, score_a: int, score_b: int) -> None:
    """Reject self-matches and negative scores."""
    if competitor_a_id == competitor_b_id:
        raise InvalidInputError("Competitor cannot play against themselves")
    if score_a < 0 or score_b < 0:
        raise InvalidInputError("Scores cannot be negative")


def record_match(
    competitor_a: Competitor,
    competitor_b: Competitor,
    score_a: int,
    score_b: int,
    at: datetime,
    config: RatingConfig | None = None,
) -> tuple[MatchRecord, Competitor, Competitor]:
    """Rate a finalized match and build the updated competitor state.

    Args:
        competitor_a: Side A before the match
        competitor_b: Side B before the match
        score_a: Points scored by A
        score_b: Points scored by B
        at: When the match was recorded
        config: Rating engine constants

    Returns:
        (match record without id, updated A, updated B)
    """
    validate_match(competitor_a.id, competitor_b.id, score_a, score_b)

    result = compute_rating(
        competitor_a.rating,
        competitor_b.rating,
        score_a,
        score_b,
        competitor_a.total_matches,
        competitor_b.total_matches,
        config,
    )

    a = competitor_a.model_copy(update={
        "rating": result.new_rating_a,
        "total_matches": competitor_a.total_matches + 1,
    })
    b = competitor_b.model_copy(update={
        "rating": result.new_rating_b,
        "total_matches": competitor_b.total_matches + 1,
    })

    winner_id: int | None
    if score_a > score_b:
        winner_id = a.id
        a.wins += 1
        b.losses += 1
    elif score_b > score_a:
        winner_id = b.id
        b.wins += 1
        a.losses += 1
    else:
        winner_id = None
        a.draws += 1
        b.draws += 1

    try:
        match = MatchRecord(
            competitor_a_id=a.id,
            competitor_b_id=b.id,
            score_a=score_a,
            score_b=score_b,
            winner_id=winner_id,
            rating_a_before=competitor_a.rating,
            rating_b_before=competitor_b.rating,
            rating_a_after=result.new_rating_a,
            rating_b_after=result.new_rating_b,
            delta_a=result.delta_a,
            delta_b=result.delta_b,
            created_at=at,
        )
    except ValidationError as exc:
        raise InvalidInputError(str(exc)) from exc

    log.debug(
        "match_rated",
        competitor_a=a.id,
        competitor_b=b.id,
        score=f"{score_a}-{score_b}",
        delta_a=result.delta_a,
        delta_b=result.delta_b,
    )
    return match, a, b


def reverse_match(
    match: MatchRecord,
    competitor_a: Competitor,
    competitor_b: Competitor,
) -> tuple[Competitor, Competitor]:
    """Undo the side effects ``record_match`` had on both competitors.

    Restores the before-ratings, decrements total matches and the
    win/loss/draw counter the match incremented.

    Raises:
        InvalidInputError: if the competitors are not the match's two sides
            or have no recorded result to undo
    """
    if (competitor_a.id, competitor_b.id) != (match.competitor_a_id, match.competitor_b_id):
        raise InvalidInputError(
            f"Competitors {competitor_a.id}/{competitor_b.id} did not play match {match.id}"
        )

    a = competitor_a.model_copy(update={
        "rating": match.rating_a_before,
        "total_matches": competitor_a.total_matches - 1,
    })
    b = competitor_b.model_copy(update={
        "rating": match.rating_b_before,
        "total_matches": competitor_b.total_matches - 1,
    })

    if match.winner_id == a.id:
        a.wins -= 1
        b.losses -= 1
    elif match.winner_id == b.id:
        b.wins -= 1
        a.losses -= 1
    else:
        a.draws -= 1
        b.draws -= 1

    if min(a.total_matches, b.total_matches, a.wins, a.losses, a.draws,
           b.wins, b.losses, b.draws) < 0:
        raise InvalidInputError(f"Match {match.id} was never applied to these competitors")

    log.debug("match_reversed", match_id=match.id, competitor_a=a.id, competitor_b=b.id)
    return a, b
