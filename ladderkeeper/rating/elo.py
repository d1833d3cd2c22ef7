"""Pure Elo rating calculations with score-dominance and experience scaling."""

import math

from ladderkeeper.rating.models import RatingConfig, RatingResult

DEFAULT_CONFIG = RatingConfig()


def expected_score(rating_a: float, rating_b: float) -> float:
    """Calculate expected score for competitor A against competitor B.

    Uses the standard Elo formula: E_A = 1 / (1 + 10^((R_B - R_A) / 400))

    Args:
        rating_a: Rating of competitor A
        rating_b: Rating of competitor B

    Returns:
        Expected score (0.0 to 1.0) for competitor A
    """
    return 1.0 / (1.0 + math.pow(10.0, (rating_b - rating_a) / 400.0))


def round_half_away(value: float, digits: int = 2) -> float:
    """Round to `digits` decimals with halves going away from zero."""
    scale = 10 ** digits
    return math.copysign(math.floor(abs(value) * scale + 0.5), value) / scale


def win_probability(rating_a: float, rating_b: float) -> float:
    """Chance (as a percentage) that competitor A beats competitor B."""
    return expected_score(rating_a, rating_b) * 100


def score_factor(
    winner_score: int,
    loser_score: int,
    config: RatingConfig = DEFAULT_CONFIG,
) -> float:
    """Scale a decisive result by how dominant the winner was.

    A close game (8-7) stays near the lower bound, a blowout (10-2) moves
    toward the upper bound.

    Args:
        winner_score: Points scored by the winner
        loser_score: Points scored by the loser
        config: Factor weights and bounds

    Returns:
        Factor clamped to [factor_min, factor_max]; 1.0 if no points were scored
    """
    total = winner_score + loser_score
    if total == 0:
        return 1.0

    win_ratio = winner_score / total
    margin_ratio = (winner_score - loser_score) / total

    factor = (
        config.factor_base
        + win_ratio * config.factor_win_weight
        + margin_ratio * config.factor_margin_weight
    )
    return min(config.factor_max, max(config.factor_min, factor))


def k_factor(total_matches: int, config: RatingConfig = DEFAULT_CONFIG) -> float:
    """K-factor for a competitor with ``total_matches`` played before this match.

    Newer competitors move faster so their rating settles sooner.
    """
    for threshold, k in config.k_tiers:
        if total_matches < threshold:
            return k
    return config.k_floor


def compute_rating(
    rating_a: float,
    rating_b: float,
    score_a: int,
    score_b: int,
    matches_a: int,
    matches_b: int,
    config: RatingConfig | None = None,
) -> RatingResult:
    """Calculate new ratings for both sides after a match.

    Args:
        rating_a: Current rating of side A
        rating_b: Current rating of side B
        score_a: Points scored by A (non-negative)
        score_b: Points scored by B (non-negative)
        matches_a: Matches A played before this one
        matches_b: Matches B played before this one
        config: Engine constants (defaults if None)

    Returns:
        RatingResult with new ratings and deltas, each rounded to 2 decimals
        from the same unrounded delta
    """
    config = config or DEFAULT_CONFIG

    expected_a = expected_score(rating_a, rating_b)
    expected_b = expected_score(rating_b, rating_a)

    if score_a > score_b:
        actual_a, actual_b = 1.0, 0.0
        factor = score_factor(score_a, score_b, config)
    elif score_b > score_a:
        actual_a, actual_b = 0.0, 1.0
        factor = score_factor(score_b, score_a, config)
    else:
        # Draw
        actual_a, actual_b = 0.5, 0.5
        factor = 1.0

    delta_a = k_factor(matches_a, config) * factor * (actual_a - expected_a)
    delta_b = k_factor(matches_b, config) * factor * (actual_b - expected_b)

    return RatingResult(
        new_rating_a=round_half_away(rating_a + delta_a),
        new_rating_b=round_half_away(rating_b + delta_b),
        delta_a=round_half_away(delta_a),
        delta_b=round_half_away(delta_b),
    )
