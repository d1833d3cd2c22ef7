"""Data models for the rating engine."""

from pydantic import BaseModel

from ladderkeeper.models import DEFAULT_RATING


class RatingResult(BaseModel):
    """Outcome of a single rating computation, rounded to 2 decimals."""
    new_rating_a: float
    new_rating_b: float
    delta_a: float
    delta_b: float


class RatingConfig(BaseModel):
    """Configuration for the rating engine."""
    initial_rating: float = DEFAULT_RATING

    # K-factor tiers: (matches played below which the K applies, K)
    k_tiers: list[tuple[int, float]] = [(10, 40.0), (30, 32.0)]
    k_floor: float = 16.0  # experienced competitors

    # Score-dominance factor: base + win_weight*winRatio + margin_weight*marginRatio
    factor_base: float = 0.9
    factor_win_weight: float = 0.2
    factor_margin_weight: float = 0.3
    factor_min: float = 0.9
    factor_max: float = 1.3
