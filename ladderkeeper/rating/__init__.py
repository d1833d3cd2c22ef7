"""Elo rating engine for head-to-head matches."""

from ladderkeeper.rating.elo import (
    compute_rating,
    expected_score,
    k_factor,
    score_factor,
    win_probability,
)
from ladderkeeper.rating.models import RatingConfig, RatingResult

__all__ = [
    "compute_rating",
    "expected_score",
    "k_factor",
    "score_factor",
    "win_probability",
    "RatingConfig",
    "RatingResult",
]
