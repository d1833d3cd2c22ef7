"""Elo ladder with championship reign tracking."""

from ladderkeeper.errors import InvalidInputError, LadderError, NotFoundError, PersistenceError
from ladderkeeper.models import ChampionStats, Competitor, MatchRecord, Reign, ReignView
from ladderkeeper.rating import RatingConfig, compute_rating, win_probability
from ladderkeeper.reigns import ReignTracker, rebuild_reigns
from ladderkeeper.service import LadderService

__all__ = [
    "LadderService",
    "ReignTracker",
    "rebuild_reigns",
    "compute_rating",
    "win_probability",
    "RatingConfig",
    "Competitor",
    "MatchRecord",
    "Reign",
    "ReignView",
    "ChampionStats",
    "LadderError",
    "InvalidInputError",
    "NotFoundError",
    "PersistenceError",
]
