"""Data contracts shared by the ledger, the reign tracker and the stores."""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

DEFAULT_RATING = 1000.0


def as_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime; naive values are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class Competitor(BaseModel):
    """A player on the ladder and its rating state."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    rating: float = DEFAULT_RATING
    wins: int = Field(default=0, ge=0)
    losses: int = Field(default=0, ge=0)
    draws: int = Field(default=0, ge=0)
    total_matches: int = Field(default=0, ge=0)

    @property
    def win_rate(self) -> float:
        if self.total_matches == 0:
            return 0.0
        return self.wins / self.total_matches * 100


class MatchRecord(BaseModel):
    """A finalized match with the rating movement it caused."""
    model_config = ConfigDict(from_attributes=True)

    id: int | None = None  # assigned by the store
    competitor_a_id: int
    competitor_b_id: int
    score_a: int = Field(ge=0)
    score_b: int = Field(ge=0)
    winner_id: int | None = None  # None on a tie
    rating_a_before: float
    rating_b_before: float
    rating_a_after: float
    rating_b_after: float
    delta_a: float
    delta_b: float
    created_at: datetime

    @field_validator("created_at")
    @classmethod
    def _normalize(cls, value: datetime) -> datetime:
        return as_utc(value)

    @model_validator(mode="after")
    def _check_competitors(self) -> "MatchRecord":
        if self.competitor_a_id == self.competitor_b_id:
            raise ValueError("a competitor cannot play against themselves")
        if self.winner_id not in (None, self.competitor_a_id, self.competitor_b_id):
            raise ValueError("winner must be one of the two competitors")
        return self


class Reign(BaseModel):
    """A continuous period during which one competitor held the top rating."""
    model_config = ConfigDict(from_attributes=True)

    id: int | None = None
    competitor_id: int
    started_at: datetime
    ended_at: datetime | None = None  # None while the reign is ongoing

    @field_validator("started_at", "ended_at")
    @classmethod
    def _normalize(cls, value: datetime | None) -> datetime | None:
        return None if value is None else as_utc(value)

    @model_validator(mode="after")
    def _check_interval(self) -> "Reign":
        if self.ended_at is not None and self.ended_at < self.started_at:
            raise ValueError("reign cannot end before it starts")
        return self

    @property
    def is_open(self) -> bool:
        return self.ended_at is None

    def key(self) -> tuple[int, datetime, datetime | None]:
        """Identity of the interval, ignoring the storage id."""
        return (self.competitor_id, self.started_at, self.ended_at)


class ReignView(Reign):
    """A reign annotated with its length in whole days, computed on read."""
    days: int
    competitor_name: str | None = None


class ChampionStats(BaseModel):
    """Aggregated championship statistics for one competitor."""
    competitor_id: int
    competitor_name: str | None = None
    total_reigns: int
    total_days: int
    longest_reign_days: int
    current_champion: bool
    first_crowned: datetime
    # Start of the latest completed reign; None if never dethroned
    last_crowned: datetime | None = None


class LeaderboardEntry(BaseModel):
    """A competitor's position on the rating-ordered leaderboard."""
    rank: int
    competitor: Competitor
    win_rate: float
