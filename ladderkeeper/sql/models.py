from __future__ import annotations

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
)

from .engine import Base

# Primary key of the single championship_state row
STATE_SENTINEL_ID = 1


class CompetitorRow(Base):
    __tablename__ = "competitors"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, unique=True, nullable=False)
    rating = Column(Float, nullable=False, default=1000.0)
    wins = Column(Integer, nullable=False, default=0)
    losses = Column(Integer, nullable=False, default=0)
    draws = Column(Integer, nullable=False, default=0)
    total_matches = Column(Integer, nullable=False, default=0)


class MatchRow(Base):
    __tablename__ = "matches"
    __table_args__ = (
        Index("ix_matches_created_at", "created_at"),
        CheckConstraint("competitor_a_id <> competitor_b_id", name="ck_matches_distinct"),
        CheckConstraint("score_a >= 0 AND score_b >= 0", name="ck_matches_scores"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    competitor_a_id = Column(Integer, ForeignKey("competitors.id"), nullable=False)
    competitor_b_id = Column(Integer, ForeignKey("competitors.id"), nullable=False)
    score_a = Column(Integer, nullable=False)
    score_b = Column(Integer, nullable=False)
    winner_id = Column(Integer, ForeignKey("competitors.id"), nullable=True)
    rating_a_before = Column(Float, nullable=False)
    rating_b_before = Column(Float, nullable=False)
    rating_a_after = Column(Float, nullable=False)
    rating_b_after = Column(Float, nullable=False)
    delta_a = Column(Float, nullable=False)
    delta_b = Column(Float, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)


class ReignRow(Base):
    __tablename__ = "championship_reigns"
    __table_args__ = (
        Index("ix_championship_reigns_competitor_id", "competitor_id"),
        CheckConstraint(
            "ended_at IS NULL OR ended_at >= started_at", name="ck_reigns_interval"
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    competitor_id = Column(Integer, ForeignKey("competitors.id"), nullable=False)
    started_at = Column(DateTime(timezone=True), nullable=False)
    ended_at = Column(DateTime(timezone=True), nullable=True)  # null while ongoing


class ChampionshipStateRow(Base):
    """Single row pointing at the one open reign, if any."""

    __tablename__ = "championship_state"
    __table_args__ = (
        CheckConstraint(f"id = {STATE_SENTINEL_ID}", name="ck_championship_state_singleton"),
    )

    id = Column(Integer, primary_key=True, default=STATE_SENTINEL_ID, autoincrement=False)
    open_reign_id = Column(
        Integer, ForeignKey("championship_reigns.id"), nullable=True, unique=True
    )
