"""SQLAlchemy-backed ladder store."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from typing import Optional

from pydantic import ValidationError
from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ladderkeeper.errors import InvalidInputError, NotFoundError, PersistenceError
from ladderkeeper.logging import get_logger
from ladderkeeper.models import Competitor, MatchRecord, Reign

from .engine import create_all, create_engine, create_session_factory
from .models import (
    STATE_SENTINEL_ID,
    ChampionshipStateRow,
    CompetitorRow,
    MatchRow,
    ReignRow,
)

log = get_logger(__name__)


class SqlLadderStore:
    """``LadderStore`` over a relational database.

    The one-open-reign rule is held by the ``championship_state`` row: it
    points at the open reign and is updated in the same transaction that
    opens or closes a reign. Driver errors roll the transaction back and
    surface as ``PersistenceError``.
    """

    def __init__(self, session_factory) -> None:
        self._session_factory = session_factory
        self._session: Session | None = None

    @classmethod
    def from_url(
        cls,
        url: Optional[str] = None,
        *,
        create_schema: bool = False,
        echo: bool = False,
    ) -> "SqlLadderStore":
        try:
            engine = create_engine(url, echo=echo)
            if create_schema:
                create_all(engine)
        except SQLAlchemyError as exc:
            log.error("store_setup_failed", error=str(exc))
            raise PersistenceError(str(exc)) from exc
        return cls(create_session_factory(engine))

    @contextmanager
    def transaction(self) -> Iterator[None]:
        if self._session is not None:
            yield
            return

        session = self._session_factory()
        self._session = session
        try:
            with session.begin():
                yield
        except SQLAlchemyError as exc:
            log.error("transaction_failed", error=str(exc))
            raise PersistenceError(str(exc)) from exc
        finally:
            self._session = None
            session.close()

    @contextmanager
    def _use(self) -> Iterator[Session]:
        with self.transaction():
            yield self._session

    def _state(self, session: Session) -> ChampionshipStateRow:
        state = session.get(ChampionshipStateRow, STATE_SENTINEL_ID)
        if state is None:
            state = ChampionshipStateRow(id=STATE_SENTINEL_ID, open_reign_id=None)
            session.add(state)
            session.flush()
        return state

    # Competitors

    def add_competitor(self, name: str, rating: float) -> Competitor:
        with self._use() as session:
            row = CompetitorRow(
                name=name, rating=rating, wins=0, losses=0, draws=0, total_matches=0
            )
            session.add(row)
            session.flush()
            return Competitor.model_validate(row)

    def get_competitor(self, competitor_id: int) -> Competitor:
        with self._use() as session:
            row = session.get(CompetitorRow, competitor_id)
            if row is None:
                raise NotFoundError(f"Competitor {competitor_id} not found")
            return Competitor.model_validate(row)

    def list_competitors(self) -> list[Competitor]:
        with self._use() as session:
            rows = session.scalars(select(CompetitorRow).order_by(CompetitorRow.id))
            return [Competitor.model_validate(row) for row in rows]

    def save_competitor(self, competitor: Competitor) -> None:
        with self._use() as session:
            row = session.get(CompetitorRow, competitor.id)
            if row is None:
                raise NotFoundError(f"Competitor {competitor.id} not found")
            for field, value in competitor.model_dump(exclude={"id"}).items():
                setattr(row, field, value)
            session.flush()

    # Matches

    def add_match(self, match: MatchRecord) -> MatchRecord:
        with self._use() as session:
            row = MatchRow(**match.model_dump(exclude={"id"}))
            session.add(row)
            session.flush()
            return MatchRecord.model_validate(row)

    def get_match(self, match_id: int) -> MatchRecord:
        with self._use() as session:
            row = session.get(MatchRow, match_id)
            if row is None:
                raise NotFoundError(f"Match {match_id} not found")
            return MatchRecord.model_validate(row)

    def list_matches(self) -> list[MatchRecord]:
        with self._use() as session:
            rows = session.scalars(
                select(MatchRow).order_by(MatchRow.created_at, MatchRow.id)
            )
            return [MatchRecord.model_validate(row) for row in rows]

    def latest_match(self) -> MatchRecord | None:
        with self._use() as session:
            row = session.scalars(
                select(MatchRow)
                .order_by(MatchRow.created_at.desc(), MatchRow.id.desc())
                .limit(1)
            ).first()
            return MatchRecord.model_validate(row) if row is not None else None

    def delete_match(self, match_id: int) -> None:
        with self._use() as session:
            row = session.get(MatchRow, match_id)
            if row is None:
                raise NotFoundError(f"Match {match_id} not found")
            session.delete(row)
            session.flush()

    # Reigns

    def get_open_reign(self) -> Reign | None:
        with self._use() as session:
            state = session.get(ChampionshipStateRow, STATE_SENTINEL_ID)
            if state is None or state.open_reign_id is None:
                return None
            return Reign.model_validate(session.get(ReignRow, state.open_reign_id))

    def list_reigns(self, competitor_id: int | None = None) -> list[Reign]:
        with self._use() as session:
            query = select(ReignRow).order_by(ReignRow.started_at, ReignRow.id)
            if competitor_id is not None:
                query = query.where(ReignRow.competitor_id == competitor_id)
            return [Reign.model_validate(row) for row in session.scalars(query)]

    def open_reign(self, competitor_id: int, started_at: datetime) -> Reign:
        with self._use() as session:
            state = self._state(session)
            if state.open_reign_id is not None:
                raise PersistenceError(
                    f"Reign {state.open_reign_id} is still open; close it before opening another"
                )
            reign = Reign(competitor_id=competitor_id, started_at=started_at)
            row = ReignRow(competitor_id=reign.competitor_id, started_at=reign.started_at)
            session.add(row)
            session.flush()
            state.open_reign_id = row.id
            session.flush()
            return Reign.model_validate(row)

    def close_reign(self, reign_id: int, ended_at: datetime) -> Reign:
        with self._use() as session:
            row = session.get(ReignRow, reign_id)
            if row is None:
                raise NotFoundError(f"Reign {reign_id} not found")
            try:
                closed = Reign(
                    id=row.id,
                    competitor_id=row.competitor_id,
                    started_at=row.started_at,
                    ended_at=ended_at,
                )
            except ValidationError as exc:
                raise InvalidInputError(str(exc)) from exc

            state = self._state(session)
            if state.open_reign_id == row.id:
                state.open_reign_id = None
            row.ended_at = closed.ended_at
            session.flush()
            return closed

    def replace_reigns(self, reigns: list[Reign]) -> list[Reign]:
        with self._use() as session:
            state = self._state(session)
            state.open_reign_id = None
            session.flush()
            session.execute(delete(ReignRow))

            rows = [
                ReignRow(
                    competitor_id=reign.competitor_id,
                    started_at=reign.started_at,
                    ended_at=reign.ended_at,
                )
                for reign in reigns
            ]
            session.add_all(rows)
            session.flush()

            open_rows = [row for row in rows if row.ended_at is None]
            if len(open_rows) > 1:
                raise PersistenceError("Replacement set contains more than one open reign")
            if open_rows:
                state.open_reign_id = open_rows[0].id
                session.flush()

            log.debug("reigns_replaced", count=len(rows))
            return [Reign.model_validate(row) for row in rows]
