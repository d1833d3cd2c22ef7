"""In-process ladder store backed by dictionaries."""

import copy
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime

from pydantic import ValidationError

from ladderkeeper.errors import InvalidInputError, NotFoundError, PersistenceError
from ladderkeeper.logging import get_logger
from ladderkeeper.models import Competitor, MatchRecord, Reign

log = get_logger(__name__)


class MemoryLadderStore:
    """Dictionary-backed ``LadderStore``.

    Transactions snapshot the whole state and restore it if the block
    raises, so a failed ``replace_reigns`` or submission leaves nothing
    half-written.
    """

    def __init__(self) -> None:
        self._competitors: dict[int, Competitor] = {}
        self._matches: dict[int, MatchRecord] = {}
        self._reigns: dict[int, Reign] = {}
        self._open_reign_id: int | None = None
        self._next_ids = {"competitor": 1, "match": 1, "reign": 1}
        self._depth = 0

    def _next_id(self, kind: str) -> int:
        value = self._next_ids[kind]
        self._next_ids[kind] = value + 1
        return value

    def _snapshot(self) -> tuple:
        return copy.deepcopy((
            self._competitors,
            self._matches,
            self._reigns,
            self._open_reign_id,
            self._next_ids,
        ))

    @contextmanager
    def transaction(self) -> Iterator[None]:
        if self._depth:
            self._depth += 1
            try:
                yield
            finally:
                self._depth -= 1
            return

        snapshot = self._snapshot()
        self._depth = 1
        try:
            yield
        except BaseException:
            (
                self._competitors,
                self._matches,
                self._reigns,
                self._open_reign_id,
                self._next_ids,
            ) = snapshot
            log.debug("transaction_rolled_back", store="memory")
            raise
        finally:
            self._depth = 0

    # Competitors

    def add_competitor(self, name: str, rating: float) -> Competitor:
        competitor = Competitor(id=self._next_id("competitor"), name=name, rating=rating)
        self._competitors[competitor.id] = competitor
        return competitor.model_copy()

    def get_competitor(self, competitor_id: int) -> Competitor:
        try:
            return self._competitors[competitor_id].model_copy()
        except KeyError:
            raise NotFoundError(f"Competitor {competitor_id} not found") from None

    def list_competitors(self) -> list[Competitor]:
        return [self._competitors[key].model_copy() for key in sorted(self._competitors)]

    def save_competitor(self, competitor: Competitor) -> None:
        if competitor.id not in self._competitors:
            raise NotFoundError(f"Competitor {competitor.id} not found")
        self._competitors[competitor.id] = competitor.model_copy()

    # Matches

    def add_match(self, match: MatchRecord) -> MatchRecord:
        stored = match.model_copy(update={"id": self._next_id("match")})
        self._matches[stored.id] = stored
        return stored.model_copy()

    def get_match(self, match_id: int) -> MatchRecord:
        try:
            return self._matches[match_id].model_copy()
        except KeyError:
            raise NotFoundError(f"Match {match_id} not found") from None

    def list_matches(self) -> list[MatchRecord]:
        ordered = sorted(self._matches.values(), key=lambda m: (m.created_at, m.id))
        return [m.model_copy() for m in ordered]

    def latest_match(self) -> MatchRecord | None:
        if not self._matches:
            return None
        return max(self._matches.values(), key=lambda m: (m.created_at, m.id)).model_copy()

    def delete_match(self, match_id: int) -> None:
        if self._matches.pop(match_id, None) is None:
            raise NotFoundError(f"Match {match_id} not found")

    # Reigns

    def get_open_reign(self) -> Reign | None:
        if self._open_reign_id is None:
            return None
        return self._reigns[self._open_reign_id].model_copy()

    def list_reigns(self, competitor_id: int | None = None) -> list[Reign]:
        reigns = [
            r for r in self._reigns.values()
            if competitor_id is None or r.competitor_id == competitor_id
        ]
        reigns.sort(key=lambda r: (r.started_at, r.id))
        return [r.model_copy() for r in reigns]

    def open_reign(self, competitor_id: int, started_at: datetime) -> Reign:
        if self._open_reign_id is not None:
            raise PersistenceError(
                f"Reign {self._open_reign_id} is still open; close it before opening another"
            )
        reign = Reign(id=self._next_id("reign"), competitor_id=competitor_id, started_at=started_at)
        self._reigns[reign.id] = reign
        self._open_reign_id = reign.id
        return reign.model_copy()

    def close_reign(self, reign_id: int, ended_at: datetime) -> Reign:
        try:
            current = self._reigns[reign_id]
        except KeyError:
            raise NotFoundError(f"Reign {reign_id} not found") from None
        try:
            closed = Reign(
                id=current.id,
                competitor_id=current.competitor_id,
                started_at=current.started_at,
                ended_at=ended_at,
            )
        except ValidationError as exc:
            raise InvalidInputError(str(exc)) from exc
        self._reigns[reign_id] = closed
        if self._open_reign_id == reign_id:
            self._open_reign_id = None
        return closed.model_copy()

    def replace_reigns(self, reigns: list[Reign]) -> list[Reign]:
        with self.transaction():
            self._reigns = {}
            self._open_reign_id = None
            self._next_ids["reign"] = 1
            stored = []
            for reign in reigns:
                if reign.is_open and self._open_reign_id is not None:
                    raise PersistenceError("Replacement set contains more than one open reign")
                if reign.ended_at is not None and reign.ended_at < reign.started_at:
                    raise PersistenceError("Reign cannot end before it starts")
                entry = reign.model_copy(update={"id": self._next_id("reign")})
                self._reigns[entry.id] = entry
                if entry.is_open:
                    self._open_reign_id = entry.id
                stored.append(entry.model_copy())
        return stored
