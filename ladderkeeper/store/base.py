"""Storage protocol the ladder core runs against."""

from contextlib import AbstractContextManager
from datetime import datetime
from typing import Protocol

from ladderkeeper.models import Competitor, MatchRecord, Reign


class LadderStore(Protocol):
    """Persistence contract for competitors, matches and reigns.

    ``transaction()`` makes every call issued inside it commit or roll back
    together; nested ``transaction()`` calls join the outer one. Calls made
    outside a transaction each run in their own. A store instance is not
    safe for concurrent use; the host serializes writers.

    At most one reign may be open at a time: ``open_reign`` fails with
    ``PersistenceError`` while another reign is still open.
    """

    def transaction(self) -> AbstractContextManager[None]:
        ...

    # Competitors

    def add_competitor(self, name: str, rating: float) -> Competitor:
        ...

    def get_competitor(self, competitor_id: int) -> Competitor:
        """Raises NotFoundError for unknown ids."""
        ...

    def list_competitors(self) -> list[Competitor]:
        """All competitors ordered by id."""
        ...

    def save_competitor(self, competitor: Competitor) -> None:
        ...

    # Matches

    def add_match(self, match: MatchRecord) -> MatchRecord:
        """Persist a match and return it with its assigned id."""
        ...

    def get_match(self, match_id: int) -> MatchRecord:
        """Raises NotFoundError for unknown ids."""
        ...

    def list_matches(self) -> list[MatchRecord]:
        """All matches ordered by created_at, then id (oldest first)."""
        ...

    def latest_match(self) -> MatchRecord | None:
        """The most recent match by created_at, then id; None if there are none."""
        ...

    def delete_match(self, match_id: int) -> None:
        ...

    # Reigns

    def get_open_reign(self) -> Reign | None:
        ...

    def list_reigns(self, competitor_id: int | None = None) -> list[Reign]:
        """Reigns ordered by started_at, then id, optionally for one competitor."""
        ...

    def open_reign(self, competitor_id: int, started_at: datetime) -> Reign:
        ...

    def close_reign(self, reign_id: int, ended_at: datetime) -> Reign:
        ...

    def replace_reigns(self, reigns: list[Reign]) -> list[Reign]:
        """Delete every stored reign and insert ``reigns`` as one unit.

        Returned reigns carry store-assigned ids; ids are not stable across
        replacements, only the competitor and interval of each reign are.
        """
        ...
