"""SQL persistence for the ladder.

This package defines:
- SQLAlchemy models for competitors, matches, reigns and the open-reign state row
- Engine/session helpers
- ``SqlLadderStore``, the relational ``LadderStore`` implementation

Environment variables:
- LADDERKEEPER_DATABASE_URL or DATABASE_URL: SQLAlchemy URL for the DB engine
"""

from __future__ import annotations

from ladderkeeper.sql import models
from ladderkeeper.sql.engine import create_all, create_engine, create_session_factory
from ladderkeeper.sql.store import SqlLadderStore

__all__ = [
    # Engine helpers
    "create_engine",
    "create_session_factory",
    "create_all",
    # Store
    "SqlLadderStore",
    # Models submodule
    "models",
]
