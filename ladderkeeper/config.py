"""Environment-driven settings for ladderkeeper."""

from __future__ import annotations

import os

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

# Resolution order matches sql.engine.create_engine
DATABASE_URL = (
    os.environ.get("LADDERKEEPER_DATABASE_URL")
    or os.environ.get("DATABASE_URL", "")
)

# Default page size for championship history reads.
HISTORY_LIMIT = int(os.environ.get("HISTORY_LIMIT", "50"))

# Default page size for the leaderboard.
LEADERBOARD_LIMIT = int(os.environ.get("LEADERBOARD_LIMIT", "100"))
