"""Championship reigns: incremental tracking, statistics and reconstruction."""

from ladderkeeper.reigns.leader import leader_of, select_leader
from ladderkeeper.reigns.reconstruct import ReconstructionResult, rebuild_reigns, replay_reigns
from ladderkeeper.reigns.stats import aggregate_stats, days_held, to_view
from ladderkeeper.reigns.tracker import ReignTracker

__all__ = [
    "ReignTracker",
    "ReconstructionResult",
    "rebuild_reigns",
    "replay_reigns",
    "select_leader",
    "leader_of",
    "aggregate_stats",
    "days_held",
    "to_view",
]
