from .runner import ScoreCheckRunner
from .scanner import ScanError, find_low_score_episodes, find_low_score_movies
from .scheduler import DaemonScheduler, SchedulerState
from .scoring import BatchCollector, CollectDecision, is_low_score
from .search import SEARCH_CHUNK_SIZE, trigger_searches

__all__ = [
    "BatchCollector",
    "CollectDecision",
    "DaemonScheduler",
    "SEARCH_CHUNK_SIZE",
    "ScanError",
    "SchedulerState",
    "ScoreCheckRunner",
    "find_low_score_episodes",
    "find_low_score_movies",
    "is_low_score",
    "trigger_searches",
]
