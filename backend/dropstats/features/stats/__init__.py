"""Stats feature module.

Cached aggregates, leaderboards, per-player ranks, name search and vanity
url resolution.
"""

from .router import router as stats_router
from .service import StatsService
from .cache import StatsCacheManager
from .models import (
    GlobalStats,
    LeaderboardEntry,
    LeaderboardOrder,
    PlayerStats,
    ProfileLinks,
    SearchResult,
    VanityMapping,
)
from .dependencies import build_stats_service, get_stats_service, StatsServiceDep

__all__ = [
    # Router
    "stats_router",
    # Service
    "StatsService",
    "StatsCacheManager",
    # Models
    "GlobalStats",
    "LeaderboardEntry",
    "LeaderboardOrder",
    "PlayerStats",
    "ProfileLinks",
    "SearchResult",
    "VanityMapping",
    # Dependencies
    "build_stats_service",
    "get_stats_service",
    "StatsServiceDep",
]
