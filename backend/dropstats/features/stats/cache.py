"""The three stats caches, created once per process."""

import time
from typing import Any, Dict, Optional, Tuple

import structlog

from dropstats.core.cache import AsyncTTLCache, Clock
from dropstats.core.config import Settings
from dropstats.core.steam_id import SteamID
from .models import GlobalStats, LeaderboardEntry, LeaderboardOrder, PlayerStats

logger = structlog.get_logger(__name__)

DEFAULT_TTL = 15 * 60
DEFAULT_IDLE = 5 * 60
DEFAULT_PLAYER_CACHE_SIZE = 1024

Leaderboard = Tuple[LeaderboardEntry, ...]


class StatsCacheManager:
    """Owns the global stats, leaderboard and per-player caches.

    Entries are shared with callers as immutable snapshots; leaderboards are
    stored as tuples.
    """

    def __init__(
        self,
        ttl: float = DEFAULT_TTL,
        idle: float = DEFAULT_IDLE,
        player_cache_size: int = DEFAULT_PLAYER_CACHE_SIZE,
        clock: Clock = time.monotonic,
    ):
        self.global_stats: AsyncTTLCache[None, GlobalStats] = AsyncTTLCache(
            "global_stats", ttl=ttl, idle=idle, clock=clock
        )
        self.leaderboards: AsyncTTLCache[LeaderboardOrder, Leaderboard] = AsyncTTLCache(
            "leaderboards", ttl=ttl, idle=idle, clock=clock
        )
        self.players: AsyncTTLCache[SteamID, PlayerStats] = AsyncTTLCache(
            "players", ttl=ttl, idle=idle, maxsize=player_cache_size, clock=clock
        )

    @classmethod
    def from_settings(
        cls, settings: Settings, clock: Optional[Clock] = None
    ) -> "StatsCacheManager":
        logger.info(
            "Creating stats caches",
            ttl=settings.cache_ttl_seconds,
            idle=settings.cache_idle_seconds,
            player_cache_size=settings.player_cache_size,
        )
        return cls(
            ttl=settings.cache_ttl_seconds,
            idle=settings.cache_idle_seconds,
            player_cache_size=settings.player_cache_size,
            clock=clock or time.monotonic,
        )

    def stats(self) -> Dict[str, Any]:
        """Get statistics from all caches."""
        return {
            "global_stats": self.global_stats.stats(),
            "leaderboards": self.leaderboards.stats(),
            "players": self.players.stats(),
        }

    def clear(self) -> None:
        """Clear all caches."""
        self.global_stats.clear()
        self.leaderboards.clear()
        self.players.clear()
        logger.info("All caches cleared")
