"""Stats service: cached aggregates, player ranks, search and vanity urls.

Thin orchestration over the repository, the vanity resolver and the
process-wide caches:
- global stats and leaderboards are cached per key
- player stats are cached per SteamID and read from the ranked view,
  falling back to computing ranks from the raw table
- search and vanity resolution are not cached in memory; resolved vanity
  urls are persisted by the repository instead
"""

from typing import List, Optional, Tuple, Union

import structlog

from dropstats.core.decorators import service_error_handler
from dropstats.core.exceptions import (
    NotFoundError,
    PlayerNotFoundError,
    SteamIDError,
    ValidationError,
)
from dropstats.core.steam_id import SteamID
from .cache import StatsCacheManager
from .gateway import VanityResolver
from .models import (
    GlobalStats,
    LeaderboardEntry,
    LeaderboardOrder,
    PlayerStats,
    SearchResult,
    LEADERBOARD_SIZE,
    SEARCH_LIMIT,
)
from .repository import StatsRepositoryInterface
from .search import rank_search_results

logger = structlog.get_logger(__name__)

SERVICE_NAME = "StatsService"


class StatsService:
    """Service for medic stats (Thin Orchestration Layer).

    Responsibilities:
    - Serve hot queries from the caches, computing each missing key once
    - Choose between precomputed and live ranking for a player
    - Resolve search text and vanity urls to players

    Does NOT:
    - Build SQL (delegated to the repository)
    - Talk to the Steam Web API directly (goes through the resolver)
    """

    def __init__(
        self,
        repository: StatsRepositoryInterface,
        resolver: VanityResolver,
        caches: StatsCacheManager,
    ):
        """Initialize stats service.

        :param repository: Stats repository
        :param resolver: Vanity url resolver (Anti-Corruption Layer over Steam)
        :param caches: Process-wide cache manager
        """
        self.repository = repository
        self.resolver = resolver
        self.caches = caches

    @service_error_handler(SERVICE_NAME)
    async def global_stats(self) -> GlobalStats:
        """Population totals."""
        return await self.caches.global_stats.get_or_compute(
            None, self._load_global_stats
        )

    async def _load_global_stats(self) -> GlobalStats:
        stats = await self.repository.get_global_stats()
        if stats is None:
            raise NotFoundError(
                message="Global stats are not available",
                service=SERVICE_NAME,
                operation="global_stats",
            )
        return stats

    @service_error_handler(SERVICE_NAME)
    async def leaderboard(
        self, order: Union[LeaderboardOrder, str]
    ) -> Tuple[LeaderboardEntry, ...]:
        """Top players for ``order``, best first."""
        try:
            order = LeaderboardOrder(order)
        except ValueError:
            raise ValidationError(
                message=f"Unknown leaderboard order {order!r}",
                service=SERVICE_NAME,
                operation="leaderboard",
                field="order",
                value=order,
            )

        async def load() -> Tuple[LeaderboardEntry, ...]:
            entries = await self.repository.get_leaderboard(order, LEADERBOARD_SIZE)
            return tuple(entries)

        return await self.caches.leaderboards.get_or_compute(order, load)

    @service_error_handler(SERVICE_NAME)
    async def player_stats(self, steam_id: SteamID) -> PlayerStats:
        """Stats and ranks of one player.

        :raises PlayerNotFoundError: If the player has no stats at all
        """
        return await self.caches.players.get_or_compute(
            steam_id, lambda: self._load_player_stats(steam_id)
        )

    async def _load_player_stats(self, steam_id: SteamID) -> PlayerStats:
        # Ranked players (more than MIN_RANKED_DROPS drops) have precomputed ranks
        stats = await self.repository.get_ranked_player_stats(steam_id)
        if stats is not None:
            return stats

        logger.info(
            "Player not in ranked view, computing ranks",
            steam_id=steam_id.steam3(),
        )
        stats = await self.repository.compute_player_stats(steam_id)
        if stats is None:
            logger.info("No stats found for player", steam_id=steam_id.steam3())
            raise PlayerNotFoundError(steam_id.steam3(), operation="player_stats")
        return stats

    @service_error_handler(SERVICE_NAME)
    async def search(self, query: str) -> List[SearchResult]:
        """Players whose name matches ``query``.

        A query that is a SteamID of a known player returns only that player.
        """
        try:
            steam_id: Optional[SteamID] = SteamID.parse(query)
        except SteamIDError:
            steam_id = None

        if steam_id is not None:
            name = await self.repository.get_user_name(steam_id)
            if name is not None:
                return [SearchResult(steam_id=steam_id, name=name, count=1, sim=1.0)]

        candidates = await self.repository.search_names(query, SEARCH_LIMIT)
        results = rank_search_results(candidates)
        logger.debug(
            "Player search completed",
            query=query,
            candidates=len(candidates),
            results=len(results),
        )
        return results

    @service_error_handler(SERVICE_NAME)
    async def resolve_vanity(self, token: str) -> Optional[SteamID]:
        """SteamID for a vanity url token, None if the token is not in use.

        Resolved tokens are stored and never resolved again. Misses are not
        stored since the name may be claimed later.

        :raises ResolverError: If the Steam Web API could not answer
        """
        known = await self.repository.get_vanity_mapping(token)
        if known is not None:
            return known

        steam_id = await self.resolver.resolve(token)
        if steam_id is None:
            return None

        await self.repository.save_vanity_mapping(token, steam_id)
        return steam_id

    @service_error_handler(SERVICE_NAME)
    async def lookup_player(self, text: str) -> PlayerStats:
        """Stats for a player given as a SteamID in any notation or a vanity url.

        :raises SteamIDError: If ``text`` is neither a SteamID nor a known vanity url
        :raises PlayerNotFoundError: If the player has no stats
        """
        try:
            steam_id = SteamID.parse(text)
        except SteamIDError:
            resolved = await self.resolve_vanity(text)
            if resolved is None:
                logger.info("User not found", player=text)
                raise
            steam_id = resolved

        return await self.player_stats(steam_id)
