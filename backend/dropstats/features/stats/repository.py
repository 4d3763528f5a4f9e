"""Repository pattern implementation for the stats feature.

Builds the statements for every stats query and turns the rows returned by
the store into domain models. "No row" is returned as None or an empty list;
store faults propagate as ``DatabaseError``.
"""

from abc import ABC, abstractmethod
from typing import Any, List, Optional

import structlog
from sqlalchemy import Double, func, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.orm import aliased

from dropstats.core.exceptions import DatabaseError, SteamIDError
from dropstats.core.steam_id import SteamID
from dropstats.core.store import DatabaseStore
from .models import (
    GlobalStats,
    LeaderboardEntry,
    LeaderboardOrder,
    PlayerStats,
    SearchResult,
    LEADERBOARD_SIZE,
    MIN_RANKED_DROPS,
    SEARCH_LIMIT,
)
from .orm_models import (
    GlobalStatsORM,
    MedicNameORM,
    MedicStatsORM,
    RankedMedicStatsORM,
    UserNameORM,
    VanityURLORM,
)

logger = structlog.get_logger(__name__)

# Rank name -> metric column it counts on
RANKED_METRICS = {
    "drops_rank": "drops",
    "dpu_rank": "dpu",
    "dps_rank": "dps",
    "dpg_rank": "dpg",
}


def _row_dict(row: Any) -> dict:
    return dict(row._mapping)


class StatsRepositoryInterface(ABC):
    """Interface for stats repository.

    Defines contract for data access operations.
    Enables stub implementations in tests.
    """

    @abstractmethod
    async def get_global_stats(self) -> Optional[GlobalStats]:
        """Read population totals.

        :returns: GlobalStats, or None if the view is empty
        """
        pass

    @abstractmethod
    async def get_leaderboard(
        self, order: LeaderboardOrder, limit: int = LEADERBOARD_SIZE
    ) -> List[LeaderboardEntry]:
        """Top ranked players sorted descending by the ordering's metric.

        :param order: Metric to sort by
        :param limit: Maximum entries to return
        :returns: Leaderboard entries, best first
        """
        pass

    @abstractmethod
    async def get_ranked_player_stats(self, steam_id: SteamID) -> Optional[PlayerStats]:
        """Read a player's row from the precomputed ranked view.

        :param steam_id: Player to look up
        :returns: PlayerStats with precomputed ranks, None if the view has no row
        """
        pass

    @abstractmethod
    async def compute_player_stats(self, steam_id: SteamID) -> Optional[PlayerStats]:
        """Compute a player's stats and ranks from the raw stats table.

        Each rank is the number of ranked players with a strictly greater
        metric, plus one.

        :param steam_id: Player to look up
        :returns: PlayerStats, None if the player has no stats row
        """
        pass

    @abstractmethod
    async def get_user_name(self, steam_id: SteamID) -> Optional[str]:
        """Current display name of a player.

        :param steam_id: Player to look up
        :returns: Name, or None if unknown
        """
        pass

    @abstractmethod
    async def search_names(
        self, query: str, limit: int = SEARCH_LIMIT
    ) -> List[SearchResult]:
        """Names matching ``query`` as a case-insensitive regex.

        :param query: Search text
        :param limit: Maximum rows, most frequently seen names first
        :returns: Candidates with trigram similarity to ``query``
        """
        pass

    @abstractmethod
    async def get_vanity_mapping(self, url: str) -> Optional[SteamID]:
        """Previously resolved SteamID for a vanity url.

        :param url: Vanity url token
        :returns: SteamID, or None if never resolved
        """
        pass

    @abstractmethod
    async def save_vanity_mapping(self, url: str, steam_id: SteamID) -> None:
        """Persist a resolved vanity url.

        :param url: Vanity url token
        :param steam_id: Resolved SteamID
        """
        pass


class SQLAlchemyStatsRepository(StatsRepositoryInterface):
    """SQLAlchemy implementation of stats repository.

    Statements are built with SQLAlchemy Core over the ORM mappings and run
    through the stateless ``DatabaseStore``.
    """

    def __init__(self, store: DatabaseStore):
        """Initialize repository with a store.

        :param store: Query adapter over the shared pool
        """
        self.store = store

    async def get_global_stats(self) -> Optional[GlobalStats]:
        stmt = select(
            GlobalStatsORM.drops, GlobalStatsORM.ubers, GlobalStatsORM.games
        ).limit(1)
        row = await self.store.query_one(stmt, operation="get_global_stats")
        if row is None:
            return None
        return GlobalStats.model_validate(_row_dict(row))

    async def get_leaderboard(
        self, order: LeaderboardOrder, limit: int = LEADERBOARD_SIZE
    ) -> List[LeaderboardEntry]:
        ranked = RankedMedicStatsORM
        metric = getattr(ranked, LeaderboardOrder(order).value)
        stmt = (
            select(
                ranked.steam_id,
                ranked.name,
                ranked.games,
                ranked.ubers,
                ranked.drops,
                ranked.medic_time,
            )
            .where(ranked.drops > MIN_RANKED_DROPS)
            .order_by(metric.desc())
            .limit(limit)
        )
        rows = await self.store.query_many(stmt, operation="get_leaderboard")
        return [LeaderboardEntry.model_validate(_row_dict(row)) for row in rows]

    async def get_ranked_player_stats(self, steam_id: SteamID) -> Optional[PlayerStats]:
        ranked = RankedMedicStatsORM
        stmt = select(
            ranked.steam_id,
            ranked.name,
            ranked.games,
            ranked.ubers,
            ranked.drops,
            ranked.medic_time,
            ranked.drops_rank,
            ranked.dpu_rank,
            ranked.dps_rank,
            ranked.dpg_rank,
        ).where(ranked.steam_id == steam_id.steam3())
        row = await self.store.query_one(stmt, operation="get_ranked_player_stats")
        if row is None:
            return None
        return PlayerStats.model_validate(_row_dict(row))

    async def compute_player_stats(self, steam_id: SteamID) -> Optional[PlayerStats]:
        stats = MedicStatsORM
        other = aliased(MedicStatsORM, name="m2")

        def rank_of(label: str, metric: str) -> Any:
            better = (
                select(func.count())
                .select_from(other)
                .where(
                    getattr(other, metric) > getattr(stats, metric),
                    other.drops > MIN_RANKED_DROPS,
                )
                .correlate(stats)
                .scalar_subquery()
            )
            return (better + 1).label(label)

        stmt = (
            select(
                stats.steam_id,
                UserNameORM.name,
                stats.games,
                stats.ubers,
                stats.drops,
                stats.medic_time,
                *(rank_of(label, metric) for label, metric in RANKED_METRICS.items()),
            )
            .join(UserNameORM, UserNameORM.steam_id == stats.steam_id)
            .where(stats.steam_id == steam_id.steam3())
        )
        row = await self.store.query_one(stmt, operation="compute_player_stats")
        if row is None:
            return None
        return PlayerStats.model_validate(_row_dict(row))

    async def get_user_name(self, steam_id: SteamID) -> Optional[str]:
        stmt = select(UserNameORM.name).where(UserNameORM.steam_id == steam_id.steam3())
        row = await self.store.query_one(stmt, operation="get_user_name")
        if row is None:
            return None
        return _row_dict(row)["name"]

    async def search_names(
        self, query: str, limit: int = SEARCH_LIMIT
    ) -> List[SearchResult]:
        names = MedicNameORM
        distance = names.name.op("<->", return_type=Double)(query)
        stmt = (
            select(
                names.steam_id,
                names.name,
                names.count,
                (1 - distance).label("sim"),
            )
            .where(names.name.regexp_match(query, flags="i"))
            .order_by(names.count.desc())
            .limit(limit)
        )
        rows = await self.store.query_many(stmt, operation="search_names")
        return [SearchResult.model_validate(_row_dict(row)) for row in rows]

    async def get_vanity_mapping(self, url: str) -> Optional[SteamID]:
        stmt = select(VanityURLORM.steam_id).where(VanityURLORM.url == url)
        row = await self.store.query_one(stmt, operation="get_vanity_mapping")
        if row is None:
            return None
        stored = _row_dict(row)["steam_id"]
        try:
            return SteamID.parse(stored)
        except SteamIDError as e:
            raise DatabaseError(
                message=f"Stored SteamID {stored!r} for vanity url is invalid",
                service="StatsRepository",
                operation="get_vanity_mapping",
                context={"url": url},
                original_error=e,
            ) from e

    async def save_vanity_mapping(self, url: str, steam_id: SteamID) -> None:
        # Two requests may resolve the same url concurrently
        stmt = (
            insert(VanityURLORM)
            .values(url=url, steam_id=steam_id.steam3())
            .on_conflict_do_nothing(index_elements=[VanityURLORM.url])
        )
        inserted = await self.store.execute(stmt, operation="save_vanity_mapping")
        logger.info(
            "Vanity url mapping stored",
            url=url,
            steam_id=steam_id.steam3(),
            inserted=inserted,
        )
