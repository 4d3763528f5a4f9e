"""Dependencies for the stats feature.

The service, its caches and its clients live for the whole process: they
are built once in the application lifespan and stored on ``app.state``.
"""

from typing import Annotated

from fastapi import Depends, Request

from dropstats.core.config import Settings
from dropstats.core.database import DatabaseManager
from dropstats.core.steam_api.client import SteamAPIClient
from dropstats.core.store import DatabaseStore
from .cache import StatsCacheManager
from .gateway import SteamGateway
from .repository import SQLAlchemyStatsRepository
from .service import StatsService


def build_stats_service(
    settings: Settings,
    db_manager: DatabaseManager,
    steam_client: SteamAPIClient,
) -> StatsService:
    """Wire repository, gateway and caches into a stats service.

    :param settings: Application settings
    :param db_manager: Owner of the connection pool
    :param steam_client: Steam Web API client
    :returns: Stats service with injected dependencies
    """
    repository = SQLAlchemyStatsRepository(DatabaseStore(db_manager.get_session))
    gateway = SteamGateway(steam_client)
    caches = StatsCacheManager.from_settings(settings)
    return StatsService(repository, gateway, caches)


def get_stats_service(request: Request) -> StatsService:
    """Get the process-wide stats service.

    :param request: Incoming request
    :returns: Stats service created at startup
    """
    return request.app.state.stats_service


# Type alias for cleaner dependency injection
StatsServiceDep = Annotated[StatsService, Depends(get_stats_service)]

__all__ = [
    "build_stats_service",
    "get_stats_service",
    "StatsServiceDep",
]
