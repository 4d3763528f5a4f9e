"""
Steam API Gateway - Anti-Corruption Layer for vanity url resolution.

Translates the Steam Web API's ResolveVanityURL envelope into our terms:
a SteamID on a match, None when the name is not claimed, and
``ResolverError`` when the service could not answer.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Protocol

import structlog

from dropstats.core.exceptions import ResolverError, SteamIDError
from dropstats.core.steam_api.errors import SteamAPIError
from dropstats.core.steam_id import SteamID

if TYPE_CHECKING:
    from dropstats.core.steam_api.client import SteamAPIClient

logger = structlog.get_logger(__name__)


class VanityResolver(Protocol):
    """Maps a vanity url token to a SteamID."""

    async def resolve(self, name: str) -> Optional[SteamID]:
        """Resolve ``name``; None when no account claimed it."""
        ...


class SteamGateway:
    """
    Anti-Corruption Layer for Steam Web API integration.

    Hides the response envelope and success codes from the stats service.
    """

    def __init__(self, steam_api_client: "SteamAPIClient"):
        """
        Initialize gateway with Steam API client.

        :param steam_api_client: Low-level Steam Web API client
        """
        self._client = steam_api_client

    async def resolve(self, name: str) -> Optional[SteamID]:
        """
        Resolve a vanity url token through the Steam Web API.

        Args:
            name: Vanity url token, e.g. ``"icewind"``

        Returns:
            SteamID on a match, None if the token is not in use

        Raises:
            ResolverError: If the API is unreachable or answered with an error
        """
        try:
            dto = await self._client.resolve_vanity_url(name)
        except SteamAPIError as e:
            logger.warning(
                "Vanity url resolution failed",
                vanity_url=name,
                error_type=type(e).__name__,
                status_code=e.status_code,
            )
            raise ResolverError(
                message=str(e),
                status_code=e.status_code,
                context={"vanity_url": name},
                original_error=e,
            ) from e

        result = dto.response
        if not result.is_match:
            logger.info(
                "Vanity url not found", vanity_url=name, success=result.success
            )
            return None

        try:
            steam_id = SteamID.parse(result.steam_id or "")
        except SteamIDError as e:
            raise ResolverError(
                message=f"Steam API returned an invalid SteamID {result.steam_id!r}",
                context={"vanity_url": name},
                original_error=e,
            ) from e

        logger.info("Vanity url resolved", vanity_url=name, steam_id=steam_id.steam3())
        return steam_id
