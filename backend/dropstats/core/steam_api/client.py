"""Steam Web API HTTP client with retry and error handling."""

import asyncio
from typing import Optional, Dict, Any

import httpx
import structlog
from pydantic import ValidationError as PydanticValidationError

from .errors import (
    SteamAPIError,
    AuthenticationError,
    RateLimitError,
    ServiceUnavailableError,
    InvalidResponseError,
)
from .models import ResolveVanityURLDTO

logger = structlog.get_logger(__name__)

RESOLVE_VANITY_URL_PATH = "/ISteamUser/ResolveVanityURL/v0001/"


class SteamAPIClient:
    """Steam Web API client."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.steampowered.com",
        timeout: float = 10.0,
        max_retries: int = 2,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize Steam Web API client.

        Args:
            api_key: Steam Web API key
            base_url: API root, overridable for tests
            timeout: Per-request timeout in seconds
            max_retries: Retries on transport errors and 5xx responses
            transport: Optional httpx transport (tests use ``httpx.MockTransport``)
        """
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_retries = max_retries
        self._transport = transport

        # HTTP session
        self.session: Optional[httpx.AsyncClient] = None
        self._session_lock = asyncio.Lock()

    async def __aenter__(self):
        """Async context manager entry."""
        await self.start_session()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object | None,
    ) -> None:
        """Async context manager exit."""
        await self.close()

    async def start_session(self) -> None:
        """Start the httpx session."""
        if self.session is None or self.session.is_closed:
            async with self._session_lock:
                if self.session is None or self.session.is_closed:
                    self.session = httpx.AsyncClient(
                        base_url=self.base_url,
                        headers={"User-Agent": "dropstats/1.0"},
                        timeout=httpx.Timeout(self.timeout),
                        transport=self._transport,
                    )
                    logger.info(
                        "Steam API client session started",
                        base_url=self.base_url,
                        api_key_prefix="[REDACTED]" if self.api_key else "None",
                    )

    async def close(self) -> None:
        """Close the httpx session."""
        if self.session and not self.session.is_closed:
            await self.session.aclose()
            logger.info("Steam API client session closed")

    @staticmethod
    def _raise_for_status(status: int) -> None:
        """Raise specific SteamAPIError subclass for non-retryable errors."""
        if status in (401, 403):
            raise AuthenticationError("Invalid Steam API key", status_code=status)
        if status == 429:
            raise RateLimitError("Rate limit exceeded", status_code=status)
        if 400 <= status < 500:
            raise SteamAPIError(f"Client error {status}", status_code=status)

    async def _make_request(self, path: str, params: Dict[str, Any]) -> Any:
        """
        Make GET request with retry logic.

        Returns:
            Decoded JSON body

        Raises:
            SteamAPIError: For API errors and exhausted retries
        """
        await self.start_session()
        if self.session is None:
            raise SteamAPIError("Session not initialized")

        last_error: Optional[BaseException] = None
        for attempt in range(self.max_retries + 1):
            try:
                response = await self.session.get(path, params=params)
            except httpx.HTTPError as e:
                last_error = e
                logger.warning(
                    "Steam API request failed",
                    path=path,
                    attempt=attempt,
                    error_type=type(e).__name__,
                )
                if attempt < self.max_retries:
                    await asyncio.sleep(0.5 * 2**attempt)
                continue

            if response.status_code >= 500:
                last_error = ServiceUnavailableError(
                    f"Server error {response.status_code}",
                    status_code=response.status_code,
                )
                if attempt < self.max_retries:
                    await asyncio.sleep(0.5 * 2**attempt)
                continue

            self._raise_for_status(response.status_code)
            try:
                return response.json()
            except ValueError as e:
                raise InvalidResponseError(
                    "Response body is not JSON", status_code=response.status_code
                ) from e

        if isinstance(last_error, SteamAPIError):
            raise last_error
        raise SteamAPIError(f"Request failed: {last_error}")

    async def resolve_vanity_url(self, vanity_url: str) -> ResolveVanityURLDTO:
        """Call ISteamUser/ResolveVanityURL for ``vanity_url``."""
        data = await self._make_request(
            RESOLVE_VANITY_URL_PATH,
            {"key": self.api_key, "vanityurl": vanity_url},
        )
        try:
            return ResolveVanityURLDTO.model_validate(data)
        except PydanticValidationError as e:
            raise InvalidResponseError(
                "Unexpected ResolveVanityURL response",
                response_data=data if isinstance(data, dict) else None,
            ) from e
