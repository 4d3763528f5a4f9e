"""Custom error classes for Steam Web API client."""

from typing import Optional, Dict, Any


class SteamAPIError(Exception):
    """Base exception for Steam Web API errors with status code tracking."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response_data: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Initialize SteamAPIError.

        Args:
            message: Error message
            status_code: HTTP status code (400, 403, 429, 503, etc.)
            response_data: Raw response data from API
        """
        super().__init__(message)
        self.status_code: Optional[int] = status_code
        self.response_data: Dict[str, Any] = response_data or {}
        self.message: str = message

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.status_code:
            return f"Steam API Error {self.status_code}: {self.message}"
        return f"Steam API Error: {self.message}"


class AuthenticationError(SteamAPIError):
    """Authentication error (401/403) - invalid or missing API key."""

    pass


class RateLimitError(SteamAPIError):
    """Rate limit error (429)."""

    pass


class ServiceUnavailableError(SteamAPIError):
    """Service unavailable (5xx) - Steam servers down."""

    pass


class InvalidResponseError(SteamAPIError):
    """Response body did not have the expected shape."""

    pass
