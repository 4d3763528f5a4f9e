"""
Steam Web API client package.

Only the vanity url resolution endpoint is used: it maps the custom name a
player picked for their community profile to a SteamID.
"""

from .client import SteamAPIClient
from .errors import (
    SteamAPIError,
    AuthenticationError,
    RateLimitError,
    ServiceUnavailableError,
    InvalidResponseError,
)
from .models import ResolveVanityURLDTO, VanityURLResult

__all__ = [
    "SteamAPIClient",
    "SteamAPIError",
    "AuthenticationError",
    "RateLimitError",
    "ServiceUnavailableError",
    "InvalidResponseError",
    "ResolveVanityURLDTO",
    "VanityURLResult",
]
