"""Core infrastructure module.

This module exports core utilities used across features.
Never imports from features - only from external libraries.
"""

from .config import Settings, get_settings, get_global_settings
from .database import DatabaseManager
from .store import DatabaseStore
from .cache import AsyncTTLCache
from .steam_id import SteamID, AccountType, Universe
from .exceptions import (
    ServiceException,
    ValidationError,
    SteamIDError,
    InvalidSteamIDFormat,
    SteamIDOutOfRange,
    NotFoundError,
    PlayerNotFoundError,
    DatabaseError,
    ExternalServiceError,
    ResolverError,
)

__all__ = [
    # Config
    "Settings",
    "get_settings",
    "get_global_settings",
    # Database
    "DatabaseManager",
    "DatabaseStore",
    # Cache
    "AsyncTTLCache",
    # Identity
    "SteamID",
    "AccountType",
    "Universe",
    # Exceptions
    "ServiceException",
    "ValidationError",
    "SteamIDError",
    "InvalidSteamIDFormat",
    "SteamIDOutOfRange",
    "NotFoundError",
    "PlayerNotFoundError",
    "DatabaseError",
    "ExternalServiceError",
    "ResolverError",
]
