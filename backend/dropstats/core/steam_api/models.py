"""Pydantic models for Steam Web API response data."""

from typing import Optional

from pydantic import BaseModel, Field, ConfigDict

# ResolveVanityURL success codes
VANITY_MATCH = 1
VANITY_NO_MATCH = 42


class VanityURLResult(BaseModel):
    """Inner ``response`` object of ResolveVanityURL.

    Example: ``{"steamid": "76561198024494988", "success": 1}``
    """

    success: int
    steam_id: Optional[str] = Field(None, alias="steamid")
    message: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)

    @property
    def is_match(self) -> bool:
        return self.success == VANITY_MATCH and bool(self.steam_id)


class ResolveVanityURLDTO(BaseModel):
    """ResolveVanityURL response envelope."""

    response: VanityURLResult
