"""Domain models for medic stats.

Rows read from the store are validated into these frozen pydantic models;
the same models are returned by the API.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from dropstats.core.steam_id import SteamID

# Players need more drops than this to be ranked
MIN_RANKED_DROPS = 100
LEADERBOARD_SIZE = 25
SEARCH_LIMIT = 50
# Name similarity counts five times as much as one extra sighting
SIMILARITY_WEIGHT = 5.0


def _ratio(numerator: float, denominator: float) -> float:
    return numerator / denominator if denominator else 0.0


class LeaderboardOrder(str, Enum):
    """Leaderboard orderings; the value is also the ranked view column sorted on."""

    DROPS = "drops"
    DPS = "dps"
    DPG = "dpg"
    DPU = "dpu"

    def __str__(self) -> str:
        return self.value


class GlobalStats(BaseModel):
    """Totals over every logged game."""

    drops: int
    ubers: int
    games: int

    model_config = ConfigDict(from_attributes=True, frozen=True)


class LeaderboardEntry(BaseModel):
    """Medic totals with the ratios shown on leaderboards."""

    steam_id: SteamID
    name: str
    drops: int
    ubers: int
    games: int
    medic_time: int = Field(..., description="Seconds played as medic")

    model_config = ConfigDict(from_attributes=True, frozen=True)

    @field_validator("name", mode="before")
    @classmethod
    def default_missing_name(cls, v: Optional[str]) -> str:
        return v if v is not None else ""

    @computed_field  # type: ignore[prop-decorator]
    @property
    def dpm(self) -> float:
        """Drops per minute of medic time."""
        return _ratio(self.drops, self.medic_time / 60)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def dph(self) -> float:
        """Drops per hour of medic time."""
        return _ratio(self.drops, self.medic_time / 3600)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def dpu(self) -> float:
        return _ratio(self.drops, self.ubers)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def dpg(self) -> float:
        return _ratio(self.drops, self.games)


class ProfileLinks(BaseModel):
    """Profile pages of the player on third-party sites."""

    steam: str
    etf2l: str
    ugc: str
    logs: str
    demos: str
    rgl: str

    @classmethod
    def for_player(cls, steam_id: SteamID) -> "ProfileLinks":
        steam3 = steam_id.steam3()
        steam64 = steam_id.steam64()
        return cls(
            steam=f"https://steamcommunity.com/profiles/{steam3}",
            etf2l=f"http://etf2l.org/search/{steam3[1:-1]}",
            ugc=f"https://www.ugcleague.com/players_page.cfm?player_id={steam64}",
            logs=f"http://logs.tf/profile/{steam64}",
            demos=f"http://demos.tf/profiles/{steam64}",
            rgl=f"https://rgl.gg/Public/PlayerProfile.aspx?p={steam64}",
        )


class PlayerStats(LeaderboardEntry):
    """Medic totals plus 1-based ranks among ranked players."""

    drops_rank: int = Field(..., ge=1)
    dpu_rank: int = Field(..., ge=1)
    dps_rank: int = Field(..., ge=1)
    dpg_rank: int = Field(..., ge=1)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def links(self) -> ProfileLinks:
        return ProfileLinks.for_player(self.steam_id)


class SearchResult(BaseModel):
    """A name match. ``sim`` is trigram similarity in [0, 1]."""

    steam_id: SteamID
    name: str
    count: int
    sim: float

    model_config = ConfigDict(from_attributes=True, frozen=True)

    @property
    def weight(self) -> float:
        return self.sim * SIMILARITY_WEIGHT + self.count


class VanityMapping(BaseModel):
    """A resolved vanity url."""

    url: str
    steam_id: SteamID

    model_config = ConfigDict(from_attributes=True, frozen=True)
