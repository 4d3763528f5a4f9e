"""JSON routes for medic stats.

Service exceptions are translated to responses by the handlers registered
in ``dropstats.main``.
"""

from typing import List

from fastapi import APIRouter, HTTPException, Query, status

from .dependencies import StatsServiceDep
from .models import (
    GlobalStats,
    LeaderboardEntry,
    LeaderboardOrder,
    PlayerStats,
    SearchResult,
    VanityMapping,
)

router = APIRouter(tags=["stats"])


@router.get("/stats", response_model=GlobalStats)
async def get_global_stats(service: StatsServiceDep) -> GlobalStats:
    """Totals over every logged game"""
    return await service.global_stats()


@router.get("/top/{order}", response_model=List[LeaderboardEntry])
async def get_leaderboard(
    order: LeaderboardOrder, service: StatsServiceDep
) -> List[LeaderboardEntry]:
    """Top 25 medics by drops, drops per second, per game or per uber"""
    return list(await service.leaderboard(order))


@router.get("/profile/{player}", response_model=PlayerStats)
async def get_player(player: str, service: StatsServiceDep) -> PlayerStats:
    """Stats and ranks for a SteamID in any notation or a vanity url"""
    return await service.lookup_player(player)


@router.get("/search", response_model=List[SearchResult])
async def search_players(
    service: StatsServiceDep,
    search: str = Query(..., min_length=1, max_length=64),
) -> List[SearchResult]:
    """Players whose name matches the search text"""
    return await service.search(search)


@router.get("/vanity/{token}", response_model=VanityMapping)
async def resolve_vanity(token: str, service: StatsServiceDep) -> VanityMapping:
    """SteamID behind a vanity url"""
    steam_id = await service.resolve_vanity(token)
    if steam_id is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Vanity url not found"
        )
    return VanityMapping(url=token, steam_id=steam_id)
