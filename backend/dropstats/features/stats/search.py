"""Ranking of fuzzy name search candidates."""

from typing import Iterable, List

from .models import SearchResult


def rank_search_results(candidates: Iterable[SearchResult]) -> List[SearchResult]:
    """Order candidates by weight and keep the best match per player.

    The sort is stable, so candidates with equal weight keep the order the
    store returned them in.

    :param candidates: Name matches, possibly several per player
    :returns: One result per SteamID, highest weight first
    """
    ordered = sorted(candidates, key=lambda result: result.weight, reverse=True)

    seen = set()
    unique: List[SearchResult] = []
    for result in ordered:
        if result.steam_id in seen:
            continue
        seen.add(result.steam_id)
        unique.append(result)
    return unique
