"""
Tests for the stats HTTP routes and error mapping.
"""

from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from dropstats.core.exceptions import (
    DatabaseError,
    InvalidSteamIDFormat,
    PlayerNotFoundError,
    ResolverError,
)
from dropstats.core.steam_id import SteamID
from dropstats.features.stats.dependencies import get_stats_service
from dropstats.features.stats.models import (
    GlobalStats,
    LeaderboardEntry,
    LeaderboardOrder,
    PlayerStats,
    SearchResult,
)
from dropstats.main import app

ICEWIND = SteamID.parse("[U:1:64229260]")


@pytest.fixture
def service():
    return AsyncMock()


@pytest.fixture
def client(service):
    # No lifespan: the service is injected directly
    app.dependency_overrides[get_stats_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()


def icewind_stats() -> PlayerStats:
    return PlayerStats(
        steam_id=ICEWIND,
        name="Icewind",
        drops=120,
        ubers=600,
        games=40,
        medic_time=7200,
        drops_rank=3,
        dpu_rank=10,
        dps_rank=7,
        dpg_rank=5,
    )


class TestStatsRoutes:
    """Test cases for successful responses."""

    def test_global_stats(self, client, service):
        service.global_stats.return_value = GlobalStats(drops=10, ubers=40, games=5)

        response = client.get("/api/v1/stats")

        assert response.status_code == 200
        assert response.json() == {"drops": 10, "ubers": 40, "games": 5}

    def test_leaderboard(self, client, service):
        service.leaderboard.return_value = (
            LeaderboardEntry(
                steam_id=ICEWIND, name="Icewind", drops=120, ubers=600, games=40, medic_time=7200
            ),
        )

        response = client.get("/api/v1/top/dpu")

        assert response.status_code == 200
        body = response.json()
        assert body[0]["steam_id"] == "[U:1:64229260]"
        assert body[0]["dpu"] == pytest.approx(0.2)
        service.leaderboard.assert_awaited_once_with(LeaderboardOrder.DPU)

    def test_leaderboard_unknown_order(self, client, service):
        response = client.get("/api/v1/top/kills")

        assert response.status_code == 422
        service.leaderboard.assert_not_awaited()

    def test_profile(self, client, service):
        service.lookup_player.return_value = icewind_stats()

        response = client.get("/api/v1/profile/icewind")

        assert response.status_code == 200
        body = response.json()
        assert body["drops_rank"] == 3
        assert body["links"]["logs"] == "http://logs.tf/profile/76561198024494988"
        service.lookup_player.assert_awaited_once_with("icewind")

    def test_search(self, client, service):
        service.search.return_value = [
            SearchResult(steam_id=ICEWIND, name="Icewind", count=12, sim=0.8)
        ]

        response = client.get("/api/v1/search", params={"search": "ice"})

        assert response.status_code == 200
        assert response.json()[0]["name"] == "Icewind"

    def test_search_requires_text(self, client, service):
        assert client.get("/api/v1/search").status_code == 422
        assert client.get("/api/v1/search", params={"search": ""}).status_code == 422

    def test_vanity(self, client, service):
        service.resolve_vanity.return_value = ICEWIND

        response = client.get("/api/v1/vanity/icewind")

        assert response.status_code == 200
        assert response.json() == {"url": "icewind", "steam_id": "[U:1:64229260]"}

    def test_vanity_not_found(self, client, service):
        service.resolve_vanity.return_value = None

        response = client.get("/api/v1/vanity/nobody")

        assert response.status_code == 404

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestErrorMapping:
    """Service exceptions map to status codes."""

    def test_invalid_player(self, client, service):
        service.lookup_player.side_effect = InvalidSteamIDFormat(
            "Not a SteamID", value="nobody"
        )

        response = client.get("/api/v1/profile/nobody")

        assert response.status_code == 400
        assert response.json() == {"detail": "Not a SteamID"}

    def test_player_not_found(self, client, service):
        service.lookup_player.side_effect = PlayerNotFoundError("[U:1:1234]")

        response = client.get("/api/v1/profile/newbie")

        assert response.status_code == 404
        assert response.json() == {"detail": "User not found or no drops"}

    @pytest.mark.parametrize(
        "error",
        [
            DatabaseError("connection refused"),
            ResolverError("Steam is down", status_code=503),
        ],
    )
    def test_faults_do_not_leak_details(self, client, service, error):
        service.global_stats.side_effect = error

        response = client.get("/api/v1/stats")

        assert response.status_code == 500
        assert response.json() == {"detail": "Internal server error"}
