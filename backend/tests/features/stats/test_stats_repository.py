"""
Tests for the SQLAlchemy stats repository.

Reads run against an in-memory SQLite database. Statements that rely on
PostgreSQL operators are checked by compiling them for that dialect.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy import insert
from sqlalchemy.dialects import postgresql

from dropstats.core.exceptions import DatabaseError
from dropstats.core.steam_id import SteamID
from dropstats.features.stats.models import LeaderboardOrder
from dropstats.features.stats.orm_models import (
    GlobalStatsORM,
    MedicStatsORM,
    RankedMedicStatsORM,
    UserNameORM,
    VanityURLORM,
)
from dropstats.features.stats.repository import SQLAlchemyStatsRepository


def medic(steam3, drops, dps=0.0, dpu=0.0, dpg=0.0, games=10, ubers=50, medic_time=3600):
    return {
        "steam_id": steam3,
        "games": games,
        "ubers": ubers,
        "drops": drops,
        "medic_time": medic_time,
        "dps": dps,
        "dpu": dpu,
        "dpg": dpg,
    }


def ranked(steam3, name, drops, dpu=0.0, rank=1):
    row = medic(steam3, drops, dpu=dpu)
    row.update(
        name=name, drops_rank=rank, dpu_rank=rank, dps_rank=rank, dpg_rank=rank
    )
    return row


def compiled(stmt) -> str:
    return str(stmt.compile(dialect=postgresql.dialect()))


@pytest.fixture
def repository(store):
    return SQLAlchemyStatsRepository(store)


class TestGlobalStats:
    async def test_empty_view(self, repository):
        assert await repository.get_global_stats() is None

    async def test_row(self, repository, store):
        await store.execute(insert(GlobalStatsORM).values(drops=7, ubers=30, games=4))

        stats = await repository.get_global_stats()

        assert (stats.drops, stats.ubers, stats.games) == (7, 30, 4)


class TestLeaderboard:
    """Test cases for leaderboard queries."""

    @pytest.fixture(autouse=True)
    async def rows(self, store):
        for row in [
            ranked("[U:1:1]", "one", 300, dpu=0.1),
            ranked("[U:1:2]", "two", 200, dpu=0.5),
            ranked("[U:1:3]", "three", 100, dpu=0.9),
        ]:
            await store.execute(insert(RankedMedicStatsORM).values(**row))

    async def test_sorted_by_metric(self, repository):
        entries = await repository.get_leaderboard(LeaderboardOrder.DPU)

        # 100 drops is not enough to be ranked
        assert [e.name for e in entries] == ["two", "one"]

    async def test_limit(self, repository):
        entries = await repository.get_leaderboard(LeaderboardOrder.DROPS, limit=1)

        assert [e.steam_id for e in entries] == [SteamID.parse("[U:1:1]")]


class TestPlayerStats:
    """Test cases for ranked and computed player stats."""

    @pytest.fixture(autouse=True)
    async def rows(self, store):
        players = [
            medic("[U:1:1]", 500, dps=0.05, dpu=0.2, dpg=2.0),
            medic("[U:1:2]", 300, dps=0.09, dpu=0.2, dpg=1.0),
            medic("[U:1:3]", 150, dps=0.01, dpu=0.1, dpg=5.0),
            # Not ranked: better ratios do not count against anyone
            medic("[U:1:4]", 50, dps=0.5, dpu=0.9, dpg=9.0),
            medic("[U:1:5]", 0, dps=0.0, dpu=0.0, dpg=0.0),
        ]
        for row in players:
            await store.execute(insert(MedicStatsORM).values(**row))
        for steam3, name in [
            ("[U:1:1]", "one"),
            ("[U:1:2]", "two"),
            ("[U:1:3]", "three"),
            ("[U:1:4]", "four"),
            ("[U:1:5]", None),
        ]:
            await store.execute(insert(UserNameORM).values(steam_id=steam3, name=name))
        await store.execute(
            insert(RankedMedicStatsORM).values(**ranked("[U:1:1]", "one", 500, rank=1))
        )

    async def test_ranked_view(self, repository):
        stats = await repository.get_ranked_player_stats(SteamID.parse("[U:1:1]"))

        assert stats.name == "one"
        assert stats.drops_rank == 1

    async def test_ranked_view_miss(self, repository):
        assert await repository.get_ranked_player_stats(SteamID.parse("[U:1:4]")) is None

    async def test_computed_ranks(self, repository):
        stats = await repository.compute_player_stats(SteamID.parse("[U:1:4]"))

        assert stats.name == "four"
        assert stats.drops == 50
        assert stats.drops_rank == 4
        assert stats.dps_rank == 1
        assert stats.dpu_rank == 1
        assert stats.dpg_rank == 1

    async def test_computed_ranks_count_only_strictly_greater(self, repository):
        stats = await repository.compute_player_stats(SteamID.parse("[U:1:2]"))

        assert stats.drops_rank == 2
        assert stats.dps_rank == 1
        # Tied with [U:1:1] on dpu
        assert stats.dpu_rank == 1
        assert stats.dpg_rank == 3

    async def test_player_without_name(self, repository):
        stats = await repository.compute_player_stats(SteamID.parse("[U:1:5]"))

        assert stats.name == ""
        assert stats.drops_rank == 4

    async def test_unknown_player(self, repository):
        assert await repository.compute_player_stats(SteamID.parse("[U:1:99]")) is None

    async def test_user_name(self, repository):
        assert await repository.get_user_name(SteamID.parse("[U:1:3]")) == "three"
        assert await repository.get_user_name(SteamID.parse("[U:1:99]")) is None


class TestSearchNames:
    """Search uses PostgreSQL-only operators."""

    async def test_statement(self):
        store = AsyncMock()
        store.query_many.return_value = []
        repository = SQLAlchemyStatsRepository(store)

        assert await repository.search_names("ice.*", limit=50) == []

        stmt = store.query_many.await_args.args[0]
        sql = compiled(stmt)
        assert "~*" in sql
        assert "<->" in sql
        assert "DESC" in sql
        assert "LIMIT" in sql

    async def test_rows_become_results(self):
        row = MagicMock()
        row._mapping = {"steam_id": "[U:1:1]", "name": "Icewind", "count": 12, "sim": 0.75}
        store = AsyncMock()
        store.query_many.return_value = [row]
        repository = SQLAlchemyStatsRepository(store)

        (result,) = await repository.search_names("ice")

        assert result.steam_id == SteamID.parse("[U:1:1]")
        assert result.weight == pytest.approx(15.75)


class TestVanityMapping:
    """Test cases for stored vanity urls."""

    async def test_lookup(self, repository, store):
        await store.execute(
            insert(VanityURLORM).values(url="icewind", steam_id="[U:1:64229260]")
        )

        assert await repository.get_vanity_mapping("icewind") == SteamID.parse(
            "[U:1:64229260]"
        )
        assert await repository.get_vanity_mapping("nobody") is None

    async def test_corrupt_row(self, repository, store):
        await store.execute(insert(VanityURLORM).values(url="broken", steam_id="garbage"))

        with pytest.raises(DatabaseError):
            await repository.get_vanity_mapping("broken")

    async def test_save_ignores_conflicts(self):
        store = AsyncMock()
        store.execute.return_value = 1
        repository = SQLAlchemyStatsRepository(store)

        await repository.save_vanity_mapping("icewind", SteamID.parse("76561198024494988"))

        stmt = store.execute.await_args.args[0]
        sql = compiled(stmt)
        assert sql.startswith("INSERT INTO vanity_urls")
        assert "ON CONFLICT (url) DO NOTHING" in sql
        assert stmt.compile(dialect=postgresql.dialect()).params["steam_id"] == "[U:1:64229260]"
