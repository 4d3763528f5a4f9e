"""SQLAlchemy 2.0 ORM mappings for the medic stats relations.

The relations are populated by the log importer; this service only reads
them (and writes ``vanity_urls``). ``steam_id`` columns hold the canonical
Steam3 form, e.g. ``[U:1:64229260]``.
"""

from sqlalchemy import BigInteger, Double, String
from sqlalchemy.orm import Mapped, mapped_column

from dropstats.core.models import Base


class GlobalStatsORM(Base):
    """Single-row view with population totals."""

    __tablename__ = "global_stats"

    # Single-row view; the mapper still needs a key
    drops: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    ubers: Mapped[int] = mapped_column(BigInteger, nullable=False)
    games: Mapped[int] = mapped_column(BigInteger, nullable=False)


class MedicStatsORM(Base):
    """Raw per-player medic totals, one row per player with any logged games."""

    __tablename__ = "medic_stats"

    steam_id: Mapped[str] = mapped_column(String(32), primary_key=True)
    games: Mapped[int] = mapped_column(BigInteger, nullable=False)
    ubers: Mapped[int] = mapped_column(BigInteger, nullable=False)
    drops: Mapped[int] = mapped_column(BigInteger, nullable=False)
    medic_time: Mapped[int] = mapped_column(
        BigInteger, nullable=False, comment="Seconds played as medic"
    )
    dps: Mapped[float] = mapped_column(Double, nullable=False, comment="Drops per second")
    dpu: Mapped[float] = mapped_column(Double, nullable=False, comment="Drops per uber")
    dpg: Mapped[float] = mapped_column(Double, nullable=False, comment="Drops per game")


class RankedMedicStatsORM(Base):
    """Materialized view of active players with precomputed ranks."""

    __tablename__ = "ranked_medic_stats"

    steam_id: Mapped[str] = mapped_column(String(32), primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    games: Mapped[int] = mapped_column(BigInteger, nullable=False)
    ubers: Mapped[int] = mapped_column(BigInteger, nullable=False)
    drops: Mapped[int] = mapped_column(BigInteger, nullable=False)
    medic_time: Mapped[int] = mapped_column(BigInteger, nullable=False)
    dps: Mapped[float] = mapped_column(Double, nullable=False)
    dpu: Mapped[float] = mapped_column(Double, nullable=False)
    dpg: Mapped[float] = mapped_column(Double, nullable=False)
    drops_rank: Mapped[int] = mapped_column(BigInteger, nullable=False)
    dpu_rank: Mapped[int] = mapped_column(BigInteger, nullable=False)
    dps_rank: Mapped[int] = mapped_column(BigInteger, nullable=False)
    dpg_rank: Mapped[int] = mapped_column(BigInteger, nullable=False)


class UserNameORM(Base):
    """Current display name per player."""

    __tablename__ = "user_names"

    steam_id: Mapped[str] = mapped_column(String(32), primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=True)


class MedicNameORM(Base):
    """Every name a medic was seen playing under, with how often."""

    __tablename__ = "medic_names"

    steam_id: Mapped[str] = mapped_column(String(32), primary_key=True)
    name: Mapped[str] = mapped_column(String, primary_key=True)
    count: Mapped[int] = mapped_column(BigInteger, nullable=False)


class VanityURLORM(Base):
    """Resolved vanity urls. Entries are never re-resolved."""

    __tablename__ = "vanity_urls"

    url: Mapped[str] = mapped_column(String, primary_key=True)
    steam_id: Mapped[str] = mapped_column(String(32), nullable=False)
