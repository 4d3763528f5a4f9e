"""Owner of the async engine and its connection pool.

One ``DatabaseManager`` exists per process. Sessions are short-lived and
checked out per query by ``DatabaseStore``; nothing holds a session across
requests.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import structlog
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from .config import Settings, get_global_settings

logger = structlog.get_logger(__name__)


class DatabaseManager:
    """Creates the engine from settings and hands out sessions."""

    def __init__(self, settings: Optional[Settings] = None):
        settings = settings or get_global_settings()
        self.engine = create_async_engine(
            settings.database_url,
            echo=settings.debug,
            # Connections may sit idle between cache refills
            pool_pre_ping=True,
            pool_recycle=settings.db_pool_recycle_seconds,
        )
        self.async_session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    @asynccontextmanager
    async def get_session(self) -> AsyncIterator[AsyncSession]:
        """Session that is rolled back if the block raises."""
        async with self.async_session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    async def ping(self) -> bool:
        """Whether the database answers a trivial query."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except (SQLAlchemyError, OSError) as e:
            logger.warning(
                "Database is unreachable",
                error_type=type(e).__name__,
                error_message=str(e).splitlines()[0] if str(e) else "",
            )
            return False
        return True

    async def close(self) -> None:
        """Dispose of the pool."""
        await self.engine.dispose()
        logger.info("Database connections closed")
