"""Stateless query adapter over the shared connection pool.

Every call checks out its own session, so work started on behalf of one
request (a cache fill shared by many callers) never depends on that
request's lifetime.
"""

from typing import Any, AsyncContextManager, Callable, List, Optional

import structlog
from sqlalchemy.engine import Row
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Executable

from .exceptions import DatabaseError

# The driver raises OSError itself when it cannot open a connection
STORE_ERRORS = (SQLAlchemyError, OSError)

logger = structlog.get_logger(__name__)

SessionProvider = Callable[[], AsyncContextManager[AsyncSession]]


class DatabaseStore:
    """Executes parameterized statements and returns plain rows."""

    def __init__(self, session_provider: SessionProvider):
        """
        Initialize store.

        :param session_provider: Callable returning an async session context
            manager, usually ``DatabaseManager.get_session``
        """
        self._session_provider = session_provider

    async def query_one(self, stmt: Executable, operation: str = "query_one") -> Optional[Row]:
        """Run ``stmt`` and return its first row, or None when it yields nothing.

        :raises DatabaseError: If the store is unreachable or the query fails
        """
        try:
            async with self._session_provider() as session:
                result = await session.execute(stmt)
                return result.first()
        except STORE_ERRORS as e:
            raise self._wrap(e, operation)

    async def query_many(self, stmt: Executable, operation: str = "query_many") -> List[Row]:
        """Run ``stmt`` and return all rows.

        :raises DatabaseError: If the store is unreachable or the query fails
        """
        try:
            async with self._session_provider() as session:
                result = await session.execute(stmt)
                return list(result.all())
        except STORE_ERRORS as e:
            raise self._wrap(e, operation)

    async def execute(self, stmt: Executable, operation: str = "execute") -> int:
        """Run a write statement, commit, and return the affected row count.

        :raises DatabaseError: If the store is unreachable or the statement fails
        """
        try:
            async with self._session_provider() as session:
                result: Any = await session.execute(stmt)
                await session.commit()
                return result.rowcount
        except STORE_ERRORS as e:
            raise self._wrap(e, operation)

    @staticmethod
    def _wrap(error: Exception, operation: str) -> DatabaseError:
        logger.error(
            "Database query failed",
            operation=operation,
            error_type=type(error).__name__,
            error_message=str(error),
        )
        return DatabaseError(
            message=str(error).splitlines()[0] if str(error) else type(error).__name__,
            service="DatabaseStore",
            operation=operation,
            original_error=error,
        )
