"""
DocTrack Backend — Database Handle
====================================

What:  The data-access handle: async SQLAlchemy engine, session factory,
       reconnect policy, and the FastAPI dependencies that hand sessions
       to route handlers.
How:   `Database` owns one engine. `connect()` keeps trying to reach the
       server on a fixed interval until it answers. Route handlers never
       see the engine; they receive a session from `get_db_session`, which
       looks the handle up on `request.app.state`.
Who:   Created by the application factory (main.create_app); used by the
       student routes and the health check.
When:  Engine created with the app; first connection attempted at startup
       in a background task; one session per request.

Connection Policy:
    - Startup: retry every DB_CONNECT_RETRY_INTERVAL seconds (default 5),
      forever, logging each failure. The HTTP server is already serving.
    - Requests arriving before the first successful connect make a single
      lazy attempt and fail with DatabaseError (500) if it does not succeed.
    - After that, pool_pre_ping re-establishes dropped connections.
"""

import asyncio
import logging
from typing import Any, AsyncGenerator, Dict

from fastapi import Depends, Request
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    wait_fixed,
)

from app.exceptions import DatabaseError

logger = logging.getLogger(__name__)

# Errors that mean "the server is not reachable yet"
CONNECT_ERRORS = (OSError, SQLAlchemyError, asyncio.TimeoutError)


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares a single metadata object with Alembic for migrations.
    """
    pass


class Database:
    """
    Explicit data-access handle with its own reconnect policy.

    Attributes:
        engine:           Async engine (lazy; no connection until first use)
        session_factory:  Produces AsyncSession objects bound to the engine
        connected:        True once a ping has succeeded
    """

    def __init__(
        self,
        url: str,
        retry_interval: float = 5.0,
        pool_size: int = 5,
        max_overflow: int = 5,
        echo: bool = False,
    ):
        self.url = url
        self.retry_interval = retry_interval
        self.engine: AsyncEngine = create_async_engine(
            url, echo=echo, **self._engine_options(url, pool_size, max_overflow)
        )
        # expire_on_commit=False: rows stay readable after the service commits
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        self.connected = False

    @staticmethod
    def _engine_options(url: str, pool_size: int, max_overflow: int) -> Dict[str, Any]:
        # SQLite (tests, local dev) uses its own pool classes without sizing
        if url.startswith("sqlite"):
            return {}
        return {
            "pool_size": pool_size,
            "max_overflow": max_overflow,
            "pool_pre_ping": True,
            "pool_recycle": 3600,
        }

    async def _ping(self) -> None:
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    async def connect(self) -> None:
        """
        Block until the database answers, retrying on a fixed interval.

        Never gives up; cancel the awaiting task to stop it (done on shutdown).
        """
        async for attempt in AsyncRetrying(
            retry=retry_if_exception_type(CONNECT_ERRORS),
            wait=wait_fixed(self.retry_interval),
            before_sleep=before_sleep_log(logger, logging.ERROR),
            reraise=True,
        ):
            with attempt:
                await self._ping()
        self.connected = True
        logger.info("Connected to database at %s", self.engine.url.render_as_string())

    async def ensure_connected(self) -> None:
        """
        Lazy single connection attempt for requests that arrive early.

        Raises:
            DatabaseError: the database is still unreachable
        """
        if self.connected:
            return
        try:
            await self._ping()
        except CONNECT_ERRORS as e:
            raise DatabaseError(
                context={"reason": "database not connected", "error": str(e)},
            ) from e
        self.connected = True
        logger.info("Connected to database on first request")

    async def ping(self) -> bool:
        """Health-check probe; never raises."""
        try:
            await self._ping()
        except CONNECT_ERRORS as e:
            logger.warning("Database ping failed: %s", str(e))
            return False
        return True

    async def create_all(self) -> None:
        """Create every table from the ORM metadata (local dev and tests)."""
        import app.models  # noqa: F401  registers the tables on Base.metadata

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        """Close all pooled connections (application shutdown)."""
        await self.engine.dispose()
        self.connected = False


# ── Dependencies ──────────────────────────────────────────────────────────
def get_database(request: Request) -> Database:
    """FastAPI dependency returning the handle created by the app factory."""
    return request.app.state.database


async def get_db_session(
    database: Database = Depends(get_database),
) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Makes sure the handle has reached the database at least once
        2. Yields a session to the route handler
        3. On success: commits anything still pending
        4. On error: rolls back what is pending and re-raises

    The student service commits its primary write itself before sending
    email, so a rollback here never undoes an already reported write.
    """
    await database.ensure_connected()
    async with database.session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
