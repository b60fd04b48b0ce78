"""
Database Module

Async SQLAlchemy engine and session management.

A single Database object is created at process start (FastAPI lifespan or
ARQ worker startup) and handed to whatever needs sessions. Nothing in the
package opens connections through module-level globals.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import declarative_base

from reserves.core.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)

# Declarative base for all models
Base = declarative_base()


class Database:
    """
    Owns the async engine and the session factory.

    Usage:
        database = Database.from_settings(settings)
        async with database.session() as session:
            ...
        await database.dispose()
    """

    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self.sessionmaker = async_sessionmaker(
            bind=engine,
            class_=AsyncSession,
            autoflush=False,
            expire_on_commit=False,
        )

    @classmethod
    def from_url(
        cls,
        url: str,
        echo: bool = False,
        pool_size: Optional[int] = None,
        max_overflow: Optional[int] = None,
    ) -> "Database":
        engine_kwargs = {"echo": echo, "pool_pre_ping": True}

        # SQLite (tests, local dev) does not take queue pool sizing
        if not url.startswith("sqlite"):
            if pool_size is not None:
                engine_kwargs["pool_size"] = pool_size
            if max_overflow is not None:
                engine_kwargs["max_overflow"] = max_overflow

        return cls(create_async_engine(url, **engine_kwargs))

    @classmethod
    def from_settings(cls, config: Settings = default_settings) -> "Database":
        return cls.from_url(
            config.DATABASE_URL,
            echo=config.SQLALCHEMY_ECHO,
            pool_size=config.DB_POOL_SIZE,
            max_overflow=config.DB_MAX_OVERFLOW,
        )

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Open a session and always close it."""
        session = self.sessionmaker()
        try:
            yield session
        finally:
            await session.close()

    async def create_all(self) -> None:
        """Create every table known to Base.metadata (tests, local dev)."""
        # Make sure all models are registered on the metadata
        import reserves.models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def check_connection(self) -> bool:
        """Run a trivial query to verify the database is reachable."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error(f"Database health check failed: {e}")
            return False

    async def dispose(self) -> None:
        await self.engine.dispose()
        logger.info("Database engine disposed")


# ============================================================
# FastAPI dependencies
# ============================================================

def get_database(request: Request) -> Database:
    """Return the Database created during application startup."""
    return request.app.state.database


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    """
    Dependency that yields a session for one request.

    Usage in FastAPI endpoints:
        @router.get("/")
        async def my_endpoint(db: AsyncSession = Depends(get_db)):
            ...
    """
    database: Database = request.app.state.database
    async with database.session() as session:
        yield session
