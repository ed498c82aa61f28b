"""
Database configuration and session management
"""

import asyncio
from typing import Any, AsyncGenerator

from fastapi import Request
from loguru import logger
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from school_portal.core.config import settings


class Database:
    """
    Owns the async engine and session factory for one process.

    Built at startup and handed to whoever needs sessions; disposed at shutdown.
    """

    def __init__(self, url: str, **engine_options: Any) -> None:
        self.url = url
        self.engine: AsyncEngine = create_async_engine(url, **engine_options)
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    def from_settings(cls) -> "Database":
        options: dict[str, Any] = {"echo": settings.DEBUG, "pool_pre_ping": True}
        if not settings.is_sqlite:
            options.update(
                pool_recycle=300,
                pool_size=settings.DB_POOL_SIZE,
                max_overflow=settings.DB_MAX_OVERFLOW,
            )
        return cls(settings.DATABASE_URL, **options)

    def session(self) -> AsyncSession:
        return self.session_factory()

    async def connect(self) -> None:
        """
        Test the connection, logging a hint for the usual failure causes
        """
        try:
            async with self.engine.begin() as conn:
                await conn.execute(text("SELECT 1"))
            logger.info("Database connection established successfully")
        except Exception as e:
            logger.error(f"Failed to connect to database: {e}")

            if "password authentication failed" in str(e):
                logger.error("Password authentication failed - check database credentials")
            elif "connection refused" in str(e).lower():
                logger.error("Connection refused - check database host and port")
            elif "database" in str(e) and "does not exist" in str(e):
                logger.error("Database does not exist - check database name")

            raise

    async def wait_until_ready(self, max_retries: int = 30, retry_delay: float = 2) -> bool:
        """Wait for database to be ready"""
        logger.info("Waiting for database to be ready...")

        for attempt in range(max_retries):
            try:
                await self.connect()
                return True
            except Exception as e:
                logger.warning(f"Database not ready (attempt {attempt + 1}/{max_retries}): {e}")
                if attempt < max_retries - 1:
                    await asyncio.sleep(retry_delay)

        logger.error("Database failed to become ready after maximum retries")
        return False

    async def create_all(self) -> None:
        """Create tables from model metadata (SQLite and local development)."""
        from school_portal.models import Base

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def close(self) -> None:
        """
        Close database connections
        """
        await self.engine.dispose()
        logger.info("Database connections closed")


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency to get a request-scoped database session
    """
    database: Database = request.app.state.database
    session = database.session()
    try:
        yield session
    except Exception:
        await session.rollback()
        raise
    finally:
        await session.close()
