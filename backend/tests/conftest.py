"""Shared test fixtures for backend tests."""

from __future__ import annotations

import os

os.environ.setdefault("SECRET_KEY", "test-secret-key-with-enough-length-for-hs256")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SEED_DEFAULT_DATA", "false")

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from school_portal.api.dependencies import get_current_user, get_image_storage
from school_portal.core import security
from school_portal.core.database import get_db
from school_portal.core.security import hash_password
from school_portal.domains.news import NewsFacade, NewsImageStorage
from school_portal.main import app as fastapi_app
from school_portal.models import Base, User


SQLITE_TEST_URL = "sqlite+aiosqlite:///:memory:"
ADMIN_PASSWORD = "admin123"


@pytest.fixture(autouse=True)
def fast_password_hashing(monkeypatch: pytest.MonkeyPatch) -> None:
    """Cheapest bcrypt cost; hashes still verify normally."""
    monkeypatch.setattr(security, "BCRYPT_ROUNDS", 4)


@pytest_asyncio.fixture
async def async_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Provide an async engine backed by a fresh in-memory SQLite schema."""
    engine = create_async_engine(
        SQLITE_TEST_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def async_session(async_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    factory = async_sessionmaker(
        async_engine,
        expire_on_commit=False,
        class_=AsyncSession,
    )
    async with factory() as session:
        try:
            yield session
        finally:
            await session.rollback()


@pytest.fixture
def image_storage(tmp_path: Path) -> NewsImageStorage:
    """Image storage rooted in the test's temporary directory."""
    return NewsImageStorage(
        root=tmp_path / "uploads" / "news",
        staging=tmp_path / "uploads" / "tmp",
        url_prefix="/api/v1/news/images",
        max_bytes=1024,
    )


@pytest_asyncio.fixture
async def news_facade(
    async_session: AsyncSession,
    image_storage: NewsImageStorage,
) -> AsyncGenerator[NewsFacade, None]:
    """Shortcut fixture to interact with the news domain facade."""
    yield NewsFacade(async_session, image_storage)


@pytest_asyncio.fixture
async def admin_user(async_session: AsyncSession) -> User:
    user = User(
        username="admin",
        email="admin@sekolah.com",
        password_hash=hash_password(ADMIN_PASSWORD),
        role="admin",
        is_active=True,
    )
    async_session.add(user)
    await async_session.commit()
    await async_session.refresh(user)
    return user


@pytest_asyncio.fixture
async def test_app(
    async_session: AsyncSession,
    image_storage: NewsImageStorage,
) -> AsyncGenerator[FastAPI, None]:
    """Provide FastAPI app with dependency overrides bound to test session."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield async_session

    fastapi_app.dependency_overrides[get_db] = override_get_db
    fastapi_app.dependency_overrides[get_image_storage] = lambda: image_storage

    yield fastapi_app

    fastapi_app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def anonymous_client(test_app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Client going through real token authentication."""
    async with AsyncClient(transport=ASGITransport(app=test_app), base_url="http://testserver") as client:
        yield client


@pytest_asyncio.fixture
async def async_client(test_app: FastAPI, admin_user: User) -> AsyncGenerator[AsyncClient, None]:
    """HTTPX async client acting as the admin user."""

    async def override_get_current_user() -> User:
        return admin_user

    test_app.dependency_overrides[get_current_user] = override_get_current_user
    async with AsyncClient(transport=ASGITransport(app=test_app), base_url="http://testserver") as client:
        yield client
