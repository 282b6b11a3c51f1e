"""
Shared test fixtures for Conduit tests.

Provides database session management, test clients, and user fixtures.
"""

import os

# Settings are read at import time; keep tests on SQLite with cheap hashing.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET", "test-jwt-secret")
os.environ.setdefault("ARGON2_TIME_COST", "1")
os.environ.setdefault("ARGON2_MEMORY_COST", "1024")
os.environ.setdefault("ARGON2_PARALLELISM", "1")

from collections.abc import AsyncGenerator, Awaitable, Callable
from datetime import datetime

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool, StaticPool

from conduit.auth.jwt import create_access_token
from conduit.config import settings
from conduit.database import Base, get_db, use_explicit_sqlite_transactions
from conduit.main import app

# Import models so they're registered with Base.metadata before table creation
from conduit.models import Article, User
from conduit.services.identity import IdentityStore

TEST_DATABASE_URL = settings.test_database_url
TEST_PASSWORD = "correct-horse-battery"


# --- Database Fixtures ---


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """A fresh database per test; in-memory SQLite shares one connection."""
    poolclass = StaticPool if TEST_DATABASE_URL.startswith("sqlite") else NullPool
    engine = create_async_engine(TEST_DATABASE_URL, poolclass=poolclass, echo=False)
    use_explicit_sqlite_transactions(engine)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Session over the per-test database, configured like the application's."""
    session_factory = async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture(scope="function")
async def async_client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """
    Async HTTP client configured for testing.
    Overrides database dependency with test session.
    """

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(
        transport=transport,
        base_url="http://test",
        follow_redirects=True,
    ) as client:
        yield client

    app.dependency_overrides.clear()


# --- Authentication Helper Fixtures ---


@pytest.fixture
def auth_headers():
    """Factory fixture for creating ``Authorization: Token`` headers."""

    def _auth_headers(token: str) -> dict[str, str]:
        return {"Authorization": f"Token {token}"}

    return _auth_headers


# --- User Fixtures ---


@pytest.fixture
def make_user(db_session: AsyncSession) -> Callable[..., Awaitable[User]]:
    """Factory fixture registering users through the identity store."""

    async def _make_user(username: str, email: str | None = None, password: str = TEST_PASSWORD) -> User:
        return await IdentityStore(db_session).register(
            username, email or f"{username.lower()}@example.com", password
        )

    return _make_user


@pytest_asyncio.fixture
async def jake(make_user) -> User:
    return await make_user("jake", "jake@example.com")


@pytest_asyncio.fixture
async def alice(make_user) -> User:
    return await make_user("alice", "alice@example.com")


@pytest.fixture
def password() -> str:
    """The password every `make_user` account is registered with."""
    return TEST_PASSWORD


@pytest.fixture
def token_for():
    """Issue a session token for a user."""

    def _token_for(user: User) -> str:
        return create_access_token(user.user_id)

    return _token_for


@pytest.fixture
def backdate(db_session: AsyncSession):
    """Pin an article's creation time so listing order is deterministic."""

    async def _backdate(article_id: str, created_at: datetime) -> None:
        await db_session.execute(
            update(Article)
            .where(Article.article_id == article_id)
            .values(created_at=created_at)
            .execution_options(synchronize_session=False)
        )
        await db_session.commit()

    return _backdate
