"""Pytest configuration for all tests."""

from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from todoapi.core.config import SeedUser, Settings
from todoapi.infrastructure.api.app import create_app
from todoapi.infrastructure.auth import StaticCredentialStore, TokenCodec, TokenService
from todoapi.infrastructure.persistence.database import Base, get_db_session
from todoapi.infrastructure.persistence.models import TodoModel  # noqa: F401

TEST_SECRET = "test-secret-key-that-is-at-least-32-bytes-long"


class FakeClock:
    """Settable clock; time only moves when a test moves it."""

    def __init__(self, start: datetime | None = None) -> None:
        self.current = start or datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs: float) -> None:
        self.current += timedelta(**kwargs)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def seed_users() -> list[SeedUser]:
    """alice and kokabmedia can log in; bob is disabled."""
    return [
        SeedUser(id=1, username="alice", password="secret", roles=["ROLE_USER_2"]),
        SeedUser(id=2, username="bob", password="hunter2", enabled=False),
        SeedUser(id=3, username="kokabmedia", password="dummy", roles=["ROLE_USER_2"]),
    ]


@pytest.fixture
def settings(seed_users: list[SeedUser]) -> Settings:
    return Settings(
        environment="testing",
        secret_key=TEST_SECRET,
        users=seed_users,
        log_format="console",
    )


@pytest.fixture
def store(seed_users: list[SeedUser]) -> StaticCredentialStore:
    return StaticCredentialStore.from_seed(seed_users)


@pytest.fixture
def codec(clock: FakeClock) -> TokenCodec:
    return TokenCodec(TEST_SECRET, clock=clock)


@pytest.fixture
def token_service(codec: TokenCodec, store: StaticCredentialStore) -> TokenService:
    return TokenService(codec, store)


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session.

    Uses an in-memory SQLite database for testing.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session_maker = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session_maker() as session:
        yield session
        await session.rollback()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def app(settings: Settings, store: StaticCredentialStore, clock: FakeClock) -> FastAPI:
    return create_app(settings=settings, store=store, clock=clock)


@pytest_asyncio.fixture
async def client(app: FastAPI, db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client with overridden database dependency."""
    app.dependency_overrides[get_db_session] = lambda: db_session

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides = {}


@pytest_asyncio.fixture
async def alice_token(client: AsyncClient) -> str:
    """Log alice in through the token endpoint."""
    response = await client.post(
        "/authenticate", json={"username": "alice", "password": "secret"}
    )
    assert response.status_code == 200
    return response.json()["token"]


@pytest.fixture
def alice_headers(alice_token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {alice_token}"}
