"""
Shared fixtures: in-memory SQLite, test settings, store/service and an
HTTP client bound to a fresh app.
"""

from __future__ import annotations

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from auth.jwt import TokenService
from auth.password import PasswordHasher
from auth.service import AuthService
from auth.store import CredentialStore
from config.settings import Settings
from database.models import Base
from database.session import get_db_session
from main import create_app

TEST_SECRET = "test-secret-key"
START_TIME = 1_700_000_000.0


class FakeClock:
    """Callable clock that tests can move forward."""

    def __init__(self, now: float = START_TIME) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def settings() -> Settings:
    return Settings(
        environment="test",
        jwt_secret=TEST_SECRET,
        bcrypt_rounds=4,
        database_url="sqlite+aiosqlite:///:memory:",
        _env_file=None,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def token_service(clock) -> TokenService:
    return TokenService(TEST_SECRET, expiry_seconds=86400, clock=clock)


@pytest.fixture
def hasher() -> PasswordHasher:
    return PasswordHasher(rounds=4)


@pytest_asyncio.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker, None]:
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def store(db_session, hasher) -> CredentialStore:
    return CredentialStore(db_session, hasher)


@pytest.fixture
def auth_service(store, token_service) -> AuthService:
    return AuthService(store, token_service)


@pytest.fixture
def app(settings, session_factory, token_service):
    app = create_app(settings, create_schema=False)
    app.state.token_service = token_service

    async def _session_override() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = _session_override
    return app


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
