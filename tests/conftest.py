"""
Shared pytest fixtures.

Provides:
- a fresh in-memory SQLite database per test (aiosqlite, StaticPool)
- an AsyncSession for driving services directly
- an httpx AsyncClient bound to the app with ``get_session`` overridden
- helpers to create users and bearer headers
"""

import os

os.environ.setdefault("ENV", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret")

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

from app.core.base import Base
from app.core.db import get_session
from app.main import app
from app.modules.users.schemas import UserCreate
from app.modules.users.service import UserService

API = "/api/v1"


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


@pytest.fixture
async def session(session_factory):
    async with session_factory() as s:
        yield s


@pytest.fixture
async def client(session_factory):
    async def _get_session():
        async with session_factory() as s:
            yield s

    app.dependency_overrides[get_session] = _get_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(session):
    """Create a user directly through the service layer."""
    async def _make(username: str, password: str = "secret-pw"):
        payload = UserCreate(email=f"{username}@example.com", username=username, password=password)
        return await UserService(session).create(payload)
    return _make


@pytest.fixture
def register(client):
    """Register through the API; returns (user_id, auth headers)."""
    async def _register(username: str, password: str = "secret-pw"):
        resp = await client.post(
            f"{API}/auth/register",
            json={"email": f"{username}@example.com", "username": username, "password": password},
        )
        assert resp.status_code == 201, resp.text
        body = resp.json()
        return body["user"]["id"], {"Authorization": f"Bearer {body['access_token']}"}
    return _register
