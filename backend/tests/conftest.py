"""
Blog API - Test Configuration (conftest.py)
===========================================

What:  Shared pytest fixtures for the whole suite.
How:   Unit tests use mock sessions; endpoint tests build a real app
       (create_app) against a throwaway SQLite file per test and talk to
       it through httpx's ASGITransport.

Fixture Hierarchy (all function-scoped):
    ├── mock_db_session:  AsyncMock standing in for AsyncSession
    ├── make_result:      builds fake Result objects for mock_db_session
    ├── db_session:       real AsyncSession on a tmp_path SQLite schema
    ├── settings:         Settings pointing at tmp_path SQLite, fast bcrypt
    ├── app:              create_app(settings) with tables created
    ├── client:           httpx AsyncClient bound to the app
    └── register_user:    helper that registers a user and returns its token
"""

import os
from typing import Any, Dict
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Must happen before any blog_api import reads the environment
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["JWT_SECRET"] = "test-secret-that-is-long-enough-for-hs256-signing"
os.environ["ENVIRONMENT"] = "test"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["BCRYPT_ROUNDS"] = "4"

from blog_api.config import Settings  # noqa: E402
from blog_api.database import Base, build_engine, build_session_factory  # noqa: E402
from blog_api.main import create_app  # noqa: E402
import blog_api.models  # noqa: E402,F401


# ══════════════════════════════════════════════════════════════════════════
# Unit-test fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    A mock async database session.

    Usage:
        mock_db_session.execute.return_value = make_result(user)
        await service.login(mock_db_session, {...})
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


def result_with(value: Any) -> MagicMock:
    """A fake Result whose scalar accessors return `value`."""
    result = MagicMock()
    result.scalar_one_or_none.return_value = value
    result.scalar_one.return_value = value
    result.first.return_value = value
    return result


@pytest.fixture
def make_result():
    return result_with


# ══════════════════════════════════════════════════════════════════════════
# Endpoint fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'blog.db'}",
        jwt_secret="test-secret-that-is-long-enough-for-hs256-signing",
        bcrypt_rounds=4,
        environment="test",
        log_level="WARNING",
    )


@pytest_asyncio.fixture
async def db_session(settings):
    """
    An AsyncSession on an empty schema, for tests that need real SQL
    without the HTTP layer. Nothing is committed.
    """
    engine = build_engine(settings)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    async with build_session_factory(engine)() as session:
        yield session
    await engine.dispose()


@pytest_asyncio.fixture
async def app(settings):
    """A fresh application with an empty schema."""
    application = create_app(settings)
    engine = application.state.context.engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield application
    await application.state.context.dispose()


@pytest_asyncio.fixture
async def client(app):
    """
    HTTPX AsyncClient talking to the app in-process.

    Usage:
        async def test_health(client):
            response = await client.get("/health")
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
def register_user(client):
    """
    Register a user and return {"token", "user", "headers"}.

    Usage:
        alice = await register_user("alice")
        await client.post("/api/posts", json=..., headers=alice["headers"])
    """
    async def _register(name: str = "alice", password: str = "secret123") -> Dict[str, Any]:
        response = await client.post(
            "/api/auth/register",
            json={"name": name, "email": f"{name}@example.com", "password": password},
        )
        assert response.status_code == 201, response.text
        data = response.json()["data"]
        return {
            "token": data["token"],
            "user": data["user"],
            "headers": {"Authorization": f"Bearer {data['token']}"},
        }
    return _register
