"""Test fixtures: a fresh in-memory database per test.

Testing pattern for async SQLAlchemy + FastAPI:

1. Each test gets its own in-memory SQLite engine (aiosqlite + StaticPool,
   so every session shares the one connection) with the schema created.
2. The app's get_db dependency is overridden to yield the test session.
3. Requests go through httpx's ASGITransport: no server, no network.

The real auth pipeline runs in every test: users register and log in
through the API and send real bearer tokens.
"""

import os

# Must be set before taskflow.config is imported.
os.environ.setdefault("TASKFLOW_DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("TASKFLOW_BCRYPT_ROUNDS", "4")
os.environ.setdefault("TASKFLOW_JWT_SECRET", "test-secret-do-not-use-in-production")

import uuid

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from taskflow.db.engine import get_db
from taskflow.db.models import Base, UserRole
from taskflow.main import app
from taskflow.services.auth_service import AuthService

TEST_DB_URL = "sqlite+aiosqlite:///:memory:"
PASSWORD = "password_123"


@pytest_asyncio.fixture()
async def db_engine():
    engine = create_async_engine(TEST_DB_URL, poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest_asyncio.fixture()
async def db_session(db_engine):
    session = AsyncSession(db_engine, expire_on_commit=False)
    try:
        yield session
    finally:
        await session.close()


@pytest_asyncio.fixture()
async def client(db_session):
    """HTTP client with the app's get_db pointed at the test database."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ─── Users and tokens ─────────────────────────────────────


def unique_email(prefix: str = "user") -> str:
    return f"{prefix}-{uuid.uuid4().hex[:8]}@example.com"


async def login_headers(client: AsyncClient, email: str, password: str = PASSWORD) -> dict:
    r = await client.post("/api/auth/login", json={"email": email, "password": password})
    assert r.status_code == 200, r.text
    return {"Authorization": f"Bearer {r.json()['token']}"}


async def register_and_login(client: AsyncClient, email: str, password: str = PASSWORD) -> dict:
    r = await client.post("/api/auth/register", json={"email": email, "password": password})
    assert r.status_code == 201, r.text
    return await login_headers(client, email, password)


@pytest_asyncio.fixture()
async def user_headers(client):
    return await register_and_login(client, unique_email("alice"))


@pytest_asyncio.fixture()
async def other_headers(client):
    return await register_and_login(client, unique_email("bob"))


@pytest_asyncio.fixture()
async def admin_headers(client, db_session):
    """Admins can't self-register; create one directly, then log in via the API."""
    email = unique_email("admin")
    await AuthService(db_session).register(email, PASSWORD, role=UserRole.admin)
    return await login_headers(client, email)
