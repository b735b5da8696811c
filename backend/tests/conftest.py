"""
JobTrail Backend — Test Configuration (conftest.py)
=====================================================

What:  Shared pytest fixtures for the suite.
How:   Every test gets its own SQLite file under tmp_path, so store-level
       tests run real SQL (upserts included) without a server database.

Fixture Hierarchy (all function-scoped):
    settings ─┬─ context ── db ── owner / other_owner
              └─ app ── client
"""

from typing import AsyncGenerator, Dict

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from jobtrail.config import Settings
from jobtrail.context import ServiceContext
from jobtrail.main import create_app


# ══════════════════════════════════════════════════════════════════════════
# Configuration & Store
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def settings(tmp_path) -> Settings:
    """Local-mode settings pointing at a throwaway SQLite file."""
    return Settings(
        _env_file=None,
        storage_mode="local",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'jobtrail-test.db'}",
        log_level="WARNING",
        pin_hash_rounds=4,
        store_connect_attempts=1,
        store_connect_wait=0,
    )


@pytest_asyncio.fixture
async def context(settings) -> AsyncGenerator[ServiceContext, None]:
    ctx = ServiceContext(settings)
    await ctx.start()
    yield ctx
    await ctx.close()


@pytest_asyncio.fixture
async def db(context) -> AsyncGenerator[AsyncSession, None]:
    """A session on the test store; tests commit when they need to."""
    async with context.session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def owner(context, db) -> str:
    issued = await context.auth_service.register(db, "alice", "1234")
    await db.commit()
    return issued.user_id


@pytest_asyncio.fixture
async def other_owner(context, db) -> str:
    issued = await context.auth_service.register(db, "bob", "5678")
    await db.commit()
    return issued.user_id


# ══════════════════════════════════════════════════════════════════════════
# HTTP
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def app(settings):
    """A started application (lifespan entered) on the test store."""
    application = create_app(settings)
    async with application.router.lifespan_context(application):
        yield application


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as test_client:
        yield test_client


async def register_user(client: AsyncClient, username: str, pin: str = "1234") -> Dict[str, str]:
    """Registers through the API and returns Authorization headers."""
    response = await client.post("/api/register", json={"username": username, "pin": pin})
    assert response.status_code == 201, response.text
    return {"Authorization": f"Bearer {response.json()['token']}"}


@pytest_asyncio.fixture
async def auth_headers(client) -> Dict[str, str]:
    return await register_user(client, "alice")


def application_payload(app_id: str = "A1", **overrides) -> Dict:
    """Client-side application record as a device would push it."""
    payload = {
        "id": app_id,
        "company": "Acme",
        "position": "Engineer",
        "status": "applied",
        "appliedDate": "2024-01-01",
        "url": "https://acme.example/jobs/1",
        "notes": None,
        "resumeId": None,
        "createdAt": "2024-01-01T00:00:00.000Z",
        "updatedAt": "2024-01-01T00:00:00.000Z",
        "deletedAt": None,
    }
    payload.update(overrides)
    return payload
