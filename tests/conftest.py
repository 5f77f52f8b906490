"""
Activity Tracker — Test Configuration (conftest.py)
=====================================================

What:  Shared pytest fixtures for the entire test suite.
How:   The environment is pointed at a throwaway SQLite file BEFORE any
       activity_tracker import, so the module-level settings and engine are
       built for tests and never touch a real PostgreSQL database.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── database:     tables created before the test, dropped after
    ├── db_session:   an AsyncSession on the test database
    ├── make_store:   builds an ActivityStore signed in as a given user
    ├── test_client:  HTTPX AsyncClient bound to the ASGI app (keeps cookies)
    └── signed_in_client: test_client with account "alice"/"pw1" signed in
"""

import os
import tempfile

# Override settings for testing BEFORE any app imports
_TEST_DB_DIR = tempfile.mkdtemp(prefix="activity_tracker_test_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_DB_DIR}/test.db"
os.environ["SESSION_SECRET"] = "test-session-secret"
os.environ["BCRYPT_ROUNDS"] = "4"  # Fastest legal cost factor
os.environ["LOG_LEVEL"] = "WARNING"  # Reduce noise during tests
os.environ["AUTO_CREATE_SCHEMA"] = "false"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from activity_tracker.context import RequestContext
from activity_tracker.database import Base, async_session_factory, create_schema, engine
from activity_tracker.services.store import ActivityStore


# ══════════════════════════════════════════════════════════════════════════
# Database Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def database():
    """
    Fresh schema for one test.

    The engine's pool is disposed afterwards; pooled aiosqlite connections
    belong to the event loop of the test that opened them.
    """
    await create_schema()
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(database):
    async with async_session_factory() as session:
        yield session


@pytest.fixture
def make_store(db_session):
    """
    Returns a factory: make_store("alice") → ActivityStore acting as alice.

    Usage:
        async def test_add(make_store):
            store = make_store("alice")
            await store.create_account("alice", "pw1")
    """
    def _make(username=None):
        session = {}
        if username is not None:
            session = {"username": username, "signed_in": True}
        return ActivityStore(db_session, RequestContext(session))

    return _make


# ══════════════════════════════════════════════════════════════════════════
# HTTP Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def test_client(database):
    """
    HTTPX AsyncClient talking to the FastAPI app in-process.

    Redirects are not followed, so tests assert on 302 + Location. The
    client's cookie jar carries the signed session between requests.
    """
    from activity_tracker.main import app
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def signed_in_client(test_client):
    """test_client after creating (and thereby signing in) alice / pw1."""
    response = await test_client.post(
        "/users/create-account",
        data={"username": "alice", "password": "pw1"},
    )
    assert response.status_code == 200
    return test_client
