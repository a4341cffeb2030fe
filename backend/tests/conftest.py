"""
DocTrack Backend — Test Configuration (conftest.py)
=====================================================

What:  Shared pytest fixtures for the test suite.
How:   Integration fixtures run against a throwaway SQLite file (aiosqlite)
       created per test; the SMTP relay is replaced by FakeNotifier.

Fixture Hierarchy (all function-scoped):
    ├── fake_notifier: records emails, returns a configurable SendResult
    ├── database: Database handle over a fresh SQLite file, tables created
    ├── db_session: AsyncSession on that database
    ├── mock_db_session: AsyncMock session for failure injection
    ├── test_app: FastAPI app wired to database + fake_notifier
    └── test_client: HTTPX AsyncClient talking to test_app in-process
"""

import os

# Settings are read at import time: point them at SQLite before any app import
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["EMAIL_USER"] = "registrar@example.edu"
os.environ["LOG_LEVEL"] = "WARNING"

from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from app.config import Settings
from app.database import Database
from app.main import create_app
from app.services.notifier import DeliveryStatus, SendResult


class FakeNotifier:
    """Stands in for the SMTP notifier; keeps every message it was asked to send."""

    def __init__(self):
        self.sent = []
        self.result = SendResult(status=DeliveryStatus.SENT)

    def fail_with(self, status: DeliveryStatus, detail: str = "simulated failure") -> None:
        self.result = SendResult(status=status, detail=detail)

    async def send(self, to: str, subject: str, body: str) -> SendResult:
        self.sent.append({"to": to, "subject": subject, "body": body})
        return self.result


@pytest.fixture
def fake_notifier():
    return FakeNotifier()


@pytest.fixture
def sqlite_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path / 'doctrack_test.db'}"


@pytest_asyncio.fixture
async def database(sqlite_url):
    """A connected Database handle with both tables created."""
    db = Database(sqlite_url, retry_interval=0)
    await db.create_all()
    await db.connect()
    yield db
    await db.dispose()


@pytest_asyncio.fixture
async def db_session(database):
    async with database.session_factory() as session:
        yield session


@pytest.fixture
def mock_db_session():
    """
    Mock async session for injecting database failures.

    Usage:
        mock_db_session.execute.side_effect = OperationalError("SELECT", {}, Exception())
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.delete = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def test_settings(sqlite_url):
    return Settings(database_url=sqlite_url, rate_limit_requests=1000)


@pytest.fixture
def test_app(test_settings, database, fake_notifier):
    return create_app(test_settings, database=database, notifier=fake_notifier)


@pytest_asyncio.fixture
async def test_client(test_app):
    """
    HTTPX AsyncClient routed straight into the app (no server, no lifespan).

    Usage:
        async def test_banner(test_client):
            response = await test_client.get("/")
    """
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
