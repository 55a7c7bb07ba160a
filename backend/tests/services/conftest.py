"""Service test fixtures — async DB, recording publisher, FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db and get_publisher dependencies overridden for route tests
    - FakePublisher records every publish call; `fail_with` makes it raise

Design Decisions:
    - SQLite in-memory: fast, no external dependency, sufficient for pipeline tests
      (row-level locking of build_counter is PostgreSQL behavior, not exercised here)
    - FakePublisher implements the Publisher protocol directly: no HTTP involved,
      transport behavior is covered by test_pubsub_client.py
"""

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from httpx import ASGITransport, AsyncClient

from buildhub.db.base import Base
from buildhub.infrastructure.database import get_db
from buildhub.infrastructure.pubsub_client import get_publisher
from buildhub.main import app
from buildhub.models.repository import Repository
from buildhub.services.build_service import BuildService
from buildhub.services.build_store import BuildStore
from buildhub.services.notification_dispatcher import NotificationDispatcher


class FakePublisher:
    """Publisher double: records events, optionally fails."""

    def __init__(self):
        self.events: list[dict] = []
        self.fail_with: Exception | None = None

    async def publish(self, channel: str, event: str, payload: dict) -> None:
        if self.fail_with is not None:
            raise self.fail_with
        self.events.append({"channel": channel, "event": event, "payload": payload})

    @property
    def names(self) -> list[str]:
        return [e["event"] for e in self.events]


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
def publisher():
    return FakePublisher()


@pytest.fixture
def service(test_db, publisher):
    dispatcher = NotificationDispatcher(publisher, deadline_seconds=1.0)
    return BuildService(BuildStore(test_db), dispatcher)


@pytest.fixture
async def repository(test_db):
    """A repository with no builds yet."""
    repository = Repository(
        url="https://github.com/svenfuchs/minimal",
        name="svenfuchs/minimal",
        build_counter=0,
    )
    test_db.add(repository)
    await test_db.commit()
    await test_db.refresh(repository)
    return repository


@pytest.fixture
async def client(test_session_factory, publisher):
    """FastAPI test client with DB and publisher dependencies overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_publisher] = lambda: publisher

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
