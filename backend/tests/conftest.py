"""
Pytest fixtures for test database, client, and seeded events/participants.

Each test gets a freshly created schema. SQLite (aiosqlite) is used by
default; point TEST_DATABASE_URL at a PostgreSQL database to run the suite
against the production dialect.
"""

import os

TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL", "sqlite+aiosqlite:///./test_attendance.db")

# Must be set before the app (and its cached Settings) is imported
os.environ["DATABASE_URL"] = TEST_DATABASE_URL
os.environ["REDIS_ENABLED"] = "false"

from typing import AsyncGenerator, Awaitable, Callable, Optional  # noqa: E402

import pytest_asyncio  # noqa: E402
from httpx import AsyncClient, ASGITransport  # noqa: E402
from sqlalchemy import event as sa_event  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker  # noqa: E402
from sqlalchemy.pool import NullPool  # noqa: E402

from app.main import app  # noqa: E402
from app.db.base import Base  # noqa: E402
from app.db.session import get_db  # noqa: E402
from app.models.event import Event  # noqa: E402
from app.models.participant import Participant  # noqa: E402


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create tables, yield session, then drop tables for isolation."""
    test_engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=NullPool)

    if TEST_DATABASE_URL.startswith("sqlite"):
        # ON DELETE CASCADE needs foreign keys switched on in SQLite
        @sa_event.listens_for(test_engine.sync_engine, "connect")
        def _enable_foreign_keys(dbapi_conn, connection_record):
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await test_engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client that overrides the DB dependency with the test session."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def make_event(db_session: AsyncSession) -> Callable[..., Awaitable[Event]]:
    """Factory: await make_event("Gala", is_active=False)."""

    async def _make(name: str = "Annual Gala", is_active: bool = True) -> Event:
        event = Event(name=name, description=f"{name} test event", is_active=is_active)
        db_session.add(event)
        await db_session.commit()
        await db_session.refresh(event)
        return event

    return _make


@pytest_asyncio.fixture
async def make_participant(db_session: AsyncSession) -> Callable[..., Awaitable[Participant]]:
    """Factory: await make_participant(event, "A100", "Budi Santoso")."""

    async def _make(
        event: Event,
        code: str,
        full_name: Optional[str] = None,
        gender: Optional[str] = None,
    ) -> Participant:
        participant = Participant(
            event_id=event.id,
            participant_code=code,
            full_name=full_name or f"Participant {code}",
            meta={"gender": gender} if gender else {},
        )
        db_session.add(participant)
        await db_session.commit()
        await db_session.refresh(participant)
        return participant

    return _make


@pytest_asyncio.fixture
async def active_event(make_event) -> Event:
    return await make_event("Leadership Summit")


@pytest_asyncio.fixture
async def inactive_event(make_event) -> Event:
    return await make_event("Closed Workshop", is_active=False)


@pytest_asyncio.fixture
async def participant(make_participant, active_event: Event) -> Participant:
    """Participant A100 in the active event."""
    return await make_participant(active_event, "A100", "Budi Santoso")
