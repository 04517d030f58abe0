"""Shared test fixtures.

Tests run against an in-memory SQLite database. StaticPool keeps the single
connection alive for the whole test so every session sees the same tables.
"""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from futsal.core.auth import create_access_token
from futsal.core.dependencies import CurrentUser
from futsal.models import Base, Court


@pytest.fixture
async def db_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def court(session_factory):
    async with session_factory() as session:
        court = Court(name="Court 1", court_number=1, location="Temerloh, Pahang")
        session.add(court)
        await session.commit()
    return court


@pytest.fixture
def player():
    return CurrentUser(id="user-aiman", email="aiman@example.com", display_name="Aiman")


@pytest.fixture
def other_player():
    return CurrentUser(id="user-sarah", email="sarah@example.com", display_name="Sarah Lee")


@pytest.fixture
def admin():
    return CurrentUser(id="admin-1", email="admin@onetouch.my", role="court_admin")


@pytest.fixture
def auth_headers():
    """Build bearer headers the way the identity provider would sign them."""

    def _headers(user: CurrentUser) -> dict:
        token = create_access_token(user.id, extra={"email": user.email, "name": user.display_name, "role": user.role})
        return {"Authorization": f"Bearer {token}"}

    return _headers
