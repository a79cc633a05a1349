"""Shared test configuration and fixtures.

Uses a transactional rollback strategy per test for full isolation:
- Each test gets its own transaction that rolls back after the test.
- The database comes from ``TEST_DATABASE_URL`` and defaults to an
  in-memory SQLite database (aiosqlite), so no server is needed.
"""

import os
import uuid
from collections.abc import AsyncGenerator
from datetime import date, datetime
from decimal import Decimal

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from campsearch.database import Base, get_db
from campsearch.main import app
from campsearch.models import Amenity, Booking, Property, Site, User

_test_db_url = os.environ.get("TEST_DATABASE_URL", "sqlite+aiosqlite:///:memory:")


def _make_engine():
    if _test_db_url.startswith("sqlite"):
        # One shared connection so every session sees the same in-memory database.
        return create_async_engine(_test_db_url, poolclass=StaticPool, connect_args={"check_same_thread": False})
    return create_async_engine(_test_db_url, pool_pre_ping=True)


# ---------------------------------------------------------------------------
# Engine + schema per test
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def test_engine():
    """Create the engine and all tables, drop them afterwards."""
    engine = _make_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Yield an async session wrapped in a transaction that always rolls back."""
    async with test_engine.connect() as connection:
        transaction = await connection.begin()
        session = AsyncSession(bind=connection, expire_on_commit=False)

        try:
            yield session
        finally:
            await session.close()
            await transaction.rollback()


@pytest_asyncio.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Provide an httpx AsyncClient wired to use the test DB session."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------


class Factory:
    """Builds rows directly in the test session with sensible defaults."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def user(self, **overrides) -> User:
        unique = uuid.uuid4().hex[:8]
        data = {
            "email": f"user-{unique}@test.com",
            "hashed_password": "not-a-real-hash",
            "name": f"Host {unique}",
            "avatar_url": f"https://cdn.test/{unique}.png",
            "role": "host",
        }
        data.update(overrides)
        user = User(**data)
        self.session.add(user)
        await self.session.flush()
        return user

    async def property(self, host: User | None = None, **overrides) -> Property:
        if host is None:
            host = await self.user()
        unique = uuid.uuid4().hex[:8]
        data = {
            "host_id": host.id,
            "name": f"Camp {unique}",
            "slug": f"camp-{unique}",
            "property_type": "campground",
            "city": "Da Lat",
            "state": "Lam Dong",
            "country": "Vietnam",
            "latitude": 11.94,
            "longitude": 108.45,
            "is_active": True,
            "created_at": datetime(2024, 1, 1),
        }
        data.update(overrides)
        prop = Property(**data)
        self.session.add(prop)
        await self.session.flush()
        return prop

    async def site(self, prop: Property, amenities: list[Amenity] | None = None, **overrides) -> Site:
        data = {
            "property_id": prop.id,
            "name": f"Site {uuid.uuid4().hex[:6]}",
            "accommodation_type": "tent",
            "max_guests": 4,
            "max_pets": 0,
            "minimum_nights": 1,
            "base_price": Decimal("100.00"),
            "is_active": True,
        }
        data.update(overrides)
        site = Site(**data)
        site.amenities = list(amenities or [])
        self.session.add(site)
        await self.session.flush()
        return site

    async def amenity(self, name: str | None = None) -> Amenity:
        amenity = Amenity(name=name or f"amenity-{uuid.uuid4().hex[:6]}")
        self.session.add(amenity)
        await self.session.flush()
        return amenity

    async def booking(
        self,
        site: Site,
        check_in: date,
        check_out: date,
        status: str = "confirmed",
        guest: User | None = None,
    ) -> Booking:
        if guest is None:
            guest = await self.user(role="guest")
        booking = Booking(
            site_id=site.id,
            guest_id=guest.id,
            check_in=check_in,
            check_out=check_out,
            status=status,
        )
        self.session.add(booking)
        await self.session.flush()
        return booking


@pytest_asyncio.fixture
async def factory(db_session: AsyncSession) -> Factory:
    return Factory(db_session)
