"""
Shared fixtures.

Provides an in-memory database and a scripted fake health provider.
"""

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from plore.db.session import enable_sqlite_savepoints
from plore.models.base import Base
from plore.features.workouts import models  # noqa
from tests.helpers import FakeHealthProvider


@pytest.fixture
def provider() -> FakeHealthProvider:
    return FakeHealthProvider()


@pytest_asyncio.fixture
async def db_factory():
    """Session factory bound to a fresh in-memory database."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_savepoints(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest_asyncio.fixture
async def db(db_factory):
    async with db_factory() as session:
        yield session
