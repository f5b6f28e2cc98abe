import os
from datetime import date

# Settings are read at import time; point the app at the test database before importing it
TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL", "sqlite+aiosqlite:///./test_greenwork.db")
os.environ["DATABASE_URL"] = TEST_DATABASE_URL
os.environ.setdefault("REQUEST_LOG_ENABLED", "false")

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from app.core.deps import get_today
from app.db.base import Base
from app.db.session import get_db
from app.main import app

# NullPool prevents connections from being cached across event loop boundaries,
# which avoids "Future attached to a different loop" errors in pytest-asyncio.
engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=NullPool)
TestSessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def today() -> date:
    return date.today()


@pytest_asyncio.fixture
async def db():
    # Services commit, so every test starts from freshly created tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    async with TestSessionLocal() as session:
        yield session
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture
async def client(db: AsyncSession, today: date):
    async def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_today] = lambda: today

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()
