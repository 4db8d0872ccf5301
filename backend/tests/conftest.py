import os

# Antes de importar la app: las pruebas no necesitan PostgreSQL
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")

from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

from station_sync.core.config import settings
from station_sync.core.database import Base
from station_sync.dependencies import get_db
from station_sync.main import app
from station_sync.models import device, licensee, room_session, video  # noqa: F401
from station_sync.services import catalog_service

ADMIN_KEY = "test-admin-key"


class FakeClock:
    """Reloj controlable para sustituir utcnow en los servicios."""

    def __init__(self, start: datetime = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'station_sync.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, class_=AsyncSession, autoflush=False, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory, monkeypatch):
    monkeypatch.setattr(settings, "ADMIN_API_KEY", ADMIN_KEY)

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers():
    return {"X-Admin-Key": ADMIN_KEY}


@pytest.fixture
def clock():
    return FakeClock()


@pytest_asyncio.fixture
async def catalog(db):
    return await catalog_service.seed_videos(
        db,
        [
            {"label": "A1V1", "playback_ref": "mux-a1v1", "sort_order": 1},
            {"label": "a1v2", "playback_ref": "mux-a1v2", "sort_order": 2},
            {"label": "B2V1", "playback_ref": "mux-b2v1"},
            {"label": "OLD1", "playback_ref": "mux-old1", "active": False},
        ],
    )
