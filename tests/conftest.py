import io
import os
from datetime import datetime, timedelta, timezone

# settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret")
os.environ.setdefault("STORAGE_BACKEND", "local")
os.environ.setdefault("PUBLIC_BASE_URL", "http://testserver")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from httpx import ASGITransport, AsyncClient
from PIL import Image
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from app.main import app
from app.core.cert_storage import LocalStorage, get_storage
from app.core.database import Base, get_db
from app.core.dependencies import get_clock
from app.core.security import create_access_token


class StepClock:
    """Deterministic clock: every call is one second after the previous."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        current = self.now
        self.now = self.now + timedelta(seconds=1)
        return current


@pytest.fixture
async def engine(tmp_path):
    eng = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def storage(tmp_path):
    return LocalStorage(tmp_path / "storage")


@pytest.fixture
def clock():
    return StepClock(datetime(2025, 1, 10, 9, 0, tzinfo=timezone.utc))


@pytest.fixture
async def client(session_factory, storage, clock):
    async def _get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_storage] = lambda: storage
    app.dependency_overrides[get_clock] = lambda: clock

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as c:
        yield c

    app.dependency_overrides.clear()


def auth_headers(sub: str = "student-1", name: str = "Alice Example", **claims) -> dict:
    token = create_access_token(sub, name=name, **claims)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def headers():
    return auth_headers()


def event_payload(**overrides) -> dict:
    body = {
        "title": "Intro to Robotics",
        "description": "Hands-on workshop",
        "date": "2025-01-10",
        "startTime": "10:00",
        "endTime": "12:00",
        "venue": "Hall A",
        "organizerId": "org-1",
        "organizerName": "Robotics Club",
        "eventType": "free",
    }
    body.update(overrides)
    return body


def png_bytes(size=(320, 226), color="white") -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, format="PNG")
    return buf.getvalue()
