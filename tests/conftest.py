import os
import tempfile
from datetime import timedelta
from typing import AsyncGenerator

# Settings are read at import time; tests never touch a real database
os.environ.setdefault(
    "DATABASE_URL",
    f"sqlite+aiosqlite:///{os.path.join(tempfile.gettempdir(), 'heartsync_app.db')}",
)
os.environ.setdefault("SECRET_KEY", "test-secret-key")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from app.config import settings
from app.database import Base, get_db
from app.main import app
from app.models.season import Season
from app.models.user import utcnow
from app.schemas.season import SeasonCreate
from app.services import season_service, user_service

SEASON_ID = "s1"
PASSWORD = "password123"


@pytest.fixture(autouse=True)
def fast_retries(monkeypatch):
    monkeypatch.setattr(settings, "RECONCILE_BACKOFF_SECONDS", 0.0)


@pytest_asyncio.fixture(scope="function")
async def session_factory(tmp_path) -> AsyncGenerator[async_sessionmaker, None]:
    test_engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        echo=False,
        poolclass=NullPool,
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await test_engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def active_season(db_session: AsyncSession) -> Season:
    now = utcnow()
    return await season_service.start_season(
        db_session,
        SeasonCreate(
            id=SEASON_ID,
            name="Spring",
            start_at=now - timedelta(days=1),
            end_at=now + timedelta(days=30),
        ),
    )


@pytest.fixture
def login_as(client: AsyncClient):
    """Register a handle and return its auth headers."""

    async def _login_as(handle: str, display_name: str | None = None) -> dict:
        await client.post(
            "/api/v1/auth/register",
            json={"handle": handle, "password": PASSWORD, "display_name": display_name},
        )
        response = await client.post(
            "/api/v1/auth/login",
            data={"username": handle, "password": PASSWORD},
        )
        token = response.json()["access_token"]
        return {"Authorization": f"Bearer {token}"}

    return _login_as


@pytest_asyncio.fixture
async def admin_headers(login_as, db_session: AsyncSession) -> dict:
    headers = await login_as("admin", "Admin")
    user = await user_service.get_user_by_handle(db_session, "admin")
    user.is_admin = True
    await db_session.commit()
    return headers


@pytest_asyncio.fixture
async def registered_user(client: AsyncClient) -> dict:
    user_data = {
        "handle": "@Alice",
        "password": "testpassword123",
        "display_name": "Alice",
    }
    response = await client.post("/api/v1/auth/register", json=user_data)
    return {**user_data, "response": response.json()}


@pytest_asyncio.fixture
async def auth_token(client: AsyncClient, registered_user: dict) -> str:
    response = await client.post(
        "/api/v1/auth/login",
        data={
            "username": registered_user["handle"],
            "password": registered_user["password"],
        },
    )
    return response.json()["access_token"]
