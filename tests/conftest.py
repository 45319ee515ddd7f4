"""Test configuration and fixtures."""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.config import settings
from app.database import Base, get_db
from app.main import app as fastapi_app
from tests.helpers import add_images, fake_signed_url, make_image


@pytest.fixture(autouse=True)
def offline_urls(monkeypatch):
    """Run without a CDN and sign URLs locally instead of calling S3."""
    monkeypatch.setattr(settings, "CDN_PROVIDER", "")
    monkeypatch.setattr(settings, "CLOUDFRONT_DOMAIN", "")
    monkeypatch.setattr("app.services.enrichment.generate_signed_url", fake_signed_url)
    monkeypatch.setattr("app.routes.images.generate_signed_url", fake_signed_url)


@pytest.fixture
async def engine():
    """Create an in-memory test database."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(engine.sync_engine, "connect")
    def enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory):
    """HTTP client bound to the app; each request gets a fresh session."""

    async def override_get_db():
        async with session_factory() as session:
            yield session

    fastapi_app.dependency_overrides[get_db] = override_get_db
    transport = ASGITransport(app=fastapi_app)
    async with AsyncClient(transport=transport, base_url="http://test") as http:
        yield http
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
async def five_images(db):
    """Images 1..5 with increasing creation times and no metadata."""
    await add_images(db, *[make_image(i) for i in range(1, 6)])
