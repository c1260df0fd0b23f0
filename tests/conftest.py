"""Shared fixtures for Signal Radar tests."""

import os

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

# Ensure we use test settings
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("ALERT_WEBHOOK_URL", "")

from database.models import Base  # noqa: E402
from signal_scoring.signal_classifier import SignalClassifier, TierScheme  # noqa: E402
from signal_scoring.signal_extractor import SignalExtractor  # noqa: E402


@pytest.fixture
def client():
    """Create a FastAPI test client."""
    from api.main import app
    return TestClient(app)


@pytest.fixture
def classifier():
    return SignalClassifier()


@pytest.fixture
def tier_classifier():
    return SignalClassifier(scheme=TierScheme())


@pytest.fixture
def extractor():
    return SignalExtractor()


@pytest.fixture
async def db_session():
    """In-memory SQLite session with all tables created."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session

    await engine.dispose()
