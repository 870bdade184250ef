import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("ENVIRONMENT", "test")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.core.questions import get_question_set
from app.db.base import Base
from app.db.session import get_db
from app.main import app


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def trading_questions():
    return get_question_set("trading-v1")


@pytest.fixture
def trading_answers():
    return {
        "question1_tradingExperience": "Beginner",
        "question3_tradingStyle": ["Day Trading", "Swing Trading"],
        "question4_informationSources": ["Historical data and statistics"],
        "question5_tradingFrequency": "Daily",
    }


@pytest.fixture
async def registered_user(client):
    response = await client.post("/api/auth/register", json={
        "email": "john@example.com",
        "userName": "john_trader",
        "firebaseUid": "firebase-uid-001",
    })
    assert response.status_code == 201
    return response.json()
