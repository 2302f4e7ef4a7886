import os

# 必须在导入项目模块之前设置，测试使用内存SQLite且不启动后台补齐任务
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("RATING_BACKFILL_ENABLED", "false")
os.environ.setdefault("POD_ENV", "test")

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

import storage.models  # noqa: F401
from llm.client import LLMClient, get_llm_client
from llm.schemas import MoodAnalysis
from models import Identity
from redis_client import DummyLock
from storage.database import Base, build_engine, get_session
from storage.models import User
from utils import get_current_identity


def make_analysis(**overrides) -> MoodAnalysis:
    values = {
        "overall_mood_score": 78,
        "energy_level": 64,
        "emotional_complexity": 30,
        "dominant_emotions": ["joy", "gratitude", "hope"],
    }
    values.update(overrides)
    return MoodAnalysis(**values)


@pytest_asyncio.fixture
async def engine():
    test_engine = build_engine("sqlite+aiosqlite:///:memory:", poolclass=StaticPool)
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False
    )


@pytest_asyncio.fixture
async def session(session_factory):
    async with session_factory() as db_session:
        yield db_session


@pytest_asyncio.fixture
async def users(session_factory):
    """两个用户：alice是主要测试用户，bob用于越权场景"""
    async with session_factory() as db_session:
        alice = User(email="alice@example.com", name="alice")
        bob = User(email="bob@example.com", name="bob")
        db_session.add_all([alice, bob])
        await db_session.commit()
        return (
            Identity(user_id=alice.id, email=alice.email),
            Identity(user_id=bob.id, email=bob.email),
        )


@pytest.fixture
def alice(users):
    return users[0]


@pytest.fixture
def bob(users):
    return users[1]


@pytest.fixture
def llm_client():
    """不访问网络的LLM客户端，analyze_mood默认返回合法分析结果"""
    client = MagicMock(spec=LLMClient)
    client.analyze_mood = AsyncMock(return_value=make_analysis())
    return client


@pytest.fixture(autouse=True)
def no_redis_locks(monkeypatch):
    """测试中不连接Redis，锁直接降级"""
    acquire = AsyncMock(return_value=DummyLock())
    release = AsyncMock()
    monkeypatch.setattr("routers.services.journal_service.acquire_lock", acquire)
    monkeypatch.setattr("routers.services.journal_service.release_lock", release)
    monkeypatch.setattr("routers.services.rating_backfill_service.acquire_lock", acquire)
    monkeypatch.setattr("routers.services.rating_backfill_service.release_lock", release)
    return acquire


@pytest.fixture
def current_identity(alice):
    """API测试中当前登录的用户，测试可替换其中的identity"""
    return {"identity": alice}


@pytest_asyncio.fixture
async def api_client(session_factory, current_identity, llm_client):
    """以current_identity身份访问的HTTP客户端"""
    from main import app

    async def override_get_session():
        async with session_factory() as db_session:
            try:
                yield db_session
                await db_session.commit()
            except Exception:
                await db_session.rollback()
                raise

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_current_identity] = lambda: current_identity["identity"]
    app.dependency_overrides[get_llm_client] = lambda: llm_client

    transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
