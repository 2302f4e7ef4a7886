from unittest.mock import AsyncMock

import pytest

from exceptions import UnauthorizedError
from models import Identity
from routers.services.session_service import SessionService
from utils.auth import extract_session_token, get_current_identity


@pytest.fixture
def session_store(monkeypatch):
    """用字典代替Redis会话存储"""
    store = {}

    async def fake_set(token, data, ttl=None):
        store[token] = data

    async def fake_get(token):
        return store.get(token)

    async def fake_delete(token):
        return store.pop(token, None) is not None

    monkeypatch.setattr("routers.services.session_service.set_auth_session", fake_set)
    monkeypatch.setattr("routers.services.session_service.get_auth_session", fake_get)
    monkeypatch.setattr("routers.services.session_service.delete_auth_session", fake_delete)
    return store


@pytest.mark.parametrize(
    "authorization, x_session_token, expected",
    [
        ("Bearer abc", None, "abc"),
        ("bearer  abc ", None, "abc"),
        (None, "xyz", "xyz"),
        ("Bearer abc", "xyz", "abc"),
        ("Basic abc", "xyz", "xyz"),
        ("Bearer ", None, None),
        (None, None, None),
        (None, "  ", None),
    ],
)
def test_extract_session_token(authorization, x_session_token, expected):
    assert extract_session_token(authorization, x_session_token) == expected


@pytest.mark.asyncio
async def test_missing_token_is_unauthorized(session_store):
    with pytest.raises(UnauthorizedError):
        await get_current_identity(authorization=None, x_session_token=None)


@pytest.mark.asyncio
async def test_unknown_token_is_unauthorized(session_store):
    with pytest.raises(UnauthorizedError):
        await get_current_identity(authorization="Bearer nope", x_session_token=None)


@pytest.mark.asyncio
async def test_session_roundtrip(session_store, session_factory, users):
    from storage.models import User

    async with session_factory() as db_session:
        user = await db_session.get(User, users[0].user_id)

    token = await SessionService.open_session(user)
    identity = await get_current_identity(authorization=f"Bearer {token}", x_session_token=None)

    assert identity == Identity(user_id=user.id, email="alice@example.com")

    assert await SessionService.close(token) is True
    with pytest.raises(UnauthorizedError):
        await get_current_identity(authorization=f"Bearer {token}", x_session_token=None)


@pytest.mark.asyncio
async def test_corrupt_session_payload_resolves_to_none(session_store):
    session_store["broken"] = {"user_id": "not-a-number"}
    assert await SessionService.resolve("broken") is None


@pytest.mark.asyncio
async def test_entries_require_session(session_factory, monkeypatch):
    import httpx

    from main import app
    from storage.database import get_session

    monkeypatch.setattr("utils.auth.SessionService.resolve", AsyncMock(return_value=None))

    async def override_get_session():
        async with session_factory() as db_session:
            yield db_session

    app.dependency_overrides[get_session] = override_get_session
    try:
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.post("/entries", json={"content": "<p>x</p>"})
            assert response.status_code == 401
            assert response.json()["error"] == "Unauthorized"

            response = await client.get("/entries", headers={"Authorization": "Bearer expired"})
            assert response.status_code == 401
    finally:
        app.dependency_overrides.clear()


@pytest.mark.asyncio
async def test_dev_session_creates_user_and_token(session_factory, session_store):
    import httpx

    from main import app
    from storage.database import get_session

    async def override_get_session():
        async with session_factory() as db_session:
            yield db_session
            await db_session.commit()

    app.dependency_overrides[get_session] = override_get_session
    try:
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.post("/auth/dev-session", json={"email": "carol@example.com", "name": "carol"})
            assert response.status_code == 200
            token = response.json()["token"]
            assert response.json()["identity"]["email"] == "carol@example.com"

            me = await client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
            assert me.status_code == 200
            assert me.json()["data"]["email"] == "carol@example.com"

            again = await client.post("/auth/dev-session", json={"email": "carol@example.com"})
            assert again.json()["identity"]["user_id"] == me.json()["data"]["user_id"]

            logout = await client.post("/auth/logout", headers={"X-Session-Token": token})
            assert logout.status_code == 200

            me = await client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
            assert me.status_code == 401
    finally:
        app.dependency_overrides.clear()
