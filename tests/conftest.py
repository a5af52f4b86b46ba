"""
Shared fixtures for the StackIt API tests
=========================================

The app runs against a throwaway SQLite file through aiosqlite. The
environment is configured before ``stackit`` is imported because the
settings object and the engine are built at import time.
"""

import os
import tempfile

_TMP_DIR = tempfile.mkdtemp(prefix="stackit-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TMP_DIR}/stackit.db"
os.environ["SECRET"] = "stackit-test-secret-0123456789abcdef"
os.environ["RUN_DB_CREATE_ALL"] = "false"

import httpx  # noqa: E402
import pytest  # noqa: E402

from stackit.background import drain  # noqa: E402
from stackit.database import Base, async_session_maker, engine  # noqa: E402
from stackit.main import app  # noqa: E402
from stackit import models  # noqa: E402,F401


@pytest.fixture
async def database():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    # notification fan-out must finish before the tables go away
    await drain()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def client(database):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
async def session(database):
    async with async_session_maker() as s:
        yield s


@pytest.fixture
def register(client):
    """Register a user and return its id, username and auth headers."""

    async def _register(username: str, password: str = "secret123") -> dict:
        resp = await client.post(
            "/api/auth/register",
            json={"username": username, "email": f"{username}@example.com", "password": password},
        )
        assert resp.status_code == 201, resp.text
        body = resp.json()
        return {
            "id": body["user"]["id"],
            "username": username,
            "headers": {"Authorization": f"Bearer {body['token']}"},
        }

    return _register


@pytest.fixture
def ask(client):
    async def _ask(user: dict, title: str = "How do I reverse a list?", description: str = "Plain lists only.",
                   tags=("python",)) -> dict:
        resp = await client.post(
            "/api/questions",
            json={"title": title, "description": description, "tags": list(tags)},
            headers=user["headers"],
        )
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _ask


@pytest.fixture
def answer(client):
    async def _answer(user: dict, question_id: int, content: str = "Use reversed() or slicing.") -> dict:
        resp = await client.post(
            f"/api/answers/{question_id}", json={"content": content}, headers=user["headers"]
        )
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _answer


@pytest.fixture
def comment(client):
    async def _comment(user: dict, answer_body: dict, content: str = "Nice one.") -> dict:
        resp = await client.post(
            "/api/comments",
            json={
                "content": content,
                "answer_id": answer_body["id"],
                "question_id": answer_body["question_id"],
            },
            headers=user["headers"],
        )
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _comment


@pytest.fixture
def inbox(client):
    """Fetch a user's notifications once pending fan-out has landed."""

    async def _inbox(user: dict) -> list:
        await drain()
        resp = await client.get("/api/notifications", headers=user["headers"])
        assert resp.status_code == 200, resp.text
        return resp.json()

    return _inbox
