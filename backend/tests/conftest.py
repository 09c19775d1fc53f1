"""Shared fixtures: in-memory SQLite database, ASGI client, principals."""

import os

# Settings are read at import time, so the environment goes first
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["SECRET_KEY"] = "test-secret-key-0123456789-abcdefghijklmnop"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["DEBUG"] = "true"

import itertools
from dataclasses import dataclass

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from discuss_board.database import get_db
from discuss_board.main import app
from discuss_board.models import Base

API = "/api/v1"
PASSWORD = "correct-horse-battery"
CONSENTS = [
    {"policy_type": "privacy_policy", "policy_version": "1.0"},
    {"policy_type": "terms_of_service", "policy_version": "1.0"},
]

_counter = itertools.count(1)


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest.fixture
async def session_factory():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
async def client(session_factory):
    async def _get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = _get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@dataclass
class Actor:
    account_id: str
    member_id: str | None
    email: str
    headers: dict
    refresh: str


def _actor(body: dict, email: str) -> Actor:
    return Actor(
        account_id=body["account_id"],
        member_id=body["member"]["id"] if body["member"] else None,
        email=email,
        headers={"Authorization": f"Bearer {body['token']['access']}"},
        refresh=body["token"]["refresh"],
    )


async def join_member(client: AsyncClient, name: str | None = None) -> Actor:
    n = next(_counter)
    name = name or f"member{n}"
    email = f"{name}.{n}@example.com"
    resp = await client.post(f"{API}/auth/member/join", json={
        "email": email,
        "password": PASSWORD,
        "display_name": name,
        "consents": CONSENTS,
    })
    assert resp.status_code == 201, resp.text
    return _actor(resp.json(), email)


async def login(client: AsyncClient, role: str, email: str) -> Actor:
    resp = await client.post(f"{API}/auth/{role}/login", json={"email": email, "password": PASSWORD})
    assert resp.status_code == 200, resp.text
    return _actor(resp.json(), email)


@pytest.fixture
async def member(client) -> Actor:
    return await join_member(client, "alice")


@pytest.fixture
async def other_member(client) -> Actor:
    return await join_member(client, "bob")


@pytest.fixture
async def admin(client) -> Actor:
    email = "root@example.com"
    resp = await client.post(f"{API}/auth/administrator/join", json={
        "email": email,
        "password": PASSWORD,
        "display_name": "root",
    })
    assert resp.status_code == 201, resp.text
    return _actor(resp.json(), email)


@pytest.fixture
async def moderator(client, admin) -> Actor:
    candidate = await join_member(client, "mod")
    resp = await client.put(
        f"{API}/admin/accounts/{candidate.account_id}/moderator",
        json={"account_id": candidate.account_id},
        headers=admin.headers,
    )
    assert resp.status_code == 200, resp.text
    return await login(client, "moderator", candidate.email)


async def create_post(client: AsyncClient, author: Actor, **fields) -> dict:
    payload = {"title": "Hello", "body": "First post"} | fields
    resp = await client.post(f"{API}/posts", json=payload, headers=author.headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


async def create_comment(client: AsyncClient, author: Actor, post_id: str, body: str = "Nice") -> dict:
    resp = await client.post(
        f"{API}/posts/{post_id}/comments", json={"body": body}, headers=author.headers
    )
    assert resp.status_code == 201, resp.text
    return resp.json()
