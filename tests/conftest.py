"""Shared test constants, fixtures, and factory functions."""

from collections.abc import AsyncIterator
from typing import Any
from unittest.mock import AsyncMock

import fakeredis
import pytest
from httpx import ASGITransport, AsyncClient
from redis.exceptions import ConnectionError as RedisConnectionError

from blog_posts_api.adapter import PostAdapter
from blog_posts_api.main import create_app
from blog_posts_api.post_store import Document, MemoryPostStore, PostStore, RedisPostStore

# -- Constants --

REDIS_URL = "redis://localhost:6379/0"
KEY_PREFIX = "test-blog"
SEED_COUNT = 10
MISSING_ID = "0" * 32
RENDERED_KEYS = {"author", "title", "content", "created", "id"}
STORE_FAILURE_DETAIL = "Error 111 connecting to 10.0.0.5:6379. Connection refused."

ADA_PAYLOAD: dict[str, Any] = {
    "author": {"firstName": "Ada", "lastName": "Lovelace"},
    "title": "T",
    "content": "C",
}

UPDATE_PAYLOAD: dict[str, Any] = {
    "title": "Hello there",
    "content": "Hello there, I want to be updated",
}

STORE_METHODS = ("insert_one", "find", "find_by_id", "update_by_id", "delete_by_id")


# -- Factories --


def make_post_payload(index: int = 0, **overrides: Any) -> dict[str, Any]:
    """Create a valid create-post body. Override any top-level field."""
    payload: dict[str, Any] = {
        "author": {"firstName": f"First{index}", "lastName": f"Last{index}"},
        "title": f"Post number {index}",
        "content": f"Body of post {index}.",
    }
    return payload | overrides


async def seed_posts(store: PostStore, count: int = SEED_COUNT) -> list[Document]:
    """Insert *count* posts directly into the store, bypassing the API."""
    return [await store.insert_one(make_post_payload(i)) for i in range(count)]


def make_fake_redis() -> fakeredis.FakeAsyncRedis:
    """Isolated fake Redis client (own server) per call."""
    return fakeredis.FakeAsyncRedis(server=fakeredis.FakeServer())


def make_broken_store(exc: BaseException | None = None) -> AsyncMock:
    """A store whose every data operation fails as if Redis were unreachable."""
    store = AsyncMock(spec=MemoryPostStore)
    for name in STORE_METHODS:
        getattr(store, name).side_effect = exc or RedisConnectionError(STORE_FAILURE_DETAIL)
    return store


def make_client(store: PostStore, raise_app_exceptions: bool = True) -> AsyncClient:
    """AsyncClient wired to a fresh app instance backed by *store*."""
    transport = ASGITransport(app=create_app(store), raise_app_exceptions=raise_app_exceptions)
    return AsyncClient(transport=transport, base_url="http://test")


# -- Fixtures --


@pytest.fixture(params=["memory", "redis"])
async def store(request: pytest.FixtureRequest) -> AsyncIterator[PostStore]:
    """Each store backend in turn; emptied and closed after the test."""
    backend: PostStore
    if request.param == "redis":
        backend = RedisPostStore(make_fake_redis(), key_prefix=KEY_PREFIX)
    else:
        backend = MemoryPostStore()
    yield backend
    await backend.drop_all()
    await backend.aclose()


@pytest.fixture
def adapter(store: PostStore) -> PostAdapter:
    return PostAdapter(store)


@pytest.fixture
async def seeded(store: PostStore) -> list[Document]:
    """Ten posts already in the store."""
    return await seed_posts(store)


@pytest.fixture
async def client(store: PostStore) -> AsyncIterator[AsyncClient]:
    """AsyncClient wired to the FastAPI app backed by the parametrized store."""
    async with make_client(store) as c:
        yield c


@pytest.fixture
def env_vars(monkeypatch: pytest.MonkeyPatch) -> None:
    """Clear service env vars so Settings falls back to defaults."""
    for name in ("HOST", "PORT", "LOG_LEVEL", "STORE_BACKEND", "REDIS_URL", "REDIS_KEY_PREFIX"):
        monkeypatch.delenv(name, raising=False)
