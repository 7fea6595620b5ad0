"""Post store adapter, the only component that talks to the document store."""

from __future__ import annotations

import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from redis.exceptions import RedisError

from blog_posts_api.errors import StoreError
from blog_posts_api.metrics import store_errors_total, store_operation_duration
from blog_posts_api.models import Author, Post
from blog_posts_api.post_store import PostStore
from blog_posts_api.telemetry import get_tracer

log = structlog.get_logger()
_tracer = get_tracer(__name__)

# Failures that mean the store could not serve the request
_STORE_FAILURES = (RedisError, OSError)


@asynccontextmanager
async def _store_call(operation: str) -> AsyncIterator[None]:
    """Trace and time one store operation; re-raise store failures as StoreError."""
    start = time.monotonic()
    with _tracer.start_as_current_span(f"post_store.{operation}"):
        try:
            yield
        except _STORE_FAILURES as exc:
            store_errors_total.add(1, {"operation": operation})
            await log.aexception("store_unreachable", operation=operation)
            raise StoreError(operation) from exc
        finally:
            store_operation_duration.record(time.monotonic() - start, {"operation": operation})


class PostAdapter:
    """Translates between stored documents and ``Post`` and runs the five store operations."""

    def __init__(self, store: PostStore) -> None:
        self._store = store

    async def insert(self, author: Author, title: str, content: str) -> Post:
        """Store a new post; the store assigns ``id`` and ``created``."""
        doc = {
            "author": author.model_dump(by_alias=True),
            "title": title,
            "content": content,
        }
        async with _store_call("insert"):
            stored = await self._store.insert_one(doc)
        return Post.model_validate(stored)

    async def list_posts(self) -> list[Post]:
        async with _store_call("list"):
            docs = await self._store.find()
        return [Post.model_validate(doc) for doc in docs]

    async def get(self, post_id: str) -> Post | None:
        async with _store_call("get"):
            doc = await self._store.find_by_id(post_id)
        return Post.model_validate(doc) if doc is not None else None

    async def update(self, post_id: str, changes: dict[str, str]) -> int:
        """Apply *changes* (title and/or content); return the number of posts affected."""
        async with _store_call("update"):
            return await self._store.update_by_id(post_id, changes)

    async def remove(self, post_id: str) -> int:
        async with _store_call("remove"):
            return await self._store.delete_by_id(post_id)
