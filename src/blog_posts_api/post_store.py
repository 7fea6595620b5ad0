"""Document store for posts: Protocol plus memory and Redis implementations.

The store is a mapping from post id to document. It assigns ``id`` and
``created`` on insert and knows nothing about the wire format.
"""

from __future__ import annotations

import copy
import re
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable
from uuid import uuid4

import structlog

if TYPE_CHECKING:
    from redis.asyncio import Redis

log = structlog.get_logger()

Document = dict[str, Any]

_POST_PREFIX = "post:"
_INDEX_KEY = "posts"
_AUTHOR_FIRST = "author.firstName"
_AUTHOR_LAST = "author.lastName"
# Redis glob metacharacters, escaped so a prefix only ever matches itself
_GLOB_SPECIAL = re.compile(r"([\\*?\[\]])")

# Lua: set field/value pairs only if the post hash exists, so an update never
# recreates a deleted post as a partial document.
_UPDATE_SCRIPT = (
    "if redis.call('exists',KEYS[1])==0 then return 0 end "
    "for i=1,#ARGV,2 do redis.call('hset',KEYS[1],ARGV[i],ARGV[i+1]) end "
    "return 1"
)


@runtime_checkable
class PostStore(Protocol):
    """Protocol for post document stores."""

    async def insert_one(self, doc: Document) -> Document: ...

    async def find(self) -> list[Document]: ...

    async def find_by_id(self, post_id: str) -> Document | None: ...

    async def update_by_id(self, post_id: str, fields: dict[str, str]) -> int: ...

    async def delete_by_id(self, post_id: str) -> int: ...

    async def drop_all(self) -> None: ...

    async def aclose(self) -> None: ...


def _new_document(doc: Document) -> Document:
    """Copy *doc* and assign store-owned fields, overriding any supplied values."""
    return {**copy.deepcopy(doc), "id": uuid4().hex, "created": datetime.now(timezone.utc)}


class MemoryPostStore:
    """In-memory post store for local development and testing.

    Documents are copied in and out so callers never share mutable state
    with the store.
    """

    def __init__(self) -> None:
        self._data: dict[str, Document] = {}

    async def insert_one(self, doc: Document) -> Document:
        stored = _new_document(doc)
        self._data[stored["id"]] = stored
        return copy.deepcopy(stored)

    async def find(self) -> list[Document]:
        return [copy.deepcopy(doc) for doc in self._data.values()]

    async def find_by_id(self, post_id: str) -> Document | None:
        doc = self._data.get(post_id)
        return copy.deepcopy(doc) if doc is not None else None

    async def update_by_id(self, post_id: str, fields: dict[str, str]) -> int:
        doc = self._data.get(post_id)
        if doc is None:
            return 0
        doc.update(fields)
        return 1

    async def delete_by_id(self, post_id: str) -> int:
        return 0 if self._data.pop(post_id, None) is None else 1

    async def drop_all(self) -> None:
        self._data.clear()

    async def aclose(self) -> None:
        self._data.clear()


def _decode(val: bytes | str) -> str:
    return val.decode() if isinstance(val, bytes) else str(val)


def _to_hash(doc: Document) -> dict[str, str]:
    """Flatten a document into Redis hash fields."""
    created = doc["created"]
    return {
        "id": doc["id"],
        "title": doc["title"],
        "content": doc["content"],
        "created": created.isoformat() if isinstance(created, datetime) else str(created),
        _AUTHOR_FIRST: doc["author"]["firstName"],
        _AUTHOR_LAST: doc["author"]["lastName"],
    }


def _from_hash(raw: dict[Any, Any]) -> Document:
    """Rebuild a document from Redis hash fields."""
    fields = {_decode(k): _decode(v) for k, v in raw.items()}
    return {
        "id": fields["id"],
        "title": fields["title"],
        "content": fields["content"],
        "created": fields["created"],
        "author": {"firstName": fields[_AUTHOR_FIRST], "lastName": fields[_AUTHOR_LAST]},
    }


class RedisPostStore:
    """Redis-backed post store.

    Each post is a hash at ``<prefix>:post:<id>``; a sorted set at
    ``<prefix>:posts`` indexes ids by insertion time and defines list order.
    Single-document writes are atomic (MULTI/EXEC or a Lua script).
    """

    def __init__(self, client: Redis, key_prefix: str = "blog") -> None:
        self._client: Redis = client
        self._prefix = key_prefix

    def _post_key(self, post_id: str) -> str:
        return f"{self._prefix}:{_POST_PREFIX}{post_id}"

    @property
    def _index_key(self) -> str:
        return f"{self._prefix}:{_INDEX_KEY}"

    async def insert_one(self, doc: Document) -> Document:
        stored = _new_document(doc)
        score = stored["created"].timestamp()
        async with self._client.pipeline(transaction=True) as pipe:
            pipe.hset(self._post_key(stored["id"]), mapping=_to_hash(stored))
            pipe.zadd(self._index_key, {stored["id"]: score})
            await pipe.execute()
        return stored

    async def find(self) -> list[Document]:
        ids = await self._client.zrange(self._index_key, 0, -1)
        if not ids:
            return []
        async with self._client.pipeline(transaction=False) as pipe:
            for post_id in ids:
                pipe.hgetall(self._post_key(_decode(post_id)))
            rows = await pipe.execute()
        # A post deleted between ZRANGE and HGETALL comes back empty
        return [_from_hash(row) for row in rows if row]

    async def find_by_id(self, post_id: str) -> Document | None:
        raw = await self._client.hgetall(self._post_key(post_id))  # type: ignore[misc]
        if not raw:
            return None
        return _from_hash(raw)

    async def update_by_id(self, post_id: str, fields: dict[str, str]) -> int:
        args = [item for pair in fields.items() for item in pair]
        result = await self._client.eval(  # type: ignore[misc]
            _UPDATE_SCRIPT, 1, self._post_key(post_id), *args
        )
        return int(result)

    async def delete_by_id(self, post_id: str) -> int:
        async with self._client.pipeline(transaction=True) as pipe:
            pipe.delete(self._post_key(post_id))
            pipe.zrem(self._index_key, post_id)
            deleted, _ = await pipe.execute()
        return int(deleted)

    async def drop_all(self) -> None:
        pattern = _GLOB_SPECIAL.sub(r"\\\1", self._post_key("")) + "*"
        keys = [key async for key in self._client.scan_iter(match=pattern)]
        await self._client.delete(self._index_key, *keys)
        await log.awarning("post_store_dropped", prefix=self._prefix, posts=len(keys))

    async def aclose(self) -> None:
        """Close the underlying Redis connection."""
        await self._client.aclose()


def create_post_store(
    backend: str, redis_url: str | None = None, key_prefix: str = "blog"
) -> PostStore:
    """Factory: create a PostStore for the given backend."""
    if backend == "redis":
        import redis.asyncio as aioredis

        if not redis_url:
            msg = "redis_url is required when backend='redis'"
            raise ValueError(msg)
        return RedisPostStore(aioredis.from_url(redis_url), key_prefix=key_prefix)
    return MemoryPostStore()
