#!/usr/bin/env python3
"""Seed the configured post store with sample posts, or wipe it.

Reads the same environment as the service (STORE_BACKEND, REDIS_URL,
REDIS_KEY_PREFIX). Only meaningful against a Redis store; the memory store
lives inside the service process.

Usage:
    uv run python scripts/seed_posts.py --count 10
    uv run python scripts/seed_posts.py --drop              # wipe only
    uv run python scripts/seed_posts.py --drop --count 20   # wipe, then reseed
"""

from __future__ import annotations

import argparse
import asyncio
import random

import structlog

from blog_posts_api.adapter import PostAdapter
from blog_posts_api.config import Settings
from blog_posts_api.models import Author
from blog_posts_api.post_store import create_post_store

log = structlog.get_logger()

FIRST_NAMES = ["Ada", "Grace", "Alan", "Edsger", "Barbara", "Donald", "Frances", "Ken"]
LAST_NAMES = ["Lovelace", "Hopper", "Turing", "Dijkstra", "Liskov", "Knuth", "Allen", "Thompson"]
WORDS = (
    "lorem ipsum dolor sit amet consectetur adipiscing elit sed do eiusmod tempor "
    "incididunt ut labore et dolore magna aliqua"
).split()


def _sentence(rng: random.Random, n_words: int) -> str:
    words = rng.choices(WORDS, k=n_words)
    return " ".join(words).capitalize() + "."


async def seed(count: int, drop: bool, rng: random.Random) -> None:
    settings = Settings()
    store = create_post_store(
        settings.store_backend, settings.redis_url, key_prefix=settings.redis_key_prefix
    )
    adapter = PostAdapter(store)
    try:
        if drop:
            await store.drop_all()
        for _ in range(count):
            author = Author(first_name=rng.choice(FIRST_NAMES), last_name=rng.choice(LAST_NAMES))
            content = " ".join(_sentence(rng, rng.randint(8, 20)) for _ in range(3))
            post = await adapter.insert(author, _sentence(rng, 6), content)
            log.info("post_seeded", post_id=post.id, title=post.title)
    finally:
        await store.aclose()


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument(
        "--count", type=int, default=None, help="Posts to create (default 10; 0 with --drop)"
    )
    parser.add_argument("--drop", action="store_true", help="Delete every post first")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for repeatable data")
    args = parser.parse_args()
    count = args.count if args.count is not None else (0 if args.drop else 10)
    asyncio.run(seed(count, args.drop, random.Random(args.seed)))


if __name__ == "__main__":
    main()
