"""Service lifecycle: start and stop the HTTP listener around a post store."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass

import structlog
import uvicorn

from blog_posts_api.config import Settings
from blog_posts_api.main import create_app
from blog_posts_api.post_store import PostStore, create_post_store
from blog_posts_api.telemetry import configure_stdlib_logging

log = structlog.get_logger()

_STARTUP_POLL_INTERVAL = 0.05  # seconds between checks that the listener is up


async def _serve_guarded(server: uvicorn.Server) -> None:
    """Run *server*, turning uvicorn's process exit on startup failure into an exception."""
    try:
        await server.serve()
    except SystemExit as exc:
        msg = f"uvicorn exited with status {exc.code}"
        raise RuntimeError(msg) from exc


@dataclass
class RunningService:
    """Handle to a started service: the uvicorn server, its serve task, and the store it owns."""

    server: uvicorn.Server
    task: asyncio.Task[None]
    store: PostStore

    @property
    def port(self) -> int:
        """Port actually bound (useful when started with ``port=0``)."""
        sockets = self.server.servers[0].sockets
        return int(sockets[0].getsockname()[1])


async def start(settings: Settings, store: PostStore | None = None) -> RunningService:
    """Serve the API on ``settings.host:settings.port`` against *store*.

    The store is built from *settings* when not given. Either way the returned
    handle owns it and ``stop`` releases it. Returns once the listener accepts
    connections.
    """
    owns_store = store is None
    if store is None:
        store = create_post_store(
            settings.store_backend, settings.redis_url, key_prefix=settings.redis_key_prefix
        )

    config = uvicorn.Config(
        app=create_app(store),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level,
        log_config=None,
    )
    server = uvicorn.Server(config)
    task = asyncio.create_task(_serve_guarded(server))

    try:
        while not server.started:
            if task.done():
                msg = f"server failed to start on {settings.host}:{settings.port}"
                raise RuntimeError(msg) from task.exception()
            await asyncio.sleep(_STARTUP_POLL_INTERVAL)
    except BaseException:
        if owns_store:
            await store.aclose()
        raise

    service = RunningService(server=server, task=task, store=store)
    await log.ainfo("listener_started", host=settings.host, port=service.port)
    return service


async def stop(service: RunningService) -> None:
    """Stop serving and release the store."""
    service.server.should_exit = True
    try:
        await service.task
    finally:
        await service.store.aclose()
        await log.ainfo("listener_stopped")


async def _serve(settings: Settings) -> None:
    service = await start(settings)
    try:
        await service.task
    finally:
        await stop(service)


def run() -> None:
    """Console entry point: serve until uvicorn exits (SIGINT/SIGTERM)."""
    settings = Settings()
    configure_stdlib_logging(settings.log_level)
    asyncio.run(_serve(settings))
