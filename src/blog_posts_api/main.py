"""FastAPI application entrypoint."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor

from blog_posts_api.adapter import PostAdapter
from blog_posts_api.config import Settings
from blog_posts_api.errors import PostNotFoundError, PostValidationError, StoreError
from blog_posts_api.post_store import PostStore, create_post_store
from blog_posts_api.posts import router as posts_router
from blog_posts_api.telemetry import (
    add_trace_context,
    emit_to_otel_logs,
    init_telemetry,
    shutdown_telemetry,
)

structlog.configure(
    processors=[
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        add_trace_context,  # type: ignore[list-item]
        emit_to_otel_logs,  # type: ignore[list-item]
        structlog.processors.format_exc_info,
        structlog.dev.ConsoleRenderer(),
    ],
)

log = structlog.get_logger()

GENERIC_ERROR_DETAIL = "Internal server error"


def _attach_store(app: FastAPI, store: PostStore) -> None:
    app.state.post_store = store
    app.state.post_adapter = PostAdapter(store)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    init_telemetry()

    # A store handed to create_app belongs to the caller; only close one we opened.
    owns_store = getattr(app.state, "post_store", None) is None
    if owns_store:
        settings = Settings()
        app.state.settings = settings
        _attach_store(
            app,
            create_post_store(
                settings.store_backend, settings.redis_url, key_prefix=settings.redis_key_prefix
            ),
        )

    await log.ainfo(
        "service_started",
        store=type(app.state.post_store).__name__,
        owns_store=owns_store,
    )
    yield

    if owns_store:
        try:
            await app.state.post_store.aclose()
        except Exception:
            await log.aexception("store_close_failed")
        app.state.post_store = None
        app.state.post_adapter = None
    await log.ainfo("service_stopped")
    shutdown_telemetry()


async def _handle_validation_error(request: Request, exc: PostValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"detail": exc.message})


async def _handle_not_found(request: Request, exc: PostNotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": "Post not found"})


async def _handle_store_error(request: Request, exc: StoreError) -> JSONResponse:
    # Cause already logged by the adapter; never echo store diagnostics.
    return JSONResponse(status_code=500, content={"detail": GENERIC_ERROR_DETAIL})


async def _handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    await log.aexception("unhandled_error", method=request.method, path=request.url.path)
    return JSONResponse(status_code=500, content={"detail": GENERIC_ERROR_DETAIL})


def create_app(store: PostStore | None = None) -> FastAPI:
    """Build the API. If *store* is given it is used as-is and left open on shutdown."""
    app = FastAPI(title="Blog Posts API", lifespan=lifespan)
    if store is not None:
        _attach_store(app, store)

    app.exception_handler(PostValidationError)(_handle_validation_error)
    app.exception_handler(PostNotFoundError)(_handle_not_found)
    app.exception_handler(StoreError)(_handle_store_error)
    app.exception_handler(Exception)(_handle_unexpected_error)

    app.include_router(posts_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    FastAPIInstrumentor.instrument_app(app)
    return app


app = create_app()
