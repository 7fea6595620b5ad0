"""HTTP handlers for the ``/posts`` collection."""

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import structlog
from fastapi import APIRouter, Request, Response, status

from blog_posts_api.adapter import PostAdapter
from blog_posts_api.errors import PostNotFoundError, PostValidationError
from blog_posts_api.metrics import posts_requests_total
from blog_posts_api.models import PostResponse, render_post
from blog_posts_api.validation import parse_create, parse_update, require_well_formed_id

log = structlog.get_logger()

router = APIRouter()


def _adapter(request: Request) -> PostAdapter:
    adapter: PostAdapter = request.app.state.post_adapter
    return adapter


async def _read_json(request: Request) -> Any:
    try:
        return await request.json()
    except ValueError as exc:
        raise PostValidationError("Request body must be valid JSON") from exc


@contextmanager
def _observed(operation: str) -> Iterator[None]:
    """Count the request under *operation* with its outcome."""
    outcome = "error"
    try:
        yield
        outcome = "success"
    except PostValidationError:
        outcome = "invalid"
        raise
    except PostNotFoundError:
        outcome = "not_found"
        raise
    finally:
        posts_requests_total.add(1, {"operation": operation, "outcome": outcome})


@router.get("/posts", response_model=list[PostResponse])
async def list_posts(request: Request) -> list[PostResponse]:
    with _observed("list"):
        posts = await _adapter(request).list_posts()
    return [render_post(post) for post in posts]


@router.get("/posts/{post_id}", response_model=PostResponse)
async def get_post(post_id: str, request: Request) -> PostResponse:
    with _observed("get"):
        require_well_formed_id(post_id)
        post = await _adapter(request).get(post_id)
        if post is None:
            raise PostNotFoundError(post_id)
    return render_post(post)


@router.post("/posts", status_code=status.HTTP_201_CREATED, response_model=PostResponse)
async def create_post(request: Request) -> PostResponse:
    with _observed("create"):
        new_post = parse_create(await _read_json(request))
        post = await _adapter(request).insert(new_post.author, new_post.title, new_post.content)
    await log.ainfo("post_created", post_id=post.id)
    return render_post(post)


@router.put("/posts/{post_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
async def update_post(post_id: str, request: Request) -> Response:
    """Update title and/or content. Author, ``id`` and ``created`` never change."""
    with _observed("update"):
        require_well_formed_id(post_id)
        changes = parse_update(await _read_json(request), post_id).changes()
        updated = await _adapter(request).update(post_id, changes)
        if not updated:
            raise PostNotFoundError(post_id)
    await log.ainfo("post_updated", post_id=post_id, fields=sorted(changes))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete(
    "/posts/{post_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response
)
async def delete_post(post_id: str, request: Request) -> Response:
    """Delete a post. Deleting an id that does not exist also returns 204."""
    with _observed("delete"):
        require_well_formed_id(post_id)
        removed = await _adapter(request).remove(post_id)
    await log.ainfo("post_deleted", post_id=post_id, existed=bool(removed))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
