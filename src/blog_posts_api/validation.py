"""Request validation for the posts routes.

Every check here runs before the store is touched. Failures raise
``PostValidationError`` with a message naming the offending field as a dotted
path (``title``, ``author.firstName``); only the first failure is reported.
"""

from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError
from pydantic_core import ErrorDetails

from blog_posts_api.errors import PostValidationError
from blog_posts_api.models import PostCreate, PostUpdate, is_well_formed_id

_M = TypeVar("_M", bound=BaseModel)

_EXPECTED_TYPES = {
    "string_type": "a string",
    "model_type": "an object",
    "model_attributes_type": "an object",
    "dict_type": "an object",
}


def _field_path(loc: tuple[int | str, ...]) -> str:
    return ".".join(str(part) for part in loc)


def _describe(error: ErrorDetails) -> str:
    field = _field_path(error["loc"])
    kind = error["type"]
    if kind == "missing":
        return f"Missing `{field}` in request body"
    if kind == "string_too_short":
        return f"`{field}` must not be empty"
    if kind in _EXPECTED_TYPES:
        return f"`{field}` must be {_EXPECTED_TYPES[kind]}"
    return f"`{field}` is invalid: {error['msg']}"


def _parse(model: type[_M], body: Any) -> _M:
    if not isinstance(body, dict):
        raise PostValidationError("Request body must be a JSON object")
    try:
        return model.model_validate(body)
    except ValidationError as exc:
        first = exc.errors()[0]
        raise PostValidationError(_describe(first), field=_field_path(first["loc"])) from exc


def require_well_formed_id(post_id: str) -> None:
    """Reject ids that the store could never have assigned."""
    if not is_well_formed_id(post_id):
        raise PostValidationError(f"Malformed post id `{post_id}`", field="id")


def parse_create(body: Any) -> PostCreate:
    """Validate a create body: non-empty title, content present, both author names non-empty."""
    return _parse(PostCreate, body)


def parse_update(body: Any, post_id: str) -> PostUpdate:
    """Validate an update body against the path id.

    A body ``id`` is optional but, when present, must equal *post_id*.
    """
    update = _parse(PostUpdate, body)
    if update.id is not None and update.id != post_id:
        msg = f"Request path id (`{post_id}`) and request body id (`{update.id}`) must match"
        raise PostValidationError(msg, field="id")
    return update
