"""Error taxonomy for the posts API."""


class PostsApiError(Exception):
    """Base class for errors surfaced by the posts API."""


class PostValidationError(PostsApiError):
    """Raised when a request carries malformed or missing input (HTTP 400)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.field = field


class PostNotFoundError(PostsApiError):
    """Raised when a requested post id does not exist (HTTP 404)."""

    def __init__(self, post_id: str) -> None:
        super().__init__(f"Post {post_id} not found")
        self.post_id = post_id


class StoreError(PostsApiError):
    """Raised when the document store is unreachable or fails unexpectedly (HTTP 500).

    The original exception is chained as ``__cause__``; its details are
    logged but never returned to the caller.
    """

    def __init__(self, operation: str) -> None:
        super().__init__(f"Store operation '{operation}' failed")
        self.operation = operation
