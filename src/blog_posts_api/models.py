"""Pydantic models for blog posts: stored record, request bodies, rendered form."""

import re
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, StrictStr

POST_ID_PATTERN = re.compile(r"^[0-9a-f]{32}$")


def is_well_formed_id(post_id: str) -> bool:
    """True if *post_id* has the shape of an identifier the store assigns."""
    return POST_ID_PATTERN.fullmatch(post_id) is not None


class Author(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    first_name: StrictStr = Field(alias="firstName", min_length=1)
    last_name: StrictStr = Field(alias="lastName", min_length=1)


class Post(BaseModel):
    """A persisted blog post in its stored shape (composite author)."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(description="Store-assigned identifier")
    author: Author
    title: str
    content: str
    created: datetime = Field(description="Insertion time assigned by the store (UTC)")


class PostCreate(BaseModel):
    """Body of ``POST /posts``. Unknown keys (including ``id``/``created``) are ignored."""

    # Field order is the order validation failures are reported in.
    title: StrictStr = Field(min_length=1)
    content: StrictStr
    author: Author


class PostUpdate(BaseModel):
    """Body of ``PUT /posts/{id}``. Author fields are not updatable."""

    id: StrictStr | None = None
    title: StrictStr | None = Field(default=None, min_length=1)
    content: StrictStr | None = None

    def changes(self) -> dict[str, str]:
        """Fields to apply to the stored post; absent or null fields are left untouched."""
        return self.model_dump(include={"title", "content"}, exclude_none=True)


class PostResponse(BaseModel):
    """Rendered form of a post: exactly these five keys, author flattened to a string."""

    id: str
    title: str
    content: str
    created: datetime
    author: str


def render_post(post: Post) -> PostResponse:
    """Render a stored post for the wire. One-way: the author string cannot be split back."""
    return PostResponse(
        id=post.id,
        title=post.title,
        content=post.content,
        created=post.created,
        author=f"{post.author.first_name} {post.author.last_name}",
    )
