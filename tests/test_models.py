"""Tests for post models and rendering."""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from blog_posts_api.models import (
    Author,
    Post,
    PostCreate,
    PostUpdate,
    is_well_formed_id,
    render_post,
)
from tests.conftest import ADA_PAYLOAD, MISSING_ID

CREATED = datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)


def _post(**overrides: object) -> Post:
    data: dict[str, object] = {
        "id": MISSING_ID,
        "author": {"firstName": "Ada", "lastName": "Lovelace"},
        "title": "T",
        "content": "C",
        "created": CREATED,
    }
    return Post.model_validate(data | overrides)


@pytest.mark.parametrize("post_id", [MISSING_ID, "9f1c2e0d4b3a48c7a6e5d4c3b2a1f0e9"])
def test_well_formed_ids(post_id: str) -> None:
    assert is_well_formed_id(post_id)


@pytest.mark.parametrize(
    "post_id",
    ["", "abc", "0" * 31, "0" * 33, "G" * 32, "9F1C2E0D4B3A48C7A6E5D4C3B2A1F0E9", f"{'0' * 32}\n"],
)
def test_malformed_ids(post_id: str) -> None:
    assert not is_well_formed_id(post_id)


def test_render_post_flattens_author() -> None:
    rendered = render_post(_post())
    assert rendered.author == "Ada Lovelace"
    assert rendered.model_dump().keys() == {"id", "title", "content", "created", "author"}


def test_render_post_keeps_identity_fields() -> None:
    rendered = render_post(_post())
    assert rendered.id == MISSING_ID
    assert rendered.created == CREATED
    assert (rendered.title, rendered.content) == ("T", "C")


def test_post_parses_iso_created() -> None:
    post = _post(created=CREATED.isoformat())
    assert post.created == CREATED


def test_author_accepts_aliases_and_field_names() -> None:
    by_alias = Author.model_validate({"firstName": "Ada", "lastName": "Lovelace"})
    by_name = Author(first_name="Ada", last_name="Lovelace")
    assert by_alias == by_name
    assert by_name.model_dump(by_alias=True) == {"firstName": "Ada", "lastName": "Lovelace"}


def test_post_create_ignores_unknown_keys() -> None:
    create = PostCreate.model_validate(ADA_PAYLOAD | {"id": MISSING_ID, "extra": 1})
    assert not hasattr(create, "id")
    assert create.author.first_name == "Ada"


def test_post_create_rejects_non_string_title() -> None:
    with pytest.raises(ValidationError):
        PostCreate.model_validate(ADA_PAYLOAD | {"title": 42})


def test_post_update_changes_excludes_absent_and_null() -> None:
    assert PostUpdate.model_validate({}).changes() == {}
    assert PostUpdate.model_validate({"title": "T2"}).changes() == {"title": "T2"}
    assert PostUpdate.model_validate({"title": None, "content": "C2"}).changes() == {
        "content": "C2"
    }


def test_post_update_changes_never_includes_id() -> None:
    update = PostUpdate.model_validate({"id": MISSING_ID, "content": ""})
    assert update.changes() == {"content": ""}
