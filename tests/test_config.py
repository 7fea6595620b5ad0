"""Tests for configuration loading."""

import pytest
from pydantic import ValidationError

from blog_posts_api.config import Settings
from tests.conftest import REDIS_URL


def test_settings_defaults(env_vars: None) -> None:
    settings = Settings()
    assert settings.host == "0.0.0.0"
    assert settings.port == 8000
    assert settings.log_level == "info"
    assert settings.store_backend == "memory"
    assert settings.redis_url is None
    assert settings.redis_key_prefix == "blog"


def test_settings_loads_env_vars(env_vars: None, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("HOST", "127.0.0.1")
    monkeypatch.setenv("PORT", "9000")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("STORE_BACKEND", "redis")
    monkeypatch.setenv("REDIS_URL", REDIS_URL)
    monkeypatch.setenv("REDIS_KEY_PREFIX", "staging-blog")

    settings = Settings()

    assert settings.host == "127.0.0.1"
    assert settings.port == 9000
    assert settings.log_level == "debug"
    assert settings.store_backend == "redis"
    assert settings.redis_url == REDIS_URL
    assert settings.redis_key_prefix == "staging-blog"


def test_settings_redis_requires_url(env_vars: None) -> None:
    with pytest.raises(ValidationError, match="REDIS_URL is required"):
        Settings(store_backend="redis")


def test_settings_rejects_unknown_backend(env_vars: None) -> None:
    with pytest.raises(ValidationError):
        Settings(store_backend="mongo")


def test_settings_rejects_invalid_port(env_vars: None, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PORT", "eighty")
    with pytest.raises(ValidationError):
        Settings()


@pytest.mark.parametrize(
    ("prefix", "message"),
    [
        ("", "must not be empty"),
        ("blog:v2", "may only contain"),
        ("b*", "may only contain"),
        ("blog?", "may only contain"),
        ("[ab]log", "may only contain"),
        ("blog posts", "may only contain"),
    ],
)
def test_settings_rejects_bad_key_prefix(env_vars: None, prefix: str, message: str) -> None:
    with pytest.raises(ValidationError, match=message):
        Settings(redis_key_prefix=prefix)


def test_memory_backend_ignores_redis_url(env_vars: None) -> None:
    settings = Settings(store_backend="memory", redis_url=REDIS_URL)
    assert settings.store_backend == "memory"


@pytest.mark.parametrize("prefix", ["blog", "staging-blog", "blog_v2", "B10G"])
def test_settings_accepts_plain_key_prefix(env_vars: None, prefix: str) -> None:
    assert Settings(redis_key_prefix=prefix).redis_key_prefix == prefix
