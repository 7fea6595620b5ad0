"""Application configuration via environment variables."""

import re
from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings

_KEY_PREFIX_PATTERN = re.compile(r"[A-Za-z0-9_-]+")


class Settings(BaseSettings):
    """Service configuration loaded from environment variables."""

    model_config = {"env_prefix": ""}

    # Server
    host: str = Field(default="0.0.0.0", description="Server bind host")
    port: int = Field(default=8000, description="Server bind port")
    log_level: str = Field(default="info", description="Log level")

    # Store backend
    store_backend: Literal["memory", "redis"] = Field(
        default="memory", description="Post store backend: 'memory' or 'redis'"
    )
    redis_url: str | None = Field(
        default=None, description="Redis URL (required when STORE_BACKEND=redis)"
    )
    redis_key_prefix: str = Field(
        default="blog", description="Namespace for every Redis key written by the service"
    )

    @field_validator("redis_key_prefix")
    @classmethod
    def _validate_key_prefix(cls, v: str) -> str:
        if not v:
            raise ValueError("REDIS_KEY_PREFIX must not be empty")
        if not _KEY_PREFIX_PATTERN.fullmatch(v):
            raise ValueError("REDIS_KEY_PREFIX may only contain letters, digits, '_' and '-'")
        return v

    @model_validator(mode="after")
    def _check_store(self) -> "Settings":
        if self.store_backend == "redis" and not self.redis_url:
            raise ValueError("REDIS_URL is required when STORE_BACKEND=redis")
        return self
