from __future__ import annotations

import re
from functools import lru_cache

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# mongodb[+srv]://[user[:password]@]host1[:port1][,...hostN[:portN]][/[defaultauthdb][?options]]
MONGODB_URI_PATTERN = re.compile(
    r"^mongodb(?:\+srv)?://"
    r"(?:[^:@/\s]+(?::[^@/\s]*)?@)?"
    r"[A-Za-z0-9\-_.]+(?::\d+)?"
    r"(?:,[A-Za-z0-9\-_.]+(?::\d+)?)*"
    r"(?:/[A-Za-z0-9\-_.]*)?"
    r"(?:\?\S+)?$"
)

# redis[s]://[username:password@]host[:port][/db-number]
REDIS_URI_PATTERN = re.compile(
    r"^rediss?://(?:[A-Za-z0-9._%+-]*:[^@\s]+@)?[A-Za-z0-9.\-]+(?::\d+)?(?:/\d+)?$"
)

# MongoDB forbids these characters in database names
MONGODB_DB_NAME_PATTERN = re.compile(r'^[^/\\."$\x00\s]{1,64}$')


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="COURSEHUB_", env_file=".env", extra="ignore")

    app_name: str = "coursehub"
    env: str = "dev"
    host: str = "0.0.0.0"  # nosec B104 - intentional for container deployments
    port: int = Field(default=3000, validation_alias=AliasChoices("PORT", "COURSEHUB_PORT"))

    # Document store
    mongodb_uri: str = Field(validation_alias="MONGODB_URI")
    mongodb_db_name: str = Field(validation_alias="MONGODB_DB_NAME")
    mongodb_max_retries: int = Field(
        default=5,
        ge=1,
        validation_alias=AliasChoices("MONGODB_MAX_RETRIES", "MONGODB_DB_MAX_RETRIES"),
    )
    mongodb_retry_delay: float = Field(
        default=2.0,
        ge=0,
        validation_alias="MONGODB_RETRY_DELAY",
    )
    mongodb_server_selection_timeout_ms: int = Field(
        default=5000, validation_alias="MONGODB_SERVER_SELECTION_TIMEOUT_MS"
    )

    # Cache store
    redis_uri: str = Field(validation_alias=AliasChoices("REDIS_URI", "REDIS_URL"))
    redis_max_retries: int = Field(default=5, ge=1, validation_alias="REDIS_MAX_RETRIES")
    redis_retry_delay: float = Field(default=2.0, ge=0, validation_alias="REDIS_RETRY_DELAY")

    # Read-through cache entries for single documents
    cache_ttl: int = Field(default=3600, gt=0)

    # Observability
    enable_metrics: bool = True
    log_level: str = "INFO"

    @field_validator("mongodb_uri")
    @classmethod
    def _check_mongodb_uri(cls, value: str) -> str:
        if not MONGODB_URI_PATTERN.match(value):
            raise ValueError("MONGODB_URI is not a valid MongoDB connection string")
        return value

    @field_validator("redis_uri")
    @classmethod
    def _check_redis_uri(cls, value: str) -> str:
        if not REDIS_URI_PATTERN.match(value):
            raise ValueError("REDIS_URI is not a valid Redis connection string")
        return value

    @field_validator("mongodb_db_name")
    @classmethod
    def _check_db_name(cls, value: str) -> str:
        if not value:
            raise ValueError("MONGODB_DB_NAME must not be empty")
        if not MONGODB_DB_NAME_PATTERN.match(value):
            raise ValueError("MONGODB_DB_NAME contains forbidden characters")
        return value


@lru_cache
def get_settings() -> Settings:
    """Load settings from the environment once per process.

    Raises pydantic.ValidationError when a required connection string is
    missing or malformed, which refuses startup.
    """
    return Settings()  # type: ignore[call-arg]
