from __future__ import annotations

import json
from functools import lru_cache
from typing import Annotated, Any, Literal

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


DEFAULT_OPENWEATHER_BASE_URL = "https://api.openweathermap.org/data/2.5"
DEFAULT_REDIS_URL = "redis://localhost:6379/0"


DEFAULT_CORS_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="WEATHERAPI_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        populate_by_name=True,
    )

    cors_origins: Annotated[list[str], NoDecode] = Field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))
    http_timeout_seconds: float = Field(default=10.0, ge=1.0, le=60.0)
    http_connect_timeout_seconds: float = Field(default=3.0, ge=0.1, le=60.0)
    http_user_agent: str = Field(default="zipcast-api/0.1")
    rate_limit: str = Field(default="60/minute")
    log_level: str = Field(default="INFO")

    # Upstream provider
    openweather_base_url: str = Field(
        default=DEFAULT_OPENWEATHER_BASE_URL,
        validation_alias=AliasChoices("WEATHERAPI_OPENWEATHER_BASE_URL", "OPENWEATHER_BASE_URL"),
    )
    openweather_api_key: str = Field(
        default="test_key",
        validation_alias=AliasChoices("WEATHERAPI_OPENWEATHER_API_KEY", "OPENWEATHER_API_KEY"),
    )
    openweather_units: str = Field(default="metric")

    # Cache
    cache_backend: Literal["redis", "memory"] = Field(default="redis")
    cache_ttl_seconds: int = Field(default=1800, ge=1, le=86400)
    redis_url: str = Field(
        default=DEFAULT_REDIS_URL,
        validation_alias=AliasChoices("WEATHERAPI_REDIS_URL", "REDIS_URL"),
    )
    redis_connect_timeout_seconds: float = Field(default=5.0, ge=0.1, le=60.0)
    memory_cache_maxsize: int = Field(default=1024, ge=1)

    @field_validator("cors_origins", mode="before")
    @classmethod
    def _split_cors_origins(cls, value: Any) -> Any:
        # Accept WEATHERAPI_CORS_ORIGINS as JSON array or comma-separated string.
        if not isinstance(value, str):
            return value
        parsed = value.strip()
        if parsed.startswith("["):
            try:
                return [str(x).strip() for x in json.loads(parsed) if str(x).strip()]
            except ValueError:
                pass
        return [s.strip() for s in parsed.strip("[]").split(",") if s.strip()]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
