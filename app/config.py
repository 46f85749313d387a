"""Application configuration models."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, HttpUrl, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables or a .env file."""

    app_name: str = Field(default="MovieTrack", alias="APP_NAME")
    server_host: str = Field(default="0.0.0.0", alias="HOST")
    server_port: int = Field(default=3000, alias="PORT")

    omdb_api_key: str | None = Field(default=None, alias="OMDB_API_KEY")
    omdb_api_url: HttpUrl = Field(
        default="https://www.omdbapi.com", alias="OMDB_API_URL"
    )
    omdb_timeout_seconds: float = Field(
        default=10.0, alias="OMDB_TIMEOUT", ge=0.5, le=60.0
    )

    search_page_size: int = Field(
        default=20, alias="SEARCH_PAGE_SIZE", ge=1, le=100
    )
    search_local_threshold: int = Field(
        default=10, alias="SEARCH_LOCAL_THRESHOLD", ge=0, le=100
    )
    suggest_local_threshold: int = Field(
        default=5, alias="SUGGEST_LOCAL_THRESHOLD", ge=0, le=100
    )
    external_fanout: int = Field(default=5, alias="EXTERNAL_FANOUT", ge=1, le=20)
    similarity_threshold: float = Field(
        default=0.3, alias="SIMILARITY_THRESHOLD", ge=0.25, le=1.0
    )

    user_header: str = Field(default="X-User-Id", alias="USER_HEADER")

    database_url: str = Field(
        default="sqlite+aiosqlite:///./movietrack.db", alias="DATABASE_URL"
    )

    environment: Literal["development", "production"] = Field(
        default="development", alias="ENVIRONMENT"
    )

    @field_validator("user_header", mode="before")
    @classmethod
    def _normalise_user_header(cls, value: object) -> str:
        """Strip the identity header name and reject blank values."""

        text = str(value or "").strip()
        if not text:
            raise ValueError("USER_HEADER must not be blank")
        return text

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""

    return Settings()  # type: ignore[call-arg]


settings = get_settings()
