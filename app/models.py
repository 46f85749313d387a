"""Pydantic models describing catalog records and user movie links."""

from __future__ import annotations

from datetime import date
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class WatchStatus(str, Enum):
    """List membership of a movie for one user."""

    PLAN_TO_WATCH = "PLAN_TO_WATCH"
    WATCHING = "WATCHING"
    COMPLETED = "COMPLETED"
    DROPPED = "DROPPED"

    @classmethod
    def _missing_(cls, value: object) -> "WatchStatus | None":
        if not isinstance(value, str):
            return None
        key = value.strip().upper().replace("-", "_").replace(" ", "_")
        key = LEGACY_STATUS_NAMES.get(key, key)
        return cls.__members__.get(key)


# Status names still sent by the two-state web client.
LEGACY_STATUS_NAMES = {
    "WATCH_LIST": "PLAN_TO_WATCH",
    "WATCHED": "COMPLETED",
}


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class Movie(_CamelModel):
    """Materialized catalog record."""

    id: int
    external_id: str | None = None
    title: str
    year: int | None = None
    poster_url: str | None = None
    genre: str | None = None
    media_type: str | None = None
    overview: str | None = None
    runtime: str | None = None
    external_rating: float | None = None


class UserMovie(_CamelModel):
    """A user's link to a catalog record with the record attached."""

    id: int | None = None
    user_id: str
    movie: Movie
    status: WatchStatus | None = None
    is_favorite: bool = False
    user_rating: float | None = None
    added_at: date = Field(default_factory=date.today)

    def is_empty(self) -> bool:
        """Return ``True`` when the link carries no list or favorite membership."""

        return self.status is None and not self.is_favorite


class _TitleRequest(_CamelModel):
    title: str = Field(max_length=255)

    @field_validator("title")
    @classmethod
    def _strip_title(cls, value: str) -> str:
        text = value.strip()
        if not text:
            raise ValueError("Movie title is required.")
        return text


class StatusChange(_TitleRequest):
    """Body of a status update; ``None`` removes the movie from every list."""

    status: WatchStatus | None = None

    @field_validator("status", mode="before")
    @classmethod
    def _coerce_status(cls, value: object) -> object:
        if isinstance(value, str) and not isinstance(value, WatchStatus):
            return WatchStatus(value)
        return value


class FavoriteChange(_TitleRequest):
    is_favorite: bool


class RatingChange(_TitleRequest):
    rate: float
