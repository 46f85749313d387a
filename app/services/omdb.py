"""Client for the OMDb metadata API."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from ..config import Settings
from ..errors import MetadataProviderError
from ..utils import clean_text, parse_rating, parse_year

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class OmdbTitle:
    """Normalized view of an OMDb title lookup."""

    imdb_id: str
    title: str
    year: int | None = None
    runtime: str | None = None
    genre: str | None = None
    plot: str | None = None
    poster: str | None = None
    rating: float | None = None
    type: str | None = None

    def to_catalog_fields(self) -> dict[str, Any]:
        """Return the column values for a new catalog record."""

        return {
            "external_id": self.imdb_id,
            "title": self.title,
            "year": self.year,
            "runtime": self.runtime,
            "genre": self.genre,
            "overview": self.plot,
            "poster_url": self.poster,
            "external_rating": self.rating,
            "media_type": self.type,
        }


class OmdbClient:
    """Thin wrapper around the OMDb HTTP API.

    Every network or protocol failure raises :class:`MetadataProviderError`;
    callers decide whether the failure is fatal.
    """

    def __init__(self, settings: Settings, http_client: httpx.AsyncClient):
        if not settings.omdb_api_key:
            raise ValueError("OMDb API key is required when initialising OmdbClient")
        self._settings = settings
        self._client = http_client

    async def fetch_by_title(self, title: str) -> OmdbTitle | None:
        """Return the exact-title match, or ``None`` when OMDb has no such title."""

        payload = await self._request({"t": title.strip()})
        imdb_id = clean_text(payload.get("imdbID"))
        if not imdb_id:
            logger.debug("OMDb has no match for %r: %s", title, payload.get("Error"))
            return None

        return OmdbTitle(
            imdb_id=imdb_id,
            title=clean_text(payload.get("Title")) or title.strip(),
            year=parse_year(payload.get("Year")),
            runtime=clean_text(payload.get("Runtime")),
            genre=clean_text(payload.get("Genre")),
            plot=clean_text(payload.get("Plot")),
            poster=clean_text(payload.get("Poster")),
            rating=parse_rating(payload.get("imdbRating")),
            type=clean_text(payload.get("Type")),
        )

    async def search_titles(self, query: str) -> list[str]:
        """Return candidate titles for a free-text query in provider order."""

        payload = await self._request({"s": query.strip()})
        results = payload.get("Search")
        if not isinstance(results, list):
            return []

        titles: list[str] = []
        for entry in results:
            if not isinstance(entry, dict):
                continue
            title = entry.get("Title")
            if isinstance(title, str) and title.strip():
                titles.append(title.strip())
        return titles

    async def _request(self, params: dict[str, str]) -> dict[str, Any]:
        query = {"apikey": self._settings.omdb_api_key, **params}
        try:
            response = await self._client.get("/", params=query)
        except httpx.TimeoutException as exc:
            raise MetadataProviderError("Movie metadata provider timed out.") from exc
        except httpx.HTTPError as exc:
            logger.warning("OMDb request failed: %s", exc)
            raise MetadataProviderError() from exc

        if response.status_code >= 400:
            logger.warning(
                "OMDb request failed with %s: %s", response.status_code, response.text
            )
            raise MetadataProviderError(
                f"Movie metadata provider returned HTTP {response.status_code}."
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise MetadataProviderError(
                "Movie metadata provider returned an invalid payload."
            ) from exc
        if not isinstance(payload, dict):
            raise MetadataProviderError(
                "Movie metadata provider returned an invalid payload."
            )
        return payload
