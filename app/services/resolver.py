"""Turns free-text titles into canonical catalog records."""

from __future__ import annotations

import logging
from typing import Protocol

from ..config import Settings
from ..errors import CatalogConflict, MetadataProviderError, MovieNotFound
from ..models import Movie
from ..utils import unique
from .catalog_store import CatalogStore
from .omdb import OmdbTitle

logger = logging.getLogger(__name__)


class MetadataProvider(Protocol):
    async def fetch_by_title(self, title: str) -> OmdbTitle | None: ...

    async def search_titles(self, query: str) -> list[str]: ...


class MovieResolver:
    """Hybrid local/external movie lookup with deduplicated ingestion.

    The local catalog is always consulted first. The external provider is
    only asked when the local result set is thin (``search``/``suggest``) or
    when a title is missing entirely (``resolve``). Each external id is
    stored at most once.
    """

    def __init__(
        self,
        settings: Settings,
        catalog: CatalogStore,
        provider: MetadataProvider | None,
    ):
        self._settings = settings
        self._catalog = catalog
        self._provider = provider

    async def search(self, query: str | None) -> list[Movie]:
        """Return local matches first, then newly ingested external matches."""

        query = (query or "").strip()
        if not query:
            return []

        local = await self._catalog.search(
            query, limit=self._settings.search_page_size
        )
        if len(local) >= self._settings.search_local_threshold:
            return local

        known_ids = {movie.id for movie in local}
        external: list[Movie] = []
        for movie in await self._ingest_candidates(query):
            if movie.id not in known_ids:
                known_ids.add(movie.id)
                external.append(movie)
        return local + external

    async def suggest(self, query: str | None) -> list[str]:
        """Return locally known titles with the given prefix plus provider titles."""

        query = (query or "").strip()
        if not query:
            return []

        local_titles = await self._catalog.suggest(query)
        if len(local_titles) >= self._settings.suggest_local_threshold:
            return local_titles

        candidates = await self._candidate_titles(query)
        await self._ingest(candidates, exclude=set(local_titles))
        return unique(local_titles + candidates)

    async def resolve(self, title: str) -> Movie:
        """Return the catalog record for ``title``, fetching it when unknown.

        Raises :class:`MovieNotFound` when the provider has no exact match and
        :class:`MetadataProviderError` when the provider could not be reached.
        """

        title = title.strip()
        if not title:
            raise MovieNotFound(title)

        movie = await self._catalog.find_by_title(title)
        if movie is not None:
            return movie
        return await self._fetch_and_store(title)

    async def list_all(self) -> list[Movie]:
        return await self._catalog.list_all()

    async def _fetch_and_store(self, title: str) -> Movie:
        if self._provider is None:
            raise MetadataProviderError("Movie metadata provider is not configured.")
        fetched = await self._provider.fetch_by_title(title)
        if fetched is None:
            raise MovieNotFound(title)

        existing = await self._catalog.find_by_external_id(fetched.imdb_id)
        if existing is not None:
            return existing

        try:
            return await self._catalog.insert(**fetched.to_catalog_fields())
        except CatalogConflict:
            logger.info(
                "Concurrent insert for %s detected; using the stored record",
                fetched.imdb_id,
            )
            winner = await self._catalog.find_by_external_id(fetched.imdb_id)
            if winner is None:
                raise
            return winner

    async def _candidate_titles(self, query: str) -> list[str]:
        if self._provider is None:
            return []
        try:
            return unique(await self._provider.search_titles(query))
        except MetadataProviderError as exc:
            logger.warning("External title search failed for %r: %s", query, exc)
            return []

    async def _ingest_candidates(self, query: str) -> list[Movie]:
        candidates = await self._candidate_titles(query)
        if not candidates:
            return []
        known = await self._catalog.existing_titles(candidates)
        return await self._ingest(candidates, exclude=known)

    async def _ingest(self, titles: list[str], *, exclude: set[str]) -> list[Movie]:
        """Fetch and store up to the fan-out limit of titles not in ``exclude``."""

        pending = [title for title in titles if title not in exclude]
        ingested: list[Movie] = []
        for title in pending[: self._settings.external_fanout]:
            try:
                ingested.append(await self._fetch_and_store(title))
            except (MovieNotFound, MetadataProviderError) as exc:
                logger.warning("Skipping external candidate %r: %s", title, exc)
        return ingested
