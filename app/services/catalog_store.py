"""Persistence for catalog records."""

from __future__ import annotations

import logging
from typing import Any, Iterable

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from .. import ranking
from ..db_models import CatalogRecord
from ..errors import CatalogConflict
from ..models import Movie
from ..utils import escape_like

logger = logging.getLogger(__name__)


class CatalogStore:
    """Reads and write-once inserts of :class:`CatalogRecord` rows."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        similarity_threshold: float = 0.3,
    ):
        self._session_factory = session_factory
        self._similarity_threshold = similarity_threshold

    async def find_by_title(self, title: str) -> Movie | None:
        """Return the lowest-id record whose title equals ``title`` ignoring case."""

        stmt = (
            select(CatalogRecord)
            .where(func.lower(CatalogRecord.title) == title.strip().lower())
            .order_by(CatalogRecord.id)
            .limit(1)
        )
        async with self._session_factory() as session:
            record = (await session.execute(stmt)).scalars().first()
        return Movie.model_validate(record) if record else None

    async def find_by_external_id(self, external_id: str) -> Movie | None:
        stmt = select(CatalogRecord).where(CatalogRecord.external_id == external_id)
        async with self._session_factory() as session:
            record = (await session.execute(stmt)).scalars().first()
        return Movie.model_validate(record) if record else None

    async def search(self, query: str, *, limit: int = 20) -> list[Movie]:
        """Return records ranked by the hybrid score, best first.

        Only rows sharing a title prefix or a query fragment are loaded; the
        ranking itself runs in Python over that short-list.
        """

        query = query.strip()
        if not query:
            return []

        conditions = [CatalogRecord.title.ilike(f"{escape_like(query)}%", escape="\\")]
        for fragment in ranking.candidate_fragments(query):
            pattern = f"%{escape_like(fragment)}%"
            conditions.extend(
                column.ilike(pattern, escape="\\")
                for column in (
                    CatalogRecord.title,
                    CatalogRecord.genre,
                    CatalogRecord.overview,
                )
            )
        stmt = select(CatalogRecord).where(or_(*conditions)).order_by(CatalogRecord.id)
        async with self._session_factory() as session:
            records = (await session.execute(stmt)).scalars().all()
        ranked = ranking.rank(
            records, query, limit=limit, threshold=self._similarity_threshold
        )
        return [Movie.model_validate(record) for record in ranked]

    async def suggest(self, query: str) -> list[str]:
        """Return titles starting with ``query`` in alphabetical order."""

        pattern = f"{escape_like(query.strip())}%"
        stmt = (
            select(CatalogRecord.title)
            .where(CatalogRecord.title.ilike(pattern, escape="\\"))
            .order_by(CatalogRecord.title, CatalogRecord.id)
        )
        async with self._session_factory() as session:
            return list((await session.execute(stmt)).scalars().all())

    async def existing_titles(self, titles: Iterable[str]) -> set[str]:
        """Return the subset of ``titles`` already stored, compared exactly."""

        candidates = list(titles)
        if not candidates:
            return set()
        stmt = select(CatalogRecord.title).where(CatalogRecord.title.in_(candidates))
        async with self._session_factory() as session:
            return set((await session.execute(stmt)).scalars().all())

    async def insert(self, **fields: Any) -> Movie:
        """Insert a record; a duplicate external id raises :class:`CatalogConflict`."""

        record = CatalogRecord(**fields)
        async with self._session_factory() as session:
            session.add(record)
            try:
                await session.commit()
            except IntegrityError as exc:
                await session.rollback()
                raise CatalogConflict(fields.get("external_id")) from exc
            logger.info(
                "Catalog record %s created for %s (%s)",
                record.id,
                record.title,
                record.external_id,
            )
            return Movie.model_validate(record)

    async def list_all(self) -> list[Movie]:
        stmt = select(CatalogRecord).order_by(CatalogRecord.title, CatalogRecord.id)
        async with self._session_factory() as session:
            records = (await session.execute(stmt)).scalars().all()
        return [Movie.model_validate(record) for record in records]
