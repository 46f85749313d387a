"""Persistence for user movie links."""

from __future__ import annotations

import logging

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import joinedload

from ..db_models import CatalogRecord, UserMovieLink
from ..models import UserMovie, WatchStatus
from ..utils import escape_like

logger = logging.getLogger(__name__)


class UserMovieStore:
    """Loads links with their catalog record joined in and writes them back."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def get(self, user_id: str, record_id: int) -> UserMovie | None:
        stmt = (
            select(UserMovieLink)
            .options(joinedload(UserMovieLink.movie))
            .where(
                UserMovieLink.user_id == user_id,
                UserMovieLink.catalog_record_id == record_id,
            )
        )
        async with self._session_factory() as session:
            link = (await session.execute(stmt)).scalars().first()
        return UserMovie.model_validate(link) if link else None

    async def find_by_title(self, user_id: str, title: str) -> UserMovie | None:
        """Return the user's first link whose movie title contains ``title``."""

        pattern = f"%{escape_like(title.strip())}%"
        stmt = (
            select(UserMovieLink)
            .join(UserMovieLink.movie)
            .options(joinedload(UserMovieLink.movie))
            .where(
                UserMovieLink.user_id == user_id,
                CatalogRecord.title.ilike(pattern, escape="\\"),
            )
            .order_by(UserMovieLink.id)
            .limit(1)
        )
        async with self._session_factory() as session:
            link = (await session.execute(stmt)).scalars().first()
        return UserMovie.model_validate(link) if link else None

    async def list_by_user(
        self,
        user_id: str,
        *,
        status: WatchStatus | None = None,
        favorite: bool | None = None,
    ) -> list[UserMovie]:
        """Return the user's links, optionally filtered by status and/or favorite."""

        stmt = (
            select(UserMovieLink)
            .options(joinedload(UserMovieLink.movie))
            .where(UserMovieLink.user_id == user_id)
            .order_by(UserMovieLink.added_at, UserMovieLink.id)
        )
        if status is not None:
            stmt = stmt.where(UserMovieLink.status == status)
        if favorite is not None:
            stmt = stmt.where(UserMovieLink.is_favorite == favorite)
        async with self._session_factory() as session:
            links = (await session.execute(stmt)).scalars().all()
        return [UserMovie.model_validate(link) for link in links]

    async def save(self, link: UserMovie) -> UserMovie:
        """Insert or update ``link`` and return the stored state.

        An insert that collides with an existing row for the same user and
        movie updates that row instead (last writer wins).
        """

        async with self._session_factory() as session:
            if link.id is None:
                row = UserMovieLink(
                    user_id=link.user_id,
                    catalog_record_id=link.movie.id,
                    added_at=link.added_at,
                )
                self._apply(row, link)
                session.add(row)
                try:
                    await session.commit()
                except IntegrityError:
                    await session.rollback()
                    logger.info(
                        "Link for user %s and movie %s already exists; updating it",
                        link.user_id,
                        link.movie.id,
                    )
                    row = await self._load_row(session, link.user_id, link.movie.id)
                    if row is None:
                        raise
                    self._apply(row, link)
                    await session.commit()
            else:
                row = await session.get(UserMovieLink, link.id)
                if row is None:
                    # Removed concurrently; persist the caller's state as a new row.
                    return await self.save(link.model_copy(update={"id": None}))
                self._apply(row, link)
                await session.commit()
            return link.model_copy(update={"id": row.id, "added_at": row.added_at})

    async def delete(self, link: UserMovie) -> None:
        async with self._session_factory() as session:
            await session.execute(
                delete(UserMovieLink).where(
                    UserMovieLink.user_id == link.user_id,
                    UserMovieLink.catalog_record_id == link.movie.id,
                )
            )
            await session.commit()

    @staticmethod
    async def _load_row(
        session: AsyncSession, user_id: str, record_id: int
    ) -> UserMovieLink | None:
        stmt = select(UserMovieLink).where(
            UserMovieLink.user_id == user_id,
            UserMovieLink.catalog_record_id == record_id,
        )
        return (await session.execute(stmt)).scalars().first()

    @staticmethod
    def _apply(row: UserMovieLink, link: UserMovie) -> None:
        row.status = link.status
        row.is_favorite = link.is_favorite
        row.user_rating = link.user_rating
