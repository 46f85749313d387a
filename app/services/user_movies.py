"""State machine over a user's status, favorite flag and rating per movie."""

from __future__ import annotations

from datetime import date

from ..auth import CurrentUser
from ..errors import InvalidRating, NoOpStatusChange, NotInAnyList, NotRateable
from ..models import UserMovie, WatchStatus
from .resolver import MovieResolver
from .user_movie_store import UserMovieStore

MIN_RATING = 0.0
MAX_RATING = 10.0


class UserMovieEngine:
    """Creates, updates and deletes user movie links.

    Each (user, movie) pair has at most one link. A link with no status that
    is not a favorite is never stored; it is deleted instead.
    """

    def __init__(self, resolver: MovieResolver, store: UserMovieStore):
        self._resolver = resolver
        self._store = store

    async def get_user_movies(
        self,
        user: CurrentUser,
        *,
        status: WatchStatus | None = None,
        favorite: bool | None = None,
    ) -> list[UserMovie]:
        return await self._store.list_by_user(user.id, status=status, favorite=favorite)

    async def get_user_movie(self, user: CurrentUser, title: str) -> UserMovie:
        """Return the caller's first link whose title contains ``title``."""

        link = await self._store.find_by_title(user.id, title)
        if link is None:
            raise NotInAnyList()
        return link

    async def update_status(
        self, user: CurrentUser, title: str, status: WatchStatus | None
    ) -> UserMovie | None:
        """Set or clear the list status; returns ``None`` when the link is removed.

        Clearing the status removes the whole link, favorite flag and rating
        included.
        """

        movie = await self._resolver.resolve(title)
        link = await self._store.get(user.id, movie.id)

        if status is None:
            if link is None:
                raise NotInAnyList("You already don't have this movie in any list.")
            await self._store.delete(link)
            return None

        if link is not None and link.status == status:
            raise NoOpStatusChange(f"Movie status already {status.value}")

        if link is None:
            link = UserMovie(
                user_id=user.id,
                movie=movie,
                is_favorite=False,
                added_at=date.today(),
            )
        return await self._store.save(link.model_copy(update={"status": status}))

    async def update_favorite(
        self, user: CurrentUser, title: str, is_favorite: bool
    ) -> UserMovie | None:
        """Mark or unmark a favorite; marking twice is accepted."""

        movie = await self._resolver.resolve(title)
        link = await self._store.get(user.id, movie.id)

        if not is_favorite:
            if link is None:
                raise NotInAnyList("You already don't have this movie in favorites.")
            link = link.model_copy(update={"is_favorite": False})
            if link.is_empty():
                await self._store.delete(link)
                return None
            return await self._store.save(link)

        if link is None:
            link = UserMovie(
                user_id=user.id,
                movie=movie,
                status=None,
                added_at=date.today(),
            )
        return await self._store.save(link.model_copy(update={"is_favorite": True}))

    async def update_rate(self, user: CurrentUser, title: str, rate: float) -> UserMovie:
        """Set the personal rating on a link that is in a list."""

        movie = await self._resolver.resolve(title)
        link = await self._store.get(user.id, movie.id)
        if link is None:
            raise NotInAnyList()
        if not MIN_RATING <= rate <= MAX_RATING:
            raise InvalidRating()
        if link.status is None:
            raise NotRateable()
        return await self._store.save(link.model_copy(update={"user_rating": rate}))
