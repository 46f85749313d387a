"""Error types raised by the catalog resolver and the user movie engine."""

from __future__ import annotations


class MovieTrackerError(Exception):
    """Base class for errors the HTTP boundary translates into responses."""

    code = "error"
    default_message = "Request could not be completed."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class MovieNotFound(MovieTrackerError):
    code = "movie_not_found"
    default_message = "Movie not found."

    def __init__(self, title: str | None = None):
        message = f"Movie not found: {title}" if title else None
        super().__init__(message)
        self.title = title


class NotInAnyList(MovieTrackerError):
    code = "not_in_any_list"
    default_message = "You don't have this movie in any list."


class NoOpStatusChange(MovieTrackerError):
    code = "status_unchanged"
    default_message = "Movie status is already set to that value."


class InvalidRating(MovieTrackerError):
    code = "invalid_rating"
    default_message = "Rate must be at most 10.0 and cannot be negative."


class NotRateable(MovieTrackerError):
    code = "not_rateable"
    default_message = "Cannot rate a movie that doesn't belong to any list."


class Unauthorized(MovieTrackerError):
    code = "unauthorized"
    default_message = "Authentication required."


class MetadataProviderError(MovieTrackerError):
    """The external metadata provider failed; callers may retry later."""

    code = "provider_unavailable"
    default_message = "Movie metadata provider is unavailable."


class CatalogConflict(MovieTrackerError):
    """A catalog insert collided with an existing external id.

    Only ever raised by the catalog store; the resolver recovers from it.
    """

    code = "catalog_conflict"
    default_message = "Catalog record already exists."

    def __init__(self, external_id: str | None):
        super().__init__(f"Catalog record already exists for {external_id}")
        self.external_id = external_id
