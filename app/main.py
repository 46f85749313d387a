"""Entry point for the FastAPI-powered movie tracking service."""

from __future__ import annotations

import logging
from contextlib import AsyncExitStack, asynccontextmanager

import httpx
from fastapi import FastAPI, HTTPException, Query, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .auth import CurrentUser
from .config import settings
from .database import Database
from .errors import (
    InvalidRating,
    MetadataProviderError,
    MovieNotFound,
    MovieTrackerError,
    NoOpStatusChange,
    NotInAnyList,
    NotRateable,
    Unauthorized,
)
from .models import (
    FavoriteChange,
    Movie,
    RatingChange,
    StatusChange,
    UserMovie,
    WatchStatus,
)
from .services.catalog_store import CatalogStore
from .services.omdb import OmdbClient
from .services.resolver import MovieResolver
from .services.user_movie_store import UserMovieStore
from .services.user_movies import UserMovieEngine

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

ERROR_STATUS_CODES: dict[type[MovieTrackerError], int] = {
    MovieNotFound: 404,
    NotInAnyList: 404,
    NoOpStatusChange: 409,
    NotRateable: 409,
    InvalidRating: 400,
    Unauthorized: 401,
    MetadataProviderError: 503,
}

app: FastAPI


@asynccontextmanager
async def lifespan(fastapi_app: FastAPI):
    exit_stack = AsyncExitStack()
    omdb_http_client = await exit_stack.enter_async_context(
        httpx.AsyncClient(
            base_url=str(settings.omdb_api_url),
            timeout=httpx.Timeout(settings.omdb_timeout_seconds, connect=5.0),
        )
    )
    database = Database(settings.database_url)
    await database.create_all()

    provider: OmdbClient | None = None
    if settings.omdb_api_key:
        provider = OmdbClient(settings, omdb_http_client)
    else:
        logger.warning("OMDB_API_KEY is not set; only the local catalog is searched")

    catalog_store = CatalogStore(
        database.session_factory, similarity_threshold=settings.similarity_threshold
    )
    resolver = MovieResolver(settings, catalog_store, provider)
    engine = UserMovieEngine(resolver, UserMovieStore(database.session_factory))

    fastapi_app.state.resolver = resolver
    fastapi_app.state.user_movie_engine = engine
    fastapi_app.state.database = database

    try:
        yield
    finally:  # pragma: no cover - teardown path exercised at runtime
        await database.dispose()
        await exit_stack.aclose()


def create_app() -> FastAPI:
    fastapi_app = FastAPI(
        title=settings.app_name,
        description="Track watch status, favorites and ratings for movies",
        version="1.0.0",
        lifespan=lifespan,
    )

    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "PATCH"],
        allow_headers=["*"],
    )

    register_routes(fastapi_app)
    return fastapi_app


def get_resolver(app: FastAPI) -> MovieResolver:
    resolver = getattr(app.state, "resolver", None)
    if not isinstance(resolver, MovieResolver):
        raise RuntimeError("Movie resolver not initialised")
    return resolver


def get_engine(app: FastAPI) -> UserMovieEngine:
    engine = getattr(app.state, "user_movie_engine", None)
    if not isinstance(engine, UserMovieEngine):
        raise RuntimeError("User movie engine not initialised")
    return engine


def current_user(request: Request) -> CurrentUser:
    return CurrentUser.from_headers(request.headers, settings.user_header)


def _link_response(link: UserMovie | None) -> Response:
    if link is None:
        return Response(status_code=204)
    return JSONResponse(link.model_dump(mode="json", by_alias=True))


def register_routes(fastapi_app: FastAPI) -> None:
    @fastapi_app.exception_handler(MovieTrackerError)
    async def movie_tracker_error_handler(
        _: Request, exc: MovieTrackerError
    ) -> JSONResponse:
        status_code = next(
            (
                code
                for error_type, code in ERROR_STATUS_CODES.items()
                if isinstance(exc, error_type)
            ),
            500,
        )
        if status_code >= 500:
            logger.warning("Request failed: %s", exc)
        return JSONResponse(
            {"error": exc.code, "detail": exc.message}, status_code=status_code
        )

    @fastapi_app.get("/healthz")
    async def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    @fastapi_app.get("/movies", response_model=list[Movie])
    async def list_movies() -> list[Movie]:
        return await get_resolver(fastapi_app).list_all()

    @fastapi_app.get("/movies/search", response_model=list[Movie])
    async def search_movies(q: str = Query(default="", max_length=255)) -> list[Movie]:
        return await get_resolver(fastapi_app).search(q)

    @fastapi_app.get("/movies/search/suggest")
    async def suggest_titles(q: str = Query(default="", max_length=255)) -> list[str]:
        return await get_resolver(fastapi_app).suggest(q)

    @fastapi_app.get("/user-movies", response_model=list[UserMovie])
    async def list_user_movies(
        request: Request,
        status: str | None = None,
        favorite: bool | None = None,
    ) -> list[UserMovie]:
        user = current_user(request)
        watch_status: WatchStatus | None = None
        if status:
            try:
                watch_status = WatchStatus(status)
            except ValueError as exc:
                raise HTTPException(
                    status_code=400, detail=f"Invalid parameter value: status={status}"
                ) from exc
        return await get_engine(fastapi_app).get_user_movies(
            user, status=watch_status, favorite=favorite
        )

    @fastapi_app.get("/user-movies/lookup", response_model=UserMovie)
    async def lookup_user_movie(
        request: Request, title: str = Query(min_length=1, max_length=255)
    ) -> UserMovie:
        user = current_user(request)
        return await get_engine(fastapi_app).get_user_movie(user, title)

    @fastapi_app.patch("/user-movies/status")
    async def update_status(request: Request, body: StatusChange) -> Response:
        user = current_user(request)
        link = await get_engine(fastapi_app).update_status(
            user, body.title, body.status
        )
        return _link_response(link)

    @fastapi_app.patch("/user-movies/favorite")
    async def update_favorite(request: Request, body: FavoriteChange) -> Response:
        user = current_user(request)
        link = await get_engine(fastapi_app).update_favorite(
            user, body.title, body.is_favorite
        )
        return _link_response(link)

    @fastapi_app.patch("/user-movies/user-rate")
    async def update_rate(request: Request, body: RatingChange) -> Response:
        user = current_user(request)
        link = await get_engine(fastapi_app).update_rate(user, body.title, body.rate)
        return _link_response(link)


app = create_app()
