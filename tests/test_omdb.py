"""Tests for the OMDb metadata client."""

from __future__ import annotations

from typing import Any, Callable, cast

import httpx
import pytest

from app.config import Settings
from app.errors import MetadataProviderError
from app.services.omdb import OmdbClient

INCEPTION = {
    "Title": "Inception",
    "Year": "2010",
    "Runtime": "148 min",
    "Genre": "Action, Adventure, Sci-Fi",
    "Plot": "A thief who steals corporate secrets through dream-sharing.",
    "Poster": "https://example.com/inception.jpg",
    "imdbRating": "8.8",
    "imdbID": "tt1375666",
    "Type": "movie",
    "Response": "True",
}


def build_settings(**overrides: Any) -> Settings:
    """Return a settings object with defaults suitable for tests."""

    base = {"OMDB_API_KEY": "test-key"}
    base.update(overrides)
    return Settings(_env_file=None, **base)  # type: ignore[arg-type]


def mock_client(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        transport=httpx.MockTransport(handler), base_url="https://omdb.example.com"
    )


@pytest.mark.anyio("asyncio")
async def test_fetch_by_title_normalises_payload() -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json=INCEPTION)

    async with mock_client(handler) as http_client:
        client = OmdbClient(build_settings(), http_client)
        result = await client.fetch_by_title("  Inception ")

    assert result is not None
    assert result.imdb_id == "tt1375666"
    assert result.year == 2010
    assert result.rating == pytest.approx(8.8)
    assert result.to_catalog_fields()["overview"].startswith("A thief")
    assert result.to_catalog_fields()["media_type"] == "movie"
    assert requests[0].url.params["t"] == "Inception"
    assert requests[0].url.params["apikey"] == "test-key"


@pytest.mark.anyio("asyncio")
async def test_fetch_by_title_tolerates_unparseable_year_and_rating() -> None:
    payload = {**INCEPTION, "Year": "N/A", "imdbRating": "N/A", "Poster": "N/A"}

    async with mock_client(lambda _: httpx.Response(200, json=payload)) as http_client:
        result = await OmdbClient(build_settings(), http_client).fetch_by_title("Inception")

    assert result is not None
    assert result.year is None
    assert result.rating is None
    assert result.poster is None


@pytest.mark.anyio("asyncio")
async def test_fetch_by_title_returns_none_without_identifier() -> None:
    payload = {"Response": "False", "Error": "Movie not found!"}

    async with mock_client(lambda _: httpx.Response(200, json=payload)) as http_client:
        result = await OmdbClient(build_settings(), http_client).fetch_by_title("Nope")

    assert result is None


@pytest.mark.anyio("asyncio")
async def test_search_titles_skips_malformed_entries() -> None:
    payload = {
        "Search": [
            {"Title": "The Matrix", "Year": "1999"},
            {"Year": "2003"},
            "unexpected",
            {"Title": "   "},
            {"Title": "The Matrix Reloaded"},
        ],
        "Response": "True",
    }
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.url.params["s"])
        return httpx.Response(200, json=payload)

    async with mock_client(handler) as http_client:
        titles = await OmdbClient(build_settings(), http_client).search_titles("Matrix")

    assert titles == ["The Matrix", "The Matrix Reloaded"]
    assert seen == ["Matrix"]


@pytest.mark.anyio("asyncio")
async def test_search_titles_without_results_is_empty() -> None:
    payload = {"Response": "False", "Error": "Too many results."}

    async with mock_client(lambda _: httpx.Response(200, json=payload)) as http_client:
        titles = await OmdbClient(build_settings(), http_client).search_titles("a")

    assert titles == []


@pytest.mark.anyio("asyncio")
async def test_server_errors_raise_provider_error() -> None:
    async with mock_client(lambda _: httpx.Response(503, text="down")) as http_client:
        client = OmdbClient(build_settings(), http_client)
        with pytest.raises(MetadataProviderError, match="HTTP 503"):
            await client.fetch_by_title("Inception")


@pytest.mark.anyio("asyncio")
async def test_timeouts_raise_provider_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    async with mock_client(handler) as http_client:
        client = OmdbClient(build_settings(), http_client)
        with pytest.raises(MetadataProviderError, match="timed out"):
            await client.search_titles("Matrix")


@pytest.mark.anyio("asyncio")
async def test_invalid_json_raises_provider_error() -> None:
    async with mock_client(lambda _: httpx.Response(200, text="<html>")) as http_client:
        client = OmdbClient(build_settings(), http_client)
        with pytest.raises(MetadataProviderError, match="invalid payload"):
            await client.fetch_by_title("Inception")


def test_client_requires_api_key() -> None:
    settings = Settings(_env_file=None, OMDB_API_KEY=None)
    with pytest.raises(ValueError, match="OMDb API key is required"):
        OmdbClient(settings, cast(httpx.AsyncClient, object()))
