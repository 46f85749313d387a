"""Tests for the catalog store's ranked search."""

from __future__ import annotations

import pytest

from app import ranking
from app.database import Database
from app.services.catalog_store import CatalogStore

CATALOG = [
    ("tt0133093", "The Matrix", "Action, Sci-Fi", "A hacker learns the truth."),
    ("tt0234215", "The Matrix Reloaded", "Action, Sci-Fi", None),
    ("tt0113277", "Heat", "Crime, Drama", "A detective hunts a crew of thieves."),
    ("tt1049413", "Up", "Animation", "An old man flies his house away."),
    ("tt0111161", "The Shawshank Redemption", "Drama", "Two imprisoned men bond."),
    ("tt0078748", "Alien", "Horror, Sci-Fi", None),
    ("tt0090605", "Aliens", "Action, Horror", "Ripley returns to LV-426."),
    ("tt0099999", "100% Wolf", None, None),
]


async def seeded_store(database_url: str) -> tuple[Database, CatalogStore]:
    database = Database(database_url)
    await database.create_all()
    store = CatalogStore(database.session_factory)
    for external_id, title, genre, overview in CATALOG:
        await store.insert(
            external_id=external_id, title=title, genre=genre, overview=overview
        )
    return database, store


@pytest.mark.anyio("asyncio")
@pytest.mark.parametrize(
    "query",
    ["matrix", "The Matrix", "Matrx", "heat", "detective", "sci-fi", "alien", "up", "100%", "wolf x"],
)
async def test_search_matches_ranking_over_the_whole_catalog(
    database_url: str, query: str
) -> None:
    """Filtering in SQL never drops a row the ranking would keep."""

    database, store = await seeded_store(database_url)
    everything = sorted(await store.list_all(), key=lambda movie: movie.id)

    expected = ranking.rank(everything, query, limit=20, threshold=0.3)

    assert [movie.id for movie in await store.search(query)] == [
        movie.id for movie in expected
    ]

    await database.dispose()


@pytest.mark.anyio("asyncio")
async def test_search_tolerates_typos(database_url: str) -> None:
    database, store = await seeded_store(database_url)

    titles = [movie.title for movie in await store.search("Matrx")]

    assert titles[0] == "The Matrix"
    assert "Heat" not in titles

    await database.dispose()


@pytest.mark.anyio("asyncio")
async def test_search_treats_wildcards_literally(database_url: str) -> None:
    database, store = await seeded_store(database_url)

    assert [movie.title for movie in await store.search("100%")] == ["100% Wolf"]
    assert await store.search("   ") == []

    await database.dispose()
