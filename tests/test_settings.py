"""Configuration settings behaviour tests."""

from __future__ import annotations

import pytest

from app.config import Settings


def test_search_defaults() -> None:
    """Search tuning should default to the documented page size and thresholds."""

    settings = Settings(_env_file=None)

    assert settings.search_page_size == 20
    assert settings.search_local_threshold == 10
    assert settings.suggest_local_threshold == 5
    assert settings.external_fanout == 5
    assert settings.similarity_threshold == pytest.approx(0.3)
    assert settings.user_header == "X-User-Id"


def test_overrides_are_read_from_aliases() -> None:
    settings = Settings(
        _env_file=None,
        EXTERNAL_FANOUT=2,
        OMDB_TIMEOUT=3.5,
        OMDB_API_KEY="secret",
    )

    assert settings.external_fanout == 2
    assert settings.omdb_timeout_seconds == pytest.approx(3.5)
    assert settings.omdb_api_key == "secret"


def test_fanout_must_be_positive() -> None:
    with pytest.raises(ValueError):
        Settings(_env_file=None, EXTERNAL_FANOUT=0)


def test_user_header_is_stripped_and_required() -> None:
    """The identity header name is normalised and may not be blank."""

    assert Settings(_env_file=None, USER_HEADER="  X-Account  ").user_header == "X-Account"
    with pytest.raises(ValueError, match="USER_HEADER must not be blank"):
        Settings(_env_file=None, USER_HEADER="   ")


def test_similarity_threshold_has_a_floor() -> None:
    assert Settings(_env_file=None, SIMILARITY_THRESHOLD=0.25).similarity_threshold == 0.25
    with pytest.raises(ValueError):
        Settings(_env_file=None, SIMILARITY_THRESHOLD=0.1)
