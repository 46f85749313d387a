"""Utility helpers for the MovieTrack service."""

from __future__ import annotations

import re
from typing import Any, Hashable, Iterable, TypeVar

T = TypeVar("T", bound=Hashable)

MISSING_VALUES = {"", "n/a", "none", "null"}
LIKE_ESCAPE_RE = re.compile(r"([\\%_])")


def clean_text(value: Any) -> str | None:
    """Return a stripped string, treating provider placeholders as missing."""

    if value is None:
        return None
    text = str(value).strip()
    if text.lower() in MISSING_VALUES:
        return None
    return text


def parse_year(value: Any) -> int | None:
    """Return the year encoded in the first four characters of ``value``."""

    text = clean_text(value)
    if not text or len(text) < 4:
        return None
    try:
        return int(text[:4])
    except ValueError:
        return None


def parse_rating(value: Any) -> float | None:
    """Best-effort float parse; unparseable values yield ``None``."""

    text = clean_text(value)
    if text is None:
        return None
    try:
        return float(text)
    except ValueError:
        return None


def unique(values: Iterable[T]) -> list[T]:
    """Drop repeated values, keeping the first occurrence."""

    return list(dict.fromkeys(values))


def escape_like(value: str) -> str:
    """Escape LIKE wildcards so ``value`` matches literally (escape char ``\\``)."""

    return LIKE_ESCAPE_RE.sub(r"\\\1", value)
