"""Hybrid ranking used by the local catalog search.

A row matches when its title starts with the query, is trigram-similar to it
or contains every query term in its title/genre/overview document. Matching
rows are ordered by ``boost + max(similarity, text_rank)``.
"""

from __future__ import annotations

import re
from typing import Iterable, Protocol, TypeVar

WORD_RE = re.compile(r"[0-9a-z]+")

EXACT_BOOST = 3.0
PREFIX_BOOST = 2.0

# Field weights mirror the default tsvector weights for A, B and D labels.
TITLE_WEIGHT = 1.0
GENRE_WEIGHT = 0.4
OVERVIEW_WEIGHT = 0.1


class Rankable(Protocol):
    title: str
    genre: str | None
    overview: str | None


R = TypeVar("R", bound=Rankable)


def _words(text: str | None) -> list[str]:
    return WORD_RE.findall((text or "").lower())


def trigrams(text: str | None) -> set[str]:
    """Return the padded word trigrams of ``text``."""

    grams: set[str] = set()
    for word in _words(text):
        padded = f"  {word} "
        grams.update(padded[i : i + 3] for i in range(len(padded) - 2))
    return grams


def trigram_similarity(left: str | None, right: str | None) -> float:
    """Return the share of trigrams the two strings have in common."""

    left_grams = trigrams(left)
    right_grams = trigrams(right)
    if not left_grams or not right_grams:
        return 0.0
    shared = len(left_grams & right_grams)
    return shared / len(left_grams | right_grams)


def text_rank(record: Rankable, query: str) -> float:
    """Return a full-text relevance in ``[0, 1)``; zero unless every term matches."""

    terms = list(dict.fromkeys(_words(query)))
    if not terms:
        return 0.0

    fields = (
        (set(_words(record.title)), TITLE_WEIGHT),
        (set(_words(record.genre)), GENRE_WEIGHT),
        (set(_words(record.overview)), OVERVIEW_WEIGHT),
    )
    total = 0.0
    for term in terms:
        weight = max((w for words, w in fields if term in words), default=0.0)
        if not weight:
            return 0.0
        total += weight
    coverage = total / len(terms)
    return coverage / (coverage + 1.0)


def candidate_fragments(query: str) -> list[str]:
    """Return lowercase substrings a row must contain to be worth scoring.

    Any row whose fields contain none of these shares at most word-initial
    trigrams with the query, which caps its similarity at 0.25, and it cannot
    match every query term.
    """

    fragments: list[str] = []
    for word in _words(query):
        fragments.append(word)
        if len(word) > 2:
            fragments.extend(word[i : i + 3] for i in range(len(word) - 2))
            fragments.extend((word[:2], word[-2:]))
    return list(dict.fromkeys(fragments))


def match_boost(title: str, query: str) -> float:
    lowered_title = title.lower()
    lowered_query = query.lower()
    if lowered_title == lowered_query:
        return EXACT_BOOST
    if lowered_title.startswith(lowered_query):
        return PREFIX_BOOST
    return 0.0


def score(record: Rankable, query: str, threshold: float) -> float | None:
    """Return the hybrid score for ``record`` or ``None`` when it does not match."""

    boost = match_boost(record.title, query)
    similarity = trigram_similarity(record.title, query)
    relevance = text_rank(record, query)
    if not boost and similarity <= threshold and not relevance:
        return None
    return boost + max(similarity, relevance)


def rank(
    records: Iterable[R],
    query: str,
    *,
    limit: int,
    threshold: float = 0.3,
) -> list[R]:
    """Return the matching records best first, ties kept in input order."""

    query = query.strip()
    if not query:
        return []

    scored: list[tuple[float, R]] = []
    for record in records:
        value = score(record, query, threshold)
        if value is not None:
            scored.append((value, record))
    scored.sort(key=lambda entry: entry[0], reverse=True)
    return [record for _, record in scored[:limit]]
