"""Genre lookup tables used by the category browser."""

from __future__ import annotations

from types import MappingProxyType
from typing import Literal, Mapping


MediaKind = Literal["movie", "tv"]


MOVIE_GENRES: Mapping[str, int] = MappingProxyType(
    {
        "action": 28,
        "comedy": 35,
        "drama": 18,
        "horror": 27,
        "romance": 10749,
        "sci-fi": 878,
        "thriller": 53,
    }
)

# TMDB folds several labels into combined TV genres, e.g. "Sci-Fi & Fantasy".
TV_GENRES: Mapping[str, int] = MappingProxyType(
    {
        "action": 10759,
        "comedy": 35,
        "drama": 18,
        "sci-fi": 10765,
        "fantasy": 10765,
        "crime": 80,
        "documentary": 99,
        "family": 10751,
        "kids": 10762,
        "mystery": 9648,
        "news": 10763,
        "reality": 10764,
        "soap": 10766,
        "talk": 10767,
        "war": 10768,
        "western": 37,
    }
)

_TABLES: Mapping[str, Mapping[str, int]] = MappingProxyType(
    {"movie": MOVIE_GENRES, "tv": TV_GENRES}
)


def resolve_genre(media_kind: MediaKind, key: str | None) -> int | None:
    """Return the provider genre id for ``key`` or ``None`` when unknown."""

    if not key:
        return None
    table = _TABLES.get(media_kind)
    if table is None:
        return None
    return table.get(key)


def genre_keys(media_kind: MediaKind) -> tuple[str, ...]:
    """Return the selectable genre keys for a media kind in display order."""

    table = _TABLES.get(media_kind)
    if table is None:
        return ()
    return tuple(table)
