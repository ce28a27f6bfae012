"""Translate browse, search and detail requests into TMDB REST calls.

Every builder is a pure function: the same input (including the explicit
``now`` for date-bounded categories) always produces an equal
:class:`ResolvedRequest`. Nothing here performs I/O.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from .date_windows import (
    DateWindow,
    airing_today_window,
    now_playing_window,
    on_the_air_window,
    upcoming_window,
)
from .genres import MediaKind, resolve_genre
from .models import Category, CategoryRequest, FilteredDiscover, TextSearch

logger = logging.getLogger(__name__)

POPULARITY_DESC = "popularity.desc"
VOTE_AVERAGE_DESC = "vote_average.desc"

# Minimum vote counts keep rating-sorted and genre-filtered lists free of
# titles with only a handful of votes.
TOP_RATED_VOTE_FLOOR: dict[str, int] = {"movie": 300, "tv": 100}
TRENDING_VOTE_FLOOR: dict[str, int] = {"movie": 100, "tv": 50}

DETAIL_APPENDS = "credits,videos,similar,reviews,watch/providers"
PERSON_APPENDS = "movie_credits,tv_credits"
DETAIL_SECTIONS: tuple[str, ...] = (
    "credits",
    "videos",
    "similar",
    "reviews",
    "watch/providers",
)


@dataclass(frozen=True, slots=True)
class ResolvedRequest:
    """Endpoint path and query parameters for a single TMDB GET."""

    path: str
    params: dict[str, str | int] = field(default_factory=dict)


def _clean(params: dict[str, Any]) -> dict[str, str | int]:
    return {key: value for key, value in params.items() if value is not None}


def _date_params(media_kind: MediaKind, window: DateWindow) -> dict[str, Any]:
    prefix = "primary_release_date" if media_kind == "movie" else "air_date"
    return {f"{prefix}.gte": window.start, f"{prefix}.lte": window.end}


def _window_for(category: Category, now: datetime) -> DateWindow | None:
    if category == "now_playing":
        return now_playing_window(now)
    if category == "upcoming":
        return upcoming_window(now)
    if category == "airing_today":
        return airing_today_window(now)
    if category == "on_the_air":
        return on_the_air_window(now)
    return None


def build_category_request(request: CategoryRequest, now: datetime) -> ResolvedRequest:
    """Return the list or discover call that serves ``request``.

    Without a resolvable genre the provider's curated list endpoint is used.
    With one, the same slice is reproduced through ``/discover`` so the genre
    filter can be applied.
    """

    media_kind = request.media_kind
    genre_id = resolve_genre(media_kind, request.genre_filter)
    if request.genre_filter and genre_id is None:
        logger.debug(
            "Unknown %s genre %r, falling back to the unfiltered %s list",
            media_kind,
            request.genre_filter,
            request.category,
        )

    if genre_id is None:
        if request.category == "trending":
            path = f"/trending/{media_kind}/{request.time_window}"
        else:
            path = f"/{media_kind}/{request.category}"
        return ResolvedRequest(path=path, params={"page": request.page})

    params: dict[str, Any] = {
        "page": request.page,
        "with_genres": genre_id,
        "sort_by": POPULARITY_DESC,
    }
    if request.category == "top_rated":
        params["sort_by"] = VOTE_AVERAGE_DESC
        params["vote_count.gte"] = TOP_RATED_VOTE_FLOOR[media_kind]
    elif request.category == "trending":
        params["vote_count.gte"] = TRENDING_VOTE_FLOOR[media_kind]
    else:
        window = _window_for(request.category, now)
        if window is not None:
            params.update(_date_params(media_kind, window))

    return ResolvedRequest(path=f"/discover/{media_kind}", params=_clean(params))


def build_search_request(search: TextSearch | FilteredDiscover) -> ResolvedRequest:
    """Return the text search or discover call for a search screen request."""

    media_kind = search.media_kind
    if isinstance(search, TextSearch):
        year_key = "year" if media_kind == "movie" else "first_air_date_year"
        params: dict[str, Any] = {
            "query": search.query,
            "page": search.page,
            year_key: search.year,
        }
        return ResolvedRequest(path=f"/search/{media_kind}", params=_clean(params))

    year_key = "primary_release_year" if media_kind == "movie" else "first_air_date_year"
    with_genres = ",".join(str(genre_id) for genre_id in sorted(search.genre_ids))
    params = {
        "page": search.page,
        "with_genres": with_genres or None,
        year_key: search.year,
        "sort_by": search.sort_by,
    }
    return ResolvedRequest(path=f"/discover/{media_kind}", params=_clean(params))


def build_details_request(media_kind: MediaKind, item_id: int | str) -> ResolvedRequest:
    return ResolvedRequest(
        path=f"/{media_kind}/{item_id}",
        params={"append_to_response": DETAIL_APPENDS},
    )


def build_section_request(
    media_kind: MediaKind, item_id: int | str, section: str
) -> ResolvedRequest:
    """Return the call for one sub-resource of a movie or show."""

    normalized = section.strip("/")
    if normalized not in DETAIL_SECTIONS:
        raise ValueError(f"Unsupported detail section {section!r}")
    return ResolvedRequest(path=f"/{media_kind}/{item_id}/{normalized}")


def build_season_request(tv_id: int | str, season_number: int) -> ResolvedRequest:
    return ResolvedRequest(path=f"/tv/{tv_id}/season/{season_number}")


def build_episode_request(
    tv_id: int | str, season_number: int, episode_number: int
) -> ResolvedRequest:
    return ResolvedRequest(
        path=f"/tv/{tv_id}/season/{season_number}/episode/{episode_number}"
    )


def build_person_request(person_id: int | str) -> ResolvedRequest:
    return ResolvedRequest(
        path=f"/person/{person_id}",
        params={"append_to_response": PERSON_APPENDS},
    )


def build_genre_list_request(media_kind: MediaKind) -> ResolvedRequest:
    return ResolvedRequest(path=f"/genre/{media_kind}/list")


def build_configuration_request() -> ResolvedRequest:
    return ResolvedRequest(path="/configuration")
