from __future__ import annotations

import pytest
from pydantic import TypeAdapter, ValidationError

from watchwave.models import (
    CategoryRequest,
    CategoryResult,
    FilteredDiscover,
    HomeFeed,
    SearchRequest,
    TextSearch,
    categories_for,
    search_request_from_params,
)


def test_category_request_defaults() -> None:
    request = CategoryRequest(category="popular", media_kind="movie")

    assert request.page == 1
    assert request.genre_filter is None
    assert request.time_window == "day"


def test_category_request_rejects_non_positive_page() -> None:
    with pytest.raises(ValidationError):
        CategoryRequest(category="popular", media_kind="movie", page=0)


@pytest.mark.parametrize(
    ("media_kind", "category"),
    [("tv", "now_playing"), ("tv", "upcoming"), ("movie", "airing_today"), ("movie", "on_the_air")],
)
def test_category_request_rejects_category_for_wrong_media_kind(
    media_kind: str, category: str
) -> None:
    with pytest.raises(ValidationError, match="not available"):
        CategoryRequest(category=category, media_kind=media_kind)


def test_category_request_is_immutable() -> None:
    request = CategoryRequest(category="popular", media_kind="tv")

    with pytest.raises(ValidationError):
        request.page = 2  # type: ignore[misc]


def test_categories_for_media_kind() -> None:
    assert categories_for("movie") == ("trending", "popular", "now_playing", "upcoming", "top_rated")
    assert categories_for("tv") == ("trending", "popular", "airing_today", "on_the_air", "top_rated")


def test_search_params_with_query_build_text_search() -> None:
    request = search_request_from_params(
        "movie", query="  dune ", page=2, genres="28,35", year=2021, sort_by="popularity.desc"
    )

    assert request == TextSearch(media_kind="movie", query="dune", page=2, year=2021)


def test_search_params_without_query_build_discover() -> None:
    request = search_request_from_params("tv", query="   ", genres="18, 80,,18", year=2020)

    assert isinstance(request, FilteredDiscover)
    assert request.genre_ids == frozenset({18, 80})
    assert request.year == 2020
    assert request.sort_by is None


def test_search_params_accept_iterable_genres() -> None:
    request = search_request_from_params("movie", genres=[28, "878"])

    assert isinstance(request, FilteredDiscover)
    assert request.genre_ids == frozenset({28, 878})


def test_search_params_reject_invalid_genre_ids() -> None:
    with pytest.raises(ValueError, match="Invalid genre id"):
        search_request_from_params("movie", genres="action")


def test_text_search_rejects_blank_query_and_bad_year() -> None:
    with pytest.raises(ValidationError):
        TextSearch(query="   ")
    with pytest.raises(ValidationError):
        TextSearch(query="dune", year=21)


def test_search_request_union_discriminates_on_kind() -> None:
    adapter = TypeAdapter(SearchRequest)

    text = adapter.validate_python({"kind": "text", "query": "alien"})
    discover = adapter.validate_python({"kind": "discover", "genre_ids": [27]})

    assert isinstance(text, TextSearch)
    assert isinstance(discover, FilteredDiscover)
    assert discover.genre_ids == frozenset({27})


def test_home_feed_lookup() -> None:
    feed = HomeFeed(
        media_kind="movie",
        results=[
            CategoryResult(category="popular", data={"results": []}),
            CategoryResult(category="upcoming", error="boom"),
        ],
    )

    assert feed.get("popular").ok  # type: ignore[union-attr]
    assert not feed.get("upcoming").ok  # type: ignore[union-attr]
    assert feed.get("top_rated") is None
