"""Pydantic models describing browse and search requests."""

from __future__ import annotations

from typing import Annotated, Any, Iterable, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .genres import MediaKind

Category = Literal[
    "trending",
    "popular",
    "now_playing",
    "upcoming",
    "top_rated",
    "airing_today",
    "on_the_air",
]
TimeWindow = Literal["day", "week"]

MOVIE_CATEGORIES: tuple[Category, ...] = (
    "trending",
    "popular",
    "now_playing",
    "upcoming",
    "top_rated",
)
TV_CATEGORIES: tuple[Category, ...] = (
    "trending",
    "popular",
    "airing_today",
    "on_the_air",
    "top_rated",
)


def categories_for(media_kind: MediaKind) -> tuple[Category, ...]:
    """Return the categories offered for a media kind, in home-screen order."""

    return MOVIE_CATEGORIES if media_kind == "movie" else TV_CATEGORIES


class CategoryRequest(BaseModel):
    """A page of one catalog slice, optionally narrowed to a genre."""

    model_config = ConfigDict(frozen=True)

    category: Category
    media_kind: MediaKind
    page: int = Field(default=1, ge=1)
    genre_filter: str | None = None
    time_window: TimeWindow = "day"

    @model_validator(mode="after")
    def _category_matches_media_kind(self) -> "CategoryRequest":
        if self.category not in categories_for(self.media_kind):
            raise ValueError(
                f"Category {self.category!r} is not available for {self.media_kind}"
            )
        return self


class TextSearch(BaseModel):
    """Free-text title search."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["text"] = "text"
    media_kind: MediaKind = "movie"
    query: str = Field(min_length=1)
    page: int = Field(default=1, ge=1)
    year: int | None = Field(default=None, ge=1000, le=9999)

    @field_validator("query")
    @classmethod
    def _query_not_blank(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("Search query must not be blank")
        return stripped


class FilteredDiscover(BaseModel):
    """Structured catalog filter used when no search text is given."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["discover"] = "discover"
    media_kind: MediaKind = "movie"
    page: int = Field(default=1, ge=1)
    genre_ids: frozenset[int] = frozenset()
    year: int | None = Field(default=None, ge=1000, le=9999)
    sort_by: str | None = None


SearchRequest = Annotated[
    Union[TextSearch, FilteredDiscover], Field(discriminator="kind")
]


def _parse_genre_ids(value: str | Iterable[Any] | None) -> frozenset[int]:
    if value is None:
        return frozenset()
    if isinstance(value, str):
        raw_values: Iterable[Any] = value.split(",")
    else:
        raw_values = value
    cleaned: set[int] = set()
    for entry in raw_values:
        text = str(entry).strip()
        if not text:
            continue
        try:
            cleaned.add(int(text))
        except ValueError as exc:
            raise ValueError(f"Invalid genre id {text!r}") from exc
    return frozenset(cleaned)


def search_request_from_params(
    media_kind: MediaKind,
    *,
    query: str | None = None,
    page: int = 1,
    genres: str | Iterable[Any] | None = None,
    year: int | None = None,
    sort_by: str | None = None,
) -> TextSearch | FilteredDiscover:
    """Resolve loose search parameters into the matching request variant.

    A non-blank ``query`` selects a text search; genre and sort filters are
    then dropped because TMDB ignores them for text searches.
    """

    if query and query.strip():
        return TextSearch(media_kind=media_kind, query=query, page=page, year=year)
    return FilteredDiscover(
        media_kind=media_kind,
        page=page,
        genre_ids=_parse_genre_ids(genres),
        year=year,
        sort_by=sort_by or None,
    )


class CategoryResult(BaseModel):
    """Outcome of fetching one category for the home feed."""

    category: Category
    data: dict[str, Any] | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class HomeFeed(BaseModel):
    """Every category of one media kind fetched side by side."""

    media_kind: MediaKind
    genre_filter: str | None = None
    results: list[CategoryResult] = Field(default_factory=list)

    def get(self, category: Category) -> CategoryResult | None:
        for result in self.results:
            if result.category == category:
                return result
        return None
