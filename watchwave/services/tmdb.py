"""Client for The Movie Database (TMDB) REST API."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Iterable

import httpx

from ..config import Settings
from ..genres import MediaKind
from ..models import (
    Category,
    CategoryRequest,
    CategoryResult,
    FilteredDiscover,
    HomeFeed,
    TextSearch,
    TimeWindow,
    categories_for,
)
from ..query_builder import (
    ResolvedRequest,
    build_category_request,
    build_configuration_request,
    build_details_request,
    build_episode_request,
    build_genre_list_request,
    build_person_request,
    build_search_request,
    build_season_request,
    build_section_request,
)

logger = logging.getLogger(__name__)

IMAGE_BASE_URL = "https://image.tmdb.org/t/p"
POSTER_SIZE = "w500"
BACKDROP_SIZE = "w1280"


class TMDBRequestError(RuntimeError):
    """Raised when a TMDB call fails at the transport or HTTP level."""

    def __init__(self, path: str, message: str, status_code: int | None = None):
        super().__init__(f"TMDB request to {path} failed: {message}")
        self.path = path
        self.status_code = status_code


def image_url(
    path: str | None, size: str = POSTER_SIZE, base_url: str = IMAGE_BASE_URL
) -> str | None:
    """Return the CDN URL for an image path, or ``None`` if there is no image."""

    if not path or not path.strip():
        return None
    if path.startswith("http"):
        return path
    if not path.startswith("/"):
        path = f"/{path}"
    return f"{base_url.rstrip('/')}/{size}{path}"


def backdrop_url(
    path: str | None, size: str = BACKDROP_SIZE, base_url: str = IMAGE_BASE_URL
) -> str | None:
    return image_url(path, size, base_url)


class TMDBClient:
    """Issue resolved requests against TMDB and hand back the raw JSON."""

    def __init__(self, settings: Settings, http_client: httpx.AsyncClient):
        if not settings.tmdb_api_key:
            raise ValueError("TMDB API key is required when initialising TMDBClient")
        self._settings = settings
        self._client = http_client

    @property
    def settings(self) -> Settings:
        return self._settings

    def image_url(self, path: str | None, size: str = POSTER_SIZE) -> str | None:
        """Build an image URL against the configured ``TMDB_IMAGE_URL``."""

        return image_url(path, size, self._settings.image_base_url)

    def backdrop_url(self, path: str | None, size: str = BACKDROP_SIZE) -> str | None:
        return backdrop_url(path, size, self._settings.image_base_url)

    async def fetch(self, request: ResolvedRequest) -> dict[str, Any]:
        """Perform the GET described by ``request`` and return the parsed body."""

        params: dict[str, str | int] = dict(request.params)
        params["api_key"] = self._settings.tmdb_api_key or ""
        try:
            response = await self._client.get(request.path, params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            logger.warning("TMDB request %s failed with status %s", request.path, status)
            raise TMDBRequestError(request.path, f"HTTP {status}", status) from exc
        except httpx.HTTPError as exc:
            logger.warning(
                "TMDB request %s failed: %s", request.path, exc.__class__.__name__
            )
            raise TMDBRequestError(request.path, exc.__class__.__name__) from exc

        try:
            return response.json()
        except ValueError as exc:
            logger.warning("TMDB returned a non-JSON body for %s", request.path)
            raise TMDBRequestError(
                request.path, "invalid JSON body", response.status_code
            ) from exc

    async def fetch_category(
        self, request: CategoryRequest, *, now: datetime | None = None
    ) -> dict[str, Any]:
        resolved = build_category_request(request, now or self._now())
        return await self.fetch(resolved)

    async def search(self, request: TextSearch | FilteredDiscover) -> dict[str, Any]:
        return await self.fetch(build_search_request(request))

    async def fetch_details(self, media_kind: MediaKind, item_id: int) -> dict[str, Any]:
        return await self.fetch(build_details_request(media_kind, item_id))

    async def fetch_section(
        self, media_kind: MediaKind, item_id: int, section: str
    ) -> dict[str, Any]:
        return await self.fetch(build_section_request(media_kind, item_id, section))

    async def fetch_season(self, tv_id: int, season_number: int) -> dict[str, Any]:
        return await self.fetch(build_season_request(tv_id, season_number))

    async def fetch_episode(
        self, tv_id: int, season_number: int, episode_number: int
    ) -> dict[str, Any]:
        return await self.fetch(
            build_episode_request(tv_id, season_number, episode_number)
        )

    async def fetch_person(self, person_id: int) -> dict[str, Any]:
        return await self.fetch(build_person_request(person_id))

    async def fetch_genres(self, media_kind: MediaKind) -> dict[str, Any]:
        return await self.fetch(build_genre_list_request(media_kind))

    async def fetch_configuration(self) -> dict[str, Any]:
        return await self.fetch(build_configuration_request())

    async def fetch_home(
        self,
        media_kind: MediaKind,
        *,
        genre_filter: str | None = None,
        time_window: TimeWindow | None = None,
        now: datetime | None = None,
    ) -> HomeFeed:
        """Fetch the first page of every category concurrently.

        Each category succeeds or fails on its own; a failed call is reported
        on its :class:`CategoryResult` and never hides the others.
        """

        moment = now or self._now()
        window = time_window or self._settings.trending_window
        categories = categories_for(media_kind)
        requests = [
            CategoryRequest(
                category=category,
                media_kind=media_kind,
                page=1,
                genre_filter=genre_filter,
                time_window=window,
            )
            for category in categories
        ]
        outcomes = await asyncio.gather(
            *(self.fetch_category(request, now=moment) for request in requests),
            return_exceptions=True,
        )
        results = [
            self._to_result(category, outcome)
            for category, outcome in zip(categories, outcomes)
        ]
        return HomeFeed(media_kind=media_kind, genre_filter=genre_filter, results=results)

    async def fetch_many_details(
        self, media_kind: MediaKind, item_ids: Iterable[int]
    ) -> list[dict[str, Any]]:
        """Fetch details for several titles, skipping the ones that fail."""

        ids = list(item_ids)
        outcomes = await asyncio.gather(
            *(self.fetch_details(media_kind, item_id) for item_id in ids),
            return_exceptions=True,
        )
        details: list[dict[str, Any]] = []
        for item_id, outcome in zip(ids, outcomes):
            if isinstance(outcome, TMDBRequestError):
                logger.info("Skipping %s %s: %s", media_kind, item_id, outcome)
                continue
            if isinstance(outcome, BaseException):
                raise outcome
            details.append(outcome)
        return details

    @staticmethod
    def _to_result(category: Category, outcome: Any) -> CategoryResult:
        if isinstance(outcome, TMDBRequestError):
            return CategoryResult(category=category, error=str(outcome))
        if isinstance(outcome, BaseException):
            raise outcome
        return CategoryResult(category=category, data=outcome)

    @staticmethod
    def _now() -> datetime:
        return datetime.now(timezone.utc)
