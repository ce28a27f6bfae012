"""Entry point for the FastAPI-powered Watchwave backend."""

from __future__ import annotations

import logging
from contextlib import AsyncExitStack, asynccontextmanager
from typing import Any

import httpx
from fastapi import Body, FastAPI, HTTPException, Query, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from .config import settings
from .database import Database
from .genres import MediaKind, genre_keys
from .models import Category, CategoryRequest, TimeWindow, search_request_from_params
from .services.preferences import FLAG_DEFAULTS, PreferencesRepository
from .services.tmdb import TMDBClient, TMDBRequestError

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app: FastAPI


@asynccontextmanager
async def lifespan(fastapi_app: FastAPI):
    exit_stack = AsyncExitStack()
    tmdb_http_client = await exit_stack.enter_async_context(
        httpx.AsyncClient(
            base_url=str(settings.tmdb_api_url),
            timeout=httpx.Timeout(settings.tmdb_timeout_seconds, connect=10.0),
        )
    )
    database = Database(settings.database_url)
    await database.create_all()

    fastapi_app.state.tmdb_client = TMDBClient(settings, tmdb_http_client)
    fastapi_app.state.preferences = PreferencesRepository(database.session_factory)
    fastapi_app.state.database = database
    logger.info("TMDB client ready against %s", settings.tmdb_api_url)

    try:
        yield
    finally:  # pragma: no cover - teardown path exercised at runtime
        await database.dispose()
        await exit_stack.aclose()


def create_app() -> FastAPI:
    fastapi_app = FastAPI(
        title=settings.app_name,
        description="Browse, search and bookmark movies and TV shows from TMDB",
        version="1.0.0",
        lifespan=lifespan,
    )

    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "PUT", "DELETE"],
        allow_headers=["*"],
    )

    register_routes(fastapi_app)
    return fastapi_app


def get_tmdb_client(app: FastAPI) -> TMDBClient:
    client = getattr(app.state, "tmdb_client", None)
    if client is None:
        raise RuntimeError("TMDB client not initialised")
    return client


def get_preferences(app: FastAPI) -> PreferencesRepository:
    repository = getattr(app.state, "preferences", None)
    if repository is None:
        raise RuntimeError("Preferences repository not initialised")
    return repository


def _upstream_error(exc: TMDBRequestError) -> HTTPException:
    return HTTPException(status_code=502, detail=str(exc))


def register_routes(fastapi_app: FastAPI) -> None:
    @fastapi_app.exception_handler(RequestValidationError)
    async def invalid_request(_: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=400, content={"detail": jsonable_encoder(exc.errors())}
        )

    @fastapi_app.get("/healthz")
    async def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    @fastapi_app.get("/browse/{media_kind}/{category}")
    async def browse(
        media_kind: MediaKind,
        category: Category,
        page: int = 1,
        genre: str | None = None,
        time_window: TimeWindow | None = None,
    ) -> dict[str, Any]:
        client = get_tmdb_client(fastapi_app)
        try:
            request = CategoryRequest(
                category=category,
                media_kind=media_kind,
                page=page,
                genre_filter=genre,
                time_window=time_window or client.settings.trending_window,
            )
        except ValidationError as exc:
            raise HTTPException(
                status_code=400,
                detail=exc.errors(include_url=False, include_context=False),
            ) from exc
        try:
            return await client.fetch_category(request)
        except TMDBRequestError as exc:
            raise _upstream_error(exc) from exc

    @fastapi_app.get("/home/{media_kind}")
    async def home(media_kind: MediaKind, genre: str | None = None) -> dict[str, Any]:
        client = get_tmdb_client(fastapi_app)
        feed = await client.fetch_home(media_kind, genre_filter=genre)
        return feed.model_dump()

    @fastapi_app.get("/search/{media_kind}")
    async def search(
        media_kind: MediaKind,
        query: str | None = None,
        page: int = 1,
        genres: str | None = None,
        year: int | None = None,
        sort_by: str | None = None,
    ) -> dict[str, Any]:
        client = get_tmdb_client(fastapi_app)
        try:
            request = search_request_from_params(
                media_kind,
                query=query,
                page=page,
                genres=genres,
                year=year,
                sort_by=sort_by,
            )
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        try:
            return await client.search(request)
        except TMDBRequestError as exc:
            raise _upstream_error(exc) from exc

    @fastapi_app.get("/genres/{media_kind}/keys")
    async def list_genre_keys(media_kind: MediaKind) -> dict[str, list[str]]:
        return {"keys": list(genre_keys(media_kind))}

    @fastapi_app.get("/genres/{media_kind}")
    async def list_genres(media_kind: MediaKind) -> dict[str, Any]:
        client = get_tmdb_client(fastapi_app)
        try:
            return await client.fetch_genres(media_kind)
        except TMDBRequestError as exc:
            raise _upstream_error(exc) from exc

    @fastapi_app.get("/configuration")
    async def configuration() -> dict[str, Any]:
        client = get_tmdb_client(fastapi_app)
        try:
            return await client.fetch_configuration()
        except TMDBRequestError as exc:
            raise _upstream_error(exc) from exc

    @fastapi_app.get("/titles/tv/{tv_id}/season/{season_number}")
    async def season(tv_id: int, season_number: int) -> dict[str, Any]:
        client = get_tmdb_client(fastapi_app)
        try:
            return await client.fetch_season(tv_id, season_number)
        except TMDBRequestError as exc:
            raise _upstream_error(exc) from exc

    @fastapi_app.get("/titles/tv/{tv_id}/season/{season_number}/episode/{episode_number}")
    async def episode(tv_id: int, season_number: int, episode_number: int) -> dict[str, Any]:
        client = get_tmdb_client(fastapi_app)
        try:
            return await client.fetch_episode(tv_id, season_number, episode_number)
        except TMDBRequestError as exc:
            raise _upstream_error(exc) from exc

    @fastapi_app.get("/titles/{media_kind}/{item_id}")
    async def details(media_kind: MediaKind, item_id: int) -> dict[str, Any]:
        client = get_tmdb_client(fastapi_app)
        try:
            return await client.fetch_details(media_kind, item_id)
        except TMDBRequestError as exc:
            raise _upstream_error(exc) from exc

    @fastapi_app.get("/titles/{media_kind}/{item_id}/{section:path}")
    async def details_section(
        media_kind: MediaKind, item_id: int, section: str
    ) -> dict[str, Any]:
        client = get_tmdb_client(fastapi_app)
        try:
            return await client.fetch_section(media_kind, item_id, section)
        except ValueError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        except TMDBRequestError as exc:
            raise _upstream_error(exc) from exc

    @fastapi_app.get("/person/{person_id}")
    async def person(person_id: int) -> dict[str, Any]:
        client = get_tmdb_client(fastapi_app)
        try:
            return await client.fetch_person(person_id)
        except TMDBRequestError as exc:
            raise _upstream_error(exc) from exc

    @fastapi_app.get("/favorites/{media_kind}")
    async def list_favorites(
        media_kind: MediaKind, expand: bool = Query(default=False)
    ) -> dict[str, Any]:
        preferences = get_preferences(fastapi_app)
        ids = await preferences.list_favorites(media_kind)
        payload: dict[str, Any] = {"media_kind": media_kind, "ids": ids}
        if expand:
            client = get_tmdb_client(fastapi_app)
            payload["items"] = await client.fetch_many_details(media_kind, ids)
        return payload

    @fastapi_app.put("/favorites/{media_kind}/{item_id}")
    async def add_favorite(media_kind: MediaKind, item_id: int) -> dict[str, Any]:
        preferences = get_preferences(fastapi_app)
        ids = await preferences.add_favorite(media_kind, item_id)
        return {"media_kind": media_kind, "ids": ids}

    @fastapi_app.delete("/favorites/{media_kind}/{item_id}")
    async def remove_favorite(media_kind: MediaKind, item_id: int) -> dict[str, Any]:
        preferences = get_preferences(fastapi_app)
        ids = await preferences.remove_favorite(media_kind, item_id)
        return {"media_kind": media_kind, "ids": ids}

    @fastapi_app.delete("/favorites")
    async def clear_all_favorites() -> dict[str, Any]:
        preferences = get_preferences(fastapi_app)
        await preferences.clear_favorites()
        return {"movie": [], "tv": []}

    @fastapi_app.delete("/favorites/{media_kind}")
    async def clear_favorites(media_kind: MediaKind) -> dict[str, Any]:
        preferences = get_preferences(fastapi_app)
        await preferences.clear_favorites(media_kind)
        return {"media_kind": media_kind, "ids": []}

    def _known_flag(name: str) -> str:
        if name not in FLAG_DEFAULTS:
            raise HTTPException(status_code=404, detail=f"Unknown preference {name!r}")
        return name

    @fastapi_app.delete("/preferences")
    async def clear_all_preferences() -> dict[str, int]:
        preferences = get_preferences(fastapi_app)
        return {"removed": await preferences.clear_all()}

    @fastapi_app.get("/preferences/{name}")
    async def get_preference(name: str) -> dict[str, Any]:
        preferences = get_preferences(fastapi_app)
        flag = _known_flag(name)
        return {"name": flag, "value": await preferences.get_flag(flag)}

    @fastapi_app.put("/preferences/{name}")
    async def set_preference(
        name: str, value: bool = Body(..., embed=True)
    ) -> dict[str, Any]:
        preferences = get_preferences(fastapi_app)
        flag = _known_flag(name)
        return {"name": flag, "value": await preferences.set_flag(flag, value)}

    @fastapi_app.delete("/preferences/{name}")
    async def clear_preference(name: str) -> dict[str, Any]:
        preferences = get_preferences(fastapi_app)
        flag = _known_flag(name)
        return {"name": flag, "value": await preferences.clear_flag(flag)}


app = create_app()
