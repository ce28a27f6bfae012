"""Persistent user preferences: favorites, theme and onboarding flags."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, get_args

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..db_models import Preference
from ..genres import MediaKind

logger = logging.getLogger(__name__)

# Flags exposed through the preferences API and their values when unset.
FLAG_DEFAULTS: dict[str, bool] = {
    "dark_mode": False,
    "first_run": True,
}


def favorites_key(media_kind: MediaKind) -> str:
    return f"favorites:{media_kind}"


class PreferencesRepository:
    """Key-value store for everything the client remembers between sessions.

    Writes, including the read-modify-write cycles behind the favorite
    helpers, are serialised by one lock so concurrent requests on the event
    loop never overwrite each other's changes.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory
        self._lock = asyncio.Lock()

    async def get(self, key: str, default: Any = None) -> Any:
        value = await self._read(key)
        return default if value is None else value

    async def set(self, key: str, value: Any) -> None:
        async with self._lock:
            await self._write(key, value)

    async def clear(self, key: str) -> bool:
        """Remove ``key``; return ``True`` when a value was actually stored."""

        async with self._lock:
            return await self._delete(key)

    async def clear_all(self) -> int:
        """Forget every stored preference and return how many were removed."""

        async with self._lock:
            removed = await self._delete_all()
        logger.info("Cleared %s stored preferences", removed)
        return removed

    async def keys(self) -> list[str]:
        async with self._session_factory() as session:
            result = await session.execute(select(Preference.key).order_by(Preference.key))
            return list(result.scalars())

    async def get_flag(self, name: str) -> bool:
        if name not in FLAG_DEFAULTS:
            raise KeyError(f"Unknown preference {name!r}")
        return bool(await self.get(name, FLAG_DEFAULTS[name]))

    async def set_flag(self, name: str, value: bool) -> bool:
        if name not in FLAG_DEFAULTS:
            raise KeyError(f"Unknown preference {name!r}")
        await self.set(name, bool(value))
        return bool(value)

    async def clear_flag(self, name: str) -> bool:
        """Reset a flag to its default value and return that default."""

        if name not in FLAG_DEFAULTS:
            raise KeyError(f"Unknown preference {name!r}")
        await self.clear(name)
        return FLAG_DEFAULTS[name]

    async def list_favorites(self, media_kind: MediaKind) -> list[int]:
        return self._parse_favorites(media_kind, await self._read(favorites_key(media_kind)))

    async def is_favorite(self, media_kind: MediaKind, item_id: int) -> bool:
        return item_id in await self.list_favorites(media_kind)

    async def add_favorite(self, media_kind: MediaKind, item_id: int) -> list[int]:
        async with self._lock:
            favorites = await self.list_favorites(media_kind)
            if item_id not in favorites:
                favorites.append(item_id)
                await self._write(favorites_key(media_kind), favorites)
            return favorites

    async def remove_favorite(self, media_kind: MediaKind, item_id: int) -> list[int]:
        async with self._lock:
            favorites = await self.list_favorites(media_kind)
            if item_id in favorites:
                favorites = [entry for entry in favorites if entry != item_id]
                await self._write(favorites_key(media_kind), favorites)
            return favorites

    async def clear_favorites(self, media_kind: MediaKind | None = None) -> None:
        """Drop the favorites of one media kind, or of every kind when ``None``."""

        kinds = (media_kind,) if media_kind else get_args(MediaKind)
        async with self._lock:
            for kind in kinds:
                await self._delete(favorites_key(kind))

    @staticmethod
    def _parse_favorites(media_kind: MediaKind, stored: Any) -> list[int]:
        if stored is None:
            return []
        if not isinstance(stored, list):
            logger.warning("Ignoring malformed %s favorites payload", media_kind)
            return []
        favorites: list[int] = []
        for entry in stored:
            try:
                favorites.append(int(entry))
            except (TypeError, ValueError):
                continue
        return favorites

    async def _read(self, key: str) -> Any:
        async with self._session_factory() as session:
            record = await session.get(Preference, key)
            return None if record is None else record.value

    async def _write(self, key: str, value: Any) -> None:
        async with self._session_factory() as session:
            await session.merge(Preference(key=key, value=value))
            await session.commit()
        logger.debug("Stored preference %s", key)

    async def _delete(self, key: str) -> bool:
        async with self._session_factory() as session:
            result = await session.execute(delete(Preference).where(Preference.key == key))
            await session.commit()
        return bool(result.rowcount)

    async def _delete_all(self) -> int:
        async with self._session_factory() as session:
            result = await session.execute(delete(Preference))
            await session.commit()
        return int(result.rowcount or 0)
