"""
Weather cache store, keyed per zip code and kind.

Cache key format:  weather:{kind}:{zip_code}
TTL:               1800 seconds, reset on every write

Records are stored as JSON with ``cached=False`` and the write time in
``cached_at``; reads hand them back with ``cached=True``. Expiry is left to
the backend, so anything it still returns is considered fresh.

Every backend failure degrades to a miss (reads) or ``False`` (writes). Nothing
raised by Redis reaches the caller.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Union

from pydantic import ValidationError
from redis.exceptions import RedisError

from app.core.cache import CacheBackend
from app.schemas.weather import CacheKind, CurrentWeather, Forecast

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 1800

CachedRecord = Union[CurrentWeather, Forecast]

_BACKEND_ERRORS = (RedisError, OSError)

_RECORD_TYPES: dict[CacheKind, type[CachedRecord]] = {
    CacheKind.CURRENT: CurrentWeather,
    CacheKind.FORECAST: Forecast,
}


def cache_key(zip_code: str, kind: CacheKind) -> str:
    return f"weather:{CacheKind(kind).value}:{zip_code}"


class WeatherCacheStore:
    def __init__(self, backend: CacheBackend, *, ttl_seconds: int = DEFAULT_TTL_SECONDS) -> None:
        self._backend = backend
        self.ttl_seconds = ttl_seconds

    async def get(self, zip_code: str, kind: CacheKind) -> CachedRecord | None:
        """Return the cached record flagged ``cached=True``, or None on miss."""
        key = cache_key(zip_code, kind)
        try:
            raw = await self._backend.get(key)
        except _BACKEND_ERRORS:
            logger.warning("Cache retrieval error for key=%s", key, exc_info=True)
            return None

        if raw is None:
            logger.debug("Weather cache miss: %s", key)
            return None

        try:
            record = _RECORD_TYPES[CacheKind(kind)].model_validate_json(raw)
        except ValidationError:
            logger.error("Discarding unreadable cache entry for key=%s", key)
            return None

        logger.debug("Weather cache hit: %s", key)
        return record.model_copy(update={"cached": True})

    async def set(self, zip_code: str, kind: CacheKind, record: CachedRecord) -> bool:
        key = cache_key(zip_code, kind)
        entry = record.model_copy(update={"cached": False, "cached_at": datetime.now(timezone.utc)})
        try:
            await self._backend.set(key, entry.model_dump_json(), ex=self.ttl_seconds)
        except _BACKEND_ERRORS:
            logger.warning("Cache storage error for key=%s", key, exc_info=True)
            return False
        logger.debug("Weather cached: key=%s ttl=%ds", key, self.ttl_seconds)
        return True

    async def clear(self, zip_code: str) -> bool:
        """Delete both kinds for ``zip_code`` in a single backend call."""
        keys = [cache_key(zip_code, kind) for kind in CacheKind]
        try:
            await self._backend.delete(*keys)
        except _BACKEND_ERRORS:
            logger.warning("Cache clear error for zip_code=%s", zip_code, exc_info=True)
            return False
        return True

    async def exists(self, zip_code: str, kind: CacheKind) -> bool:
        key = cache_key(zip_code, kind)
        try:
            return bool(await self._backend.exists(key))
        except _BACKEND_ERRORS:
            logger.warning("Cache existence check error for key=%s", key, exc_info=True)
            return False
