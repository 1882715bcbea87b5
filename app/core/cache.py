from __future__ import annotations

import asyncio
import time
from typing import Any, Callable, Optional, Protocol

import redis.asyncio as aioredis
from cachetools import TLRUCache

from app.core.config import Settings


class CacheBackend(Protocol):
    """The subset of the async Redis API the weather cache relies on."""

    async def get(self, key: str) -> Optional[str]: ...

    async def set(self, key: str, value: str, ex: Optional[int] = None) -> Any: ...

    async def delete(self, *keys: str) -> int: ...

    async def exists(self, *keys: str) -> int: ...

    async def aclose(self) -> None: ...


def _entry_expiry(_key: str, value: tuple[Optional[int], str], now: float) -> float:
    ttl, _ = value
    return now + ttl if ttl is not None else float("inf")


class MemoryCacheBackend:
    """In-process backend with per-key expiry, speaking the same dialect as redis.asyncio."""

    def __init__(self, *, maxsize: int, timer: Callable[[], float] = time.monotonic) -> None:
        self._cache: TLRUCache = TLRUCache(maxsize=maxsize, ttu=_entry_expiry, timer=timer)
        self._lock = asyncio.Lock()

    async def get(self, key: str) -> Optional[str]:
        async with self._lock:
            entry = self._cache.get(key)
        return entry[1] if entry is not None else None

    async def set(self, key: str, value: str, ex: Optional[int] = None) -> bool:
        async with self._lock:
            self._cache[key] = (ex, value)
        return True

    async def delete(self, *keys: str) -> int:
        removed = 0
        async with self._lock:
            for key in keys:
                if self._cache.pop(key, None) is not None:
                    removed += 1
        return removed

    async def exists(self, *keys: str) -> int:
        async with self._lock:
            return sum(1 for key in keys if key in self._cache)

    async def aclose(self) -> None:
        async with self._lock:
            self._cache.clear()


def create_cache_backend(settings: Settings) -> CacheBackend:
    if settings.cache_backend == "memory":
        return MemoryCacheBackend(maxsize=settings.memory_cache_maxsize)
    return aioredis.from_url(
        settings.redis_url,
        decode_responses=True,
        socket_connect_timeout=settings.redis_connect_timeout_seconds,
    )
