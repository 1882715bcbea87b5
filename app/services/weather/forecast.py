from __future__ import annotations

import logging
from datetime import datetime, timezone as dt_timezone

from app.schemas.weather import (
    CacheKind,
    CacheStatus,
    CompleteForecast,
    CurrentWeatherResult,
    ForecastResult,
    UpstreamError,
)
from app.services.weather.cache_store import WeatherCacheStore
from app.services.weather.openweather import OpenWeatherClient
from app.services.weather.validation import validate_zip_code

logger = logging.getLogger(__name__)


class WeatherForecastService:
    """Serves weather for a zip code, preferring the cache over the provider.

    Any cache hit within the TTL wins over a live call. Concurrent misses for the
    same key are not coalesced: each one fetches and the last write wins.
    Provider errors are passed through to the caller and never cached.
    """

    def __init__(self, cache: WeatherCacheStore, client: OpenWeatherClient) -> None:
        self._cache = cache
        self._client = client

    async def current_weather(self, zip_code: str) -> CurrentWeatherResult:
        zip_code = validate_zip_code(zip_code)

        cached = await self._cache.get(zip_code, CacheKind.CURRENT)
        if cached is not None:
            return cached

        result = await self._client.fetch_current(zip_code)
        if not isinstance(result, UpstreamError):
            await self._cache.set(zip_code, CacheKind.CURRENT, result)
        return result

    async def forecast(self, zip_code: str) -> ForecastResult:
        zip_code = validate_zip_code(zip_code)

        cached = await self._cache.get(zip_code, CacheKind.FORECAST)
        if cached is not None:
            return cached

        result = await self._client.fetch_forecast(zip_code)
        if not isinstance(result, UpstreamError):
            await self._cache.set(zip_code, CacheKind.FORECAST, result)
        return result

    async def complete_forecast(self, zip_code: str) -> CompleteForecast:
        zip_code = validate_zip_code(zip_code)

        current = await self.current_weather(zip_code)
        forecast = await self.forecast(zip_code)

        location = None
        if not isinstance(current, UpstreamError):
            location = current.location
        elif not isinstance(forecast, UpstreamError):
            location = forecast.location

        return CompleteForecast(
            current=current,
            forecast=forecast,
            location=location,
            timestamp=datetime.now(dt_timezone.utc),
        )

    async def clear_cache(self, zip_code: str) -> bool:
        zip_code = validate_zip_code(zip_code)
        cleared = await self._cache.clear(zip_code)
        if cleared:
            logger.info("Weather cache cleared for zip_code=%s", zip_code)
        return cleared

    async def cache_status(self, zip_code: str) -> CacheStatus:
        zip_code = validate_zip_code(zip_code)
        return CacheStatus(
            current_cached=await self._cache.exists(zip_code, CacheKind.CURRENT),
            forecast_cached=await self._cache.exists(zip_code, CacheKind.FORECAST),
            zip_code=zip_code,
            timestamp=datetime.now(dt_timezone.utc),
        )
