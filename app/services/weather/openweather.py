"""
OpenWeatherMap client for the current conditions and 5 day / 3 hour forecast.

Both calls return either a normalized payload or an ``UpstreamError`` and never
raise. Provider responses look like:

  /weather:   {"main": {"temp": 20.5, ...}, "weather": [{"description": ...}],
               "name": "New York", "sys": {"country": "US"}}
  /forecast:  {"city": {"name": ..., "country": ...},
               "list": [{"dt": 1700000000, "main": {...}, "weather": [...]}, ...]}
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

import httpx
from pydantic import ValidationError

from app.schemas.weather import (
    CurrentConditions,
    CurrentWeather,
    CurrentWeatherResult,
    Forecast,
    ForecastEntry,
    ForecastResult,
    UpstreamError,
    WeatherLocation,
)

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "Weather API error"
UNEXPECTED_PAYLOAD_MESSAGE = "Unexpected weather data format"


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _dig(data: Any, *path: str | int) -> Any:
    """Walk nested dicts/lists, returning None as soon as a step is missing."""
    for step in path:
        if isinstance(step, int):
            if not isinstance(data, list) or len(data) <= step:
                return None
        elif not isinstance(data, dict):
            return None
        data = data[step] if isinstance(step, int) else data.get(step)
    return data


def _whole(value: Any) -> Any:
    # Humidity and pressure are integral, but some stations report decimals.
    if isinstance(value, float):
        return round(value)
    return value


def _conditions_fields(item: Any) -> dict[str, Any]:
    return {
        "temperature": _dig(item, "main", "temp"),
        "feels_like": _dig(item, "main", "feels_like"),
        "humidity": _whole(_dig(item, "main", "humidity")),
        "pressure": _whole(_dig(item, "main", "pressure")),
        "description": _dig(item, "weather", 0, "description"),
        "icon": _dig(item, "weather", 0, "icon"),
    }


def _parse_current(payload: Any, zip_code: str) -> CurrentWeather:
    return CurrentWeather(
        current=CurrentConditions(**_conditions_fields(payload)),
        location=WeatherLocation(
            name=_dig(payload, "name"),
            country=_dig(payload, "sys", "country"),
            zip_code=zip_code,
        ),
        timestamp=_now(),
    )


def _parse_forecast_entry(item: Any) -> ForecastEntry:
    dt = _dig(item, "dt")
    return ForecastEntry(
        datetime=datetime.fromtimestamp(dt, tz=timezone.utc) if dt is not None else None,
        **_conditions_fields(item),
    )


def _parse_forecast(payload: Any, zip_code: str) -> Forecast:
    items = _dig(payload, "list") or []
    return Forecast(
        location=WeatherLocation(
            name=_dig(payload, "city", "name"),
            country=_dig(payload, "city", "country"),
            zip_code=zip_code,
        ),
        forecast=[_parse_forecast_entry(item) for item in items],
        timestamp=_now(),
    )


def _api_error(resp: httpx.Response) -> UpstreamError:
    try:
        message = _dig(resp.json(), "message")
    except ValueError:
        message = None
    return UpstreamError(
        message=str(message) if message else GENERIC_ERROR_MESSAGE,
        code=resp.status_code,
        timestamp=_now(),
    )


class OpenWeatherClient:
    def __init__(
        self,
        http_client: httpx.AsyncClient,
        *,
        base_url: str,
        api_key: str,
        units: str = "metric",
    ) -> None:
        self._http = http_client
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._units = units

    async def fetch_current(self, zip_code: str) -> CurrentWeatherResult:
        return await self._fetch("/weather", zip_code, _parse_current)

    async def fetch_forecast(self, zip_code: str) -> ForecastResult:
        return await self._fetch("/forecast", zip_code, _parse_forecast)

    async def _fetch(self, path: str, zip_code: str, parse) -> Any:
        params = {"zip": zip_code, "units": self._units, "appid": self._api_key}
        try:
            resp = await self._http.get(f"{self._base_url}{path}", params=params)
            if not resp.is_success:
                error = _api_error(resp)
                logger.warning(
                    "Weather upstream status %s for %s zip=%s: %s", error.code, path, zip_code, error.message
                )
                return error
            return parse(resp.json(), zip_code)
        except ValidationError:
            logger.warning("Weather upstream payload rejected for %s zip=%s", path, zip_code, exc_info=True)
            return UpstreamError(message=UNEXPECTED_PAYLOAD_MESSAGE, code=500, timestamp=_now())
        except (httpx.HTTPError, httpx.InvalidURL, ValueError, TypeError, OverflowError) as exc:
            logger.warning("Weather upstream failure for %s zip=%s", path, zip_code, exc_info=True)
            return UpstreamError(
                message=str(exc) or type(exc).__name__,
                code=500,
                timestamp=_now(),
            )
