from __future__ import annotations

from app.schemas.weather import CacheKind, CacheStatus, CompleteForecast, CurrentWeather, Forecast, UpstreamError

__all__ = ["CacheKind", "CacheStatus", "CompleteForecast", "CurrentWeather", "Forecast", "UpstreamError"]
