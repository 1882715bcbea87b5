from __future__ import annotations

import datetime as dt
from enum import Enum
from typing import Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class CacheKind(str, Enum):
    CURRENT = "current"
    FORECAST = "forecast"


class WeatherLocation(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str | None = None
    country: str | None = None
    zip_code: str | None = None


class CurrentConditions(BaseModel):
    model_config = ConfigDict(frozen=True)

    temperature: float | None = Field(None, description="Air temperature (C).")
    feels_like: float | None = Field(None, description="Apparent temperature (C).")
    humidity: int | None = Field(None, description="Relative humidity (%).")
    pressure: int | None = Field(None, description="Sea level pressure (hPa).")
    description: str | None = None
    icon: str | None = None


class CurrentWeather(BaseModel):
    model_config = ConfigDict(frozen=True)

    current: CurrentConditions
    location: WeatherLocation
    timestamp: dt.datetime
    cached: bool = False
    cached_at: dt.datetime | None = None


class ForecastEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    datetime: dt.datetime | None = None
    temperature: float | None = None
    feels_like: float | None = None
    humidity: int | None = None
    pressure: int | None = None
    description: str | None = None
    icon: str | None = None


class Forecast(BaseModel):
    model_config = ConfigDict(frozen=True)

    location: WeatherLocation
    forecast: list[ForecastEntry] = Field(default_factory=list)
    timestamp: dt.datetime
    cached: bool = False
    cached_at: dt.datetime | None = None


class UpstreamError(BaseModel):
    """Returned in place of a weather payload when the provider call fails."""

    model_config = ConfigDict(frozen=True)

    error: Literal[True] = True
    message: str
    code: int
    timestamp: dt.datetime


CurrentWeatherResult = Union[CurrentWeather, UpstreamError]
ForecastResult = Union[Forecast, UpstreamError]


class CompleteForecast(BaseModel):
    current: CurrentWeatherResult
    forecast: ForecastResult
    location: WeatherLocation | None = None
    timestamp: dt.datetime


class CacheStatus(BaseModel):
    current_cached: bool
    forecast_cached: bool
    zip_code: str
    timestamp: dt.datetime


class ApiSuccess(BaseModel):
    success: Literal[True] = True
    message: str
    data: Any
    timestamp: dt.datetime


class ApiError(BaseModel):
    success: Literal[False] = False
    error: str
    timestamp: dt.datetime
