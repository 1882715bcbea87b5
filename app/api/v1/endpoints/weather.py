from datetime import datetime, timezone as dt_timezone
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.util import get_remote_address

from app.api.v1.deps import get_weather_service
from app.schemas.weather import ApiError, ApiSuccess, UpstreamError
from app.services.weather.forecast import WeatherForecastService
from app.services.weather.validation import sanitize_zip_code


router = APIRouter()

# Rate limiter, per client IP. The limit string is set by create_app().
limiter = Limiter(key_func=get_remote_address)
_rate_limit_holder: dict = {"value": "60/minute"}


def configure_rate_limit(value: str) -> None:
    _rate_limit_holder["value"] = value


def _rate_limit() -> str:
    return _rate_limit_holder["value"]


def _now() -> datetime:
    return datetime.now(dt_timezone.utc)


def _success(data: Any, message: str) -> ApiSuccess:
    return ApiSuccess(message=message, data=data, timestamp=_now())


def error_response(message: str, status_code: int = 500) -> JSONResponse:
    body = ApiError(error=message, timestamp=_now())
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


def _upstream_error_response(error: UpstreamError) -> JSONResponse:
    status_code = error.code if 400 <= error.code <= 599 else 500
    return error_response(error.message, status_code)


@router.get("/current/{zip_code}", response_model=ApiSuccess)
@limiter.limit(_rate_limit)
async def current_weather(
    request: Request,
    zip_code: str,
    service: WeatherForecastService = Depends(get_weather_service),
):
    result = await service.current_weather(sanitize_zip_code(zip_code))
    if isinstance(result, UpstreamError):
        return _upstream_error_response(result)
    return _success(result, "Current weather data retrieved successfully")


@router.get("/forecast/{zip_code}", response_model=ApiSuccess)
@limiter.limit(_rate_limit)
async def forecast(
    request: Request,
    zip_code: str,
    service: WeatherForecastService = Depends(get_weather_service),
):
    result = await service.forecast(sanitize_zip_code(zip_code))
    if isinstance(result, UpstreamError):
        return _upstream_error_response(result)
    return _success(result, "Forecast data retrieved successfully")


@router.get("/complete/{zip_code}", response_model=ApiSuccess)
@limiter.limit(_rate_limit)
async def complete_forecast(
    request: Request,
    zip_code: str,
    service: WeatherForecastService = Depends(get_weather_service),
):
    result = await service.complete_forecast(sanitize_zip_code(zip_code))
    if isinstance(result.current, UpstreamError) or isinstance(result.forecast, UpstreamError):
        return error_response("Failed to retrieve complete weather data", 500)
    return _success(result, "Complete weather data retrieved successfully")


@router.get("/cache_status/{zip_code}", response_model=ApiSuccess)
@limiter.limit(_rate_limit)
async def cache_status(
    request: Request,
    zip_code: str,
    service: WeatherForecastService = Depends(get_weather_service),
):
    status = await service.cache_status(sanitize_zip_code(zip_code))
    return _success(status, "Cache status retrieved successfully")


@router.delete("/cache/{zip_code}", response_model=ApiSuccess)
@limiter.limit(_rate_limit)
async def clear_cache(
    request: Request,
    zip_code: str,
    service: WeatherForecastService = Depends(get_weather_service),
):
    zip_code = sanitize_zip_code(zip_code)
    if not await service.clear_cache(zip_code):
        return error_response("Failed to clear cache", 500)
    return _success({"zip_code": zip_code}, "Cache cleared successfully")
