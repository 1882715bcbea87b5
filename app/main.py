from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from app.api.v1.endpoints.weather import configure_rate_limit, error_response, limiter
from app.api.v1.router import api_v1_router
from app.core.cache import create_cache_backend
from app.core.config import Settings, get_settings
from app.core.http import create_http_client
from app.core.logging import configure_logging
from app.services.weather.cache_store import WeatherCacheStore
from app.services.weather.forecast import WeatherForecastService
from app.services.weather.openweather import OpenWeatherClient
from app.services.weather.validation import InvalidZipCode

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings

    # Setup HTTP client and cache backend
    client = create_http_client(settings)
    backend = create_cache_backend(settings)
    logger.info("Weather cache backend: %s", settings.cache_backend)

    app.state.weather_service = WeatherForecastService(
        cache=WeatherCacheStore(backend, ttl_seconds=settings.cache_ttl_seconds),
        client=OpenWeatherClient(
            client,
            base_url=settings.openweather_base_url,
            api_key=settings.openweather_api_key,
            units=settings.openweather_units,
        ),
    )

    try:
        yield
    finally:
        app.state.weather_service = None
        await client.aclose()
        await backend.aclose()


async def _invalid_zip_code_handler(request: Request, exc: InvalidZipCode):
    logger.warning("Rejected zip code from IP=%s: %s", get_remote_address(request), exc)
    return error_response(str(exc), 400)


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings)

    # Setup rate limiter
    configure_rate_limit(settings.rate_limit)

    app = FastAPI(
        title="zipcast api",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Store settings in app state
    app.state.settings = settings

    # Add rate limiter
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    app.add_exception_handler(InvalidZipCode, _invalid_zip_code_handler)

    if settings.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.include_router(api_v1_router, prefix="/api/v1")
    return app


app = create_app()
