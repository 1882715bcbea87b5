from __future__ import annotations

from fastapi import Request

from app.services.weather.forecast import WeatherForecastService


def get_weather_service(request: Request) -> WeatherForecastService:
    """Return the service wired up by the application lifespan."""
    service = getattr(request.app.state, "weather_service", None)
    if service is None:
        raise RuntimeError("Weather service not initialized. Did you start the FastAPI app?")
    return service
