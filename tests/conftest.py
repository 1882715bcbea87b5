from __future__ import annotations

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from redis.exceptions import ConnectionError as RedisConnectionError

from app.api.v1.endpoints.weather import limiter
from app.core.config import DEFAULT_OPENWEATHER_BASE_URL, Settings
from app.main import create_app


# ---------------------------------------------------------------------------
# Redis fakes
# ---------------------------------------------------------------------------

class FakeRedis:
    """Dict-backed stand-in for the redis.asyncio calls the cache store makes."""

    def __init__(self) -> None:
        self.store: dict[str, str] = {}
        self.expiries: dict[str, int | None] = {}
        self.delete_calls: list[tuple[str, ...]] = []

    async def get(self, key: str) -> str | None:
        return self.store.get(key)

    async def set(self, key: str, value: str, ex: int | None = None) -> bool:
        self.store[key] = value
        self.expiries[key] = ex
        return True

    async def delete(self, *keys: str) -> int:
        self.delete_calls.append(keys)
        removed = 0
        for key in keys:
            if self.store.pop(key, None) is not None:
                removed += 1
            self.expiries.pop(key, None)
        return removed

    async def exists(self, *keys: str) -> int:
        return sum(1 for key in keys if key in self.store)

    async def aclose(self) -> None:
        return None


class UnreachableRedis:
    """Every call fails the way redis.asyncio does when the server is down."""

    async def get(self, key):
        raise RedisConnectionError("Error 111 connecting to localhost:6379. Connection refused.")

    async def set(self, key, value, ex=None):
        raise RedisConnectionError("Error 111 connecting to localhost:6379. Connection refused.")

    async def delete(self, *keys):
        raise RedisConnectionError("Error 111 connecting to localhost:6379. Connection refused.")

    async def exists(self, *keys):
        raise RedisConnectionError("Error 111 connecting to localhost:6379. Connection refused.")

    async def aclose(self) -> None:
        return None


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def unreachable_redis() -> UnreachableRedis:
    return UnreachableRedis()


# ---------------------------------------------------------------------------
# Provider payloads
# ---------------------------------------------------------------------------

@pytest.fixture
def current_payload() -> dict:
    return {
        "weather": [{"id": 800, "main": "Clear", "description": "clear sky", "icon": "01d"}],
        "main": {"temp": 20.5, "feels_like": 19.8, "humidity": 65, "pressure": 1013},
        "sys": {"country": "US"},
        "name": "New York",
        "cod": 200,
    }


@pytest.fixture
def forecast_payload() -> dict:
    return {
        "cod": "200",
        "city": {"name": "New York", "country": "US"},
        "list": [
            {
                "dt": 1700000000,
                "main": {"temp": 18.0, "feels_like": 17.2, "humidity": 70, "pressure": 1012},
                "weather": [{"description": "few clouds", "icon": "02d"}],
            },
            {
                "dt": 1700010800,
                "main": {"temp": 16.5, "feels_like": 15.9, "humidity": 74, "pressure": 1011},
                "weather": [{"description": "light rain", "icon": "10n"}],
            },
        ],
    }


# ---------------------------------------------------------------------------
# Application
# ---------------------------------------------------------------------------

@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        cache_backend="memory",
        openweather_base_url=DEFAULT_OPENWEATHER_BASE_URL,
        openweather_api_key="test_key",
        cors_origins=[],
    )


@pytest_asyncio.fixture
async def app(settings):
    limiter.reset()
    app = create_app(settings)
    async with app.router.lifespan_context(app):
        yield app


@pytest_asyncio.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
