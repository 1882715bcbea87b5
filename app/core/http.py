from __future__ import annotations

import httpx

from app.core.config import Settings


def create_http_client(settings: Settings) -> httpx.AsyncClient:
    """Shared client for the weather provider.

    Redirects are not followed, so a 3xx from the provider surfaces as an upstream error.
    """
    timeout = httpx.Timeout(settings.http_timeout_seconds, connect=settings.http_connect_timeout_seconds)
    return httpx.AsyncClient(
        timeout=timeout,
        limits=httpx.Limits(max_keepalive_connections=10, max_connections=25),
        headers={"User-Agent": settings.http_user_agent, "Accept": "application/json"},
        follow_redirects=False,
    )
