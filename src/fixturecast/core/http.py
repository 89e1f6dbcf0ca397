"""HTTP client with connection pooling for fixturecast."""

from contextlib import asynccontextmanager

import httpx

from fixturecast.config.settings import get_config

# Global HTTP client
_client: httpx.AsyncClient | None = None


def get_timeout_config() -> httpx.Timeout:
    """Get timeout configuration from settings.

    Model calls are slow; the read timeout is the configured one, connecting
    gets 10 seconds.
    """
    config = get_config()
    return httpx.Timeout(config.http.timeout, connect=10.0)


@asynccontextmanager
async def get_http_client():
    """Get or create the shared HTTP client.

    Usage:
        async with get_http_client() as client:
            response = await client.post(...)
    """
    global _client

    if _client is None:
        limits = httpx.Limits(
            max_connections=10,
            max_keepalive_connections=4,
        )
        _client = httpx.AsyncClient(
            timeout=get_timeout_config(),
            limits=limits,
            follow_redirects=True,
        )

    # Kept open for reuse; cleanup() closes it
    yield _client


async def cleanup() -> None:
    """Close the HTTP client.

    Should be called on application shutdown.
    """
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None
