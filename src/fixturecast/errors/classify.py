"""Exception classification for structured error handling."""

from __future__ import annotations

import asyncio
import json

import httpx
import msgspec

from fixturecast.errors.http import error_from_response
from fixturecast.errors.types import InvalidResponseError
from fixturecast.errors.types import ProviderCallError
from fixturecast.errors.types import ProviderError
from fixturecast.errors.types import TransientNetworkError


def classify_exception(e: BaseException, provider: str | None = None) -> ProviderError:
    """Classify any exception into a provider error.

    Already-classified errors pass through unchanged (gaining a provider when
    they lack one).
    """
    if isinstance(e, ProviderError):
        if e.provider is None:
            e.provider = provider
        return e

    # Network errors - httpx specific
    if isinstance(e, httpx.TimeoutException):
        return TransientNetworkError("Request timed out", provider)

    if isinstance(e, httpx.ConnectError):
        return TransientNetworkError("Failed to connect to server", provider)

    if isinstance(e, httpx.NetworkError):
        return TransientNetworkError(f"Network error: {e}", provider)

    if isinstance(e, httpx.HTTPStatusError):
        return error_from_response(e.response, provider or "provider")

    if isinstance(e, asyncio.TimeoutError):
        return TransientNetworkError("Operation timed out", provider)

    # Parse errors (ValidationError subclasses DecodeError)
    if isinstance(e, (msgspec.ValidationError, KeyError, IndexError, TypeError)):
        return InvalidResponseError(f"Invalid response format: {e}", provider)

    if isinstance(e, (json.JSONDecodeError, msgspec.DecodeError)):
        return InvalidResponseError(f"Failed to parse response: {e}", provider)

    return ProviderCallError(str(e) or type(e).__name__, provider)
