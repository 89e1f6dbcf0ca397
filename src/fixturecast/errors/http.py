"""HTTP error classification for provider responses.

Adapters hand non-2xx responses to `error_from_response`, which maps them onto
the provider error taxonomy in errors/types.py so callers never need to match
on message text.
"""

from __future__ import annotations

import re
from datetime import datetime
from datetime import timezone
from email.utils import parsedate_to_datetime

import httpx

from fixturecast.errors.types import ERROR_CLASSES
from fixturecast.errors.types import ErrorCategory
from fixturecast.errors.types import ProviderError
from fixturecast.errors.types import RateLimitedError
from fixturecast.errors.types import classify_http_error

# Wording providers use when a hard (daily/billing) quota is exhausted
QUOTA_MARKERS = ("quota", "resource_exhausted", "insufficient balance")

_DURATION_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)s\s*$")


def extract_error_message(response: httpx.Response) -> str:
    """Pull a human-readable message out of an error response body."""
    try:
        body = response.json()
    except ValueError:
        text = response.text.strip() if response.text else ""
        return text[:200] or f"HTTP {response.status_code}"

    if isinstance(body, dict):
        error = body.get("error", body)
        if isinstance(error, dict):
            message = error.get("message") or error.get("status")
            if message:
                return str(message)
        elif error:
            return str(error)
        if message := body.get("message"):
            return str(message)

    return f"HTTP {response.status_code}"


def _error_status(response: httpx.Response) -> str | None:
    """Return the Google-style `error.status` field, if any."""
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict) and isinstance(body.get("error"), dict):
        status = body["error"].get("status")
        return str(status) if status else None
    return None


def _retry_info_delay_ms(response: httpx.Response) -> float | None:
    """Read a `google.rpc.RetryInfo` retryDelay (e.g. "37s") from the body."""
    try:
        body = response.json()
    except ValueError:
        return None
    if not isinstance(body, dict) or not isinstance(body.get("error"), dict):
        return None

    for detail in body["error"].get("details") or []:
        if not isinstance(detail, dict):
            continue
        if not str(detail.get("@type", "")).endswith("RetryInfo"):
            continue
        if match := _DURATION_RE.match(str(detail.get("retryDelay", ""))):
            return float(match.group(1)) * 1000
    return None


def get_retry_after_ms(response: httpx.Response) -> float | None:
    """Get the provider-supplied retry delay in milliseconds.

    Reads the Retry-After header (seconds or HTTP date), falling back to a
    RetryInfo detail in the JSON body.
    """
    retry_after = response.headers.get("Retry-After")
    if retry_after:
        try:
            return max(float(retry_after), 0.0) * 1000
        except ValueError:
            pass
        try:
            when = parsedate_to_datetime(retry_after)
        except (TypeError, ValueError):
            when = None
        if when is not None:
            if when.tzinfo is None:
                when = when.replace(tzinfo=timezone.utc)
            delta = (when - datetime.now(timezone.utc)).total_seconds()
            return max(delta, 0.0) * 1000

    return _retry_info_delay_ms(response)


def error_from_response(response: httpx.Response, provider: str) -> ProviderError:
    """Build a classified provider error from a non-success response."""
    status = response.status_code
    detail = extract_error_message(response)
    message = f"{provider} API error: HTTP {status}: {detail}"

    mapping = classify_http_error(status)
    category = mapping.category
    if _error_status(response) == "RESOURCE_EXHAUSTED":
        category = ErrorCategory.RATE_LIMITED

    if category == ErrorCategory.RATE_LIMITED:
        retry_after_ms = get_retry_after_ms(response)
        lowered = detail.lower()
        quota_exhausted = retry_after_ms is None and any(
            marker in lowered for marker in QUOTA_MARKERS
        )
        return RateLimitedError(
            message,
            provider,
            retry_after_ms=retry_after_ms,
            quota_exhausted=quota_exhausted,
        )

    return ERROR_CLASSES[category](message, provider)
