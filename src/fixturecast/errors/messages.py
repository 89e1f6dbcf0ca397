"""User-facing error messages with provider attribution."""

from __future__ import annotations

import math

from fixturecast.errors.types import ErrorCategory
from fixturecast.errors.types import ProviderError
from fixturecast.errors.types import RateLimitedError


def rate_limit_message(provider_name: str, wait_ms: float | None) -> str:
    """Build the "try again in N minutes" message for a throttled provider."""
    if not wait_ms or wait_ms <= 0:
        return f"{provider_name} rate limit exceeded. Please try again in a few minutes."

    minutes = max(1, math.ceil(wait_ms / 60_000))
    unit = "minute" if minutes == 1 else "minutes"
    return (
        f"{provider_name} rate limit exceeded. "
        f"Please try again in {minutes} {unit}."
    )


def user_facing_message(
    error: ProviderError,
    provider_name: str,
    wait_ms: float | None = None,
) -> str:
    """Rewrite a provider error for display.

    Rate limit errors name the provider and suggest a retry window; other
    errors keep their message with the provider prefixed.

    Args:
        error: Classified provider error
        provider_name: Display name of the provider (e.g., "Gemini")
        wait_ms: Current block wait, used when the error carries none
    """
    if isinstance(error, RateLimitedError):
        return rate_limit_message(provider_name, error.wait_ms or wait_ms)

    message = error.message
    if message.lower().startswith(provider_name.lower()):
        return message
    return f"{provider_name}: {message}"


def get_remediation(category: ErrorCategory, provider_id: str) -> str | None:
    """Get a remediation hint for an error category."""
    remediation = {
        ErrorCategory.RATE_LIMITED: "Wait for the block to expire, or lower the request rate.",
        ErrorCategory.TRANSIENT_NETWORK: "Check your internet connection and try again.",
        ErrorCategory.INVALID_RESPONSE: (
            f"The {provider_id} model returned malformed output. Re-run the request."
        ),
        ErrorCategory.CONFIGURATION: (
            f"Set the {provider_id.upper()}_API_KEY environment variable "
            "or check config.toml."
        ),
    }
    return remediation.get(category)
