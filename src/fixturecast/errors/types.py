"""Error types and classifications."""

from __future__ import annotations

from enum import StrEnum

import msgspec


class ErrorCategory(StrEnum):
    """Error categories for handling decisions."""

    RATE_LIMITED = "rate_limited"
    TRANSIENT_NETWORK = "transient_network"
    INVALID_RESPONSE = "invalid_response"
    CONFIGURATION = "configuration"
    OTHER = "other"


class ProviderError(Exception):
    """Base class for classified provider failures."""

    category: ErrorCategory = ErrorCategory.OTHER

    def __init__(self, message: str, provider: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.provider = provider


class RateLimitedError(ProviderError):
    """Provider explicitly throttled the call, or local quota is exhausted.

    `retry_after_ms` is the provider-supplied wait, if any. `wait_ms` is the
    block the rate limiter applied in response.
    """

    category = ErrorCategory.RATE_LIMITED

    def __init__(
        self,
        message: str,
        provider: str | None = None,
        *,
        retry_after_ms: float | None = None,
        quota_exhausted: bool = False,
        wait_ms: float | None = None,
    ) -> None:
        super().__init__(message, provider)
        self.retry_after_ms = retry_after_ms
        self.quota_exhausted = quota_exhausted
        self.wait_ms = wait_ms


class TransientNetworkError(ProviderError):
    """Connection failure, timeout or provider-side 5xx."""

    category = ErrorCategory.TRANSIENT_NETWORK


class InvalidResponseError(ProviderError):
    """Provider answered with output that could not be parsed."""

    category = ErrorCategory.INVALID_RESPONSE


class ProviderCallError(ProviderError):
    """Unclassified provider failure."""

    category = ErrorCategory.OTHER


class ConfigurationError(ProviderError):
    """Missing credentials, unknown provider or invalid settings."""

    category = ErrorCategory.CONFIGURATION


class PredictionUnavailableError(Exception):
    """No provider produced a prediction for a request."""


class HTTPErrorMapping(msgspec.Struct, frozen=True):
    """How to handle an HTTP status code."""

    category: ErrorCategory
    retry_after_header: bool = False


HTTP_ERROR_MAPPINGS: dict[int, HTTPErrorMapping] = {
    400: HTTPErrorMapping(category=ErrorCategory.OTHER),
    401: HTTPErrorMapping(category=ErrorCategory.CONFIGURATION),
    403: HTTPErrorMapping(category=ErrorCategory.CONFIGURATION),
    404: HTTPErrorMapping(category=ErrorCategory.OTHER),
    408: HTTPErrorMapping(category=ErrorCategory.TRANSIENT_NETWORK),
    429: HTTPErrorMapping(
        category=ErrorCategory.RATE_LIMITED,
        retry_after_header=True,
    ),
    500: HTTPErrorMapping(category=ErrorCategory.TRANSIENT_NETWORK),
    502: HTTPErrorMapping(category=ErrorCategory.TRANSIENT_NETWORK),
    503: HTTPErrorMapping(
        category=ErrorCategory.TRANSIENT_NETWORK,
        retry_after_header=True,
    ),
    504: HTTPErrorMapping(category=ErrorCategory.TRANSIENT_NETWORK),
}


def classify_http_error(status_code: int) -> HTTPErrorMapping:
    """Classify an HTTP error by status code."""
    if status_code in HTTP_ERROR_MAPPINGS:
        return HTTP_ERROR_MAPPINGS[status_code]

    if 500 <= status_code < 600:
        return HTTPErrorMapping(category=ErrorCategory.TRANSIENT_NETWORK)
    return HTTPErrorMapping(category=ErrorCategory.OTHER)


ERROR_CLASSES: dict[ErrorCategory, type[ProviderError]] = {
    ErrorCategory.RATE_LIMITED: RateLimitedError,
    ErrorCategory.TRANSIENT_NETWORK: TransientNetworkError,
    ErrorCategory.INVALID_RESPONSE: InvalidResponseError,
    ErrorCategory.CONFIGURATION: ConfigurationError,
    ErrorCategory.OTHER: ProviderCallError,
}
