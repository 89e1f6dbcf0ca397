"""Error handling for fixturecast."""

from fixturecast.errors.classify import classify_exception
from fixturecast.errors.http import (
    error_from_response,
    extract_error_message,
    get_retry_after_ms,
)
from fixturecast.errors.messages import (
    get_remediation,
    rate_limit_message,
    user_facing_message,
)
from fixturecast.errors.types import (
    ConfigurationError,
    ErrorCategory,
    HTTP_ERROR_MAPPINGS,
    HTTPErrorMapping,
    InvalidResponseError,
    PredictionUnavailableError,
    ProviderCallError,
    ProviderError,
    RateLimitedError,
    TransientNetworkError,
    classify_http_error,
)

__all__ = [
    # Core types
    "ErrorCategory",
    "ProviderError",
    "RateLimitedError",
    "TransientNetworkError",
    "InvalidResponseError",
    "ProviderCallError",
    "ConfigurationError",
    "PredictionUnavailableError",
    "HTTPErrorMapping",
    "HTTP_ERROR_MAPPINGS",
    # Classification functions
    "classify_http_error",
    "classify_exception",
    # HTTP utilities
    "error_from_response",
    "extract_error_message",
    "get_retry_after_ms",
    # Messages
    "rate_limit_message",
    "user_facing_message",
    "get_remediation",
]
