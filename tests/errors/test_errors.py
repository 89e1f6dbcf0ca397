"""Tests for error classification and handling."""

import asyncio
import json
from datetime import datetime, timedelta, timezone
from email.utils import format_datetime

import httpx
import msgspec
import pytest

from fixturecast.errors.classify import classify_exception
from fixturecast.errors.http import error_from_response
from fixturecast.errors.http import extract_error_message
from fixturecast.errors.http import get_retry_after_ms
from fixturecast.errors.types import (
    ERROR_CLASSES,
    HTTP_ERROR_MAPPINGS,
    ConfigurationError,
    ErrorCategory,
    InvalidResponseError,
    ProviderCallError,
    ProviderError,
    RateLimitedError,
    TransientNetworkError,
    classify_http_error,
)
from fixturecast.models import Prediction


def google_error(status_code: int, status: str, message: str, details=None, **kwargs):
    """Build a Google API style error response."""
    error = {"code": status_code, "message": message, "status": status}
    if details is not None:
        error["details"] = details
    return httpx.Response(status_code, json={"error": error}, **kwargs)


class TestErrorTypes:
    """Tests for the provider error hierarchy."""

    def test_categories(self):
        assert RateLimitedError("x").category == ErrorCategory.RATE_LIMITED
        assert TransientNetworkError("x").category == ErrorCategory.TRANSIENT_NETWORK
        assert InvalidResponseError("x").category == ErrorCategory.INVALID_RESPONSE
        assert ConfigurationError("x").category == ErrorCategory.CONFIGURATION
        assert ProviderCallError("x").category == ErrorCategory.OTHER

    def test_error_classes_cover_every_category(self):
        assert set(ERROR_CLASSES) == set(ErrorCategory)
        for category, cls in ERROR_CLASSES.items():
            assert cls.category == category

    def test_rate_limited_fields(self):
        error = RateLimitedError("slow down", "gemini", retry_after_ms=1000)

        assert str(error) == "slow down"
        assert error.provider == "gemini"
        assert error.retry_after_ms == 1000
        assert error.quota_exhausted is False
        assert error.wait_ms is None


class TestClassifyHttpError:
    """Tests for classify_http_error."""

    def test_429_is_rate_limited(self):
        mapping = classify_http_error(429)

        assert mapping.category == ErrorCategory.RATE_LIMITED
        assert mapping.retry_after_header is True

    def test_auth_errors_are_configuration(self):
        assert classify_http_error(401).category == ErrorCategory.CONFIGURATION
        assert classify_http_error(403).category == ErrorCategory.CONFIGURATION

    def test_unmapped_5xx_is_transient(self):
        assert 599 not in HTTP_ERROR_MAPPINGS
        assert classify_http_error(599).category == ErrorCategory.TRANSIENT_NETWORK

    def test_unmapped_4xx_is_other(self):
        assert classify_http_error(418).category == ErrorCategory.OTHER


class TestRetryAfter:
    """Tests for get_retry_after_ms."""

    def test_header_seconds(self):
        response = httpx.Response(429, headers={"Retry-After": "30"})

        assert get_retry_after_ms(response) == 30_000

    def test_header_http_date(self):
        when = datetime.now(timezone.utc) + timedelta(seconds=120)
        response = httpx.Response(429, headers={"Retry-After": format_datetime(when)})

        delay = get_retry_after_ms(response)

        assert 100_000 < delay <= 120_000

    def test_header_date_in_past(self):
        when = datetime.now(timezone.utc) - timedelta(minutes=5)
        response = httpx.Response(429, headers={"Retry-After": format_datetime(when)})

        assert get_retry_after_ms(response) == 0

    def test_retry_info_detail(self):
        response = google_error(
            429,
            "RESOURCE_EXHAUSTED",
            "Too many requests",
            details=[
                {"@type": "type.googleapis.com/google.rpc.QuotaFailure"},
                {
                    "@type": "type.googleapis.com/google.rpc.RetryInfo",
                    "retryDelay": "37s",
                },
            ],
        )

        assert get_retry_after_ms(response) == 37_000

    def test_missing(self):
        assert get_retry_after_ms(httpx.Response(429, text="slow down")) is None

    def test_garbage_header(self):
        response = httpx.Response(429, headers={"Retry-After": "soon"})

        assert get_retry_after_ms(response) is None


class TestExtractErrorMessage:
    """Tests for extract_error_message."""

    def test_nested_error_message(self):
        response = httpx.Response(400, json={"error": {"message": "bad model"}})

        assert extract_error_message(response) == "bad model"

    def test_string_error(self):
        response = httpx.Response(400, json={"error": "nope"})

        assert extract_error_message(response) == "nope"

    def test_plain_text_body(self):
        response = httpx.Response(502, text="Bad Gateway")

        assert extract_error_message(response) == "Bad Gateway"

    def test_empty_body(self):
        assert extract_error_message(httpx.Response(500)) == "HTTP 500"


class TestErrorFromResponse:
    """Tests for error_from_response."""

    def test_429_with_retry_after(self):
        response = httpx.Response(
            429,
            json={"error": {"message": "Rate limit reached"}},
            headers={"Retry-After": "12"},
        )

        error = error_from_response(response, "deepseek")

        assert isinstance(error, RateLimitedError)
        assert error.retry_after_ms == 12_000
        assert error.quota_exhausted is False
        assert error.provider == "deepseek"
        assert error.message == "deepseek API error: HTTP 429: Rate limit reached"

    def test_quota_exhausted_without_retry_after(self):
        response = google_error(
            429, "RESOURCE_EXHAUSTED", "You exceeded your current quota"
        )

        error = error_from_response(response, "gemini")

        assert isinstance(error, RateLimitedError)
        assert error.quota_exhausted is True
        assert error.retry_after_ms is None

    def test_resource_exhausted_status_on_other_code(self):
        """RESOURCE_EXHAUSTED in the body means throttled, whatever the code."""
        response = google_error(400, "RESOURCE_EXHAUSTED", "Try later")

        error = error_from_response(response, "gemini")

        assert isinstance(error, RateLimitedError)

    def test_server_error_is_transient(self):
        error = error_from_response(httpx.Response(503, text="overloaded"), "gemini")

        assert isinstance(error, TransientNetworkError)

    def test_auth_error_is_configuration(self):
        response = google_error(403, "PERMISSION_DENIED", "API key not valid")

        error = error_from_response(response, "gemini")

        assert isinstance(error, ConfigurationError)
        assert "API key not valid" in error.message

    def test_bad_request_is_other(self):
        error = error_from_response(httpx.Response(400, json={"error": "bad"}), "deepseek")

        assert type(error) is ProviderCallError


class TestClassifyException:
    """Tests for classify_exception."""

    def test_provider_error_passes_through(self):
        original = InvalidResponseError("bad")

        classified = classify_exception(original, "gemini")

        assert classified is original
        assert classified.provider == "gemini"

    def test_provider_kept(self):
        original = RateLimitedError("x", "deepseek")

        assert classify_exception(original, "gemini").provider == "deepseek"

    @pytest.mark.parametrize(
        "exc",
        [
            httpx.ConnectTimeout("timed out"),
            httpx.ReadTimeout("timed out"),
            httpx.ConnectError("refused"),
            httpx.ReadError("reset"),
            asyncio.TimeoutError(),
        ],
    )
    def test_network_errors_are_transient(self, exc):
        classified = classify_exception(exc, "gemini")

        assert isinstance(classified, TransientNetworkError)
        assert classified.provider == "gemini"

    def test_http_status_error(self):
        request = httpx.Request("POST", "https://api.deepseek.com/chat/completions")
        response = httpx.Response(429, request=request, headers={"Retry-After": "5"})
        exc = httpx.HTTPStatusError("429", request=request, response=response)

        classified = classify_exception(exc, "deepseek")

        assert isinstance(classified, RateLimitedError)
        assert classified.retry_after_ms == 5000

    def test_validation_error_is_invalid_response(self):
        with pytest.raises(msgspec.ValidationError) as exc_info:
            msgspec.json.decode(b'{"homeWinProbability": "high"}', type=Prediction)

        classified = classify_exception(exc_info.value)

        assert isinstance(classified, InvalidResponseError)
        assert classified.message.startswith("Invalid response format")

    def test_decode_errors_are_invalid_response(self):
        with pytest.raises(json.JSONDecodeError) as exc_info:
            json.loads("{not json")

        assert isinstance(classify_exception(exc_info.value), InvalidResponseError)
        assert isinstance(
            classify_exception(msgspec.DecodeError("truncated")), InvalidResponseError
        )

    def test_key_error_is_invalid_response(self):
        assert isinstance(classify_exception(KeyError("candidates")), InvalidResponseError)

    def test_anything_else_is_other(self):
        classified = classify_exception(RuntimeError("boom"), "gemini")

        assert type(classified) is ProviderCallError
        assert classified.message == "boom"
        assert isinstance(classified, ProviderError)
