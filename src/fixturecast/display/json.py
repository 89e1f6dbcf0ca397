"""JSON output utilities for fixturecast."""

from __future__ import annotations

import sys
from datetime import datetime

import msgspec

from fixturecast.errors.messages import get_remediation
from fixturecast.errors.types import ProviderError

__all__ = [
    "ErrorResponse",
    "ErrorData",
    "output_json",
    "output_json_pretty",
    "output_json_error",
    "from_provider_error",
    "encode_json",
    "decode_json",
]


class ErrorData(msgspec.Struct, frozen=True, omit_defaults=True):
    """Error data with category and remediation."""

    message: str
    category: str
    provider: str | None = None
    remediation: str | None = None
    timestamp: str = msgspec.field(
        default_factory=lambda: datetime.now().astimezone().isoformat()
    )


class ErrorResponse(msgspec.Struct, frozen=True):
    """Structured error response for JSON output."""

    error: ErrorData


def output_json(data: object) -> None:
    """Output data as JSON to stdout.

    Args:
        data: Any msgspec-serializable object (Struct, dict, list, etc.)
    """
    sys.stdout.buffer.write(msgspec.json.encode(data))
    sys.stdout.buffer.write(b"\n")


def output_json_pretty(data: object, indent: int = 2) -> None:
    """Output data as pretty-printed JSON to stdout."""
    formatted = msgspec.json.format(msgspec.json.encode(data), indent=indent)
    sys.stdout.write(formatted.decode())
    sys.stdout.write("\n")


def from_provider_error(error: ProviderError) -> ErrorResponse:
    """Create an ErrorResponse from a classified provider error."""
    return ErrorResponse(
        error=ErrorData(
            message=error.message,
            category=error.category.value,
            provider=error.provider,
            remediation=get_remediation(error.category, error.provider or "provider"),
        )
    )


def output_json_error(
    message: str,
    category: str = "other",
    provider: str | None = None,
    remediation: str | None = None,
) -> None:
    """Output an error in standardized JSON format."""
    output_json_pretty(
        ErrorResponse(
            error=ErrorData(
                message=message,
                category=category,
                provider=provider,
                remediation=remediation,
            )
        )
    )


def encode_json(data: object) -> bytes:
    """Encode data as JSON bytes."""
    return msgspec.json.encode(data)


def decode_json(json_bytes: bytes, type_hint: type | None = None) -> object:
    """Decode JSON bytes, validating against `type_hint` when given."""
    if type_hint:
        return msgspec.json.decode(json_bytes, type=type_hint)
    return msgspec.json.decode(json_bytes)
