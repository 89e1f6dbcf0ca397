"""Output formatting for fixturecast."""

from fixturecast.display.json import (
    ErrorData,
    ErrorResponse,
    decode_json,
    encode_json,
    from_provider_error,
    output_json,
    output_json_error,
    output_json_pretty,
)

__all__ = [
    "ErrorData",
    "ErrorResponse",
    "decode_json",
    "encode_json",
    "from_provider_error",
    "output_json",
    "output_json_error",
    "output_json_pretty",
]
