"""Provider adapter interface and shared response handling."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from typing import ClassVar

import httpx
import msgspec
from msgspec import Struct

from fixturecast.config.credentials import read_api_key
from fixturecast.core.http import get_http_client
from fixturecast.errors.classify import classify_exception
from fixturecast.errors.http import error_from_response
from fixturecast.errors.types import ConfigurationError
from fixturecast.errors.types import InvalidResponseError
from fixturecast.models import Prediction
from fixturecast.models import PredictionRequest

_FENCE_RE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)


class ProviderMetadata(Struct, frozen=True):
    """Metadata about a provider."""

    id: str
    name: str
    description: str
    homepage: str
    default_model: str
    dashboard_url: str | None = None


class ProviderAdapter(ABC):
    """Performs the network call for one prediction provider.

    Implementations raise only errors from the provider taxonomy:
    RateLimitedError, TransientNetworkError, InvalidResponseError or
    ProviderCallError (and ConfigurationError before any call is made).
    """

    # Subclasses must define this
    metadata: ClassVar[ProviderMetadata]

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._api_key = api_key
        self.model = model or self.metadata.default_model
        self._client = client

    @property
    def id(self) -> str:
        """Get provider ID."""
        return self.metadata.id

    @property
    def name(self) -> str:
        """Get provider display name."""
        return self.metadata.name

    @property
    def api_key(self) -> str | None:
        if self._api_key is None:
            self._api_key = read_api_key(self.id)
        return self._api_key

    def is_available(self) -> bool:
        """Check whether credentials exist. Makes no network calls."""
        return self.api_key is not None

    async def predict(self, request: PredictionRequest) -> Prediction:
        """Call the provider and return its parsed prediction."""
        api_key = self.api_key
        if not api_key:
            raise ConfigurationError(
                f"{self.name} API key not configured. "
                f"Set {self.id.upper()}_API_KEY in the environment.",
                self.id,
            )

        try:
            if self._client is not None:
                response = await self._send(self._client, api_key, request)
            else:
                async with get_http_client() as client:
                    response = await self._send(client, api_key, request)
        except httpx.HTTPError as e:
            raise classify_exception(e, self.id) from e

        if not response.is_success:
            raise error_from_response(response, self.id)

        try:
            text = self._extract_text(response.json())
        except ValueError as e:
            raise InvalidResponseError(
                f"{self.name} returned a non-JSON body", self.id
            ) from e
        except (KeyError, IndexError, TypeError) as e:
            raise InvalidResponseError(
                f"Invalid response format from {self.name}: {e}", self.id
            ) from e

        return parse_prediction(text, self.id)

    @abstractmethod
    async def _send(
        self,
        client: httpx.AsyncClient,
        api_key: str,
        request: PredictionRequest,
    ) -> httpx.Response:
        """Issue the HTTP request for `request`."""

    @abstractmethod
    def _extract_text(self, body: dict) -> str:
        """Return the model's text output from a decoded response body."""


def build_prompt(request: PredictionRequest) -> str:
    """Append any context snippets to the request prompt."""
    if not request.context:
        return request.prompt

    lines = [f"- {key}: {value}" for key, value in request.context.items() if value]
    if not lines:
        return request.prompt
    return request.prompt + "\n\nContext:\n" + "\n".join(lines)


def parse_prediction(text: str, provider: str | None = None) -> Prediction:
    """Decode a model's JSON output into a normalized Prediction.

    Raises:
        InvalidResponseError: If the text is not a valid prediction
    """
    text = text.strip()
    if match := _FENCE_RE.match(text):
        text = match.group(1)

    try:
        prediction = msgspec.json.decode(text, type=Prediction)
    except msgspec.ValidationError as e:
        raise InvalidResponseError(f"Prediction failed validation: {e}", provider) from e
    except msgspec.DecodeError as e:
        raise InvalidResponseError(f"Prediction is not valid JSON: {e}", provider) from e

    return prediction.normalized()
