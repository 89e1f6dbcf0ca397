"""Gemini (Google AI) prediction adapter."""

from __future__ import annotations

import httpx

from fixturecast.models import PredictionRequest
from fixturecast.providers.base import ProviderAdapter
from fixturecast.providers.base import ProviderMetadata
from fixturecast.providers.base import build_prompt


class GeminiAdapter(ProviderAdapter):
    """Calls the Gemini generateContent endpoint in JSON response mode."""

    metadata = ProviderMetadata(
        id="gemini",
        name="Gemini",
        description="Google Gemini models via the Generative Language API",
        homepage="https://ai.google.dev",
        default_model="gemini-2.5-flash",
        dashboard_url="https://aistudio.google.com/app/usage",
    )

    API_BASE = "https://generativelanguage.googleapis.com/v1beta"
    GENERATE_ENDPOINT = "models/{model}:generateContent"

    async def _send(
        self,
        client: httpx.AsyncClient,
        api_key: str,
        request: PredictionRequest,
    ) -> httpx.Response:
        url = f"{self.API_BASE}/{self.GENERATE_ENDPOINT.format(model=self.model)}"
        payload = {
            "contents": [{"role": "user", "parts": [{"text": build_prompt(request)}]}],
            "generationConfig": {
                "responseMimeType": "application/json",
                "temperature": 0.2,
            },
        }
        return await client.post(
            url,
            json=payload,
            headers={"x-goog-api-key": api_key},
        )

    def _extract_text(self, body: dict) -> str:
        candidates = body["candidates"]
        parts = candidates[0]["content"]["parts"]
        return "".join(part.get("text", "") for part in parts)
