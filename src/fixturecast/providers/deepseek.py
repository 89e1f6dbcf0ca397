"""DeepSeek prediction adapter."""

from __future__ import annotations

import httpx

from fixturecast.models import PredictionRequest
from fixturecast.providers.base import ProviderAdapter
from fixturecast.providers.base import ProviderMetadata
from fixturecast.providers.base import build_prompt


class DeepSeekAdapter(ProviderAdapter):
    """Calls the OpenAI-compatible DeepSeek chat completions endpoint."""

    metadata = ProviderMetadata(
        id="deepseek",
        name="DeepSeek",
        description="DeepSeek chat models",
        homepage="https://platform.deepseek.com",
        default_model="deepseek-chat",
        dashboard_url="https://platform.deepseek.com/usage",
    )

    API_URL = "https://api.deepseek.com/chat/completions"
    MAX_TOKENS = 4000

    async def _send(
        self,
        client: httpx.AsyncClient,
        api_key: str,
        request: PredictionRequest,
    ) -> httpx.Response:
        payload = {
            "model": self.model,
            "messages": [{"role": "user", "content": build_prompt(request)}],
            "max_tokens": self.MAX_TOKENS,
            "temperature": 0.1,
            "response_format": {"type": "json_object"},
        }
        return await client.post(
            self.API_URL,
            json=payload,
            headers={"Authorization": f"Bearer {api_key}"},
        )

    def _extract_text(self, body: dict) -> str:
        content = body["choices"][0]["message"]["content"]
        if not isinstance(content, str):
            raise TypeError("message content is not text")
        return content
