"""OpenAIProvider: OpenAI-compatible chat completions endpoint via httpx.

Works with OpenAI, Ollama, vLLM, LM Studio, or any server exposing
/v1/chat/completions.
"""

from __future__ import annotations

import os

import httpx

from ..types import LLMProviderError
from .base import BaseProvider


class OpenAIProvider(BaseProvider):
    """LLM provider using any OpenAI-compatible chat completions API."""

    def __init__(
        self,
        base_url: str = "https://api.openai.com/v1",
        model: str = "gpt-4o-mini",
        temperature: float = 0.3,
        api_key: str | None = None,
        api_key_env: str = "OPENAI_API_KEY",
        max_tokens: int = 1024,
        require_key: bool = True,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(transport=transport)
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.api_key = api_key or os.environ.get(api_key_env, "")
        if require_key and not self.api_key:
            raise LLMProviderError(
                f"No API key found. Set {api_key_env} env var or pass api_key.",
                provider="openai",
            )

    def _provider_name(self) -> str:
        return "openai"

    def _get_url(self) -> str:
        return f"{self.base_url}/chat/completions"

    def _get_headers(self) -> dict:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key or 'not-needed'}",
        }

    def _default_max_tokens(self) -> int:
        return self.max_tokens

    def _build_payload(self, messages: list[dict], max_tokens: int, stream: bool) -> dict:
        payload = {
            "model": self.model,
            "messages": messages,
            "max_tokens": max_tokens,
            "temperature": self.temperature,
        }
        if stream:
            payload["stream"] = True
        return payload

    def _extract_text(self, data: dict) -> str:
        choices = data.get("choices", [])
        if choices:
            return choices[0].get("message", {}).get("content", "") or ""
        return ""

    def _extract_delta(self, event: dict) -> str | None:
        choices = event.get("choices", [])
        if not choices:
            return None
        return choices[0].get("delta", {}).get("content")
