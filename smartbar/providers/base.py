"""Async LLM provider base: one request/retry path and one SSE path for all backends."""

from __future__ import annotations

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator

import httpx

from ..types import LLMProviderError

logger = logging.getLogger(__name__)

MAX_RETRIES = 3
RETRY_BACKOFF = [1.0, 2.0, 4.0]


def _is_transient(status_code: int) -> bool:
    return status_code == 429 or status_code >= 500


class BaseProvider(ABC):
    """Subclasses describe the wire format through the hook methods; ``complete()``
    and ``stream()`` are shared.

    ``messages`` are ``{"role", "content"}`` dicts in conversation order.
    """

    _timeout: float = 60.0

    def __init__(self, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self.last_usage: dict = {}
        self._transport = transport

    # -- wire format hooks --

    @abstractmethod
    def _provider_name(self) -> str: ...

    @abstractmethod
    def _get_url(self) -> str: ...

    @abstractmethod
    def _get_headers(self) -> dict: ...

    @abstractmethod
    def _build_payload(self, messages: list[dict], max_tokens: int, stream: bool) -> dict: ...

    @abstractmethod
    def _extract_text(self, data: dict) -> str: ...

    @abstractmethod
    def _extract_delta(self, event: dict) -> str | None:
        """Text carried by one streamed event, or None if it carries none."""

    def _default_max_tokens(self) -> int:
        return 1024

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self._timeout, transport=self._transport)

    def _error(self, message: str, status_code: int | None = None) -> LLMProviderError:
        return LLMProviderError(message, provider=self._provider_name(), status_code=status_code)

    def _status_error(self, response: httpx.Response) -> LLMProviderError:
        return self._error(f"HTTP {response.status_code}: {response.text}", response.status_code)

    # -- single completion --

    async def complete(self, messages: list[dict], max_tokens: int | None = None) -> str:
        """POST one completion. 429, 5xx and transport failures are retried with backoff."""
        payload = self._build_payload(messages, max_tokens or self._default_max_tokens(), False)
        error: LLMProviderError | None = None

        for attempt in range(MAX_RETRIES):
            if attempt:
                logger.debug("Retrying %s request (attempt %d): %s", self._provider_name(), attempt + 1, error)
                await asyncio.sleep(RETRY_BACKOFF[attempt - 1])
            try:
                async with self._client() as client:
                    response = await client.post(self._get_url(), headers=self._get_headers(), json=payload)
            except httpx.HTTPError as e:
                error = self._error(f"HTTP error: {e}")
                continue

            if response.status_code == 200:
                body = response.json()
                self.last_usage = body.get("usage", {})
                return self._extract_text(body)

            error = self._status_error(response)
            if not _is_transient(response.status_code):
                raise error

        raise error or self._error("Max retries exceeded")

    # -- streaming --

    async def stream(self, messages: list[dict], max_tokens: int | None = None) -> AsyncIterator[str]:
        """Yield text chunks from a server-sent-events response. Not retried."""
        payload = self._build_payload(messages, max_tokens or self._default_max_tokens(), True)

        try:
            async with self._client() as client:
                async with client.stream(
                    "POST", self._get_url(), headers=self._get_headers(), json=payload
                ) as resp:
                    if resp.status_code != 200:
                        await resp.aread()
                        raise self._status_error(resp)

                    async for line in resp.aiter_lines():
                        if not line.startswith("data: "):
                            continue
                        data = line[len("data: "):]
                        if data == "[DONE]":
                            break
                        try:
                            event = json.loads(data)
                        except json.JSONDecodeError:
                            continue

                        if event.get("type") == "error" or "error" in event:
                            detail = event.get("error") or {}
                            if isinstance(detail, dict):
                                raise self._error(detail.get("message", "Unknown error"))
                            raise self._error(str(detail))
                        text = self._extract_delta(event)
                        if text:
                            yield text
        except httpx.HTTPError as e:
            raise self._error(f"HTTP error: {e}") from e
