"""ChatSession: the live transcript and streamed assistant replies."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from typing import Callable

from ..types import ChatMessage, ChatRole, ContextDocument, LLMProvider
from .insights import build_insights_system_prompt

logger = logging.getLogger(__name__)

STREAM_ERROR_SUFFIX = "\n[Error streaming response]"
PROMPT_ERROR_TEXT = "Error: Failed to get response from AI service."


def with_tab_context(prompt: str, docs: list[ContextDocument]) -> str:
    """Append a numbered "Tab Context" list to a user prompt."""
    if not docs:
        return prompt
    lines = [prompt, "", "Tab Context:"]
    for i, doc in enumerate(docs, 1):
        lines.append(f'{i}. "{doc.title}" - {doc.url}')
    return "\n".join(lines)


async def send_prompt(
    llm: LLMProvider,
    content: str,
    previous: list[dict] | None = None,
) -> str:
    """Non-streaming use of the engine: concatenate the streamed reply."""
    messages = [*(previous or []), {"role": "user", "content": content}]
    chunks: list[str] = []
    try:
        async for chunk in llm.stream(messages):
            chunks.append(chunk)
    except asyncio.CancelledError:
        raise
    except Exception as e:
        logger.warning("Prompt failed: %s", e)
        return PROMPT_ERROR_TEXT
    return "".join(chunks)


class ChatSession:
    """Owns the transcript shown in conversation mode.

    ``on_update`` is called with the transcript after every change, including
    each streamed chunk.
    """

    def __init__(
        self,
        llm: LLMProvider | None = None,
        insights: dict[str, list[str]] | None = None,
        on_update: Callable[[list[ChatMessage]], None] | None = None,
    ) -> None:
        self.llm = llm
        self.insights = insights or {}
        self._on_update = on_update
        self._messages: list[ChatMessage] = []

    @property
    def messages(self) -> list[ChatMessage]:
        return self._messages

    def replace_messages(self, messages: list[ChatMessage]) -> None:
        self._messages = [replace(m) for m in messages]
        self._notify()

    def clear(self) -> None:
        self.replace_messages([])

    def system_prompt(self, page_text: str = "") -> str:
        parts = []
        if page_text:
            parts.append(f"The user is viewing a page with this text content:\n{page_text}")
        insights = build_insights_system_prompt(self.insights)
        if insights:
            parts.append(insights.strip())
        return "\n\n".join(parts)

    def api_messages(self, page_text: str = "") -> list[dict]:
        """Transcript in API form, without the trailing assistant placeholder."""
        history = self._messages
        if history and history[-1].role == ChatRole.ASSISTANT and not history[-1].content:
            history = history[:-1]
        messages = [m.to_api() for m in history]
        system = self.system_prompt(page_text)
        if system:
            messages.insert(0, {"role": "system", "content": system})
        return messages

    async def submit_prompt(
        self,
        prompt: str,
        context_docs: list[ContextDocument] | None = None,
        page_text: str = "",
    ) -> ChatMessage | None:
        """Append the user turn and stream the assistant turn. Returns the assistant message."""
        if not prompt.strip():
            return None

        content = with_tab_context(prompt, context_docs or [])
        self._messages.append(ChatMessage(ChatRole.USER, content))
        reply = ChatMessage(ChatRole.ASSISTANT, "")
        self._messages.append(reply)
        self._notify()

        if self.llm is None:
            reply.content = STREAM_ERROR_SUFFIX.lstrip("\n")
            self._notify()
            return reply

        try:
            async for chunk in self.llm.stream(self.api_messages(page_text)):
                reply.content += chunk
                self._notify()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.warning("Chat streaming failed: %s", e)
            reply.content += STREAM_ERROR_SUFFIX
            self._notify()
        return reply

    def _notify(self) -> None:
        if self._on_update is not None:
            self._on_update(self._messages)
