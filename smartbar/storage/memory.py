"""MemoryTranscriptStore: process-local dict of transcripts."""

from __future__ import annotations

from dataclasses import replace

from ..core.store import TranscriptStore
from ..types import ChatMessage


def _copy(messages: list[ChatMessage]) -> list[ChatMessage]:
    return [replace(m) for m in messages]


class MemoryTranscriptStore(TranscriptStore):
    """In-memory transcript map shared by all sessions that receive this instance."""

    def __init__(self) -> None:
        self._transcripts: dict[str, list[ChatMessage]] = {}

    def get(self, doc_id: str) -> list[ChatMessage]:
        return _copy(self._transcripts.get(doc_id, []))

    def put(self, doc_id: str, messages: list[ChatMessage]) -> None:
        self._transcripts[doc_id] = _copy(messages)

    def delete(self, doc_id: str) -> bool:
        return self._transcripts.pop(doc_id, None) is not None

    def clear(self) -> None:
        self._transcripts.clear()

    def doc_ids(self) -> list[str]:
        return list(self._transcripts)

    def __len__(self) -> int:
        return len(self._transcripts)
