"""TranscriptStore abstract base class: document id -> saved transcript."""

from __future__ import annotations

from abc import ABC, abstractmethod

from ..types import ChatMessage


class TranscriptStore(ABC):
    """Pluggable storage for conversation transcripts, keyed by document id.

    One instance is normally shared by every session in the process, so
    implementations must hand out copies rather than their internal lists.
    """

    @abstractmethod
    def get(self, doc_id: str) -> list[ChatMessage]:
        """Saved transcript for ``doc_id``. Empty list if none."""

    @abstractmethod
    def put(self, doc_id: str, messages: list[ChatMessage]) -> None:
        """Store a transcript for ``doc_id``, replacing any existing one."""

    @abstractmethod
    def delete(self, doc_id: str) -> bool:
        """Remove the transcript for ``doc_id``. Returns True if one existed."""

    @abstractmethod
    def clear(self) -> None:
        """Drop every saved transcript."""

    @abstractmethod
    def doc_ids(self) -> list[str]:
        """Ids that currently have a saved transcript."""
