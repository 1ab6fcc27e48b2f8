"""ChatPersistence: save/restore the live transcript across context changes."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable, Iterable, Protocol

from ..types import ChatMessage, ContextDocument, Presentation
from .store import TranscriptStore

if TYPE_CHECKING:
    from .context_set import ContextSet

logger = logging.getLogger(__name__)


class TranscriptHolder(Protocol):
    """Whatever owns the live transcript (normally a ChatSession)."""

    @property
    def messages(self) -> list[ChatMessage]: ...

    def replace_messages(self, messages: list[ChatMessage]) -> None: ...


class ChatPersistence:
    """Maps context-set identity to saved transcripts.

    A transcript is written under every member id of the set it belonged to,
    so it can be found again from any of them. ``load`` always switches the
    host presentation: conversation for a non-empty transcript, results
    otherwise.
    """

    def __init__(
        self,
        store: TranscriptStore,
        holder: TranscriptHolder | None = None,
        on_presentation: Callable[[Presentation], None] | None = None,
    ) -> None:
        self.store = store
        self.holder = holder
        self._on_presentation = on_presentation

    def save(self, context_set: Iterable[ContextDocument], transcript: list[ChatMessage]) -> None:
        ids = [doc.id for doc in context_set]
        if transcript:
            for doc_id in ids:
                self.store.put(doc_id, transcript)
            logger.debug("Saved %d messages under %s", len(transcript), ids)
        else:
            for doc_id in ids:
                self.store.delete(doc_id)

    def load(
        self,
        context_set: ContextSet | Iterable[ContextDocument],
        primary: ContextDocument | None = None,
    ) -> list[ChatMessage]:
        members = list(context_set)
        member_ids = {doc.id for doc in members}
        transcript: list[ChatMessage] = []

        if primary is not None and primary.id in member_ids:
            transcript = self.store.get(primary.id)

        if not transcript:
            for doc in members:
                transcript = self.store.get(doc.id)
                if transcript:
                    break

        presentation = Presentation.CONVERSATION if transcript else Presentation.RESULTS
        if self._on_presentation is not None:
            self._on_presentation(presentation)
        return transcript

    # -- holder-bound helpers used on every context transition --

    def flush(self, context_set: Iterable[ContextDocument]) -> None:
        """Save the holder's live transcript for the outgoing set."""
        if self.holder is None:
            return
        self.save(context_set, self.holder.messages)

    def restore(
        self,
        context_set: Iterable[ContextDocument],
        primary: ContextDocument | None = None,
    ) -> list[ChatMessage]:
        """Load the incoming set's transcript into the holder."""
        transcript = self.load(context_set, primary)
        if self.holder is not None:
            self.holder.replace_messages(transcript)
        return transcript
