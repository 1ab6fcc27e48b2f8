"""ContextSet (ordered, id-deduplicated documents) and ContextSetManager.

The manager owns the active set for one session. Every change follows the
same sequence: flush the outgoing set's transcript, install a freshly built
set, then load the transcript for the incoming set. Sets are never mutated in
place across that boundary.
"""

from __future__ import annotations

import hashlib
import logging
from typing import Callable, Iterable, Iterator

from ..types import ContextConfig, ContextDocument, ContextView
from .chat_persistence import ChatPersistence

logger = logging.getLogger(__name__)

BLANK_URL = "about:blank"


class ContextSet:
    """Immutable ordered set of documents, deduplicated by ``id`` (first wins)."""

    __slots__ = ("_docs",)

    def __init__(self, docs: Iterable[ContextDocument] = ()) -> None:
        seen: set[str] = set()
        ordered: list[ContextDocument] = []
        for doc in docs:
            if doc.id in seen:
                continue
            seen.add(doc.id)
            ordered.append(doc)
        self._docs: tuple[ContextDocument, ...] = tuple(ordered)

    def __iter__(self) -> Iterator[ContextDocument]:
        return iter(self._docs)

    def __len__(self) -> int:
        return len(self._docs)

    def __bool__(self) -> bool:
        return bool(self._docs)

    def __contains__(self, doc_id: object) -> bool:
        return any(d.id == doc_id for d in self._docs)

    def __repr__(self) -> str:
        return f"ContextSet({[d.id for d in self._docs]!r})"

    @property
    def documents(self) -> list[ContextDocument]:
        return list(self._docs)

    @property
    def ids(self) -> list[str]:
        return [d.id for d in self._docs]

    def get(self, doc_id: str) -> ContextDocument | None:
        for doc in self._docs:
            if doc.id == doc_id:
                return doc
        return None

    def with_added(self, doc: ContextDocument) -> ContextSet:
        return ContextSet([*self._docs, doc])

    def without(self, doc_id: str) -> ContextSet:
        return ContextSet(d for d in self._docs if d.id != doc_id)

    def cache_key(self) -> str:
        return cache_key(self._docs)


def cache_key(docs: Iterable[ContextDocument]) -> str:
    """Content digest of a document collection.

    Built from sorted ``title|url`` strings, so it ignores insertion order and
    document ids but changes whenever any member's title or url does.
    """
    parts = sorted(f"{d.title}|{d.url}" for d in docs)
    return hashlib.sha256("\n".join(parts).encode("utf-8")).hexdigest()


def is_eligible(doc: ContextDocument | None, internal_schemes: Iterable[str]) -> bool:
    """Only ordinary web content may be used as context."""
    if doc is None or not doc.url:
        return False
    url = doc.url.strip().lower()
    if not url or url == BLANK_URL:
        return False
    return not any(url.startswith(scheme) for scheme in internal_schemes)


class ContextSetManager:
    """Maintains the active ContextSet and keeps transcripts in step with it."""

    def __init__(
        self,
        persistence: ChatPersistence,
        config: ContextConfig | None = None,
        on_change: Callable[[ContextView], None] | None = None,
    ) -> None:
        self.config = config or ContextConfig()
        self._persistence = persistence
        self._on_change = on_change
        self._set = ContextSet()
        self._primary: ContextDocument | None = None

    # -- read side --

    @property
    def context_set(self) -> ContextSet:
        return self._set

    @property
    def primary(self) -> ContextDocument | None:
        """The document the host currently shows (the active tab)."""
        return self._primary

    @primary.setter
    def primary(self, doc: ContextDocument | None) -> None:
        self._primary = doc

    def is_eligible(self, doc: ContextDocument | None) -> bool:
        return is_eligible(doc, self.config.internal_schemes)

    def eligible(self, docs: Iterable[ContextDocument]) -> list[ContextDocument]:
        return [d for d in docs if self.is_eligible(d)]

    def is_primary_in_context(self) -> bool:
        return self._primary is not None and self._primary.id in self._set

    def view(self) -> ContextView:
        """Favicon stack and count for the non-primary members."""
        primary_id = self._primary.id if self._primary is not None else None
        others = [d for d in self._set if d.id != primary_id]
        count = len(others)
        if count == 0:
            label = "add tabs"
        elif count == 1:
            label = "1 tab"
        else:
            label = f"{count} tabs"
        in_context = self.is_primary_in_context()
        return ContextView(
            primary_in_context=in_context,
            primary_favicon=self._primary.favicon if in_context and self._primary else "",
            favicons=[d.favicon for d in others[: self.config.favicon_stack_limit]],
            extra_count=count,
            label=label,
        )

    # -- transitions --

    def reset_to_current(self, doc: ContextDocument | None = None) -> ContextSet:
        """Scope context to the primary document alone (or nothing if ineligible).

        ``doc`` replaces the primary document when given.
        """
        if doc is not None:
            self._primary = doc
        if self.is_eligible(self._primary):
            new_set = ContextSet([self._primary])
        else:
            new_set = ContextSet()
        self._transition(new_set)
        return self._set

    def add(self, doc: ContextDocument) -> bool:
        """Add ``doc``. Returns False (and changes nothing) when it is present or ineligible."""
        if doc.id in self._set:
            return False
        if not self.is_eligible(doc):
            logger.debug("Ignoring ineligible context document %s (%s)", doc.id, doc.url)
            return False
        self._transition(self._set.with_added(doc))
        return True

    def remove(self, doc_id: str) -> bool:
        """Remove the member with ``doc_id``. Returns False (and changes nothing) when absent."""
        if doc_id not in self._set:
            return False
        self._transition(self._set.without(doc_id))
        return True

    def _transition(self, new_set: ContextSet) -> None:
        old_set = self._set
        self._persistence.flush(old_set)
        self._set = new_set
        self._persistence.restore(new_set, self._primary)
        logger.info("Context changed: %s -> %s", old_set.ids, new_set.ids)
        if self._on_change is not None:
            self._on_change(self.view())
