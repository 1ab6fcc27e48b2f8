"""Tests for ChatPersistence and MemoryTranscriptStore."""

import pytest

from smartbar.core.chat_persistence import ChatPersistence
from smartbar.core.context_set import ContextSet
from smartbar.storage import MemoryTranscriptStore
from smartbar.types import ChatMessage, ChatRole, Presentation


def _transcript(*contents: str) -> list[ChatMessage]:
    roles = [ChatRole.USER, ChatRole.ASSISTANT]
    return [ChatMessage(roles[i % 2], c) for i, c in enumerate(contents)]


@pytest.fixture
def store():
    return MemoryTranscriptStore()


@pytest.fixture
def presentations():
    return []


@pytest.fixture
def persistence(store, presentations):
    return ChatPersistence(store, on_presentation=presentations.append)


class TestSaveLoad:
    def test_round_trip(self, persistence, doc_a):
        persistence.save([doc_a], _transcript("q", "a"))
        loaded = persistence.load(ContextSet([doc_a]))
        assert [m.content for m in loaded] == ["q", "a"]
        assert loaded[0].role == ChatRole.USER

    def test_saved_under_every_member(self, persistence, store, doc_a, doc_b):
        persistence.save([doc_a, doc_b], _transcript("shared"))
        assert sorted(store.doc_ids()) == ["tab-1", "tab-2"]
        assert [m.content for m in persistence.load([doc_b])] == ["shared"]

    def test_no_cross_contamination(self, persistence, doc_a, doc_b):
        persistence.save([doc_a], _transcript("for a"))
        persistence.save([doc_b], _transcript("for b"))
        assert [m.content for m in persistence.load([doc_a])] == ["for a"]
        assert [m.content for m in persistence.load([doc_b])] == ["for b"]

    def test_empty_transcript_clears(self, persistence, store, doc_a, doc_b):
        persistence.save([doc_a, doc_b], _transcript("q"))
        persistence.save([doc_a, doc_b], [])
        assert len(store) == 0
        assert persistence.load([doc_a]) == []

    def test_load_prefers_primary(self, persistence, doc_a, doc_b):
        persistence.save([doc_a], _transcript("from a"))
        persistence.save([doc_b], _transcript("from b"))
        loaded = persistence.load([doc_a, doc_b], primary=doc_b)
        assert [m.content for m in loaded] == ["from b"]

    def test_load_ignores_primary_outside_set(self, persistence, doc_a, doc_b, doc_c):
        persistence.save([doc_a], _transcript("from a"))
        persistence.save([doc_c], _transcript("from c"))
        loaded = persistence.load([doc_b, doc_a], primary=doc_c)
        assert [m.content for m in loaded] == ["from a"]

    def test_load_first_non_empty_member(self, persistence, doc_a, doc_b, doc_c):
        persistence.save([doc_c], _transcript("from c"))
        loaded = persistence.load([doc_a, doc_b, doc_c], primary=doc_a)
        assert [m.content for m in loaded] == ["from c"]

    def test_load_empty_set(self, persistence):
        assert persistence.load([]) == []


class TestPresentation:
    def test_conversation_when_found(self, persistence, presentations, doc_a):
        persistence.save([doc_a], _transcript("q"))
        persistence.load([doc_a])
        assert presentations == [Presentation.CONVERSATION]

    def test_results_when_empty(self, persistence, presentations, doc_a):
        persistence.load([doc_a])
        assert presentations == [Presentation.RESULTS]


class TestHolder:
    class Holder:
        def __init__(self, messages=None):
            self.messages = messages or []

        def replace_messages(self, messages):
            self.messages = list(messages)

    def test_flush_and_restore(self, store, doc_a, doc_b):
        holder = self.Holder(_transcript("live"))
        persistence = ChatPersistence(store, holder)
        persistence.flush([doc_a])
        holder.messages = []
        restored = persistence.restore([doc_a, doc_b], primary=doc_b)
        assert [m.content for m in restored] == ["live"]
        assert [m.content for m in holder.messages] == ["live"]

    def test_flush_without_holder_is_noop(self, store, doc_a):
        ChatPersistence(store).flush([doc_a])
        assert len(store) == 0


class TestMemoryStore:
    def test_returns_copies(self, store):
        messages = _transcript("original")
        store.put("t", messages)
        messages[0].content = "mutated"
        got = store.get("t")
        assert got[0].content == "original"
        got[0].content = "mutated again"
        assert store.get("t")[0].content == "original"

    def test_delete_and_clear(self, store):
        store.put("a", _transcript("x"))
        store.put("b", _transcript("y"))
        assert store.delete("a") is True
        assert store.delete("a") is False
        store.clear()
        assert store.doc_ids() == []
