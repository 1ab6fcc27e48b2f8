"""Tests for ContextSet, cache keys, eligibility and ContextSetManager."""

import pytest

from smartbar.core.chat_persistence import ChatPersistence
from smartbar.core.context_set import ContextSet, ContextSetManager, cache_key, is_eligible
from smartbar.storage import MemoryTranscriptStore
from smartbar.types import (
    DEFAULT_INTERNAL_SCHEMES,
    ChatMessage,
    ChatRole,
    ContextConfig,
    ContextDocument,
    Presentation,
)


class Holder:
    def __init__(self):
        self.messages: list[ChatMessage] = []

    def replace_messages(self, messages):
        self.messages = list(messages)


@pytest.fixture
def holder():
    return Holder()


@pytest.fixture
def store():
    return MemoryTranscriptStore()


@pytest.fixture
def views():
    return []


@pytest.fixture
def presentations():
    return []


@pytest.fixture
def manager(store, holder, views, presentations):
    persistence = ChatPersistence(store, holder, on_presentation=presentations.append)
    return ContextSetManager(persistence, ContextConfig(), on_change=views.append)


class TestContextSet:
    def test_dedup_first_wins(self, doc_a, doc_b):
        renamed = ContextDocument(id=doc_a.id, title="other", url="https://other.example/")
        cs = ContextSet([doc_a, doc_b, renamed])
        assert cs.ids == ["tab-1", "tab-2"]
        assert cs.get("tab-1").title == doc_a.title

    def test_membership_by_id(self, doc_a, doc_b):
        cs = ContextSet([doc_a])
        assert "tab-1" in cs
        assert "tab-2" not in cs
        assert len(cs) == 1
        assert not ContextSet()

    def test_with_added_and_without_return_new_sets(self, doc_a, doc_b):
        cs = ContextSet([doc_a])
        bigger = cs.with_added(doc_b)
        assert cs.ids == ["tab-1"]
        assert bigger.ids == ["tab-1", "tab-2"]
        assert bigger.without("tab-1").ids == ["tab-2"]
        assert bigger.with_added(doc_a).ids == ["tab-1", "tab-2"]


class TestCacheKey:
    def test_order_independent(self, doc_a, doc_b, doc_c):
        assert cache_key([doc_a, doc_b, doc_c]) == cache_key([doc_c, doc_a, doc_b])

    def test_ignores_ids(self, doc_a):
        clone = ContextDocument(id="another-id", title=doc_a.title, url=doc_a.url)
        assert cache_key([doc_a]) == cache_key([clone])

    def test_changes_with_title(self, doc_a, doc_b):
        retitled = ContextDocument(id=doc_a.id, title="Python asyncio docs (2)", url=doc_a.url)
        assert cache_key([doc_a, doc_b]) != cache_key([retitled, doc_b])

    def test_changes_with_url(self, doc_a):
        moved = ContextDocument(id=doc_a.id, title=doc_a.title, url=doc_a.url + "#top")
        assert cache_key([doc_a]) != cache_key([moved])

    def test_changes_with_membership(self, doc_a, doc_b):
        assert cache_key([doc_a]) != cache_key([doc_a, doc_b])

    def test_set_method_matches_function(self, doc_a, doc_b):
        assert ContextSet([doc_b, doc_a]).cache_key() == cache_key([doc_a, doc_b])

    def test_is_hex_digest(self, doc_a):
        key = cache_key([doc_a])
        assert len(key) == 64
        int(key, 16)


class TestEligibility:
    @pytest.mark.parametrize("url", [
        "about:blank",
        "about:preferences",
        "chrome://settings",
        "moz-extension://abc/page.html",
        "resource://gre/modules",
        "",
        "   ",
    ])
    def test_ineligible(self, url):
        assert not is_eligible(ContextDocument(id="x", url=url), DEFAULT_INTERNAL_SCHEMES)

    def test_none_is_ineligible(self):
        assert not is_eligible(None, DEFAULT_INTERNAL_SCHEMES)

    def test_web_page_is_eligible(self, doc_a):
        assert is_eligible(doc_a, DEFAULT_INTERNAL_SCHEMES)

    def test_scheme_check_is_case_insensitive(self):
        assert not is_eligible(ContextDocument(id="x", url="About:Config"), DEFAULT_INTERNAL_SCHEMES)


class TestManager:
    def test_reset_to_current(self, manager, doc_a, views):
        cs = manager.reset_to_current(doc_a)
        assert cs.ids == ["tab-1"]
        assert manager.primary == doc_a
        assert manager.is_primary_in_context()
        assert views[-1].primary_in_context
        assert views[-1].primary_favicon == "py.ico"

    def test_reset_with_ineligible_primary_is_empty(self, manager, internal_doc):
        cs = manager.reset_to_current(internal_doc)
        assert len(cs) == 0
        assert manager.primary == internal_doc
        assert not manager.is_primary_in_context()

    def test_add(self, manager, doc_a, doc_b):
        manager.reset_to_current(doc_a)
        assert manager.add(doc_b) is True
        assert manager.context_set.ids == ["tab-1", "tab-2"]

    def test_add_duplicate_is_noop(self, manager, doc_a, views):
        manager.reset_to_current(doc_a)
        count = len(views)
        assert manager.add(doc_a) is False
        assert len(views) == count

    def test_add_ineligible_is_noop(self, manager, doc_a, internal_doc):
        manager.reset_to_current(doc_a)
        assert manager.add(internal_doc) is False
        assert manager.context_set.ids == ["tab-1"]

    def test_remove(self, manager, doc_a, doc_b):
        manager.reset_to_current(doc_a)
        manager.add(doc_b)
        assert manager.remove("tab-1") is True
        assert manager.context_set.ids == ["tab-2"]
        assert not manager.is_primary_in_context()
        assert manager.remove("missing") is False

    def test_remove_missing_leaves_transcript(self, manager, holder, views, presentations, internal_doc):
        manager.reset_to_current(internal_doc)
        holder.messages = [ChatMessage(ChatRole.USER, "q"), ChatMessage(ChatRole.ASSISTANT, "a")]
        view_count, presentation_count = len(views), len(presentations)

        assert manager.remove("not-in-context") is False
        assert [m.content for m in holder.messages] == ["q", "a"]
        assert len(views) == view_count
        assert len(presentations) == presentation_count

    def test_eligible_filters(self, manager, doc_a, internal_doc):
        assert manager.eligible([doc_a, internal_doc]) == [doc_a]

    def test_view_labels(self, manager, doc_a, doc_b, doc_c):
        manager.reset_to_current(doc_a)
        assert manager.view().label == "add tabs"
        manager.add(doc_b)
        view = manager.view()
        assert view.label == "1 tab"
        assert view.favicons == ["rs.ico"]
        assert view.extra_count == 1
        manager.add(doc_c)
        assert manager.view().label == "2 tabs"

    def test_view_caps_favicons(self, store, holder):
        config = ContextConfig(favicon_stack_limit=2)
        manager = ContextSetManager(ChatPersistence(store, holder), config)
        docs = [ContextDocument(id=f"t{i}", url=f"https://site{i}.example/", favicon=f"{i}.ico") for i in range(5)]
        manager.reset_to_current(docs[0])
        for doc in docs[1:]:
            manager.add(doc)
        view = manager.view()
        assert view.favicons == ["1.ico", "2.ico"]
        assert view.extra_count == 4
        assert view.label == "4 tabs"


class TestTransitions:
    def test_transcript_flushed_on_change(self, manager, holder, store, doc_a, doc_b):
        manager.reset_to_current(doc_a)
        holder.messages = [ChatMessage(ChatRole.USER, "hello")]
        manager.add(doc_b)
        assert [m.content for m in store.get("tab-1")] == ["hello"]

    def test_transcript_follows_set(self, manager, holder, doc_a, doc_b, presentations):
        manager.reset_to_current(doc_a)
        holder.messages = [ChatMessage(ChatRole.USER, "about a")]
        manager.reset_to_current(doc_b)
        assert holder.messages == []
        assert presentations[-1] == Presentation.RESULTS

        manager.reset_to_current(doc_a)
        assert [m.content for m in holder.messages] == ["about a"]
        assert presentations[-1] == Presentation.CONVERSATION

    def test_no_cross_contamination(self, manager, holder, doc_a, doc_b):
        manager.reset_to_current(doc_a)
        holder.messages = [ChatMessage(ChatRole.USER, "a only")]
        manager.reset_to_current(doc_b)
        holder.messages = [ChatMessage(ChatRole.USER, "b only")]
        manager.reset_to_current(doc_a)
        assert [m.content for m in holder.messages] == ["a only"]
        manager.reset_to_current(doc_b)
        assert [m.content for m in holder.messages] == ["b only"]
