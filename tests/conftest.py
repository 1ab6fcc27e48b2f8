"""Shared fixtures and fakes for smartbar tests."""

from __future__ import annotations

import asyncio

import pytest

from smartbar.config import load_config
from smartbar.session import HostShell
from smartbar.types import (
    AutocompleteRequest,
    AutocompleteResult,
    ContextDocument,
    LLMProviderError,
    ResultKind,
    SmartbarConfig,
)


class FakeLLM:
    """Scripted LLM: ``complete`` returns ``response``, ``stream`` yields ``chunks``."""

    def __init__(self, response: str = "[]", chunks: list[str] | None = None,
                 error: bool = False, stream_error: bool = False, delay: float = 0.0,
                 chunk_delay: float = 0.0, stream_exception: Exception | None = None):
        self.response = response
        self.chunks = chunks if chunks is not None else ["Hello", " world"]
        self.error = error
        self.stream_error = stream_error
        self.delay = delay
        self.chunk_delay = chunk_delay
        self.stream_exception = stream_exception
        self.complete_calls: list[list[dict]] = []
        self.stream_calls: list[list[dict]] = []

    async def complete(self, messages: list[dict], max_tokens: int | None = None) -> str:
        self.complete_calls.append(messages)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise LLMProviderError("boom", provider="fake", status_code=500)
        return self.response

    async def stream(self, messages: list[dict], max_tokens: int | None = None):
        self.stream_calls.append(messages)
        for chunk in self.chunks:
            if self.chunk_delay:
                await asyncio.sleep(self.chunk_delay)
            yield chunk
        if self.stream_error:
            raise LLMProviderError("stream dropped", provider="fake")
        if self.stream_exception is not None:
            raise self.stream_exception


class StubAutocomplete:
    """Records every request; returns ``results`` or raises ``error``."""

    def __init__(self, results: list[AutocompleteResult] | None = None,
                 error: Exception | None = None, delay: float = 0.0):
        self.results = results or []
        self.error = error
        self.delay = delay
        self.requests: list[AutocompleteRequest] = []

    async def query(self, request: AutocompleteRequest) -> list[AutocompleteResult]:
        self.requests.append(request)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return list(self.results)


class RecordingHost(HostShell):
    """HostShell that keeps every callback for later assertions."""

    def __init__(self, recent: list[ContextDocument] | None = None,
                 page_text: str = "page body", page_error: bool = False):
        self.recent = recent or []
        self.page_text = page_text
        self.page_error = page_error
        self.intents: list[tuple] = []
        self.shown: list[tuple] = []
        self.hidden = 0
        self.presentations: list = []
        self.context_views: list = []
        self.transcripts: list = []
        self.results: list[tuple[str, str]] = []
        self.navigations: list[tuple] = []

    def show_intent(self, text, intent, label):
        self.intents.append((text, intent, label))

    def show_suggestions(self, suggestions, source):
        self.shown.append((list(suggestions), source))

    def hide_suggestions(self):
        self.hidden += 1

    def set_presentation(self, presentation):
        self.presentations.append(presentation)

    def update_context(self, view):
        self.context_views.append(view)

    def update_transcript(self, messages):
        self.transcripts.append(list(messages))

    def append_result(self, text, sender):
        self.results.append((text, sender))

    def navigate(self, url, intent):
        self.navigations.append((url, intent))

    async def recent_documents(self):
        return list(self.recent)

    async def extract_page_text(self, doc):
        if self.page_error:
            raise RuntimeError("content script unavailable")
        return self.page_text


def search_result(text: str) -> AutocompleteResult:
    return AutocompleteResult(ResultKind.SEARCH_SUGGESTION, {"suggestion": text})


def url_result(url: str, display: str = "") -> AutocompleteResult:
    payload = {"url": url}
    if display:
        payload["displayUrl"] = display
    return AutocompleteResult(ResultKind.URL, payload)


def tab_result(title: str, url: str = "") -> AutocompleteResult:
    return AutocompleteResult(ResultKind.TAB_SWITCH, {"title": title, "url": url})


@pytest.fixture
def doc_a() -> ContextDocument:
    return ContextDocument(id="tab-1", title="Python asyncio docs", url="https://docs.python.org/3/library/asyncio.html", favicon="py.ico")


@pytest.fixture
def doc_b() -> ContextDocument:
    return ContextDocument(id="tab-2", title="Rust book", url="https://doc.rust-lang.org/book/", favicon="rs.ico")


@pytest.fixture
def doc_c() -> ContextDocument:
    return ContextDocument(id="tab-3", title="Hacker News", url="https://news.ycombinator.com/", favicon="hn.ico")


@pytest.fixture
def internal_doc() -> ContextDocument:
    return ContextDocument(id="tab-9", title="Settings", url="about:preferences")


@pytest.fixture
def fast_config() -> SmartbarConfig:
    """Default config with the page-text delay removed."""
    return load_config(config_dict={"context": {"page_text_delay_seconds": 0}})
