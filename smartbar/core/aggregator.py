"""SuggestionAggregator: classifier + autocomplete + quick prompts -> one list.

Non-empty input is debounced; when the timer fires exactly one autocomplete
query runs for the latest text. Empty input cancels the timer and asks for
quick prompts immediately. Every initiated request takes a number from a
monotonic counter and its result is emitted only if no newer request has
started since.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
from typing import Callable

from ..classifiers import classify
from ..types import (
    AutocompleteProvider,
    AutocompleteRequest,
    AutocompleteResult,
    IntentType,
    ResultKind,
    Suggestion,
    SuggestionConfig,
    SuggestionSource,
)
from .context_set import ContextSetManager
from .debounce import Debouncer
from .quick_prompts import QuickPromptGenerator

logger = logging.getLogger(__name__)

Emit = Callable[[list[Suggestion], SuggestionSource], None]

TAB_NEXT = "tab next"


def map_result(result: AutocompleteResult, query: str) -> Suggestion | None:
    """Convert one provider result. None for unknown kinds and empty text."""
    payload = result.payload or {}
    if result.kind == ResultKind.TAB_SWITCH:
        target = payload.get("title") or payload.get("url") or ""
        suggestion = Suggestion(f"tab switch: {target}", IntentType.ACTION)
    elif result.kind == ResultKind.SEARCH_SUGGESTION:
        text = payload.get("suggestion") or payload.get("query") or query
        suggestion = Suggestion(text, IntentType.SEARCH)
    elif result.kind == ResultKind.URL:
        text = payload.get("displayUrl") or payload.get("url") or ""
        suggestion = Suggestion(text, IntentType.NAVIGATE)
    else:
        return None
    if not suggestion.text.strip():
        return None
    return suggestion


def map_results(results: list[AutocompleteResult], query: str) -> list[Suggestion]:
    mapped = []
    for result in results:
        suggestion = map_result(result, query)
        if suggestion is not None:
            mapped.append(suggestion)
    return mapped


def _has_text(suggestions: list[Suggestion], text: str) -> bool:
    return any(s.text == text for s in suggestions)


def merge_live_results(
    query: str,
    mapped: list[Suggestion],
    config: SuggestionConfig | None = None,
) -> list[Suggestion]:
    """Rank mapped provider results into the final live suggestion list."""
    config = config or SuggestionConfig()
    suggestions: list[Suggestion] = []

    searches = [s for s in mapped if s.type == IntentType.SEARCH]
    if searches:
        first = searches[0]
        suggestions.append(Suggestion(first.text, IntentType.SEARCH))
        suggestions.append(Suggestion(first.text + "?", IntentType.CHAT))
        for result in searches[1 : 1 + config.search_followups]:
            suggestions.append(Suggestion(result.text, classify(result.text)))

    navigates = [s for s in mapped if s.type == IntentType.NAVIGATE]
    suggestions.extend(navigates[: config.navigate_limit])

    actions = [s for s in mapped if s.type == IntentType.ACTION]
    suggestions.extend(actions[: config.action_limit])

    if len(suggestions) < config.min_before_query_fill:
        query_type = classify(query)
        if not _has_text(suggestions, query):
            suggestions.append(Suggestion(query, query_type))
        if query_type == IntentType.SEARCH and not _has_text(suggestions, query + "?"):
            suggestions.append(Suggestion(query + "?", IntentType.CHAT))

        if len(suggestions) < config.fill_target:
            for fallback in (
                Suggestion(TAB_NEXT, IntentType.ACTION),
                Suggestion(config.fallback_domain, IntentType.NAVIGATE),
                Suggestion(query + " guide", IntentType.SEARCH),
                Suggestion(query + " tutorial", IntentType.SEARCH),
            ):
                if len(suggestions) >= config.fill_target:
                    break
                if not _has_text(suggestions, fallback.text):
                    suggestions.append(fallback)

    return suggestions[: config.max_results]


def fallback_suggestions(query: str, config: SuggestionConfig | None = None) -> list[Suggestion]:
    """Fixed four-entry list used when the autocomplete provider fails."""
    config = config or SuggestionConfig()
    query_type = classify(query)
    if query_type == IntentType.SEARCH:
        variant = Suggestion(query + "?", IntentType.CHAT)
    else:
        variant = Suggestion(query, IntentType.SEARCH)
    return [
        Suggestion(query, query_type),
        variant,
        Suggestion(TAB_NEXT, IntentType.ACTION),
        Suggestion(config.fallback_domain, IntentType.NAVIGATE),
    ]


class SuggestionAggregator:
    """Turns input changes into emitted suggestion lists."""

    def __init__(
        self,
        autocomplete: AutocompleteProvider,
        quick_prompts: QuickPromptGenerator,
        contexts: ContextSetManager,
        emit: Emit,
        config: SuggestionConfig | None = None,
    ) -> None:
        self.config = config or SuggestionConfig()
        self._autocomplete = autocomplete
        self._quick_prompts = quick_prompts
        self._contexts = contexts
        self._emit = emit
        self._debouncer = Debouncer(self.config.debounce_ms / 1000.0)
        self._request_ids = itertools.count(1)
        self._latest_request = 0
        self._edited = False
        self._tasks: set[asyncio.Task] = set()

    @property
    def edited(self) -> bool:
        """True once the user has typed since prompts were last shown."""
        return self._edited

    def mark_unedited(self) -> None:
        self._edited = False

    @property
    def latest_request(self) -> int:
        return self._latest_request

    def on_input_changed(self, text: str) -> asyncio.Task | None:
        """React to the bar's text changing. Returns the quick-prompt task for empty input."""
        self._debouncer.cancel()

        if not text.strip():
            self._edited = False
            return self._spawn(self.refresh_quick_prompts(self._next_request()))

        self._edited = True
        self._debouncer.schedule(self._start_live_query, text)
        return None

    def request_quick_prompts(self) -> asyncio.Task:
        """Schedule a quick-prompt refresh without touching the input state."""
        return self._spawn(self.refresh_quick_prompts(self._next_request()))

    def cancel_pending(self) -> None:
        """Drop the pending timer and make every in-flight result stale."""
        self._debouncer.cancel()
        self._latest_request = next(self._request_ids)

    async def close(self) -> None:
        self.cancel_pending()
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    # -- live suggestions --

    def _start_live_query(self, text: str) -> None:
        request_id = self._next_request()
        self._spawn(self._run_live_query(text, request_id))

    async def _run_live_query(self, text: str, request_id: int) -> None:
        suggestions = await self.live_suggestions(text)
        if request_id != self._latest_request:
            logger.debug("Dropping stale live suggestions for request %d", request_id)
            return
        self._emit(suggestions, SuggestionSource.LIVE)

    async def live_suggestions(self, query: str) -> list[Suggestion]:
        """Query the provider once and rank the results; never raises."""
        request = AutocompleteRequest(
            query_text=query.strip(),
            max_results=self.config.autocomplete_max_results,
            allow_autofill=False,
        )
        try:
            results = await self._autocomplete.query(request)
            return merge_live_results(query, map_results(results, query), self.config)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.warning("Autocomplete query failed, using fallback suggestions: %s", e)
            return fallback_suggestions(query, self.config)

    # -- quick prompts --

    async def refresh_quick_prompts(self, request_id: int | None = None) -> list[Suggestion]:
        """Generate quick prompts for the current context and emit them if still wanted.

        ``request_id`` is taken when the refresh is requested, so a later
        ``cancel_pending`` drops it even before the task starts. Never raises.
        """
        if request_id is None:
            request_id = self._next_request()
        contexts = self._contexts
        primary_title = contexts.primary.title if contexts.primary is not None else ""
        try:
            prompts = await self._quick_prompts.generate(contexts.context_set.documents, primary_title)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.warning("Quick prompt generation failed, using defaults: %s", e)
            prompts = list(self._quick_prompts.config.default_prompts)

        if request_id != self._latest_request or self._edited:
            logger.debug("Dropping stale quick prompts for request %d", request_id)
            return prompts
        if prompts:
            self._emit(prompts, SuggestionSource.QUICK_PROMPTS)
            self._edited = False
        return prompts

    # -- internals --

    def _next_request(self) -> int:
        self._latest_request = next(self._request_ids)
        return self._latest_request

    def _spawn(self, coro) -> asyncio.Task:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task
