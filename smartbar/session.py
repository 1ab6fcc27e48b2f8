"""SmartbarSession: wires host UI events into the core components.

The host owns the event loop, rendering and navigation. It subclasses
HostShell to receive results and calls the ``on_*``/key methods on
SmartbarSession as events arrive.
"""

from __future__ import annotations

import asyncio
import logging
from urllib.parse import quote

from .classifiers import classify, intent_label
from .config import load_config
from .core.aggregator import SuggestionAggregator
from .core.chat import ChatSession
from .core.chat_persistence import ChatPersistence
from .core.context_set import BLANK_URL, ContextSet, ContextSetManager
from .core.prompt_cache import PromptCache
from .core.quick_prompts import QuickPromptGenerator
from .core.selection import SuggestionList
from .core.store import TranscriptStore
from .storage.memory import MemoryTranscriptStore
from .types import (
    AutocompleteProvider,
    ChatMessage,
    ContextDocument,
    ContextView,
    IntentType,
    LLMProvider,
    Presentation,
    SmartbarConfig,
    Suggestion,
    SuggestionSource,
)

logger = logging.getLogger(__name__)

PAGE_TEXT_UNAVAILABLE = "Couldn't read page text."
_URI_COMPONENT_SAFE = "-_.!~*'()"


class HostShell:
    """Callbacks from the core to the host UI. Every method is a no-op by default."""

    def show_intent(self, text: str, intent: IntentType | None, label: str) -> None:
        pass

    def show_suggestions(self, suggestions: list[Suggestion], source: SuggestionSource) -> None:
        pass

    def hide_suggestions(self) -> None:
        pass

    def set_presentation(self, presentation: Presentation) -> None:
        pass

    def update_context(self, view: ContextView) -> None:
        pass

    def update_transcript(self, messages: list[ChatMessage]) -> None:
        pass

    def append_result(self, text: str, sender: str) -> None:
        pass

    def navigate(self, url: str, intent: IntentType) -> None:
        pass

    async def recent_documents(self) -> list[ContextDocument]:
        return []

    async def extract_page_text(self, doc: ContextDocument) -> str:
        return ""


def build_navigation_url(query: str, intent: IntentType, search_url: str) -> str:
    """URL the host should load for a submitted query."""
    if intent == IntentType.NAVIGATE:
        if "://" in query:
            return query
        return query if query.startswith("about:") else "https://" + query
    return search_url.format(query=quote(query, safe=_URI_COMPONENT_SAFE))


class SmartbarSession:
    """One input bar plus its context, suggestions and conversation.

    ``cache`` and ``store`` are meant to be shared between sessions; pass the
    same instances to every panel that should see the same prompts and
    transcripts.
    """

    def __init__(
        self,
        host: HostShell,
        autocomplete: AutocompleteProvider,
        config: SmartbarConfig | None = None,
        llm: LLMProvider | None = None,
        cache: PromptCache | None = None,
        store: TranscriptStore | None = None,
        sidebar: bool = False,
    ) -> None:
        self.config = config or load_config()
        self.host = host
        self.sidebar = sidebar
        self.text = ""
        self.page_text = ""
        self.presentation = Presentation.RESULTS

        self.cache = cache if cache is not None else PromptCache(self.config.cache.ttl_seconds)
        self.store = store if store is not None else MemoryTranscriptStore()
        self.chat = ChatSession(llm, self.config.insights, on_update=host.update_transcript)
        self.persistence = ChatPersistence(self.store, self.chat, on_presentation=self._set_presentation)
        self.contexts = ContextSetManager(
            self.persistence, self.config.context, on_change=host.update_context
        )
        self.quick_prompts = QuickPromptGenerator(
            self.cache,
            llm,
            self.config.quick_prompts,
            self.config.context,
            recent_documents=host.recent_documents,
        )
        self.aggregator = SuggestionAggregator(
            autocomplete,
            self.quick_prompts,
            self.contexts,
            self._show_suggestions,
            self.config.suggestions,
        )
        self.suggestions = SuggestionList()

    # -- classification & input --

    def classify(self, text: str) -> IntentType:
        return classify(text)

    def on_input_changed(self, text: str) -> asyncio.Task | None:
        self.text = text
        if text.strip():
            intent = classify(text)
            self.host.show_intent(text, intent, intent_label(intent))
        else:
            self.host.show_intent(text, None, "\N{RIGHTWARDS ARROW}")
            self._hide_suggestions()
        return self.aggregator.on_input_changed(text)

    # -- selection --

    def arrow_down(self) -> int:
        return self.suggestions.move_down()

    def arrow_up(self) -> int:
        return self.suggestions.move_up()

    def hover(self, index: int) -> int:
        return self.suggestions.hover(index)

    def mouse_leave(self) -> int:
        return self.suggestions.mouse_leave(self.aggregator.edited)

    def escape(self) -> asyncio.Task | None:
        """Clear non-empty input back to quick prompts; hide suggestions otherwise."""
        if self.text.strip():
            return self.on_input_changed("")
        self.aggregator.cancel_pending()
        self._hide_suggestions()
        return None

    async def enter(self) -> IntentType | None:
        selected = self.suggestions.selected
        return await self.submit(selected.text if selected is not None else self.text)

    async def select(self, index: int) -> IntentType | None:
        items = self.suggestions.items
        if not 0 <= index < len(items):
            return None
        return await self.submit(items[index].text)

    # -- submission --

    async def submit(self, query: str) -> IntentType | None:
        if not query.strip():
            return None

        intent = classify(query)
        self._hide_suggestions()
        self._reset_input()

        if intent == IntentType.CHAT:
            await self._submit_chat(query)
        elif intent == IntentType.ACTION and self.sidebar:
            self.handle_action(query)
        else:
            self._set_presentation(Presentation.RESULTS)
            if self.sidebar:
                self.host.append_result(f"Navigating: {query}", "user")
            self.perform_navigation(query, intent)
        return intent

    async def _submit_chat(self, query: str) -> None:
        self._set_presentation(Presentation.CONVERSATION)
        origin = self.contexts.context_set
        transcript = self.chat.messages
        include_page = self.contexts.is_primary_in_context()
        await self.chat.submit_prompt(
            query,
            origin.documents,
            self.page_text if include_page else "",
        )
        if self.chat.messages is not transcript:
            self._settle_detached_reply(origin, transcript)

    def _settle_detached_reply(self, origin: ContextSet, transcript: list[ChatMessage]) -> None:
        """The context changed while the reply streamed; the saved copy stopped mid-reply.

        The finished transcript is written back under the set it was asked in,
        and reloaded if that set still overlaps the current one.
        """
        logger.debug("Reply finished after context change; saving under %s", origin.ids)
        self.persistence.save(origin, transcript)
        current = self.contexts.context_set
        if any(doc.id in current for doc in origin):
            self.persistence.restore(current, self.contexts.primary)

    def handle_action(self, action: str) -> None:
        self._set_presentation(Presentation.RESULTS)
        lowered = action.lower()
        if "tab" in lowered:
            self.host.append_result(f"Action: {action}", "user")
            self.host.append_result("Tab switching is not available in sidebar mode.", "assistant")
        elif lowered.startswith("find "):
            term = action[5:].strip()
            self.host.append_result(f"Searching for: {term}", "user")
            self.host.append_result(
                f'Find functionality for "{term}" would be implemented here.', "assistant"
            )
        else:
            self.host.append_result(f"Action: {action}", "user")
            self.host.append_result(f'Action "{action}" is not yet supported.', "assistant")

    def perform_navigation(self, query: str, intent: IntentType) -> str:
        primary = self.contexts.primary
        if primary is not None and self.chat.messages:
            self.persistence.save([primary], self.chat.messages)
        url = build_navigation_url(query, intent, self.config.navigation.search_url)
        self.host.navigate(url, intent)
        return url

    # -- context --

    def context_add(self, doc: ContextDocument) -> bool:
        changed = self.contexts.add(doc)
        if changed:
            self._refresh_prompts_for_context()
        return changed

    def context_remove(self, doc_id: str) -> bool:
        changed = self.contexts.remove(doc_id)
        if changed:
            self._refresh_prompts_for_context()
        return changed

    async def on_document_switched(self, doc: ContextDocument) -> str:
        """Host switched tabs. Returns the extracted page text once it is read."""
        idle = not self.aggregator.edited and not self.text.strip()
        if idle:
            self._hide_suggestions()

        if doc.url == BLANK_URL:
            # tab restore placeholder; skip context reset and prompt generation
            self.contexts.primary = doc
        else:
            self.contexts.reset_to_current(doc)
            if idle:
                self.aggregator.request_quick_prompts()

        await asyncio.sleep(self.config.context.page_text_delay_seconds)
        try:
            self.page_text = await self.host.extract_page_text(doc)
        except Exception as e:
            logger.warning("Failed to get page text for %s: %s", doc.id, e)
            self.page_text = PAGE_TEXT_UNAVAILABLE
        return self.page_text

    async def close(self) -> None:
        await self.aggregator.close()

    # -- internals --

    def _refresh_prompts_for_context(self) -> None:
        if not self.aggregator.edited and self.suggestions.visible and not self.text.strip():
            self.aggregator.request_quick_prompts()

    def _show_suggestions(self, suggestions: list[Suggestion], source: SuggestionSource) -> None:
        self.suggestions.show(suggestions, source)
        self.host.show_suggestions(suggestions, source)

    def _hide_suggestions(self) -> None:
        self.suggestions.hide()
        self.host.hide_suggestions()

    def _reset_input(self) -> None:
        self.text = ""
        self.aggregator.cancel_pending()
        self.aggregator.mark_unedited()
        self.host.show_intent("", None, "\N{RIGHTWARDS ARROW}")

    def _set_presentation(self, presentation: Presentation) -> None:
        self.presentation = presentation
        self.host.set_presentation(presentation)
