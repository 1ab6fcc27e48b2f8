"""QuickPromptGenerator: proactive suggestions for an empty bar.

Prompts are generated by the LLM from the context documents and memoized in
the shared PromptCache under the documents' cache key. When the LLM is
missing, fails, or answers with something unusable, static prompts derived
from titles and domains are used instead (and cached the same way).
"""

from __future__ import annotations

import json
import logging
import re
from typing import Awaitable, Callable

from ..types import (
    ContextConfig,
    ContextDocument,
    IntentType,
    LLMProvider,
    LLMProviderError,
    QuickPromptConfig,
    Suggestion,
)
from .context_set import cache_key, is_eligible
from .prompt_cache import PromptCache

logger = logging.getLogger(__name__)

RecentDocuments = Callable[[], Awaitable[list[ContextDocument]]]

_FENCE_OPEN_RE = re.compile(r"^```(?:json)?\s*")
_FENCE_CLOSE_RE = re.compile(r"\s*```$")
_SCHEME_RE = re.compile(r"^https?://")

QUICK_PROMPT_INSTRUCTIONS = """\
Based on the following browser tab context, generate {count} intelligent quick prompts that would be useful to a user. Return ONLY a JSON array with objects containing "text" and "type" fields.

Tab context:
{tab_context}

Generate a mix of:
- 3-4 "chat" prompts: Questions or requests for analysis/explanation about the content (end with ? or ask for summaries, comparisons, explanations)
- 2-3 "search" prompts: Search queries to find related information (specific topics, guides, tutorials)
- 1-2 "navigate" prompts: Useful websites or domains related to the content (just domain names or short URLs)

Make the prompts specific and contextually relevant. For chat prompts, focus on understanding, comparing, or analyzing the content. For search prompts, focus on finding related resources or deeper information. For navigate prompts, suggest relevant websites.

Example format:
[
  {{"text": "What are the main concepts in this article?", "type": "chat"}},
  {{"text": "machine learning tutorials", "type": "search"}},
  {{"text": "stackoverflow.com", "type": "navigate"}}
]

Return only the JSON array, no other text:"""


def describe_tabs(docs: list[ContextDocument]) -> str:
    if not docs:
        return "No tabs are selected for context."
    if len(docs) == 1:
        return f'Current tab: "{docs[0].title}" at {docs[0].url}'
    lines = [f"Multiple tabs selected ({len(docs)}):"]
    for i, doc in enumerate(docs, 1):
        lines.append(f'{i}. "{doc.title}" at {doc.url}')
    return "\n".join(lines) + "\n"


def build_quick_prompt_request(docs: list[ContextDocument], count: int = 8) -> str:
    return QUICK_PROMPT_INSTRUCTIONS.format(count=count, tab_context=describe_tabs(docs))


def parse_quick_prompts(response: str, limit: int = 8) -> list[Suggestion]:
    """Parse the LLM's JSON array. Raises ValueError when it is not one."""
    cleaned = _FENCE_CLOSE_RE.sub("", _FENCE_OPEN_RE.sub("", response.strip()))
    data = json.loads(cleaned)
    if not isinstance(data, list):
        raise ValueError("quick prompt response is not a JSON array")

    prompts: list[Suggestion] = []
    for item in data:
        if not isinstance(item, dict) or not item.get("text") or not item.get("type"):
            continue
        try:
            intent = IntentType(item["type"])
        except ValueError:
            continue
        prompts.append(Suggestion(str(item["text"]), intent))
    return prompts[:limit]


def url_domain(url: str) -> str:
    """Host part of a URL with scheme and leading ``www.`` removed."""
    stripped = _SCHEME_RE.sub("", url)
    if stripped.startswith("www."):
        stripped = stripped[4:]
    return stripped.split("/")[0]


def title_topic(title: str) -> str:
    words = [w for w in title.split() if len(w) > 2][:3]
    return " ".join(words) or "this"


def fallback_prompts(docs: list[ContextDocument], primary_title: str = "") -> list[Suggestion]:
    """Static prompts built from titles and domains."""
    prompts: list[Suggestion] = []

    if len(docs) > 1:
        titles = [d.title for d in docs if d.title and d.title != "Untitled"]
        unique_titles = list(dict.fromkeys(titles))[:3]
        if unique_titles:
            topics = ", ".join(unique_titles)
            prompts.append(Suggestion(f"Compare {topics}", IntentType.CHAT))
            prompts.append(Suggestion(f"What do {topics} have in common?", IntentType.CHAT))
        prompts.append(Suggestion(f"research across {len(docs)} tabs", IntentType.SEARCH))
        prompts.append(Suggestion("summarize content from selected tabs", IntentType.CHAT))
    else:
        title = primary_title or (docs[0].title if docs else "")
        topic = title_topic(title)
        prompts.extend([
            Suggestion(f"What is {topic} about?", IntentType.CHAT),
            Suggestion(f"How does {topic} work?", IntentType.CHAT),
            Suggestion(f"{topic} guide", IntentType.SEARCH),
            Suggestion(f"{topic} tutorial", IntentType.SEARCH),
        ])

    domains: dict[str, None] = {}
    for doc in docs:
        if not doc.url:
            continue
        domain = url_domain(doc.url)
        if domain and not domain.startswith("about:"):
            domains[domain] = None
    for domain in list(domains)[:2]:
        prompts.append(Suggestion(domain, IntentType.NAVIGATE))

    prompts.append(Suggestion("tab next", IntentType.ACTION))
    return prompts


class QuickPromptGenerator:
    """Produces quick prompts for a set of context documents, through the cache."""

    def __init__(
        self,
        cache: PromptCache,
        llm: LLMProvider | None = None,
        config: QuickPromptConfig | None = None,
        context_config: ContextConfig | None = None,
        recent_documents: RecentDocuments | None = None,
    ) -> None:
        self.cache = cache
        self.llm = llm
        self.config = config or QuickPromptConfig()
        self.context_config = context_config or ContextConfig()
        self._recent_documents = recent_documents
        self.generation_count = 0

    async def generate(
        self,
        context_docs: list[ContextDocument],
        primary_title: str = "",
    ) -> list[Suggestion]:
        docs = list(context_docs)
        if not docs and self._recent_documents is not None:
            recent = await self._recent_documents()
            docs = [
                d for d in recent if is_eligible(d, self.context_config.internal_schemes)
            ][: self.context_config.recent_limit]

        if not docs:
            return list(self.config.default_prompts)

        key = cache_key(docs)
        return await self.cache.get_or_create(key, lambda: self._generate(docs, primary_title))

    async def _generate(self, docs: list[ContextDocument], primary_title: str) -> list[Suggestion]:
        self.generation_count += 1
        logger.info("Generating quick prompts for %d context documents", len(docs))
        if self.llm is not None:
            try:
                prompts = await self._generate_with_llm(docs)
                if prompts:
                    return prompts
                logger.warning("LLM returned no usable quick prompts, using fallback")
            except LLMProviderError as e:
                logger.warning("Quick prompt generation failed (%s): %s", e.provider, e)
            except ValueError as e:
                logger.warning("Could not parse quick prompts from LLM response: %s", e)
        return fallback_prompts(docs, primary_title)

    async def _generate_with_llm(self, docs: list[ContextDocument]) -> list[Suggestion]:
        request = build_quick_prompt_request(docs, self.config.max_prompts)
        response = await self.llm.complete([{"role": "user", "content": request}])
        return parse_quick_prompts(response, self.config.max_prompts)
