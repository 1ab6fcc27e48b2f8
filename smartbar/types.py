"""All dataclasses, enums, and Protocols for smartbar."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import AsyncIterator, Protocol, runtime_checkable


# ---------------------------------------------------------------------------
# Intent & Suggestion
# ---------------------------------------------------------------------------

class IntentType(str, Enum):
    """What the user most likely wants to do with the text in the bar."""
    NAVIGATE = "navigate"
    CHAT = "chat"
    ACTION = "action"
    SEARCH = "search"


@dataclass(frozen=True)
class Suggestion:
    """One row in the suggestion list. Two suggestions are equal when their text is."""
    text: str
    type: IntentType = field(compare=False)

    def to_dict(self) -> dict:
        return {"text": self.text, "type": self.type.value}


# ---------------------------------------------------------------------------
# Context documents
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ContextDocument:
    """A source document (browser tab). ``id`` is opaque and never derived from url/title."""
    id: str
    title: str = ""
    url: str = ""
    favicon: str = ""


@dataclass
class ContextView:
    """Derived display aggregates for the context bar."""
    primary_in_context: bool = False
    primary_favicon: str = ""
    favicons: list[str] = field(default_factory=list)  # non-primary members, capped
    extra_count: int = 0  # non-primary members in total
    label: str = "add tabs"


# ---------------------------------------------------------------------------
# Chat
# ---------------------------------------------------------------------------

class ChatRole(str, Enum):
    USER = "User"
    ASSISTANT = "Assistant"
    SYSTEM = "System"


@dataclass
class ChatMessage:
    role: ChatRole
    content: str

    def to_api(self) -> dict:
        """Role/content dict in the lower-case form LLM APIs expect."""
        return {"role": self.role.value.lower(), "content": self.content}


class SuggestionSource(str, Enum):
    """Which pipeline produced an emitted suggestion list."""
    LIVE = "live"
    QUICK_PROMPTS = "quick_prompts"


class Presentation(str, Enum):
    """Which main view the host should show."""
    RESULTS = "results"
    CONVERSATION = "conversation"


# ---------------------------------------------------------------------------
# Autocomplete provider contract
# ---------------------------------------------------------------------------

class ResultKind(IntEnum):
    TAB_SWITCH = 1
    SEARCH_SUGGESTION = 2
    URL = 3


@dataclass
class AutocompleteRequest:
    query_text: str
    max_results: int = 20
    allow_autofill: bool = False


@dataclass
class AutocompleteResult:
    """A typed result from the history/autocomplete provider.

    ``kind`` is usually a ResultKind, but providers may report kinds this
    package does not understand; those are skipped during mapping.
    """
    kind: int
    payload: dict = field(default_factory=dict)


@runtime_checkable
class AutocompleteProvider(Protocol):
    async def query(self, request: AutocompleteRequest) -> list[AutocompleteResult]: ...


# ---------------------------------------------------------------------------
# LLM provider contract
# ---------------------------------------------------------------------------

class LLMProviderError(Exception):
    def __init__(self, message: str, provider: str, status_code: int | None = None):
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code


@runtime_checkable
class LLMProvider(Protocol):
    async def complete(self, messages: list[dict], max_tokens: int | None = None) -> str: ...

    def stream(self, messages: list[dict], max_tokens: int | None = None) -> AsyncIterator[str]: ...


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

DEFAULT_INTERNAL_SCHEMES = ["about:", "chrome:", "moz-extension:", "resource:"]


def _default_quick_prompts() -> list[Suggestion]:
    return [
        Suggestion("Show me similar music on YouTube", IntentType.SEARCH),
        Suggestion("Tips for using AI Mode", IntentType.CHAT),
    ]


@dataclass
class SuggestionConfig:
    debounce_ms: int = 50
    max_results: int = 10
    autocomplete_max_results: int = 20
    search_followups: int = 4
    navigate_limit: int = 2
    action_limit: int = 2
    min_before_query_fill: int = 4
    fill_target: int = 6
    fallback_domain: str = "github.com"


@dataclass
class CacheConfig:
    ttl_seconds: float = 300.0


@dataclass
class ContextConfig:
    internal_schemes: list[str] = field(default_factory=lambda: list(DEFAULT_INTERNAL_SCHEMES))
    favicon_stack_limit: int = 3
    recent_limit: int = 5
    page_text_delay_seconds: float = 1.0


@dataclass
class QuickPromptConfig:
    max_prompts: int = 8
    default_prompts: list[Suggestion] = field(default_factory=_default_quick_prompts)


@dataclass
class NavigationConfig:
    search_url: str = "https://www.google.com/search?q={query}"


@dataclass
class LLMConfig:
    provider: str = "openai"  # "openai" (any compatible endpoint) or "anthropic"
    model: str = "gpt-4o-mini"
    base_url: str = "https://api.openai.com/v1"
    api_key_env: str = "OPENAI_API_KEY"
    temperature: float = 0.3
    max_tokens: int = 1024


@dataclass
class SmartbarConfig:
    version: str = "1.0"
    suggestions: SuggestionConfig = field(default_factory=SuggestionConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    context: ContextConfig = field(default_factory=ContextConfig)
    quick_prompts: QuickPromptConfig = field(default_factory=QuickPromptConfig)
    navigation: NavigationConfig = field(default_factory=NavigationConfig)
    llm: LLMConfig = field(default_factory=LLMConfig)
    insights: dict[str, list[str]] = field(default_factory=dict)
