from .aggregator import (
    SuggestionAggregator,
    fallback_suggestions,
    map_results,
    merge_live_results,
)
from .chat import ChatSession, send_prompt
from .chat_persistence import ChatPersistence
from .context_set import ContextSet, ContextSetManager, cache_key, is_eligible
from .debounce import Debouncer
from .prompt_cache import PromptCache
from .quick_prompts import QuickPromptGenerator, fallback_prompts
from .selection import SuggestionList
from .store import TranscriptStore

__all__ = [
    "ChatPersistence",
    "ChatSession",
    "ContextSet",
    "ContextSetManager",
    "Debouncer",
    "PromptCache",
    "QuickPromptGenerator",
    "SuggestionAggregator",
    "SuggestionList",
    "TranscriptStore",
    "cache_key",
    "fallback_prompts",
    "fallback_suggestions",
    "is_eligible",
    "map_results",
    "merge_live_results",
    "send_prompt",
]
