"""smartbar: intent classification, ranked suggestions and tab-scoped chat for an ask/search/navigate bar."""

from .classifiers import classify
from .config import load_config
from .session import HostShell, SmartbarSession
from .types import (
    ChatMessage,
    ChatRole,
    ContextDocument,
    IntentType,
    SmartbarConfig,
    Suggestion,
)

__version__ = "0.1.0"

__all__ = [
    "SmartbarSession",
    "HostShell",
    "classify",
    "load_config",
    "ChatMessage",
    "ChatRole",
    "ContextDocument",
    "IntentType",
    "SmartbarConfig",
    "Suggestion",
]
