"""Built-in intent rules plus the module-level ``classify`` entry point.

Rule order (first match wins):

1. navigate  - ``about:``/``http:``/``https:`` prefix, or a bare host
               (``label(.label)+`` with an alphabetic TLD) optionally followed
               by a path, query or fragment, no internal whitespace
2. navigate  - exactly a dotted host (kept separately for compatibility)
3. chat      - leading interrogative word, or trailing ``?``
4. action    - leading ``tab``/``find``/``tab switch:``
5. search    - everything else

A dotted host ending in ``?`` (``example.com?``) is navigate: rule 1 runs
before rule 3.
"""

from __future__ import annotations

import re

from ..types import IntentType
from .base import IntentClassifier, IntentRule

SCHEME_RE = re.compile(r"^(about|https?):")
HOST_WITH_PATH_RE = re.compile(r"^[a-z0-9.-]+\.[a-z]{2,}(?:[/?#]\S*)?$")
BARE_HOST_RE = re.compile(r"^[a-z0-9.-]+\.[a-z]{2,}$")
HTTP_PREFIX_RE = re.compile(r"^https?://")
INTERROGATIVE_RE = re.compile(r"^(who|what|when|where|why|how|can)\b")

ACTION_PREFIXES = ("tab switch:", "tab", "find")


def _is_url(text: str) -> bool:
    if SCHEME_RE.match(text):
        return True
    return bool(HOST_WITH_PATH_RE.match(HTTP_PREFIX_RE.sub("", text)))


def _is_bare_host(text: str) -> bool:
    return bool(BARE_HOST_RE.match(text)) and " " not in text


def _is_question(text: str) -> bool:
    return bool(INTERROGATIVE_RE.match(text)) or text.endswith("?")


def _is_action(text: str) -> bool:
    return text.startswith(ACTION_PREFIXES)


DEFAULT_RULES: list[IntentRule] = [
    IntentRule("url", IntentType.NAVIGATE, _is_url),
    IntentRule("bare_host", IntentType.NAVIGATE, _is_bare_host),
    IntentRule("question", IntentType.CHAT, _is_question),
    IntentRule("action", IntentType.ACTION, _is_action),
]

_default_classifier = IntentClassifier(DEFAULT_RULES)


def classify(text: str) -> IntentType:
    """Classify free text typed into the bar."""
    return _default_classifier.classify(text)


_LABELS = {
    IntentType.NAVIGATE: "Navigate",
    IntentType.CHAT: "Ask",
    IntentType.ACTION: "Action",
    IntentType.SEARCH: "Search",
}

_ICONS = {
    IntentType.NAVIGATE: "\N{GLOBE WITH MERIDIANS}",
    IntentType.CHAT: "\N{SPEECH BALLOON}",
    IntentType.ACTION: "\N{HIGH VOLTAGE SIGN}",
    IntentType.SEARCH: "\N{LEFT-POINTING MAGNIFYING GLASS}",
}


def intent_label(intent: IntentType) -> str:
    """Affordance label shown on the submit button."""
    return _LABELS.get(intent, "Search")


def intent_icon(intent: IntentType) -> str:
    return _ICONS.get(intent, _ICONS[IntentType.SEARCH])
