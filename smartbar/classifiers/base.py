"""IntentRule and IntentClassifier (ordered rule chain, first match wins)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from ..types import IntentType


@dataclass(frozen=True)
class IntentRule:
    """A named predicate over normalized text that votes for one intent."""
    name: str
    intent: IntentType
    matches: Callable[[str], bool]


class IntentClassifier:
    """Ordered rule chain. The first rule that matches decides the intent.

    Input is trimmed and lower-cased before any rule sees it, so every rule is
    case- and surrounding-whitespace-insensitive. Rule order is part of the
    contract: reordering changes results for inputs that match several rules.
    """

    def __init__(self, rules: list[IntentRule], default: IntentType = IntentType.SEARCH):
        self.rules = list(rules)
        self.default = default

    @staticmethod
    def normalize(text: str) -> str:
        return text.strip().lower()

    def matching_rule(self, text: str) -> IntentRule | None:
        """Return the rule that decides ``text``, or None when the default applies."""
        normalized = self.normalize(text)
        for rule in self.rules:
            if rule.matches(normalized):
                return rule
        return None

    def classify(self, text: str) -> IntentType:
        """Total and deterministic. Callers guard against blank input themselves."""
        rule = self.matching_rule(text)
        return rule.intent if rule is not None else self.default
