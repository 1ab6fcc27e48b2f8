from .base import IntentClassifier, IntentRule
from .rules import DEFAULT_RULES, classify, intent_icon, intent_label

__all__ = [
    "DEFAULT_RULES",
    "IntentClassifier",
    "IntentRule",
    "classify",
    "intent_icon",
    "intent_label",
]
