"""User-insight personalization for the chat system prompt."""

from __future__ import annotations

import re
from dataclasses import dataclass

INSIGHT_TOKEN_RE = re.compile(r"\[\[insight:\s*([^\]]+)\]\]", re.IGNORECASE)

_INSIGHT_PREAMBLE = """

When responding, if you use any user insights from the list below to personalize your response (even implicitly), you must reference them by including [[insight: specific term]] inline, directly after the phrase or sentence where the insight is applied. Use specific terms from the list rather than broad categories, and include multiple tags if multiple insights are relevant. Only tag insights you actually use; avoid tagging irrelevant ones.

User Insights List:"""

_INSIGHT_EXAMPLES = """

Examples of Insight Tagging:
- User asks about meals: "This recipe fits your interest in seasonal cooking [[insight: seasonal cooking]]."
- User asks about shoes: "For hiking boots, check REI [[insight: REI]] based on your outdoor gear research [[insight: outdoor gear research]]."\
"""


@dataclass
class InsightToken:
    full_match: str
    insight: str
    start: int
    end: int


def build_insights_system_prompt(insights: dict[str, list[str]]) -> str:
    """Instructions plus the insight list. Empty string when there are no insights."""
    lines = [
        f"\n- {category}: {', '.join(terms)}."
        for category, terms in insights.items()
        if terms
    ]
    if not lines:
        return ""
    return _INSIGHT_PREAMBLE + "".join(lines) + _INSIGHT_EXAMPLES


def detect_insight_tokens(content: str) -> list[InsightToken]:
    return [
        InsightToken(
            full_match=m.group(0),
            insight=m.group(1).strip(),
            start=m.start(),
            end=m.end(),
        )
        for m in INSIGHT_TOKEN_RE.finditer(content)
    ]


def delete_insight(insights: dict[str, list[str]], insight: str, category: str) -> bool:
    terms = insights.get(category)
    if terms and insight in terms:
        terms.remove(insight)
        return True
    return False
