"""Tests for insight prompts and inline insight tokens."""

from smartbar.core.insights import (
    build_insights_system_prompt,
    delete_insight,
    detect_insight_tokens,
)


def test_empty_insights_give_no_prompt():
    assert build_insights_system_prompt({}) == ""
    assert build_insights_system_prompt({"Food": []}) == ""


def test_prompt_lists_categories():
    prompt = build_insights_system_prompt({"Food": ["ramen", "tacos"], "Travel": ["Japan"]})
    assert "User Insights List:" in prompt
    assert "\n- Food: ramen, tacos." in prompt
    assert "\n- Travel: Japan." in prompt
    assert "[[insight:" in prompt


def test_detect_tokens():
    content = "Try Osaka [[insight: Japan]] and a ramen bar [[Insight:ramen ]]."
    tokens = detect_insight_tokens(content)
    assert [t.insight for t in tokens] == ["Japan", "ramen"]
    first = tokens[0]
    assert content[first.start:first.end] == first.full_match == "[[insight: Japan]]"


def test_detect_tokens_none():
    assert detect_insight_tokens("plain reply") == []


def test_delete_insight():
    insights = {"Food": ["ramen", "tacos"]}
    assert delete_insight(insights, "ramen", "Food") is True
    assert insights == {"Food": ["tacos"]}
    assert delete_insight(insights, "ramen", "Food") is False
    assert delete_insight(insights, "tacos", "Travel") is False
