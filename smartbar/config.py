"""smartbar.yaml loading, per-provider LLM defaults and validation."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml

from .types import (
    CacheConfig,
    ContextConfig,
    IntentType,
    LLMConfig,
    NavigationConfig,
    QuickPromptConfig,
    SmartbarConfig,
    Suggestion,
    SuggestionConfig,
)

CONFIG_FILENAMES = [
    "smartbar.yaml",
    "smartbar.yml",
    "smartbar.json",
]

KNOWN_LLM_PROVIDERS = ("openai", "anthropic")

_LLM_DEFAULTS: dict[str, dict[str, str]] = {
    "openai": {
        "model": "gpt-4o-mini",
        "base_url": "https://api.openai.com/v1",
        "api_key_env": "OPENAI_API_KEY",
    },
    "anthropic": {
        "model": "claude-haiku-4-5",
        "base_url": "https://api.anthropic.com/v1",
        "api_key_env": "ANTHROPIC_API_KEY",
    },
}


def _discover_config() -> Path | None:
    """First config file found in the working directory or its parents, stopping at home."""
    home = Path.home()
    cwd = Path.cwd()
    for directory in (cwd, *cwd.parents):
        found = next(
            (directory / n for n in CONFIG_FILENAMES if (directory / n).is_file()),
            None,
        )
        if found is not None or directory == home:
            return found
    return None


def _parse_prompts(raw: list[Any]) -> list[Suggestion]:
    prompts: list[Suggestion] = []
    for item in raw:
        if not isinstance(item, dict) or not item.get("text"):
            continue
        try:
            intent = IntentType(item.get("type", "search"))
        except ValueError:
            continue
        prompts.append(Suggestion(item["text"], intent))
    return prompts


def _build_config(raw: dict[str, Any]) -> SmartbarConfig:
    """Build a SmartbarConfig from a raw dict."""
    sugg_raw = raw.get("suggestions", {})
    suggestions = SuggestionConfig(
        debounce_ms=sugg_raw.get("debounce_ms", 50),
        max_results=sugg_raw.get("max_results", 10),
        autocomplete_max_results=sugg_raw.get("autocomplete_max_results", 20),
        search_followups=sugg_raw.get("search_followups", 4),
        navigate_limit=sugg_raw.get("navigate_limit", 2),
        action_limit=sugg_raw.get("action_limit", 2),
        min_before_query_fill=sugg_raw.get("min_before_query_fill", 4),
        fill_target=sugg_raw.get("fill_target", 6),
        fallback_domain=sugg_raw.get("fallback_domain", "github.com"),
    )

    cache = CacheConfig(ttl_seconds=raw.get("cache", {}).get("ttl_seconds", 300.0))

    ctx_raw = raw.get("context", {})
    context = ContextConfig(
        favicon_stack_limit=ctx_raw.get("favicon_stack_limit", 3),
        recent_limit=ctx_raw.get("recent_limit", 5),
        page_text_delay_seconds=ctx_raw.get("page_text_delay_seconds", 1.0),
    )
    if "internal_schemes" in ctx_raw:
        context.internal_schemes = [s.lower() for s in ctx_raw["internal_schemes"]]

    qp_raw = raw.get("quick_prompts", {})
    quick_prompts = QuickPromptConfig(max_prompts=qp_raw.get("max_prompts", 8))
    if "default_prompts" in qp_raw:
        quick_prompts.default_prompts = _parse_prompts(qp_raw["default_prompts"])

    navigation = NavigationConfig(
        search_url=raw.get("navigation", {}).get(
            "search_url", "https://www.google.com/search?q={query}"
        ),
    )

    # LLM: per-provider defaults fill whatever the file leaves out
    llm_raw = raw.get("llm", {})
    provider = llm_raw.get("provider", "openai")
    defaults = _LLM_DEFAULTS.get(provider, _LLM_DEFAULTS["openai"])
    llm = LLMConfig(
        provider=provider,
        model=llm_raw.get("model", defaults["model"]),
        base_url=llm_raw.get("base_url", defaults["base_url"]),
        api_key_env=llm_raw.get("api_key_env", defaults["api_key_env"]),
        temperature=llm_raw.get("temperature", 0.3),
        max_tokens=llm_raw.get("max_tokens", 1024),
    )

    insights = {
        category: list(terms or [])
        for category, terms in (raw.get("insights") or {}).items()
    }

    return SmartbarConfig(
        version=str(raw.get("version", "1.0")),
        suggestions=suggestions,
        cache=cache,
        context=context,
        quick_prompts=quick_prompts,
        navigation=navigation,
        llm=llm,
        insights=insights,
    )


def validate_config(config: SmartbarConfig) -> list[str]:
    """Problems with ``config`` as readable strings. Empty when valid."""
    errors: list[str] = []
    sc = config.suggestions

    if sc.debounce_ms <= 0:
        errors.append("suggestions.debounce_ms must be > 0")

    if sc.fill_target < sc.min_before_query_fill:
        errors.append(
            f"suggestions.fill_target ({sc.fill_target}) must be >= "
            f"min_before_query_fill ({sc.min_before_query_fill})"
        )

    if sc.max_results < sc.fill_target:
        errors.append(
            f"suggestions.max_results ({sc.max_results}) must be >= "
            f"fill_target ({sc.fill_target})"
        )

    if config.cache.ttl_seconds <= 0:
        errors.append("cache.ttl_seconds must be > 0")

    if config.context.page_text_delay_seconds < 0:
        errors.append("context.page_text_delay_seconds must be >= 0")

    if config.llm.provider not in KNOWN_LLM_PROVIDERS:
        errors.append(
            f"Unknown llm.provider '{config.llm.provider}' "
            f"(expected one of: {', '.join(KNOWN_LLM_PROVIDERS)})"
        )

    if "{query}" not in config.navigation.search_url:
        errors.append("navigation.search_url must contain a {query} placeholder")

    return errors


def _read_raw(path: Path) -> dict[str, Any]:
    if not path.is_file():
        raise FileNotFoundError(f"Config file not found: {path}")
    with path.open() as f:
        if path.suffix == ".json":
            return json.load(f)
        return yaml.safe_load(f) or {}


def load_config(
    config_path: str | Path | None = None,
    config_dict: dict | None = None,
) -> SmartbarConfig:
    """Build a config from ``config_dict``, an explicit file, or the first discovered file.

    Defaults are used when nothing is given and no file is found.
    """
    if config_dict is not None:
        return _build_config(config_dict)

    path = Path(config_path) if config_path is not None else _discover_config()
    return _build_config(_read_raw(path) if path is not None else {})
