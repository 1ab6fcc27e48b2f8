"""CLI: smartbar classify, prompts, chat, config validate/show."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
import uuid
from dataclasses import asdict

import yaml

from ..classifiers import DEFAULT_RULES, IntentClassifier, intent_icon, intent_label
from ..config import load_config, validate_config
from ..core.chat import ChatSession
from ..core.prompt_cache import PromptCache
from ..core.quick_prompts import QuickPromptGenerator
from ..providers import build_provider
from ..types import ContextDocument, LLMProviderError, SmartbarConfig

logger = logging.getLogger(__name__)


def _get_llm(config: SmartbarConfig, required: bool = False):
    try:
        return build_provider(config.llm)
    except LLMProviderError as e:
        if required:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
        logger.warning("LLM unavailable, using offline prompts: %s", e)
        return None


def cmd_classify(args):
    """Print the intent of each given text."""
    classifier = IntentClassifier(DEFAULT_RULES)
    for text in args.text:
        if not text.strip():
            print(f"{text!r:<40} (blank input is not classified)")
            continue
        rule = classifier.matching_rule(text)
        intent = rule.intent if rule is not None else classifier.default
        reason = rule.name if rule is not None else "default"
        print(f"{intent_icon(intent)} {intent_label(intent):<9} {intent.value:<9} {reason:<10} {text}")


def cmd_prompts(args):
    """Generate quick prompts for the given tabs."""
    config = load_config(args.config)
    docs = [
        ContextDocument(id=str(uuid.uuid4()), title=title, url=url)
        for title, url in (args.tab or [])
    ]
    llm = None if args.offline else _get_llm(config)
    generator = QuickPromptGenerator(
        PromptCache(config.cache.ttl_seconds),
        llm,
        config.quick_prompts,
        config.context,
    )
    primary_title = docs[0].title if docs else ""
    prompts = asyncio.run(generator.generate(docs, primary_title))

    if not prompts:
        print("No prompts.")
        return

    print(f"{'Type':<10} Prompt")
    print("-" * 60)
    for p in prompts:
        print(f"{p.type.value:<10} {p.text}")


def cmd_chat(args):
    """Stream a single chat reply to stdout."""
    config = load_config(args.config)
    llm = _get_llm(config, required=True)
    docs = [
        ContextDocument(id=str(uuid.uuid4()), title=title, url=url)
        for title, url in (args.tab or [])
    ]
    printed = 0

    def _on_update(messages):
        nonlocal printed
        if not messages:
            return
        content = messages[-1].content
        sys.stdout.write(content[printed:])
        sys.stdout.flush()
        printed = len(content)

    session = ChatSession(llm, config.insights, on_update=_on_update)
    asyncio.run(session.submit_prompt(args.message, docs))
    print()


def cmd_config(args):
    """Validate or print the effective configuration."""
    config = load_config(args.config)
    action = args.config_action or "validate"

    if action == "show":
        # enums are str subclasses; a JSON round-trip turns them into plain strings
        raw = json.loads(json.dumps(asdict(config)))
        print(yaml.safe_dump(raw, default_flow_style=False, sort_keys=False), end="")
        return

    errors = validate_config(config)
    if errors:
        print("Config errors:")
        for e in errors:
            print(f"  - {e}")
        sys.exit(1)
    print("Config is valid.")


def main():
    parser = argparse.ArgumentParser(
        prog="smartbar",
        description="Ask, search, or navigate: intent classification and suggestions",
    )
    parser.add_argument("--config", "-c", help="Path to config file")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command")

    # classify
    classify_parser = subparsers.add_parser("classify", help="Classify text into an intent")
    classify_parser.add_argument("text", nargs="+", help="Text(s) to classify")

    # prompts
    prompts_parser = subparsers.add_parser("prompts", help="Generate quick prompts for tabs")
    prompts_parser.add_argument(
        "--tab", "-t", nargs=2, action="append", metavar=("TITLE", "URL"),
        help="Context tab (repeatable)",
    )
    prompts_parser.add_argument("--offline", action="store_true", help="Skip the LLM")

    # chat
    chat_parser = subparsers.add_parser("chat", help="Send one chat message")
    chat_parser.add_argument("message", help="Message to send")
    chat_parser.add_argument(
        "--tab", "-t", nargs=2, action="append", metavar=("TITLE", "URL"),
        help="Context tab (repeatable)",
    )

    # config
    config_parser = subparsers.add_parser("config", help="Config operations")
    config_sub = config_parser.add_subparsers(dest="config_action")
    config_sub.add_parser("validate", help="Validate config file")
    config_sub.add_parser("show", help="Print effective config")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    commands = {
        "classify": cmd_classify,
        "prompts": cmd_prompts,
        "chat": cmd_chat,
        "config": cmd_config,
    }

    if args.command in commands:
        commands[args.command](args)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
