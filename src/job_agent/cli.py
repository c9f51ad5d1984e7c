#!/usr/bin/env python3
"""
Job Agent CLI
=============

Command-line interface for the job agent.

Usage:
    job-agent status
    job-agent ask "Explain AI agents in one sentence"
    job-agent judge "What is 2+2?" "4"
    job-agent step 0
    job-agent serve --port 3000
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import List, Optional

from .config import Settings
from .providers import (
    ConfigurationError,
    FallbackDispatcher,
    ProviderError,
    ProviderRegistry,
    build_registry,
    set_registry,
)

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False):
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S"
    )


def load_registry(settings: Settings) -> ProviderRegistry:
    """
    Build and configure a registry from settings, and install it as the
    global registry so the tools pick it up.
    """
    registry = build_registry(settings.variant)
    if settings.has_llm_credentials():
        try:
            registry.configure(settings.to_provider_config())
        except ConfigurationError as e:
            logger.warning(f"LLM providers not configured: {e}")
            print(f"⚠ LLM provider not configured: {e}")
    else:
        print("⚠ No LLM API key configured (set LLM_API_KEY or add .secrets/llm_key)")
    set_registry(registry)
    return registry


def cmd_status(args):
    """Show provider status."""
    setup_logging(args.verbose)
    registry = load_registry(Settings.load(args.config))
    status = FallbackDispatcher(registry).get_status()

    print("\n🔌 LLM Providers\n")
    if not status["providers"]:
        print("  (not configured)")
    for slot, availability in status["providers"].items():
        marker = "→" if slot == status["active"] else " "
        client_type = status["client_types"].get(slot, "")
        print(f"  {marker} {slot:<20} {availability:<12} {client_type}")
    print(f"\n  Active: {status['active'] or 'None'}")


def cmd_ask(args):
    """Send a prompt through the fallback chain."""
    setup_logging(args.verbose)
    dispatcher = FallbackDispatcher(load_registry(Settings.load(args.config)))
    text = asyncio.run(dispatcher.complete_text(args.prompt, args.model))
    print(text)


def cmd_judge(args):
    """Ask the LLM judge whether an answer meets a goal."""
    from .tools.judge import check_goal_done

    setup_logging(args.verbose)
    dispatcher = FallbackDispatcher(load_registry(Settings.load(args.config)))
    verdict = asyncio.run(check_goal_done(args.goal, args.answer, dispatcher=dispatcher))
    print(json.dumps(verdict, indent=2))


def cmd_reset(args):
    """Forget provider failures and pinned model choices."""
    setup_logging(args.verbose)
    registry = load_registry(Settings.load(args.config))
    registry.reset()
    print("✓ Provider cache reset")


def cmd_step(args):
    """Run a tutorial step."""
    from .steps import run_step

    setup_logging(args.verbose)
    settings = Settings.load(args.config)
    registry = load_registry(settings)

    kwargs = {"dispatcher": FallbackDispatcher(registry)}
    if args.number >= 3:
        from .tools import Toolbox
        kwargs["toolbox"] = Toolbox(settings.serpapi_key, dispatcher=kwargs["dispatcher"])
    if args.goal and args.number == 4:
        kwargs["goal"] = args.goal

    asyncio.run(run_step(args.number, **kwargs))


def cmd_serve(args):
    """Run the HTTP server."""
    from .server import serve

    setup_logging(args.verbose)
    serve(Settings.load(args.config), host=args.host, port=args.port)


def main(argv: Optional[List[str]] = None):
    """Main entry point."""
    parser = argparse.ArgumentParser(
        prog="job-agent",
        description="Job search agent with LLM provider fallback"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")
    parser.add_argument("-c", "--config", help="Settings YAML file")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    status_parser = subparsers.add_parser("status", help="Show LLM provider status")
    status_parser.set_defaults(func=cmd_status)

    ask_parser = subparsers.add_parser("ask", help="Generate text for a prompt")
    ask_parser.add_argument("prompt", help="Prompt text")
    ask_parser.add_argument("-m", "--model", help="Model name (URL+key providers only)")
    ask_parser.set_defaults(func=cmd_ask)

    judge_parser = subparsers.add_parser("judge", help="Check whether an answer meets a goal")
    judge_parser.add_argument("goal", help="The request")
    judge_parser.add_argument("answer", help="The candidate answer")
    judge_parser.set_defaults(func=cmd_judge)

    reset_parser = subparsers.add_parser("reset", help="Reset the provider availability cache")
    reset_parser.set_defaults(func=cmd_reset)

    step_parser = subparsers.add_parser("step", help="Run a tutorial step")
    step_parser.add_argument("number", type=int, choices=range(5), help="Step number (0-4)")
    step_parser.add_argument("-g", "--goal", help="Goal for step 4")
    step_parser.set_defaults(func=cmd_step)

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP server")
    serve_parser.add_argument("-p", "--port", type=int, help="Port number")
    serve_parser.add_argument("--host", help="Host to bind")
    serve_parser.set_defaults(func=cmd_serve)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    try:
        args.func(args)
    except KeyboardInterrupt:
        print("\nAborted.")
        sys.exit(1)
    except ProviderError as e:
        logging.error(f"Error: {e}")
        if args.verbose:
            raise
        sys.exit(1)


if __name__ == "__main__":
    main()
