"""
Job Agent
=========

Job search agent built on an LLM provider layer with automatic fallback.

Components:
    providers  - Provider registry, availability cache, fallback dispatcher
    tools      - Judge, todo list, web browsing, Google and job search
    export     - Text report plus CSV, Excel and PDF export
    server     - FastAPI HTTP service
    steps      - Tutorial walkthroughs
    cli        - ``job-agent`` command line

Quick Start:
    from job_agent import Settings, build_registry, FallbackDispatcher

    settings = Settings.load()
    registry = build_registry(settings.variant)
    registry.configure(settings.to_provider_config())

    dispatcher = FallbackDispatcher(registry)
    print(await dispatcher.complete_text("Explain AI agents in one sentence"))
"""

__version__ = "1.0.0"

from .config import Settings, load_secrets
from .providers import (
    FallbackDispatcher,
    ProviderConfig,
    ProviderRegistry,
    ProviderError,
    ConfigurationError,
    AllProvidersExhaustedError,
    build_registry,
    get_dispatcher,
)

__all__ = [
    "__version__",
    "Settings",
    "load_secrets",
    "FallbackDispatcher",
    "ProviderConfig",
    "ProviderRegistry",
    "ProviderError",
    "ConfigurationError",
    "AllProvidersExhaustedError",
    "build_registry",
    "get_dispatcher",
]
