"""
LLM Provider Layer for Job Agent
================================

Provider detection, availability caching and fallback dispatch behind a
uniform ``complete_text`` / ``complete_with_tools`` contract.

Architecture:
    providers/
    ├── base.py           # Request/response types, errors, BaseClient
    ├── groq.py           # Fixed-model Groq client (gsk_ keys)
    ├── openai_compat.py  # URL + key OpenAI-compatible HTTP client
    ├── openrouter.py     # OpenRouter client with model probing
    ├── cache.py          # Tri-state availability cache
    ├── registry.py       # ProviderConfig, slot layouts, ProviderRegistry
    ├── router.py         # FallbackDispatcher
    └── factory.py        # Global registry/dispatcher and shortcuts

Provider Priority (waterfall on failure):
    single: groq | openai_compatible (chosen from key and URL)
    multi:  openrouter -> groq

Usage:
    from job_agent.providers import build_registry, FallbackDispatcher

    registry = build_registry("single")
    registry.configure({"apiKey": "gsk_..."})
    dispatcher = FallbackDispatcher(registry)

    text = await dispatcher.complete_text("Explain AI agents")
    resp = await dispatcher.complete_with_tools({
        "messages": [{"role": "user", "content": "Plan my day"}],
        "tools": [ADD_TODOS_TOOL],
    })
    print(resp.choices[0].message.content)
"""

__version__ = "1.0.0"

from .base import (
    Availability,
    UseCase,
    ProviderError,
    ConfigurationError,
    ProviderCallError,
    AllProvidersExhaustedError,
    CompletionRequest,
    ToolCall,
    ChatMessage,
    Choice,
    ChatCompletion,
    BaseClient,
)
from .cache import AvailabilityCache
from .registry import (
    ProviderKind,
    ProviderConfig,
    SlotDescriptor,
    Slot,
    ProviderSet,
    ProviderRegistry,
    single_provider_descriptors,
    multi_provider_descriptors,
)
from .router import FallbackDispatcher
from .groq import GroqClient, GROQ_FIXED_MODEL, is_groq_key
from .openai_compat import OpenAICompatibleClient
from .openrouter import OpenRouterClient, MODEL_RECOMMENDATIONS
from .factory import (
    build_registry,
    get_registry,
    get_dispatcher,
    set_registry,
    configure,
    complete_text,
    complete_with_tools,
    status,
    reset,
)


__all__ = [
    "__version__",

    # Core types
    "Availability",
    "UseCase",
    "CompletionRequest",
    "ToolCall",
    "ChatMessage",
    "Choice",
    "ChatCompletion",
    "BaseClient",

    # Errors
    "ProviderError",
    "ConfigurationError",
    "ProviderCallError",
    "AllProvidersExhaustedError",

    # Registry, cache, dispatcher
    "AvailabilityCache",
    "ProviderKind",
    "ProviderConfig",
    "SlotDescriptor",
    "Slot",
    "ProviderSet",
    "ProviderRegistry",
    "single_provider_descriptors",
    "multi_provider_descriptors",
    "FallbackDispatcher",

    # Clients
    "GroqClient",
    "GROQ_FIXED_MODEL",
    "is_groq_key",
    "OpenAICompatibleClient",
    "OpenRouterClient",
    "MODEL_RECOMMENDATIONS",

    # Factory
    "build_registry",
    "get_registry",
    "get_dispatcher",
    "set_registry",
    "configure",
    "complete_text",
    "complete_with_tools",
    "status",
    "reset",
]
