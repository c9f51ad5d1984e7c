"""
Provider Factory
================

Process-wide default registry and dispatcher, plus module-level
shortcuts for callers that do not inject their own.
"""

import logging
from typing import Any, Dict, Mapping, Optional, Union

from .base import ChatCompletion, CompletionRequest
from .registry import (
    ProviderConfig,
    ProviderRegistry,
    ProviderSet,
    multi_provider_descriptors,
    single_provider_descriptors,
)
from .router import FallbackDispatcher

logger = logging.getLogger(__name__)

VARIANTS = {
    "single": single_provider_descriptors,
    "multi": multi_provider_descriptors,
}

# Global instances
_registry: Optional[ProviderRegistry] = None
_dispatcher: Optional[FallbackDispatcher] = None


def build_registry(variant: str = "single") -> ProviderRegistry:
    """
    Create an unconfigured registry.

    Args:
        variant: "single" (one configurable provider) or "multi"
            (OpenRouter then Groq)
    """
    try:
        descriptors = VARIANTS[variant]()
    except KeyError:
        raise ValueError(f"Unknown provider variant: {variant}. Available: {list(VARIANTS)}")
    return ProviderRegistry(descriptors)


def get_registry() -> ProviderRegistry:
    """Get the global provider registry."""
    global _registry
    if _registry is None:
        _registry = build_registry("single")
    return _registry


def get_dispatcher() -> FallbackDispatcher:
    """Get the global dispatcher bound to the global registry."""
    global _dispatcher
    if _dispatcher is None or _dispatcher.registry is not get_registry():
        _dispatcher = FallbackDispatcher(get_registry())
    return _dispatcher


def set_registry(registry: Optional[ProviderRegistry]) -> None:
    """Replace the global registry (None restores a fresh default)."""
    global _registry, _dispatcher
    _registry = registry
    _dispatcher = None


def configure(settings: Union[ProviderConfig, Mapping[str, Any]]) -> ProviderSet:
    """Configure the global registry."""
    return get_registry().configure(settings)


async def complete_text(prompt: str, model: Optional[str] = None) -> str:
    return await get_dispatcher().complete_text(prompt, model)


async def complete_with_tools(
    request: Union[CompletionRequest, Dict[str, Any]],
) -> ChatCompletion:
    return await get_dispatcher().complete_with_tools(request)


def status() -> Dict[str, Any]:
    return get_registry().status()


def reset() -> None:
    get_registry().reset()
