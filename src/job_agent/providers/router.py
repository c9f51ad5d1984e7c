"""
Fallback Dispatcher
===================

Runs one logical request against the configured slots in priority
order, demoting slots that fail.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, Dict, List, Optional, TypeVar, Union

from .base import (
    AllProvidersExhaustedError,
    BaseClient,
    ChatCompletion,
    CompletionRequest,
    ConfigurationError,
)
from .registry import ProviderRegistry, ProviderSet

logger = logging.getLogger(__name__)

T = TypeVar("T")


class FallbackDispatcher:
    """
    Dispatches requests to the first slot that is not known to be down.

    Features:
        - Fixed priority order, no racing and no merging
        - A failed slot is marked unavailable until registry.reset()
        - Bounded per-attempt timeout taken from the active config

    Example:
        dispatcher = FallbackDispatcher(registry)
        text = await dispatcher.complete_text("Explain AI agents")
        resp = await dispatcher.complete_with_tools({"messages": [...], "tools": [...]})
        resp.choices[0].message.content
    """

    def __init__(self, registry: ProviderRegistry):
        self.registry = registry

    async def complete_text(self, prompt: str, model: Optional[str] = None) -> str:
        """
        Generate text with the best available provider.

        Args:
            prompt: User prompt
            model: Model override (ignored by fixed-model clients)

        Returns:
            Generated text

        Raises:
            ConfigurationError: If configure() was never called
            AllProvidersExhaustedError: If every slot failed
        """
        return await self._dispatch(
            "text generation",
            lambda client: client.complete_text(prompt, model),
        )

    async def complete_with_tools(
        self,
        request: Union[CompletionRequest, Dict[str, Any]],
    ) -> ChatCompletion:
        """
        Run a tool-augmented completion with the best available provider.

        Args:
            request: CompletionRequest or an equivalent dictionary

        Returns:
            ChatCompletion; ``choices[0].message.content`` is always a str
        """
        request = CompletionRequest.coerce(request)
        return await self._dispatch(
            "tool completion",
            lambda client: client.complete_with_tools(request),
        )

    async def _dispatch(
        self,
        operation: str,
        call: Callable[[BaseClient], Awaitable[T]],
    ) -> T:
        # One snapshot per request: a concurrent configure() must not
        # change the slots this call walks.
        provider_set = self.registry.active_set()
        if provider_set is None:
            raise ConfigurationError(
                "LLM provider not available. Please check your API key and settings."
            )

        cache = provider_set.cache
        timeout = provider_set.config.timeout
        errors: List[str] = []
        last_error: Optional[str] = None

        for slot in provider_set.slots:
            if not cache.is_attemptable(slot.name):
                logger.debug(f"Skipping {slot.name}: marked unavailable")
                continue

            logger.info(f"Using {slot.name} provider for {operation}")
            start = time.time()
            try:
                result = await asyncio.wait_for(call(slot.client), timeout=timeout)
            except asyncio.TimeoutError:
                last_error = f"{slot.name}: timed out after {timeout:.0f}s"
            except Exception as e:
                last_error = f"{slot.name}: {e}"
            else:
                cache.mark_available(slot.name)
                logger.info(
                    f"{operation.capitalize()} successful with {slot.name} "
                    f"({(time.time() - start) * 1000:.0f}ms)"
                )
                return result

            errors.append(last_error)
            logger.warning(f"Provider failed: {last_error}")
            cache.mark_unavailable(slot.name, last_error)

        if last_error is None:
            last_error = self._recorded_error(provider_set)
        raise AllProvidersExhaustedError(errors, last_error)

    @staticmethod
    def _recorded_error(provider_set: ProviderSet) -> Optional[str]:
        for slot in reversed(provider_set.slots):
            error = provider_set.cache.last_error(slot.name)
            if error:
                return error
        return None

    def get_status(self) -> Dict[str, Any]:
        """Registry status plus the client type behind each slot."""
        status = self.registry.status()
        status["client_types"] = self.registry.client_types()
        return status


__all__ = ["FallbackDispatcher"]
