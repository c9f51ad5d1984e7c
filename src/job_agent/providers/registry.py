"""
Provider Registry
=================

Turns operator configuration into an ordered list of ready clients
("slots") and reports which slot the dispatcher would use next.

Two slot layouts ship with the package:

    single provider:  groq (gsk_ key, no URL)  |  openai_compatible (URL + key)
    multi provider:   openrouter  ->  groq

Usage:
    registry = ProviderRegistry(single_provider_descriptors())
    registry.configure(ProviderConfig(api_key="gsk_..."))
    registry.status()
    # {'providers': {'groq': 'unknown'}, 'active': 'groq'}
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Union

from .base import BaseClient, ConfigurationError
from .cache import AvailabilityCache
from .groq import GroqClient, is_groq_key
from .openai_compat import OpenAICompatibleClient
from .openrouter import OpenRouterClient

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


class ProviderKind(Enum):
    """How the operator wants the credential interpreted."""
    AUTO = "auto"
    SDK = "sdk"
    URL_KEY = "url+key"

    @classmethod
    def parse(cls, value: Union[str, "ProviderKind", None]) -> "ProviderKind":
        if value is None or value == "":
            return cls.AUTO
        if isinstance(value, ProviderKind):
            return value
        aliases = {
            "sdk-fixed-model": cls.SDK,
            "url-plus-key": cls.URL_KEY,
            "groq-sdk": cls.SDK,
        }
        normalized = str(value).strip().lower()
        if normalized in aliases:
            return aliases[normalized]
        try:
            return cls(normalized)
        except ValueError:
            raise ConfigurationError(f"Unknown provider kind: {value}")


def mask_key(api_key: Optional[str]) -> str:
    """Printable form of a credential."""
    if not api_key:
        return "<none>"
    if len(api_key) <= 8:
        return "***"
    return f"{api_key[:4]}…{api_key[-3:]}"


@dataclass(frozen=True)
class ProviderConfig:
    """
    User-supplied provider configuration.

    Replaced wholesale on every settings change; clients built from it
    are never mutated.

    Attributes:
        api_key: Primary credential
        base_url: Endpoint for URL-requiring providers
        provider_kind: auto, sdk or url+key
        model: Default model for clients that honor one
        temperature: Default sampling temperature
        max_tokens: Default response token limit (client default if None)
        timeout: Per-attempt deadline in seconds
        credentials: Per-slot credential overrides (e.g. {"groq": "gsk_..."})
    """
    api_key: str = ""
    base_url: Optional[str] = None
    provider_kind: ProviderKind = ProviderKind.AUTO
    model: Optional[str] = None
    temperature: float = 0.7
    max_tokens: Optional[int] = None
    timeout: float = DEFAULT_TIMEOUT
    credentials: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def from_settings(cls, settings: Mapping[str, Any]) -> "ProviderConfig":
        """
        Build from a settings dictionary.

        Accepts both camelCase (``apiKey``, ``baseUrl``, ``llmProviderUrl``,
        ``providerKind``, ``maxTokens``) and snake_case keys.
        """
        def pick(*names, default=None):
            for name in names:
                value = settings.get(name)
                if value not in (None, ""):
                    return value
            return default

        max_tokens = pick("maxTokens", "max_tokens")
        return cls(
            api_key=pick("apiKey", "api_key", default=""),
            base_url=pick("baseUrl", "base_url", "llmProviderUrl"),
            provider_kind=ProviderKind.parse(pick("providerKind", "provider_kind")),
            model=pick("model"),
            temperature=float(pick("temperature", default=0.7)),
            max_tokens=int(max_tokens) if max_tokens is not None else None,
            timeout=float(pick("timeout", default=DEFAULT_TIMEOUT)),
            credentials=dict(pick("credentials", default={})),
        )

    def credential_for(self, slot: str) -> str:
        return self.credentials.get(slot) or self.api_key

    def has_credentials(self) -> bool:
        return bool(self.api_key) or any(self.credentials.values())


@dataclass(frozen=True)
class SlotDescriptor:
    """How to build one slot from a configuration."""
    name: str
    factory: Callable[[ProviderConfig], BaseClient]
    requires_url: bool = False
    accepts: Callable[[ProviderConfig], bool] = lambda config: True


@dataclass(frozen=True)
class Slot:
    """A named, ready-to-use client."""
    name: str
    client: BaseClient


@dataclass(frozen=True)
class ProviderSet:
    """Everything one configure() produced: config, ordered slots, cache."""
    config: ProviderConfig
    slots: Tuple[Slot, ...]
    cache: AvailabilityCache

    @property
    def slot_names(self) -> List[str]:
        return [s.name for s in self.slots]

    def active_slot(self) -> Optional[str]:
        """First slot the dispatcher would attempt."""
        for slot in self.slots:
            if self.cache.is_attemptable(slot.name):
                return slot.name
        return None


class ProviderRegistry:
    """
    Holds the active configuration and the clients built from it.

    configure() swaps in a new ProviderSet with one assignment. Calls
    already running keep the set they started with; calls issued after
    configure() returns see the new one.
    """

    def __init__(self, descriptors: List[SlotDescriptor]):
        names = [d.name for d in descriptors]
        if len(names) != len(set(names)):
            raise ValueError(f"Duplicate slot names: {names}")
        self.descriptors = list(descriptors)
        self._active: Optional[ProviderSet] = None

    @property
    def is_configured(self) -> bool:
        return self._active is not None

    def active_set(self) -> Optional[ProviderSet]:
        return self._active

    def clear(self) -> None:
        """Drop the active configuration; dispatching fails until configure()."""
        self._active = None
        logger.info("Provider configuration cleared")

    def configure(self, config: Union[ProviderConfig, Mapping[str, Any]]) -> ProviderSet:
        """
        Validate a configuration and build its slots.

        Args:
            config: ProviderConfig or a settings dictionary

        Returns:
            The new active ProviderSet

        Raises:
            ConfigurationError: No credential, or no slot can be built
        """
        if not isinstance(config, ProviderConfig):
            config = ProviderConfig.from_settings(config)

        if not config.has_credentials():
            raise ConfigurationError("No API key provided - LLM providers unavailable")

        slots: List[Slot] = []
        missing_url: List[str] = []
        for descriptor in self.descriptors:
            if not descriptor.accepts(config):
                continue
            if descriptor.requires_url and not config.base_url:
                logger.warning(
                    f"Skipping {descriptor.name}: provider requires a base URL but none was given"
                )
                missing_url.append(descriptor.name)
                continue
            slots.append(Slot(descriptor.name, descriptor.factory(config)))

        if not slots:
            if missing_url:
                message = f"{', '.join(missing_url)} requires a provider URL"
                if config.provider_kind is ProviderKind.AUTO:
                    message += f"; key {mask_key(config.api_key)} is not a Groq key"
                raise ConfigurationError(message)
            raise ConfigurationError("No provider accepts the given configuration")

        provider_set = ProviderSet(
            config=config,
            slots=tuple(slots),
            cache=AvailabilityCache(s.name for s in slots),
        )
        self._active = provider_set
        logger.info(f"Configured providers: {', '.join(provider_set.slot_names)}")
        return provider_set

    def status(self) -> Dict[str, Any]:
        """Cached availability per slot plus the next slot to be tried."""
        provider_set = self._active
        if provider_set is None:
            return {"providers": {}, "active": None}
        return {
            "providers": provider_set.cache.snapshot(),
            "active": provider_set.active_slot(),
        }

    def reset(self) -> None:
        """Forget learned failures and pinned model choices."""
        provider_set = self._active
        if provider_set is None:
            return
        provider_set.cache.reset()
        for slot in provider_set.slots:
            slot.client.reset()
        logger.info("Provider cache reset")

    def client_types(self) -> Dict[str, str]:
        provider_set = self._active
        if provider_set is None:
            return {}
        return {s.name: type(s.client).__name__ for s in provider_set.slots}


# =============================================================================
# Slot layouts
# =============================================================================

def _groq_client(config: ProviderConfig, slot: str = "groq") -> GroqClient:
    return GroqClient(
        api_key=config.credential_for(slot),
        temperature=config.temperature,
        max_tokens=config.max_tokens,
    )


def _openai_compatible_client(config: ProviderConfig) -> OpenAICompatibleClient:
    return OpenAICompatibleClient(
        api_key=config.credential_for("openai_compatible"),
        base_url=config.base_url,
        model=config.model,
        temperature=config.temperature,
        max_tokens=config.max_tokens,
    )


def _openrouter_client(config: ProviderConfig) -> OpenRouterClient:
    return OpenRouterClient(
        api_key=config.credential_for("openrouter"),
        model=config.model,
        temperature=config.temperature,
        max_tokens=config.max_tokens,
    )


def _accepts_groq(config: ProviderConfig) -> bool:
    if config.provider_kind is ProviderKind.SDK:
        return True
    return config.provider_kind is ProviderKind.AUTO and is_groq_key(config.credential_for("groq"))


def _accepts_url_key(config: ProviderConfig) -> bool:
    if config.provider_kind is ProviderKind.URL_KEY:
        return True
    if config.provider_kind is not ProviderKind.AUTO:
        return False
    api_key = config.credential_for("openai_compatible")
    return bool(api_key) and not is_groq_key(api_key)


def single_provider_descriptors() -> List[SlotDescriptor]:
    """One configurable provider, chosen from the key and URL."""
    return [
        SlotDescriptor("groq", _groq_client, requires_url=False, accepts=_accepts_groq),
        SlotDescriptor(
            "openai_compatible",
            _openai_compatible_client,
            requires_url=True,
            accepts=_accepts_url_key,
        ),
    ]


def multi_provider_descriptors() -> List[SlotDescriptor]:
    """OpenRouter first, Groq second; each needs its own credential."""
    return [
        SlotDescriptor(
            "openrouter",
            _openrouter_client,
            accepts=lambda config: bool(config.credentials.get("openrouter")),
        ),
        SlotDescriptor(
            "groq",
            _groq_client,
            accepts=lambda config: bool(config.credentials.get("groq")),
        ),
    ]


__all__ = [
    "ProviderKind",
    "ProviderConfig",
    "SlotDescriptor",
    "Slot",
    "ProviderSet",
    "ProviderRegistry",
    "single_provider_descriptors",
    "multi_provider_descriptors",
    "mask_key",
    "DEFAULT_TIMEOUT",
]
