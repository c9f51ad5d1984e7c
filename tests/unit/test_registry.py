"""
Tests for Provider Registry
===========================

Tests configuration validation, slot layouts, status and reset.
"""

import pytest

from job_agent.providers import (
    ConfigurationError,
    GroqClient,
    OpenAICompatibleClient,
    OpenRouterClient,
    ProviderConfig,
    ProviderKind,
    ProviderRegistry,
    build_registry,
    multi_provider_descriptors,
    single_provider_descriptors,
)
from job_agent.providers.registry import DEFAULT_TIMEOUT, SlotDescriptor, mask_key


# =============================================================================
# ProviderConfig Tests
# =============================================================================

class TestProviderConfig:
    """Test ProviderConfig construction."""

    def test_defaults(self):
        config = ProviderConfig(api_key="k")
        assert config.provider_kind is ProviderKind.AUTO
        assert config.timeout == DEFAULT_TIMEOUT
        assert config.base_url is None

    def test_from_settings_camel_case(self):
        config = ProviderConfig.from_settings({
            "apiKey": "sk-x",
            "llmProviderUrl": "https://llm.example.com/v1",
            "providerKind": "url-plus-key",
            "maxTokens": "512",
        })
        assert config.api_key == "sk-x"
        assert config.base_url == "https://llm.example.com/v1"
        assert config.provider_kind is ProviderKind.URL_KEY
        assert config.max_tokens == 512

    def test_from_settings_snake_case(self):
        config = ProviderConfig.from_settings({"api_key": "gsk_a", "timeout": 5})
        assert config.api_key == "gsk_a"
        assert config.timeout == 5.0

    def test_unknown_kind(self):
        with pytest.raises(ConfigurationError):
            ProviderKind.parse("carrier-pigeon")

    def test_config_is_immutable(self):
        config = ProviderConfig(api_key="k")
        with pytest.raises(AttributeError):
            config.api_key = "other"

    def test_credential_for(self):
        config = ProviderConfig(api_key="main", credentials={"groq": "gsk_g"})
        assert config.credential_for("groq") == "gsk_g"
        assert config.credential_for("openrouter") == "main"

    def test_mask_key(self):
        assert mask_key("gsk_1234567890abc") == "gsk_…abc"
        assert "1234567890" not in mask_key("gsk_1234567890abc")
        assert mask_key("") == "<none>"


# =============================================================================
# Single-provider Layout Tests
# =============================================================================

class TestSingleProviderRegistry:
    """Test provider detection from key and URL."""

    def test_groq_key_selects_fixed_model_slot(self):
        registry = build_registry("single")
        provider_set = registry.configure({"apiKey": "gsk_abc"})

        assert provider_set.slot_names == ["groq"]
        assert isinstance(provider_set.slots[0].client, GroqClient)
        assert registry.status() == {"providers": {"groq": "unknown"}, "active": "groq"}

    def test_key_without_url_rejected(self):
        registry = build_registry("single")
        with pytest.raises(ConfigurationError) as exc_info:
            registry.configure({"apiKey": "sk-x"})
        assert "URL" in str(exc_info.value)
        assert registry.is_configured is False

    def test_key_with_url_selects_http_slot(self):
        registry = build_registry("single")
        provider_set = registry.configure({
            "apiKey": "sk-x",
            "baseUrl": "https://llm.example.com/v1",
            "model": "my-model",
        })
        client = provider_set.slots[0].client
        assert provider_set.slot_names == ["openai_compatible"]
        assert isinstance(client, OpenAICompatibleClient)
        assert client.model == "my-model"

    def test_forced_sdk_kind(self):
        registry = build_registry("single")
        provider_set = registry.configure({"apiKey": "not-a-gsk-key", "providerKind": "sdk"})
        assert provider_set.slot_names == ["groq"]

    def test_forced_url_kind_with_groq_key(self):
        registry = build_registry("single")
        provider_set = registry.configure({
            "apiKey": "gsk_abc",
            "providerKind": "url+key",
            "baseUrl": "https://api.groq.com/openai/v1",
        })
        assert provider_set.slot_names == ["openai_compatible"]

    def test_groq_credential_alone(self):
        registry = build_registry("single")
        provider_set = registry.configure(ProviderConfig(credentials={"groq": "gsk_g"}))

        assert provider_set.slot_names == ["groq"]
        assert provider_set.slots[0].client.api_key == "gsk_g"

    def test_groq_credential_beside_non_groq_key(self):
        registry = build_registry("single")
        provider_set = registry.configure(ProviderConfig(api_key="sk-x", credentials={"groq": "gsk_g"}))
        assert provider_set.slot_names == ["groq"]

    def test_missing_url_message_for_auto_kind(self):
        registry = build_registry("single")
        with pytest.raises(ConfigurationError) as exc_info:
            registry.configure({"apiKey": "sk-x"})
        assert "is not a Groq key" in str(exc_info.value)

    def test_missing_url_message_for_forced_kind(self):
        registry = build_registry("single")
        with pytest.raises(ConfigurationError) as exc_info:
            registry.configure({"apiKey": "gsk_abc", "providerKind": "url+key"})
        message = str(exc_info.value)
        assert "requires a provider URL" in message
        assert "Groq key" not in message

    def test_no_key(self):
        registry = build_registry("single")
        with pytest.raises(ConfigurationError):
            registry.configure({})

    def test_unconfigured_status(self):
        registry = build_registry("single")
        assert registry.status() == {"providers": {}, "active": None}
        assert registry.client_types() == {}
        registry.reset()


# =============================================================================
# Multi-provider Layout Tests
# =============================================================================

class TestMultiProviderRegistry:
    """Test the OpenRouter then Groq layout."""

    def test_priority_order(self):
        registry = ProviderRegistry(multi_provider_descriptors())
        provider_set = registry.configure(ProviderConfig(
            credentials={"openrouter": "or-key", "groq": "gsk_g"},
        ))
        assert provider_set.slot_names == ["openrouter", "groq"]
        assert isinstance(provider_set.slots[0].client, OpenRouterClient)
        assert provider_set.slots[1].client.api_key == "gsk_g"

    def test_missing_credential_drops_slot(self):
        registry = ProviderRegistry(multi_provider_descriptors())
        provider_set = registry.configure(ProviderConfig(credentials={"groq": "gsk_g"}))
        assert provider_set.slot_names == ["groq"]

    def test_unknown_variant(self):
        with pytest.raises(ValueError):
            build_registry("triple")


# =============================================================================
# Lifecycle Tests
# =============================================================================

class TestRegistryLifecycle:
    """Test reconfiguration and reset."""

    def test_duplicate_slot_names(self, fake_client):
        a = fake_client("a")
        with pytest.raises(ValueError):
            ProviderRegistry([
                SlotDescriptor("a", lambda config: a),
                SlotDescriptor("a", lambda config: a),
            ])

    def test_configure_replaces_set_and_cache(self, fake_client):
        registry = build_registry("single")
        first = registry.configure({"apiKey": "gsk_abc"})
        first.cache.mark_unavailable("groq", "down")

        second = registry.configure({"apiKey": "gsk_def"})
        assert second is not first
        assert registry.active_set() is second
        assert registry.status()["providers"] == {"groq": "unknown"}
        # The old set is untouched
        assert first.cache.snapshot() == {"groq": "unavailable"}

    def test_reset_clears_cache_and_clients(self, make_registry, fake_client):
        a, b = fake_client("a"), fake_client("b")
        registry = make_registry(a, b)
        registry.active_set().cache.mark_unavailable("a", "down")

        registry.reset()
        assert registry.status() == {
            "providers": {"a": "unknown", "b": "unknown"},
            "active": "a",
        }
        assert a.reset_count == 1
        assert b.reset_count == 1

    def test_active_skips_unavailable(self, make_registry, fake_client):
        registry = make_registry(fake_client("a"), fake_client("b"))
        registry.active_set().cache.mark_unavailable("a", "down")
        assert registry.status()["active"] == "b"

        registry.active_set().cache.mark_unavailable("b", "down")
        assert registry.status()["active"] is None

    def test_client_types(self):
        registry = build_registry("single")
        registry.configure({"apiKey": "gsk_abc"})
        assert registry.client_types() == {"groq": "GroqClient"}

    def test_clear(self):
        registry = build_registry("single")
        registry.configure({"apiKey": "gsk_abc"})

        registry.clear()
        assert registry.is_configured is False
        assert registry.status() == {"providers": {}, "active": None}
