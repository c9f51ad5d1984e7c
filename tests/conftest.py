"""
Shared fixtures for the Job Agent tests.
"""

import asyncio
from typing import Any, Dict, List, Optional
from unittest.mock import AsyncMock, Mock

import pytest

from job_agent.providers import (
    BaseClient,
    ChatCompletion,
    ChatMessage,
    Choice,
    CompletionRequest,
    ProviderCallError,
    ProviderConfig,
    ProviderRegistry,
    SlotDescriptor,
)


class FakeClient(BaseClient):
    """In-memory client that records calls and can fail or stall."""

    def __init__(
        self,
        name: str = "fake",
        content: Optional[str] = None,
        error: Optional[Exception] = None,
        delay: float = 0.0,
    ):
        super().__init__(api_key="test-key")
        self.name = name
        self.content = content if content is not None else f"response from {name}"
        self.error = error
        self.delay = delay
        self.calls: List[CompletionRequest] = []
        self.reset_count = 0

    async def complete_with_tools(self, request: CompletionRequest) -> ChatCompletion:
        self.calls.append(request)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return ChatCompletion(
            choices=[Choice(message=ChatMessage(content=self.content))],
            model="fake-model",
            provider=self.name,
        )

    def reset(self) -> None:
        self.reset_count += 1


def completion_body(
    content: Optional[str] = "Hello!",
    tool_calls: Optional[List[Dict[str, Any]]] = None,
    model: str = "test-model",
) -> Dict[str, Any]:
    """OpenAI-style chat completion body."""
    message: Dict[str, Any] = {"role": "assistant", "content": content}
    if tool_calls:
        message["tool_calls"] = tool_calls
    return {
        "id": "chatcmpl-1",
        "model": model,
        "choices": [{"index": 0, "message": message, "finish_reason": "stop"}],
    }


@pytest.fixture
def fake_client():
    """Factory for FakeClient instances."""
    return FakeClient


@pytest.fixture
def body():
    """Factory for chat completion bodies."""
    return completion_body


@pytest.fixture
def make_registry():
    """
    Build a configured registry whose slots are the given clients, in order.

    Usage:
        registry = make_registry(FakeClient("a"), FakeClient("b"))
    """
    def _make(*clients: BaseClient, timeout: float = 30.0) -> ProviderRegistry:
        descriptors = [
            SlotDescriptor(client.name, lambda config, c=client: c)
            for client in clients
        ]
        registry = ProviderRegistry(descriptors)
        registry.configure(ProviderConfig(api_key="test-key", timeout=timeout))
        return registry
    return _make


@pytest.fixture
def sdk_client():
    """Mock of the OpenAI SDK client returning a fixed completion."""
    client = Mock()
    client.chat.completions.create = AsyncMock(return_value=completion_body())
    return client


@pytest.fixture
def failing():
    """Factory for attempt errors."""
    def _error(provider: str = "fake", message: str = "boom") -> ProviderCallError:
        return ProviderCallError(provider, message)
    return _error
