"""
Base Client Interface
=====================

Types shared by every LLM client and by the fallback dispatcher.

This module provides:
- Availability / UseCase: enums used by the cache and the probing client
- CompletionRequest: the tool-augmented completion request
- ChatCompletion: the chat completion envelope returned to callers
- ProviderError and its subclasses
- BaseClient: abstract base class for the client variants
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union
import logging

logger = logging.getLogger(__name__)


# =============================================================================
# Enums
# =============================================================================

class Availability(Enum):
    """Tri-state availability of a provider slot."""
    UNKNOWN = "unknown"
    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"


class UseCase(Enum):
    """Use cases the probing client keeps separate model lists for."""
    TOOL_CALLING = "tool_calling"
    TEXT_GENERATION = "text_generation"
    JOB_EXTRACTION = "job_extraction"


# =============================================================================
# Exceptions
# =============================================================================

class ProviderError(Exception):
    """
    Error from the provider layer.

    Attributes:
        provider: Name of the slot or client that failed
        message: Error message
        retriable: Whether the request can be retried
        status_code: HTTP status code if applicable
    """
    def __init__(
        self,
        provider: str,
        message: str,
        retriable: bool = True,
        status_code: Optional[int] = None,
    ):
        self.provider = provider
        self.message = message
        self.retriable = retriable
        self.status_code = status_code
        super().__init__(f"[{provider}] {message}")


class ConfigurationError(ProviderError):
    """No usable credential, or a provider kind that cannot be satisfied."""

    def __init__(self, message: str, provider: str = "config"):
        super().__init__(provider, message, retriable=False)


class ProviderCallError(ProviderError):
    """A single provider attempt failed."""


class AllProvidersExhaustedError(ProviderError):
    """Every configured slot failed or is marked unavailable."""

    def __init__(self, errors: List[str], last_error: Optional[str] = None):
        self.errors = list(errors)
        self.last_error = last_error
        message = "All providers failed"
        if last_error:
            message += f". Last error: {last_error}"
        super().__init__("dispatcher", message, retriable=False)


# =============================================================================
# Request / Response
# =============================================================================

def normalize_tool(tool: Dict[str, Any]) -> Dict[str, Any]:
    """Wrap a bare ``{name, description, parameters}`` tool spec for the wire."""
    if tool.get("type") == "function" and "function" in tool:
        return tool
    return {"type": "function", "function": tool}


@dataclass
class CompletionRequest:
    """
    A tool-augmented completion request.

    Examples:
        req = CompletionRequest(messages=[{"role": "user", "content": "Hi"}])
        req = CompletionRequest.from_dict({"messages": [...], "tools": [...]})
    """
    messages: List[Dict[str, Any]]
    model: Optional[str] = None
    tools: Optional[List[Dict[str, Any]]] = None
    tool_choice: Optional[str] = None
    response_format: Optional[Dict[str, Any]] = None
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "CompletionRequest":
        """Create from a request dictionary, ignoring unknown keys."""
        return cls(
            messages=list(d.get("messages") or []),
            model=d.get("model"),
            tools=d.get("tools"),
            tool_choice=d.get("tool_choice"),
            response_format=d.get("response_format"),
            temperature=d.get("temperature"),
            max_tokens=d.get("max_tokens"),
        )

    @classmethod
    def coerce(cls, request: Union["CompletionRequest", Dict[str, Any]]) -> "CompletionRequest":
        if isinstance(request, CompletionRequest):
            return request
        if isinstance(request, dict):
            return cls.from_dict(request)
        raise ValueError(f"Invalid request type: {type(request)}")

    def wire_tools(self) -> Optional[List[Dict[str, Any]]]:
        """Tools in the OpenAI ``{type: function, function: ...}`` form."""
        if not self.tools:
            return None
        return [normalize_tool(t) for t in self.tools]

    def optional_params(self) -> Dict[str, Any]:
        """Optional wire parameters that were actually set."""
        params: Dict[str, Any] = {}
        tools = self.wire_tools()
        if tools:
            params["tools"] = tools
        if self.tool_choice:
            params["tool_choice"] = self.tool_choice
        if self.response_format:
            params["response_format"] = self.response_format
        return params


@dataclass
class ToolCall:
    """A request from the model to invoke a named tool."""
    id: str
    name: str
    arguments: str = "{}"

    def parsed_arguments(self) -> Dict[str, Any]:
        """Arguments decoded from their JSON string form."""
        if not self.arguments:
            return {}
        return json.loads(self.arguments)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ToolCall":
        function = d.get("function") or {}
        arguments = function.get("arguments", "{}")
        if not isinstance(arguments, str):
            arguments = json.dumps(arguments)
        return cls(
            id=d.get("id", ""),
            name=function.get("name", ""),
            arguments=arguments,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": "function",
            "function": {"name": self.name, "arguments": self.arguments},
        }


@dataclass
class ChatMessage:
    """Assistant message inside a completion choice."""
    content: str = ""
    role: str = "assistant"
    tool_calls: List[ToolCall] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {"role": self.role, "content": self.content}
        if self.tool_calls:
            d["tool_calls"] = [tc.to_dict() for tc in self.tool_calls]
        return d


@dataclass
class Choice:
    """One completion choice."""
    message: ChatMessage
    finish_reason: str = "stop"
    index: int = 0


@dataclass
class ChatCompletion:
    """
    Chat completion envelope.

    Mirrors the common OpenAI response shape so that callers can read
    ``resp.choices[0].message`` regardless of which provider answered.
    ``message.content`` is always a string.
    """
    choices: List[Choice]
    model: str = ""
    provider: str = ""
    raw_response: Optional[Dict[str, Any]] = None

    @property
    def content(self) -> str:
        """Content of the first choice."""
        return self.choices[0].message.content

    @property
    def tool_calls(self) -> List[ToolCall]:
        return self.choices[0].message.tool_calls

    @classmethod
    def from_dict(cls, data: Any, provider: str = "") -> "ChatCompletion":
        """
        Parse an OpenAI-compatible response body.

        Raises:
            ProviderCallError: If the body has no usable choices
        """
        if not isinstance(data, dict) or not data.get("choices"):
            raise ProviderCallError(
                provider or "unknown",
                "Malformed response: no choices in body",
            )

        choices = []
        for i, raw in enumerate(data["choices"]):
            msg = (raw or {}).get("message")
            if not isinstance(msg, dict):
                raise ProviderCallError(
                    provider or "unknown",
                    f"Malformed response: choice {i} has no message",
                )
            choices.append(Choice(
                message=ChatMessage(
                    content=msg.get("content") or "",
                    role=msg.get("role") or "assistant",
                    tool_calls=[ToolCall.from_dict(tc) for tc in msg.get("tool_calls") or []],
                ),
                finish_reason=raw.get("finish_reason") or "stop",
                index=raw.get("index", i),
            ))

        return cls(
            choices=choices,
            model=data.get("model", ""),
            provider=provider,
            raw_response=data,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the chat completion dictionary shape."""
        return {
            "model": self.model,
            "provider": self.provider,
            "choices": [
                {
                    "index": c.index,
                    "message": c.message.to_dict(),
                    "finish_reason": c.finish_reason,
                }
                for c in self.choices
            ],
        }


# =============================================================================
# Abstract Base Class
# =============================================================================

class BaseClient(ABC):
    """
    Abstract base class for LLM clients.

    A client is built from one ProviderConfig and never mutated afterwards;
    a new configuration produces new clients.

    Attributes:
        name: Client identifier (e.g., "groq", "openrouter")
        default_model: Model used when the caller gives none
        temperature: Default sampling temperature
        max_tokens: Default maximum tokens in response
    """

    name: str = "base"
    default_model: str = ""

    def __init__(
        self,
        api_key: str,
        model: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
        base_url: Optional[str] = None,
    ):
        self.api_key = api_key
        self.model = model or self.default_model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.base_url = base_url

    @abstractmethod
    async def complete_with_tools(self, request: CompletionRequest) -> ChatCompletion:
        """
        Run a tool-augmented chat completion.

        Args:
            request: The completion request

        Returns:
            ChatCompletion whose first message content is a string

        Raises:
            ProviderCallError: On any transport, status or parsing failure
        """
        pass

    async def complete_text(self, prompt: str, model: Optional[str] = None) -> str:
        """Generate plain text for a single user prompt."""
        completion = await self.complete_with_tools(CompletionRequest(
            messages=[{"role": "user", "content": prompt}],
            model=model,
        ))
        return completion.content

    def reset(self) -> None:
        """Forget learned per-client state. No-op by default."""

    async def aclose(self) -> None:
        """Release network resources held by the client."""

    def _temperature(self, request: CompletionRequest) -> float:
        if request.temperature is not None:
            return request.temperature
        return self.temperature

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(model={self.model!r})"


__all__ = [
    "Availability",
    "UseCase",
    "ProviderError",
    "ConfigurationError",
    "ProviderCallError",
    "AllProvidersExhaustedError",
    "CompletionRequest",
    "ToolCall",
    "ChatMessage",
    "Choice",
    "ChatCompletion",
    "BaseClient",
    "normalize_tool",
]
