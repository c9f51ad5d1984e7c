"""
Groq Client
===========

Fixed-model client for Groq Cloud, selected when the API key carries
Groq's ``gsk_`` prefix. No base URL is needed.

Every request targets ``openai/gpt-oss-120b``; a caller-supplied model
is ignored.

API Key: https://console.groq.com/keys
"""

import logging
from typing import Any, Dict, Optional

from .base import BaseClient, ChatCompletion, CompletionRequest, ProviderCallError

logger = logging.getLogger(__name__)

GROQ_BASE_URL = "https://api.groq.com/openai/v1"
GROQ_KEY_PREFIX = "gsk_"
GROQ_FIXED_MODEL = "openai/gpt-oss-120b"


def is_groq_key(api_key: Optional[str]) -> bool:
    """True for keys issued by Groq."""
    return bool(api_key) and api_key.startswith(GROQ_KEY_PREFIX)


class GroqClient(BaseClient):
    """
    Client for the Groq Cloud API, driven through the OpenAI SDK.

    Example:
        client = GroqClient(api_key="gsk_...")
        text = await client.complete_text("Explain AI agents")
    """

    name = "groq"
    default_model = GROQ_FIXED_MODEL
    default_max_tokens = 8192

    def __init__(
        self,
        api_key: str,
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
        sdk_client: Any = None,
        **kwargs
    ):
        # The model is fixed
        kwargs.pop("model", None)
        super().__init__(
            api_key=api_key,
            model=GROQ_FIXED_MODEL,
            temperature=temperature,
            max_tokens=max_tokens,
            base_url=GROQ_BASE_URL,
        )
        self._client = sdk_client

    @property
    def client(self):
        """Lazy-load the async OpenAI client pointed at Groq."""
        if self._client is None:
            try:
                from openai import AsyncOpenAI
            except ImportError:
                raise ProviderCallError(
                    self.name,
                    "openai package required. Install with: pip install openai",
                    retriable=False,
                )
            self._client = AsyncOpenAI(base_url=self.base_url, api_key=self.api_key)
            logger.info("Groq client initialized")
        return self._client

    async def complete_with_tools(self, request: CompletionRequest) -> ChatCompletion:
        """Chat completion against the fixed Groq model."""
        if request.model and request.model != GROQ_FIXED_MODEL:
            logger.debug(f"Groq ignores requested model {request.model}")

        params: Dict[str, Any] = {
            "model": GROQ_FIXED_MODEL,
            "messages": request.messages,
            "temperature": self._temperature(request),
            "max_completion_tokens": request.max_tokens or self.max_tokens or self.default_max_tokens,
            "top_p": 1,
            "stream": False,
            "reasoning_effort": "medium",
        }
        params.update(request.optional_params())

        try:
            response = await self.client.chat.completions.create(**params)
        except ProviderCallError:
            raise
        except Exception as e:
            error_str = str(e).lower()
            is_rate_limit = "429" in str(e) or "rate" in error_str or "quota" in error_str
            raise ProviderCallError(
                self.name,
                f"API error: {e}",
                retriable=is_rate_limit,
                status_code=getattr(e, "status_code", 429 if is_rate_limit else None),
            )

        data = response.model_dump() if hasattr(response, "model_dump") else response
        return ChatCompletion.from_dict(data, provider=self.name)

    async def aclose(self) -> None:
        if self._client is not None and hasattr(self._client, "close"):
            await self._client.close()
