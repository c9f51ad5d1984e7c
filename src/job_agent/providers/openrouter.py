"""
OpenRouter Client
=================

Capability-probing client for OpenRouter.

OpenRouter fronts many models with uneven tool-calling support, so the
client keeps an ordered candidate list per use case and, on the first
call for a use case, probes the candidates with a minimal real request.
The first model that answers is pinned for that use case until reset().

Usage:
    client = OpenRouterClient(api_key=os.environ["OPENROUTER_API_KEY"])
    model = await client.select_model(UseCase.TOOL_CALLING)
"""

import logging
from typing import Any, Dict, List, Optional

from .base import (
    BaseClient,
    ChatCompletion,
    CompletionRequest,
    ProviderCallError,
    UseCase,
)
from .openai_compat import APP_REFERER, APP_TITLE

logger = logging.getLogger(__name__)

OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"
FALLBACK_MODEL = "openai/gpt-oss-20b:free"

# Candidates per use case, best first
MODEL_RECOMMENDATIONS: Dict[UseCase, List[str]] = {
    UseCase.TOOL_CALLING: [
        "openai/gpt-4o-mini",
        "openai/gpt-4o",
        "anthropic/claude-3.5-sonnet",
        "meta-llama/llama-3.1-8b-instruct",
    ],
    UseCase.TEXT_GENERATION: [
        "openai/gpt-4o-mini",
        "openai/gpt-oss-20b:free",
        "meta-llama/llama-3.1-8b-instruct",
        "microsoft/phi-3-mini-4k-instruct",
    ],
    UseCase.JOB_EXTRACTION: [
        "openai/gpt-4o-mini",
        "anthropic/claude-3.5-sonnet",
        "meta-llama/llama-3.1-8b-instruct",
        "openai/gpt-oss-20b:free",
    ],
}

PROBE_TOOL = {
    "type": "function",
    "function": {
        "name": "test",
        "description": "Test function",
        "parameters": {"type": "object", "properties": {}},
    },
}


class OpenRouterClient(BaseClient):
    """
    Provider client for OpenRouter with per-use-case model probing.

    Attributes:
        recommendations: Candidate models per use case
    """

    name = "openrouter"
    default_model = FALLBACK_MODEL
    tool_max_tokens = 4000
    text_max_tokens = 2000

    def __init__(
        self,
        api_key: str,
        model: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
        recommendations: Optional[Dict[UseCase, List[str]]] = None,
        sdk_client: Any = None,
        **kwargs
    ):
        super().__init__(
            api_key=api_key,
            model=model,
            temperature=temperature,
            max_tokens=max_tokens,
            base_url=OPENROUTER_BASE_URL,
        )
        # Only an explicitly configured model bypasses probing
        self.configured_model = model
        self.recommendations = recommendations or MODEL_RECOMMENDATIONS
        self._client = sdk_client
        self._selected: Dict[UseCase, str] = {}

    @property
    def client(self):
        """Lazy-load the async OpenAI client pointed at OpenRouter."""
        if self._client is None:
            try:
                from openai import AsyncOpenAI
            except ImportError:
                raise ProviderCallError(
                    self.name,
                    "openai package required. Install with: pip install openai",
                    retriable=False,
                )
            self._client = AsyncOpenAI(
                base_url=self.base_url,
                api_key=self.api_key,
                default_headers={"HTTP-Referer": APP_REFERER, "X-Title": APP_TITLE},
            )
        return self._client

    @property
    def selected_models(self) -> Dict[str, str]:
        """Models pinned so far, keyed by use case value."""
        return {uc.value: model for uc, model in self._selected.items()}

    async def probe(self) -> bool:
        """Check whether OpenRouter answers a minimal request at all."""
        if not self.api_key:
            return False
        try:
            await self.client.chat.completions.create(
                model=FALLBACK_MODEL,
                messages=[{"role": "user", "content": "Hello"}],
                max_tokens=10,
            )
            return True
        except Exception as e:
            logger.warning(f"OpenRouter probe failed: {e}")
            return False

    async def _probe_model(self, model: str, use_case: UseCase) -> None:
        if use_case == UseCase.TOOL_CALLING:
            await self.client.chat.completions.create(
                model=model,
                messages=[{"role": "user", "content": "What's 2+2?"}],
                tools=[PROBE_TOOL],
                tool_choice="auto",
                max_tokens=50,
            )
        else:
            await self.client.chat.completions.create(
                model=model,
                messages=[{"role": "user", "content": "Hello"}],
                max_tokens=10,
            )

    async def select_model(self, use_case: Optional[UseCase] = None) -> str:
        """
        Pick the first candidate model that answers for a use case.

        Args:
            use_case: Use case to select for (defaults to TEXT_GENERATION)

        Returns:
            Model id; FALLBACK_MODEL (unpinned) if every candidate failed
        """
        use_case = use_case or UseCase.TEXT_GENERATION
        if use_case in self._selected:
            return self._selected[use_case]

        candidates = self.recommendations.get(
            use_case, self.recommendations[UseCase.TEXT_GENERATION]
        )
        for model in candidates:
            try:
                await self._probe_model(model, use_case)
            except Exception as e:
                logger.info(f"Model {model} not available for {use_case.value}: {e}")
                continue
            logger.info(f"Selected {model} for {use_case.value}")
            self._selected[use_case] = model
            return model

        logger.warning(f"No candidate answered for {use_case.value}, using {FALLBACK_MODEL}")
        return FALLBACK_MODEL

    async def _create(self, params: Dict[str, Any]) -> ChatCompletion:
        try:
            response = await self.client.chat.completions.create(**params)
        except ProviderCallError:
            raise
        except Exception as e:
            raise ProviderCallError(
                self.name,
                f"API error: {e}",
                status_code=getattr(e, "status_code", None),
            )
        data = response.model_dump() if hasattr(response, "model_dump") else response
        return ChatCompletion.from_dict(data, provider=self.name)

    async def complete_with_tools(self, request: CompletionRequest) -> ChatCompletion:
        model = request.model or self.configured_model
        if not model:
            use_case = UseCase.TOOL_CALLING if request.tools else UseCase.TEXT_GENERATION
            model = await self.select_model(use_case)

        params: Dict[str, Any] = {
            "model": model,
            "messages": request.messages,
            "max_tokens": request.max_tokens or self.max_tokens or self.tool_max_tokens,
            "temperature": self._temperature(request),
        }
        params.update(request.optional_params())
        if request.tools and "tool_choice" not in params:
            params["tool_choice"] = "auto"
        return await self._create(params)

    async def complete_text(self, prompt: str, model: Optional[str] = None) -> str:
        model = model or self.configured_model or await self.select_model(UseCase.TEXT_GENERATION)
        completion = await self._create({
            "model": model,
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": self.max_tokens or self.text_max_tokens,
            "temperature": self.temperature,
        })
        return completion.content

    def reset(self) -> None:
        """Forget pinned model selections so the next call probes again."""
        self._selected.clear()

    async def aclose(self) -> None:
        if self._client is not None and hasattr(self._client, "close"):
            await self._client.close()
