"""
OpenAI-Compatible Client
========================

URL + key client for any endpoint that speaks the OpenAI chat
completions protocol (OpenRouter, OpenAI, self-hosted gateways).
"""

import logging
from typing import Any, Dict, Optional

import httpx

from .base import BaseClient, ChatCompletion, CompletionRequest, ProviderCallError

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "meta-llama/llama-3.1-8b-instruct"
APP_REFERER = "http://localhost:3000"
APP_TITLE = "Job Agent"


class OpenAICompatibleClient(BaseClient):
    """
    Client that posts chat payloads to ``{base_url}/chat/completions``.

    Honors the caller's model, then the configured model, then
    DEFAULT_MODEL. Any non-2xx status is a hard failure.
    """

    name = "openai_compatible"
    default_model = DEFAULT_MODEL
    tool_max_tokens = 4000
    text_max_tokens = 2000

    def __init__(
        self,
        api_key: str,
        base_url: str,
        model: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
        timeout: float = 120.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not base_url:
            raise ValueError("base_url is required for URL-based providers")
        super().__init__(
            api_key=api_key,
            model=model,
            temperature=temperature,
            max_tokens=max_tokens,
            base_url=base_url.rstrip("/"),
        )
        self.timeout = timeout
        self._transport = transport
        self._http: Optional[httpx.AsyncClient] = None

    @property
    def http(self) -> httpx.AsyncClient:
        if self._http is None:
            self._http = httpx.AsyncClient(timeout=self.timeout, transport=self._transport)
        return self._http

    def _headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
            "HTTP-Referer": APP_REFERER,
            "X-Title": APP_TITLE,
        }

    def build_payload(
        self,
        request: CompletionRequest,
        default_max_tokens: Optional[int] = None,
    ) -> Dict[str, Any]:
        """Build the JSON body; optional fields that are unset are omitted."""
        payload: Dict[str, Any] = {
            "model": request.model or self.model,
            "messages": request.messages,
            "max_tokens": request.max_tokens or self.max_tokens or default_max_tokens or self.tool_max_tokens,
            "temperature": self._temperature(request),
        }
        payload.update(request.optional_params())
        return payload

    async def complete_with_tools(self, request: CompletionRequest) -> ChatCompletion:
        return await self._post(self.build_payload(request))

    async def complete_text(self, prompt: str, model: Optional[str] = None) -> str:
        request = CompletionRequest(
            messages=[{"role": "user", "content": prompt}],
            model=model,
        )
        completion = await self._post(self.build_payload(request, self.text_max_tokens))
        return completion.content

    async def _post(self, payload: Dict[str, Any]) -> ChatCompletion:
        url = f"{self.base_url}/chat/completions"
        try:
            response = await self.http.post(url, headers=self._headers(), json=payload)
        except httpx.HTTPError as e:
            raise ProviderCallError(self.name, f"Request failed: {e}", retriable=True)

        if not response.is_success:
            raise ProviderCallError(
                self.name,
                f"HTTP {response.status_code}: {response.reason_phrase}",
                retriable=response.status_code >= 500,
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise ProviderCallError(self.name, f"Malformed JSON body: {e}")

        return ChatCompletion.from_dict(data, provider=self.name)

    async def aclose(self) -> None:
        if self._http is not None:
            await self._http.aclose()
            self._http = None
