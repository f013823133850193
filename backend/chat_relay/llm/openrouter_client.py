"""
OpenRouter LLM Client
---------------------
Implementation of BaseLLMClient for the OpenRouter aggregator API.

WHAT IS OPENROUTER?
- One OpenAI-compatible API in front of many model vendors
- Model ids look like "openai/gpt-4o" or "anthropic/claude-3.5-sonnet"
- Exposes its catalog at GET /models

WHY THE OPENAI SDK?
OpenRouter speaks the OpenAI wire format, so the official client works
once its base_url points at OpenRouter.
"""

from typing import List, Dict, Any, Optional
import logging

import httpx
from openai import AsyncOpenAI

from chat_relay.llm.base_client import BaseLLMClient, LLMResponse
from chat_relay.config import Settings

logger = logging.getLogger(__name__)


class OpenRouterClient(BaseLLMClient):
    """
    OpenRouter API client implementation.

    FEATURES:
    - Chat completions through the OpenAI SDK
    - Model catalog listing through httpx
    - No retries: one call in, one call out

    USAGE:
    client = OpenRouterClient(settings)
    response = await client.chat([{"role": "user", "content": "Hi"}])
    print(response.message["content"])
    """

    provider = "openrouter"

    def __init__(
        self,
        settings: Settings,
        http_client: Optional[httpx.AsyncClient] = None
    ):
        """
        Initialize OpenRouter client.

        ARGS:
        - settings: Startup settings (key, base URL, default model, timeout)
        - http_client: Optional shared httpx client (tests pass one with a
          mock transport)
        """
        self.api_key = settings.OPENROUTER_API_KEY
        self.base_url = settings.OPENROUTER_BASE_URL.rstrip('/')
        self.http_client = http_client
        self.default_headers = settings.openrouter_headers or None

        super().__init__(model=settings.DEFAULT_MODEL, timeout=settings.LLM_TIMEOUT)

        # Built on first chat() call: the SDK refuses an empty key at
        # construction time, and that must fail as an upstream error
        self._client: Optional[AsyncOpenAI] = None

        logger.info(f"OpenRouter client initialized: {self.base_url}, default model: {self.model}")

    @property
    def client(self) -> AsyncOpenAI:
        """The OpenAI SDK client, created on first use"""
        if self._client is None:
            self._client = AsyncOpenAI(
                api_key=self.api_key,
                base_url=self.base_url,
                timeout=self.timeout,
                max_retries=0,  # Failures surface immediately
                default_headers=self.default_headers,
                http_client=self.http_client
            )
        return self._client

    async def chat(
        self,
        messages: List[Dict[str, Any]],
        model: Optional[str] = None,
        max_tokens: int = 1000,
        temperature: float = 0.7,
        **kwargs
    ) -> LLMResponse:
        """
        Single chat completion call.

        The message list goes to the API exactly as given. Upstream errors
        (openai.AuthenticationError, openai.RateLimitError, ...) propagate
        with their status_code intact.

        EXAMPLE:
        messages = [
            {"role": "system", "content": "You are concise."},
            {"role": "user", "content": "Explain HTTP in one line."},
        ]
        response = await client.chat(messages, model="openai/gpt-4o-mini")
        """
        model = model or self.model

        # Raw response: status errors still raise, but we read the JSON body
        # as sent so usage and message fields pass through untouched
        raw = await self.client.chat.completions.with_raw_response.create(
            model=model,
            messages=messages,
            max_tokens=max_tokens,
            temperature=temperature,
            **kwargs
        )

        payload = raw.http_response.json()
        choice = payload["choices"][0]
        message = dict(choice.get("message") or {})

        response = LLMResponse(
            message=message,
            model=model,
            provider=self.provider,
            usage=payload.get("usage"),
            metadata={
                "finish_reason": choice.get("finish_reason"),
                "model": payload.get("model"),
                "id": payload.get("id")
            }
        )

        logger.info(
            f"OpenRouter request successful. "
            f"Tokens: {response.total_tokens}, "
            f"Model: {model}"
        )

        return response

    async def list_models(self) -> List[Dict[str, Any]]:
        """
        Fetch the model catalog.

        RETURNS:
        The upstream "data" array, untouched.

        RAISES:
        - httpx.HTTPStatusError on a non-2xx status
        - httpx.HTTPError on transport failure
        - ValueError if the body has no "data" list
        """
        headers = {"Authorization": f"Bearer {self.api_key}"}

        if self.http_client is not None:
            response = await self.http_client.get(
                f"{self.base_url}/models", headers=headers, timeout=self.timeout
            )
        else:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(f"{self.base_url}/models", headers=headers)

        response.raise_for_status()
        data = response.json().get("data")

        if not isinstance(data, list):
            raise ValueError("Unexpected model list payload: missing 'data' array")

        logger.info(f"Fetched {len(data)} models from OpenRouter")
        return data

    async def is_available(self) -> bool:
        """True when an API key is configured"""
        return bool(self.api_key)
