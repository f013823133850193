"""
Gemini LLM Client
-----------------
Implementation of BaseLLMClient for Google's Generative Language API.

WHAT WE USE IT FOR:
- Summarizing a conversation
- Suggesting follow-up questions

The REST API is small enough that plain httpx is all we need:
POST {base}/models/{model}:generateContent
with the key in the x-goog-api-key header (never in the URL, which
ends up in error messages and logs).
"""

from typing import List, Dict, Any, Optional
import logging
import httpx

from chat_relay.llm.base_client import BaseLLMClient, LLMResponse, MessageRole
from chat_relay.config import Settings

logger = logging.getLogger(__name__)


class EmptyGenerationError(ValueError):
    """Gemini answered 2xx but the body held no generated text"""


class GeminiClient(BaseLLMClient):
    """
    Gemini REST client.

    USAGE:
    client = GeminiClient(settings)
    response = await client.chat([{"role": "user", "content": "Summarize: ..."}])
    print(response.content)
    """

    provider = "gemini"

    def __init__(
        self,
        settings: Settings,
        http_client: Optional[httpx.AsyncClient] = None
    ):
        """
        Initialize Gemini client.

        ARGS:
        - settings: Startup settings (key, base URL, model, timeout)
        - http_client: Optional shared httpx client
        """
        self.api_key = settings.GEMINI_API_KEY
        self.base_url = settings.GEMINI_BASE_URL.rstrip('/')
        self.http_client = http_client

        super().__init__(model=settings.GEMINI_MODEL, timeout=settings.LLM_TIMEOUT)

        logger.info(f"Gemini client initialized: {self.base_url}, model: {self.model}")

    @staticmethod
    def to_contents(messages: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """
        Convert chat messages to Gemini "contents".

        Gemini knows only "user" and "model" turns, so assistant messages
        become "model" and system messages are sent as user turns.
        """
        contents = []
        for msg in messages:
            role = "model" if msg["role"] == MessageRole.ASSISTANT.value else "user"
            contents.append({"role": role, "parts": [{"text": msg["content"]}]})
        return contents

    async def chat(
        self,
        messages: List[Dict[str, Any]],
        model: Optional[str] = None,
        max_tokens: int = 1000,
        temperature: float = 0.7,
        **kwargs
    ) -> LLMResponse:
        """
        Generate content with Gemini.

        RAISES:
        - httpx.HTTPStatusError on a non-2xx status
        - httpx.HTTPError on transport failure
        - EmptyGenerationError when no candidate text comes back
        """
        model = model or self.model
        url = f"{self.base_url}/models/{model}:generateContent"
        body = {
            "contents": self.to_contents(messages),
            "generationConfig": {
                "maxOutputTokens": max_tokens,
                "temperature": temperature
            }
        }
        headers = {"x-goog-api-key": self.api_key}

        if self.http_client is not None:
            response = await self.http_client.post(url, headers=headers, json=body, timeout=self.timeout)
        else:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(url, headers=headers, json=body)

        response.raise_for_status()
        data = response.json()

        text = self._first_text(data)
        if text is None:
            raise EmptyGenerationError("No text generated or unexpected API response structure")

        usage_meta = data.get("usageMetadata") or {}
        llm_response = LLMResponse(
            message={"role": MessageRole.ASSISTANT.value, "content": text},
            model=model,
            provider=self.provider,
            usage={
                "prompt_tokens": usage_meta.get("promptTokenCount", 0),
                "completion_tokens": usage_meta.get("candidatesTokenCount", 0),
                "total_tokens": usage_meta.get("totalTokenCount", 0)
            },
            metadata={
                "finish_reason": data["candidates"][0].get("finishReason")
            }
        )

        logger.info(
            f"Gemini request successful. "
            f"Tokens: {llm_response.total_tokens}, "
            f"Model: {model}"
        )

        return llm_response

    @staticmethod
    def _first_text(data: Dict[str, Any]) -> Optional[str]:
        """Text of candidates[0].content.parts[0], or None if any level is missing"""
        candidates = data.get("candidates") or []
        if not candidates:
            return None
        parts = (candidates[0].get("content") or {}).get("parts") or []
        if not parts:
            return None
        return parts[0].get("text")

    async def is_available(self) -> bool:
        """True when an API key is configured"""
        return bool(self.api_key)
