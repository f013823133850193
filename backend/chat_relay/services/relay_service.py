"""
Relay Service
-------------
Business logic for the chat relay.

RESPONSIBILITIES:
- Validate inbound chat requests
- Forward them to the upstream provider (one call, no retries)
- Shape the provider's answer
- Classify upstream failures into 401 / 429 / 500 errors

Nothing is raised to the caller: every method returns a RelayResult.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from chat_relay.config import Settings, get_settings
from chat_relay.llm.base_client import MessageRole
from chat_relay.llm.openrouter_client import OpenRouterClient
from chat_relay.models.result import RelayError, RelayResult
from chat_relay.utils.validators import validate_conversation

logger = logging.getLogger(__name__)


def upstream_status(error: Exception) -> Optional[int]:
    """
    HTTP status the upstream reported for a failure, if any.

    Works for openai.APIStatusError (status_code) and
    httpx.HTTPStatusError (response.status_code). Transport errors have none.
    """
    status = getattr(error, "status_code", None)
    if isinstance(status, int):
        return status
    if isinstance(error, httpx.HTTPStatusError):
        return error.response.status_code
    return None


def classify_upstream_error(error: Exception, fallback: RelayError) -> RelayError:
    """
    Map an upstream failure to a RelayError.

    - 401 -> UNAUTHORIZED
    - 429 -> RATE_LIMITED
    - anything else -> fallback
    """
    status = upstream_status(error)
    if status == 401:
        return RelayError.unauthorized()
    if status == 429:
        return RelayError.rate_limited()
    return fallback


class RelayService:
    """
    Service for relaying chat completions and the model catalog.

    USAGE:
    service = RelayService(settings, OpenRouterClient(settings))
    result = await service.forward_completion({"messages": [...]})
    """

    def __init__(self, settings: Settings, client: OpenRouterClient):
        """
        ARGS:
        - settings: Startup settings (default model, token cap, temperature)
        - client: Upstream client; tests pass a fake
        """
        self.settings = settings
        self.client = client
        logger.info("Relay service initialized")

    async def forward_completion(self, payload: Any) -> RelayResult[Dict[str, Any]]:
        """
        Validate a chat request and forward it upstream.

        WORKFLOW:
        1. Validate messages and resolve the model
        2. One upstream completion call
        3. Fill in role/content defaults on the answer

        RETURNS:
        RelayResult with {"message": {...}, "usage": {...}} on success
        """
        validated = validate_conversation(payload, self.settings.DEFAULT_MODEL)
        if validated.error:
            logger.warning(f"Rejected chat request: {validated.error.message}")
            return RelayResult.failure(validated.error)

        request = validated.value

        try:
            response = await self.client.chat(
                messages=request.messages,
                model=request.model,
                max_tokens=self.settings.COMPLETION_MAX_TOKENS,
                temperature=self.settings.COMPLETION_TEMPERATURE
            )
        except Exception as e:
            logger.error(f"Upstream API error in forward_completion (model={request.model}): {e!r}")
            detail = None if self.settings.is_production else str(e)
            return RelayResult.failure(
                classify_upstream_error(e, RelayError.upstream_error(detail))
            )

        message = dict(response.message)
        message["role"] = message.get("role") or MessageRole.ASSISTANT.value
        message["content"] = message.get("content") or ""

        return RelayResult.success({"message": message, "usage": response.usage})

    async def list_models(self) -> RelayResult[List[Dict[str, Any]]]:
        """
        Fetch the upstream model catalog.

        RETURNS:
        RelayResult with the upstream list in upstream order
        """
        try:
            models = await self.client.list_models()
        except Exception as e:
            logger.error(f"Error fetching models from upstream API: {e!r}")
            return RelayResult.failure(RelayError.model_list_unavailable())

        return RelayResult.success(models)


# =============================================================================
# SERVICE INSTANCE
# =============================================================================
_relay_service: Optional[RelayService] = None


def get_relay_service() -> RelayService:
    """
    FastAPI dependency for the relay service.

    The service is built on first use from the startup settings and is never
    changed afterwards.
    """
    global _relay_service
    if _relay_service is None:
        settings = get_settings()
        _relay_service = RelayService(settings, OpenRouterClient(settings))
    return _relay_service
