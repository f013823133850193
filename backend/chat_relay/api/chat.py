"""
Chat API Routes
---------------
HTTP endpoints for the chat relay.

ENDPOINTS:
- POST /api/chat/completion  - Forward a conversation to the upstream model
- GET  /api/models           - List models the upstream offers
"""

from typing import Any

from fastapi import APIRouter, Body, Depends

from chat_relay.config import Settings, get_settings
from chat_relay.models.chat import (
    ChatCompletionResponse,
    ErrorResponse,
    ModelListResponse
)
from chat_relay.services.relay_service import RelayService, get_relay_service
from chat_relay.utils.responses import render_result

# Create router
router = APIRouter()

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid request"},
    401: {"model": ErrorResponse, "description": "Upstream rejected the API key"},
    429: {"model": ErrorResponse, "description": "Upstream rate limit"},
    500: {"model": ErrorResponse, "description": "Upstream or internal failure"},
}

CHAT_EXAMPLE = {
    "messages": [{"role": "user", "content": "hi"}],
    "model": "openai/gpt-4o"
}


# =============================================================================
# CHAT COMPLETION
# =============================================================================

@router.post(
    "/chat/completion",
    response_model=ChatCompletionResponse,
    responses=ERROR_RESPONSES
)
async def chat_completion(
    payload: Any = Body(None, examples=[CHAT_EXAMPLE]),
    service: RelayService = Depends(get_relay_service),
    settings: Settings = Depends(get_settings)
):
    """
    Forward a conversation and return the model's reply.

    REQUEST BODY:
    ```json
    {
      "messages": [{"role": "user", "content": "hi"}],
      "model": "openai/gpt-4o"
    }
    ```

    RESPONSE:
    ```json
    {
      "success": true,
      "data": {
        "message": {"role": "assistant", "content": "hello"},
        "usage": {"prompt_tokens": 8, "completion_tokens": 2, "total_tokens": 10}
      }
    }
    ```

    EXAMPLE:
    ```bash
    curl -X POST "http://localhost:5000/api/chat/completion" \
      -H "Content-Type: application/json" \
      -d '{"messages": [{"role": "user", "content": "hi"}]}'
    ```
    """
    result = await service.forward_completion(payload)
    return render_result(result, settings)


# =============================================================================
# MODEL CATALOG
# =============================================================================

@router.get(
    "/models",
    response_model=ModelListResponse,
    responses={500: ERROR_RESPONSES[500]}
)
async def list_models(
    service: RelayService = Depends(get_relay_service),
    settings: Settings = Depends(get_settings)
):
    """
    List the upstream's models, in upstream order.

    EXAMPLE:
    ```bash
    curl http://localhost:5000/api/models
    ```
    """
    result = await service.list_models()
    return render_result(result, settings)
