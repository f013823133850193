"""
Assist API Routes
-----------------
Helper operations on a conversation.

ENDPOINTS:
- POST /api/assist/summarize            - Summarize the conversation
- POST /api/assist/follow-up-questions  - Suggest questions to ask next
"""

from typing import Any

from fastapi import APIRouter, Body, Depends

from chat_relay.api.chat import ERROR_RESPONSES
from chat_relay.config import Settings, get_settings
from chat_relay.models.chat import AssistResponse
from chat_relay.services.assist_service import AssistService, get_assist_service
from chat_relay.utils.responses import render_result

router = APIRouter()

ASSIST_EXAMPLE = {
    "messages": [
        {"role": "user", "content": "How do I reverse a list in Python?"},
        {"role": "assistant", "content": "Use reversed(items) or items[::-1]."}
    ]
}


@router.post("/summarize", response_model=AssistResponse, responses=ERROR_RESPONSES)
async def summarize(
    payload: Any = Body(None, examples=[ASSIST_EXAMPLE]),
    service: AssistService = Depends(get_assist_service),
    settings: Settings = Depends(get_settings)
):
    """
    Summarize a conversation.

    RESPONSE:
    ```json
    {"success": true, "data": {"text": "The user asked how to ..."}}
    ```
    """
    result = await service.summarize(payload)
    return render_result(result, settings)


@router.post("/follow-up-questions", response_model=AssistResponse, responses=ERROR_RESPONSES)
async def follow_up_questions(
    payload: Any = Body(None, examples=[ASSIST_EXAMPLE]),
    service: AssistService = Depends(get_assist_service),
    settings: Settings = Depends(get_settings)
):
    """Suggest 3-5 follow-up questions for a conversation."""
    result = await service.suggest_follow_up_questions(payload)
    return render_result(result, settings)
