"""
Assist Service
--------------
Auxiliary text operations on a conversation, backed by Gemini.

OPERATIONS:
- summarize()                    - Short summary of the conversation
- suggest_follow_up_questions()  - 3-5 questions the user could ask next

Both take the same {"messages": [...]} body as the chat relay and return a
RelayResult with {"text": "..."}.
"""

import logging
from typing import Any, Dict, Optional

from chat_relay.config import Settings, get_settings
from chat_relay.llm.base_client import BaseLLMClient, LLMMessage, MessageRole
from chat_relay.llm.gemini_client import GeminiClient
from chat_relay.models.result import RelayError, RelayResult
from chat_relay.services.relay_service import classify_upstream_error
from chat_relay.utils.validators import conversation_to_text, validate_messages

logger = logging.getLogger(__name__)

SUMMARY_PROMPT = "Summarize the following conversation:\n\n{conversation}"
FOLLOW_UP_PROMPT = (
    "Based on the following conversation, suggest 3-5 concise follow-up "
    "questions:\n\n{conversation}"
)

SUMMARY_FAILED = "failed to summarize conversation"
FOLLOW_UP_FAILED = "failed to suggest follow-up questions"


class AssistService:
    """
    Service for conversation summaries and follow-up questions.

    USAGE:
    service = AssistService(settings, GeminiClient(settings))
    result = await service.summarize({"messages": [...]})
    print(result.value["text"])
    """

    def __init__(self, settings: Settings, client: BaseLLMClient):
        self.settings = settings
        self.client = client
        logger.info("Assist service initialized")

    async def summarize(self, payload: Any) -> RelayResult[Dict[str, Any]]:
        """Summarize the conversation in payload["messages"]"""
        return await self._run(payload, SUMMARY_PROMPT, SUMMARY_FAILED, "summarize")

    async def suggest_follow_up_questions(self, payload: Any) -> RelayResult[Dict[str, Any]]:
        """Suggest follow-up questions for payload["messages"]"""
        return await self._run(payload, FOLLOW_UP_PROMPT, FOLLOW_UP_FAILED, "follow-up questions")

    async def _run(
        self,
        payload: Any,
        template: str,
        failure_message: str,
        operation: str
    ) -> RelayResult[Dict[str, Any]]:
        """
        Shared flow: validate -> build prompt -> one Gemini call -> {"text"}.
        """
        validated = validate_messages(payload)
        if validated.error:
            logger.warning(f"Rejected {operation} request: {validated.error.message}")
            return RelayResult.failure(validated.error)

        if not await self.client.is_available():
            logger.error(f"Assist provider has no API key configured; cannot run {operation}")
            return RelayResult.failure(RelayError.assist_unavailable(failure_message))

        prompt = template.format(conversation=conversation_to_text(validated.value))
        messages = BaseLLMClient.format_messages([
            LLMMessage(role=MessageRole.USER, content=prompt)
        ])

        try:
            response = await self.client.chat(
                messages=messages,
                max_tokens=self.settings.COMPLETION_MAX_TOKENS,
                temperature=self.settings.COMPLETION_TEMPERATURE
            )
        except Exception as e:
            logger.error(f"Assist API error ({operation}): {e!r}")
            detail = None if self.settings.is_production else str(e)
            return RelayResult.failure(
                classify_upstream_error(e, RelayError.assist_unavailable(failure_message, detail))
            )

        return RelayResult.success({"text": response.content})


# =============================================================================
# SERVICE INSTANCE
# =============================================================================
_assist_service: Optional[AssistService] = None


def get_assist_service() -> AssistService:
    """FastAPI dependency for the assist service"""
    global _assist_service
    if _assist_service is None:
        settings = get_settings()
        _assist_service = AssistService(settings, GeminiClient(settings))
    return _assist_service
