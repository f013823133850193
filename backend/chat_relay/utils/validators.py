"""
Request Validators
------------------
Explicit checks for inbound chat payloads.

RULES (checked in this order, first failure wins):
1. "messages" exists, is a list, and is not empty
2. Every message has a legal role and non-empty string content
3. "model", if given, is a string (empty means "use the default")

Nothing here talks to the network, so a rejected request never costs an
upstream call.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from chat_relay.llm.base_client import MessageRole
from chat_relay.models.result import RelayError, RelayResult

MESSAGES_REQUIRED = "messages array is required and cannot be empty"
INVALID_MESSAGE_FORMAT = "invalid message format"
MESSAGE_FORMAT_DETAIL = (
    "Each message must have 'role' ({roles}) and non-empty 'content'."
    .format(roles=", ".join(MessageRole.values()))
)
MODEL_NOT_STRING = "model must be a string"


@dataclass(frozen=True)
class ConversationRequest:
    """A validated request: caller's messages as sent, plus the resolved model"""
    messages: List[Dict[str, Any]]
    model: str


def is_valid_message(message: Any) -> bool:
    """
    Check a single message.

    EXAMPLES:
    is_valid_message({"role": "user", "content": "hi"})  -> True
    is_valid_message({"role": "tool", "content": "hi"})  -> False
    is_valid_message({"role": "user", "content": ""})    -> False
    """
    if not isinstance(message, dict):
        return False

    role = message.get("role")
    content = message.get("content")

    if not isinstance(role, str) or role not in MessageRole.values():
        return False
    if not isinstance(content, str) or not content:
        return False
    return True


def validate_messages(payload: Any) -> RelayResult[List[Dict[str, Any]]]:
    """
    Apply rules 1 and 2.

    RETURNS:
    RelayResult holding the message list unchanged, or an INVALID_REQUEST
    error.
    """
    messages = payload.get("messages") if isinstance(payload, dict) else None

    if not isinstance(messages, list) or len(messages) == 0:
        return RelayResult.failure(RelayError.invalid_request(MESSAGES_REQUIRED))

    if not all(is_valid_message(msg) for msg in messages):
        return RelayResult.failure(
            RelayError.invalid_request(INVALID_MESSAGE_FORMAT, MESSAGE_FORMAT_DETAIL)
        )

    return RelayResult.success(messages)


def validate_conversation(payload: Any, default_model: str) -> RelayResult[ConversationRequest]:
    """
    Apply all rules and resolve the model.

    EXAMPLE:
    result = validate_conversation(
        {"messages": [{"role": "user", "content": "hi"}]},
        default_model="openai/gpt-4o"
    )
    result.value.model  # "openai/gpt-4o"
    """
    messages_result = validate_messages(payload)
    if messages_result.error:
        return RelayResult.failure(messages_result.error)

    model: Optional[Any] = payload.get("model")
    if model is not None and not isinstance(model, str):
        return RelayResult.failure(RelayError.invalid_request(MODEL_NOT_STRING))

    return RelayResult.success(
        ConversationRequest(messages=messages_result.value, model=model or default_model)
    )


def conversation_to_text(messages: List[Dict[str, Any]]) -> str:
    """
    Flatten a conversation for a prompt, one line per message.

    EXAMPLE:
    [{"role": "user", "content": "hi"}, {"role": "assistant", "content": "hello"}]
    ->
    "You: hi\\nAI: hello"
    """
    lines = []
    for msg in messages:
        speaker = "You" if msg["role"] == MessageRole.USER.value else "AI"
        lines.append(f"{speaker}: {msg['content']}")
    return "\n".join(lines)
