"""
Base LLM Client
---------------
Abstract base class for all upstream providers (OpenRouter, Gemini).

EXPLANATION FOR BEGINNERS:
- This is an "interface" or "contract"
- Every provider client must implement these methods
- Services only talk to this interface, so tests can hand them a fake

ERROR CONTRACT:
Clients raise whatever their transport raises (openai.APIStatusError,
httpx.HTTPStatusError, ...). They never retry and never translate errors;
the services decide what a failure means for the caller.
"""

from abc import ABC, abstractmethod
from typing import List, Dict, Any, Optional
from dataclasses import dataclass, field
from enum import Enum


# =============================================================================
# MESSAGE ROLE ENUM
# =============================================================================

class MessageRole(str, Enum):
    """Roles for chat messages"""
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"

    @classmethod
    def values(cls) -> List[str]:
        return [role.value for role in cls]


# =============================================================================
# DATA CLASSES FOR STRUCTURED RESPONSES
# =============================================================================

@dataclass
class LLMMessage:
    """
    A single chat message.

    EXAMPLE:
    message = LLMMessage(
        role=MessageRole.USER,
        content="Hello, how are you?"
    )
    """
    role: MessageRole
    content: str


@dataclass
class LLMResponse:
    """
    Response from an upstream provider.

    FIELDS:
    - message: The provider's message object (role/content plus any extras)
    - model: Which model was asked for
    - provider: Which provider (openrouter, gemini)
    - usage: Token accounting exactly as the provider sent it (may be None)
    - metadata: Any extra info

    EXAMPLE:
    response = LLMResponse(
        message={"role": "assistant", "content": "I'm doing well!"},
        model="openai/gpt-4o",
        provider="openrouter",
        usage={"prompt_tokens": 10, "completion_tokens": 8, "total_tokens": 18}
    )
    """
    message: Dict[str, Any]
    model: str
    provider: str
    usage: Any = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def content(self) -> str:
        return self.message.get("content") or ""

    @property
    def total_tokens(self) -> int:
        if isinstance(self.usage, dict):
            return self.usage.get("total_tokens", 0) or 0
        return 0


# =============================================================================
# BASE LLM CLIENT (ABSTRACT CLASS)
# =============================================================================

class BaseLLMClient(ABC):
    """
    Abstract base class for LLM providers.

    ALL LLM CLIENTS MUST IMPLEMENT:
    - chat() - Chat completion over a message list
    - is_available() - Check if provider is configured and reachable
    """

    provider = "base"

    def __init__(self, model: str, timeout: int = 30):
        """
        Initialize LLM client.

        ARGS:
        - model: Default model name (e.g., "openai/gpt-4o")
        - timeout: Request timeout in seconds
        """
        self.model = model
        self.timeout = timeout

    @abstractmethod
    async def chat(
        self,
        messages: List[Dict[str, Any]],
        model: Optional[str] = None,
        max_tokens: int = 1000,
        temperature: float = 0.7,
        **kwargs
    ) -> LLMResponse:
        """
        Chat completion with conversation history.

        ARGS:
        - messages: Conversation as plain dicts, forwarded as given
        - model: Overrides the client's default model for this call
        - max_tokens: Maximum tokens to generate
        - temperature: Randomness (0.0 = deterministic, 1.0 = creative)

        EXAMPLE:
        messages = [
            {"role": "system", "content": "You are a helpful assistant."},
            {"role": "user", "content": "What is Python?"},
        ]
        response = await client.chat(messages)
        """
        pass

    @abstractmethod
    async def is_available(self) -> bool:
        """
        Check if the provider can be used.

        RETURNS:
        True if a credential is configured for the provider
        """
        pass

    @staticmethod
    def format_messages(messages: List[LLMMessage]) -> List[Dict[str, str]]:
        """
        Convert LLMMessage objects to API format.

        [LLMMessage(role="user", content="Hi")]
        ->
        [{"role": "user", "content": "Hi"}]
        """
        return [
            {"role": MessageRole(msg.role).value, "content": msg.content}
            for msg in messages
        ]
