"""
LLM Package
-----------
Thin clients for the upstream providers.

USAGE:
from chat_relay.llm import OpenRouterClient

client = OpenRouterClient(settings)
response = await client.chat([{"role": "user", "content": "Hello"}])
"""

from chat_relay.llm.base_client import BaseLLMClient, LLMMessage, LLMResponse, MessageRole
from chat_relay.llm.openrouter_client import OpenRouterClient
from chat_relay.llm.gemini_client import GeminiClient, EmptyGenerationError

__all__ = [
    # Base classes
    "BaseLLMClient",
    "LLMMessage",
    "LLMResponse",
    "MessageRole",

    # Clients
    "OpenRouterClient",
    "GeminiClient",
    "EmptyGenerationError",
]
