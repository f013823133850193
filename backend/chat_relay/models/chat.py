"""
Chat Pydantic Models
--------------------
Response schemas for the relay endpoints.

Request bodies are checked by chat_relay.utils.validators rather than by
FastAPI, so a bad body gets our own 400 message instead of a generic 422.
"""

from pydantic import BaseModel
from typing import List, Optional, Dict, Any


# =============================================================================
# CHAT COMPLETION
# =============================================================================

class CompletionData(BaseModel):
    """
    The provider's message plus its token accounting, both verbatim.

    EXAMPLE:
    {
        "message": {"role": "assistant", "content": "hello"},
        "usage": {"prompt_tokens": 8, "completion_tokens": 2, "total_tokens": 10}
    }
    """
    message: Dict[str, Any]
    usage: Any = None


class ChatCompletionResponse(BaseModel):
    success: bool = True
    data: CompletionData


# =============================================================================
# MODEL CATALOG
# =============================================================================

class ModelListResponse(BaseModel):
    """Upstream catalog entries ({"id", "name", ...}) in upstream order"""
    success: bool = True
    data: List[Any]


# =============================================================================
# ASSIST (SUMMARY / FOLLOW-UP QUESTIONS)
# =============================================================================

class AssistData(BaseModel):
    text: str


class AssistResponse(BaseModel):
    success: bool = True
    data: AssistData


# =============================================================================
# ERRORS
# =============================================================================

class ErrorResponse(BaseModel):
    """
    Every failed request gets this shape.

    "message" carries validation hints, and upstream error text outside
    production.
    """
    error: str
    message: Optional[str] = None
