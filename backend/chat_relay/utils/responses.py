"""
Response Helpers
----------------
Turn a RelayResult into an HTTP response.
"""

from typing import Any

from fastapi.responses import JSONResponse

from chat_relay.config import Settings
from chat_relay.models.result import RelayResult


def render_result(result: RelayResult[Any], settings: Settings):
    """
    Success -> {"success": true, "data": ...}
    Failure -> JSONResponse with the error's status and body

    Upstream error text is only included outside production.
    """
    if result.error:
        return JSONResponse(
            status_code=result.error.status_code,
            content=result.error.to_body(include_detail=not settings.is_production)
        )
    return {"success": True, "data": result.value}
