"""
Relay Results
-------------
What the services hand back to the routers.

Services never raise to their callers. They return a RelayResult holding
either a value or a RelayError, and the router picks the HTTP status from
the error's kind.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Generic, Optional, TypeVar

T = TypeVar("T")


class ErrorKind(str, Enum):
    """Failure categories, each tied to one HTTP status"""
    INVALID_REQUEST = "invalid_request"
    UNAUTHORIZED = "unauthorized"
    RATE_LIMITED = "rate_limited"
    UPSTREAM_ERROR = "upstream_error"
    MODEL_LIST_UNAVAILABLE = "model_list_unavailable"
    ASSIST_UNAVAILABLE = "assist_unavailable"


STATUS_BY_KIND = {
    ErrorKind.INVALID_REQUEST: 400,
    ErrorKind.UNAUTHORIZED: 401,
    ErrorKind.RATE_LIMITED: 429,
    ErrorKind.UPSTREAM_ERROR: 500,
    ErrorKind.MODEL_LIST_UNAVAILABLE: 500,
    ErrorKind.ASSIST_UNAVAILABLE: 500,
}


@dataclass(frozen=True)
class RelayError:
    """
    A classified failure.

    FIELDS:
    - kind: Which category (decides the status code)
    - message: Safe, caller-facing text
    - detail: Extra text. For upstream failures this is the raw upstream
      error and must only be shown outside production.
    """
    kind: ErrorKind
    message: str
    detail: Optional[str] = None

    @property
    def status_code(self) -> int:
        return STATUS_BY_KIND[self.kind]

    def to_body(self, include_detail: bool = False) -> Dict[str, Any]:
        """
        Render the JSON error body.

        Validation details are always safe to show; anything else is shown
        only when include_detail is set.
        """
        body: Dict[str, Any] = {"error": self.message}
        if self.detail and (include_detail or self.kind == ErrorKind.INVALID_REQUEST):
            body["message"] = self.detail
        return body

    # Constructors for each kind
    @classmethod
    def invalid_request(cls, message: str, detail: Optional[str] = None) -> "RelayError":
        return cls(ErrorKind.INVALID_REQUEST, message, detail)

    @classmethod
    def unauthorized(cls) -> "RelayError":
        return cls(ErrorKind.UNAUTHORIZED, "invalid API key provided to upstream provider")

    @classmethod
    def rate_limited(cls) -> "RelayError":
        return cls(ErrorKind.RATE_LIMITED, "rate limit exceeded for upstream provider")

    @classmethod
    def upstream_error(cls, detail: Optional[str] = None) -> "RelayError":
        return cls(ErrorKind.UPSTREAM_ERROR, "internal server error", detail)

    @classmethod
    def model_list_unavailable(cls) -> "RelayError":
        return cls(ErrorKind.MODEL_LIST_UNAVAILABLE, "failed to fetch models from external API")

    @classmethod
    def assist_unavailable(cls, message: str, detail: Optional[str] = None) -> "RelayError":
        return cls(ErrorKind.ASSIST_UNAVAILABLE, message, detail)


@dataclass(frozen=True)
class RelayResult(Generic[T]):
    """
    Success value or error, never both.

    USAGE:
    result = await service.forward_completion(payload)
    if result.error:
        return JSONResponse(status_code=result.error.status_code, ...)
    return {"success": True, "data": result.value}
    """
    value: Optional[T] = None
    error: Optional[RelayError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "RelayResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: RelayError) -> "RelayResult[T]":
        return cls(error=error)
