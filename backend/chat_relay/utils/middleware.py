"""
HTTP Middleware
---------------
Everything that wraps every request.

WHAT THIS SETS UP:
1. Rate limiting per client IP (slowapi)
2. Request body size limit
3. Security headers on every response
4. CORS for the browser frontend

EXPLANATION FOR BEGINNERS:
- Middleware = code that runs before/after every request
- The LAST middleware added is the OUTERMOST one, so CORS goes last and
  its headers end up on every response, including errors
"""

import logging
from typing import List

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address
from starlette.datastructures import Headers
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from chat_relay.config import Settings

logger = logging.getLogger(__name__)

RATE_LIMIT_MESSAGE = "Too many requests from this IP, please try again after 15 minutes"

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "no-referrer",
    "Cross-Origin-Opener-Policy": "same-origin",
    "X-DNS-Prefetch-Control": "off",
}


def create_limiter(settings: Settings) -> Limiter:
    """
    Per-IP limiter applied to every route by SlowAPIMiddleware.

    Routes that should not count (like "/") use @limiter.exempt.
    """
    return Limiter(
        key_func=get_remote_address,
        default_limits=[settings.RATE_LIMIT],
        enabled=settings.RATE_LIMIT_ENABLED
    )


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    """
    429 in the same {"error": ...} shape as every other failure.

    Must stay a plain function: SlowAPIMiddleware calls it without awaiting.
    """
    logger.warning(f"Rate limit exceeded for {get_remote_address(request)}: {exc.detail}")
    return JSONResponse(status_code=429, content={"error": RATE_LIMIT_MESSAGE})


class BodySizeLimitMiddleware:
    """
    Reject request bodies larger than max_bytes with a 413.

    A declared Content-Length is checked up front. Without one (chunked
    uploads) the body is read and counted here, then replayed to the app.
    """

    def __init__(self, app: ASGIApp, max_bytes: int):
        self.app = app
        self.max_bytes = max_bytes

    async def __call__(self, scope: Scope, receive: Receive, send: Send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        content_length = Headers(scope=scope).get("content-length")
        if content_length is not None:
            if content_length.isdigit() and int(content_length) > self.max_bytes:
                await self.reject(scope, receive, send, content_length)
                return
            await self.app(scope, receive, send)
            return

        buffered: List[Message] = []
        received = 0
        more_body = True
        while more_body:
            message = await receive()
            buffered.append(message)
            if message["type"] != "http.request":
                break
            received += len(message.get("body", b""))
            if received > self.max_bytes:
                await self.reject(scope, receive, send, f"more than {self.max_bytes}")
                return
            more_body = message.get("more_body", False)

        async def replay() -> Message:
            if buffered:
                return buffered.pop(0)
            return await receive()

        await self.app(scope, replay, send)

    async def reject(self, scope: Scope, receive: Receive, send: Send, size: str):
        logger.warning(f"Rejected {scope['path']}: body of {size} bytes")
        response = JSONResponse(status_code=413, content={"error": "request body too large"})
        await response(scope, receive, send)


def register_middleware(app: FastAPI, settings: Settings, limiter: Limiter):
    """Attach rate limiting, body limit, security headers and CORS to the app"""

    # -------------------------------------------------------------------------
    # RATE LIMITING (innermost)
    # -------------------------------------------------------------------------
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    # -------------------------------------------------------------------------
    # BODY SIZE LIMIT
    # -------------------------------------------------------------------------
    app.add_middleware(BodySizeLimitMiddleware, max_bytes=settings.max_body_size_bytes)

    # -------------------------------------------------------------------------
    # SECURITY HEADERS
    # -------------------------------------------------------------------------
    @app.middleware("http")
    async def add_security_headers(request: Request, call_next):
        response = await call_next(request)
        for header, value in SECURITY_HEADERS.items():
            response.headers.setdefault(header, value)
        return response

    # -------------------------------------------------------------------------
    # CORS (outermost)
    # -------------------------------------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,  # Frontend URLs
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
