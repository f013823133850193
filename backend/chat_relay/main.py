"""
FastAPI Application Entry Point
--------------------------------
This is the heart of the relay backend.

WHAT THIS FILE DOES:
1. Creates the FastAPI app instance
2. Sets up middleware (rate limit, body limit, security headers, CORS)
3. Registers all API routes under /api
4. Provides health check endpoint

RUN IT:
uvicorn chat_relay.main:app --port 5000
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from datetime import datetime, timezone
import logging

from chat_relay.config import Settings, get_settings, settings as default_settings
from chat_relay.llm import GeminiClient, OpenRouterClient
from chat_relay.services.assist_service import AssistService, get_assist_service
from chat_relay.services.relay_service import RelayService, get_relay_service

# Import API routes
from chat_relay.api import assist, chat
from chat_relay.utils.middleware import create_limiter, register_middleware


# ============================================================================
# LOGGING SETUP
# ============================================================================
logging.basicConfig(
    level=getattr(logging, default_settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

VERSION = "0.1.0"


def create_app(settings: Settings = default_settings) -> FastAPI:
    """
    Build the FastAPI app for the given settings.

    Tests call this with their own Settings (e.g. a tiny rate limit);
    everyone else uses the module-level `app` below.
    """

    # ------------------------------------------------------------------------
    # LIFESPAN EVENTS (Startup / Shutdown)
    # ------------------------------------------------------------------------
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # STARTUP
        logger.info("🚀 Starting Chat Relay API...")
        logger.info(f"Environment: {settings.ENVIRONMENT}")
        logger.info(f"Upstream: {settings.OPENROUTER_BASE_URL} (default model {settings.DEFAULT_MODEL})")
        logger.info(f"Frontend origins: {settings.CORS_ORIGINS}")

        if not settings.OPENROUTER_API_KEY:
            logger.warning("⚠️  OPENROUTER_API_KEY is not set! Upstream calls will fail.")
        if not settings.GEMINI_API_KEY:
            logger.warning("⚠️  GEMINI_API_KEY is not set! Assist endpoints will fail.")

        logger.info("✅ Application started successfully")

        yield  # Application runs here

        # SHUTDOWN
        logger.info("👋 Shutting down Chat Relay API...")

    # ------------------------------------------------------------------------
    # CREATE FASTAPI APP
    # ------------------------------------------------------------------------
    app = FastAPI(
        title="Chat Relay API",
        description="Relay between a browser chat UI and upstream LLM APIs",
        version=VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan
    )

    # ------------------------------------------------------------------------
    # MIDDLEWARE
    # ------------------------------------------------------------------------
    limiter = create_limiter(settings)
    register_middleware(app, settings, limiter)

    # ------------------------------------------------------------------------
    # HEALTH CHECK & ROOT
    # ------------------------------------------------------------------------
    @app.get("/api/health", tags=["Health"])
    async def health_check():
        """
        Health check endpoint for monitoring.

        TEST IT:
        curl http://localhost:5000/api/health
        """
        return {
            "status": "OK",
            "timestamp": datetime.now(timezone.utc).isoformat()
        }

    @app.get("/", tags=["Root"])
    @limiter.exempt
    def root():
        """API root endpoint with welcome message. Not rate limited."""
        return {
            "message": "Welcome to Chat Relay API",
            "docs": "/docs",
            "health": "/api/health",
            "version": VERSION
        }

    # ------------------------------------------------------------------------
    # REGISTER ROUTES
    # ------------------------------------------------------------------------
    app.include_router(chat.router, prefix="/api", tags=["Chat"])
    app.include_router(assist.router, prefix="/api/assist", tags=["Assist"])

    # Routers resolve settings and services through these getters; point
    # them at this app's settings instead of the module-level defaults
    relay_service = RelayService(settings, OpenRouterClient(settings))
    assist_service = AssistService(settings, GeminiClient(settings))
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_relay_service] = lambda: relay_service
    app.dependency_overrides[get_assist_service] = lambda: assist_service

    # ------------------------------------------------------------------------
    # ERROR HANDLERS
    # ------------------------------------------------------------------------
    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        """Unparseable JSON bodies get a 400 in our error shape"""
        logger.warning(f"Invalid request body on {request.url.path}: {exc.errors()}")
        return JSONResponse(status_code=400, content={"error": "invalid request body"})

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """
        Catch all unhandled exceptions.

        Logs the full error and returns a generic 500. The error text is only
        exposed outside production.
        """
        logger.error(f"Unhandled exception: {exc}", exc_info=True)

        content = {"error": "internal server error"}
        if not settings.is_production:
            content["message"] = str(exc)
        return JSONResponse(status_code=500, content=content)

    return app


app = create_app()


# ============================================================================
# RUN APPLICATION (for development)
# ============================================================================
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "chat_relay.main:app",
        host=default_settings.BACKEND_HOST,
        port=default_settings.BACKEND_PORT,
        reload=default_settings.BACKEND_RELOAD,
        log_level=default_settings.LOG_LEVEL.lower()
    )
