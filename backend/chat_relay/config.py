"""
Application Configuration
-------------------------
Loads settings from environment variables using Pydantic.

EXPLANATION FOR BEGINNERS:
- Pydantic validates that environment variables have the correct types
- Settings are built once at startup and handed to the services that need them
- Nothing mutates settings after startup, so every request can share them
"""

from pydantic_settings import BaseSettings
from pydantic import Field, validator
from typing import List


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    WHAT THIS DOES:
    - Reads .env file automatically
    - Validates all settings on startup
    - Provides type-safe access to configuration
    """

    # -------------------------------------------------------------------------
    # UPSTREAM COMPLETION PROVIDER (OpenRouter)
    # -------------------------------------------------------------------------
    OPENROUTER_API_KEY: str = Field(
        default="",
        description="OpenRouter API key (NEVER share or log this!)"
    )
    OPENROUTER_BASE_URL: str = Field(
        default="https://openrouter.ai/api/v1",
        description="OpenAI-compatible base URL of the upstream aggregator"
    )
    DEFAULT_MODEL: str = Field(
        default="openai/gpt-4o",
        description="Model used when a request does not name one"
    )
    COMPLETION_MAX_TOKENS: int = Field(
        default=1000,
        description="Max tokens requested for every completion"
    )
    COMPLETION_TEMPERATURE: float = Field(
        default=0.7,
        description="Sampling temperature for every completion"
    )

    # Optional attribution headers for openrouter.ai rankings
    SITE_URL: str = Field(default="", description="Sent as HTTP-Referer")
    SITE_NAME: str = Field(default="", description="Sent as X-Title")

    # -------------------------------------------------------------------------
    # ASSIST PROVIDER (Gemini)
    # -------------------------------------------------------------------------
    GEMINI_API_KEY: str = Field(
        default="",
        description="Google Generative Language API key"
    )
    GEMINI_BASE_URL: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta",
        description="Gemini REST base URL"
    )
    GEMINI_MODEL: str = Field(
        default="gemini-2.0-flash",
        description="Model used for summaries and follow-up questions"
    )

    # Shared outbound timeout
    LLM_TIMEOUT: int = Field(default=30, description="Request timeout in seconds")

    # -------------------------------------------------------------------------
    # BACKEND API
    # -------------------------------------------------------------------------
    BACKEND_HOST: str = Field(default="0.0.0.0")
    BACKEND_PORT: int = Field(default=5000)
    BACKEND_RELOAD: bool = Field(default=True, description="Auto-reload on code changes")

    # CORS (Cross-Origin Resource Sharing)
    CORS_ORIGINS: str = Field(
        default="http://localhost:5173,http://localhost:3000",
        description="Comma-separated list of allowed origins"
    )

    @validator("CORS_ORIGINS")
    def parse_cors_origins(cls, v: str) -> List[str]:
        """Convert comma-separated string to list"""
        return [origin.strip() for origin in v.split(",") if origin.strip()]

    # Rate limiting (per client IP, /api routes only)
    RATE_LIMIT_ENABLED: bool = Field(default=True)
    RATE_LIMIT: str = Field(
        default="100 per 15 minutes",
        description="Limit string understood by slowapi"
    )

    # Request bodies
    MAX_BODY_SIZE_MB: int = Field(default=10)

    # -------------------------------------------------------------------------
    # LOGGING
    # -------------------------------------------------------------------------
    LOG_LEVEL: str = Field(default="INFO", description="DEBUG, INFO, WARNING, ERROR")

    # -------------------------------------------------------------------------
    # ENVIRONMENT
    # -------------------------------------------------------------------------
    ENVIRONMENT: str = Field(default="development", description="development or production")

    @property
    def is_production(self) -> bool:
        """Check if running in production"""
        return self.ENVIRONMENT.lower() == "production"

    # -------------------------------------------------------------------------
    # COMPUTED PROPERTIES
    # -------------------------------------------------------------------------
    @property
    def max_body_size_bytes(self) -> int:
        """Convert MB to bytes for request body validation"""
        return self.MAX_BODY_SIZE_MB * 1024 * 1024

    @property
    def openrouter_headers(self) -> dict:
        """Attribution headers, only the ones that are configured"""
        headers = {}
        if self.SITE_URL:
            headers["HTTP-Referer"] = self.SITE_URL
        if self.SITE_NAME:
            headers["X-Title"] = self.SITE_NAME
        return headers

    # -------------------------------------------------------------------------
    # PYDANTIC CONFIG
    # -------------------------------------------------------------------------
    class Config:
        env_file = ".env"  # Automatically load .env file
        env_file_encoding = "utf-8"
        case_sensitive = True  # OPENROUTER_API_KEY != openrouter_api_key
        extra = "ignore"  # .env may hold frontend variables too


# ============================================================================
# GLOBAL SETTINGS INSTANCE
# ============================================================================
# Built once at startup; services receive it through their constructors
settings = Settings()


def get_settings() -> Settings:
    """FastAPI dependency returning the startup settings"""
    return settings


# ============================================================================
# HELPER FUNCTION TO PRINT CONFIG (FOR DEBUGGING)
# ============================================================================
def print_config(config: Settings = settings):
    """Print current configuration (hides secrets)"""
    print("\n" + "="*70)
    print("APPLICATION CONFIGURATION")
    print("="*70)

    for field, value in config.dict().items():
        # Hide sensitive values
        if any(secret in field.upper() for secret in ["KEY", "PASSWORD", "SECRET"]):
            display_value = "***HIDDEN***" if value else "(not set)"
        else:
            display_value = value

        print(f"{field:30} = {display_value}")

    print("="*70 + "\n")


if __name__ == "__main__":
    # Run this file directly to check configuration
    print_config()
    print(f"Is production? {settings.is_production}")
    print(f"Max body size: {settings.max_body_size_bytes} bytes")
