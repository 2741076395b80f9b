# =============================================================================
# app/config.py - Settings
# =============================================================================
# One Settings object, read from the process environment and then from a
# .env file at the repository root (environment wins).
#
#   from app.config import settings
#   settings.CEREBRAS_BASE_URL
#
# Supabase credentials are mandatory. Provider keys are not: the settings
# object always loads, and ProviderRegistry.from_settings() is the place that
# refuses to start without them.
# =============================================================================

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _split_csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings(BaseSettings):
    """Process-wide configuration. Import the module-level ``settings``."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=True,
    )

    # --- Store ---------------------------------------------------------------

    SUPABASE_URL: str = Field(..., description="Supabase project URL")
    SUPABASE_ANON_KEY: str = Field(..., description="Public key handed to the browser client")
    SUPABASE_SERVICE_KEY: str = Field(
        ..., description="service_role key; the API filters by owner itself"
    )
    SUPABASE_JWT_SECRET: str = Field(
        default="",
        description="HS256 secret for legacy session tokens; when empty, HS256 tokens are refused",
    )

    # --- Inference providers -------------------------------------------------

    CEREBRAS_API_KEY: str | None = Field(default=None, description="Needed to serve cerebras-* models")
    CEREBRAS_BASE_URL: str = "https://api.cerebras.ai/v1"

    SAMBANOVA_API_KEY: str | None = Field(default=None, description="Needed to serve sambanova-* models")
    SAMBANOVA_BASE_URL: str = "https://api.sambanova.ai/v1"

    # --- Deployments ---------------------------------------------------------

    SITE_URL: str = Field(
        default="http://localhost:3000",
        description="Base of every deployed endpoint URL handed back to builders",
    )

    # --- Server --------------------------------------------------------------

    ENVIRONMENT: Literal["development", "staging", "production"] = "development"
    DEBUG: bool = Field(default=False, description="DEBUG logging and uvicorn reload")
    API_HOST: str = "0.0.0.0"
    API_PORT: int = Field(default=8000, ge=1, le=65535)
    CORS_ORIGINS: str = Field(
        default="http://localhost:3000",
        description="Comma-separated list of browser origins",
    )

    # --- Ingestion -----------------------------------------------------------

    MAX_UPLOAD_SIZE_MB: int = Field(default=50, ge=1, le=500)
    ALLOWED_EXTENSIONS: str = ".csv,.json,.txt,.md"
    PREVIEW_MAX_CHARS: int = Field(
        default=10000,
        ge=100,
        description="Leading characters of an upload a preview looks at",
    )
    API_SOURCE_TIMEOUT_SECONDS: float = Field(
        default=30.0,
        gt=0,
        description="Timeout for fetching an API data source",
    )

    # --- Derived -------------------------------------------------------------

    @property
    def cors_origins_list(self) -> list[str]:
        return _split_csv(self.CORS_ORIGINS)

    @property
    def allowed_extensions_list(self) -> list[str]:
        """Lower-cased extensions, dot included (".csv")."""
        return [ext.lower() for ext in _split_csv(self.ALLOWED_EXTENSIONS)]

    @property
    def max_upload_size_bytes(self) -> int:
        return self.MAX_UPLOAD_SIZE_MB * 1024 * 1024

    @property
    def site_url(self) -> str:
        return self.SITE_URL.rstrip("/")

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"


@lru_cache
def get_settings() -> Settings:
    """Parse and validate the environment once per process."""
    return Settings()


settings = get_settings()
