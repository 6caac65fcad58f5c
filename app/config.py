# =============================================================================
# app/config.py - Application Settings
# =============================================================================
# This module loads configuration using pydantic-settings.
# It provides a single Settings class with all configuration values,
# grouped into named sections where values belong together.
#
# Usage:
#   settings = load_settings("appsettings.test.json")
#   print(settings.BASE_URLS.web_base)
#
# Values are loaded from (later sources win):
# 1. Field defaults
# 2. .env file in project root (if exists)
# 3. System environment variables (nested sections use "__", e.g.
#    BASE_URLS__WEB_BASE=https://shop.example.com)
# 4. An optional JSON overlay file (appsettings.test.json by default)
#
# Settings are loaded once by the first bootstrap step and registered as a
# capability; nothing reads the environment after that.
# =============================================================================

import json
import logging
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "appsettings.test.json"
DEFAULT_SEQ_SERVER_URL = "http://localhost:5341"


# =============================================================================
# Sections
# =============================================================================

class BaseUrlConfiguration(BaseModel):
    """Public URLs of this API and of the web front end that calls it."""

    api_base: str = Field(..., description="Base URL of this API")
    web_base: str = Field(..., description="Base URL of the web front end (CORS origin)")

    @property
    def web_origin(self) -> str:
        """
        The web base as a CORS origin.

        Containers address the host as host.docker.internal but browsers
        send localhost, and origins never carry a trailing slash.
        """
        return self.web_base.replace("host.docker.internal", "localhost").rstrip("/")


class DatabaseConfiguration(BaseModel):
    use_only_in_memory: bool = Field(
        default=True,
        description="Keep catalog and identity data in process instead of Supabase",
    )
    supabase_url: str | None = Field(default=None, description="Supabase project URL")
    supabase_service_key: str | None = Field(default=None, description="Supabase service_role key")
    seed_retry_attempts: int = Field(default=3, ge=1, le=20)
    seed_retry_delay_seconds: float = Field(default=1.0, ge=0)


class SeqConfiguration(BaseModel):
    server_url: str = Field(default=DEFAULT_SEQ_SERVER_URL, description="Seq ingestion server")
    api_key: str | None = None
    enabled: bool = True


# =============================================================================
# Settings
# =============================================================================

class Settings(BaseSettings):
    """
    Application settings loaded from the environment.

    Uses pydantic-settings to:
    - Automatically load from .env file
    - Validate types and constraints
    - Provide sensible defaults for development

    A missing BASE_URLS section is a validation error, which aborts startup.
    """

    # -------------------------------------------------------------------------
    # Sections
    # -------------------------------------------------------------------------

    BASE_URLS: BaseUrlConfiguration

    DATABASE: DatabaseConfiguration = Field(default_factory=DatabaseConfiguration)

    SEQ: SeqConfiguration = Field(default_factory=SeqConfiguration)

    # -------------------------------------------------------------------------
    # Application Settings
    # -------------------------------------------------------------------------

    ENVIRONMENT: Literal["development", "staging", "production"] = Field(
        default="production",
        description="Current environment; development shows diagnostic error detail",
    )

    DEBUG: bool = Field(
        default=False,
        description="Enable debug logging",
    )

    API_HOST: str = Field(
        default="0.0.0.0",
        description="Host to bind the API server to",
    )

    API_PORT: int = Field(
        default=8000,
        ge=1,
        le=65535,
        description="Port for the API server",
    )

    HTTPS_REDIRECTION: bool = Field(
        default=False,
        description="Redirect plain HTTP requests to HTTPS",
    )

    HTTPS_PORT: int | None = Field(
        default=None,
        ge=1,
        le=65535,
        description="Port used in HTTPS redirects (default port when unset)",
    )

    STARTUP_TIMEOUT_SECONDS: float = Field(
        default=30,
        gt=0,
        description="Seeding must finish within this many seconds or startup fails",
    )

    CACHE_TTL_SECONDS: float = Field(
        default=30,
        ge=0,
        description="Lifetime of cached reference data",
    )

    CATALOG_BASE_URL: str = Field(
        default="",
        description="Replaces the placeholder host in catalog picture URIs",
    )

    # -------------------------------------------------------------------------
    # Security
    # -------------------------------------------------------------------------

    SECRET_KEY: str = Field(
        default="SecretKeyOfDoomThatMustBeAMinimumNumberOfBytes",
        min_length=32,
        description="Secret key for signing bearer tokens",
    )

    TOKEN_LIFETIME_MINUTES: int = Field(
        default=7 * 24 * 60,
        ge=1,
        description="Lifetime of issued bearer tokens",
    )

    # Extra CORS origins (comma-separated string that gets parsed)
    CORS_ORIGINS: str = Field(
        default="",
        description="Additional allowed CORS origins (comma-separated)",
    )

    # -------------------------------------------------------------------------
    # Pydantic Settings Configuration
    # -------------------------------------------------------------------------

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def cors_origins_list(self) -> list[str]:
        """
        The web origin followed by any extra CORS_ORIGINS.

        Example: web_base "http://localhost:44315/" plus
        CORS_ORIGINS "https://admin.example.com" ->
        ["http://localhost:44315", "https://admin.example.com"]
        """
        origins = [self.BASE_URLS.web_origin]
        for origin in self.CORS_ORIGINS.split(","):
            origin = origin.strip().rstrip("/")
            if origin and origin not in origins:
                origins.append(origin)
        return origins

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"


def read_config_file(path: str | Path | None) -> dict[str, Any]:
    """
    Read a JSON overlay file.

    A missing file is not an error (the overlay is optional); a file that
    exists but is not valid JSON is.
    """
    if path is None:
        return {}
    config_path = Path(path)
    if not config_path.is_file():
        logger.debug(f"Config file {config_path} not found, skipping")
        return {}
    with config_path.open(encoding="utf-8") as f:
        values = json.load(f)
    if not isinstance(values, dict):
        raise ValueError(f"Config file {config_path} must contain a JSON object")
    logger.info(f"Loaded configuration overlay from {config_path}")
    return values


def load_settings(config_file: str | Path | None = DEFAULT_CONFIG_FILE, **overrides: Any) -> Settings:
    """
    Build Settings from the environment, the JSON overlay and overrides.

    Raises:
        pydantic.ValidationError: if required sections are missing or
            values are invalid
    """
    values = read_config_file(config_file)
    values.update(overrides)
    return Settings(**values)

