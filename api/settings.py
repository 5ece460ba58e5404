"""
Application settings using pydantic-settings for type-safe configuration.

All environment variables are centralized here with proper typing, validation,
and sensible defaults. Settings are loaded once at startup and cached.
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from honorflight.jwt_auth import GOOGLE_ISSUER
from honorflight.store.client import MAX_SESSION_RETRY_ATTEMPTS, StoreConfig
from honorflight.store.session_cache import DEFAULT_SESSION_TTL_SECONDS

logger = logging.getLogger(__name__)


def _is_docker_environment() -> bool:
    """Detect if running inside a Docker container."""
    # Check for .dockerenv file (most reliable)
    if Path("/.dockerenv").exists():
        return True
    # Check cgroup (works on most Linux systems)
    try:
        with open("/proc/1/cgroup") as f:
            return "docker" in f.read()
    except (FileNotFoundError, PermissionError):
        pass
    return False


def _is_github_actions() -> bool:
    """Detect if running in GitHub Actions CI environment.

    Returns True only when BOTH CI=true AND GITHUB_ACTIONS=true are set.
    """
    return os.getenv("CI") == "true" and os.getenv("GITHUB_ACTIONS") == "true"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have sensible defaults for local development.
    Production values should be set via environment variables or .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # Ignore extra env vars not defined here
        case_sensitive=False,  # Allow DB_URL or db_url
    )

    # === Authentication ===
    auth_mode: str = Field(
        default="production",
        description="Authentication mode: 'production' (ID token validation) or 'bypass' (dev only)",
    )
    oidc_issuer: str = Field(
        default=GOOGLE_ISSUER,
        description="OIDC issuer URL; ID tokens must carry this iss",
    )
    oidc_client_id: str = Field(
        default="",
        description="OIDC client ID; ID tokens must carry this aud",
    )

    # === CouchDB Configuration ===
    db_url: str = Field(
        default="http://127.0.0.1:5984",
        description="CouchDB server URL",
    )
    db_name: str = Field(
        default="honorflight",
        description="CouchDB database holding participant and flight documents",
    )
    db_user: str = Field(
        default="",
        description="CouchDB account used for session login",
    )
    db_pass: str = Field(
        default="",
        description="CouchDB account password (required - no default for security)",
    )
    db_design_doc: str = Field(
        default="basic",
        description="Design document that defines the views",
    )
    db_session_ttl_seconds: float = Field(
        default=DEFAULT_SESSION_TTL_SECONDS,
        gt=0,
        description="How long a cached CouchDB session is reused before logging in again",
    )
    db_max_session_attempts: int = Field(
        default=MAX_SESSION_RETRY_ATTEMPTS,
        ge=1,
        description="Requests attempted per store call before giving up on the session",
    )

    @field_validator("db_pass", mode="after")
    @classmethod
    def validate_db_pass(cls, v: str) -> str:
        """Warn when the store password is missing."""
        if not v:
            logger.warning(
                "SECURITY WARNING: DB_PASS is not set. "
                "Set the CouchDB password in your .env file for production use."
            )
        return v

    # === CORS Configuration ===
    # Note: Use str type for env var parsing, convert to list via property
    allowed_origins_str: str = Field(
        default="http://localhost:3000,http://localhost:5173",
        alias="ALLOWED_ORIGINS",
        description="Allowed CORS origins (comma-separated)",
    )

    # === Docker Detection ===
    is_docker: bool = Field(
        default=False,
        description="Whether running in Docker container",
    )

    @property
    def allowed_origins(self) -> list[str]:
        """Parse comma-separated origins string into list."""
        return [origin.strip() for origin in self.allowed_origins_str.split(",") if origin.strip()]

    @field_validator("is_docker", mode="before")
    @classmethod
    def parse_is_docker(cls, v: str | bool) -> bool:
        """Parse IS_DOCKER env var which can be 'true', '1', 'yes', etc."""
        if isinstance(v, bool):
            return v
        if isinstance(v, str):
            return v.lower() in ("true", "1", "yes")
        return False

    @field_validator("auth_mode", mode="after")
    @classmethod
    def validate_auth_mode(cls, v: str) -> str:
        """Validate and normalize auth_mode."""
        v = v.lower()
        if v not in ("bypass", "production"):
            raise ValueError(f"Invalid AUTH_MODE: {v}. Must be 'bypass' or 'production'")
        return v

    def is_docker_environment(self) -> bool:
        return self.is_docker or _is_docker_environment()

    def get_effective_auth_mode(self) -> str:
        """Get effective auth mode, forcing production in Docker (except CI)."""
        if self.is_docker_environment() and not _is_github_actions():
            return "production"
        return self.auth_mode

    def store_config(self) -> StoreConfig:
        """Build the document store configuration."""
        return StoreConfig(
            url=self.db_url,
            database=self.db_name,
            username=self.db_user,
            password=self.db_pass,
            design_doc=self.db_design_doc,
            session_ttl_seconds=self.db_session_ttl_seconds,
            max_attempts=self.db_max_session_attempts,
        )


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Settings are loaded once and cached for the lifetime of the application.
    """
    return Settings()
