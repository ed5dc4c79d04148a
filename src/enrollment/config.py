"""
Enrollment - Configuration and settings.

Settings are read from the environment (or a .env file) and cached.
"""

import logging
import secrets
from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class EnrollmentSettings(BaseSettings):
    """Application settings for the enrollment server and terminal client."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    enrollment_env: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Storage
    storage_backend: Literal["memory", "supabase"] = "memory"
    supabase_url: str | None = None
    supabase_service_role_key: str | None = None

    # Anti-forgery token, bound to the session cookie.
    # Unset -> a random secret per process (tokens die with a restart).
    csrf_secret: str | None = None
    session_cookie_name: str = "enrollment_session"

    # The address form historically requires a second address line.
    address_line2_required: bool = True

    # Terminal client
    api_base_url: str = "http://localhost:8000"
    request_timeout_seconds: float = 10.0

    @property
    def is_production(self) -> bool:
        return self.enrollment_env == "production"


@lru_cache
def get_settings() -> EnrollmentSettings:
    """Get cached settings instance."""
    return EnrollmentSettings()


@lru_cache
def get_csrf_secret() -> str:
    """Secret used to derive session-bound CSRF tokens."""
    configured = get_settings().csrf_secret
    if configured:
        return configured
    if get_settings().is_production:
        raise RuntimeError("CSRF_SECRET must be set in production")
    return secrets.token_hex(32)


class _SettingsProxy:
    """Lazy proxy for settings to avoid loading .env at import time."""

    _instance: EnrollmentSettings | None = None

    def __getattr__(self, name: str):
        if self._instance is None:
            self._instance = get_settings()
        return getattr(self._instance, name)


settings = _SettingsProxy()


def configure_logging(level: str | None = None) -> None:
    """Configure root logging for the server and CLI."""
    logging.basicConfig(
        level=level or settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
