"""
HTML to PDF Service Configuration Module

Centralized configuration management with Pydantic validation.
Settings are resolved once at startup and passed to the application factory.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

DEFAULT_STATIC_DIR = Path(__file__).resolve().parent / "public"


class ServiceSettings(BaseSettings):
    """
    HTML to PDF service configuration with validation.

    All settings can be overridden via environment variables.
    """

    # === Environment ===
    environment: str = Field(
        default="development",
        description="Environment: development, staging, production"
    )
    host: str = Field(
        default="127.0.0.1",
        description="Bind address for the local listener"
    )
    port: int = Field(
        default=3001,
        ge=1,
        le=65535,
        description="Port for the local listener (non-production only)"
    )
    log_level: str = Field(
        default="INFO",
        description="Root logging level"
    )

    # === Input Limits ===
    max_upload_bytes: int = Field(
        default=5 * 1024 * 1024,
        ge=1,
        description="Maximum accepted size of uploaded or pasted HTML in bytes"
    )

    # === Static Form ===
    static_dir: Path = Field(
        default=DEFAULT_STATIC_DIR,
        description="Directory served verbatim at / for the upload form"
    )

    # === Playwright / Chromium ===
    playwright_headless: bool = Field(
        default=True,
        description="Run Chromium headless"
    )
    playwright_timeout: int = Field(
        default=30000,
        ge=1000,
        le=300000,
        description="Page load and PDF generation timeout in milliseconds"
    )
    chromium_executable_path: Optional[str] = Field(
        default=None,
        description="Explicit Chromium binary; defaults to Playwright's bundled build"
    )

    # === Concurrency ===
    max_concurrent_renders: Optional[int] = Field(
        default=None,
        ge=1,
        le=100,
        description="Cap on simultaneous render sessions (unset = unbounded)"
    )

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment is a known value."""
        allowed = {"development", "staging", "production"}
        v_lower = v.lower()
        if v_lower not in allowed:
            raise ValueError(f"environment must be one of: {', '.join(sorted(allowed))}")
        return v_lower

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        v_upper = v.upper()
        if v_upper not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid log level: {v}")
        return v_upper

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == "production"

    class Config:
        env_prefix = ""  # No prefix, use exact env var names
        case_sensitive = False  # MAX_UPLOAD_BYTES = max_upload_bytes


@lru_cache()
def get_settings() -> ServiceSettings:
    """
    Get cached settings instance.

    Settings are loaded once from the environment and cached.
    """
    return ServiceSettings()
