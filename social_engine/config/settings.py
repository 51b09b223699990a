"""
Configuration settings for the social interaction engine.

This module handles environment variable loading and configuration management
using Pydantic for validation and type safety.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Package root (social_engine/) and repository root one level up
PACKAGE_ROOT_DIR = Path(__file__).parent.parent.resolve()
PROJECT_ROOT_DIR = PACKAGE_ROOT_DIR.parent


class Settings(BaseSettings):
    """
    Social engine configuration settings.

    All settings can be overridden via environment variables prefixed with
    ``SOCIAL_ENGINE_`` (e.g. ``SOCIAL_ENGINE_BACKEND_URL``).
    """

    # Remote backend
    backend_url: str = Field(
        default="http://localhost:54321",
        description="Base URL of the managed database service (PostgREST gateway)"
    )
    backend_api_key: Optional[str] = Field(
        default=None,
        description="Anonymous/public API key sent as apikey and bearer token"
    )
    request_timeout: float = Field(
        default=30.0,
        description="Timeout in seconds for a single HTTP request"
    )

    # Optimistic actions
    mutation_timeout: Optional[float] = Field(
        default=15.0,
        description="Upper bound in seconds for one remote mutation; unset waits forever"
    )

    # Read paths
    stats_batch_size: int = Field(
        default=10,
        ge=1,
        description="Number of items whose stats are fetched concurrently"
    )
    feed_page_size: int = Field(
        default=20,
        ge=1,
        description="Default page size for the social feed"
    )
    follow_list_limit: int = Field(
        default=50,
        ge=1,
        description="Default number of rows for follower/following lists"
    )

    # Logging Configuration
    log_level: str = Field(
        default="INFO",
        description="Logging level"
    )
    log_format: str = Field(
        default="text",
        description="Logging format (json or text)"
    )
    log_file: str = Field(
        default="logs/social_engine.log",
        description="Rotating log file used outside debug mode"
    )
    debug_mode: bool = Field(
        default=True,
        description="Enable debug mode"
    )

    model_config = SettingsConfigDict(
        env_prefix="SOCIAL_ENGINE_",
        env_file=str(PROJECT_ROOT_DIR / ".env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("backend_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("mutation_timeout")
    @classmethod
    def non_positive_timeout_disables(cls, v: Optional[float]) -> Optional[float]:
        # 0 or negative in the environment means "no timeout"
        if v is not None and v <= 0:
            return None
        return v

    @field_validator("log_format")
    @classmethod
    def check_log_format(cls, v: str) -> str:
        v = v.lower()
        if v not in ("json", "text"):
            raise ValueError("log_format must be 'json' or 'text'")
        return v


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings: Configured settings instance
    """
    return Settings()
