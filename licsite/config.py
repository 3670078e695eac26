"""
Configuration and settings for the site backend.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed settings, read once at startup."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    port: int = Field(default=4500)
    environment: str = Field(default="development")
    log_level: str = Field(default="INFO")

    api_prefix: str = Field(default="/api/lic")

    # Document store (any SQLAlchemy URL, e.g. Postgres or SQLite)
    database_url: Optional[str] = Field(default=None)

    # Development toggles
    use_in_memory_backends: bool = Field(default=False)

    # Rendered page cache (Redis when configured, otherwise in-process)
    redis_url: Optional[str] = Field(default=None)
    redis_cache_prefix: str = Field(default="licsite:ssr:")
    ssr_cache_ttl_seconds: int = Field(default=600, ge=1)

    # Frontend build served for client-side routes
    static_dir: str = Field(default="public")

    site_url: str = Field(default="https://lic-neemuch-jitendra-patidar.vercel.app/")
    allowed_origins: list[str] = Field(
        default=[
            "http://localhost:5173",
            "https://lic-neemuch-jitendra-patidar.vercel.app",
            "https://lic-backend-8jun.onrender.com",
        ]
    )

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
