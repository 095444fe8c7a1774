"""
Store env variables and other config settings.
"""
from __future__ import annotations

from functools import lru_cache
from typing import List

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # Ignore extra env vars to prevent crashes
    )

    # Infrastructure
    redis_url: str = "redis://localhost:6379"
    cache_ttl_seconds: int = int(24 * 3600)
    draft_ttl_seconds: int = int(30 * 24 * 3600)
    cors_origins: List[str] = ["*"]
    log_level: str = "INFO"

    # LLM Configuration
    # NOTE: keep it optional for import-time, enforce at call-time.
    gemini_api_key: SecretStr | None = Field(default=None, description="LLM gateway credentials")
    gemini_model: str = "gemini-2.5-flash"

    # Generation defaults
    keyword_limit: int = 20
    default_language: str = "German"
    default_max_words: int = 150

    # Uploads
    max_upload_bytes: int = 5 * 1024 * 1024  # 5MB


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
