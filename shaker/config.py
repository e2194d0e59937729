"""
Configuration settings for shaker.

Uses Pydantic Settings to load environment variables for the cache strategy,
ingestion language, rendering concurrency, and logging.
"""
from __future__ import annotations

from functools import lru_cache
from typing import List, Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

Language = Literal["en", "ca", "es"]
SUPPORTED_LANGUAGES: tuple[str, ...] = ("en", "ca", "es")
MEMORY_CACHE = ":memory:"


class Settings(BaseSettings):
    # Cache
    cache_path: str = Field(MEMORY_CACHE, alias="SHAKER_CACHE_PATH")
    pool_max_size: int = Field(4, ge=1, alias="SHAKER_POOL_MAX_SIZE")

    # Ingestion
    lang: Language = Field("en", alias="SHAKER_LANG")
    fallback_lang: Optional[Language] = Field(None, alias="SHAKER_FALLBACK_LANG")
    excluded_names: List[str] = Field(
        default_factory=lambda: ["assets", "temario.md"], alias="SHAKER_EXCLUDED_NAMES"
    )

    # Rendering
    render_concurrency: int = Field(1, ge=1, alias="SHAKER_RENDER_CONCURRENCY")

    # Application
    app_env: str = Field("development", alias="APP_ENV")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    json_logs: bool = Field(False, alias="JSON_LOGS")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


__all__ = ["Settings", "get_settings", "Language", "SUPPORTED_LANGUAGES", "MEMORY_CACHE"]
