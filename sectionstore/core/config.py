"""Configuration settings using Pydantic Settings."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str | None = None
    environment: Literal["development", "production", "test"] = "development"

    # Logging
    log_level: str = "INFO"
    slow_query_ms: float = 0.0

    @field_validator("database_url", mode="before")
    @classmethod
    def _use_async_driver(cls, v):
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, v):
        if isinstance(v, str):
            return v.strip().upper()
        return v

    @model_validator(mode="after")
    def _validate_production_settings(self) -> Settings:
        if self.environment != "production":
            return self

        if not self.database_url:
            raise ValueError("DATABASE_URL must be set in production")

        return self


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
