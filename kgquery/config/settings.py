"""
Settings - Query engine configuration using Pydantic Settings.

Loads from KGQUERY_* environment variables and .env files.
"""

from __future__ import annotations

import logging
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    # Query cache
    cache_duration_seconds: float = Field(default=300.0, gt=0)
    cache_max_entries: int = Field(default=10_000, ge=1)

    # Query execution
    query_timeout_seconds: float = Field(default=30.0, gt=0)
    default_page_size: int = Field(default=100, ge=0)

    # Traversal
    max_traversal_depth: int = Field(default=5, ge=0)

    # Optimizer (no table statistics, so a fixed row estimate)
    optimizer_baseline_cardinality: int = Field(default=1000, ge=1)

    # Neo4j
    neo4j_uri: str = "bolt://localhost:7687"
    neo4j_username: str = "neo4j"
    neo4j_password: str = "password"
    neo4j_database: str = "neo4j"

    # Logging
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="KGQUERY_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def configure_logging(settings: Settings | None = None) -> None:
    """Apply the configured log level to the kgquery logger hierarchy."""
    settings = settings or get_settings()
    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO
    logging.getLogger("kgquery").setLevel(level)
