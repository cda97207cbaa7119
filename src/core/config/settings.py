# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Application configuration settings using Pydantic Settings.

This module provides centralized configuration management for EduVerse.
Settings are loaded from environment variables with sensible defaults.

The Settings class is the main entry point and aggregates all subsettings.
A cached instance is provided via get_settings() for dependency injection.

Example:
    >>> from src.core.config.settings import get_settings
    >>> settings = get_settings()
    >>> print(settings.sync.storage_key)
    'eduverse_data'
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal, Self

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class RedisSettings(BaseSettings):
    """Redis configuration for the remote document store.

    Documents are stored under {key_prefix}:doc:{path} and change
    notifications are published on {key_prefix}:changes:{path}.

    Attributes:
        host: Redis server host.
        port: Redis server port.
        password: Optional Redis password.
        database: Redis database number.
        max_connections: Maximum connection pool size.
        key_prefix: Namespace prefix for document keys and channels.
    """

    model_config = SettingsConfigDict(
        env_prefix="REDIS_",
        extra="ignore",
    )

    host: str = "localhost"
    port: int = 6379
    password: SecretStr | None = None
    database: int = 0
    max_connections: int = 10
    key_prefix: str = "eduverse"

    @property
    def url(self) -> str:
        """Build the Redis connection URL."""
        if self.password is not None and self.password.get_secret_value():
            pwd = self.password.get_secret_value()
            return f"redis://:{pwd}@{self.host}:{self.port}/{self.database}"
        return f"redis://{self.host}:{self.port}/{self.database}"


class SyncSettings(BaseSettings):
    """Offline-first synchronization configuration.

    Attributes:
        store_backend: Remote document store implementation.
        document_path: Path of the single document holding the dataset.
        storage_key: Durable cache key for the serialized dataset.
        last_sync_key: Durable cache key for the last sync timestamp.
        connectivity_check_interval: Seconds between store pings.
        watch_retry_delay: Seconds before a lost remote watch is restored.
        restore_last_synced: Load the persisted last sync time on start.
            When disabled every process starts with last_synced unset.
    """

    model_config = SettingsConfigDict(
        env_prefix="SYNC_",
        extra="ignore",
    )

    store_backend: Literal["redis", "memory"] = "redis"
    document_path: str = "data"
    storage_key: str = "eduverse_data"
    last_sync_key: str = "eduverse_last_sync"
    connectivity_check_interval: float = Field(default=15.0, gt=0)
    watch_retry_delay: float = Field(default=1.0, ge=0)
    restore_last_synced: bool = True


class CacheSettings(BaseSettings):
    """Durable local cache configuration.

    Attributes:
        backend: "file" keeps the cache on disk across restarts,
            "memory" keeps it for the process lifetime only.
        directory: Directory holding one file per cache key.
    """

    model_config = SettingsConfigDict(
        env_prefix="CACHE_",
        extra="ignore",
    )

    backend: Literal["file", "memory"] = "file"
    directory: Path = Path(".eduverse")


class CORSSettings(BaseSettings):
    """CORS configuration for API.

    Attributes:
        origins: Comma-separated list of allowed origins.
        allow_credentials: Whether to allow credentials.
        allow_methods: Allowed HTTP methods.
        allow_headers: Allowed HTTP headers.
    """

    model_config = SettingsConfigDict(
        env_prefix="CORS_",
        extra="ignore",
    )

    origins: str = "http://localhost:3000,http://localhost:5173"
    allow_credentials: bool = True
    allow_methods: list[str] = ["*"]
    allow_headers: list[str] = ["*"]

    @property
    def origins_list(self) -> list[str]:
        """Parse origins string into a list."""
        return [origin.strip() for origin in self.origins.split(",") if origin.strip()]


class APISettings(BaseSettings):
    """API server configuration.

    Attributes:
        host: Host to bind to.
        port: Port to listen on.
        reload: Whether to enable auto-reload.
    """

    model_config = SettingsConfigDict(
        env_prefix="API_",
        extra="ignore",
    )

    host: str = "0.0.0.0"
    port: int = 8000
    reload: bool = False


class Settings(BaseSettings):
    """Main application settings aggregating all subsettings.

    Use get_settings() to obtain a cached instance.

    Attributes:
        environment: Current environment (development, staging, production).
        debug: Enable debug mode.
        log_level: Logging level.
        redis: Redis settings.
        sync: Synchronization settings.
        cache: Durable cache settings.
        cors: CORS settings.
        api: API server settings.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = True
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "DEBUG"

    # Subsettings - loaded with their own env prefixes
    redis: RedisSettings = Field(default_factory=RedisSettings)
    sync: SyncSettings = Field(default_factory=SyncSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    cors: CORSSettings = Field(default_factory=CORSSettings)
    api: APISettings = Field(default_factory=APISettings)

    @model_validator(mode="after")
    def validate_production_settings(self) -> Self:
        """Validate that production settings use durable backends.

        Raises:
            ValueError: If running in production with process-local storage.
        """
        if self.environment == "production":
            if self.sync.store_backend == "memory":
                raise ValueError(
                    "The in-memory document store cannot be used in production. "
                    "Set SYNC_STORE_BACKEND=redis."
                )
            if self.cache.backend == "memory":
                raise ValueError(
                    "The in-memory cache cannot be used in production. "
                    "Set CACHE_BACKEND=file."
                )
        return self

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance.

    Call clear_settings_cache() if you need to reload settings.

    Returns:
        Cached Settings instance.
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache.

    Useful for testing or reloading configuration from the environment.
    """
    get_settings.cache_clear()
