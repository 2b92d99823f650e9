"""
tablesink Configuration Module.

Nested settings: each sub-module is an independent concern with its own
environment variable prefix.

Multi-Environment Support:
    Set `TS_ENV` to one of: development, testing, staging, production
    The system will load .env files in this order (later overrides earlier):
    1. .env
    2. .env.local
    3. .env.{environment}
    4. .env.{environment}.local

Usage:
    from tablesink.config import settings

    settings.table.name
    settings.logging.level
"""

from functools import cached_property
import os

from pydantic_settings import BaseSettings, SettingsConfigDict

from .environment import EnvironmentSettings
from .logging import LoggingSettings
from .storage import AccountCredentials, StorageSettings, resolve_credentials
from .table import TableSettings


def _get_env_files() -> tuple[str, ...]:
    """Determine which .env files to load based on TS_ENV."""
    env = os.getenv("TS_ENV", "development")
    return (
        ".env",
        ".env.local",
        f".env.{env}",
        f".env.{env}.local",
    )


class Settings(BaseSettings):
    """Composite settings aggregating all configuration domains."""

    model_config = SettingsConfigDict(
        env_file=_get_env_files(),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @cached_property
    def environment(self) -> EnvironmentSettings:
        return EnvironmentSettings()

    @cached_property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @cached_property
    def table(self) -> TableSettings:
        return TableSettings()

    @cached_property
    def logging(self) -> LoggingSettings:
        return LoggingSettings()


# Singleton instance
settings = Settings()

__all__ = [
    "Settings",
    "settings",
    "AccountCredentials",
    "EnvironmentSettings",
    "LoggingSettings",
    "StorageSettings",
    "TableSettings",
    "resolve_credentials",
]
