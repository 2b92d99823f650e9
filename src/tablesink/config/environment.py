"""
Environment Configuration.

The environment is determined by the `TS_ENV` environment variable and
controls which .env files are loaded.
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


Environment = Literal["development", "testing", "staging", "production"]


class EnvironmentSettings(BaseSettings):
    """
    Environment detection.

    The composite settings load these files (later overrides earlier):
    1. `.env`
    2. `.env.local`
    3. `.env.{environment}`
    4. `.env.{environment}.local`
    """

    model_config = SettingsConfigDict(
        env_prefix="TS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    env: Environment = Field(
        default="development",
        description="Current environment (development, testing, staging, production)",
    )

