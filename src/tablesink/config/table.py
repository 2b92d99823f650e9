"""
Log Table Configuration.
"""

from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from tablesink.levels import Level


class TableSettings(BaseSettings):
    """Defaults for the table hook."""

    model_config = SettingsConfigDict(
        env_prefix="TS_TABLE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    name: str = Field(default="logs", description="Destination table name")
    level: Level = Field(default=Level.INFO, description="Least severe level forwarded to the table")
    endpoint: Optional[str] = Field(
        default=None,
        description="Table service URL override (e.g. http://127.0.0.1:10002/devstoreaccount1 for Azurite)",
    )
    provisioning_timeout: int = Field(default=30, description="Table creation timeout in seconds")

    @field_validator("level", mode="before")
    @classmethod
    def _parse_level(cls, value: object) -> Level:
        return Level.parse(value)  # type: ignore[arg-type]
