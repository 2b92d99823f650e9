"""
Storage Account Configuration.

Credentials for the table service. The account pair is read from the
unprefixed `ACCOUNT_NAME` / `ACCOUNT_KEY` variables and is only consulted
when the caller did not supply both values explicitly.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, Union

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Fallback storage account credentials."""

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    account_name: str = Field(default="", description="Storage account name (ACCOUNT_NAME)")
    account_key: SecretStr = Field(default=SecretStr(""), description="Storage account key (ACCOUNT_KEY)")


@dataclass(frozen=True)
class AccountCredentials:
    """Resolved storage account credentials."""

    account_name: str
    account_key: str

    def __repr__(self) -> str:
        return f"AccountCredentials(account_name={self.account_name!r}, account_key='***')"


FallbackSource = Union[StorageSettings, Callable[[], StorageSettings]]


def resolve_credentials(
    account_name: str,
    account_key: str,
    fallback: Optional[FallbackSource] = None,
) -> AccountCredentials:
    """Resolve the account pair, falling back to the environment.

    If either value is empty both are replaced from the fallback settings;
    a half-supplied pair is never mixed with environment values. The
    fallback is only loaded when it is needed.
    """
    if account_name and account_key:
        return AccountCredentials(account_name, account_key)

    source = fallback if fallback is not None else StorageSettings
    resolved = source() if callable(source) else source
    return AccountCredentials(resolved.account_name, resolved.account_key.get_secret_value())
