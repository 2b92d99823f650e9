"""
Table service connection and table provisioning.

Both steps run once, when a hook is built. The table handshake is idempotent:
a table that already exists counts as provisioned.
"""

from __future__ import annotations

import base64
import binascii
from typing import Optional

from azure.core.credentials import AzureNamedKeyCredential
from azure.core.exceptions import HttpResponseError, ResourceExistsError
from azure.data.tables import TableClient, TableServiceClient

from .config.storage import AccountCredentials
from .exceptions import HookConfigurationError, TableProvisioningError

TABLE_ALREADY_EXISTS = "TableAlreadyExists"
PROVISIONING_TIMEOUT = 30


def default_endpoint(account_name: str) -> str:
    return f"https://{account_name}.table.core.windows.net"


def open_table_service(
    credentials: AccountCredentials,
    *,
    endpoint: Optional[str] = None,
) -> TableServiceClient:
    """Open a client for the account's table service.

    Raises:
        HookConfigurationError: If the account name or key is missing, or the
            key is not valid base64.
    """
    if not credentials.account_name:
        raise HookConfigurationError("azure: account name required")
    if not credentials.account_key:
        raise HookConfigurationError(
            "azure: account key required",
            details={"account_name": credentials.account_name},
        )
    try:
        base64.b64decode(credentials.account_key, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise HookConfigurationError(
            f"azure: malformed storage account key: {exc}",
            details={"account_name": credentials.account_name},
        ) from exc

    credential = AzureNamedKeyCredential(credentials.account_name, credentials.account_key)
    return TableServiceClient(
        endpoint=endpoint or default_endpoint(credentials.account_name),
        credential=credential,
    )


def ensure_table(
    service: TableServiceClient,
    table_name: str,
    *,
    timeout: int = PROVISIONING_TIMEOUT,
) -> TableClient:
    """Create ``table_name`` unless it already exists and return its client.

    Raises:
        TableProvisioningError: If the service refused the table for any
            reason other than it already existing.
    """
    try:
        service.create_table(table_name, timeout=timeout)
    except ResourceExistsError as exc:
        code = getattr(exc, "error_code", None)
        if code is not None and code != TABLE_ALREADY_EXISTS:
            raise TableProvisioningError(table_name) from exc
    except HttpResponseError as exc:
        raise TableProvisioningError(table_name) from exc

    return service.get_table_client(table_name)
