"""
Error taxonomy for the table sink.

Construction-time failures are raised internally and converted into a
disabled hook by the initializer. Insert failures from the table service are
never wrapped, so they do not appear here.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class TableSinkError(Exception):
    """Root of all table sink errors."""

    def __init__(
        self,
        message: str,
        *,
        code: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.details = details or {}


class HookConfigurationError(TableSinkError):
    """Credentials or endpoint are missing or malformed."""

    def __init__(self, message: str, *, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, code="HOOK_CONFIGURATION", details=details)


class TableProvisioningError(TableSinkError):
    """The log table could not be created and does not already exist."""

    def __init__(self, table_name: str) -> None:
        super().__init__(
            f"Unable to create log table: {table_name}",
            code="TABLE_PROVISIONING",
            details={"table_name": table_name},
        )
        self.table_name = table_name
