"""
tablesink: persist log entries as rows of an Azure table.

Usage:
    from tablesink import Level, new_hook
    from tablesink.logging import configure_logging, get_logger

    hook = new_hook("account", "key", "applogs", Level.INFO)
    configure_logging(sinks="stdio,table", table_hook=hook)
    get_logger("billing").info("invoice_sent", service="billing")
"""

from .entry import LogEntry
from .exceptions import HookConfigurationError, TableProvisioningError, TableSinkError
from .hook import DisabledHook, Hook, TableHook, new_hook, new_hook_from_settings
from .levels import ALL_LEVELS, Level
from .logging.interceptors import TableHookHandler
from .logging.sinks import TableSink
from .rows import DEFAULT_PARTITION_KEY, LogRow, build_row

__all__ = [
    "ALL_LEVELS",
    "DEFAULT_PARTITION_KEY",
    "DisabledHook",
    "Hook",
    "HookConfigurationError",
    "Level",
    "LogEntry",
    "LogRow",
    "TableHook",
    "TableHookHandler",
    "TableProvisioningError",
    "TableSink",
    "TableSinkError",
    "build_row",
    "new_hook",
    "new_hook_from_settings",
]
