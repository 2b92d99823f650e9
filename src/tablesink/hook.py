"""
Table storage hook.

:func:`new_hook` builds the hook once at process start. A hook that could not
be built is a :class:`DisabledHook`: it accepts calls and does nothing, so a
broken log table never breaks the application's logging path.
"""

from __future__ import annotations

import sys
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Optional

import structlog
from azure.data.tables import TableClient, TableServiceClient

from .config.storage import FallbackSource, resolve_credentials
from .entry import LogEntry
from .levels import ALL_LEVELS, Level, levels_at_or_above
from .logging import get_logger
from .provisioning import PROVISIONING_TIMEOUT, ensure_table, open_table_service
from .rows import RowBuilder, build_row

if TYPE_CHECKING:
    from .config import Settings

logger = get_logger("tablesink.hook")

Diagnostics = Callable[[str], None]


def console_diagnostics(message: str) -> None:
    """Default startup diagnostics channel: one line on stderr."""
    print(message, file=sys.stderr)


class Hook(ABC):
    """A sink receiving every log entry that matches its levels."""

    @property
    @abstractmethod
    def enabled(self) -> bool: ...

    @abstractmethod
    def fire(self, entry: LogEntry) -> None:
        """Persist one entry."""
        ...

    @abstractmethod
    def levels(self) -> tuple[Level, ...]:
        """Levels the logging pipeline should dispatch to this hook."""
        ...

    def accepts(self, level: Level) -> bool:
        return level in self.levels()

    def close(self) -> None:
        """Release the connection, if the hook owns one."""


@dataclass(frozen=True)
class TableHook(Hook):
    """Writes each entry as one row of an Azure table."""

    table: TableClient
    table_name: str
    account_name: str
    accepted_levels: tuple[Level, ...]
    formatter: RowBuilder = build_row
    service: Optional[TableServiceClient] = None

    @property
    def enabled(self) -> bool:
        return True

    def fire(self, entry: LogEntry) -> None:
        """Insert ``entry`` as a single row.

        Service errors (a row key collision surfaces as ``ResourceExistsError``)
        propagate unchanged; nothing is retried.
        """
        row = self.formatter(entry)
        self.table.create_entity(entity=row.to_entity())

    def levels(self) -> tuple[Level, ...]:
        return self.accepted_levels

    def close(self) -> None:
        """Close the service client that owns the HTTP session.

        The hook is process-scoped: call this once, at shutdown. Sinks and
        handlers wrapping the hook never close it.
        """
        if self.service is not None:
            self.service.close()


@dataclass(frozen=True)
class DisabledHook(Hook):
    """Stand-in for a hook whose construction failed."""

    reason: Optional[BaseException] = None

    @property
    def enabled(self) -> bool:
        return False

    def fire(self, entry: LogEntry) -> None:
        return None

    def levels(self) -> tuple[Level, ...]:
        # Every level is reported even though fire() drops them.
        return ALL_LEVELS


def new_hook(
    account_name: str,
    account_key: str,
    table_name: str,
    level: Level | str = Level.INFO,
    *,
    endpoint: Optional[str] = None,
    provisioning_timeout: int = PROVISIONING_TIMEOUT,
    diagnostics: Optional[Diagnostics] = None,
    fallback: Optional[FallbackSource] = None,
    formatter: RowBuilder = build_row,
) -> Hook:
    """
    Build a table hook.

    If ``account_name`` or ``account_key`` is empty both are read from
    ``ACCOUNT_NAME`` / ``ACCOUNT_KEY`` (or from ``fallback``). The table is
    created if it does not exist yet.

    Args:
        account_name: Storage account name
        account_key: Storage account key (base64)
        table_name: Destination table, created on first use
        level: Least severe level the hook accepts
        endpoint: Table service URL override
        provisioning_timeout: Table creation timeout in seconds
        diagnostics: Receives construction errors (default: stderr)
        fallback: Credential source used instead of the environment
        formatter: Maps an entry onto a row

    Returns:
        A :class:`TableHook`, or a :class:`DisabledHook` if the client could
        not be created, the table could not be provisioned or ``level`` is
        not a valid level name. Errors are reported to ``diagnostics`` and
        never raised.
    """
    report = diagnostics or console_diagnostics

    try:
        accepted = levels_at_or_above(Level.parse(level))
    except ValueError as exc:
        report(f"Invalid level for Azure Table Storage hook: {exc}")
        return DisabledHook(reason=exc)

    try:
        credentials = resolve_credentials(account_name, account_key, fallback)
        service = open_table_service(credentials, endpoint=endpoint)
    except Exception as exc:
        report(f"Unable to create client for Azure Table Storage hook {exc}")
        return DisabledHook(reason=exc)

    try:
        table = ensure_table(service, table_name, timeout=provisioning_timeout)
    except Exception as exc:
        service.close()
        report(str(exc))
        return DisabledHook(reason=exc)

    hook = TableHook(
        table=table,
        table_name=table_name,
        account_name=credentials.account_name,
        accepted_levels=accepted,
        formatter=formatter,
        service=service,
    )
    # Before configure_logging() structlog would print to stdout
    if structlog.is_configured():
        logger.info(
            "table_hook_initialized",
            table=table_name,
            account=credentials.account_name,
            levels=[str(lev) for lev in accepted],
        )
    return hook


def new_hook_from_settings(
    settings: Optional[Settings] = None,
    *,
    account_name: str = "",
    account_key: str = "",
    diagnostics: Optional[Diagnostics] = None,
) -> Hook:
    """Build a hook from the configured table defaults and storage credentials."""
    if settings is None:
        from .config import settings as default_settings

        settings = default_settings

    table = settings.table
    return new_hook(
        account_name,
        account_key,
        table.name,
        table.level,
        endpoint=table.endpoint,
        provisioning_timeout=table.provisioning_timeout,
        diagnostics=diagnostics,
        fallback=settings.storage,
    )
