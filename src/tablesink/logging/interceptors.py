"""
Bridges between stdlib ``logging`` and the structlog pipeline.
"""

import logging
from typing import TYPE_CHECKING

from tablesink.entry import LogEntry

from .core import get_logger
from .sinks import FireGuard

if TYPE_CHECKING:
    from tablesink.hook import Hook

AZURE_LOGGERS = ("azure", "azure.core.pipeline.policies.http_logging_policy")


class RedirectStdLibHandler(logging.Handler):
    """
    Redirect standard library logging events to structlog, so third-party
    records pass through the same sinks as the application's own.
    """

    def emit(self, record: logging.LogRecord) -> None:
        try:
            # structlog's own records would loop back here
            if "structlog" in record.name:
                return

            msg = self.format(record)
            logger = get_logger(self._simplify_logger_name(record.name))
            logger.log(getattr(logging, record.levelname, logging.INFO), msg)
        except Exception:
            self.handleError(record)

    @staticmethod
    def _simplify_logger_name(name: str) -> str:
        """
        Simplify a logger name for display.

        - "azure.core.pipeline.policies.http_logging_policy" -> "policies.http_logging_policy"
        - "urllib3.connectionpool" -> "urllib3.connectionpool"
        """
        if not name:
            return "stdlib"
        parts = name.split(".")
        if len(parts) <= 2:
            return name
        return ".".join(parts[-2:])


class TableHookHandler(logging.Handler):
    """Stdlib handler writing records to a table hook.

    For applications that use plain ``logging`` instead of the structlog
    pipeline. Records below the hook's levels are skipped; insert failures go
    through :meth:`logging.Handler.handleError`. Closing the handler leaves
    the hook open.
    """

    def __init__(self, hook: "Hook", level: int = logging.NOTSET) -> None:
        super().__init__(level)
        self.hook = hook
        self._guard = FireGuard()

    def emit(self, record: logging.LogRecord) -> None:
        try:
            entry = LogEntry.from_record(record)
            if not self.hook.accepts(entry.level):
                return
            self._guard.fire(self.hook, entry)
        except Exception:
            self.handleError(record)


def quiet_azure_loggers(level: int = logging.WARNING) -> None:
    """Raise the Azure SDK loggers above their per-request INFO output."""
    for name in AZURE_LOGGERS:
        logging.getLogger(name).setLevel(level)
