"""
Core logging configuration and initialization logic.
"""

from __future__ import annotations

import logging
import sys
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

import structlog
from structlog.typing import EventDict, WrappedLogger

from .formatters import ConsoleFormatter
from .sinks import BaseSink, LogFormat, StdioSink, TableSink

if TYPE_CHECKING:
    from tablesink.config import LoggingSettings
    from tablesink.hook import Hook

# =============================================================================
# Global State
# =============================================================================

_sinks: list[BaseSink] = []


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(_name=name or "root")


def get_sinks() -> tuple[BaseSink, ...]:
    """Currently configured sinks."""
    return tuple(_sinks)


# =============================================================================
# Structlog Processors
# =============================================================================


def add_timestamp(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Add ISO 8601 timestamp to log event."""
    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


def add_logger_name(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Add logger name to log event."""
    event_dict["logger"] = event_dict.pop("_name", "root")
    return event_dict


def rename_event_key(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Rename 'event' to 'message', the column name used by the table sink."""
    if "event" in event_dict:
        event_dict["message"] = event_dict.pop("event")
    return event_dict


def _report_sink_failure(sink: BaseSink, exc: Exception) -> None:
    # Bypasses the pipeline, which contains the failing sink.
    stream = sys.__stderr__
    if stream is not None:
        stream.write(f"{type(sink).__name__} failed: {exc!r}\n")
        stream.flush()


def multi_sink_renderer(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> str:
    """Render log to all configured sinks. Returns empty to suppress default output."""
    for sink in _sinks:
        try:
            sink.emit(dict(event_dict))
        except Exception as exc:
            _report_sink_failure(sink, exc)
    return ""


# =============================================================================
# Configuration Logic
# =============================================================================


def _initialize_sinks(sinks: str, fmt: str, table_hook: Hook | None) -> None:
    """Initialize configured sinks based on input."""
    # Close existing sinks
    for sink in _sinks:
        sink.close()
    _sinks.clear()

    log_format: LogFormat = "json" if fmt.lower() == "json" else "console"

    sink_names = [s.strip().lower() for s in sinks.split(",") if s.strip()]
    for name in sink_names:
        if name == "stdio":
            _sinks.append(StdioSink(fmt=log_format, stream=sys.stdout))
        elif name == "table":
            if table_hook is None:
                from tablesink.hook import new_hook_from_settings

                table_hook = new_hook_from_settings()
            _sinks.append(TableSink(table_hook))
        else:
            raise ValueError(f"Unknown log sink: {name!r}")


def _configure_structlog(level: str) -> None:
    """Configure structlog processors and factory."""
    shared_processors = [
        structlog.stdlib.add_log_level,
        add_timestamp,
        add_logger_name,
        rename_event_key,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    # Logger factory whose output goes nowhere; the sinks do the writing
    class NopFile:
        def write(self, s: str) -> None:
            pass

        def flush(self) -> None:
            pass

    _NOP_FILE = NopFile()

    class SilentPrintLoggerFactory:
        """Logger factory that returns a logger writing to nowhere."""

        def __call__(self, *args: Any) -> structlog.PrintLogger:
            return structlog.PrintLogger(file=_NOP_FILE)

    structlog.configure(
        processors=shared_processors + [multi_sink_renderer],
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level.upper(), logging.INFO)),
        context_class=dict,
        logger_factory=SilentPrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )


def configure_logging(
    *,
    level: str = "INFO",
    sinks: str = "stdio",
    fmt: str = "console",
    table_hook: Hook | None = None,
    capture_stdlib: bool = True,
) -> None:
    """
    Configure the unified logging system.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        sinks: Comma-separated sink names (stdio, table)
        fmt: Output format for stdio sink (console, json)
        table_hook: Hook used by the table sink; built from settings when omitted
        capture_stdlib: Route stdlib ``logging`` records through the sinks
    """
    from .interceptors import RedirectStdLibHandler, quiet_azure_loggers

    # 1. Initialize Sinks
    _initialize_sinks(sinks, fmt, table_hook)

    # 2. Configure Structlog
    _configure_structlog(level)

    if not capture_stdlib:
        return

    # 3. Configure Stdlib Logging (Root)
    root_logger = logging.getLogger()
    root_logger.handlers = []
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    root_logger.addHandler(RedirectStdLibHandler())

    # 4. Keep the storage client's HTTP logging out of the table
    quiet_azure_loggers()


def configure_logging_from_settings(settings: LoggingSettings, *, table_hook: Hook | None = None) -> None:
    """Apply :class:`LoggingSettings` (level, sinks, format and console layout)."""
    ConsoleFormatter.configure(
        timestamp_format=settings.console_timestamp_format,
        level_width=settings.console_level_width,
        logger_width=settings.console_logger_width,
        separator=settings.console_separator,
    )
    configure_logging(
        level=settings.level.value,
        sinks=settings.sinks,
        fmt=settings.format.value,
        table_hook=table_hook,
    )
