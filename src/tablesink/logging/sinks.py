"""
Log sink abstractions and concrete implementations.
"""

from __future__ import annotations

import sys
import threading
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Literal

import orjson
from structlog.typing import EventDict

from tablesink.entry import LogEntry

from .formatters import ConsoleFormatter

if TYPE_CHECKING:
    from tablesink.hook import Hook

LogFormat = Literal["console", "json"]


def orjson_dumps(v: Any, *, default: Any = None) -> str:
    """Fast JSON serialization using orjson."""
    return orjson.dumps(v, default=default, option=orjson.OPT_UTC_Z | orjson.OPT_NAIVE_UTC).decode()


# =============================================================================
# Sink Abstraction (Strategy Pattern)
# =============================================================================


class BaseSink(ABC):
    """Abstract base class for log sinks."""

    @abstractmethod
    def emit(self, event_dict: EventDict) -> None:
        """Emit a log event to the sink."""
        ...

    @abstractmethod
    def close(self) -> None:
        """Close the sink and release resources."""
        ...


class StdioSink(BaseSink):
    """Standard I/O sink with configurable format.

    Args:
        fmt: Output format - "console" (human-readable) or "json"
        stream: Output stream (default: stderr)
    """

    def __init__(self, fmt: LogFormat = "console", stream: Any = None):
        self._fmt = fmt
        self._stream = stream or sys.stderr

    def emit(self, event_dict: EventDict) -> None:
        if self._fmt == "json":
            output = orjson_dumps(event_dict, default=str)
        else:
            use_color = bool(getattr(self._stream, "isatty", lambda: False)())
            output = ConsoleFormatter.format(event_dict, use_color=use_color)

        self._stream.write(output + "\n")
        self._stream.flush()

    def close(self) -> None:
        pass


class FireGuard:
    """Per-thread re-entry guard around ``hook.fire``.

    The table client logs its own HTTP traffic through stdlib logging. When
    that output is routed back into the hook, the nested event is dropped
    instead of recursing.
    """

    def __init__(self) -> None:
        self._local = threading.local()

    def fire(self, hook: Hook, entry: LogEntry) -> bool:
        """Fire ``entry`` unless this thread is already inside a fire call."""
        if getattr(self._local, "active", False):
            return False
        self._local.active = True
        try:
            hook.fire(entry)
        finally:
            self._local.active = False
        return True


class TableSink(BaseSink):
    """Azure Table Storage sink: one row per event the hook accepts."""

    def __init__(self, hook: Hook, guard: FireGuard | None = None):
        self._hook = hook
        self._guard = guard or FireGuard()

    @property
    def hook(self) -> Hook:
        return self._hook

    def emit(self, event_dict: EventDict) -> None:
        entry = LogEntry.from_event_dict(event_dict)
        if not self._hook.accepts(entry.level):
            return
        self._guard.fire(self._hook, entry)

    def close(self) -> None:
        # The hook outlives the sink; reconfiguring may reuse it.
        pass
