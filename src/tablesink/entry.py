"""
Log entry value type.

A :class:`LogEntry` is what a hook receives from the logging pipeline. The
adapters below build one from a structlog event dict or a stdlib
``logging.LogRecord`` so both pipelines can feed the same hook.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping

from structlog.typing import EventDict

from .levels import Level, from_stdlib

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_NANOS_PER_SECOND = 1_000_000_000

# Keys produced by the structlog processor chain that map onto entry fields
_EVENT_DICT_CONSUMED = {"level", "message", "event", "timestamp"}

# Attributes every LogRecord carries; anything else came in through ``extra=``
_RECORD_ATTRIBUTES = frozenset(logging.LogRecord("", 0, "", 0, "", (), None).__dict__) | {
    "message",
    "asctime",
    "taskName",
}

_EXC_FORMATTER = logging.Formatter()


@dataclass(frozen=True)
class LogEntry:
    """A single log event handed to a hook."""

    time: datetime
    level: Level
    message: str
    data: Mapping[str, Any] = field(default_factory=dict)

    @property
    def unix_nano(self) -> int:
        """Nanoseconds since the Unix epoch. Naive datetimes are taken as UTC."""
        when = self.time if self.time.tzinfo is not None else self.time.replace(tzinfo=timezone.utc)
        delta = when - _EPOCH
        return (delta.days * 86_400 + delta.seconds) * _NANOS_PER_SECOND + delta.microseconds * 1_000

    @classmethod
    def from_event_dict(cls, event_dict: EventDict) -> LogEntry:
        """Build an entry from a processed structlog event dict."""
        message = event_dict.get("message", event_dict.get("event", ""))
        data = {k: v for k, v in event_dict.items() if k not in _EVENT_DICT_CONSUMED}
        return cls(
            time=_parse_timestamp(event_dict.get("timestamp")),
            level=Level.parse(event_dict.get("level", "info")),
            message=str(message),
            data=data,
        )

    @classmethod
    def from_record(cls, record: logging.LogRecord) -> LogEntry:
        """Build an entry from a stdlib log record.

        Attributes passed through ``extra=`` become data fields, the logger
        name is kept under ``logger`` and a formatted traceback under
        ``exception``.
        """
        data: dict[str, Any] = {"logger": record.name}
        data.update((k, v) for k, v in record.__dict__.items() if k not in _RECORD_ATTRIBUTES)
        if record.exc_info:
            data["exception"] = _EXC_FORMATTER.formatException(record.exc_info)
        return cls(
            time=datetime.fromtimestamp(record.created, tz=timezone.utc),
            level=from_stdlib(record.levelno),
            message=record.getMessage(),
            data=data,
        )


def _parse_timestamp(raw: Any) -> datetime:
    if isinstance(raw, datetime):
        return raw
    if isinstance(raw, str):
        try:
            return datetime.fromisoformat(raw.replace("Z", "+00:00"))
        except ValueError:
            pass
    return datetime.now(timezone.utc)
