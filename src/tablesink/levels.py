"""
Severity levels.

Levels follow the canonical hook ordering: the lower the numeric value, the
more severe the level. A hook accepting ``INFO`` accepts everything from
``PANIC`` down to ``INFO``.
"""

from __future__ import annotations

import logging
from enum import IntEnum


class Level(IntEnum):
    """Log severity, most severe first."""

    PANIC = 0
    FATAL = 1
    ERROR = 2
    WARNING = 3
    INFO = 4
    DEBUG = 5
    TRACE = 6

    def __str__(self) -> str:
        return self.name.lower()

    @classmethod
    def parse(cls, value: str | int | Level) -> Level:
        """Resolve a level from a name, a structlog method name or a stdlib level number."""
        if isinstance(value, Level):
            return value
        if isinstance(value, int):
            return from_stdlib(value)
        name = str(value).strip().lower()
        try:
            return _NAME_ALIASES[name]
        except KeyError:
            raise ValueError(f"not a valid log level: {value!r}") from None


ALL_LEVELS: tuple[Level, ...] = tuple(Level)

_NAME_ALIASES: dict[str, Level] = {
    "panic": Level.PANIC,
    "fatal": Level.FATAL,
    "critical": Level.FATAL,
    "error": Level.ERROR,
    "exception": Level.ERROR,
    "warning": Level.WARNING,
    "warn": Level.WARNING,
    "info": Level.INFO,
    "debug": Level.DEBUG,
    "trace": Level.TRACE,
}

# Ordered from most to least severe
_STDLIB_THRESHOLDS: tuple[tuple[int, Level], ...] = (
    (logging.CRITICAL, Level.FATAL),
    (logging.ERROR, Level.ERROR),
    (logging.WARNING, Level.WARNING),
    (logging.INFO, Level.INFO),
    (logging.DEBUG, Level.DEBUG),
)


def from_stdlib(levelno: int) -> Level:
    """Map a stdlib ``logging`` level number to a :class:`Level`.

    Numbers between two named stdlib levels map to the named level below them;
    anything under ``DEBUG`` is ``TRACE``.
    """
    for threshold, level in _STDLIB_THRESHOLDS:
        if levelno >= threshold:
            return level
    return Level.TRACE


def levels_at_or_above(minimum: Level) -> tuple[Level, ...]:
    """Return every level at least as severe as ``minimum``, in canonical order."""
    return tuple(lev for lev in ALL_LEVELS if lev <= minimum)
