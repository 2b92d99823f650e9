"""
Unified logging for tablesink.

Provides structured logging with multiple sink support:
- stdio: Standard output (console/json format)
- table: Azure Table Storage, one row per event

Design Pattern: Strategy Pattern for sink abstraction.
Library: structlog + orjson for JSON serialization.
"""

from .core import configure_logging, configure_logging_from_settings, get_logger

__all__ = ["configure_logging", "configure_logging_from_settings", "get_logger"]
