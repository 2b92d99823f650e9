import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import pytest
import structlog
from azure.core.exceptions import ResourceExistsError

from tablesink.entry import LogEntry
from tablesink.levels import Level
from tablesink.logging import core as logging_core


class FakeTableClient:
    """Records inserted entities; optionally raises on insert."""

    def __init__(self, table_name: str, error: Optional[Exception] = None):
        self.table_name = table_name
        self.error = error
        self.entities: List[Dict[str, Any]] = []
        self.closed = False

    def create_entity(self, entity: Dict[str, Any], **kwargs: Any) -> Dict[str, Any]:
        if self.error is not None:
            raise self.error
        self.entities.append(entity)
        return {}

    def close(self) -> None:
        self.closed = True


class FakeTableService:
    """In-memory stand-in for ``TableServiceClient``."""

    def __init__(self, existing: tuple[str, ...] = (), create_error: Optional[Exception] = None):
        self.tables: Dict[str, FakeTableClient] = {name: FakeTableClient(name) for name in existing}
        self.create_error = create_error
        self.create_calls: List[tuple[str, Dict[str, Any]]] = []
        self.closed = False

    def create_table(self, table_name: str, **kwargs: Any) -> FakeTableClient:
        self.create_calls.append((table_name, kwargs))
        if self.create_error is not None:
            raise self.create_error
        if table_name in self.tables:
            exc = ResourceExistsError(message="The table specified already exists.")
            exc.error_code = "TableAlreadyExists"
            raise exc
        self.tables[table_name] = FakeTableClient(table_name)
        return self.tables[table_name]

    def get_table_client(self, table_name: str) -> FakeTableClient:
        return self.tables.setdefault(table_name, FakeTableClient(table_name))

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_service() -> FakeTableService:
    return FakeTableService()


@pytest.fixture
def make_entry():
    def _make(
        message: str = "boot",
        level: Level = Level.INFO,
        data: Optional[Dict[str, Any]] = None,
        time: Optional[datetime] = None,
    ) -> LogEntry:
        return LogEntry(
            time=time or datetime(2024, 5, 1, 12, 30, 15, 123456, tzinfo=timezone.utc),
            level=level,
            message=message,
            data=data or {},
        )

    return _make


@pytest.fixture
def clean_logging():
    """Restore structlog, the sink list and the root logger after a test."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for sink in logging_core.get_sinks():
        sink.close()
    logging_core._sinks.clear()
    structlog.reset_defaults()
    root.handlers = handlers
    root.setLevel(level)


@pytest.fixture
def service_factory():
    return FakeTableService


@pytest.fixture
def table_factory():
    return FakeTableClient
