"""
structlog pipeline wiring: processors, multi-sink dispatch and the table sink.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List

from unittest.mock import MagicMock

import pytest
from structlog.typing import EventDict

from tablesink.config.logging import LoggingSettings
from tablesink.hook import TableHook
from tablesink.levels import Level, levels_at_or_above
from tablesink.logging import configure_logging, configure_logging_from_settings, get_logger
from tablesink.logging import core as logging_core
from tablesink.logging.formatters import ConsoleFormatter
from tablesink.logging.sinks import BaseSink, StdioSink, TableSink


class CaptureSink(BaseSink):
    def __init__(self) -> None:
        self.events: List[EventDict] = []

    def emit(self, event_dict: EventDict) -> None:
        self.events.append(event_dict)

    def close(self) -> None:
        pass


@pytest.fixture
def table(table_factory):
    return table_factory("applogs")


@pytest.fixture
def hook(table) -> TableHook:
    return TableHook(
        table=table,
        table_name="applogs",
        account_name="acct",
        accepted_levels=levels_at_or_above(Level.INFO),
        service=MagicMock(),
    )


@pytest.mark.usefixtures("clean_logging")
class TestConfigureLogging:
    def test_table_sink_receives_structured_events(self, hook, table) -> None:
        configure_logging(level="DEBUG", sinks="table", table_hook=hook)

        get_logger("billing").info("invoice_sent", service="billing", amount=3)
        get_logger("billing").debug("cache_miss")

        [entity] = table.entities
        assert entity["PartitionKey"] == "billing"
        assert entity["Message"] == "invoice_sent"
        assert entity["Level"] == "info"
        assert entity["logger"] == "billing"
        assert entity["amount"] == 3
        assert entity["RowKey"].isdigit()

    def test_processors_shape_event(self) -> None:
        configure_logging(sinks="")
        capture = CaptureSink()
        logging_core._sinks.append(capture)

        get_logger("app.worker").warning("slow", ms=250)

        [event] = capture.events
        assert event["level"] == "warning"
        assert event["message"] == "slow"
        assert event["logger"] == "app.worker"
        assert event["ms"] == 250
        assert "event" not in event
        assert "timestamp" in event

    def test_level_threshold(self) -> None:
        configure_logging(level="WARNING", sinks="")
        capture = CaptureSink()
        logging_core._sinks.append(capture)

        get_logger().info("hidden")
        get_logger().error("shown")

        assert [e["message"] for e in capture.events] == ["shown"]

    def test_failing_sink_does_not_break_others(self, hook, table, capfd) -> None:
        configure_logging(sinks="table", table_hook=hook)
        capture = CaptureSink()
        logging_core._sinks.append(capture)
        table.error = RuntimeError("throttled")

        get_logger("app").error("payment_failed")

        assert [e["message"] for e in capture.events] == ["payment_failed"]
        assert "TableSink failed: RuntimeError('throttled')" in capfd.readouterr().err

    def test_stdlib_records_reach_sinks(self, hook, table) -> None:
        configure_logging(sinks="table", table_hook=hook)

        logging.getLogger("app.legacy.module").warning("from %s", "stdlib")

        [entity] = table.entities
        assert entity["Message"] == "from stdlib"
        assert entity["Level"] == "warning"
        assert entity["logger"] == "legacy.module"

    def test_client_logging_during_insert_not_written_back(self, hook, table) -> None:
        azure_logger = logging.getLogger("azure.core.pipeline")
        original_create = table.create_entity

        def create_and_log(entity: Dict[str, Any], **kwargs: Any) -> Dict[str, Any]:
            azure_logger.warning("retrying request")
            return original_create(entity, **kwargs)

        table.create_entity = create_and_log
        configure_logging(sinks="table", table_hook=hook)

        get_logger("app").info("one")

        assert [e["Message"] for e in table.entities] == ["one"]

    def test_unknown_sink_rejected(self) -> None:
        with pytest.raises(ValueError, match="Unknown log sink"):
            configure_logging(sinks="stdio,carrier-pigeon")

    def test_reconfigure_replaces_sinks_and_keeps_hook(self, hook, table) -> None:
        configure_logging(sinks="table", table_hook=hook)
        configure_logging(sinks="stdio")
        assert [type(s) for s in logging_core.get_sinks()] == [StdioSink]

        configure_logging(sinks="table", table_hook=hook)
        get_logger("app").info("after_reconfigure")

        hook.service.close.assert_not_called()
        assert [e["Message"] for e in table.entities] == ["after_reconfigure"]

    def test_table_sink_built_from_settings(self, hook, monkeypatch) -> None:
        monkeypatch.setattr("tablesink.hook.new_hook_from_settings", lambda: hook)

        configure_logging(sinks="table")

        [sink] = logging_core.get_sinks()
        assert isinstance(sink, TableSink)
        assert sink.hook is hook

    def test_configure_from_settings(self, hook) -> None:
        defaults = (
            ConsoleFormatter.TIMESTAMP_FORMAT,
            ConsoleFormatter.TIMESTAMP_WIDTH,
            ConsoleFormatter.LOGGER_WIDTH,
        )
        try:
            configure_logging_from_settings(
                LoggingSettings(sinks="stdio,table", console_timestamp_format="%H:%M:%S", console_logger_width=12),
                table_hook=hook,
            )
            assert [type(s) for s in logging_core.get_sinks()] == [StdioSink, TableSink]
            assert ConsoleFormatter.TIMESTAMP_WIDTH == 8
            assert ConsoleFormatter.LOGGER_WIDTH == 12
        finally:
            (
                ConsoleFormatter.TIMESTAMP_FORMAT,
                ConsoleFormatter.TIMESTAMP_WIDTH,
                ConsoleFormatter.LOGGER_WIDTH,
            ) = defaults
