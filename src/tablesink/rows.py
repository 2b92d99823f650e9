"""
Entry-to-row mapping.

Rows are keyed by (partition key, row key). The partition key groups rows by
the emitting service; the row key is the entry timestamp in nanoseconds so
rows sort chronologically inside a partition.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict
from uuid import UUID

import orjson
from azure.data.tables import EdmType, EntityProperty

from .entry import LogEntry

DEFAULT_PARTITION_KEY = "logrus"
SERVICE_FIELD = "service"

TIMESTAMP_FIELD = "LogTimestamp"
LEVEL_FIELD = "Level"
MESSAGE_FIELD = "Message"
RESERVED_FIELDS = (TIMESTAMP_FIELD, LEVEL_FIELD, MESSAGE_FIELD)

_INT32_MIN = -(2**31)
_INT32_MAX = 2**31 - 1
_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1

_JSON_OPTIONS = orjson.OPT_NON_STR_KEYS | orjson.OPT_UTC_Z | orjson.OPT_NAIVE_UTC

_NATIVE_TYPES = (str, float, datetime, bytes, UUID, EntityProperty)

RowBuilder = Callable[[LogEntry], "LogRow"]


@dataclass(frozen=True)
class LogRow:
    """One table row, built per entry and discarded after the insert."""

    partition_key: str
    row_key: str
    properties: Dict[str, Any]

    def to_entity(self) -> Dict[str, Any]:
        """Render the row as the entity mapping the table client expects.

        ``None`` values are dropped. Values the service cannot store are JSON
        encoded, or stored as ``str(value)`` when orjson cannot encode them;
        ints wider than 64 bits are stored as decimal text. The key pair is
        written last and cannot be replaced by a property of the same name.
        """
        entity = {k: _to_property(v) for k, v in self.properties.items() if v is not None}
        entity["PartitionKey"] = self.partition_key
        entity["RowKey"] = self.row_key
        return entity


def build_row(entry: LogEntry) -> LogRow:
    """Map a log entry onto a table row.

    Caller fields are copied first and the reserved fields assigned after
    them, so a caller field named ``Level``, ``Message`` or ``LogTimestamp``
    is overwritten.
    """
    props: Dict[str, Any] = dict(entry.data)
    props[TIMESTAMP_FIELD] = _utc(entry.time)
    props[LEVEL_FIELD] = str(entry.level)
    props[MESSAGE_FIELD] = entry.message

    partition_key = DEFAULT_PARTITION_KEY
    service = props.get(SERVICE_FIELD)
    if isinstance(service, str):
        partition_key = service

    return LogRow(partition_key=partition_key, row_key=str(entry.unix_nano), properties=props)


def _utc(when: datetime) -> datetime:
    if when.tzinfo is None:
        return when.replace(tzinfo=timezone.utc)
    return when.astimezone(timezone.utc)


def _to_property(value: Any) -> Any:
    if isinstance(value, bool) or isinstance(value, _NATIVE_TYPES):
        return value
    if isinstance(value, int):
        if _INT32_MIN <= value <= _INT32_MAX:
            return value
        if _INT64_MIN <= value <= _INT64_MAX:
            return EntityProperty(value, EdmType.INT64)
        return str(value)
    try:
        return orjson.dumps(value, default=str, option=_JSON_OPTIONS).decode()
    except orjson.JSONEncodeError:
        return str(value)
