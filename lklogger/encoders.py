"""
Encoders - turn a LogRecord into one output line

TextEncoder:
    2024-01-20 10:15:30.123 [INFO]  api/server.py:42 | Request served | service_name=API status=200

JsonEncoder:
    {"ts": "2024-01-20 10:15:30.123", "level": "INFO", "caller": "api/server.py:42", "msg": "Request served", ...}
"""

import json
from dataclasses import dataclass
from datetime import datetime

import click
from beartype.typing import Tuple

from lklogger.constants import TIME_FORMAT
from lklogger.fields import Field
from lklogger.levels import LogLevel

LEVEL_COLORS = {
    LogLevel.DEBUG: "magenta",
    LogLevel.INFO: "blue",
    LogLevel.WARN: "yellow",
    LogLevel.ERROR: "red",
    LogLevel.FATAL: "red",
}


@dataclass(frozen=True)
class LogRecord:
    level: LogLevel
    message: str
    fields: Tuple[Field, ...]
    timestamp: datetime
    caller: str

    def with_leading_fields(self, *fields: Field) -> "LogRecord":
        """Copy of the record with fields placed before the existing ones."""
        if not fields:
            return self
        return LogRecord(self.level, self.message, tuple(fields) + self.fields, self.timestamp, self.caller)


def format_timestamp(timestamp: datetime) -> str:
    return f"{timestamp.strftime(TIME_FORMAT)}.{timestamp.microsecond // 1000:03d}"


class TextEncoder:
    """Human-readable columnar lines, optionally with a colored level."""

    def __init__(self, color: bool = False):
        self.color = color

    def encode(self, record: LogRecord) -> str:
        level_str = f"[{record.level.name}]".ljust(7)
        if self.color:
            level_str = click.style(level_str, fg=LEVEL_COLORS[record.level])

        extra_str = ""
        if record.fields:
            extra_str = " | " + " ".join(f"{field.key}={field.render()}" for field in record.fields)

        return f"{format_timestamp(record.timestamp)} {level_str} {record.caller} | {record.message}{extra_str}\n"


class JsonEncoder:
    """
    One JSON object per line (NDJSON).

    ts, level, caller and msg always hold the record's own values, and a
    field keeps the first occurrence of its key. A later field with a key
    already present is written as "fields.<key>" instead of replacing it.
    """

    def encode(self, record: LogRecord) -> str:
        log_entry = {
            "ts": format_timestamp(record.timestamp),
            "level": record.level.name,
            "caller": record.caller,
            "msg": record.message,
        }
        for field in record.fields:
            key = field.key if field.key not in log_entry else f"fields.{field.key}"
            log_entry.setdefault(key, field.value)
        return json.dumps(log_entry, default=str) + "\n"
