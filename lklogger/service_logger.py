"""
Service loggers and the aggregate ("All") logger.

A ServiceLogger writes to its own pipeline and, when mirroring is on,
copies every record into the shared AggregateLogger tagged with
service_name so the aggregate file stays attributable.

Usage:
    api = context.new_service_logger("API", mirror=True)
    api.info("Request served", get_field("path", "/health"), status=200)
"""

import dataclasses
import enum
import os
import sys
import threading
from datetime import datetime
from pathlib import Path
from threading import Lock

from beartype.typing import Any, Dict, Optional, Sequence, Tuple

from lklogger.config import LogConfig
from lklogger.constants import (
    AGGREGATE_SERVICE_NAME,
    FATAL_MARKER_KEY,
    FATAL_MARKER_VALUE,
    SERVICE_NAME_FIELD,
)
from lklogger.encoders import LogRecord
from lklogger.exceptions import LoggerNotInitializedError
from lklogger.fields import Field, string
from lklogger.levels import LogLevel
from lklogger.pipeline import Pipeline, build_pipeline


class AggregateState(enum.Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"


class AggregateLogger:
    """
    Holder of the file-only "All" pipeline shared by every mirroring logger.

    open() may be called again to rebuild the pipeline from a new config;
    loggers holding this object then mirror into the new pipeline.
    """

    def __init__(self):
        self.state = AggregateState.UNINITIALIZED
        self._pipeline: Optional[Pipeline] = None
        self._lock = Lock()

    def open(self, config: LogConfig) -> "AggregateLogger":
        pipeline = build_pipeline(config, AGGREGATE_SERVICE_NAME)
        with self._lock:
            previous, self._pipeline = self._pipeline, pipeline
            self.state = AggregateState.READY
        if previous is not None:
            previous.close()
        return self

    @property
    def ready(self) -> bool:
        return self.state is AggregateState.READY

    @property
    def pipeline(self) -> Pipeline:
        if not self.ready:
            raise LoggerNotInitializedError("write to the aggregate log")
        return self._pipeline

    @property
    def path(self) -> Optional[Path]:
        return self.pipeline.file_handler.filepath

    def enabled(self, level: LogLevel) -> bool:
        return self.pipeline.enabled(level)

    def write(self, record: LogRecord):
        self.pipeline.write(record)

    def sync(self):
        self.pipeline.sync()

    def close(self):
        if self._pipeline is not None:
            self._pipeline.close()


def caller_location(depth: int) -> str:
    """
    Source location of a frame above the caller, as "dir/file.py:line".

    depth=0 is the function calling caller_location.
    """
    try:
        frame = sys._getframe(depth + 1)
    except ValueError:
        return "???"
    path = Path(frame.f_code.co_filename)
    return f"{path.parent.name}/{path.name}:{frame.f_lineno}" if path.parent.name else f"{path.name}:{frame.f_lineno}"


class ServiceLogger:
    """
    Leveled logger bound to one service name.

    Every emit flushes both this logger's pipeline and the aggregate, even
    when mirroring is off. Write failures never reach the caller.

    caller_skip adds frames to skip when reporting the caller, for helpers
    that wrap a ServiceLogger.
    """

    def __init__(
        self,
        service_name: str,
        pipeline: Pipeline,
        aggregate: AggregateLogger,
        mirror_to_aggregate: bool = False,
        caller_skip: int = 0,
    ):
        self.service_name = service_name
        self.pipeline = pipeline
        self.aggregate = aggregate
        self.mirror_to_aggregate = mirror_to_aggregate
        self.caller_skip = caller_skip

    def debug(self, message: str, *fields: Field, **extra):
        """
        Log debug message.

        Example:
            logger.debug("Cache lookup", get_field("key", "user:42"), hit=False)
        """
        self._log(LogLevel.DEBUG, message, fields, extra)

    def info(self, message: str, *fields: Field, **extra):
        """
        Log info message.

        Example:
            logger.info("Request served", status=200, duration=0.015)
        """
        self._log(LogLevel.INFO, message, fields, extra)

    def warn(self, message: str, *fields: Field, **extra):
        """Log warning message."""
        self._log(LogLevel.WARN, message, fields, extra)

    warning = warn

    def error(self, message: str, *fields: Field, **extra):
        """Log error message."""
        self._log(LogLevel.ERROR, message, fields, extra)

    def fatal(self, message: str, *fields: Field, **extra):
        """
        Log a fatal message and terminate the process with exit code 1.

        When mirroring, the aggregate first receives an ERROR record marked
        FATAL=Exit, since the FATAL record itself only goes to this
        service's own pipeline.

        On the main thread this raises SystemExit(1). SystemExit raised in
        any other thread only ends that thread, so there the process is
        ended with os._exit(1) once both pipelines are synced.
        """
        try:
            self._log(LogLevel.FATAL, message, fields, extra)
        finally:
            if threading.current_thread() is not threading.main_thread():
                os._exit(1)
            sys.exit(1)

    def _log(self, level: LogLevel, message: str, fields: Sequence[Any], extra: Dict[str, Any]):
        record = LogRecord(
            level=level,
            message=str(message),
            fields=self._collect_fields(fields, extra),
            timestamp=datetime.now(),
            caller=caller_location(2 + self.caller_skip),
        )
        try:
            if level is LogLevel.FATAL:
                if self.mirror_to_aggregate:
                    marked = dataclasses.replace(record, level=LogLevel.ERROR)
                    self._mirror(marked.with_leading_fields(string(FATAL_MARKER_KEY, FATAL_MARKER_VALUE)))
                self.pipeline.write(record)
                return

            if self.pipeline.enabled(level):
                self.pipeline.write(record)
            if self.mirror_to_aggregate:
                self._mirror(record)
        finally:
            self.pipeline.sync()
            self.aggregate.sync()

    def _mirror(self, record: LogRecord):
        if self.aggregate.enabled(record.level):
            self.aggregate.write(record.with_leading_fields(string(SERVICE_NAME_FIELD, self.service_name)))

    @staticmethod
    def _collect_fields(fields: Sequence[Any], extra: Dict[str, Any]) -> Tuple[Field, ...]:
        collected = []
        for index, field in enumerate(fields):
            if isinstance(field, Field):
                collected.append(field)
            elif isinstance(field, tuple) and len(field) == 2:
                collected.append(Field.of(str(field[0]), field[1]))
            else:
                collected.append(Field.of(f"arg{index}", field))
        collected.extend(Field.of(key, value) for key, value in extra.items())
        return tuple(collected)
