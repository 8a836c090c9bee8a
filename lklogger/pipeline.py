"""
Pipelines - encoder + level threshold + sinks for one service

build_pipeline() is the single place that decides how a service's records
are rendered and where they go:

    service "All"   -> file only ({output_dir}/All.log)
    any other name  -> console (stdout) + file ({output_dir}/{name}.log)
"""

import sys
from pathlib import Path
from threading import Lock

import click
from beartype.typing import List, Optional, Sequence, TextIO, Tuple

from lklogger.config import LogConfig
from lklogger.constants import AGGREGATE_SERVICE_NAME, BYTES_PER_MB, DIAGNOSTIC_MESSAGES, SERVICE_NAME_FIELD
from lklogger.diagnostics import elog
from lklogger.encoders import JsonEncoder, LogRecord, TextEncoder
from lklogger.fields import Field, string
from lklogger.file_handler import RotatingFileHandler
from lklogger.levels import LogLevel

_console_lock = Lock()


class ConsoleWriter:
    """
    Writes lines to a console stream.

    Without an explicit stream, sys.stdout is looked up on every write so
    redirections made after the pipeline was built are honoured.
    """

    def __init__(self, stream: Optional[TextIO] = None):
        self._stream = stream

    @property
    def stream(self) -> TextIO:
        return self._stream or sys.stdout

    def write(self, content: str):
        with _console_lock:
            click.echo(content, file=self.stream, nl=False)

    def flush(self):
        with _console_lock:
            self.stream.flush()

    def close(self):
        """The console is not owned by the pipeline."""


class Pipeline:
    """
    Fans one record out to every (encoder, writer) output.

    Level filtering is done once by the caller through enabled(); write()
    assumes the record already passed it. Writer failures are reported on
    stderr and never raised.
    """

    def __init__(
        self,
        name: str,
        threshold: LogLevel,
        outputs: List[Tuple[object, object]],
        context_fields: Sequence[Field] = (),
    ):
        self.name = name
        self.threshold = threshold
        self.outputs = outputs
        self.context_fields = tuple(context_fields)

    @property
    def file_handler(self) -> Optional[RotatingFileHandler]:
        for _, writer in self.outputs:
            if isinstance(writer, RotatingFileHandler):
                return writer
        return None

    @property
    def has_console(self) -> bool:
        return any(isinstance(writer, ConsoleWriter) for _, writer in self.outputs)

    def enabled(self, level: LogLevel) -> bool:
        return level >= self.threshold

    def write(self, record: LogRecord):
        record = record.with_leading_fields(*self.context_fields)
        for encoder, writer in self.outputs:
            try:
                writer.write(encoder.encode(record))
            except Exception as e:
                elog(DIAGNOSTIC_MESSAGES["write_error"].format(target=self._describe(writer), error=e))

    def sync(self):
        for _, writer in self.outputs:
            try:
                writer.flush()
            except Exception as e:
                elog(DIAGNOSTIC_MESSAGES["write_error"].format(target=self._describe(writer), error=e))

    def close(self):
        for _, writer in self.outputs:
            try:
                writer.close()
            except Exception:
                pass

    @staticmethod
    def _describe(writer) -> str:
        if isinstance(writer, RotatingFileHandler):
            return str(writer.filepath)
        return "console"


def log_file_path(config: LogConfig, service_name: str) -> Path:
    return Path(config.output_dir) / f"{service_name}.log"


def build_pipeline(config: LogConfig, service_name: str, console_stream: Optional[TextIO] = None) -> Pipeline:
    """
    Build the write pipeline for one service.

    Args:
        config: Effective logging configuration
        service_name: Service the pipeline belongs to; "All" builds the aggregate
        console_stream: Console destination (default: sys.stdout at write time)

    Returns:
        Pipeline with a file output and, except for "All", a console output

    Example:
        pipeline = build_pipeline(config, "API")
    """
    file_handler = RotatingFileHandler(
        str(log_file_path(config, service_name)),
        max_bytes=config.max_size_mb * BYTES_PER_MB,
        backup_count=config.max_backup_files,
        max_age_days=config.max_age_days,
        compress=config.compress,
    )

    if config.is_json:
        console_encoder = file_encoder = JsonEncoder()
    else:
        console_encoder = TextEncoder(color=True)
        file_encoder = TextEncoder(color=False)

    if service_name == AGGREGATE_SERVICE_NAME:
        return Pipeline(service_name, config.threshold, [(file_encoder, file_handler)])

    return Pipeline(
        service_name,
        config.threshold,
        [(console_encoder, ConsoleWriter(console_stream)), (file_encoder, file_handler)],
        context_fields=(string(SERVICE_NAME_FIELD, service_name),),
    )
