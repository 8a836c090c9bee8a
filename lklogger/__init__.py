"""
lklogger - per-service structured logging with an aggregated stream

Every named service in a process gets its own leveled, rotated log file
(plus console output), and services that opt in are mirrored into a single
"All" stream tagged with the originating service name.

Usage:
    import lklogger

    lklogger.init("config.yml")
    api = lklogger.new_service_logger("API", mirror=True)
    api.info("Request served", lklogger.get_field("path", "/health"), status=200)

Configuration:
    # Via configuration file (YAML or INI, section "logger")
    logger:
      level: info
      format: text
      output_dir: ./log

    # Via environment variables
    export LK_LOGGER_LEVEL=debug
    export LK_LOGGER_OUTPUT_DIR=/var/log/myapp
"""

__version__ = "1.0.0"

from lklogger.config import ConfigOverride, LogConfig, LoggingConfig
from lklogger.exceptions import LoggerNotInitializedError, LoggingError
from lklogger.facade import LoggingContext, LoggingFacade
from lklogger.fields import Field, boolean, floating, get_field, integer, string
from lklogger.levels import LogLevel
from lklogger.service_logger import AggregateLogger, ServiceLogger

__all__ = [
    "AggregateLogger",
    "ConfigOverride",
    "Field",
    "LogConfig",
    "LogLevel",
    "LoggerNotInitializedError",
    "LoggingConfig",
    "LoggingContext",
    "LoggingError",
    "LoggingFacade",
    "ServiceLogger",
    "boolean",
    "floating",
    "get_field",
    "init",
    "integer",
    "new_service_logger",
    "string",
]


def init(config_path: str = "", override: ConfigOverride = None) -> LoggingContext:
    """
    Initialize process-wide logging.

    Args:
        config_path: Path to a YAML or INI file with a "logger" section
        override: Programmatic override applied on top of file and environment

    Returns:
        The LoggingContext that service loggers are built from
    """
    return LoggingFacade.init(config_path, override)


def new_service_logger(service_name: str, mirror: bool = False, override: ConfigOverride = None) -> ServiceLogger:
    """
    Create a logger for one service using the context built by init().

    Example:
        worker = new_service_logger("Worker", mirror=True)
        worker.warn("Queue is backing up", depth=512)
    """
    return LoggingFacade.new_service_logger(service_name, mirror, override)
