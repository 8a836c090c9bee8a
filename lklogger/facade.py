"""
Logging facade - composition root of lklogger

LoggingFacade.init() resolves the configuration, opens the aggregate
logger and returns a LoggingContext. Service loggers are built from that
context, either explicitly or through the facade's remembered default.

Usage:
    from lklogger.facade import LoggingFacade

    context = LoggingFacade.init("config.yml")
    api = context.new_service_logger("API", mirror=True)
    worker = LoggingFacade.new_service_logger("Worker", mirror=True)
"""

from beartype.typing import Optional

from lklogger.config import ConfigOverride, LogConfig, LoggingConfig
from lklogger.constants import DIAGNOSTIC_MESSAGES
from lklogger.diagnostics import elog
from lklogger.exceptions import LoggerNotInitializedError
from lklogger.pipeline import build_pipeline
from lklogger.service_logger import AggregateLogger, ServiceLogger


class LoggingContext:
    """Effective configuration plus the aggregate logger it opened."""

    def __init__(self, config: LogConfig, aggregate: AggregateLogger):
        self.config = config
        self.aggregate = aggregate

    def new_service_logger(
        self, service_name: str, mirror: bool = False, override: Optional[ConfigOverride] = None
    ) -> ServiceLogger:
        """
        Create a logger writing to {output_dir}/{service_name}.log and the console.

        Args:
            service_name: Non-empty service name
            mirror: Also copy records into the aggregate All.log
            override: Fields shadowing the shared config for this service only

        Returns:
            ServiceLogger bound to its own pipeline
        """
        if not service_name:
            raise ValueError("service_name must be a non-empty string")
        config = self.config.merged(override)
        return ServiceLogger(service_name, build_pipeline(config, service_name), self.aggregate, mirror)


class LoggingFacade:
    """
    Process-wide entry point.

    Keeps the context created by the last init() so callers that do not
    pass a context around can still obtain service loggers.
    """

    _context: Optional[LoggingContext] = None

    @classmethod
    def init(cls, config_path: Optional[str] = "", override: Optional[ConfigOverride] = None) -> LoggingContext:
        """
        Resolve configuration and open the aggregate logger.

        Calling init() again replaces the stored configuration and rebuilds
        the aggregate pipeline in place.

        Example:
            LoggingFacade.init("config.yml", ConfigOverride(level="debug"))
        """
        config = LoggingConfig.resolve(config_path, override)
        elog(DIAGNOSTIC_MESSAGES["loaded_config"].format(config=config.to_dict()))

        aggregate = cls._context.aggregate if cls._context is not None else AggregateLogger()
        aggregate.open(config)

        cls._context = LoggingContext(config, aggregate)
        return cls._context

    @classmethod
    def context(cls) -> LoggingContext:
        if cls._context is None:
            raise LoggerNotInitializedError("get the logging context")
        return cls._context

    @classmethod
    def new_service_logger(
        cls, service_name: str, mirror: bool = False, override: Optional[ConfigOverride] = None
    ) -> ServiceLogger:
        """
        Create a service logger from the context built by init().

        Raises:
            LoggerNotInitializedError: if init() has not run
        """
        if cls._context is None:
            raise LoggerNotInitializedError(f"create logger '{service_name}'")
        return cls._context.new_service_logger(service_name, mirror, override)

    @classmethod
    def reset(cls):
        """
        Close the aggregate pipeline and forget the context.

        Useful for testing.
        """
        if cls._context is not None:
            cls._context.aggregate.close()
        cls._context = None
