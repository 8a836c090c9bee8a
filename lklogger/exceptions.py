class LoggingError(Exception):
    """Base class for errors raised by lklogger itself."""


class LoggerNotInitializedError(LoggingError):
    """Raised when a logger is requested before logging was initialized.

    Attributes:
        operation: name of the operation that was attempted too early
    """

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"Cannot {operation}: logging is not initialized. Call lklogger.init() first.")
