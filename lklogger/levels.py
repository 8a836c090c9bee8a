from enum import IntEnum


class LogLevel(IntEnum):
    """Log levels, ordered by severity. Only DEBUG..ERROR are configurable thresholds."""

    DEBUG = 10
    INFO = 20
    WARN = 30
    ERROR = 40
    FATAL = 50

    @classmethod
    def parse(cls, text) -> "LogLevel":
        """
        Convert a configured level name into a LogLevel.

        Never fails: unknown names, FATAL and None all map to INFO.

        Example:
            LogLevel.parse("WARN")   # LogLevel.WARN
            LogLevel.parse("trace")  # LogLevel.INFO
        """
        name = str(text or "").strip().lower()
        if name == "warning":
            name = "warn"
        return _THRESHOLDS.get(name, cls.INFO)


_THRESHOLDS = {
    "debug": LogLevel.DEBUG,
    "info": LogLevel.INFO,
    "warn": LogLevel.WARN,
    "error": LogLevel.ERROR,
}
