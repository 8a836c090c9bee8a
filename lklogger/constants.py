AGGREGATE_SERVICE_NAME = "All"

SERVICE_NAME_FIELD = "service_name"

FATAL_MARKER_KEY = "FATAL"
FATAL_MARKER_VALUE = "Exit"

CONFIG_SECTION = "logger"

ENV_PREFIX = "LK"

TIME_FORMAT = "%Y-%m-%d %H:%M:%S"

BYTES_PER_MB = 1024 * 1024

DEFAULT_CONFIG = dict(
    level="info",
    format="text",
    output_dir="./log",
    max_size_mb=10,
    max_backup_files=7,
    max_age_days=7,
    compress=False,
)

TRUE_VALUES = ("true", "yes", "1", "on")

DIAGNOSTIC_MESSAGES = dict(
    config_not_found="Warning: Logging config file '{file_path}' not found. Using default logging settings.",
    config_parse_error="Fatal: Failed to parse logging config file '{file_path}': {error}. "
    "Using default settings instead.",
    config_invalid_value="Warning: Invalid value '{value}' for logger.{key}. Using '{default}' instead.",
    loaded_config="Loaded config: {config}",
    write_error="Logging error: failed to write to {target}: {error}",
)
