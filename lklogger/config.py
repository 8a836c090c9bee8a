"""
Configuration System - layered logging configuration for lklogger

Resolves one immutable LogConfig from, lowest to highest precedence:
defaults, a YAML/INI file, LK_LOGGER_* environment variables and a
programmatic override.
"""

import configparser
import dataclasses
import os
import re
from dataclasses import dataclass
from pathlib import Path

import yaml
from beartype.typing import Any, Dict, Optional, Tuple

from lklogger.constants import (
    CONFIG_SECTION,
    DEFAULT_CONFIG,
    DIAGNOSTIC_MESSAGES,
    ENV_PREFIX,
    TRUE_VALUES,
)
from lklogger.diagnostics import elog
from lklogger.levels import LogLevel

VALID_LEVELS = ("debug", "info", "warn", "error")
VALID_FORMATS = ("text", "json")
INI_SUFFIXES = (".ini", ".cfg")


@dataclass(frozen=True)
class LogConfig:
    """Effective logging configuration. Never mutated once resolved."""

    level: str = DEFAULT_CONFIG["level"]
    format: str = DEFAULT_CONFIG["format"]
    output_dir: str = DEFAULT_CONFIG["output_dir"]
    max_size_mb: int = DEFAULT_CONFIG["max_size_mb"]
    max_backup_files: int = DEFAULT_CONFIG["max_backup_files"]
    max_age_days: int = DEFAULT_CONFIG["max_age_days"]
    compress: bool = DEFAULT_CONFIG["compress"]

    @property
    def threshold(self) -> LogLevel:
        return LogLevel.parse(self.level)

    @property
    def is_json(self) -> bool:
        return self.format == "json"

    def merged(self, override: Optional["ConfigOverride"]) -> "LogConfig":
        """
        Return a copy with the non-empty, non-zero fields of override applied.

        compress is the exception: it is only taken from the override when the
        override says False, so an override can switch compression off but
        never on.

        Example:
            config.merged(ConfigOverride(level="debug"))
        """
        if override is None:
            return self

        changes = {}
        if override.level:
            changes["level"] = LogLevel.parse(override.level).name.lower()
        if override.format:
            changes["format"] = _normalize_format(override.format)
        if override.output_dir:
            changes["output_dir"] = override.output_dir
        if override.max_size_mb > 0:
            changes["max_size_mb"] = override.max_size_mb
        if override.max_backup_files > 0:
            changes["max_backup_files"] = override.max_backup_files
        if override.max_age_days > 0:
            changes["max_age_days"] = override.max_age_days
        if not override.compress:
            changes["compress"] = False
        return dataclasses.replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        return dataclasses.asdict(self)


@dataclass
class ConfigOverride:
    """Programmatic override. Empty strings and zeros mean "not set"."""

    level: str = ""
    format: str = ""
    output_dir: str = ""
    max_size_mb: int = 0
    max_backup_files: int = 0
    max_age_days: int = 0
    compress: bool = False


def env_var_name(key: str) -> str:
    """
    Environment variable that overrides one logger setting.

    Example:
        env_var_name("max_size_mb")  # "LK_LOGGER_MAX_SIZE_MB"
    """
    dotted = f"{CONFIG_SECTION}.{key}"
    return f"{ENV_PREFIX}_{dotted.replace('.', '_')}".upper()


class LoggingConfig:
    """
    Centralized logging configuration for lklogger.

    Example configuration file (config.yml):
        logger:
          level: info          # debug, info, warn, error
          format: text         # text or json
          output_dir: ./log
          max_size_mb: 10
          max_backup_files: 7
          max_age_days: 7
          compress: false

    The same keys are read from a [logger] section when the file ends in
    .ini or .cfg.
    """

    DEFAULT_CONFIG = DEFAULT_CONFIG

    @classmethod
    def resolve(cls, config_path: Optional[str] = "", override: Optional[ConfigOverride] = None) -> LogConfig:
        """
        Resolve the effective configuration.

        Precedence: Override > Environment > File > Default

        Never raises: unreadable sources and bad values are reported on
        stderr and replaced by defaults.

        Args:
            config_path: Path to a YAML or INI configuration file
            override: Optional programmatic override

        Returns:
            Fully populated LogConfig
        """
        config = dict(cls.DEFAULT_CONFIG)

        # 1. Load from file
        config.update(cls._load_from_file(config_path))

        # 2. Override with environment variables
        config = cls._apply_env_overrides(config)

        # 3. Substitute environment variables in values
        config = cls._substitute_env_vars(config)

        # 4. Apply the programmatic override
        return cls._normalize(config).merged(override)

    @classmethod
    def _load_from_file(cls, config_path: Optional[str]) -> Dict[str, Any]:
        """
        Read the logger section of a configuration file.

        Returns:
            Known logger keys found in the file, empty if the file is
            missing or malformed
        """
        if not config_path or not Path(config_path).is_file():
            elog(DIAGNOSTIC_MESSAGES["config_not_found"].format(file_path=config_path or ""))
            return {}

        try:
            if Path(config_path).suffix.lower() in INI_SUFFIXES:
                section = cls._load_ini(config_path)
            else:
                section = cls._load_yaml(config_path)
        except Exception as e:
            elog(DIAGNOSTIC_MESSAGES["config_parse_error"].format(file_path=config_path, error=e))
            return {}

        return {key: value for key, value in section.items() if key in cls.DEFAULT_CONFIG}

    @classmethod
    def _load_yaml(cls, config_path: str) -> Dict[str, Any]:
        with open(config_path, encoding="utf-8") as f:
            document = yaml.safe_load(f)
        if document is None:
            return {}
        if not isinstance(document, dict):
            raise ValueError("expected a mapping at the top level")
        section = document.get(CONFIG_SECTION) or {}
        if not isinstance(section, dict):
            raise ValueError(f"expected '{CONFIG_SECTION}' to be a mapping")
        return section

    @classmethod
    def _load_ini(cls, config_path: str) -> Dict[str, Any]:
        parser = configparser.ConfigParser()
        with open(config_path, encoding="utf-8") as f:
            parser.read_file(f)
        if not parser.has_section(CONFIG_SECTION):
            return {}
        return {key: value.strip().strip('"').strip("'") for key, value in parser.items(CONFIG_SECTION)}

    @classmethod
    def _apply_env_overrides(cls, config: Dict[str, Any]) -> Dict[str, Any]:
        """
        Apply environment variable overrides.

        Environment variables:
            LK_LOGGER_LEVEL: Log level (debug, info, warn, error)
            LK_LOGGER_FORMAT: Output format (text, json)
            LK_LOGGER_OUTPUT_DIR: Directory for the .log files
            LK_LOGGER_MAX_SIZE_MB: File size that triggers rotation
            LK_LOGGER_MAX_BACKUP_FILES: Rotated files to keep
            LK_LOGGER_MAX_AGE_DAYS: Days to keep rotated files
            LK_LOGGER_COMPRESS: Gzip rotated files (true, false, yes, no, 1, 0)
        """
        for key, default in cls.DEFAULT_CONFIG.items():
            env_var = env_var_name(key)
            if env_var not in os.environ:
                continue
            raw = os.environ[env_var]

            if isinstance(default, bool):
                config[key] = raw.strip().lower() in TRUE_VALUES
            elif isinstance(default, int):
                try:
                    config[key] = int(raw)
                except ValueError:
                    pass
            else:
                config[key] = raw

        return config

    @classmethod
    def _substitute_env_vars(cls, config: Any) -> Any:
        """
        Recursively substitute environment variables in configuration.

        Supports ${VAR_NAME} syntax. Unknown variables are left as-is.

        Example:
            output_dir: /var/log/${ENVIRONMENT}
            With ENVIRONMENT=production, becomes:
            output_dir: /var/log/production
        """
        if isinstance(config, str):

            def replace_env(match):
                var_name = match.group(1)
                return os.environ.get(var_name, match.group(0))

            return re.sub(r"\$\{([^}]+)\}", replace_env, config)

        elif isinstance(config, dict):
            return {k: cls._substitute_env_vars(v) for k, v in config.items()}

        elif isinstance(config, list):
            return [cls._substitute_env_vars(item) for item in config]

        else:
            return config

    @classmethod
    def _normalize(cls, config: Dict[str, Any]) -> LogConfig:
        """Turn loosely typed values into a LogConfig, falling back per field."""
        output_dir = config.get("output_dir")
        return LogConfig(
            level=LogLevel.parse(config.get("level")).name.lower(),
            format=_normalize_format(config.get("format")),
            output_dir=str(output_dir) if output_dir else cls.DEFAULT_CONFIG["output_dir"],
            max_size_mb=cls._coerce_int(config, "max_size_mb", minimum=1),
            max_backup_files=cls._coerce_int(config, "max_backup_files", minimum=0),
            max_age_days=cls._coerce_int(config, "max_age_days", minimum=0),
            compress=cls._coerce_bool(config.get("compress")),
        )

    @classmethod
    def _coerce_int(cls, config: Dict[str, Any], key: str, minimum: int) -> int:
        default = cls.DEFAULT_CONFIG[key]
        value = config.get(key, default)
        try:
            if isinstance(value, bool):
                raise ValueError(value)
            number = int(value)
        except (TypeError, ValueError):
            number = None
        if number is None or number < minimum:
            elog(DIAGNOSTIC_MESSAGES["config_invalid_value"].format(value=value, key=key, default=default))
            return default
        return number

    @staticmethod
    def _coerce_bool(value: Any) -> bool:
        if isinstance(value, str):
            return value.strip().lower() in TRUE_VALUES
        return bool(value)

    @classmethod
    def validate(cls, config: Dict[str, Any]) -> Tuple[bool, str]:
        """
        Validate a raw logger configuration mapping.

        Returns:
            Tuple of (is_valid, error_message)

        Example:
            is_valid, error = LoggingConfig.validate({"level": "verbose"})
            if not is_valid:
                print(f"Invalid configuration: {error}")
        """
        level = str(config.get("level", "info")).lower()
        if level not in VALID_LEVELS:
            return False, f"Invalid log level '{level}'. Must be one of: {', '.join(VALID_LEVELS)}"

        format_style = str(config.get("format", "text")).lower()
        if format_style not in VALID_FORMATS:
            return False, f"Invalid format '{format_style}'. Must be one of: {', '.join(VALID_FORMATS)}"

        for key, minimum in (("max_size_mb", 1), ("max_backup_files", 0), ("max_age_days", 0)):
            value = config.get(key, cls.DEFAULT_CONFIG[key])
            if isinstance(value, bool) or not isinstance(value, int) or value < minimum:
                return False, f"Invalid {key} '{value}'. Must be an integer >= {minimum}"

        return True, ""


def _normalize_format(value: Any) -> str:
    return "json" if str(value or "").strip().lower() == "json" else "text"
