"""Configuration management for formrules using Pydantic models."""

import json
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

CONFIG_FILE_NAME = ".formrules.json"


class OutputFormat(str, Enum):
    """Output format types."""
    TABLE = "table"
    JSON = "json"


class LogLevel(str, Enum):
    """Logging levels."""
    ERROR = "error"
    WARN = "warn"
    INFO = "info"
    DEBUG = "debug"


class ResolverConfig(BaseModel):
    """Resolver configuration section."""
    fail_fast: bool = Field(alias="failFast", default=False)

    model_config = ConfigDict(populate_by_name=True)


class OutputConfig(BaseModel):
    """CLI output configuration section."""
    format: OutputFormat = OutputFormat.TABLE
    show_passing: bool = Field(alias="showPassing", default=False)

    model_config = ConfigDict(use_enum_values=True, validate_default=True, populate_by_name=True)


class LoggingConfig(BaseModel):
    """Logging configuration section."""
    level: LogLevel = LogLevel.WARN

    model_config = ConfigDict(use_enum_values=True, validate_default=True)


class FormrulesConfig(BaseModel):
    """Complete formrules configuration model."""
    resolver: ResolverConfig = Field(default_factory=ResolverConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = ConfigDict(extra="forbid")


def load_config(config_path: str | Path | None = None) -> FormrulesConfig:
    """Load configuration from file with fallback to defaults.

    Args:
        config_path: Optional path to configuration file. If None, searches
                    current directory and parents for .formrules.json

    Returns:
        FormrulesConfig: Loaded and validated configuration

    Raises:
        ValueError: If configuration is invalid
    """
    if config_path is None:
        config_path = find_config_file()
    else:
        config_path = Path(config_path)

    if config_path and config_path.exists():
        try:
            with open(config_path, encoding="utf-8") as f:
                config_data = json.load(f)
            return FormrulesConfig(**config_data)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in config file {config_path}: {e}") from e
        except Exception as e:
            raise ValueError(f"Failed to load config from {config_path}: {e}") from e

    return FormrulesConfig()


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Find .formrules.json by searching up the directory tree.

    Args:
        start_dir: Directory to start search from (default: current directory)

    Returns:
        Path to config file if found, None otherwise
    """
    if start_dir is None:
        start_dir = Path.cwd()

    current = Path(start_dir).resolve()

    while True:
        config_file = current / CONFIG_FILE_NAME
        if config_file.exists():
            return config_file

        parent = current.parent
        if parent == current:  # Reached root directory
            break
        current = parent

    return None
