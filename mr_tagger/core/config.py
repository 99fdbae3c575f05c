"""
Configuration management for mr-tagger.

This module handles loading, validating, and providing access to the
application configuration stored in mr_tagger.yaml.

The configuration file contains:
    - Logging preferences (level, optional log directory, colored console)
    - Tag handling policy (what to do with MP4 files without a tag block)

Configuration File Location:
    By default mr_tagger.yaml is looked up in the current working directory.
    Unlike an explicitly passed path, a missing default file is not an
    error: the built-in defaults are used instead.

Example mr_tagger.yaml:
    logging:
      level: "INFO"
      directory: "~/.mr_tagger/logs"   # Optional: omit for console only
      colored: true

    tags:
      mp4_missing_tag: "empty"   # "empty" substitutes an empty tag, "error" refuses to open
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from mr_tagger.core.exceptions import ConfigError


# Default configuration file name (looked up in current working directory)
CONFIG_FILENAME = "mr_tagger.yaml"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# Policies for MP4 files that have no metadata atom tree yet
MP4_MISSING_TAG_EMPTY = "empty"
MP4_MISSING_TAG_ERROR = "error"
MP4_MISSING_TAG_POLICIES = (MP4_MISSING_TAG_EMPTY, MP4_MISSING_TAG_ERROR)


@dataclass(frozen=True)
class LoggingConfig:
    """
    Logging configuration.

    Attributes:
        level: Console log level name. Default: "INFO".
        directory: Directory for log files, or None for console-only logging.
                   Path expansion is performed (~ is expanded to home directory).
        colored: Whether console level names are colored. Default: True.
    """
    level: str = "INFO"
    directory: Path | None = None
    colored: bool = True


@dataclass(frozen=True)
class TagsConfig:
    """
    Tag handling configuration.

    Attributes:
        mp4_missing_tag: Policy for MP4 files without a metadata block.
                         "empty" (default) substitutes an empty tag like the
                         ID3 and Vorbis backends do; "error" treats the file
                         as unreadable.
    """
    mp4_missing_tag: str = MP4_MISSING_TAG_EMPTY


@dataclass(frozen=True)
class Config:
    """
    Complete application configuration.

    Created by load_config() and treated as immutable (frozen dataclass).

    Attributes:
        logging: Logging settings.
        tags: Tag backend settings.
    """
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    tags: TagsConfig = field(default_factory=TagsConfig)


def load_config(config_path: Path | None = None) -> Config:
    """
    Load and validate configuration from mr_tagger.yaml.

    Args:
        config_path: Optional explicit path to config file.
                     If None, looks for mr_tagger.yaml in current working directory
                     and falls back to defaults when it does not exist.

    Returns:
        Config: A frozen dataclass containing all configuration values.

    Raises:
        ConfigError: If an explicit config file is not found, the YAML syntax
                     is invalid, or a value is invalid.
    """
    explicit = config_path is not None
    if config_path is None:
        config_path = Path.cwd() / CONFIG_FILENAME

    if not config_path.exists():
        if explicit:
            raise ConfigError(
                f"Configuration file not found: {config_path}",
                details={"file_path": str(config_path)}
            )
        return Config()

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            content = f.read()
    except IOError as e:
        raise ConfigError(
            f"Failed to read configuration file: {e}",
            details={"file_path": str(config_path), "original_error": str(e)}
        ) from e

    try:
        raw_config = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigError(
            f"Invalid YAML syntax in configuration file: {e}",
            details={"file_path": str(config_path), "original_error": str(e)}
        ) from e

    # An empty file means "all defaults"
    if raw_config is None:
        return Config()

    if not isinstance(raw_config, dict):
        raise ConfigError(
            "Configuration file must contain a YAML dictionary",
            details={"file_path": str(config_path)}
        )

    return Config(
        logging=_parse_logging_config(_section(raw_config, "logging")),
        tags=_parse_tags_config(_section(raw_config, "tags")),
    )


def _section(raw_config: dict[str, Any], name: str) -> dict[str, Any] | None:
    """Return an optional section, checking that it is a dictionary."""
    section = raw_config.get(name)
    if section is not None and not isinstance(section, dict):
        raise ConfigError(
            f"Section '{name}' must be a dictionary",
            details={"section": name}
        )
    return section


def _parse_logging_config(logging_section: dict[str, Any] | None) -> LoggingConfig:
    """
    Parse and validate the logging configuration section.

    Raises:
        ConfigError: If level is unknown, directory is not a string,
                     or colored is not a boolean.
    """
    if logging_section is None:
        return LoggingConfig()

    level = logging_section.get("level", "INFO")
    if not isinstance(level, str) or level.upper() not in LOG_LEVELS:
        raise ConfigError(
            f"'logging.level' must be one of {', '.join(LOG_LEVELS)}",
            details={"field": "logging.level", "value": level}
        )

    directory = None
    raw_directory = logging_section.get("directory")
    if raw_directory is not None:
        if not isinstance(raw_directory, str) or not raw_directory.strip():
            raise ConfigError(
                "'logging.directory' must be a non-empty string or null",
                details={"field": "logging.directory"}
            )
        directory = Path(raw_directory.strip()).expanduser().resolve()

    colored = logging_section.get("colored", True)
    if not isinstance(colored, bool):
        raise ConfigError(
            "'logging.colored' must be true or false",
            details={"field": "logging.colored", "value": colored}
        )

    return LoggingConfig(level=level.upper(), directory=directory, colored=colored)


def _parse_tags_config(tags_section: dict[str, Any] | None) -> TagsConfig:
    """
    Parse and validate the tags configuration section.

    Raises:
        ConfigError: If mp4_missing_tag is not a known policy.
    """
    if tags_section is None:
        return TagsConfig()

    policy = tags_section.get("mp4_missing_tag", MP4_MISSING_TAG_EMPTY)
    if policy not in MP4_MISSING_TAG_POLICIES:
        raise ConfigError(
            f"'tags.mp4_missing_tag' must be one of {', '.join(MP4_MISSING_TAG_POLICIES)}",
            details={"field": "tags.mp4_missing_tag", "value": policy}
        )

    return TagsConfig(mp4_missing_tag=policy)
