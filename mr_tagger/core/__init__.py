"""
Core module for mr-tagger.

This module provides the foundational components used throughout the package:
    - exceptions: Custom exception classes for error handling
    - config: Configuration loading and validation
    - logger: Logging system with console and file outputs

Usage:
    from mr_tagger.core import (
        Config, load_config,
        setup_logging, get_logger,
        MrTaggerError, ParseError, IndexOutOfRangeError
    )
"""

from mr_tagger.core.config import Config, LoggingConfig, TagsConfig, load_config
from mr_tagger.core.exceptions import (
    ConfigError,
    IndexOutOfRangeError,
    InvalidFieldValueError,
    InvalidImageError,
    MrTaggerError,
    ParseError,
    SerializeError,
    UnsupportedFileTypeError,
    UnsupportedImageTypeError,
    UnsupportedPictureMetadataError,
)
from mr_tagger.core.logger import (
    configure_from_config,
    get_logger,
    setup_logging,
    shutdown_logging,
)

__all__ = [
    # Config
    "Config",
    "LoggingConfig",
    "TagsConfig",
    "load_config",
    # Exceptions
    "MrTaggerError",
    "ConfigError",
    "UnsupportedFileTypeError",
    "ParseError",
    "SerializeError",
    "IndexOutOfRangeError",
    "UnsupportedImageTypeError",
    "InvalidImageError",
    "UnsupportedPictureMetadataError",
    "InvalidFieldValueError",
    # Logger
    "setup_logging",
    "configure_from_config",
    "get_logger",
    "shutdown_logging",
]
