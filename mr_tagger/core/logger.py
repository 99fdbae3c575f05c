"""
Logging configuration for mr-tagger.

This module sets up the logging system with up to three outputs:
    - Console: Colored level names, written through tqdm.write() so log
      lines never corrupt a progress bar the host application may show
    - mr_tagger_full_{timestamp}.log: Complete log of all events (DEBUG and above)
    - mr_tagger_errors_{timestamp}.log: Only ERROR and CRITICAL level messages

File logging is optional: without a log directory only the console
handler is installed.

Usage:
    from mr_tagger.core.logger import setup_logging, get_logger

    setup_logging(log_dir)  # Call once at startup
    logger = get_logger(__name__)  # Get logger for each module

    logger.info("Opened file")
    logger.error("Save failed", extra={'file_path': '/music/song.mp3'})
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import TextIO

import colorama
from colorama import Fore, Style
from tqdm import tqdm

from mr_tagger.core.config import Config


# Log file name prefixes (created in the log directory)
LOG_FULL_PREFIX = "mr_tagger_full"
LOG_ERRORS_PREFIX = "mr_tagger_errors"

# Log format for file output (detailed with timestamp)
FILE_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
FILE_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Third-party loggers that are too chatty at DEBUG level
NOISY_LOGGERS = ("PIL", "PIL.PngImagePlugin", "PIL.TiffImagePlugin")


class ColoredConsoleFormatter(logging.Formatter):
    """
    Formatter that colors the level name on console output.

    Colors:
        - DEBUG: Cyan
        - INFO: Green
        - WARNING: Yellow
        - ERROR: Red
        - CRITICAL: Bright Red
    """

    LEVEL_COLORS = {
        logging.DEBUG: Fore.CYAN,
        logging.INFO: Fore.GREEN,
        logging.WARNING: Fore.YELLOW,
        logging.ERROR: Fore.RED,
        logging.CRITICAL: Fore.RED + Style.BRIGHT,
    }

    def __init__(self, use_colors: bool = True) -> None:
        super().__init__()
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        """
        Format the log record as "LEVEL: message".

        Exception info, when present, is appended on the following lines.
        """
        if self.use_colors:
            color = self.LEVEL_COLORS.get(record.levelno, Fore.WHITE)
            levelname = f"{color}{record.levelname}{Style.RESET_ALL}"
        else:
            levelname = record.levelname

        message = f"{levelname}: {record.getMessage()}"
        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"
        return message


class TqdmLoggingHandler(logging.Handler):
    """
    Logging handler that writes to console without breaking tqdm progress bars.

    Uses tqdm.write() which coordinates with any active progress bar, so
    messages appear above it instead of being interleaved with it.

    Attributes:
        stream: The output stream (defaults to sys.stderr).
    """

    def __init__(self, stream: TextIO = sys.stderr) -> None:
        super().__init__()
        self.stream = stream

    def emit(self, record: logging.LogRecord) -> None:
        """Emit a log record using tqdm.write()."""
        try:
            msg = self.format(record)
            tqdm.write(msg, file=self.stream)
        except Exception:
            self.handleError(record)


class ErrorOnlyFilter(logging.Filter):
    """
    Filter that only allows ERROR and CRITICAL level records.

    Used by the error log file handler to exclude DEBUG, INFO, and WARNING.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno >= logging.ERROR


def setup_logging(
    log_dir: Path | None = None,
    level: str = "INFO",
    colored: bool = True
) -> None:
    """
    Configure the logging system for the application.

    This function should be called ONCE at application startup, after
    the configuration is loaded but before any files are opened.

    Args:
        log_dir: Directory where log files will be created, or None
                 for console-only logging. Created if missing.
        level: Console log level name ("DEBUG", "INFO", ...).
        colored: Whether to color level names on the console.

    Behavior:
        1. Configure root logger level to DEBUG
        2. Remove (and close) any existing handlers
        3. Add console handler (TqdmLoggingHandler) at the requested level
        4. If log_dir is given, add a full DEBUG log file and an
           error-only log file, both named with this run's timestamp
        5. Raise noisy third-party loggers to WARNING

    Thread Safety:
        This function is NOT thread-safe. Call it once from the main
        thread before starting any worker threads.
    """
    colorama.init()

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    for handler in root_logger.handlers[:]:
        handler.close()
        root_logger.removeHandler(handler)

    console_handler = TqdmLoggingHandler()
    console_handler.setLevel(getattr(logging, level.upper(), logging.INFO))
    console_handler.setFormatter(ColoredConsoleFormatter(use_colors=colored))
    root_logger.addHandler(console_handler)

    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")

        full_handler = logging.FileHandler(
            log_dir / f"{LOG_FULL_PREFIX}_{timestamp}.log", mode="w", encoding="utf-8"
        )
        full_handler.setLevel(logging.DEBUG)
        full_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT, FILE_DATE_FORMAT))
        root_logger.addHandler(full_handler)

        error_handler = logging.FileHandler(
            log_dir / f"{LOG_ERRORS_PREFIX}_{timestamp}.log", mode="w", encoding="utf-8"
        )
        error_handler.setLevel(logging.DEBUG)  # Filter handles the level restriction
        error_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT, FILE_DATE_FORMAT))
        error_handler.addFilter(ErrorOnlyFilter())
        root_logger.addHandler(error_handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    get_logger(__name__).debug(
        f"Logging initialized - Level: {level}, Directory: {log_dir}"
    )


def configure_from_config(config: Config) -> None:
    """Configure logging from the logging section of a loaded Config."""
    setup_logging(
        log_dir=config.logging.directory,
        level=config.logging.level,
        colored=config.logging.colored,
    )


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Args:
        name: The logger name, typically __name__ of the calling module.
              This creates a hierarchy like 'mr_tagger.tags.id3'.

    Note:
        Loggers obtained before setup_logging() is called have no
        handlers of their own; records propagate to whatever the root
        logger has at emit time.
    """
    return logging.getLogger(name)


def shutdown_logging() -> None:
    """
    Flush, close and remove all root handlers.

    Typically called in a finally block or atexit handler.
    """
    root_logger = logging.getLogger()

    for handler in root_logger.handlers[:]:
        handler.flush()
        handler.close()
        root_logger.removeHandler(handler)
