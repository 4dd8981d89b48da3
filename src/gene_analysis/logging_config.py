"""Logging configuration and utilities."""

import logging
import logging.handlers
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

ROOT_LOGGER_NAME = 'gene_analysis'


class ColoredFormatter(logging.Formatter):
    """Console formatter that colors the level name on a TTY."""

    COLORS = {
        'DEBUG': '\033[36m',
        'INFO': '\033[32m',
        'WARNING': '\033[33m',
        'ERROR': '\033[31m',
        'CRITICAL': '\033[35m',
        'RESET': '\033[0m'
    }

    def __init__(self, fmt: Optional[str] = None, datefmt: Optional[str] = None, use_colors: bool = True):
        super().__init__(fmt, datefmt)
        self.use_colors = use_colors and sys.stderr.isatty()

    def format(self, record: logging.LogRecord) -> str:
        levelname = record.levelname
        if self.use_colors and levelname in self.COLORS:
            record.levelname = f"{self.COLORS[levelname]}{levelname}{self.COLORS['RESET']}"
        try:
            return super().format(record)
        finally:
            record.levelname = levelname


class StageProgress:
    """Reports progress through the fixed sequence of pipeline steps."""

    def __init__(self, steps, logger: Optional[logging.Logger] = None):
        """
        Args:
            steps: Ordered step descriptions
            logger: Logger to report to (defaults to the pipeline logger)
        """
        self.steps = list(steps)
        self.logger = logger or get_logger('pipeline')
        self.current = 0
        self.start_time = datetime.now()

    @property
    def percent(self) -> float:
        return (self.current / len(self.steps)) * 100 if self.steps else 100.0

    def advance(self) -> str:
        """Move to the next step and log it."""
        if self.current >= len(self.steps):
            raise IndexError("All pipeline steps already reported")
        step = self.steps[self.current]
        self.current += 1
        self.logger.info(f"[{self.current}/{len(self.steps)}] {step}")
        return step

    def complete(self):
        elapsed = (datetime.now() - self.start_time).total_seconds()
        self.logger.info(f"Analysis finished in {elapsed:.1f}s")


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[str] = None,
    log_dir: Optional[str] = None,
    console: bool = True,
    colors: bool = True,
    max_bytes: int = 5 * 1024 * 1024,
    backup_count: int = 3,
    quiet: bool = False
) -> logging.Logger:
    """
    Configure the package logger.

    Args:
        log_level: Logging level name
        log_file: Log file name; file logging is off unless given
        log_dir: Directory for the log file
        console: Enable console output on stderr
        colors: Enable colored console output
        max_bytes: Rotate the log file beyond this size
        backup_count: Number of rotated files to keep
        quiet: Only show errors on the console

    Returns:
        The package root logger
    """
    level = getattr(logging, log_level.upper(), logging.INFO)
    package_logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in package_logger.handlers[:]:
        package_logger.removeHandler(handler)
    package_logger.setLevel(logging.DEBUG)
    package_logger.propagate = False

    if log_file:
        log_path = Path(log_dir) if log_dir else Path('.')
        log_path.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_path / log_file,
            maxBytes=max_bytes,
            backupCount=backup_count
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))
        package_logger.addHandler(file_handler)

    if console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(logging.ERROR if quiet else level)
        console_handler.setFormatter(ColoredFormatter('%(levelname)s - %(message)s', use_colors=colors))
        package_logger.addHandler(console_handler)

    package_logger.debug(f"Logging initialized - Level: {log_level}")
    return package_logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the package namespace."""
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


class LogTimer:
    """Context manager for timing upstream calls."""

    def __init__(self, operation: str, logger: Optional[logging.Logger] = None):
        self.operation = operation
        self.logger = logger or get_logger('performance')
        self.start_time = None
        self.elapsed = 0.0

    def __enter__(self):
        self.start_time = datetime.now()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.elapsed = (datetime.now() - self.start_time).total_seconds()
        if exc_type is None:
            self.logger.debug(f"{self.operation} completed in {self.elapsed:.2f}s")
        else:
            self.logger.debug(f"{self.operation} failed after {self.elapsed:.2f}s: {exc_val}")
