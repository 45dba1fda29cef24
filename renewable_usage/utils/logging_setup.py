"""
Logging setup for the renewable usage report.

This module provides centralized logging configuration with support for:
- Per-run log files with rotation
- Performance metrics logging
- Memory usage tracking
"""

import logging
import logging.handlers
import sys
import psutil
import time
from pathlib import Path
from functools import wraps
from typing import Optional, Dict, Any

from .config_loader import get_config


LOGGER_NAMESPACE = "renewable_usage"

DEFAULT_LOG_CONFIG = {
    'level': 'INFO',
    'format': "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    'datefmt': "%Y-%m-%d %H:%M:%S",
    'max_bytes': 10 * 1024 * 1024,
    'backup_count': 3,
    'log_performance': True,
}


class PerformanceFilter(logging.Filter):
    """Filter to add performance metrics to log records."""

    def filter(self, record):
        """Add memory usage and process info to log record."""
        process = psutil.Process()
        record.memory_mb = process.memory_info().rss / 1024 / 1024
        record.cpu_percent = process.cpu_percent(interval=None)
        return True


class ColoredFormatter(logging.Formatter):
    """Colored formatter for console output."""

    grey = "\x1b[38;21m"
    yellow = "\x1b[33;21m"
    red = "\x1b[31;21m"
    bold_red = "\x1b[31;1m"
    green = "\x1b[32m"
    reset = "\x1b[0m"

    FORMATS = {
        logging.DEBUG: grey + "%(asctime)s - %(name)s - %(levelname)s - %(message)s" + reset,
        logging.INFO: green + "%(asctime)s - %(name)s - %(levelname)s - %(message)s" + reset,
        logging.WARNING: yellow + "%(asctime)s - %(name)s - %(levelname)s - %(message)s" + reset,
        logging.ERROR: red + "%(asctime)s - %(name)s - %(levelname)s - %(message)s" + reset,
        logging.CRITICAL: bold_red + "%(asctime)s - %(name)s - %(levelname)s - %(message)s" + reset
    }

    def format(self, record):
        log_fmt = self.FORMATS.get(record.levelno)
        formatter = logging.Formatter(log_fmt, datefmt='%Y-%m-%d %H:%M:%S')
        return formatter.format(record)


def _logging_config() -> Dict[str, Any]:
    """Logging section of the configuration, falling back to defaults."""
    log_config = dict(DEFAULT_LOG_CONFIG)
    log_config.update(get_config().get_logging_config() or {})
    return log_config


def setup_logging(name: str = "report", console: bool = True,
                  log_dir: Optional[Path] = None,
                  level: Optional[str] = None) -> logging.Logger:
    """
    Set up logging for a report run.

    Handlers are attached to the package logger so every module logger
    (``renewable_usage.*``) writes to the same file and console.

    Args:
        name: Log file stem (``<log_dir>/<name>.log``)
        console: Whether to add console handler
        log_dir: Directory for log files (default: ``data_paths.log_dir``, else ``./logs``)
        level: Level name overriding the configured one

    Returns:
        Logger instance
    """
    log_config = _logging_config()

    if log_dir is None:
        log_dir = get_config().get("data_paths.log_dir") or "logs"
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger(LOGGER_NAMESPACE)
    logger.setLevel(getattr(logging, (level or log_config['level']).upper()))

    # Remove existing handlers
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers = []

    log_file = log_dir / f"{name}.log"
    file_handler = logging.handlers.RotatingFileHandler(
        log_file,
        maxBytes=log_config['max_bytes'],
        backupCount=log_config['backup_count'],
        encoding="utf-8"
    )

    if log_config.get('log_performance', True):
        file_handler.addFilter(PerformanceFilter())
        file_format = "%(asctime)s - %(name)s - %(levelname)s - [Mem: %(memory_mb).1fMB, CPU: %(cpu_percent).1f%%] - %(message)s"
    else:
        file_format = log_config['format']

    file_handler.setFormatter(logging.Formatter(file_format, datefmt=log_config['datefmt']))
    logger.addHandler(file_handler)

    if console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(logging.INFO)

        # Use colored output if terminal supports it
        if hasattr(sys.stdout, 'isatty') and sys.stdout.isatty():
            console_handler.setFormatter(ColoredFormatter())
        else:
            console_handler.setFormatter(logging.Formatter(
                "%(asctime)s - %(levelname)s - %(message)s",
                datefmt='%H:%M:%S'
            ))

        logger.addHandler(console_handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance for a module."""
    return logging.getLogger(name)


def log_execution_time(logger: Optional[logging.Logger] = None):
    """
    Decorator to log function execution time.

    Args:
        logger: Logger instance (uses function's module logger if None)
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            log = logger if logger is not None else logging.getLogger(func.__module__)

            start_time = time.time()
            log.info(f"Starting {func.__name__}")

            try:
                result = func(*args, **kwargs)
            except Exception as e:
                elapsed_time = time.time() - start_time
                log.error(f"Error in {func.__name__} after {elapsed_time:.2f} seconds: {str(e)}")
                raise

            elapsed_time = time.time() - start_time
            log.info(f"Completed {func.__name__} in {elapsed_time:.2f} seconds")
            return result

        return wrapper
    return decorator


def log_memory_usage(logger: Optional[logging.Logger] = None):
    """
    Decorator to log memory usage before and after function execution.

    Args:
        logger: Logger instance
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            log = logger if logger is not None else logging.getLogger(func.__module__)

            process = psutil.Process()
            mem_before = process.memory_info().rss / 1024 / 1024

            result = func(*args, **kwargs)

            mem_after = process.memory_info().rss / 1024 / 1024
            log.debug(
                f"{func.__name__} memory usage: {mem_before:.1f}MB -> {mem_after:.1f}MB "
                f"(delta {mem_after - mem_before:+.1f}MB)"
            )

            return result

        return wrapper
    return decorator


def create_performance_summary(title: str, metrics: Dict[str, Any],
                               logger: Optional[logging.Logger] = None):
    """
    Log a summary block of run metrics.

    Args:
        title: Summary heading
        metrics: Dictionary of metrics
        logger: Logger instance
    """
    if logger is None:
        logger = get_logger(LOGGER_NAMESPACE)

    logger.info('=' * 60)
    logger.info(f"{title.upper()} SUMMARY")
    logger.info('=' * 60)

    for key, value in metrics.items():
        if isinstance(value, float):
            logger.info(f"{key}: {value:.2f}")
        else:
            logger.info(f"{key}: {value}")

    logger.info('=' * 60)
