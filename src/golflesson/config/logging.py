"""Logging configuration utilities."""

import json
import logging
import logging.handlers
import os
import sys
from datetime import datetime
from pathlib import Path

from golflesson.config.error_aggregator import init_error_aggregator
from golflesson.config.logging_config import LoggingConfig
from golflesson.config.logging_config import load_logging_config
from golflesson.config.logging_filters import CorrelationFilter
from golflesson.config.logging_filters import SensitiveDataFilter
from golflesson.config.types import AppConfig
from golflesson.config.utils import get_config_paths


class JsonFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def __init__(self, include_timestamp: bool = True):
        """Initialize formatter.

        Args:
            include_timestamp: Whether to include timestamp in output
        """
        self.include_timestamp = include_timestamp
        super().__init__()

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON.

        Args:
            record: Log record to format

        Returns:
            JSON formatted string
        """
        data = {
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage()
        }

        if self.include_timestamp:
            data['timestamp'] = datetime.fromtimestamp(record.created).isoformat()

        if record.exc_info:
            data['exception'] = self.formatException(record.exc_info)

        if hasattr(record, 'extra_fields'):
            data.update(record.extra_fields)

        return json.dumps(data, ensure_ascii=False, default=str)

class ColoredFormatter(logging.Formatter):
    """Formatter that adds color to console output."""

    COLORS = {
        'DEBUG': '\033[36m',     # Cyan
        'INFO': '\033[32m',      # Green
        'WARNING': '\033[33m',   # Yellow
        'ERROR': '\033[31m',     # Red
        'CRITICAL': '\033[35m',  # Magenta
    }
    RESET = '\033[0m'

    def __init__(self, use_color: bool = True):
        super().__init__()
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with color.

        Args:
            record: Log record to format

        Returns:
            Colored string
        """
        color = self.COLORS.get(record.levelname, self.RESET) if self.use_color else ''
        reset = self.RESET if self.use_color else ''

        timestamp = datetime.fromtimestamp(record.created).strftime('%Y-%m-%d %H:%M:%S,%f')[:-3]
        msg = record.getMessage()

        context = ""
        if hasattr(record, 'extra_fields'):
            fields = [f"\n    {key}: {value}" for key, value in record.extra_fields.items()]
            if fields:
                context = " |" + "".join(fields)

        if record.exc_info:
            msg = f"{msg}\n{self.formatException(record.exc_info)}"

        return f"{color}{timestamp} - {record.name} - {record.levelname} - {msg}{context}{reset}"

def get_console_handler(formatter: logging.Formatter) -> logging.StreamHandler:
    """Create console handler.

    Args:
        formatter: Formatter to use

    Returns:
        Configured console handler
    """
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    return console_handler

def get_file_handler(
    log_file: str | Path,
    formatter: logging.Formatter,
    max_bytes: int,
    backup_count: int
) -> logging.handlers.RotatingFileHandler:
    """Create rotating file handler.

    Args:
        log_file: Path to log file
        formatter: Formatter to use
        max_bytes: Maximum file size in bytes
        backup_count: Number of backup files to keep

    Returns:
        Configured file handler
    """
    log_dir = os.path.dirname(log_file)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)

    file_handler = logging.handlers.RotatingFileHandler(
        log_file,
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding='utf-8'
    )
    file_handler.setFormatter(formatter)
    return file_handler

def _resolve_level(logging_config: LoggingConfig, dev_mode: bool, verbose: bool) -> int:
    if verbose:
        name = logging_config.verbose_level
    elif dev_mode:
        name = logging_config.dev_level
    else:
        name = logging_config.default_level
    return getattr(logging, name.upper(), logging.WARNING)

def setup_logging(
    config: AppConfig | None = None,
    dev_mode: bool = False,
    verbose: bool = False,
    log_file: str | None = None
) -> LoggingConfig:
    """Set up logging configuration.

    Args:
        config: Application configuration; defaults are used when omitted
        dev_mode: Use the development log level
        verbose: Use the verbose log level
        log_file: Log file path overriding the configured one

    Returns:
        The effective logging configuration
    """
    if config is not None and config.logging:
        logging_config = load_logging_config(config.logging)
    else:
        # Fall back to a standalone logging_config.yaml next to config.yaml
        paths = get_config_paths(config.config_dir if config else None)
        logging_config = load_logging_config(config_path=str(paths['logging']))
    level = _resolve_level(logging_config, dev_mode, verbose)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    sensitive_filter = None
    if logging_config.sensitive_data.enabled:
        sensitive_filter = SensitiveDataFilter(
            set(logging_config.sensitive_data.global_fields),
            logging_config.sensitive_data.mask_pattern
        )

    if logging_config.console.enabled:
        console_handler = get_console_handler(ColoredFormatter(use_color=logging_config.console.color))
        console_handler.setLevel(level)
        if sensitive_filter:
            console_handler.addFilter(sensitive_filter)
        if logging_config.correlation.enabled and logging_config.correlation.include_in_console:
            console_handler.addFilter(CorrelationFilter())
        root_logger.addHandler(console_handler)

    file_path = log_file or (logging_config.file.path if logging_config.file.enabled else None)
    if file_path:
        # File handler always logs at DEBUG level for troubleshooting
        file_handler = get_file_handler(
            file_path,
            JsonFormatter(include_timestamp=logging_config.file.include_timestamp),
            logging_config.file.max_size_mb * 1024 * 1024,
            logging_config.file.backup_count
        )
        file_handler.setLevel(logging.DEBUG)
        if sensitive_filter:
            file_handler.addFilter(sensitive_filter)
        if logging_config.correlation.enabled:
            file_handler.addFilter(CorrelationFilter())
        root_logger.addHandler(file_handler)
        root_logger.setLevel(logging.DEBUG)

    for library, library_level in logging_config.libraries.items():
        logging.getLogger(library).setLevel(getattr(logging, library_level.upper(), logging.WARNING))

    init_error_aggregator(logging_config.error_aggregation)
    return logging_config
