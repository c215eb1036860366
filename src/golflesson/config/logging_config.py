"""Logging configuration types and loading utilities."""

import os
from dataclasses import dataclass, field
from typing import Any

import yaml


@dataclass
class FileConfig:
    """File logging configuration."""
    enabled: bool = False
    path: str = "logs/golflesson.log"
    max_size_mb: int = 10
    backup_count: int = 5
    format: str = "json"
    include_timestamp: bool = True

@dataclass
class ConsoleConfig:
    """Console logging configuration."""
    enabled: bool = True
    format: str = "text"
    include_timestamp: bool = True
    color: bool = True

@dataclass
class CorrelationConfig:
    """Correlation ID configuration."""
    enabled: bool = True
    include_in_console: bool = False

@dataclass
class SensitiveDataConfig:
    """Sensitive data masking configuration."""
    enabled: bool = True
    global_fields: list[str] = field(default_factory=lambda: [
        'api_key', 'resend_api_key', 'email', 'user_email', 'to', 'phone'
    ])
    mask_pattern: str = '***MASKED***'

@dataclass
class ErrorAggregationConfig:
    """Error aggregation configuration."""
    enabled: bool = False
    report_interval: int = 3600
    error_threshold: int = 5
    time_threshold: int = 300
    categorize_by: list[str] = field(default_factory=lambda: ['service', 'message'])

@dataclass
class LoggingConfig:
    """Complete logging configuration."""
    default_level: str = "WARNING"
    dev_level: str = "INFO"
    verbose_level: str = "DEBUG"
    file: FileConfig = field(default_factory=FileConfig)
    console: ConsoleConfig = field(default_factory=ConsoleConfig)
    libraries: dict[str, str] = field(default_factory=lambda: {
        'urllib3': 'WARNING',
        'requests': 'WARNING',
        'resend': 'WARNING',
        'yaml': 'WARNING',
    })
    correlation: CorrelationConfig = field(default_factory=CorrelationConfig)
    sensitive_data: SensitiveDataConfig = field(default_factory=SensitiveDataConfig)
    error_aggregation: ErrorAggregationConfig = field(default_factory=ErrorAggregationConfig)

def _section(config_dict: dict[str, Any], name: str) -> dict[str, Any]:
    value = config_dict.get(name)
    return value if isinstance(value, dict) else {}

def load_logging_config(
    config_dict: dict[str, Any] | None = None,
    config_path: str | None = None
) -> LoggingConfig:
    """Build logging configuration from a dict or a YAML file.

    Args:
        config_dict: The ``logging`` section of the application config
        config_path: Optional path to a standalone logging YAML file

    Returns:
        LoggingConfig with defaults for any missing section
    """
    if config_dict is None:
        config_dict = {}
        if config_path and os.path.exists(config_path):
            with open(config_path, encoding="utf-8") as f:
                config_dict = yaml.safe_load(f) or {}

    # A plain string under ``file`` is a log file path
    file_section = config_dict.get('file')
    if isinstance(file_section, str):
        file_config = FileConfig(enabled=True, path=file_section)
    else:
        file_config = FileConfig(**_section(config_dict, 'file'))

    defaults = LoggingConfig()
    return LoggingConfig(
        default_level=str(config_dict.get('default_level', defaults.default_level)).upper(),
        dev_level=str(config_dict.get('dev_level', defaults.dev_level)).upper(),
        verbose_level=str(config_dict.get('verbose_level', defaults.verbose_level)).upper(),
        file=file_config,
        console=ConsoleConfig(**_section(config_dict, 'console')),
        libraries={**defaults.libraries, **_section(config_dict, 'libraries')},
        correlation=CorrelationConfig(**_section(config_dict, 'correlation')),
        sensitive_data=SensitiveDataConfig(**_section(config_dict, 'sensitive_data')),
        error_aggregation=ErrorAggregationConfig(**_section(config_dict, 'error_aggregation')),
    )
