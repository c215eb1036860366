"""Configuration validation utilities."""

import os
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from golflesson.config.types import AppConfig
from golflesson.config.utils import is_valid_email


class ConfigValidationError(Exception):
    """Configuration validation error."""
    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.details = details or {}

def validate_directories(config: AppConfig) -> None:
    """Validate and create required directories."""
    workspace_dir = Path(config.config_dir).parent

    # Relative data and ICS directories live next to the config directory
    if not os.path.isabs(config.data_dir):
        config.data_dir = str(workspace_dir / config.data_dir)
    Path(config.data_dir).mkdir(parents=True, exist_ok=True)

    if not os.path.isabs(config.ics_dir):
        config.ics_dir = str(workspace_dir / config.ics_dir)
    Path(config.ics_dir).mkdir(parents=True, exist_ok=True)

    if config.log_file:
        log_dir = os.path.dirname(config.log_file)
        if log_dir:
            Path(log_dir).mkdir(parents=True, exist_ok=True)

def validate_timezone(config: AppConfig) -> None:
    """Validate the business timezone name."""
    try:
        ZoneInfo(config.timezone)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ConfigValidationError(
            f"Invalid timezone {config.timezone}",
            {"timezone": config.timezone}
        ) from e

def validate_policy(config: AppConfig) -> None:
    """Validate cancellation fee thresholds."""
    policy = config.policy
    if policy.half_days < 0 or policy.free_days <= policy.half_days:
        raise ConfigValidationError(
            "Cancellation policy thresholds must satisfy 0 <= half_days < free_days",
            {"free_days": policy.free_days, "half_days": policy.half_days}
        )

def validate_mail(config: AppConfig) -> None:
    """Validate sender and admin fallback addresses."""
    if not is_valid_email(config.mail.from_email):
        raise ConfigValidationError(
            f"Invalid sender address {config.mail.from_email}",
            {"field": "mail.from_email"}
        )

    if config.mail.admin_email and not is_valid_email(config.mail.admin_email):
        raise ConfigValidationError(
            "Invalid admin fallback address",
            {"field": "mail.admin_email"}
        )

def validate_config(config: AppConfig) -> None:
    """
    Validate configuration.

    Args:
        config: AppConfig object to validate

    Raises:
        ConfigValidationError: If configuration is invalid
    """
    try:
        validate_timezone(config)
        validate_policy(config)
        validate_mail(config)
        validate_directories(config)
    except ConfigValidationError:
        raise
    except Exception as e:
        raise ConfigValidationError(
            f"Unexpected error during configuration validation: {e!s}",
            {"error_type": type(e).__name__}
        ) from e
