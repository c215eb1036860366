"""Configuration package for golf lesson application."""

from golflesson.config.settings import ConfigurationManager, load_config
from golflesson.config.types import AppConfig, MailConfig, PolicyConfig
from golflesson.config.validation import ConfigValidationError, validate_config

__all__ = [
    'AppConfig',
    'ConfigValidationError',
    'ConfigurationManager',
    'MailConfig',
    'PolicyConfig',
    'load_config',
    'validate_config',
]
