"""Configuration settings for golf lesson application."""

import os
from pathlib import Path
from typing import Any

import yaml

from golflesson.config.env import EnvConfig
from golflesson.config.types import AppConfig
from golflesson.config.types import MailConfig
from golflesson.config.types import PolicyConfig
from golflesson.config.utils import deep_merge
from golflesson.config.utils import get_config_paths
from golflesson.config.utils import resolve_path


class ConfigurationManager:
    """Centralized configuration management with caching."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        self._config: AppConfig | None = None
        self._config_path: Path | None = None
        self._initialized = True

    def load_config(self, config_dir: str | None = None) -> AppConfig:
        """Load configuration with caching."""
        if self._config is not None:
            return self._config

        self._config_path = _get_config_path(config_dir)
        global_config = _load_global_config(self._config_path)
        self._config = build_app_config(global_config, self._config_path)
        return self._config

    def reload_config(self, config_dir: str | None = None) -> AppConfig:
        """Force reload configuration."""
        self._config = None
        return self.load_config(config_dir)

    @classmethod
    def reset(cls) -> None:
        """Drop the cached instance."""
        cls._instance = None

def _get_config_path(config_dir: str | None = None) -> Path:
    """Get configuration directory path."""
    return resolve_path(config_dir or os.getenv("GOLFLESSON_CONFIG_DIR", "config"))

def _load_global_config(config_path: Path) -> dict[str, Any]:
    """Load global configuration from YAML file and environment."""
    # Get base configuration from environment
    global_config: dict[str, Any] = dict(EnvConfig.get_global_config())

    config_file = get_config_paths(config_path)["config"]
    if config_file.exists():
        with open(config_file, encoding="utf-8") as f:
            loaded_config = yaml.safe_load(f) or {}
        global_config = deep_merge(global_config, loaded_config)

    # Explicitly set environment variables win over the file
    EnvConfig.update_config_from_env(global_config)
    return global_config

def build_app_config(global_config: dict[str, Any], config_path: Path | None = None) -> AppConfig:
    """Create AppConfig from a merged configuration dictionary."""
    directories = global_config.get('directories', {})
    mail = global_config.get('mail', {})
    policy = global_config.get('policy', {})
    logging_section = global_config.get('logging', {})

    log_file = logging_section.get('file')
    if isinstance(log_file, dict):
        log_file = log_file.get('path') if log_file.get('enabled') else None

    return AppConfig(
        global_config=global_config,
        timezone=global_config.get('timezone', 'Asia/Tokyo'),
        app_url=str(global_config.get('app_url', AppConfig.app_url)).rstrip('/'),
        config_dir=str(config_path or directories.get('config', 'config')),
        data_dir=directories.get('data', 'data'),
        ics_dir=directories.get('ics', 'ics'),
        mail=MailConfig(
            api_key=mail.get('api_key') or '',
            from_email=mail.get('from_email') or MailConfig.from_email,
            from_name=mail.get('from_name') or MailConfig.from_name,
            admin_email=mail.get('admin_email') or '',
        ),
        policy=PolicyConfig(
            free_days=int(policy.get('free_days', PolicyConfig.free_days)),
            half_days=int(policy.get('half_days', PolicyConfig.half_days)),
        ),
        log_level=str(logging_section.get('default_level', 'WARNING')).upper(),
        log_file=log_file,
    )

def load_config(config_dir: str | None = None) -> AppConfig:
    """Load configuration using the ConfigurationManager."""
    config_manager = ConfigurationManager()
    return config_manager.load_config(config_dir)
