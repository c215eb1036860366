"""Environment variable handling for configuration."""

import os
from typing import Any

from golflesson.config.types import GlobalConfig
from golflesson.config.types import LoggingSettings
from golflesson.config.types import MailSettings


class EnvConfig:
    """Environment variable configuration."""

    # Mapping of environment variables to configuration paths
    ENV_MAPPING = {
        'GOLFLESSON_TIMEZONE': ('timezone',),
        'GOLFLESSON_CONFIG_DIR': ('directories', 'config'),
        'GOLFLESSON_DATA_DIR': ('directories', 'data'),
        'GOLFLESSON_ICS_DIR': ('directories', 'ics'),
        'GOLFLESSON_LOG_LEVEL': ('logging', 'default_level'),
        'GOLFLESSON_LOG_FILE': ('logging', 'file'),
        'RESEND_API_KEY': ('mail', 'api_key'),
        'RESEND_FROM_EMAIL': ('mail', 'from_email'),
        'ADMIN_EMAIL': ('mail', 'admin_email'),
        'APP_URL': ('app_url',),
    }

    @staticmethod
    def get_env_value(env_var: str, default: Any | None = None) -> Any | None:
        """Get value from environment variable with default."""
        return os.getenv(env_var, default)

    @staticmethod
    def _set_nested_value(config: dict[str, Any], path: tuple, value: Any) -> None:
        """Set value in nested dictionary using path tuple."""
        current = config
        for part in path[:-1]:
            if part not in current:
                current[part] = {}
            current = current[part]
        current[path[-1]] = value

    @classmethod
    def update_config_from_env(cls, config: dict[str, Any]) -> None:
        """Update configuration dictionary with environment variables.

        Environment values win over the config file, so secrets can be
        kept out of ``config.yaml``.

        Args:
            config: Configuration dictionary to update
        """
        for env_var, path in cls.ENV_MAPPING.items():
            value = cls.get_env_value(env_var)
            if value is not None:
                cls._set_nested_value(config, path, value)

    @classmethod
    def get_mail_config(cls) -> MailSettings:
        """Get mail configuration from environment."""
        return {
            'api_key': cls.get_env_value('RESEND_API_KEY', ''),
            'from_email': cls.get_env_value('RESEND_FROM_EMAIL', 'onboarding@resend.dev'),
            'from_name': cls.get_env_value('GOLFLESSON_FROM_NAME', '奥村真由美ゴルフレッスン'),
            'admin_email': cls.get_env_value('ADMIN_EMAIL', ''),
        }

    @classmethod
    def get_logging_config(cls) -> LoggingSettings:
        """Get logging configuration from environment."""
        return {
            'dev_level': cls.get_env_value('GOLFLESSON_DEV_LOG_LEVEL', 'INFO'),
            'verbose_level': cls.get_env_value('GOLFLESSON_VERBOSE_LOG_LEVEL', 'DEBUG'),
            'default_level': cls.get_env_value('GOLFLESSON_LOG_LEVEL', 'WARNING'),
            'file': cls.get_env_value('GOLFLESSON_LOG_FILE'),
            'max_size': int(cls.get_env_value('GOLFLESSON_LOG_MAX_SIZE', '10')),
            'backup_count': int(cls.get_env_value('GOLFLESSON_LOG_BACKUP_COUNT', '5'))
        }

    @classmethod
    def get_global_config(cls) -> GlobalConfig:
        """Get global configuration from environment."""
        return {
            'timezone': cls.get_env_value('GOLFLESSON_TIMEZONE', 'Asia/Tokyo'),
            'app_url': cls.get_env_value('APP_URL', 'https://golf-lesson-app-mayumi.vercel.app'),
            'directories': {
                'config': cls.get_env_value('GOLFLESSON_CONFIG_DIR', 'config'),
                'data': cls.get_env_value('GOLFLESSON_DATA_DIR', 'data'),
                'ics': cls.get_env_value('GOLFLESSON_ICS_DIR', 'ics')
            },
            'mail': cls.get_mail_config(),
            'policy': {
                'free_days': int(cls.get_env_value('GOLFLESSON_FREE_CANCEL_DAYS', '7')),
                'half_days': int(cls.get_env_value('GOLFLESSON_HALF_FEE_DAYS', '3'))
            },
            'logging': cls.get_logging_config()
        }
