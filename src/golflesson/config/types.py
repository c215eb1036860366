"""Configuration type definitions."""

from dataclasses import dataclass, field
from typing import Any, TypedDict


class DirectoriesConfig(TypedDict):
    """Directory configuration."""
    config: str
    data: str
    ics: str

class MailSettings(TypedDict):
    """Outgoing mail configuration."""
    api_key: str
    from_email: str
    from_name: str
    admin_email: str

class PolicySettings(TypedDict):
    """Cancellation policy thresholds in days."""
    free_days: int
    half_days: int

class LoggingSettings(TypedDict, total=False):
    """Logging configuration."""
    dev_level: str
    verbose_level: str
    default_level: str
    file: str | None
    max_size: int  # in MB
    backup_count: int

class GlobalConfig(TypedDict):
    """Global configuration structure."""
    timezone: str
    app_url: str
    directories: DirectoriesConfig
    mail: MailSettings
    policy: PolicySettings
    logging: LoggingSettings

@dataclass
class MailConfig:
    """Mail delivery configuration."""
    api_key: str = ""
    from_email: str = "onboarding@resend.dev"
    from_name: str = "奥村真由美ゴルフレッスン"
    admin_email: str = ""

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    @property
    def sender(self) -> str:
        return f"{self.from_name} <{self.from_email}>"

@dataclass
class PolicyConfig:
    """Cancellation fee thresholds.

    A lesson ``free_days`` or more days away is free to cancel, one
    ``half_days`` or more days away costs half the price, anything
    closer costs the full price.
    """
    free_days: int = 7
    half_days: int = 3

@dataclass
class AppConfig:
    """Application configuration."""
    global_config: dict[str, Any]
    timezone: str = "Asia/Tokyo"
    app_url: str = "https://golf-lesson-app-mayumi.vercel.app"
    config_dir: str = "config"
    data_dir: str = "data"
    ics_dir: str = "ics"
    mail: MailConfig = field(default_factory=MailConfig)
    policy: PolicyConfig = field(default_factory=PolicyConfig)
    log_level: str = "WARNING"
    log_file: str | None = None

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value."""
        return getattr(self, key, default)

    @property
    def logging(self) -> dict[str, Any]:
        """Raw ``logging`` section of the merged configuration."""
        section = self.global_config.get('logging')
        return section if isinstance(section, dict) else {}
