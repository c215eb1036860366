"""Timezone utilities for the application."""

from datetime import date, datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

DEFAULT_TIMEZONE = "Asia/Tokyo"

class TimezoneManager:
    """Manages timezone operations throughout the application."""

    def __init__(self, local_timezone: str = DEFAULT_TIMEZONE):
        """Initialize timezone manager.

        Args:
            local_timezone: The business timezone. Defaults to Asia/Tokyo.

        Raises:
            ValueError: If the timezone is invalid
        """
        self.set_timezone(local_timezone)

    def set_timezone(self, timezone: str) -> None:
        """Set the local timezone.

        Args:
            timezone: IANA timezone name

        Raises:
            ValueError: If the timezone is invalid
        """
        try:
            self.local_tz = ZoneInfo(timezone)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Invalid timezone {timezone}: {e!s}") from e

    def localize_datetime(self, dt: datetime) -> datetime:
        """Convert naive datetime to local timezone-aware datetime."""
        if dt.tzinfo is None:
            return dt.replace(tzinfo=self.local_tz)
        return dt.astimezone(self.local_tz)

    def to_local(self, dt: datetime) -> datetime:
        """Convert datetime to local timezone.

        Naive values are taken to be local wall-clock time.
        """
        return self.localize_datetime(dt)

    def local_date(self, dt: datetime) -> date:
        """Calendar date of ``dt`` in the local timezone."""
        return self.to_local(dt).date()

    def days_between(self, start: datetime, end: datetime) -> int:
        """Whole calendar days from ``start`` to ``end`` in the local timezone.

        Only the date portions count: 23:59 today to 00:01 tomorrow is one
        day, any two instants on the same local date are zero days apart.
        """
        return (self.local_date(end) - self.local_date(start)).days

    def now(self) -> datetime:
        """Get current time in local timezone."""
        return datetime.now(self.local_tz)

    @property
    def timezone_name(self) -> str:
        """Get the name of the local timezone."""
        return str(self.local_tz)

def parse_iso(value: str | datetime | None) -> datetime | None:
    """Parse an ISO-8601 timestamp, accepting a trailing ``Z``."""
    if value is None or isinstance(value, datetime):
        return value
    if value.endswith('Z'):
        value = value[:-1] + '+00:00'
    return datetime.fromisoformat(value)

def to_iso(value: datetime | None) -> str | None:
    """Format a timestamp for storage."""
    return value.isoformat() if value is not None else None

def utc_now() -> datetime:
    """Current time in UTC."""
    return datetime.now(ZoneInfo("UTC"))
