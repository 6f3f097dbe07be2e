"""
Date and time helpers for rental periods.
"""

from datetime import datetime
from typing import Optional
import pytz

from ..config import get_settings

DEFAULT_START_TIME = "00:00"
DEFAULT_END_TIME = "23:59"


def compose_instant(date_str: str, time_str: Optional[str], default_time: str) -> datetime:
    """
    Combine an ISO date and an ``HH:MM`` time into a naive wall-clock datetime.

    Args:
        date_str: Date in YYYY-MM-DD format
        time_str: Time in HH:MM format, or None/empty to use ``default_time``
        default_time: Time used when ``time_str`` is omitted

    Raises:
        ValueError: if either component is malformed
    """
    time_part = (time_str or "").strip() or default_time
    return datetime.strptime(f"{date_str.strip()}T{time_part}", "%Y-%m-%dT%H:%M")


class DateTimeUtils:
    """Timezone-aware helpers bound to the configured rental timezone."""

    def __init__(self, timezone: Optional[str] = None):
        self.settings = get_settings()
        self.tz = pytz.timezone(timezone or self.settings.timezone)

    def now(self) -> datetime:
        """Current time in the rental timezone."""
        return datetime.now(self.tz)

    def localize(self, value: datetime) -> datetime:
        if value.tzinfo is None:
            return self.tz.localize(value)
        return value.astimezone(self.tz)

    def to_iso(self, date_str: str, time_str: Optional[str], default_time: str) -> str:
        """Compose a date and time into an ISO 8601 string with UTC offset."""
        instant = self.localize(compose_instant(date_str, time_str, default_time))
        return instant.isoformat()

    def is_valid_iso_date(self, date_str: str) -> bool:
        """Check if string is a valid ISO date (YYYY-MM-DD)."""
        try:
            datetime.strptime(date_str, "%Y-%m-%d")
            return True
        except (TypeError, ValueError):
            return False

    def is_valid_time_format(self, time_str: str) -> bool:
        """Check if string is a valid time format (HH:MM)."""
        try:
            datetime.strptime(time_str, "%H:%M")
            return True
        except (TypeError, ValueError):
            return False

    def format_for_display(self, date_str: str, time_str: Optional[str]) -> str:
        """Render e.g. ``Monday, January 1, 2024 at 09:00 AM``."""
        try:
            instant = compose_instant(date_str, time_str, DEFAULT_START_TIME)
        except ValueError:
            return f"{date_str} {time_str or ''}".strip()
        return (
            f"{instant.strftime('%A, %B')} {instant.day}, {instant.year} "
            f"at {instant.strftime('%I:%M %p')}"
        )
