"""Calendar date keys in a user's timezone."""

from dataclasses import dataclass
from datetime import UTC, date, datetime
from zoneinfo import ZoneInfo

from macro_tracker.domain.errors import InvalidDateKeyError

DEFAULT_TIMEZONE = "America/Chicago"


def date_key_for(
    moment: datetime | None = None, timezone_name: str = DEFAULT_TIMEZONE
) -> str:
    """Return the YYYY-MM-DD key for a moment in the given timezone."""
    tz = ZoneInfo(timezone_name)
    current = moment or datetime.now(tz=UTC)
    if current.tzinfo is None:
        current = current.replace(tzinfo=UTC)
    return current.astimezone(tz).date().isoformat()


def parse_date_key(date_key: str) -> date:
    """Parse a YYYY-MM-DD key as a calendar date with no timezone shift."""
    try:
        parsed = date.fromisoformat(date_key)
    except (TypeError, ValueError) as exc:
        raise InvalidDateKeyError(f"Invalid date key: {date_key!r}") from exc
    if parsed.isoformat() != date_key:
        raise InvalidDateKeyError(f"Invalid date key: {date_key!r}")
    return parsed


@dataclass
class DateKeyResolver:
    """Normalises optional date keys to a valid key."""

    timezone_name: str = DEFAULT_TIMEZONE

    def today(self) -> str:
        """Return today's key in the configured timezone."""
        return date_key_for(timezone_name=self.timezone_name)

    def normalize(self, date_key: str | None) -> str:
        """Validate the given key, defaulting to today when it is empty."""
        if date_key is None or not date_key.strip():
            return self.today()
        cleaned = date_key.strip()
        parse_date_key(cleaned)
        return cleaned
