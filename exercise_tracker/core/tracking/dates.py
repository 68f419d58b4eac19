"""
Calendar date handling for exercise records.

Exercises carry a calendar date, not a timestamp. Input arrives as free-form
strings from HTML forms and query strings, and output is rendered in the
short "Sun Jan 15 2023" form that clients of this API expect.
"""

from datetime import date, datetime, timezone
from typing import Optional


class InvalidDateError(ValueError):
    """Raised when a date string cannot be parsed as a calendar date."""
    pass


# Tried in order after ISO 8601 parsing fails.
_FALLBACK_FORMATS = (
    "%a %b %d %Y",   # Sun Jan 15 2023 (our own output format)
    "%B %d, %Y",     # January 15, 2023
    "%b %d, %Y",     # Jan 15, 2023
    "%Y/%m/%d",
    "%m/%d/%Y",
)

DISPLAY_FORMAT = "%a %b %d %Y"


def today_utc() -> date:
    """Current calendar date in UTC. Evaluated on every call."""
    return datetime.now(timezone.utc).date()


def parse_calendar_date(value: str) -> date:
    """
    Parse a user-supplied string into a calendar date.

    ISO 8601 dates and datetimes are accepted first ("2023-01-15",
    "2023-01-15T08:30:00Z"). Timezone-aware datetimes are normalized
    to UTC before the date is taken. A few common human formats are
    accepted as a fallback.

    Raises:
        InvalidDateError: If no supported format matches.
    """
    text = value.strip() if value else ""
    if not text:
        raise InvalidDateError("Date cannot be empty")

    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        parsed = None

    if parsed is not None:
        if parsed.tzinfo is not None:
            parsed = parsed.astimezone(timezone.utc)
        return parsed.date()

    for fmt in _FALLBACK_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue

    raise InvalidDateError(f"Invalid date format: {value!r}")


def parse_optional_date(value: Optional[str]) -> Optional[date]:
    """Parse a date that may be omitted. Blank strings count as omitted."""
    if value is None or not value.strip():
        return None
    return parse_calendar_date(value)


def format_date_string(value: date) -> str:
    """Render a date as "Sun Jan 15 2023"."""
    return value.strftime(DISPLAY_FORMAT)
