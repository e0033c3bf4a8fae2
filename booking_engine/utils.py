"""Shared time and date helpers used across the booking engine."""

from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo

WEEKDAYS: tuple[str, ...] = (
    "monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday",
)


def parse_time(value) -> time:
    """Parse a time-of-day from ``HH:MM`` (or ``HH:MM:SS``) or pass a ``time`` through.

    Examples:
        >>> parse_time("09:30")
        datetime.time(9, 30)
        >>> parse_time(" 17:00:00 ")
        datetime.time(17, 0)
    """
    if isinstance(value, time):
        return value
    text = str(value).strip()
    for fmt in ("%H:%M", "%H:%M:%S"):
        try:
            return datetime.strptime(text, fmt).time()
        except ValueError:
            continue
    raise ValueError(f"Invalid time of day: {value!r} (expected HH:MM)")


def format_time(value: time) -> str:
    """Render a time-of-day as ``HH:MM``."""
    return value.strftime("%H:%M")


def slot_label(start: time, end: time) -> str:
    """Build the ``HH:MM-HH:MM`` label stored on bookings."""
    return f"{format_time(start)}-{format_time(end)}"


def weekday_name(day: date) -> str:
    """Lower-case English weekday name for a calendar date."""
    return WEEKDAYS[day.weekday()]


def add_minutes(value: time, minutes: int) -> time:
    """Add minutes to a time-of-day. Raises ValueError if the result crosses midnight."""
    anchor = datetime.combine(date.min, value)
    shifted = anchor + timedelta(minutes=minutes)
    if shifted.date() != anchor.date():
        raise ValueError(f"{format_time(value)} + {minutes} minutes crosses midnight")
    return shifted.time()


def minutes_between(start: time, end: time) -> int:
    """Whole minutes from start to end on the same day."""
    delta = datetime.combine(date.min, end) - datetime.combine(date.min, start)
    return int(delta.total_seconds() // 60)


def iter_dates(from_date: date, to_date: date):
    """Yield every calendar date from from_date to to_date inclusive."""
    current = from_date
    while current <= to_date:
        yield current
        current += timedelta(days=1)


def local_now(tz_name: str) -> datetime:
    """Current wall-clock time in the named IANA timezone."""
    return datetime.now(ZoneInfo(tz_name))
