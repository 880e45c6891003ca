import re
from datetime import date, datetime, time, timedelta

from booking.app.core.errors import InvalidTimeFormat, SlotCrossesMidnight

MINUTES_PER_DAY = 24 * 60

_TIME_RE = re.compile(r"^([01]?[0-9]|2[0-3]):([0-5][0-9])$")


def time_to_minutes(hhmm: str) -> int:
    """Convert "H:MM" / "HH:MM" to minutes since midnight."""
    match = _TIME_RE.fullmatch(hhmm or "")
    if match is None:
        raise InvalidTimeFormat(f"Invalid time '{hhmm}', expected HH:MM")
    return int(match.group(1)) * 60 + int(match.group(2))


def minutes_to_time(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def normalize_time(hhmm: str) -> str:
    return minutes_to_time(time_to_minutes(hhmm))


def start_of_day(value: date | datetime) -> datetime:
    if isinstance(value, datetime):
        value = value.date()
    return datetime.combine(value, time.min)


def day_bounds(value: date | datetime) -> tuple[datetime, datetime]:
    """Inclusive midnight to 23:59:59.999 bounds of the day containing ``value``."""
    start = start_of_day(value)
    end = start + timedelta(days=1) - timedelta(milliseconds=1)
    return start, end


def overlaps(start_a: int, end_a: int, start_b: int, end_b: int) -> bool:
    # Half-open intervals: touching endpoints do not conflict.
    return start_a < end_b and end_a > start_b


def ensure_same_day(hhmm: str, duration: int) -> None:
    """Reject slots whose window runs past midnight into the next day."""
    if time_to_minutes(hhmm) + duration > MINUTES_PER_DAY:
        raise SlotCrossesMidnight()
