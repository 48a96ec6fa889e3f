"""Shared utilities used across the scheduling engine."""

import re
import uuid
from datetime import date, datetime, time, timezone
from typing import Union

_TIME_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})$")

SUNDAY = 0


def normalize_phone(value: str) -> str:
    """Normalize a phone number by stripping everything except digits and a leading +.

    Examples:
        >>> normalize_phone("(69) 99283-9458")
        '69992839458'
        >>> normalize_phone("+55 69 99283-9458")
        '+5569992839458'
    """
    value = value.strip()
    if value.startswith("+"):
        return "+" + re.sub(r"[^\d]", "", value[1:])
    return re.sub(r"[^\d]", "", value)


def parse_time(value: str) -> tuple[int, int]:
    """Split an ``H:MM``/``HH:MM`` string into (hour, minute).

    Raises:
        ValueError: If the string is not a valid 24h time of day.
    """
    match = _TIME_PATTERN.match(value.strip())
    if not match:
        raise ValueError(f"Invalid time of day {value!r}, expected HH:MM")
    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        raise ValueError(f"Invalid time of day {value!r}, expected HH:MM")
    return hour, minute


def format_time(hour: int, minute: int) -> str:
    return f"{hour:02d}:{minute:02d}"


def normalize_time(value: Union[str, time]) -> str:
    """Return a zero-padded ``HH:MM`` string.

    Fixed-width times keep lexicographic ordering equal to chronological
    ordering, which every sorted slot and booking listing depends on.
    """
    if isinstance(value, time):
        return format_time(value.hour, value.minute)
    if not isinstance(value, str):
        raise ValueError(f"Invalid time of day {value!r}, expected HH:MM")
    return format_time(*parse_time(value))


def normalize_date(value: Union[str, date]) -> str:
    """Return an ISO ``YYYY-MM-DD`` string for a date or date-like string."""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if not isinstance(value, str):
        raise ValueError(f"Invalid date {value!r}, expected YYYY-MM-DD")
    try:
        return date.fromisoformat(value.strip()).isoformat()
    except ValueError:
        raise ValueError(f"Invalid date {value!r}, expected YYYY-MM-DD") from None


def to_date(value: Union[str, date]) -> date:
    return date.fromisoformat(normalize_date(value))


def weekday_index(day: date) -> int:
    """Weekday number with 0=Sunday .. 6=Saturday."""
    return day.isoweekday() % 7


def generate_id() -> str:
    return uuid.uuid4().hex


def utc_now() -> datetime:
    return datetime.now(timezone.utc)
