from __future__ import annotations

import re
from datetime import date, datetime, time, timedelta

from backoffice.application.exceptions import InvalidInputError

_TIME_12H = re.compile(r"^(\d{1,2})(?::(\d{2}))?\s*([ap])\.?\s*m\.?$")
_TIME_24H = re.compile(r"^(\d{1,2}):(\d{2})$")


def parse_date(text: str) -> date:
    """Parse a YYYY-MM-DD date. Raises InvalidInputError otherwise."""
    raw = (text or "").strip()
    try:
        return datetime.strptime(raw, "%Y-%m-%d").date()
    except ValueError:
        raise InvalidInputError("date", raw) from None


def parse_time(text: str) -> time:
    """Parse "4:30 PM", "4pm" or "16:30". Raises InvalidInputError otherwise."""
    raw = (text or "").strip()
    normalized = raw.lower()

    match = _TIME_12H.match(normalized)
    if match:
        hour = int(match.group(1))
        minute = int(match.group(2) or 0)
        if not 1 <= hour <= 12 or minute > 59:
            raise InvalidInputError("time", raw)
        if match.group(3) == "p" and hour != 12:
            hour += 12
        elif match.group(3) == "a" and hour == 12:
            hour = 0
        return time(hour, minute)

    match = _TIME_24H.match(normalized)
    if match:
        hour, minute = int(match.group(1)), int(match.group(2))
        if hour > 23 or minute > 59:
            raise InvalidInputError("time", raw)
        return time(hour, minute)

    raise InvalidInputError("time", raw)


def format_time(value: time) -> str:
    hour = value.hour % 12 or 12
    suffix = "AM" if value.hour < 12 else "PM"
    return f"{hour}:{value.minute:02d} {suffix}"


def combine(date_text: str, time_text: str) -> datetime:
    """Naive start datetime from a YYYY-MM-DD date and a clock time string."""
    return datetime.combine(parse_date(date_text), parse_time(time_text))


def compute_slot(start: datetime, duration_minutes: int) -> tuple[datetime, datetime]:
    return start, start + timedelta(minutes=duration_minutes)


def format_date_for_display(value: date | datetime | str) -> str:
    if isinstance(value, str):
        value = parse_date(value)
    return value.strftime("%d-%m-%Y")


def start_of_day(now: datetime) -> datetime:
    return now.replace(hour=0, minute=0, second=0, microsecond=0)


def start_of_week(now: datetime) -> datetime:
    """Weeks start on Sunday."""
    days_since_sunday = (now.weekday() + 1) % 7
    return start_of_day(now) - timedelta(days=days_since_sunday)


def start_of_month(now: datetime) -> datetime:
    return start_of_day(now).replace(day=1)


def start_of_year(now: datetime) -> datetime:
    return start_of_day(now).replace(month=1, day=1)


def fifteenth_of_previous_month(now: datetime) -> datetime:
    last_of_previous = start_of_month(now) - timedelta(days=1)
    return last_of_previous.replace(day=15)


def today_and_tomorrow(now: datetime) -> tuple[str, str]:
    today = now.date()
    return today.isoformat(), (today + timedelta(days=1)).isoformat()
