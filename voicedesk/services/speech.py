"""Speech-friendly renderings of phone numbers, dates and lists."""

import re
from collections.abc import Iterable
from datetime import date, datetime, time

_NON_DIGIT_RE = re.compile(r"\D")


def format_phone_for_speech(phone: str) -> str:
    """Spell a phone number digit by digit, e.g. "555-123-4567" -> "5 5 5, 1 2 3, 4 5 6 7"."""
    digits = _NON_DIGIT_RE.sub("", phone)
    if len(digits) == 10:
        groups = (digits[:3], digits[3:6], digits[6:])
        return ", ".join(" ".join(group) for group in groups)
    if not digits:
        return phone
    return " ".join(digits)


def format_time_for_speech(moment: datetime | time) -> str:
    hour = moment.hour % 12 or 12
    meridiem = "AM" if moment.hour < 12 else "PM"
    return f"{hour}:{moment.minute:02d} {meridiem}"


def format_day_for_speech(day: date) -> str:
    return f"{day:%A}, {day:%B} {day.day}, {day.year}"


def format_date_for_speech(moment: datetime) -> str:
    return f"{format_day_for_speech(moment)} at {format_time_for_speech(moment)}"


def join_for_speech(items: Iterable[str], limit: int) -> str:
    """Comma-join at most ``limit`` items so the spoken list stays short."""
    return ", ".join(list(items)[:limit])
