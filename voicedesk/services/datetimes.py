"""Resolution of spoken date/time phrases and the business-hours calendar."""

import logging
import re
from datetime import date, datetime, time, timedelta

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

from voicedesk.schemas.voice import BusinessHours
from voicedesk.services.speech import format_time_for_speech

logger = logging.getLogger(__name__)

WEEKDAY_NAMES = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")

_RELATIVE_DAYS = {"today": 0, "tomorrow": 1}

_TWELVE_HOUR_RE = re.compile(r"\b(\d{1,2})(?::([0-5]\d))?\s*([ap])\.?m\b\.?", re.IGNORECASE)
_TWENTY_FOUR_HOUR_RE = re.compile(r"\b([01]?\d|2[0-3]):([0-5]\d)\b")


def extract_time(text: str) -> tuple[int, int] | None:
    """Return (hour, minute) for "3 PM", "10:30 am" or "15:30", or None."""
    match = _TWELVE_HOUR_RE.search(text)
    if match:
        hour = int(match.group(1))
        minute = int(match.group(2) or 0)
        if not 1 <= hour <= 12:
            return None
        meridiem = match.group(3).lower()
        if meridiem == "p" and hour != 12:
            hour += 12
        elif meridiem == "a" and hour == 12:
            hour = 0
        return hour, minute

    match = _TWENTY_FOUR_HOUR_RE.search(text)
    if match:
        return int(match.group(1)), int(match.group(2))
    return None


def _relative_day(text: str, now: datetime) -> date | None:
    for word, offset in _RELATIVE_DAYS.items():
        if re.search(rf"\b{word}\b", text):
            return now.date() + timedelta(days=offset)
    return None


def _parse_calendar(phrase: str, now: datetime) -> datetime | None:
    """Parse with dateutil; a month/day without a year means its next occurrence."""
    default = now.replace(hour=0, minute=0, second=0, microsecond=0)
    try:
        parsed = date_parser.parse(phrase, default=default)
        if parsed.date() < now.date():
            # The year came from the default only if a later default changes it.
            rolled = date_parser.parse(phrase, default=default + relativedelta(years=1))
            if rolled.year != parsed.year:
                parsed = rolled
    except (ValueError, OverflowError):
        logger.debug("Could not parse date phrase %r", phrase)
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def resolve_date_time(phrase: str, now: datetime | None = None) -> datetime | None:
    """Resolve a raw date/time phrase to a concrete local datetime.

    "today"/"tomorrow" need an explicit time of day ("tomorrow at 3 PM",
    "today 15:30"); without one the phrase is unresolvable. Any other phrase
    goes through dateutil's calendar parser with midnight of ``now`` as the
    default. Returns None when nothing can be resolved.
    """
    now = now or datetime.now()
    text = phrase.lower().strip()

    day = _relative_day(text, now)
    if day is not None:
        clock = extract_time(text)
        if clock is None:
            return None
        return datetime.combine(day, time(*clock))

    return _parse_calendar(phrase, now)


def resolve_date(phrase: str, now: datetime | None = None) -> date | None:
    """Resolve a day-level phrase such as "today", "friday" or "12/15"."""
    now = now or datetime.now()
    day = _relative_day(phrase.lower().strip(), now)
    if day is not None:
        return day
    parsed = _parse_calendar(phrase, now)
    return parsed.date() if parsed else None


def is_business_hours(moment: datetime, hours: BusinessHours) -> bool:
    """True when ``moment`` falls on a business day within [start, end)."""
    weekday = moment.isoweekday() % 7
    minute_of_day = moment.hour * 60 + moment.minute
    return weekday in hours.days and hours.start_minutes <= minute_of_day < hours.end_minutes


def _describe_days(days: frozenset[int]) -> str:
    ordered = sorted(days)
    if not ordered:
        return "no days"
    if len(ordered) > 2 and ordered == list(range(ordered[0], ordered[-1] + 1)):
        return f"{WEEKDAY_NAMES[ordered[0]]} through {WEEKDAY_NAMES[ordered[-1]]}"
    names = [WEEKDAY_NAMES[day] for day in ordered]
    if len(names) == 1:
        return names[0]
    return f"{', '.join(names[:-1])} and {names[-1]}"


def business_hours_text(hours: BusinessHours) -> str:
    start = time(hours.start_minutes // 60, hours.start_minutes % 60)
    end = time(hours.end_minutes // 60, hours.end_minutes % 60)
    return f"{_describe_days(hours.days)} from {format_time_for_speech(start)} to {format_time_for_speech(end)}"
