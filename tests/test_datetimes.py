"""Tests for date/time resolution and the business-hours calendar."""

from datetime import date, datetime

import pytest

from factories import NOW
from voicedesk.schemas.voice import BusinessHours
from voicedesk.services.datetimes import (
    business_hours_text,
    extract_time,
    is_business_hours,
    resolve_date,
    resolve_date_time,
)


class TestExtractTime:
    @pytest.mark.parametrize(
        "text,expected",
        [
            ("3 pm", (15, 0)),
            ("at 10:30 AM", (10, 30)),
            ("12 pm", (12, 0)),
            ("12 am", (0, 0)),
            ("4 p.m.", (16, 0)),
            ("15:45", (15, 45)),
        ],
    )
    def test_recognized_times(self, text, expected):
        assert extract_time(text) == expected

    def test_invalid_or_missing_time(self):
        assert extract_time("13 pm") is None
        assert extract_time("sometime soon") is None


class TestResolveDateTime:
    def test_tomorrow_with_twelve_hour_time(self):
        assert resolve_date_time("tomorrow at 3 PM", NOW) == datetime(2026, 10, 15, 15, 0)

    def test_today_with_twenty_four_hour_time(self):
        assert resolve_date_time("today 15:30", NOW) == datetime(2026, 10, 14, 15, 30)

    def test_time_before_relative_day(self):
        assert resolve_date_time("10:30 am tomorrow", NOW) == datetime(2026, 10, 15, 10, 30)

    def test_relative_day_without_time_is_unresolvable(self):
        assert resolve_date_time("tomorrow", NOW) is None

    def test_weekday_with_time(self):
        assert resolve_date_time("Friday at 2 pm", NOW) == datetime(2026, 10, 16, 14, 0)

    def test_month_day(self):
        assert resolve_date_time("December 15th at 10:30 AM", NOW) == datetime(2026, 12, 15, 10, 30)

    def test_slash_date(self):
        assert resolve_date_time("12/15 at 10:30 am", NOW) == datetime(2026, 12, 15, 10, 30)

    def test_month_day_without_year_means_next_occurrence(self):
        assert resolve_date_time("January 5th at 10 AM", NOW) == datetime(2027, 1, 5, 10, 0)
        assert resolve_date_time("1/5 at 10 am", NOW) == datetime(2027, 1, 5, 10, 0)

    def test_explicit_year_is_kept(self):
        assert resolve_date_time("January 5th 2026 at 10 AM", NOW) == datetime(2026, 1, 5, 10, 0)

    def test_earlier_today_is_not_rolled(self):
        assert resolve_date_time("October 14 at 9 am", NOW) == datetime(2026, 10, 14, 9, 0)

    def test_gibberish(self):
        assert resolve_date_time("whenever works for you", NOW) is None
        assert resolve_date_time("", NOW) is None


class TestResolveDate:
    def test_relative_days(self):
        assert resolve_date("today", NOW) == date(2026, 10, 14)
        assert resolve_date("Tomorrow", NOW) == date(2026, 10, 15)

    def test_weekday(self):
        assert resolve_date("friday", NOW) == date(2026, 10, 16)

    def test_past_month_day_rolls_forward(self):
        assert resolve_date("January 5", NOW) == date(2027, 1, 5)

    def test_unresolvable(self):
        assert resolve_date("someday", NOW) is None


class TestBusinessHours:
    @pytest.fixture
    def hours(self):
        return BusinessHours()

    def test_defaults(self, hours):
        assert hours.start == "09:00"
        assert hours.end == "17:00"
        assert hours.days == frozenset({1, 2, 3, 4, 5})

    @pytest.mark.parametrize(
        "moment,expected",
        [
            (datetime(2026, 10, 14, 9, 0), True),
            (datetime(2026, 10, 14, 16, 59), True),
            (datetime(2026, 10, 14, 17, 0), False),
            (datetime(2026, 10, 14, 8, 59), False),
            (datetime(2026, 10, 17, 10, 0), False),  # Saturday
            (datetime(2026, 10, 18, 10, 0), False),  # Sunday
        ],
    )
    def test_window_is_half_open(self, hours, moment, expected):
        assert is_business_hours(moment, hours) is expected

    def test_sunday_is_day_zero(self):
        hours = BusinessHours(start="10:00", end="14:00", days=frozenset({0}))
        assert is_business_hours(datetime(2026, 10, 18, 11, 0), hours)
        assert not is_business_hours(datetime(2026, 10, 19, 11, 0), hours)

    def test_rejects_bad_values(self):
        with pytest.raises(ValueError):
            BusinessHours(start="9am")
        with pytest.raises(ValueError):
            BusinessHours(days=frozenset({7}))

    def test_is_immutable(self, hours):
        with pytest.raises(ValueError):
            hours.start = "08:00"

    def test_text_for_weekday_range(self, hours):
        assert business_hours_text(hours) == "Monday through Friday from 9:00 AM to 5:00 PM"

    def test_text_for_scattered_days(self):
        hours = BusinessHours(start="08:30", end="12:00", days=frozenset({1, 3, 5}))
        assert business_hours_text(hours) == "Monday, Wednesday and Friday from 8:30 AM to 12:00 PM"
