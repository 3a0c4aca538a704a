"""
Tests for time utilities and time semantics handling.

Verifies UTC normalization, injectable reference times and the look-back
ranges used by period reports.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest

from zentra_app.utils.time import (
    day_key,
    get_reference_time,
    hours_between,
    minutes_between,
    period_start,
    shift_months,
    to_utc,
)


class TestToUtc:
    """Test to_utc normalization."""

    def test_naive_is_taken_as_utc(self):
        assert to_utc(datetime(2024, 3, 4, 9)) == datetime(2024, 3, 4, 9, tzinfo=timezone.utc)

    def test_offset_is_converted(self):
        local = datetime(2024, 3, 4, 1, 0, tzinfo=timezone(timedelta(hours=2)))
        converted = to_utc(local)
        assert converted.hour == 23
        assert day_key(local).day == 3


class TestReferenceTime:
    """Test get_reference_time function."""

    def test_uses_supplied_time(self):
        now = datetime(2024, 3, 4, 12, tzinfo=timezone.utc)
        assert get_reference_time(now) == now

    def test_falls_back_to_wall_clock_time(self):
        with patch('zentra_app.utils.time.datetime') as mock_datetime:
            mock_now = datetime(2023, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
            mock_datetime.now.return_value = mock_now

            assert get_reference_time(None) == mock_now
            mock_datetime.now.assert_called_once()


class TestElapsed:
    """Signed gaps between timestamps."""

    def test_minutes_and_hours(self):
        start = datetime(2024, 3, 4, 9, tzinfo=timezone.utc)
        end = start + timedelta(minutes=90)
        assert minutes_between(start, end) == 90
        assert hours_between(start, end) == 1.5
        assert minutes_between(end, start) == -90


class TestPeriods:
    """Calendar look-back ranges."""

    def test_month_end_is_clamped(self):
        assert shift_months(datetime(2024, 3, 31), -1) == datetime(2024, 2, 29)
        assert shift_months(datetime(2024, 1, 15), -3) == datetime(2023, 10, 15)

    @pytest.mark.parametrize("period,expected", [
        ("WEEK", datetime(2024, 3, 3, 12, tzinfo=timezone.utc)),
        ("MONTH", datetime(2024, 2, 10, 12, tzinfo=timezone.utc)),
        ("QUARTER", datetime(2023, 12, 10, 12, tzinfo=timezone.utc)),
        ("YEAR", datetime(2023, 3, 10, 12, tzinfo=timezone.utc)),
        ("fortnight", datetime(2024, 2, 10, 12, tzinfo=timezone.utc)),
    ])
    def test_period_start(self, period, expected):
        assert period_start(period, datetime(2024, 3, 10, 12, tzinfo=timezone.utc)) == expected
