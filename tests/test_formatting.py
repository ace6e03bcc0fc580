"""Tests for duration and goal text formatting."""

from datetime import datetime, timedelta, timezone

import pytest

from lastfast.core import formatting as fmt


class TestCompact:
    @pytest.mark.parametrize("h, m, text", [
        (8, 30, "8h 30m"),
        (16, 0, "16h"),
        (0, 45, "45m"),
        (0, 0, "0m"),
    ])
    def test_format_compact(self, h, m, text):
        assert fmt.format_compact(h, m) == text

    def test_interval_truncates_seconds(self):
        assert fmt.format_from_interval(timedelta(hours=8, minutes=30, seconds=59)) == "8h 30m"
        assert fmt.format_from_interval(59) == "0m"

    def test_goal_text(self):
        assert fmt.format_goal_text(990) == "16h 30m"
        assert fmt.format_goal_text(960) == "16h"


class TestNaturalLanguage:
    @pytest.mark.parametrize("h, m, text", [
        (1, 1, "1 hour and 1 minute"),
        (1, 30, "1 hour and 30 minutes"),
        (2, 1, "2 hours and 1 minute"),
        (1, 0, "1 hour"),
        (3, 0, "3 hours"),
        (0, 1, "1 minute"),
        (0, 0, "0 minutes"),
    ])
    def test_format_natural_language(self, h, m, text):
        assert fmt.format_natural_language(h, m) == text

    def test_from_interval(self):
        assert fmt.format_natural_language_from_interval(timedelta(hours=16, minutes=30)) == (
            "16 hours and 30 minutes"
        )

    def test_remaining(self):
        assert fmt.format_remaining_natural_language(90) == "1 hour and 30 minutes"

    def test_goal_description_from_fractional_hours(self):
        assert fmt.format_goal_description_hours(18.25) == "18 hours and 15 minutes"
        assert fmt.format_goal_description_hours(18.5) == "18 hours and 30 minutes"

    def test_goal_description_from_minutes(self):
        assert fmt.format_goal_description(960) == "16 hours"


class TestClock:
    def test_24h_time_utc(self):
        assert fmt.format_24h_time(datetime(2024, 3, 4, 8, 5, tzinfo=timezone.utc)) == "08:05"

    def test_24h_time_in_display_timezone(self):
        instant = datetime(2024, 3, 4, 23, 30, tzinfo=timezone.utc)
        assert fmt.format_24h_time(instant, timezone(timedelta(hours=2))) == "01:30"

    def test_24h_time_naive_is_utc(self):
        assert fmt.format_24h_time(datetime(2024, 3, 4, 14, 0)) == "14:00"

    @pytest.mark.parametrize("seconds, text", [(3723, "1h 2m 3s"), (123, "2m 3s"), (3, "3s")])
    def test_clock_duration(self, seconds, text):
        assert fmt.format_clock_duration(seconds) == text

    def test_clock_duration_short(self):
        assert fmt.format_clock_duration_short(16 * 3600 + 5 * 60) == "16:05"
        assert fmt.format_clock_duration_short(42 * 60 + 10) == "0:42"
