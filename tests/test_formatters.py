from datetime import datetime

import pytest

from formatters import TimeFormatter


class TestFormatTime:
    @pytest.mark.parametrize("ms, expected", [
        (0, "00:00:00"),
        (999, "00:00:00"),
        (61_000, "00:01:01"),
        (3_661_000, "01:01:01"),
        (100 * 3_600_000, "100:00:00"),
    ])
    def test_format(self, ms, expected):
        assert TimeFormatter.format_time(ms) == expected

    def test_negative_is_zero(self):
        assert TimeFormatter.format_time(-5000) == "00:00:00"


class TestMoney:
    def test_currency_groups_thousands(self):
        assert TimeFormatter.currency(1234.5) == "$1,234.50"

    def test_currency_zero(self):
        assert TimeFormatter.currency(0) == "$0.00"

    def test_currency_negative(self):
        assert TimeFormatter.currency(-12) == "-$12.00"

    def test_rate(self):
        assert TimeFormatter.rate(75) == "$75.00/hr"


class TestLabels:
    def test_date_label_has_no_padding(self):
        assert TimeFormatter.date_label(datetime(2026, 3, 5, 8, 0)) == "3/5/2026"

    @pytest.mark.parametrize("dt, expected", [
        (datetime(2026, 3, 5, 14, 5, 9), "2:05:09 PM"),
        (datetime(2026, 3, 5, 0, 0, 0), "12:00:00 AM"),
        (datetime(2026, 3, 5, 12, 30, 1), "12:30:01 PM"),
    ])
    def test_clock_label(self, dt, expected):
        assert TimeFormatter.clock_label(dt) == expected

    def test_short_clock_label(self):
        assert TimeFormatter.short_clock_label(datetime(2026, 3, 5, 14, 5)) == "02:05 PM"

    def test_month_label(self):
        assert TimeFormatter.month_label(datetime(2026, 10, 19)) == "October 2026"

    def test_week_range_across_months(self):
        assert TimeFormatter.week_range(datetime(2026, 9, 27)) == "Sep 27 - Oct 3"
