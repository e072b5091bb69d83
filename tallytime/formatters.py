"""Time and money formatting utilities used by the timer card, sidebar and exports.

Converts milliseconds to "HH:MM:SS", amounts to "$1,234.50" and datetimes to
the short US-style labels shown in reports. Use TimeFormatter.format_time() for timers.
"""
from datetime import datetime, timedelta


class TimeFormatter:
    """Unified time formatting utilities for the application."""

    @staticmethod
    def format_time(milliseconds: int) -> str:
        """Convert milliseconds to HH:MM:SS. Hours are not capped at 24."""
        total_seconds = max(0, int(milliseconds)) // 1000
        hours = total_seconds // 3600
        minutes = (total_seconds % 3600) // 60
        seconds = total_seconds % 60
        return f"{hours:02d}:{minutes:02d}:{seconds:02d}"

    @staticmethod
    def currency(amount: float) -> str:
        """Format an amount as US dollars, e.g. '$1,234.50'."""
        sign = "-" if amount < 0 else ""
        return f"{sign}${abs(amount):,.2f}"

    @staticmethod
    def rate(amount: float) -> str:
        """Format an hourly rate like '$75.00/hr'."""
        return f"{TimeFormatter.currency(amount)}/hr"

    @staticmethod
    def date_label(dt: datetime) -> str:
        """Format a date like '10/9/2026'."""
        return f"{dt.month}/{dt.day}/{dt.year}"

    @staticmethod
    def clock_label(dt: datetime) -> str:
        """Format a time of day like '2:05:09 PM'."""
        hour = dt.hour % 12 or 12
        suffix = "AM" if dt.hour < 12 else "PM"
        return f"{hour}:{dt.minute:02d}:{dt.second:02d} {suffix}"

    @staticmethod
    def short_clock_label(dt: datetime) -> str:
        """Format a time of day like '02:05 PM'."""
        return dt.strftime("%I:%M %p")

    @staticmethod
    def month_label(dt: datetime) -> str:
        """Format a month like 'October 2026'."""
        return dt.strftime("%B %Y")

    @staticmethod
    def week_range(week_start: datetime) -> str:
        """Format the Sunday-Saturday range starting at week_start, e.g. 'Oct 18 - Oct 24'."""
        week_end = week_start + timedelta(days=6)
        return f"{week_start.strftime('%b')} {week_start.day} - {week_end.strftime('%b')} {week_end.day}"
